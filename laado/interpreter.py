"""Runs a program directly from its AST."""

from __future__ import annotations

import sys
from typing import TextIO

from laado.builder import build_int32_type
from laado.debug import format_expression
from laado.evaluator import (
    ExpressionEvaluator,
    InterpreterError,
    IntrContext,
    Value,
    is_float_type,
    is_int_type,
    is_string_type,
)
from laado.expressions import (
    AstArrayAccess,
    AstBinaryOp,
    AstChar,
    AstExpression,
    AstExprList,
    AstFuncCallExpr,
    AstID,
    AstInt,
    AstString,
)
from laado.statements import (
    AstExprStatement,
    AstFuncCallStmt,
    AstFunction,
    AstIfStmt,
    AstReturnStmt,
    AstStatement,
    AstTree,
    AstVarDec,
    AstWhileStmt,
)
from laado.types import AstBlock, AstDataType, AstPointerType, AstType

_BINARY_KINDS = frozenset(
    {
        AstType.ADD,
        AstType.SUB,
        AstType.MUL,
        AstType.DIV,
        AstType.MOD,
        AstType.AND,
        AstType.OR,
        AstType.XOR,
        AstType.LSH,
        AstType.RSH,
        AstType.EQ,
        AstType.NEQ,
        AstType.GT,
        AstType.LT,
        AstType.GTE,
        AstType.LTE,
    }
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def _arg_items(args: AstExpression | None) -> list[AstExpression]:
    if args is None:
        return []
    if isinstance(args, AstExprList):
        return list(args.items)
    raise InterpreterError("call arguments must be an expression list")


def _at(seq, idx: int, name: str):
    if seq is None or not 0 <= idx < len(seq):
        raise InterpreterError(f"index {idx} out of range for {name!r}")
    return seq[idx]


class AstInterpreter(ExpressionEvaluator):
    """Executes the ``main`` function of a tree, printing to ``output``."""

    def __init__(self, tree: AstTree, output: TextIO | None = None) -> None:
        super().__init__(runner=self.run_function)
        self.tree = tree
        self._output = output

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    def run(self) -> int:
        """Catalog the functions of the tree and run ``main``.

        Returns the value ``main`` leaves as a signed 32-bit integer.
        """
        for stmt in self.tree.block:
            if isinstance(stmt, AstFunction):
                self.function_map[stmt.name] = stmt

        main = self.function_map.get("main")
        if main is None:
            raise InterpreterError("unable to find main function")

        value = self.run_function(main, [])
        if not isinstance(value, int):
            raise InterpreterError("main did not return an integer")
        return _to_int32(value)

    # Functions

    def run_function(self, func: AstFunction, args: list) -> Value:
        """Run ``func`` in a fresh context with already evaluated arguments."""
        ctx = IntrContext(func_type=func.data_type)

        for param, value in zip(func.args, args):
            data_type = param.type
            if isinstance(data_type, AstPointerType):
                base = data_type.base_type
                ctx.type_map[param.name] = base
                if is_int_type(base):
                    ctx.iarray_map[param.name] = list(value)
                elif is_string_type(base):
                    ctx.sarray_map[param.name] = list(value)
            else:
                ctx.type_map[param.name] = data_type
                if is_int_type(data_type):
                    ctx.ivar_map[param.name] = _to_int32(value)
                elif is_string_type(data_type):
                    ctx.svar_map[param.name] = value

        if func.block is not None:
            self.run_block(ctx, func.block)

        func_type = func.data_type
        returns_array = func_type is not None and func_type.type is AstType.PTR
        if is_int_type(func_type):
            if returns_array:
                return list(ctx.iarray_map.get(ctx.pop_string(), []))
            return ctx.istack[-1] if ctx.istack else 0
        if is_string_type(func_type):
            if returns_array:
                return list(ctx.sarray_map.get(ctx.pop_string(), []))
            return ctx.sstack[-1] if ctx.sstack else ""
        return 0

    def call_function(
        self, ctx: IntrContext, name: str, args: AstExpression | None
    ) -> Value:
        """Evaluate the call's arguments in ``ctx`` and run the named function."""
        return super().call_function(ctx, name, args)

    def run_print(self, ctx: IntrContext, args: AstExpression | None) -> None:
        """The builtin print: write every argument, then a newline."""
        parts = [self._print_text(ctx, arg) for arg in _arg_items(args)]
        self.output.write("".join(parts) + "\n")

    def _print_text(self, ctx: IntrContext, arg: AstExpression) -> str:
        if isinstance(arg, (AstString, AstChar)):
            return arg.value
        if isinstance(arg, AstInt):
            return str(arg.value)

        if isinstance(arg, AstID):
            name = arg.value
            data_type = ctx.type_map.get(name)
            if is_int_type(data_type):
                if self.is_int_array(ctx, name):
                    return "[" + ", ".join(str(v) for v in ctx.iarray_map[name]) + "]"
                return str(ctx.ivar_map.get(name, 0))
            if is_string_type(data_type):
                if self.is_string_array(ctx, name):
                    return "[" + ", ".join(f'"{v}"' for v in ctx.sarray_map[name]) + "]"
                return ctx.svar_map.get(name, "")
            return ""

        if isinstance(arg, AstArrayAccess):
            self.run_iexpression(ctx, arg.index)
            idx = _to_int32(ctx.pop_int())
            name = arg.value
            if self.is_int_array(ctx, name):
                return str(_at(ctx.iarray_map[name], idx, name))
            if self.is_string_array(ctx, name):
                return _at(ctx.sarray_map[name], idx, name)
            data_type = ctx.type_map.get(name)
            if data_type is not None and data_type.type is AstType.STRING:
                return _at(ctx.svar_map.get(name, ""), idx, name)
            return ""

        if isinstance(arg, AstFuncCallExpr):
            value = self.call_function(ctx, arg.name, arg.args)
            if arg.name == "length":
                return str(value)
            func = self.function_map.get(arg.name)
            func_type = func.data_type if func is not None else None
            if is_int_type(func_type) or is_string_type(func_type):
                return str(value)
            return ""

        if isinstance(arg, AstBinaryOp) and arg.type in _BINARY_KINDS:
            data_type = self.interpret_type(ctx, arg)
            if data_type is None:
                return "[ERR:<UNK_TYPE>]"
            self.run_expression(ctx, arg, data_type)
            if data_type.type is AstType.INT32:
                return str(ctx.pop_int())
            return ""

        return "[ERR:INVALID_EXPR]: " + format_expression(arg)

    # Statements

    def run_block(self, ctx: IntrContext, block: AstBlock) -> None:
        """Run each statement of ``block`` in order."""
        for stmt in block:
            if isinstance(stmt, AstExprStatement):
                self.run_expression(ctx, stmt.expression, stmt.data_type)
            elif isinstance(stmt, AstVarDec):
                self.run_var_decl(ctx, stmt)
            elif isinstance(stmt, AstReturnStmt):
                if stmt.has_expression():
                    self.run_expression(ctx, stmt.expression, ctx.func_type)
            elif isinstance(stmt, AstFuncCallStmt):
                if stmt.name == "print":
                    self.run_print(ctx, stmt.expression)
                else:
                    self.call_function(ctx, stmt.name, stmt.expression)
            elif isinstance(stmt, AstIfStmt):
                self.run_cond(ctx, stmt)
            elif isinstance(stmt, AstWhileStmt):
                self.run_while(ctx, stmt)

    def run_var_decl(self, ctx: IntrContext, stmt: AstStatement) -> None:
        """Declare a scalar variable or an empty array."""
        if not isinstance(stmt, AstVarDec):
            raise InterpreterError("expected a variable declaration")
        data_type = stmt.data_type
        if isinstance(data_type, AstPointerType):
            base = data_type.base_type
            ctx.type_map[stmt.name] = base
            if is_int_type(base):
                ctx.iarray_map[stmt.name] = []
            elif is_string_type(base):
                ctx.sarray_map[stmt.name] = []
        else:
            ctx.type_map[stmt.name] = data_type
            if is_int_type(data_type):
                ctx.ivar_map[stmt.name] = 0
            elif is_string_type(data_type):
                ctx.svar_map[stmt.name] = ""

    def _condition(self, ctx: IntrContext, expr: AstExpression | None) -> bool:
        self.run_iexpression(ctx, expr)
        return bool(ctx.pop_int())

    def run_cond(self, ctx: IntrContext, stmt: AstStatement) -> None:
        """Run the true or the false block of a conditional."""
        if not isinstance(stmt, AstIfStmt):
            raise InterpreterError("expected a conditional statement")
        block = stmt.true_block if self._condition(ctx, stmt.expression) else stmt.false_block
        if block is not None:
            self.run_block(ctx, block)

    def run_while(self, ctx: IntrContext, stmt: AstStatement) -> None:
        """Run the loop body for as long as the condition holds."""
        if not isinstance(stmt, AstWhileStmt):
            raise InterpreterError("expected a while statement")
        while self._condition(ctx, stmt.expression):
            if stmt.block is not None:
                self.run_block(ctx, stmt.block)

    def interpret_type(
        self, ctx: IntrContext, expr: AstExpression | None
    ) -> AstDataType | None:
        """Guess the general type of an expression, preferring the left operand."""
        if expr is None:
            return None
        if isinstance(expr, AstInt):
            return build_int32_type(False)
        if isinstance(expr, AstID):
            return ctx.type_map.get(expr.value)
        if isinstance(expr, AstBinaryOp) and expr.type in _BINARY_KINDS:
            return self.interpret_type(ctx, expr.lval) or self.interpret_type(ctx, expr.rval)
        return None