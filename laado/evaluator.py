"""Evaluation of expressions on the interpreter's per-function stacks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Union

from laado.expressions import (
    AstArrayAccess,
    AstBinaryOp,
    AstChar,
    AstExpression,
    AstExprList,
    AstFloat,
    AstFuncCallExpr,
    AstID,
    AstInt,
    AstString,
)
from laado.statements import AstFunction
from laado.types import AstDataType, AstPointerType, AstType

_UINT64_MASK = (1 << 64) - 1

Value = Union[int, float, str, list]
Runner = Callable[[AstFunction, list], Value]

_ALLOCATORS = ("malloc", "gc_alloc")

_INT_KINDS = {AstType.BOOL, AstType.INT8, AstType.INT16, AstType.INT32, AstType.INT64}
_FLOAT_KINDS = {AstType.FLOAT32, AstType.FLOAT64}
_STRING_KINDS = {AstType.CHAR, AstType.STRING}


def _div(lval: int, rval: int) -> int:
    if rval == 0:
        raise InterpreterError("integer division by zero")
    return lval // rval


def _mod(lval: int, rval: int) -> int:
    if rval == 0:
        raise InterpreterError("integer modulo by zero")
    return lval % rval


_INT_OPS: dict[AstType, Callable[[int, int], int]] = {
    AstType.ADD: lambda a, b: a + b,
    AstType.SUB: lambda a, b: a - b,
    AstType.MUL: lambda a, b: a * b,
    AstType.DIV: _div,
    AstType.MOD: _mod,
    AstType.AND: lambda a, b: a & b,
    AstType.OR: lambda a, b: a | b,
    AstType.XOR: lambda a, b: a ^ b,
    AstType.LSH: lambda a, b: a << b if b < 64 else 0,
    AstType.RSH: lambda a, b: a >> b,
    AstType.EQ: lambda a, b: int(a == b),
    AstType.NEQ: lambda a, b: int(a != b),
    AstType.GT: lambda a, b: int(a > b),
    AstType.LT: lambda a, b: int(a < b),
    AstType.GTE: lambda a, b: int(a >= b),
    AstType.LTE: lambda a, b: int(a <= b),
}

_FLOAT_ARITH: dict[AstType, Callable[[float, float], float]] = {
    AstType.ADD: lambda a, b: a + b,
    AstType.SUB: lambda a, b: a - b,
    AstType.MUL: lambda a, b: a * b,
}

_FLOAT_CMP: dict[AstType, Callable[[float, float], bool]] = {
    AstType.EQ: lambda a, b: a == b,
    AstType.NEQ: lambda a, b: a != b,
    AstType.GT: lambda a, b: a > b,
    AstType.LT: lambda a, b: a < b,
    AstType.GTE: lambda a, b: a >= b,
    AstType.LTE: lambda a, b: a <= b,
}


class InterpreterError(Exception):
    """Raised when a program cannot be evaluated."""


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def is_int_type(data_type: AstDataType | None) -> bool:
    """True for integer and boolean types, and pointers to them."""
    if data_type is None:
        return False
    if isinstance(data_type, AstPointerType):
        return is_int_type(data_type.base_type)
    return data_type.type in _INT_KINDS


def is_float_type(data_type: AstDataType | None) -> bool:
    """True for floating-point types, and pointers to them."""
    if data_type is None:
        return False
    if isinstance(data_type, AstPointerType):
        return is_float_type(data_type.base_type)
    return data_type.type in _FLOAT_KINDS


def is_string_type(data_type: AstDataType | None) -> bool:
    """True for character and string types, and pointers to them."""
    if data_type is None:
        return False
    if isinstance(data_type, AstPointerType):
        return is_string_type(data_type.base_type)
    return data_type.type in _STRING_KINDS


@dataclass
class IntrContext:
    """Variables, arrays and evaluation stacks of one running function.

    Integer variables hold signed 32-bit values; integer stack entries and
    array elements are unsigned 64-bit.
    """

    type_map: dict[str, AstDataType | None] = field(default_factory=dict)
    func_type: AstDataType | None = None

    ivar_map: dict[str, int] = field(default_factory=dict)
    svar_map: dict[str, str] = field(default_factory=dict)

    iarray_map: dict[str, list[int]] = field(default_factory=dict)
    sarray_map: dict[str, list[str]] = field(default_factory=dict)

    istack: list[int] = field(default_factory=list)
    fstack: list[float] = field(default_factory=list)
    sstack: list[str] = field(default_factory=list)

    istack_array: list[int] = field(default_factory=list)
    sstack_array: list[str] = field(default_factory=list)

    def pop_int(self) -> int:
        if not self.istack:
            raise InterpreterError("integer stack is empty")
        return self.istack.pop()

    def pop_float(self) -> float:
        if not self.fstack:
            raise InterpreterError("float stack is empty")
        return self.fstack.pop()

    def pop_string(self) -> str:
        if not self.sstack:
            raise InterpreterError("string stack is empty")
        return self.sstack.pop()


def _items(args: AstExpression | None) -> list[AstExpression]:
    if args is None:
        return []
    if isinstance(args, AstExprList):
        return args.items
    raise InterpreterError("call arguments must be an expression list")


def _element(seq: Any, idx: int, name: str) -> Any:
    if seq is None or not 0 <= idx < len(seq):
        raise InterpreterError(f"index {idx} out of range for {name!r}")
    return seq[idx]


class ExpressionEvaluator:
    """Evaluates integer, float and string expressions within a context.

    ``function_map`` holds the callable user functions; ``runner`` executes
    one of them with already evaluated arguments.
    """

    def __init__(
        self,
        function_map: dict[str, AstFunction] | None = None,
        runner: Runner | None = None,
    ) -> None:
        self.function_map: dict[str, AstFunction] = dict(function_map or {})
        self._runner = runner

    # Array helpers

    def is_int_array(self, ctx: IntrContext, name: str) -> bool:
        return name in ctx.iarray_map

    def is_float_array(self, ctx: IntrContext, name: str) -> bool:
        """Float arrays are never stored, so this is always false."""
        return False

    def is_string_array(self, ctx: IntrContext, name: str) -> bool:
        return name in ctx.sarray_map

    # Function calls

    def _length(self, ctx: IntrContext, args: AstExpression | None) -> int | None:
        items = _items(args)
        if not items:
            return None
        arg = items[0]
        if isinstance(arg, AstID):
            name = arg.value
            if self.is_int_array(ctx, name):
                return len(ctx.iarray_map[name])
            if self.is_string_array(ctx, name):
                return len(ctx.sarray_map[name])
            data_type = ctx.type_map.get(name)
            if data_type is not None and data_type.type is AstType.STRING:
                return len(ctx.svar_map.get(name, ""))
        elif isinstance(arg, AstString):
            return len(arg.value)
        return None

    def call_function(
        self, ctx: IntrContext, name: str, args: AstExpression | None
    ) -> Value:
        """Evaluate the arguments of a call in ``ctx`` and run the function.

        The builtin ``length`` gives the size of an array or string.
        """
        if name == "length":
            length = self._length(ctx, args)
            if length is not None:
                return length

        func = self.function_map.get(name)
        if func is None:
            raise InterpreterError(f"unknown function {name!r}")

        values: list[Value] = []
        for arg, param in zip(_items(args), func.args):
            data_type = param.type
            if isinstance(data_type, AstPointerType):
                if not isinstance(arg, AstID):
                    raise InterpreterError("array arguments must be variables")
                base = data_type.base_type
                if is_int_type(base):
                    values.append(list(ctx.iarray_map.get(arg.value, [])))
                elif is_string_type(base):
                    values.append(list(ctx.sarray_map.get(arg.value, [])))
            elif is_int_type(data_type):
                self.run_iexpression(ctx, arg)
                values.append(ctx.pop_int())
            elif is_string_type(data_type):
                self.run_sexpression(ctx, arg)
                values.append(ctx.pop_string())

        if self._runner is None:
            raise InterpreterError("no function runner is available")
        return self._runner(func, values)

    def _returns_array(self, name: str) -> bool:
        func = self.function_map.get(name)
        return (
            func is not None
            and func.data_type is not None
            and func.data_type.type is AstType.PTR
        )

    def _allocation_length(self, ctx: IntrContext, call: AstFuncCallExpr) -> int:
        items = _items(call.args)
        if not items or not isinstance(items[0], AstBinaryOp):
            raise InterpreterError("allocation expects a size product")
        self.run_iexpression(ctx, items[0].rval)
        return max(_to_int32(ctx.pop_int()), 0)

    # Evaluation

    def run_expression(
        self,
        ctx: IntrContext,
        expr: AstExpression,
        data_type: AstDataType | None,
    ) -> None:
        """Evaluate ``expr`` on the stack that matches ``data_type``."""
        if is_int_type(data_type):
            self.run_iexpression(ctx, expr)
        elif is_float_type(data_type):
            self.run_fexpression(ctx, expr)
        elif is_string_type(data_type):
            self.run_sexpression(ctx, expr)

    def run_iexpression(self, ctx: IntrContext, expr: AstExpression | None) -> None:
        """Evaluate an integer expression, leaving its value on ``istack``."""
        if expr is None:
            return
        kind = expr.type

        if isinstance(expr, AstInt):
            ctx.istack.append(expr.value)

        elif isinstance(expr, AstID):
            if self.is_int_array(ctx, expr.value):
                ctx.sstack.append(expr.value)
            else:
                ctx.istack.append(ctx.ivar_map.get(expr.value, 0) & _UINT64_MASK)

        elif isinstance(expr, AstArrayAccess):
            self.run_iexpression(ctx, expr.index)
            idx = _to_int32(ctx.pop_int())
            array = ctx.iarray_map.get(expr.value)
            ctx.istack.append(_element(array, idx, expr.value))

        elif isinstance(expr, AstFuncCallExpr):
            if expr.name in _ALLOCATORS:
                ctx.istack_array = [0] * self._allocation_length(ctx, expr)
            elif self._returns_array(expr.name):
                result = self.call_function(ctx, expr.name, expr.args)
                if not isinstance(result, list):
                    raise InterpreterError(f"{expr.name!r} did not return an array")
                ctx.istack_array = list(result)
            else:
                result = self.call_function(ctx, expr.name, expr.args)
                if not isinstance(result, int):
                    raise InterpreterError(f"{expr.name!r} did not return an integer")
                ctx.istack.append(result & _UINT64_MASK)

        elif isinstance(expr, AstBinaryOp) and kind is AstType.ASSIGN:
            self.run_iexpression(ctx, expr.rval)
            target = expr.lval
            if isinstance(target, AstID):
                if self.is_int_array(ctx, target.value):
                    ctx.iarray_map[target.value] = ctx.istack_array
                    ctx.istack_array = []
                else:
                    ctx.ivar_map[target.value] = _to_int32(ctx.pop_int())
            elif isinstance(target, AstArrayAccess):
                value = _to_int32(ctx.pop_int())
                self.run_iexpression(ctx, target.index)
                idx = _to_int32(ctx.pop_int())
                array = ctx.iarray_map.get(target.value)
                _element(array, idx, target.value)
                array[idx] = value & _UINT64_MASK

        elif isinstance(expr, AstBinaryOp) and kind in _INT_OPS:
            self.run_iexpression(ctx, expr.lval)
            self.run_iexpression(ctx, expr.rval)
            rval = ctx.pop_int()
            lval = ctx.pop_int()
            ctx.istack.append(_INT_OPS[kind](lval, rval) & _UINT64_MASK)

    def run_fexpression(self, ctx: IntrContext, expr: AstExpression | None) -> None:
        """Evaluate a floating-point expression.

        Arithmetic leaves its value on ``fstack``; comparisons leave 1 or 0
        on ``istack``.
        """
        if expr is None:
            return
        if isinstance(expr, AstFloat):
            ctx.fstack.append(expr.value)
        elif isinstance(expr, AstInt):
            ctx.fstack.append(float(expr.value))
        elif isinstance(expr, AstBinaryOp) and (
            expr.type in _FLOAT_ARITH or expr.type in _FLOAT_CMP or expr.type is AstType.DIV
        ):
            self.run_fexpression(ctx, expr.lval)
            self.run_fexpression(ctx, expr.rval)
            rval = ctx.pop_float()
            lval = ctx.pop_float()
            if expr.type is AstType.DIV:
                if rval == 0:
                    raise InterpreterError("float division by zero")
                ctx.fstack.append(lval / rval)
            elif expr.type in _FLOAT_ARITH:
                ctx.fstack.append(_FLOAT_ARITH[expr.type](lval, rval))
            else:
                ctx.istack.append(int(_FLOAT_CMP[expr.type](lval, rval)))
        else:
            raise InterpreterError(f"unsupported float expression {expr.type.name}")

    def run_sexpression(self, ctx: IntrContext, expr: AstExpression | None) -> None:
        """Evaluate a string expression, leaving its value on ``sstack``."""
        if expr is None:
            return

        if isinstance(expr, AstInt):
            ctx.sstack.append(str(expr.value))

        elif isinstance(expr, AstChar):
            ctx.sstack.append(expr.value)

        elif isinstance(expr, AstString):
            ctx.sstack.append(expr.value)

        elif isinstance(expr, AstID):
            if self.is_string_array(ctx, expr.value):
                ctx.sstack.append(expr.value)
            else:
                ctx.sstack.append(ctx.svar_map.get(expr.value, ""))

        elif isinstance(expr, AstArrayAccess):
            self.run_iexpression(ctx, expr.index)
            idx = _to_int32(ctx.pop_int())
            name = expr.value
            if self.is_string_array(ctx, name):
                ctx.sstack.append(_element(ctx.sarray_map[name], idx, name))
            else:
                data_type = ctx.type_map.get(name)
                if data_type is None or data_type.type is not AstType.STRING:
                    raise InterpreterError(f"{name!r} cannot be indexed as a string")
                ctx.sstack.append(_element(ctx.svar_map.get(name, ""), idx, name))

        elif isinstance(expr, AstFuncCallExpr):
            if expr.name in _ALLOCATORS:
                ctx.sstack_array = [""] * self._allocation_length(ctx, expr)
            elif self._returns_array(expr.name):
                result = self.call_function(ctx, expr.name, expr.args)
                if not isinstance(result, list):
                    raise InterpreterError(f"{expr.name!r} did not return an array")
                ctx.sstack_array = list(result)
            else:
                result = self.call_function(ctx, expr.name, expr.args)
                if not isinstance(result, str):
                    raise InterpreterError(f"{expr.name!r} did not return a string")
                ctx.sstack.append(result)

        elif isinstance(expr, AstBinaryOp) and expr.type is AstType.ASSIGN:
            self.run_sexpression(ctx, expr.rval)
            target = expr.lval
            if isinstance(target, AstID):
                if self.is_string_array(ctx, target.value):
                    ctx.sarray_map[target.value] = ctx.sstack_array
                    ctx.sstack_array = []
                else:
                    ctx.svar_map[target.value] = ctx.pop_string()
            elif isinstance(target, AstArrayAccess):
                value = ctx.pop_string()
                self.run_iexpression(ctx, target.index)
                idx = _to_int32(ctx.pop_int())
                array = ctx.sarray_map.get(target.value)
                _element(array, idx, target.value)
                array[idx] = value