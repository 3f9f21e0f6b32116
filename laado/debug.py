"""Human-readable dumps of the AST."""

from __future__ import annotations

from laado.expressions import (
    AstArrayAccess,
    AstBinaryOp,
    AstChar,
    AstExpression,
    AstExprList,
    AstFloat,
    AstFuncCallExpr,
    AstFuncRef,
    AstID,
    AstInt,
    AstNegOp,
    AstPtrTo,
    AstRef,
    AstSizeof,
    AstString,
    AstStructAccess,
)
from laado.statements import (
    AstBlockStmt,
    AstBreak,
    AstContinue,
    AstExprStatement,
    AstExternFunction,
    AstForAllStmt,
    AstForStmt,
    AstFuncCallStmt,
    AstFunction,
    AstIfStmt,
    AstRepeatStmt,
    AstReturnStmt,
    AstStatement,
    AstStructDec,
    AstTree,
    AstVarDec,
    AstWhileStmt,
)
from laado.types import (
    AstBlock,
    AstClass,
    AstDataType,
    AstObjectType,
    AstPointerType,
    AstStruct,
    AstStructType,
    AstType,
)

_TYPE_NAMES = {
    AstType.VOID: "void",
    AstType.BOOL: "bool",
    AstType.CHAR: "char",
    AstType.INT8: "int8",
    AstType.INT16: "int16",
    AstType.INT32: "int32",
    AstType.INT64: "int64",
    AstType.FLOAT32: "float32",
    AstType.FLOAT64: "float64",
    AstType.STRING: "string",
}

_BINARY_SYMBOLS = {
    AstType.ASSIGN: ":=",
    AstType.ADD: "+",
    AstType.SUB: "-",
    AstType.MUL: "*",
    AstType.DIV: "/",
    AstType.MOD: "%",
    AstType.AND: "AND",
    AstType.OR: "OR",
    AstType.XOR: "XOR",
    AstType.LSH: "<<",
    AstType.RSH: ">>",
    AstType.EQ: "==",
    AstType.NEQ: "!=",
    AstType.GT: ">",
    AstType.LT: "<",
    AstType.GTE: ">=",
    AstType.LTE: "<=",
    AstType.LOGICAL_AND: "&&",
    AstType.LOGICAL_OR: "||",
}


def format_data_type(data_type: AstDataType | None) -> str:
    """Render a data type, e.g. ``unsigned int8`` or ``*struct(Point)``."""
    if data_type is None:
        return ""
    if isinstance(data_type, AstPointerType):
        return "*" + format_data_type(data_type.base_type)
    if isinstance(data_type, AstStructType):
        return f"struct({data_type.name})"
    if isinstance(data_type, AstObjectType):
        return f"object({data_type.name})"
    prefix = "unsigned " if data_type.is_unsigned else ""
    return prefix + _TYPE_NAMES.get(data_type.type, "")


def format_expression(expr: AstExpression | None) -> str:
    """Render an expression on a single line."""
    if expr is None:
        return ""
    if isinstance(expr, AstBinaryOp):
        symbol = _BINARY_SYMBOLS.get(expr.type)
        if symbol is None:
            return ""
        left = format_expression(expr.lval)
        right = format_expression(expr.rval)
        return f"({left}) {symbol} ({right})"
    if isinstance(expr, AstNegOp):
        return f"(-{format_expression(expr.value)})"
    if isinstance(expr, AstExprList):
        return "{" + "".join(f"{format_expression(item)}, " for item in expr.items) + "}"
    if isinstance(expr, AstChar):
        return f"CHAR({expr.value})"
    if isinstance(expr, AstInt):
        return f"I{expr.size}({expr.value})"
    if isinstance(expr, AstFloat):
        return f"{expr.value:g}"
    if isinstance(expr, AstString):
        return f'"{expr.value}"'
    if isinstance(expr, AstID):
        return expr.value
    if isinstance(expr, AstFuncRef):
        return f"FUNCREF({expr.value})"
    if isinstance(expr, AstPtrTo):
        return f"PTR({expr.value})"
    if isinstance(expr, AstRef):
        return f"REF({expr.value})"
    if isinstance(expr, AstArrayAccess):
        return f"{expr.value}[{format_expression(expr.index)}]"
    if isinstance(expr, AstStructAccess):
        text = f"{expr.var}.{expr.member}"
        if expr.access_expression is not None:
            text += f"[{format_expression(expr.access_expression)}]"
        return text
    if isinstance(expr, AstFuncCallExpr):
        return f"{expr.name}({format_expression(expr.args)})"
    if isinstance(expr, AstSizeof):
        return f"SIZEOF({format_expression(expr.value)})"
    return ""


def _format_nested(block: AstBlock | None, indent: int) -> str:
    return "" if block is None else format_block(block, indent)


def _format_function(func: AstFunction) -> str:
    args = "".join(f"{var.name}:{format_data_type(var.type)}, " for var in func.args)
    header = f"\nFUNC {func.name}({args}) -> {format_data_type(func.data_type)}\n"
    return header + _format_nested(func.block, 4)


def _format_extern(func: AstExternFunction) -> str:
    args = "".join(f"{format_data_type(var.type)}, " for var in func.args)
    return f"EXTERN FUNC {func.name}({args})  -> {format_data_type(func.data_type)}\n"


def format_statement(stmt: AstStatement, indent: int = 0) -> str:
    """Render one statement; nested blocks are indented from ``indent``."""
    inner = indent + 4
    if isinstance(stmt, AstFunction):
        return _format_function(stmt)
    if isinstance(stmt, AstExternFunction):
        return _format_extern(stmt)
    if isinstance(stmt, AstBlockStmt):
        clauses = "".join(f"{clause} " for clause in stmt.clauses)
        return f"BLOCK {stmt.name} [{clauses}]\n" + _format_nested(stmt.block, inner)
    if isinstance(stmt, AstIfStmt):
        return (
            f"IF {format_expression(stmt.expression)} THEN\n"
            + _format_nested(stmt.true_block, inner)
            + _format_nested(stmt.false_block, inner)
        )
    if isinstance(stmt, AstWhileStmt):
        return f"WHILE {format_expression(stmt.expression)} DO\n" + _format_nested(
            stmt.block, inner
        )
    if isinstance(stmt, AstRepeatStmt):
        return "    REPEAT\n" + _format_nested(stmt.block, inner)
    if isinstance(stmt, AstForStmt):
        header = (
            f"    FOR {format_expression(stmt.index)}"
            f" IN {format_expression(stmt.start)}"
            f" .. {format_expression(stmt.end)}"
            f" STEP {format_expression(stmt.step)}\n"
        )
        return header + _format_nested(stmt.block, inner)
    if isinstance(stmt, AstForAllStmt):
        header = (
            f"    FORALL {format_expression(stmt.index)}"
            f" IN {format_expression(stmt.array)}\n"
        )
        return header + _format_nested(stmt.block, inner)
    if isinstance(stmt, AstExprStatement):
        text = "EXPR "
        if stmt.name:
            text += f"N:{stmt.name} "
        text += format_data_type(stmt.data_type)
        return f"{text} {format_expression(stmt.expression)}\n"
    if isinstance(stmt, AstFuncCallStmt):
        target = f"{stmt.object_name}." if stmt.object_name else ""
        args = format_expression(stmt.expression) if stmt.has_expression() else "()"
        return f"FC {target}{stmt.name}{args}\n"
    if isinstance(stmt, AstReturnStmt):
        return f"RETURN {format_expression(stmt.expression)}\n"
    if isinstance(stmt, AstVarDec):
        return f"VAR_DEC {stmt.name} : {format_data_type(stmt.data_type)}\n"
    if isinstance(stmt, AstStructDec):
        suffix = " NOINIT" if stmt.no_init else ""
        return f"STRUCT {stmt.var_name} : {stmt.struct_name}{suffix}\n"
    if isinstance(stmt, AstBreak):
        return "BREAK\n"
    if isinstance(stmt, AstContinue):
        return "CONTINUE\n"
    return ""


def format_block(block: AstBlock, indent: int = 4) -> str:
    """Render a block's symbol table followed by its statements."""
    pad = " " * indent
    parts = [f"{pad}[\n"]
    for name, data_type in sorted(block.symbol_table.items()):
        type_text = format_data_type(data_type) if data_type is not None else "<NULL TYPE>"
        parts.append(f"{' ' * (indent + 2)}SYM: {name} : {type_text}\n")
    parts.append(f"{pad}]\n{pad}{{\n")
    for stmt in block:
        parts.append(pad + format_statement(stmt, indent))
    parts.append(f"{pad}}}\n")
    return "".join(parts)


def format_struct(struct: AstStruct) -> str:
    """Render a structure definition with each member's default."""
    parts = [f"STRUCT {struct.name}\n"]
    for var in struct.items:
        default = struct.default_expressions.get(var.name)
        default_text = format_expression(default) if default is not None else "NULL"
        parts.append(f"{var.name} : {format_data_type(var.type)} {default_text}\n")
    parts.append("\n")
    return "".join(parts)


def format_class(cls: AstClass) -> str:
    """Render a class and its functions."""
    body = "".join("  " + format_statement(func) for func in cls.functions)
    return f"CLASS {cls.name}\n{body}\n"


def format_tree(tree: AstTree) -> str:
    """Render a whole file: structures, classes, then global statements."""
    parts = [f"FILE: {tree.file}\n\n"]
    parts.extend(format_struct(s) for s in tree.structs)
    parts.extend(format_class(c) for c in tree.classes)
    parts.append(format_block(tree.block))
    return "".join(parts)


def print_tree(tree: AstTree) -> None:
    """Write the dump of ``tree`` to standard output."""
    print(format_tree(tree), end="")