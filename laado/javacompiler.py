"""Compiles an AST into a JVM class file."""

from __future__ import annotations

from pathlib import Path

from laado.classbuilder import OBJECT_CLASS, JavaClassBuilder
from laado.classfile import JavaMethod, MethodFlags
from laado.expressions import AstBinaryOp, AstExpression, AstExprList, AstID, AstInt, AstString
from laado.statements import (
    AstExprStatement,
    AstFuncCallStmt,
    AstFunction,
    AstStatement,
    AstTree,
    AstVarDec,
)
from laado.types import AstDataType, AstType, Attr

_MAIN_SIGNATURE = "([Ljava/lang/String;)V"
_STRING_DESCRIPTOR = "Ljava/lang/String;"

_ATTR_FLAGS = {
    Attr.PUBLIC: MethodFlags.PUBLIC,
    Attr.PROTECTED: MethodFlags.PROTECTED,
    Attr.PRIVATE: MethodFlags.PRIVATE,
}

_INT_OPS = {
    AstType.ADD: JavaClassBuilder.create_iadd,
    AstType.SUB: JavaClassBuilder.create_isub,
    AstType.MUL: JavaClassBuilder.create_imul,
    AstType.DIV: JavaClassBuilder.create_idiv,
    AstType.MOD: JavaClassBuilder.create_irem,
    AstType.AND: JavaClassBuilder.create_iand,
    AstType.OR: JavaClassBuilder.create_ior,
    AstType.XOR: JavaClassBuilder.create_ixor,
    AstType.LSH: JavaClassBuilder.create_ishl,
    AstType.RSH: JavaClassBuilder.create_ishr,
}


def get_class_name(path: str) -> str:
    """Return the file name of ``path`` without directory and extension.

    Yields an empty string when the path has no extension.
    """
    start = path.rfind("/") + 1
    end = path.rfind(".")
    if end < 0:
        end = 0
    return path[start:end]


def _is_int32(data_type: AstDataType | None) -> bool:
    return data_type is not None and data_type.type is AstType.INT32


class JavaCompiler:
    """Translates the functions of an AST into methods of one class."""

    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        self.builder = JavaClassBuilder(class_name)
        self.func_map: dict[str, JavaMethod] = {}

        self.a_count = 1
        self.obj_map: dict[str, int] = {}
        self.obj_type_map: dict[str, str] = {}

        self.i_count = 1
        self.int_map: dict[str, int] = {}

        self.builder.import_field("java/lang/System", "java/io/PrintStream", "out")
        self.builder.import_method("java/io/PrintStream", "println", "(Ljava/lang/String;)V")
        self.builder.import_method("java/io/PrintStream", "println", "(I)V")

    def _functions(self, tree: AstTree) -> list[AstFunction]:
        return [stmt for stmt in tree.block if isinstance(stmt, AstFunction)]

    def build(self, tree: AstTree) -> None:
        """Generate the constructor and every function of ``tree``."""
        functions = self._functions(tree)
        constructor = next((f for f in functions if f.name == self.class_name), None)

        construct = self.builder.create_method("<init>", "()V")
        self.builder.create_aload(construct, 0)
        self.builder.create_invokespecial(construct, "<init>", OBJECT_CLASS)

        if constructor is not None:
            for stmt in constructor.block:
                self._build_statement(stmt, construct)
        else:
            self.builder.create_ret_void(construct)

        others = [f for f in functions if f.name != self.class_name]
        for func in others:
            self._build_function(func)
        for func in others:
            method = self.func_map[func.name]
            for stmt in func.block:
                self._build_statement(stmt, method)

    def to_bytes(self) -> bytes:
        return self.builder.to_bytes()

    def write(self, directory: str | Path = ".") -> Path:
        """Write ``<class name>.class`` into ``directory`` and return its path."""
        path = Path(directory) / f"{self.class_name}.class"
        with path.open("wb") as stream:
            self.builder.write(stream)
        return path

    def _build_function(self, func: AstFunction) -> None:
        flags = MethodFlags(0)
        if func.routine:
            flags |= MethodFlags.STATIC
        flags |= _ATTR_FLAGS[func.attr]

        signature = _MAIN_SIGNATURE if func.name == "main" else "()V"
        self.func_map[func.name] = self.builder.create_method(func.name, signature, flags)

    def _build_statement(self, stmt: AstStatement, function: JavaMethod) -> None:
        if isinstance(stmt, AstVarDec):
            self._build_var_dec(stmt, function)
        elif isinstance(stmt, AstExprStatement):
            self._build_var_assign(stmt, function)
        elif isinstance(stmt, AstFuncCallStmt):
            self._build_func_call(stmt, function)
        elif stmt.type is AstType.RETURN and not stmt.has_expression():
            self.builder.create_ret_void(function)

    def _build_var_dec(self, stmt: AstVarDec, function: JavaMethod) -> None:
        kind = stmt.data_type.type if stmt.data_type is not None else AstType.NONE
        if kind is AstType.INT32:
            self.int_map[stmt.name] = self.i_count
            self.i_count += 1
        elif kind is AstType.OBJECT:
            slot = self.a_count
            self.obj_map[stmt.name] = slot
            self.a_count += 1
            self.obj_type_map[stmt.name] = stmt.class_name

            self.builder.create_new(function, stmt.class_name)
            self.builder.create_dup(function)
            self.builder.create_invokespecial(function, "<init>", stmt.class_name)
            self.builder.create_astore(function, slot)

    def _build_var_assign(self, stmt: AstExprStatement, function: JavaMethod) -> None:
        self._build_expr(stmt.expression, function, stmt.data_type)
        if stmt.expression is not None and stmt.expression.type is AstType.ASSIGN:
            return
        if _is_int32(stmt.data_type):
            self.builder.create_istore(function, self.int_map.get(stmt.name, 0))

    def _build_func_call(self, stmt: AstFuncCallStmt, function: JavaMethod) -> None:
        if stmt.name in ("println", "print"):
            self.builder.create_getstatic(function, "out")

        base_class = ""
        if stmt.object_name == "this":
            base_class = "this"
            self.builder.create_aload(function, 0)
        elif stmt.object_name:
            base_class = self.obj_type_map.get(stmt.object_name, "")
            self.builder.create_aload(function, self.obj_map.get(stmt.object_name, 0))

        signature = f"({self._type_for_expr(stmt.expression)})V"
        self._build_expr(stmt.expression, function)
        self.builder.create_invokevirtual(function, stmt.name, base_class, signature)

    def _build_expr(
        self,
        expr: AstExpression | None,
        function: JavaMethod,
        data_type: AstDataType | None = None,
    ) -> None:
        if expr is None:
            return
        if isinstance(expr, AstExprList):
            for item in expr.items:
                self._build_expr(item, function, data_type)
        elif isinstance(expr, AstInt):
            self.builder.create_bipush(function, expr.value)
        elif isinstance(expr, AstString):
            self.builder.create_string(function, expr.value)
        elif isinstance(expr, AstID):
            self.builder.create_iload(function, self.int_map.get(expr.value, 0))
        elif isinstance(expr, AstBinaryOp) and expr.type is AstType.ASSIGN:
            self._build_expr(expr.rval, function, data_type)
            if _is_int32(data_type) and isinstance(expr.lval, AstID):
                self.builder.create_istore(function, self.int_map.get(expr.lval.value, 0))
        elif isinstance(expr, AstBinaryOp) and expr.type in _INT_OPS:
            self._build_expr(expr.lval, function, data_type)
            self._build_expr(expr.rval, function, data_type)
            _INT_OPS[expr.type](self.builder, function)

    def _type_for_expr(self, expr: AstExpression | None) -> str:
        if expr is None:
            return ""
        if isinstance(expr, AstInt):
            return "I"
        if isinstance(expr, AstString):
            return _STRING_DESCRIPTOR
        if isinstance(expr, AstID):
            return "I" if expr.value in self.int_map else "V"
        if isinstance(expr, AstExprList):
            return self._type_for_expr(expr.items[0]) if expr.items else ""
        return "V"