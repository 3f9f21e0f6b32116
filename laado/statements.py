"""Statement nodes of the AST and the tree that holds a whole file."""

from __future__ import annotations

from laado.expressions import AstExpression, AstID, AstInt
from laado.types import (
    AstBlock,
    AstClass,
    AstDataType,
    AstNode,
    AstStruct,
    AstType,
    Attr,
    Var,
)


class AstStatement(AstNode):
    """Base of all statements; most carry an optional expression."""

    def __init__(
        self,
        node_type: AstType = AstType.NONE,
        expression: AstExpression | None = None,
    ) -> None:
        super().__init__(node_type)
        self.expression = expression

    def has_expression(self) -> bool:
        return self.expression is not None


class AstExternFunction(AstStatement):
    """A declaration of a function defined elsewhere."""

    def __init__(self, name: str, data_type: AstDataType | None = None) -> None:
        super().__init__(AstType.EXTERN_FUNC)
        self.name = name
        self.args: list[Var] = []
        self.data_type = data_type
        self.varargs = False

    def add_argument(self, arg: Var) -> None:
        self.args.append(arg)


class AstFunction(AstStatement):
    """A function definition with arguments, a return type and a body."""

    def __init__(self, name: str, data_type: AstDataType | None = None) -> None:
        super().__init__(AstType.FUNC)
        self.name = name
        self.args: list[Var] = []
        self.block = AstBlock()
        self.data_type = data_type
        self.dt_name = ""
        self.attr = Attr.PUBLIC
        self.routine = False

    def add_statement(self, statement: AstStatement) -> None:
        self.block.add_statement(statement)


class AstBlockStmt(AstStatement):
    """A named block statement carrying a list of clauses."""

    def __init__(self, name: str = "") -> None:
        super().__init__(AstType.BLOCK_STMT)
        self.name = name
        self.clauses: list[str] = []
        self.block = AstBlock()


class AstExprStatement(AstStatement):
    """An expression evaluated for its effect, with an optional data type."""

    def __init__(
        self,
        expression: AstExpression | None = None,
        data_type: AstDataType | None = None,
        name: str = "",
    ) -> None:
        super().__init__(AstType.EXPR_STMT, expression)
        self.data_type = data_type
        self.name = name


class AstFuncCallStmt(AstStatement):
    """A function call standing on its own; arguments live in ``expression``."""

    def __init__(
        self,
        name: str,
        expression: AstExpression | None = None,
        object_name: str = "",
    ) -> None:
        super().__init__(AstType.FUNC_CALL_STMT, expression)
        self.name = name
        self.object_name = object_name


class AstReturnStmt(AstStatement):
    """A return, with or without a value."""

    def __init__(self, expression: AstExpression | None = None) -> None:
        super().__init__(AstType.RETURN, expression)


class AstVarDec(AstStatement):
    """A variable declaration."""

    def __init__(self, name: str, data_type: AstDataType | None) -> None:
        super().__init__(AstType.VAR_DEC)
        self.name = name
        self.data_type = data_type
        self.class_name = ""


class AstStructDec(AstStatement):
    """A declaration of a structure variable."""

    def __init__(self, var_name: str, struct_name: str, no_init: bool = False) -> None:
        super().__init__(AstType.STRUCT_DEC)
        self.var_name = var_name
        self.struct_name = struct_name
        self.no_init = no_init


class AstIfStmt(AstStatement):
    """A conditional with a true and a false block."""

    def __init__(
        self,
        expression: AstExpression | None = None,
        true_block: AstBlock | None = None,
        false_block: AstBlock | None = None,
    ) -> None:
        super().__init__(AstType.IF, expression)
        self.true_block = true_block
        self.false_block = false_block


class AstWhileStmt(AstStatement):
    """A loop that runs while its condition holds."""

    def __init__(
        self,
        expression: AstExpression | None = None,
        block: AstBlock | None = None,
    ) -> None:
        super().__init__(AstType.WHILE, expression)
        self.block = block


class AstRepeatStmt(AstStatement):
    """An infinite loop."""

    def __init__(self, block: AstBlock | None = None) -> None:
        super().__init__(AstType.REPEAT)
        self.block = block


class AstForStmt(AstStatement):
    """A counted loop over a range with a step."""

    def __init__(self) -> None:
        super().__init__(AstType.FOR)
        self.index: AstID | None = None
        self.start: AstExpression | None = None
        self.end: AstExpression | None = None
        self.step: AstExpression | None = AstInt(1)
        self.data_type: AstDataType | None = None
        self.block: AstBlock | None = AstBlock()


class AstForAllStmt(AstStatement):
    """A loop over every element of an array."""

    def __init__(self) -> None:
        super().__init__(AstType.FOR_ALL)
        self.index: AstID | None = None
        self.array: AstID | None = None
        self.block: AstBlock | None = None
        self.data_type: AstDataType | None = None


class AstBreak(AstStatement):
    def __init__(self) -> None:
        super().__init__(AstType.BREAK)


class AstContinue(AstStatement):
    def __init__(self) -> None:
        super().__init__(AstType.CONTINUE)


class AstTree:
    """A whole source file: global statements, structures and classes."""

    def __init__(self, file: str) -> None:
        self.file = file
        self.block = AstBlock()
        self.structs: list[AstStruct] = []
        self.classes: list[AstClass] = []

    def has_struct(self, name: str) -> bool:
        return any(s.name == name for s in self.structs)

    def add_global_statement(self, stmt: AstStatement) -> None:
        self.block.add_statement(stmt)

    def add_struct(self, struct: AstStruct) -> None:
        self.structs.append(struct)

    def add_class(self, cls: AstClass) -> None:
        self.classes.append(cls)