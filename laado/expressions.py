"""Expression nodes of the AST."""

from __future__ import annotations

from typing import Iterable

from laado.types import AstNode, AstType

_UINT64_MASK = (1 << 64) - 1


class AstExpression(AstNode):
    """Base of all expressions."""

    def __init__(self, node_type: AstType = AstType.NONE) -> None:
        super().__init__(node_type)


class AstExprList(AstExpression):
    """An ordered list of expressions, such as call arguments."""

    def __init__(self, items: Iterable[AstExpression] = ()) -> None:
        super().__init__(AstType.EXPR_LIST)
        self.items: list[AstExpression] = list(items)

    def add_expression(self, expr: AstExpression) -> None:
        self.items.append(expr)


class AstOp(AstExpression):
    """Base of operators."""

    node_type = AstType.NONE
    is_binary = True

    def __init__(self) -> None:
        super().__init__(self.node_type)


class AstUnaryOp(AstOp):
    """Base of operators taking one operand."""

    is_binary = False

    def __init__(self, value: AstExpression | None = None) -> None:
        super().__init__()
        self.value = value


class AstNegOp(AstUnaryOp):
    node_type = AstType.NEG


class AstBinaryOp(AstOp):
    """Base of operators taking a left and a right operand."""

    precedence = 0

    def __init__(
        self,
        lval: AstExpression | None = None,
        rval: AstExpression | None = None,
    ) -> None:
        super().__init__()
        self.lval = lval
        self.rval = rval


class AstAssignOp(AstBinaryOp):
    node_type = AstType.ASSIGN
    precedence = 16


class AstAddOp(AstBinaryOp):
    node_type = AstType.ADD
    precedence = 4


class AstSubOp(AstBinaryOp):
    node_type = AstType.SUB
    precedence = 4


class AstMulOp(AstBinaryOp):
    node_type = AstType.MUL
    precedence = 3


class AstDivOp(AstBinaryOp):
    node_type = AstType.DIV
    precedence = 3


class AstModOp(AstBinaryOp):
    node_type = AstType.MOD
    precedence = 3


class AstAndOp(AstBinaryOp):
    node_type = AstType.AND
    precedence = 8


class AstOrOp(AstBinaryOp):
    node_type = AstType.OR
    precedence = 10


class AstXorOp(AstBinaryOp):
    node_type = AstType.XOR
    precedence = 9


class AstLshOp(AstBinaryOp):
    node_type = AstType.LSH
    precedence = 10


class AstRshOp(AstBinaryOp):
    node_type = AstType.RSH
    precedence = 10


class AstEQOp(AstBinaryOp):
    node_type = AstType.EQ
    precedence = 6


class AstNEQOp(AstBinaryOp):
    node_type = AstType.NEQ
    precedence = 6


class AstGTOp(AstBinaryOp):
    node_type = AstType.GT
    precedence = 6


class AstLTOp(AstBinaryOp):
    node_type = AstType.LT
    precedence = 6


class AstGTEOp(AstBinaryOp):
    node_type = AstType.GTE
    precedence = 6


class AstLTEOp(AstBinaryOp):
    node_type = AstType.LTE
    precedence = 6


class AstLogicalAndOp(AstBinaryOp):
    node_type = AstType.LOGICAL_AND
    precedence = 11


class AstLogicalOrOp(AstBinaryOp):
    node_type = AstType.LOGICAL_OR
    precedence = 12


class AstChar(AstExpression):
    """A character literal."""

    def __init__(self, value: str) -> None:
        super().__init__(AstType.CHAR_L)
        self.value = value


class AstInt(AstExpression):
    """An unsigned 64-bit integer literal with a nominal bit size."""

    def __init__(self, value: int, size: int = 32) -> None:
        super().__init__(AstType.INT_L)
        self.value = value & _UINT64_MASK
        self.size = size


class AstFloat(AstExpression):
    """A floating-point literal."""

    def __init__(self, value: float) -> None:
        super().__init__(AstType.FLOAT_L)
        self.value = float(value)


class AstString(AstExpression):
    """A string literal."""

    def __init__(self, value: str) -> None:
        super().__init__(AstType.STRING_L)
        self.value = value


class AstID(AstExpression):
    """A reference to a variable by name."""

    def __init__(self, value: str) -> None:
        super().__init__(AstType.ID)
        self.value = value


class AstFuncRef(AstExpression):
    """A reference to a function by name."""

    def __init__(self, value: str) -> None:
        super().__init__(AstType.FUNC_REF)
        self.value = value


class AstPtrTo(AstExpression):
    """A dereference of a pointer variable."""

    def __init__(self, value: str) -> None:
        super().__init__(AstType.PTR_TO)
        self.value = value


class AstRef(AstExpression):
    """The address of a variable."""

    def __init__(self, value: str) -> None:
        super().__init__(AstType.REF)
        self.value = value


class AstArrayAccess(AstExpression):
    """An indexed element of an array variable."""

    def __init__(self, value: str, index: AstExpression | None = None) -> None:
        super().__init__(AstType.ARRAY_ACCESS)
        self.value = value
        self.index = index


class AstStructAccess(AstExpression):
    """A member of a structure variable, optionally indexed."""

    def __init__(
        self,
        var: str,
        member: str,
        access_expression: AstExpression | None = None,
    ) -> None:
        super().__init__(AstType.STRUCT_ACCESS)
        self.var = var
        self.member = member
        self.access_expression = access_expression


class AstFuncCallExpr(AstExpression):
    """A function call used as a value."""

    def __init__(
        self,
        name: str,
        args: AstExpression | None = None,
        object_name: str = "",
    ) -> None:
        super().__init__(AstType.FUNC_CALL_EXPR)
        self.name = name
        self.args = args
        self.object_name = object_name


class AstSizeof(AstExpression):
    """The size of the named item."""

    def __init__(self, value: AstID) -> None:
        super().__init__(AstType.SIZEOF)
        self.value = value