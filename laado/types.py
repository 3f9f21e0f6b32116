"""Core AST node kinds, data types and symbol-holding blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterator


class AstType(Enum):
    """Every kind of node the AST can hold."""

    NONE = auto()

    # Global statements
    EXTERN_FUNC = auto()
    FUNC = auto()
    STRUCT_DEF = auto()
    BLOCK = auto()

    # Statements
    RETURN = auto()
    EXPR_STMT = auto()
    BLOCK_STMT = auto()
    FUNC_CALL_STMT = auto()
    VAR_DEC = auto()
    STRUCT_DEC = auto()
    IF = auto()
    WHILE = auto()
    REPEAT = auto()
    FOR = auto()
    FOR_ALL = auto()
    BREAK = auto()
    CONTINUE = auto()

    # Operators
    NEG = auto()
    ASSIGN = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    AND = auto()
    OR = auto()
    XOR = auto()
    LSH = auto()
    RSH = auto()
    EQ = auto()
    NEQ = auto()
    GT = auto()
    LT = auto()
    GTE = auto()
    LTE = auto()
    LOGICAL_AND = auto()
    LOGICAL_OR = auto()
    SIZEOF = auto()

    # Literals and identifiers
    CHAR_L = auto()
    INT_L = auto()
    FLOAT_L = auto()
    STRING_L = auto()
    ID = auto()
    ARRAY_ACCESS = auto()
    STRUCT_ACCESS = auto()

    EXPR_LIST = auto()
    FUNC_CALL_EXPR = auto()

    # Reference operators
    FUNC_REF = auto()
    PTR_TO = auto()
    REF = auto()

    # Data types
    VOID = auto()
    BOOL = auto()
    CHAR = auto()
    INT8 = auto()
    INT16 = auto()
    INT32 = auto()
    INT64 = auto()
    FLOAT32 = auto()
    FLOAT64 = auto()
    STRING = auto()
    PTR = auto()
    STRUCT = auto()
    OBJECT = auto()


class Attr(Enum):
    """Member visibility used by object-oriented front ends."""

    PUBLIC = auto()
    PROTECTED = auto()
    PRIVATE = auto()


class AstNode:
    """Base of every AST node; carries the node kind in ``type``."""

    def __init__(self, node_type: AstType = AstType.NONE) -> None:
        self.type = node_type

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.type.name})"


class AstDataType(AstNode):
    """A primitive data type, optionally unsigned."""

    def __init__(self, node_type: AstType, is_unsigned: bool = False) -> None:
        super().__init__(node_type)
        self.is_unsigned = is_unsigned

    def __repr__(self) -> str:
        prefix = "unsigned " if self.is_unsigned else ""
        return f"{self.__class__.__name__}({prefix}{self.type.name})"


class AstPointerType(AstDataType):
    """A pointer to another data type."""

    def __init__(self, base_type: AstDataType | None) -> None:
        super().__init__(AstType.PTR)
        self.base_type = base_type

    def __repr__(self) -> str:
        return f"AstPointerType({self.base_type!r})"


class AstStructType(AstDataType):
    """A reference to a named structure type."""

    def __init__(self, name: str) -> None:
        super().__init__(AstType.STRUCT)
        self.name = name

    def __repr__(self) -> str:
        return f"AstStructType({self.name!r})"


class AstObjectType(AstDataType):
    """A reference to a named class type."""

    def __init__(self, name: str) -> None:
        super().__init__(AstType.OBJECT)
        self.name = name

    def __repr__(self) -> str:
        return f"AstObjectType({self.name!r})"


@dataclass
class Var:
    """A typed, named variable such as a parameter or struct member."""

    type: AstDataType | None = None
    name: str = ""


_MEMBER_SIZES = {
    AstType.CHAR: 1,
    AstType.INT8: 1,
    AstType.INT16: 2,
    AstType.BOOL: 4,
    AstType.INT32: 4,
    AstType.STRING: 8,
    AstType.PTR: 8,
    AstType.STRUCT: 8,
    AstType.INT64: 8,
}


class AstStruct(AstNode):
    """A structure definition with members, their defaults and a byte size."""

    def __init__(self, name: str) -> None:
        super().__init__(AstType.STRUCT_DEF)
        self.name = name
        self.items: list[Var] = []
        self.default_expressions: dict[str, Any] = {}
        self.size = 0

    def add_item(self, var: Var, default_expression: Any) -> None:
        """Append a member and grow the structure size by the member's width."""
        self.items.append(var)
        self.default_expressions[var.name] = default_expression
        self.size += _MEMBER_SIZES.get(var.type.type, 0)


class AstClass:
    """A class definition holding its functions."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.functions: list[Any] = []

    def add_function(self, func: Any) -> None:
        self.functions.append(func)


@dataclass
class AstEnum:
    """An enumeration with an underlying type and named values."""

    name: str = ""
    type: AstDataType | None = None
    values: dict[str, Any] = field(default_factory=dict)


class AstBlock(AstNode):
    """A list of statements together with its symbol information."""

    def __init__(self) -> None:
        super().__init__(AstType.BLOCK)
        self.block: list[AstNode] = []
        self.symbol_table: dict[str, AstDataType | None] = {}
        self.vars: list[str] = []
        self.global_consts: dict[str, tuple[AstDataType | None, Any]] = {}
        self.local_consts: dict[str, tuple[AstDataType | None, Any]] = {}
        self.funcs: list[str] = []

    def __len__(self) -> int:
        return len(self.block)

    def __iter__(self) -> Iterator[AstNode]:
        return iter(self.block)

    def __getitem__(self, index: int) -> AstNode:
        return self.block[index]

    def add_statement(self, stmt: AstNode) -> None:
        self.block.append(stmt)

    def add_statements(self, statements: list[AstNode]) -> None:
        """Replace the statements of this block."""
        self.block = list(statements)

    def remove_at(self, pos: int) -> None:
        del self.block[pos]

    def insert_at(self, stmt: AstNode, pos: int) -> None:
        self.block.insert(pos, stmt)

    def add_symbol(self, name: str, data_type: AstDataType | None) -> None:
        self.symbol_table[name] = data_type
        self.vars.append(name)

    def merge_symbols(self, parent: AstBlock) -> None:
        """Take over variables, constants and functions visible in ``parent``."""
        for name, data_type in parent.symbol_table.items():
            self.symbol_table[name] = data_type
            self.vars.append(name)
        self.global_consts.update(parent.global_consts)
        self.local_consts.update(parent.local_consts)
        self.funcs.extend(parent.funcs)

    def get_data_type(self, name: str) -> AstDataType | None:
        return self.symbol_table.get(name)

    def is_var(self, name: str) -> bool:
        return name in self.vars

    def is_constant(self, name: str) -> int:
        """Return 1 for a global constant, 2 for a local one, 0 otherwise."""
        if name in self.global_consts:
            return 1
        if name in self.local_consts:
            return 2
        return 0

    def is_func(self, name: str) -> bool:
        return name in self.funcs