"""In-memory model of a JVM class file and its binary encoding."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import BinaryIO, ClassVar, Union

MAGIC = 0xCAFEBABE
MINOR_VERSION = 0
MAJOR_VERSION = 0x0034
CLASS_MODIFIERS = 0x0021


class ConstTag(IntEnum):
    """Tags of the constant-pool entries this writer produces."""

    UTF8 = 0x01
    CLASS = 0x07
    STRING = 8
    FIELD_REF = 9
    METHOD_REF = 10
    NAME_AND_TYPE = 12


class MethodFlags(IntFlag):
    """Access flags of a method."""

    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010


@dataclass
class ClassRef:
    """A class reference pointing at a UTF-8 name entry."""

    tag: ClassVar[ConstTag] = ConstTag.CLASS
    name_index: int

    def to_bytes(self) -> bytes:
        return struct.pack(">BH", self.tag, self.name_index)


@dataclass
class StringEntry:
    """A string constant pointing at a UTF-8 entry."""

    tag: ClassVar[ConstTag] = ConstTag.STRING
    name_index: int

    def to_bytes(self) -> bytes:
        return struct.pack(">BH", self.tag, self.name_index)


@dataclass
class Utf8Entry:
    """A UTF-8 encoded constant string."""

    tag: ClassVar[ConstTag] = ConstTag.UTF8
    data: str

    def to_bytes(self) -> bytes:
        encoded = self.data.encode("utf-8")
        return struct.pack(">BH", self.tag, len(encoded)) + encoded


@dataclass
class FieldRefEntry:
    """A field reference: owning class and name-and-type."""

    tag: ClassVar[ConstTag] = ConstTag.FIELD_REF
    class_index: int
    nt_index: int

    def to_bytes(self) -> bytes:
        return struct.pack(">BHH", self.tag, self.class_index, self.nt_index)


@dataclass
class MethodRefEntry:
    """A method reference: owning class and name-and-type."""

    tag: ClassVar[ConstTag] = ConstTag.METHOD_REF
    class_index: int
    nt_index: int

    def to_bytes(self) -> bytes:
        return struct.pack(">BHH", self.tag, self.class_index, self.nt_index)


@dataclass
class NameTypeEntry:
    """A name paired with a type descriptor."""

    tag: ClassVar[ConstTag] = ConstTag.NAME_AND_TYPE
    name_index: int
    desc_index: int

    def to_bytes(self) -> bytes:
        return struct.pack(">BHH", self.tag, self.name_index, self.desc_index)


ConstEntry = Union[
    ClassRef, StringEntry, Utf8Entry, FieldRefEntry, MethodRefEntry, NameTypeEntry
]


@dataclass(frozen=True)
class Instruction:
    """One bytecode instruction with an operand of 0, 1 or 2 bytes."""

    opcode: int
    operand: int = 0
    width: int = 0

    def __post_init__(self) -> None:
        if self.width not in (0, 1, 2):
            raise ValueError(f"operand width must be 0, 1 or 2, not {self.width}")

    def size(self) -> int:
        return 1 + self.width

    def to_bytes(self) -> bytes:
        head = bytes([self.opcode])
        if self.width == 0:
            return head
        return head + self.operand.to_bytes(self.width, "big")


@dataclass
class CodeBlock:
    """The Code attribute of a method."""

    HEADER_SIZE: ClassVar[int] = 12

    code_index: int
    code: list[Instruction] = field(default_factory=list)
    stack_size: int = 5
    max_vars: int = 20
    exception_size: int = 0
    attr_size: int = 0

    def add_code(self, code: Instruction) -> None:
        self.code.append(code)

    def to_bytes(self) -> bytes:
        body = b"".join(instr.to_bytes() for instr in self.code)
        header = struct.pack(
            ">HIHHI",
            self.code_index,
            len(body) + self.HEADER_SIZE,
            self.stack_size,
            self.max_vars,
            len(body),
        )
        trailer = struct.pack(">HH", self.exception_size, self.attr_size)
        return header + body + trailer


class JavaMethod:
    """A method entry with its single Code attribute."""

    def __init__(self, flags: int, name_index: int, type_index: int, code_index: int) -> None:
        self.flags = int(flags)
        self.name_index = name_index
        self.type_index = type_index
        self.attr_count = 1
        self.code_block = CodeBlock(code_index)

    def add_code(self, code: Instruction) -> None:
        self.code_block.add_code(code)

    def to_bytes(self) -> bytes:
        head = struct.pack(
            ">HHHH", self.flags, self.name_index, self.type_index, self.attr_count
        )
        return head + self.code_block.to_bytes()


@dataclass
class ClassFile:
    """A whole class file: constant pool, class indices and methods."""

    const_pool: list[ConstEntry] = field(default_factory=list)
    methods: list[JavaMethod] = field(default_factory=list)
    this_idx: int = 0
    super_idx: int = 0
    magic: int = MAGIC
    minor_version: int = MINOR_VERSION
    major_version: int = MAJOR_VERSION
    modifiers: int = CLASS_MODIFIERS
    interface_count: int = 0
    field_count: int = 0
    attr_count: int = 0

    def add_const(self, entry: ConstEntry) -> int:
        """Append an entry and return its one-based pool index."""
        self.const_pool.append(entry)
        return len(self.const_pool)

    def to_bytes(self) -> bytes:
        parts = [
            struct.pack(
                ">IHHH",
                self.magic,
                self.minor_version,
                self.major_version,
                len(self.const_pool) + 1,
            )
        ]
        parts.extend(entry.to_bytes() for entry in self.const_pool)
        parts.append(
            struct.pack(
                ">HHHHHH",
                self.modifiers,
                self.this_idx,
                self.super_idx,
                self.interface_count,
                self.field_count,
                len(self.methods),
            )
        )
        parts.extend(method.to_bytes() for method in self.methods)
        parts.append(struct.pack(">H", self.attr_count))
        return b"".join(parts)

    def write(self, stream: BinaryIO) -> None:
        stream.write(self.to_bytes())