"""Builds a class file by managing its constant pool and emitting bytecode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from laado.classfile import (
    ClassFile,
    ClassRef,
    FieldRefEntry,
    Instruction,
    JavaMethod,
    MethodFlags,
    MethodRefEntry,
    NameTypeEntry,
    StringEntry,
    Utf8Entry,
)

OBJECT_CLASS = "java/lang/Object"


@dataclass
class MethodEntry:
    """A method known to the builder and its method-ref pool index."""

    name: str
    pos: int
    base_class: str = ""
    signature: str = ""


def _byte(value: int) -> int:
    return value & 0xFF


def _short(value: int) -> int:
    return value & 0xFFFF


def _local_op(func: JavaMethod, short_forms: tuple[int, int, int, int], wide: int, pos: int) -> None:
    if 0 <= pos <= 3:
        func.add_code(Instruction(short_forms[pos]))
    else:
        func.add_code(Instruction(wide, _byte(pos), 1))


class JavaClassBuilder:
    """Assembles a class extending java/lang/Object."""

    def __init__(self, class_name: str) -> None:
        self.classfile = ClassFile()
        self.class_name = class_name
        self.utf8_index: dict[str, int] = {}
        self.class_map: dict[str, int] = {}
        self.field_map: dict[str, int] = {}
        self.methods: list[MethodEntry] = []
        self.const_map: dict[str, int] = {}

        pos = self.classfile.add_const(ClassRef(self.add_utf8(class_name)))
        self.class_map[class_name] = pos
        self.super_pos = pos
        self.classfile.this_idx = pos

        pos = self.classfile.add_const(ClassRef(self.add_utf8(OBJECT_CLASS)))
        self.class_map[OBJECT_CLASS] = pos
        self.classfile.super_idx = pos

        self.code_idx = self.add_utf8("Code")
        self.import_method(OBJECT_CLASS, "<init>", "()V")

    def add_utf8(self, value: str) -> int:
        """Add a UTF-8 string to the constant pool and return its index."""
        pos = self.classfile.add_const(Utf8Entry(value))
        self.utf8_index[value] = pos
        return pos

    def import_class(self, base_class: str) -> int:
        """Return the class-ref index for ``base_class``, adding it once."""
        if base_class in self.class_map:
            return self.class_map[base_class]
        pos = self.classfile.add_const(ClassRef(self.add_utf8(base_class)))
        self.class_map[base_class] = pos
        return pos

    def import_method(self, base_class: str, name: str, signature: str) -> None:
        class_pos = self.import_class(base_class)
        nt_pos = self.classfile.add_const(
            NameTypeEntry(self.add_utf8(name), self.add_utf8(signature))
        )
        method_pos = self.classfile.add_const(MethodRefEntry(class_pos, nt_pos))
        self.methods.append(MethodEntry(name, method_pos, base_class, signature))

    def import_field(self, base_class: str, type_class: str, name: str) -> None:
        base_pos = self.import_class(base_class)
        self.import_class(type_class)
        sig_pos = self.add_utf8(f"L{type_class};")
        name_pos = self.add_utf8(name)
        nt_pos = self.classfile.add_const(NameTypeEntry(name_pos, sig_pos))
        self.field_map[name] = self.classfile.add_const(FieldRefEntry(base_pos, nt_pos))

    def find_method(self, name: str, base_class: str = "", signature: str = "") -> int:
        """Return the method-ref index of a matching method, or 0.

        An empty ``base_class`` or ``signature`` matches anything, and a
        ``base_class`` of ``"this"`` matches any class.
        """
        for method in self.methods:
            if method.name != name:
                continue
            if base_class and base_class != "this" and method.base_class != base_class:
                continue
            if signature and method.signature != signature:
                continue
            return method.pos
        return 0

    def create_method(
        self, name: str, signature: str, flags: int = MethodFlags.PUBLIC
    ) -> JavaMethod:
        name_idx = self.add_utf8(name)
        sig_idx = self.add_utf8(signature)
        func = JavaMethod(flags, name_idx, sig_idx, self.code_idx)
        self.classfile.methods.append(func)

        nt_pos = self.classfile.add_const(NameTypeEntry(name_idx, sig_idx))
        method_pos = self.classfile.add_const(MethodRefEntry(self.super_pos, nt_pos))
        self.methods.append(MethodEntry(name, method_pos, self.class_name, signature))
        return func

    def create_aload(self, func: JavaMethod, pos: int) -> None:
        _local_op(func, (0x2A, 0x2B, 0x2C, 0x2D), 0x19, pos)

    def create_astore(self, func: JavaMethod, pos: int) -> None:
        _local_op(func, (0x4B, 0x4C, 0x4D, 0x4E), 0x3A, pos)

    def create_new(self, func: JavaMethod, name: str) -> None:
        func.add_code(Instruction(0xBB, _short(self.class_map.get(name, 0)), 2))

    def create_dup(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x59))

    def create_getstatic(self, func: JavaMethod, name: str) -> None:
        func.add_code(Instruction(0xB2, _short(self.field_map.get(name, 0)), 2))

    def create_string(self, func: JavaMethod, value: str) -> None:
        """Emit an ldc of a string constant, sharing repeated values."""
        const_pos = self.const_map.get(value)
        if const_pos is None:
            const_pos = self.classfile.add_const(StringEntry(self.add_utf8(value)))
            self.const_map[value] = const_pos
        func.add_code(Instruction(0x12, _byte(const_pos), 1))

    def _invoke(self, func: JavaMethod, opcode: int, name: str, base_class: str, signature: str) -> None:
        pos = self.find_method(name, base_class, signature)
        func.add_code(Instruction(opcode, _short(pos), 2))

    def create_invokespecial(
        self, func: JavaMethod, name: str, base_class: str = "", signature: str = ""
    ) -> None:
        self._invoke(func, 0xB7, name, base_class, signature)

    def create_invokevirtual(
        self, func: JavaMethod, name: str, base_class: str = "", signature: str = ""
    ) -> None:
        self._invoke(func, 0xB6, name, base_class, signature)

    def create_invokestatic(
        self, func: JavaMethod, name: str, base_class: str = "", signature: str = ""
    ) -> None:
        self._invoke(func, 0xB8, name, base_class, signature)

    def create_ret_void(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0xB1))

    def create_bipush(self, func: JavaMethod, value: int) -> None:
        func.add_code(Instruction(0x10, _byte(value), 1))

    def create_iload(self, func: JavaMethod, value: int) -> None:
        _local_op(func, (0x1A, 0x1B, 0x1C, 0x1D), 0x15, value)

    def create_istore(self, func: JavaMethod, value: int) -> None:
        _local_op(func, (0x3B, 0x3C, 0x3D, 0x3E), 0x36, value)

    def create_iadd(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x60))

    def create_isub(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x64))

    def create_imul(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x68))

    def create_idiv(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x6C))

    def create_irem(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x70))

    def create_iand(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x7E))

    def create_ior(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x80))

    def create_ixor(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x82))

    def create_ishl(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x78))

    def create_ishr(self, func: JavaMethod) -> None:
        func.add_code(Instruction(0x7A))

    def to_bytes(self) -> bytes:
        return self.classfile.to_bytes()

    def write(self, stream: BinaryIO) -> None:
        self.classfile.write(stream)