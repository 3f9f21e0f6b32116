import io

import pytest

from laado.classbuilder import JavaClassBuilder
from laado.classfile import (
    ClassRef,
    FieldRefEntry,
    Instruction,
    MethodFlags,
    MethodRefEntry,
    StringEntry,
    Utf8Entry,
)


@pytest.fixture
def builder():
    return JavaClassBuilder("Main")


def _entry(builder, index):
    return builder.classfile.const_pool[index - 1]


def _last(func):
    return func.code_block.code[-1]


def test_this_class_points_at_name(builder):
    ref = _entry(builder, builder.classfile.this_idx)
    assert isinstance(ref, ClassRef)
    assert _entry(builder, ref.name_index) == Utf8Entry("Main")


def test_super_class_is_object(builder):
    ref = _entry(builder, builder.classfile.super_idx)
    assert _entry(builder, ref.name_index) == Utf8Entry("java/lang/Object")


def test_code_attribute_name(builder):
    assert _entry(builder, builder.code_idx) == Utf8Entry("Code")


def test_object_constructor_imported(builder):
    pos = builder.find_method("<init>", "java/lang/Object", "()V")
    entry = _entry(builder, pos)
    assert isinstance(entry, MethodRefEntry)
    assert entry.class_index == builder.class_map["java/lang/Object"]


def test_add_utf8_returns_pool_index(builder):
    pos = builder.add_utf8("hello")
    assert pos == len(builder.classfile.const_pool)
    assert builder.utf8_index["hello"] == pos


def test_import_class_is_reused(builder):
    first = builder.import_class("java/io/PrintStream")
    size = len(builder.classfile.const_pool)
    assert builder.import_class("java/io/PrintStream") == first
    assert len(builder.classfile.const_pool) == size


def test_find_method_this_matches_any_class(builder):
    builder.import_method("java/io/PrintStream", "println", "(I)V")
    pos = builder.find_method("println", "this", "(I)V")
    assert pos == builder.find_method("println", "java/io/PrintStream", "(I)V")
    assert builder.find_method("println", "Other", "(I)V") == 0


def test_find_method_signature_selects_overload(builder):
    builder.import_method("java/io/PrintStream", "println", "(Ljava/lang/String;)V")
    builder.import_method("java/io/PrintStream", "println", "(I)V")
    a = builder.find_method("println", "", "(Ljava/lang/String;)V")
    b = builder.find_method("println", "", "(I)V")
    assert a < b
    assert builder.find_method("missing", "", "") == 0


def test_create_method_registers(builder):
    func = builder.create_method("run", "()V", MethodFlags.PUBLIC | MethodFlags.STATIC)
    assert builder.classfile.methods[-1] is func
    assert func.flags == MethodFlags.PUBLIC | MethodFlags.STATIC
    assert _entry(builder, func.name_index) == Utf8Entry("run")
    pos = builder.find_method("run", "Main", "()V")
    assert isinstance(_entry(builder, pos), MethodRefEntry)


def test_getstatic_uses_field_ref(builder):
    builder.import_field("java/lang/System", "java/io/PrintStream", "out")
    func = builder.create_method("main", "([Ljava/lang/String;)V")
    builder.create_getstatic(func, "out")
    instr = _last(func)
    assert instr.opcode == 0xB2
    assert isinstance(_entry(builder, instr.operand), FieldRefEntry)


@pytest.mark.parametrize(
    "method, pos, expected",
    [
        ("create_aload", 0, Instruction(0x2A)),
        ("create_aload", 3, Instruction(0x2D)),
        ("create_aload", 7, Instruction(0x19, 7, 1)),
        ("create_astore", 1, Instruction(0x4C)),
        ("create_astore", 9, Instruction(0x3A, 9, 1)),
        ("create_iload", 2, Instruction(0x1C)),
        ("create_iload", 5, Instruction(0x15, 5, 1)),
        ("create_istore", 0, Instruction(0x3B)),
        ("create_istore", 4, Instruction(0x36, 4, 1)),
    ],
)
def test_local_variable_instructions(builder, method, pos, expected):
    func = builder.create_method("f", "()V")
    getattr(builder, method)(func, pos)
    assert _last(func) == expected


@pytest.mark.parametrize(
    "method, opcode",
    [
        ("create_iadd", 0x60),
        ("create_isub", 0x64),
        ("create_imul", 0x68),
        ("create_idiv", 0x6C),
        ("create_irem", 0x70),
        ("create_iand", 0x7E),
        ("create_ior", 0x80),
        ("create_ixor", 0x82),
        ("create_ishl", 0x78),
        ("create_ishr", 0x7A),
        ("create_dup", 0x59),
        ("create_ret_void", 0xB1),
    ],
)
def test_simple_instructions(builder, method, opcode):
    func = builder.create_method("f", "()V")
    getattr(builder, method)(func)
    assert _last(func) == Instruction(opcode)


def test_bipush_truncates_to_byte(builder):
    func = builder.create_method("f", "()V")
    builder.create_bipush(func, -1)
    assert _last(func) == Instruction(0x10, 0xFF, 1)


def test_create_string_shares_constant(builder):
    func = builder.create_method("f", "()V")
    builder.create_string(func, "hi")
    size = len(builder.classfile.const_pool)
    builder.create_string(func, "hi")
    assert len(builder.classfile.const_pool) == size
    first, second = func.code_block.code
    assert first == second
    assert first.opcode == 0x12
    entry = _entry(builder, first.operand)
    assert isinstance(entry, StringEntry)
    assert _entry(builder, entry.name_index) == Utf8Entry("hi")


def test_new_and_invokespecial(builder):
    func = builder.create_method("f", "()V")
    builder.create_new(func, "Main")
    builder.create_invokespecial(func, "<init>", "java/lang/Object")
    new, invoke = func.code_block.code
    assert new == Instruction(0xBB, builder.class_map["Main"], 2)
    assert invoke.opcode == 0xB7
    assert invoke.operand == builder.find_method("<init>", "java/lang/Object", "")


def test_invokevirtual_and_static_opcodes(builder):
    func = builder.create_method("f", "()V")
    builder.create_invokevirtual(func, "f", "Main", "()V")
    builder.create_invokestatic(func, "f")
    virtual, static = func.code_block.code
    assert virtual.opcode == 0xB6
    assert static.opcode == 0xB8
    assert virtual.operand == static.operand == builder.find_method("f", "Main", "()V")


def test_write_matches_bytes(builder):
    func = builder.create_method("f", "()V")
    builder.create_ret_void(func)
    stream = io.BytesIO()
    builder.write(stream)
    data = stream.getvalue()
    assert data == builder.to_bytes()
    assert data[:4] == b"\xca\xfe\xba\xbe"
    assert func.to_bytes() in data