import io
import struct

import pytest

from laado.classfile import (
    ClassFile,
    ClassRef,
    CodeBlock,
    ConstTag,
    FieldRefEntry,
    Instruction,
    JavaMethod,
    MethodFlags,
    MethodRefEntry,
    NameTypeEntry,
    StringEntry,
    Utf8Entry,
)


def test_class_ref_bytes():
    data = ClassRef(3).to_bytes()
    assert data[0] == ConstTag.CLASS
    assert struct.unpack(">H", data[1:]) == (3,)


def test_string_entry_bytes():
    data = StringEntry(258).to_bytes()
    assert data[0] == ConstTag.STRING
    assert struct.unpack(">H", data[1:]) == (258,)


def test_utf8_entry_ascii():
    data = Utf8Entry("Code").to_bytes()
    assert data[0] == ConstTag.UTF8
    assert struct.unpack(">H", data[1:3]) == (len("Code"),)
    assert data[3:] == b"Code"


def test_utf8_entry_length_counts_bytes():
    data = Utf8Entry("é").to_bytes()
    (length,) = struct.unpack(">H", data[1:3])
    assert length == len("é".encode("utf-8"))
    assert data[3:].decode("utf-8") == "é"


@pytest.mark.parametrize(
    "entry, tag",
    [
        (FieldRefEntry(4, 9), ConstTag.FIELD_REF),
        (MethodRefEntry(4, 9), ConstTag.METHOD_REF),
        (NameTypeEntry(4, 9), ConstTag.NAME_AND_TYPE),
    ],
)
def test_two_index_entries(entry, tag):
    data = entry.to_bytes()
    assert data[0] == tag
    assert struct.unpack(">HH", data[1:]) == (4, 9)


@pytest.mark.parametrize("width", [0, 1, 2])
def test_instruction_size_matches_bytes(width):
    instr = Instruction(0x10, 5, width)
    assert instr.size() == 1 + width
    assert len(instr.to_bytes()) == instr.size()


def test_instruction_short_operand_is_big_endian():
    assert Instruction(0xB6, 0x0102, 2).to_bytes() == b"\xb6\x01\x02"


def test_instruction_without_operand():
    assert Instruction(0xB1).to_bytes() == b"\xb1"


def test_instruction_rejects_bad_width():
    with pytest.raises(ValueError):
        Instruction(0x10, 1, 3)


def test_code_block_layout():
    block = CodeBlock(5)
    block.add_code(Instruction(0x2A))
    block.add_code(Instruction(0xB7, 9, 2))
    data = block.to_bytes()
    code_index, size, stack, max_vars, code_len = struct.unpack_from(">HIHHI", data)
    assert code_index == 5
    assert code_len == 4
    assert size == code_len + CodeBlock.HEADER_SIZE
    assert stack == 5
    assert max_vars == 20
    assert data[14:18] == b"\x2a\xb7\x00\x09"
    assert struct.unpack(">HH", data[18:]) == (0, 0)


def test_java_method_layout():
    method = JavaMethod(MethodFlags.PUBLIC | MethodFlags.STATIC, 6, 7, 5)
    method.add_code(Instruction(0xB1))
    data = method.to_bytes()
    flags, name, sig, attrs = struct.unpack_from(">HHHH", data)
    assert flags == MethodFlags.PUBLIC | MethodFlags.STATIC
    assert (name, sig, attrs) == (6, 7, 1)
    assert data[8:] == method.code_block.to_bytes()


def test_add_const_returns_one_based_index():
    cf = ClassFile()
    assert cf.add_const(Utf8Entry("A")) == 1
    assert cf.add_const(ClassRef(1)) == 2
    assert len(cf.const_pool) == 2


def test_class_file_header_and_trailer():
    cf = ClassFile()
    cf.add_const(Utf8Entry("A"))
    cf.this_idx = cf.add_const(ClassRef(1))
    data = cf.to_bytes()
    magic, minor, major, count = struct.unpack_from(">IHHH", data)
    assert magic == 0xCAFEBABE
    assert minor == 0
    assert major == 0x34
    assert count == len(cf.const_pool) + 1
    assert data.endswith(b"\x00\x00")


def test_class_file_contains_methods():
    cf = ClassFile()
    method = JavaMethod(MethodFlags.PUBLIC, 1, 2, 3)
    cf.methods.append(method)
    data = cf.to_bytes()
    assert method.to_bytes() in data


def test_write_matches_to_bytes():
    cf = ClassFile()
    cf.add_const(Utf8Entry("Main"))
    stream = io.BytesIO()
    cf.write(stream)
    assert stream.getvalue() == cf.to_bytes()