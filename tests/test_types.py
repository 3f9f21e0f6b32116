import pytest

from laado.types import (
    AstBlock,
    AstClass,
    AstDataType,
    AstEnum,
    AstNode,
    AstObjectType,
    AstPointerType,
    AstStruct,
    AstStructType,
    AstType,
    Var,
)


def test_node_default_type():
    assert AstNode().type is AstType.NONE


def test_data_type_unsigned_flag():
    dt = AstDataType(AstType.INT32, True)
    assert dt.type is AstType.INT32
    assert dt.is_unsigned is True
    assert AstDataType(AstType.INT8).is_unsigned is False


def test_pointer_type_keeps_base():
    base = AstDataType(AstType.INT64)
    ptr = AstPointerType(base)
    assert ptr.type is AstType.PTR
    assert ptr.base_type is base


def test_struct_and_object_types():
    s = AstStructType("point")
    o = AstObjectType("Widget")
    assert (s.type, s.name) == (AstType.STRUCT, "point")
    assert (o.type, o.name) == (AstType.OBJECT, "Widget")


def test_var_defaults():
    v = Var()
    assert v.name == ""
    assert v.type is None


@pytest.mark.parametrize(
    "kind, size",
    [
        (AstType.CHAR, 1),
        (AstType.INT8, 1),
        (AstType.INT16, 2),
        (AstType.BOOL, 4),
        (AstType.INT32, 4),
        (AstType.STRING, 8),
        (AstType.PTR, 8),
        (AstType.STRUCT, 8),
        (AstType.INT64, 8),
        (AstType.FLOAT32, 0),
        (AstType.FLOAT64, 0),
    ],
)
def test_struct_member_size(kind, size):
    s = AstStruct("s")
    s.add_item(Var(AstDataType(kind), "m"), None)
    assert s.size == size


def test_struct_records_items_and_defaults():
    s = AstStruct("pair")
    default = object()
    a = Var(AstDataType(AstType.INT32), "a")
    b = Var(AstDataType(AstType.INT64), "b")
    s.add_item(a, default)
    s.add_item(b, None)
    assert s.type is AstType.STRUCT_DEF
    assert s.items == [a, b]
    assert s.default_expressions == {"a": default, "b": None}
    assert s.size == 4 + 8


def test_class_functions():
    c = AstClass("Widget")
    c.add_function("f1")
    c.add_function("f2")
    assert c.functions == ["f1", "f2"]


def test_enum_defaults_are_independent():
    e1, e2 = AstEnum(), AstEnum()
    e1.values["x"] = 1
    assert e2.values == {}


def test_block_statement_editing():
    blk = AstBlock()
    a, b, c = AstNode(), AstNode(), AstNode()
    blk.add_statement(a)
    blk.add_statement(c)
    blk.insert_at(b, 1)
    assert list(blk) == [a, b, c]
    assert len(blk) == 3
    assert blk[1] is b
    blk.remove_at(0)
    assert blk.block == [b, c]
    blk.add_statements([a])
    assert blk.block == [a]


def test_block_remove_out_of_range():
    with pytest.raises(IndexError):
        AstBlock().remove_at(0)


def test_block_symbols():
    blk = AstBlock()
    dt = AstDataType(AstType.INT32)
    blk.add_symbol("x", dt)
    assert blk.is_var("x")
    assert not blk.is_var("y")
    assert blk.get_data_type("x") is dt
    assert blk.get_data_type("y") is None


def test_block_constants_and_funcs():
    blk = AstBlock()
    blk.global_consts["G"] = (None, None)
    blk.local_consts["L"] = (None, None)
    blk.funcs.append("main")
    assert blk.is_constant("G") == 1
    assert blk.is_constant("L") == 2
    assert blk.is_constant("Z") == 0
    assert blk.is_func("main")
    assert not blk.is_func("other")


def test_merge_symbols_copies_parent():
    parent = AstBlock()
    dt = AstDataType(AstType.STRING)
    parent.add_symbol("s", dt)
    parent.global_consts["G"] = (dt, None)
    parent.local_consts["L"] = (dt, None)
    parent.funcs.append("f")

    child = AstBlock()
    child.merge_symbols(parent)
    assert child.get_data_type("s") is dt
    assert child.is_var("s")
    assert child.is_constant("G") == 1
    assert child.is_constant("L") == 2
    assert child.is_func("f")
    assert parent.block == child.block == []