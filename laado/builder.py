"""Factory functions for AST data types."""

from __future__ import annotations

from laado.types import (
    AstDataType,
    AstObjectType,
    AstPointerType,
    AstStructType,
    AstType,
)


def build_void_type() -> AstDataType:
    return AstDataType(AstType.VOID)


def build_bool_type() -> AstDataType:
    return AstDataType(AstType.BOOL)


def build_char_type() -> AstDataType:
    return AstDataType(AstType.CHAR)


def build_int8_type(is_unsigned: bool = False) -> AstDataType:
    return AstDataType(AstType.INT8, is_unsigned)


def build_int16_type(is_unsigned: bool = False) -> AstDataType:
    return AstDataType(AstType.INT16, is_unsigned)


def build_int32_type(is_unsigned: bool = False) -> AstDataType:
    return AstDataType(AstType.INT32, is_unsigned)


def build_int64_type(is_unsigned: bool = False) -> AstDataType:
    return AstDataType(AstType.INT64, is_unsigned)


def build_float32_type() -> AstDataType:
    return AstDataType(AstType.FLOAT32)


def build_float64_type() -> AstDataType:
    return AstDataType(AstType.FLOAT64)


def build_string_type() -> AstDataType:
    return AstDataType(AstType.STRING)


def build_pointer_type(base: AstDataType) -> AstPointerType:
    return AstPointerType(base)


def build_int32_pointer_type() -> AstPointerType:
    return build_pointer_type(build_int32_type())


def build_struct_type(name: str) -> AstStructType:
    return AstStructType(name)


def build_object_type(name: str) -> AstObjectType:
    return AstObjectType(name)