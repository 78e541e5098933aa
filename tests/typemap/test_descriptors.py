"""Tests for type descriptors and SQL type parsing."""

from typing import Optional

import pytest

from schemaforge.typemap.descriptors import (
    MAX_LENGTH,
    SqlTypeDescriptor,
    TypeDescriptor,
    create_decimal_type,
    create_string_type,
)


class TestSqlTypeDescriptorParse:
    """Test parsing of native SQL type strings."""

    def test_varchar_length(self) -> None:
        sql = SqlTypeDescriptor.parse("varchar(255)")
        assert sql.base_type_name == "varchar"
        assert sql.length == 255
        assert sql.fixed_length is False
        assert sql.unicode is False

    def test_nvarchar_max(self) -> None:
        sql = SqlTypeDescriptor.parse("NVARCHAR(MAX)")
        assert sql.base_type_name == "nvarchar"
        assert sql.length == MAX_LENGTH
        assert sql.unicode is True

    def test_fixed_char(self) -> None:
        sql = SqlTypeDescriptor.parse("char(36)")
        assert sql.length == 36
        assert sql.fixed_length is True

    def test_character_varying(self) -> None:
        sql = SqlTypeDescriptor.parse("character varying(100)")
        assert sql.base_type_name == "character varying"
        assert sql.length == 100
        assert sql.fixed_length is False

    def test_decimal_precision_and_scale(self) -> None:
        sql = SqlTypeDescriptor.parse("decimal(10, 2)")
        assert sql.base_type_name == "decimal"
        assert sql.precision == 10
        assert sql.scale == 2
        assert sql.length is None

    def test_multi_word_type(self) -> None:
        sql = SqlTypeDescriptor.parse("double   precision")
        assert sql.base_type_name == "double precision"
        assert sql.precision is None

    @pytest.mark.parametrize("text", ["serial", "bigserial"])
    def test_serial_is_auto_increment(self, text: str) -> None:
        assert SqlTypeDescriptor.parse(text).auto_increment is True

    def test_array(self) -> None:
        sql = SqlTypeDescriptor.parse("integer[]")
        assert sql.is_array is True
        assert str(sql) == "integer[]"


class TestTypeDescriptor:
    def test_optional_is_unwrapped(self) -> None:
        assert TypeDescriptor(Optional[int]).base_type is int

    def test_max_length(self) -> None:
        assert TypeDescriptor(str, length=MAX_LENGTH).is_max_length is True
        assert TypeDescriptor(str, length=10).is_max_length is False


class TestFactories:
    def test_string_defaults(self) -> None:
        assert create_string_type(TypeDescriptor(str)).sql_type == "varchar(255)"

    def test_string_fixed_unicode(self) -> None:
        descriptor = TypeDescriptor(str, length=10, unicode=True, fixed_length=True)
        assert create_string_type(descriptor, unicode_prefix="n").sql_type == "nchar(10)"

    def test_string_over_limit_uses_max_type(self) -> None:
        descriptor = TypeDescriptor(str, length=5000)
        result = create_string_type(descriptor, max_type="text", max_length=4000)
        assert result.sql_type == "text"

    def test_decimal_defaults(self) -> None:
        assert create_decimal_type(TypeDescriptor(int)).sql_type == "decimal(16,4)"
        descriptor = TypeDescriptor(int, precision=8, scale=0)
        assert create_decimal_type(descriptor, "numeric").sql_type == "numeric(8,0)"
