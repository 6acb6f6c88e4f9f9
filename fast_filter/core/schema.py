"""
Record and schema model for the fast filter stage.

A host pipeline hands the filter an input schema and a stream of records.
This module gives those a small concrete shape: field schemas that know
whether they are a simple scalar (optionally nullable), a schema built
either from a declared mapping or inferred from a pandas DataFrame, and
a structured record offering field lookup by name.
"""

import re
import logging

import pandas as pd

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


logger = logging.getLogger(__name__)


class SchemaError(Exception):
    """Raised when a schema declaration cannot be understood."""
    pass


class FieldType(Enum):
    """Declared type of a field."""
    STRING = 'string'
    INTEGER = 'integer'
    FLOAT = 'float'
    BOOLEAN = 'boolean'
    DATE = 'date'
    DATETIME = 'datetime'
    TIME = 'time'
    BYTES = 'bytes'
    ARRAY = 'array'
    MAP = 'map'
    RECORD = 'record'

    @property
    def is_simple(self) -> bool:
        return self not in (FieldType.ARRAY, FieldType.MAP, FieldType.RECORD)


# Aliases accepted in declared schemas
TYPE_ALIASES = {
    'str': FieldType.STRING,
    'string': FieldType.STRING,
    'text': FieldType.STRING,
    'int': FieldType.INTEGER,
    'integer': FieldType.INTEGER,
    'long': FieldType.INTEGER,
    'float': FieldType.FLOAT,
    'double': FieldType.FLOAT,
    'number': FieldType.FLOAT,
    'bool': FieldType.BOOLEAN,
    'boolean': FieldType.BOOLEAN,
    'date': FieldType.DATE,
    'datetime': FieldType.DATETIME,
    'timestamp': FieldType.DATETIME,
    'time': FieldType.TIME,
    'bytes': FieldType.BYTES,
    'array': FieldType.ARRAY,
    'list': FieldType.ARRAY,
    'map': FieldType.MAP,
    'dict': FieldType.MAP,
    'record': FieldType.RECORD,
}

_DECLARATION_PATTERN = re.compile(r'^\s*(\w+)\s*(?:<\s*(\w+)\s*>)?\s*(\?)?\s*$')


def parse_field_type(type_name: str) -> FieldType:
    """Parse a single type name (case-insensitive) into a FieldType."""
    if not isinstance(type_name, str) or type_name.strip().lower() not in TYPE_ALIASES:
        raise SchemaError(
            f"Unknown field type: {type_name}. "
            f"Supported types: {', '.join(sorted(TYPE_ALIASES))}"
        )
    return TYPE_ALIASES[type_name.strip().lower()]


@dataclass(frozen=True)
class FieldSchema:
    """Schema of one named field."""
    name: str
    type: FieldType
    nullable: bool = False
    item_type: Optional[FieldType] = None

    def is_simple_or_nullable_simple(self) -> bool:
        return self.type.is_simple

    @property
    def type_name(self) -> str:
        """Type name without the nullable wrapper."""
        return self.type.value

    def __str__(self) -> str:
        name = self.type.value
        if self.item_type is not None:
            name += f"<{self.item_type.value}>"
        return name + ('?' if self.nullable else '')

    @classmethod
    def from_declaration(cls, name: str, declaration: str) -> 'FieldSchema':
        """
        Build a field schema from a declaration string.

        Examples: 'string', 'int?', 'array<int>', 'array<string>?'
        """
        if not isinstance(declaration, str):
            raise SchemaError(f"Type declaration for field '{name}' must be a string")

        match = _DECLARATION_PATTERN.match(declaration)
        if not match:
            raise SchemaError(f"Invalid type declaration for field '{name}': '{declaration}'")

        base_name, item_name, nullable_marker = match.groups()
        field_type = parse_field_type(base_name)

        item_type = None
        if item_name is not None:
            if field_type is not FieldType.ARRAY:
                raise SchemaError(f"Only array types take an item type, got '{declaration}' for field '{name}'")
            item_type = parse_field_type(item_name)

        return cls(name=name, type=field_type, nullable=nullable_marker is not None, item_type=item_type)


@dataclass(frozen=True)
class Schema:
    """Ordered collection of field schemas."""
    fields: tuple = field(default_factory=tuple)

    def get_field(self, name: str) -> Optional[FieldSchema]:
        for field_schema in self.fields:
            if field_schema.name == name:
                return field_schema
        return None

    @property
    def field_names(self) -> list:
        return [field_schema.name for field_schema in self.fields]

    def __contains__(self, name) -> bool:
        return self.get_field(name) is not None

    def __len__(self) -> int:
        return len(self.fields)

    @classmethod
    def from_dict(cls, declarations: dict) -> 'Schema':
        """
        Build a schema from a {field_name: declaration} mapping.

        Raises:
            SchemaError: If the mapping or any declaration is invalid
        """
        if not isinstance(declarations, dict):
            raise SchemaError("Schema declaration must be a dictionary of field name to type")

        fields = []
        for name, declaration in declarations.items():
            if not isinstance(name, str) or not name.strip():
                raise SchemaError("Schema field names must be non-empty strings")
            fields.append(FieldSchema.from_declaration(name, declaration))

        return cls(fields=tuple(fields))

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> 'Schema':
        """Infer a schema from a DataFrame's dtypes and values."""
        if not isinstance(df, pd.DataFrame):
            raise SchemaError(f"Expected a pandas DataFrame, got {type(df).__name__}")

        fields = []
        for column in df.columns:
            series = df[column]
            field_type = _infer_series_type(series)
            fields.append(FieldSchema(
                name=str(column),
                type=field_type,
                nullable=bool(series.isna().any())
            ))

        schema = cls(fields=tuple(fields))
        logger.debug(f"Inferred schema: {', '.join(f'{f.name}: {f}' for f in schema.fields)}")
        return schema


def _infer_value_type(value: Any) -> FieldType:
    if isinstance(value, (list, tuple, set)):
        return FieldType.ARRAY
    if isinstance(value, dict):
        return FieldType.MAP
    if isinstance(value, (bytes, bytearray)):
        return FieldType.BYTES
    if pd.api.types.is_bool(value):
        return FieldType.BOOLEAN
    return FieldType.STRING


def _infer_series_type(series: pd.Series) -> FieldType:
    """Map a Series to the FieldType of its values."""
    dtype = series.dtype

    if pd.api.types.is_bool_dtype(dtype):
        return FieldType.BOOLEAN
    if pd.api.types.is_integer_dtype(dtype):
        return FieldType.INTEGER
    if pd.api.types.is_float_dtype(dtype):
        return FieldType.FLOAT
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return FieldType.DATETIME
    if pd.api.types.is_timedelta64_dtype(dtype):
        return FieldType.STRING

    # Object columns: look at the actual values
    value_types = {_infer_value_type(value) for value in series.dropna()}
    for complex_type in (FieldType.ARRAY, FieldType.MAP):
        if complex_type in value_types:
            return complex_type
    if value_types == {FieldType.BYTES}:
        return FieldType.BYTES
    if value_types == {FieldType.BOOLEAN}:
        return FieldType.BOOLEAN
    return FieldType.STRING


class StructuredRecord:
    """A single record: field values plus the schema they were declared with."""

    def __init__(self, schema: Schema, values: dict):
        if not isinstance(schema, Schema):
            raise SchemaError("Record schema must be a Schema instance")
        if not isinstance(values, dict):
            raise SchemaError("Record values must be a dictionary")
        self.schema = schema
        self._values = dict(values)

    def get(self, name: str) -> Any:
        """Get a field's raw value, or None if it is unset."""
        return self._values.get(name)

    def to_dict(self) -> dict:
        return dict(self._values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, StructuredRecord):
            return NotImplemented
        return self.schema == other.schema and self._values == other._values

    def __repr__(self) -> str:
        return f"StructuredRecord({self._values!r})"
