"""Resolves raw schemas into single-typed schemas.

A raw `type` may list several tags, e.g. `["string", "null"]`. Resolution
turns a co-occurring `null` into the nullable flag, collapses one remaining
tag into a plain typed schema and several remaining tags into a `oneOf`
union of single-typed schemas. Tags outside the vocabulary are rejected.
"""

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from jsoninfer.common import pointer_of
from jsoninfer.errors import SchemaValidationError
from jsoninfer.rawschema import RawSchema, load_raw_schema


class SchemaType(Enum):
    """The type of a resolved schema."""
    EMPTY = ''
    STRING = 'string'
    INTEGER = 'integer'
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    ARRAY = 'array'
    OBJECT = 'object'
    NULL = 'null'


VOCABULARY: Dict[str, SchemaType] = {t.value: t for t in SchemaType if t is not SchemaType.EMPTY}


@dataclass
class Property:
    """A resolved object property."""
    name: str
    schema: 'Schema'
    required: bool = False


@dataclass
class Schema:
    """A resolved schema with exactly one type."""
    type: SchemaType = SchemaType.EMPTY
    nullable: bool = False
    properties: List[Property] = field(default_factory=list)
    items: Optional['Schema'] = None
    one_of: List['Schema'] = field(default_factory=list)
    pointer: str = ''


class SchemaResolver:
    """Converts RawSchema trees into Schema trees."""

    def resolve(self, raw: RawSchema, parts: Optional[List[str]] = None) -> Schema:
        """Resolves a raw schema.

        Args:
            raw: The raw schema
            parts: Path of `raw` inside the document, used in error pointers

        Returns:
            The resolved schema

        Raises:
            SchemaValidationError: If a type tag is outside the vocabulary
        """
        parts = parts or []
        pointer = pointer_of(parts)
        types: List[SchemaType] = []
        nullable = raw.nullable
        for tag in raw.type:
            if tag not in VOCABULARY:
                raise SchemaValidationError(f"unknown type {tag!r}", pointer_of(parts + ['type']))
            types.append(VOCABULARY[tag])

        # null next to another type only marks the schema nullable
        if len(types) > 1 and SchemaType.NULL in types:
            types = [t for t in types if t is not SchemaType.NULL]
            nullable = True

        schema = Schema(nullable=nullable, pointer=pointer)
        if len(types) == 1:
            schema.type = types[0]
            self._resolve_structure(schema, raw, parts)
        elif len(types) > 1:
            for t in types:
                alternative = Schema(type=t, pointer=pointer)
                self._resolve_structure(alternative, raw, parts)
                schema.one_of.append(alternative)
        else:
            self._resolve_structure(schema, raw, parts)

        for i, alt in enumerate(raw.one_of):
            schema.one_of.append(self.resolve(alt, parts + ['oneOf', str(i)]))
        return schema

    def _resolve_structure(self, schema: Schema, raw: RawSchema, parts: List[str]) -> None:
        """Copies properties and items onto the schema that can hold them."""
        if schema.type in (SchemaType.OBJECT, SchemaType.EMPTY):
            required = set(raw.required)
            for prop in raw.properties:
                schema.properties.append(Property(
                    name=prop.name,
                    schema=self.resolve(prop.schema, parts + ['properties', prop.name]),
                    required=prop.name in required,
                ))
        if schema.type in (SchemaType.ARRAY, SchemaType.EMPTY) and raw.items is not None:
            schema.items = self.resolve(raw.items, parts + ['items'])


def resolve_raw_schema(raw: RawSchema) -> Schema:
    """Resolves a raw schema tree."""
    return SchemaResolver().resolve(raw)


def schema_to_dict(schema: Schema) -> Dict[str, Any]:
    """Renders a resolved schema into a JSON Schema style dictionary."""
    result: Dict[str, Any] = {}
    if schema.type is not SchemaType.EMPTY:
        result['type'] = schema.type.value
    if schema.nullable:
        result['nullable'] = True
    if schema.properties:
        result['properties'] = {p.name: schema_to_dict(p.schema) for p in schema.properties}
        required = [p.name for p in schema.properties if p.required]
        if required:
            result['required'] = required
    if schema.items is not None:
        result['items'] = schema_to_dict(schema.items)
    if schema.one_of:
        result['oneOf'] = [schema_to_dict(alt) for alt in schema.one_of]
    return result


def convert_raw_schema(raw_schema_file: str, schema_file: str) -> None:
    """Resolves a raw JSON or YAML schema file and writes the result as JSON.

    Args:
        raw_schema_file: Path to the raw schema
        schema_file: Output path for the resolved schema
    """
    with open(raw_schema_file, 'r', encoding='utf-8') as f:
        raw = load_raw_schema(f.read())

    schema = resolve_raw_schema(raw)

    output_dir = os.path.dirname(schema_file)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)

    with open(schema_file, 'w', encoding='utf-8') as f:
        json.dump(schema_to_dict(schema), f, indent=2)
