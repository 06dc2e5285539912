"""Raw schema tree used by JSON schema inference.

This module provides:
- RawSchema: a mutable node of the inferred schema tree
- RawProperty: a named child of an object node
- Rendering of the tree to plain dicts, JSON and YAML and back
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import yaml
from jsoncomparison import NO_DIFF, Compare

from jsoninfer.common import pointer_of
from jsoninfer.errors import SchemaValidationError

# Tags the inference engine writes, in rendering order
TYPE_ORDER: List[str] = ['string', 'integer', 'number', 'boolean', 'array', 'object']


class ObjectState(Enum):
    """Tracks whether an object was ever observed at a node."""
    UNSEEN = 'unseen'
    SEEN = 'seen'


@dataclass
class RawProperty:
    """A named property of an object node."""
    name: str
    schema: 'RawSchema'


@dataclass
class RawSchema:
    """A node of the inferred schema tree.

    A node is either typed (zero or one tag in `type`, optionally nullable)
    or branched (non-empty `one_of`, each alternative typed). Raw documents
    read back with `from_dict` may carry several tags in `type`; the
    resolver interprets those.
    """
    type: List[str] = field(default_factory=list)
    nullable: bool = False
    properties: List[RawProperty] = field(default_factory=list)
    required: List[str] = field(default_factory=list)
    items: Optional['RawSchema'] = None
    one_of: List['RawSchema'] = field(default_factory=list)
    object_state: ObjectState = ObjectState.UNSEEN

    @property
    def is_branched(self) -> bool:
        return len(self.one_of) > 0

    def has_type(self, tag: str) -> bool:
        """Checks the own tags and the tags of every alternative."""
        if tag in self.type:
            return True
        return any(tag in alt.type for alt in self.one_of)

    def apply_type(self, tag: str) -> bool:
        """Ensures the node accepts `tag`.

        Returns True when the node had to branch into a union.
        """
        if self.has_type(tag):
            return False
        if self.one_of:
            self.one_of.append(RawSchema(type=[tag]))
            return False
        if not self.type:
            self.type = [tag]
            return False
        self.branch(tag)
        return True

    def branch(self, tag: str) -> None:
        """Turns a typed node into a union.

        The current description moves into the first alternative and a new
        alternative carrying `tag` is appended. `nullable` stays on this node.
        """
        old = RawSchema(
            type=self.type,
            properties=self.properties,
            required=self.required,
            items=self.items,
            object_state=self.object_state,
        )
        self.type = []
        self.properties = []
        self.required = []
        self.items = None
        self.object_state = ObjectState.UNSEEN
        self.one_of = [old, RawSchema(type=[tag])]

    def replace_type(self, old_tag: str, new_tag: str) -> bool:
        """Replaces `old_tag` in place, on the node or in its first matching alternative."""
        for node in [self] + self.one_of:
            if old_tag in node.type:
                node.type = [new_tag if t == old_tag else t for t in node.type]
                return True
        return False

    def alternative_for(self, tag: str) -> 'RawSchema':
        """Returns the node that carries structure for `tag`."""
        for alt in self.one_of:
            if tag in alt.type:
                return alt
        return self

    def get_property(self, name: str) -> Optional['RawSchema']:
        for prop in self.properties:
            if prop.name == name:
                return prop.schema
        return None


def _type_rank(schema: RawSchema) -> int:
    for tag in schema.type:
        if tag in TYPE_ORDER:
            return TYPE_ORDER.index(tag)
    return len(TYPE_ORDER)


def to_dict(schema: RawSchema, sort_alternatives: bool = False) -> Dict[str, Any]:
    """Renders a schema tree into a JSON Schema style dictionary.

    Args:
        schema: The root of the tree
        sort_alternatives: Order union alternatives by type instead of first occurrence

    Returns:
        The rendered schema
    """
    result: Dict[str, Any] = {}
    if len(schema.type) == 1:
        result['type'] = schema.type[0]
    elif schema.type:
        result['type'] = list(schema.type)
    if schema.nullable:
        result['nullable'] = True
    if schema.object_state is ObjectState.SEEN or schema.properties:
        result['properties'] = {
            prop.name: to_dict(prop.schema, sort_alternatives) for prop in schema.properties
        }
    if schema.required:
        result['required'] = list(schema.required)
    if schema.items is not None:
        result['items'] = to_dict(schema.items, sort_alternatives)
    if schema.one_of:
        alternatives = schema.one_of
        if sort_alternatives:
            alternatives = sorted(alternatives, key=_type_rank)
        result['oneOf'] = [to_dict(alt, sort_alternatives) for alt in alternatives]
    return result


def _parse_type(value: Any, parts: List[str]) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(t, str) for t in value):
        return list(value)
    raise SchemaValidationError(f"invalid type value {json.dumps(value)}", pointer_of(parts + ['type']))


def from_dict(data: Dict[str, Any], parts: Optional[List[str]] = None) -> RawSchema:
    """Parses a dictionary produced by `to_dict` (or written by hand) into a tree."""
    parts = parts or []
    if not isinstance(data, dict):
        raise SchemaValidationError("schema must be an object", pointer_of(parts))
    schema = RawSchema()
    if 'type' in data:
        schema.type = _parse_type(data['type'], parts)
    schema.nullable = bool(data.get('nullable', False))
    if 'properties' in data:
        properties = data['properties']
        if not isinstance(properties, dict):
            raise SchemaValidationError("properties must be an object", pointer_of(parts + ['properties']))
        schema.object_state = ObjectState.SEEN
        for name, prop in properties.items():
            schema.properties.append(RawProperty(name, from_dict(prop, parts + ['properties', name])))
    if 'required' in data:
        required = data['required']
        if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
            raise SchemaValidationError("required must be a list of names", pointer_of(parts + ['required']))
        schema.required = list(required)
    if 'items' in data:
        schema.items = from_dict(data['items'], parts + ['items'])
    if 'oneOf' in data:
        if not isinstance(data['oneOf'], list):
            raise SchemaValidationError("oneOf must be a list", pointer_of(parts + ['oneOf']))
        schema.one_of = [from_dict(alt, parts + ['oneOf', str(i)]) for i, alt in enumerate(data['oneOf'])]
    return schema


def to_json(schema: RawSchema, sort_alternatives: bool = False, indent: int = 2) -> str:
    return json.dumps(to_dict(schema, sort_alternatives), indent=indent)


def to_yaml(schema: RawSchema, sort_alternatives: bool = False) -> str:
    return yaml.safe_dump(to_dict(schema, sort_alternatives), sort_keys=False, default_flow_style=False)


def load_raw_schema(text: str) -> RawSchema:
    """Loads a raw schema from JSON or YAML text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = yaml.safe_load(text)
    return from_dict(data)


def schemas_equivalent(left: RawSchema, right: RawSchema) -> bool:
    """Compares two trees, ignoring the insertion order of union alternatives."""
    left_dict, right_dict = to_dict(left, True), to_dict(right, True)
    comparer = Compare()
    return comparer.check(left_dict, right_dict) == NO_DIFF and comparer.check(right_dict, left_dict) == NO_DIFF
