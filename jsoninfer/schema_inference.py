"""Incremental schema inference from JSON samples.

This module provides the engine used by:
- infer: Infer a raw schema from JSON files
- convert_json_to_schema: Write the inferred schema as JSON or YAML

Each sample is folded into one mutable schema tree. The tree only ever
widens: integer becomes number, incompatible types branch into `oneOf`
alternatives, null sets `nullable` and required properties shrink.
"""

import decimal
import io
import logging
from typing import Any, Iterator, List, Optional, Tuple

import ijson

from jsoninfer.errors import SchemaDecodeError
from jsoninfer.rawschema import ObjectState, RawProperty, RawSchema

logger = logging.getLogger(__name__)

Event = Tuple[str, Any]

# Exceptions the ijson backends raise for malformed input. yajl2_c surfaces
# failed number conversions (e.g. integers past the int digit limit) as SystemError.
DECODER_ERRORS = (ijson.JSONError, ValueError, decimal.InvalidOperation, SystemError)

# Containers nested deeper than this are rejected instead of exhausting the stack
MAX_NESTING_DEPTH = 256


def _next_event(events: Iterator[Event]) -> Event:
    try:
        return next(events)
    except StopIteration as e:
        raise SchemaDecodeError("unexpected end of JSON input") from e
    except SchemaDecodeError:
        raise
    except DECODER_ERRORS as e:
        raise SchemaDecodeError(str(e) or type(e).__name__, cause=e) from e


def _value_events(value: Any) -> Iterator[Event]:
    """Generates ijson style parse events for an already decoded value."""
    if value is None:
        yield 'null', None
    elif isinstance(value, bool):
        yield 'boolean', value
    elif isinstance(value, (int, float, decimal.Decimal)):
        yield 'number', value
    elif isinstance(value, str):
        yield 'string', value
    elif isinstance(value, dict):
        yield 'start_map', None
        for key, item in value.items():
            yield 'map_key', str(key)
            yield from _value_events(item)
        yield 'end_map', None
    elif isinstance(value, (list, tuple)):
        yield 'start_array', None
        for item in value:
            yield from _value_events(item)
        yield 'end_array', None
    else:
        raise SchemaDecodeError(f"unsupported value type {type(value).__name__}")


class SchemaInferrer:
    """Infers one schema tree from a sequence of JSON samples.

    The inferrer is not thread safe; callers feeding it from several
    producers must serialize `apply` calls.
    """

    def __init__(self, backend: Optional[str] = 'python'):
        """Initialize the schema inferrer.

        Args:
            backend: Name of the ijson backend ('python', 'yajl2_c', ...).
                The pure Python backend yields each event as soon as it is
                parsed, so decode errors keep their item and property
                context. None picks the fastest backend ijson finds.
        """
        self.backend = backend
        self.parser = ijson.get_backend(backend) if backend else ijson
        self.root = RawSchema()

    def target(self) -> RawSchema:
        """Returns the root of the inferred tree."""
        return self.root

    def apply(self, data: bytes | str) -> None:
        """Decodes one JSON value and merges it into the tree.

        A failure leaves merges of earlier siblings in place.

        Raises:
            SchemaDecodeError: If `data` is not a single well-formed JSON value
        """
        if isinstance(data, str):
            try:
                data = data.encode('utf-8')
            except UnicodeEncodeError as e:
                raise SchemaDecodeError(f"invalid text: {e.reason}", cause=e) from e
        events = iter(self.parser.basic_parse(io.BytesIO(data), use_float=False))
        event, value = _next_event(events)
        self._apply(self.root, event, value, events, 0)
        try:
            extra = next(events)
        except StopIteration:
            return
        except DECODER_ERRORS as e:
            raise SchemaDecodeError(str(e) or type(e).__name__, cause=e) from e
        raise SchemaDecodeError(f"unexpected {extra[0]} after top-level value")

    def apply_value(self, value: Any) -> None:
        """Merges an already decoded value into the tree.

        `int` counts as integral, `float` and `Decimal` as non-integral.
        """
        events = _value_events(value)
        event, item = _next_event(events)
        self._apply(self.root, event, item, events, 0)

    def _apply(self, schema: RawSchema, event: str, value: Any, events: Iterator[Event], depth: int) -> None:
        if event == 'string':
            self._apply_type(schema, 'string')
        elif event == 'number':
            self._apply_number(schema, value)
        elif event == 'null':
            schema.nullable = True
        elif event == 'boolean':
            self._apply_type(schema, 'boolean')
        elif event in ('start_array', 'start_map'):
            if depth >= MAX_NESTING_DEPTH:
                raise SchemaDecodeError(f"exceeded max nesting depth {MAX_NESTING_DEPTH}")
            if event == 'start_array':
                self._apply_type(schema, 'array')
                self._apply_array(schema.alternative_for('array'), events, depth + 1)
            else:
                self._apply_type(schema, 'object')
                self._apply_object(schema.alternative_for('object'), events, depth + 1)
        else:
            raise SchemaDecodeError(f"invalid token {event}")

    def _apply_type(self, schema: RawSchema, tag: str) -> None:
        if schema.apply_type(tag):
            logger.debug("Branched node into union of %s", [alt.type for alt in schema.one_of])

    def _apply_number(self, schema: RawSchema, value: Any) -> None:
        if isinstance(value, int) and not schema.has_type('number'):
            self._apply_type(schema, 'integer')
            return
        if schema.replace_type('integer', 'number'):
            logger.debug("Widened integer to number")
            return
        self._apply_type(schema, 'number')

    def _apply_array(self, schema: RawSchema, events: Iterator[Event], depth: int) -> None:
        i = 0
        while True:
            try:
                event, value = _next_event(events)
                if event == 'end_array':
                    return
                if schema.items is None:
                    schema.items = RawSchema()
                self._apply(schema.items, event, value, events, depth)
            except SchemaDecodeError as e:
                raise e.wrap(f"apply item {i}", i) from e
            i += 1

    def _apply_object(self, schema: RawSchema, events: Iterator[Event], depth: int) -> None:
        first_apply = schema.object_state is ObjectState.UNSEEN
        schema.object_state = ObjectState.SEEN

        props = {prop.name: prop.schema for prop in schema.properties}
        required = set(schema.required)
        this: set = set()
        try:
            while True:
                event, key = _next_event(events)
                if event == 'end_map':
                    break
                this.add(key)
                try:
                    event, value = _next_event(events)
                    if key in props:
                        self._apply(props[key], event, value, events, depth)
                        continue
                    if first_apply:
                        required.add(key)
                    prop = RawSchema()
                    self._apply(prop, event, value, events, depth)
                    schema.properties.append(RawProperty(key, prop))
                    props[key] = prop
                except SchemaDecodeError as e:
                    raise e.wrap(f'apply property "{key}"', key) from e
        except SchemaDecodeError as e:
            raise e.wrap("collect properties") from e

        # Required only ever shrinks after the first object
        schema.required = sorted(key for key in required if key in this)
        schema.properties.sort(key=lambda prop: prop.name)


def infer_schema_from_json(json_values: List[Any], backend: Optional[str] = 'python') -> RawSchema:
    """Infers a raw schema from decoded JSON values.

    Args:
        json_values: List of parsed JSON values
        backend: Optional ijson backend name

    Returns:
        The inferred schema tree
    """
    inferrer = SchemaInferrer(backend=backend)
    for value in json_values:
        inferrer.apply_value(value)
    return inferrer.target()


def infer_schema_from_documents(documents: List[bytes | str], backend: Optional[str] = 'python') -> RawSchema:
    """Infers a raw schema from raw JSON documents.

    Raises:
        SchemaDecodeError: On the first malformed document
    """
    inferrer = SchemaInferrer(backend=backend)
    for document in documents:
        inferrer.apply(document)
    return inferrer.target()
