"""nuri.message
Converts protobuf messages into plain documents (dicts, lists, str and int)
that can be handed to json.dumps.

64-bit integers are written as decimal strings so that consumers limited to
53-bit-safe numbers (JavaScript, many JSON decoders) do not lose precision.
"""

import json

from typing import Any

from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import Message

_INT32_TYPES: frozenset[int] = frozenset(
    (
        FieldDescriptor.TYPE_INT32,
        FieldDescriptor.TYPE_UINT32,
        FieldDescriptor.TYPE_SINT32,
        FieldDescriptor.TYPE_FIXED32,
        FieldDescriptor.TYPE_SFIXED32,
    )
)

_INT64_TYPES: frozenset[int] = frozenset(
    (
        FieldDescriptor.TYPE_INT64,
        FieldDescriptor.TYPE_UINT64,
        FieldDescriptor.TYPE_SINT64,
        FieldDescriptor.TYPE_FIXED64,
        FieldDescriptor.TYPE_SFIXED64,
    )
)

# Anything not listed here (bool, float, double, enum, group) is left out of the document.
_SUPPORTED_TYPES: frozenset[int] = _INT32_TYPES | _INT64_TYPES | frozenset(
    (
        FieldDescriptor.TYPE_STRING,
        FieldDescriptor.TYPE_BYTES,
        FieldDescriptor.TYPE_MESSAGE,
    )
)


def _convert_scalar(field: FieldDescriptor, value: Any) -> Any:
    if field.type in _INT32_TYPES:
        return int(value)
    if field.type in _INT64_TYPES:
        return str(value)
    if field.type == FieldDescriptor.TYPE_BYTES:
        # latin-1 maps every byte to exactly one code point, so nothing is lost.
        return value.decode("latin-1")
    return value


def _is_repeated(field: FieldDescriptor) -> bool:
    return field.is_repeated


def _is_map(field: FieldDescriptor) -> bool:
    return field.message_type is not None and field.message_type.GetOptions().map_entry


def _convert_map(field: FieldDescriptor, value: Any) -> dict[str, Any]:
    value_field: FieldDescriptor = field.message_type.fields_by_name["value"]
    result: dict[str, Any] = {}
    if value_field.type not in _SUPPORTED_TYPES:
        return result
    for key in value:
        if value_field.type == FieldDescriptor.TYPE_MESSAGE:
            result[str(key)] = message_to_document(value[key])
        else:
            result[str(key)] = _convert_scalar(value_field, value[key])
    return result


def message_to_document(message: Message) -> dict[str, Any]:
    """Walks the fields that are set on message and returns them keyed by field name.

    Nested messages become nested dicts and are omitted when empty. Repeated fields
    become lists; an empty message inside a repeated field becomes None so that
    positions are preserved. Map fields become dicts keyed by the string form of the key.
    """
    document: dict[str, Any] = {}
    for field, value in message.ListFields():
        if field.type not in _SUPPORTED_TYPES:
            continue
        if _is_map(field):
            document[field.name] = _convert_map(field, value)
        elif _is_repeated(field):
            if field.type == FieldDescriptor.TYPE_MESSAGE:
                document[field.name] = [
                    message_to_document(item) if item.ByteSize() != 0 else None for item in value
                ]
            else:
                document[field.name] = [_convert_scalar(field, item) for item in value]
        elif field.type == FieldDescriptor.TYPE_MESSAGE:
            if value.ByteSize() != 0:
                document[field.name] = message_to_document(value)
        else:
            document[field.name] = _convert_scalar(field, value)
    return document


def message_to_json(message: Message, **kwargs: Any) -> str:
    return json.dumps(message_to_document(message), **kwargs)
