"""
Message Document Conversion Tests

Uses protobuf's bundled well-known types so no generated code is needed.

Key Scenarios:
- 32-bit integers stay numbers, 64-bit integers become decimal strings
- Nested, repeated and map fields
- Unsupported kinds and empty messages are left out

Usage:
    pytest tests/test_message.py
"""

import json

import pytest

pytest.importorskip("google.protobuf")

from google.protobuf import descriptor_pb2, struct_pb2, timestamp_pb2, wrappers_pb2  # noqa: E402

from nuri.message import message_to_document, message_to_json  # noqa: E402


def test_integer_widths() -> None:
    stamp = timestamp_pb2.Timestamp(seconds=1234567890123, nanos=5)
    assert message_to_document(stamp) == {"seconds": "1234567890123", "nanos": 5}


@pytest.mark.parametrize(
    "message, expected",
    [
        (wrappers_pb2.Int32Value(value=-7), {"value": -7}),
        (wrappers_pb2.UInt32Value(value=2**32 - 1), {"value": 2**32 - 1}),
        (wrappers_pb2.Int64Value(value=2**62), {"value": str(2**62)}),
        (wrappers_pb2.Int64Value(value=-5), {"value": "-5"}),
        (wrappers_pb2.UInt64Value(value=2**64 - 1), {"value": str(2**64 - 1)}),
        (wrappers_pb2.StringValue(value="hé"), {"value": "hé"}),
        (wrappers_pb2.BytesValue(value=b"\x00\xff"), {"value": "\x00\xff"}),
    ],
)
def test_scalar_fields(message, expected) -> None:
    assert message_to_document(message) == expected


@pytest.mark.parametrize(
    "message",
    [wrappers_pb2.BoolValue(value=True), wrappers_pb2.DoubleValue(value=1.5), timestamp_pb2.Timestamp()],
)
def test_skipped_and_unset_fields(message) -> None:
    assert message_to_document(message) == {}


def test_nested_and_repeated_fields() -> None:
    proto = descriptor_pb2.FileDescriptorProto(
        name="a.proto",
        package="pkg",
        dependency=["b.proto", "c.proto"],
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="M",
                field=[descriptor_pb2.FieldDescriptorProto(name="f", number=1)],
            )
        ],
    )
    assert message_to_document(proto) == {
        "name": "a.proto",
        "package": "pkg",
        "dependency": ["b.proto", "c.proto"],
        "message_type": [{"name": "M", "field": [{"name": "f", "number": 1}]}],
    }


def test_empty_nested_message_is_omitted() -> None:
    proto = descriptor_pb2.FileDescriptorProto(name="x")
    proto.options.SetInParent()
    assert proto.HasField("options")
    assert message_to_document(proto) == {"name": "x"}


def test_empty_repeated_element_keeps_its_position() -> None:
    proto = descriptor_pb2.FileDescriptorProto(
        message_type=[descriptor_pb2.DescriptorProto(), descriptor_pb2.DescriptorProto(name="N")]
    )
    assert message_to_document(proto) == {"message_type": [None, {"name": "N"}]}


def test_map_fields() -> None:
    struct = struct_pb2.Struct()
    struct.update({"a": "x", "n": 1.5})
    assert message_to_document(struct) == {"fields": {"a": {"string_value": "x"}, "n": {}}}


def test_message_to_json() -> None:
    text = message_to_json(timestamp_pb2.Timestamp(seconds=2**60, nanos=1), sort_keys=True)
    assert json.loads(text) == {"nanos": 1, "seconds": str(2**60)}


def test_conversions_do_not_share_state() -> None:
    first = message_to_document(wrappers_pb2.Int64Value(value=1))
    second = message_to_document(wrappers_pb2.Int64Value(value=2))
    assert first == {"value": "1"}
    assert second == {"value": "2"}
