"""
Minimal CBOR decoder.

Supports only what COSE keys and attestation objects need:

- unsigned and negative integers
- byte strings and UTF-8 text strings
- arrays and maps

Lengths and values may use additional info 0-25 (inline, 1 byte, 2 bytes).
Tags, floats, simple values, 32/64-bit lengths and indefinite-length items
are rejected with UnsupportedEncodingError.

Decoded values map onto plain Python types (int, bytes, str, list) except
maps, which decode to CBORMap so that duplicate keys and key order survive.
"""

from .cursor import ByteCursor
from .errors import UnsupportedEncodingError

MAJOR_UNSIGNED = 0
MAJOR_NEGATIVE = 1
MAJOR_BYTES = 2
MAJOR_TEXT = 3
MAJOR_ARRAY = 4
MAJOR_MAP = 5

MAX_DEPTH = 16  # COSE keys nest one level; attestation objects three


class CBORMap:
    """Ordered (key, value) pairs decoded from a CBOR map.

    Duplicate keys are kept as separate entries. Lookup is a linear scan
    with exact type and value match, first entry wins.
    """

    def __init__(self, items=None):
        self.items = list(items or [])

    def get(self, key, default=None):
        for k, v in self.items:
            if type(k) is type(key) and k == key:
                return v
        return default

    def __contains__(self, key):
        marker = object()
        return self.get(key, marker) is not marker

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __eq__(self, other):
        if not isinstance(other, CBORMap):
            return NotImplemented
        return self.items == other.items

    def __repr__(self):
        return f"CBORMap({self.items!r})"


def _read_argument(cursor, additional_info):
    if additional_info < 24:
        return additional_info
    if additional_info == 24:
        return cursor.read_uint8()
    if additional_info == 25:
        return cursor.read_uint16_be()
    raise UnsupportedEncodingError(
        f"Unsupported additional info {additional_info} at offset {cursor.offset - 1}"
    )


def decode(cursor, depth=0):
    """Decode one CBOR value from `cursor`, advancing past it."""
    if depth > MAX_DEPTH:
        raise UnsupportedEncodingError(f"Nesting deeper than {MAX_DEPTH} levels")

    initial = cursor.read_uint8()
    major_type = initial >> 5
    additional_info = initial & 0x1F

    if major_type > MAJOR_MAP:
        raise UnsupportedEncodingError(
            f"Unsupported major type {major_type} at offset {cursor.offset - 1}"
        )

    argument = _read_argument(cursor, additional_info)

    if major_type == MAJOR_UNSIGNED:
        return argument
    if major_type == MAJOR_NEGATIVE:
        return -1 - argument
    if major_type == MAJOR_BYTES:
        return cursor.read_bytes(argument)
    if major_type == MAJOR_TEXT:
        raw = cursor.read_bytes(argument)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UnsupportedEncodingError(f"Invalid UTF-8 in text string: {e}") from e
    if major_type == MAJOR_ARRAY:
        return [decode(cursor, depth + 1) for _ in range(argument)]

    entries = []
    for _ in range(argument):
        key = decode(cursor, depth + 1)
        value = decode(cursor, depth + 1)
        entries.append((key, value))
    return CBORMap(entries)


def loads(data):
    """Decode the first CBOR value in `data`. Trailing bytes are ignored."""
    return decode(ByteCursor(data))
