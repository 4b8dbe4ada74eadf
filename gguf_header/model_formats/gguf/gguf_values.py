# gguf_header/model_formats/gguf/gguf_values.py
"""
Type-tag-driven GGUF value decoding over a forward-only byte cursor.
"""

from __future__ import annotations

import struct
from typing import Dict, List, Union

from .gguf import (
    DEFAULT_LIMITS,
    DecodeLimits,
    InvalidBoolError,
    InvalidUtf8Error,
    NestingTooDeepError,
    UnexpectedEofError,
    UnknownTypeTagError,
    Value,
    ValueType,
)

_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")

SCALAR_STRUCTS: Dict[ValueType, struct.Struct] = {
    ValueType.UINT8: struct.Struct("<B"),
    ValueType.INT8: struct.Struct("<b"),
    ValueType.UINT16: struct.Struct("<H"),
    ValueType.INT16: struct.Struct("<h"),
    ValueType.UINT32: struct.Struct("<I"),
    ValueType.INT32: struct.Struct("<i"),
    ValueType.FLOAT32: struct.Struct("<f"),
    ValueType.UINT64: struct.Struct("<Q"),
    ValueType.INT64: struct.Struct("<q"),
    ValueType.FLOAT64: struct.Struct("<d"),
}


class ByteCursor:
    """Read position over an immutable buffer. Never reads out of bounds."""

    __slots__ = ("_buf", "_pos")

    def __init__(self, buf: Union[bytes, bytearray, memoryview], pos: int = 0):
        view = memoryview(buf)
        self._buf = view if view.format == "B" and view.ndim == 1 else view.cast("B")
        self._pos = pos

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._pos

    def require(self, n: int) -> None:
        """Raise UnexpectedEofError unless ``n`` bytes remain."""
        if n > self.remaining:
            raise UnexpectedEofError(needed=n, remaining=self.remaining, offset=self._pos)

    def take(self, n: int) -> memoryview:
        self.require(n)
        view = self._buf[self._pos : self._pos + n]
        self._pos += n
        return view

    def unpack(self, st: struct.Struct) -> Union[int, float]:
        self.require(st.size)
        (v,) = st.unpack_from(self._buf, self._pos)
        self._pos += st.size
        return v

    def u32(self) -> int:
        return self.unpack(_U32)

    def u64(self) -> int:
        return self.unpack(_U64)


def read_value_type(cur: ByteCursor) -> ValueType:
    code = cur.u32()
    try:
        return ValueType(code)
    except ValueError:
        raise UnknownTypeTagError(code) from None


def _to_bool(byte: int) -> bool:
    if byte == 0:
        return False
    if byte == 1:
        return True
    raise InvalidBoolError(byte)


def read_scalar(cur: ByteCursor, value_type: ValueType) -> Value:
    """Decode one fixed-width value of ``value_type``."""
    if value_type is ValueType.BOOL:
        return Value(ValueType.BOOL, _to_bool(cur.take(1)[0]))
    st = SCALAR_STRUCTS.get(value_type)
    if st is None:
        raise TypeError(f"{value_type.name} is not a fixed-width type")
    return Value(value_type, cur.unpack(st))


def read_str(cur: ByteCursor) -> str:
    """Decode a u64-length-prefixed UTF-8 string (no terminator)."""
    n = cur.u64()
    start = cur.position
    raw = cur.take(n)  # bounds-checked against the buffer before any copy
    try:
        return bytes(raw).decode("utf-8", "strict")
    except UnicodeDecodeError as e:
        raise InvalidUtf8Error(start) from e


def read_string(cur: ByteCursor) -> Value:
    return Value(ValueType.STRING, read_str(cur))


def _read_elements(
    cur: ByteCursor, elem_type: ValueType, count: int, depth: int, limits: DecodeLimits
) -> List[Value]:
    if count == 0:
        return []
    st = SCALAR_STRUCTS.get(elem_type)
    if st is not None:
        raw = cur.take(st.size * count)
        return [Value(elem_type, v) for (v,) in st.iter_unpack(raw)]
    if elem_type is ValueType.BOOL:
        return [Value(ValueType.BOOL, _to_bool(b)) for b in cur.take(count)]
    items = []
    for _ in range(count):
        items.append(read_value(cur, elem_type, depth, limits))
    return items


def read_array(cur: ByteCursor, depth: int = 1, limits: DecodeLimits = DEFAULT_LIMITS) -> Value:
    """Decode an array body: element type tag, u64 count, then the elements.

    Args:
        cur: Cursor positioned at the element type tag.
        depth: Nesting level of this array; a top-level array is 1.
        limits: Decoder limits.
    """
    if depth > limits.max_depth:
        raise NestingTooDeepError(depth, limits.max_depth)
    elem_type = read_value_type(cur)
    count = cur.u64()
    # every element needs at least min_width bytes, so reject impossible counts
    # before building anything
    cur.require(count * elem_type.min_width)
    items = _read_elements(cur, elem_type, count, depth, limits)
    return Value(ValueType.ARRAY, tuple(items), element_type=elem_type)


def read_value(
    cur: ByteCursor,
    value_type: ValueType,
    depth: int = 0,
    limits: DecodeLimits = DEFAULT_LIMITS,
) -> Value:
    """Decode one value of ``value_type``; ``depth`` is the enclosing array depth."""
    if value_type is ValueType.STRING:
        return read_string(cur)
    if value_type is ValueType.ARRAY:
        return read_array(cur, depth + 1, limits)
    return read_scalar(cur, value_type)
