# gguf_header/model_formats/gguf/gguf.py
"""
GGUF header structures, value types and exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterator, Optional, Tuple, Union

GGUF_MAGIC = b"GGUF"
MAX_DEPTH_CEILING = 128


class ValueType(IntEnum):
    """GGUF metadata value types, keyed by their on-disk type tag."""

    UINT8 = 0
    INT8 = 1
    UINT16 = 2
    INT16 = 3
    UINT32 = 4
    INT32 = 5
    FLOAT32 = 6
    BOOL = 7
    STRING = 8
    ARRAY = 9
    UINT64 = 10
    INT64 = 11
    FLOAT64 = 12

    @property
    def fixed_width(self) -> Optional[int]:
        """Encoded size in bytes, or None for variable-width types."""
        return _FIXED_WIDTHS.get(self)

    @property
    def min_width(self) -> int:
        """Smallest number of bytes a value of this type can occupy."""
        if self is ValueType.STRING:
            return 8  # u64 length
        if self is ValueType.ARRAY:
            return 12  # u32 element type + u64 count
        return _FIXED_WIDTHS[self]

    @property
    def is_scalar(self) -> bool:
        return self in _FIXED_WIDTHS


_FIXED_WIDTHS = {
    ValueType.UINT8: 1,
    ValueType.INT8: 1,
    ValueType.UINT16: 2,
    ValueType.INT16: 2,
    ValueType.UINT32: 4,
    ValueType.INT32: 4,
    ValueType.FLOAT32: 4,
    ValueType.BOOL: 1,
    ValueType.UINT64: 8,
    ValueType.INT64: 8,
    ValueType.FLOAT64: 8,
}


ValueData = Union[int, float, bool, str, Tuple["Value", ...]]


@dataclass(frozen=True)
class Value:
    """A decoded metadata value, tagged with its ValueType.

    Arrays carry the shared element type and a tuple of Values; every other
    type carries a plain Python scalar or str.
    """

    type: ValueType
    data: ValueData
    element_type: Optional[ValueType] = None

    def to_python(self) -> Any:
        """Recursively convert to plain Python objects (arrays become lists)."""
        if self.type is ValueType.ARRAY:
            return [v.to_python() for v in self.data]
        return self.data


@dataclass(frozen=True)
class MetadataEntry:
    key: str
    type: ValueType
    value: Value


@dataclass(frozen=True)
class Header:
    version: int
    tensor_count: int
    metadata: Tuple[MetadataEntry, ...]

    @property
    def metadata_count(self) -> int:
        return len(self.metadata)

    def keys(self) -> Iterator[str]:
        """Metadata keys in file order, duplicates included."""
        return (e.key for e in self.metadata)

    def entry(self, key: str) -> Optional[MetadataEntry]:
        """First entry with ``key``, or None."""
        for e in self.metadata:
            if e.key == key:
                return e
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Python value of the first entry with ``key``."""
        e = self.entry(key)
        return default if e is None else e.value.to_python()

    @property
    def architecture(self) -> Optional[str]:
        e = self.entry("general.architecture")
        if e is None or e.type is not ValueType.STRING:
            return None
        return e.value.data


@dataclass(frozen=True)
class DecodeLimits:
    """Decoder hardening knobs.

    Attributes:
        max_depth: Maximum array nesting; a top-level array is depth 1.
    """

    max_depth: int = 64

    def __post_init__(self) -> None:
        # Each nesting level costs three frames (read_value, read_array,
        # _read_elements); the ceiling stays well under the default recursion limit.
        if not 1 <= self.max_depth <= MAX_DEPTH_CEILING:
            raise ValueError(
                f"max_depth must be between 1 and {MAX_DEPTH_CEILING}, got {self.max_depth}"
            )


DEFAULT_LIMITS = DecodeLimits()


class GGUFParseError(Exception):
    """Raised when a GGUF header is malformed."""


class UnexpectedEofError(GGUFParseError):
    def __init__(self, needed: int, remaining: int, offset: int):
        self.needed = needed
        self.remaining = remaining
        self.offset = offset
        super().__init__(
            f"Read beyond EOF at offset {offset}: need {needed} bytes, {remaining} remain"
        )


class BadMagicError(GGUFParseError):
    def __init__(self, found: bytes):
        self.found = found
        super().__init__(f"Invalid magic {found!r}; not GGUF")


class UnknownTypeTagError(GGUFParseError):
    def __init__(self, code: int):
        self.code = code
        super().__init__(f"Unknown GGUF value type 0x{code:x}")


class InvalidUtf8Error(GGUFParseError):
    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f"String at offset {offset} is not valid UTF-8")


class InvalidBoolError(GGUFParseError):
    def __init__(self, byte: int):
        self.byte = byte
        super().__init__(f"Invalid bool byte 0x{byte:02x}; expected 0 or 1")


class NestingTooDeepError(GGUFParseError):
    def __init__(self, depth: int, max_depth: int):
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(f"Array nesting depth {depth} exceeds limit {max_depth}")
