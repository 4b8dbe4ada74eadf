# gguf_header/model_formats/gguf/gguf_header.py
"""
GGUF header assembly: magic, version, counts and the metadata KV list.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from loguru import logger

from .gguf import (
    DEFAULT_LIMITS,
    GGUF_MAGIC,
    BadMagicError,
    DecodeLimits,
    Header,
    MetadataEntry,
)
from .gguf_values import ByteCursor, read_str, read_value, read_value_type

KNOWN_VERSIONS = (2, 3)

Buffer = Union[bytes, bytearray, memoryview]


def read_metadata_entry(cur: ByteCursor, limits: DecodeLimits = DEFAULT_LIMITS) -> MetadataEntry:
    key = read_str(cur)
    value_type = read_value_type(cur)
    value = read_value(cur, value_type, 0, limits)
    return MetadataEntry(key=key, type=value_type, value=value)


def _read_magic(cur: ByteCursor) -> None:
    found = bytes(cur.take(min(4, cur.remaining)))
    if found != GGUF_MAGIC:
        raise BadMagicError(found)


def decode_header_prefix(
    buf: Buffer, *, limits: Optional[DecodeLimits] = None
) -> Tuple[Header, int]:
    """Decode the GGUF header at the start of ``buf``.

    Args:
        buf: Bytes starting at the GGUF magic. Trailing bytes (tensor infos,
            tensor data) are left untouched.
        limits: Decoder limits; defaults to ``DEFAULT_LIMITS``.

    Returns:
        The decoded Header and the offset of the first byte after it.

    Raises:
        GGUFParseError: A subclass naming the specific failure.
    """
    limits = limits or DEFAULT_LIMITS
    cur = ByteCursor(buf)
    _read_magic(cur)

    version = cur.u32()
    tensor_count = cur.u64()
    metadata_count = cur.u64()
    logger.debug(
        "GGUF v{version}: {n_tensors} tensors, {n_kv} metadata entries",
        version=version,
        n_tensors=tensor_count,
        n_kv=metadata_count,
    )
    if version not in KNOWN_VERSIONS:
        logger.warning("Unexpected GGUF version {version}; decoding as v3", version=version)

    metadata: List[MetadataEntry] = []
    for _ in range(metadata_count):
        metadata.append(read_metadata_entry(cur, limits))

    header = Header(version=version, tensor_count=tensor_count, metadata=tuple(metadata))
    return header, cur.position


def decode_header(buf: Buffer, *, limits: Optional[DecodeLimits] = None) -> Header:
    """Decode the GGUF header at the start of ``buf``."""
    header, _ = decode_header_prefix(buf, limits=limits)
    return header
