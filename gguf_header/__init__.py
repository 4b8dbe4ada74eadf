# gguf_header/__init__.py
"""
gguf_header
===========

Pure-Python decoder for the GGUF model-file header: format version, tensor
count and the ordered, typed key/value metadata that describes the model.
"""
from __future__ import annotations

from importlib.metadata import version as _pkg_version

from loguru import logger

from gguf_header.model_formats.gguf.gguf import (
    BadMagicError,
    DecodeLimits,
    GGUFParseError,
    Header,
    InvalidBoolError,
    InvalidUtf8Error,
    MetadataEntry,
    NestingTooDeepError,
    UnexpectedEofError,
    UnknownTypeTagError,
    Value,
    ValueType,
)
from gguf_header.model_formats.gguf.gguf_header import decode_header, decode_header_prefix

__all__ = [
    "__version__",
    "BadMagicError",
    "DecodeLimits",
    "GGUFParseError",
    "Header",
    "InvalidBoolError",
    "InvalidUtf8Error",
    "MetadataEntry",
    "NestingTooDeepError",
    "UnexpectedEofError",
    "UnknownTypeTagError",
    "Value",
    "ValueType",
    "decode_header",
    "decode_header_prefix",
]

try:
    # Read version dynamically from installed package metadata
    __version__: str = _pkg_version("gguf-header")
except Exception:  # pragma: no cover - fallback for development environments
    __version__ = "0.0.0-dev"

logger.disable(__name__)
