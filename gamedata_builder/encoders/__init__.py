"""Output encoders and the format tag -> encoder table.

The encoder set is closed: json, php and fbs.
"""

from __future__ import annotations

from typing import Any

from .base import EncodeError, Encoder
from .fbs_encoder import FlatBuffersEncoder
from .json_encoder import JsonEncoder
from .php_encoder import PhpEncoder

__all__ = [
    "ENCODERS",
    "EncodeError",
    "Encoder",
    "FlatBuffersEncoder",
    "JsonEncoder",
    "PhpEncoder",
    "create_encoder",
]

ENCODERS: dict[str, type[Encoder]] = {
    cls.format: cls for cls in (JsonEncoder, PhpEncoder, FlatBuffersEncoder)
}


def create_encoder(fmt: str, options: dict[str, Any] | None = None) -> Encoder:
    """Instantiate the encoder for ``fmt``.

    Raises:
        EncodeError: unknown format tag
    """
    try:
        encoder_cls = ENCODERS[fmt]
    except KeyError:
        raise EncodeError(f"unknown output format: {fmt}") from None
    return encoder_cls(options)
