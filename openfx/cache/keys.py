"""Deterministic cache keys derived from request shape."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from openfx.models import RequestShape

FIELD_SEPARATOR = "|"


@dataclass(frozen=True, slots=True)
class CacheKeyBuilder:
    """Hash the normalized request fields in a fixed order.

    Symbols are sorted before hashing so their order never changes the key.
    """

    prefix: str = "openfx"

    def build(self, shape: RequestShape) -> str:
        symbols = ",".join(sorted(shape.symbols)) if shape.symbols else ""
        fields = (
            shape.kind.value,
            shape.base,
            symbols,
            shape.date.isoformat() if shape.date else "",
            shape.end_date.isoformat() if shape.end_date else "",
        )
        digest = hashlib.sha256(FIELD_SEPARATOR.join(fields).encode("utf-8")).hexdigest()
        return f"{self.prefix}_{shape.kind.value}__{digest}"


__all__ = ["CacheKeyBuilder"]
