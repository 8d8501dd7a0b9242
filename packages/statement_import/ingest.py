"""Load already-tabular rows handed over by the external Row Extractor.

The extractor (CSV/PDF parsing, column mapping) lives outside this package;
it hands rows over as a JSON array of objects with ``date``,
``description``, ``amount`` and ``type`` keys (plus optional ``reference``,
``merchant``, ``balance``). Field values are not interpreted here.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from .models import RawRow


def load_rows_from_json(path: str | PathLike[str]) -> list[RawRow]:
    """Read a JSON array of row objects.

    Raises ``ValueError`` when the document is not an array of objects, and
    lets ``OSError``/``json.JSONDecodeError`` propagate for unreadable files.
    """

    p = Path(path)
    with p.open(encoding="utf-8") as f:
        data: Any = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array of rows in {p}, got {type(data).__name__}")
    bad = [i for i, row in enumerate(data) if not isinstance(row, Mapping)]
    if bad:
        raise ValueError(f"rows must be JSON objects; offending positions: {bad[:10]}")
    return [dict(row) for row in data]


__all__ = ["load_rows_from_json"]
