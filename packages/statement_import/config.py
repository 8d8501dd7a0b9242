"""Runtime configuration for the import engine.

Settings are a validated, immutable pydantic model. Defaults suit statement
sized batches; deployments override them through ``SI_*`` environment
variables (see :func:`load_settings`). The categorizer rule table lives in
``categorization.py`` as static data and is not configurable at runtime.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Formats tried in order. ISO first so already-normalized exports stay cheap.
DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d-%b-%Y",
)

DEFAULT_FUZZY_THRESHOLD: float = 0.8

_ENV_FIELDS: dict[str, str] = {
    "SI_FUZZY_THRESHOLD": "fuzzy_similarity_threshold",
    "SI_DATE_TOLERANCE_DAYS": "date_tolerance_days",
    "SI_LARGE_AMOUNT_WARNING": "large_amount_warning",
    "SI_MAX_DESCRIPTION_LENGTH": "max_description_length",
    "SI_DATE_FORMATS": "date_formats",
    "SI_LOCK_TIMEOUT_SECONDS": "lock_timeout_seconds",
}


class ImportSettings(BaseModel):
    """Tunables for validation, duplicate matching, and commit locking."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fuzzy_similarity_threshold: float = Field(DEFAULT_FUZZY_THRESHOLD, ge=0.0, le=1.0)
    # Only widens fuzzy matching; exact matching always requires the same date.
    date_tolerance_days: int = Field(0, ge=0)
    large_amount_warning: Decimal = Field(Decimal("10000"), gt=0)
    max_description_length: int = Field(255, gt=0)
    date_formats: tuple[str, ...] = DEFAULT_DATE_FORMATS
    # None waits indefinitely for a concurrent import on the same account.
    lock_timeout_seconds: float | None = Field(None, gt=0)

    @field_validator("date_formats", mode="before")
    @classmethod
    def _split_formats(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [part.strip() for part in v.split(",")]
        if isinstance(v, list | tuple):
            items = tuple(s for s in v if isinstance(s, str) and s.strip())
            if not items:
                raise ValueError("date_formats must contain at least one format")
            return items
        return v


def load_settings(env: Mapping[str, str] | None = None) -> ImportSettings:
    """Build :class:`ImportSettings` from ``SI_*`` environment variables.

    Unset or blank variables keep their defaults. Invalid values raise
    ``pydantic.ValidationError`` naming the offending field.
    """

    source = os.environ if env is None else env
    values: dict[str, Any] = {}
    for var, field in _ENV_FIELDS.items():
        raw = source.get(var)
        if raw is None or not raw.strip():
            continue
        values[field] = raw.strip()
    return ImportSettings(**values)


__all__ = [
    "DEFAULT_DATE_FORMATS",
    "DEFAULT_FUZZY_THRESHOLD",
    "ImportSettings",
    "load_settings",
]
