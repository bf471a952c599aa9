"""Remote field value to frontmatter string conversion.

Strategies are tried in order and the first whose ``can_handle`` accepts the
value performs the extraction. Order matters: an object exposing both
``name`` and ``displayName`` yields its ``name``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol


class FieldExtractionStrategy(Protocol):
    def can_handle(self, value: Any) -> bool: ...

    def extract(self, value: Any) -> str | None: ...


def _string_property(value: Any, key: str) -> str | None:
    if isinstance(value, Mapping):
        candidate = value.get(key)
        if isinstance(candidate, str):
            return candidate
    return None


class NullFieldStrategy:
    def can_handle(self, value: Any) -> bool:
        return value is None

    def extract(self, value: Any) -> str | None:
        return None


class NamePropertyStrategy:
    """Status, priority, issue type and other ``{"name": ...}`` objects."""

    def can_handle(self, value: Any) -> bool:
        return _string_property(value, "name") is not None

    def extract(self, value: Any) -> str | None:
        return _string_property(value, "name")


class DisplayNamePropertyStrategy:
    """User objects."""

    def can_handle(self, value: Any) -> bool:
        return _string_property(value, "displayName") is not None

    def extract(self, value: Any) -> str | None:
        return _string_property(value, "displayName")


class JsonObjectStrategy:
    def can_handle(self, value: Any) -> bool:
        return isinstance(value, Mapping) or (isinstance(value, Sequence) and not isinstance(value, (str, bytes)))

    def extract(self, value: Any) -> str | None:
        if not isinstance(value, Mapping):
            value = list(value)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


class PrimitiveFieldStrategy:
    def can_handle(self, value: Any) -> bool:
        return True

    def extract(self, value: Any) -> str | None:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


def create_default_extraction_strategies() -> list[FieldExtractionStrategy]:
    return [
        NullFieldStrategy(),
        NamePropertyStrategy(),
        DisplayNamePropertyStrategy(),
        JsonObjectStrategy(),
        PrimitiveFieldStrategy(),
    ]


class FieldExtractor:
    def __init__(self, strategies: Iterable[FieldExtractionStrategy] | None = None) -> None:
        self._strategies: list[FieldExtractionStrategy] = (
            list(strategies) if strategies is not None else create_default_extraction_strategies()
        )

    @property
    def strategies(self) -> tuple[FieldExtractionStrategy, ...]:
        return tuple(self._strategies)

    def with_strategy(self, strategy: FieldExtractionStrategy) -> FieldExtractor:
        """Return a new extractor that consults *strategy* before the current chain."""
        return FieldExtractor([strategy, *self._strategies])

    def extract_value(self, value: Any) -> str | None:
        for strategy in self._strategies:
            if strategy.can_handle(value):
                return strategy.extract(value)
        return None

    def extract(self, fields: Mapping[str, Any], field_name: str) -> str | None:
        return self.extract_value(fields.get(field_name))
