"""Provenance records: which rule and which input values produced each line."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.engine.forms import LineKey, LineValue

INPUT_RULE = "input"
DEFAULT_RULE = "input.default"


def serialize_value(value: LineValue | None) -> Any:
    """JSON-safe form of a line value; amounts become fixed-point strings."""
    if isinstance(value, Decimal):
        return format(value, "f")
    return value


@dataclass(frozen=True)
class ProvenanceInput:
    """One declared input as the formula saw it.

    Attributes:
        name: Formula alias of the input.
        sources: Lines the value was read from (several for a SUM reference).
        value: Value passed to the formula (None for an absent OPTIONAL ref).
        defaulted: True when the target was absent and a declared default
            was used instead.
    """

    name: str
    sources: tuple[LineKey, ...]
    value: LineValue | None
    defaulted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "sources": [str(source) for source in self.sources],
            "value": serialize_value(self.value),
            "defaulted": self.defaulted,
        }


@dataclass(frozen=True)
class ProvenanceRecord:
    """Audit entry for one resolved line.

    Attributes:
        line: The resolved line.
        rule: Rule identifier (evaluator name, "sum", or "input").
        inputs: Exact input values consumed, in declaration order.
        value: Resolved value.
    """

    line: LineKey
    rule: str
    inputs: tuple[ProvenanceInput, ...]
    value: LineValue

    @property
    def is_input(self) -> bool:
        """Raw line taken from the caller or its default."""
        return self.rule in (INPUT_RULE, DEFAULT_RULE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "line": str(self.line),
            "rule": self.rule,
            "inputs": [item.to_dict() for item in self.inputs],
            "value": serialize_value(self.value),
        }
