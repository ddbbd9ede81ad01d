"""Error taxonomy for return computation.

Every failure the engine can report is a TaxEngineError subclass carrying
structured attributes, so callers can tell filer-data problems (MissingInput,
InvalidInput) apart from modeling or data-completeness defects
(CircularDependency, MissingParameter, SchemaViolation).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any


class TaxEngineError(Exception):
    """Base class for all engine errors."""


class SchemaViolation(TaxEngineError):
    """Input or catalog shape does not match the declared schema.

    Attributes:
        location: Form/line the violation refers to (e.g. "W2[0].wages").
        reason: Human-readable description of the mismatch.
    """

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"{location}: {reason}")


class MissingInput(TaxEngineError):
    """A required reference points at a line that was never instantiated.

    Attributes:
        line: The line whose computation needs the reference.
        reference: The unresolved reference (e.g. "SCHEDULE_C.net_profit").
    """

    def __init__(self, line: Any, reference: str):
        self.line = line
        self.reference = reference
        super().__init__(f"{line} requires {reference}, which is not present")


class CircularDependency(TaxEngineError):
    """The declared dependency graph contains a cycle.

    Attributes:
        lines: Every line participating in the cycle, in cycle order.
    """

    def __init__(self, lines: Sequence[Any]):
        self.lines = tuple(lines)
        rendered = " -> ".join(str(line) for line in self.lines)
        super().__init__(f"Circular dependency among lines: {rendered}")


class ProvisionError(TaxEngineError):
    """A provision evaluator could not produce a value.

    Attributes:
        line: Line being resolved when the error surfaced (set by the resolver).
    """

    line: Any = None

    def at_line(self, line: Any) -> ProvisionError:
        """Attach the failing line unless one is already recorded."""
        if self.line is None:
            self.line = line
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.line is not None:
            return f"{self.line}: {message}"
        return message


class InvalidInput(ProvisionError):
    """A value is outside the provision's valid domain.

    Attributes:
        field: Name of the offending input.
        value: The rejected value.
    """

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"invalid {field}={value!r}: {reason}")


class MissingParameter(ProvisionError):
    """The parameter set lacks an entry the provision needs.

    Signals a data-completeness defect in the year's parameters, not a filer error.

    Attributes:
        tax_year: Parameter set year.
        parameter: Name of the missing table.
        key: Table key that was requested (usually a filing status).
    """

    def __init__(self, tax_year: int, parameter: str, key: Any = None):
        self.tax_year = tax_year
        self.parameter = parameter
        self.key = key
        detail = f"{parameter}[{key}]" if key is not None else parameter
        super().__init__(f"tax year {tax_year} parameters have no {detail}")


class TaxYearMismatch(TaxEngineError):
    """Filing profile and parameter set are for different tax years."""

    def __init__(self, profile_year: int, parameters_year: int):
        self.profile_year = profile_year
        self.parameters_year = parameters_year
        super().__init__(
            f"tax year mismatch: profile={profile_year}, parameters={parameters_year}"
        )


class IncompleteReturn(TaxEngineError):
    """Assembly found a required form or line without a resolved value."""

    def __init__(self, missing: Sequence[str]):
        self.missing = tuple(missing)
        super().__init__(f"Return is incomplete: {', '.join(self.missing)}")


class ReturnComputationError(TaxEngineError):
    """A return could not be computed.

    Raised by the assembler instead of a partial return. Carries the full,
    non-empty error set.

    Attributes:
        errors: Every error that prevented assembly.
    """

    def __init__(self, errors: Iterable[TaxEngineError]):
        self.errors = tuple(errors)
        if not self.errors:
            raise ValueError("ReturnComputationError requires at least one error")
        summary = "; ".join(str(error) for error in self.errors)
        super().__init__(f"{len(self.errors)} error(s): {summary}")
