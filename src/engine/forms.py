"""Form and line declarations.

This module defines the static description of every form the engine knows:
- FormType: the closed set of form types, in catalog order
- LineSpec: a raw input line or a computed line with its formula and inputs
- LineRef: a declared reference from one line to another
- FormSpec: ordered lines, repeatability, and when the form applies
- FormInput: raw line values supplied by the caller
- FormCatalog: validated collection of FormSpecs

Relationships between lines are declared once here and instantiated per
return by the FormGraph.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Union

from pydantic import BaseModel, ConfigDict, Field

from src.tax.errors import SchemaViolation
from src.tax.profile import FilingProfile
from src.tax.year_config import TaxYearParameters

if TYPE_CHECKING:
    from src.engine.resolver import LineInputs

LineValue = Union[Decimal, bool, str]


class FormType(str, Enum):
    """Every form type the engine models. Declaration order is catalog order."""

    W2 = "W2"
    F1099_INT = "1099-INT"
    F1099_DIV = "1099-DIV"
    F1099_G = "1099-G"
    F1099_R = "1099-R"
    F1098 = "1098"
    F1098_E = "1098-E"
    F1098_T = "1098-T"
    SCHEDULE_C = "SCHEDULE_C"
    F2441 = "2441"
    F8880 = "8880"
    F1040_ES = "1040-ES"
    SCHEDULE_D = "SCHEDULE_D"
    SCHEDULE_SE = "SCHEDULE_SE"
    F8959 = "8959"
    SCHEDULE_1 = "SCHEDULE_1"
    SCHEDULE_A = "SCHEDULE_A"
    F8995 = "8995"
    F8960 = "8960"
    F6251 = "6251"
    F1116 = "1116"
    F8863 = "8863"
    SCHEDULE_8812 = "SCHEDULE_8812"
    SCHEDULE_2 = "SCHEDULE_2"
    SCHEDULE_3 = "SCHEDULE_3"
    F1040 = "1040"


class LineKind(str, Enum):
    """Type of value a line holds."""

    AMOUNT = "amount"
    BOOLEAN = "boolean"
    CHOICE = "choice"


class RefMode(str, Enum):
    """How a reference selects instances of the target form."""

    SINGLE = "single"  # instance 0 of a non-repeatable form
    SUM = "sum"  # all instances of the target form, added
    LOCAL = "local"  # the same instance of the referencing form


class Absent(str, Enum):
    """What a reference resolves to when its target was never instantiated."""

    REQUIRED = "required"  # MissingInput
    ZERO = "zero"  # 0 / False, marked as defaulted in provenance
    OPTIONAL = "optional"  # None; the formula decides


@dataclass(frozen=True, order=True)
class LineKey:
    """Identity of one line on one form instance."""

    form_type: FormType
    instance: int
    line: str

    def __str__(self) -> str:
        return f"{self.form_type.value}[{self.instance}].{self.line}"


@dataclass(frozen=True)
class LineRef:
    """Declared reference from a computed line to another line."""

    line: str
    form_type: FormType | None = None
    mode: RefMode = RefMode.SINGLE
    absent: Absent = Absent.REQUIRED

    def __str__(self) -> str:
        if self.mode is RefMode.LOCAL:
            return self.line
        suffix = "[*]" if self.mode is RefMode.SUM else ""
        return f"{self.form_type.value}{suffix}.{self.line}"


def ref(form_type: FormType, line: str, absent: Absent = Absent.REQUIRED) -> LineRef:
    """Reference a line on a single-instance form."""
    return LineRef(line=line, form_type=form_type, mode=RefMode.SINGLE, absent=absent)


def total(form_type: FormType, line: str, absent: Absent = Absent.ZERO) -> LineRef:
    """Reference the sum of a line across every instance of a form."""
    return LineRef(line=line, form_type=form_type, mode=RefMode.SUM, absent=absent)


def local(line: str) -> LineRef:
    """Reference another line on the same form instance."""
    return LineRef(line=line, mode=RefMode.LOCAL)


Formula = Callable[["LineInputs", TaxYearParameters, FilingProfile], LineValue]


@dataclass(frozen=True)
class LineSpec:
    """One line of a form.

    A line without a formula is a raw input line; its value comes from the
    caller or from its default. A line with a formula is computed from its
    declared inputs only.

    Attributes:
        name: Line identifier, unique within the form.
        kind: Value type.
        rule: Rule identifier recorded in provenance (computed lines).
        formula: Evaluator for computed lines.
        inputs: Alias -> reference for each value the formula reads.
        required: Raw line the caller must supply.
        choices: Allowed values for CHOICE lines.
        default: Value for an unsupplied optional raw line.
    """

    name: str
    kind: LineKind = LineKind.AMOUNT
    rule: str | None = None
    formula: Formula | None = None
    inputs: Mapping[str, LineRef] = field(default_factory=dict)
    required: bool = False
    choices: tuple[str, ...] = ()
    default: LineValue | None = None
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", MappingProxyType(dict(self.inputs)))

    @property
    def is_computed(self) -> bool:
        return self.formula is not None

    def default_value(self) -> LineValue:
        """Value used when an optional raw line is not supplied."""
        if self.default is not None:
            return self.default
        if self.kind is LineKind.BOOLEAN:
            return False
        if self.kind is LineKind.CHOICE:
            return self.choices[0]
        return Decimal("0.00")


Applicability = Callable[[FilingProfile, frozenset[FormType]], bool]


def always(profile: FilingProfile, present: frozenset[FormType]) -> bool:
    """Form applies to every return."""
    return True


def when_present(*form_types: FormType) -> Applicability:
    """Form applies when any of the given forms is on the return."""

    def applies(profile: FilingProfile, present: frozenset[FormType]) -> bool:
        return any(form_type in present for form_type in form_types)

    return applies


def when_dependents(profile: FilingProfile, present: frozenset[FormType]) -> bool:
    """Form applies when the profile claims dependents."""
    return bool(profile.dependents)


@dataclass(frozen=True)
class FormSpec:
    """Declaration of one form type.

    Attributes:
        form_type: The form this spec describes.
        title: Human-readable name.
        lines: Ordered lines; order is the tie-breaker for evaluation.
        repeatable: Whether several instances may be filed (e.g. W-2s).
        applies: When the engine instantiates the form by itself. None means
            the form exists only when the caller supplies it.
    """

    form_type: FormType
    title: str
    lines: tuple[LineSpec, ...]
    repeatable: bool = False
    applies: Applicability | None = None

    def line(self, name: str) -> LineSpec | None:
        for spec in self.lines:
            if spec.name == name:
                return spec
        return None

    def line_index(self, name: str) -> int:
        for index, spec in enumerate(self.lines):
            if spec.name == name:
                return index
        raise KeyError(name)


class FormInput(BaseModel):
    """Raw line values for one form instance, as supplied by the caller.

    Line values are checked against the catalog by FormGraph.build, which
    reports every mismatch at once; they are kept as given here.

    Example:
        >>> FormInput(form_type=FormType.W2, lines={"wages": Decimal("50000")})
    """

    model_config = ConfigDict(frozen=True)

    form_type: FormType = Field(description="Form this input belongs to")
    instance: int = Field(default=0, ge=0, description="Instance index for repeatable forms")
    lines: dict[str, Any] = Field(default_factory=dict, description="Line name -> raw value")


# =============================================================================
# Catalog
# =============================================================================


class FormCatalog:
    """Validated, ordered collection of form specs.

    Construction fails with SchemaViolation when a reference targets an
    undeclared form or line, a SUM reference targets a non-amount line, a
    SINGLE reference targets a repeatable form, or (when exhaustive) some
    FormType has no spec.
    """

    def __init__(self, specs: Iterable[FormSpec], *, exhaustive: bool = True):
        self._specs: dict[FormType, FormSpec] = {}
        for spec in specs:
            if spec.form_type in self._specs:
                raise SchemaViolation(spec.form_type.value, "form declared twice")
            self._specs[spec.form_type] = spec
        self._order = {form_type: index for index, form_type in enumerate(self._specs)}
        self._line_order = {
            form_type: {line.name: index for index, line in enumerate(spec.lines)}
            for form_type, spec in self._specs.items()
        }

        if exhaustive:
            missing = [form_type.value for form_type in FormType if form_type not in self._specs]
            if missing:
                raise SchemaViolation("catalog", f"no spec for {', '.join(missing)}")
        for spec in self._specs.values():
            self._validate(spec)

    def _validate(self, spec: FormSpec) -> None:
        names = [line.name for line in spec.lines]
        if len(names) != len(set(names)):
            raise SchemaViolation(spec.form_type.value, "duplicate line names")

        for line in spec.lines:
            location = f"{spec.form_type.value}.{line.name}"
            if line.kind is LineKind.CHOICE and not line.choices:
                raise SchemaViolation(location, "choice line declares no choices")
            if not line.is_computed:
                if line.inputs:
                    raise SchemaViolation(location, "raw line declares inputs")
                continue
            if not line.rule:
                raise SchemaViolation(location, "computed line has no rule id")
            for alias, reference in line.inputs.items():
                self._validate_ref(spec, f"{location}<{alias}>", reference)

    def _validate_ref(self, spec: FormSpec, location: str, reference: LineRef) -> None:
        if reference.mode is RefMode.LOCAL:
            target_spec = spec
        else:
            if reference.form_type is None:
                raise SchemaViolation(location, "reference has no target form")
            target_spec = self._specs.get(reference.form_type)
            if target_spec is None:
                raise SchemaViolation(location, f"references undeclared form {reference}")

        target = target_spec.line(reference.line)
        if target is None:
            raise SchemaViolation(location, f"references undeclared line {reference}")
        if reference.mode is RefMode.SUM and target.kind is not LineKind.AMOUNT:
            raise SchemaViolation(location, f"cannot sum non-amount line {reference}")
        if reference.mode is RefMode.SINGLE and target_spec.repeatable:
            raise SchemaViolation(location, f"single reference to repeatable form {reference}")
        if reference.absent is Absent.ZERO and target.kind is LineKind.CHOICE:
            raise SchemaViolation(location, f"choice line {reference} has no zero value")

    def __iter__(self) -> Iterator[FormSpec]:
        return iter(self._specs.values())

    def __contains__(self, form_type: object) -> bool:
        return form_type in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def spec(self, form_type: FormType) -> FormSpec:
        """Look up a form spec; unknown form types are a SchemaViolation."""
        try:
            return self._specs[form_type]
        except KeyError:
            raise SchemaViolation(str(form_type), "form type is not in the catalog") from None

    def sort_key(self, key: LineKey) -> tuple[int, int, int]:
        """Declaration order: catalog position, instance, line position."""
        return (
            self._order[key.form_type],
            key.instance,
            self._line_order[key.form_type][key.line],
        )
