"""Return Assembler.

Drives one computation end to end (graph build, resolution, completeness
check) and packages the result as an immutable ComputedReturn with its
provenance trail. A run either yields a complete return or raises
ReturnComputationError carrying every error found; no partial return is ever
exposed.

Example:
    >>> result = compute_return(profile, [w2], TAX_YEAR_2025)
    >>> result.value(FormType.F1040, "tax")
    Decimal('3875.00')
"""

from __future__ import annotations

import asyncio
import hashlib
import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)
from types import MappingProxyType
from typing import Any

import orjson

from src.core.config import settings
from src.core.logging import computation_context, get_logger
from src.engine.catalog import default_catalog
from src.engine.forms import FormCatalog, FormInput, FormType, LineKey, LineValue
from src.engine.graph import FormGraph
from src.engine.provenance import ProvenanceRecord, serialize_value
from src.engine.resolver import LineResolver
from src.provisions.deductions import DeductionMethod
from src.tax.errors import (
    IncompleteReturn,
    ReturnComputationError,
    TaxEngineError,
    TaxYearMismatch,
)
from src.tax.profile import FilingProfile
from src.tax.year_config import FilingStatus, TaxYearParameters

logger = get_logger(__name__)

# Every run evaluates under the same arithmetic context
ENGINE_DECIMAL_CONTEXT = Context(
    prec=28,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)


# =============================================================================
# Result types
# =============================================================================


@dataclass(frozen=True)
class FormInstance:
    """One resolved form on the return.

    Attributes:
        form_type: Form type.
        instance: Instance index (0 for non-repeatable forms).
        lines: Read-only mapping of line name to resolved value, in line order.
    """

    form_type: FormType
    instance: int
    lines: Mapping[str, LineValue]

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", MappingProxyType(dict(self.lines)))

    def __getitem__(self, line: str) -> LineValue:
        return self.lines[line]

    def to_dict(self) -> dict[str, Any]:
        return {
            "form_type": self.form_type.value,
            "instance": self.instance,
            "lines": {name: serialize_value(value) for name, value in self.lines.items()},
        }


@dataclass(frozen=True)
class ComputedReturn:
    """A completed return: every resolved form plus the provenance trail.

    Created only by compute_return and immutable afterwards.
    """

    tax_year: int
    filing_status: FilingStatus
    forms: tuple[FormInstance, ...]
    provenance: tuple[ProvenanceRecord, ...]
    _forms_by_key: Mapping[tuple[FormType, int], FormInstance] = field(
        init=False, repr=False, compare=False
    )
    _records_by_line: Mapping[LineKey, ProvenanceRecord] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_forms_by_key",
            MappingProxyType({(form.form_type, form.instance): form for form in self.forms}),
        )
        object.__setattr__(
            self,
            "_records_by_line",
            MappingProxyType({record.line: record for record in self.provenance}),
        )

    def has_form(self, form_type: FormType, instance: int = 0) -> bool:
        return (form_type, instance) in self._forms_by_key

    def form(self, form_type: FormType, instance: int = 0) -> FormInstance:
        """Look up a resolved form instance.

        Raises:
            KeyError: If the form is not on the return.
        """
        try:
            return self._forms_by_key[(form_type, instance)]
        except KeyError:
            raise KeyError(f"{form_type.value}[{instance}] is not on this return") from None

    def instances(self, form_type: FormType) -> tuple[FormInstance, ...]:
        """Every instance of a form type, in instance order."""
        return tuple(form for form in self.forms if form.form_type is form_type)

    def value(self, form_type: FormType, line: str, instance: int = 0) -> LineValue:
        """Resolved value of one line."""
        return self.form(form_type, instance)[line]

    def provenance_for(
        self, form_type: FormType, line: str, instance: int = 0
    ) -> ProvenanceRecord:
        """Rule and inputs that produced one line."""
        key = LineKey(form_type, instance, line)
        try:
            return self._records_by_line[key]
        except KeyError:
            raise KeyError(f"no provenance for {key}") from None

    def explain(self, form_type: FormType, line: str, instance: int = 0) -> list[str]:
        """Audit trail for a line, expanded recursively down to raw inputs.

        Lines already expanded earlier in the trail are not expanded again.

        Returns:
            One indented text line per step, e.g.
            "1040[0].agi = 37174.00 [1040.adjusted_gross_income]".
        """
        rendered: list[str] = []
        expanded: set[LineKey] = set()

        def walk(key: LineKey, depth: int) -> None:
            record = self._records_by_line[key]
            indent = "  " * depth
            rendered.append(f"{indent}{key} = {serialize_value(record.value)} [{record.rule}]")
            if key in expanded:
                return
            expanded.add(key)
            for item in record.inputs:
                if item.defaulted:
                    rendered.append(
                        f"{indent}  {item.name} = {serialize_value(item.value)} (absent; default)"
                    )
                for source in item.sources:
                    walk(source, depth + 1)

        walk(LineKey(form_type, instance, line), 0)
        return rendered

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-safe rendering of the full return."""
        return {
            "tax_year": self.tax_year,
            "filing_status": self.filing_status.value,
            "forms": [form.to_dict() for form in self.forms],
            "provenance": [record.to_dict() for record in self.provenance],
        }

    def to_json(self) -> bytes:
        """Canonical JSON bytes (sorted keys)."""
        return orjson.dumps(self.to_dict(), option=orjson.OPT_SORT_KEYS)

    def digest(self) -> str:
        """SHA-256 of the canonical JSON; equal inputs give equal digests."""
        return hashlib.sha256(self.to_json()).hexdigest()


@dataclass(frozen=True)
class ReturnRequest:
    """One independent computation for compute_returns_concurrently."""

    profile: FilingProfile
    forms: tuple[FormInput, ...]
    params: TaxYearParameters
    label: str = ""
    catalog: FormCatalog | None = None


# =============================================================================
# Assembly
# =============================================================================


def _check_complete(graph: FormGraph, values: Mapping[LineKey, LineValue]) -> None:
    """Reject a return that itemizes without Schedule A or left lines unresolved.

    Itemizing (forced or elected) with no Schedule A would silently take a
    zero deduction.
    """
    missing: list[str] = []
    present = frozenset(form_type for form_type, _ in graph.instances)
    method = values.get(LineKey(FormType.F1040, 0, "deduction_method"))
    if method == DeductionMethod.ITEMIZED.value and FormType.SCHEDULE_A not in present:
        missing.append(FormType.SCHEDULE_A.value)
    missing.extend(str(key) for key in graph.keys() if key not in values)
    if missing:
        raise IncompleteReturn(missing)


def _assemble(
    graph: FormGraph,
    profile: FilingProfile,
    params: TaxYearParameters,
    values: Mapping[LineKey, LineValue],
    provenance: tuple[ProvenanceRecord, ...],
) -> ComputedReturn:
    forms = []
    for form_type, instance in graph.instances:
        spec = graph.catalog.spec(form_type)
        forms.append(
            FormInstance(
                form_type=form_type,
                instance=instance,
                lines={
                    line.name: values[LineKey(form_type, instance, line.name)]
                    for line in spec.lines
                },
            )
        )
    return ComputedReturn(
        tax_year=params.tax_year,
        filing_status=profile.filing_status,
        forms=tuple(forms),
        provenance=provenance,
    )


def _fail(errors: Iterable[TaxEngineError]) -> ReturnComputationError:
    error = ReturnComputationError(errors)
    logger.warning(
        "return_computation_failed",
        error_count=len(error.errors),
        error_types=sorted({type(item).__name__ for item in error.errors}),
        errors=[str(item) for item in error.errors],
    )
    return error


def compute_return(
    profile: FilingProfile,
    forms: Iterable[FormInput],
    params: TaxYearParameters,
    *,
    catalog: FormCatalog | None = None,
) -> ComputedReturn:
    """Compute a complete return for one filer and one tax year.

    Args:
        profile: Filer facts and elections.
        forms: Raw form inputs (information documents and filer entries).
        params: Parameter set; must be for profile.tax_year.
        catalog: Form declarations (the default catalog when omitted).

    Returns:
        The completed, immutable ComputedReturn.

    Raises:
        ReturnComputationError: With every SchemaViolation, every MissingInput
            found before evaluation, or the single error that aborted
            evaluation (provision error, cycle, incomplete return).
    """
    if catalog is None:
        catalog = default_catalog()
    forms = tuple(forms)
    with computation_context(
        uuid.uuid4().hex[:12], profile.tax_year, profile.filing_status.value
    ):
        logger.info("return_computation_start", form_inputs=len(forms))

        if profile.tax_year != params.tax_year:
            raise _fail([TaxYearMismatch(profile.tax_year, params.tax_year)])

        try:
            graph = FormGraph.build(catalog, profile, forms)
        except ReturnComputationError as exc:
            raise _fail(exc.errors) from exc
        logger.info(
            "form_graph_built",
            forms=len(graph.instances),
            lines=graph.node_count,
            edges=graph.graph.number_of_edges(),
        )
        if graph.missing_inputs:
            raise _fail(graph.missing_inputs)

        resolver = LineResolver(graph, params, profile)
        try:
            with localcontext(ENGINE_DECIMAL_CONTEXT):
                values = resolver.resolve_all()
            _check_complete(graph, values)
        except TaxEngineError as exc:
            raise _fail([exc]) from exc

        result = _assemble(graph, profile, params, values, resolver.provenance)
        if result.has_form(FormType.F1040):
            logger.info(
                "return_computation_complete",
                lines=len(values),
                total_tax=result.value(FormType.F1040, "total_tax"),
                overpayment=result.value(FormType.F1040, "overpayment"),
                amount_owed=result.value(FormType.F1040, "amount_owed"),
            )
        else:
            logger.info("return_computation_complete", lines=len(values))
        return result


async def compute_returns_concurrently(
    requests: Sequence[ReturnRequest],
    concurrency: int | None = None,
) -> list[ComputedReturn | ReturnComputationError]:
    """Compute independent returns (what-if scenarios) in parallel.

    Each request runs compute_return in a worker thread; at most
    `concurrency` run at once (settings.scenario_concurrency by default).
    Parameter sets are immutable and may be shared between requests.

    Args:
        requests: Independent computations.
        concurrency: Max computations in flight.

    Returns:
        One entry per request, in request order: the ComputedReturn, or the
        ReturnComputationError that request raised.
    """
    limit = max(1, concurrency if concurrency is not None else settings.scenario_concurrency)
    semaphore = asyncio.Semaphore(limit)

    async def _run(request: ReturnRequest) -> ComputedReturn:
        async with semaphore:
            return await asyncio.to_thread(
                compute_return,
                request.profile,
                request.forms,
                request.params,
                catalog=request.catalog,
            )

    results = await asyncio.gather(*(_run(request) for request in requests), return_exceptions=True)

    outcomes: list[ComputedReturn | ReturnComputationError] = []
    for request, result in zip(requests, results, strict=True):
        if isinstance(result, ReturnComputationError):
            logger.info("scenario_failed", label=request.label, error_count=len(result.errors))
        elif isinstance(result, BaseException):
            raise result
        outcomes.append(result)
    return outcomes
