"""Line Resolver.

Orders the lines of a FormGraph topologically (ties broken by catalog order)
and evaluates each exactly once, calling its formula with only the declared
inputs. Every resolution is recorded as a ProvenanceRecord.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from decimal import Decimal

import networkx as nx

from src.core.config import settings
from src.core.logging import get_logger
from src.engine.forms import Absent, LineKey, LineKind, LineSpec, LineValue, RefMode
from src.engine.graph import Binding, FormGraph
from src.engine.provenance import (
    DEFAULT_RULE,
    INPUT_RULE,
    ProvenanceInput,
    ProvenanceRecord,
)
from src.tax.errors import CircularDependency, MissingInput, ProvisionError, SchemaViolation
from src.tax.money import ZERO, to_amount
from src.tax.profile import FilingProfile
from src.tax.year_config import TaxYearParameters

logger = get_logger(__name__)


class LineInputs(Mapping[str, LineValue | None]):
    """Read-only view of the values a formula declared, keyed by alias."""

    def __init__(self, values: Mapping[str, LineValue | None]):
        self._values = dict(values)

    def __getitem__(self, name: str) -> LineValue | None:
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"formula read undeclared input {name!r}") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"LineInputs({self._values!r})"


def _zero_for(kind: LineKind) -> LineValue:
    return False if kind is LineKind.BOOLEAN else to_amount(ZERO)


class LineResolver:
    """Evaluates every line of one return's graph.

    Each line transitions unresolved -> resolved exactly once; later calls
    return the memoized value.

    Example:
        >>> resolver = LineResolver(graph, TAX_YEAR_2025, profile)
        >>> resolver.resolve(LineKey(FormType.F1040, 0, "taxable_income"))
        Decimal('34250.00')
    """

    def __init__(
        self,
        graph: FormGraph,
        params: TaxYearParameters,
        profile: FilingProfile,
    ):
        self.graph = graph
        self.params = params
        self.profile = profile
        self._values: dict[LineKey, LineValue] = {}
        self._records: list[ProvenanceRecord] = []
        self._in_progress: set[LineKey] = set()
        self._order: tuple[LineKey, ...] | None = None

    def evaluation_order(self) -> tuple[LineKey, ...]:
        """Deterministic topological order of every line.

        Raises:
            CircularDependency: If the declared dependencies contain a cycle,
                naming every line on it.
        """
        if self._order is None:
            try:
                self._order = tuple(
                    nx.lexicographical_topological_sort(
                        self.graph.graph, key=self.graph.sort_key
                    )
                )
            except nx.NetworkXUnfeasible:
                cycle = nx.find_cycle(self.graph.graph)
                raise CircularDependency([source for source, _ in cycle]) from None
        return self._order

    def resolve(self, key: LineKey) -> LineValue:
        """Resolve one line, resolving its prerequisites first.

        Raises:
            MissingInput: A required reference of the line has no target.
            CircularDependency: The line depends on itself.
            ProvisionError: The evaluator failed; the error carries the line.
        """
        if key in self._values:
            return self._values[key]
        if key in self._in_progress:
            cycle = nx.find_cycle(self.graph.graph, source=key)
            raise CircularDependency([source for source, _ in cycle])

        self._in_progress.add(key)
        try:
            for source in self.graph.inputs_of(key):
                self.resolve(source)
            spec = self.graph.line_spec(key)
            if spec.is_computed:
                record = self._evaluate(key, spec)
            else:
                record = self._read_input(key, spec)
        finally:
            self._in_progress.discard(key)

        self._values[key] = record.value
        self._records.append(record)
        if settings.trace_line_resolution:
            logger.debug(
                "line_resolved",
                line=str(key),
                rule=record.rule,
                value=record.value,
            )
        return record.value

    def resolve_all(self) -> dict[LineKey, LineValue]:
        """Resolve every line in evaluation order."""
        for key in self.evaluation_order():
            self.resolve(key)
        return dict(self._values)

    @property
    def provenance(self) -> tuple[ProvenanceRecord, ...]:
        """Records in resolution order."""
        return tuple(self._records)

    # =========================================================================
    # Evaluation
    # =========================================================================

    def _read_input(self, key: LineKey, spec: LineSpec) -> ProvenanceRecord:
        value = self.graph.supplied_value(key)
        if value is None:
            return ProvenanceRecord(key, DEFAULT_RULE, (), spec.default_value())
        return ProvenanceRecord(key, INPUT_RULE, (), value)

    def _bind(self, key: LineKey, alias: str, binding: Binding) -> ProvenanceInput:
        reference = binding.reference
        if binding.is_absent:
            if reference.absent is Absent.REQUIRED:
                raise MissingInput(key, str(reference))
            if reference.absent is Absent.OPTIONAL:
                return ProvenanceInput(alias, (), None, defaulted=True)
            target_kind = self.graph.catalog.spec(reference.form_type).line(reference.line).kind
            return ProvenanceInput(alias, (), _zero_for(target_kind), defaulted=True)

        values = [self._values[source] for source in binding.sources]
        if reference.mode is RefMode.SUM:
            value: LineValue = to_amount(sum(values, ZERO))
        else:
            (value,) = values
        return ProvenanceInput(alias, binding.sources, value)

    def _evaluate(self, key: LineKey, spec: LineSpec) -> ProvenanceRecord:
        consumed = tuple(
            self._bind(key, alias, binding)
            for alias, binding in self.graph.bindings(key).items()
        )
        inputs = LineInputs({item.name: item.value for item in consumed})

        try:
            value = spec.formula(inputs, self.params, self.profile)
        except ProvisionError as exc:
            raise exc.at_line(key)
        except MissingInput as exc:
            if exc.line is None:
                raise MissingInput(key, exc.reference) from exc
            raise

        return ProvenanceRecord(key, spec.rule, consumed, self._check_output(key, spec, value))

    @staticmethod
    def _check_output(key: LineKey, spec: LineSpec, value: object) -> LineValue:
        if spec.kind is LineKind.AMOUNT:
            if isinstance(value, bool) or not isinstance(value, (Decimal, int)):
                raise SchemaViolation(str(key), f"formula returned {type(value).__name__}, not an amount")
            return to_amount(value)
        if spec.kind is LineKind.BOOLEAN:
            if not isinstance(value, bool):
                raise SchemaViolation(str(key), f"formula returned {type(value).__name__}, not a boolean")
            return value
        if not isinstance(value, str) or value not in spec.choices:
            raise SchemaViolation(str(key), f"formula returned {value!r}, not one of {spec.choices}")
        return value
