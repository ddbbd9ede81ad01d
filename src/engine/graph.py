"""Form Graph Model.

Instantiates the catalog's declarations for one return: validates the raw
input shape, decides which forms exist, and builds the line-level dependency
graph (a networkx DiGraph over LineKeys) restricted to those instances.

Example:
    >>> graph = FormGraph.build(default_catalog(), profile, [w2_input])
    >>> graph.inputs_of(LineKey(FormType.F1040, 0, "wages"))
    (LineKey(form_type=<FormType.W2: 'W2'>, instance=0, line='wages'),)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any

import networkx as nx

from src.engine.forms import (
    Absent,
    FormCatalog,
    FormInput,
    FormSpec,
    FormType,
    LineKey,
    LineKind,
    LineRef,
    LineSpec,
    LineValue,
    RefMode,
)
from src.tax.errors import MissingInput, ReturnComputationError, SchemaViolation
from src.tax.money import to_amount
from src.tax.profile import FilingProfile


@dataclass(frozen=True)
class Binding:
    """A declared reference resolved against the instantiated forms.

    Attributes:
        reference: The catalog declaration.
        sources: Lines the reference reads, in declaration order. Empty when
            the target form is absent.
    """

    reference: LineRef
    sources: tuple[LineKey, ...]

    @property
    def is_absent(self) -> bool:
        return not self.sources


def _coerce(spec: LineSpec, value: Any) -> tuple[LineValue | None, str | None]:
    """Check a raw value against its line kind; return (value, problem)."""
    if spec.kind is LineKind.AMOUNT:
        if isinstance(value, bool) or isinstance(value, float):
            return None, f"amount must be Decimal or int, got {type(value).__name__}"
        if isinstance(value, (Decimal, int)):
            if isinstance(value, Decimal) and not value.is_finite():
                return None, "amount must be finite"
            return to_amount(value), None
        return None, f"amount must be Decimal or int, got {type(value).__name__}"
    if spec.kind is LineKind.BOOLEAN:
        if isinstance(value, bool):
            return value, None
        return None, f"expected boolean, got {type(value).__name__}"
    if not isinstance(value, str):
        return None, f"expected choice string, got {type(value).__name__}"
    if value not in spec.choices:
        return None, f"{value!r} is not one of {', '.join(spec.choices)}"
    return value, None


class FormGraph:
    """Line-level dependency graph for one return.

    Nodes are LineKeys of every line on every instantiated form; an edge
    u -> v means line v reads line u. The graph is frozen after build().
    """

    def __init__(
        self,
        catalog: FormCatalog,
        profile: FilingProfile,
        instances: tuple[tuple[FormType, int], ...],
        supplied: Mapping[LineKey, LineValue],
        bindings: Mapping[LineKey, Mapping[str, Binding]],
        graph: nx.DiGraph,
        missing_inputs: tuple[MissingInput, ...],
    ):
        self.catalog = catalog
        self.profile = profile
        self._instances = instances
        self._supplied = MappingProxyType(dict(supplied))
        self._bindings = MappingProxyType(
            {key: MappingProxyType(dict(value)) for key, value in bindings.items()}
        )
        self._graph = nx.freeze(graph)
        self.missing_inputs = missing_inputs

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def build(
        cls,
        catalog: FormCatalog,
        profile: FilingProfile,
        inputs: Iterable[FormInput],
    ) -> FormGraph:
        """Validate inputs and build the dependency graph for one return.

        Args:
            catalog: Form declarations.
            profile: Filer facts (drives form applicability).
            inputs: Raw form inputs supplied by the caller.

        Returns:
            Frozen FormGraph. Unresolvable required references are recorded
            in missing_inputs rather than raised.

        Raises:
            ReturnComputationError: Carrying every SchemaViolation found.
        """
        violations: list[SchemaViolation] = []
        supplied: dict[LineKey, LineValue] = {}
        supplied_forms: dict[tuple[FormType, int], FormSpec] = {}

        for form_input in inputs:
            location = f"{form_input.form_type.value}[{form_input.instance}]"
            try:
                spec = catalog.spec(form_input.form_type)
            except SchemaViolation as exc:
                violations.append(exc)
                continue
            identity = (form_input.form_type, form_input.instance)
            if identity in supplied_forms:
                violations.append(SchemaViolation(location, "instance supplied more than once"))
                continue
            if not spec.repeatable and form_input.instance != 0:
                violations.append(
                    SchemaViolation(location, "form is not repeatable; only instance 0 is allowed")
                )
                continue
            supplied_forms[identity] = spec
            violations.extend(cls._check_lines(spec, form_input, supplied))

        if violations:
            raise ReturnComputationError(violations)

        instances = cls._instantiate(catalog, profile, supplied_forms)
        graph = nx.DiGraph()
        bindings: dict[LineKey, dict[str, Binding]] = {}
        missing: list[MissingInput] = []

        by_form: dict[FormType, list[int]] = {}
        for form_type, instance in instances:
            by_form.setdefault(form_type, []).append(instance)
            for line in catalog.spec(form_type).lines:
                graph.add_node(LineKey(form_type, instance, line.name))

        for form_type, instance in instances:
            for line in catalog.spec(form_type).lines:
                if not line.is_computed:
                    continue
                key = LineKey(form_type, instance, line.name)
                bindings[key] = {}
                for alias, reference in line.inputs.items():
                    sources = cls._targets(key, reference, by_form)
                    if not sources and reference.absent is Absent.REQUIRED:
                        missing.append(MissingInput(key, str(reference)))
                    bindings[key][alias] = Binding(reference, sources)
                    for source in sources:
                        graph.add_edge(source, key)

        return cls(
            catalog=catalog,
            profile=profile,
            instances=instances,
            supplied=supplied,
            bindings=bindings,
            graph=graph,
            missing_inputs=tuple(missing),
        )

    @staticmethod
    def _check_lines(
        spec: FormSpec, form_input: FormInput, supplied: dict[LineKey, LineValue]
    ) -> list[SchemaViolation]:
        location = f"{form_input.form_type.value}[{form_input.instance}]"
        violations: list[SchemaViolation] = []
        for name, value in form_input.lines.items():
            line = spec.line(name)
            if line is None:
                violations.append(SchemaViolation(f"{location}.{name}", "unknown line"))
                continue
            if line.is_computed:
                violations.append(
                    SchemaViolation(f"{location}.{name}", "line is computed and cannot be supplied")
                )
                continue
            coerced, problem = _coerce(line, value)
            if problem is not None:
                violations.append(SchemaViolation(f"{location}.{name}", problem))
                continue
            supplied[LineKey(form_input.form_type, form_input.instance, name)] = coerced

        for line in spec.lines:
            if line.required and line.name not in form_input.lines:
                violations.append(
                    SchemaViolation(f"{location}.{line.name}", "required line is missing")
                )
        return violations

    @staticmethod
    def _instantiate(
        catalog: FormCatalog,
        profile: FilingProfile,
        supplied_forms: Mapping[tuple[FormType, int], FormSpec],
    ) -> tuple[tuple[FormType, int], ...]:
        """Supplied forms plus every computed form whose predicate holds.

        Predicates may depend on other auto-instantiated forms (Form 8960
        follows an automatic Schedule D), so this runs to a fixed point.
        """
        supplied_types = {form_type for form_type, _ in supplied_forms}
        present = set(supplied_types)
        changed = True
        while changed:
            changed = False
            frozen = frozenset(present)
            for spec in catalog:
                if spec.form_type in present or spec.applies is None:
                    continue
                if spec.applies(profile, frozen):
                    present.add(spec.form_type)
                    changed = True

        instances = set(supplied_forms)
        instances.update((form_type, 0) for form_type in present - supplied_types)
        order = {spec.form_type: index for index, spec in enumerate(catalog)}
        return tuple(sorted(instances, key=lambda item: (order[item[0]], item[1])))

    @staticmethod
    def _targets(
        key: LineKey, reference: LineRef, by_form: Mapping[FormType, list[int]]
    ) -> tuple[LineKey, ...]:
        if reference.mode is RefMode.LOCAL:
            return (LineKey(key.form_type, key.instance, reference.line),)
        instances = sorted(by_form.get(reference.form_type, ()))
        if reference.mode is RefMode.SINGLE:
            instances = [instance for instance in instances if instance == 0]
        return tuple(LineKey(reference.form_type, instance, reference.line) for instance in instances)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def graph(self) -> nx.DiGraph:
        """The frozen dependency graph."""
        return self._graph

    @property
    def instances(self) -> tuple[tuple[FormType, int], ...]:
        """Instantiated (form type, instance) pairs in catalog order."""
        return self._instances

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def has_form(self, form_type: FormType, instance: int = 0) -> bool:
        return (form_type, instance) in self._instances

    def sort_key(self, key: LineKey) -> tuple[int, int, int]:
        """Declaration order used to break ties between ready lines."""
        return self.catalog.sort_key(key)

    def line_spec(self, key: LineKey) -> LineSpec:
        spec = self.catalog.spec(key.form_type).line(key.line)
        if spec is None:
            raise KeyError(str(key))
        return spec

    def keys(self) -> tuple[LineKey, ...]:
        """Every line on every instantiated form, in declaration order."""
        return tuple(sorted(self._graph.nodes, key=self.sort_key))

    def inputs_of(self, key: LineKey) -> tuple[LineKey, ...]:
        """Lines that line key reads directly."""
        return tuple(sorted(self._graph.predecessors(key), key=self.sort_key))

    def dependents_of(self, key: LineKey) -> tuple[LineKey, ...]:
        """Lines that read line key directly."""
        return tuple(sorted(self._graph.successors(key), key=self.sort_key))

    def bindings(self, key: LineKey) -> Mapping[str, Binding]:
        """Resolved references of a computed line, by formula alias."""
        return self._bindings.get(key, MappingProxyType({}))

    def supplied_value(self, key: LineKey) -> LineValue | None:
        """Caller-supplied value of a raw line, or None when not supplied."""
        return self._supplied.get(key)
