"""Tests for line resolution, ordering and provenance."""

from __future__ import annotations

from decimal import Decimal

import pytest

from src.engine.catalog import computed, default_catalog, raw
from src.engine.forms import (
    Absent,
    FormCatalog,
    FormSpec,
    FormType,
    LineKey,
    LineRef,
    RefMode,
    always,
    local,
    total,
)
from src.engine.graph import FormGraph
from src.engine.provenance import DEFAULT_RULE, INPUT_RULE, ProvenanceInput
from src.engine.resolver import LineInputs, LineResolver
from src.tax.errors import CircularDependency, InvalidInput, SchemaViolation
from tests.factories import form, w2

A = LineKey(FormType.F1040, 0, "a")
B = LineKey(FormType.F1040, 0, "b")


def _resolver(lines, profile, params, inputs=(), extra=()) -> LineResolver:
    catalog = FormCatalog(
        [*extra, FormSpec(FormType.F1040, "test", lines=tuple(lines), applies=always)],
        exhaustive=False,
    )
    return LineResolver(FormGraph.build(catalog, profile, inputs), params, profile)


def _copy(inputs, params, profile):
    (value,) = inputs.values()
    return value


class TestLineInputs:
    def test_undeclared_read(self) -> None:
        inputs = LineInputs({"a": Decimal("1")})
        assert inputs["a"] == Decimal("1")
        with pytest.raises(KeyError, match="undeclared input 'b'"):
            inputs["b"]

    def test_mapping_protocol(self) -> None:
        inputs = LineInputs({"a": Decimal("1"), "b": None})
        assert list(inputs) == ["a", "b"]
        assert len(inputs) == 2


class TestEvaluationOrder:
    def test_ties_follow_declaration_order(self, single_profile, params_2025) -> None:
        resolver = _resolver(
            [
                raw("x"),
                computed("second", "test.copy", _copy, x=local("x")),
                computed("first", "test.copy", _copy, x=local("x")),
            ],
            single_profile,
            params_2025,
        )
        assert [key.line for key in resolver.evaluation_order()] == ["x", "second", "first"]

    def test_prerequisites_come_first(self, single_profile, params_2025) -> None:
        resolver = LineResolver(
            FormGraph.build(default_catalog(), single_profile, [w2("50000")]),
            params_2025,
            single_profile,
        )
        order = resolver.evaluation_order()
        position = {key: index for index, key in enumerate(order)}
        for key in order:
            for source in resolver.graph.inputs_of(key):
                assert position[source] < position[key]

    def test_order_is_stable(self, single_profile, params_2025) -> None:
        orders = {
            LineResolver(
                FormGraph.build(default_catalog(), single_profile, [w2("50000")]),
                params_2025,
                single_profile,
            ).evaluation_order()
            for _ in range(3)
        }
        assert len(orders) == 1


class TestCycles:
    def _cyclic(self, profile, params) -> LineResolver:
        return _resolver(
            [
                computed("a", "test.copy", _copy, b=local("b")),
                computed("b", "test.copy", _copy, a=local("a")),
            ],
            profile,
            params,
        )

    def test_evaluation_order_names_the_cycle(self, single_profile, params_2025) -> None:
        with pytest.raises(CircularDependency) as excinfo:
            self._cyclic(single_profile, params_2025).evaluation_order()
        assert set(excinfo.value.lines) == {A, B}

    def test_resolve_detects_cycle(self, single_profile, params_2025) -> None:
        with pytest.raises(CircularDependency) as excinfo:
            self._cyclic(single_profile, params_2025).resolve(A)
        assert set(excinfo.value.lines) == {A, B}


class TestResolution:
    def test_each_line_evaluated_once(self, single_profile, params_2025) -> None:
        calls: list[str] = []

        def counted(inputs, params, profile):
            calls.append("a")
            return inputs["x"] + 1

        resolver = _resolver(
            [
                raw("x"),
                computed("a", "test.counted", counted, x=local("x")),
                computed("b", "test.copy", _copy, a=local("a")),
                computed("c", "test.copy", _copy, a=local("a")),
            ],
            single_profile,
            params_2025,
            inputs=[form(FormType.F1040, x=Decimal("2"))],
        )
        values = resolver.resolve_all()
        assert resolver.resolve(A) == Decimal("3.00")
        assert calls == ["a"]
        assert values[LineKey(FormType.F1040, 0, "c")] == Decimal("3.00")
        assert len(resolver.provenance) == 4

    def test_provision_error_carries_line(self, single_profile, params_2025) -> None:
        def failing(inputs, params, profile):
            raise InvalidInput("x", -1, "must not be negative")

        resolver = _resolver(
            [computed("a", "test.failing", failing)], single_profile, params_2025
        )
        with pytest.raises(InvalidInput) as excinfo:
            resolver.resolve(A)
        assert excinfo.value.line == A
        assert str(excinfo.value).startswith("1040[0].a: ")

    @pytest.mark.parametrize("value", [1.5, True, "x"])
    def test_amount_formula_must_return_amount(self, single_profile, params_2025, value) -> None:
        resolver = _resolver(
            [computed("a", "test.bad", lambda inputs, params, profile: value)],
            single_profile,
            params_2025,
        )
        with pytest.raises(SchemaViolation):
            resolver.resolve(A)

    def test_optional_absent_reference_is_none(self, single_profile, params_2025) -> None:
        seen: list[object] = []

        def observe(inputs, params, profile):
            seen.append(inputs["wages"])
            return Decimal("0")

        w2_spec = FormSpec(FormType.W2, "w2", lines=(raw("wages"),), repeatable=True)
        resolver = _resolver(
            [
                computed(
                    "a",
                    "test.observe",
                    observe,
                    wages=LineRef("wages", FormType.W2, RefMode.SUM, Absent.OPTIONAL),
                )
            ],
            single_profile,
            params_2025,
            extra=[w2_spec],
        )
        resolver.resolve_all()
        assert seen == [None]
        (record,) = resolver.provenance
        assert record.inputs == (ProvenanceInput("wages", (), None, defaulted=True),)

    def test_sum_over_instances(self, single_profile, params_2025) -> None:
        w2_spec = FormSpec(FormType.W2, "w2", lines=(raw("wages"),), repeatable=True)
        resolver = _resolver(
            [computed("a", "sum", _copy, wages=total(FormType.W2, "wages"))],
            single_profile,
            params_2025,
            inputs=[
                form(FormType.W2, wages=Decimal("100.10")),
                form(FormType.W2, instance=1, wages=Decimal("200.20")),
            ],
            extra=[w2_spec],
        )
        assert resolver.resolve(A) == Decimal("300.30")


class TestProvenance:
    def _resolved(self, profile, params, inputs) -> LineResolver:
        resolver = LineResolver(FormGraph.build(default_catalog(), profile, inputs), params, profile)
        resolver.resolve_all()
        return resolver

    def _record(self, resolver: LineResolver, key: LineKey):
        (record,) = [record for record in resolver.provenance if record.line == key]
        return record

    def test_every_line_has_one_record(self, single_profile, params_2025) -> None:
        resolver = self._resolved(single_profile, params_2025, [w2("50000")])
        lines = [record.line for record in resolver.provenance]
        assert len(lines) == len(set(lines)) == resolver.graph.node_count

    def test_computed_line_records_sources(self, single_profile, params_2025) -> None:
        resolver = self._resolved(
            single_profile, params_2025, [w2("30000"), w2("20000", instance=1)]
        )
        record = self._record(resolver, LineKey(FormType.F1040, 0, "wages"))
        assert record.rule == "sum"
        assert record.value == Decimal("50000.00")
        assert record.inputs == (
            ProvenanceInput(
                "wages",
                (LineKey(FormType.W2, 0, "wages"), LineKey(FormType.W2, 1, "wages")),
                Decimal("50000.00"),
            ),
        )

    def test_absent_form_defaults_to_zero(self, single_profile, params_2025) -> None:
        resolver = self._resolved(single_profile, params_2025, [w2("30000")])
        record = self._record(resolver, LineKey(FormType.F1040, 0, "estimated_payments"))
        assert all(item.defaulted for item in record.inputs)
        assert record.value == Decimal("0.00")

    def test_raw_lines(self, single_profile, params_2025) -> None:
        resolver = self._resolved(
            single_profile, params_2025, [form(FormType.W2, wages=Decimal("30000"))]
        )
        supplied = self._record(resolver, LineKey(FormType.W2, 0, "wages"))
        defaulted = self._record(resolver, LineKey(FormType.W2, 0, "federal_withholding"))
        assert (supplied.rule, supplied.value, supplied.is_input) == (
            INPUT_RULE,
            Decimal("30000.00"),
            True,
        )
        assert (defaulted.rule, defaulted.value) == (DEFAULT_RULE, Decimal("0.00"))

    def test_record_serializes_amounts_as_strings(self, single_profile, params_2025) -> None:
        resolver = self._resolved(single_profile, params_2025, [w2("30000")])
        record = self._record(resolver, LineKey(FormType.F1040, 0, "wages"))
        assert record.to_dict() == {
            "line": "1040[0].wages",
            "rule": "sum",
            "inputs": [
                {
                    "name": "wages",
                    "sources": ["W2[0].wages"],
                    "value": "30000.00",
                    "defaulted": False,
                }
            ],
            "value": "30000.00",
        }
