"""Tests for building the per-return form graph."""

from __future__ import annotations

from decimal import Decimal

import networkx as nx
import pytest

from src.engine.catalog import default_catalog
from src.engine.forms import FormInput, FormType, LineKey
from src.engine.graph import FormGraph
from src.tax.errors import ReturnComputationError, SchemaViolation
from src.tax.year_config import FilingStatus
from tests.factories import form, make_profile, schedule_c, w2


def _violations(inputs, profile=None) -> list[SchemaViolation]:
    with pytest.raises(ReturnComputationError) as excinfo:
        FormGraph.build(default_catalog(), profile or make_profile(), inputs)
    errors = list(excinfo.value.errors)
    assert all(isinstance(error, SchemaViolation) for error in errors)
    return errors


class TestInputValidation:
    def test_unknown_line(self) -> None:
        (error,) = _violations([w2("50000", bonus=Decimal("10"))])
        assert error.location == "W2[0].bonus"
        assert error.reason == "unknown line"

    def test_schedule_1_entries_accepted(self, single_profile) -> None:
        schedule_1 = form(
            FormType.SCHEDULE_1,
            ira_deduction=Decimal("7000"),
            hsa_deduction=Decimal("4300"),
            gambling_income=Decimal("500"),
            nol_deduction=Decimal("-2000"),
        )
        graph = FormGraph.build(default_catalog(), single_profile, [w2("50000"), schedule_1])
        assert graph.bindings(LineKey(FormType.SCHEDULE_1, 0, "ira_deduction")) == {}
        assert LineKey(FormType.SCHEDULE_1, 0, "gambling_income") in graph.inputs_of(
            LineKey(FormType.SCHEDULE_1, 0, "total_other_income")
        )

    def test_schedule_1_computed_adjustment_cannot_be_supplied(self) -> None:
        (error,) = _violations([form(FormType.SCHEDULE_1, se_tax_deduction=Decimal("1"))])
        assert error.location == "SCHEDULE_1[0].se_tax_deduction"

    def test_computed_line_cannot_be_supplied(self) -> None:
        (error,) = _violations([schedule_c("40000", net_profit=Decimal("1"))])
        assert error.location == "SCHEDULE_C[0].net_profit"
        assert "computed" in error.reason

    @pytest.mark.parametrize("value", [1.5, True, "100", Decimal("NaN")])
    def test_bad_amounts(self, value) -> None:
        (error,) = _violations([form(FormType.W2, wages=value)])
        assert error.location == "W2[0].wages"

    def test_int_amounts_accepted(self) -> None:
        graph = FormGraph.build(default_catalog(), make_profile(), [form(FormType.W2, wages=50000)])
        assert graph.supplied_value(LineKey(FormType.W2, 0, "wages")) == Decimal("50000.00")

    def test_bad_boolean(self) -> None:
        (error,) = _violations([schedule_c("1000", is_sstb="yes")])
        assert error.location == "SCHEDULE_C[0].is_sstb"

    def test_choice_outside_declared_values(self) -> None:
        distribution = form(
            FormType.F1099_R,
            gross_distribution=Decimal("1000"),
            taxable_amount=Decimal("1000"),
            distribution_code="X",
        )
        (error,) = _violations([distribution])
        assert error.location == "1099-R[0].distribution_code"

    def test_required_line_missing(self) -> None:
        (error,) = _violations([form(FormType.W2, federal_withholding=Decimal("100"))])
        assert error.location == "W2[0].wages"
        assert error.reason == "required line is missing"

    def test_duplicate_instance(self) -> None:
        (error,) = _violations([w2("1000"), w2("2000")])
        assert error.location == "W2[0]"

    def test_non_repeatable_form_instance(self) -> None:
        (error,) = _violations([form(FormType.F2441, instance=1, care_expenses=Decimal("3000"))])
        assert error.location == "2441[1]"
        assert "not repeatable" in error.reason

    def test_every_violation_reported(self) -> None:
        errors = _violations(
            [
                w2("50000", bonus=Decimal("1")),
                form(FormType.W2, instance=1, wages=1.0),
                form(FormType.F1098_E),
            ]
        )
        assert {error.location for error in errors} == {
            "W2[0].bonus",
            "W2[1].wages",
            "1098-E[0].student_loan_interest",
        }


class TestApplicability:
    def _forms(self, profile, inputs) -> set[FormType]:
        graph = FormGraph.build(default_catalog(), profile, inputs)
        return {form_type for form_type, _ in graph.instances}

    def test_wage_earner(self, single_profile) -> None:
        present = self._forms(single_profile, [w2("50000")])
        assert {FormType.W2, FormType.F8959, FormType.SCHEDULE_1, FormType.F1040} <= present
        assert FormType.SCHEDULE_SE not in present
        assert FormType.SCHEDULE_8812 not in present

    def test_business_owner(self, single_profile) -> None:
        present = self._forms(single_profile, [schedule_c("40000")])
        assert {FormType.SCHEDULE_SE, FormType.F8959, FormType.F8995} <= present

    def test_dependents_bring_schedule_8812(self, mfj_three_children_profile) -> None:
        present = self._forms(mfj_three_children_profile, [w2("50000")])
        assert FormType.SCHEDULE_8812 in present

    def test_instances_in_catalog_order(self, single_profile) -> None:
        graph = FormGraph.build(
            default_catalog(), single_profile, [w2("20000", instance=1), w2("30000")]
        )
        assert graph.instances[:2] == ((FormType.W2, 0), (FormType.W2, 1))
        assert graph.instances[-1] == (FormType.F1040, 0)


class TestDependencies:
    def test_sum_reference_reads_every_instance(self, single_profile) -> None:
        graph = FormGraph.build(
            default_catalog(), single_profile, [w2("30000"), w2("20000", instance=1)]
        )
        assert graph.inputs_of(LineKey(FormType.F1040, 0, "wages")) == (
            LineKey(FormType.W2, 0, "wages"),
            LineKey(FormType.W2, 1, "wages"),
        )
        assert graph.dependents_of(LineKey(FormType.W2, 1, "wages")) == (
            LineKey(FormType.F1040, 0, "wages"),
        )

    def test_raw_lines_have_no_inputs(self, single_profile) -> None:
        graph = FormGraph.build(default_catalog(), single_profile, [w2("30000")])
        assert graph.inputs_of(LineKey(FormType.W2, 0, "wages")) == ()
        assert graph.bindings(LineKey(FormType.W2, 0, "wages")) == {}

    def test_absent_sum_has_no_sources(self, single_profile) -> None:
        graph = FormGraph.build(default_catalog(), single_profile, [])
        binding = graph.bindings(LineKey(FormType.F1040, 0, "wages"))["wages"]
        assert binding.is_absent
        assert graph.missing_inputs == ()

    def test_graph_is_acyclic_and_frozen(self, single_profile) -> None:
        graph = FormGraph.build(default_catalog(), single_profile, [w2("30000")])
        assert nx.is_directed_acyclic_graph(graph.graph)
        with pytest.raises(nx.NetworkXError):
            graph.graph.add_node("extra")

    def test_every_line_of_every_instance_is_a_node(self, single_profile) -> None:
        catalog = default_catalog()
        graph = FormGraph.build(catalog, single_profile, [w2("30000")])
        expected = sum(len(catalog.spec(form_type).lines) for form_type, _ in graph.instances)
        assert graph.node_count == expected == len(graph.keys())

    def test_self_employment_without_business_is_missing_input(self, single_profile) -> None:
        graph = FormGraph.build(
            default_catalog(), single_profile, [FormInput(form_type=FormType.SCHEDULE_SE)]
        )
        (missing,) = graph.missing_inputs
        assert str(missing.line) == "SCHEDULE_SE[0].net_profit"
        assert missing.reference == "SCHEDULE_C[*].net_profit"

    def test_joint_filer_graph(self) -> None:
        profile = make_profile(FilingStatus.MARRIED_FILING_JOINTLY)
        graph = FormGraph.build(default_catalog(), profile, [w2("30000")])
        assert graph.has_form(FormType.F1040)
        assert not graph.has_form(FormType.W2, 1)
