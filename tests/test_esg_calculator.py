"""Tests for the derived ESG ratio calculator."""

import pytest

from app.modules.esg.calculator import CALCULATED_FIELDS, RATIO_DEFINITIONS, calculate_metrics

FULL_INPUT = {
    "carbon_emissions": 1500,
    "total_revenue": 10_000_000,
    "renewable_electricity_consumption": 250_000,
    "total_electricity_consumption": 1_000_000,
    "female_employees": 45,
    "total_employees": 100,
    "community_investment_spend": 500_000,
}


class TestScenarios:
    def test_full_input_produces_all_four_ratios(self) -> None:
        metrics = calculate_metrics(FULL_INPUT)
        assert set(metrics) == set(CALCULATED_FIELDS)
        assert metrics["carbon_intensity"] == pytest.approx(0.00015)
        assert metrics["renewable_electricity_ratio"] == pytest.approx(25)
        assert metrics["diversity_ratio"] == pytest.approx(45)
        assert metrics["community_spend_ratio"] == pytest.approx(5)

    def test_zero_revenue_suppresses_revenue_ratios(self) -> None:
        metrics = calculate_metrics({"total_revenue": 0, "carbon_emissions": 100})
        assert "carbon_intensity" not in metrics
        assert "community_spend_ratio" not in metrics
        assert metrics == {}

    def test_empty_input_returns_empty_dict(self) -> None:
        assert calculate_metrics({}) == {}

    def test_zero_numerator_is_a_real_value(self) -> None:
        """Zero female employees is a legitimate 0% diversity ratio, not a missing one."""
        metrics = calculate_metrics({"female_employees": 0, "total_employees": 100})
        assert metrics == {"diversity_ratio": 0.0}

    def test_input_is_not_mutated(self) -> None:
        data = dict(FULL_INPUT)
        calculate_metrics(data)
        assert data == FULL_INPUT

    def test_unrelated_fields_are_ignored(self) -> None:
        metrics = calculate_metrics({"total_fuel_consumption": 50_000, "has_data_privacy_policy": True})
        assert metrics == {}


# (numerator, denominator, expected present?)
_GATING_CASES = [
    (10, 20, True),
    (0, 20, True),
    (-5, 20, True),
    (10, 0, False),
    (10, -20, False),
    (None, 20, False),
    (10, None, False),
    (None, None, False),
]


@pytest.mark.parametrize(("output", "numerator_key", "denominator_key", "scale"), RATIO_DEFINITIONS)
@pytest.mark.parametrize(("numerator", "denominator", "present"), _GATING_CASES)
def test_gating_rule(
    output: str,
    numerator_key: str,
    denominator_key: str,
    scale: float,
    numerator: float | None,
    denominator: float | None,
    present: bool,
) -> None:
    """Each ratio exists iff both inputs are present and the denominator is positive."""
    metrics = calculate_metrics({numerator_key: numerator, denominator_key: denominator})
    if present:
        assert metrics[output] == pytest.approx(scale * numerator / denominator)
    else:
        assert output not in metrics


def test_ratios_are_independent() -> None:
    """A missing input for one ratio does not suppress the others."""
    data = dict(FULL_INPUT)
    data.pop("total_employees")
    metrics = calculate_metrics(data)
    assert "diversity_ratio" not in metrics
    assert set(metrics) == {"carbon_intensity", "renewable_electricity_ratio", "community_spend_ratio"}
