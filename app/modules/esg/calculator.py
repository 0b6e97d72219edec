"""Derived ESG ratios computed from raw questionnaire inputs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# (output field, numerator field, denominator field, scale)
RATIO_DEFINITIONS: tuple[tuple[str, str, str, float], ...] = (
    ("carbon_intensity", "carbon_emissions", "total_revenue", 1.0),
    (
        "renewable_electricity_ratio",
        "renewable_electricity_consumption",
        "total_electricity_consumption",
        100.0,
    ),
    ("diversity_ratio", "female_employees", "total_employees", 100.0),
    ("community_spend_ratio", "community_investment_spend", "total_revenue", 100.0),
)

CALCULATED_FIELDS: tuple[str, ...] = tuple(d[0] for d in RATIO_DEFINITIONS)


def calculate_metrics(data: Mapping[str, Any]) -> dict[str, float]:
    """Return the derived ratios that can be computed from ``data``.

    A ratio is included only when both inputs are present (not None) and the
    denominator is strictly positive. A zero numerator still counts as present
    and yields 0.0. Missing ratios are left out of the result entirely.
    """
    metrics: dict[str, float] = {}
    for output, numerator_key, denominator_key, scale in RATIO_DEFINITIONS:
        numerator = data.get(numerator_key)
        denominator = data.get(denominator_key)
        if numerator is None or denominator is None or denominator <= 0:
            continue
        metrics[output] = scale * numerator / denominator
    return metrics
