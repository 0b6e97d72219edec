"""Static description of the ESG questionnaire, consumed by the dashboard."""

from __future__ import annotations

from typing import Any

METRICS_METADATA: dict[str, list[dict[str, Any]]] = {
    "environmental": [
        {
            "key": "totalElectricityConsumption",
            "title": "Total electricity consumption",
            "type": "number",
            "unit": "kWh",
        },
        {
            "key": "renewableElectricityConsumption",
            "title": "Renewable electricity consumption",
            "type": "number",
            "unit": "kWh",
        },
        {
            "key": "totalFuelConsumption",
            "title": "Total fuel consumption",
            "type": "number",
            "unit": "liters",
        },
        {
            "key": "carbonEmissions",
            "title": "Carbon emissions",
            "type": "number",
            "unit": "T CO2e",
        },
    ],
    "social": [
        {
            "key": "totalEmployees",
            "title": "Total number of employees",
            "type": "number",
            "unit": "",
        },
        {
            "key": "femaleEmployees",
            "title": "Number of female employees",
            "type": "number",
            "unit": "",
        },
        {
            "key": "averageTrainingHours",
            "title": "Average training hours per employee (per year)",
            "type": "number",
            "unit": "",
        },
        {
            "key": "communityInvestmentSpend",
            "title": "Community investment spend",
            "type": "number",
            "unit": "INR",
        },
    ],
    "governance": [
        {
            "key": "independentBoardMembersPercent",
            "title": "% of independent board members",
            "type": "number",
            "unit": "%",
        },
        {
            "key": "hasDataPrivacyPolicy",
            "title": "Does the company have a data privacy policy?",
            "type": "dropdown",
            "options": ["Yes", "No"],
            "unit": "",
        },
        {
            "key": "totalRevenue",
            "title": "Total Revenue",
            "type": "number",
            "unit": "INR",
        },
    ],
    "autoCalculated": [
        {
            "key": "carbonIntensity",
            "title": "Carbon Intensity",
            "formula": "(Carbon emissions / Total revenue)",
            "unit": "T CO2e / INR",
        },
        {
            "key": "renewableElectricityRatio",
            "title": "Renewable Electricity Ratio",
            "formula": "100 * (Renewable electricity consumption / Total electricity consumption)",
            "unit": "%",
        },
        {
            "key": "diversityRatio",
            "title": "Diversity Ratio",
            "formula": "100 * (Female Employees / Total Employees)",
            "unit": "%",
        },
        {
            "key": "communitySpendRatio",
            "title": "Community Spend Ratio",
            "formula": "100 * (Community investment spend / Total Revenue)",
            "unit": "%",
        },
    ],
}
