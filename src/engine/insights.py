"""
AI-assisted strategic briefing using structured outputs.

All numbers are computed by the engine and passed in; the LLM only
interprets them. Pydantic models pin down the shape of the answer so the
dashboard can render it without parsing free text.
"""

from typing import Literal
import json
import logging

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field

from .exceptions import BriefingError
from .pipeline import DashboardSnapshot

logger = logging.getLogger(__name__)


class BriefingRecommendation(BaseModel):
    """One actionable recommendation."""

    title: str = Field(description="Short imperative headline")
    detail: str = Field(description="What to do and why, referencing the numbers given")
    urgency: Literal["immediate", "this_week", "monitor"]


class ReplenishmentBriefing(BaseModel):
    """Strategic briefing for the selected SKUs."""

    executive_summary: str = Field(
        description="High-level overview of the forecast and inventory status, 2-3 sentences"
    )
    recommendations: list[BriefingRecommendation] = Field(
        description="2-3 specific recommendations; must comment on the purchase recommendations"
    )

    def to_markdown(self) -> str:
        lines = ["**Executive Summary**", "", self.executive_summary, "", "**Actionable Recommendations**", ""]
        for rec in self.recommendations:
            lines.append(f"- **{rec.title}** ({rec.urgency.replace('_', ' ')}): {rec.detail}")
        return "\n".join(lines)


SYSTEM_PROMPT = """You are a world-class supply chain analyst for a promotional products company.

Your job is to:
1. Interpret the replenishment figures provided
2. Judge how urgent the purchase recommendations are given the lead time
3. Write clearly for a non-technical buyer

Use the exact numbers provided. Do not invent figures."""


def briefing_summary(snapshot: DashboardSnapshot) -> dict:
    """The pre-computed facts the briefing is written from."""
    first_sku = snapshot.active_skus[0] if snapshot.active_skus else None
    first_metrics = snapshot.sku_metrics.get(first_sku) if first_sku else None

    return {
        "selected_skus": snapshot.active_skus,
        "lead_time_days": first_metrics.adjusted_lead_time if first_metrics else None,
        "forecast_units_120d": sum(
            point.units
            for metrics in snapshot.sku_metrics.values()
            for point in metrics.forecast_series
        ),
        "scenario": {
            "service_level": f"{snapshot.scenario.service_level}%",
            "demand_change": f"{snapshot.scenario.demand_change_pct:+g}%",
            "lead_time_change": f"{snapshot.scenario.lead_time_change_pct:+g}%",
            "vendor": snapshot.scenario.vendor_filter,
        },
        "purchase_recommendations": [
            f"SKU {r['sku']}: buy {r['purchase_quantity']:,} units "
            f"(on hand {r['current_inventory']}, reorder point {r['reorder_point']})"
            for r in snapshot.recommendations
        ]
        or ["None"],
        "kpis": snapshot.kpis,
    }


class BriefingGenerator:
    """
    Generates the strategic briefing with an LLM.

    What to trust vs verify:
    - TRUST: wording, prioritisation of the recommendations
    - VERIFY: any number in the text against the KPI cards
    """

    def __init__(self, model: str = "gpt-4o-mini", client: OpenAI | None = None):
        if client is None:
            try:
                client = OpenAI()
            except OpenAIError as exc:
                raise BriefingError(
                    "OpenAI client is not configured (set OPENAI_API_KEY)",
                    code="not_configured",
                ) from exc
        self.client = client
        self.model = model

    def generate(self, snapshot: DashboardSnapshot) -> ReplenishmentBriefing:
        if not snapshot.sku_metrics:
            raise BriefingError(
                "Not enough data to generate insights. Please select at least one SKU.",
                code="no_selection",
            )

        prompt = self._build_prompt(briefing_summary(snapshot))
        logger.info("Requesting briefing for %d SKUs from %s", len(snapshot.sku_metrics), self.model)

        try:
            response = self.client.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format=ReplenishmentBriefing,
            )
        except OpenAIError as exc:
            logger.error("Briefing request failed: %s", exc)
            raise BriefingError(f"Briefing request failed: {exc}", code="api_error") from exc

        parsed = response.choices[0].message.parsed
        if parsed is None:
            raise BriefingError("The model returned no briefing", code="empty_response")
        return parsed

    def _build_prompt(self, summary: dict) -> str:
        return f"""Provide a concise, actionable strategic briefing for the data below.

## Data Summary (pre-computed, use these exact numbers)
{json.dumps(summary, indent=2)}

The forecast is a flat projection of average daily sales adjusted by the demand scenario.

Write:
1. Executive Summary: a brief overview of the forecast and inventory status.
2. Actionable Recommendations: 2-3 specific recommendations. You must comment on the
   purchase recommendations: are they urgent, how do they align with the forecast, and
   what is the risk of not acting given the {summary['lead_time_days']}-day lead time?"""
