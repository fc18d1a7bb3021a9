from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError

from engine.exceptions import BriefingError
from engine.insights import (
    BriefingGenerator,
    BriefingRecommendation,
    ReplenishmentBriefing,
    briefing_summary,
)
from engine.pipeline import run_pipeline

BRIEFING = ReplenishmentBriefing(
    executive_summary="A1 is below its reorder point.",
    recommendations=[
        BriefingRecommendation(title="Order A1", detail="Buy 329 units now.", urgency="immediate")
    ],
)


class FakeCompletions:
    def __init__(self, parsed=BRIEFING, error=None):
        self.parsed = parsed
        self.error = error
        self.calls = []

    def parse(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(parsed=self.parsed)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_generate_briefing(a1_history):
    completions = FakeCompletions()
    snapshot = run_pipeline(a1_history, ["A1"])

    briefing = BriefingGenerator(client=fake_client(completions)).generate(snapshot)

    assert briefing == BRIEFING
    call = completions.calls[0]
    assert call["response_format"] is ReplenishmentBriefing
    assert "SKU A1: buy 329 units" in call["messages"][1]["content"]
    assert "7-day lead time" in call["messages"][1]["content"]


def test_no_selection_raises_before_calling(a1_history):
    completions = FakeCompletions()
    with pytest.raises(BriefingError) as exc_info:
        BriefingGenerator(client=fake_client(completions)).generate(run_pipeline(a1_history, []))

    assert exc_info.value.code == "no_selection"
    assert completions.calls == []


def test_api_error_is_wrapped(a1_history):
    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    generator = BriefingGenerator(client=fake_client(FakeCompletions(error=error)))

    with pytest.raises(BriefingError) as exc_info:
        generator.generate(run_pipeline(a1_history, ["A1"]))
    assert exc_info.value.code == "api_error"


def test_empty_response(a1_history):
    generator = BriefingGenerator(client=fake_client(FakeCompletions(parsed=None)))
    with pytest.raises(BriefingError):
        generator.generate(run_pipeline(a1_history, ["A1"]))


def test_summary_and_markdown(a1_history):
    summary = briefing_summary(run_pipeline(a1_history, ["A1"]))

    assert summary["forecast_units_120d"] == 1200
    assert summary["lead_time_days"] == 7
    assert summary["scenario"]["demand_change"] == "+0%"

    markdown = BRIEFING.to_markdown()
    assert "**Order A1** (immediate)" in markdown
