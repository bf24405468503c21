import json
from datetime import datetime, timezone

import pytest
import requests

from opportunity_agent.pipeline import identify_opportunities
from opportunity_agent.processors.ai import (
    GenerationError,
    OpportunityGenerator,
    confidence_from_score,
    create_generator,
)
from opportunity_agent.processors.ai.claude import AnthropicGenerator
from opportunity_agent.processors.ai.demo import DIVERSE_TOPICS
from opportunity_agent.processors.ai.fallback import FallbackGenerator, format_future_month, infer_category
from opportunity_agent.processors.ai.gemini import GeminiGenerator
from opportunity_agent.processors.ai.remote import RemoteGenerator

VALID_MARKET = {
    "question": "Will the EU adopt the privacy bill by June",
    "category": "regulation",
    "urgency": "timely",
    "suggestedDurationDays": 120,
    "suggestedLiquidityUSDC": 8000,
    "reasoning": "Vote is scheduled",
}


class ScriptedGenerator(RemoteGenerator):
    """Remote generator whose completions come from a list (exceptions are raised)."""

    name = "scripted"

    def __init__(self, replies, config=None):
        super().__init__(config)
        self.replies = list(replies)
        self.prompts = []

    def _complete(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else GenerationError("no reply")
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


# ---------------- Fallback -----------------

def test_topic_gets_question_mark_and_inferred_category():
    opp = FallbackGenerator().generate_from_topic("Will ETF approval happen")

    assert opp.question == "Will ETF approval happen?"
    assert opp.category == "technology"
    assert opp.source_topic == "Will ETF approval happen"
    assert opp.source_news is None
    assert opp.confidence == pytest.approx(0.7)


@pytest.mark.parametrize(
    "topic",
    ["Will privacy win", "Will privacy win?", "  Will Zcash flip Monero  ", "Will the SEC ban mixers"],
)
def test_topic_questions_always_end_with_question_mark(topic):
    assert FallbackGenerator().generate_from_topic(topic).question.endswith("?")


def test_explicit_category_is_kept():
    opp = FallbackGenerator().generate_from_topic("Will wallets grow", "regulation")
    assert opp.category == "regulation"
    assert opp.suggested_duration_days == 90


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError):
        FallbackGenerator().generate_from_topic("Will it happen", "sports")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Will the SEC ban mixers", "regulation"),
        ("Will a hack drain a bridge", "events"),
        ("Will wallet users double", "adoption"),
        ("Will rollups get faster", "technology"),
    ],
)
def test_infer_category(text, expected):
    assert infer_category(text) == expected


def test_news_market_follows_candidate(make_candidate):
    fixed = datetime(2026, 1, 1, tzinfo=timezone.utc)
    gen = FallbackGenerator(clock=lambda: fixed)
    cand = make_candidate("SEC reviews privacy coins", score=85, category="regulation", urgency="timely")

    opp = gen.generate_from_news(cand)

    assert opp.category == "regulation"
    assert opp.urgency == "timely"
    assert opp.suggested_duration_days == 90
    assert "SEC reviews privacy coins" in opp.question
    assert opp.question.endswith("April 2026?")
    assert opp.confidence == pytest.approx(0.85)
    assert opp.source_news.title == cand.title
    assert opp.source_news.link == cand.link
    assert opp.source_topic is None


def test_breaking_news_gets_short_duration(make_candidate):
    opp = FallbackGenerator().generate_from_news(make_candidate(category="events", urgency="breaking"))
    assert opp.suggested_duration_days == 14


def test_format_future_month():
    now = datetime(2026, 1, 20, tzinfo=timezone.utc)
    assert format_future_month(30, now=now) == "February 2026"


@pytest.mark.parametrize("count", [1, 3, 5, 10])
def test_fallback_diverse_count(count):
    results = FallbackGenerator().generate_diverse_markets(count)
    assert len(results) == count
    assert all(r.success and r.opportunity for r in results)


def test_confidence_mapping():
    assert confidence_from_score(10) == pytest.approx(0.3)
    assert confidence_from_score(55) == pytest.approx(0.55)
    assert confidence_from_score(100) == pytest.approx(0.9)


# ---------------- Remote -----------------

def test_remote_generation_from_json(make_candidate):
    gen = ScriptedGenerator([f"```json\n{json.dumps(VALID_MARKET)}\n```"])

    opp = gen.generate_from_news(make_candidate("EU privacy bill", score=70))

    assert opp.question == "Will the EU adopt the privacy bill by June?"
    assert opp.category == "regulation"
    assert opp.suggested_liquidity == 8000.0
    assert opp.confidence == pytest.approx(0.7)
    assert "EU privacy bill" in gen.prompts[0]


def test_remote_out_of_range_output_fails(make_candidate):
    gen = ScriptedGenerator([json.dumps(dict(VALID_MARKET, suggestedDurationDays=900))])
    with pytest.raises(ValueError):
        gen.generate_from_news(make_candidate())


def test_all_failures_substitute_demo_markets():
    gen = ScriptedGenerator([requests.ConnectionError("down")] * 4)

    results = gen.generate_diverse_markets(4)

    assert len(results) == 4
    assert all(r.success for r in results)
    assert all(r.opportunity.confidence == pytest.approx(0.75) for r in results)


def test_all_failures_without_substitution():
    gen = ScriptedGenerator(["not json"] * 3)

    results = gen.generate_diverse_markets(3, substitute_demo=False)

    assert [r.success for r in results] == [False, False, False]
    assert results[0].topic == DIVERSE_TOPICS[0]
    assert results[0].error


def test_partial_failure_keeps_per_item_results():
    replies = [GenerationError("quota")] + [json.dumps(VALID_MARKET)] * 2
    gen = ScriptedGenerator(replies)

    results = gen.generate_diverse_markets(3)

    assert [r.success for r in results] == [False, True, True]
    assert results[0].error == "quota"


def test_diverse_count_is_capped_by_topic_list():
    gen = ScriptedGenerator([json.dumps(VALID_MARKET)] * 20)
    assert len(gen.generate_diverse_markets(50)) == len(DIVERSE_TOPICS)


def test_gemini_extracts_text(monkeypatch):
    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured["params"] = kwargs["params"]
        return FakeResponse({"candidates": [{"content": {"parts": [{"text": json.dumps(VALID_MARKET)}]}}]})

    monkeypatch.setattr("opportunity_agent.processors.ai.gemini.requests.post", fake_post)
    gen = GeminiGenerator(api_key="k")

    opp = gen.generate_from_topic("EU privacy bill")

    assert opp.category == "regulation"
    assert captured["params"] == {"key": "k"}
    assert ":generateContent" in captured["url"]


def test_gemini_without_candidates_raises(monkeypatch):
    monkeypatch.setattr(
        "opportunity_agent.processors.ai.gemini.requests.post",
        lambda url, **kwargs: FakeResponse({"candidates": []}),
    )
    with pytest.raises(GenerationError):
        GeminiGenerator(api_key="k")._complete("prompt")


def test_anthropic_extracts_text(monkeypatch):
    captured = {}

    def fake_post(url, **kwargs):
        captured["headers"] = kwargs["headers"]
        return FakeResponse({"content": [{"type": "text", "text": json.dumps(VALID_MARKET)}]})

    monkeypatch.setattr("opportunity_agent.processors.ai.claude.requests.post", fake_post)

    text = AnthropicGenerator(api_key="secret")._complete("prompt")

    assert json.loads(text)["category"] == "regulation"
    assert captured["headers"]["x-api-key"] == "secret"


def test_remote_backends_require_keys():
    with pytest.raises(RuntimeError):
        GeminiGenerator()
    with pytest.raises(RuntimeError):
        AnthropicGenerator()


# ---------------- Factory -----------------

def test_factory_without_credentials_uses_fallback():
    assert isinstance(create_generator(), FallbackGenerator)


def test_factory_prefers_gemini(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "g")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "a")
    assert isinstance(create_generator(), GeminiGenerator)


def test_factory_uses_anthropic_when_only_key(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "a")
    assert isinstance(create_generator(), AnthropicGenerator)


def test_factory_explicit_backend(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "g")
    monkeypatch.setenv("GENERATION_BACKEND", "fallback")
    assert isinstance(create_generator(), FallbackGenerator)
    with pytest.raises(ValueError):
        create_generator(backend="ollama")


def test_generators_share_interface():
    assert issubclass(FallbackGenerator, OpportunityGenerator)
    assert issubclass(GeminiGenerator, RemoteGenerator)


# ---------------- Malformed provider bodies -----------------

@pytest.mark.parametrize(
    "payload",
    [["unexpected"], {"candidates": ["text"]}, {"candidates": [{"content": "text"}]}, {"candidates": "x"}],
)
def test_gemini_malformed_body_substitutes_demo(monkeypatch, payload):
    monkeypatch.setattr(
        "opportunity_agent.processors.ai.gemini.requests.post",
        lambda url, **kwargs: FakeResponse(payload),
    )
    gen = GeminiGenerator(api_key="k")

    with pytest.raises(GenerationError):
        gen._complete("prompt")
    results = gen.generate_diverse_markets(3)

    assert len(results) == 3
    assert all(r.success and r.opportunity.source_topic for r in results)


@pytest.mark.parametrize("payload", [["unexpected"], {"content": "text"}, {"content": ["text", 3]}])
def test_anthropic_malformed_body_is_a_per_item_failure(monkeypatch, payload, make_candidate):
    monkeypatch.setattr(
        "opportunity_agent.processors.ai.claude.requests.post",
        lambda url, **kwargs: FakeResponse(payload),
    )
    gen = AnthropicGenerator(api_key="secret")

    with pytest.raises(GenerationError):
        gen._complete("prompt")
    opportunities = identify_opportunities([make_candidate(score=80)], gen, fallback_count=2)

    # news item dropped, diverse batch all failed, demo markets substituted
    assert len(opportunities) == 2
    assert all(o.source_topic for o in opportunities)
