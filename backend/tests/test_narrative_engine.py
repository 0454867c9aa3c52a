"""Tests for the template-driven narrative classifier"""
import copy
import pytest
from datetime import datetime, timezone

from engine.narrative_engine import detect_narratives, score_template
from engine.narrative_templates import (
    NARRATIVE_TEMPLATES, TRENDS, CATEGORIES, SIGNAL_TYPES, DIFFICULTIES, POTENTIALS,
)
from engine.signals import empty_signals

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)

ALWAYS_ON_IDS = {"depin-expansion", "solana-payments-mainstream", "consumer-crypto-solana"}


def make_repo(name, topics=(), description="", stars=10):
    return {
        "name": name,
        "full_name": f"owner/{name}",
        "description": description,
        "stars": stars,
        "stars_change": 0,
        "forks": 1,
        "language": "Rust",
        "url": f"https://github.com/owner/{name}",
        "topics": list(topics),
        "updated_at": "2026-03-10T00:00:00Z",
    }


def make_token(name, symbol):
    return {"id": name.lower(), "name": name, "symbol": symbol,
            "current_price": 1, "market_cap": 1, "price_change_7d": 0}


def make_protocol(name, category="Dexes", change=10.0, tvl=50_000_000):
    return {"name": name, "tvl": tvl, "tvl_change_7d": change, "category": category, "chain": "Solana"}


def raw_with(**overrides):
    raw = empty_signals()
    raw.update(overrides)
    return raw


def ids(narratives):
    return [n["id"] for n in narratives]


def by_id(narratives, narrative_id):
    return next(n for n in narratives if n["id"] == narrative_id)


class TestGating:
    def test_empty_signals_yield_only_always_on(self):
        narratives = detect_narratives(empty_signals(), now=NOW)
        assert set(ids(narratives)) == ALWAYS_ON_IDS
        assert "ai-agents-solana" not in ids(narratives)
        assert "defi-renaissance" not in ids(narratives)

    def test_gating_asymmetry_is_explicit(self):
        """Two templates are data-gated, three always appear. Pinned on purpose."""
        always_on = {t["id"] for t in NARRATIVE_TEMPLATES if t["always_on"]}
        gated = {t["id"] for t in NARRATIVE_TEMPLATES if not t["always_on"]}
        assert always_on == ALWAYS_ON_IDS
        assert gated == {"ai-agents-solana", "defi-renaissance"}

    def test_inactive_template_never_emitted_even_with_max_score(self):
        template = copy.copy(NARRATIVE_TEMPLATES[0])
        template.update({
            "id": "never",
            "always_on": False,
            "is_active": lambda m: False,
            "score": {"base": 100, "cap": 100, "weights": {}},
        })
        assert detect_narratives(empty_signals(), now=NOW, templates=[template]) == []


class TestAiAgents:
    def test_absent_without_matches(self):
        raw = raw_with(
            github_repos=[make_repo("wallet", topics=["solana"], description="A wallet")],
            tokens=[make_token("Jupiter", "JUP")],
        )
        assert "ai-agents-solana" not in ids(detect_narratives(raw, now=NOW))

    def test_single_repo_not_enough(self):
        raw = raw_with(github_repos=[make_repo("trade-agent")])
        assert "ai-agents-solana" not in ids(detect_narratives(raw, now=NOW))

    def test_two_repos_activate(self):
        raw = raw_with(github_repos=[
            make_repo("eliza", topics=["ai"]),
            make_repo("bot", description="An Autonomous trader"),
        ])
        ai = by_id(detect_narratives(raw, now=NOW), "ai-agents-solana")
        assert ai["signal_strength"] >= 60
        assert ai["signal_strength"] == 70

    def test_one_token_activates(self):
        raw = raw_with(tokens=[make_token("Grass AI", "GRASS")])
        ai = by_id(detect_narratives(raw, now=NOW), "ai-agents-solana")
        assert ai["signal_strength"] == 63
        assert ai["signals"][-1]["type"] == "market"
        assert ai["signals"][-1]["value"] == "1"

    def test_score_capped_at_95(self):
        raw = raw_with(github_repos=[make_repo(f"agent-{i}") for i in range(30)])
        ai = by_id(detect_narratives(raw, now=NOW), "ai-agents-solana")
        assert ai["signal_strength"] == 95

    def test_signals_start_with_count_then_three_examples(self):
        repos = [make_repo(f"agent-{i}", description="x" * 150) for i in range(5)]
        ai = by_id(detect_narratives(raw_with(github_repos=repos), now=NOW), "ai-agents-solana")
        signals = ai["signals"]
        assert signals[0]["description"].startswith("5 active AI+Solana repos")
        assert signals[0]["value"] == "5"
        examples = signals[1:]
        assert len(examples) == 3
        assert examples[0]["url"] == "https://github.com/owner/agent-0"
        assert examples[0]["description"] == "owner/agent-0: " + "x" * 100


class TestDefiRenaissance:
    def test_three_growing_protocols_activate(self):
        raw = raw_with(protocols=[
            make_protocol("Jupiter", "Dexes"),
            make_protocol("Kamino", "Lending"),
            make_protocol("Jito", "Liquid Staking"),
        ])
        defi = by_id(detect_narratives(raw, now=NOW), "defi-renaissance")
        assert defi["signal_strength"] >= 65
        assert defi["signal_strength"] == 65

    def test_two_growing_protocols_absent(self):
        raw = raw_with(protocols=[make_protocol("Jupiter"), make_protocol("Kamino", "Lending")])
        assert "defi-renaissance" not in ids(detect_narratives(raw, now=NOW))

    def test_growth_must_exceed_five_percent(self):
        raw = raw_with(protocols=[make_protocol(f"P{i}", change=5.0) for i in range(4)])
        assert "defi-renaissance" not in ids(detect_narratives(raw, now=NOW))

    def test_non_defi_categories_ignored(self):
        raw = raw_with(protocols=[make_protocol(f"P{i}", category="NFT Marketplace") for i in range(4)])
        assert "defi-renaissance" not in ids(detect_narratives(raw, now=NOW))

    def test_signal_formatting(self):
        raw = raw_with(
            tvl_data={"tvl": 9_123_000_000, "change_24h": 1.26},
            protocols=[make_protocol(f"P{i}", tvl=12_340_000, change=7.25) for i in range(3)],
        )
        signals = by_id(detect_narratives(raw, now=NOW), "defi-renaissance")["signals"]
        assert signals[0]["value"] == "3"
        assert signals[1]["description"] == "P0 (Dexes): TVL $12.3M, +7.2% 7d"
        assert signals[1]["change"] == "+7.2%"
        assert signals[-1]["value"] == "$9.12B"
        assert signals[-1]["change"] == "1.3%"

    def test_protocol_examples_follow_count(self):
        raw = raw_with(protocols=[make_protocol(f"P{i}") for i in range(5)])
        signals = by_id(detect_narratives(raw, now=NOW), "defi-renaissance")["signals"]
        assert len(signals) == 1 + 3 + 1
        assert [s["description"].split(" ")[0] for s in signals[1:4]] == ["P0", "P1", "P2"]
        assert signals[4]["description"].startswith("Total Solana TVL")


class TestAlwaysOnScores:
    def test_baseline_scores(self):
        narratives = detect_narratives(empty_signals(), now=NOW)
        assert by_id(narratives, "solana-payments-mainstream")["signal_strength"] == 78
        assert by_id(narratives, "consumer-crypto-solana")["signal_strength"] == 72
        assert by_id(narratives, "depin-expansion")["signal_strength"] == 55

    def test_depin_score_counts_repos_and_tokens(self):
        raw = raw_with(
            github_repos=[
                make_repo("hotspot", topics=["iot"]),
                make_repo("mapper", description="DePIN mapping network"),
            ],
            tokens=[make_token("Helium", "HNT")],
        )
        depin = by_id(detect_narratives(raw, now=NOW), "depin-expansion")
        assert depin["signal_strength"] == 55 + 2 * 4 + 5

    def test_fixed_scores_ignore_matches(self):
        raw = raw_with(github_repos=[make_repo(f"pay-{i}", topics=["payments"]) for i in range(10)])
        payments = by_id(detect_narratives(raw, now=NOW), "solana-payments-mainstream")
        assert payments["signal_strength"] == 78
        assert payments["signals"][0]["value"] == "10"

    @pytest.mark.parametrize("narrative_id, static_types", [
        ("depin-expansion", ["market", "social"]),
        ("solana-payments-mainstream", ["onchain", "social"]),
        ("consumer-crypto-solana", ["social", "onchain"]),
    ])
    def test_signals_count_then_examples_then_static(self, narrative_id, static_types):
        repos = [make_repo(f"repo-{i}", topics=["depin", "payments", "social"]) for i in range(5)]
        signals = by_id(detect_narratives(raw_with(github_repos=repos), now=NOW), narrative_id)["signals"]

        assert signals[0]["type"] == "github"
        assert signals[0]["value"] == "5"
        examples = signals[1:4]
        assert [s["url"] for s in examples] == [f"https://github.com/owner/repo-{i}" for i in range(3)]
        assert all(s["type"] == "github" for s in examples)
        assert [s["type"] for s in signals[4:]] == static_types

    @pytest.mark.parametrize("narrative_id", [
        "depin-expansion", "solana-payments-mainstream", "consumer-crypto-solana",
    ])
    def test_no_examples_without_matching_repos(self, narrative_id):
        signals = by_id(detect_narratives(empty_signals(), now=NOW), narrative_id)["signals"]
        assert signals[0]["value"] == "0"
        assert not any("url" in s for s in signals)
        assert len(signals) == 3


class TestOrderingAndShape:
    RICH = {
        "github_repos": [make_repo(f"agent-{i}", topics=["ai", "depin"]) for i in range(8)],
        "tokens": [make_token("Render", "RNDR"), make_token("AI Coin", "AIC")],
        "protocols": [make_protocol(f"P{i}") for i in range(10)],
    }

    @pytest.mark.parametrize("overrides", [{}, RICH])
    def test_strength_bounds_and_sorting(self, overrides):
        narratives = detect_narratives(raw_with(**overrides), now=NOW)
        strengths = [n["signal_strength"] for n in narratives]
        assert all(isinstance(s, int) and 0 <= s <= 100 for s in strengths)
        assert strengths == sorted(strengths, reverse=True)

    def test_ties_keep_template_order(self):
        def fixed(template_id, score):
            t = copy.copy(NARRATIVE_TEMPLATES[-1])
            t.update({"id": template_id, "score": {"base": score, "cap": score, "weights": {}}})
            return t

        templates = [fixed("a", 90), fixed("b", 95), fixed("c", 90)]
        assert ids(detect_narratives(empty_signals(), now=NOW, templates=templates)) == ["b", "a", "c"]

    def test_enumerations_respected(self):
        for n in detect_narratives(raw_with(**self.RICH), now=NOW):
            assert n["trend"] in TRENDS
            assert n["category"] in CATEGORIES
            assert all(s["type"] in SIGNAL_TYPES for s in n["signals"])
            for idea in n["build_ideas"]:
                assert idea["difficulty"] in DIFFICULTIES
                assert idea["potential"] in POTENTIALS
                assert idea["narrative"] == n["title"]
                assert idea["key_features"]

    def test_ids_unique(self):
        narratives = detect_narratives(raw_with(**self.RICH), now=NOW)
        assert len(ids(narratives)) == len(set(ids(narratives))) == 5

    def test_idempotent_for_same_input(self):
        raw = raw_with(**self.RICH)
        assert detect_narratives(raw, now=NOW) == detect_narratives(raw, now=NOW)

    def test_detected_at_from_now(self):
        for n in detect_narratives(empty_signals(), now=NOW):
            assert n["detected_at"] == NOW.isoformat()

    def test_tolerates_missing_fields(self):
        raw = {
            "tvl_data": {},
            "protocols": [{"name": "x"}],
            "github_repos": [{"full_name": "a/b", "description": None, "topics": None}],
            "tokens": [{"name": None, "symbol": None}],
            "onchain_stats": {},
        }
        narratives = detect_narratives(raw, now=NOW)
        assert set(ids(narratives)) == ALWAYS_ON_IDS

    def test_build_ideas_not_shared_between_reports(self):
        first = detect_narratives(empty_signals(), now=NOW)
        first[0]["build_ideas"][0]["key_features"].append("mutated")
        second = detect_narratives(empty_signals(), now=NOW)
        assert "mutated" not in second[0]["build_ideas"][0]["key_features"]


class TestScoreTemplate:
    def test_clamped_to_100(self):
        template = {"score": {"base": 90, "cap": 150, "weights": {"repos": 10}}}
        assert score_template(template, {"repos": [1, 2, 3]}) == 100

    def test_clamped_to_zero(self):
        template = {"score": {"base": 10, "cap": 90, "weights": {"repos": -10}}}
        assert score_template(template, {"repos": [1, 2, 3]}) == 0

    def test_missing_match_key_counts_zero(self):
        template = {"score": {"base": 40, "cap": 90, "weights": {"tokens": 3}}}
        assert score_template(template, {}) == 40
