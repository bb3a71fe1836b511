import random
from datetime import datetime, timezone

import pytest

from candle_sync.core.time.time_source import to_epoch_ms
from candle_sync.scheduler.domain.window_descriptor import WindowWidth
from candle_sync.scheduler.services.random_confluence_scorer import (
    DEFAULT_STRATEGIES,
    RandomConfluenceScorer,
)
from candle_sync.scheduler.services.window_calculator import WindowCalculator

WINDOW = WindowCalculator(WindowWidth.TWO_MINUTES).describe(
    to_epoch_ms(datetime(2024, 3, 1, 12, 1, 57, tzinfo=timezone.utc))
)


def test_confidence_stays_within_bounds():
    scorer = RandomConfluenceScorer(rng=random.Random(7))

    results = [scorer.score("EURUSD_otc", WINDOW) for _ in range(200)]

    assert all(70 <= r.confidence <= 95 for r in results)
    assert all(r.accepted for r in results)
    assert {r.direction.value for r in results} == {"CALL", "PUT"}


def test_same_seed_gives_same_results():
    first = RandomConfluenceScorer(rng=random.Random(42)).score("A", WINDOW)
    second = RandomConfluenceScorer(rng=random.Random(42)).score("A", WINDOW)

    assert first == second


def test_only_enabled_strategies_are_used():
    scorer = RandomConfluenceScorer(
        enabled_strategy_ids=["fibonacci-confluence"], rng=random.Random(3)
    )

    ids = {scorer.score("A", WINDOW).details["strategy_id"] for _ in range(20)}

    assert ids == {"fibonacci-confluence"}


def test_details_describe_the_window():
    result = RandomConfluenceScorer(rng=random.Random(1)).score("A", WINDOW)

    assert result.details["window_width"] == "2m"
    assert result.details["strategy_id"] in {s.id for s in DEFAULT_STRATEGIES}


def test_no_enabled_strategy_yields_zero_confidence():
    scorer = RandomConfluenceScorer(enabled_strategy_ids=[])

    result = scorer.score("A", WINDOW)

    assert result.accepted is False
    assert result.confidence == 0.0


def test_empty_strategy_list_is_rejected():
    with pytest.raises(ValueError):
        RandomConfluenceScorer(strategies=[])
