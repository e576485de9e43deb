"""Tests for the bounded best-of selector."""

from __future__ import annotations

import pytest

from outfit_reco.recommender.selector import BestOfSelector


def test_keeps_highest_scores_when_full() -> None:
    selector: BestOfSelector[tuple[str, float]] = BestOfSelector(3, key=lambda item: item[1])
    for item in [("a", 0.4), ("b", 0.9), ("c", 0.5), ("d", 0.7), ("e", 0.1)]:
        selector.push(item)

    assert len(selector) == 3
    assert selector.min_score() == 0.5
    assert [name for name, _ in selector.sorted_desc()] == ["b", "d", "c"]


def test_rejects_items_not_better_than_minimum() -> None:
    selector: BestOfSelector[float] = BestOfSelector(2, key=float)
    selector.push(0.5)
    selector.push(0.6)

    assert selector.push(0.5) is False
    assert selector.push(0.55) is True
    assert selector.sorted_desc() == [0.6, 0.55]


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BestOfSelector(0, key=float)
