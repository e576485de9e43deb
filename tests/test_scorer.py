"""Tests for the outfit scoring function."""

from __future__ import annotations

import pytest

from outfit_reco.recommender.scorer import budget_alignment, color_harmony, score_outfit, tag_fit


def test_neutral_outfit_score(make_product) -> None:
    base = make_product("T1", "top")
    items = [make_product(sku, role) for sku, role in [("T1", "top"), ("B1", "bottom"), ("F1", "footwear")]]

    result = score_outfit(base, *items, [make_product("A1", "accessory")])

    assert result.score == pytest.approx(0.35 + 0.25 * 0.6 + 0.2 * 0.6 + 0.1 * 0.6 + 0.1 * 0.6)
    assert result.total_price == 400


@pytest.mark.parametrize(
    ("colors", "expected"),
    [
        ([], 0.6),
        (["black"], 0.9),
        (["black", "white", "red"], 0.85),
        (["red", "blue", "black"], 0.65),
        (["red", "blue", "green"], 0.45),
    ],
)
def test_color_harmony_rules(make_product, colors: list[str], expected: float) -> None:
    items = [make_product(f"P{i}", "top", colors=[color]) for i, color in enumerate(colors)]

    assert color_harmony(items) == expected


def test_tag_fit_scales_hits(make_product) -> None:
    items = [
        make_product("P1", "top", seasons=["summer"]),
        make_product("P2", "bottom", seasons=["summer"]),
        make_product("P3", "footwear"),
        make_product("P4", "accessory"),
    ]

    assert tag_fit(items, None, "seasons") == 0.6
    assert tag_fit(items, "Summer", "seasons") == pytest.approx(0.9)
    assert tag_fit(items, "winter", "seasons") == pytest.approx(0.4)


def test_budget_alignment() -> None:
    assert budget_alignment(1000, None) == 0.6
    assert budget_alignment(1000, 2000) == 0.75
    assert budget_alignment(2000, 2000) == 1.0
    assert budget_alignment(2001, 2000) == 0.0


def test_reasons_are_emitted_in_fixed_order(make_product) -> None:
    base = make_product("T1", "top")
    result = score_outfit(
        base,
        make_product("T1", "top", price=500),
        make_product("B1", "bottom", price=300),
        make_product("F1", "footwear", price=400),
        [],
        budget=2000,
        occasion="party",
    )

    assert [reason.split(" ")[0] for reason in result.reasons] == [
        "Style",
        "Color",
        "Occasion",
        "Season",
        "Budget",
    ]
    assert result.reasons[2].endswith("(party)")
    assert result.reasons[3].endswith("(not specified)")
    assert result.reasons[4] == "Budget alignment 0.80 (total 1200 / 2000)"


def test_score_is_bounded_and_deterministic(make_product) -> None:
    base = make_product("T1", "top", tags=["street", "oversized"])
    items = (
        make_product("T2", "top", tags=[], colors=["red"]),
        make_product("B1", "bottom", tags=["formal"], colors=["green"]),
        make_product("F1", "footwear", tags=["street"], colors=["blue"]),
    )

    first = score_outfit(base, *items, budget=100)
    second = score_outfit(base, *items, budget=100)

    assert 0.0 <= first.score <= 1.0
    assert first == second
