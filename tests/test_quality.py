"""Tests for the compression tier to quality mapping."""

import pytest

from app.core.quality import DEFAULT_TIER, normalize_tier, resolve_quality


@pytest.mark.parametrize("tier, quality", [("low", 80), ("medium", 60), ("high", 40)])
def test_tier_quality_table(tier, quality):
    assert resolve_quality(tier) == quality


def test_high_compression_keeps_lowest_quality():
    """Higher compression tier means a lower quality value."""
    assert resolve_quality("high") < resolve_quality("medium") < resolve_quality("low")


@pytest.mark.parametrize("tier", [None, "", "ultra", "maximum", "40", 80, "HIGH", " low ", "Medium"])
def test_unrecognized_tier_defaults_to_medium(tier):
    assert resolve_quality(tier) == 60
    assert normalize_tier(tier) == DEFAULT_TIER


def test_tier_matching_is_exact():
    assert resolve_quality("HIGH") == 60
    assert resolve_quality(" low ") == 60
    assert normalize_tier("Low") == "medium"
