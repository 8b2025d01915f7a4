"""Tests for fallback answer synthesis."""
import random

import pytest

from pulse_metrics.synthesizer import synthesize


def test_three_answers_per_user():
    answers = synthesize(4)
    assert len(answers) == 12


def test_scores_in_unit_range_with_two_decimals():
    for answer in synthesize(50):
        score = answer.sentiment_score
        assert 0 <= score <= 1
        assert round(score, 2) == score


def test_seeded_generator_is_reproducible():
    first = synthesize(3, rng=random.Random(7))
    second = synthesize(3, rng=random.Random(7))
    assert first == second


def test_zero_users():
    assert synthesize(0) == []


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        synthesize(-1)
