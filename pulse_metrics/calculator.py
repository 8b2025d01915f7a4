"""Flat survey index calculator and shared rounding helpers."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List

from pulse_metrics.models import Answer, coerce_score

INDEX_KEYS = ("ohi", "engagement", "burnout", "enps")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round *value* to *digits* decimals, halves away from zero.

    Python's ``round`` uses banker's rounding; dashboards show the usual
    schoolbook result (``0.125 -> 0.13``, ``62.5 -> 63``).
    """

    quant = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quant, rounding=ROUND_HALF_UP))


def _numeric(answer: Answer, key: str) -> float:
    return coerce_score(answer.get(key)) or 0.0


def calculate_metrics(answers: Iterable[Answer]) -> Dict[str, Any]:
    """Average the organisational indices carried by *answers*.

    Missing or non-numeric values count as 0. ``participation`` is the share
    (in percent) of answers flagged as ``participated``.
    """

    items: List[Answer] = list(answers)
    total = len(items)
    if not total:
        return {key: 0 for key in INDEX_KEYS} | {"participation": 0}

    result: Dict[str, Any] = {
        key: round_half_up(sum(_numeric(a, key) for a in items) / total, 2)
        for key in INDEX_KEYS
    }
    participated = sum(1 for a in items if a.get("participated"))
    result["participation"] = int(round_half_up(participated / total * 100))
    return result
