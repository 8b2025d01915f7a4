"""Turn reduced survey statistics into role-specific dashboard payloads.

All functions here are pure: same statistics in, same payload out.

Some values are illustrative placeholders rather than derived data (the eNPS
card and the weekly trend series). Those entries carry ``"synthetic": True``.
"""
from __future__ import annotations

from typing import Any, Dict, List

from pulse_metrics.calculator import round_half_up
from pulse_metrics.models import Role, Statistics

ENPS_PLACEHOLDER = "+32"

# (week, sentiment bonus, engagement, burnout) for the illustrative trend
_TREND_POINTS = (
    ("W1", 1.2, 6.8, 12),
    ("W2", 0.8, 6.5, 14),
    ("W3", 0.4, 6.1, 16),
    ("W4", 0.0, 5.9, 115),
)

# Admin raises a critical alert above this many at-risk employees
ADMIN_ALERT_THRESHOLD = 5
# Manager views turn red above this many at-risk reports
MANAGER_RISK_THRESHOLD = 2
# Scaled sentiment (0-10) below which the sentiment card turns amber
SENTIMENT_AMBER_BELOW = 5
# Self score (0-1) below which employees get the high-stress insight
EMPLOYEE_STRESS_BELOW = 0.5


def generate_trend(avg_scaled: float) -> List[Dict[str, Any]]:
    """Return a four-week trend ending at *avg_scaled*."""
    return [
        {
            "week": week,
            "sentiment": round_half_up(avg_scaled + bonus, 2),
            "engagement": engagement,
            "burnout": burnout,
            "synthetic": True,
        }
        for week, bonus, engagement, burnout in _TREND_POINTS
    ]


def _sentiment_status(avg_scaled: float) -> str:
    return "amber" if avg_scaled < SENTIMENT_AMBER_BELOW else "green"


def admin_dashboard(stats: Statistics, company_id: Any) -> Dict[str, Any]:
    risk = stats.burnout_risk_count
    alerts: List[Dict[str, str]] = []
    if risk > ADMIN_ALERT_THRESHOLD:
        alerts.append(
            {
                "severity": "critical",
                "title": "Burnout risk increasing",
                "description": "Burnout indicators increased over the last few weeks",
                "impact": f"{risk} employees at high risk",
                "recommendation": "Reduce workload and review sprint scope",
            }
        )

    return {
        "role": Role.ADMIN.value,
        "company_id": company_id,
        "summary": {
            "totalEmployees": stats.user_count,
            "totalResponses": stats.response_count,
            "participationRate": stats.participation_rate,
        },
        "cards": [
            {
                "key": "sentiment",
                "name": "Avg Sentiment",
                "value": stats.avg_scaled,
                "direction": "down",
                "progress": 48,
                "status": _sentiment_status(stats.avg_scaled),
            },
            {
                "key": "burnout",
                "name": "Burnout Risk",
                "value": f"{risk} Employees",
                "direction": "up",
                "progress": risk * 5,
                "status": "red" if risk > ADMIN_ALERT_THRESHOLD else "amber",
            },
            {
                "key": "participation",
                "name": "Participation Rate",
                "value": f"{stats.participation_rate}%",
                "direction": "up",
                "progress": stats.participation_rate,
                "status": "green",
            },
            {
                "key": "enps",
                "name": "eNPS Score",
                "value": ENPS_PLACEHOLDER,
                "direction": "up",
                "progress": 70,
                "status": "blue",
                "synthetic": True,
            },
        ],
        "trendChart": generate_trend(stats.avg_scaled),
        "alerts": alerts,
    }


def manager_dashboard(stats: Statistics) -> Dict[str, Any]:
    high_risk = stats.burnout_risk_count > MANAGER_RISK_THRESHOLD
    if high_risk:
        recommendations = ["Schedule 1-on-1 meetings", "Balance workload across team"]
    else:
        recommendations = ["Team wellbeing looks stable"]

    return {
        "role": Role.MANAGER.value,
        "teamSummary": {
            "teamSize": stats.user_count,
            "responses": stats.response_count,
            "participationRate": stats.participation_rate,
        },
        "cards": [
            {
                "name": "Team Sentiment",
                "value": stats.avg_scaled,
                "status": _sentiment_status(stats.avg_scaled),
            },
            {
                "name": "High Burnout Employees",
                "value": stats.burnout_risk_count,
                "status": "red" if high_risk else "green",
            },
        ],
        "teamTrend": generate_trend(stats.avg_scaled),
        "recommendations": recommendations,
    }


def employee_dashboard(stats: Statistics) -> Dict[str, Any]:
    # First retained score is the employee's own; average if none
    self_score = stats.scores[0] if stats.scores else stats.avg_sentiment
    stressed = self_score < EMPLOYEE_STRESS_BELOW

    if stressed:
        tips = ["Take regular breaks", "Talk to your manager", "Avoid overtime this week"]
    else:
        tips = ["Keep up the good work", "Maintain work-life balance"]

    return {
        "role": Role.EMPLOYEE.value,
        "personalSummary": {
            "sentimentScore": round_half_up(self_score * 10, 2),
            "burnoutProbability": round_half_up(1 - self_score, 2),
            "participation": "Completed" if stats.response_count else "Pending",
        },
        "insights": [
            "Your stress indicators are high" if stressed else "Your wellbeing looks stable"
        ],
        "tips": tips,
    }


def shape(role: Role, stats: Statistics, *, company_id: Any = None) -> Dict[str, Any]:
    """Build the dashboard payload for *role*."""

    if role is Role.ADMIN:
        return admin_dashboard(stats, company_id)
    if role is Role.MANAGER:
        return manager_dashboard(stats)
    if role is Role.EMPLOYEE:
        return employee_dashboard(stats)
    raise AssertionError(f"unhandled role {role!r}")  # pragma: no cover


def flatten(
    role: Role, company_id: Any, stats: Statistics, indices: Dict[str, Any]
) -> Dict[str, Any]:
    """Metrics-only summary, the same numbers without role-specific shaping."""

    return {
        "role": role.value,
        "company_id": company_id,
        "totalUsers": stats.user_count,
        "totalResponses": stats.response_count,
        "avgSentiment": round_half_up(stats.avg_sentiment, 2),
        "avgScaled": stats.avg_scaled,
        "burnoutRiskCount": stats.burnout_risk_count,
        "participationRate": stats.participation_rate,
        "indices": indices,
    }
