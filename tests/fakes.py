"""In-memory stand-in for the upstream survey API."""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from pulse_metrics.models import Answer, User


class FakeProvider:
    """Serves canned users and answers; an exception value is raised instead."""

    def __init__(
        self,
        users: List[User],
        answers: Optional[Dict[int, Union[List[Answer], Exception]]] = None,
    ) -> None:
        self.users = users
        self.answers = answers or {}
        self.answer_calls: List[int] = []

    def list_users(self) -> List[User]:
        return list(self.users)

    def list_answers(self, user_id: int) -> List[Answer]:
        self.answer_calls.append(user_id)
        result = self.answers.get(user_id, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


def scored(*values) -> List[Answer]:
    """Answers carrying the given raw ``sentiment_score`` values."""
    return [Answer(sentiment_score=v) for v in values]
