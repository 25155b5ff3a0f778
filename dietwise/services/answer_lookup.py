"""
Dietwise — Answer lookup helpers shared by the advisory and report services.

Questions are located by case-insensitive substring match on their text.
The policy is **first match wins** in collection order: if two questions
both contain ``"fruit"`` the earlier one is used and the later is ignored.
A question such as "How many servings of fruits and vegetables..." will
therefore be picked up by both the fruit and the vegetable lookups.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

# Keywords the scorer and report aggregator look for in question text.
FRUIT_KEYWORD = "fruit"
VEGETABLE_KEYWORD = "vegetable"
WATER_KEYWORD = "water"
MEAL_PATTERN_KEYWORD = "meal pattern"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?[0-9]+)")


@dataclass(frozen=True)
class AnsweredQuestion:
    """A participant's answer paired with the text of the question it answers."""

    question_text: str
    answer: str
    created_at: datetime | None = None

    @classmethod
    def from_response(cls, response) -> "AnsweredQuestion":
        """Build from an ORM ``Response`` whose ``question`` is loaded."""
        return cls(
            question_text=response.question.text,
            answer=response.answer or "",
            created_at=response.created_at,
        )


def to_answered(responses: Iterable) -> list[AnsweredQuestion]:
    """Convert ORM responses (or pass through ``AnsweredQuestion`` items)."""
    return [
        r if isinstance(r, AnsweredQuestion) else AnsweredQuestion.from_response(r)
        for r in responses
    ]


def find_answer(
    responses: Sequence[AnsweredQuestion], keyword: str
) -> AnsweredQuestion | None:
    """Return the first response whose question text contains ``keyword``."""
    needle = keyword.lower()
    for item in responses:
        if needle in item.question_text.lower():
            return item
    return None


def parse_count(answer: str | None) -> int:
    """Parse the leading integer of a free-text count answer.

    ``"2"`` -> 2, ``"3 servings"`` -> 3, ``"2.5"`` -> 2.  Anything without a
    leading ASCII integer (``"none"``, ``""``, non-Latin numerals) counts as 0.
    """
    if not answer:
        return 0
    match = _LEADING_INT_RE.match(answer)
    if match is None:
        return 0
    return int(match.group(1))
