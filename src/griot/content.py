"""Read-only access to the bundled facts, timeline and quiz datasets."""

from __future__ import annotations

import json
from datetime import date
from functools import lru_cache
from importlib import resources
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

_DATA_PACKAGE = "griot.data"


@lru_cache(maxsize=None)
def _load(name: str) -> dict[str, Any]:
    raw = resources.files(_DATA_PACKAGE).joinpath(name).read_text(encoding="utf-8")
    data = json.loads(raw)
    logger.debug("content_dataset_loaded", dataset=name)
    return data


def quiz_seed(today: date) -> int:
    """Seed that changes once per day, e.g. ``20250208`` for 8 Feb 2025."""
    return today.year * 10000 + today.month * 100 + today.day


class ContentStore:
    """Static content served by ``GET /content``."""

    def facts(self) -> list[dict[str, Any]]:
        return list(_load("facts.json")["facts"])

    def timeline(self, day: str | None = None) -> list[dict[str, Any]]:
        """Events for a ``M-D`` key such as ``"2-8"``; unknown keys get the default."""
        events = _load("timeline.json")["events"]
        if day and day in events:
            return list(events[day])
        return list(events["default"])

    def quiz_questions(self) -> list[dict[str, Any]]:
        return list(_load("quiz.json")["questions"])

    def daily_quiz(self, today: date | None = None, count: int = 5) -> list[dict[str, Any]]:
        """Pick *count* questions in an order that is stable for the day."""
        seed = quiz_seed(today or date.today())
        ordered = sorted(self.quiz_questions(), key=lambda q: (q["id"] * seed) % 100)
        return ordered[:count]

    def overview(self) -> dict[str, Any]:
        return {
            "facts": self.facts()[:5],
            "timeline": self.timeline(),
            "quiz": self.quiz_questions()[:5],
        }
