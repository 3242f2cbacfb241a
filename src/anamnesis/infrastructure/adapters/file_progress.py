"""
File Progress Repository: Infrastructure adapter for a progress document.

Implements ProgressRepository on top of a single YAML (or JSON, by file
suffix) document:

    lessons:
      - lesson_id: verbs-01
        next_review_date: 2026-10-20T09:00:00+02:00
        interval: 6
        ease_factor: 2.36
        mastery_level: 2
        repetition: 2
        lapses: 1
        review_history: [1, 4, 4]
"""

import json
import logging
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml  # type: ignore

from anamnesis.application.utils.dates import parse_datetime
from anamnesis.domain.constants import DEFAULT_EASE_FACTOR, DEFAULT_INTERVAL
from anamnesis.domain.errors import InvalidInput
from anamnesis.domain.models import ProgressItem
from anamnesis.domain.ports import ProgressRepository

logger = logging.getLogger(__name__)

DATE_FIELDS = ("next_review_date", "last_review_date")


def _parse_date_field(lesson_id: str, name: str, value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if not isinstance(value, (datetime, date, str)):
        raise InvalidInput(f"Lesson '{lesson_id}': {name} must be a date, got {value!r}")
    try:
        return parse_datetime(value)
    except ValueError as e:
        raise InvalidInput(f"Lesson '{lesson_id}': malformed {name} {value!r}") from e


def item_from_mapping(raw: Any) -> ProgressItem:
    """
    Build a ProgressItem from one stored record.

    Unparseable dates and numbers are rejected here rather than left to
    degrade comparisons downstream.
    """
    if not isinstance(raw, dict) or "lesson_id" not in raw:
        raise InvalidInput(f"Progress record must be a mapping with a lesson_id, got {raw!r}")

    lesson_id = str(raw["lesson_id"])
    dates = {name: _parse_date_field(lesson_id, name, raw.get(name)) for name in DATE_FIELDS}
    try:
        numbers = {
            "interval": int(raw.get("interval", DEFAULT_INTERVAL)),
            "ease_factor": float(raw.get("ease_factor", DEFAULT_EASE_FACTOR)),
            "mastery_level": int(raw.get("mastery_level", 0)),
            "repetition": int(raw.get("repetition", 0)),
            "lapses": int(raw.get("lapses", 0)),
        }
        history = raw.get("review_history") or []
        if not isinstance(history, list):
            raise TypeError(f"review_history must be a list, got {history!r}")
        review_history = tuple(int(q) for q in history)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Lesson '{lesson_id}': {e}") from e

    return ProgressItem(
        lesson_id=lesson_id, review_history=review_history, **dates, **numbers
    )


def item_to_mapping(item: ProgressItem) -> dict[str, Any]:
    data: dict[str, Any] = {
        "lesson_id": item.lesson_id,
        "next_review_date": None,
        "last_review_date": None,
        "interval": item.interval,
        "ease_factor": round(item.ease_factor, 4),
        "mastery_level": item.mastery_level,
        "repetition": item.repetition,
        "lapses": item.lapses,
        "review_history": list(item.review_history),
    }
    for name in DATE_FIELDS:
        value = getattr(item, name)
        if value is not None:
            data[name] = value.isoformat()
    return data


class FileProgressRepository(ProgressRepository):
    """
    Stores progress items in one YAML or JSON file.

    A missing file reads as an empty list and is created on first save.
    Writes go to a temporary file that replaces the target.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def _is_json(self) -> bool:
        return self.path.suffix.lower() == ".json"

    def _load(self) -> list[ProgressItem]:
        if not self.path.exists():
            logger.debug(f"No progress file at {self.path}")
            return []

        text = self.path.read_text(encoding="utf-8")
        try:
            doc = json.loads(text) if self._is_json else yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise InvalidInput(f"Could not parse {self.path}: {e}") from e

        if doc is None:
            return []
        records = doc.get("lessons", []) if isinstance(doc, dict) else doc
        if not isinstance(records, list):
            raise InvalidInput(f"{self.path}: 'lessons' must be a list")

        return [item_from_mapping(r) for r in records]

    def _dump(self, items: list[ProgressItem]) -> None:
        doc = {"lessons": [item_to_mapping(i) for i in items]}
        if self._is_json:
            text = json.dumps(doc, indent=2, ensure_ascii=False) + "\n"
        else:
            text = yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def get_all_progress(self) -> list[ProgressItem]:
        return self._load()

    async def get_progress(self, lesson_id: str) -> ProgressItem | None:
        for item in self._load():
            if item.lesson_id == lesson_id:
                return item
        return None

    async def save_progress(self, item: ProgressItem) -> None:
        items = self._load()
        for i, existing in enumerate(items):
            if existing.lesson_id == item.lesson_id:
                items[i] = item
                break
        else:
            items.append(item)
        self._dump(items)
        logger.debug(f"Saved progress for {item.lesson_id} to {self.path}")
