"""Spaced repetition scheduling for journal entries."""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum
from typing import Any


class MasteryLevel(Enum):
    """Proficiency levels, each bound to a review interval.

    Values are (rank, name, stars, interval days). Intervals never shrink
    as the rank grows.
    """

    INITIAL = (0, "First Encounter", "⭐", 1)
    LEARNING = (1, "Learning", "⭐⭐", 2)
    FAMILIAR = (2, "Familiar", "⭐⭐⭐", 4)
    PROFICIENT = (3, "Proficient", "⭐⭐⭐⭐", 7)
    MASTERED = (4, "Mastered", "⭐⭐⭐⭐⭐", 15)

    def __init__(self, rank: int, title: str, stars: str, interval_days: int):
        self.rank = rank
        self.title = title
        self.stars = stars
        self.interval_days = interval_days

    def __lt__(self, other: "MasteryLevel") -> bool:
        if not isinstance(other, MasteryLevel):
            return NotImplemented
        return self.rank < other.rank

    @property
    def label(self) -> str:
        """Display label, e.g. "⭐⭐ Learning"."""
        return f"{self.stars} {self.title}"

    @classmethod
    def from_label(cls, label: str | None) -> "MasteryLevel":
        """Parse a display label; unknown or missing labels map to INITIAL."""
        for level in cls:
            if label == level.label:
                return level
        return cls.INITIAL


class LearningStatus(Enum):
    NEW = "🆕 New Knowledge"
    REVIEW_DUE = "📅 Review Due"
    IN_PROGRESS = "📚 Learning"
    MASTERED = "✅ Mastered"

    @classmethod
    def from_label(cls, label: str | None) -> "LearningStatus":
        for status in cls:
            if label == status.value:
                return status
        return cls.NEW


@dataclass
class JournalEntry:
    """A journal page as read back from the database."""

    id: str
    title: str
    category: str
    mastery_level: MasteryLevel
    learning_status: LearningStatus
    last_reviewed: date
    next_review: date | None = None
    review_count: int = 0
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "mastery_level": self.mastery_level.label,
            "learning_status": self.learning_status.value,
            "last_reviewed": self.last_reviewed.isoformat(),
            "next_review": self.next_review.isoformat() if self.next_review else None,
            "review_count": self.review_count,
            "url": self.url,
        }


@dataclass
class DueEntry:
    """An entry placed in a review bucket, with its day count."""

    entry: JournalEntry
    days_overdue: int | None = None
    days_until_review: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.entry.to_dict()
        if self.days_overdue is not None:
            data["days_overdue"] = self.days_overdue
        if self.days_until_review is not None:
            data["days_until_review"] = self.days_until_review
        return data


@dataclass
class ReviewSchedule:
    overdue: list[DueEntry] = field(default_factory=list)
    due_today: list[DueEntry] = field(default_factory=list)
    upcoming: list[DueEntry] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.overdue or self.due_today or self.upcoming)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "overdue": [item.to_dict() for item in self.overdue],
            "today": [item.to_dict() for item in self.due_today],
            "upcoming": [item.to_dict() for item in self.upcoming],
        }


def next_review_date(last_reviewed: date, mastery_level: MasteryLevel) -> date:
    """Date of the next review after a review on last_reviewed."""
    return last_reviewed + timedelta(days=mastery_level.interval_days)


def learning_status_for(mastery_level: MasteryLevel) -> LearningStatus:
    if mastery_level is MasteryLevel.MASTERED:
        return LearningStatus.MASTERED
    return LearningStatus.IN_PROGRESS


def classify(
    entries: list[JournalEntry],
    today: date,
    lookback_days: int = 7,
    include_upcoming: bool = True,
    upcoming_window_days: int = 7,
) -> ReviewSchedule:
    """Sort entries into overdue, due-today and upcoming buckets.

    Mastered entries and entries not reviewed before today are skipped.
    An entry whose last review is more than lookback_days ago is overdue;
    otherwise it is due today when its next review falls on today, or
    upcoming when the next review falls within the upcoming window. With
    include_upcoming off the window closes at today.

    Args:
        entries: Entries to classify
        today: The reference date
        lookback_days: Days since the last review after which an entry is overdue
        include_upcoming: Whether the upcoming window is open
        upcoming_window_days: Size of the upcoming window in days

    Returns:
        ReviewSchedule with overdue sorted by days overdue (descending)
        and upcoming by days until review (ascending)
    """
    schedule = ReviewSchedule()
    window_end = today + timedelta(days=upcoming_window_days if include_upcoming else 0)

    for entry in entries:
        if entry.learning_status is LearningStatus.MASTERED:
            continue
        if entry.last_reviewed >= today:
            continue

        days_since_review = (today - entry.last_reviewed).days
        if days_since_review > lookback_days:
            schedule.overdue.append(DueEntry(entry, days_overdue=days_since_review))
        elif entry.next_review is None:
            continue
        elif entry.next_review == today:
            schedule.due_today.append(DueEntry(entry))
        elif entry.next_review <= window_end:
            schedule.upcoming.append(
                DueEntry(entry, days_until_review=(entry.next_review - today).days)
            )

    schedule.overdue.sort(key=lambda item: item.days_overdue, reverse=True)
    schedule.upcoming.sort(key=lambda item: item.days_until_review)
    return schedule


def advance_mastery(
    entry: JournalEntry, new_level: MasteryLevel, today: date
) -> JournalEntry:
    """Record a review at new_level and reschedule the entry.

    Any level is accepted, including a lower one than the current level.
    """
    return replace(
        entry,
        mastery_level=new_level,
        learning_status=learning_status_for(new_level),
        next_review=next_review_date(today, new_level),
        review_count=entry.review_count + 1,
        last_reviewed=today,
    )
