"""Journal database schema and page property mapping.

Builds the payloads sent to Notion when creating the journal database and
its entry pages, and reads journal entries back out of page objects.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from notionjournal.blocks import Divider, Heading, Paragraph, answer_to_blocks, to_notion_blocks
from notionjournal.config import DatabaseConfig
from notionjournal.review import JournalEntry, LearningStatus, MasteryLevel, next_review_date

NOTION_URL = "https://notion.so"

DEFAULT_SOLUTION_TYPE = "Explanation"
SUMMARY_PREVIEW_LENGTH = 100

# Property names
NAME = "Name"
TAGS = "Tags"
SUMMARY = "Summary"
DATE = "Date"
CATEGORY = "Category"
SOLUTION_TYPE = "Solution Type"
MASTERY_LEVEL = "Mastery Level"
LEARNING_STATUS = "Learning Status"
LAST_REVIEWED = "Last Reviewed"
NEXT_REVIEW = "Next Review"
REVIEW_COUNT = "Review Count"

CATEGORY_OPTIONS = [
    ("JavaScript", "blue"),
    ("Python", "green"),
    ("General Programming", "orange"),
    ("AI/ML", "purple"),
    ("Web Development", "red"),
    ("DevOps", "gray"),
    ("Other", "default"),
]

TAG_OPTIONS = [
    ("javascript", "blue"),
    ("python", "green"),
    ("algorithm", "red"),
    ("data structure", "orange"),
    ("frontend", "yellow"),
    ("backend", "gray"),
    ("machine learning", "purple"),
    ("llm", "pink"),
]

SOLUTION_TYPE_OPTIONS = [
    ("Implementation", "blue"),
    ("Explanation", "green"),
    ("Debugging", "red"),
    ("Best Practice", "orange"),
    ("Performance", "yellow"),
]

MASTERY_COLORS = {
    MasteryLevel.INITIAL: "gray",
    MasteryLevel.LEARNING: "blue",
    MasteryLevel.FAMILIAR: "green",
    MasteryLevel.PROFICIENT: "yellow",
    MasteryLevel.MASTERED: "purple",
}

STATUS_COLORS = {
    LearningStatus.NEW: "blue",
    LearningStatus.REVIEW_DUE: "yellow",
    LearningStatus.IN_PROGRESS: "green",
    LearningStatus.MASTERED: "purple",
}

_ID_STRIP_RE = re.compile(r"[^a-zA-Z0-9]")


@dataclass
class QuestionAnswerRecord:
    """A question/answer pair to be saved as a new journal entry."""

    question: str
    answer: str
    category: str
    tags: list[str] = field(default_factory=list)
    solution_type: str = DEFAULT_SOLUTION_TYPE
    summary: str = ""

    def __post_init__(self):
        self.tags = [tag.lower() for tag in self.tags]

    @property
    def effective_summary(self) -> str:
        """The given summary, or a preview of the question."""
        if self.summary:
            return self.summary
        return self.question[:SUMMARY_PREVIEW_LENGTH] + "..."


def format_notion_id(raw_id: str) -> str:
    """Normalise a Notion id to the hyphenated 8-4-4-4-12 form.

    Ids that do not reduce to 32 alphanumeric characters are returned
    unchanged.
    """
    clean = _ID_STRIP_RE.sub("", raw_id)
    if len(clean) != 32:
        return raw_id
    return f"{clean[:8]}-{clean[8:12]}-{clean[12:16]}-{clean[16:20]}-{clean[20:]}"


def page_url(page_id: str) -> str:
    return f"{NOTION_URL}/{page_id.replace('-', '')}"


def _options(pairs: list[tuple[str, str]]) -> dict[str, list[dict[str, str]]]:
    return {"options": [{"name": name, "color": color} for name, color in pairs]}


def _text(content: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": content}}]


def _date(value: date) -> dict[str, Any]:
    return {"date": {"start": value.isoformat()}}


def _select(name: str) -> dict[str, Any]:
    return {"select": {"name": name}}


def build_database_payload(parent_page_id: str, config: DatabaseConfig | None = None) -> dict[str, Any]:
    """Build the create-database request for the journal.

    Args:
        parent_page_id: Page the database is created in
        config: DatabaseConfig for title and icon

    Returns:
        Request body for POST /databases
    """
    config = config or DatabaseConfig()
    return {
        "parent": {"type": "page_id", "page_id": format_notion_id(parent_page_id)},
        "is_inline": True,
        "title": _text(config.title),
        "icon": {"type": "emoji", "emoji": config.icon},
        "properties": {
            NAME: {"title": {}},
            TAGS: {"multi_select": _options(TAG_OPTIONS)},
            SUMMARY: {"rich_text": {}},
            DATE: {"date": {}},
            CATEGORY: {"select": _options(CATEGORY_OPTIONS)},
            SOLUTION_TYPE: {"select": _options(SOLUTION_TYPE_OPTIONS)},
            MASTERY_LEVEL: {
                "select": _options([(level.label, MASTERY_COLORS[level]) for level in MasteryLevel])
            },
            LEARNING_STATUS: {
                "select": _options([(status.value, STATUS_COLORS[status]) for status in LearningStatus])
            },
            LAST_REVIEWED: {"date": {}},
            NEXT_REVIEW: {"date": {}},
            REVIEW_COUNT: {"number": {"format": "number"}},
        },
    }


def build_entry_properties(record: QuestionAnswerRecord, title: str, today: date) -> dict[str, Any]:
    """Properties for a freshly saved entry at the initial mastery level."""
    return {
        NAME: {"title": _text(title)},
        TAGS: {"multi_select": [{"name": tag} for tag in record.tags]},
        CATEGORY: _select(record.category),
        SUMMARY: {"rich_text": _text(record.effective_summary)},
        SOLUTION_TYPE: _select(record.solution_type),
        DATE: _date(today),
        MASTERY_LEVEL: _select(MasteryLevel.INITIAL.label),
        LEARNING_STATUS: _select(LearningStatus.NEW.value),
        LAST_REVIEWED: _date(today),
        NEXT_REVIEW: _date(next_review_date(today, MasteryLevel.INITIAL)),
        REVIEW_COUNT: {"number": 0},
    }


def build_entry_children(record: QuestionAnswerRecord) -> list[dict[str, Any]]:
    """Page body: the question, then the converted answer between dividers."""
    blocks = [
        Heading(2, "Question"),
        Paragraph(record.question),
        Heading(2, "Answer"),
        Divider(),
        *answer_to_blocks(record.answer),
        Divider(),
    ]
    return to_notion_blocks(blocks)


def build_entry_page(
    database_id: str, record: QuestionAnswerRecord, title: str, today: date
) -> dict[str, Any]:
    """Build the create-page request for a new journal entry."""
    return {
        "parent": {"database_id": database_id},
        "properties": build_entry_properties(record, title, today),
        "children": build_entry_children(record),
    }


def build_mastery_properties(entry: JournalEntry) -> dict[str, Any]:
    """Properties written back after a mastery update."""
    return {
        MASTERY_LEVEL: _select(entry.mastery_level.label),
        LEARNING_STATUS: _select(entry.learning_status.value),
        NEXT_REVIEW: _date(entry.next_review),
        REVIEW_COUNT: {"number": entry.review_count},
        LAST_REVIEWED: _date(entry.last_reviewed),
    }


# --------------------------------------------------------------------------
# Reading pages
# --------------------------------------------------------------------------


def plain_text(prop: dict[str, Any] | None) -> str:
    """First run of a title or rich text property, or empty string."""
    if not prop:
        return ""
    runs = prop.get(prop.get("type", "")) or prop.get("title") or prop.get("rich_text") or []
    if not runs:
        return ""
    first = runs[0]
    return first.get("plain_text") or first.get("text", {}).get("content", "")


def select_name(prop: dict[str, Any] | None) -> str | None:
    if not prop or not prop.get("select"):
        return None
    return prop["select"].get("name")


def date_value(prop: dict[str, Any] | None) -> date | None:
    """Start date of a date property or of a date-valued formula."""
    if not prop:
        return None
    value = prop.get("date")
    if value is None and prop.get("formula"):
        value = prop["formula"].get("date")
    if not value or not value.get("start"):
        return None
    return date.fromisoformat(value["start"][:10])


def number_value(prop: dict[str, Any] | None) -> int:
    if not prop or prop.get("number") is None:
        return 0
    return int(prop["number"])


def entry_from_page(page: dict[str, Any], today: date) -> JournalEntry:
    """Read a JournalEntry from a Notion page object.

    Pages without a Last Reviewed date are treated as reviewed today.
    """
    props = page.get("properties", {})
    return JournalEntry(
        id=page["id"],
        title=plain_text(props.get(NAME)) or "Untitled",
        category=select_name(props.get(CATEGORY)) or "Uncategorized",
        mastery_level=MasteryLevel.from_label(select_name(props.get(MASTERY_LEVEL))),
        learning_status=LearningStatus.from_label(select_name(props.get(LEARNING_STATUS))),
        last_reviewed=date_value(props.get(LAST_REVIEWED)) or today,
        next_review=date_value(props.get(NEXT_REVIEW)),
        review_count=number_value(props.get(REVIEW_COUNT)),
        url=page_url(page["id"]),
    )


def summary_from_page(page: dict[str, Any]) -> dict[str, Any]:
    """Listing view of a page for query results."""
    props = page.get("properties", {})
    entry_date = date_value(props.get(DATE))
    return {
        "id": page["id"],
        "title": plain_text(props.get(NAME)) or "Untitled",
        "category": select_name(props.get(CATEGORY)) or "Uncategorized",
        "summary": plain_text(props.get(SUMMARY)),
        "date": entry_date.isoformat() if entry_date else "",
        "solution_type": select_name(props.get(SOLUTION_TYPE)) or "Unknown",
        "url": page_url(page["id"]),
    }
