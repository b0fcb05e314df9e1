"""MCP tools for the NotionJournal learning journal.

These functions are the tool implementations exposed via FastMCP
decorators in main.py. Each returns a dict with a ``status`` of "ok" or
"error", a human readable ``message`` and, where useful, a structured
payload. Notion failures are reported in the reply, never raised.
"""

import logging
from datetime import date
from typing import Any

from notionjournal.config import ConfigurationError, DatabaseState, JournalConfig, PARENT_PAGE_ID_ENV
from notionjournal.notion import NotionAPIError, NotionClient
from notionjournal.review import (
    LearningStatus,
    MasteryLevel,
    ReviewSchedule,
    advance_mastery,
    classify,
)
from notionjournal.schema import (
    CATEGORY,
    DEFAULT_SOLUTION_TYPE,
    LAST_REVIEWED,
    LEARNING_STATUS,
    NAME,
    TAGS,
    QuestionAnswerRecord,
    build_database_payload,
    build_entry_page,
    build_mastery_properties,
    entry_from_page,
    format_notion_id,
    page_url,
    summary_from_page,
)
from notionjournal.titles import EmojiSelector, generate_title
from notionjournal.validation import (
    first_error,
    validate_days,
    validate_limit,
    validate_mastery_level,
    validate_required,
    validate_tags,
)

logger = logging.getLogger(__name__)

NO_DATABASE_MESSAGE = "No database configured. Run notion_setup_database first."


def _error(message: str) -> dict[str, Any]:
    return {"status": "error", "message": message}


def _dependencies(
    config: JournalConfig | None,
    notion: NotionClient | None,
    state: DatabaseState | None,
) -> tuple[JournalConfig, NotionClient, DatabaseState]:
    """Fill in dependencies that were not injected."""
    config = config or JournalConfig()
    if notion is None:
        notion = NotionClient(config.notion)
    if state is None:
        state = DatabaseState(database_id=config.notion.database_id)
    return config, notion, state


def _database_title(database: dict[str, Any]) -> str:
    title = database.get("title") or []
    if not title:
        return ""
    return title[0].get("plain_text") or title[0].get("text", {}).get("content", "")


# --------------------------------------------------------------------------
# Database setup
# --------------------------------------------------------------------------


async def resolve_database(
    config: JournalConfig | None = None,
    notion: NotionClient | None = None,
    state: DatabaseState | None = None,
) -> str:
    """Find the journal database at startup, creating it if necessary.

    A configured database is kept only if it can be retrieved and its title
    carries the tracker marker; otherwise the id is cleared and a new
    database is created in the configured parent page.

    Args:
        config: JournalConfig (defaults used if omitted)
        notion: NotionClient (injected for testing)
        state: DatabaseState updated with the resolved id

    Returns:
        The database id in use

    Raises:
        ConfigurationError: If a database must be created but no parent page is set
        NotionAPIError: If creating the database fails
    """
    config, notion, state = _dependencies(config, notion, state)

    if state.database_id:
        try:
            database = await notion.retrieve_database(state.database_id)
        except NotionAPIError as e:
            logger.warning("Could not access configured database: %s", e.message)
        else:
            title = _database_title(database)
            if config.database.marker in title:
                logger.info("Found existing database: %r", title)
                return state.database_id
            logger.warning("Database %s is not a %s database", state.database_id, config.database.marker)
        state.set("")

    logger.info("No accessible database found, starting database setup")
    parent_page_id = config.notion.parent_page_id
    if not parent_page_id:
        raise ConfigurationError(
            [
                f"{PARENT_PAGE_ID_ENV} environment variable is not set. "
                "Set it to the ID of the Notion page where the database should be created."
            ]
        )

    response = await notion.create_database(build_database_payload(parent_page_id, config.database))
    logger.info("Created new database %s", response["id"])
    state.set(response["id"])
    return response["id"]


async def setup_database(
    parent_page_id: str | None = None,
    config: JournalConfig | None = None,
    notion: NotionClient | None = None,
    state: DatabaseState | None = None,
) -> dict[str, Any]:
    """Create a new journal database and switch the tools to it.

    Args:
        parent_page_id: Page to create the database in (defaults to config)
        config: JournalConfig (injected for testing)
        notion: NotionClient (injected for testing)
        state: DatabaseState updated with the new id

    Returns:
        Result dict with the new database id and URL
    """
    config, notion, state = _dependencies(config, notion, state)

    parent_page_id = parent_page_id or config.notion.parent_page_id
    if not parent_page_id:
        return _error("Please provide a parent page ID where the database should be created.")

    try:
        await notion.retrieve_page(format_notion_id(parent_page_id))
    except NotionAPIError as e:
        return _error(
            "Could not access the specified page. Please make sure:\n"
            "1. The page ID is correct\n"
            "2. You've shared the page with your integration\n"
            f"({e.message})"
        )

    try:
        response = await notion.create_database(build_database_payload(parent_page_id, config.database))
    except NotionAPIError as e:
        return _error(f"Failed to create database: {e.message}")

    database_id = response["id"]
    logger.info("Created new database %s in page %s", database_id, parent_page_id)
    state.set(database_id)

    return {
        "status": "ok",
        "message": f"✅ Successfully created new database!\nDatabase ID: {database_id}",
        "database_id": database_id,
        "url": page_url(database_id),
        "exists": False,
    }


# --------------------------------------------------------------------------
# Entries
# --------------------------------------------------------------------------


async def save_entry(
    question: str,
    answer: str,
    category: str,
    tags: list[str] | None = None,
    solution_type: str | None = None,
    summary: str | None = None,
    config: JournalConfig | None = None,
    notion: NotionClient | None = None,
    state: DatabaseState | None = None,
    today: date | None = None,
    selector: EmojiSelector | None = None,
) -> dict[str, Any]:
    """Save a question/answer pair as a new journal entry.

    Args:
        question: The question asked
        answer: The answer, as text or JSON
        category: Category name (e.g. Python, AI/ML)
        tags: Tags, stored lower-cased
        solution_type: Kind of solution (defaults to Explanation)
        summary: Short summary (defaults to a preview of the question)
        config: JournalConfig (injected for testing)
        notion: NotionClient (injected for testing)
        state: DatabaseState holding the target database
        today: Date to record (defaults to today)
        selector: Emoji selector for the title (random by default)

    Returns:
        Result dict with page id and URL
    """
    error = first_error(
        validate_required("question", question),
        validate_required("answer", answer),
        validate_required("category", category),
        validate_tags(tags),
    )
    if error:
        return _error(error)

    config, notion, state = _dependencies(config, notion, state)
    database_id = state.database_id
    if not database_id:
        return _error(NO_DATABASE_MESSAGE)

    try:
        await notion.retrieve_database(database_id)
    except NotionAPIError as e:
        return _error(
            "Failed to save entry: Could not access database. Please make sure the "
            f"database exists and is shared with your integration. ({e.message})"
        )

    record = QuestionAnswerRecord(
        question=question,
        answer=answer,
        category=category,
        tags=tags or [],
        solution_type=solution_type or DEFAULT_SOLUTION_TYPE,
        summary=summary or "",
    )
    title = generate_title(question, selector)
    today = today or date.today()

    try:
        page = await notion.create_page(build_entry_page(database_id, record, title, today))
    except NotionAPIError as e:
        return _error(f"Failed to save entry: {e.message}")

    logger.info("Saved entry %s: %s", page["id"], title)
    return {
        "status": "ok",
        "message": "Successfully saved entry to Notion database",
        "page_id": page["id"],
        "url": page_url(page["id"]),
        "title": title,
    }


def _build_query_filter(
    query: str | None, category: str | None, tag: str | None
) -> dict[str, Any] | None:
    conditions = []
    if query:
        conditions.append({"property": NAME, "title": {"contains": query}})
    if category:
        conditions.append({"property": CATEGORY, "select": {"equals": category}})
    if tag:
        conditions.append({"property": TAGS, "multi_select": {"contains": tag}})
    if not conditions:
        return None
    return {"and": conditions}


def _format_entries(entries: list[dict[str, Any]], category: str | None) -> str:
    in_category = f' in category "{category}"' if category else ""
    if not entries:
        return f"No entries found{in_category}."

    listing = "\n---\n\n".join(
        f"{entry['title']}\n"
        f"\nSolution Type: {entry['solution_type']}"
        f"\nCategory: {entry['category']}"
        f"\nSummary: {entry['summary']}"
        f"\nDate: {entry['date']}\n"
        for entry in entries
    )
    return f"Found {len(entries)} entries{in_category}:\n\n{listing}"


async def query_database(
    query: str | None = None,
    category: str | None = None,
    tag: str | None = None,
    limit: int = 5,
    config: JournalConfig | None = None,
    notion: NotionClient | None = None,
    state: DatabaseState | None = None,
) -> dict[str, Any]:
    """Search journal entries by title text, category and tag.

    Args:
        query: Text the title must contain
        category: Exact category
        tag: Tag the entry must carry
        limit: Maximum entries, 1-10
        config: JournalConfig (injected for testing)
        notion: NotionClient (injected for testing)
        state: DatabaseState holding the database to query

    Returns:
        Result dict with formatted listing and ``entries``
    """
    error = validate_limit(limit).error
    if error:
        return _error(error)

    config, notion, state = _dependencies(config, notion, state)
    if not state.database_id:
        return _error(NO_DATABASE_MESSAGE)

    try:
        pages = await notion.query_database(
            state.database_id,
            filter=_build_query_filter(query, category, tag),
            sorts=[{"timestamp": "created_time", "direction": "descending"}],
            page_size=limit,
        )
    except NotionAPIError as e:
        logger.error("Failed to query Notion database: %s", e.message)
        return _error(f"Failed to query database: {e.message}")

    entries = [summary_from_page(page) for page in pages]
    return {
        "status": "ok",
        "message": _format_entries(entries, category),
        "entries": entries,
    }


# --------------------------------------------------------------------------
# Spaced repetition
# --------------------------------------------------------------------------


def _format_schedule(schedule: ReviewSchedule, include_upcoming: bool, window_days: int) -> str:
    sections = [f"📚 Learning plan for the next {window_days} days:\n"]

    if schedule.overdue:
        sections.append(
            "⚠️ Needs review now:\n"
            + "\n\n".join(
                f"• {item.entry.title}\n"
                f"  {item.entry.mastery_level.label} | Last reviewed: "
                f"{item.entry.last_reviewed.isoformat()} ({item.days_overdue} days ago)\n"
                f"  {item.entry.url}"
                for item in schedule.overdue
            )
        )

    if schedule.due_today:
        sections.append(
            "📅 Due today:\n"
            + "\n\n".join(
                f"• {item.entry.title}\n  {item.entry.mastery_level.label}\n  {item.entry.url}"
                for item in schedule.due_today
            )
        )

    if include_upcoming and schedule.upcoming:
        sections.append(
            f"🔜 Due in the next {window_days} days:\n"
            + "\n\n".join(
                f"• {item.entry.title}\n"
                f"  {item.entry.mastery_level.label} | Next review: "
                f"{item.entry.next_review.isoformat()} (in {item.days_until_review} days)\n"
                f"  {item.entry.url}"
                for item in schedule.upcoming
            )
        )

    if not (schedule.overdue or schedule.due_today or (include_upcoming and schedule.upcoming)):
        sections.append("✨ Nothing to review right now!")

    return "\n".join(sections) + "\n"


async def check_reviews(
    days: int | None = None,
    include_upcoming: bool = True,
    config: JournalConfig | None = None,
    notion: NotionClient | None = None,
    state: DatabaseState | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """List entries that are overdue, due today or coming up for review.

    Args:
        days: Days since last review after which an entry is overdue
            (defaults to the configured lookback)
        include_upcoming: Whether to report upcoming reviews
        config: JournalConfig (injected for testing)
        notion: NotionClient (injected for testing)
        state: DatabaseState holding the database to query
        today: Reference date (defaults to today)

    Returns:
        Result dict with formatted plan and ``overdue``/``today``/``upcoming`` lists
    """
    config, notion, state = _dependencies(config, notion, state)
    if days is None:
        days = config.review.lookback_days
    error = validate_days(days).error
    if error:
        return _error(error)
    if not state.database_id:
        return _error(NO_DATABASE_MESSAGE)

    today = today or date.today()
    try:
        pages = await notion.query_database(
            state.database_id,
            filter={
                "and": [
                    {"property": LAST_REVIEWED, "date": {"before": today.isoformat()}},
                    {
                        "property": LEARNING_STATUS,
                        "select": {"does_not_equal": LearningStatus.MASTERED.value},
                    },
                ]
            },
            sorts=[{"property": LAST_REVIEWED, "direction": "ascending"}],
        )
    except NotionAPIError as e:
        return _error(f"Failed to check reviews: {e.message}")

    window_days = config.review.upcoming_window_days
    schedule = classify(
        [entry_from_page(page, today) for page in pages],
        today,
        lookback_days=days,
        include_upcoming=include_upcoming,
        upcoming_window_days=window_days,
    )

    return {
        "status": "ok",
        "message": _format_schedule(schedule, include_upcoming, window_days),
        **schedule.to_dict(),
    }


async def update_mastery(
    page_id: str,
    mastery_level: str,
    config: JournalConfig | None = None,
    notion: NotionClient | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Record a review of an entry at a new mastery level.

    Any level may be set, including a lower one.

    Args:
        page_id: Page of the entry
        mastery_level: Level name: INITIAL, LEARNING, FAMILIAR, PROFICIENT or MASTERED
        config: JournalConfig (injected for testing)
        notion: NotionClient (injected for testing)
        today: Review date (defaults to today)

    Returns:
        Result dict with the new level and next review date
    """
    error = first_error(
        validate_required("page_id", page_id),
        validate_mastery_level(mastery_level),
    )
    if error:
        return _error(error)

    config, notion, _ = _dependencies(config, notion, None)
    level = MasteryLevel[mastery_level]
    today = today or date.today()

    try:
        page = await notion.retrieve_page(page_id)
        updated = advance_mastery(entry_from_page(page, today), level, today)
        await notion.update_page(page_id, build_mastery_properties(updated))
    except NotionAPIError as e:
        return _error(f"Failed to update mastery level: {e.message}")

    logger.info("Updated %s to %s, next review %s", page_id, level.name, updated.next_review)
    return {
        "status": "ok",
        "message": (
            "✨ Successfully updated mastery level!\n\n"
            f"New level: {level.label}\n"
            f"Next review: {updated.next_review.isoformat()}"
        ),
        "page_id": page_id,
        "mastery_level": level.label,
        "next_review": updated.next_review.isoformat(),
        "review_count": updated.review_count,
    }
