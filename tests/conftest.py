"""Shared test fixtures for NotionJournal."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

DATABASE_ID = "11111111-2222-3333-4444-555555555555"
PAGE_ID = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"


@pytest.fixture
def today():
    """Fixed reference date for scheduling tests."""
    return date(2026, 10, 17)


@pytest.fixture
def config():
    from notionjournal.config import JournalConfig

    config = JournalConfig()
    config.notion.token = "secret_test"
    config.notion.database_id = DATABASE_ID
    config.notion.parent_page_id = "99999999999999999999999999999999"
    return config


@pytest.fixture
def state():
    from notionjournal.config import DatabaseState

    return DatabaseState(database_id=DATABASE_ID)


@pytest.fixture
def mock_notion():
    """NotionClient double with async methods."""
    notion = AsyncMock()
    notion.retrieve_database.return_value = {
        "id": DATABASE_ID,
        "title": [{"plain_text": "🦔 AI Question Tracker"}],
    }
    notion.create_database.return_value = {"id": DATABASE_ID}
    notion.retrieve_page.return_value = {"id": PAGE_ID, "properties": {}}
    notion.create_page.return_value = {"id": PAGE_ID}
    notion.update_page.return_value = {"id": PAGE_ID}
    notion.query_database.return_value = []
    return notion


@pytest.fixture
def make_page():
    """Factory for Notion page objects shaped like journal entries."""

    def _make_page(
        page_id=PAGE_ID,
        title="💻 Python Decorators",
        category="Python",
        summary="How decorators wrap functions",
        entry_date="2026-10-01",
        solution_type="Explanation",
        mastery_level="⭐ First Encounter",
        learning_status="🆕 New Knowledge",
        last_reviewed="2026-10-01",
        next_review="2026-10-02",
        review_count=0,
    ):
        def date_prop(value):
            return {"type": "date", "date": {"start": value} if value else None}

        return {
            "object": "page",
            "id": page_id,
            "properties": {
                "Name": {"type": "title", "title": [{"plain_text": title, "text": {"content": title}}]},
                "Category": {"type": "select", "select": {"name": category}},
                "Summary": {"type": "rich_text", "rich_text": [{"plain_text": summary}]},
                "Date": date_prop(entry_date),
                "Solution Type": {"type": "select", "select": {"name": solution_type}},
                "Mastery Level": {"type": "select", "select": {"name": mastery_level}},
                "Learning Status": {"type": "select", "select": {"name": learning_status}},
                "Last Reviewed": date_prop(last_reviewed),
                "Next Review": date_prop(next_review),
                "Review Count": {"type": "number", "number": review_count},
            },
        }

    return _make_page
