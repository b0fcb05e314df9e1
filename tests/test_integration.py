"""Integration tests for NotionJournal end-to-end workflows.

These tests drive the tools through a real NotionClient, with the Notion
API replaced at the HTTP boundary by an in-memory fake.
"""

import json
import re
from datetime import date

import httpx
import pytest

PARENT_PAGE_ID = "99999999-9999-9999-9999-999999999999"


class FakeNotion:
    """In-memory stand-in for the parts of the Notion API the journal uses."""

    def __init__(self):
        self.pages = {PARENT_PAGE_ID: {"object": "page", "id": PARENT_PAGE_ID, "properties": {}}}
        self.databases = {}
        self.requests = []
        self._next_id = 0

    def _new_id(self, prefix):
        self._next_id += 1
        return f"{prefix}{self._next_id:04d}-0000-0000-0000-000000000000"

    def _not_found(self, kind, object_id):
        return httpx.Response(
            404,
            json={
                "object": "error",
                "status": 404,
                "code": "object_not_found",
                "message": f"Could not find {kind} with ID: {object_id}.",
            },
        )

    def __call__(self, request):
        path = request.url.path.removeprefix("/v1/")
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.method, path, body))

        if request.method == "POST" and path == "databases":
            database_id = self._new_id("dbdbdbdb")
            self.databases[database_id] = {"object": "database", "id": database_id, **body}
            return httpx.Response(200, json=self.databases[database_id])

        match = re.fullmatch(r"databases/([^/]+)(/query)?", path)
        if match:
            database_id, query = match.groups()
            if database_id not in self.databases:
                return self._not_found("database", database_id)
            if not query:
                return httpx.Response(200, json=self.databases[database_id])
            results = [
                page
                for page in reversed(list(self.pages.values()))
                if page.get("parent", {}).get("database_id") == database_id
            ]
            return httpx.Response(200, json={"object": "list", "results": results, "has_more": False})

        if request.method == "POST" and path == "pages":
            page_id = self._new_id("aaaaaaaa")
            self.pages[page_id] = {"object": "page", "id": page_id, **body}
            return httpx.Response(200, json={"object": "page", "id": page_id})

        match = re.fullmatch(r"pages/([^/]+)", path)
        if match:
            page_id = match.group(1)
            if page_id not in self.pages:
                return self._not_found("page", page_id)
            if request.method == "PATCH":
                self.pages[page_id]["properties"].update(body["properties"])
            return httpx.Response(200, json=self.pages[page_id])

        return httpx.Response(400, json={"code": "invalid_request_url", "message": "Invalid request URL."})


@pytest.fixture
def fake_notion():
    return FakeNotion()


@pytest.fixture
def notion(fake_notion):
    from notionjournal.config import NotionConfig
    from notionjournal.notion import NotionClient

    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_notion))
    return NotionClient(NotionConfig(token="secret_test"), client=http)


@pytest.fixture
def journal_config():
    from notionjournal.config import JournalConfig

    config = JournalConfig()
    config.notion.token = "secret_test"
    config.notion.parent_page_id = PARENT_PAGE_ID.replace("-", "")
    return config


class TestJournalWorkflow:
    """Test setup, save, query and review cycle."""

    @pytest.mark.asyncio
    async def test_full_review_cycle(self, journal_config, notion, fake_notion):
        """An entry is saved, found, reviewed and rescheduled."""
        from notionjournal.config import DatabaseState
        from notionjournal.tools import (
            check_reviews,
            query_database,
            save_entry,
            setup_database,
            update_mastery,
        )

        state = DatabaseState()
        setup = await setup_database(config=journal_config, notion=notion, state=state)
        assert setup["status"] == "ok"
        assert state.database_id in fake_notion.databases

        saved = await save_entry(
            question="How do Python decorators work?",
            answer='{"content": [{"type": "text", "text": "A decorator wraps a function."}]}',
            category="Python",
            tags=["Decorators"],
            config=journal_config,
            notion=notion,
            state=state,
            today=date(2026, 10, 16),
            selector=lambda options: options[0],
        )
        assert saved["status"] == "ok"
        assert saved["title"] == "💻 How Do Python Decorators Work"

        stored = fake_notion.pages[saved["page_id"]]
        assert stored["children"][4]["type"] == "callout"
        assert stored["children"][5]["paragraph"]["rich_text"][0]["text"]["content"] == "A decorator wraps a function."

        found = await query_database(category="Python", config=journal_config, notion=notion, state=state)
        assert found["message"].startswith('Found 1 entries in category "Python":')
        assert found["entries"][0]["id"] == saved["page_id"]

        due = await check_reviews(config=journal_config, notion=notion, state=state, today=date(2026, 10, 17))
        assert [item["id"] for item in due["today"]] == [saved["page_id"]]

        updated = await update_mastery(
            saved["page_id"], "LEARNING", config=journal_config, notion=notion, today=date(2026, 10, 17)
        )
        assert updated["next_review"] == "2026-10-19"
        assert updated["review_count"] == 1

        after = await check_reviews(config=journal_config, notion=notion, state=state, today=date(2026, 10, 17))
        assert "Nothing to review" in after["message"]

        tomorrow = await check_reviews(config=journal_config, notion=notion, state=state, today=date(2026, 10, 18))
        assert tomorrow["upcoming"][0]["days_until_review"] == 1
        assert tomorrow["upcoming"][0]["mastery_level"] == "⭐⭐ Learning"

    @pytest.mark.asyncio
    async def test_mastered_entry_leaves_schedule(self, journal_config, notion):
        from notionjournal.config import DatabaseState
        from notionjournal.tools import check_reviews, save_entry, setup_database, update_mastery

        state = DatabaseState()
        await setup_database(config=journal_config, notion=notion, state=state)
        saved = await save_entry(
            "What is a vector database?", "An index over embeddings.", "AI/ML",
            config=journal_config, notion=notion, state=state, today=date(2026, 10, 1),
        )

        overdue = await check_reviews(config=journal_config, notion=notion, state=state, today=date(2026, 10, 17))
        assert overdue["overdue"][0]["days_overdue"] == 16

        await update_mastery(saved["page_id"], "MASTERED", config=journal_config, notion=notion, today=date(2026, 10, 2))

        result = await check_reviews(config=journal_config, notion=notion, state=state, today=date(2026, 10, 17))
        assert result["overdue"] == []
        assert result["upcoming"] == []


class TestStartupResolution:
    """Test database resolution against the API."""

    @pytest.mark.asyncio
    async def test_missing_database_is_recreated_and_persisted(self, journal_config, notion, fake_notion, tmp_path):
        from notionjournal.config import DatabaseState
        from notionjournal.tools import resolve_database

        env_file = tmp_path / ".env"
        env_file.write_text("NOTION_DATABASE_ID=12345678-1234-1234-1234-123456789012\n")
        state = DatabaseState(database_id="12345678-1234-1234-1234-123456789012", env_file=env_file)

        database_id = await resolve_database(config=journal_config, notion=notion, state=state)

        assert database_id in fake_notion.databases
        assert state.database_id == database_id
        assert database_id in env_file.read_text()
        assert "12345678-1234-1234-1234-123456789012" not in env_file.read_text()

    @pytest.mark.asyncio
    async def test_existing_database_kept(self, journal_config, notion, fake_notion):
        from notionjournal.config import DatabaseState
        from notionjournal.tools import resolve_database, setup_database

        state = DatabaseState()
        await setup_database(config=journal_config, notion=notion, state=state)
        created = state.database_id

        assert await resolve_database(config=journal_config, notion=notion, state=state) == created
        assert len(fake_notion.databases) == 1


class TestErrorReporting:
    """Test that API failures come back as error replies."""

    @pytest.mark.asyncio
    async def test_save_to_deleted_database(self, journal_config, notion, fake_notion):
        from notionjournal.config import DatabaseState
        from notionjournal.tools import save_entry

        state = DatabaseState(database_id="deleted-db")

        result = await save_entry("q", "a", "Other", config=journal_config, notion=notion, state=state)

        assert result["status"] == "error"
        assert "Could not find database with ID: deleted-db." in result["message"]
        assert not [r for r in fake_notion.requests if r[1] == "pages"]

    @pytest.mark.asyncio
    async def test_update_unknown_page(self, journal_config, notion):
        from notionjournal.tools import update_mastery

        result = await update_mastery("no-such-page", "FAMILIAR", config=journal_config, notion=notion)

        assert result == {
            "status": "error",
            "message": "Failed to update mastery level: Could not find page with ID: no-such-page.",
        }

    @pytest.mark.asyncio
    async def test_setup_with_unshared_parent(self, journal_config, notion):
        from notionjournal.config import DatabaseState
        from notionjournal.tools import setup_database

        state = DatabaseState()

        result = await setup_database("0" * 32, config=journal_config, notion=notion, state=state)

        assert result["status"] == "error"
        assert "shared the page with your integration" in result["message"]
        assert state.database_id == ""
