"""FastMCP server for the NotionJournal learning journal.

This module creates and configures the MCP server that saves AI question
and answer pairs to a Notion database and schedules them for spaced
repetition review.

Usage:
    python -m notionjournal.main

Configuration:
    Set NOTION_API_TOKEN and NOTION_PARENT_PAGE_ID (and optionally
    NOTION_DATABASE_ID) in the environment or a .env file, then add to the
    MCP client settings:
    {
        "mcpServers": {
            "notionjournal": {
                "command": "python",
                "args": ["-m", "notionjournal.main"],
                "cwd": "/path/to/notionjournal"
            }
        }
    }
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Annotated

from fastmcp import FastMCP

from notionjournal.config import ConfigurationError, DatabaseState, JournalConfig
from notionjournal.notion import NotionAPIError, NotionClient
from notionjournal.tools import (
    check_reviews,
    query_database,
    resolve_database,
    save_entry,
    setup_database,
    update_mastery,
)

logger = logging.getLogger("notionjournal")

# Initialize FastMCP server
mcp = FastMCP(
    name="notionjournal",
    instructions="""NotionJournal keeps a learning journal of AI/LLM questions and answers
in a Notion database and schedules them for spaced repetition review.

- notion_ai_save_entry(): save a question and its answer as a new entry.
- notion_query_database(): find saved entries by title text, category or tag.
- notion_check_reviews(): see what is overdue, due today or coming up.
- notion_update_mastery(): after reviewing an entry, record the new mastery
  level (INITIAL, LEARNING, FAMILIAR, PROFICIENT, MASTERED).
- notion_setup_database(): create a fresh journal database in a parent page.""",
)

# Initialize shared dependencies
config = JournalConfig.from_env(os.getenv("NOTIONJOURNAL_CONFIG", "config/notionjournal.yaml"))
notion = NotionClient(config.notion)
state = DatabaseState(
    database_id=config.notion.database_id,
    env_file=Path(config.server.env_file),
)


@mcp.tool(name="notion_setup_database")
async def notion_setup_database(
    parent_page_id: Annotated[
        str | None, "ID of the parent page where the database will be created"
    ] = None,
) -> dict:
    """Set up a new Notion database for AI Q&A tracking.

    The new database becomes the target of all other tools.
    """
    return await setup_database(parent_page_id, config=config, notion=notion, state=state)


@mcp.tool(name="notion_ai_save_entry")
async def notion_ai_save_entry(
    question: Annotated[str, "The question asked by the user"],
    answer: Annotated[str, "The answer provided by the AI (text or JSON)"],
    category: Annotated[str, "Category of the question (e.g. JavaScript, Python, AI/ML)"],
    tags: Annotated[list[str] | None, 'Tags related to the question (e.g. "javascript", "algorithm")'] = None,
    solution_type: Annotated[str | None, "Type of solution provided (default: Explanation)"] = None,
    summary: Annotated[str | None, "A brief summary of the question/answer pair"] = None,
) -> dict:
    """Save an AI/LLM-related question and answer to the Notion database.

    The entry gets a generated title and starts at the first mastery level,
    due for review tomorrow.
    """
    return await save_entry(
        question=question,
        answer=answer,
        category=category,
        tags=tags,
        solution_type=solution_type,
        summary=summary,
        config=config,
        notion=notion,
        state=state,
    )


@mcp.tool(name="notion_query_database")
async def notion_query_database(
    query: Annotated[str | None, "Text to search for in titles"] = None,
    category: Annotated[str | None, "Filter by category"] = None,
    tag: Annotated[str | None, "Filter by tag"] = None,
    limit: Annotated[int, "Maximum number of results to return (1-10, default 5)"] = 5,
) -> dict:
    """Query the Notion database for existing entries, newest first."""
    return await query_database(
        query=query,
        category=category,
        tag=tag,
        limit=limit,
        config=config,
        notion=notion,
        state=state,
    )


@mcp.tool(name="notion_check_reviews")
async def notion_check_reviews(
    days: Annotated[int | None, "Days since last review after which an entry is overdue (default: 7)"] = None,
    include_upcoming: Annotated[bool, "Whether to include reviews coming up in the next 7 days"] = True,
) -> dict:
    """Check for entries that need review based on the spaced repetition schedule."""
    return await check_reviews(
        days=days,
        include_upcoming=include_upcoming,
        config=config,
        notion=notion,
        state=state,
    )


@mcp.tool(name="notion_update_mastery")
async def notion_update_mastery(
    page_id: Annotated[str, "The ID of the Notion page to update"],
    mastery_level: Annotated[
        str, "The new mastery level: INITIAL, LEARNING, FAMILIAR, PROFICIENT or MASTERED"
    ],
) -> dict:
    """Update the mastery level of an entry and schedule its next review."""
    return await update_mastery(page_id, mastery_level, config=config, notion=notion)


def configure_logging(level: str) -> None:
    """Log to stderr; stdout carries the MCP stdio protocol."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main():
    """Validate configuration, resolve the database and run the FastMCP server."""
    configure_logging(config.server.log_level)

    try:
        config.raise_for_issues()
        database_id = asyncio.run(resolve_database(config=config, notion=notion, state=state))
    except ConfigurationError as e:
        logger.error("Configuration validation failed:")
        for issue in e.issues:
            logger.error("  - %s", issue)
        sys.exit(1)
    except NotionAPIError as e:
        logger.error("Server initialization failed: Failed to create database: %s", e.message)
        sys.exit(1)

    logger.info("Connected to Notion database: %s", database_id)
    mcp.run()


if __name__ == "__main__":
    main()
