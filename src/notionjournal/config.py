"""Configuration management for NotionJournal."""

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv, set_key, unset_key

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/notionjournal.yaml"

TOKEN_ENV = "NOTION_API_TOKEN"
DATABASE_ID_ENV = "NOTION_DATABASE_ID"
PARENT_PAGE_ID_ENV = "NOTION_PARENT_PAGE_ID"

UUID_RE = re.compile(
    r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$",
    re.IGNORECASE,
)


class ConfigurationError(Exception):
    """Raised when the configuration cannot be used to start the server."""

    def __init__(self, issues: list[str]):
        self.issues = issues
        super().__init__("Configuration validation failed: " + "; ".join(issues))


@dataclass
class NotionConfig:
    """Notion API connection configuration."""

    token: str = ""
    database_id: str = ""
    parent_page_id: str = ""
    api_version: str = "2022-06-28"
    base_url: str = "https://api.notion.com/v1"
    timeout_seconds: float = 30.0


@dataclass
class DatabaseConfig:
    """Journal database appearance and recognition."""

    title: str = "🦔 AI Question Tracker"
    marker: str = "AI Question Tracker"
    icon: str = "🦔"


@dataclass
class ReviewConfig:
    """Spaced repetition review window configuration."""

    lookback_days: int = 7
    upcoming_window_days: int = 7


@dataclass
class ServerConfig:
    name: str = "notionjournal"
    log_level: str = "INFO"
    env_file: str = ".env"


@dataclass
class JournalConfig:
    """Main configuration for NotionJournal."""

    notion: NotionConfig = field(default_factory=NotionConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def load(cls, path: Path | str = DEFAULT_CONFIG_PATH) -> "JournalConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            JournalConfig with loaded values, defaults for missing
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def from_env(
        cls,
        path: Path | str = DEFAULT_CONFIG_PATH,
        environ: Mapping[str, str] | None = None,
    ) -> "JournalConfig":
        """Load YAML configuration, then overlay Notion settings from the environment.

        The configured .env file is read first; variables already set in
        the process environment win over it.

        Args:
            path: Path to YAML configuration file
            environ: Environment mapping (defaults to os.environ)

        Returns:
            JournalConfig with environment values applied
        """
        config = cls.load(path)
        if environ is None:
            env_file = Path(config.server.env_file)
            if env_file.exists():
                logger.info("Loading environment from %s", env_file)
                load_dotenv(env_file)
            else:
                logger.warning("No %s file found, using environment variables if available", env_file)
            environ = os.environ
        config.apply_env(environ)
        return config

    def apply_env(self, environ: Mapping[str, str]) -> None:
        """Apply Notion credentials and ids from an environment mapping."""
        if environ.get(TOKEN_ENV):
            self.notion.token = environ[TOKEN_ENV]
        if environ.get(DATABASE_ID_ENV):
            self.notion.database_id = environ[DATABASE_ID_ENV]
        if environ.get(PARENT_PAGE_ID_ENV):
            self.notion.parent_page_id = environ[PARENT_PAGE_ID_ENV]

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "JournalConfig":
        """Create config from dictionary."""
        return cls(
            notion=cls._load_notion(data.get("notion", {})),
            database=cls._load_database(data.get("database", {})),
            review=cls._load_review(data.get("review", {})),
            server=cls._load_server(data.get("server", {})),
        )

    @staticmethod
    def _load_notion(data: dict) -> NotionConfig:
        """Load Notion config."""
        defaults = NotionConfig()
        return NotionConfig(
            token=data.get("token", defaults.token),
            database_id=data.get("database_id", defaults.database_id),
            parent_page_id=data.get("parent_page_id", defaults.parent_page_id),
            api_version=data.get("api_version", defaults.api_version),
            base_url=data.get("base_url", defaults.base_url),
            timeout_seconds=data.get("timeout_seconds", defaults.timeout_seconds),
        )

    @staticmethod
    def _load_database(data: dict) -> DatabaseConfig:
        """Load database config."""
        defaults = DatabaseConfig()
        return DatabaseConfig(
            title=data.get("title", defaults.title),
            marker=data.get("marker", defaults.marker),
            icon=data.get("icon", defaults.icon),
        )

    @staticmethod
    def _load_review(data: dict) -> ReviewConfig:
        """Load review config."""
        defaults = ReviewConfig()
        return ReviewConfig(
            lookback_days=data.get("lookback_days", defaults.lookback_days),
            upcoming_window_days=data.get(
                "upcoming_window_days", defaults.upcoming_window_days
            ),
        )

    @staticmethod
    def _load_server(data: dict) -> ServerConfig:
        """Load server config."""
        defaults = ServerConfig()
        return ServerConfig(
            name=data.get("name", defaults.name),
            log_level=data.get("log_level", defaults.log_level),
            env_file=data.get("env_file", defaults.env_file),
        )

    def validate(self) -> list[str]:
        """Check the settings the server cannot start without.

        Returns:
            List of issue descriptions, empty when valid
        """
        issues = []
        if not self.notion.token:
            issues.append(f"{TOKEN_ENV} environment variable is not set")
        if self.notion.database_id and not UUID_RE.match(self.notion.database_id):
            issues.append(
                f"{DATABASE_ID_ENV} is not in valid UUID format "
                "(xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx)"
            )
        return issues

    def raise_for_issues(self) -> None:
        """Raise ConfigurationError if validate() reports any issue."""
        issues = self.validate()
        if issues:
            raise ConfigurationError(issues)


@dataclass
class DatabaseState:
    """The database the tools currently write to.

    Shared by reference between all tools. Only database setup and
    startup resolution change it; every other tool reads it per call.
    """

    database_id: str = ""
    env_file: Path | None = None

    def set(self, database_id: str) -> None:
        """Switch to a new database id and persist it to the .env file."""
        self.database_id = database_id
        if self.env_file is None:
            return
        try:
            if database_id:
                set_key(str(self.env_file), DATABASE_ID_ENV, database_id)
            elif self.env_file.exists():
                unset_key(str(self.env_file), DATABASE_ID_ENV)
        except OSError as e:
            logger.warning("Failed to update %s with database ID: %s", self.env_file, e)
        else:
            logger.info("Updated %s with database ID", self.env_file)
