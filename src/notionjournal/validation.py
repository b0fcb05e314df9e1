"""Parameter validation for journal tools.

Every check runs before any Notion call is made, so a rejected request
never touches the database.
"""

from dataclasses import dataclass

from notionjournal.review import MasteryLevel

MIN_QUERY_LIMIT = 1
MAX_QUERY_LIMIT = 10


@dataclass
class ValidationResult:
    """Result of a validation check."""

    is_valid: bool
    error: str | None = None


VALID = ValidationResult(is_valid=True)


def validate_required(name: str, value: str | None) -> ValidationResult:
    """Validate that a required string parameter is present and non-blank."""
    if value is None or not str(value).strip():
        return ValidationResult(is_valid=False, error=f"Parameter '{name}' is required")
    return VALID


def validate_tags(tags: list[str] | None) -> ValidationResult:
    if tags is None:
        return VALID
    for tag in tags:
        if not isinstance(tag, str) or not tag.strip():
            return ValidationResult(
                is_valid=False, error="Tags must be non-empty strings"
            )
    return VALID


def validate_limit(limit: int) -> ValidationResult:
    """Validate the query result limit is within 1-10."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        return ValidationResult(is_valid=False, error="Limit must be an integer")
    if not MIN_QUERY_LIMIT <= limit <= MAX_QUERY_LIMIT:
        return ValidationResult(
            is_valid=False,
            error=f"Limit must be between {MIN_QUERY_LIMIT} and {MAX_QUERY_LIMIT}, got {limit}",
        )
    return VALID


def validate_days(days: int) -> ValidationResult:
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        return ValidationResult(
            is_valid=False, error=f"Days must be a non-negative integer, got {days!r}"
        )
    return VALID


def validate_mastery_level(name: str) -> ValidationResult:
    """Validate a mastery level enum name such as "LEARNING"."""
    allowed = [level.name for level in MasteryLevel]
    if name not in allowed:
        return ValidationResult(
            is_valid=False,
            error=f"Invalid mastery level '{name}'. Allowed levels: {allowed}",
        )
    return VALID


def first_error(*results: ValidationResult) -> str | None:
    """Return the error of the first failed result, if any."""
    for result in results:
        if not result.is_valid:
            return result.error
    return None
