"""Content block model and converters for Notion page bodies.

Answers saved to the journal arrive as loosely formatted text (markdown-ish
headings, lists, quotes and code fences) or as JSON tool output. The
converters here turn both into an ordered list of typed blocks which are
serialized into Notion's block JSON just before a page is created.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

CODE_FENCE = "```"
PLAIN_TEXT_LANGUAGE = "plain text"
QUOTE_ICON = "💡"
API_RESPONSE_ICON = "🔄"

_NUMBERED_ITEM_RE = re.compile(r"^\d+\. ")


def rich_text(content: str) -> list[dict[str, Any]]:
    """Build a single-run rich text array, empty for empty content."""
    if not content:
        return []
    return [{"type": "text", "text": {"content": content}}]


@dataclass(frozen=True)
class Heading:
    """Heading block, level 1 to 3."""

    level: int
    text: str

    def to_notion(self) -> dict[str, Any]:
        block_type = f"heading_{self.level}"
        return {
            "object": "block",
            "type": block_type,
            block_type: {"rich_text": rich_text(self.text)},
        }


@dataclass(frozen=True)
class Paragraph:
    """Paragraph block. An empty paragraph keeps a blank line."""

    text: str = ""

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "paragraph",
            "paragraph": {"rich_text": rich_text(self.text)},
        }


@dataclass(frozen=True)
class BulletItem:
    text: str

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "bulleted_list_item",
            "bulleted_list_item": {"rich_text": rich_text(self.text)},
        }


@dataclass(frozen=True)
class NumberedItem:
    text: str

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "numbered_list_item",
            "numbered_list_item": {"rich_text": rich_text(self.text)},
        }


@dataclass(frozen=True)
class Quote:
    text: str

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "quote",
            "quote": {"rich_text": rich_text(self.text)},
        }


@dataclass(frozen=True)
class CodeBlock:
    text: str
    language: str = PLAIN_TEXT_LANGUAGE

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "code",
            "code": {"rich_text": rich_text(self.text), "language": self.language},
        }


@dataclass(frozen=True)
class Divider:
    def to_notion(self) -> dict[str, Any]:
        return {"object": "block", "type": "divider", "divider": {}}


@dataclass(frozen=True)
class Callout:
    text: str
    icon: str = QUOTE_ICON
    color: str | None = None

    def to_notion(self) -> dict[str, Any]:
        callout: dict[str, Any] = {
            "rich_text": rich_text(self.text),
            "icon": {"type": "emoji", "emoji": self.icon},
        }
        if self.color:
            callout["color"] = self.color
        return {"object": "block", "type": "callout", "callout": callout}


ContentBlock = (
    Heading
    | Paragraph
    | BulletItem
    | NumberedItem
    | Quote
    | CodeBlock
    | Divider
    | Callout
)


def _classify_line(line: str) -> ContentBlock:
    """Map a single line outside a code fence to its block.

    Markers are checked longest first so "### " never reads as "# ".
    """
    if line.startswith("### "):
        return Heading(3, line[4:])
    if line.startswith("## "):
        return Heading(2, line[3:])
    if line.startswith("# "):
        return Heading(1, line[2:])
    if line.startswith("- "):
        return BulletItem(line[2:])
    if _NUMBERED_ITEM_RE.match(line):
        return NumberedItem(_NUMBERED_ITEM_RE.sub("", line, count=1))
    if line.startswith("> "):
        return Callout(line[2:], icon=QUOTE_ICON)
    if line.strip():
        return Paragraph(line)
    return Paragraph("")


def text_to_blocks(text: str) -> list[ContentBlock]:
    """Convert loosely formatted text into content blocks.

    Single pass over the lines. A line starting with a code fence toggles
    fence mode; lines inside a fence are collected verbatim and emitted as
    one CodeBlock when the fence closes. A fence left open at the end of
    the input is dropped.

    Args:
        text: Text to convert

    Returns:
        Blocks in source line order
    """
    blocks: list[ContentBlock] = []
    fence_lines: list[str] = []
    inside_fence = False

    for line in text.split("\n"):
        if line.startswith(CODE_FENCE):
            if inside_fence:
                blocks.append(CodeBlock("\n".join(fence_lines), PLAIN_TEXT_LANGUAGE))
                fence_lines = []
            inside_fence = not inside_fence
            continue

        if inside_fence:
            fence_lines.append(line)
            continue

        blocks.append(_classify_line(line))

    return blocks


def json_to_blocks(value: Any) -> list[ContentBlock]:
    """Convert parsed JSON into content blocks.

    MCP-style responses (an object with a ``content`` list) become an
    "API Response" callout followed by their text and code items; anything
    else is shown as a pretty-printed JSON code block.

    Args:
        value: Parsed JSON value

    Returns:
        Blocks for the response
    """
    content = value.get("content") if isinstance(value, dict) else None
    if not isinstance(content, list):
        return [CodeBlock(json.dumps(value, indent=2, ensure_ascii=False), "json")]

    blocks: list[ContentBlock] = [
        Callout("API Response", icon=API_RESPONSE_ICON, color="blue_background")
    ]
    for item in content:
        if not isinstance(item, dict):
            continue
        if item.get("type") == "text":
            blocks.extend(text_to_blocks(str(item.get("text") or "")))
        elif item.get("type") == "code":
            blocks.append(
                CodeBlock(
                    str(item.get("code") or ""),
                    item.get("language") or PLAIN_TEXT_LANGUAGE,
                )
            )
    return blocks


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def answer_to_blocks(answer: str) -> list[ContentBlock]:
    """Convert an answer string, trying JSON before plain text.

    Any answer that parses as JSON takes the JSON path, including bare
    numbers and quoted strings. NaN and Infinity are not JSON, and input
    nested too deeply to parse is treated as text.
    """
    try:
        parsed = json.loads(answer, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return text_to_blocks(answer)
    return json_to_blocks(parsed)


def to_notion_blocks(blocks: list[ContentBlock]) -> list[dict[str, Any]]:
    """Serialize blocks into Notion API block objects."""
    return [block.to_notion() for block in blocks]
