"""Short decorated titles for journal entries.

A question such as "How do I fix a CORS error in my REST API?" becomes
something like "🔌 Fix Cors Error in My REST API": filler phrases and
articles are removed, a topic category is sniffed from keywords, an emoji
is picked from that category, and the words are title-cased while
preserving the canonical spelling of technical terms.
"""

import random
import re
from collections.abc import Callable, Sequence

MAX_TITLE_LENGTH = 50
TRUNCATE_AT = 47
ELLIPSIS = "..."

DEFAULT_CATEGORY = "general"

FILLER_PHRASES = [
    "can you",
    "could you",
    "please",
    "help me",
    "i want to",
    "how to",
    "how do i",
    "what is",
    "what are",
    "tell me about",
    "explain",
    "show me",
    "write",
    "implement",
    "create",
    "build",
    "make",
    "develop",
]

# Checked in order; the first category with a keyword hit wins.
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "database": ["database", "sql", "query", "schema", "mongodb", "postgres", "redis", "nosql", "orm", "jdbc"],
    "web": ["api", "http", "rest", "graphql", "endpoint", "fetch", "axios", "request", "response", "cors"],
    "ai": ["ai", "ml", "model", "neural", "train", "inference", "deep learning", "nlp", "tensorflow", "pytorch"],
    "security": ["security", "auth", "encryption", "token", "jwt", "oauth", "password", "hash", "crypto", "ssl"],
    "architecture": ["architecture", "design", "pattern", "structure", "solid", "dry", "kiss", "yagni", "mvc", "mvvm"],
    "performance": [
        "performance",
        "optimization",
        "speed",
        "memory",
        "cache",
        "latency",
        "throughput",
        "benchmark",
        "profiling",
    ],
    "testing": ["test", "testing", "unit", "integration", "coverage", "jest", "mocha", "cypress", "selenium", "qa"],
    "cloud": ["cloud", "aws", "azure", "gcp", "serverless", "lambda", "s3", "ec2", "docker", "kubernetes"],
    "mobile": ["mobile", "ios", "android", "react native", "flutter", "swift", "kotlin", "app", "responsive"],
    "devops": ["devops", "ci", "cd", "pipeline", "jenkins", "github actions", "gitlab", "deploy", "release"],
    "analytics": [
        "analytics",
        "metrics",
        "dashboard",
        "visualization",
        "report",
        "bi",
        "data",
        "statistics",
        "tracking",
    ],
    "programming": ["javascript", "python", "java", "code", "function", "bug", "error", "debug", "syntax", "compiler"],
}

CATEGORY_EMOJIS: dict[str, list[str]] = {
    "programming": ["💻", "⌨️", "🖥️", "👨‍💻", "👩‍💻", "🚀", "⚡", "🔧", "🛠️", "📱"],
    "database": ["📊", "🗄️", "💾", "🎲", "📈", "📉", "🗃️", "📑", "🏢", "📓"],
    "web": ["🌐", "🔌", "🔗", "🌍", "🎯", "🎨", "📡", "🔄", "🖧", "🔮"],
    "ai": ["🤖", "🧠", "💡", "🔮", "🎓", "🔬", "🎯", "📊", "🧪", "💭"],
    "security": ["🔒", "🛡️", "🔑", "🔐", "⚔️", "🚨", "🎯", "🔰", "🏰", "💂"],
    "architecture": ["🏗️", "📐", "🔨", "🎡", "🎪", "🌉", "🏛️", "🔧", "📝", "🎨"],
    "performance": ["⚡", "📈", "🎯", "🚀", "⏱️", "🔋", "💪", "🎮", "🔥", "💫"],
    "testing": ["✅", "🧪", "🔍", "🎯", "📋", "🔬", "🎮", "🎲", "📊", "🎪"],
    "cloud": ["☁️", "🌩️", "🌐", "📡", "🔌", "🖧", "📤", "📥", "🔄", "💨"],
    "mobile": ["📱", "🤳", "📲", "🔌", "💬", "🎮", "🎯", "📍", "🔍", "💫"],
    "devops": ["🔄", "⚙️", "🔧", "🚀", "🔁", "📦", "🎯", "🔨", "🛠️", "🔌"],
    "analytics": ["📊", "📈", "📉", "🔍", "🎯", "💡", "🧮", "🔢", "📑", "🗂️"],
    "general": ["✨", "💫", "🌟", "💪", "🎯", "📝", "💡", "🎨", "🔖", "🎪"],
}

TECHNICAL_TERMS = [
    "API",
    "REST",
    "GraphQL",
    "HTTP",
    "HTTPS",
    "JWT",
    "JSON",
    "XML",
    "SQL",
    "NoSQL",
    "CSS",
    "HTML",
    "JavaScript",
    "TypeScript",
    "Node.js",
    "React",
    "Vue",
    "Angular",
    "MongoDB",
    "PostgreSQL",
    "Redis",
    "AWS",
    "Docker",
    "Kubernetes",
    "CI/CD",
    "Git",
    "npm",
    "yarn",
    "webpack",
    "ESLint",
    "Jest",
    "Mocha",
    "Express",
]

MINOR_WORDS = frozenset(
    ["a", "an", "and", "as", "at", "but", "by", "for", "in", "of", "on", "or", "the", "to", "with"]
)

_FILLER_RE = re.compile(
    r"^(" + "|".join(re.escape(phrase) for phrase in FILLER_PHRASES) + r")",
    re.IGNORECASE,
)
_PUNCTUATION_RE = re.compile(r"[?.,!]|\s+")
_ARTICLE_RE = re.compile(r"\s+(a|an|the)\s+", re.IGNORECASE)
_LEADING_NUMBER_RE = re.compile(r"^(\d+)")
_CATEGORY_PATTERNS = {
    category: re.compile(
        r"\b(" + "|".join(re.escape(keyword) for keyword in keywords) + r")\b",
        re.IGNORECASE,
    )
    for category, keywords in CATEGORY_KEYWORDS.items()
}
_TECHNICAL_TERMS_BY_LOWER = {term.lower(): term for term in TECHNICAL_TERMS}

EmojiSelector = Callable[[Sequence[str]], str]


def clean_question(question: str) -> str:
    """Strip one leading filler phrase, punctuation and articles."""
    cleaned = _FILLER_RE.sub("", question, count=1)
    cleaned = _PUNCTUATION_RE.sub(" ", cleaned)
    cleaned = _ARTICLE_RE.sub(" ", cleaned)
    return cleaned.strip()


def detect_category(text: str) -> str:
    """Return the first category whose keywords appear in text."""
    for category, pattern in _CATEGORY_PATTERNS.items():
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY


def select_emoji(category: str, selector: EmojiSelector | None = None) -> str:
    """Pick an emoji for a category.

    Args:
        category: Category name; unknown names use the general set
        selector: Chooses one item from the set (random.choice by default)

    Returns:
        A member of the category's emoji set
    """
    choose = selector or random.choice
    return choose(CATEGORY_EMOJIS.get(category, CATEGORY_EMOJIS[DEFAULT_CATEGORY]))


def title_case(text: str) -> str:
    """Title-case words, keeping technical terms and minor words."""
    words = text.split(" ")
    cased = []
    for index, word in enumerate(words):
        term = _TECHNICAL_TERMS_BY_LOWER.get(word.lower())
        if term:
            cased.append(term)
        elif index == 0 or word.lower() not in MINOR_WORDS:
            cased.append(word[:1].upper() + word[1:].lower())
        else:
            cased.append(word.lower())
    return " ".join(cased)


def truncate_title(title: str) -> str:
    """Shorten to the title limit, breaking at a word where possible."""
    if len(title) <= MAX_TITLE_LENGTH:
        return title
    break_point = title.rfind(" ", 0, TRUNCATE_AT + 1)
    cut = break_point if break_point > 0 else TRUNCATE_AT
    return title[:cut] + ELLIPSIS


def generate_title(question: str, selector: EmojiSelector | None = None) -> str:
    """Generate a decorated title from a question.

    Args:
        question: The question as asked
        selector: Optional emoji selector, for deterministic output

    Returns:
        Emoji-prefixed title of at most 50 characters
    """
    cleaned = clean_question(question)
    emoji = select_emoji(detect_category(cleaned), selector)
    cased = _LEADING_NUMBER_RE.sub(r"#\1", title_case(cleaned))
    return truncate_title(f"{emoji} {cased}")
