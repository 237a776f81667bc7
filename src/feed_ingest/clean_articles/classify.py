"""Keyword-based topic classification."""

DEFAULT_CATEGORY = "Technology"

# Checked in order; the first group with any keyword present wins.
TOPIC_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Artificial Intelligence", ("ai", "machine learning", "neural")),
    ("Cloud Computing", ("cloud", "aws", "azure", "gcp")),
    ("Security", ("security", "cyber", "hack")),
    ("Web Development", ("web", "frontend", "javascript")),
    ("Databases", ("database", "sql", "nosql")),
    ("DevOps", ("devops", "kubernetes", "docker")),
)


def classify(content: str | None, title: str | None) -> str:
    """Map an article's title and content to a topic category.

    Keywords are matched as plain substrings of the lowercased text, so
    "ai" also matches inside longer words.
    """
    text = f"{title or ''} {content or ''}".lower()
    for category, keywords in TOPIC_RULES:
        if any(keyword in text for keyword in keywords):
            return category
    return DEFAULT_CATEGORY
