"""Default feed sources, used when the config does not list any."""

from feed_ingest.models import Source

DEFAULT_SOURCES = [
    Source(url="https://blogs.nvidia.com/feed/", name="NVIDIA Blog"),
    Source(url="https://blog.jetbrains.com/feed/", name="JetBrains Blog"),
    Source(url="https://stackoverflow.blog/feed/", name="Stack Overflow Blog"),
    Source(url="https://azure.microsoft.com/en-us/blog/feed/", name="Microsoft Azure"),
    Source(url="https://aws.amazon.com/blogs/machine-learning/feed/", name="AWS ML"),
    Source(url="https://huggingface.blog/feed.xml", name="Hugging Face"),
    Source(url="https://techcrunch.com/feed/", name="Tech Crunch"),
    Source(url="https://webkit.org/feed/", name="WebKit"),
    Source(url="https://blog.chromium.org/feeds/posts/default", name="Chromium Blog"),
    Source(url="https://developer.mozilla.org/en-US/blog/rss.xml", name="MDN Blog"),
    # Atom
    # Source(url="https://www.schneier.com/feed/atom/", name="Schneier on Security"),
]


def configured_sources(config_sources: list[Source]) -> list[Source]:
    return list(config_sources) or list(DEFAULT_SOURCES)
