"""Minimal extraction of headline fields from an RSS feed.

The news upstream emits plain RSS 2.0 ``<item>`` blocks. Only the four tags the
client shows are pulled out, with simple patterns rather than an XML parser, so
a truncated or invalid document still yields whatever items are intact.
"""

import html
import re

from upstream.models import NewsItem

DEFAULT_FEED_LIMIT = 5

ITEM_PATTERN = re.compile(r"<item\b[^>]*>(.*?)</item>", re.DOTALL | re.IGNORECASE)
CDATA_PATTERN = re.compile(r"^<!\[CDATA\[(.*?)\]\]>$", re.DOTALL)

FEED_FIELDS = {
    "title": "title",
    "link": "link",
    "pub_date": "pubDate",
    "source": "source",
}


def _tag_pattern(tag: str) -> re.Pattern:
    return re.compile(rf"<{tag}\b[^>]*>(.*?)</{tag}>", re.DOTALL | re.IGNORECASE)


TAG_PATTERNS = {field: _tag_pattern(tag) for field, tag in FEED_FIELDS.items()}


def extract_tag(block: str, pattern: re.Pattern) -> str:
    """Return the unescaped text of the first match in ``block``, or an empty string."""
    match = pattern.search(block)
    if not match:
        return ""
    text = match.group(1).strip()
    cdata = CDATA_PATTERN.match(text)
    if cdata:
        return cdata.group(1).strip()
    return html.unescape(text)


def extract_feed_items(xml: str | None, limit: int = DEFAULT_FEED_LIMIT) -> list[NewsItem]:
    """Extract up to ``limit`` headlines from an RSS document, in document order.

    Args:
        xml: Raw feed body. ``None`` or text without ``<item>`` tags yields no items.
        limit: Maximum number of items to return

    Returns:
        List of NewsItem; missing sub-fields are empty strings.
    """
    if not xml or limit <= 0:
        return []

    items = []
    for match in ITEM_PATTERN.finditer(xml):
        block = match.group(1)
        fields = {field: extract_tag(block, pattern) for field, pattern in TAG_PATTERNS.items()}
        items.append(NewsItem(**fields))
        if len(items) >= limit:
            break

    return items
