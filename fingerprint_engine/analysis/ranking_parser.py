"""Numbered-list parsing for recommendation responses.

One list-item pattern feeds both the target's rank and the competitors'
positions, so the two are always measured the same way:

  "1. Acme Cafe"        → (1, "Acme Cafe")
  "2) Acme Cafe"        → (2, "Acme Cafe")
  "**3. Acme Cafe**"    → (3, "Acme Cafe**")
  "### 4. Acme Cafe"    → (4, "Acme Cafe")
  "Top 5: Acme Cafe"    → (5, "Acme Cafe")
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from fingerprint_engine.analysis.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from fingerprint_engine.analysis.mention import detect_mention

# Optional markdown lead-in (emphasis, heading, quote), optional "Top"/"#",
# then the list number and its delimiter. "10:30" is not a list number.
_LIST_ITEM_RE = re.compile(
    r"^\s*(?:[*_#>]+\s*)*(?:top\s+|#)?(\d{1,3})(?:[.)]|:)(?!\d)\s*(.*)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ListItem:
    number: int
    body: str
    line: str


def parse_list_item(line: str) -> ListItem | None:
    match = _LIST_ITEM_RE.match(line)
    if not match:
        return None
    body = match.group(2).strip()
    if not body:
        return None
    return ListItem(number=int(match.group(1)), body=body, line=line)


def iter_list_items(text: str) -> list[ListItem]:
    """All numbered-list items in text, in order of appearance."""
    items = []
    for line in text.splitlines():
        item = parse_list_item(line)
        if item is not None:
            items.append(item)
    return items


def extract_rank_position(
    text: str,
    business_name: str,
    config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
) -> int | None:
    """List number of the first numbered line that mentions the business.

    Lines that mention the business without a list number (intros like
    "Here are places similar to X") are skipped.
    """
    for line in text.splitlines():
        if not detect_mention(line, business_name, config):
            continue
        item = parse_list_item(line)
        if item is not None:
            return item.number
    return None
