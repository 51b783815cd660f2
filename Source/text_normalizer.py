"""
Line normalization for OCR text
Splits raw OCR output into trimmed lines and flags the ones that are not items
"""

from dataclasses import dataclass
from typing import Iterable, List

from constants import EXCLUDE_TERMS

MIN_LINE_LENGTH = 2


@dataclass(frozen=True)
class NormalizedLine:
    """A trimmed OCR line with its position among the kept lines"""
    index: int
    text: str
    excluded: bool


def should_exclude(text: str, terms: Iterable[str] = EXCLUDE_TERMS) -> bool:
    """True when the text contains any stoplist term (case-insensitive)"""
    lower_text = text.lower()
    return any(term in lower_text for term in terms)


def normalize_lines(raw_text: str) -> List[NormalizedLine]:
    """Split raw text into non-empty trimmed lines tagged with exclusion"""
    if not raw_text:
        return []

    lines = []
    for line in raw_text.splitlines():
        line = line.strip()
        if len(line) < MIN_LINE_LENGTH:
            continue
        lines.append(NormalizedLine(index=len(lines), text=line, excluded=should_exclude(line)))

    return lines
