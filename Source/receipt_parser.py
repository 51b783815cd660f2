"""
Receipt Parser module for How Much Ah?
Turns OCR text into line items using one of two extraction strategies
"""

import re
import logging
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from config import (
    SINGLE_PASS_PRICE_MAX,
    STRUCTURED_PRICE_MAX,
    BARE_PRICE_MAX,
    DUPLICATE_PRICE_TOLERANCE,
)
from constants import PATTERNS, PLACEHOLDER_ITEM_NAME
from data_models import LineItem
from price_matcher import PriceTokenMatcher
from text_normalizer import NormalizedLine, normalize_lines, should_exclude

logger = logging.getLogger(__name__)

# Lines searched for a price around a quantity+name line, closest first
PRICE_SEARCH_ABOVE = 3
PRICE_SEARCH_BELOW = 2


class ParsingStrategy(Enum):
    """Line item extraction algorithms"""
    SINGLE_PASS = "single-pass"
    STRUCTURED = "structured"


class ReceiptParser:
    """Parses OCR text to extract receipt line items"""

    _qty_prefix_re = re.compile(PATTERNS['qty_prefix'])
    _same_line_re = re.compile(PATTERNS['same_line_item'])
    _qty_name_re = re.compile(PATTERNS['qty_name_only'])

    def __init__(self,
                 strategy: Union[ParsingStrategy, str] = ParsingStrategy.STRUCTURED,
                 id_factory: Optional[Callable[[], str]] = None):
        self.strategy = ParsingStrategy(strategy)
        self.id_factory = id_factory
        self.item_id_counter = 0

    def _generate_item_id(self) -> str:
        if self.id_factory is not None:
            return self.id_factory()
        self.item_id_counter += 1
        return f"ocr-{self.item_id_counter}"

    @staticmethod
    def _clean_single_pass_name(line: str, tokens: List[str]) -> str:
        name = line
        for token in tokens:
            name = name.replace(token, '', 1)

        name = re.sub(PATTERNS['leading_qty'], '', name)
        name = re.sub(PATTERNS['leading_index'], '', name)
        name = re.sub(PATTERNS['leading_symbols'], '', name)
        name = re.sub(PATTERNS['repeated_plus'], '', name)
        name = re.sub(PATTERNS['repeated_dots'], '', name)
        return ' '.join(name.split())

    @staticmethod
    def _clean_structured_name(name: str) -> str:
        name = re.sub(PATTERNS['leading_qty'], '', name.strip())
        name = re.sub(PATTERNS['modifiers'], '', name)
        name = re.sub(r'\s*[-–:]\s*$', '', name)
        return ' '.join(name.split())

    @staticmethod
    def _is_duplicate(items: List[LineItem], name: str, price: Decimal) -> bool:
        return any(
            item.name.lower() == name.lower() and abs(item.price - price) < DUPLICATE_PRICE_TOLERANCE
            for item in items
        )

    def _accept(self, items: List[LineItem], name: str, price: Decimal, reason: str):
        if self._is_duplicate(items, name, price):
            logger.debug("  Duplicate skipped: %r %.2f", name, price)
            return

        logger.debug("  ✓ %s: %r %.2f", reason, name, price)
        items.append(LineItem(id=self._generate_item_id(), name=name, price=price))

    def _parse_single_pass(self, lines: List[NormalizedLine]) -> List[LineItem]:
        """Priority table applied to each line on its own"""
        matcher = PriceTokenMatcher(SINGLE_PASS_PRICE_MAX)
        items: List[LineItem] = []

        for line in lines:
            if line.excluded:
                logger.debug("Line %d excluded: %r", line.index, line.text)
                continue

            tokens = matcher.find_tokens(line.text)
            price = matcher.last_valid_price(tokens)
            name = self._clean_single_pass_name(line.text, tokens)
            starts_with_qty = self._qty_prefix_re.match(line.text) is not None

            if starts_with_qty and len(name) >= 2 and price is not None:
                self._accept(items, name, price, 'Qty + Name + Price')
            elif not starts_with_qty and len(name) >= 3 and price is not None and not should_exclude(name):
                self._accept(items, name, price, 'Name + Price')
            elif matcher.is_bare_price(line.text) and price is not None and price < BARE_PRICE_MAX:
                self._accept(items, PLACEHOLDER_ITEM_NAME, price, 'Standalone price')
            elif starts_with_qty and len(name) >= 2 and not should_exclude(name):
                logger.info("No price found for %r, needs manual correction", name)
                self._accept(items, name, Decimal("0.00"), 'Qty + Name (no price)')
            else:
                logger.debug("Line %d not an item: %r", line.index, line.text)

        return items

    @staticmethod
    def _find_nearby_price(lines: List[NormalizedLine], index: int, consumed: set,
                           matcher: PriceTokenMatcher) -> Optional[Tuple[NormalizedLine, Decimal]]:
        above = [index - offset for offset in range(1, PRICE_SEARCH_ABOVE + 1)]
        below = [index + offset for offset in range(1, PRICE_SEARCH_BELOW + 1)]

        for candidate in above + below:
            if candidate < 0 or candidate >= len(lines) or candidate in consumed:
                continue
            price = matcher.bare_price(lines[candidate].text)
            if price is not None:
                return lines[candidate], price
        return None

    def _parse_structured(self, lines: List[NormalizedLine]) -> List[LineItem]:
        """Same-line matches first, then quantity lines paired with a nearby price line"""
        matcher = PriceTokenMatcher(STRUCTURED_PRICE_MAX)
        consumed = set()
        accepted = []

        for line in lines:
            if line.excluded:
                logger.debug("Line %d excluded: %r", line.index, line.text)
                continue

            match = self._same_line_re.match(line.text)
            if not match:
                continue

            name = self._clean_structured_name(match.group(1))
            price = matcher.value(match.group(2))
            if len(name) < 3 or not matcher.is_valid(price) or should_exclude(name):
                logger.debug("Line %d rejected: %r", line.index, line.text)
                continue

            consumed.add(line.index)
            accepted.append((line.index, name, price, 'Same-line'))

        for line in lines:
            if line.excluded or line.index in consumed:
                continue
            if matcher.find_tokens(line.text):
                continue

            match = self._qty_name_re.match(line.text)
            if not match:
                continue

            name = self._clean_structured_name(match.group(2))
            if len(name) < 3 or should_exclude(name):
                continue

            found = self._find_nearby_price(lines, line.index, consumed, matcher)
            if found is None:
                logger.debug("Line %d has no price nearby, discarded: %r", line.index, line.text)
                continue

            price_line, price = found
            consumed.update((line.index, price_line.index))
            accepted.append((line.index, name, price, f'Qty + Name, price on line {price_line.index}'))

        accepted.sort(key=lambda entry: entry[0])

        items: List[LineItem] = []
        for _, name, price, reason in accepted:
            self._accept(items, name, price, reason)
        return items

    def parse(self, ocr_text: str) -> List[LineItem]:
        """Parse OCR text into line items; an empty list means manual entry"""
        self.item_id_counter = 0
        lines = normalize_lines(ocr_text)
        logger.debug("Parsing %d lines with %s strategy", len(lines), self.strategy.value)

        if self.strategy is ParsingStrategy.SINGLE_PASS:
            items = self._parse_single_pass(lines)
        else:
            items = self._parse_structured(lines)

        if not items:
            logger.info("No items found in receipt text")
        else:
            logger.info("Items found: %d", len(items))
        return items


def parse_receipt_text(raw_text: str,
                       strategy: Union[ParsingStrategy, str] = ParsingStrategy.STRUCTURED,
                       id_factory: Optional[Callable[[], str]] = None) -> List[LineItem]:
    """Parse raw OCR text into line items with empty assignments"""
    return ReceiptParser(strategy=strategy, id_factory=id_factory).parse(raw_text)
