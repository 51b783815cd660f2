"""
Price token detection for receipt lines
"""

import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from constants import PATTERNS


class PriceTokenMatcher:
    """Finds two-decimal currency amounts such as 12.50 or $12.50"""

    _token_re = re.compile(PATTERNS['price_token'])
    _bare_re = re.compile(PATTERNS['bare_price'])

    def __init__(self, max_price: Decimal):
        self.max_price = Decimal(max_price)

    def find_tokens(self, line: str) -> List[str]:
        """All price tokens in the line, left to right"""
        return self._token_re.findall(line)

    def is_bare_price(self, line: str) -> bool:
        """True if the whole trimmed line is exactly one price token"""
        return self._bare_re.match(line.strip()) is not None

    @staticmethod
    def value(token: str) -> Optional[Decimal]:
        try:
            return Decimal(token.replace('$', '').strip())
        except InvalidOperation:
            return None

    def is_valid(self, value: Optional[Decimal]) -> bool:
        """Plausible item price: inside the open range (0, max_price)"""
        return value is not None and Decimal(0) < value < self.max_price

    def last_valid_price(self, tokens: List[str]) -> Optional[Decimal]:
        """Right-most token whose value is in range"""
        for token in reversed(tokens):
            price = self.value(token)
            if self.is_valid(price):
                return price
        return None

    def bare_price(self, line: str) -> Optional[Decimal]:
        """Value of a bare price line if it is in range"""
        match = self._bare_re.match(line.strip())
        if not match:
            return None
        price = self.value(match.group(1))
        return price if self.is_valid(price) else None
