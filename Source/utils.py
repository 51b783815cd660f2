#!/usr/bin/env python3
"""
Utility functions for How Much Ah?
"""

import logging
import mimetypes
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Optional

from config import CURRENCY_SYMBOL, MAX_IMAGE_SIZE_BYTES
from constants import ALLOWED_IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def validate_image_path(image_path: str) -> bool:
    """Check that the path points to a JPG or PNG small enough to upload"""
    if not isinstance(image_path, str):
        logger.warning("Image path must be a string")
        return False

    path = Path(image_path)

    if not path.is_file():
        logger.warning("File not found: %s", image_path)
        return False

    if path.stat().st_size > MAX_IMAGE_SIZE_BYTES:
        logger.warning("File too large: %d bytes (max: %d)", path.stat().st_size, MAX_IMAGE_SIZE_BYTES)
        return False

    if path.suffix.lower() not in ALLOWED_IMAGE_EXTENSIONS:
        logger.warning("Unsupported file extension: %s", path.suffix)
        return False

    mime_type, _ = mimetypes.guess_type(str(path))
    if mime_type and not mime_type.startswith('image/'):
        logger.warning("Invalid MIME type: %s", mime_type)
        return False

    return True


def round_money(amount) -> Decimal:
    """Round to cents, halves away from zero"""
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount, symbol: str = CURRENCY_SYMBOL) -> str:
    """Two-decimal amount with the currency symbol, e.g. $5.00"""
    if not isinstance(amount, (int, float, Decimal)):
        return f"{symbol}0.00"
    return f"{symbol}{round_money(amount)}"


def try_parse_decimal(value: str) -> Optional[Decimal]:
    """Safely parse a money amount, accepting a leading currency symbol"""
    if not isinstance(value, str):
        return None
    cleaned = value.strip().lstrip('$').replace(',', '.')
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def try_parse_int(value: str) -> Optional[int]:
    """Safely parse integer from string"""
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def validate_menu_choice(choice: str, valid_choices: list) -> Optional[str]:
    """Validate a menu choice against allowed options"""
    if not isinstance(choice, str):
        return None
    choice = choice.strip()
    return choice if choice in set(valid_choices) else None

