"""
Centralized configuration for How Much Ah? with environment
"""

import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

# OCR.space settings
OCR_SPACE_API_KEY = os.getenv("HOWMUCH_OCR_SPACE_API_KEY", "")
OCR_SPACE_ENDPOINT = os.getenv("HOWMUCH_OCR_SPACE_ENDPOINT", "https://api.ocr.space/parse/image")
OCR_SPACE_LANGUAGE = os.getenv("HOWMUCH_OCR_SPACE_LANGUAGE", "eng")
OCR_SPACE_ENGINE = int(os.getenv("HOWMUCH_OCR_SPACE_ENGINE", "2"))
OCR_SPACE_TIMEOUT = int(os.getenv("HOWMUCH_OCR_SPACE_TIMEOUT", "30"))

# Tesseract settings
OCR_PSM = int(os.getenv("HOWMUCH_OCR_PSM", "6"))
OCR_LANGUAGES = os.getenv("HOWMUCH_OCR_LANGUAGES", "eng")
IMAGE_REGION_OVERLAP_PX = int(os.getenv("HOWMUCH_IMAGE_OVERLAP", "50"))

# Runtime settings
DEFAULT_MAX_WORKERS = int(os.getenv("HOWMUCH_MAX_WORKERS", "4"))
WORKERS_MIN = int(os.getenv("HOWMUCH_WORKERS_MIN", "1"))
WORKERS_MAX = int(os.getenv("HOWMUCH_WORKERS_MAX", "16"))
LOG_LEVEL = os.getenv("HOWMUCH_LOG_LEVEL", "WARNING")
CURRENCY_SYMBOL = os.getenv("HOWMUCH_CURRENCY_SYMBOL", "$")

# Upload limits
MAX_IMAGE_SIZE_BYTES = int(os.getenv("HOWMUCH_MAX_IMAGE_SIZE_BYTES", str(10 * 1024 * 1024)))
IMAGE_MAX_DIMENSION = int(os.getenv("HOWMUCH_IMAGE_MAX_DIMENSION", "2000"))
IMAGE_JPEG_QUALITY = int(os.getenv("HOWMUCH_IMAGE_JPEG_QUALITY", "85"))

# Price plausibility ceilings (exclusive)
SINGLE_PASS_PRICE_MAX = Decimal(os.getenv("HOWMUCH_SINGLE_PASS_PRICE_MAX", "1000"))
STRUCTURED_PRICE_MAX = Decimal(os.getenv("HOWMUCH_STRUCTURED_PRICE_MAX", "500"))
BARE_PRICE_MAX = Decimal(os.getenv("HOWMUCH_BARE_PRICE_MAX", "100"))
DUPLICATE_PRICE_TOLERANCE = Decimal(os.getenv("HOWMUCH_DUPLICATE_PRICE_TOLERANCE", "0.01"))

# Settlement
SETTLEMENT_EPSILON = Decimal(os.getenv("HOWMUCH_SETTLEMENT_EPSILON", "0.01"))
DEFAULT_SERVICE_CHARGE_PERCENT = Decimal(os.getenv("HOWMUCH_SERVICE_CHARGE_PERCENT", "10"))
DEFAULT_GST_PERCENT = Decimal(os.getenv("HOWMUCH_GST_PERCENT", "9"))
MAX_RECEIPTS = int(os.getenv("HOWMUCH_MAX_RECEIPTS", "3"))
