"""
OCR Processing module for How Much Ah?
Turns receipt photos into raw text, either through OCR.space or a local
Tesseract install
"""

import io
import time
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from concurrent.futures import ThreadPoolExecutor, as_completed

import cv2
import numpy as np
import pytesseract
import requests
from PIL import Image, ImageEnhance, ImageFilter, ImageOps

import config
from data_models import ProcessingMetrics
from exceptions import OCRError
from utils import validate_image_path

logger = logging.getLogger(__name__)


def prepare_image(image_path: str,
                  max_dimension: int = config.IMAGE_MAX_DIMENSION,
                  quality: int = config.IMAGE_JPEG_QUALITY) -> bytes:
    """Validate a JPG/PNG upload and re-encode it as a downscaled JPEG"""
    if not validate_image_path(image_path):
        raise OCRError("Please upload a JPG or PNG under 10MB")

    with Image.open(image_path) as image:
        image = ImageOps.exif_transpose(image)
        if image.mode != 'RGB':
            image = image.convert('RGB')
        image.thumbnail((max_dimension, max_dimension))

        buffer = io.BytesIO()
        image.save(buffer, format='JPEG', quality=quality, optimize=True)

    data = buffer.getvalue()
    logger.info("Image prepared for upload: %d bytes", len(data))
    return data


def extract_parsed_text(payload: Dict[str, Any]) -> str:
    """Raw text of the first result in an OCR.space response"""
    if payload.get('IsErroredOnProcessing'):
        message = payload.get('ErrorMessage') or 'OCR failed'
        if isinstance(message, list):
            message = '; '.join(str(m) for m in message)
        raise OCRError(message)

    results = payload.get('ParsedResults') or []
    if not results:
        raise OCRError("No text found in image")

    return results[0].get('ParsedText') or ''


@dataclass(frozen=True)
class OCRSpaceConfig:
    """Settings for the OCR.space parse endpoint"""
    api_key: str
    endpoint: str = config.OCR_SPACE_ENDPOINT
    language: str = config.OCR_SPACE_LANGUAGE
    engine: int = config.OCR_SPACE_ENGINE
    timeout: int = config.OCR_SPACE_TIMEOUT

    @classmethod
    def from_env(cls) -> 'OCRSpaceConfig':
        if not config.OCR_SPACE_API_KEY:
            raise OCRError("HOWMUCH_OCR_SPACE_API_KEY is not set")
        return cls(api_key=config.OCR_SPACE_API_KEY)

    def form_data(self) -> Dict[str, str]:
        return {
            'apikey': self.api_key,
            'language': self.language,
            'isOverlayRequired': 'false',
            'detectOrientation': 'true',
            'scale': 'true',
            'OCREngine': str(self.engine),
            'isTable': 'true',
        }


class OCRSpaceClient:
    """OCR.space HTTP client; the HTTP session is created on first use"""

    def __init__(self, ocr_config: OCRSpaceConfig, session: Optional[requests.Session] = None):
        self.config = ocr_config
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def recognize_bytes(self, image_bytes: bytes, filename: str = 'receipt.jpg') -> str:
        """Send image bytes to OCR.space and return the parsed text"""
        start_time = time.time()
        try:
            response = self.session.post(
                self.config.endpoint,
                data=self.config.form_data(),
                files={'file': (filename, image_bytes, 'image/jpeg')},
                timeout=self.config.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("OCR.space request failed: %s", e)
            raise OCRError(f"OCR request failed: {e}") from e
        except ValueError as e:
            raise OCRError("OCR.space returned an invalid response") from e

        text = extract_parsed_text(payload)
        logger.info("OCR.space complete in %.2fs", time.time() - start_time)
        return text

    def recognize(self, image_path: str) -> str:
        """Prepare the image at image_path and run it through OCR.space"""
        return self.recognize_bytes(prepare_image(image_path), filename=Path(image_path).stem + '.jpg')


class ParallelOCRProcessor:
    """Parallel OCR processing of receipt images with local Tesseract"""

    def __init__(self, num_workers: int = config.DEFAULT_MAX_WORKERS,
                 language: str = config.OCR_LANGUAGES, psm: int = config.OCR_PSM):
        self.num_workers = max(config.WORKERS_MIN, min(config.WORKERS_MAX, num_workers))
        self.language = language
        self.psm = psm
        self.metrics = ProcessingMetrics()

    def preprocess_image(self, image: Image.Image) -> Image.Image:
        """Preprocess image to improve OCR accuracy"""
        if image.mode != 'L':
            image = image.convert('L')

        image = ImageEnhance.Contrast(image).enhance(2.0)
        image = image.filter(ImageFilter.SHARPEN)

        # Remove noise with bilateral filter
        img_array = np.array(image)
        img_array = cv2.bilateralFilter(img_array, 9, 75, 75)
        return Image.fromarray(img_array)

    def split_image_into_regions(self, image: Image.Image) -> List[Tuple[int, Image.Image]]:
        """Split image into horizontal bands, each overlapping the next"""
        width, height = image.size
        region_height = height // self.num_workers
        regions = []

        for i in range(self.num_workers):
            y_start = i * region_height
            if i == self.num_workers - 1:
                y_end = height
            else:
                y_end = (i + 1) * region_height + config.IMAGE_REGION_OVERLAP_PX

            region = image.crop((0, y_start, width, min(y_end, height)))
            regions.append((i, region))

        return regions

    def process_region(self, region_data: Tuple[int, Image.Image]) -> str:
        """Process a single region with OCR"""
        region_id, region_image = region_data
        logger.debug("Worker %d: processing region", region_id + 1)

        try:
            return pytesseract.image_to_string(
                region_image,
                lang=self.language,
                config=f'--psm {self.psm}'
            )
        except pytesseract.TesseractError as e:
            logger.warning("Worker %d: Tesseract failed - %s", region_id + 1, e)
            return ""

    @staticmethod
    def merge_region_texts(texts: List[str]) -> str:
        """Join region texts in order, dropping lines repeated by the overlap"""
        merged: List[str] = []
        for text in texts:
            lines = [line for line in text.splitlines() if line.strip()]
            if merged and lines and lines[0].strip() == merged[-1].strip():
                lines = lines[1:]
            merged.extend(lines)
        return '\n'.join(merged)

    def process_image_parallel(self, image_path: str) -> str:
        """Process image with parallel OCR workers"""
        if not validate_image_path(image_path):
            raise OCRError("Please upload a JPG or PNG under 10MB")

        start_time = time.time()
        logger.info("Starting parallel OCR with %d workers", self.num_workers)

        with Image.open(image_path) as image:
            processed_image = self.preprocess_image(ImageOps.exif_transpose(image))

        regions = self.split_image_into_regions(processed_image)
        self.metrics.regions_processed = len(regions)

        results = []
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            future_to_region = {
                executor.submit(self.process_region, region): region[0]
                for region in regions
            }

            for future in as_completed(future_to_region):
                results.append((future_to_region[future], future.result()))

        results.sort(key=lambda x: x[0])
        combined_text = self.merge_region_texts([text for _, text in results])

        self.metrics.workers_used = self.num_workers
        self.metrics.processing_time = time.time() - start_time

        logger.info("OCR complete in %.2fs", self.metrics.processing_time)
        return combined_text
