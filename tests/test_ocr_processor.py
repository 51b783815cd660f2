#!/usr/bin/env python3
"""
Unit tests for OCR providers (no network, no Tesseract binary needed)
"""
from unittest.mock import Mock

import pytest
import requests
from PIL import Image

import config
from exceptions import OCRError
from ocr_processor import (
    OCRSpaceClient,
    OCRSpaceConfig,
    ParallelOCRProcessor,
    extract_parsed_text,
    prepare_image,
)


def ocr_payload(text="2 Chicken Rice $10.00\r\nWATER $2.00"):
    return {
        'ParsedResults': [{'ParsedText': text, 'FileParseExitCode': 1}],
        'IsErroredOnProcessing': False,
        'ErrorMessage': '',
    }


class TestExtractParsedText:
    """Test reading text out of an OCR.space response"""

    def test_first_result_text(self):
        assert extract_parsed_text(ocr_payload()) == "2 Chicken Rice $10.00\r\nWATER $2.00"

    def test_processing_error(self):
        payload = {'IsErroredOnProcessing': True, 'ErrorMessage': ['File failed validation', 'Too large']}
        with pytest.raises(OCRError, match='Too large'):
            extract_parsed_text(payload)

    def test_no_results(self):
        with pytest.raises(OCRError, match='No text'):
            extract_parsed_text({'ParsedResults': [], 'IsErroredOnProcessing': False})


class TestOCRSpaceClient:
    """Test the HTTP client with a mocked session"""

    def test_posts_form_and_returns_text(self):
        session = Mock()
        session.post.return_value.json.return_value = ocr_payload("Laksa $8.50")
        client = OCRSpaceClient(OCRSpaceConfig(api_key='test-key'), session=session)

        assert client.recognize_bytes(b'jpeg-bytes') == "Laksa $8.50"

        _, kwargs = session.post.call_args
        assert kwargs['data']['apikey'] == 'test-key'
        assert kwargs['data']['OCREngine'] == '2'
        assert kwargs['data']['isTable'] == 'true'
        assert kwargs['files']['file'][1] == b'jpeg-bytes'

    def test_network_failure_becomes_ocr_error(self):
        session = Mock()
        session.post.side_effect = requests.exceptions.ConnectionError("boom")
        client = OCRSpaceClient(OCRSpaceConfig(api_key='test-key'), session=session)

        with pytest.raises(OCRError):
            client.recognize_bytes(b'jpeg-bytes')

    def test_session_created_lazily(self):
        client = OCRSpaceClient(OCRSpaceConfig(api_key='test-key'))
        assert client._session is None
        assert isinstance(client.session, requests.Session)
        assert client.session is client.session

    def test_config_from_env_requires_key(self, monkeypatch):
        monkeypatch.setattr(config, 'OCR_SPACE_API_KEY', '')
        with pytest.raises(OCRError):
            OCRSpaceConfig.from_env()

        monkeypatch.setattr(config, 'OCR_SPACE_API_KEY', 'abc')
        assert OCRSpaceConfig.from_env().api_key == 'abc'


class TestImagePreparation:
    """Test validation and re-encoding of uploads"""

    def test_png_is_reencoded_as_jpeg(self, tmp_path):
        path = tmp_path / 'receipt.png'
        Image.new('RGBA', (3000, 1000), (255, 255, 255, 255)).save(path)

        data = prepare_image(str(path), max_dimension=1500)

        assert data[:2] == b'\xff\xd8'

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / 'receipt.gif'
        Image.new('RGB', (10, 10)).save(path)
        with pytest.raises(OCRError):
            prepare_image(str(path))


class TestParallelOCRProcessor:
    """Test region handling of the Tesseract processor"""

    def test_regions_overlap_and_cover_image(self):
        processor = ParallelOCRProcessor(num_workers=4)
        regions = processor.split_image_into_regions(Image.new('L', (100, 400)))

        assert [region_id for region_id, _ in regions] == [0, 1, 2, 3]
        assert regions[0][1].size == (100, 100 + config.IMAGE_REGION_OVERLAP_PX)
        assert regions[-1][1].size == (100, 100)

    def test_workers_are_clamped(self):
        assert ParallelOCRProcessor(num_workers=64).num_workers == config.WORKERS_MAX

    def test_merge_drops_overlap_duplicates(self):
        merged = ParallelOCRProcessor.merge_region_texts(["Laksa $8.50\nCoke $2.50\n", "Coke $2.50\nOtah $3.00"])
        assert merged == "Laksa $8.50\nCoke $2.50\nOtah $3.00"
