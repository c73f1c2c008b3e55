"""
Unit tests for utils.image_utils module.
"""
from io import BytesIO

import pytest
from PIL import Image

from utils.image_utils import (
    decode_data_url,
    get_image_dimensions,
    image_to_data_url,
    prepare_image_for_embedding,
    render_pdf_page,
    sniff_image_mime_type
)


class TestRenderPdfPage:
    """Tests for render_pdf_page."""

    def test_pixel_size_is_page_size_times_scale(self, sample_pdf):
        data, width, height = render_pdf_page(sample_pdf, 1, 1.5)

        assert (width, height) == (918, 1188)
        assert get_image_dimensions(data) == (918, 1188)

    def test_jpeg_output(self, sample_pdf):
        data, _, _ = render_pdf_page(sample_pdf, 2, 0.5, image_format='jpeg')

        assert sniff_image_mime_type(data) == 'image/jpeg'


class TestDataUrls:
    """Tests for data URL helpers."""

    def test_encode_decode(self, sample_png):
        url = image_to_data_url(sample_png, 'image/png')

        assert url.startswith('data:image/png;base64,')
        assert decode_data_url(url) == ('image/png', sample_png)

    def test_not_a_data_url(self):
        with pytest.raises(ValueError):
            decode_data_url("https://example.com/a.png")

    def test_bad_base64(self):
        with pytest.raises(ValueError):
            decode_data_url("data:image/png;base64,***")


class TestPrepareImage:
    """Tests for prepare_image_for_embedding."""

    def test_plain_image_untouched(self, sample_png):
        data, width, height = prepare_image_for_embedding(sample_png, 'image/png')

        assert data == sample_png
        assert (width, height) == (200, 100)

    def test_exif_rotation_applied(self):
        img = Image.new('RGB', (40, 20), color='green')
        exif = img.getexif()
        exif[0x0112] = 6  # rotate 90 CW on display
        buf = BytesIO()
        img.save(buf, format='JPEG', exif=exif.tobytes())

        data, width, height = prepare_image_for_embedding(buf.getvalue(), 'image/jpeg')

        assert (width, height) == (20, 40)
        assert get_image_dimensions(data) == (20, 40)


def test_sniff_unknown():
    assert sniff_image_mime_type(b"GIF89a") == ''
