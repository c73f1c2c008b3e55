"""
Unit tests for services.render_service module.
"""
import pytest

from core.exceptions import InvalidInputError, InvalidPageError
from services.render_service import (
    fit_to_width_scale,
    page_sizes,
    render_page,
    render_thumbnail
)
from utils.image_utils import get_image_dimensions


class TestRenderPage:
    """Tests for render_page."""

    @pytest.mark.parametrize("scale,expected", [
        (1.0, (612, 792)),
        (1.5, (918, 1188)),
        (0.5, (306, 396)),
    ])
    def test_dimensions_follow_scale(self, sample_pdf, scale, expected):
        rendered = render_page(sample_pdf, 1, scale=scale)

        assert (rendered.width, rendered.height) == expected
        assert rendered.mime_type == 'image/png'
        assert rendered.scale == scale
        assert get_image_dimensions(rendered.data) == expected

    def test_jpeg(self, sample_pdf):
        rendered = render_page(sample_pdf, 3, scale=1.0, image_format='jpeg', quality=80)

        assert rendered.mime_type == 'image/jpeg'
        assert rendered.page_number == 3

    @pytest.mark.parametrize("page", [0, 4])
    def test_page_out_of_range(self, sample_pdf, page):
        with pytest.raises(InvalidPageError):
            render_page(sample_pdf, page)

    def test_bad_scale(self, sample_pdf):
        with pytest.raises(InvalidInputError):
            render_page(sample_pdf, 1, scale=0)

    def test_bad_format(self, sample_pdf):
        with pytest.raises(InvalidInputError):
            render_page(sample_pdf, 1, image_format='gif')


def test_thumbnail_uses_small_scale(sample_pdf):
    rendered = render_thumbnail(sample_pdf, 2)

    assert rendered.scale == 0.2
    assert 122 <= rendered.width <= 123


def test_page_sizes(pdf_factory):
    pdf = pdf_factory(2, size=(300, 400))

    assert page_sizes(pdf) == [(300, 400), (300, 400)]


class TestFitToWidth:

    def test_scale(self):
        assert fit_to_width_scale(612, 918) == 1.5

    @pytest.mark.parametrize("page_width,container", [(0, 100), (100, 0), (-1, 10)])
    def test_invalid(self, page_width, container):
        with pytest.raises(InvalidInputError):
            fit_to_width_scale(page_width, container)
