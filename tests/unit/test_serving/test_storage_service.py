"""
Unit tests for serving.storage_service module.
"""
import pytest

from core.exceptions import DocumentNotFound, InvalidInputError, InvalidPageError
from core.models import BoundingBox, PageExtraction, TextBlock
from serving.storage_service import DocumentStorageService


@pytest.fixture
def storage(test_db_session):
    return DocumentStorageService(test_db_session)


@pytest.fixture
def document(storage, sample_pdf):
    return storage.create_document("sample.pdf", sample_pdf, 3)


def _extraction(page_number, texts, scale=1.5):
    return PageExtraction(
        page_number=page_number,
        render_scale=scale,
        image_width=918,
        image_height=1188,
        blocks=[TextBlock(text, BoundingBox(10, 10 + 40 * i, 100, 30)) for i, text in enumerate(texts)]
    )


class TestDocuments:
    """Tests for document CRUD."""

    def test_create_defaults(self, document):
        assert document.id
        assert document.current_page == 1
        assert document.active_tool == 'view'
        assert document.total_pages == 3

    def test_require_missing(self, storage):
        with pytest.raises(DocumentNotFound):
            storage.require_document("missing")

    def test_list_and_delete(self, storage, document, single_page_pdf):
        other = storage.create_document("other.pdf", single_page_pdf, 1)

        ids = {d.id for d in storage.list_documents()}
        assert ids == {document.id, other.id}

        assert storage.delete_document(document.id) is True
        assert storage.delete_document(document.id) is False
        assert storage.get_document(document.id) is None


class TestViewerState:
    """Tests for current page and tool."""

    def test_set_current_page(self, storage, document):
        storage.set_current_page(document, 3)

        assert storage.get_document(document.id).current_page == 3

    @pytest.mark.parametrize("page", [0, 4])
    def test_current_page_out_of_range(self, storage, document, page):
        with pytest.raises(InvalidPageError):
            storage.set_current_page(document, page)

    def test_tool(self, storage, document):
        storage.set_active_tool(document, 'draw')
        assert document.active_tool == 'draw'

        with pytest.raises(InvalidInputError):
            storage.set_active_tool(document, 'erase')

    def test_replace_content_clamps_page(self, storage, document, single_page_pdf):
        storage.set_current_page(document, 3)

        storage.replace_content(document, single_page_pdf, 1)

        assert document.total_pages == 1
        assert document.current_page == 1
        assert document.content == single_page_pdf


class TestTextBlocks:
    """Tests for stored extraction results."""

    def test_save_and_get(self, storage, document):
        storage.save_text_blocks(document, _extraction(1, ["a", "b"]))

        records = storage.get_text_blocks(document.id, 1)
        assert [r.text_content for r in records] == ["a", "b"]
        assert [r.sequence_order for r in records] == [0, 1]
        assert records[0].render_scale == 1.5
        assert storage.to_text_block(records[1]).bounding_box == BoundingBox(10, 50, 100, 30)

    def test_new_extraction_replaces_page(self, storage, document):
        storage.save_text_blocks(document, _extraction(1, ["a", "b"]))
        storage.save_text_blocks(document, _extraction(2, ["other"]))

        storage.save_text_blocks(document, _extraction(1, ["c"], scale=2.0))

        assert [r.text_content for r in storage.get_text_blocks(document.id, 1)] == ["c"]
        assert [r.text_content for r in storage.get_text_blocks(document.id, 2)] == ["other"]

    def test_replace_content_drops_blocks(self, storage, document, sample_pdf):
        storage.save_text_blocks(document, _extraction(1, ["a"]))

        storage.replace_content(document, sample_pdf, 3)

        assert storage.get_text_blocks(document.id, 1) == []
