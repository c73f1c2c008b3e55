"""
Pytest configuration and global fixtures.
"""
import json
import sys
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace

import fitz
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from data.db_models import Base


def make_pdf(num_pages: int, prefix: str = "Page", size=(612, 792)) -> bytes:
    """Build a PDF whose page i carries the text '{prefix} {i}'."""
    doc = fitz.open()
    for i in range(1, num_pages + 1):
        page = doc.new_page(width=size[0], height=size[1])
        page.insert_text((72, 72), f"{prefix} {i}", fontsize=12)
    content = doc.tobytes()
    doc.close()
    return content


def page_labels(pdf_bytes: bytes):
    """First line of text on every page, in order."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [page.get_text().strip().splitlines()[0] if page.get_text().strip() else "" for page in doc]
    finally:
        doc.close()


def make_image(fmt: str = 'PNG', size=(200, 100), color='blue', mode='RGB') -> bytes:
    from PIL import Image

    img = Image.new(mode, size, color=color)
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class FakeCompletions:
    """Stands in for client.chat.completions."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason='stop')])


class FakeAIClient:
    """Minimal AsyncOpenAI replacement exposing chat.completions.create."""

    def __init__(self, content=None, error=None):
        self.chat = SimpleNamespace(completions=FakeCompletions(content, error))

    @property
    def calls(self):
        return self.chat.completions.calls


@pytest.fixture
def test_db_engine():
    """Create in-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def test_db_session(test_db_engine):
    """Create fresh database session for each test."""
    Session = sessionmaker(bind=test_db_engine)
    session = Session()

    yield session

    # Rollback any uncommitted changes and close
    session.rollback()
    session.close()


@pytest.fixture
def sample_pdf():
    """Three-page PDF labelled 'Page 1'..'Page 3'."""
    return make_pdf(3)


@pytest.fixture
def single_page_pdf():
    return make_pdf(1)


@pytest.fixture
def sample_png():
    return make_image('PNG')


@pytest.fixture
def sample_jpeg():
    return make_image('JPEG', size=(100, 300), color='red')


@pytest.fixture
def blocks_json():
    """A well-formed model answer with two text blocks."""
    return json.dumps([
        {"text": "Hello", "boundingBox": {"x": 108, "y": 90, "width": 150, "height": 30}},
        {"text": "World", "boundingBox": {"x": 108, "y": 150, "width": 150, "height": 30}}
    ])


@pytest.fixture
def fake_ai_client(blocks_json):
    return FakeAIClient(content=blocks_json)


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def labels_of():
    return page_labels


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def ai_client_factory():
    return FakeAIClient
