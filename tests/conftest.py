from unittest.mock import AsyncMock, MagicMock

import pytest

from articledb.models.schemas import NER
from articledb.services.document_store import InMemoryArticleStore
from articledb.services.orchestrator import ArticleAdder


@pytest.fixture
def store() -> InMemoryArticleStore:
    return InMemoryArticleStore()


@pytest.fixture
def extractor() -> MagicMock:
    """Summarizer and NER provider returning canned results."""
    mock = MagicMock()
    mock.summarize = AsyncMock(return_value="Summary of text.")
    mock.ner = AsyncMock(return_value=NER())
    return mock


@pytest.fixture
def adder(extractor, store) -> ArticleAdder:
    return ArticleAdder(summarizer=extractor, ner=extractor, db=store)
