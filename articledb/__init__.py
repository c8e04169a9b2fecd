"""
articledb

This package enriches news articles with extracted features and stores them.

Main components:
- orchestrator: concurrent feature extraction and commit (ArticleAdder)
- document_store: in-memory and Redis article stores
- enrichment: LLM summaries and named entities, local keywords
- embeddings: text embeddings
- schemas: Pydantic models for articles and API payloads
- config: Configuration management
"""

__version__ = "1.0.0"

from .core.errors import (
    ArticleDBError,
    InvalidIdentifierError,
    NotFoundError,
    StoreFailure,
    UpstreamFailure,
)
from .core.ids import unique_id, valid_id
from .models.schemas import NER, Article, Vector
from .services.document_store import InMemoryArticleStore, RedisArticleStore
from .services.orchestrator import ArticleAdder

__all__ = [
    "Article",
    "NER",
    "Vector",
    "ArticleAdder",
    "InMemoryArticleStore",
    "RedisArticleStore",
    "unique_id",
    "valid_id",
    "ArticleDBError",
    "InvalidIdentifierError",
    "NotFoundError",
    "StoreFailure",
    "UpstreamFailure",
]
