"""
Article stores.

Two implementations of the ArticleDB protocol:

- InMemoryArticleStore keeps articles in a dict guarded by a
  multiple-readers/single-writer lock.
- RedisArticleStore keeps articles as JSON documents in Redis.

Both assign a fresh identifier on every add and hand out copies, so a stored
article is never mutated after commit.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Protocol, runtime_checkable

import redis
from pydantic import ValidationError

from articledb.core.errors import InvalidIdentifierError, NotFoundError, StoreFailure
from articledb.core.ids import unique_id, valid_id
from articledb.models.schemas import Article

logger = logging.getLogger(__name__)


@runtime_checkable
class ArticleDB(Protocol):
    """Keyed article store the orchestrator commits into."""

    def add(self, article: Article) -> str:
        ...

    def get(self, article_id: str) -> Article:
        ...


class ReadWriteLock:
    """
    Multiple readers or a single writer.

    Writers wait for active readers to drain and block new readers while
    waiting, so a steady stream of reads cannot starve an add.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class InMemoryArticleStore:
    """In-memory implementation of the ArticleDB protocol."""

    def __init__(self):
        self._items: Dict[str, Article] = {}
        self._lock = ReadWriteLock()

    def add(self, article: Article) -> str:
        """
        Store a copy of the article under a freshly generated identifier.

        The identifier overrides whatever the article's id field held before.

        Returns:
            The assigned identifier
        """
        item = article.model_copy(deep=True)
        article_id = unique_id()
        item.id = article_id

        with self._lock.write_locked():
            self._items[article_id] = item

        logger.info(f"📄 Stored article {article_id} ({len(item.body)} chars)")
        return article_id

    def get(self, article_id: str) -> Article:
        """
        Return a copy of the article stored under article_id.

        Raises:
            InvalidIdentifierError: article_id is malformed
            NotFoundError: no article is stored under article_id
        """
        if not valid_id(article_id):
            raise InvalidIdentifierError(article_id)

        with self._lock.read_locked():
            item = self._items.get(article_id)

        if item is None:
            raise NotFoundError(article_id)

        return item.model_copy(deep=True)

    def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._items)


class RedisArticleStore:
    """Redis-backed implementation of the ArticleDB protocol."""

    def __init__(self, client: redis.Redis, key_prefix: str = "article"):
        self._client = client
        self._key_prefix = key_prefix

    def _key(self, article_id: str) -> str:
        return f"{self._key_prefix}:{article_id}"

    def add(self, article: Article) -> str:
        """
        Store the article as JSON under a freshly generated identifier.

        Raises:
            StoreFailure: Redis could not be reached or rejected the write
        """
        article_id = unique_id()
        document = article.model_copy(update={"id": article_id}, deep=True)

        try:
            self._client.set(self._key(article_id), document.model_dump_json())
        except redis.RedisError as e:
            logger.error(f"ERROR: Failed to store article {article_id}: {e}")
            raise StoreFailure("add", e) from e

        logger.info(f"📄 Stored article document: {self._key(article_id)} ({len(document.body)} chars)")
        return article_id

    def get(self, article_id: str) -> Article:
        """
        Load the article stored under article_id.

        Raises:
            InvalidIdentifierError: article_id is malformed
            NotFoundError: no article is stored under article_id
            StoreFailure: Redis failed or the stored document is corrupt
        """
        if not valid_id(article_id):
            raise InvalidIdentifierError(article_id)

        try:
            raw: Optional[str] = self._client.get(self._key(article_id))
        except redis.RedisError as e:
            logger.error(f"ERROR: Failed to load article {article_id}: {e}")
            raise StoreFailure("get", e) from e

        if raw is None:
            raise NotFoundError(article_id)

        try:
            return Article.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"ERROR: Stored article {article_id} failed validation: {e}")
            raise StoreFailure("get", e) from e

    def health_check(self) -> bool:
        """
        Check if Redis is reachable.

        Returns:
            True if healthy, False otherwise
        """
        try:
            self._client.ping()
            logger.debug("Article store health check: OK")
            return True
        except redis.RedisError as e:
            logger.error(f"ERROR: Article store health check failed: {e}")
            return False
