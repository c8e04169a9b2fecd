"""
Feature extraction for new articles.

ArticleAdder fans the article body out to the configured analysis
capabilities, waits for all of them and commits the enriched article to the
store only when every capability succeeded.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, Protocol

from articledb.core.errors import InvalidIdentifierError, UpstreamFailure
from articledb.core.ids import valid_id
from articledb.models.schemas import NER, Article, Vector
from articledb.services.document_store import ArticleDB

logger = logging.getLogger(__name__)

SUMMARIZER = "summarizer"
NER_BRANCH = "ner"
ENCODER = "encoder"
KEYWORDS = "keywords"


class Summarizer(Protocol):
    async def summarize(self, text: str) -> str:
        ...


class NamedEntityRecognizer(Protocol):
    async def ner(self, text: str) -> NER:
        ...


class Encoder(Protocol):
    async def encode(self, texts: List[str]) -> List[Vector]:
        ...


class KeywordExtractor(Protocol):
    async def extract_keywords(self, text: str) -> List[str]:
        ...


def _discard_late_result(task: asyncio.Task) -> None:
    # Retrieve the outcome of branches nobody waits for anymore
    if not task.cancelled():
        task.exception()


class ArticleAdder:
    """Enriches articles with extracted features and adds them to the store."""

    def __init__(
        self,
        summarizer: Summarizer,
        ner: NamedEntityRecognizer,
        db: ArticleDB,
        encoder: Optional[Encoder] = None,
        keyword_extractor: Optional[KeywordExtractor] = None,
    ):
        if summarizer is None:
            raise ValueError("summarizer is None")
        if ner is None:
            raise ValueError("named entity recognizer is None")
        if db is None:
            raise ValueError("db is None")

        self.summarizer = summarizer
        self.ner = ner
        self.db = db
        self.encoder = encoder
        self.keyword_extractor = keyword_extractor

    async def add(self, article: Article) -> str:
        """
        Extract features for the article and add it to the store.

        The caller's article is not modified. A non-empty id must be well
        formed; it is replaced by the id the store assigns.

        Returns:
            The id assigned by the store

        Raises:
            InvalidIdentifierError: article.id is set but malformed
            UpstreamFailure: one of the capabilities failed, nothing was stored
            StoreFailure: the store failed to persist the article
        """
        logger.info(f"Add article {article.id or '<new>'}")

        if article.id and not valid_id(article.id):
            raise InvalidIdentifierError(article.id)

        enriched = await self._add_features(article)

        article_id = await asyncio.to_thread(self.db.add, enriched)
        logger.info(f"Article committed as {article_id}")
        return article_id

    async def get(self, article_id: str) -> Article:
        """Return the stored article. Errors of the store propagate unchanged."""
        logger.info(f"Get article {article_id}")
        return await asyncio.to_thread(self.db.get, article_id)

    def _branches(self, body: str) -> Dict[str, Awaitable[Any]]:
        branches: Dict[str, Awaitable[Any]] = {
            SUMMARIZER: self.summarizer.summarize(body),
            NER_BRANCH: self.ner.ner(body),
        }
        if self.encoder is not None:
            branches[ENCODER] = self.encoder.encode([body])
        if self.keyword_extractor is not None:
            branches[KEYWORDS] = self.keyword_extractor.extract_keywords(body)
        return branches

    async def _add_features(self, article: Article) -> Article:
        """
        Run every capability concurrently and merge the results into a copy
        of the article. The first failure cancels the remaining branches.
        """
        work = article.model_copy(deep=True)

        logger.debug(f"Start extracting features for {article.id or '<new>'}")
        tasks: Dict[asyncio.Task, str] = {
            asyncio.ensure_future(coro): branch for branch, coro in self._branches(work.body).items()
        }

        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
                    task.add_done_callback(_discard_late_result)

        logger.debug(f"Feature extraction finished: {len(done)} done, {len(pending)} cancelled")

        # Every finished branch is inspected so no failure goes unretrieved
        results: Dict[str, Any] = {}
        failure: Optional[UpstreamFailure] = None
        for task in done:
            branch = tasks[task]
            if task.cancelled():
                exc: Optional[BaseException] = asyncio.CancelledError(f"{branch} was cancelled")
            else:
                exc = task.exception()

            if exc is None:
                results[branch] = task.result()
            elif failure is None:
                failure = UpstreamFailure(branch, exc)
            else:
                logger.debug(f"Discarding additional failure in {branch}: {exc}")

        if failure is not None:
            logger.warning(f"⚠️ Feature extraction failed in {failure.branch}: {failure.cause}")
            raise failure from failure.cause

        work.summary = results[SUMMARIZER]
        work.ner = results[NER_BRANCH]
        if KEYWORDS in results:
            work.keywords = results[KEYWORDS]
        if ENCODER in results:
            vectors: List[Vector] = results[ENCODER]
            # Embeddings are computed but not stored with the article
            logger.debug(f"Discarding {len(vectors)} vectors of dim {vectors[0].dim if vectors else 0}")

        return work
