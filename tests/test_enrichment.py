"""Tests for articledb.services.enrichment."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from articledb.core.config import Settings
from articledb.core.errors import EmptyTextError, InvalidResponseError, InvalidResultError
from articledb.models.schemas import NER
from articledb.services.enrichment import (LLMExtractor, NoopExtractor,
                                           YakeKeywordExtractor, parse_ner)


def _llm(content: str) -> MagicMock:
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=SimpleNamespace(content=content))
    return llm


def _extractor(summary: str = "A summary.", ner: str = "{}", max_chars: int = 20000) -> LLMExtractor:
    config = Settings(langfuse_public_key="", llm_max_input_chars=max_chars)
    return LLMExtractor(config, summary_llm=_llm(summary), ner_llm=_llm(ner))


class TestParseNer:
    def test_parses_all_types(self) -> None:
        content = '{"persons": ["Olaf Scholz"], "locations": ["Berlin", "Paris"], "organizations": ["EU"]}'
        assert parse_ner(content) == NER(pers=["Olaf Scholz"], locs=["Berlin", "Paris"], orgs=["EU"])

    def test_strips_code_fences(self) -> None:
        content = '```json\n{"persons": ["Ada"]}\n```'
        assert parse_ner(content).pers == ["Ada"]

    def test_missing_fields_are_empty(self) -> None:
        assert parse_ner('{"persons": ["Ada"]}') == NER(pers=["Ada"])

    def test_null_fields_are_empty(self) -> None:
        assert parse_ner('{"persons": null, "locations": [], "organizations": []}') == NER()

    def test_invalid_json(self) -> None:
        with pytest.raises(InvalidResponseError):
            parse_ner("Persons: Ada")

    def test_not_an_object(self) -> None:
        with pytest.raises(InvalidResponseError):
            parse_ner('["Ada"]')

    def test_entities_not_a_list(self) -> None:
        with pytest.raises(InvalidResponseError):
            parse_ner('{"persons": "Ada"}')


class TestNoopExtractor:
    async def test_summarize_is_empty(self) -> None:
        assert await NoopExtractor().summarize("text") == ""

    async def test_ner_is_empty(self) -> None:
        assert await NoopExtractor().ner("text") == NER()


class TestLLMExtractorSummarize:
    async def test_returns_stripped_summary(self) -> None:
        extractor = _extractor(summary="  A summary.\n")
        assert await extractor.summarize("Some article text.") == "A summary."

    async def test_prompt_contains_text(self) -> None:
        extractor = _extractor()
        await extractor.summarize("Some article text.")

        prompt = extractor.summary_llm.ainvoke.await_args.args[0]
        assert "Some article text." in prompt

    async def test_truncates_long_text(self) -> None:
        extractor = _extractor(max_chars=10)
        await extractor.summarize("0123456789ABCDEF")

        prompt = extractor.summary_llm.ainvoke.await_args.args[0]
        assert "0123456789" in prompt
        assert "ABCDEF" not in prompt

    async def test_empty_text(self) -> None:
        extractor = _extractor()
        with pytest.raises(EmptyTextError):
            await extractor.summarize("")
        extractor.summary_llm.ainvoke.assert_not_called()

    async def test_empty_completion(self) -> None:
        extractor = _extractor(summary="   ")
        with pytest.raises(InvalidResultError):
            await extractor.summarize("Some article text.")

    async def test_non_text_completion(self) -> None:
        extractor = _extractor()
        extractor.summary_llm.ainvoke.return_value = SimpleNamespace(content=[{"type": "image"}])
        with pytest.raises(InvalidResponseError):
            await extractor.summarize("Some article text.")

    async def test_provider_error_propagates(self) -> None:
        extractor = _extractor()
        extractor.summary_llm.ainvoke.side_effect = ConnectionError("unreachable")
        with pytest.raises(ConnectionError):
            await extractor.summarize("Some article text.")


class TestLLMExtractorNer:
    async def test_returns_entities(self) -> None:
        extractor = _extractor(ner='{"persons": ["Ada"], "locations": ["London"], "organizations": []}')
        assert await extractor.ner("Ada lived in London.") == NER(pers=["Ada"], locs=["London"])

    async def test_uses_ner_client(self) -> None:
        extractor = _extractor()
        await extractor.ner("Ada lived in London.")
        extractor.ner_llm.ainvoke.assert_awaited_once()
        extractor.summary_llm.ainvoke.assert_not_called()

    async def test_empty_text(self) -> None:
        extractor = _extractor()
        with pytest.raises(EmptyTextError):
            await extractor.ner("   ")

    async def test_malformed_response(self) -> None:
        extractor = _extractor(ner="not json")
        with pytest.raises(InvalidResponseError):
            await extractor.ner("Ada lived in London.")


class TestYakeKeywordExtractor:
    @patch("articledb.services.enrichment.yake")
    async def test_filters_short_keywords(self, mock_yake) -> None:
        mock_yake.KeywordExtractor.return_value.extract_keywords.return_value = [
            ("climate policy", 0.01),
            ("eu", 0.02),
            ("emissions", 0.03),
        ]
        extractor = YakeKeywordExtractor(top=5)

        assert await extractor.extract_keywords("Some text about climate policy.") == ["climate policy", "emissions"]
        mock_yake.KeywordExtractor.assert_called_once_with(n=2, dedupLim=0.2, top=5, features=None)

    @patch("articledb.services.enrichment.yake")
    async def test_empty_text(self, mock_yake) -> None:
        extractor = YakeKeywordExtractor()
        assert await extractor.extract_keywords("") == []
        mock_yake.KeywordExtractor.return_value.extract_keywords.assert_not_called()
