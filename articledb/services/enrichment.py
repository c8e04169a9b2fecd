"""Analysis providers: LLM summaries and named entities, local keywords."""
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import yake
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import AzureChatOpenAI, ChatOpenAI
from pydantic import ValidationError

from articledb.core.config import Settings, settings
from articledb.core.errors import EmptyTextError, InvalidResponseError, InvalidResultError
from articledb.models.schemas import NER

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """Summarize this article in 2-3 sentences. Focus on the main points and key takeaways.

Article: {text}"""

NER_PROMPT = """List the named entities with entity type person, type location and type organisation in the text.
Return a JSON object with these exact fields:
- persons: array of person names
- locations: array of location names
- organizations: array of organisation names

Text: {text}"""


def _create_llm_client(config: Settings, for_summary: bool = False) -> BaseChatModel:
    """Create an LLM client based on configuration. Retries are disabled."""
    if for_summary:
        model_kwargs: Dict[str, Any] = {}
        temperature, max_tokens = 0.2, config.summary_max_tokens
    else:
        model_kwargs = {"response_format": {"type": "json_object"}}
        temperature, max_tokens = 0.0, config.ner_max_tokens

    if config.azure_openai_enabled and config.azure_openai_chat_deployment:
        return AzureChatOpenAI(
            azure_endpoint=config.azure_openai_endpoint,
            api_key=config.azure_openai_api_key,
            api_version=config.azure_openai_api_version,
            azure_deployment=config.azure_openai_chat_deployment,
            temperature=temperature,
            max_tokens=max_tokens,
            max_retries=0,
            model_kwargs=model_kwargs,
        )
    return ChatOpenAI(
        model=config.openai_llm_model,
        api_key=config.openai_api_key,
        temperature=temperature,
        max_tokens=max_tokens,
        max_retries=0,
        model_kwargs=model_kwargs,
    )


def _create_langfuse_handler(config: Settings):
    """Return a Langfuse callback handler, or None when tracing is not configured."""
    if not config.langfuse_public_key:
        return None

    from langfuse import Langfuse
    from langfuse.langchain import CallbackHandler

    Langfuse(
        public_key=config.langfuse_public_key,
        secret_key=config.langfuse_secret_key.get_secret_value(),
        host=config.langfuse_host,
    )
    return CallbackHandler()


def _strip_code_fences(content: str) -> str:
    cleaned = content.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()
    return cleaned


def parse_ner(content: str) -> NER:
    """
    Parse the JSON object returned by the NER prompt.

    Missing entity fields are treated as empty lists.

    Raises:
        InvalidResponseError: content is not a JSON object of string lists
    """
    try:
        data = json.loads(_strip_code_fences(content))
    except json.JSONDecodeError as e:
        raise InvalidResponseError(f"ner response is not json: {e}") from e

    if not isinstance(data, dict):
        raise InvalidResponseError("ner response is not a json object")

    try:
        return NER(
            pers=data.get("persons") or [],
            locs=data.get("locations") or [],
            orgs=data.get("organizations") or [],
        )
    except ValidationError as e:
        raise InvalidResponseError(f"ner response has invalid entities: {e}") from e


class NoopExtractor:
    """Summarizer and named entity recognizer that never calls out."""

    async def summarize(self, text: str) -> str:
        return ""

    async def ner(self, text: str) -> NER:
        return NER()


class LLMExtractor:
    """
    Summarizer and named entity recognizer backed by OpenAI or Azure OpenAI.

    There is no retrying or throttling. To time out a request, put a
    deadline around the awaiting caller.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        summary_llm: Optional[BaseChatModel] = None,
        ner_llm: Optional[BaseChatModel] = None,
        callback_handler: Optional[Any] = None,
    ):
        self.config = config or settings
        self.summary_llm = summary_llm or _create_llm_client(self.config, for_summary=True)
        self.ner_llm = ner_llm or _create_llm_client(self.config, for_summary=False)
        if callback_handler is None:
            callback_handler = _create_langfuse_handler(self.config)
        self.callbacks = [callback_handler] if callback_handler else []

    def _truncate(self, text: str) -> str:
        max_chars = self.config.llm_max_input_chars
        if len(text) > max_chars:
            logger.info(f"📄 Article truncated from {len(text)} to {max_chars} chars")
        return text[:max_chars]

    async def _complete(self, llm: BaseChatModel, prompt: str) -> str:
        response = await llm.ainvoke(prompt, config={"callbacks": self.callbacks})
        content = getattr(response, "content", "")
        if not isinstance(content, str):
            raise InvalidResponseError(f"unexpected completion content of type {type(content).__name__}")

        result = content.strip()
        if not result:
            raise InvalidResultError("empty completion")
        return result

    async def summarize(self, text: str) -> str:
        """Summarize the given text."""
        logger.info(f"Summarize text with LLM ({len(text)} chars)")
        if not text or text.isspace():
            raise EmptyTextError("could not summarize, text is empty")

        summary = await self._complete(self.summary_llm, SUMMARY_PROMPT.format(text=self._truncate(text)))
        logger.info("Summary generated successfully")
        return summary

    async def ner(self, text: str) -> NER:
        """
        Perform named entity recognition on the given text.
        The returned entity types are person, location and organisation.
        """
        logger.info(f"Perform named entity recognition with LLM ({len(text)} chars)")
        if not text or text.isspace():
            raise EmptyTextError("could not perform ner, text is empty")

        content = await self._complete(self.ner_llm, NER_PROMPT.format(text=self._truncate(text)))
        entities = parse_ner(content)
        logger.info(
            f"NER completed: {len(entities.pers)} persons, "
            f"{len(entities.locs)} locations, {len(entities.orgs)} organisations"
        )
        return entities


class YakeKeywordExtractor:
    """Local keyword extraction with YAKE, run off the event loop."""

    def __init__(self, top: int = 15):
        self.extractor = yake.KeywordExtractor(n=2, dedupLim=0.2, top=top, features=None)

    def _extract(self, text: str) -> List[str]:
        keywords_tuples = self.extractor.extract_keywords(text)
        return [kw for kw, score in keywords_tuples if len(kw) > 2]

    async def extract_keywords(self, text: str) -> List[str]:
        if not text or text.isspace():
            return []
        keywords = await asyncio.to_thread(self._extract, text)
        logger.info(f"Keyword extraction: {len(keywords)} keywords")
        return keywords
