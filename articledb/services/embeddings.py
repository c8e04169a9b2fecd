"""Text embeddings with OpenAI or Azure OpenAI."""
import logging
from typing import List, Optional

from langchain_core.embeddings import Embeddings
from langchain_openai import AzureOpenAIEmbeddings, OpenAIEmbeddings

from articledb.core.config import Settings, settings
from articledb.core.ids import unique_id
from articledb.models.schemas import Vector

logger = logging.getLogger(__name__)


def _create_embeddings(config: Settings) -> Embeddings:
    """Select the embeddings implementation (Azure or OpenAI)."""
    if config.azure_openai_enabled:
        if config.azure_openai_endpoint and config.azure_openai_embeddings_deployment and config.azure_openai_api_key.get_secret_value():
            return AzureOpenAIEmbeddings(
                azure_endpoint=config.azure_openai_endpoint,
                api_key=config.azure_openai_api_key,
                api_version=config.azure_openai_api_version,
                azure_deployment=config.azure_openai_embeddings_deployment,
                max_retries=0,
            )
        logger.warning("AZURE_OPENAI_ENABLED is true, but endpoint/deployment/api_key are not fully set. Falling back to OpenAIEmbeddings.")
    return OpenAIEmbeddings(
        model=config.openai_embeddings_model,
        api_key=config.openai_api_key,
        max_retries=0,
    )


def remove_invalid_bytes(texts: List[str]) -> List[str]:
    """Return a copy of texts with everything that is not valid UTF-8 removed."""
    return [t.encode("utf-8", errors="ignore").decode("utf-8") for t in texts]


class LangChainEncoder:
    """Encoder returning one embedding per text, in input order."""

    def __init__(self, config: Optional[Settings] = None, embeddings: Optional[Embeddings] = None):
        self.embeddings = embeddings or _create_embeddings(config or settings)

    async def encode(self, texts: List[str]) -> List[Vector]:
        logger.info(f"Encode {len(texts)} texts")

        # Nothing to send
        if not texts:
            return []

        data = await self.embeddings.aembed_documents(remove_invalid_bytes(texts))
        return [Vector(id=unique_id(), data=d) for d in data]

    async def ready(self) -> bool:
        """Return True if the remote embedding model answers a minimal request."""
        try:
            data = await self.embeddings.aembed_query("ready")
        except Exception as e:
            logger.error(f"ERROR: Encoder readiness check failed: {e}")
            return False
        return bool(data)
