"""Factory for creating reasoning engines."""

import logging

from github_issue_triage.config import TriageSettings
from github_issue_triage.llm.llama_provider import LLaMAProvider
from github_issue_triage.llm.openai_provider import OpenAIProvider
from github_issue_triage.llm.provider import ReasoningEngine

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating reasoning engine instances."""

    @staticmethod
    def create(settings: TriageSettings) -> ReasoningEngine:
        """Create a reasoning engine based on configuration.

        Args:
            settings: Service settings specifying the provider.

        Returns:
            Configured reasoning engine instance.

        Raises:
            ValueError: If provider type is not supported.
        """
        logger.info(f"Creating reasoning engine: {settings.llm_provider}")

        if settings.llm_provider == "openai":
            return OpenAIProvider(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                temperature=settings.openai_temperature,
            )
        elif settings.llm_provider == "llama":
            return LLaMAProvider(
                model_path=settings.llama_model_path,
                n_ctx=settings.llama_n_ctx,
            )
        else:
            raise ValueError(f"Unsupported LLM provider: {settings.llm_provider}")
