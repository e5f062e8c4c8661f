"""
LLM client factory and management.

Handles creation of Pydantic AI agents and runs schema-constrained completions
for query translation.
"""

import logging
import os
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from car_query_builder.core.errors import GenerationError

logger = logging.getLogger(__name__)


class LLMClientFactory:
    """
    Creates LLM agents and runs completions with structured output.

    Supports OpenAI, Anthropic, Gemini and OpenAI-compatible APIs, or any
    pydantic_ai Model instance passed directly.

    Reads configuration from environment variables by default:
    - LLM_MODEL: Model name
    - LLM_API_KEY or OPENAI_API_KEY: API key
    - LLM_BASE_URL: Optional base URL for OpenAI-compatible APIs
    """

    def __init__(
        self,
        model_name: Optional[Union[str, Model]] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model_settings: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LLM client factory.

        Args:
            model_name: Name of the LLM model (e.g., "gpt-4o", "gemini-2.0-flash")
                       or a pydantic_ai Model instance.
                       If not provided, reads from LLM_MODEL environment variable.
            api_key: API key for the LLM provider.
                    If not provided, reads from LLM_API_KEY or OPENAI_API_KEY.
            base_url: Optional base URL for OpenAI-compatible APIs (e.g., "http://localhost:11434/v1").
                     If not provided, reads from LLM_BASE_URL environment variable.
            model_settings: Optional model settings (temperature, top_p, etc.)

        Raises:
            ValueError: If model_name is missing, or if api_key is missing when not using base_url
        """
        self.model_settings = model_settings or {"temperature": 0, "top_p": 1.0}
        self.base_url: Optional[str] = None

        if isinstance(model_name, Model):
            self.model: Union[str, Model] = model_name
            return

        model_name = model_name or os.getenv("LLM_MODEL")
        api_key = api_key or os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
        base_url = base_url or os.getenv("LLM_BASE_URL")

        if not model_name:
            raise ValueError("model_name is required (provide as parameter or set LLM_MODEL env var)")

        if base_url:
            # OpenAI-compatible API (Ollama, vLLM, ...); those expect a /v1 suffix
            normalized_base_url = base_url.rstrip("/")
            if not normalized_base_url.endswith("/v1"):
                normalized_base_url = f"{normalized_base_url}/v1"
            self.base_url = normalized_base_url

            provider_kwargs = {"base_url": normalized_base_url}
            if api_key:
                provider_kwargs["api_key"] = api_key

            self.model = OpenAIChatModel(
                model_name,
                provider=OpenAIProvider(**provider_kwargs),
            )
        elif not api_key:
            raise ValueError(
                "api_key is required when not using a custom base_url "
                "(provide as parameter or set LLM_API_KEY/OPENAI_API_KEY env var)"
            )
        elif model_name.startswith(("openai:", "gpt")):
            os.environ["OPENAI_API_KEY"] = api_key
            self.model = model_name if ":" in model_name else f"openai:{model_name}"
        elif model_name.startswith(("anthropic:", "claude")):
            os.environ["ANTHROPIC_API_KEY"] = api_key
            self.model = model_name if ":" in model_name else f"anthropic:{model_name}"
        elif model_name.startswith(("google-gla:", "gemini")):
            os.environ["GOOGLE_API_KEY"] = api_key
            self.model = model_name if ":" in model_name else f"google-gla:{model_name}"
        else:
            os.environ["OPENAI_API_KEY"] = api_key
            self.model = f"openai:{model_name}"

    def _create_agent(
        self,
        output_type: Optional[type[BaseModel]],
        system_prompt: str,
    ) -> Agent:
        """
        Create a Pydantic AI agent.

        Output validation failures are not retried; the first invalid answer
        ends the run.
        """
        agent_kwargs: Dict[str, Any] = {
            "model": self.model,
            "system_prompt": system_prompt,
            "model_settings": self.model_settings,
            "retries": 0,
        }
        if output_type is not None:
            agent_kwargs["output_type"] = output_type

        return Agent(**agent_kwargs)

    async def parse_query(
        self,
        query: str,
        output_type: Optional[type[BaseModel]] = None,
        system_prompt: str = "",
    ) -> Dict[str, Any]:
        """
        Run the model on a text query.

        Args:
            query: User text
            output_type: Optional Pydantic model for structured output.
                        If None, returns the raw string response.
            system_prompt: System prompt with instructions

        Returns:
            The structured output as a dict, or {"response": "raw_string"}
        """
        agent = self._create_agent(output_type, system_prompt)
        result = await agent.run(query)

        if output_type is not None:
            return result.output.model_dump(mode="json")
        return {"response": result.output}

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_type: type[BaseModel],
    ) -> Optional[Dict[str, Any]]:
        """
        Run one schema-constrained completion.

        Raises:
            GenerationError: If the model failed or its output did not match `output_type`
        """
        try:
            output = await self.parse_query(user_prompt, output_type, system_prompt)
        except AgentRunError as e:
            logger.warning("Completion failed for %r: %s", user_prompt, e)
            raise GenerationError(f"The language model did not produce a valid query: {e}") from e
        return output or None
