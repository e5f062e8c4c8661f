"""Language model access."""

from car_query_builder.llm.client_factory import LLMClientFactory

__all__ = ["LLMClientFactory"]
