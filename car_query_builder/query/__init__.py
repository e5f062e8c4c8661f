"""Prompt generation and query translation components."""

from car_query_builder.query.prompt_generator import PromptGenerator, build_prompt
from car_query_builder.query.translator import QueryTranslator

__all__ = ["PromptGenerator", "build_prompt", "QueryTranslator"]
