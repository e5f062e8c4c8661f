"""
Configuration loaded from environment variables (and a .env file when present).
"""

import logging
import os
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from car_query_builder.core.models import LLMConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


class TypesenseConfig(BaseModel):
    """Connection settings for the Typesense node."""

    url: str = "http://localhost:8108"
    api_key: str = "xyz"
    admin_api_key: Optional[str] = None
    collection_name: str = "cars"
    connection_timeout_seconds: float = 60 * 60


class AppConfig(BaseModel):
    """Settings for the search service and the operator scripts."""

    typesense: TypesenseConfig = Field(default_factory=TypesenseConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    max_facet_values: int = 20
    per_page: int = 12
    query_by: List[str] = Field(default_factory=lambda: ["make", "model", "market_category"])
    default_sort_by: str = "popularity:desc"
    field_descriptions: Dict[str, str] = Field(default_factory=dict)
    force_reindex: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "AppConfig":
        """
        Build configuration from the environment.

        Args:
            dotenv: Load a .env file first (existing variables win)
        """
        if dotenv:
            load_dotenv()

        return cls(
            typesense=TypesenseConfig(
                url=os.getenv("TYPESENSE_URL", "http://localhost:8108"),
                api_key=os.getenv("TYPESENSE_API_KEY", "xyz"),
                admin_api_key=os.getenv("TYPESENSE_ADMIN_API_KEY"),
                collection_name=os.getenv("TYPESENSE_COLLECTION_NAME", "cars"),
            ),
            llm=LLMConfig(
                model=os.getenv("LLM_MODEL"),
                api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
                base_url=os.getenv("LLM_BASE_URL"),
            ),
            max_facet_values=int(os.getenv("TYPESENSE_MAX_FACET_VALUES", "20")),
            per_page=int(os.getenv("SEARCH_PER_PAGE", "12")),
            query_by=_env_list("SEARCH_QUERY_BY", ["make", "model", "market_category"]),
            force_reindex=_env_bool("FORCE_REINDEX"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for scripts and the API process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
