"""
FastAPI REST API for natural-language car search.

Translates a free-text request into Typesense search parameters and returns
the matching cars.
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from car_query_builder import QueryOrchestrator
from car_query_builder.config import AppConfig, configure_logging
from car_query_builder.core.errors import CatalogError, GenerationError, InvalidParamsError, SearchError
from car_query_builder.core.models import FieldCatalog, SearchParams, SearchResult, StructuredQuery
from car_query_builder.execution.result_formatter import ResultFormatter

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Car Search API",
    description="Search cars with natural language, backed by Typesense and an LLM",
    version="1.0.0",
)

EXAMPLE_SEARCH_TERMS = [
    "newest manual Ford, V6, under 50K",
    "A honda or BMW with at least 200HP, rear wheel drive, from 20K to 50K, must be newer than 2014",
    "Cheapest electric car with good mileage",
    "Powerful luxury SUV that is not a Mercedes-Benz",
    "Family minivan from 2015 or later sorted by popularity",
]


class SearchRequest(BaseModel):
    """Request model for a natural-language search."""
    query: str = Field(..., min_length=1, description="Natural language query string")
    page: int = Field(1, ge=1, description="Page to fetch")


class LoadMoreRequest(BaseModel):
    """Request model for fetching another page of a previous search."""
    params: SearchParams
    page: int = Field(..., ge=1)


class PageResponse(BaseModel):
    """One page of formatted results."""
    found: int
    page: int
    per_page: int
    next_page: Optional[int]
    params: Optional[SearchParams]
    cars: List[Dict[str, Any]]


class SearchAPIResponse(BaseModel):
    """Response model for a natural-language search."""
    status: str = "finished"
    natural_language_query: str
    generated_query: StructuredQuery
    results: PageResponse


@lru_cache(maxsize=1)
def get_orchestrator() -> QueryOrchestrator:
    """Create the orchestrator once per process from the environment."""
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    return QueryOrchestrator.from_typesense(config)


def _page_response(result: SearchResult) -> PageResponse:
    return PageResponse(
        found=result.found,
        page=result.page,
        per_page=result.per_page,
        next_page=result.next_page,
        params=result.params,
        cars=ResultFormatter.format_hits(result.hits),
    )


def _error(status_code: int, error: str, message: str, query: Optional[str] = None) -> HTTPException:
    detail = {"status": "error", "error": error, "message": message}
    if query is not None:
        detail["query"] = query
    return HTTPException(status_code=status_code, detail=detail)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/examples")
async def examples() -> List[str]:
    return EXAMPLE_SEARCH_TERMS


@app.post("/search", response_model=SearchAPIResponse)
async def search(
    request: SearchRequest,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """
    Translate a natural-language query and return matching cars.

    Failures return the original query so the client can offer a retry.
    """
    try:
        response = await orchestrator.query(request.query, page=request.page)
    except GenerationError as e:
        raise _error(502, "generation_error", str(e), request.query)
    except SearchError as e:
        raise _error(503, "search_error", str(e), request.query)
    except CatalogError as e:
        raise _error(503, "catalog_error", str(e), request.query)

    logger.info("natural_language_query: %s", response.natural_language_query)
    logger.info("generated_query: %s", response.generated_query.model_dump_json(exclude_none=True))
    return SearchAPIResponse(
        natural_language_query=response.natural_language_query,
        generated_query=response.generated_query,
        results=_page_response(response.result),
    )


@app.post("/search/more", response_model=PageResponse)
async def load_more(
    request: LoadMoreRequest,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """
    Fetch another page using previously generated parameters.

    The parameters are checked against the field catalog before they are sent.
    """
    try:
        result = await orchestrator.load_more(request.params, request.page)
    except InvalidParamsError as e:
        raise _error(422, "invalid_params", str(e))
    except SearchError as e:
        raise _error(503, "search_error", str(e))
    except CatalogError as e:
        raise _error(503, "catalog_error", str(e))
    return _page_response(result)


@app.get("/catalog", response_model=FieldCatalog)
def catalog(orchestrator: QueryOrchestrator = Depends(get_orchestrator)):
    try:
        return orchestrator.get_catalog()
    except CatalogError as e:
        raise _error(503, "catalog_error", str(e))


@app.post("/catalog/invalidate")
def invalidate_catalog(orchestrator: QueryOrchestrator = Depends(get_orchestrator)):
    return {"invalidated": orchestrator.invalidate_catalog()}


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("API_PORT", "8000"))
    host = os.getenv("API_HOST", "0.0.0.0")

    uvicorn.run(app, host=host, port=port)
