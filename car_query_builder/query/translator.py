"""
Natural-language to structured query translation.

Builds the prompts from the field catalog, delegates to the completion service
and validates what comes back.
"""

import logging

from pydantic import ValidationError

from car_query_builder.core.errors import GenerationError
from car_query_builder.core.interfaces import ICompletionService
from car_query_builder.core.models import FieldCatalog, StructuredQuery
from car_query_builder.query.prompt_generator import build_prompt

logger = logging.getLogger(__name__)


class QueryTranslator:
    """
    Translates a raw user query into a validated StructuredQuery.

    Performs exactly one completion per call. There are no retries and no
    caching of results; a failed translation raises GenerationError and the
    caller decides whether to submit the query again.
    """

    def __init__(self, completion_service: ICompletionService):
        """
        Initialize query translator.

        Args:
            completion_service: Language model used to generate the query
        """
        self.completion_service = completion_service

    async def translate(self, raw_query: str, catalog: FieldCatalog) -> StructuredQuery:
        """
        Translate a natural-language query.

        Args:
            raw_query: Non-empty user query
            catalog: Enriched field catalog of the collection

        Returns:
            StructuredQuery referencing only catalog fields

        Raises:
            GenerationError: If the model returned nothing or invalid output
        """
        system_prompt, user_prompt = build_prompt(catalog, raw_query)

        output = await self.completion_service.complete(
            system_prompt, user_prompt, StructuredQuery
        )
        if output is None:
            raise GenerationError("The language model returned no output")
        if not isinstance(output, dict):
            raise GenerationError(
                f"Expected a JSON object from the language model, got {type(output).__name__}",
                raw_output=output,
            )

        try:
            structured = StructuredQuery.model_validate(output, context={"catalog": catalog})
        except ValidationError as e:
            logger.warning("Rejected generated query %s: %s", output, e)
            raise GenerationError(f"Generated query failed validation: {e}", raw_output=output) from e

        logger.info("Translated %r into %s", raw_query, structured.model_dump(exclude_none=True))
        return structured
