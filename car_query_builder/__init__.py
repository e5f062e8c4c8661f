"""
Car Query Builder - natural-language car search over a Typesense collection.

Main entry point for creating query orchestrators.
"""

from car_query_builder.orchestrator import QueryOrchestrator

__all__ = ["QueryOrchestrator"]
