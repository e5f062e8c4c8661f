"""Search execution and result formatting."""

from car_query_builder.execution.executor import SearchExecutor
from car_query_builder.execution.result_formatter import ResultFormatter

__all__ = ["SearchExecutor", "ResultFormatter"]
