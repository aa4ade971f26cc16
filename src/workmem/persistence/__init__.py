"""Persistence layer for the benchmark harness.

This module provides:
- Database: explicitly owned async engine and connection pool
- QueryExecutor: the benchmark query under default and lowered work_mem
- The fixture tables and the seed loader
"""

from workmem.persistence.db import Database, create_engine
from workmem.persistence.executor import Mode, QueryExecutor, QueryResult
from workmem.persistence.queries import QueryTemplate, top_players

__all__ = [
    # DB
    "Database",
    "create_engine",
    # Execution
    "Mode",
    "QueryExecutor",
    "QueryResult",
    # Queries
    "QueryTemplate",
    "top_players",
]
