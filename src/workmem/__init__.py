"""Benchmark harness for PostgreSQL work_mem.

Runs one top-N aggregation under the store's default work_mem and under a
transaction-scoped low work_mem, over HTTP, so a load driver can compare
the two regimes.
"""

__version__ = "0.1.0"
