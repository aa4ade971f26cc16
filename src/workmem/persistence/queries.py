"""Named, versioned query templates.

Both benchmark routes execute the same template; only the work_mem in
effect differs. Bump the version when the statement changes so results
from different runs are never compared across query shapes.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Select, func, select
from sqlalchemy.dialects import postgresql

from workmem.persistence.tables import PlayerStatTable, PlayerTable

DEFAULT_LIMIT = 2000


@dataclass(frozen=True)
class QueryTemplate:
    """A fixed SELECT identified by name and version."""

    name: str
    version: int
    statement: Select

    @property
    def key(self) -> str:
        return f"{self.name}/v{self.version}"

    def sql(self) -> str:
        """Statement rendered for Postgres with literal parameters."""
        return str(
            self.statement.compile(
                dialect=postgresql.dialect(),
                compile_kwargs={"literal_binds": True},
            )
        )


def top_players(limit: int = DEFAULT_LIMIT) -> QueryTemplate:
    """Top-N players by goals plus assists.

    The GROUP BY over the join and the ORDER BY on the aggregate are the
    plan nodes whose hash and sort strategies depend on work_mem.
    player_id breaks ties so the row order is deterministic.
    """
    total_score = func.sum(PlayerStatTable.goals + PlayerStatTable.assists).label("total_score")
    statement = (
        select(PlayerTable.player_id, total_score)
        .select_from(PlayerStatTable)
        .join(PlayerTable, PlayerStatTable.player_id == PlayerTable.player_id)
        .group_by(PlayerTable.player_id)
        .order_by(total_score.desc(), PlayerTable.player_id)
        .limit(limit)
    )
    return QueryTemplate(name="top_players", version=1, statement=statement)
