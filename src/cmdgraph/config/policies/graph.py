"""Graph engine policy models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GraphPolicy(BaseModel):
    """Resource limits applied by the graph engine."""

    max_nodes: int = Field(
        default=100_000,
        ge=1,
        description="Upper bound on the number of nodes a single graph may hold.",
    )
