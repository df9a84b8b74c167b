from __future__ import annotations

from fastapi import APIRouter, Depends

from ..models import AgentsResponse, AggregateStats
from ..services import AggregateStore, get_aggregate_store

router = APIRouter(tags=["agents"])


@router.get("/stats", response_model=AggregateStats, summary="Aggregate statistics across agents")
def aggregate_stats(store: AggregateStore = Depends(get_aggregate_store)) -> AggregateStats:
    return store.stats()


@router.get("/agents", response_model=AgentsResponse, summary="List agent sessions")
def list_agents(store: AggregateStore = Depends(get_aggregate_store)) -> AgentsResponse:
    agents = store.agents()
    return AgentsResponse(count=len(agents), agents=agents)


__all__ = ["router"]
