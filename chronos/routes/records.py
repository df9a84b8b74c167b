from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..models import RecordSubmission, RecordsResponse, SubmissionResult
from ..services import AggregateStore, get_aggregate_store

router = APIRouter(prefix="/records", tags=["records"])


@router.post("", response_model=SubmissionResult, summary="Submit event records from an agent")
# Merge a batch into the submitting session, skipping already-known content hashes
def submit_records(
    payload: RecordSubmission,
    store: AggregateStore = Depends(get_aggregate_store),
) -> SubmissionResult:
    return store.submit(payload)


@router.get("", response_model=RecordsResponse, summary="Retrieve merged event records")
def list_records(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    limit: Optional[int] = Query(default=None, ge=1),
    store: AggregateStore = Depends(get_aggregate_store),
) -> RecordsResponse:
    records = store.records(session_id=session_id, limit=limit)
    return RecordsResponse(count=len(records), records=records)


__all__ = ["router"]
