"""Vote API routes - record votes, read tallies, and chart projections."""

from fastapi import APIRouter, Depends

from config import get_logger
from exceptions import ValidationError
from server.dependencies import get_store
from server.metrics import metrics
from server.utils.responses import success_response
from tally.store import TallyStore

logger = get_logger(__name__)

router = APIRouter()


@router.get("/votar/{subject_id}/{vote}")
async def submit_vote(subject_id: str, vote: str, store: TallyStore = Depends(get_store)):
    """Record one vote for a subject.

    Returns the receipt: the new count for this vote value and the
    subject's full tally.
    """
    logger.info("vote received", subject_id=subject_id, vote=vote)

    try:
        receipt = store.submit_vote(subject_id, vote)
    except ValidationError as e:
        metrics.votes_rejected.labels(field=e.field or "unknown").inc()
        raise

    metrics.votes_submitted.inc()
    return success_response(receipt.to_dict())


@router.get("/query")
async def query_tally(store: TallyStore = Depends(get_store)):
    """Get current tallies for every subject."""
    snapshot = store.query_tally()
    metrics.queries.labels(kind="tally").inc()
    return success_response(snapshot.to_dict())


@router.get("/query/{subject_id}")
async def query_subject(subject_id: str, store: TallyStore = Depends(get_store)):
    """Get the current tally for one subject.

    Unknown subjects return an empty tally rather than 404, since any id
    can receive votes.
    """
    result = store.query_subject(subject_id)
    metrics.queries.labels(kind="subject").inc()
    return success_response(result)


@router.get("/graph")
async def query_graph(store: TallyStore = Depends(get_store)):
    """Get tallies reshaped for chart rendering."""
    projection = store.query_graph()
    metrics.queries.labels(kind="graph").inc()
    return success_response(projection.to_dict())
