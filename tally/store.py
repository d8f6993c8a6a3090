"""
Tally Store - in-process vote aggregation

Holds subject id -> vote value -> count for the lifetime of the process.
Thread-safe: FastAPI runs handlers on the event loop and in its worker
threadpool, so every read and write goes through one lock.
"""

import threading
from typing import Any, Dict, Iterable, Optional

from config import get_logger
from exceptions import InternalError
from tally.graph import project
from tally.models import GraphProjection, TallySnapshot, VoteReceipt
from tally.validation import clean_value

logger = get_logger(__name__).bind(component="tally_store")

DEFAULT_MAX_ID_LENGTH = 128
DEFAULT_MAX_VOTE_LENGTH = 64


class TallyStore:
    """Per-subject vote tallies with consistent snapshots

    Usage:
        store = TallyStore()
        store.submit_vote("p1", "yes")
        snapshot = store.query_tally()
        graph = store.query_graph()

    Buckets are created by the first vote for (subject, value), so a bucket
    that exists always holds a count >= 1. Results are detached copies;
    mutating them never reaches the store.
    """

    def __init__(
        self,
        seed_subjects: Optional[Iterable[str]] = None,
        max_id_length: int = DEFAULT_MAX_ID_LENGTH,
        max_vote_length: int = DEFAULT_MAX_VOTE_LENGTH,
    ):
        self.max_id_length = max_id_length
        self.max_vote_length = max_vote_length
        self._tallies: Dict[str, Dict[str, int]] = {}
        self._version = 0
        self._lock = threading.Lock()

        for subject_id in seed_subjects or ():
            self._tallies.setdefault(clean_value(subject_id, "subject_id", self.max_id_length), {})

        logger.info("tally store created", seeded_subjects=len(self._tallies))

    def submit_vote(self, subject_id: Any, vote: Any) -> VoteReceipt:
        """Record one vote for (subject_id, vote) and return the updated tally

        Raises:
            ValidationError: subject_id or vote is missing or malformed.
                The store is left untouched.
        """
        subject_id = clean_value(subject_id, "subject_id", self.max_id_length)
        vote = clean_value(vote, "vote", self.max_vote_length)

        with self._lock:
            tally = self._tallies.setdefault(subject_id, {})
            tally[vote] = tally.get(vote, 0) + 1
            self._version += 1
            receipt = VoteReceipt(
                subject_id=subject_id,
                vote=vote,
                count=tally[vote],
                tally=dict(tally),
                version=self._version,
            )

        logger.debug("vote recorded", subject_id=subject_id, vote=vote, count=receipt.count)
        return receipt

    def query_tally(self) -> TallySnapshot:
        """Snapshot every subject's tally"""
        with self._lock:
            return self._snapshot()

    def query_subject(self, subject_id: Any) -> Dict[str, Any]:
        """Tally for one subject; unknown subjects have an empty tally

        Returns the normalized subject_id alongside the tally and its total.
        """
        subject_id = clean_value(subject_id, "subject_id", self.max_id_length)
        with self._lock:
            tally = dict(self._tallies.get(subject_id, {}))
        return {"subject_id": subject_id, "tally": tally, "total": sum(tally.values())}

    def query_graph(self) -> GraphProjection:
        """Snapshot the store and reshape it for chart rendering

        Raises:
            InternalError: the projection failed on the snapshot.
        """
        with self._lock:
            snapshot = self._snapshot()

        try:
            return project(snapshot)
        except Exception as e:
            logger.error("graph projection failed", version=snapshot.version, error=str(e), exc_info=True)
            raise InternalError("Failed to build graph projection", operation="query_graph", original_error=e) from e

    def stats(self) -> Dict[str, int]:
        """Subject count, vote total and version for health reporting"""
        with self._lock:
            return {
                "subject_count": len(self._tallies),
                "total_votes": self._version,
                "version": self._version,
            }

    def _snapshot(self) -> TallySnapshot:
        # Caller holds self._lock
        tallies = {subject_id: dict(tally) for subject_id, tally in self._tallies.items()}
        return TallySnapshot(tallies=tallies, total_votes=self._version, version=self._version)
