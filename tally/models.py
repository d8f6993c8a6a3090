"""
Tally Result Models

Pydantic dataclasses returned by the tally store. Every model is a
detached copy of store state and serializes with to_dict().
"""

from typing import Dict, List
from pydantic.dataclasses import dataclass
from dataclasses import asdict


@dataclass
class VoteReceipt:
    """Acknowledgement for a single recorded vote"""

    subject_id: str
    vote: str
    count: int  # Bucket count after the increment
    tally: Dict[str, int]  # Full tally for subject_id after the increment
    version: int  # Store version this vote produced

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


@dataclass
class TallySnapshot:
    """Point-in-time copy of every subject's tally

    version counts the votes applied to the store when the snapshot was
    taken, so two snapshots with equal versions hold equal tallies.
    """

    tallies: Dict[str, Dict[str, int]]
    total_votes: int
    version: int

    def count(self, subject_id: str, vote: str) -> int:
        """Count for (subject_id, vote), 0 when never voted"""
        return self.tallies.get(subject_id, {}).get(vote, 0)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


@dataclass
class GraphPoint:
    """One chart row: a subject and its zero-filled counts per category"""

    label: str
    total: int
    votes: Dict[str, int]


@dataclass
class GraphProjection:
    """Tally data reshaped for chart rendering

    categories is the sorted union of every vote value in the store;
    series holds one GraphPoint per subject, ordered by label.
    """

    categories: List[str]
    series: List[GraphPoint]
    version: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)
