"""Graph projection of tally snapshots.

Pure functions: the same snapshot always yields the same projection.
"""

from typing import Dict

from tally.models import GraphPoint, GraphProjection, TallySnapshot


def project(snapshot: TallySnapshot) -> GraphProjection:
    """Reshape a snapshot into chart rows, one per subject.

    Every row carries a count for every category so chart series line up;
    buckets a subject never received are filled with 0.
    """
    categories = sorted({vote for tally in snapshot.tallies.values() for vote in tally})

    series = []
    for subject_id in sorted(snapshot.tallies):
        tally = snapshot.tallies[subject_id]
        series.append(
            GraphPoint(
                label=subject_id,
                total=sum(tally.values()),
                votes={vote: tally.get(vote, 0) for vote in categories},
            )
        )

    return GraphProjection(categories=categories, series=series, version=snapshot.version)


def graph_to_tallies(projection: GraphProjection) -> Dict[str, Dict[str, int]]:
    """Invert project(): rebuild the id -> vote -> count mapping.

    Zero-filled buckets are dropped, since the store never holds a zero bucket.
    """
    return {
        point.label: {vote: count for vote, count in point.votes.items() if count > 0}
        for point in projection.series
    }
