"""
Tests for TallyStore

Covers vote recording, snapshot consistency, seeding, graph projection
through the store, and concurrent submission safety.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from exceptions import InternalError, ValidationError
from tally.graph import graph_to_tallies
from tally.store import TallyStore


@pytest.fixture
def store():
    """Fresh, empty store per test"""
    return TallyStore()


class TestSubmitVote:
    """Recording votes"""

    def test_first_vote_creates_subject(self, store):
        """Unseen subject appears with count 1 after one vote"""
        receipt = store.submit_vote("p1", "yes")

        assert receipt.subject_id == "p1"
        assert receipt.vote == "yes"
        assert receipt.count == 1
        assert receipt.tally == {"yes": 1}
        assert store.query_tally().tallies == {"p1": {"yes": 1}}

    def test_repeated_votes_increment(self, store):
        """n submissions of the same value produce count n"""
        for _ in range(5):
            receipt = store.submit_vote("p1", "yes")

        assert receipt.count == 5
        snapshot = store.query_tally()
        assert snapshot.count("p1", "yes") == 5
        assert snapshot.count("p1", "no") == 0

    def test_example_scenario(self, store):
        """Three yes and one no for p1"""
        for _ in range(3):
            store.submit_vote("p1", "yes")
        store.submit_vote("p1", "no")

        assert store.query_tally().tallies == {"p1": {"yes": 3, "no": 1}}

        graph = store.query_graph()
        assert graph.categories == ["no", "yes"]
        assert len(graph.series) == 1
        assert graph.series[0].label == "p1"
        assert graph.series[0].total == 4
        assert graph.series[0].votes == {"no": 1, "yes": 3}

    def test_subjects_are_independent(self, store):
        """Votes for one subject never touch another"""
        store.submit_vote("p1", "yes")
        store.submit_vote("p2", "no")
        store.submit_vote("p2", "no")

        snapshot = store.query_tally()
        assert snapshot.tallies == {"p1": {"yes": 1}, "p2": {"no": 2}}

    def test_values_are_stripped(self, store):
        """Surrounding whitespace does not create separate buckets"""
        store.submit_vote(" p1 ", "yes ")
        store.submit_vote("p1", "yes")

        assert store.query_tally().tallies == {"p1": {"yes": 2}}

    def test_numeric_vote_is_stringified(self, store):
        """Numbers are accepted as opaque vote values"""
        receipt = store.submit_vote("rating", 5)

        assert receipt.vote == "5"
        assert store.query_tally().count("rating", "5") == 1

    def test_version_counts_votes(self, store):
        """Every accepted vote bumps the store version by one"""
        first = store.submit_vote("p1", "yes")
        second = store.submit_vote("p2", "no")

        assert first.version == 1
        assert second.version == 2
        assert store.query_tally().total_votes == 2

    @pytest.mark.parametrize("subject_id, vote, field", [
        (None, "yes", "subject_id"),
        ("", "yes", "subject_id"),
        ("   ", "yes", "subject_id"),
        ("p1", None, "vote"),
        ("p1", "", "vote"),
        ("p1", "y\nes", "vote"),
        ("p1", ["yes"], "vote"),
        pytest.param("p1", 10 ** 5000, "vote", id="huge-int-vote"),
        pytest.param(10 ** 5000, "yes", "subject_id", id="huge-int-subject"),
    ])
    def test_invalid_input_rejected_without_mutation(self, store, subject_id, vote, field):
        """Malformed input raises ValidationError and leaves the store untouched"""
        with pytest.raises(ValidationError) as exc_info:
            store.submit_vote(subject_id, vote)

        assert exc_info.value.field == field
        snapshot = store.query_tally()
        assert snapshot.tallies == {}
        assert snapshot.version == 0

    def test_length_limits_respected(self):
        """Store-level limits apply to ids and votes"""
        store = TallyStore(max_id_length=4, max_vote_length=2)

        store.submit_vote("abcd", "ok")
        with pytest.raises(ValidationError):
            store.submit_vote("abcde", "ok")
        with pytest.raises(ValidationError):
            store.submit_vote("abcd", "yes")

        assert store.query_tally().tallies == {"abcd": {"ok": 1}}


class TestQueryTally:
    """Snapshot reads"""

    def test_empty_store(self, store):
        snapshot = store.query_tally()

        assert snapshot.tallies == {}
        assert snapshot.total_votes == 0
        assert snapshot.version == 0

    def test_idempotent_read(self, store):
        """Two reads with no write in between are identical"""
        store.submit_vote("p1", "yes")
        store.submit_vote("p2", "no")

        assert store.query_tally().to_dict() == store.query_tally().to_dict()

    def test_snapshot_is_detached(self, store):
        """Later writes and caller mutation never leak between snapshot and store"""
        store.submit_vote("p1", "yes")
        snapshot = store.query_tally()

        store.submit_vote("p1", "yes")
        snapshot.tallies["p1"]["yes"] = 100

        assert snapshot.version == 1
        assert store.query_tally().count("p1", "yes") == 2

    def test_receipt_is_detached(self, store):
        receipt = store.submit_vote("p1", "yes")
        receipt.tally["yes"] = 50

        assert store.query_tally().count("p1", "yes") == 1

    def test_counts_never_decrease(self, store):
        """Every count in a later snapshot is >= the same count earlier"""
        sequence = [("p1", "yes"), ("p1", "no"), ("p2", "yes"), ("p1", "yes"), ("p3", "maybe")]
        previous = store.query_tally()

        for subject_id, vote in sequence:
            store.submit_vote(subject_id, vote)
            current = store.query_tally()
            for sid, tally in previous.tallies.items():
                for value, count in tally.items():
                    assert current.count(sid, value) >= count
            previous = current

    def test_to_dict_is_serializable(self, store):
        store.submit_vote("p1", "yes")

        assert store.query_tally().to_dict() == {
            "tallies": {"p1": {"yes": 1}},
            "total_votes": 1,
            "version": 1,
        }


class TestQuerySubject:
    """Single-subject reads"""

    def test_known_subject(self, store):
        store.submit_vote("p1", "yes")
        store.submit_vote("p1", "no")

        assert store.query_subject("p1") == {"subject_id": "p1", "tally": {"yes": 1, "no": 1}, "total": 2}

    def test_subject_id_normalized(self, store):
        store.submit_vote("p1", "yes")

        result = store.query_subject("  p1 ")
        assert result["subject_id"] == "p1"
        assert result["tally"] == {"yes": 1}

    def test_unknown_subject_is_empty(self, store):
        assert store.query_subject("nobody") == {"subject_id": "nobody", "tally": {}, "total": 0}

    def test_unknown_subject_not_created(self, store):
        """Reading a subject never registers it"""
        store.query_subject("nobody")

        assert "nobody" not in store.query_tally().tallies

    def test_invalid_subject_rejected(self, store):
        with pytest.raises(ValidationError):
            store.query_subject("")


class TestSeeding:
    """Pre-registered subjects"""

    def test_seeded_subjects_have_empty_tallies(self):
        store = TallyStore(seed_subjects=["alice", "bob"])

        snapshot = store.query_tally()
        assert snapshot.tallies == {"alice": {}, "bob": {}}
        assert snapshot.version == 0

    def test_seeded_subject_counts_votes(self):
        store = TallyStore(seed_subjects=["alice"])
        receipt = store.submit_vote("alice", "yes")

        assert receipt.count == 1
        assert store.query_tally().tallies == {"alice": {"yes": 1}}

    def test_seeded_subjects_in_graph(self):
        """Seeded subjects chart as zero rows"""
        store = TallyStore(seed_subjects=["alice", "bob"])
        store.submit_vote("bob", "yes")

        graph = store.query_graph()
        assert [point.label for point in graph.series] == ["alice", "bob"]
        assert graph.series[0].votes == {"yes": 0}
        assert graph.series[0].total == 0

    def test_invalid_seed_rejected(self):
        with pytest.raises(ValidationError):
            TallyStore(seed_subjects=["ok", ""])

    def test_stats(self):
        store = TallyStore(seed_subjects=["alice"])
        store.submit_vote("bob", "yes")
        store.submit_vote("bob", "yes")

        assert store.stats() == {"subject_count": 2, "total_votes": 2, "version": 2}


class TestQueryGraph:
    """Graph projection read through the store"""

    def test_graph_matches_tally(self, store):
        """Graph and tally are two views of the same state"""
        store.submit_vote("p2", "no")
        store.submit_vote("p1", "yes")
        store.submit_vote("p1", "abstain")

        assert graph_to_tallies(store.query_graph()) == store.query_tally().tallies

    def test_graph_version_tracks_store(self, store):
        store.submit_vote("p1", "yes")

        assert store.query_graph().version == store.query_tally().version == 1

    def test_projection_failure_raises_internal_error(self, store, monkeypatch):
        """Failures in the projection surface as InternalError, never swallowed"""
        def broken_project(snapshot):
            raise KeyError("boom")

        monkeypatch.setattr("tally.store.project", broken_project)

        with pytest.raises(InternalError) as exc_info:
            store.query_graph()

        assert exc_info.value.operation == "query_graph"
        assert isinstance(exc_info.value.original_error, KeyError)


class TestConcurrency:
    """No lost updates under concurrent writers"""

    def test_concurrent_same_bucket(self, store):
        n = 2000

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(lambda _: store.submit_vote("p1", "yes"), range(n)))

        snapshot = store.query_tally()
        assert snapshot.count("p1", "yes") == n
        assert snapshot.version == n

    def test_concurrent_mixed_writers_and_readers(self, store):
        """Readers always see a consistent total while writers run"""
        subjects = ["p1", "p2", "p3", "p4"]
        per_subject = 300

        def write(i):
            subject_id = subjects[i % len(subjects)]
            store.submit_vote(subject_id, "yes" if i % 2 else "no")

        def read(_):
            snapshot = store.query_tally()
            counted = sum(sum(tally.values()) for tally in snapshot.tallies.values())
            assert counted == snapshot.total_votes
            return snapshot.version

        with ThreadPoolExecutor(max_workers=16) as pool:
            writes = pool.map(write, range(per_subject * len(subjects)))
            reads = pool.map(read, range(200))
            list(writes)
            versions = list(reads)

        assert all(v >= 0 for v in versions)
        snapshot = store.query_tally()
        assert snapshot.total_votes == per_subject * len(subjects)
        for subject_id in subjects:
            assert sum(snapshot.tallies[subject_id].values()) == per_subject
