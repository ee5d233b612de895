"""
Tests for the daily seen ledger.
"""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from trotd.seen import SeenTracker
from trotd.testing import FrozenClock, create_mock_entry

name_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz-"), min_size=1, max_size=12
)


@given(names=st.lists(name_strategy, unique=True, max_size=10))
@settings(max_examples=50, deadline=None)
def test_property_marked_entries_are_filtered(names: list[str]) -> None:
    """
    Property 1: Shown entries are hidden for the rest of the day

    For any set of entries marked as shown, filtering the same entries on
    the same day SHALL return nothing.
    """
    entries = [create_mock_entry("owner", name) for name in names]
    with tempfile.TemporaryDirectory() as tmp:
        tracker = SeenTracker(Path(tmp) / "seen.json", clock=FrozenClock())
        tracker.mark_shown(entries)

        assert tracker.filter(entries) == []


class TestSeenTracker:
    """Tests for SeenTracker."""

    def test_empty_ledger_filters_nothing(self, seen_tracker: SeenTracker, sample_entries) -> None:
        assert seen_tracker.filter(sample_entries) == sample_entries

    def test_second_run_shows_only_new(self, seen_tracker: SeenTracker) -> None:
        x = create_mock_entry("o", "x")
        y = create_mock_entry("o", "y")
        p = create_mock_entry("o", "p")
        q = create_mock_entry("o", "q")

        first = seen_tracker.filter([x, y])
        seen_tracker.mark_shown(first)

        assert seen_tracker.filter([x, y, p, q]) == [p, q]

    def test_identity_includes_provider(self, seen_tracker: SeenTracker) -> None:
        on_github = create_mock_entry("o", "r", provider_id="github")
        on_gitlab = create_mock_entry("o", "r", provider_id="gitlab")

        seen_tracker.mark_shown([on_github])

        assert seen_tracker.filter([on_github, on_gitlab]) == [on_gitlab]

    def test_identity_is_case_sensitive(self, seen_tracker: SeenTracker) -> None:
        seen_tracker.mark_shown([create_mock_entry("Owner", "Repo")])

        lower = create_mock_entry("owner", "repo")
        assert seen_tracker.filter([lower]) == [lower]

    def test_annotations_do_not_affect_identity(self, seen_tracker: SeenTracker) -> None:
        entry = create_mock_entry()
        seen_tracker.mark_shown([entry.with_starred(True)])

        assert seen_tracker.filter([entry.as_stale()]) == []

    def test_resets_on_new_utc_day(self, state_dir: Path) -> None:
        clock = FrozenClock(datetime(2024, 5, 1, 23, 59, tzinfo=timezone.utc))
        tracker = SeenTracker(state_dir / "seen.json", clock=clock)
        entry = create_mock_entry()
        tracker.mark_shown([entry])
        tracker.advance_offsets({"github": 5})

        clock.advance(minutes=2)

        record = tracker.load()
        assert record.day.isoformat() == "2024-05-02"
        assert record.repo_ids == set()
        assert record.fetch_offsets == {}
        assert tracker.filter([entry]) == [entry]

    def test_day_is_utc(self, state_dir: Path) -> None:
        local = timezone(timedelta(hours=-5))
        clock = FrozenClock(datetime(2024, 5, 1, 21, 0, tzinfo=local))
        tracker = SeenTracker(state_dir / "seen.json", clock=clock)

        assert tracker.today().isoformat() == "2024-05-02"

    def test_corrupt_ledger_resets(self, seen_tracker: SeenTracker) -> None:
        seen_tracker.path.write_text("garbage", encoding="utf-8")

        record = seen_tracker.load()
        assert record.repo_ids == set()

    def test_malformed_ledger_resets(self, seen_tracker: SeenTracker) -> None:
        seen_tracker.path.write_text('{"day": "not-a-date"}', encoding="utf-8")

        assert seen_tracker.load().repo_ids == set()

    def test_persists_across_instances(self, state_dir: Path, frozen_clock: FrozenClock) -> None:
        entry = create_mock_entry()
        SeenTracker(state_dir / "seen.json", clock=frozen_clock).mark_shown([entry])

        reopened = SeenTracker(state_dir / "seen.json", clock=frozen_clock)
        assert reopened.filter([entry]) == []

    def test_offsets_accumulate_per_provider(self, seen_tracker: SeenTracker) -> None:
        assert seen_tracker.fetch_offset("github") == 0

        seen_tracker.advance_offsets({"github": 3, "gitea": 1})
        seen_tracker.advance_offsets({"github": 2, "gitea": -4})

        assert seen_tracker.fetch_offset("github") == 5
        assert seen_tracker.fetch_offset("gitea") == 1
        assert seen_tracker.fetch_offsets() == {"github": 5, "gitea": 1}

    def test_clear(self, seen_tracker: SeenTracker) -> None:
        entry = create_mock_entry()
        seen_tracker.mark_shown([entry])

        seen_tracker.clear()
        seen_tracker.clear()

        assert seen_tracker.filter([entry]) == [entry]
