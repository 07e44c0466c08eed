"""Tests for git progress line parsing and aggregation."""

import pytest

from gitprogress.git.progress import (
    GIT_PROGRESS_PHASES,
    ProgressAggregator,
    build_phases,
    equal_phases,
    parse_progress_line,
    unknown_titles,
)

TWO_PHASES = equal_phases(["Compressing objects", "Writing objects"])

NOISY_PUSH = [
    "Enumerating objects: 5, done.",
    "Counting objects: 100% (5/5), done.",
    "Delta compression using up to 8 threads",
    "Compressing objects:  33% (1/3)",
    "Compressing objects:  66% (2/3)",
    "Compressing objects: 100% (3/3)",
    "Compressing objects: 100% (3/3), done.",
    "Writing objects:  25% (1/4)",
    "Writing objects:  50% (2/4)",
    "Writing objects: 100% (4/4), 412 bytes | 412.00 KiB/s, done.",
    "Total 4 (delta 1), reused 0 (delta 0), pack-reused 0",
    "remote: Resolving deltas: 100% (1/1), completed with 1 local object.",
    "To github.com:example/repo.git",
    "   1a2b3c4..5d6e7f8  main -> main",
]


class TestBuildPhases:
    def test_equal_split(self):
        phases = equal_phases(["a", "b", "c", "d"])
        assert [p.start for p in phases] == pytest.approx([0.0, 0.25, 0.5, 0.75])
        assert phases[-1].end == 1.0

    def test_weights_normalized(self):
        phases = build_phases([("Compressing objects", 1), ("Writing objects", 4)])
        assert phases[0].weight == pytest.approx(0.2)
        assert phases[1].start == pytest.approx(0.2)
        assert phases[1].end == 1.0

    def test_slices_are_disjoint_and_tile(self):
        phases = build_phases([("a", 0.1), ("b", 0.3), ("c", 0.6)])
        for prev, nxt in zip(phases, phases[1:]):
            assert prev.end == pytest.approx(nxt.start)
        assert phases[0].start == 0.0
        assert phases[-1].end == 1.0

    def test_empty_table(self):
        with pytest.raises(ValueError, match="empty"):
            build_phases([])

    def test_non_positive_weight(self):
        with pytest.raises(ValueError, match="positive"):
            build_phases([("a", 1.0), ("b", 0.0)])

    def test_duplicate_titles(self):
        with pytest.raises(ValueError, match="Duplicate"):
            build_phases([("a", 1.0), ("a", 1.0)])

    def test_unknown_titles(self):
        entries = [("Writing objects", 1.0), ("Uploading blobs", 1.0)]
        assert unknown_titles(entries) == ["Uploading blobs"]
        assert "Receiving objects" in GIT_PROGRESS_PHASES


class TestParseProgressLine:
    def test_basic_match(self):
        m = parse_progress_line("Compressing objects:  43% (3/7)", TWO_PHASES)
        assert m is not None
        assert m.phase.title == "Compressing objects"
        assert m.percent == pytest.approx(0.43)
        assert m.value == 3
        assert m.total == 7

    def test_trailing_text_and_done(self):
        line = "Writing objects: 100% (4/4), 412 bytes | 412.00 KiB/s, done."
        m = parse_progress_line(line, TWO_PHASES)
        assert m is not None
        assert m.percent == 1.0
        assert m.text == line

    def test_without_counts(self):
        m = parse_progress_line("Writing objects: 12%", TWO_PHASES)
        assert m is not None
        assert m.value is None
        assert m.total is None

    def test_remote_prefix(self):
        phases = equal_phases(["Resolving deltas"])
        m = parse_progress_line("remote: Resolving deltas:  50% (1/2)", phases)
        assert m is not None
        assert m.phase.title == "Resolving deltas"

    def test_unknown_label(self):
        assert parse_progress_line("Counting objects: 100% (5/5), done.", TWO_PHASES) is None
        assert parse_progress_line("Frobnicating widgets: 50%", TWO_PHASES) is None

    @pytest.mark.parametrize("line", [
        "Writing objects:",
        "Writing objects:  4",
        "Writing objects: %",
        "Writing objects: 1000%",
        "Writing objects: 101% (5/4)",
        "Writing obj",
        "",
        "   ",
        "Total 4 (delta 1), reused 0 (delta 0)",
    ])
    def test_malformed_is_no_match(self, line):
        assert parse_progress_line(line, TWO_PHASES) is None

    def test_first_matching_phase_wins(self):
        phases = build_phases([("Writing objects", 1.0), ("Compressing objects", 1.0)])
        m = parse_progress_line("Writing objects: 50%", phases)
        assert m.phase is phases[0]


class TestProgressAggregator:
    def test_scenario_two_phases(self):
        agg = ProgressAggregator(TWO_PHASES)
        lines = [
            "Compressing objects: 50% (1/2)",
            "Compressing objects: 100% (2/2)",
            "Writing objects: 100% (2/2)",
        ]
        events = [agg.feed(line) for line in lines]
        assert all(e is not None for e in events)
        assert [e.percent for e in events] == pytest.approx([0.25, 0.5, 1.0])
        assert events[-1].percent == 1.0
        assert [e.kind for e in events] == ["progress"] * 3

    def test_event_fields(self):
        agg = ProgressAggregator(TWO_PHASES, title="Pushing to origin", remote="origin", branch="main")
        event = agg.feed("Writing objects:  50% (2/4)")
        assert event.title == "Writing objects"
        assert event.description == "Writing objects:  50% (2/4)"
        assert event.remote == "origin"
        assert event.branch == "main"
        assert event.value == 2
        assert event.total == 4
        assert agg.current_phase.title == "Writing objects"

    def test_start_event(self):
        agg = ProgressAggregator(TWO_PHASES, title="Pushing to origin")
        event = agg.start()
        assert event.kind == "start"
        assert event.percent == 0.0
        assert event.title == "Pushing to origin"

    def test_repeat_is_suppressed(self):
        agg = ProgressAggregator(TWO_PHASES)
        assert agg.feed("Compressing objects: 100% (3/3)") is not None
        assert agg.feed("Compressing objects: 100% (3/3), done.") is None

    def test_zero_percent_is_suppressed(self):
        agg = ProgressAggregator(TWO_PHASES)
        assert agg.feed("Compressing objects:   0% (0/3)") is None
        assert agg.last_percent == 0.0

    def test_regression_is_suppressed(self):
        agg = ProgressAggregator(TWO_PHASES)
        agg.feed("Writing objects:  50% (1/2)")
        assert agg.feed("Compressing objects: 100% (3/3)") is None
        assert agg.feed("Writing objects:  40% (1/2)") is None
        assert agg.last_percent == pytest.approx(0.75)

    def test_noise_leaves_state_unchanged(self):
        agg = ProgressAggregator(TWO_PHASES)
        agg.feed("Compressing objects:  50% (1/2)")
        before = (agg.last_percent, agg.current_phase)
        for line in ["Total 4 (delta 1)", "Writing objects: 5", "garbage", ""]:
            assert agg.feed(line) is None
        assert (agg.last_percent, agg.current_phase) == before

    def test_non_decreasing_over_noisy_stream(self):
        agg = ProgressAggregator(TWO_PHASES)
        stream = NOISY_PUSH + list(reversed(NOISY_PUSH)) + NOISY_PUSH
        percents = [e.percent for e in (agg.feed(line) for line in stream) if e is not None]
        assert percents
        assert percents == sorted(percents)

    def test_percent_within_phase_slice(self):
        phases = build_phases([("Compressing objects", 0.2), ("Writing objects", 0.8)])
        for pct in range(1, 101):
            agg = ProgressAggregator(phases)
            event = agg.feed(f"Writing objects: {pct}%")
            assert phases[1].start <= event.percent <= phases[1].end
            agg = ProgressAggregator(phases)
            event = agg.feed(f"Compressing objects: {pct}%")
            assert phases[0].start <= event.percent <= phases[0].end

    def test_finish_success(self):
        agg = ProgressAggregator(TWO_PHASES, title="Pushing to origin")
        agg.feed("Compressing objects:  50% (1/2)")
        end = agg.finish(success=True)
        assert end.kind == "end"
        assert end.percent == 1.0

    def test_finish_failure_keeps_last_percent(self):
        agg = ProgressAggregator(TWO_PHASES)
        agg.feed("Compressing objects:  50% (1/2)")
        end = agg.finish(success=False)
        assert end.percent == pytest.approx(0.25)

    def test_lines_after_finish_are_ignored(self):
        agg = ProgressAggregator(TWO_PHASES)
        agg.finish(success=False)
        assert agg.closed
        assert agg.feed("Writing objects: 100% (2/2)") is None
        assert agg.last_percent == 0.0
