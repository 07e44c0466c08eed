"""Git progress parsing: phase table, line parser, and stream aggregator.

git writes progress to stderr as lines like

    Compressing objects:  43% (3/7)
    Writing objects: 100% (7/7), 1.21 KiB | 1.21 MiB/s, done.
    remote: Resolving deltas: 100% (2/2), completed with 2 local objects.

redrawing the same line with carriage returns. Each recognized stage owns a
slice of [0, 1]; the aggregator composes the per-stage percentages into one
overall value that never goes backwards.
"""

import re
from dataclasses import dataclass

import structlog

from ..core.constants import EVENT_END, EVENT_PROGRESS, EVENT_START
from ..core.events import ProgressEvent

log = structlog.get_logger(__name__)

# Stage labels git prints with a percentage, across clone/fetch/push/checkout
GIT_PROGRESS_PHASES = (
    "Enumerating objects",
    "Counting objects",
    "Compressing objects",
    "Writing objects",
    "Receiving objects",
    "Resolving deltas",
    "Updating files",
    "Checking out files",
)

# "<Label>: <pct>%" with optional "remote: " prefix and "(value/total)" counts
_PROGRESS_RE = re.compile(
    r"^(?:remote:\s+)?(?P<title>[A-Za-z][A-Za-z ]*?):\s+"
    r"(?P<pct>\d{1,3})%"
    r"(?:\s+\((?P<value>\d+)/(?P<total>\d+)\))?"
    r"(?P<rest>.*)$"
)


@dataclass(frozen=True)
class PhaseSpec:
    """One recognized stage and the slice [start, start + weight] it owns."""
    title: str
    start: float
    weight: float

    @property
    def end(self) -> float:
        return self.start + self.weight


@dataclass(frozen=True)
class PhaseMatch:
    """A parsed progress line."""
    phase: PhaseSpec
    percent: float  # 0.0 to 1.0 within the phase
    text: str
    value: int | None = None
    total: int | None = None


def build_phases(entries: list[tuple[str, float]]) -> tuple[PhaseSpec, ...]:
    """Lay out (title, weight) pairs as consecutive, disjoint slices of [0, 1].

    Weights are normalized by their sum. Raises ValueError on an empty
    table, non-positive weights, or duplicate titles.
    """
    if not entries:
        raise ValueError("Phase table is empty")
    titles = [title for title, _ in entries]
    if len(set(titles)) != len(titles):
        raise ValueError(f"Duplicate phase titles: {titles}")
    if any(weight <= 0 for _, weight in entries):
        raise ValueError(f"Phase weights must be positive: {entries}")

    total = sum(weight for _, weight in entries)
    phases = []
    start = 0.0
    for i, (title, weight) in enumerate(entries):
        share = weight / total
        if i == len(entries) - 1:
            # Absorb rounding so the last phase ends at exactly 1.0
            share = 1.0 - start
        phases.append(PhaseSpec(title=title, start=start, weight=share))
        start += share
    return tuple(phases)


def equal_phases(titles: list[str]) -> tuple[PhaseSpec, ...]:
    """Phase k of N owns [k/N, (k+1)/N]."""
    return build_phases([(title, 1.0) for title in titles])


def unknown_titles(entries: list[tuple[str, float]]) -> list[str]:
    """Titles in a configured table that git is not known to print."""
    return [title for title, _ in entries if title not in GIT_PROGRESS_PHASES]


def parse_progress_line(line: str, phases: tuple[PhaseSpec, ...]) -> PhaseMatch | None:
    """Match one complete stderr line against the phase table.

    Returns None for unknown labels, lines without a percentage, and
    truncated or out-of-range figures. Never raises on malformed input.
    """
    text = line.strip()
    m = _PROGRESS_RE.match(text)
    if m is None:
        return None

    pct = int(m.group("pct"))
    if pct > 100:
        return None

    title = m.group("title")
    for phase in phases:
        if phase.title == title:
            break
    else:
        return None

    value = total = None
    if m.group("value") is not None:
        value = int(m.group("value"))
        total = int(m.group("total"))
    return PhaseMatch(phase=phase, percent=pct / 100, text=text, value=value, total=total)


class ProgressAggregator:
    """Folds a sequence of stderr lines into monotonic progress events.

    One instance per invocation. Lines must be fed in the order git emitted
    them; the aggregator is not thread-safe.
    """

    def __init__(
        self,
        phases: tuple[PhaseSpec, ...],
        *,
        title: str = "",
        remote: str = "",
        branch: str = "",
    ) -> None:
        self.phases = phases
        self.title = title
        self.remote = remote
        self.branch = branch
        self.current_phase: PhaseSpec | None = None
        self.last_percent = 0.0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> ProgressEvent:
        """Initial event, produced before git starts writing output."""
        return self._event(EVENT_START, self.title, self.title, 0.0)

    def feed(self, line: str) -> ProgressEvent | None:
        """Feed one line. Returns a progress event if overall progress advanced."""
        if self._closed:
            return None

        match = parse_progress_line(line, self.phases)
        if match is None:
            if line.strip():
                log.debug("progress line unmatched", line=line.strip()[:200])
            return None

        overall = min(match.phase.start + match.percent * match.phase.weight, 1.0)
        if overall <= self.last_percent:
            return None

        self.current_phase = match.phase
        self.last_percent = overall
        return self._event(
            EVENT_PROGRESS, match.phase.title, match.text, overall,
            value=match.value, total=match.total,
        )

    def finish(self, success: bool) -> ProgressEvent:
        """Final event. Reaches 1.0 only on success; later lines are ignored."""
        self._closed = True
        if success:
            self.last_percent = 1.0
        return self._event(EVENT_END, self.title, self.title, self.last_percent)

    def _event(self, kind: str, title: str, description: str, percent: float, **counts) -> ProgressEvent:
        return ProgressEvent(
            kind=kind,
            title=title,
            description=description,
            percent=percent,
            remote=self.remote,
            branch=self.branch,
            **counts,
        )
