"""Staged load profile and end-of-run summary for the Locust driver.

Kept free of Locust imports so the schedule can be tested without gevent.

A profile is a list of stages. Each stage moves the number of virtual
users linearly from the previous stage's target (0 for the first stage)
to its own target over its duration:

    15s:10,15s:10,15s:0   ramp up to 10, hold 10, ramp down to 0
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass

_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)(ms|s|m|h)?$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


@dataclass(frozen=True)
class Stage:
    duration_s: float
    target: int


DEFAULT_STAGES: tuple[Stage, ...] = (
    Stage(duration_s=15, target=10),  # ramp up to 10 users
    Stage(duration_s=15, target=10),
    Stage(duration_s=15, target=0),  # ramp down to 0 users
)


def parse_duration(raw: str) -> float:
    """Parse "15s", "2m", "500ms" or a bare number of seconds."""
    match = _DURATION_RE.match(raw.strip())
    if not match:
        raise ValueError(f"Invalid duration: {raw!r}")
    return float(match.group(1)) * _UNIT_SECONDS[match.group(2)]


def parse_stages(raw: str) -> list[Stage]:
    """Parse a comma separated "duration:target" list."""
    stages = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        duration, sep, target = part.partition(":")
        if not sep:
            raise ValueError(f"Stage must be duration:target, got {part!r}")
        try:
            users = int(target)
        except ValueError:
            raise ValueError(f"Invalid stage target: {target!r}") from None
        if users < 0:
            raise ValueError(f"Stage target must not be negative: {users}")
        stages.append(Stage(duration_s=parse_duration(duration), target=users))
    if not stages:
        raise ValueError("At least one stage is required")
    return stages


def users_at(elapsed: float, stages: Sequence[Stage]) -> int | None:
    """Number of virtual users at `elapsed` seconds, or None once the run is over."""
    previous = 0
    stage_start = 0.0
    for stage in stages:
        stage_end = stage_start + stage.duration_s
        if elapsed < stage_end:
            progress = (elapsed - stage_start) / stage.duration_s
            return round(previous + (stage.target - previous) * progress)
        previous = stage.target
        stage_start = stage_end
    return None


def spawn_rate(stages: Sequence[Stage], elapsed: float) -> float:
    """Users per second needed to follow the current stage's slope (at least 1)."""
    previous = 0
    stage_start = 0.0
    for stage in stages:
        stage_end = stage_start + stage.duration_s
        if elapsed < stage_end:
            slope = abs(stage.target - previous) / stage.duration_s
            return float(max(math.ceil(slope), 1))
        previous = stage.target
        stage_start = stage_end
    return 1.0


@dataclass(frozen=True)
class LoadSummary:
    """Aggregate outcome of one load run."""

    endpoint: str
    requests: int
    failures: int
    rps: float
    median_ms: float
    p95_ms: float
    p99_ms: float

    @property
    def check_pass_rate(self) -> float:
        if self.requests == 0:
            return 0.0
        return (self.requests - self.failures) / self.requests

    @property
    def passed(self) -> bool:
        """Every check passed and at least one request was made."""
        return self.requests > 0 and self.failures == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def render(self) -> str:
        verdict = "PASSED" if self.passed else "FAILED"
        return "\n".join(
            [
                f"Load test against {self.endpoint}: {verdict}",
                f"  checks 'status is 200': {self.check_pass_rate:.2%} "
                f"({self.requests - self.failures}/{self.requests})",
                f"  Requests/sec: {self.rps:.1f}",
                f"  Median response time: {self.median_ms:.1f}ms",
                f"  p95 response time: {self.p95_ms:.1f}ms",
                f"  p99 response time: {self.p99_ms:.1f}ms",
            ]
        )
