"""Tests for the staged load profile and run summary."""

import pytest

from workmem.loadtest import (
    DEFAULT_STAGES,
    LoadSummary,
    Stage,
    parse_duration,
    parse_stages,
    spawn_rate,
    users_at,
)


class TestParsing:
    """Tests for LOAD_STAGES parsing."""

    @pytest.mark.parametrize(
        ("raw", "seconds"),
        [("15s", 15.0), ("2m", 120.0), ("500ms", 0.5), ("1h", 3600.0), ("30", 30.0)],
    )
    def test_parse_duration(self, raw: str, seconds: float) -> None:
        assert parse_duration(raw) == seconds

    @pytest.mark.parametrize("raw", ["", "fast", "-5s", "5d"])
    def test_invalid_duration(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_duration(raw)

    def test_parse_stages(self) -> None:
        """Comma separated duration:target pairs."""
        stages = parse_stages("15s:10, 15s:10 ,15s:0")
        assert stages == list(DEFAULT_STAGES)

    @pytest.mark.parametrize("raw", ["", "15s", "15s:ten", "15s:-1"])
    def test_invalid_stages(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_stages(raw)


class TestSchedule:
    """Tests for the virtual-user schedule."""

    def test_default_profile(self) -> None:
        """Ramp to 10 over 15s, hold 15s, ramp down over 15s."""
        assert users_at(0, DEFAULT_STAGES) == 0
        assert users_at(7.5, DEFAULT_STAGES) == 5
        assert users_at(15, DEFAULT_STAGES) == 10
        assert users_at(22, DEFAULT_STAGES) == 10
        assert users_at(37.5, DEFAULT_STAGES) == 5
        assert users_at(44.9, DEFAULT_STAGES) == 0

    def test_run_ends_after_last_stage(self) -> None:
        assert users_at(45, DEFAULT_STAGES) is None
        assert users_at(1000, DEFAULT_STAGES) is None

    def test_ramp_is_monotonic(self) -> None:
        """Users never drop while ramping up."""
        counts = [users_at(t / 10, DEFAULT_STAGES) for t in range(0, 150)]
        assert counts == sorted(counts)

    def test_step_between_stages(self) -> None:
        """A stage starts from the previous stage's target."""
        stages = [Stage(10, 20), Stage(10, 40)]
        assert users_at(10, stages) == 20
        assert users_at(15, stages) == 30

    def test_spawn_rate_follows_slope(self) -> None:
        stages = [Stage(10, 100), Stage(10, 100), Stage(5, 0)]
        assert spawn_rate(stages, 1) == 10.0
        # Holding still needs a positive rate
        assert spawn_rate(stages, 12) == 1.0
        assert spawn_rate(stages, 22) == 20.0


class TestLoadSummary:
    """Tests for the end-of-run verdict."""

    def make_summary(self, requests: int, failures: int) -> LoadSummary:
        return LoadSummary(
            endpoint="/low-work-mem",
            requests=requests,
            failures=failures,
            rps=42.0,
            median_ms=120.0,
            p95_ms=300.0,
            p99_ms=410.0,
        )

    def test_all_checks_pass(self) -> None:
        summary = self.make_summary(requests=1000, failures=0)

        assert summary.passed
        assert summary.exit_code == 0
        assert summary.check_pass_rate == 1.0

    def test_any_failure_fails_the_run(self) -> None:
        summary = self.make_summary(requests=1000, failures=1)

        assert not summary.passed
        assert summary.exit_code == 1
        assert summary.check_pass_rate == pytest.approx(0.999)

    def test_no_requests_fails_the_run(self) -> None:
        summary = self.make_summary(requests=0, failures=0)

        assert summary.exit_code == 1
        assert summary.check_pass_rate == 0.0

    def test_render(self) -> None:
        text = self.make_summary(requests=200, failures=50).render()

        assert "/low-work-mem: FAILED" in text
        assert "75.00% (150/200)" in text
        assert "Requests/sec: 42.0" in text
        assert "p99 response time: 410.0ms" in text
