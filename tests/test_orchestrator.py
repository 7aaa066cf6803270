import pytest

from consolidate.errors import StepError
from consolidate.orchestrator import MigrationOrchestrator, RunState


def test_runs_steps_in_order_and_summarises():
    calls = []

    def step(name, count):
        def _run():
            calls.append(name)
            return count
        return name, _run

    orch = MigrationOrchestrator([step("users", 3), step("leave requests", 5), step("settings", 1)])
    assert orch.state is RunState.NOT_STARTED

    summary = orch.run()

    assert calls == ["users", "leave requests", "settings"]
    assert orch.state is RunState.COMPLETED
    assert list(summary.counts.items()) == [("users", 3), ("leave requests", 5), ("settings", 1)]
    assert summary.total == 9
    assert "   • total documents: 9" in summary.lines()


def test_first_failure_stops_the_run():
    calls = []

    def boom():
        calls.append("leave requests")
        raise RuntimeError("store down")

    orch = MigrationOrchestrator([
        ("users", lambda: calls.append("users") or 2),
        ("leave requests", boom),
        ("settings", lambda: calls.append("settings") or 1),
    ])
    with pytest.raises(StepError) as err:
        orch.run()

    assert calls == ["users", "leave requests"]
    assert orch.state is RunState.FAILED
    assert orch.current_step == "leave requests"
    assert err.value.step == "leave requests"
    assert isinstance(err.value.cause, RuntimeError)
    assert orch.summary.counts == {"users": 2}


def test_terminal_states_cannot_run_again():
    orch = MigrationOrchestrator([("users", lambda: 0)])
    orch.run()
    with pytest.raises(RuntimeError):
        orch.run()


def test_duplicate_step_names_rejected():
    with pytest.raises(ValueError):
        MigrationOrchestrator([("a", lambda: 0), ("a", lambda: 0)])


def test_read_only_steps_are_reported_apart():
    orch = MigrationOrchestrator([("users", lambda: 1), ("verify", lambda: 50)], read_only=["verify"])
    summary = orch.run()
    assert summary.counts == {"users": 1}
    assert summary.checked == {"verify": 50}
    assert summary.total == 1
    assert "   • total documents: 1" in summary.lines()
