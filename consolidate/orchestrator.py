"""
consolidate.orchestrator
------------------------
Runs a fixed, ordered list of named steps and stops at the first failure.

States: NOT_STARTED -> RUNNING (step by step) -> COMPLETED, or FAILED as soon
as a step raises. COMPLETED and FAILED are terminal; there is no resume.
After a failure the operator restores from backup and runs everything again.
Steps named in `read_only` only count documents; their counts are reported
apart from the migrated total.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import StepError

Step = Tuple[str, Callable[[], int]]


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class MigrationSummary:
    counts: Dict[str, int] = field(default_factory=dict)
    # read-only steps: documents counted, not written
    checked: Dict[str, int] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def lines(self) -> List[str]:
        out = ["📊 Migration Summary:"]
        for name, count in self.counts.items():
            out.append(f"   • {name}: {count}")
        out.append(f"   • total documents: {self.total}")
        for name, count in self.checked.items():
            out.append(f"   • {name}: {count} (kept as-is, not migrated)")
        out.append(f"   (finished in {self.elapsed:.2f}s)")
        return out


class MigrationOrchestrator:
    def __init__(self, steps: Sequence[Step], read_only: Iterable[str] = ()):
        names = [name for name, _ in steps]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate step names: {names}")
        self._steps = list(steps)
        self._read_only = set(read_only)
        self.state = RunState.NOT_STARTED
        self.current_step: Optional[str] = None
        self.summary = MigrationSummary()

    @property
    def step_names(self) -> List[str]:
        return [name for name, _ in self._steps]

    def run(self) -> MigrationSummary:
        if self.state is not RunState.NOT_STARTED:
            raise RuntimeError(f"orchestrator already {self.state.value}; create a new one to re-run")

        self.state = RunState.RUNNING
        t_all = perf_counter()
        for name, step in self._steps:
            self.current_step = name
            try:
                count = step()
            except Exception as exc:
                self.state = RunState.FAILED
                self.summary.elapsed = perf_counter() - t_all
                raise StepError(name, exc) from exc
            target = self.summary.checked if name in self._read_only else self.summary.counts
            target[name] = int(count or 0)

        self.current_step = None
        self.state = RunState.COMPLETED
        self.summary.elapsed = perf_counter() - t_all
        return self.summary
