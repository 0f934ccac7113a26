"""Ordered stage durations and the elapsed -> (stage, progress) mapping."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

RESET_STAGE = 0
RESET_STAGE_NAME = "reset"


class ScheduleError(ValueError):
    """Raised when a stage table cannot describe a valid timeline."""


@dataclass(frozen=True)
class Stage:
    name: str
    duration: float


@dataclass(frozen=True)
class StagePosition:
    """Where a show sits on its timeline for one tick."""

    stage: int
    progress: float
    name: str = RESET_STAGE_NAME

    @property
    def is_reset(self) -> bool:
        return self.stage == RESET_STAGE


RESET_POSITION = StagePosition(RESET_STAGE, 0.0, RESET_STAGE_NAME)


class StageSchedule:
    """Fixed sequence of named stages looping forever.

    Stage indices are 1-based; index 0 is the reset marker returned when the
    elapsed time lands exactly on a loop boundary.
    """

    def __init__(self, stages: Sequence[Tuple[str, float]]) -> None:
        if not stages:
            raise ScheduleError("A schedule needs at least one stage")
        parsed: List[Stage] = []
        seen = set()
        for name, duration in stages:
            if not name or not str(name).strip():
                raise ScheduleError("Stage names must be non-empty")
            if name in seen:
                raise ScheduleError(f"Duplicate stage name: {name}")
            if not math.isfinite(duration) or duration <= 0.0:
                raise ScheduleError(
                    f"Stage {name!r} must have a positive duration, got {duration!r}"
                )
            seen.add(name)
            parsed.append(Stage(str(name), float(duration)))
        self._stages: Tuple[Stage, ...] = tuple(parsed)

        boundaries: List[float] = []
        running = 0.0
        for stage in self._stages:
            running += stage.duration
            boundaries.append(running)
        self._boundaries: Tuple[float, ...] = tuple(boundaries)
        self._total = running

    # ------------------------------------------------------------------
    # Introspection
    @property
    def stages(self) -> Tuple[Stage, ...]:
        return self._stages

    @property
    def boundaries(self) -> Tuple[float, ...]:
        """Cumulative end time of every stage."""

        return self._boundaries

    @property
    def total_duration(self) -> float:
        return self._total

    def __len__(self) -> int:
        return len(self._stages)

    def stage_index(self, name: str) -> int:
        for index, stage in enumerate(self._stages, start=1):
            if stage.name == name:
                return index
        raise KeyError(f"Unknown stage: {name}")

    def stage_start(self, index: int) -> float:
        if index < 1 or index > len(self._stages):
            raise KeyError(f"Unknown stage index: {index}")
        return self._boundaries[index - 1] - self._stages[index - 1].duration

    # ------------------------------------------------------------------
    # Resolution
    def loop_index(self, elapsed: float) -> int:
        """Number of complete loops contained in ``elapsed``."""

        if elapsed < 0.0:
            raise ValueError("elapsed must be non-negative")
        return int(elapsed // self._total)

    def resolve(self, elapsed: float) -> StagePosition:
        if elapsed < 0.0:
            raise ValueError("elapsed must be non-negative")
        local = elapsed
        if elapsed >= self._total:
            local = math.fmod(elapsed, self._total)
            if local == 0.0:
                return RESET_POSITION

        stage_start = 0.0
        for index, (stage, stage_end) in enumerate(
            zip(self._stages, self._boundaries), start=1
        ):
            if local < stage_end:
                progress = (local - stage_start) / stage.duration
                return StagePosition(index, progress, stage.name)
            stage_start = stage_end
        # Rounding in the prefix sums can leave ``local`` a hair past the final
        # boundary; treat it as the loop edge.
        return RESET_POSITION
