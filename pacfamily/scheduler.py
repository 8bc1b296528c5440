"""Global scatter/chase phase scheduling.

The scheduler owns only the shared phase cycle. Per-agent overrides
(housed, frightened, eaten) live on the chasers themselves, which decide
whether to follow a phase change pushed to them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .config import Config


class Phase(str, Enum):
    """Global phases shared by every chaser on the baseline cycle."""

    SCATTER = "scatter"
    CHASE = "chase"


def default_schedule() -> Tuple[Tuple[Phase, float], ...]:
    """Scatter, chase, scatter, chase, then chase forever."""

    return (
        (Phase.SCATTER, Config.SCATTER_MS),
        (Phase.CHASE, Config.CHASE_MS),
        (Phase.SCATTER, Config.SCATTER_MS),
        (Phase.CHASE, Config.CHASE_MS),
        (Phase.CHASE, math.inf),
    )


@dataclass
class ModeScheduler:
    """Countdown over a fixed phase sequence.

    The last entry of ``schedule`` is held forever once reached, whatever its
    duration says.
    """

    schedule: Tuple[Tuple[Phase, float], ...] = field(default_factory=default_schedule)
    phase_index: int = 0
    remaining_ms: float = field(init=False)

    def __post_init__(self) -> None:
        if not self.schedule:
            raise ValueError("schedule must contain at least one phase")
        for phase, duration in self.schedule:
            if duration <= 0:
                raise ValueError(f"phase {phase.value} has non-positive duration {duration}")
        self.remaining_ms = self.schedule[self.phase_index][1]

    @property
    def phase(self) -> Phase:
        return self.schedule[self.phase_index][0]

    @property
    def is_final(self) -> bool:
        return self.phase_index == len(self.schedule) - 1

    def advance(self, elapsed_ms: float) -> Optional[Phase]:
        """Run the countdown by ``elapsed_ms``.

        Returns the new phase when the current phase value changed, ``None``
        otherwise. Overflow carries into the following phase, so one large
        step can cross several boundaries.
        """

        if self.is_final:
            return None

        before = self.phase
        self.remaining_ms -= elapsed_ms
        while self.remaining_ms <= 0 and not self.is_final:
            self.phase_index += 1
            self.remaining_ms += self.schedule[self.phase_index][1]
        if self.is_final:
            self.remaining_ms = math.inf

        if self.phase != before:
            return self.phase
        return None

    def reset(self) -> None:
        self.phase_index = 0
        self.remaining_ms = self.schedule[0][1]
