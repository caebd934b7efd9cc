"""
Simulation settings.

Defaults reproduce the classic three-tier feedback queue: round-robin tiers
with quanta of 6 and 11 time units above a first-come-first-serve tier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_MLFQ_QUANTA: Tuple[int, int] = (6, 11)


@dataclass(frozen=True)
class SimulationConfig:
    mlfq_quanta: Tuple[int, int] = DEFAULT_MLFQ_QUANTA
    # Abort a run whose clock passes this value (None = no limit).
    max_time: Optional[int] = None
    record_switches: bool = True

    def __post_init__(self) -> None:
        quanta = tuple(self.mlfq_quanta)
        if len(quanta) != 2 or any(not isinstance(q, int) or q <= 0 for q in quanta):
            raise ValueError(f"mlfq_quanta must be two positive integers, got {self.mlfq_quanta!r}")
        object.__setattr__(self, "mlfq_quanta", quanta)

        if self.max_time is not None and self.max_time <= 0:
            raise ValueError(f"max_time must be positive, got {self.max_time}")


DEFAULT_CONFIG = SimulationConfig()
