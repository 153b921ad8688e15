# signature/models/pointer_event.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class PointerAction(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True)
class PointerEvent:
    """One pointer sample in container-local pixel coordinates."""
    action: PointerAction
    x: float
    y: float

    @classmethod
    def down(cls, x: float, y: float) -> "PointerEvent":
        return cls(PointerAction.DOWN, x, y)

    @classmethod
    def move(cls, x: float, y: float) -> "PointerEvent":
        return cls(PointerAction.MOVE, x, y)

    @classmethod
    def up(cls, x: float, y: float) -> "PointerEvent":
        return cls(PointerAction.UP, x, y)


@dataclass
class StrokeSession:
    """Points of the gesture currently being drawn (not persisted)."""
    points: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def last_point(self) -> Optional[Tuple[float, float]]:
        return self.points[-1] if self.points else None

    def add(self, x: float, y: float) -> None:
        self.points.append((x, y))
