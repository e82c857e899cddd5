from __future__ import annotations

import itertools
import os
from typing import Iterable

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from tile_drop.game import GameConfig, GameSession


class SequenceSource:
    """Deterministic uniform source that cycles through fixed values."""

    def __init__(self, values: Iterable[float]) -> None:
        self._values = itertools.cycle(list(values))

    def random(self) -> float:
        return next(self._values)


# (value draw, column draw) pairs
TWO_AT_COL3 = [0.1, 0.4]
ALTERNATING_2_4_AT_COL3 = [0.1, 0.4, 0.9, 0.4]


@pytest.fixture
def make_session():
    def _make(values, **config) -> GameSession:
        return GameSession(GameConfig(**config), source=SequenceSource(values))

    return _make
