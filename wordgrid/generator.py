from __future__ import annotations

import copy
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from wordgrid.metrics import StageTimer
from wordgrid.solver import CellPath, Solver
from wordgrid.sources import SourceError, WordCache, load_dice, load_words
from wordgrid.trie import Trie

logger = logging.getLogger("wordgrid")

SPARSE, NORMAL, DENSE, RANDOM = 0, 1, 2, 3
BOARD_SIZES = (4, 5)
CAPPED_WORDS = 30
PLACEHOLDER = "?"


class TimerMode(str, Enum):
    CLASSIC = "classic"
    REFILL = "refill"
    STAMINA = "stamina"
    STRIKEOUT = "strikeout"
    ALLOTMENT = "allotment"
    DISCOVERY = "discovery"


def max_words_for(timer: TimerMode | str) -> int:
    """How many of the best words count towards the maximum score (-1 for all)."""
    return CAPPED_WORDS if TimerMode(timer) is TimerMode.ALLOTMENT else -1


def density_band(density: int, size: int, minimum: int) -> tuple[int, int]:
    """Return (target word count, accepted distance from it) for a density."""
    offset = (6 if size == 4 else 7) - minimum
    if density == SPARSE:
        return 37, 5
    if density == NORMAL:
        return 150 + 25 * offset, 25
    if density == DENSE:
        return 250 + 75 * offset, 50
    raise ValueError(f"Unknown density {density}")


class BoardState:
    """One arrangement of the dice and how far its word count is from the target."""

    def __init__(self, dice: Sequence[Sequence[str]], solver: Solver, target: int, rng: np.random.Generator):
        self.dice = [list(die) for die in dice]
        self.letters = [die[0] for die in self.dice]
        self.delta = 0
        self._solver = solver
        self._target = target
        self._rng = rng

    def copy(self) -> BoardState:
        other = copy.copy(self)
        other.dice = [list(die) for die in self.dice]
        other.letters = list(self.letters)
        return other

    def roll(self):
        self._rng.shuffle(self.dice)
        for die in self.dice:
            self._rng.shuffle(die)
        self.letters = [die[0] for die in self.dice]
        self._solve()

    def permute(self):
        count = len(self.dice)
        if self._rng.integers(2):
            index = int(self._rng.integers(count))
            die = self.dice[index]
            self._rng.shuffle(die)
            self.letters[index] = die[0]
        else:
            first = int(self._rng.integers(count))
            second = int(self._rng.integers(count))
            self.dice[first], self.dice[second] = self.dice[second], self.dice[first]
            self.letters[first], self.letters[second] = self.letters[second], self.letters[first]
        self._solve()

    def _solve(self):
        self._solver.solve(self.letters)
        self.delta = abs(self._solver.count() - self._target)


def optimize(
    state: BoardState,
    words_range: int,
    size: int,
    canceled: threading.Event | None = None,
    timer: StageTimer | None = None,
) -> BoardState | None:
    """Hill-climb from ``state`` until its delta is within ``words_range``.

    After 2 * size * size rejected changes the latest candidate is taken
    anyway; after ``size`` such escapes the board is re-rolled. Returns
    None if ``canceled`` gets set.
    """
    current = state
    max_tries = 2 * size * size
    tries = 0
    loops = 0
    while True:
        if canceled is not None and canceled.is_set():
            return None
        if current.delta <= words_range:
            return current

        candidate = current.copy()
        candidate.permute()
        if timer:
            timer.count("permutations")

        if candidate.delta < current.delta:
            current = candidate
            tries = 0
            loops = 0
            continue

        # Escape local minimum
        tries += 1
        if tries == max_tries:
            current = candidate
            tries = 0
            loops += 1

            if loops == size:
                current.roll()
                loops = 0
                if timer:
                    timer.count("restarts")


@dataclass
class GenerationRequest:
    density: int = NORMAL
    size: int = 4
    minimum: int = 3
    timer: TimerMode | str = TimerMode.CLASSIC
    letters: Sequence[str] = ()
    seed: int | None = None


@dataclass
class GenerationResult:
    letters: list[str]
    max_score: int = 0
    solutions: dict[str, list[CellPath]] = field(default_factory=dict)
    error: str = ""
    density: int = NORMAL
    seed: int | None = None

    @property
    def ok(self) -> bool:
        return not self.error


class Generator:
    """Builds boards in a background worker.

    ``create`` returns a Future that resolves to a GenerationResult, or to
    None if the run was canceled. Only one run may be active at a time;
    call ``cancel`` before starting another.
    """

    def __init__(
        self,
        dice_path: str | Path,
        words_path: str | Path,
        cache: WordCache | None = None,
        on_event: Callable[[str], None] | None = None,
    ):
        self.dice_path = Path(dice_path)
        self.words_path = Path(words_path)
        self._cache = cache
        self._on_event = on_event

        self._loaded_dice_path: Path | None = None
        self._loaded_words_path: Path | None = None
        self._dice: list[list[str]] = []
        self._dice_large: list[list[str]] = []
        self._trie = Trie()

        self._canceled = threading.Event()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="wordgrid-generator")
        self._future: Future | None = None

    @classmethod
    def from_settings(cls, cfg, on_event: Callable[[str], None] | None = None) -> Generator:
        return cls(cfg.DICE_PATH, cfg.WORDS_PATH, WordCache(cfg.CACHE_DIR), on_event)

    def dice(self, size: int) -> list[list[str]]:
        return self._dice if size == 4 else self._dice_large

    @property
    def trie(self) -> Trie:
        return self._trie

    def create(self, request: GenerationRequest) -> Future:
        if self._future is not None and not self._future.done():
            raise RuntimeError("A board is already being generated; cancel it first")
        self._canceled.clear()
        self._future = self._executor.submit(self.run, request, self._canceled)
        return self._future

    def cancel(self, timeout: float | None = None):
        self._canceled.set()
        if self._future is not None:
            wait([self._future], timeout=timeout)

    def close(self):
        self.cancel()
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def update(self):
        """Load dice and words whose paths changed since the last run."""
        if self.dice_path != self._loaded_dice_path:
            self._loaded_dice_path = None
            self._dice, self._dice_large = [], []
            self._dice, self._dice_large = load_dice(self.dice_path)
            self._loaded_dice_path = self.dice_path

        if self.words_path != self._loaded_words_path:
            self._loaded_words_path = None
            self._trie = Trie()
            self._trie = load_words(self.words_path, self._cache, self._on_event)
            self._loaded_words_path = self.words_path

    def run(self, request: GenerationRequest, canceled: threading.Event | None = None) -> GenerationResult | None:
        """Generate (or replay) one board synchronously."""
        size = request.size
        if size not in BOARD_SIZES:
            raise ValueError(f"Unsupported board size {size}")

        timer = StageTimer()
        try:
            with timer.stage("load"):
                self.update()
        except SourceError as e:
            logger.warning("Generation aborted: %s", e)
            return GenerationResult(
                letters=[PLACEHOLDER] * (size * size),
                error=str(e),
                density=request.density,
                seed=request.seed,
            )

        max_words = max_words_for(request.timer)
        solver = Solver(self._trie, size, request.minimum)

        # Restore a saved board as-is
        if request.letters:
            with timer.stage("solve"):
                solver.solve(request.letters)
            logger.info("Replayed %dx%d board: %d words", size, size, solver.count())
            return GenerationResult(
                letters=list(request.letters),
                max_score=solver.score(max_words),
                solutions=solver.solutions(),
                density=request.density,
                seed=request.seed,
            )

        seed = request.seed if request.seed is not None else np.random.SeedSequence().entropy
        rng = np.random.default_rng(seed)

        density = request.density
        if density == RANDOM:
            density = int(rng.integers(0, 3))
        target, words_range = density_band(density, size, request.minimum)
        logger.info("Generating %dx%d board: density=%d target=%d±%d seed=%s",
                    size, size, density, target, words_range, seed)

        solver.set_track_positions(False)
        state = BoardState(self.dice(size), solver, target, rng)
        with timer.stage("search"):
            state.roll()
            best = optimize(state, words_range, size, canceled, timer)

        if best is None:
            logger.info("Generation canceled: %s", timer.summary())
            return None

        solver.set_track_positions(True)
        with timer.stage("solve"):
            solver.solve(best.letters)
        logger.info("Generated board with %d words in %.1fms", solver.count(), timer.total_ms)

        return GenerationResult(
            letters=list(best.letters),
            max_score=solver.score(max_words),
            solutions=solver.solutions(),
            density=density,
            seed=seed,
        )
