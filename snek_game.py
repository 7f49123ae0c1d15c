import enum
import logging
import random
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, FrozenSet, Optional, Set, Tuple

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
Direction = Tuple[int, int]

UP: Direction = (0, -1)
DOWN: Direction = (0, 1)
LEFT: Direction = (-1, 0)
RIGHT: Direction = (1, 0)
DIRECTIONS = (UP, DOWN, LEFT, RIGHT)


def opposite(direction: Direction) -> Direction:
    return (-direction[0], -direction[1])


def is_opposite(a: Direction, b: Direction) -> bool:
    return a[0] + b[0] == 0 and a[1] + b[1] == 0


@dataclass
class SnekConfig:
    grid_size: int = 21
    initial_length: int = 4
    food_score: int = 10
    food_attempt_limit: int = 1000
    initial_speed: float = 8.0
    # None fast-forwards every owed step in a single advance() call.
    max_steps_per_advance: Optional[int] = None
    food_reward: float = 1.0
    death_penalty: float = -1.0
    step_penalty: float = 0.0
    max_no_food_steps: Optional[int] = None

    def __post_init__(self):
        if self.initial_length < 1:
            raise ValueError(f"initial_length must be at least 1, got {self.initial_length}")
        # The starting snake occupies columns 2 .. 2 + initial_length - 1.
        if self.initial_length + 2 > self.grid_size:
            raise ValueError(
                f"initial_length {self.initial_length} does not fit a {self.grid_size}-cell grid"
            )

    def in_bounds(self, cell: Cell) -> bool:
        return 0 <= cell[0] < self.grid_size and 0 <= cell[1] < self.grid_size


class Phase(enum.Enum):
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    OVER = "over"


class StepOutcome(enum.Enum):
    MOVED = "moved"
    ATE = "ate"
    WALL = "wall"
    SELF = "self"
    IDLE = "idle"

    @property
    def fatal(self) -> bool:
        return self in (StepOutcome.WALL, StepOutcome.SELF)


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of a game for renderers. ``snake`` is tail-first."""

    phase: Phase
    snake: Tuple[Cell, ...]
    food: Cell
    score: int
    high_score: int
    direction: Direction
    speed: float
    grid_size: int

    @property
    def head(self) -> Cell:
        return self.snake[-1]


class SnekGame:
    """Fixed-timestep snake simulation.

    The snake is kept twice: an ordered deque (tail at the left, head at the
    right) and an occupancy set for O(1) collision checks. Both are only ever
    changed together by ``_commit``.

    ``records`` is an optional collaborator exposing ``load_high_score()``,
    ``save_high_score(value)`` and ``submit(score, time)``.
    """

    def __init__(
        self,
        config: Optional[SnekConfig] = None,
        records=None,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or SnekConfig()
        self.records = records
        self._clock = clock
        self._rng = random.Random()
        if seed is not None:
            self._rng.seed(seed)

        self._snake: Deque[Cell] = deque()
        self._occupied: Set[Cell] = set()
        self._food: Cell = (0, 0)
        self._score = 0
        self._high_score = int(records.load_high_score()) if records is not None else 0
        self._phase = Phase.READY
        self._direction: Direction = RIGHT
        self._pending: Direction = RIGHT
        self._accumulator = 0.0
        self._speed = 0.0
        self._interval = 0.0
        self.set_speed(self.config.initial_speed)
        self.initialize()

    def seed(self, seed: Optional[int] = None):
        if seed is not None:
            self._rng.seed(seed)
        return [seed]

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def snake(self) -> Tuple[Cell, ...]:
        return tuple(self._snake)

    @property
    def head(self) -> Cell:
        return self._snake[-1]

    @property
    def tail(self) -> Cell:
        return self._snake[0]

    @property
    def length(self) -> int:
        return len(self._snake)

    @property
    def occupancy(self) -> FrozenSet[Cell]:
        return frozenset(self._occupied)

    @property
    def food(self) -> Cell:
        return self._food

    @property
    def score(self) -> int:
        return self._score

    @property
    def high_score(self) -> int:
        return self._high_score

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def pending_direction(self) -> Direction:
        return self._pending

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def step_interval_ms(self) -> float:
        return self._interval

    @property
    def accumulator(self) -> float:
        return self._accumulator

    def snapshot(self) -> Snapshot:
        return Snapshot(
            phase=self._phase,
            snake=tuple(self._snake),
            food=self._food,
            score=self._score,
            high_score=self._high_score,
            direction=self._direction,
            speed=self._speed,
            grid_size=self.config.grid_size,
        )

    def initialize(self) -> None:
        mid = self.config.grid_size // 2
        self._snake = deque((2 + i, mid) for i in range(self.config.initial_length))
        self._occupied = set(self._snake)
        self._direction = RIGHT
        self._pending = RIGHT
        self._score = 0
        self._accumulator = 0.0
        self._food = self.place_food()
        self._set_phase(Phase.READY)

    def start(self) -> None:
        if self._phase is Phase.RUNNING:
            return
        if self._phase is Phase.OVER:
            self.initialize()
        self._set_phase(Phase.RUNNING)

    def pause(self) -> None:
        if self._phase is not Phase.RUNNING:
            return
        self._set_phase(Phase.PAUSED)

    def toggle(self) -> None:
        if self._phase is Phase.RUNNING:
            self.pause()
        else:
            self.start()

    def restart(self) -> None:
        self.initialize()

    def _set_phase(self, phase: Phase) -> None:
        if phase is not self._phase:
            logger.debug("phase %s -> %s", self._phase.value, phase.value)
        self._phase = phase

    def set_direction(self, direction: Direction) -> None:
        direction = tuple(direction)
        if direction not in DIRECTIONS:
            return
        # Reversing would run the head straight into the neck.
        if is_opposite(self._direction, direction):
            return
        self._pending = direction

    def set_speed(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self._speed = speed
        self._interval = 1000.0 / speed

    def set_food(self, cell: Cell) -> None:
        cell = tuple(cell)
        if not self.config.in_bounds(cell):
            raise ValueError(f"food out of bounds at {cell}")
        if cell in self._occupied:
            raise ValueError(f"food on the snake at {cell}")
        self._food = cell

    def arrange(self, snake, direction: Direction = RIGHT, food: Optional[Cell] = None) -> None:
        """Replace the snake (tail-first cells) and direction, e.g. for scripted starts."""
        cells = [tuple(c) for c in snake]
        if not cells:
            raise ValueError("snake needs at least one cell")
        if len(set(cells)) != len(cells):
            raise ValueError("snake cells must be distinct")
        for cell in cells:
            if not self.config.in_bounds(cell):
                raise ValueError(f"snake out of bounds at {cell}")
        self._snake = deque(cells)
        self._occupied = set(cells)
        self._direction = tuple(direction)
        self._pending = self._direction
        if food is not None:
            self.set_food(food)
        elif self._food in self._occupied:
            self._food = self.place_food()

    def place_food(self) -> Cell:
        size = self.config.grid_size
        for _ in range(self.config.food_attempt_limit):
            pos = (self._rng.randrange(size), self._rng.randrange(size))
            if pos not in self._occupied:
                return pos

        free = [(x, y) for y in range(size) for x in range(size) if (x, y) not in self._occupied]
        if free:
            logger.debug("food sampling exhausted, picking from %d free cells", len(free))
            return self._rng.choice(free)
        logger.warning("board is full, food stays at %s", self._food)
        return self._food

    def advance(self, elapsed_ms: float) -> int:
        if self._phase is not Phase.RUNNING:
            return 0
        self._accumulator += elapsed_ms
        cap = self.config.max_steps_per_advance
        steps = 0
        while self._accumulator >= self._interval:
            if cap is not None and steps >= cap:
                self._accumulator %= self._interval
                break
            self.step()
            self._accumulator -= self._interval
            steps += 1
            if self._phase is not Phase.RUNNING:
                self._accumulator = 0.0
                break
        return steps

    def step(self) -> StepOutcome:
        if self._phase is not Phase.RUNNING:
            return StepOutcome.IDLE

        if not is_opposite(self._direction, self._pending):
            self._direction = self._pending

        head_x, head_y = self._snake[-1]
        candidate = (head_x + self._direction[0], head_y + self._direction[1])

        if not self.config.in_bounds(candidate):
            return self._game_over(StepOutcome.WALL)

        will_grow = candidate == self._food
        if candidate in self._occupied:
            # The tail cell is vacated this step unless the snake grows.
            if not (candidate == self._snake[0] and not will_grow):
                return self._game_over(StepOutcome.SELF)

        self._commit(candidate, will_grow)

        if not will_grow:
            return StepOutcome.MOVED

        self._score += self.config.food_score
        if self._score > self._high_score:
            self._high_score = self._score
            if self.records is not None:
                self.records.save_high_score(self._high_score)
        self._food = self.place_food()
        return StepOutcome.ATE

    def _commit(self, new_head: Cell, grow: bool) -> None:
        if grow:
            self._snake.append(new_head)
            self._occupied.add(new_head)
            return
        tail = self._snake.popleft()
        self._snake.append(new_head)
        # Moving into the old tail keeps that cell occupied.
        if tail != new_head:
            self._occupied.discard(tail)
            self._occupied.add(new_head)

    def _game_over(self, outcome: StepOutcome) -> StepOutcome:
        self._set_phase(Phase.OVER)
        logger.info(
            "game over (%s): score=%d length=%d", outcome.value, self._score, len(self._snake)
        )
        if self._score > 0 and self.records is not None:
            self.records.submit(self._score, self._clock())
        return outcome
