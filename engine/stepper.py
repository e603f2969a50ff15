"""
stepper.py — Step-by-Step Playback Engine
==========================================
The Stepper is the ONLY object the UI interacts with during a run.
It owns the StepwiseDijkstra instance, buffers every StepResult it has
pulled (enabling rewind), and exposes a play/pause/next/prev/speed API.

State machine:
    IDLE  →  start()  →  PAUSED
    PAUSED  →  play()   →  PLAYING
    PLAYING →  pause()  →  PAUSED
    PLAYING →  (engine finished) → FINISHED
    any     →  reset()  →  IDLE

Rewind only moves the display cursor: the engine itself runs forward
only.  The state a past step left behind is rebuilt on demand from the
buffered descriptors (see recorder.replay).

Thread safety:
  This class is NOT thread-safe.  The UI must call advance() / play()
  from a single thread; the Flask layer holds a per-run lock.
"""

import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from algorithms import StepResult, StepwiseDijkstra
from engine.recorder import ReplayState, replay

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class StepperState(Enum):
    IDLE     = "idle"
    PAUSED   = "paused"
    PLAYING  = "playing"
    FINISHED = "finished"


# ---------------------------------------------------------------------------
# Speed presets (seconds per step)
# ---------------------------------------------------------------------------
SPEED_PRESETS = {
    "slow":   1.0,    # teaching mode
    "medium": 0.4,
    "fast":   0.15,   # demo mode
    "turbo":  0.05,
}


# ---------------------------------------------------------------------------
# Stepper
# ---------------------------------------------------------------------------
class Stepper:
    """
    Attributes:
        state       : Current StepperState.
        engine      : The live StepwiseDijkstra (None while IDLE).
        steps       : Every StepResult pulled so far (buffer for rewind).
        current_idx : Index into `steps` currently displayed (-1 = initial state).
        speed       : Seconds between auto-advance ticks.
        on_step     : Optional callback(StepResult) fired every time the
                      displayed step changes.  The UI hooks its redraw here.
    """

    def __init__(self, on_step: Optional[Callable[[StepResult], None]] = None):
        self.engine:      Optional[StepwiseDijkstra] = None
        self.steps:       List[StepResult] = []
        self.current_idx: int              = -1
        self.state:       StepperState     = StepperState.IDLE
        self.speed:       float            = SPEED_PRESETS["medium"]
        self.on_step:     Optional[Callable[[StepResult], None]] = on_step

        # for auto-play timing
        self._last_tick: float = 0.0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, engine: StepwiseDijkstra) -> None:
        """Attach a fresh engine; the display starts at the initial state."""
        self.engine      = engine
        self.steps       = []
        self.current_idx = -1
        self.state       = StepperState.FINISHED if engine.is_finished else StepperState.PAUSED
        logger.debug("stepper attached to %r", engine)

    def reset(self) -> None:
        """Back to IDLE; caller must call start() again."""
        self.engine      = None
        self.steps       = []
        self.current_idx = -1
        self.state       = StepperState.IDLE

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def next_step(self) -> bool:
        """Advance one step forward.  Returns False if already at end."""
        target = self.current_idx + 1
        # if we haven't pulled this step yet, try
        if target >= len(self.steps) and not self._fetch_next():
            self.state = StepperState.FINISHED
            return False
        self._goto(target)
        if self.is_at_end and (self.engine is None or self.engine.is_finished):
            self.state = StepperState.FINISHED
        return True

    def prev_step(self) -> bool:
        """Rewind one step.  Returns False if already at the initial state."""
        if self.current_idx < 0:
            return False
        self._goto(self.current_idx - 1)
        if self.state == StepperState.FINISHED:
            self.state = StepperState.PAUSED
        return True

    def goto_step(self, idx: int) -> bool:
        """Jump to step `idx` (-1 = initial state), pulling forward if needed."""
        while idx >= len(self.steps):
            if not self._fetch_next():
                break
        if -1 <= idx < len(self.steps):
            self._goto(idx)
            if self.state == StepperState.FINISHED and not self.is_at_end:
                self.state = StepperState.PAUSED
            return True
        return False

    def rewind(self) -> None:
        """Jump back to the initial state."""
        self._goto(-1)
        if self.state == StepperState.FINISHED:
            self.state = StepperState.PAUSED

    def jump_to_end(self) -> None:
        """Pull every remaining step and jump to the final one."""
        while self._fetch_next():
            pass
        self._goto(len(self.steps) - 1)
        self.state = StepperState.FINISHED

    # ------------------------------------------------------------------
    # Play / Pause
    # ------------------------------------------------------------------
    def play(self) -> None:
        if self.state in (StepperState.FINISHED, StepperState.IDLE):
            return
        self.state      = StepperState.PLAYING
        self._last_tick = time.monotonic()

    def pause(self) -> None:
        if self.state == StepperState.PLAYING:
            self.state = StepperState.PAUSED

    def toggle_play(self) -> None:
        if self.state == StepperState.PLAYING:
            self.pause()
        else:
            self.play()

    # ------------------------------------------------------------------
    # Tick  (call this from your event loop / timer)
    # ------------------------------------------------------------------
    def tick(self, now: Optional[float] = None) -> bool:
        """
        Call periodically (e.g. every 50 ms).  If playing and enough
        time has elapsed, advances one step.  Returns True if a step
        was taken.
        """
        if self.state != StepperState.PLAYING:
            return False
        now = time.monotonic() if now is None else now
        if now - self._last_tick < self.speed:
            return False
        self._last_tick = now
        return self.next_step()

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------
    def set_speed(self, preset: str) -> None:
        self.speed = SPEED_PRESETS.get(preset, SPEED_PRESETS["medium"])

    def set_speed_value(self, seconds: float) -> None:
        self.speed = max(0.02, seconds)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def current_step(self) -> Optional[StepResult]:
        if 0 <= self.current_idx < len(self.steps):
            return self.steps[self.current_idx]
        return None

    @property
    def total_steps_fetched(self) -> int:
        return len(self.steps)

    @property
    def is_at_end(self) -> bool:
        return self.current_idx == len(self.steps) - 1

    @property
    def is_finished(self) -> bool:
        return self.state == StepperState.FINISHED

    @property
    def is_playing(self) -> bool:
        return self.state == StepperState.PLAYING

    def displayed_state(self) -> ReplayState:
        """Distances / predecessors / unvisited as of the displayed step."""
        if self.engine is None:
            raise RuntimeError("Call start() first.")
        return replay(
            self.engine.source,
            self.engine.vertices(),
            self.steps[: self.current_idx + 1],
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _fetch_next(self) -> bool:
        """Pull one StepResult from the engine into the buffer."""
        if self.engine is None or not self.engine.has_next_step():
            return False
        self.steps.append(self.engine.step())
        return True

    def _goto(self, idx: int) -> None:
        self.current_idx = idx
        step = self.current_step
        if self.on_step and step is not None:
            self.on_step(step)
