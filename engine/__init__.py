"""
engine/
-------
Playback & recording layer.

    from engine import Stepper, Recorder, replay
"""

from engine.recorder import Recorder, RunMetrics, ReplayState, replay
from engine.stepper  import Stepper, StepperState, SPEED_PRESETS

__all__ = [
    "Stepper",
    "StepperState",
    "SPEED_PRESETS",
    "Recorder",
    "RunMetrics",
    "ReplayState",
    "replay",
]
