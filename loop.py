# loop.py
"""
Frame scheduling for the particle field.

SimulationLoop is a two-state machine (Running / Paused) with a single
`frame(now)` entry point that runs at most one tick and one render. It does
not own a timer: an external driver (the main loop) calls `frame` once per
display refresh while `is_running` is true and simply stops calling it while
paused, so pausing never has in-flight work to cancel.
"""
import logging
from enum import Enum
from typing import Callable, Optional
from simulation import Simulation

# --- Data Contracts ---
#
# class SimulationLoop:
#   - __init__(self, simulation, render=None, reduced_motion=False):
#     - Inputs:
#       - simulation: the Simulation advanced once per frame.
#       - render: called after every simulated tick; may be None.
#       - reduced_motion: render frames without ever ticking.
#
#   - frame(self, now: float) -> bool:
#     - Outputs: True if a tick was simulated.
#     - Invariants: No tick runs while Paused. While Running but the host
#       section is not visible, the frame is consumed without ticking.
#
#   - set_foreground(self, foreground: bool) -> None
#   - set_section_visible(self, visible: bool) -> None
#     - Side Effects: Move between Running and Paused. No simulation state
#       is reset by either transition.


class LoopState(Enum):
    RUNNING = "running"
    PAUSED = "paused"


class SimulationLoop:
    """
    Drives one tick and one render per frame while Running.
    """
    def __init__(self, simulation: Simulation, render: Optional[Callable[[], None]] = None,
                 reduced_motion: bool = False):
        self.simulation = simulation
        self.render = render
        self.state = LoopState.RUNNING
        self.foreground = True
        self.frames_run = 0
        self.frames_skipped = 0
        # Frames still render, but the field never advances.
        self.reduced_motion = reduced_motion

    @property
    def is_running(self) -> bool:
        return self.state is LoopState.RUNNING

    @property
    def section_visible(self) -> bool:
        return self.simulation.inputs.visible

    def pause(self) -> None:
        if self.state is LoopState.PAUSED:
            return
        self.state = LoopState.PAUSED
        logging.info(f"Simulation paused after {self.simulation.step_count} ticks.")

    def resume(self) -> None:
        if self.state is LoopState.RUNNING:
            return
        self.state = LoopState.RUNNING
        logging.info(f"Simulation resumed at tick {self.simulation.step_count}.")

    def set_foreground(self, foreground: bool) -> None:
        """Host window shown/hidden (the equivalent of a tab going to the background)."""
        self.foreground = foreground
        if not foreground:
            self.pause()
        elif self.section_visible:
            self.resume()

    def set_section_visible(self, visible: bool) -> None:
        """The hosting section scrolled into or out of view."""
        self.simulation.inputs.visible = visible
        if visible and self.foreground:
            self.resume()

    def frame(self, now: float) -> bool:
        """
        Runs one scheduled frame: tick, then render.

        Args:
            now (float): Current time in milliseconds.

        Returns:
            bool: Whether a tick was simulated.
        """
        if self.state is LoopState.PAUSED:
            return False
        if not self.section_visible:
            self.frames_skipped += 1
            return False

        ticked = False if self.reduced_motion else self.simulation.step(now)
        if self.render is not None:
            self.render()
        self.frames_run += 1
        return ticked
