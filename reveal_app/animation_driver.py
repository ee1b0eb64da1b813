"""
Animation driver for the particle title reveal.

The driver owns everything that changes during a run: the AnimationState,
the particle pool and the text layout. It is free of Qt
widgets: time comes from an injected clock, frames from an injected
FrameScheduler, pixels go to a DrawingSurface. The stage widget wires the
Qt pieces in; tests wire fakes.

Lifecycle:

    idle --start()--> running --(progress == 1 and no particles)--> finished
                        ^  |
              resume()  |  |  suspend()
                        |  v
                      suspended

start() may be called in any state and always restarts from zero.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from reveal_app.easing import clamp, round_half_up
from reveal_app.particles import ParticlePool, max_particles_for_device
from reveal_app.reveal_config import DEFAULT_TITLE, RevealConfig, sanitize_text
from reveal_app.reveal_renderer import BASELINE_RATIO, LeadPoint, RevealRenderer
from reveal_app.scheduler import Clock, FrameScheduler, monotonic_ms
from reveal_app.surface import DrawingSurface, FontSpec
from reveal_app.text_layout import TextLayout, build_layout, fit_font_size

logger = logging.getLogger(__name__)


# Full reveal takes this long at text_speed == 1.
BASE_DURATION_MS = 2600.0
# Longest simulated step; longer gaps (stalls, hidden window) are capped.
MAX_FRAME_DT_MS = 42.0
# Step used when two frames carry the same timestamp.
DEFAULT_FRAME_DT_MS = 16.0
# density * dt / SPAWN_CARRY_SCALE particles are credited per frame.
SPAWN_CARRY_SCALE = 220.0
# Extra per-frame burst: round(density / BURST_DIVISOR), at least 1.
BURST_DIVISOR = 9.0


class AnimationPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUSPENDED = "suspended"
    FINISHED = "finished"


@dataclass
class AnimationState:
    """Per-run animation state, reset by every start()."""

    progress: float = 0.0
    running: bool = False
    finished: bool = False
    start_timestamp: float = 0.0
    last_frame_timestamp: float = 0.0
    spawn_carry: float = 0.0


class ParticleRevealDriver:
    """
    Runs the title reveal: progress over time, particle emission, frame
    loop, and reactions to resize / visibility / control changes.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        scheduler: FrameScheduler,
        clock: Clock = monotonic_ms,
        config: Optional[RevealConfig] = None,
        text: str = DEFAULT_TITLE,
        reduced_motion: bool = False,
        max_particles: Optional[int] = None,
        rng: Optional[random.Random] = None,
        on_running_changed: Optional[Callable[[bool], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
        on_render: Optional[Callable[[], None]] = None,
    ) -> None:
        self.surface = surface
        self.renderer = RevealRenderer(surface)
        self._scheduler = scheduler
        self._clock = clock

        if max_particles is None:
            max_particles = max_particles_for_device()
        self.pool = ParticlePool(max_particles, rng=rng)
        self.state = AnimationState()

        self._config: RevealConfig = config or RevealConfig()
        self._next_config: RevealConfig = self._config
        self._text: str = sanitize_text(text)
        self._next_text: str = self._text

        # Queried once by the host, never re-polled.
        self._reduced_motion: bool = bool(reduced_motion)

        self.font: FontSpec = FontSpec(size_px=62)
        self.baseline_y: float = 0.0
        self.layout: Optional[TextLayout] = None

        self._frame_handle: Optional[int] = None
        self._suspended: bool = False
        self._mounted: bool = False

        self._on_running_changed = on_running_changed
        self._on_finished = on_finished
        self._on_render = on_render

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def config(self) -> RevealConfig:
        """Configuration of the current (or last) run."""
        return self._config

    @property
    def text(self) -> str:
        return self._text

    @property
    def reduced_motion(self) -> bool:
        return self._reduced_motion

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def frame_pending(self) -> bool:
        return self._frame_handle is not None

    @property
    def duration_ms(self) -> float:
        return BASE_DURATION_MS / self._config.text_speed

    @property
    def phase(self) -> AnimationPhase:
        if self.state.running:
            return AnimationPhase.SUSPENDED if self._suspended else AnimationPhase.RUNNING
        if self.state.finished:
            return AnimationPhase.FINISHED
        return AnimationPhase.IDLE

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------
    def set_config(self, config: RevealConfig) -> None:
        """Store the configuration for the next start(); the current run keeps its snapshot."""
        self._next_config = config

    def set_text(self, text: str) -> None:
        """Store the title for the next start()."""
        self._next_text = sanitize_text(text)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def mount(self) -> bool:
        """
        Prepare the layout and either start the animation or, under
        reduced motion, show the final frame right away.

        Returns False (and does nothing) when the surface has no drawing
        context.
        """
        if not self.surface.is_ready():
            logger.warning("Particle animator not mounted: no drawing surface available")
            return False

        self._mounted = True
        if self._reduced_motion:
            logger.info("Reduced motion requested: rendering the static title")
            self._apply_next_run_inputs()
            self._reset_run_state()
            self.render_static()
        else:
            self.start()
        return True

    def start(self, config: Optional[RevealConfig] = None, text: Optional[str] = None) -> None:
        """Restart the reveal from zero with the latest configuration and title."""
        if config is not None:
            self.set_config(config)
        if text is not None:
            self.set_text(text)

        self._cancel_frame()
        self._apply_next_run_inputs()
        self._reset_run_state()

        if self._reduced_motion:
            self.render_static()
            return

        now = self._clock()
        self.state.running = True
        self.state.start_timestamp = now
        self.state.last_frame_timestamp = now
        logger.debug(
            "Reveal started: %d units, %.0f ms, mode=%s",
            len(self.layout.units) if self.layout else 0,
            self.duration_ms,
            self._config.mode,
        )
        self._notify_running(True)
        self._schedule_frame()

    def frame(self, now: float) -> None:
        """Render one frame at timestamp *now* (ms) and schedule the next one."""
        self._frame_handle = None
        state = self.state
        if not state.running:
            return

        elapsed = now - state.last_frame_timestamp
        dt = min(MAX_FRAME_DT_MS, elapsed if elapsed > 0 else DEFAULT_FRAME_DT_MS)
        state.last_frame_timestamp = now

        progress = clamp((now - state.start_timestamp) / self.duration_ms, 0.0, 1.0)
        state.progress = max(state.progress, progress)

        config = self._config
        with self.surface.frame():
            self.surface.clear()
            self.renderer.draw_backdrop()
            lead = self.renderer.draw_revealed_text(
                self._current_layout(), state.progress, config, self.baseline_y
            )
            if state.progress < 1.0:
                self._emit_particles(lead, dt)
            self.pool.step(dt, config, self.surface)

        self._notify_render()

        if state.progress >= 1.0 and len(self.pool) == 0:
            self._finish()
            return

        self._schedule_frame()

    def suspend(self) -> None:
        """Stop scheduling frames (window hidden) without touching the run state."""
        self._cancel_frame()
        if self.state.running and not self._suspended:
            self._suspended = True
            logger.debug("Reveal suspended at progress %.3f", self.state.progress)

    def resume(self) -> None:
        """Resume a suspended run, ignoring the time spent hidden."""
        if not self._suspended:
            return
        self._suspended = False
        if not self.state.running or self._reduced_motion:
            return
        self.state.last_frame_timestamp = self._clock()
        if self._frame_handle is None:
            logger.debug("Reveal resumed at progress %.3f", self.state.progress)
            self._schedule_frame()

    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        """
        Resize the surface and rebuild the layout.

        A running reveal keeps its progress and particles; otherwise the
        fully revealed title is drawn again.
        """
        self.surface.resize(width, height, pixel_ratio)
        self._refresh_text_metrics()
        self._rebuild_layout()

        if not self._mounted:
            return
        if self._reduced_motion or not self.state.running:
            self.render_static()

    def render_static(self) -> None:
        """Draw the fully revealed title without particles and mark the run finished."""
        self._cancel_frame()
        with self.surface.frame():
            self.surface.clear()
            self.renderer.draw_backdrop()
            self.renderer.draw_revealed_text(
                self._current_layout(), 1.0, self._config, self.baseline_y
            )

        was_running = self.state.running
        self.state.progress = 1.0
        self.state.running = False
        self.state.finished = True
        self._suspended = False

        self._notify_render()
        if was_running:
            self._notify_running(False)
        if self._on_finished is not None:
            self._on_finished()

    def stop(self) -> None:
        """Cancel any pending frame (used when the host is torn down)."""
        self._cancel_frame()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _apply_next_run_inputs(self) -> None:
        self._config = self._next_config
        self._text = self._next_text
        self._refresh_text_metrics()
        self._rebuild_layout()

    def _reset_run_state(self) -> None:
        self.pool.clear()
        self.state = AnimationState()
        self._suspended = False

    def _refresh_text_metrics(self) -> None:
        self.baseline_y = self.surface.height * BASELINE_RATIO
        self.font = FontSpec(size_px=fit_font_size(self.surface, self._text, self.surface.width))

    def _rebuild_layout(self) -> None:
        self.layout = build_layout(
            self.surface,
            self._text,
            self.font,
            self.surface.width,
            mode=self._config.mode,
        )

    def _current_layout(self) -> TextLayout:
        if self.layout is None:
            self._refresh_text_metrics()
            self._rebuild_layout()
        return self.layout  # type: ignore[return-value]

    def _emit_particles(self, lead: LeadPoint, dt: float) -> None:
        """
        Two emission terms: fractional carry (smooth at low density) plus
        a flat per-frame burst (visible at high density).
        """
        config = self._config
        density = float(config.density)
        if density <= 0.0:
            return

        state = self.state
        state.spawn_carry += density * dt / SPAWN_CARRY_SCALE
        whole = int(state.spawn_carry)
        if whole > 0:
            state.spawn_carry -= whole
            for _ in range(whole):
                self.pool.spawn(lead.x, lead.y, 1, config)

        burst = max(1, round_half_up(density / BURST_DIVISOR))
        self.pool.spawn(lead.x, lead.y, burst, config)

    def _finish(self) -> None:
        self.state.running = False
        self.state.finished = True
        self._suspended = False
        logger.debug("Reveal finished")
        self._notify_running(False)
        if self._on_finished is not None:
            self._on_finished()

    def _schedule_frame(self) -> None:
        if self._frame_handle is not None:
            return
        self._frame_handle = self._scheduler.schedule(self.frame)

    def _cancel_frame(self) -> None:
        if self._frame_handle is not None:
            self._scheduler.cancel(self._frame_handle)
            self._frame_handle = None

    def _notify_running(self, running: bool) -> None:
        if self._on_running_changed is not None:
            self._on_running_changed(running)

    def _notify_render(self) -> None:
        if self._on_render is not None:
            self._on_render()
