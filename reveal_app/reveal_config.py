"""
Control surface adapter for the particle title animator.

This module turns raw control values (slider positions, checkbox states,
values restored from QSettings, command-line overrides...) into an
immutable RevealConfig snapshot. Every value is coerced into its declared
domain here, so the animation core never sees an out-of-range number.

It also builds the human-readable readouts shown next to each control and
sanitizes the free-form title text.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from reveal_app.control_api import ControlParameter
from reveal_app.easing import round_half_up


DEFAULT_TITLE = "From Presentation to Proof"

REVEAL_MODES = ["letter", "word"]

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class RevealConfig:
    """Configuration snapshot consumed by the animation driver for one run."""

    mode: str = "letter"
    fade_in: bool = True
    overlap: float = 0.2
    text_speed: float = 1.0
    particle_speed: float = 1.0
    density: float = 16
    lifespan: float = 1100
    size: float = 3.5
    opacity: float = 0.7


def control_parameters() -> Dict[str, ControlParameter]:
    """
    Return the declaration of every control exposed by the animator.

    The order of the dictionary is the order used to build the UI.
    """
    return {
        "mode": ControlParameter(
            name="mode",
            label="Reveal by",
            type="enum",
            default="letter",
            choices=list(REVEAL_MODES),
            description="Reveal granularity: one character or one word at a time.",
        ),
        "fade_in": ControlParameter(
            name="fade_in",
            label="Fade in",
            type="bool",
            default=True,
            description="Soft per-unit fade. When off, units appear all at once (typewriter look).",
        ),
        "overlap": ControlParameter(
            name="overlap",
            label="Overlap",
            type="float",
            default=0.2,
            minimum=0.0,
            maximum=0.95,
            step=0.05,
            description="Fraction of a unit's reveal window shared with the next unit.",
        ),
        "text_speed": ControlParameter(
            name="text_speed",
            label="Text speed",
            type="float",
            default=1.0,
            minimum=0.2,
            maximum=3.0,
            step=0.1,
            description="Multiplier on the reveal speed (inverse of the run duration).",
        ),
        "particle_speed": ControlParameter(
            name="particle_speed",
            label="Particle speed",
            type="float",
            default=1.0,
            minimum=0.2,
            maximum=3.0,
            step=0.1,
            description="Multiplier on particle velocity and gravity.",
        ),
        "density": ControlParameter(
            name="density",
            label="Density",
            type="int",
            default=16,
            minimum=0,
            maximum=60,
            step=1,
            description="Particles emitted per time unit. 0 disables emission.",
        ),
        "lifespan": ControlParameter(
            name="lifespan",
            label="Lifespan",
            type="int",
            default=1100,
            minimum=200,
            maximum=3000,
            step=50,
            description="Base particle lifetime in milliseconds.",
        ),
        "size": ControlParameter(
            name="size",
            label="Size",
            type="float",
            default=3.5,
            minimum=0.5,
            maximum=10.0,
            step=0.5,
            description="Base particle radius in pixels.",
        ),
        "opacity": ControlParameter(
            name="opacity",
            label="Opacity",
            type="float",
            default=0.7,
            minimum=0.0,
            maximum=1.0,
            step=0.05,
            description="Base particle opacity.",
        ),
    }


def config_from_values(values: Mapping[str, Any]) -> RevealConfig:
    """
    Build a RevealConfig from raw control values.

    Missing keys use the parameter default; invalid values are clamped or
    replaced by the default. Unknown keys are ignored.
    """
    params = control_parameters()
    coerced: Dict[str, Any] = {}
    for name, param in params.items():
        coerced[name] = param.coerce(values.get(name, param.default))
    return RevealConfig(**coerced)


def config_to_values(config: RevealConfig) -> Dict[str, Any]:
    """Return a plain dict (suitable for QSettings / JSON) for *config*."""
    return asdict(config)


def format_readouts(config: RevealConfig) -> Dict[str, str]:
    """Human-readable value labels shown next to each control."""
    return {
        "mode": config.mode,
        "fade_in": "on" if config.fade_in else "off",
        "overlap": f"{round_percent(config.overlap)}%",
        "text_speed": f"{config.text_speed:.1f}×",
        "particle_speed": f"{config.particle_speed:.1f}×",
        "density": f"{round_half_up(config.density)}",
        "lifespan": f"{round_half_up(config.lifespan)}ms",
        "size": f"{config.size:.1f}",
        "opacity": f"{config.opacity:.2f}",
    }


def round_percent(fraction: float) -> int:
    # 0.2 * 100 is 20.000000000000004; round before truncating.
    return round_half_up(fraction * 100.0)


def sanitize_text(raw: Any) -> str:
    """
    Collapse whitespace runs to a single space and trim the ends.

    An empty result falls back to DEFAULT_TITLE.
    """
    cleaned = _WHITESPACE_RUN.sub(" ", str(raw or "")).strip()
    return cleaned or DEFAULT_TITLE
