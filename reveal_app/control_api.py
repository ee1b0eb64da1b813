from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from reveal_app.easing import round_half_up


@dataclass
class ControlParameter:
    """
    Description of a single user-tunable control of the particle animator.

    For numeric parameters (type == "int" or "float"), the optional `step`
    value controls the increment used by slider widgets in the UI, and
    `minimum` / `maximum` bound the value accepted by coerce().
    """
    name: str
    label: str
    type: str  # "int", "float", "bool", "enum"
    default: Any
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Optional[List[Any]] = None
    step: Optional[float] = None
    description: str = ""

    def coerce(self, value: Any) -> Any:
        """
        Return `value` converted to this parameter's type and domain.

        Numbers are clamped into [minimum, maximum]; anything that cannot
        be parsed (or is NaN / infinite) falls back to the default.
        Enum values not listed in `choices` also fall back to the default.
        """
        if self.type == "bool":
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            if value is None:
                return bool(self.default)
            return bool(value)

        if self.type == "enum":
            choices = self.choices or []
            return value if value in choices else self.default

        try:
            number = float(value)
        except (TypeError, ValueError):
            number = float(self.default)
        if not math.isfinite(number):
            number = float(self.default)

        if self.minimum is not None:
            number = max(float(self.minimum), number)
        if self.maximum is not None:
            number = min(float(self.maximum), number)

        if self.type == "int":
            return round_half_up(number)
        return number
