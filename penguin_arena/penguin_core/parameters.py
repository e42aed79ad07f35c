"""
Environment Parameters
======================

Named float parameters pushed in by a trainer or curriculum (e.g. ``feed_radius``).
The agent reads them at episode start with a fallback default.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional


class EnvironmentParameters:
    """
    Key/value store of runtime environment parameters.

    Initial values usually come from the ``environment_parameters`` section of
    penguin_config.yaml; trainers may override them between episodes.
    """

    def __init__(self, initial: Optional[Mapping[str, float]] = None):
        self._defaults: Dict[str, float] = dict(initial or {})
        self._values: Dict[str, float] = dict(self._defaults)

    def get_with_default(self, key: str, default: float) -> float:
        """Return the parameter value, or ``default`` if it was never set."""
        return float(self._values.get(key, default))

    def set(self, key: str, value: float) -> None:
        self._values[key] = float(value)

    def update(self, values: Mapping[str, float]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def reset(self) -> None:
        """Drop runtime overrides and restore configured values."""
        self._values = dict(self._defaults)

    def as_dict(self) -> Dict[str, float]:
        return dict(self._values)
