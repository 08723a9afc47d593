"""Console Configuration.

Pydantic models for configuring retention, styling, refresh cadence and
task lints. Loaded from YAML with optional overrides.

Usage:
    config = ConsoleConfig.from_yaml("vigil.yaml", {"retain_for_secs": 30})
    state = config.build_state()
    view = View(config.styles())
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field

from vigil.state import State
from vigil.styles import Palette, Styles
from vigil.warnings import Linter, SelfWakePercent


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge override into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class LintConfig(BaseModel):
    """Task lint thresholds. ``None`` disables a lint."""

    self_wake_percent: int | None = Field(default=50, ge=0, le=100)


class ConsoleConfig(BaseModel):
    """Main console configuration.

    Attributes:
        retain_for_secs: How long an entity may go without updates before it
            is evicted, measured on the producer's clock. None keeps
            everything.
        palette: Terminal color support.
        no_colors: Disable colors regardless of palette.
        ascii_only: Avoid non-ASCII glyphs.
        refresh_rate: Redraws per second (also the retention cadence).
        lints: Task lint configuration.
    """

    retain_for_secs: float | None = Field(default=6.0, ge=0)
    palette: Literal["none", "8", "16", "all"] = "all"
    no_colors: bool = False
    ascii_only: bool = False
    refresh_rate: float = Field(default=4.0, gt=0)
    lints: LintConfig = Field(default_factory=LintConfig)

    @property
    def retain_for(self) -> timedelta | None:
        if self.retain_for_secs is None:
            return None
        return timedelta(seconds=self.retain_for_secs)

    @classmethod
    def from_yaml(cls, path: Path | str, overrides: dict[str, Any] | None = None) -> ConsoleConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file.
            overrides: Optional dict of values to override.

        Returns:
            Validated ConsoleConfig instance.

        Raises:
            ValueError: If the YAML file is empty, malformed, or not a mapping.
        """
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(
                f"Console YAML must be a mapping, got {type(data).__name__}: {path}"
            )

        if overrides:
            data = deep_merge(data, overrides)

        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def styles(self) -> Styles:
        palette = Palette.NO_COLORS if self.no_colors else Palette(self.palette)
        return Styles(palette=palette, utf8=not self.ascii_only)

    def task_linters(self) -> list[Linter]:
        linters: list[Linter] = []
        if self.lints.self_wake_percent is not None:
            linters.append(SelfWakePercent(self.lints.self_wake_percent))
        return linters

    def build_state(self) -> State:
        return (
            State(self.styles())
            .with_retain_for(self.retain_for)
            .with_task_linters(self.task_linters())
        )


__all__ = ["ConsoleConfig", "LintConfig", "deep_merge"]
