"""Configuration handling for branchsweep."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

DEFAULT_STALE_DAYS = 90
DEFAULT_BEHIND_THRESHOLD = 50


@dataclass
class Config:
    """Settings for one run, validated on creation."""

    path: Path = field(default_factory=lambda: Path("."))
    trunk: Optional[str] = None  # None = detect from origin/HEAD, main, master
    stale_days: int = DEFAULT_STALE_DAYS
    behind_threshold: int = DEFAULT_BEHIND_THRESHOLD
    unsafe: bool = False
    sync: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.path = Path(self.path)
        self._validate_stale_days()
        self._validate_behind_threshold()
        self._validate_trunk()

    def _validate_stale_days(self):
        if self.stale_days <= 0:
            raise ValueError(f"stale_days must be positive, got {self.stale_days}")

    def _validate_behind_threshold(self):
        if self.behind_threshold < 0:
            raise ValueError(f"behind_threshold must not be negative, got {self.behind_threshold}")

    def _validate_trunk(self):
        """Strip the trunk name; an explicitly blank name is an error."""
        if self.trunk is None:
            return
        self.trunk = self.trunk.strip()
        if not self.trunk:
            raise ValueError("trunk cannot be empty")

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from a dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_dict.items() if k in known_fields})
