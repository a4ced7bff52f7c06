import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional

from colorbar.core.errors import ConfigError

logger = logging.getLogger(__name__)


class SourceType(Enum):
    VIDEO = "video"
    SCREEN = "screen"


# YAML / CLI option names that differ from the attribute names
_ALIASES = {
    "file": "reference_file",
}

_INT_MINIMUMS = {
    "grid_size": 1,
    "block_size": 1,
    "confirm_frames": 1,
    "monitor": 0,
    "update_interval_ms": 0,
    "log_every": 1,
}


@dataclass
class AppSettings:
    reference_file: Optional[str] = None
    threshold: Optional[int] = None

    # Fingerprint geometry; reference and probe always share these
    grid_size: int = 32
    block_size: int = 8

    # Consecutive matching frames required before a match is confirmed
    confirm_frames: int = 1

    # Frame source
    source: Optional[str] = None
    source_type: SourceType = SourceType.VIDEO
    monitor: int = 0
    update_interval_ms: int = 0

    # Log one in N per-frame results at INFO (all of them go to DEBUG)
    log_every: int = 1

    extra: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {}
        extra = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
            else:
                extra[key] = value
        if extra:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(map(str, extra))))

        if "source_type" in kwargs:
            try:
                kwargs["source_type"] = SourceType(str(kwargs["source_type"]).lower())
            except ValueError:
                raise ConfigError(f"Unknown source_type: {kwargs['source_type']!r}") from None
        return cls(extra=extra, **kwargs).validate()

    def to_dict(self) -> dict:
        return {
            "file": self.reference_file,
            "threshold": self.threshold,
            "grid_size": self.grid_size,
            "block_size": self.block_size,
            "confirm_frames": self.confirm_frames,
            "source": self.source,
            "source_type": self.source_type.value,
            "monitor": self.monitor,
            "update_interval_ms": self.update_interval_ms,
            "log_every": self.log_every,
        }

    def override(self, **values) -> "AppSettings":
        """Apply non-None values (e.g. command-line flags) on top of these settings."""
        for key, value in values.items():
            if value is None:
                continue
            name = _ALIASES.get(key, key)
            if name == "source_type" and not isinstance(value, SourceType):
                try:
                    value = SourceType(str(value).lower())
                except ValueError:
                    raise ConfigError(f"Unknown source_type: {value!r}") from None
            setattr(self, name, value)
        return self.validate()

    def validate(self) -> "AppSettings":
        """Check option types and ranges; raise ConfigError on the first bad one.

        ``threshold`` is left to the reference store, which bounds it by the
        fingerprint width.
        """
        for name, minimum in _INT_MINIMUMS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"Option '{name}' must be an integer, got {value!r}")
            if value < minimum:
                raise ConfigError(f"Option '{name}' must be >= {minimum}, got {value}")
        if self.reference_file is not None and not isinstance(self.reference_file, str):
            raise ConfigError(f"Option 'file' must be a path, got {self.reference_file!r}")
        if isinstance(self.source, int) and not isinstance(self.source, bool):
            # YAML reads a bare camera index as an int
            self.source = str(self.source)
        if self.source is not None and not isinstance(self.source, str):
            raise ConfigError(f"Option 'source' must be a path, URL or camera index, got {self.source!r}")
        return self
