"""
Relic Configuration Management
===============================

Centralized configuration for the Relic decoder and its command-line
front-end, using Python dataclasses and TOML-based persistence.

Every section falls back to its dataclass defaults, so a missing or
partial ``config.toml`` never prevents the decoder from running.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


# ========================== Tool-Specific Config ===========================


@dataclass(frozen=False, slots=True)
class DecoderConfig:
    """Configuration for the serialization stream decoder.

    Attributes:
        max_stream_size: Largest input file (bytes) the engine will load.
        connect_member_classes: Run the inner-class reconnector after decode.
        indent_width: Spaces per nesting level in printed class source.
        output_format: Default report format (``"json"`` or ``"java"``).
    """

    max_stream_size: int = 52_428_800  # 50 MiB
    connect_member_classes: bool = True
    indent_width: int = 2
    output_format: str = "json"


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings: logging verbosity, log sinks and the banner version."""

    log_level: str = "INFO"
    log_file: str = ""  # empty disables file logging
    log_json: bool = False
    debug: bool = False
    version: str = "1.0.0"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class RelicConfig:
    """Master configuration aggregating global and decoder settings.

    Usage:
        >>> config = RelicConfig.load()                  # from default path
        >>> config = RelicConfig.load("custom.toml")     # from custom path
        >>> config.relic.connect_member_classes
        True
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    relic: DecoderConfig = field(default_factory=DecoderConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> RelicConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`RelicConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            relic=cls._build_section(DecoderConfig, raw.get("relic", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored so that newer config
        files keep loading on older versions.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)
