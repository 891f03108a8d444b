"""Load, validate, and hot-reload the AuraCycle cycle configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_cycle_config()`` to re-read from
disk after an edit.

Usage::

    from src.cycles.config_loader import get_cycle_config

    config = get_cycle_config()
    config.cycle_length.is_valid(29)        # True
    config.confidence.tier_for(3.4)         # "medium"
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger("auracycle.cycles.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class CycleLengthConfig:
    """Plausibility window for a single cycle length sample."""

    min_valid_days: int = 18
    max_valid_days: int = 50

    def is_valid(self, days: int) -> bool:
        return self.min_valid_days <= days <= self.max_valid_days


@dataclass
class ConfidenceConfig:
    """Standard deviation bands for prediction confidence."""

    high_max_std_days: float = 2.0
    medium_max_std_days: float = 5.0

    def tier_for(self, std_dev: float) -> str:
        """Return 'high', 'medium' or 'low' for a cycle length std dev."""
        if std_dev <= self.high_max_std_days:
            return "high"
        if std_dev <= self.medium_max_std_days:
            return "medium"
        return "low"


@dataclass
class RegularityConfig:
    """Regularity classification settings."""

    irregular_spread_days: int = 7
    min_samples: int = 2


@dataclass
class CycleDefaults:
    """Fallbacks used when the user has no settings saved."""

    average_cycle_length: int = 28
    average_period_length: int = 5


@dataclass
class CycleConfig:
    """Complete, validated cycle configuration.

    Attributes:
        version:                   Config schema version string.
        max_continuation_gap_days: Largest gap (days) that still continues
                                   the current period episode.
        cycle_length:              Valid cycle length window.
        confidence:                Confidence tier bands.
        min_cycles_for_average:    Samples needed for the "N-day average"
                                   insight wording.
        regularity:                Irregularity thresholds.
        defaults:                  Settings fallbacks.
    """

    version: str
    max_continuation_gap_days: int = 1
    cycle_length: CycleLengthConfig = field(default_factory=CycleLengthConfig)
    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)
    min_cycles_for_average: int = 3
    regularity: RegularityConfig = field(default_factory=RegularityConfig)
    defaults: CycleDefaults = field(default_factory=CycleDefaults)
    _raw: dict = field(default_factory=dict, repr=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Missing sections fall back to the built-in defaults; present values must
    be numeric and mutually consistent.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    errors: list[str] = []

    def _number(section: dict, key: str, default: float, path: str, cast=int):
        value = section.get(key, default)
        try:
            return cast(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be a number, got {value!r}")
            return cast(default)

    def _section(key: str) -> dict:
        value = raw.get(key) or {}
        if not isinstance(value, dict):
            errors.append(f"'{key}' must be a mapping")
            return {}
        return value

    version = str(raw.get("version", "1.0"))

    # ── Episodes ──
    ep_raw = _section("episodes")
    max_gap = _number(ep_raw, "max_continuation_gap_days", 1, "episodes")
    if max_gap < 0:
        errors.append("episodes.max_continuation_gap_days must be >= 0")

    # ── Cycle length window ──
    cl_raw = _section("cycle_length")
    cycle_length = CycleLengthConfig(
        min_valid_days=_number(cl_raw, "min_valid_days", 18, "cycle_length"),
        max_valid_days=_number(cl_raw, "max_valid_days", 50, "cycle_length"),
    )
    if cycle_length.min_valid_days < 1:
        errors.append("cycle_length.min_valid_days must be >= 1")
    if cycle_length.min_valid_days > cycle_length.max_valid_days:
        errors.append(
            f"cycle_length window is empty: min_valid_days={cycle_length.min_valid_days} "
            f"> max_valid_days={cycle_length.max_valid_days}"
        )

    # ── Confidence bands ──
    cf_raw = _section("confidence")
    confidence = ConfidenceConfig(
        high_max_std_days=_number(cf_raw, "high_max_std_days", 2.0, "confidence", float),
        medium_max_std_days=_number(cf_raw, "medium_max_std_days", 5.0, "confidence", float),
    )
    if confidence.high_max_std_days > confidence.medium_max_std_days:
        errors.append("confidence.high_max_std_days must not exceed medium_max_std_days")

    # ── Insight ──
    in_raw = _section("insight")
    min_cycles_for_average = _number(in_raw, "min_cycles_for_average", 3, "insight")

    # ── Regularity ──
    rg_raw = _section("regularity")
    regularity = RegularityConfig(
        irregular_spread_days=_number(rg_raw, "irregular_spread_days", 7, "regularity"),
        min_samples=_number(rg_raw, "min_samples", 2, "regularity"),
    )
    if regularity.min_samples < 2:
        errors.append("regularity.min_samples must be >= 2")

    # ── Defaults ──
    df_raw = _section("defaults")
    defaults = CycleDefaults(
        average_cycle_length=_number(df_raw, "average_cycle_length", 28, "defaults"),
        average_period_length=_number(df_raw, "average_period_length", 5, "defaults"),
    )
    if defaults.average_cycle_length < 1 or defaults.average_period_length < 1:
        errors.append("defaults must be positive day counts")

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        max_continuation_gap_days=max_gap,
        cycle_length=cycle_length,
        confidence=confidence,
        min_cycles_for_average=min_cycles_for_average,
        regularity=regularity,
        defaults=defaults,
        _raw=raw,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
