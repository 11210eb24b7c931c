"""
config.py

Typed configuration loading and validation for GridBeat.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If GRIDBEAT_CONFIG_PATH is set, that file is used and must exist.
- Otherwise GridBeat searches these paths in order and uses the first one that exists:
  1) ./gridbeat_config.json (current working directory)
  2) <user config dir>/GridBeat/gridbeat_config.json
- When no file is found the built-in defaults are used.

Example config file (gridbeat_config.json)
{
  "timing": {
    "growth_duration_ms": 1000,
    "miss_grace_ms": 50
  },
  "harness": {
    "tick_interval_ms": 16,
    "sample_bpm": 100
  },
  "logging": {
    "level": "INFO"
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator


class TimingConfig(BaseModel):
    growth_duration_ms: int = Field(default=1000, gt=0, description="Time for a circle to reach full size.")
    hit_window_early_ms: int = Field(default=150, ge=0, description="Hit window opening before full size.")
    hit_window_late_ms: int = Field(default=200, ge=0, description="Hit window closing after full size.")
    miss_grace_ms: int = Field(default=50, ge=0, description="Buffer after the hit window before a miss is marked.")
    feedback_grace_ms: int = Field(default=100, ge=0, description="Time a resolved circle stays visible.")
    spawn_lookahead_ms: int = Field(default=10, ge=0, description="Forward tolerance for firing spawn events.")
    overshoot_growth: float = Field(default=1.1, gt=0.0, description="Growth past which unresolved circles are dropped.")
    perfect_window_ms: int = Field(default=25, ge=0)
    great_window_ms: int = Field(default=50, ge=0)
    good_window_ms: int = Field(default=100, ge=0)

    @model_validator(mode="after")
    def validate_rating_windows(self) -> "TimingConfig":
        if not (self.perfect_window_ms <= self.great_window_ms <= self.good_window_ms):
            raise ValueError("rating windows must satisfy perfect <= great <= good")
        return self


class HarnessConfig(BaseModel):
    tick_interval_ms: int = Field(default=16, ge=1, description="Frame tick cadence for the Qt harness.")
    completion_check_interval_ms: int = Field(default=100, ge=1, le=100, description="Track end check cadence.")
    sample_bpm: float = Field(default=100.0, gt=0.0, description="Tempo of the built-in sample track.")
    window_width: int = Field(default=600, ge=200)
    window_height: int = Field(default=720, ge=200)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if normalized not in allowed:
            raise ValueError("level must be one of: DEBUG, INFO, WARNING, ERROR")
        return normalized


class AppConfig(BaseModel):
    timing: TimingConfig = Field(default_factory=TimingConfig)
    harness: HarnessConfig = Field(default_factory=HarnessConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("GridBeat", "GridBeat"))
    return [
        Path.cwd() / "gridbeat_config.json",
        config_directory / "gridbeat_config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("GRIDBEAT_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - GRIDBEAT_GROWTH_DURATION_MS
    - GRIDBEAT_MISS_GRACE_MS
    - GRIDBEAT_TICK_INTERVAL_MS
    - GRIDBEAT_SAMPLE_BPM
    - GRIDBEAT_LOG_LEVEL
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    timing_section = ensure_nested(updated_config, "timing")
    harness_section = ensure_nested(updated_config, "harness")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            return

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            return

    override_int("GRIDBEAT_GROWTH_DURATION_MS", timing_section, "growth_duration_ms")
    override_int("GRIDBEAT_MISS_GRACE_MS", timing_section, "miss_grace_ms")
    override_int("GRIDBEAT_TICK_INTERVAL_MS", harness_section, "tick_interval_ms")
    override_float("GRIDBEAT_SAMPLE_BPM", harness_section, "sample_bpm")
    override_string("GRIDBEAT_LOG_LEVEL", logging_section, "level")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict: Dict[str, Any] = {}
    if resolved_path is not None:
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "(defaults)"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(), ensure_ascii=False, indent=2)


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": json.loads(to_json(config)),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
