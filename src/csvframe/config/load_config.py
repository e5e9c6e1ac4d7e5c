import codecs
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

import yaml

from csvframe.utils.exceptions import ConfigurationError

DEFAULT_DELIMITER = ","
DEFAULT_MAX_FEATURES = 20
DEFAULT_MAX_ROWS = 25000

READ_ONLY_MODES = {"r", "rt"}

MALFORMED_NUMBER_POLICIES = {"zero", "error"}
COLUMN_MISMATCH_POLICIES = {"pad", "error"}


@dataclass(frozen=True)
class LoadConfig:
    """
    Everything a single load needs to know.

    Policies:
    - on_malformed_number: "zero" stores 0.0 and records an issue,
      "error" aborts the load.
    - on_column_mismatch: "pad" pads short rows with 0.0 and drops
      excess values, "error" aborts the load.
    """
    path: Optional[str] = None
    delimiter: str = DEFAULT_DELIMITER
    mode: str = "r"
    encoding: str = "utf-8-sig"

    max_features: int = DEFAULT_MAX_FEATURES
    max_rows: int = DEFAULT_MAX_ROWS

    detailed_statistics: bool = False

    on_malformed_number: str = "zero"
    on_column_mismatch: str = "pad"

    def validate(self) -> "LoadConfig":
        if not isinstance(self.delimiter, str) or self.delimiter == "":
            raise ConfigurationError("delimiter must be a non-empty string")
        if not isinstance(self.encoding, str):
            raise ConfigurationError(f"encoding must be a string, got {self.encoding!r}")
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ConfigurationError(f"Unknown encoding: '{self.encoding}'") from e
        if self.mode not in READ_ONLY_MODES:
            raise ConfigurationError(
                f"Invalid mode '{self.mode}'. Sources are opened read-only, "
                f"allowed: {sorted(READ_ONLY_MODES)}"
            )
        for name in ("max_features", "max_rows"):
            value = getattr(self, name)
            # bool is an int subclass
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.detailed_statistics, bool):
            raise ConfigurationError(
                f"detailed_statistics must be true or false, got {self.detailed_statistics!r}"
            )
        if self.on_malformed_number not in MALFORMED_NUMBER_POLICIES:
            raise ConfigurationError(
                f"Invalid on_malformed_number: '{self.on_malformed_number}'. "
                f"Allowed: {sorted(MALFORMED_NUMBER_POLICIES)}"
            )
        if self.on_column_mismatch not in COLUMN_MISMATCH_POLICIES:
            raise ConfigurationError(
                f"Invalid on_column_mismatch: '{self.on_column_mismatch}'. "
                f"Allowed: {sorted(COLUMN_MISMATCH_POLICIES)}"
            )
        return self

    def with_overrides(self, **overrides) -> "LoadConfig":
        """
        Copy with every non-None override applied.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoadConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown load options: {sorted(unknown)}")
        return cls(**data).validate()


@dataclass(frozen=True)
class ReportConfig:
    head_rows: int = 5
    tail_rows: int = 5
    sample_rows: int = 5
    seed: Optional[int] = None

    def validate(self) -> "ReportConfig":
        for name in ("head_rows", "tail_rows", "sample_rows"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")
        return self

    def with_overrides(self, **overrides) -> "ReportConfig":
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown report options: {sorted(unknown)}")
        return cls(**data).validate()


# ------------------------------------------
# YAML loading
# ------------------------------------------
def _section(cfg: Dict, name: str) -> Dict:
    section = cfg.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    return section


def build_configs(cfg: Dict) -> Tuple[LoadConfig, ReportConfig]:
    """
    Map the nested YAML layout onto LoadConfig / ReportConfig.

    source:   {path, delimiter, mode, encoding}
    limits:   {max_features, max_rows}
    policies: {on_malformed_number, on_column_mismatch, detailed_statistics}
    report:   {head_rows, tail_rows, sample_rows, seed}
    """
    if not isinstance(cfg, dict):
        raise ConfigurationError("Config root must be a mapping")

    load_options: Dict[str, Any] = {}
    load_options.update(_section(cfg, "source"))
    load_options.update(_section(cfg, "limits"))
    load_options.update(_section(cfg, "policies"))

    return LoadConfig.from_dict(load_options), ReportConfig.from_dict(_section(cfg, "report"))


def load_config_file(config_path: str) -> Tuple[LoadConfig, ReportConfig]:
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            cfg = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    load_config, report_config = build_configs(cfg or {})

    # Relative source paths resolve against the config file location
    if load_config.path and not os.path.isabs(load_config.path):
        base_dir = os.path.dirname(os.path.abspath(config_path))
        load_config = replace(load_config, path=os.path.join(base_dir, load_config.path))

    return load_config, report_config
