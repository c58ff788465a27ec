"""Settings for the claim registry tools.

Resolution order, highest first: environment variables, ``config.yaml`` in the
home directory, built-in defaults.

Environment variables:
- ``CLAIMREG_HOME`` -- data directory (default ``~/.claimreg``)
- ``CLAIMREG_AUDIT_LOG`` -- ``0``/``false``/``no`` disables the audit log
- ``CLAIMREG_LOG_LEVEL`` -- logging level name (default ``WARNING``)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import yaml

CONFIG_FILE = "config.yaml"
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Settings:
    home: Path
    audit_log: bool = True
    log_level: str = "WARNING"

    @property
    def claims_path(self) -> Path:
        return self.home / "claims.json"

    @property
    def chain_path(self) -> Path:
        return self.home / "chain.json"

    @property
    def audit_dir(self) -> Path:
        return self.home / "audit_logs"


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSE_VALUES


def _read_config_file(home: Path) -> dict:
    path = home / CONFIG_FILE
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(
    home: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from ``home`` / the environment / config file."""
    env = os.environ if env is None else env

    if home is None:
        home = env.get("CLAIMREG_HOME") or Path.home() / ".claimreg"
    home_path = Path(home).expanduser()

    file_values = _read_config_file(home_path)

    audit_log = _as_bool(file_values.get("audit_log", True))
    if "CLAIMREG_AUDIT_LOG" in env:
        audit_log = _as_bool(env["CLAIMREG_AUDIT_LOG"])

    log_level = str(env.get("CLAIMREG_LOG_LEVEL") or file_values.get("log_level", "WARNING"))

    return Settings(home=home_path, audit_log=audit_log, log_level=log_level.upper())
