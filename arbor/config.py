"""
Config system - Layered application configuration.

Merge order (later overrides earlier):
1. Defaults
2. YAML config file (``arbor.yaml``)
3. ``.env`` file (``ARBOR_*`` keys, plus ``PORT``)
4. Environment variables (``ARBOR_*`` keys, plus ``PORT``)
5. Manual overrides
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from dotenv import dotenv_values

from .faults import ConfigFault

logger = logging.getLogger("arbor.config")

DEFAULT_CONFIG_FILE = "arbor.yaml"
DEFAULT_ENV_FILE = ".env"


@dataclass
class ArborConfig:
    """
    Application configuration.

    Attributes:
        controllers_path: Directory scanned for controllers
        views_path: Directory holding the page templates
        host: Interface to listen on
        port: Port to listen on
        log_level: Root log level applied by ``App.run``
    """

    controllers_path: str = "routes"
    views_path: str = "pages"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        *,
        env_file: Optional[Union[str, Path]] = DEFAULT_ENV_FILE,
        env_prefix: str = "ARBOR_",
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "ArborConfig":
        """
        Load configuration from all sources.

        Args:
            path: YAML config file (``arbor.yaml`` when it exists)
            env_file: ``.env`` file to read, None to skip
            env_prefix: Prefix of configuration environment variables
            environ: Environment mapping (defaults to ``os.environ``)
            overrides: Manual overrides (highest precedence)

        Raises:
            ConfigFault: On unknown keys or invalid values
        """
        data: Dict[str, Any] = {}

        config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)
        if config_path.exists():
            data.update(_load_yaml(config_path))
        elif path is not None:
            raise ConfigFault("config_file", f"'{config_path}' does not exist")

        if env_file is not None and Path(env_file).exists():
            data.update(_from_env(dotenv_values(env_file), env_prefix))

        data.update(_from_env(os.environ if environ is None else environ, env_prefix))

        if overrides:
            data.update(overrides)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ArborConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigFault(", ".join(sorted(unknown)), "unknown configuration key")

        values = dict(data)
        if "port" in values:
            try:
                values["port"] = int(values["port"])
            except (TypeError, ValueError):
                raise ConfigFault("port", f"expected an integer, got {values['port']!r}")
            if not 0 < values["port"] < 65536:
                raise ConfigFault("port", f"{values['port']} is out of range")

        if "log_level" in values:
            level = str(values["log_level"]).upper()
            if not isinstance(logging.getLevelName(level), int):
                raise ConfigFault("log_level", f"unknown log level {values['log_level']!r}")
            values["log_level"] = level

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _load_yaml(path: Path) -> Dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigFault("config_file", f"'{path}' must contain a mapping")
    logger.debug("Loaded configuration from %s", path)
    return data


def _from_env(environ: Mapping[str, Optional[str]], prefix: str) -> Dict[str, Any]:
    """Pick ``<prefix>KEY`` variables; ``PORT`` is honoured on its own."""
    data: Dict[str, Any] = {}
    if environ.get("PORT"):
        data["port"] = environ["PORT"]
    known = {f.name for f in fields(ArborConfig)}
    for key, value in environ.items():
        if not key.startswith(prefix) or value is None:
            continue
        name = key[len(prefix):].lower()
        if name in known:
            data[name] = value
        else:
            logger.debug("Ignoring unknown configuration variable %s", key)
    return data
