"""Configuration module: frozen dataclass loaded from a YAML file, env vars and CLI args."""

import os
import sys
from dataclasses import dataclass, fields

import yaml


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    sink_url: str = "http://localhost:8080"
    request_timeout: float = 10.0
    buffer_dir: str = "./buffer"
    buffer_key: str = "logger"
    max_buffer_bytes: int = 1_048_576
    debug: bool = False
    probe_host: str = "localhost"
    probe_port: int = 8080
    probe_timeout: float = 2.0
    medium: str = "wifi"
    cellular_generation: str = ""
    medium_file: str = ""
    watch_interval: float = 5.0
    sink_host: str = "0.0.0.0"
    sink_port: int = 8080


# Environment variable for each field, e.g. SINK_URL, MAX_BUFFER_BYTES.
ENV_VARS = {f.name: f.name.upper() for f in fields(Config)}


def _coerce(name: str, value):
    """Convert a raw string/YAML value to the type of the Config field."""
    default = getattr(Config, name)
    if isinstance(default, bool):
        return _parse_bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return "" if value is None else str(value)


def load_yaml(path: str) -> dict:
    """Load a YAML mapping of config fields. A missing file yields {}."""
    if not path or not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def _parse_cli(argv: list[str]) -> dict:
    """Simple --key=value / --key value / --flag parsing."""
    overrides = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("--"):
            if "=" in arg:
                key, value = arg[2:].split("=", 1)
            elif i + 1 < len(argv) and not argv[i + 1].startswith("--"):
                key = arg[2:]
                value = argv[i + 1]
                i += 1
            else:
                # Boolean flag with no value (e.g., --debug)
                key = arg[2:]
                value = "true"
            overrides[key.replace("-", "_")] = value
        i += 1
    return overrides


def load_config(argv: list[str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars <- CLI args (highest priority).

    The YAML file path comes from CONFIG_PATH (or --config).
    """
    if argv is None:
        argv = sys.argv[1:]
    cli = _parse_cli(argv)

    values: dict = {}
    path = cli.pop("config", os.environ.get("CONFIG_PATH", ""))
    for key, value in load_yaml(path).items():
        if key in ENV_VARS:
            values[key] = value

    for name, env_var in ENV_VARS.items():
        if env_var in os.environ:
            values[name] = os.environ[env_var]

    for key, value in cli.items():
        if key in ENV_VARS:
            values[key] = value

    return Config(**{name: _coerce(name, value) for name, value in values.items()})
