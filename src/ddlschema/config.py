"""Locations of the schema dump, the snapshot and the generated types."""

import json
from pathlib import Path
from tomllib import TOMLDecodeError, load
from typing import TypedDict

from ddlschema.errors import StorageError

CONFIG_TABLE = "ddl-toolkit"
DEFAULT_CONFIG_PATH = "./ddl-toolkit.toml"


class Config(TypedDict):
    """Resolved configuration."""

    schema_path: str
    snapshot_path: str
    type_path: str


DEFAULT_CONFIG = Config(
    schema_path="./schema.sql",
    snapshot_path="./database.json",
    type_path="./types/",
)


def default_config(schema_path: str | None = None) -> Config:
    """Return the default configuration, optionally with another schema path."""
    config = Config(**DEFAULT_CONFIG)
    if schema_path is not None:
        config["schema_path"] = schema_path
    return config


def load_config(config_path: Path | str) -> Config:
    """Load configuration from a TOML file.

    Settings are read from a ``[ddl-toolkit]`` table when present, otherwise
    from the top level. Missing settings keep their defaults and unknown
    keys are ignored.
    """
    path = Path(config_path)
    try:
        with path.open("rb") as f:
            document = load(f)
    except OSError as err:
        msg = f"failed to find file <{path}>: {err.strerror or err}"
        raise StorageError(msg, str(path)) from err
    except TOMLDecodeError as err:
        msg = f"invalid config file <{path}>: {err}"
        raise StorageError(msg, str(path)) from err

    settings = document.get(CONFIG_TABLE, document)
    if not isinstance(settings, dict):
        msg = f"config table {CONFIG_TABLE} in <{path}> must be a table"
        raise StorageError(msg, str(path))
    config = default_config()
    for key in Config.__annotations__:
        if key not in settings:
            continue
        value = settings[key]
        if not isinstance(value, str):
            msg = f"config key {key} in <{path}> must be a string, got {value!r}"
            raise StorageError(msg, str(path))
        config[key] = value  # pyright: ignore[reportGeneralTypeIssues]
    return config


def save_config(config: Config, config_path: Path | str) -> Path:
    """Write the configuration as a ``[ddl-toolkit]`` TOML table."""
    path = Path(config_path)
    # JSON string escapes are valid TOML basic strings
    lines = [f"[{CONFIG_TABLE}]"]
    lines.extend(f"{key} = {json.dumps(value)}" for key, value in config.items())
    try:
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as err:
        msg = f"failed to write config <{path}>: {err.strerror or err}"
        raise StorageError(msg, str(path)) from err
    return path
