"""Main module: load a schema, snapshot it and export its types in one call."""

from logging import getLogger
from pathlib import Path

from ddlschema.config import (
    DEFAULT_CONFIG_PATH,
    Config,
    default_config,
    load_config,
    save_config,
)
from ddlschema.database import Database
from ddlschema.errors import StorageError
from ddlschema.parser import read_schema
from ddlschema.storage import load_database, save_database
from ddlschema.typescript_export import write_typescript

logger = getLogger(__name__)


def resolve_config(
    config_path: Path | str | None = None,
    schema_path: Path | str | None = None,
) -> Config:
    """Load the config file, with an optional schema override.

    Without a config path the default config file is used. When it does not
    exist yet the defaults are written to it, so they can be edited later.
    """
    default_path = Path(DEFAULT_CONFIG_PATH)
    if config_path:
        config = load_config(config_path)
    elif default_path.is_file():
        config = load_config(default_path)
    else:
        config = default_config()
        save_config(config, default_path)
        logger.info("Wrote default config to %s", default_path)
    if schema_path is not None:
        config["schema_path"] = str(schema_path)
    return config


def load_schema(config: Config, *, reload_schema: bool = False) -> Database:
    """Load the snapshot, re-reading the DDL when asked to or when it is unusable."""
    if not reload_schema:
        try:
            return load_database(config["snapshot_path"])
        except StorageError as err:
            logger.info("Snapshot unavailable (%s), reading the schema dump", err)
    return read_schema(config["schema_path"])


def init(
    config_path: Path | str | None = None,
    schema_path: Path | str | None = None,
    *,
    reload_schema: bool = False,
) -> Database:
    """Initialize a schema from the configured locations.

    On the first run (or with ``reload_schema``) the MySQL dump is parsed;
    later runs load the saved snapshot. Either way the snapshot is saved
    again and the TypeScript declarations are rewritten.
    """
    config = resolve_config(config_path, schema_path)
    database = load_schema(config, reload_schema=reload_schema)

    save_database(database, config["snapshot_path"])
    write_typescript(database, Path(config["type_path"]))
    return database
