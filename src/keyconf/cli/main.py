"""
Main CLI entry point for keyconf.

The schema is read from a JSON definitions file and values are persisted
in a JSON store file:

    keyconf --schema schema.json show
    keyconf --schema schema.json set usageMetrics.enabled true
    keyconf --schema schema.json check
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from keyconf.core.config import (
    ConfigStore,
    JsonFileStorage,
    SchemaError,
    StorageWriteError,
    coerce,
    format_config_errors,
    load_schema,
)
from keyconf.core.utils.logger import DEFAULT_LOG_LEVEL, setup_logging
from keyconf.core.utils.notifications import notify_config_errors
from keyconf.core.utils.paths import get_store_path

from .exit_codes import CliExit

console = Console()
app = typer.Typer(
    name="keyconf",
    help="Schema-validated configuration store",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def callback(
    ctx: typer.Context,
    schema: Path = typer.Option(
        ...,
        "--schema",
        "-s",
        envvar="KEYCONF_SCHEMA",
        help="JSON file with the schema definitions",
    ),
    store: Optional[Path] = typer.Option(
        None, "--store", help="JSON store file (default: KEYCONF_STORE or ~/.keyconf/config.json)"
    ),
    log_level: str = typer.Option(DEFAULT_LOG_LEVEL, "--log-level", help="Logging level"),
) -> None:
    """Schema-validated configuration store."""
    setup_logging(log_level)
    ctx.obj = {
        "schema_path": schema,
        "store_path": get_store_path(str(store) if store else None),
    }


def _open_store(ctx: typer.Context) -> ConfigStore:
    try:
        schema = load_schema(ctx.obj["schema_path"])
    except SchemaError as e:
        raise CliExit.config_error(f"Schema error: {e.message}")
    return ConfigStore(schema, JsonFileStorage(ctx.obj["store_path"]))


def _source(store: ConfigStore, key: str) -> str:
    return "stored" if store.get(key).metadata.is_stored else "default"


def _render(value: Any) -> str:
    return json.dumps(value) if not isinstance(value, str) else value


@app.command("show")
def show(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    """Show every setting with its resolved value and source."""
    store = _open_store(ctx)
    errors = store.get_stored_config_errors()

    if json_output:
        payload = {
            "values": {
                key: {"value": entry.value, "source": _source(store, key)}
                for key, entry in store.entries().items()
            },
            "errors": [
                {
                    "code": error.code,
                    "expected": error.expected,
                    "received": error.received,
                    "message": error.message,
                    "path": list(error.path),
                }
                for error in errors or []
            ],
        }
        print(json.dumps(payload, indent=2))
        return

    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="magenta")
    for key, entry in store.entries().items():
        table.add_row(key, _render(entry.value), _source(store, key))
    console.print(table)
    notify_config_errors(errors, console)


@app.command("get")
def get_value(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Setting key"),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    """Print the resolved value of one setting."""
    store = _open_store(ctx)
    if key not in store:
        raise CliExit.config_error(f"Unknown key: {key}")
    entry = store.get(key)
    if json_output:
        print(json.dumps({"key": key, "value": entry.value, "source": _source(store, key)}))
    else:
        print(f"{key} = {_render(entry.value)} ({_source(store, key)})")


@app.command("set")
def set_value(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Setting key"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Validate and persist a new value for one setting."""
    store = _open_store(ctx)
    if key not in store:
        raise CliExit.config_error(f"Unknown key: {key}")
    field_schema = store.schema[key]
    result = field_schema.validate(coerce(value, field_schema), key)
    if not result.ok:
        raise CliExit.config_error(format_config_errors([result.error]))
    try:
        store.set(key, result.value)
    except StorageWriteError as e:
        raise CliExit.error(str(e))
    console.print(f"[green]✓[/green] {key} = {_render(result.value)}")


@app.command("check")
def check(ctx: typer.Context) -> None:
    """Report stored values that fail validation."""
    store = _open_store(ctx)
    errors = store.get_stored_config_errors()
    if errors:
        notify_config_errors(errors, console)
        raise CliExit.config_error()
    console.print("[green]All stored values are valid[/green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
