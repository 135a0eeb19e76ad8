"""Main CLI application module."""

from enum import Enum
from pathlib import Path

import typer
from rich.markup import escape

from src.stockroom.runtime.config.config_template import load_templated_yaml
from src.stockroom.runtime.context import get_config, set_config
from src.stockroom.runtime.logging_setup import configure_logging

from .product_commands import app, console


class BackendChoice(str, Enum):
    AUTO = "auto"
    RELATIONAL = "relational"
    KEY_VALUE = "key_value"


@app.callback()
def configure(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="Configuration file (defaults to $STOCKROOM_CONFIG_FILE or config.yaml)",
    ),
    backend: BackendChoice | None = typer.Option(
        None, "--backend", "-b", help="Override the storage backend selection"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    ),
) -> None:
    """Track stocked products in a local store."""
    if config_file is not None:
        try:
            set_config(load_templated_yaml(config_file))
        except ValueError as e:
            console.print(f"[red]❌ {escape(str(e))}[/red]")
            raise typer.Exit(code=2) from e

    if backend is not None:
        config = get_config().model_copy(deep=True)
        config.storage.backend = backend.value
        set_config(config)

    configure_logging(log_level)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
