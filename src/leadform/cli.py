from __future__ import annotations

import logging

import orjson
import typer

from leadform.config import DYNAMIC_FORM_PATH, Settings
from leadform.embed import embed_codes
from leadform.forms import default_form_config

cli = typer.Typer(add_completion=False, help="Lead capture form builder")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_server(host: str | None, port: int | None) -> None:
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level)
    resolved_host = host or settings.host
    resolved_port = port if port is not None else settings.port
    uvicorn.run(
        "leadform.app:create_app",
        factory=True,
        host=resolved_host,
        port=resolved_port,
    )


@cli.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    ctx.obj = {"host": host, "port": port}
    if ctx.invoked_subcommand is None:
        run_server(host, port)


@cli.command()
def run(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    base = ctx.obj or {}
    resolved_host = host or base.get("host")
    resolved_port = port if port is not None else base.get("port")
    run_server(resolved_host, resolved_port)


@cli.command()
def embed(
    path: str = typer.Argument(DYNAMIC_FORM_PATH, help="Embed path, e.g. /embed/phone-lead"),
    form_id: str | None = typer.Option(None, "--id", help="Saved form configuration id"),
    base_url: str | None = typer.Option(None, help="Public base URL of this server"),
) -> None:
    """Print the iframe and shortcode for an embeddable form."""
    settings = Settings()
    resolved_base = base_url or settings.base_url or f"http://localhost:{settings.port}"
    codes = embed_codes(resolved_base, path, form_id)
    typer.echo(codes["iframe"])
    typer.echo("")
    typer.echo(codes["shortcode"])


@cli.command("show-default")
def show_default() -> None:
    """Print the built-in fallback configuration as JSON."""
    typer.echo(orjson.dumps(default_form_config(), option=orjson.OPT_INDENT_2).decode("utf-8"))


if __name__ == "__main__":
    cli()
