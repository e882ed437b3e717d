"""Command line entry point for the Auth0 MCP server."""

import os
from typing import Optional

import click

from shared.config import Settings, get_settings
from shared.logging import setup_logging
from mcp_server.main import SERVER_VERSION, Auth0MCPServer, run_server


def load_settings(log_level: Optional[str] = None, json_logs: Optional[bool] = None) -> Settings:
    """Build settings from the environment, applying command line overrides."""
    get_settings.cache_clear()
    settings = get_settings()

    overrides = {}
    if log_level:
        overrides["log_level"] = log_level.upper()
    if json_logs is not None:
        overrides["json_logs"] = json_logs
    return settings.model_copy(update=overrides) if overrides else settings


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """MCP server exposing the Auth0 Management API as tools."""


@cli.command()
@click.argument("domain", required=False)
@click.argument("token", required=False)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Minimum log level (logs go to stderr).",
)
@click.option("--json-logs/--console-logs", default=None, help="Emit logs as JSON.")
def run(
    domain: Optional[str],
    token: Optional[str],
    log_level: Optional[str],
    json_logs: Optional[bool],
) -> None:
    """Serve the tools over stdio.

    DOMAIN and TOKEN, when both given, take precedence over AUTH0_DOMAIN
    and AUTH0_TOKEN.
    """
    if domain and token:
        os.environ["AUTH0_DOMAIN"] = domain
        os.environ["AUTH0_TOKEN"] = token

    run_server(load_settings(log_level, json_logs))


@cli.command()
def version() -> None:
    """Print the server version."""
    click.echo(SERVER_VERSION)


@cli.command()
def tools() -> None:
    """Print the tool catalog."""
    settings = load_settings()
    setup_logging("WARNING", json_output=settings.json_logs)
    server = Auth0MCPServer(settings)
    for tool in server.registry.list_tools():
        click.echo(f"{tool.name.value}\t{tool.description}")


def main() -> None:
    cli(prog_name="auth0-mcp")


if __name__ == "__main__":
    main()
