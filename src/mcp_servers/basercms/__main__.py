"""
baserCMS MCP Server CLI Entry Point

Run with:
    python -m src.mcp_servers.basercms [OPTIONS]

Examples:
    # Serve MCP over stdio (for desktop MCP clients)
    python -m src.mcp_servers.basercms

    # Point at a different baserCMS installation
    python -m src.mcp_servers.basercms --base-url https://cms.example.com

    # Replay one JSON-RPC message from a file and print the response
    python -m src.mcp_servers.basercms --request-file request.json
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv

from src.basercms.config import BaserCMSConfig
from src.common.logging import configure_sanitized_logging
from src.common.telemetry import TelemetryConfig, init_telemetry, shutdown_telemetry
from src.mcp_servers.basercms.config import BaserCMSServerConfig

app = typer.Typer(
    name="basercms-mcp",
    help="baserCMS MCP Server",
    add_completion=False,
)


def setup_logging(level: str) -> None:
    """Configure logging on stderr, keeping stdout clean for the stdio transport."""
    configure_sanitized_logging(level=level.upper())


def load_environment(env_file: Path | None = None) -> bool:
    """
    Load variables from an env file into the process environment.

    Variables already set win. Settings read straight from os.environ
    (such as BASERCMS_TELEMETRY_ENABLED) only see .env values this way.
    """
    path = env_file or Path.cwd() / ".env"
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


@app.command()
def main(
    log_level: str = typer.Option(
        None,
        "--log-level", "-l",
        help="Logging level (defaults to BASERCMS_MCP_LOG_LEVEL or INFO)",
    ),
    base_url: str = typer.Option(
        None,
        "--base-url",
        help="Site root of the baserCMS installation",
        envvar="BASERCMS_BASE_URL",
    ),
    request_file: Path = typer.Option(
        None,
        "--request-file", "-r",
        help="Handle a single JSON-RPC message read from this file and exit",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    env_file: Path = typer.Option(
        None,
        "--env-file",
        help="Environment file to load (defaults to .env in the working directory)",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """
    Run the baserCMS MCP Server.

    Serves MCP over stdio unless --request-file is given.
    """
    load_environment(env_file)

    overrides: dict[str, Any] = {}
    if log_level:
        overrides["log_level"] = log_level
    config = BaserCMSServerConfig(**overrides)
    setup_logging(config.log_level)

    logger = logging.getLogger(__name__)

    basercms_config = BaserCMSConfig(**({"base_url": base_url} if base_url else {}))

    if config.telemetry_enabled:
        init_telemetry(
            config=TelemetryConfig(
                service_name=config.telemetry_service_name,
                service_version=config.server_version,
                environment=basercms_config.environment,
                otlp_endpoint=config.telemetry_otlp_endpoint,
            )
        )

    try:
        if request_file is not None:
            logger.info(f"Handling request from {request_file}")
            response = asyncio.run(run_request_file(request_file, config, basercms_config))
            if response is not None:
                typer.echo(json.dumps(response, ensure_ascii=False, indent=2))
        else:
            logger.info("Starting baserCMS MCP Server (transport=stdio)")
            asyncio.run(run_stdio(config, basercms_config))
    finally:
        shutdown_telemetry()


async def run_stdio(config: BaserCMSServerConfig, basercms_config: BaserCMSConfig) -> None:
    """Run with stdio transport."""
    from src.mcp_servers.basercms.transports.stdio import run_stdio_server

    await run_stdio_server(config, basercms_config)


async def run_request_file(
    path: Path,
    config: BaserCMSServerConfig,
    basercms_config: BaserCMSConfig,
) -> dict[str, Any] | None:
    """
    Dispatch the JSON-RPC message stored in ``path``.

    The file may hold pretty-printed (multi-line) JSON.
    """
    from src.mcp_servers.basercms.context import create_request_file_context
    from src.mcp_servers.basercms.server import BaserCMSMCPServer

    try:
        message = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        return {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32700, "message": f"Parse error: {e}"},
        }

    async with BaserCMSMCPServer(config, basercms_config) as server:
        return await server.handle_message(message, create_request_file_context(str(path)))


if __name__ == "__main__":
    app()
