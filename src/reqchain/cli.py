"""CLI interface for reqchain"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import click

from reqchain.domain.config import RetryConfig
from reqchain.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from reqchain.infrastructure.http_client import HttpClient
from reqchain.infrastructure.interceptors import log_requests

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)
    # urllib3 is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO if verbose else logging.WARNING)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def parse_headers(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse ``Name: value`` header arguments

    Raises:
        click.BadParameter: If a header has no colon or an empty name
    """
    headers = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
        headers[name.strip()] = value.strip()
    return headers


def _build_retry_config(
    config_manager: ConfigManager, retry_on: Tuple[int, ...], no_retry: bool
) -> RetryConfig:
    """Apply CLI retry flags on top of the loaded retry configuration"""
    retry_config = config_manager.get_retry_config()
    updates = {}
    if retry_on:
        updates["status_codes"] = list(retry_on)
    if no_retry:
        updates["enabled"] = False
    if not updates:
        return retry_config
    return RetryConfig(**{**retry_config.model_dump(), **updates})


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .reqchain.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """reqchain - HTTP client with interceptors and retries"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("method", type=str)
@click.argument("url", type=str)
@click.option("--header", "-H", "header", multiple=True, help="Request header, 'Name: value'")
@click.option("--data", "-d", type=str, help="Request body")
@click.option(
    "--data-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the request body from a file",
)
@click.option(
    "--retry-on",
    type=click.IntRange(100, 599),
    multiple=True,
    help="Status code to retry on (repeatable). Overrides config.",
)
@click.option("--no-retry", is_flag=True, help="Disable the retry interceptor")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Timeout in seconds for the whole call")
@click.option("--include", "-i", is_flag=True, help="Print status line and response headers")
@click.pass_context
def send(
    ctx,
    method: str,
    url: str,
    header: Tuple[str, ...],
    data: Optional[str],
    data_file: Optional[Path],
    retry_on: Tuple[int, ...],
    no_retry: bool,
    timeout: Optional[float],
    include: bool,
):
    """Send an HTTP request through the interceptor chain.

    METHOD: HTTP method (GET, POST, ...)
    URL: Request URL
    """
    verbose = ctx.obj.get("verbose", False)

    if data is not None and data_file is not None:
        raise click.UsageError("--data and --data-file are mutually exclusive")

    headers = parse_headers(header)
    body = data_file.read_bytes() if data_file is not None else data

    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=verbose, exc=e)

    retry_config = _build_retry_config(config_manager, retry_on, no_retry)
    client_config = config_manager.get_client_config()

    try:
        with HttpClient(client_config, retry_config, interceptors=[log_requests()]) as client:
            response = client.request(
                method.upper(), url, headers=headers, data=body, timeout=timeout
            )
    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Request failed: {e}", verbose=verbose, exc=e)

    if include:
        click.echo(f"HTTP {response.status_code} {response.reason or ''}".rstrip())
        for name, value in response.headers.items():
            click.echo(f"{name}: {value}")
        click.echo("")
    click.echo(response.text)

    if not 200 <= response.status_code < 300:
        ctx.exit(1)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
