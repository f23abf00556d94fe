"""
app.py

Responsibility: Command-line entry point. Parses options, loads configuration,
wires the long-lived HTTP clients and services together, and runs the check
scheduler until the process is told to stop.
Does NOT: contain DNS business logic or configuration validation rules.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
import signal
from pathlib import Path
from typing import Optional

import httpx
import typer

from config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from exceptions import ConfigLoadError
from logger import configure_logging
from providers.factory import create_provider
from scheduler import create_scheduler
from services.dns_service import DnsService
from services.hook_service import HookService
from services.ip_service import IpService
from services.notification_service import TelegramNotifier

logger = logging.getLogger(__name__)

_HTTP_TIMEOUT = httpx.Timeout(30.0)

app = typer.Typer(
    help="DDNS client that keeps Cloudflare and DNSPod records pointed at this host.",
    add_completion=False,
)


@app.command()
def main(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to the configuration file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_dir: str = typer.Option("logs", "--log-dir", help="Directory for ddns.log; empty to disable"),
    tg_bot_token: Optional[str] = typer.Option(None, "--tg-bot-token", envvar="TG_BOT_TOKEN"),
    tg_chat_id: Optional[str] = typer.Option(None, "--tg-chat-id", envvar="TG_CHAT_ID"),
    tg_http_proxy: Optional[str] = typer.Option(None, "--tg-http-proxy", envvar="TG_HTTP_PROXY"),
) -> None:
    """Watch the public IP and update every configured DNS record."""
    configure_logging(verbose, Path(log_dir) if log_dir else None)
    if verbose:
        logger.info("Verbose logging enabled")

    try:
        app_config = load_config(config)
    except ConfigLoadError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc

    logger.info("Loaded configuration with %d domains", len(app_config.domains))
    asyncio.run(_serve(app_config, tg_bot_token, tg_chat_id, tg_http_proxy))


async def _serve(
    config: AppConfig,
    tg_bot_token: str | None,
    tg_chat_id: str | None,
    tg_http_proxy: str | None,
) -> None:
    """
    Runs the scheduler until SIGINT or SIGTERM, then closes all clients.
    """
    async with contextlib.AsyncExitStack() as stack:
        provider_client = await stack.enter_async_context(
            httpx.AsyncClient(timeout=_HTTP_TIMEOUT)
        )
        # NOTE: IP lookups bypass any configured proxy so the lookup service
        # sees this host's own address.
        ip_client = await stack.enter_async_context(
            httpx.AsyncClient(timeout=_HTTP_TIMEOUT, trust_env=False)
        )

        notifier = None
        if tg_bot_token and tg_chat_id:
            tg_client = await stack.enter_async_context(
                httpx.AsyncClient(timeout=_HTTP_TIMEOUT, proxy=tg_http_proxy)
            )
            notifier = TelegramNotifier(tg_client, tg_bot_token, tg_chat_id)

        dns_service = DnsService(
            config,
            functools.partial(create_provider, config=config, http_client=provider_client),
            IpService(ip_client),
            HookService(),
            notifier,
        )

        scheduler = create_scheduler(dns_service, config.sleep_secs)
        scheduler.start()

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            # add_signal_handler is unavailable on Windows event loops
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, stop.set)

        try:
            await stop.wait()
        finally:
            scheduler.shutdown(wait=False)
            logger.info("DDNS client stopped.")


if __name__ == "__main__":
    app()
