"""FastAPI application relaying Alertmanager webhooks to hookshot."""

import sys
from contextlib import asynccontextmanager
from typing import Dict, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from loguru import logger
from pydantic import ValidationError

from alertmanager_hookshot.forwarder import create_client, forward
from alertmanager_hookshot.models import AlertGroup, RelaySettings
from alertmanager_hookshot.render import render

SUCCESS_MESSAGE = "Data forwarded successfully"
FAILURE_MESSAGE = "Failed to forward the data to the upstream service"


def configure_logging(level: str) -> None:
    """Send log records to stdout in the service format."""
    logger.remove()  # Remove default handler
    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DDTHH:mm:ss.SSS}Z [{extra[service]}] {level}: {message}",
        level=level,
    )
    logger.configure(extra={"service": "alertmanager-hookshot"})


def create_app(
    settings: Optional[RelaySettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay application.

    Args:
        settings: Relay settings; read from the environment at startup when omitted
        transport: Optional HTTP transport for the upstream client

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Configure application lifespan events."""
        app.state.settings = settings or RelaySettings()
        configure_logging(app.state.settings.log_level)
        logger.info("Application startup")
        logger.info(f"Forwarding to {app.state.settings.upstream}")
        if not app.state.settings.silence_url:
            logger.warning("ALERTMANAGER_URL is empty, silence links will have no base URL")

        app.state.client = create_client(app.state.settings.timeout, transport=transport)

        yield

        # Shutdown
        await app.state.client.aclose()
        logger.info("Application shutdown")

    app = FastAPI(title="Alertmanager Hookshot", version="0.1.0", lifespan=lifespan)

    @app.get("/")
    async def root() -> Dict[str, str]:
        """Root endpoint."""
        return {"message": "Alertmanager Hookshot relay is running"}

    @app.get("/health")
    async def health() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post("/webhook/{route_id}", response_class=PlainTextResponse)
    async def alertmanager_webhook(route_id: str, request: Request) -> PlainTextResponse:
        """Render an Alertmanager notification and forward it to hookshot.

        Args:
            route_id: Route ID appended to the upstream URL
            request: FastAPI request object to access the body and app state

        Returns:
            200 when every record was delivered, 500 otherwise
        """
        logger.info(f"Received Alertmanager webhook for route {route_id}")
        settings: RelaySettings = request.app.state.settings
        client: httpx.AsyncClient = request.app.state.client

        try:
            group = AlertGroup.model_validate(await request.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Invalid webhook payload for route {route_id}: {e}")
            return PlainTextResponse(FAILURE_MESSAGE, status_code=500)

        try:
            logger.info(
                f"Group {group.group_key or '-'}: status={group.status or '-'}, "
                f"alerts={len(group.alerts or [])}, truncated={group.truncated_alerts}"
            )
            records = render(group, settings.silence_url)
            result = await forward(records, route_id, settings.upstream, client)
        except Exception:
            logger.exception(f"Error processing webhook for route {route_id}")
            return PlainTextResponse(FAILURE_MESSAGE, status_code=500)

        if not result.ok:
            return PlainTextResponse(FAILURE_MESSAGE, status_code=500)
        return PlainTextResponse(SUCCESS_MESSAGE, status_code=200)

    return app


app = create_app()
