"""
Workrelay HTTP ingress.

Endpoints:
- GET  /                    -> health/info
- GET  /APITEST             -> health/info
- POST /workrequest/{id}    -> acknowledge, then fan out to every target
- GET  /workrequest/{id}    -> acknowledge only (no dispatch)
- OPTIONS /workrequest/{id} -> CORS preflight

The origin gate only governs CORS response headers on the work-request
routes; a denied origin's request is still processed.  Health routes are
open to any origin.

Usage:
    uvicorn --factory workrelay.api.server:create_app
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from workrelay import __version__
from workrelay.config import RelayConfig
from workrelay.core.access_gate import AccessGate
from workrelay.core.delay import AdaptiveDelay
from workrelay.core.recorder import EventRecorder, SqliteEventRecorder
from workrelay.models.events import Acknowledgment, MalformedEventError, WorkOrderEvent
from workrelay.routing.dispatcher import DispatcherClosedError, FanOutDispatcher
from workrelay.routing.targets.factory import build_routes

logger = logging.getLogger(__name__)

_CORS_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"


def build_dispatcher(
    config: RelayConfig, recorder: EventRecorder | None = None
) -> FanOutDispatcher:
    """Assemble the dispatcher described by *config*."""
    routes = build_routes(
        config.targets,
        region_name=config.aws_region,
        connect_timeout=config.delivery_connect_timeout,
        read_timeout=config.delivery_read_timeout,
    )
    if recorder is None and config.recorder_enabled:
        recorder = SqliteEventRecorder(config.recorder_db_path)
    return FanOutDispatcher(
        routes,
        delay=AdaptiveDelay(config.delay_policy),
        recorder=recorder,
        max_workers=config.max_delivery_workers,
    )


def create_app(
    config: RelayConfig | None = None,
    *,
    dispatcher: FanOutDispatcher | None = None,
    gate: AccessGate | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Collaborators default to those described by *config*; tests inject
    their own dispatcher and gate.
    """
    config = config or RelayConfig()
    gate = gate or AccessGate(config.allowlist)
    dispatcher = dispatcher or build_dispatcher(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Server version %s listening on port %d", __version__, config.port)
        logger.info("Origin allow-list configured: %s", list(gate.allowlist))
        yield
        logger.info("Draining %d pending events before exit", dispatcher.pending)
        await asyncio.to_thread(
            dispatcher.shutdown,
            timeout=config.delivery_read_timeout + config.delay_ceiling_ms / 1000.0,
        )

    app = FastAPI(
        title="Workrelay",
        version=__version__,
        description="Work-order ingress relay",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.gate = gate
    app.state.dispatcher = dispatcher

    def _info() -> JSONResponse:
        return JSONResponse(
            {"teststatus": "good", "testmessage": config.welcome_message},
            headers={"Access-Control-Allow-Origin": "*"},
        )

    def _cors_headers(request: Request) -> dict[str, str]:
        origin = request.headers.get("origin")
        decision = gate.decide(origin)
        if not origin or not decision.allowed:
            return {}
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}

    def _ack(ack: Acknowledgment, headers: dict[str, str]) -> JSONResponse:
        return JSONResponse(ack.model_dump(), headers=headers)

    # =========================================================================
    # ENDPOINTS
    # =========================================================================

    @app.get("/")
    async def root() -> JSONResponse:
        logger.info("GET / called")
        return _info()

    @app.get("/APITEST")
    async def api_test() -> JSONResponse:
        logger.info("GET /APITEST called")
        return _info()

    @app.options("/workrequest/{request_id}")
    async def work_request_preflight(request_id: str, request: Request) -> Response:
        headers = _cors_headers(request)
        if headers:
            headers["Access-Control-Allow-Methods"] = _CORS_METHODS
            requested = request.headers.get("access-control-request-headers")
            if requested:
                headers["Access-Control-Allow-Headers"] = requested
        return Response(status_code=204, headers=headers)

    @app.post("/workrequest/{request_id}")
    async def post_work_request(request_id: str, request: Request) -> JSONResponse:
        headers = _cors_headers(request)
        logger.info("POST /workrequest/%s called", request_id)

        try:
            body: Any = json.loads(await request.body())
            event = WorkOrderEvent.from_payload(request_id, body)
            ack = dispatcher.accept(event)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Rejected work request %s: invalid JSON (%s)", request_id, exc)
            return JSONResponse(
                {"error": "request body must be valid JSON"}, status_code=400, headers=headers
            )
        except MalformedEventError as exc:
            logger.warning("Rejected work request %s: %s", request_id, exc)
            return JSONResponse({"error": str(exc)}, status_code=400, headers=headers)
        except DispatcherClosedError:
            logger.warning("Rejected work request %s: relay is shutting down", request_id)
            return JSONResponse(
                {"error": "service is shutting down"}, status_code=503, headers=headers
            )

        logger.debug("Request body for %s: %s", request_id, body)
        logger.info("Acknowledgement sent for event %s", ack.event_id)
        return _ack(ack, headers)

    @app.get("/workrequest/{request_id}")
    async def get_work_request(request_id: str, request: Request) -> JSONResponse:
        headers = _cors_headers(request)
        logger.info("GET /workrequest/%s called", request_id)
        return _ack(Acknowledgment(), headers)

    return app
