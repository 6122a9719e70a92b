"""FastAPI entrypoint for the restaurant ordering API."""

from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ordering.api.v1.api import api_router
from ordering.core.config import Settings, settings
from ordering.core.errors import OrderingError
from ordering.db import session as db_session
from ordering.db.base import Base
from ordering.db.seed import ensure_seed_data
from ordering.services.events import AdminSocketHub, EventBroadcaster
from ordering.services.invoice_builder import CompanyInfo
from ordering.services.invoice_numbering import InvoiceNumberAuthority
from ordering.services.invoice_service import InvoiceService
from ordering.services.notifications import (
    EmailTransport,
    NotificationDispatcher,
    NullEmailTransport,
    SmtpEmailTransport,
)
from ordering.services.order_service import OrderService

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


def build_email_transport(config: Settings) -> EmailTransport:
    if not config.smtp_host:
        logger.warning("[EMAIL] SMTP_HOST not set; customer emails are disabled.")
        return NullEmailTransport()
    return SmtpEmailTransport(config)


def build_services(target: FastAPI, config: Settings) -> None:
    """Wire services once and keep them on app.state for request dependencies."""
    events = EventBroadcaster()
    hub = AdminSocketHub()
    events.subscribe(hub)

    dispatcher = NotificationDispatcher(build_email_transport(config), config)
    invoices = InvoiceService(
        db_session.new_session,
        InvoiceNumberAuthority(),
        dispatcher,
        CompanyInfo.from_settings(config),
    )
    target.state.events = events
    target.state.socket_hub = hub
    target.state.dispatcher = dispatcher
    target.state.invoice_service = invoices
    target.state.order_service = OrderService(db_session.new_session, invoices, dispatcher, events, config)


@app.exception_handler(OrderingError)
async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    build_services(app, settings)
    with db_session.SessionLocal() as session:
        try:
            admin_present = ensure_seed_data(session)
            logger.info("[BOOTSTRAP] default admin present: %s", "yes" if admin_present else "no")
        except Exception:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


@app.on_event("startup")
async def bind_event_loop() -> None:
    app.state.socket_hub.bind_loop(asyncio.get_running_loop())


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.websocket("/ws/admin")
async def admin_events(websocket: WebSocket) -> None:
    hub: AdminSocketHub = websocket.app.state.socket_hub
    await hub.connect(websocket)
    try:
        while True:
            await websocket.receive_text()  # keep alive
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(websocket)
