import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

from fastapi import FastAPI, Header, Query, Request, WebSocket, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_backend.api.dependencies import (
    ChatHandlerDep,
    ContactHandlerDep,
    SystemHandlerDep,
    make_lifespan,
)
from portfolio_backend.config import Settings, get_settings
from portfolio_backend.dto import (
    AnalyticsSummaryResponse,
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    ContactMessageItem,
    ContactMessageListResponse,
    ContactRequest,
    HealthCheckResponse,
    MessageResponse,
)
from portfolio_backend.entities import AnalyticsEventEntity
from portfolio_backend.logging_config import configure_logging
from portfolio_backend.protocols import CompletionProvider, Mailer

logger = logging.getLogger(__name__)

API_NOT_FOUND = "API endpoint not found"


def should_track(path: str) -> bool:
    """Page views only: skip uploads and anything that looks like a file."""
    return not path.startswith("/uploads/") and "." not in path


def create_app(
    settings: Settings | None = None,
    provider: CompletionProvider | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings (defaults to the environment)
        provider: Completion provider override, mainly for tests
        mailer: Mailer override, mainly for tests
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Portfolio Backend API",
        description="Portfolio backend with chat, contact form and page-view analytics",
        version="1.0.0",
        lifespan=make_lifespan(settings, provider=provider, mailer=mailer),
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def track_page_view(request: Request, call_next):
        container = getattr(request.app.state, "container", None)
        if container is not None and should_track(request.url.path):
            container.analytics.track(
                AnalyticsEventEntity(
                    page=request.url.path,
                    ip=request.client.host if request.client else "0.0.0.0",
                    user_agent=request.headers.get("user-agent") or "unknown",
                    referrer=request.headers.get("referer") or "direct",
                )
            )
        return await call_next(request)

    @app.exception_handler(StarletteHTTPException)
    async def api_not_found(request: Request, exc: StarletteHTTPException):
        # Unknown /api routes get the JSON body; resource 404s keep their detail.
        if (
            exc.status_code == status.HTTP_404_NOT_FOUND
            and request.url.path.startswith("/api")
            and exc.detail in ("Not Found", API_NOT_FOUND)
        ):
            return JSONResponse(status_code=exc.status_code, content={"message": API_NOT_FOUND})
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        content: dict[str, Any] = {"message": "Something went wrong!"}
        if settings.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Portfolio Backend API",
            "version": "1.0.0",
            "endpoints": {
                "chat": "/api/chat",
                "history": "/api/chat/history/{sessionId}",
                "contact": "/api/contact",
                "health": "/api/health",
                "socket": "/ws",
                "docs": "/docs",
            },
        }

    @app.get("/api/health", response_model=HealthCheckResponse)
    async def health(handler: SystemHandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    @app.post("/api/chat", response_model=ChatResponse, response_model_by_alias=True)
    async def chat(request: ChatRequest, http_request: Request, handler: ChatHandlerDep) -> ChatResponse:
        """Send one message and receive the assistant reply."""
        client_address = http_request.client.host if http_request.client else None
        return await handler.chat(request, client_address)

    @app.get("/api/chat/history/{session_id}", response_model=ChatHistoryResponse)
    async def chat_history(session_id: str, handler: ChatHandlerDep) -> ChatHistoryResponse:
        return await handler.history(session_id)

    @app.post("/api/contact", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
    async def contact(request: ContactRequest, handler: ContactHandlerDep) -> MessageResponse:
        return await handler.submit(request)

    @app.get(
        "/api/admin/analytics",
        response_model=AnalyticsSummaryResponse,
        response_model_by_alias=True,
    )
    async def analytics_summary(
        handler: SystemHandlerDep,
        x_admin_token: Annotated[str | None, Header()] = None,
        start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
        end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
    ) -> AnalyticsSummaryResponse:
        """Page-view aggregates for the admin dashboard."""
        return await handler.analytics_summary(x_admin_token, start_date, end_date)

    @app.get(
        "/api/admin/messages",
        response_model=ContactMessageListResponse,
        response_model_by_alias=True,
    )
    async def admin_messages(
        handler: ContactHandlerDep,
        x_admin_token: Annotated[str | None, Header()] = None,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=100)] = 20,
        read: bool | None = None,
    ) -> ContactMessageListResponse:
        """Contact form inbox, newest first."""
        return await handler.list_messages(x_admin_token, page=page, limit=limit, read=read)

    @app.put(
        "/api/admin/messages/{message_id}/read",
        response_model=ContactMessageItem,
        response_model_by_alias=True,
    )
    async def mark_message_read(
        message_id: int,
        handler: ContactHandlerDep,
        x_admin_token: Annotated[str | None, Header()] = None,
    ) -> ContactMessageItem:
        return await handler.mark_read(x_admin_token, message_id)

    @app.websocket("/ws")
    async def realtime(websocket: WebSocket) -> None:
        await websocket.app.state.container.realtime_handler.serve(websocket)

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.info("Static directory %s not found, frontend not served", static_dir)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "portfolio_backend.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
