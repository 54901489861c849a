# app/main.py
import asyncio
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Your configuration and DB
from app.config import settings
from app.core.db import init_db, close_db
from app.core.errors import register_exception_handlers

from app.api.v1.routers import users

logger = logging.getLogger("uvicorn.error")


class RequestTimeoutMiddleware:
    """
    Answer 504 with an empty body when a request runs past the configured limit.

    Plain ASGI middleware so the handler task is cancelled directly. Once the
    response has started (e.g. a background mail is still running) the
    timeout only cancels the remaining work.
    """

    def __init__(self, app: ASGIApp, timeout: float):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("[timeout] %s %s exceeded %.1fs", scope["method"], scope["path"], self.timeout)
            if not started:
                await Response(status_code=504)(scope, receive, send)


def create_app() -> FastAPI:
    """Build the application with every route registered explicitly."""
    app = FastAPI(title=settings.APP_NAME)

    # CORS (with Cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.request_timeout_seconds > 0:
        app.add_middleware(RequestTimeoutMiddleware, timeout=settings.request_timeout_seconds)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def on_startup():
        await init_db()
        logger.info("[startup] database ready (generate_schemas=%s)", settings.db_generate_schemas)

    @app.on_event("shutdown")
    async def on_shutdown():
        await close_db()

    # REST
    app.include_router(users.router)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
