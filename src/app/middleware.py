# src/app/middleware.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from src.app.config import settings
from src.app.exceptions import AppError, UpstreamError, error_response
from src.api.deps import get_client_ip

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI):
    """
    Install the HTTP middleware stack.

    Order on the way in: CORS, GZip, timing, rate limit, authentication.
    Each ``@app.middleware`` added later wraps the ones added before it.
    """

    @app.middleware("http")
    async def authenticate_request(request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)

        authenticator = request.app.state.authenticator
        try:
            request.state.auth = await authenticator.authenticate(
                request.url.path,
                request.headers.get("Authorization"),
                request.query_params,
            )
        except AppError as exc:
            if isinstance(exc, UpstreamError):
                logger.error(f"Authentication upstream failure on {request.url.path}: {exc.detail}")
            return error_response(exc)
        return await call_next(request)

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        limiter = getattr(request.app.state, "rate_limiter", None)
        if limiter is None:
            return await call_next(request)

        allowed, retry_after = await limiter.hit(get_client_ip(request))
        if not allowed:
            logger.warning(f"Rate limit exceeded for {get_client_ip(request)}")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many requests from this IP, please try again later.",
                    "code": "RATE_LIMITED",
                },
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

    @app.middleware("http")
    async def log_request_time(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = (time.time() - start) * 1000
        logger.info(f"{request.method} {request.url.path} | {response.status_code} | {duration:.2f} ms")
        return response

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app
