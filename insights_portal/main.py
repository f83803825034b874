import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from insights_portal.config import settings
from insights_portal.core.credential_store import AUTH_COOKIE_NAME, clear_credential, read_credential
from insights_portal.core.exceptions import (
    ConfigurationException,
    MalformedResponseException,
    UnauthorizedException,
    UnreachableException,
    UpstreamException,
    ValidationException,
)
from insights_portal.core.logging import configure_logging
from insights_portal.models.session_decision import RedirectToHome, RedirectToLogin
from insights_portal.routes import auth_routes, page_routes, tenant_routes
from insights_portal.services.session_guard import HOME_PATH, decide, is_excluded, login_url

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _request_target(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


# Session guard. Runs before every route except framework internals.
@app.middleware("http")
async def session_guard(request: Request, call_next):
    if is_excluded(request.url.path):
        return await call_next(request)

    credential = read_credential(request)
    decision = decide(_request_target(request), credential is not None)

    if isinstance(decision, RedirectToLogin):
        response = RedirectResponse(
            url=login_url(decision.return_path),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )
        if AUTH_COOKIE_NAME in request.cookies:
            clear_credential(response)
        return response
    if isinstance(decision, RedirectToHome):
        return RedirectResponse(url=HOME_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    return await call_next(request)


# Added last so it wraps the guard's redirects too
@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "origin-when-cross-origin"
    return response


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    logger.info("Session invalidated on %s %s: %s", request.method, request.url.path, exc)
    return_path = _request_target(request) if request.method == "GET" else None
    response = RedirectResponse(url=login_url(return_path), status_code=status.HTTP_303_SEE_OTHER)
    clear_credential(response)
    return response


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(ConfigurationException)
async def configuration_exception_handler(request: Request, exc: ConfigurationException):
    logger.error("Configuration error: %s", exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


@app.exception_handler(MalformedResponseException)
async def malformed_response_exception_handler(request: Request, exc: MalformedResponseException):
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": exc.message})


@app.exception_handler(UnreachableException)
async def unreachable_exception_handler(request: Request, exc: UnreachableException):
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": exc.message})


@app.exception_handler(UpstreamException)
async def upstream_exception_handler(request: Request, exc: UpstreamException):
    # Upstream client errors pass through; anything else is a bad gateway
    if exc.status is not None and 400 <= exc.status < 500:
        status_code = exc.status
    else:
        status_code = status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Include routers
app.include_router(page_routes.router, tags=["Pages"])
app.include_router(auth_routes.router, tags=["Auth"])
app.include_router(tenant_routes.router, prefix="/tenants", tags=["Tenants"])
