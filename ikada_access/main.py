from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from ikada_access.core import config
from ikada_access.core.database.engine import init_db
from ikada_access.core.errors import AccessError
from ikada_access.features.actors.routes import router as actor_router
from ikada_access.features.permissions.routes import router as permission_router
from ikada_access.features.branches.routes import router as branch_router
from ikada_access.features.articles.routes import router as article_router
from ikada_access.features.events.routes import router as event_router
from ikada_access.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="IKADA Access",
    description="Role-based access control and branch-scoped content visibility for the IKADA alumni organization",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.ikada_access.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if not error.get("loc") or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(AccessError)
async def access_error_handler(_request: Request, exc: AccessError):
    if exc.status_code >= 500:
        log.error("Unhandled access error: %s", exc.detail)
    else:
        log.info("%s: %s", type(exc).__name__, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.on_event("startup")
async def startup():
    """Initialize database on application startup."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "IKADA Access API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "Every endpoint except / and /health requires a Bearer token in the Authorization header"
        },
        "features": {
            "permissions": "Permission catalog of module.action pairs",
            "roles": "Roles, role permissions and per-module toggles",
            "actors": "Role assignment and effective permission lookups",
            "branches": "Branches (syubiyah) used to scope actors and content",
            "articles": "News articles with branch visibility",
            "events": "Events with branch visibility"
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
# Permission catalog and role administration (/permissions, /roles)
app.include_router(permission_router, tags=["roles"])

app.include_router(actor_router, prefix="/actors", tags=["actors"])

app.include_router(branch_router, prefix="/branches", tags=["branches"])

# Branch-scoped content
app.include_router(article_router, prefix="/articles", tags=["articles"])
app.include_router(event_router, prefix="/events", tags=["events"])
