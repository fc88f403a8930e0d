import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assetforge.api.routes import assets, dashboard, templates
from assetforge.errors import AssetForgeError
from assetforge.models.database import get_engine, init_db

logger = logging.getLogger("assetforge.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting assetforge API")
    engine = get_engine()
    init_db(engine)
    yield
    logger.info("Shutting down assetforge API")


app = FastAPI(
    title="assetforge API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    elapsed = time.time() - start
    logger.info(
        "%s %s %d %.3fs",
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    return response


@app.exception_handler(AssetForgeError)
async def assetforge_error_handler(request: Request, exc: AssetForgeError):
    logger.info("%s %s failed: %s", request.method, request.url.path, exc.kind)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(templates.router, prefix="/api/v1")
app.include_router(assets.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")


@app.get("/api/v1/health")
def health():
    """Root-level health check."""
    return {"status": "ok", "service": "assetforge"}
