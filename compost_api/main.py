# compost_api/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from compost_api.core.config import settings
from compost_api.deps import get_store
from compost_api.repos import StoreError
from compost_api.routers import admin_customers as admin_customers_router
from compost_api.routers import admin_pickup_events as admin_pickup_events_router
from compost_api.routers import admin_routes as admin_routes_router
from compost_api.routers import admin_stops as admin_stops_router
from compost_api.routers import pickups as pickups_router
from compost_api.routers import routes as routes_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    await store.ensure_indexes()
    logger.info("store ready: %s", type(store).__name__)
    yield
    store.close()


# --- Create app FIRST ---
app = FastAPI(lifespan=lifespan, title="Compost Pickup API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------- Error bodies: {"error": "..."} ----------------
@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid request")
    return JSONResponse({"error": f"{where}: {msg}" if where else msg}, status_code=400)

@app.exception_handler(StoreError)
async def _store_error(request: Request, exc: StoreError):
    logger.error("Unhandled store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)

# ---------------- Include routers ----------------
app.include_router(pickups_router.router)               # /api/pickups
app.include_router(routes_router.router)                # /api/routes
app.include_router(admin_routes_router.router)          # /api/admin/routes
app.include_router(admin_stops_router.router)           # /api/admin/stops
app.include_router(admin_customers_router.router)       # /api/admin/customers
app.include_router(admin_pickup_events_router.router)   # /api/admin/pickup-events

# Health
@app.get("/health")
def health():
    return {"ok": True}
