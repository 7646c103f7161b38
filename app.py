import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import DB_NAME, connect_db
from errors import SlotError
from helper import PrettyJSONResponse
from routes.slot_route import slot_router

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

PORT = 3000
STATIC_DIR = os.getenv("STATIC_DIR", str(Path(__file__).resolve().parent / "public"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ohne Datenbank kein Start: Fehler in connect_db brechen den Prozess ab
    client = connect_db()
    app.state.mongo_client = client
    app.state.db = client[DB_NAME]
    logger.info("Server running on port %s", PORT)
    yield
    client.close()


app = FastAPI(lifespan=lifespan, default_response_class=PrettyJSONResponse)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Logs method, path and client address of every incoming request.
    """
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    client_host = request.client.host if request.client else "unknown"
    logger.info("%s %s from %s", request.method, path, client_host)
    # Fehler hier abfangen, damit die 500 noch durch CORSMiddleware laeuft
    try:
        return await call_next(request)
    except Exception as exc:
        return unexpected_error_response(exc)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(SlotError)
async def slot_error_handler(request: Request, exc: SlotError):
    return PrettyJSONResponse(status_code=exc.status_code, content=exc.to_payload())

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # 404 und 405 (falsche Methode) sehen fuer den Client gleich aus
    if exc.status_code in (404, 405):
        return PrettyJSONResponse(status_code=404, content={"error": "Not found"})
    return PrettyJSONResponse(status_code=exc.status_code, content={"error": exc.detail})

def unexpected_error_response(exc: Exception) -> PrettyJSONResponse:
    logger.error("Global error: %r", exc, exc_info=exc)
    return PrettyJSONResponse(status_code=500, content={"error": "An unexpected error occurred"})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return unexpected_error_response(exc)


app.include_router(slot_router)
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)
