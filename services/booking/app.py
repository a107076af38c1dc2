# ============================================================
# app.py — Point d’entrée du service Booking
# ------------------------------------------------------------
# Ce module initialise l’application FastAPI :
#   - Configure les logs et crée les tables au démarrage
#   - Monte les routes réservation / catalogue et avis
#   - Uniformise les erreurs au format {ok: false, error}
# Lancement : uvicorn app:app
# ============================================================
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from api import router
from db import init_db
from errors import BookingError
from reviews import router as reviews_router

logger = logging.getLogger(__name__)

app = FastAPI(title="MandryCabrio Booking Service")


@app.on_event("startup")
def start():
    config.setup_logging()
    init_db()
    logger.info("[booking] service started")


# ------------------------------------------------------------
# Erreurs -> {ok: false, error}
# ------------------------------------------------------------
@app.exception_handler(BookingError)
def booking_error(request: Request, exc: BookingError):
    return JSONResponse({"ok": False, "error": exc.message}, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"ok": False, "error": exc.detail}, status_code=exc.status_code,
                        headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
def invalid_request(request: Request, exc: RequestValidationError):
    logger.info("[booking] invalid request %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse({"ok": False, "error": "Invalid request"}, status_code=400)


@app.exception_handler(Exception)
def unexpected_error(request: Request, exc: Exception):
    logger.exception("[booking] unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"ok": False, "error": "Internal server error"}, status_code=500)


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(router)
app.include_router(reviews_router)
