from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.itineraries import router as itineraries_router
from src.adapters.api.controllers.stops import router as stops_router
from src.domain.exceptions import NoPathFound

app = FastAPI(title="BusTrack")
app.include_router(itineraries_router)
app.include_router(stops_router)


@app.exception_handler(NoPathFound)
async def no_path_found_handler(request: Request, exc: NoPathFound) -> JSONResponse:
    # "No itinerary" is a normal outcome, not a server failure.
    return JSONResponse(status_code=404, content={"detail": str(exc) or "No route found"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so clients can display them.

    Starlette's default 500 handler may return plain text/HTML.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = (os.getenv("BUSTRACK_REVEAL_ERRORS") or "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }

    if reveal or isinstance(exc, (FileNotFoundError, RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
