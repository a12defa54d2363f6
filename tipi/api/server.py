"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    uvicorn tipi.api.server:app --reload --port 3000

Endpoints:
    GET  /health
    POST /generate-itinerary
    GET  /itinerary/{user_id}
    POST /chat
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tipi import config
from tipi.api.routes import chat, health, itinerary

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="TIPI Travel Assistant API",
    version="1.0.0",
    description=(
        "LLM skeleton itineraries enriched with Google Places data, "
        "plus a grounded follow-up chat."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow the browser front-end (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": f"{where}: {message}" if where else message},
    )


app.include_router(health.router,    tags=["Health"])
app.include_router(itinerary.router, tags=["Itinerary"])
app.include_router(chat.router,      tags=["Chat"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("tipi.api.server:app", host="0.0.0.0", port=config.PORT, reload=True)
