"""FastAPI application entrypoint. No business logic; only wiring and middleware.

Seeding is not done here; run `python -m streamgate.seed` before starting.
"""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streamgate.api.exception_handlers import setup_exception_handlers
from streamgate.api.v1 import router as v1_router
from streamgate.core.config import settings

app = FastAPI(
    title="StreamGate API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)
app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "StreamGate API"}
