from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.routers import restaurants, reservations
from app.config import settings
from app.utils.logging_config import setup_logging
from app.utils.rate_limit import limiter
from app.middleware.logging_middleware import log_requests


logger = setup_logging()
logger.info("Application starting...")
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.middleware("http")(log_requests)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(restaurants.router)
app.include_router(reservations.router)

@app.get("/")
def root() -> dict:
        return {"message": "Tischreservierung läuft!", "app": settings.app_name}

@app.get("/health")
def health() -> dict:
        return {"status": "ok"}
