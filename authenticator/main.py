import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authenticator.config import settings
from authenticator.database import init_db
from authenticator.logging_config import setup_logging
from authenticator.routers import auth

LOGGER = logging.getLogger(__name__)

app = FastAPI(title=f"{settings.app_name} Authenticator")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api")


@app.on_event("startup")
def startup() -> None:
    setup_logging()
    init_db()
    LOGGER.info("Authenticator backend started")


@app.get("/")
def root():
    return {"status": f"{settings.app_name} Authenticator Backend is running"}
