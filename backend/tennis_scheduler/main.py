import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tennis_scheduler.database import init_db
from tennis_scheduler.routes import schedules, tournaments

APP_NAME = "Tennis Tournament Scheduler API"

logger = logging.getLogger(__name__)

app = FastAPI(title=APP_NAME)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(schedules.router, prefix="/api", tags=["schedules"])


def configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.on_event("startup")
def on_startup():
    configure_logging()
    init_db()

    for r in app.routes:
        methods = getattr(r, "methods", None)
        path = getattr(r, "path", None)
        if path:
            logger.debug("%-20s %s", ", ".join(sorted(methods)) if methods else "N/A", path)


@app.get("/api/health")
def health_check():
    return {"app_name": APP_NAME, "status": "healthy"}
