import os
from pathlib import Path
from typing import Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

# Tournaments, rosters and generated schedules live in one database; a local
# SQLite file unless DATABASE_URL points elsewhere.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tournament.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def _sqlite_file(url: str) -> Optional[Path]:
    """On-disk path of a SQLite URL, or None for other backends and :memory:."""
    if not url.startswith("sqlite") or ":memory:" in url:
        return None
    return Path(url.replace("sqlite:///", "", 1))


def _build_engine(url: str) -> Engine:
    # FastAPI serves sync routes from a thread pool, so SQLite connections cross threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    db_file = _sqlite_file(url)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=SQL_ECHO, connect_args=connect_args)


engine: Engine = _build_engine(DATABASE_URL)


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session for tournament and schedule routes; closed when the request ends"""
    with Session(engine) as session:
        yield session


def init_db(bind: Optional[Engine] = None) -> None:
    """Create the tournament, player, schedule, match and match-player tables if missing"""
    # Table classes register on SQLModel.metadata when their modules are imported
    from tennis_scheduler.models.match import Match  # noqa: F401
    from tennis_scheduler.models.match_player import MatchPlayer  # noqa: F401
    from tennis_scheduler.models.player import Player  # noqa: F401
    from tennis_scheduler.models.schedule import Schedule  # noqa: F401
    from tennis_scheduler.models.tournament import Tournament  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)
