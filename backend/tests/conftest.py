import os

# Keep app startup (init_db) off the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from tennis_scheduler.database import get_session  # noqa: E402
from tennis_scheduler.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    from tennis_scheduler.models.match import Match  # noqa: F401
    from tennis_scheduler.models.match_player import MatchPlayer  # noqa: F401
    from tennis_scheduler.models.player import Player  # noqa: F401
    from tennis_scheduler.models.schedule import Schedule  # noqa: F401
    from tennis_scheduler.models.tournament import Tournament  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place
    for the entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


def roster(count: int, prefix: str = "Player") -> list[dict]:
    return [{"placeholder_name": f"{prefix} {i}", "name": None} for i in range(1, count + 1)]


@pytest.fixture(name="create_tournament")
def create_tournament_fixture(client: TestClient):
    """Generate a schedule through the API and save it as a tournament; returns the detail payload."""

    def _create(type_: str = "singles", courts: int = 2, players: int = 4, name: str = "Club Night") -> dict:
        players_payload = roster(players)
        generated = client.post(
            "/api/schedules/generate",
            json={"type": type_, "courts": courts, "players": players_payload},
        )
        assert generated.status_code == 200, generated.text
        created = client.post(
            "/api/tournaments",
            json={
                "name": name,
                "type": type_,
                "courts": courts,
                "players": players_payload,
                "schedule": generated.json(),
            },
        )
        assert created.status_code == 201, created.text
        detail = client.get(f"/api/tournaments/{created.json()['id']}")
        assert detail.status_code == 200
        return detail.json()

    return _create
