# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from tennis_scheduler.models.match import Match  # noqa: F401
from tennis_scheduler.models.match_player import MatchPlayer  # noqa: F401
from tennis_scheduler.models.player import Player  # noqa: F401
from tennis_scheduler.models.schedule import Schedule  # noqa: F401
from tennis_scheduler.models.tournament import Tournament  # noqa: F401
