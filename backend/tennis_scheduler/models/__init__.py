from tennis_scheduler.models.match import Match
from tennis_scheduler.models.match_player import MatchPlayer
from tennis_scheduler.models.player import Player
from tennis_scheduler.models.schedule import Schedule
from tennis_scheduler.models.tournament import Tournament, TournamentType

__all__ = [
    "Tournament",
    "TournamentType",
    "Player",
    "Schedule",
    "Match",
    "MatchPlayer",
]
