"""
Player activity and doubles variety tracking shared by the schedule generator.

Both trackers are owned by a single generation call: they are created empty,
grow while matches are placed into rounds, and are thrown away with the call.

Scoring conventions:
- placement_penalty(): lower is better (recency of play)
- DoublesTracking.uniqueness(): higher is better (new partners/opponents)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

import numpy as np

# "Never played" sentinel; far enough back that no recency penalty applies
NEVER_PLAYED = -100

BACK_TO_BACK_PENALTY = 100
ONE_ROUND_BREAK_PENALTY = 30
REST_PENALTY_BASELINE = 10

NEW_PARTNERSHIP_BONUS = 50
NEW_OPPONENT_BONUS = 25


@dataclass
class PlayerActivity:
    last_round_played: int = NEVER_PLAYED
    matches_played: int = 0


def new_activity_map(placeholder_names: Iterable[str]) -> Dict[str, PlayerActivity]:
    """One fresh PlayerActivity record per player identity."""
    return {name: PlayerActivity() for name in placeholder_names}


def record_play(activity: Dict[str, PlayerActivity], players: Iterable[str], round_index: int) -> None:
    """Mark each player as having played one match in round_index."""
    for player in players:
        record = activity.get(player)
        if record is None:
            continue
        record.last_round_played = round_index
        record.matches_played += 1


def player_penalty(record: PlayerActivity, round_index: int) -> int:
    """Recency penalty for one player in round_index."""
    penalty = 0
    if record.last_round_played == round_index - 1:
        penalty += BACK_TO_BACK_PENALTY
    if record.last_round_played == round_index - 2:
        penalty += ONE_ROUND_BREAK_PENALTY
    rest = round_index - record.last_round_played
    penalty += max(0, REST_PENALTY_BASELINE - rest)
    return penalty


def placement_penalty(
    player1: str,
    player2: str,
    round_index: int,
    activity: Dict[str, PlayerActivity],
) -> int:
    """
    Penalty for placing player1 and player2 in round round_index.

    Per player:
    - +100 if they played in the immediately preceding round
    - +30 if they played two rounds before
    - +max(0, 10 - rounds_of_rest), so longer rest is cheaper

    Returns 0 if either player is unknown to the activity map.
    """
    record1 = activity.get(player1)
    record2 = activity.get(player2)
    if record1 is None or record2 is None:
        return 0
    return player_penalty(record1, round_index) + player_penalty(record2, round_index)


def max_matches_played(activity: Dict[str, PlayerActivity]) -> int:
    return max((record.matches_played for record in activity.values()), default=0)


class DoublesTracking:
    """
    Who has partnered whom, and who has faced whom.

    Both relations are symmetric boolean matrices over the roster, indexed by
    roster position, and only grow. The matrix form lets the generator score
    every remaining candidate of a round in one vectorized pass.
    """

    def __init__(self, placeholder_names: Iterable[str]):
        self.index: Dict[str, int] = {}
        for name in placeholder_names:
            self.index.setdefault(name, len(self.index))
        size = len(self.index)
        self.partnered = np.zeros((size, size), dtype=bool)
        self.faced = np.zeros((size, size), dtype=bool)

    def have_partnered(self, a: str, b: str) -> bool:
        if a not in self.index or b not in self.index:
            return False
        return bool(self.partnered[self.index[a], self.index[b]])

    def have_faced(self, a: str, b: str) -> bool:
        if a not in self.index or b not in self.index:
            return False
        return bool(self.faced[self.index[a], self.index[b]])

    def uniqueness(self, team1: Tuple[str, str], team2: Tuple[str, str]) -> int:
        """
        Variety score for team1 vs team2 (0..200).

        +50 for each team whose partnership is new, +25 for each of the four
        cross-net pairings that has not happened yet.
        """
        score = 0
        if not self.have_partnered(team1[0], team1[1]):
            score += NEW_PARTNERSHIP_BONUS
        if not self.have_partnered(team2[0], team2[1]):
            score += NEW_PARTNERSHIP_BONUS
        for p1 in team1:
            for p2 in team2:
                if not self.have_faced(p1, p2):
                    score += NEW_OPPONENT_BONUS
        return score

    def uniqueness_by_index(self, a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray) -> np.ndarray:
        """uniqueness() for many matches at once: teams (a, b) vs (c, d) as roster indices."""
        score = NEW_PARTNERSHIP_BONUS * (~self.partnered[a, b]).astype(np.int64)
        score += NEW_PARTNERSHIP_BONUS * ~self.partnered[c, d]
        for p1, p2 in ((a, c), (a, d), (b, c), (b, d)):
            score += NEW_OPPONENT_BONUS * ~self.faced[p1, p2]
        return score

    def record(self, team1: Tuple[str, str], team2: Tuple[str, str]) -> None:
        """Mark both partnerships and the four cross-net pairings as seen; players must be on the roster."""
        for a, b in (team1, team2):
            i, j = self.index[a], self.index[b]
            self.partnered[i, j] = self.partnered[j, i] = True
        for p1 in team1:
            for p2 in team2:
                i, j = self.index[p1], self.index[p2]
                self.faced[i, j] = self.faced[j, i] = True
