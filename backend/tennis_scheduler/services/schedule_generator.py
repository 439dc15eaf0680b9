"""
Schedule Generator: build a full match schedule from a roster.

Singles: round-robin. Every unordered pair plays exactly once; pairs are packed
into rounds (one match per court, nobody twice in a round) preferring players
who have rested longest.

Doubles: greedy variety. Candidate 2v2 matches are scored on new partners, new
opponents, rest, and balanced participation; rounds are filled with the best
conflict-free candidates until the most active player reaches the cap.

Both formats are flattened the same way: courts are handed out round-robin
within each round, then matches are numbered 1..k per court in play order.

Selection note: within one round, a candidate that is still eligible keeps the
score it had when the round opened (only the picked players' records change,
and those players make every other candidate containing them ineligible).
Each round therefore scores the remaining candidates once and takes them
best-first, skipping conflicts; ties go to the earliest candidate in
enumeration order. Doubles candidates are scored as numpy arrays over the
whole candidate table, since a 24-player roster has 31,878 of them.
"""

from __future__ import annotations

import heapq
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from tennis_scheduler.models.tournament import TournamentType
from tennis_scheduler.services.player_activity import (
    DoublesTracking,
    PlayerActivity,
    max_matches_played,
    new_activity_map,
    placement_penalty,
    player_penalty,
    record_play,
)

logger = logging.getLogger(__name__)

UNIQUENESS_WEIGHT = 2
PARTICIPATION_WEIGHT = 10
# Doubles stops once someone has played this many times the per-player target
MAX_TARGET_MULTIPLE = 2
# Doubles scores are kept at this multiple of the composite score so the
# quarter-point participation term stays an exact integer
SCORE_SCALE = 4
EXCLUDED = np.iinfo(np.int64).min


@dataclass
class PlayerEntry:
    """Roster entry; placeholder_name is the identity key."""
    placeholder_name: str
    name: Optional[str] = None


@dataclass
class MatchSlotPlayer:
    placeholder_name: str
    team: Optional[int] = None  # None for singles, 1 | 2 for doubles


@dataclass
class GeneratedMatch:
    court_number: int
    match_order_on_court: int
    players: List[MatchSlotPlayer]

    def to_dict(self) -> dict:
        return {
            "court_number": self.court_number,
            "match_order_on_court": self.match_order_on_court,
            "players": [{"placeholder_name": p.placeholder_name, "team": p.team} for p in self.players],
        }


@dataclass
class GeneratedSchedule:
    matches: List[GeneratedMatch] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"matches": [m.to_dict() for m in self.matches]}


@dataclass
class PendingMatch:
    """Singles pairing before court assignment."""
    player1: str
    player2: str

    @property
    def all_players(self) -> List[str]:
        return [self.player1, self.player2]

    def slot_players(self) -> List[MatchSlotPlayer]:
        return [MatchSlotPlayer(self.player1), MatchSlotPlayer(self.player2)]


@dataclass
class PendingDoublesMatch:
    """Two disjoint teams of two before court assignment."""
    team1: Tuple[str, str]
    team2: Tuple[str, str]

    def __post_init__(self):
        if len(set(self.team1) | set(self.team2)) != 4:
            raise ValueError(f"Doubles match needs four distinct players, got {self.team1} vs {self.team2}")

    @property
    def all_players(self) -> List[str]:
        return [*self.team1, *self.team2]

    def slot_players(self) -> List[MatchSlotPlayer]:
        return [MatchSlotPlayer(p, team=1) for p in self.team1] + [MatchSlotPlayer(p, team=2) for p in self.team2]


AnyPendingMatch = Union[PendingMatch, PendingDoublesMatch]


@dataclass
class Round:
    """Matches played simultaneously; no player appears twice."""
    matches: List[AnyPendingMatch] = field(default_factory=list)
    players_in_round: Set[str] = field(default_factory=set)

    def can_add(self, match: AnyPendingMatch) -> bool:
        return self.players_in_round.isdisjoint(match.all_players)

    def add(self, match: AnyPendingMatch) -> None:
        if not self.can_add(match):
            raise ValueError(f"Player already booked in this round: {match.all_players}")
        self.matches.append(match)
        self.players_in_round.update(match.all_players)


# ============================================================================
# Candidate enumeration
# ============================================================================


def _placeholder_names(players: Sequence[Union[PlayerEntry, str]]) -> List[str]:
    return [p if isinstance(p, str) else p.placeholder_name for p in players]


def enumerate_singles_candidates(names: Sequence[str]) -> List[PendingMatch]:
    """Every unordered pair once, in roster order: C(n, 2) candidates."""
    return [PendingMatch(a, b) for a, b in combinations(names, 2)]


def enumerate_doubles_candidates(names: Sequence[str]) -> List[PendingDoublesMatch]:
    """Every pair of two-player teams with no player in common."""
    teams = list(combinations(names, 2))
    return [
        PendingDoublesMatch(team1=t1, team2=t2)
        for t1, t2 in combinations(teams, 2)
        if t1[0] not in t2 and t1[1] not in t2
    ]


def target_matches_per_player(player_count: int) -> int:
    """Heuristic per-player match volume for doubles: floor((n - 1) / 1.5)."""
    return int((player_count - 1) // 1.5)


# ============================================================================
# Round building
# ============================================================================


def _pick_round(ranked: List[Tuple[float, int]], candidates: Sequence[AnyPendingMatch], courts: int) -> Round:
    """
    Fill one round from (sort_key, candidate_index) pairs, lowest key first.

    Conflicting candidates are skipped; stops at `courts` matches or when the
    ranking is exhausted.
    """
    heapq.heapify(ranked)
    current = Round()
    while ranked and len(current.matches) < courts:
        _, index = heapq.heappop(ranked)
        candidate = candidates[index]
        if current.can_add(candidate):
            current.add(candidate)
    return current


def _remove_picked(remaining: List[AnyPendingMatch], picked: Round) -> List[AnyPendingMatch]:
    picked_ids = {id(m) for m in picked.matches}
    return [m for m in remaining if id(m) not in picked_ids]


def build_singles_rounds(players: Sequence[Union[PlayerEntry, str]], courts: int) -> List[Round]:
    """Round-robin pairs packed into rounds, lowest placement penalty first."""
    names = _placeholder_names(players)
    activity = new_activity_map(names)
    remaining: List[AnyPendingMatch] = list(enumerate_singles_candidates(names))
    rounds: List[Round] = []

    while remaining:
        round_index = len(rounds)
        ranked = [
            (placement_penalty(m.player1, m.player2, round_index, activity), i)
            for i, m in enumerate(remaining)
        ]
        current = _pick_round(ranked, remaining, courts)
        for match in current.matches:
            record_play(activity, match.all_players, round_index)
        rounds.append(current)
        remaining = _remove_picked(remaining, current)

    return rounds


@dataclass
class DoublesCandidateTable:
    """
    Doubles candidates in enumeration order, with the roster index of each
    seat as parallel arrays: team1 = (a, b), team2 = (c, d).

    seated[p] marks every candidate that puts roster player p on court.
    """
    matches: List[PendingDoublesMatch]
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray
    d: np.ndarray
    seated: np.ndarray
    available: np.ndarray

    @classmethod
    def build(cls, names: Sequence[str], index: Dict[str, int]) -> "DoublesCandidateTable":
        matches = enumerate_doubles_candidates(names)
        seats = np.array(
            [[index[p] for p in m.all_players] for m in matches], dtype=np.intp
        ).reshape(len(matches), 4)
        columns = np.arange(len(matches))
        seated = np.zeros((len(index), len(matches)), dtype=bool)
        for seat in seats.T:
            seated[seat, columns] = True
        return cls(
            matches=matches,
            a=seats[:, 0],
            b=seats[:, 1],
            c=seats[:, 2],
            d=seats[:, 3],
            seated=seated,
            available=np.ones(len(matches), dtype=bool),
        )

    def involving(self, players: Sequence[int]) -> np.ndarray:
        """Mask of candidates that seat any of the given roster indices."""
        return self.seated[list(players)].any(axis=0)


def score_doubles_candidates(
    table: DoublesCandidateTable,
    penalty: np.ndarray,
    played: np.ndarray,
    tracking: DoublesTracking,
    target: int,
) -> np.ndarray:
    """
    Composite doubles score of every candidate, times SCORE_SCALE; higher is better.

    2 * uniqueness, minus the placement penalty of team1's two players,
    plus 10 per match the four players sit below the target on average.
    `penalty` and `played` are per-player arrays (roster order) taken when the
    round opens. Candidates already used are EXCLUDED.
    """
    a, b, c, d = table.a, table.b, table.c, table.d
    scores = SCORE_SCALE * UNIQUENESS_WEIGHT * tracking.uniqueness_by_index(a, b, c, d)
    scores -= SCORE_SCALE * (penalty[a] + penalty[b])
    scores += PARTICIPATION_WEIGHT * (SCORE_SCALE * target - (played[a] + played[b] + played[c] + played[d]))
    scores[~table.available] = EXCLUDED
    return scores


def _activity_arrays(names: Sequence[str], activity: Dict[str, PlayerActivity], round_index: int):
    penalty = np.array([player_penalty(activity[p], round_index) for p in names], dtype=np.int64)
    played = np.array([activity[p].matches_played for p in names], dtype=np.int64)
    return penalty, played


def build_doubles_rounds(players: Sequence[Union[PlayerEntry, str]], courts: int) -> List[Round]:
    """Greedy variety-maximizing doubles rounds, capped by the participation heuristic."""
    names = _placeholder_names(players)
    activity = new_activity_map(names)
    tracking = DoublesTracking(names)
    target = target_matches_per_player(len(names))
    table = DoublesCandidateTable.build(names, tracking.index)
    rounds: List[Round] = []

    while table.available.any():
        if max_matches_played(activity) >= target * MAX_TARGET_MULTIPLE:
            break

        round_index = len(rounds)
        penalty, played = _activity_arrays(names, activity, round_index)
        scores = score_doubles_candidates(table, penalty, played, tracking, target)
        current = Round()
        while len(current.matches) < courts:
            # argmax returns the first maximum: ties go to the earliest candidate
            best = int(np.argmax(scores))
            if scores[best] == EXCLUDED:
                break
            current.add(table.matches[best])
            table.available[best] = False
            seats = [table.a[best], table.b[best], table.c[best], table.d[best]]
            scores[table.involving(seats)] = EXCLUDED
        if not current.matches:
            break

        for match in current.matches:
            record_play(activity, match.all_players, round_index)
            tracking.record(match.team1, match.team2)
        rounds.append(current)

    return rounds


# ============================================================================
# Flattening
# ============================================================================


def flatten_rounds(rounds: Sequence[Round], courts: int) -> List[GeneratedMatch]:
    """
    Turn rounds into court/order slots.

    court = position_in_round % courts + 1; then each court is renumbered
    1..k in the order its matches were appended.
    """
    final: List[GeneratedMatch] = []
    for current in rounds:
        for position, match in enumerate(current.matches):
            final.append(
                GeneratedMatch(
                    court_number=position % courts + 1,
                    match_order_on_court=0,
                    players=match.slot_players(),
                )
            )

    next_order: Dict[int, int] = defaultdict(int)
    for match in final:
        next_order[match.court_number] += 1
        match.match_order_on_court = next_order[match.court_number]

    return final


# ============================================================================
# Entry points
# ============================================================================


def generate_singles_schedule(courts: int, players: Sequence[Union[PlayerEntry, str]]) -> GeneratedSchedule:
    rounds = build_singles_rounds(players, courts)
    return GeneratedSchedule(matches=flatten_rounds(rounds, courts))


def generate_doubles_schedule(courts: int, players: Sequence[Union[PlayerEntry, str]]) -> GeneratedSchedule:
    rounds = build_doubles_rounds(players, courts)
    return GeneratedSchedule(matches=flatten_rounds(rounds, courts))


def generate_schedule(
    tournament_type: Union[TournamentType, str],
    courts: int,
    players: Sequence[Union[PlayerEntry, str]],
) -> GeneratedSchedule:
    """
    Generate a complete schedule for a validated request.

    Preconditions (checked by the caller): courts >= 1, unique placeholder
    names, at least 2 players for singles and 4 for doubles. An unknown
    tournament type raises ValueError before any work is done.
    """
    tournament_type = TournamentType(tournament_type)
    if tournament_type == TournamentType.singles:
        schedule = generate_singles_schedule(courts, players)
    else:
        schedule = generate_doubles_schedule(courts, players)

    logger.info(
        "Generated %s schedule: players=%d courts=%d matches=%d",
        tournament_type.value,
        len(players),
        courts,
        len(schedule.matches),
    )
    return schedule
