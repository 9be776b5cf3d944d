import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pickleball.core.locks import KeyedLock
from pickleball.exceptions import (
    ConstraintViolation,
    DataIntegrityAnomaly,
    InvalidMatchSetup,
    InvalidScoringTeam,
    InvalidTransition,
    MatchNotLive,
    NoPointsToUndo,
    RecordNotFound,
)
from pickleball.models.match_model import (
    NEXT_STATUS,
    SCORE_FIELDS,
    AnyMatch,
    MatchModel,
    MatchStatus,
    MatchType,
    PointModel,
    ledger_order,
)
from pickleball.models.notification import EventType
from pickleball.services.notification_service import NotificationService
from pickleball.services.standings_service import StandingsService
from pickleball.store.base import EntityKind, EntityStore

logger = logging.getLogger(__name__)

# Freeform matches are looked up first, then bracket matches
MATCH_KINDS = (EntityKind.MATCH, EntityKind.POOL_MATCH)


def _schedule_order(match: AnyMatch):
    return (match.scheduled_at is None, match.scheduled_at or datetime.min, match.created_at)


class MatchService:
    """
    State machine and scoring ledger for freeform matches and pool/bracket
    matches alike: scheduled -> live -> completed, with point-by-point
    scoring and single-step undo while live.

    Every mutation of one match runs under that match's lock and writes the
    point ledger and the cached score counters in one store transaction, so
    concurrent referee actions can neither lose an increment nor leave the
    two out of step.
    """

    def __init__(
        self,
        store: EntityStore,
        notifications: NotificationService,
        standings_service: Optional[StandingsService] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self.store = store
        self.notifications = notifications
        self.standings_service = standings_service
        self.locks = locks or KeyedLock()

    # --- Lookups ---

    def _locate(self, match_id: str) -> Tuple[EntityKind, AnyMatch]:
        for kind in MATCH_KINDS:
            try:
                return kind, self.store.get(kind, match_id)
            except RecordNotFound:
                continue
        raise RecordNotFound(f"Match {match_id} not found", kind="match", id=match_id)

    def get_match(self, match_id: str) -> AnyMatch:
        return self._locate(match_id)[1]

    def list_points(self, match_id: str) -> List[PointModel]:
        """The match's point ledger, oldest first."""
        self._locate(match_id)
        return sorted(self.store.list(EntityKind.POINT, match_id=match_id), key=ledger_order)

    def get_score(self, match_id: str) -> Tuple[int, int]:
        """Score derived from the point ledger rather than the cached counters."""
        points = self.list_points(match_id)
        return (
            sum(1 for p in points if p.scoring_team == 1),
            sum(1 for p in points if p.scoring_team == 2),
        )

    def verify_ledger(self, match_id: str) -> AnyMatch:
        with self.locks.hold(match_id):
            match = self.get_match(match_id)
            derived = self.get_score(match_id)
            if derived != (match.score_team1, match.score_team2):
                logger.error(
                    "Ledger for match %s gives %s-%s but match row holds %s-%s",
                    match_id, derived[0], derived[1], match.score_team1, match.score_team2,
                )
                raise DataIntegrityAnomaly(
                    f"Point ledger and score of match {match_id} diverge",
                    match_id=match_id, ledger=derived, cached=(match.score_team1, match.score_team2),
                )
            return match

    def list_matches(self, tournament_id: str) -> List[MatchModel]:
        """Freeform matches of a tournament in schedule order."""
        return sorted(self.store.list(EntityKind.MATCH, tournament_id=tournament_id), key=_schedule_order)

    def list_referee_matches(self, referee_id: str) -> List[AnyMatch]:
        matches = []
        for kind in MATCH_KINDS:
            matches.extend(self.store.list(kind, referee_id=referee_id))
        return sorted(matches, key=_schedule_order)

    def list_live_matches(self, tournament_id: Optional[str] = None) -> List[AnyMatch]:
        filters = {"status": MatchStatus.LIVE}
        if tournament_id is not None:
            filters["tournament_id"] = tournament_id
        matches = []
        for kind in MATCH_KINDS:
            matches.extend(self.store.list(kind, **filters))
        return sorted(matches, key=_schedule_order)

    # --- Creation ---

    def create_match(
        self,
        tournament_id: str,
        team1_players: List[str],
        team2_players: List[str],
        scheduled_at: datetime,
        referee_id: Optional[str] = None,
    ) -> MatchModel:
        """Creates a freeform singles or doubles match (1-2 players per side)."""
        self.store.get(EntityKind.TOURNAMENT, tournament_id)

        for side, players in (("Team 1", team1_players), ("Team 2", team2_players)):
            if not 1 <= len(players) <= 2:
                raise InvalidMatchSetup(f"{side} must have one or two players", side=side)
            if len(set(players)) != len(players):
                raise InvalidMatchSetup(f"{side} lists the same player twice", side=side)
        if set(team1_players) & set(team2_players):
            raise InvalidMatchSetup("A player cannot be on both teams")
        if scheduled_at is None:
            raise InvalidMatchSetup("A scheduled time is required")
        for player_id in list(team1_players) + list(team2_players):
            player = self.store.get(EntityKind.PLAYER, player_id)
            # Registered players have no owning tournament and may play anywhere
            if player.tournament_id is not None and player.tournament_id != tournament_id:
                raise ConstraintViolation(
                    f"Player {player.name} belongs to another tournament",
                    tournament_id=tournament_id, player_id=player_id,
                )

        match = MatchModel(
            tournament_id=tournament_id,
            team1_players=list(team1_players),
            team2_players=list(team2_players),
            scheduled_at=scheduled_at,
            referee_id=referee_id,
        )
        created = self.store.insert(EntityKind.MATCH, match)
        logger.info("Created match %s in tournament %s", created.id, tournament_id)
        self.notifications.publish(EventType.INSERT, EntityKind.MATCH, created)
        return created

    def assign_referee(self, match_id: str, referee_id: Optional[str]) -> AnyMatch:
        with self.locks.hold(match_id):
            kind, match = self._locate(match_id)
            if match.status == MatchStatus.COMPLETED:
                raise InvalidTransition(
                    f"Cannot change the referee of completed match {match_id}",
                    match_id=match_id, status=match.status,
                )
            updated = self.store.update(kind, match_id, {"referee_id": referee_id})
            self.notifications.publish(EventType.UPDATE, kind, updated)
        return updated

    # --- Lifecycle ---

    def _advance(self, match_id: str, expected: MatchStatus) -> Tuple[EntityKind, AnyMatch]:
        target = NEXT_STATUS[expected]
        with self.locks.hold(match_id):
            kind, match = self._locate(match_id)
            if match.status != expected:
                logger.warning(
                    "Rejected %s -> %s for match %s (status is %s)",
                    expected.value, target.value, match_id, match.status,
                )
                raise InvalidTransition(
                    f"Cannot move match {match_id} to {target.value}: status is {match.status}",
                    match_id=match_id, status=match.status, target=target.value,
                )
            updated = self.store.update(kind, match_id, {"status": target})
            logger.info("Match %s is now %s", match_id, target.value)
            self.notifications.publish(EventType.UPDATE, kind, updated)
        return kind, updated

    def start_match(self, match_id: str) -> AnyMatch:
        """scheduled -> live. Calling it on a match that already started is an error, not a no-op."""
        return self._advance(match_id, MatchStatus.SCHEDULED)[1]

    def end_match(self, match_id: str) -> AnyMatch:
        """
        live -> completed. For pool-play matches the pool's standings are
        recomputed afterwards; the completion stays committed even if that
        recomputation reports a DataIntegrityAnomaly (e.g. a tied score).
        """
        kind, updated = self._advance(match_id, MatchStatus.LIVE)
        if (
            kind == EntityKind.POOL_MATCH
            and updated.match_type == MatchType.POOL
            and self.standings_service is not None
        ):
            self.standings_service.recompute_standings(updated.tournament_id, updated.pool)
        return updated

    # --- Scoring ---

    def _require_live(self, match_id: str) -> Tuple[EntityKind, AnyMatch]:
        kind, match = self._locate(match_id)
        if match.status != MatchStatus.LIVE:
            logger.warning("Scoring rejected for match %s (status is %s)", match_id, match.status)
            raise MatchNotLive(f"Match {match_id} is not live (status is {match.status})", match_id=match_id, status=match.status)
        return kind, match

    def record_point(self, match_id: str, team: int) -> AnyMatch:
        """Appends one point for ``team`` (1 or 2) and bumps its score by exactly one."""
        if team not in SCORE_FIELDS:
            raise InvalidScoringTeam(f"Scoring team must be 1 or 2, got {team!r}", team=team)

        with self.locks.hold(match_id):
            kind, match = self._require_live(match_id)
            field = SCORE_FIELDS[team]
            with self.store.transaction():
                ledger = self.store.list(EntityKind.POINT, match_id=match_id)
                last = max(ledger, key=ledger_order) if ledger else None
                now = datetime.utcnow()
                point = PointModel(
                    match_id=match_id,
                    scoring_team=team,
                    # Never earlier than the previous point, even if the wall clock steps back
                    timestamp=max(now, last.timestamp) if last else now,
                    sequence=max(p.sequence for p in ledger) + 1 if ledger else 1,
                )
                self.store.insert(EntityKind.POINT, point)
                updated = self.store.update(kind, match_id, {field: getattr(match, field) + 1})

            logger.debug("Point to team %s in match %s, now %s-%s", team, match_id, updated.score_team1, updated.score_team2)
            self.notifications.publish(EventType.INSERT, EntityKind.POINT, point)
            self.notifications.publish(EventType.UPDATE, kind, updated)
        return updated

    def undo_last_point(self, match_id: str) -> AnyMatch:
        """Retracts the most recent point only; there is no deeper undo history than the ledger."""
        with self.locks.hold(match_id):
            kind, match = self._require_live(match_id)
            with self.store.transaction():
                ledger = self.store.list(EntityKind.POINT, match_id=match_id)
                if not ledger:
                    logger.warning("Undo rejected for match %s: no points recorded", match_id)
                    raise NoPointsToUndo(f"Match {match_id} has no points to undo", match_id=match_id)
                last = max(ledger, key=ledger_order)
                self.store.delete(EntityKind.POINT, last.id)
                field = SCORE_FIELDS[last.scoring_team]
                updated = self.store.update(kind, match_id, {field: max(0, getattr(match, field) - 1)})

            logger.info("Undid last point (team %s) in match %s", last.scoring_team, match_id)
            self.notifications.publish(EventType.DELETE, EntityKind.POINT, last)
            self.notifications.publish(EventType.UPDATE, kind, updated)
        return updated
