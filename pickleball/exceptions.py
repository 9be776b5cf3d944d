"""Exceptions raised by the pickleball tournament engine.

Every error carries a stable ``kind`` string so callers (and the HTTP layer)
can tell failures apart without parsing messages, and a ``retryable`` flag
that is only set for transient collaborator failures.
"""

from typing import Any, Optional


class PickleballError(Exception):
    """Base exception for all engine errors."""

    kind = "pickleball_error"
    retryable = False

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.__class__.__doc__ or self.kind
        self.context = context
        super().__init__(self.message)


# ========== Match lifecycle ==========


class MatchLifecycleError(PickleballError):
    """Base exception for match state machine errors."""

    kind = "match_lifecycle_error"


class InvalidTransition(MatchLifecycleError):
    """Raised when a match status change does not follow scheduled -> live -> completed."""

    kind = "invalid_transition"


class MatchNotLive(MatchLifecycleError):
    """Raised when scoring is attempted on a match that is not live."""

    kind = "match_not_live"


class NoPointsToUndo(MatchLifecycleError):
    """Raised when undo is requested on a match with an empty point ledger."""

    kind = "no_points_to_undo"


class InvalidScoringTeam(MatchLifecycleError, ValueError):
    """Raised when a point is credited to a team other than 1 or 2."""

    kind = "invalid_scoring_team"


class InvalidMatchSetup(MatchLifecycleError, ValueError):
    """Raised when a freeform match is created with an invalid line-up."""

    kind = "invalid_match_setup"


# ========== Scheduling and progression ==========


class SchedulingError(PickleballError):
    """Base exception for fixture generation errors."""

    kind = "scheduling_error"


class AlreadyGenerated(SchedulingError):
    """Raised when fixtures of a stage already exist for the tournament."""

    kind = "already_generated"


class InvalidTeamConfiguration(SchedulingError):
    """Raised when the tournament does not have exactly three teams in each pool."""

    kind = "invalid_team_configuration"


class ProgressionError(PickleballError):
    """Base exception for bracket progression errors."""

    kind = "progression_error"


class PoolPlayIncomplete(ProgressionError):
    """Raised when semifinals are requested before every pool match is completed."""

    kind = "pool_play_incomplete"


class SemifinalsIncomplete(ProgressionError):
    """Raised when the final is requested before both semifinals are completed."""

    kind = "semifinals_incomplete"


class DataIntegrityAnomaly(PickleballError):
    """Raised when stored data breaks an engine invariant, e.g. a completed match with a tied score."""

    kind = "data_integrity_anomaly"


# ========== Entity store ==========


class StoreError(PickleballError):
    """Base exception for entity store errors."""

    kind = "store_error"


class RecordNotFound(StoreError):
    """Raised when a record does not exist."""

    kind = "not_found"


class ConstraintViolation(StoreError):
    """Raised when a write would break a uniqueness or integrity constraint."""

    kind = "constraint_violation"


class StoreUnavailable(StoreError):
    """Raised when the backing store cannot be reached or fails mid-operation."""

    kind = "store_unavailable"
    retryable = True
