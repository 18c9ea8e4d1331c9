# coachdesk/services/errors.py


class CoachingError(Exception):
    """Base class for errors scoped to a single scoring submission."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ScoringValidationError(CoachingError):
    """The submission is rejected before anything is written."""


class CatalogUnavailableError(CoachingError):
    """The KPI catalog for the agent's campaign could not be resolved."""


class SubmissionPersistenceError(CoachingError):
    """Writing the coaching log or its score records failed."""
