"""
Domain errors raised by the incident services.

NotFoundError and StoreUnavailable propagate to callers. ExternalAnalysisFailure
is caught at the image-analysis boundary and turned into a failed result.
"""


class RoadWatchError(Exception):
    """Base class for every error raised by the incident core."""


class NotFoundError(RoadWatchError):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class StoreUnavailable(RoadWatchError):
    """No backing database session is configured."""


class Unauthorized(RoadWatchError):
    """Caller's role may not perform the requested mutation."""


class ExternalAnalysisFailure(RoadWatchError):
    """Vision/decision model call failed or returned unparseable content."""


class InvalidStatusTransition(RoadWatchError):
    def __init__(self, entity: str, current, target, reason: str = ""):
        self.entity = entity
        self.current = current
        self.target = target
        message = f"{entity} cannot move from '{current}' to '{target}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ProcessingInProgress(RoadWatchError):
    """Another automatic run for the same incident has not finished yet."""

    def __init__(self, incident_id: int):
        self.incident_id = incident_id
        super().__init__(f"Incident {incident_id} is already being processed")
