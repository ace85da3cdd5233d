"""
Exceptions raised by the matching services.
"""


class MatchingError(Exception):
    """Base class for matching service errors."""
    pass


class LeadNotFound(MatchingError):
    """Raised when a referenced lead does not exist."""
    pass


class AssignmentNotFound(MatchingError):
    """Raised when a referenced assignment does not exist."""
    pass


class PersistenceFailure(MatchingError):
    """
    Raised when a directory, preference or assignment store read/write fails.
    Nothing is committed when this is raised, so the whole match can be retried.
    """
    pass


class InvalidStatusTransition(MatchingError):
    """Raised when an assignment is asked to leave a state it cannot leave."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move assignment from '{current}' to '{requested}'")
