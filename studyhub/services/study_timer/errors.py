"""Study timer exceptions"""


class StudyTimerError(Exception):
    """Base class for study timer errors"""


class DurationValidationError(StudyTimerError, ValueError):
    """Duration input outside the accepted bounds. No state was changed."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class InvalidTransitionError(StudyTimerError):
    """Operation not allowed from the current timer status"""

    def __init__(self, operation: str, status: str):
        super().__init__(f"Cannot {operation} while timer is {status}")
        self.operation = operation
        self.status = status


class StorageError(StudyTimerError):
    """Persisting a study session failed"""


class PermissionDenied(StudyTimerError):
    """System notification permission was refused"""


class AudioUnavailable(StudyTimerError):
    """Host cannot play the completion tone"""


class ViewNotFoundError(StudyTimerError, LookupError):
    """No open timer view with this id for the requesting user"""

    def __init__(self, view_id: str):
        super().__init__(f"Timer view {view_id} not found")
        self.view_id = view_id
