class StudyOrganizerError(Exception):
    """Base class for every error raised by the organizer."""


class ConfigurationError(StudyOrganizerError):
    pass


class StorageError(StudyOrganizerError):
    """A storage backend call failed (unavailable, denied, write error)."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class KeyAllocationFailed(StudyOrganizerError):
    # raised when every " (n)" suffix up to the cap is taken
    def __init__(self, key: str, attempts: int):
        super().__init__(f"Could not find a free key for '{key}' after {attempts} attempts")
        self.key = key
        self.attempts = attempts
