"""Error taxonomy for scanning and calendar edits."""


class TaskCalendarError(Exception):
    """Base class for every task calendar failure."""


class ScanIOError(TaskCalendarError):
    """A document could not be read during a scan. Never fatal to the scan."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Could not read {path}: {cause}")
        self.path = path
        self.cause = cause


class EditError(TaskCalendarError):
    """Base class for failures that abort a single edit."""


class DocumentNotFound(EditError):
    pass


class LineOutOfBounds(EditError):
    pass


class NoDateMarker(EditError):
    pass


class StatusWriteFailed(EditError):
    pass


class StaleLineReference(EditError):
    """The recorded line no longer holds the task it was scanned from."""


class HeaderNotEditable(EditError):
    pass


class UnknownEvent(EditError):
    pass


class InvalidDate(EditError):
    pass


class DocumentWriteError(EditError):
    """The document store failed to read or persist during an edit."""


class SettingsError(TaskCalendarError, ValueError):
    """The settings blob could not be parsed."""
