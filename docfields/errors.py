"""Exceptions raised at the document loading boundary."""


class DocFieldsError(Exception):
    """Base class for docfields errors."""


class InputUnavailableError(DocFieldsError):
    """No usable page images could be obtained for a document.

    Args:
        reason: Human-readable diagnostic describing what went wrong.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
