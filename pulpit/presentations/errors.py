"""Error types for the presentations package."""


class PresentationError(Exception):
    """Base class for presentation errors."""


class PersistenceError(PresentationError):
    """Raised when a document's presentations could not be loaded or saved.

    The in-memory collection is left as it was when the failure happened;
    callers decide whether to retry the save or discard their changes.
    """

    def __init__(self, document_id: str, message: str | None = None):
        self.document_id = document_id
        self.message = message or f"Failed to persist presentations for document {document_id}"
        super().__init__(self.message)
