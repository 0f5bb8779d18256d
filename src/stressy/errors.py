"""Exception types raised by the Stressy pipelines."""

from stressy.constants import GENERATION_APOLOGY


class StressyError(Exception):
    """Base class for all Stressy errors."""

    pass


class ProviderUnavailable(StressyError):
    """An embedding or generation provider call failed or timed out."""

    pass


class GenerationFailed(ProviderUnavailable):
    """The generation provider returned no usable answer.

    The internal reason is kept for logging; ``user_message`` is the only
    text that should ever reach a caller.
    """

    def __init__(self, reason: str, user_message: str = GENERATION_APOLOGY):
        self.reason = reason
        self.user_message = user_message
        super().__init__(reason)


class DimensionMismatch(StressyError, ValueError):
    """Chunk embeddings of one document do not share a dimension."""

    def __init__(self, expected: int, actual: int, index: int):
        self.expected = expected
        self.actual = actual
        self.index = index
        super().__init__(
            f"Embedding {index} has dimension {actual}, expected {expected}"
        )


class SourceNotFound(StressyError):
    """An explicitly selected source does not exist for this owner."""

    def __init__(self, source_type: str, identifier: str):
        self.source_type = source_type
        self.identifier = identifier
        super().__init__(f"{source_type.capitalize()} '{identifier}' not found")


class EmptySelection(StressyError, ValueError):
    """A query selected no documents, notes or whiteboard."""

    def __init__(self, message: str = "Select at least one paper, your notes or your whiteboard"):
        super().__init__(message)


class EmptyDocument(StressyError, ValueError):
    """An uploaded document contains no extractable text."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Document '{name}' contains no extractable text")


class StorageError(StressyError):
    """A storage operation failed.

    Carries the operation name and the identifier it was working on so the
    failure can be traced without the original stack.
    """

    def __init__(self, operation: str, identifier: str | None, cause: Exception | None = None):
        self.operation = operation
        self.identifier = identifier
        detail = f": {type(cause).__name__}: {cause}" if cause is not None else ""
        target = f" '{identifier}'" if identifier else ""
        super().__init__(f"Storage operation {operation}{target} failed{detail}")


class PaperExists(StressyError):
    """A paper is already stored under the requested id.

    Paper ids are global keys, so the id may belong to another owner; the
    existing paper is never replaced.
    """

    def __init__(self, paper_id: str):
        self.paper_id = paper_id
        super().__init__(f"A paper with id '{paper_id}' already exists")
