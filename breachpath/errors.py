from __future__ import annotations


class WorkflowError(Exception):
    """Base class for every failure the client surfaces to its caller."""


class ValidationError(WorkflowError):
    """Raised before any request is sent; blocks progression."""


class NoFileSelected(ValidationError):
    def __init__(self) -> None:
        super().__init__("Please select a file first!")


class UnsupportedFileType(ValidationError):
    def __init__(self, content_type: str | None):
        self.content_type = content_type
        super().__init__("Only TXT files are allowed.")


class EmptyProblem(ValidationError):
    def __init__(self) -> None:
        super().__init__("Please upload the file and process it first.")


class RemoteRejection(WorkflowError):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class TransportFailure(WorkflowError):
    """Network-level failure talking to the remote service."""


class MalformedResponse(TransportFailure):
    """The remote service answered, but not with the documented payload."""


class WorkflowBusy(WorkflowError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"A {operation} request is already in progress.")


class InvalidTransition(WorkflowError):
    def __init__(self, phase: str, event: str):
        self.phase = phase
        self.event = event
        super().__init__(f"Event '{event}' is not allowed while the workflow is '{phase}'.")


class NoResultToExport(WorkflowError):
    def __init__(self) -> None:
        super().__init__("No result to download!")
