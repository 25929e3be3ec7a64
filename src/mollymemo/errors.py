"""Error taxonomy shared by extractors, AI calls, and the orchestrator.

Extractors catch these at their own boundary and return None. Only the
orchestrator turns a None or an escaped exception into a failed item.
A negative verification answer is an ordinary ``False`` result, not an error.
"""


class PipelineError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(PipelineError):
    """A required credential or setting is absent. Never retried."""


class TransientNetworkError(PipelineError):
    """Network failure or 5xx response. Retried with bounded backoff."""


class UpstreamRejection(PipelineError):
    """A third party answered with a non-success status. Terminal for the call."""

    def __init__(self, service: str, status_code: int, detail: str = "") -> None:
        self.service = service
        self.status_code = status_code
        self.detail = detail
        message = f"{service} returned {status_code}"
        if detail:
            message = f"{message}: {detail[:200]}"
        super().__init__(message)


class ParseFailure(PipelineError):
    """AI output was not valid JSON of the expected shape after fence stripping."""


class ProcessingFailure(PipelineError):
    """A stage produced no usable result. The message is shown to the user."""
