"""Error taxonomy for the profile analysis pipeline.

Every error carries the client-facing ``code`` and HTTP ``status_code`` it
maps to; the API layer turns them into ``HTTPException``s.
"""


class AnalysisError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- User-correctable ---

class UploadValidationError(AnalysisError):
    code = "BAD_REQUEST"
    status_code = 400

    def __init__(self, problems: list[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


class UnreadablePdfError(AnalysisError):
    code = "BAD_REQUEST"
    status_code = 400


class ExtractionError(UnreadablePdfError):
    """PDF bytes could not be decoded or parsed into text."""


class EmptyContentError(AnalysisError):
    code = "BAD_REQUEST"
    status_code = 400


class RateLimitError(AnalysisError):
    code = "TOO_MANY_REQUESTS"
    status_code = 429

    def __init__(self, message: str, retry_after: float = 0.0):
        super().__init__(message)
        self.retry_after = retry_after


# --- Vendor side (operator-correctable) ---

class GatewayError(AnalysisError):
    pass


class AuthenticationError(GatewayError):
    pass


class UpstreamRateLimitError(GatewayError):
    pass


class UpstreamBadRequestError(GatewayError):
    code = "BAD_REQUEST"
    status_code = 400


class UpstreamError(GatewayError):
    pass


# Absorbed by the response parser, never surfaced to clients
class MalformedModelOutputError(Exception):
    pass
