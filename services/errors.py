"""
Error types shared by the services and routes.

Each error carries the HTTP status the API answers with and a message that is
safe to show to the client. Diagnostic details (raw model output, schema
errors) stay on the exception for logging and never reach the response body.
"""

from typing import Optional


class GojunError(Exception):
    """Base class for every error the API turns into a JSON response."""

    status_code = 500
    public_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_public_message(self) -> str:
        return self.message


class InvalidInput(GojunError):
    """Client-supplied data fails a precondition."""

    status_code = 400
    public_message = "Invalid input"


class Unauthorized(GojunError):
    """Missing, malformed or rejected bearer credential."""

    status_code = 401
    public_message = "Invalid or expired token"


class ConfigError(GojunError):
    """Required process-wide configuration is missing."""

    status_code = 500
    public_message = "Server configuration error"


class GatewayError(GojunError):
    """Base class for failures talking to the text-generation provider."""


class TransientNetworkError(GatewayError):
    """Timeout, connection failure or 5xx from the provider. Retried by the gateway."""

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message or "Temporary failure reaching the AI provider")
        self.status = status


class UpstreamRejected(GatewayError):
    """The provider refused the request (4xx) or stayed unavailable after retries."""

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message or "The AI provider rejected the request")
        self.status = status

    def to_public_message(self) -> str:
        return f"Failed to get translation from AI: {self.message}"


class MalformedResponse(GatewayError):
    """The provider answered with text that holds no parseable JSON document."""

    public_message = "Invalid response format from AI"

    def __init__(self, raw_text: str):
        super().__init__(f"Could not extract JSON from response: {raw_text[:500]}")
        self.raw_text = raw_text

    def to_public_message(self) -> str:
        return self.public_message


class SchemaViolation(GatewayError):
    """The parsed document does not match the translation schema."""

    public_message = "AI response did not match the expected format"

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index

    def to_public_message(self) -> str:
        return self.public_message
