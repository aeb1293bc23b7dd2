"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AIServiceError(DomainException):
    """Chat-completion API returned an error or is unavailable"""

    status_code = 500
    public_message = "AI service error. Please try again later."


class AIServiceNotConfiguredError(AIServiceError):
    """No API key configured for the chat-completion API"""

    public_message = "AI service not configured"


class AIServiceAuthError(AIServiceError):
    """Chat-completion API rejected our credentials"""

    public_message = "AI service authentication failed"


class AIServiceRateLimitError(AIServiceError):
    """Chat-completion API rate limit reached"""

    status_code = 429
    public_message = "AI service rate limit reached. Please try again later."


class AIResponseError(AIServiceError):
    """Chat-completion API response is empty or malformed"""

    def __init__(self, public_message: str, detail: str = ""):
        super().__init__(detail or public_message)
        self.public_message = public_message

