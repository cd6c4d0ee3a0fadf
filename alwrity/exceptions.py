"""Exceptions raised by ALwrity services and collaborators."""


class AlwrityError(Exception):
    """Base class for all ALwrity errors."""


class GenerationError(AlwrityError):
    """The AI provider failed to produce section content."""


class OutlineGenerationError(AlwrityError):
    """The AI provider failed to produce a usable outline."""


class AuthenticationError(AlwrityError):
    """No valid search-analytics session is available."""


class SearchConsoleError(AlwrityError):
    """Google Search Console answered with an error."""


class RateLimitExceeded(AlwrityError):
    """A rate-limited operation was attempted too often."""

    def __init__(self, limit: int, reset: float, current_usage: int):
        super().__init__("Rate limit exceeded")
        self.limit = limit
        self.remaining = 0
        self.reset = reset
        self.current_usage = current_usage
