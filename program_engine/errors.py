"""
Exception types raised at the completion and parsing seams.
"""


class ProgramEngineError(Exception):
    """Base class for engine errors."""


class CompletionError(ProgramEngineError):
    """The completion service failed or returned nothing usable."""


class ResponseParseError(ProgramEngineError):
    """A completion response could not be parsed as a JSON object."""

    def __init__(self, message, raw_text=None):
        super().__init__(message)
        self.raw_text = raw_text
