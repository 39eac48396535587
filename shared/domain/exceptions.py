"""
Domain Errors

Root of the typed error taxonomy. Every error raised by the domain layer
derives from DomainError and carries a stable machine-readable code that the
API layer exposes to clients.
"""


class DomainError(Exception):
    """Base class for all domain errors"""

    code = 'domain_error'

    def __init__(self, message: str = ''):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class InvalidRangeError(DomainError, ValueError):
    """Invalid calendar date or date range"""

    code = 'invalid_range'
