"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Missing or invalid input: absent borrower, non-positive amount, insufficient funds"""

    pass


class NotFoundError(ValidationError):
    """Loan or user identifier does not resolve"""

    pass


class AuthError(DomainException):
    """Credential mismatch"""

    pass
