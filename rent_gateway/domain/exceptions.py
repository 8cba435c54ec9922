"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidLeaseError(DomainException):
    """Lease terms violate a scheduling precondition"""

    pass


class UnsupportedFrequencyError(DomainException):
    """Requested payment frequency has no schedule generator"""

    pass
