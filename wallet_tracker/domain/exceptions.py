"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class LedgerWriteError(DomainException):
    """Create/update/delete against the ledger failed"""

    pass


class LedgerReadError(DomainException):
    """Ledger query failed or returned malformed records"""

    pass


class AggregateRecomputeError(DomainException):
    """Recomputing a cached aggregate from the ledger failed"""

    def __init__(self, key, cause: Exception):
        super().__init__(f"Recompute failed for {key}: {cause}")
        self.key = key
        self.cause = cause


class InvalidRangeError(DomainException):
    """Month/year outside the representable calendar range"""

    pass


class NotFoundError(DomainException):
    """Requested record does not exist for this user"""

    pass


class CacheClosedError(DomainException):
    """Cache store was used after its session was torn down"""

    pass
