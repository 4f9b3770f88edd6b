"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and the boundary API can catch them uniformly.  Each class has a
stable ``code`` that is reported to callers instead of the class path.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "DomainError"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "ValidationError"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NotFound"


class InsufficientStock(ValidationError):
    """Requested metres exceed the free metres on a roll."""

    code = "InsufficientStock"


class InvalidState(ValidationError):
    """Operation attempted on an entity that is not in the required state."""

    code = "InvalidState"


class IllegalTransition(ValidationError):
    """An order status change not permitted by the transition table."""

    code = "IllegalTransition"

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Transition {current} -> {target} not allowed")


class RollNotFound(EntityNotFoundError):
    code = "RollNotFound"


class ReservationNotFound(EntityNotFoundError):
    code = "ReservationNotFound"


class OrderNotFound(EntityNotFoundError):
    code = "OrderNotFound"


class MaterialNotFound(EntityNotFoundError):
    code = "MaterialNotFound"
