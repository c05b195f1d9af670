from .entities import ClassStatus
from .errors import InvalidTransitionError

# approved and denied are terminal
VALID_TRANSITIONS: dict[ClassStatus, set[ClassStatus]] = {
    ClassStatus.PENDING: {ClassStatus.APPROVED, ClassStatus.DENIED},
    ClassStatus.APPROVED: set(),
    ClassStatus.DENIED: set(),
}


def can_transition(current: ClassStatus, target: ClassStatus) -> bool:
    return target in VALID_TRANSITIONS.get(current, set())


def ensure_transition(current: ClassStatus, target: ClassStatus) -> ClassStatus:
    """Return ``target`` if moving there from ``current`` is allowed, else raise."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot transition from {current.value} to {target.value}"
        )
    return target


def is_visible(status: ClassStatus) -> bool:
    return status == ClassStatus.APPROVED
