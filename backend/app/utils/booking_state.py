from app.exceptions import InvalidTransitionError
from app.models.enums import BookingStatus

# Defines all valid status transitions for a booking
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.ACCEPTED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.ACCEPTED: frozenset({
        BookingStatus.IN_PROGRESS,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.REJECTED: frozenset(),  # Terminal state
    BookingStatus.IN_PROGRESS: frozenset({
        BookingStatus.COMPLETED,
    }),
    BookingStatus.COMPLETED: frozenset(),  # Terminal state
    BookingStatus.CANCELLED: frozenset(),  # Terminal state
}


def get_allowed_transitions(current: BookingStatus) -> frozenset[BookingStatus]:
    return ALLOWED_TRANSITIONS.get(BookingStatus(current), frozenset())


def is_valid_transition(current: BookingStatus, new: BookingStatus) -> bool:
    return BookingStatus(new) in get_allowed_transitions(current)


def is_terminal(status: BookingStatus) -> bool:
    return not get_allowed_transitions(status)


def validate_transition(current: BookingStatus, new: BookingStatus) -> None:
    """Validate a booking status transition. Raises InvalidTransitionError if invalid."""
    if not is_valid_transition(current, new):
        raise InvalidTransitionError(BookingStatus(current).value, BookingStatus(new).value)
