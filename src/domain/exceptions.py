class ParkingError(Exception):
    """Base class for errors reported back to the caller."""


class NotFoundError(ParkingError):
    """A referenced vehicle, space, session or payment does not exist."""


class ConflictError(ParkingError):
    """The entity is not in a state that allows the requested transition."""


class InvalidError(ParkingError):
    """Caller supplied data that breaks a domain rule."""


class ForbiddenError(ParkingError):
    """The caller may not touch this entity."""


class StorageFailure(ParkingError):
    """The storage layer failed; nothing from the operation was committed."""
