from __future__ import annotations


class EntityNotFoundError(LookupError):
    """Raised when an entity does not exist or is not owned by the caller.

    Both conditions are reported the same way so that the existence of another
    user's entity never leaks.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class EntityAlreadyExistsError(Exception):
    """Raised when an entity that must be unique is already registered."""

    def __init__(self, message: str, localized_message: str | None = None) -> None:
        self.message = message
        self.localized_message = localized_message or message
        super().__init__(message)


def entity_not_found(entity: str, entity_id: int | None) -> EntityNotFoundError:
    return EntityNotFoundError(f"{entity} with id {entity_id} is not found")
