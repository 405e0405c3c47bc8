"""Error taxonomy for the household engine.

Every error the core raises on purpose derives from ``HouseholdError`` so a
caller can tell domain failures apart from programming errors.
"""

from __future__ import annotations


class HouseholdError(Exception):
    """Base class for all household engine errors."""


class ValidationError(HouseholdError):
    """One or more input fields are missing or invalid.

    ``errors`` maps every failing field to a user-facing message, so a form
    can highlight all problems at once.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        summary = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(summary or "Invalid input")


class InvalidTransition(HouseholdError):
    """A lifecycle transition was requested from a state that forbids it."""


class NotOccupierError(InvalidTransition):
    """Only the person occupying a machine may finish it."""


class MachineBusyError(HouseholdError):
    """A machine could not be occupied because it is not available."""

    def __init__(self, machine_id: str, occupied_by: str | None = None) -> None:
        self.machine_id = machine_id
        self.occupied_by = occupied_by
        super().__init__(f"Machine {machine_id} is currently in use")


class CrossHouseholdError(HouseholdError):
    """A person was referenced outside the household they belong to."""


class NotFound(HouseholdError):
    """A referenced entity does not exist."""


class TransientError(HouseholdError):
    """The backing store kept failing after the allowed retries."""


class StoreTimeout(TransientError):
    """The backing store did not answer within the configured bound."""


class IncompleteCreationError(HouseholdError):
    """A chore was inserted but could neither be assigned nor rolled back.

    The caller must resolve ``chore_id`` (delete or assign it).
    """

    def __init__(self, chore_id: str, message: str) -> None:
        self.chore_id = chore_id
        super().__init__(message)


class IncompleteDeletionError(HouseholdError):
    """A chore's assignments were removed but the chore row itself was not.

    The chore is still ongoing with no assignees; retry the delete.
    """

    def __init__(self, chore_id: str, message: str) -> None:
        self.chore_id = chore_id
        super().__init__(message)
