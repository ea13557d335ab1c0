"""Exception types raised by the budget tracker core."""


class BudgetTrackerError(Exception):
    """Base class for all budget tracker errors."""


class StorageError(BudgetTrackerError):
    """A backing store (documents, HTTP API or database) could not be read or written."""


class InvalidAmountError(BudgetTrackerError, ValueError):
    """A budget or transaction amount is not a usable number."""


class DuplicateIdError(BudgetTrackerError, ValueError):
    """A new category or fund source would collide with an existing id."""


class UnknownIdError(BudgetTrackerError, KeyError):
    """No category or fund source exists with the given id."""


class FlowError(BudgetTrackerError):
    """An add-transaction flow step was invoked out of order."""
