class HabitifyError(Exception):
    """Base class for all errors raised by habitify."""


class NotFound(HabitifyError):
    """Habit or user is absent, or not owned by the caller."""


class InvalidValue(HabitifyError):
    """Progress value is negative or not a number."""


class MalformedEntry(HabitifyError):
    """A stored completion record could not be decoded."""


class ValidationError(HabitifyError):
    """Habit form input or an admin request was rejected."""


class AuthError(HabitifyError):
    pass


class EmailTaken(AuthError):
    pass


class InvalidCredentials(AuthError):
    pass
