"""
Base exception for the Solution Grader.

Each failure kind is declared next to the component that raises it and
maps to exactly one user-visible message class.
"""


class GraderError(Exception):
    """
    Base class for every failure the grading engine surfaces to callers.

    Subclasses override ``user_message`` with the message shown to the
    end user and ``retryable`` when resubmitting is expected to help.
    """

    user_message = "Something went wrong while grading your submission."
    retryable = False

    def __init__(self, message: str | None = None, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message or self.user_message)

    def __reduce__(self):
        # Rebuilt without calling __init__, whose signature varies by subclass
        return _restore_error, (type(self), self.args, self.__dict__)


def _restore_error(cls: type[GraderError], args: tuple, state: dict) -> GraderError:
    error = cls.__new__(cls)
    error.args = args
    error.__dict__.update(state)
    return error
