"""
Exception hierarchy for tensorprop.

Every failure raised by the tensor engine, the layers and the training
pipeline derives from `TensorPropError`. The concrete classes additionally
inherit from the builtin exception that best describes the failure category,
so callers may catch either the framework type or the standard one
(e.g. ``except ValueError``).

Categories
----------
- `ShapeMismatchError`:
    Operands or persisted parameters have incompatible shapes.
- `DomainError`:
    A numeric argument is outside its admissible domain (division by zero,
    non-positive kernel sizes, negative padding, ...).
- `PreconditionError`:
    An operation was invoked in an invalid state (backward before forward,
    matmul on non-matrices, out-of-range slices).
- `ConfigurationError`:
    Malformed or missing configuration (unknown registry tags, missing loss,
    corrupted persisted model fields).

All checks run before any buffer is mutated, so a raised error leaves the
receiver unchanged.
"""


class TensorPropError(Exception):
    """
    Base class for all tensorprop errors.
    """


class ShapeMismatchError(TensorPropError, ValueError):
    """
    Raised when operand shapes are incompatible for the requested operation.

    Attributes
    ----------
    op : str
        Name of the operation that rejected the shapes.
    expected : object
        Shape (or shape description) the operation required.
    actual : object
        Shape (or shape description) that was supplied.
    """

    def __init__(self, op: str, expected: object, actual: object) -> None:
        super().__init__(f"{op}: expected shape {expected}, got {actual}.")
        self.op = op
        self.expected = expected
        self.actual = actual


class DomainError(TensorPropError, ValueError):
    """
    Raised when a numeric argument is outside its admissible domain.
    """


class PreconditionError(TensorPropError, RuntimeError):
    """
    Raised when an operation is invoked in a state that does not permit it.
    """


class ConfigurationError(TensorPropError, ValueError):
    """
    Raised for unknown registry tags and malformed configuration payloads.
    """
