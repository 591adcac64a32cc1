import unittest

from src.tensorprop.domain._errors import (
    ConfigurationError,
    DomainError,
    PreconditionError,
    ShapeMismatchError,
    TensorPropError,
)
from src.tensorprop.infrastructure.tensor._tensor import Tensor


class TestErrorHierarchy(unittest.TestCase):
    def test_builtin_bases(self):
        self.assertTrue(issubclass(ShapeMismatchError, ValueError))
        self.assertTrue(issubclass(DomainError, ValueError))
        self.assertTrue(issubclass(ConfigurationError, ValueError))
        self.assertTrue(issubclass(PreconditionError, RuntimeError))
        for cls in (ShapeMismatchError, DomainError, PreconditionError, ConfigurationError):
            self.assertTrue(issubclass(cls, TensorPropError))

    def test_shape_mismatch_fields(self):
        err = ShapeMismatchError("add", (2, 3), (3, 2))
        self.assertEqual(err.op, "add")
        self.assertEqual(err.expected, (2, 3))
        self.assertEqual(err.actual, (3, 2))
        self.assertIn("add", str(err))

    def test_failed_operation_leaves_receiver_unchanged(self):
        a = Tensor.from_matrix([[1.0, 2.0]])
        with self.assertRaises(DomainError):
            a.divide(Tensor.from_matrix([[1.0, 0.0]]), in_place=True)
        self.assertEqual(a.data_copy(), [1.0, 2.0])
        with self.assertRaises(ShapeMismatchError):
            a.add(Tensor.zeros((2, 1)), in_place=True)
        self.assertEqual(a.data_copy(), [1.0, 2.0])


if __name__ == "__main__":
    unittest.main()
