import unittest

from src.tensorprop.domain._errors import (
    DomainError,
    PreconditionError,
    ShapeMismatchError,
)
from src.tensorprop.infrastructure.tensor._shape import Shape


class TestShapeAccessors(unittest.TestCase):
    def test_missing_leading_dims_read_as_one(self):
        s = Shape((3, 4))
        self.assertEqual(s.as_4d(), (1, 1, 3, 4))
        self.assertEqual(s.rows, 3)
        self.assertEqual(s.cols, 4)
        self.assertEqual(s.channels, 1)
        self.assertEqual(s.batches, 1)

    def test_four_dims(self):
        s = Shape((2, 3, 4, 5))
        self.assertEqual((s.batches, s.channels, s.rows, s.cols), (2, 3, 4, 5))
        self.assertEqual(s.total_size, 120)
        self.assertEqual(s.dims, 4)

    def test_empty_shape(self):
        s = Shape(())
        self.assertEqual(s.cols, 0)
        self.assertEqual(s.total_size, 0)
        with self.assertRaises(PreconditionError):
            s.calc_strides()

    def test_negative_dimension_rejected(self):
        with self.assertRaises(DomainError):
            Shape((2, -1))

    def test_more_than_four_dims_rejected(self):
        with self.assertRaises(ShapeMismatchError):
            Shape((1, 1, 1, 1, 1))

    def test_dim_size_out_of_range(self):
        s = Shape((2, 3))
        self.assertEqual(s.dim_size(1), 3)
        with self.assertRaises(PreconditionError):
            s.dim_size(2)


class TestShapeDerived(unittest.TestCase):
    def test_strides_row_major(self):
        self.assertEqual(Shape((2, 3, 4, 5)).calc_strides(), [60, 20, 5, 1])

    def test_eq_versus_deep_eq(self):
        a = Shape((3, 4))
        b = Shape((1, 1, 3, 4))
        self.assertTrue(a.eq(b))
        self.assertFalse(a.deep_eq(b))
        self.assertTrue(a.deep_eq((3, 4)))

    def test_transpose_is_in_place_and_involutive(self):
        s = Shape((2, 3, 4))
        s.transpose()
        self.assertEqual(s.as_tuple(), (2, 4, 3))
        s.transpose()
        self.assertEqual(s.as_tuple(), (2, 3, 4))

    def test_transpose_requires_two_dims(self):
        with self.assertRaises(PreconditionError):
            Shape((5,)).transpose()

    def test_clone_is_independent(self):
        s = Shape((2, 3))
        c = s.clone()
        c.transpose()
        self.assertEqual(s.as_tuple(), (2, 3))

    def test_broadcastable_to(self):
        self.assertTrue(Shape((1, 4)).broadcastable_to((3, 4)))
        self.assertTrue(Shape((2, 1, 1, 2)).broadcastable_to((4, 3, 5, 6)))
        self.assertFalse(Shape((1, 3)).broadcastable_to((3, 4)))

    def test_is_matrix_and_scalar(self):
        self.assertTrue(Shape((3, 4)).is_matrix())
        self.assertFalse(Shape((2, 3, 4)).is_matrix())
        self.assertTrue(Shape((1, 1)).is_scalar())


if __name__ == "__main__":
    unittest.main()
