import unittest

import numpy as np

from src.tensorprop.domain._errors import DomainError, PreconditionError
from src.tensorprop.infrastructure.tensor._tensor import Tensor


class TestTensorReductions(unittest.TestCase):
    def setUp(self):
        self.t = Tensor.from_data((1, 5), [3.0, 9.0, 1.0, 9.0, 4.0])

    def test_scalar_reductions(self):
        self.assertEqual(self.t.sum(), 26.0)
        self.assertAlmostEqual(self.t.avg(), 5.2)
        self.assertEqual(self.t.min(), 1.0)
        self.assertEqual(self.t.max(), 9.0)

    def test_index_reductions_first_occurrence(self):
        self.assertEqual(self.t.max_index(), 1)
        self.assertEqual(self.t.min_index(), 2)
        # closest to the mean 5.2 is 4.0
        self.assertEqual(self.t.avg_index(), 4)

    def test_axis_sum(self):
        m = Tensor.from_matrix([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
        cols = m.axis_sum(0)
        rows = m.axis_sum(1)
        self.assertEqual(cols.shape.as_tuple(), (1, 2))
        self.assertEqual(cols.data_copy(), [9.0, 12.0])
        self.assertEqual(rows.shape.as_tuple(), (3, 1))
        self.assertEqual(rows.data_copy(), [3.0, 7.0, 11.0])
        with self.assertRaises(DomainError):
            m.axis_sum(2)

    def test_axis_sum_requires_matrix(self):
        with self.assertRaises(PreconditionError):
            Tensor.zeros((2, 2, 2)).axis_sum(0)

    def test_arg_max(self):
        m = Tensor.from_matrix([[0.1, 0.7, 0.2], [0.5, 0.4, 0.1]])
        self.assertEqual(m.arg_max(1), [1, 0])
        self.assertEqual(m.arg_max(0), [1, 0, 0])


class TestTensorLabels(unittest.TestCase):
    def test_one_hot_encode(self):
        labels = Tensor.from_data((3, 1, 1, 1), [2.0, 0.0, 1.0])
        out = labels.one_hot_encode(3)
        np.testing.assert_allclose(
            out.to_numpy(), [[0, 0, 1], [1, 0, 0], [0, 1, 0]]
        )

    def test_one_hot_out_of_range(self):
        with self.assertRaises(DomainError):
            Tensor.from_data((1, 2), [0.0, 3.0]).one_hot_encode(3)

    def test_normalize_columns(self):
        m = Tensor.from_matrix([[1.0, 5.0], [3.0, 5.0], [2.0, 5.0]])
        m.normalize()
        np.testing.assert_allclose(m.to_numpy(), [[0.0, 0.0], [1.0, 0.0], [0.5, 0.0]])


if __name__ == "__main__":
    unittest.main()
