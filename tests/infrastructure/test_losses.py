import math
import unittest

import numpy as np

from src.tensorprop.domain._errors import ConfigurationError, ShapeMismatchError
from src.tensorprop.infrastructure._losses import (
    BinaryCrossEntropy,
    CategoricalCrossEntropy,
    MeanSquaredError,
    get_loss,
)
from src.tensorprop.infrastructure.tensor._tensor import Tensor


def _row(*values):
    return Tensor.from_matrix([list(values)])


class TestMeanSquaredError(unittest.TestCase):
    def test_loss_and_gradient(self):
        loss = MeanSquaredError()
        y, p = _row(1.0, 2.0), _row(0.0, 4.0)
        self.assertAlmostEqual(loss.calc_loss(y, p), 2.5)
        self.assertEqual(loss.gradient(y, p).data_copy(), [-1.0, 2.0])

    def test_accuracy_rounds(self):
        loss = MeanSquaredError()
        self.assertAlmostEqual(loss.accuracy(_row(1.0, 0.0), _row(0.9, 0.6)), 0.5)

    def test_shape_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            MeanSquaredError().calc_loss(_row(1.0), _row(1.0, 2.0))


class TestBinaryCrossEntropy(unittest.TestCase):
    def test_loss(self):
        loss = BinaryCrossEntropy()
        self.assertAlmostEqual(loss.calc_loss(_row(1.0, 0.0), _row(0.5, 0.5)), math.log(2.0))

    def test_gradient(self):
        loss = BinaryCrossEntropy()
        g = loss.gradient(_row(1.0, 0.0), _row(0.5, 0.5))
        np.testing.assert_allclose(g.data_copy(), [-1.0, 1.0])

    def test_saturated_predictions_stay_finite(self):
        loss = BinaryCrossEntropy()
        value = loss.calc_loss(_row(1.0, 0.0), _row(0.0, 1.0))
        self.assertTrue(math.isfinite(value))
        self.assertTrue(np.all(np.isfinite(loss.gradient(_row(1.0), _row(0.0)).to_numpy())))

    def test_accuracy(self):
        loss = BinaryCrossEntropy()
        y = _row(1.0, 0.0, 1.0, 0.0)
        p = _row(0.8, 0.3, 0.4, 0.9)
        self.assertAlmostEqual(loss.accuracy(y, p), 0.5)


class TestCategoricalCrossEntropy(unittest.TestCase):
    def test_loss_per_row(self):
        loss = CategoricalCrossEntropy()
        y = Tensor.from_matrix([[1.0, 0.0], [0.0, 1.0]])
        p = Tensor.from_matrix([[0.5, 0.5], [0.25, 0.75]])
        expected = -(math.log(0.5) + math.log(0.75)) / 2
        self.assertAlmostEqual(loss.calc_loss(y, p), expected)

    def test_gradient(self):
        loss = CategoricalCrossEntropy()
        y = Tensor.from_matrix([[1.0, 0.0], [0.0, 1.0]])
        p = Tensor.from_matrix([[0.5, 0.5], [0.25, 0.5]])
        np.testing.assert_allclose(
            loss.gradient(y, p).to_numpy(), [[-1.0, 0.0], [0.0, -1.0]]
        )

    def test_accuracy(self):
        loss = CategoricalCrossEntropy()
        y = Tensor.from_matrix([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
        p = Tensor.from_matrix([[0.6, 0.3, 0.1], [0.5, 0.2, 0.3]])
        self.assertAlmostEqual(loss.accuracy(y, p), 0.5)


class TestLossRegistry(unittest.TestCase):
    def test_tags(self):
        self.assertIsInstance(get_loss("mse"), MeanSquaredError)
        self.assertIsInstance(get_loss("binary_crossentropy"), BinaryCrossEntropy)
        self.assertIsInstance(get_loss("categorical_crossentropy"), CategoricalCrossEntropy)

    def test_instance_passthrough(self):
        loss = MeanSquaredError()
        self.assertIs(get_loss(loss), loss)

    def test_unknown(self):
        with self.assertRaises(ConfigurationError):
            get_loss("hinge")
        with self.assertRaises(ConfigurationError):
            get_loss(3.5)


if __name__ == "__main__":
    unittest.main()
