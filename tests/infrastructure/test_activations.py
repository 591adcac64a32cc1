import unittest

import numpy as np

from src.tensorprop.domain._activation import IActivation
from src.tensorprop.domain._errors import ConfigurationError, PreconditionError
from src.tensorprop.infrastructure._activations import (
    Linear,
    ReLU,
    Sigmoid,
    Softmax,
    get_activation,
    resolve_activation,
)
from src.tensorprop.infrastructure.tensor._tensor import Tensor


def _numeric_grad(act_cls, x: np.ndarray, upstream: np.ndarray, eps: float = 1e-6):
    grad = np.zeros_like(x)
    for idx in np.ndindex(x.shape):
        plus, minus = x.copy(), x.copy()
        plus[idx] += eps
        minus[idx] -= eps
        f_plus = act_cls().forward(Tensor.from_numpy(plus)).to_numpy()
        f_minus = act_cls().forward(Tensor.from_numpy(minus)).to_numpy()
        grad[idx] = np.sum((f_plus - f_minus) * upstream) / (2 * eps)
    return grad


class TestReLU(unittest.TestCase):
    def test_forward_backward(self):
        act = ReLU()
        x = Tensor.from_matrix([[-1.0, 0.0, 2.0]])
        out = act.forward(x)
        self.assertEqual(out.data_copy(), [0.0, 0.0, 2.0])
        grad = act.backward(Tensor.from_matrix([[5.0, 5.0, 5.0]]))
        self.assertEqual(grad.data_copy(), [0.0, 0.0, 5.0])

    def test_cache_is_private_copy(self):
        act = ReLU()
        x = Tensor.from_matrix([[1.0, -1.0]])
        act.forward(x)
        x.scalar_multiply(-1.0, in_place=True)
        grad = act.backward(Tensor.from_matrix([[1.0, 1.0]]))
        self.assertEqual(grad.data_copy(), [1.0, 0.0])

    def test_backward_before_forward(self):
        with self.assertRaises(PreconditionError):
            ReLU().backward(Tensor.zeros((1, 2)))


class TestSigmoid(unittest.TestCase):
    def test_forward_values(self):
        out = Sigmoid().forward(Tensor.from_matrix([[0.0, 1000.0, -1000.0]]))
        np.testing.assert_allclose(out.data_copy(), [0.5, 1.0, 0.0], atol=1e-12)

    def test_backward_matches_numeric(self):
        x = np.array([[-1.5, 0.2, 3.0]])
        g = np.array([[1.0, -2.0, 0.5]])
        act = Sigmoid()
        act.forward(Tensor.from_numpy(x))
        analytic = act.backward(Tensor.from_numpy(g)).to_numpy()
        np.testing.assert_allclose(analytic, _numeric_grad(Sigmoid, x, g), rtol=1e-5, atol=1e-8)


class TestSoftmax(unittest.TestCase):
    def test_rows_sum_to_one(self):
        out = Softmax().forward(Tensor.from_matrix([[1.0, 2.0, 3.0], [1000.0, 1000.0, 1000.0]]))
        rows = out.to_numpy()
        np.testing.assert_allclose(rows.sum(axis=1), [1.0, 1.0])
        np.testing.assert_allclose(rows[1], [1 / 3, 1 / 3, 1 / 3])
        self.assertGreater(rows[0, 2], rows[0, 1])

    def test_input_untouched(self):
        x = Tensor.from_matrix([[1.0, 2.0]])
        Softmax().forward(x)
        self.assertEqual(x.data_copy(), [1.0, 2.0])

    def test_backward_matches_numeric(self):
        x = np.array([[0.1, -0.4, 0.9], [2.0, 1.0, 0.0]])
        g = np.array([[1.0, 0.0, -1.0], [0.3, 0.2, 0.1]])
        act = Softmax()
        act.forward(Tensor.from_numpy(x))
        analytic = act.backward(Tensor.from_numpy(g)).to_numpy()
        np.testing.assert_allclose(analytic, _numeric_grad(Softmax, x, g), rtol=1e-5, atol=1e-8)


class TestLinearAndRegistry(unittest.TestCase):
    def test_linear_is_identity(self):
        act = Linear()
        x = Tensor.from_matrix([[1.0, -2.0]])
        self.assertEqual(act.forward(x).data_copy(), [1.0, -2.0])
        g = Tensor.from_matrix([[3.0, 4.0]])
        self.assertEqual(act.backward(g).data_copy(), [3.0, 4.0])

    def test_linear_backward_before_forward(self):
        with self.assertRaises(PreconditionError):
            Linear().backward(Tensor.zeros((1, 1)))

    def test_registry_tags(self):
        self.assertIsInstance(get_activation("relu"), ReLU)
        self.assertIsInstance(get_activation("SIGMOID"), Sigmoid)
        self.assertIsInstance(get_activation("softmax"), Softmax)
        self.assertIsInstance(get_activation("none"), Linear)
        self.assertIsInstance(get_activation(None), Linear)
        self.assertIsNot(get_activation("relu"), get_activation("relu"))

    def test_unknown_tag(self):
        with self.assertRaises(ConfigurationError):
            get_activation("swish")

    def test_resolve_instance(self):
        act = ReLU()
        self.assertIs(resolve_activation(act), act)
        self.assertIsInstance(act, IActivation)
        with self.assertRaises(ConfigurationError):
            resolve_activation(42)

    def test_rectifying_flags(self):
        self.assertTrue(ReLU.rectifying)
        self.assertFalse(Sigmoid.rectifying)


if __name__ == "__main__":
    unittest.main()
