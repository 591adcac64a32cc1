import unittest

import numpy as np

from src.tensorprop.domain._errors import ConfigurationError, PreconditionError
from src.tensorprop.infrastructure.pooling._pooling_module import Pooling, PoolingType
from src.tensorprop.infrastructure.tensor._tensor import Tensor


def _grid(rows, cols, values=None):
    data = values if values is not None else range(1, rows * cols + 1)
    return Tensor.from_data((1, 1, rows, cols), [float(v) for v in data])


class TestPoolingForward(unittest.TestCase):
    def test_max_pool_example(self):
        layer = Pooling("max", kernel_size=2)
        self.assertEqual(layer.compile_layer((1, 4, 4)).as_tuple(), (1, 2, 2))
        out = layer.forward(_grid(4, 4))
        self.assertEqual(out.shape.as_tuple(), (1, 1, 2, 2))
        self.assertEqual(out.data_copy(), [6.0, 8.0, 14.0, 16.0])

    def test_min_and_avg(self):
        self.assertEqual(
            Pooling("min", 2).forward(_grid(4, 4)).data_copy(), [1.0, 3.0, 9.0, 11.0]
        )
        self.assertEqual(
            Pooling("avg", 2).forward(_grid(4, 4)).data_copy(), [3.5, 5.5, 11.5, 13.5]
        )

    def test_full_mode_padding(self):
        layer = Pooling("max", kernel_size=2, mode="full")
        self.assertEqual(layer.compile_layer((1, 3, 3)).as_tuple(), (1, 2, 2))
        self.assertEqual(layer.padding, [0, 1, 1, 0])
        self.assertEqual(layer.forward(_grid(3, 3)).data_copy(), [5.0, 6.0, 8.0, 9.0])

    def test_full_mode_avg_counts_padding(self):
        layer = Pooling("avg", kernel_size=2, mode="full")
        layer.compile_layer((1, 3, 3))
        self.assertEqual(layer.forward(_grid(3, 3)).data_copy(), [3.0, 2.25, 3.75, 2.25])

    def test_every_channel_and_batch(self):
        layer = Pooling("max", kernel_size=2)
        x = Tensor.from_numpy(np.arange(32, dtype=np.float64).reshape(2, 1, 4, 4))
        out = layer.forward(x)
        self.assertEqual(out.shape.as_tuple(), (2, 1, 2, 2))
        self.assertEqual(out.data_copy()[4:], [21.0, 23.0, 29.0, 31.0])

    def test_untiled_input_warns(self):
        with self.assertWarns(RuntimeWarning):
            Pooling("max", kernel_size=2).compile_layer((1, 5, 5))


class TestPoolingBackward(unittest.TestCase):
    def test_max_routes_to_winner(self):
        layer = Pooling("max", kernel_size=2)
        layer.forward(_grid(4, 4))
        grad = layer.backward(Tensor.from_data((1, 1, 2, 2), [1.0, 2.0, 3.0, 4.0]))
        expected = np.zeros(16)
        expected[[5, 7, 13, 15]] = [1.0, 2.0, 3.0, 4.0]
        self.assertEqual(grad.shape.as_tuple(), (1, 1, 4, 4))
        np.testing.assert_allclose(grad.data_copy(), expected)

    def test_min_routes_to_winner(self):
        layer = Pooling("min", kernel_size=2)
        layer.forward(_grid(4, 4))
        grad = layer.backward(Tensor.full((1, 1, 2, 2), 1.0))
        expected = np.zeros(16)
        expected[[0, 2, 8, 10]] = 1.0
        np.testing.assert_allclose(grad.data_copy(), expected)

    def test_avg_spreads_evenly(self):
        layer = Pooling("avg", kernel_size=2)
        layer.forward(_grid(4, 4))
        grad = layer.backward(Tensor.full((1, 1, 2, 2), 1.0))
        np.testing.assert_allclose(grad.data_copy(), np.full(16, 0.25))

    def test_overlapping_windows_accumulate(self):
        layer = Pooling("max", kernel_size=2, strides=1)
        layer.forward(_grid(3, 3, [1, 1, 1, 1, 9, 1, 1, 1, 1]))
        grad = layer.backward(Tensor.full((1, 1, 2, 2), 1.0))
        self.assertEqual(grad.value_at(4), 4.0)
        self.assertEqual(grad.sum(), 4.0)

    def test_ties_go_to_first_cell(self):
        layer = Pooling("max", kernel_size=2)
        layer.forward(_grid(2, 2, [3, 3, 3, 3]))
        grad = layer.backward(Tensor.full((1, 1, 1, 1), 1.0))
        self.assertEqual(grad.data_copy(), [1.0, 0.0, 0.0, 0.0])

    def test_full_mode_trims_padding(self):
        layer = Pooling("max", kernel_size=2, mode="full")
        layer.compile_layer((1, 3, 3))
        layer.forward(_grid(3, 3))
        grad = layer.backward(Tensor.full((1, 1, 2, 2), 1.0))
        self.assertEqual(grad.shape.as_tuple(), (1, 1, 3, 3))
        self.assertEqual(grad.data_copy(), [0, 0, 0, 0, 1, 1, 0, 1, 1])

    def test_backward_before_forward(self):
        with self.assertRaises(PreconditionError):
            Pooling().backward(Tensor.zeros((1, 1, 1, 1)))


class TestPoolingConfig(unittest.TestCase):
    def test_defaults(self):
        layer = Pooling()
        self.assertIs(layer.pool_type, PoolingType.MAX)
        self.assertEqual(layer.kernel_size, (2, 2))
        self.assertEqual(layer.strides, (2, 2))
        self.assertIsNone(layer.weights)
        self.assertEqual(layer.parameter_count(), 0)

    def test_round_trip(self):
        layer = Pooling("avg", kernel_size=(3, 2), strides=(1, 2), mode="full")
        layer.compile_layer((2, 5, 5))
        rebuilt = Pooling.from_config(layer.get_config())
        self.assertEqual(rebuilt.get_config(), layer.get_config())

    def test_unknown_type(self):
        with self.assertRaises(ConfigurationError):
            Pooling("median")


if __name__ == "__main__":
    unittest.main()
