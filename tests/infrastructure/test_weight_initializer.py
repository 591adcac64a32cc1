import unittest

import numpy as np

from src.tensorprop.domain._errors import ConfigurationError
from src.tensorprop.domain.utils._weight_initialization import (
    _calculate_fan_in_and_fan_out,
)
from src.tensorprop.infrastructure.tensor._tensor import Tensor
from src.tensorprop.infrastructure.utils.weight_initializer import WeightInitializer


class TestWeightInitializerRegistry(unittest.TestCase):
    def test_builtin_names(self):
        names = WeightInitializer.available()
        for name in ("kaiming", "kaiming_uniform", "xavier", "xavier_uniform", "zeros", "ones"):
            self.assertIn(name, names)

    def test_unknown_name(self):
        with self.assertRaises(ConfigurationError):
            WeightInitializer("orthogonal")

    def test_duplicate_registration(self):
        with self.assertRaises(ConfigurationError):
            WeightInitializer.register_initializer("zeros")(lambda t: t)

    def test_for_activation(self):
        self.assertEqual(WeightInitializer.for_activation(True).name, "kaiming")
        self.assertEqual(WeightInitializer.for_activation(False).name, "xavier")


class TestInitializers(unittest.TestCase):
    def test_constants(self):
        t = Tensor.full((2, 3), 7.0)
        WeightInitializer("zeros")(t)
        self.assertEqual(t.sum(), 0.0)
        WeightInitializer("ones")(t)
        self.assertEqual(t.sum(), 6.0)

    def test_kaiming_scale(self):
        np.random.seed(0)
        t = Tensor.zeros((200, 100))
        out = WeightInitializer("kaiming")(t)
        self.assertIs(out, t)
        self.assertAlmostEqual(float(np.std(t.to_numpy())), np.sqrt(2.0 / 200), delta=0.01)

    def test_uniform_limits(self):
        np.random.seed(1)
        t = Tensor.zeros((50, 30))
        WeightInitializer("xavier_uniform")(t)
        limit = np.sqrt(6.0 / (50 + 30))
        self.assertLessEqual(float(np.max(np.abs(t.to_numpy()))), limit)

    def test_fan_computation(self):
        self.assertEqual(_calculate_fan_in_and_fan_out((4, 3)), (4, 3))
        self.assertEqual(_calculate_fan_in_and_fan_out((8, 3, 3, 3)), (27, 72))


if __name__ == "__main__":
    unittest.main()
