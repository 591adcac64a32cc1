import unittest

import numpy as np

from src.tensorprop.domain._errors import (
    ConfigurationError,
    DomainError,
    PreconditionError,
    ShapeMismatchError,
)
from src.tensorprop.infrastructure.convolution._conv2d_module import Conv2D
from src.tensorprop.infrastructure.flatten._flatten_module import Flatten
from src.tensorprop.infrastructure.fully_connected._dense import Dense
from src.tensorprop.infrastructure.layers._input import Input
from src.tensorprop.infrastructure.models._sequential import Sequential
from src.tensorprop.infrastructure.optimizers import SGD, Adam
from src.tensorprop.infrastructure.pooling._pooling_module import Pooling
from src.tensorprop.infrastructure.tensor._shuffle import shuffle_pair
from src.tensorprop.infrastructure.tensor._tensor import Tensor


def _separable_dataset():
    features = [-2.0, -1.5, -1.0, -0.5, 0.5, 1.0, 1.5, 2.0]
    labels = [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0]
    x = Tensor.from_data((8, 1, 1, 1), features)
    y = Tensor.from_data((8, 1, 1, 1), labels)
    return x, y


def _logistic_model() -> Sequential:
    model = Sequential(Input((1, 1)), Dense(1, "sigmoid"))
    model.compile((1, 1), loss="binary_crossentropy", optimizer=SGD(lr=0.5))
    return model


class TestSequentialContainer(unittest.TestCase):
    def test_add_and_iterate(self):
        model = Sequential(Input((1, 2)))
        model.add(Dense(3, "relu"))
        self.assertEqual(len(model), 2)
        self.assertIsInstance(model[1], Dense)
        self.assertEqual([type(l).__name__ for l in model], ["Input", "Dense"])

    def test_add_rejects_non_layers(self):
        with self.assertRaises(TypeError):
            Sequential().add("dense")

    def test_compile_returns_output_shape_and_handles(self):
        model = Sequential(Input((1, 4)), Dense(8, "relu"), Dense(3, "softmax"))
        out = model.compile((1, 4), loss="categorical_crossentropy")
        self.assertEqual(out.as_tuple(), (1, 3))
        self.assertIsInstance(model.optimizer, Adam)
        handles = [h for pair in model.handles for h in pair]
        self.assertEqual(len(handles), 6)
        self.assertEqual(len(set(handles)), 6)
        self.assertEqual(handles[2].label, "layer2_weights")

    def test_compile_requires_loss(self):
        model = Sequential(Input((1, 2)), Dense(1))
        with self.assertRaises(ConfigurationError):
            model.compile((1, 2), loss=None)
        with self.assertRaises(ConfigurationError):
            model.compile((1, 2), loss="hinge")

    def test_add_after_compile_requires_recompile(self):
        model = _logistic_model()
        model.add(Dense(1))
        x, y = _separable_dataset()
        with self.assertRaises(PreconditionError):
            model.fit(x, y, verbose=0)

    def test_summary(self):
        model = Sequential(Input((1, 4)), Dense(3))
        model.compile((1, 4), loss="mse")
        text = model.summary()
        self.assertIn("Dense", text)
        self.assertIn("total params=15", text)


class TestSequentialFit(unittest.TestCase):
    def test_logistic_regression_converges(self):
        np.random.seed(0)
        model = _logistic_model()
        x, y = _separable_dataset()
        history = model.fit(
            x, y, batch_size=4, epochs=150, verbose=0, rng=np.random.default_rng(0)
        )
        self.assertEqual(len(history["loss"]), 150)
        self.assertEqual(history["accuracy"][-1], 1.0)
        self.assertLess(history["loss"][-1], history["loss"][0])

    def test_history_is_rounded_and_continues(self):
        np.random.seed(1)
        model = _logistic_model()
        x, y = _separable_dataset()
        model.fit(x, y, batch_size=3, epochs=2, verbose=0)
        model.fit(x, y, batch_size=3, epochs=2, verbose=0)
        self.assertEqual(model.history_object.epoch, [0, 1, 2, 3])
        for value in model.history("loss", "accuracy")["loss"]:
            self.assertEqual(round(value, 4), value)
        self.assertEqual(set(model.history()), {"loss", "accuracy"})

    def test_fit_shuffles_in_place_keeping_pairs(self):
        np.random.seed(2)
        model = _logistic_model()
        x, y = _separable_dataset()
        model.fit(x, y, batch_size=8, epochs=3, verbose=0, rng=np.random.default_rng(5))
        for feature, label in zip(x.data_copy(), y.data_copy()):
            self.assertEqual(label, 1.0 if feature > 0 else 0.0)

    def test_verbose_prints_epoch_line(self):
        from contextlib import redirect_stdout
        from io import StringIO

        np.random.seed(3)
        model = _logistic_model()
        x, y = _separable_dataset()
        buf = StringIO()
        with redirect_stdout(buf):
            model.fit(x, y, batch_size=8, epochs=1, verbose=1)
        self.assertIn("Epoch 1/1", buf.getvalue())

    def test_fit_argument_errors(self):
        model = _logistic_model()
        x, y = _separable_dataset()
        with self.assertRaises(DomainError):
            model.fit(x, y, batch_size=0, verbose=0)
        with self.assertRaises(DomainError):
            model.fit(x, y, epochs=0, verbose=0)
        with self.assertRaises(ShapeMismatchError):
            model.fit(x, Tensor.zeros((7, 1, 1, 1)), verbose=0)

    def test_fit_before_compile(self):
        model = Sequential(Input((1, 1)), Dense(1))
        x, y = _separable_dataset()
        with self.assertRaises(PreconditionError):
            model.fit(x, y, verbose=0)

    def test_conv_pipeline_trains(self):
        np.random.seed(4)
        rng = np.random.default_rng(4)
        model = Sequential(
            Input((1, 4, 4)),
            Conv2D(2, kernel_size=(3, 3), mode="full"),
            Pooling("max", kernel_size=2),
            Flatten(),
            Dense(2, "softmax"),
        )
        out = model.compile((1, 4, 4), loss="categorical_crossentropy", optimizer="adam")
        self.assertEqual(out.as_tuple(), (1, 2))

        x = Tensor.rand((6, 1, 4, 4), rng=rng)
        labels = Tensor.from_data((6, 1), [0, 1, 0, 1, 0, 1])
        y = labels.one_hot_encode(2).reshape((6, 1, 1, 2))
        history = model.fit(x, y, batch_size=2, epochs=2, verbose=0, rng=rng)
        self.assertEqual(len(history["loss"]), 2)
        self.assertTrue(all(np.isfinite(history["loss"])))

        pred = model.predict(x)
        self.assertEqual(pred.shape.as_tuple(), (6, 2))
        np.testing.assert_allclose(pred.to_numpy().sum(axis=1), np.ones(6))


class TestSequentialInference(unittest.TestCase):
    def test_evaluate_rounds(self):
        model = Sequential(Input((1, 2)), Dense(1))
        model.compile((1, 2), loss="mse")
        model[1].weights.copy_from_numpy(np.array([1.0 / 3.0, 0.0]))
        out = model.evaluate(Tensor.from_matrix([[1.0, 5.0]]))
        self.assertEqual(out.data_copy(), [0.3333])

    def test_predict_without_layers(self):
        with self.assertRaises(PreconditionError):
            Sequential().predict(Tensor.zeros((1, 1)))

    def test_train_on_batch_updates_parameters(self):
        np.random.seed(5)
        model = _logistic_model()
        before = model[1].weights.data_copy()
        logs = model.train_on_batch(
            Tensor.from_data((2, 1, 1, 1), [1.0, -1.0]), Tensor.from_matrix([[1.0], [0.0]])
        )
        self.assertEqual(set(logs), {"loss", "accuracy"})
        self.assertNotEqual(model[1].weights.data_copy(), before)


class TestShufflePair(unittest.TestCase):
    def test_pairs_stay_aligned(self):
        x = Tensor.from_data((5, 1, 1, 2), [float(i) for i in range(10)])
        y = Tensor.from_data((5, 1, 1, 1), [0.0, 1.0, 2.0, 3.0, 4.0])
        shuffle_pair(x, y, np.random.default_rng(11))
        rows = x.to_numpy().reshape(5, 2)
        for row, label in zip(rows, y.data_copy()):
            self.assertEqual(row[0], 2 * label)
        self.assertEqual(sorted(y.data_copy()), [0.0, 1.0, 2.0, 3.0, 4.0])

    def test_batch_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            shuffle_pair(Tensor.zeros((3, 1, 1, 1)), Tensor.zeros((2, 1, 1, 1)))


if __name__ == "__main__":
    unittest.main()
