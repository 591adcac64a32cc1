"""
Sequential training pipeline.

`Sequential` chains layers, threads shapes through them at compile time, and
runs the minibatch training loop:

    forward through every layer
      -> loss value, accuracy and gradient
      -> backward through every layer in reverse
      -> optimizer.apply(handle, param, grad) for each weights/biases tensor

Every failure aborts the current call and propagates unchanged.
"""

from __future__ import annotations

import math
import time
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from ...domain._errors import ConfigurationError, DomainError, PreconditionError, ShapeMismatchError
from ...domain._loss import ILoss
from ...domain._optimizers import IOptimizer
from .._layer import Layer
from .._losses import get_loss
from ..optimizers import Adam, ParameterArena, ParameterHandle, get_optimizer
from ..tensor._shape import Shape, ShapeLike, as_shape
from ..tensor._shuffle import shuffle_pair
from ..tensor._tensor import Tensor
from ._history import History
from ._serialization import load_payload, model_from_payload, model_to_payload, save_payload

METRICS = ("loss", "accuracy")


def _round4(value: float) -> float:
    return round(float(value), 4)


class Sequential:
    """
    Ordered stack of layers with a loss, an optimizer and a metric history.

    Parameters
    ----------
    *layers : Layer
        Initial layers, in execution order.

    Examples
    --------
    >>> model = Sequential(Input((1, 2)), Dense(8, "relu"), Dense(1, "sigmoid"))
    >>> model.compile((1, 2), loss="binary_crossentropy", optimizer=SGD(lr=0.5))
    >>> history = model.fit(x, y, batch_size=4, epochs=500, verbose=0)
    """

    def __init__(self, *layers: Layer) -> None:
        self._layers: List[Layer] = []
        self._loss: Optional[ILoss] = None
        self._optimizer: Optional[IOptimizer] = None
        self._handles: List[Tuple[ParameterHandle, ParameterHandle]] = []
        self._output_shape: Optional[Shape] = None
        self.history_object = History.with_metrics(*METRICS)
        for layer in layers:
            self.add(layer)

    # ------------------------------------------------------------------
    # container
    # ------------------------------------------------------------------
    def add(self, layer: Layer) -> None:
        """
        Append a layer. The model must be compiled again afterwards.
        """
        if not isinstance(layer, Layer):
            raise TypeError(f"Sequential.add expects a Layer, got {type(layer).__name__}.")
        self._layers.append(layer)
        self._optimizer = None

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def loss(self) -> Optional[ILoss]:
        return self._loss

    @property
    def optimizer(self) -> Optional[IOptimizer]:
        return self._optimizer

    @property
    def handles(self) -> Tuple[Tuple[ParameterHandle, ParameterHandle], ...]:
        """(weights, biases) handles per layer, issued by `compile`."""
        return tuple(self._handles)

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __getitem__(self, idx: int) -> Layer:
        return self._layers[idx]

    # ------------------------------------------------------------------
    # compile
    # ------------------------------------------------------------------
    def compile(
        self,
        input_shape: ShapeLike,
        loss: Union[str, ILoss, None],
        optimizer: Union[str, IOptimizer, None] = None,
        compile_layers: bool = True,
    ) -> Shape:
        """
        Infer shapes, attach the loss and optimizer, and issue parameter handles.

        Parameters
        ----------
        input_shape : ShapeLike
            Per-sample input shape.
        loss : str | ILoss
            Loss tag or instance. Required.
        optimizer : str | IOptimizer, optional
            Optimizer tag or instance. Defaults to `Adam`.
        compile_layers : bool, optional
            When False, layers keep their current parameters (e.g. after
            `load_json`) and only the loss/optimizer are attached.

        Returns
        -------
        Shape
            Per-sample output shape of the last layer.

        Raises
        ------
        ConfigurationError
            If no loss is given or a tag is unknown.
        """
        if loss is None:
            raise ConfigurationError("Sequential.compile requires a loss.")
        resolved_loss = get_loss(loss)
        resolved_optimizer = Adam() if optimizer is None else get_optimizer(optimizer)

        shape = as_shape(input_shape)
        if compile_layers:
            for layer in self._layers:
                shape = layer.compile_layer(shape)
        else:
            for layer in self._layers:
                if layer.output_shape is not None:
                    shape = layer.output_shape

        resolved_optimizer.initialize()
        arena = ParameterArena()
        self._handles = [
            (arena.allocate(f"layer{i}_weights"), arena.allocate(f"layer{i}_biases"))
            for i in range(1, len(self._layers) + 1)
        ]
        self._loss = resolved_loss
        self._optimizer = resolved_optimizer
        self._output_shape = shape.clone()
        return shape

    # ------------------------------------------------------------------
    # training
    # ------------------------------------------------------------------
    def _forward(self, x: Tensor) -> Tensor:
        out = x
        for layer in self._layers:
            out = layer.forward(out)
        return out

    def _backward(self, gradient: Tensor) -> None:
        for layer in reversed(self._layers):
            gradient = layer.backward(gradient)

    def train_on_batch(self, x: Tensor, y: Tensor) -> Dict[str, float]:
        """
        Run one optimization step on a single minibatch.

        ``y`` must be training-equal to the model output for ``x``.

        Returns
        -------
        Dict[str, float]
            Unrounded ``loss`` and ``accuracy`` of the batch.
        """
        if self._loss is None or self._optimizer is None:
            raise PreconditionError("Sequential must be compiled before training.")
        y_pred = self._forward(x)
        loss = self._loss.calc_loss(y, y_pred)
        accuracy = self._loss.accuracy(y, y_pred)
        self._backward(self._loss.gradient(y, y_pred))

        for layer, (w_handle, b_handle) in zip(self._layers, self._handles):
            self._optimizer.apply(w_handle, layer.weights, layer.weights_gradient)
            self._optimizer.apply(b_handle, layer.biases, layer.biases_gradient)
        return {"loss": loss, "accuracy": accuracy}

    def fit(
        self,
        x: Tensor,
        y: Tensor,
        batch_size: int = 32,
        epochs: int = 1,
        *,
        shuffle: bool = True,
        verbose: int = 1,
        rng: Optional[np.random.Generator] = None,
    ) -> History:
        """
        Train the model with minibatch gradient descent.

        Parameters
        ----------
        x : Tensor
            Samples along the batch axis, e.g. ``(N, C, H, W)``.
        y : Tensor
            Targets with one batch per sample, e.g. ``(N, 1, 1, classes)``.
            Each minibatch of targets is presented to the loss as a
            ``(n, features)`` matrix.
        batch_size : int, optional
            Samples per minibatch; the last minibatch may be smaller.
        epochs : int, optional
            Number of passes over the data.
        shuffle : bool, optional
            Shuffle ``x`` and ``y`` **in place** with one shared permutation
            at the start of every epoch.
        verbose : int, optional
            If non-zero, print a one-line summary per epoch.
        rng : np.random.Generator, optional
            Source of randomness for shuffling.

        Returns
        -------
        History
            The model's history, with one entry per completed epoch: the
            batch-count average of loss and accuracy, rounded to 4 digits.
        """
        if self._loss is None or self._optimizer is None:
            raise PreconditionError("Sequential must be compiled before fit().")
        if batch_size < 1:
            raise DomainError(f"batch_size must be >= 1, got {batch_size}.")
        if epochs < 1:
            raise DomainError(f"epochs must be >= 1, got {epochs}.")
        samples = x.shape.batches
        if y.shape.batches != samples:
            raise ShapeMismatchError("fit targets batches", samples, y.shape.batches)

        gen = rng if rng is not None else np.random.default_rng()
        features = y.size // samples
        num_batches = math.ceil(samples / batch_size)
        first_epoch = len(self.history_object.epoch)

        for epoch in range(epochs):
            started = time.perf_counter()
            if shuffle:
                shuffle_pair(x, y, gen)

            total_loss = 0.0
            total_accuracy = 0.0
            for b in range(num_batches):
                lo = b * batch_size
                hi = min(lo + batch_size, samples)
                xb = x.batch_slice(lo, hi)
                yb = y.batch_slice(lo, hi).copy().reshape((hi - lo, features))
                logs = self.train_on_batch(xb, yb)
                total_loss += logs["loss"]
                total_accuracy += logs["accuracy"]

            epoch_logs = {
                "loss": _round4(total_loss / num_batches),
                "accuracy": _round4(total_accuracy / num_batches),
            }
            self.history_object.append_epoch(first_epoch + epoch, epoch_logs)

            if verbose:
                elapsed = time.perf_counter() - started
                print(
                    f"Epoch {epoch + 1}/{epochs} - loss: {epoch_logs['loss']:.4f}"
                    f" - accuracy: {epoch_logs['accuracy']:.4f} - {elapsed:.2f}s"
                )

        return self.history_object

    # ------------------------------------------------------------------
    # inference
    # ------------------------------------------------------------------
    def predict(self, x: Tensor) -> Tensor:
        """Forward pass returning raw model outputs."""
        if not self._layers:
            raise PreconditionError("Sequential has no layers.")
        return self._forward(x)

    def evaluate(self, x: Tensor) -> Tensor:
        """Forward pass with outputs rounded to 4 digits."""
        return self.predict(x).map(lambda v: np.round(v, 4), in_place=True)

    def history(self, *metrics: str) -> Dict[str, List[float]]:
        """
        Copies of the recorded metric lists (all of them when none are named).
        """
        return self.history_object.select(*metrics)

    def summary(self) -> str:
        """
        Textual summary: one line per layer with its output shape and
        parameter count.
        """
        lines = [f"{type(self).__name__}("]
        total = 0
        for i, layer in enumerate(self._layers):
            out = layer.output_shape
            count = layer.parameter_count()
            total += count
            shape_text = "?" if out is None else str(out.as_tuple())
            lines.append(f"  ({i}): {type(layer).__name__:<8} out={shape_text} params={count}")
        lines.append(f")  total params={total}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------
    def save_json(self, path: Union[str, Path]) -> None:
        """
        Save layer configuration, parameters and history to a JSON file.
        """
        save_payload(model_to_payload(self), path)

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "Sequential":
        """
        Load a model saved by `save_json`.

        The returned model can `predict` / `evaluate` immediately. To keep
        training, call ``compile(..., compile_layers=False)`` so the loaded
        parameters are kept.
        """
        return model_from_payload(load_payload(path), cls)
