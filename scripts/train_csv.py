#!/usr/bin/env python3
"""
Train a dense classifier on a labelled CSV file and save it as JSON.

The label column holds integer class ids. Two classes train a single sigmoid
unit with binary cross-entropy; more classes train a softmax head with
categorical cross-entropy on one-hot targets. Features are min-max scaled per
column before training.

Example
-------
    python scripts/train_csv.py data/iris.csv --classes 3 --hidden 16 \
        --epochs 200 --save runs/iris.json
"""

import os
import sys

# Ensure repo_root/src is importable when running this file directly:
# repo_root/
#   src/tensorprop/...
#   scripts/train_csv.py
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")

if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import argparse

import numpy as np

from tensorprop import SGD, Adam, Dense, Input, Sequential, load_csv


def build_model(features: int, hidden: int, classes: int) -> Sequential:
    head = Dense(1, "sigmoid") if classes == 2 else Dense(classes, "softmax")
    return Sequential(Input((1, features)), Dense(hidden, "relu"), head)


def main() -> None:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    ap.add_argument("csv", help="Path to the CSV dataset.")
    ap.add_argument("--label-column", type=int, default=0)
    ap.add_argument("--classes", type=int, default=2)
    ap.add_argument("--hidden", type=int, default=16)
    ap.add_argument("--epochs", type=int, default=50)
    ap.add_argument("--batch-size", type=int, default=32)
    ap.add_argument("--optimizer", choices=["adam", "sgd"], default="adam")
    ap.add_argument("--lr", type=float, default=None, help="Learning rate.")
    ap.add_argument("--seed", type=int, default=0, help="RNG seed.")
    ap.add_argument("--save", default=None, help="Write the trained model JSON here.")
    args = ap.parse_args()

    if args.classes < 2:
        raise SystemExit("--classes must be at least 2")

    np.random.seed(args.seed)
    rng = np.random.default_rng(args.seed)

    x, labels = load_csv(args.csv, label_column=args.label_column)
    samples, features = x.shape.batches, x.shape.cols

    # scale features column-wise, then restore one sample per batch
    x.reshape((samples, features)).normalize()
    x.reshape((samples, 1, 1, features))

    if args.classes == 2:
        y = labels
        loss = "binary_crossentropy"
    else:
        y = labels.one_hot_encode(args.classes).reshape((samples, 1, 1, args.classes))
        loss = "categorical_crossentropy"

    optimizer = Adam(lr=args.lr) if args.optimizer == "adam" else SGD(lr=args.lr)
    model = build_model(features, args.hidden, args.classes)
    model.compile((1, features), loss=loss, optimizer=optimizer)
    print(model.summary())

    history = model.fit(x, y, batch_size=args.batch_size, epochs=args.epochs, rng=rng)
    final = history.last()
    print(f"final loss: {final['loss']:.4f}  accuracy: {final['accuracy']:.4f}")

    if args.save:
        model.save_json(args.save)
        print(f"saved model to {args.save}")


if __name__ == "__main__":
    main()
