import unittest

from src.tensorprop.infrastructure.models._history import History


class TestHistory(unittest.TestCase):
    def test_with_metrics_and_append(self):
        hist = History.with_metrics("loss", "accuracy")
        self.assertEqual(hist.select(), {"loss": [], "accuracy": []})
        hist.append_epoch(0, {"loss": 0.5, "accuracy": 0.75})
        hist.append_epoch(1, {"loss": 0.25, "accuracy": 1})
        self.assertEqual(hist["loss"], [0.5, 0.25])
        self.assertEqual(hist.epoch, [0, 1])
        self.assertEqual(hist.last(), {"loss": 0.25, "accuracy": 1.0})

    def test_select_returns_copies(self):
        hist = History.with_metrics("loss")
        hist.append_epoch(0, {"loss": 1.0})
        selected = hist.select("loss", "missing")
        selected["loss"].append(9.0)
        self.assertEqual(hist["loss"], [1.0])
        self.assertEqual(selected["missing"], [])

    def test_dict_round_trip(self):
        hist = History.with_metrics("loss")
        hist.append_epoch(3, {"loss": 0.1})
        rebuilt = History.from_dict(hist.to_dict())
        self.assertEqual(rebuilt, hist)


if __name__ == "__main__":
    unittest.main()
