import tempfile
import unittest
from pathlib import Path

from src.tensorprop.domain._errors import ConfigurationError
from src.tensorprop.infrastructure.data._csv import load_csv


class TestLoadCsv(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, text: str) -> Path:
        path = self.tmp / "data.csv"
        path.write_text(text, encoding="utf-8")
        return path

    def test_header_detected(self):
        path = self._write("label,a,b\n1,0.5,2\n0,1.5,3\n")
        x, y = load_csv(path)
        self.assertEqual(x.shape.as_tuple(), (2, 1, 1, 2))
        self.assertEqual(y.shape.as_tuple(), (2, 1, 1, 1))
        self.assertEqual(x.data_copy(), [0.5, 2.0, 1.5, 3.0])
        self.assertEqual(y.data_copy(), [1.0, 0.0])

    def test_no_header_and_last_label_column(self):
        path = self._write("0.5,2,1\n1.5,3,0\n")
        x, y = load_csv(path, label_column=-1)
        self.assertEqual(x.data_copy(), [0.5, 2.0, 1.5, 3.0])
        self.assertEqual(y.data_copy(), [1.0, 0.0])

    def test_single_row(self):
        x, y = load_csv(self._write("2,7,8,9\n"))
        self.assertEqual(x.shape.as_tuple(), (1, 1, 1, 3))
        self.assertEqual(y.data_copy(), [2.0])

    def test_non_numeric_cell(self):
        with self.assertRaises(ConfigurationError):
            load_csv(self._write("1,2\n3,abc\n"), skip_header=False)

    def test_needs_feature_column(self):
        with self.assertRaises(ConfigurationError):
            load_csv(self._write("1\n2\n"))

    def test_label_column_out_of_range(self):
        with self.assertRaises(ConfigurationError):
            load_csv(self._write("1,2\n3,4\n"), label_column=5)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_csv(self.tmp / "absent.csv", skip_header=False)


if __name__ == "__main__":
    unittest.main()
