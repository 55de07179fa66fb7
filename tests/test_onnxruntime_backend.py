import inspect
import tempfile
import unittest
from pathlib import Path

from yolo_detect.backends.onnxruntime_backend import OnnxRuntimeBackend, _pick_name


class TestPickName(unittest.TestCase):
    def test_prefers_yolov8_export_names(self) -> None:
        self.assertEqual(_pick_name(None, ["x", "images"], "images", "input"), "images")
        self.assertEqual(_pick_name(None, ["output0", "aux"], "output0", "output"), "output0")

    def test_falls_back_to_first(self) -> None:
        self.assertEqual(_pick_name(None, ["input_1", "input_2"], "images", "input"), "input_1")

    def test_explicit_name_must_exist(self) -> None:
        self.assertEqual(_pick_name("aux", ["output0", "aux"], "output0", "output"), "aux")
        with self.assertRaises(ValueError):
            _pick_name("nope", ["output0"], "output0", "output")


class TestOnnxRuntimeBackend(unittest.TestCase):
    def test_infer_takes_only_the_blob(self) -> None:
        params = list(inspect.signature(OnnxRuntimeBackend.infer).parameters)
        self.assertEqual(params, ["self", "blob"])

    def test_missing_model_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                OnnxRuntimeBackend(Path(tmp) / "missing.onnx")


if __name__ == "__main__":
    unittest.main()
