import unittest

import cv2
import numpy as np

from yolo_detect.errors import ImageDecodeError, UploadError
from yolo_detect.preprocess import image_to_blob, prepare_input


def _png_bytes(image_bgr: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", image_bgr)
    assert ok
    return buf.tobytes()


class TestPrepareInput(unittest.TestCase):
    def test_shape_layout_and_size(self) -> None:
        img = np.zeros((48, 96, 3), dtype=np.uint8)
        img[:, :] = (255, 0, 0)  # pure blue in BGR
        prep = prepare_input(_png_bytes(img), input_size=64)

        self.assertEqual(prep.orig_size, (96, 48))
        self.assertEqual(prep.blob.shape, (1, 3, 64, 64))
        self.assertEqual(prep.blob.dtype, np.float32)
        # RGB channel order: blue ends up in channel 2.
        self.assertTrue(np.allclose(prep.blob[0, 0], 0.0))
        self.assertTrue(np.allclose(prep.blob[0, 1], 0.0))
        self.assertTrue(np.allclose(prep.blob[0, 2], 1.0))

    def test_default_input_size(self) -> None:
        img = np.full((10, 20, 3), 128, dtype=np.uint8)
        prep = prepare_input(_png_bytes(img))
        self.assertEqual(prep.blob.shape, (1, 3, 640, 640))
        self.assertTrue(np.allclose(prep.blob, 128 / 255.0, atol=1e-6))

    def test_same_size_image_is_not_resized(self) -> None:
        img = np.arange(4 * 4 * 3, dtype=np.uint8).reshape(4, 4, 3)
        blob = image_to_blob(img, input_size=4)
        self.assertTrue(np.allclose(blob[0, 0] * 255.0, img[:, :, 2]))

    def test_empty_upload(self) -> None:
        with self.assertRaises(UploadError):
            prepare_input(b"")

    def test_not_an_image(self) -> None:
        with self.assertRaises(ImageDecodeError):
            prepare_input(b"definitely not an image")

    def test_rejects_wrong_array_shape(self) -> None:
        with self.assertRaises(ValueError):
            image_to_blob(np.zeros((10, 10), dtype=np.uint8))


if __name__ == "__main__":
    unittest.main()
