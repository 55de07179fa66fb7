import tempfile
import unittest
from pathlib import Path

from yolo_detect.labels import COCO_CLASSES, ClassLabelTable, load_class_names


class TestClassLabelTable(unittest.TestCase):
    def test_default_is_coco(self) -> None:
        table = ClassLabelTable()
        self.assertEqual(len(table), 80)
        self.assertEqual(table[0], "person")
        self.assertEqual(table[1], "bicycle")
        self.assertEqual(table[79], "toothbrush")
        self.assertEqual(tuple(table), COCO_CLASSES)

    def test_is_immutable(self) -> None:
        table = ClassLabelTable.from_names(["a", "b"])
        with self.assertRaises(Exception):
            table.names = ("c",)  # type: ignore[misc]
        self.assertIsInstance(table.names, tuple)

    def test_rejects_empty(self) -> None:
        with self.assertRaises(ValueError):
            ClassLabelTable(())


class TestLoadClassNames(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_metadata_mapping(self) -> None:
        path = self.tmp / "metadata.yaml"
        path.write_text(
            "description: exported model\nnames:\n  1: 'bicycle'\n  0: person\n  2: \"car\"\n",
            encoding="utf-8",
        )
        self.assertEqual(load_class_names(path), ("person", "bicycle", "car"))
        self.assertEqual(ClassLabelTable.from_file(path)[2], "car")

    def test_plain_lines(self) -> None:
        path = self.tmp / "labels.txt"
        path.write_text("# custom\ncat\n\ndog\n", encoding="utf-8")
        self.assertEqual(load_class_names(path), ("cat", "dog"))

    def test_gap_in_ids(self) -> None:
        path = self.tmp / "metadata.yaml"
        path.write_text("names:\n  0: person\n  2: car\n", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_class_names(path)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_class_names(self.tmp / "nope.txt")


if __name__ == "__main__":
    unittest.main()
