from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Sequence, Tuple, Union


PathLike = Union[str, Path]


COCO_CLASSES: Tuple[str, ...] = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck", "boat",
    "traffic light", "fire hydrant", "stop sign", "parking meter", "bench", "bird", "cat", "dog", "horse",
    "sheep", "cow", "elephant", "bear", "zebra", "giraffe", "backpack", "umbrella", "handbag", "tie",
    "suitcase", "frisbee", "skis", "snowboard", "sports ball", "kite", "baseball bat", "baseball glove",
    "skateboard", "surfboard", "tennis racket", "bottle", "wine glass", "cup", "fork", "knife", "spoon",
    "bowl", "banana", "apple", "sandwich", "orange", "broccoli", "carrot", "hot dog", "pizza", "donut",
    "cake", "chair", "couch", "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink", "refrigerator", "book",
    "clock", "vase", "scissors", "teddy bear", "hair drier", "toothbrush",
)


@dataclass(frozen=True)
class ClassLabelTable:
    """
    Ordered, immutable mapping from class index (0-based) to label.

    Built once and handed to the decoder; nothing mutates it afterwards.
    """

    names: Tuple[str, ...] = COCO_CLASSES

    def __post_init__(self) -> None:
        if not self.names:
            raise ValueError("ClassLabelTable needs at least one label")
        object.__setattr__(self, "names", tuple(str(n) for n in self.names))

    def __len__(self) -> int:
        return len(self.names)

    def __getitem__(self, class_id: int) -> str:
        return self.names[class_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    @classmethod
    def from_names(cls, names: Sequence[str]) -> "ClassLabelTable":
        return cls(tuple(names))

    @classmethod
    def from_file(cls, path: PathLike) -> "ClassLabelTable":
        return cls(load_class_names(path))


def _parse_names_mapping(lines: Sequence[str]) -> Dict[int, str]:
    names: Dict[int, str] = {}
    in_names = False
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line == "names:":
            in_names = True
            continue
        if not in_names:
            continue

        # Parse "id: label"
        if ":" not in line:
            continue
        left, right = line.split(":", 1)
        left = left.strip()
        right = right.strip().strip("'").strip('"')
        if not left.isdigit():
            continue
        names[int(left)] = right
    return names


def load_class_names(path: PathLike) -> Tuple[str, ...]:
    """
    Load an ordered label list from disk.

    Two formats are accepted. The `metadata.yaml` mapping exported next to YOLO
    models:

        names:
          0: person
          1: bicycle
          ...

    or a plain text file with one label per line (line order = class id).
    Mapping ids must be contiguous from 0.
    """

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Class label file not found: {p}")

    with open(p, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    if any(line.strip() == "names:" for line in lines):
        mapping = _parse_names_mapping(lines)
        if not mapping:
            raise ValueError(f"No class names found under 'names:' in {p}")
        expected = list(range(len(mapping)))
        if sorted(mapping) != expected:
            raise ValueError(f"Class ids in {p} must be contiguous from 0, got {sorted(mapping)}")
        return tuple(mapping[i] for i in expected)

    names = tuple(line.strip() for line in lines if line.strip() and not line.strip().startswith("#"))
    if not names:
        raise ValueError(f"Class label file is empty: {p}")
    return names
