from dataclasses import dataclass
from typing import List, Tuple, Union


@dataclass(frozen=True)
class Detection:
    """
    One labeled box in original image pixel coordinates.

    Created by the decoder and never edited afterwards; suppression only drops
    whole detections.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    label: str
    confidence: float
    class_id: int = -1

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    @property
    def area(self) -> float:
        return max(0.0, self.x2 - self.x1) * max(0.0, self.y2 - self.y1)

    def as_row(self) -> List[Union[float, str]]:
        """`[x1, y1, x2, y2, label, confidence]`, the wire format of `/detect`."""
        return [self.x1, self.y1, self.x2, self.y2, self.label, self.confidence]
