from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from yolo_detect import ClassLabelTable, NMSConfig, YoloPostConfig


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DETECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    model_path: Path = Path("yolov8m.onnx")
    # None uses the built-in 80-class COCO table.
    labels_path: Optional[Path] = None
    onnx_providers: List[str] = Field(default_factory=list)
    input_name: Optional[str] = None
    output_name: Optional[str] = None

    model_input_size: int = Field(default=640, gt=0)
    conf_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    iou_threshold: float = Field(default=0.7, gt=0.0, le=1.0)
    max_detections: Optional[int] = Field(default=None, ge=1)
    class_agnostic_nms: bool = True

    inference_timeout_seconds: float = Field(default=30.0, gt=0.0)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def post_config(self) -> YoloPostConfig:
        return YoloPostConfig(model_input_size=self.model_input_size, conf_threshold=self.conf_threshold)

    def nms_config(self) -> NMSConfig:
        return NMSConfig(
            iou_threshold=self.iou_threshold,
            max_detections=self.max_detections,
            class_agnostic=self.class_agnostic_nms,
        )

    def label_table(self) -> ClassLabelTable:
        if self.labels_path is None:
            return ClassLabelTable()
        return ClassLabelTable.from_file(self.labels_path)


def get_settings() -> ServiceSettings:
    return ServiceSettings()
