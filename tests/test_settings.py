import pytest
from pydantic import ValidationError

from detection_service.settings import ServiceSettings, get_settings


def test_defaults(monkeypatch) -> None:
    for key in ("DETECT_CONF_THRESHOLD", "DETECT_IOU_THRESHOLD", "DETECT_MODEL_INPUT_SIZE", "DETECT_LABELS_PATH"):
        monkeypatch.delenv(key, raising=False)
    settings = ServiceSettings(_env_file=None)
    assert settings.port == 8080
    assert settings.post_config().conf_threshold == 0.5
    assert settings.post_config().model_input_size == 640
    assert settings.nms_config().iou_threshold == 0.7
    assert settings.nms_config().class_agnostic is True
    assert len(settings.label_table()) == 80


def test_environment_overrides(monkeypatch, tmp_path) -> None:
    labels = tmp_path / "labels.txt"
    labels.write_text("helmet\nvest\n", encoding="utf-8")
    monkeypatch.setenv("DETECT_CONF_THRESHOLD", "0.25")
    monkeypatch.setenv("DETECT_IOU_THRESHOLD", "0.45")
    monkeypatch.setenv("DETECT_LABELS_PATH", str(labels))
    monkeypatch.setenv("DETECT_ONNX_PROVIDERS", '["CPUExecutionProvider"]')
    monkeypatch.setenv("DETECT_LOG_LEVEL", "debug")

    settings = get_settings()
    assert settings.conf_threshold == 0.25
    assert settings.nms_config().iou_threshold == 0.45
    assert tuple(settings.label_table()) == ("helmet", "vest")
    assert settings.onnx_providers == ["CPUExecutionProvider"]
    assert settings.log_level == "DEBUG"


def test_rejects_out_of_range_thresholds() -> None:
    with pytest.raises(ValidationError):
        ServiceSettings(conf_threshold=1.5)
    with pytest.raises(ValidationError):
        ServiceSettings(iou_threshold=0.0)
