import argparse
import json
import logging
from pathlib import Path

from yolo_detect import ClassLabelTable, NMSConfig, YoloPostConfig, load_pipeline


def main() -> int:
    parser = argparse.ArgumentParser(description="Run YOLO detection on one image and print the boxes as JSON.")
    parser.add_argument("image", help="Path to an input image.")
    parser.add_argument("--model", default="yolov8m.onnx", help="Path to a YOLOv8 ONNX model.")
    parser.add_argument("--labels", default=None, help="Class label file (metadata.yaml or one label per line).")
    parser.add_argument("--imgsz", type=int, default=640, help="Model input size (e.g., 640).")
    parser.add_argument("--conf", type=float, default=0.5, help="Confidence threshold.")
    parser.add_argument("--iou", type=float, default=0.7, help="IoU threshold for NMS.")
    parser.add_argument("--per-class", action="store_true", help="Run NMS per class instead of across classes.")
    parser.add_argument(
        "--onnx-providers",
        default=None,
        help='Comma-separated ORT providers, e.g. "CPUExecutionProvider".',
    )
    parser.add_argument("--verbose", action="store_true", help="Log timings.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.imgsz < 32:
        raise ValueError("--imgsz must be >= 32")
    onnx_providers = None
    if args.onnx_providers:
        onnx_providers = [p.strip() for p in str(args.onnx_providers).split(",") if p.strip()]

    labels = ClassLabelTable.from_file(args.labels) if args.labels else ClassLabelTable()
    pipeline = load_pipeline(
        model_path=args.model,
        labels=labels,
        post_cfg=YoloPostConfig(model_input_size=int(args.imgsz), conf_threshold=args.conf),
        nms_cfg=NMSConfig(iou_threshold=args.iou, class_agnostic=not bool(args.per_class)),
        onnx_providers=onnx_providers,
    )

    data = Path(args.image).read_bytes()
    print(json.dumps(pipeline.detect_rows(data), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
