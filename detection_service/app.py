import asyncio
import logging
import threading
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse

from detection_service.settings import ServiceSettings, get_settings
from yolo_detect import DetectionPipeline, ImageDecodeError, InferenceError, UploadError, load_pipeline


logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

PipelineFactory = Callable[[ServiceSettings], DetectionPipeline]


def build_pipeline(settings: ServiceSettings) -> DetectionPipeline:
    try:
        labels = settings.label_table()
    except (OSError, ValueError) as exc:
        raise InferenceError(f"Could not load class labels: {exc}") from exc
    return load_pipeline(
        settings.model_path,
        labels=labels,
        post_cfg=settings.post_config(),
        nms_cfg=settings.nms_config(),
        onnx_providers=settings.onnx_providers or None,
        onnx_input_name=settings.input_name,
        onnx_output_name=settings.output_name,
    )


class PipelineHolder:
    """Loads the detection pipeline once and hands the same instance to every request."""

    def __init__(
        self,
        settings: ServiceSettings,
        factory: PipelineFactory = build_pipeline,
        pipeline: Optional[DetectionPipeline] = None,
    ) -> None:
        self.settings = settings
        self._factory = factory
        self._pipeline = pipeline
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._pipeline is not None

    def get(self) -> DetectionPipeline:
        if self._pipeline is None:
            with self._lock:
                if self._pipeline is None:
                    self._pipeline = self._factory(self.settings)
        return self._pipeline


async def _client_error(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def _inference_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Inference failed for %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app(
    settings: Optional[ServiceSettings] = None,
    *,
    pipeline: Optional[DetectionPipeline] = None,
    pipeline_factory: PipelineFactory = build_pipeline,
) -> FastAPI:
    cfg = settings if settings is not None else get_settings()
    holder = PipelineHolder(cfg, factory=pipeline_factory, pipeline=pipeline)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not holder.loaded:
            try:
                await run_in_threadpool(holder.get)
            except InferenceError:
                # Requests retry the load, so a bad model path surfaces per request.
                logger.exception("Model failed to load at startup")
        yield

    app = FastAPI(title="YOLO Object Detection", version="0.1.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.pipelines = holder

    app.add_exception_handler(UploadError, _client_error)
    app.add_exception_handler(ImageDecodeError, _client_error)
    app.add_exception_handler(InferenceError, _inference_error)

    @app.get("/")
    async def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "model_loaded": holder.loaded}

    @app.post("/detect")
    async def detect(image_file: Optional[UploadFile] = File(None)) -> list:
        """
        Returns detected objects as `[x1, y1, x2, y2, label, confidence]` rows,
        highest confidence first, in original image pixels.
        """

        if image_file is None:
            raise UploadError("Missing multipart field 'image_file'.")
        try:
            data = await image_file.read()
        except OSError as exc:
            raise UploadError(f"Could not read uploaded file: {exc}") from exc

        def run() -> list:
            return holder.get().detect_rows(data)

        started = time.perf_counter()
        # An executor future can be abandoned on timeout; the worker thread finishes on its own.
        loop = asyncio.get_running_loop()
        try:
            rows = await asyncio.wait_for(loop.run_in_executor(None, run), timeout=cfg.inference_timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Detection timed out after %.1fs", cfg.inference_timeout_seconds)
            raise HTTPException(status_code=504, detail="Detection timed out")

        logger.info(
            "Detected %d objects in %s (%.1fms)",
            len(rows),
            image_file.filename or "upload",
            (time.perf_counter() - started) * 1000.0,
        )
        return rows

    return app


app = create_app()
