"""
Detection sources that feed the audit engine.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.errors import ConfigError, InputError
from ..core.interfaces import DetectorInterface
from ..core.types import Box

logger = logging.getLogger(__name__)


def _class_name(class_names: Dict[int, str], class_id: int) -> str:
    return class_names.get(class_id, f"class_{class_id}")


class PredictionLabelDetector(DetectorInterface):
    """Read precomputed predictions saved in YOLO txt format.

    One ``<stem>.txt`` per image, each line ``class cx cy w h conf`` as
    written by ``save_txt=True, save_conf=True``.
    """

    name = "predictions"

    def __init__(self, predictions_dir: str, class_names: Optional[Dict[int, str]] = None):
        self.predictions_dir = Path(predictions_dir)
        if not self.predictions_dir.is_dir():
            raise FileNotFoundError(f"Predictions directory not found: {self.predictions_dir}")
        self.class_names = dict(class_names or {})

    def prediction_path(self, image_path: Path) -> Path:
        return self.predictions_dir / f"{Path(image_path).stem}.txt"

    def detect(self, image_path: Path) -> List[Box]:
        """
        Read detections for one image.

        Raises:
            InputError: The file is not UTF-8 text or a line holds an invalid box
        """
        path = self.prediction_path(image_path)
        if not path.exists():
            return []

        image_id = Path(image_path).name
        detections = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    parts = line.split()
                    if not parts:
                        continue
                    if len(parts) < 6:
                        logger.warning(f"{path}:{line_num}: expected 6 fields, got {len(parts)}")
                        continue
                    try:
                        class_id = int(float(parts[0]))
                        cx, cy, w, h, conf = (float(v) for v in parts[1:6])
                    except (ValueError, OverflowError):
                        logger.warning(f"{path}:{line_num}: could not parse '{line.strip()}'")
                        continue
                    try:
                        detections.append(Box(
                            class_id=_class_name(self.class_names, class_id),
                            cx=cx, cy=cy, w=w, h=h,
                            confidence=conf,
                        ))
                    except InputError as e:
                        raise InputError(f"{path.name}:{line_num}: {e}", image_id=image_id) from e
        except UnicodeDecodeError as e:
            raise InputError(f"{path.name}: not valid UTF-8 ({e.reason})", image_id=image_id) from e
        return detections


class UltralyticsDetector(DetectorInterface):
    """Run an ultralytics YOLO model on each image.

    Each thread gets its own model instance; ultralytics models and
    predictors must not be shared between threads.
    """

    name = "yolo"

    def __init__(self, model_path: str,
                 confidence_threshold: float = 0.25,
                 iou_threshold: float = 0.7,
                 device: str = "auto",
                 class_names: Optional[Dict[int, str]] = None,
                 image_size: int = 640):
        """
        Initialize detector.

        Args:
            model_path: Path to model weights (.pt / .onnx)
            confidence_threshold: Confidence passed to the model
            iou_threshold: NMS IoU passed to the model
            device: Inference device (auto, cpu, cuda, mps)
            class_names: Dataset class names, used when the model has none
            image_size: Inference image size
        """
        if not Path(model_path).exists():
            raise FileNotFoundError(f"Model not found: {model_path}")

        from ultralytics import YOLO

        self.model_path = str(model_path)
        self._model_class = YOLO
        self._local = threading.local()
        self.confidence_threshold = confidence_threshold
        self.iou_threshold = iou_threshold
        self.device = None if device == "auto" else device
        self.image_size = image_size

        model_names = getattr(self.model, "names", None) or {}
        if isinstance(model_names, (list, tuple)):
            model_names = dict(enumerate(model_names))
        self.class_names = {int(k): str(v) for k, v in model_names.items()} or dict(class_names or {})
        if not self.class_names:
            raise ConfigError("No class names available from the model or the dataset")

    @property
    def model(self):
        """Model owned by the calling thread, loaded on first use."""
        model = getattr(self._local, "model", None)
        if model is None:
            logger.debug(f"Loading {self.model_path} in {threading.current_thread().name}")
            model = self._model_class(self.model_path)
            self._local.model = model
        return model

    def detect(self, image_path: Path) -> List[Box]:
        results = self.model.predict(
            source=str(image_path),
            conf=self.confidence_threshold,
            iou=self.iou_threshold,
            imgsz=self.image_size,
            device=self.device,
            verbose=False,
        )
        detections: List[Box] = []
        for result in results:
            detections.extend(self._boxes_from_result(result))
        return detections

    def _boxes_from_result(self, result: Any) -> List[Box]:
        boxes = result.boxes
        if boxes is None or len(boxes) == 0:
            return []
        xywhn = boxes.xywhn.cpu().numpy()
        confs = boxes.conf.cpu().numpy()
        classes = boxes.cls.cpu().numpy()

        out = []
        for (cx, cy, w, h), conf, cls in zip(xywhn, confs, classes):
            if w <= 0 or h <= 0:
                logger.debug(f"Dropping degenerate model box ({cx}, {cy}, {w}, {h})")
                continue
            out.append(Box(
                class_id=_class_name(self.class_names, int(cls)),
                cx=float(cx), cy=float(cy), w=float(w), h=float(h),
                confidence=min(max(float(conf), 0.0), 1.0),
            ))
        return out
