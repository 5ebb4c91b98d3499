"""
Audit pipeline: sample images, match, classify and aggregate.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from tqdm import tqdm

from ..core.errors import InputError
from ..core.interfaces import DatasetInterface, DetectorInterface
from ..core.types import (
    AuditConfig,
    AuditResult,
    AuditSummary,
    Box,
    Correspondence,
    GateResult,
    ImageRecord,
    Issue,
    IssueType,
)
from .aggregator import AuditAggregator
from .classifier import classify
from .equivalence import ClassEquivalenceResolver
from .matcher import match
from .sampler import sample

logger = logging.getLogger(__name__)


@dataclass
class ImageAudit:
    """Audit outcome for one image."""
    image_id: str
    issues: List[Issue]
    correspondence: Correspondence
    gt_count: int
    detection_count: int


class Auditor:
    """Runs the matching engine over a dataset."""

    def __init__(self, config: Optional[AuditConfig] = None):
        """
        Initialize auditor.

        Args:
            config: Audit configuration (defaults if None)

        Raises:
            ConfigError: The class groups are malformed or ambiguous
        """
        self.config = config or AuditConfig()
        self.resolver = ClassEquivalenceResolver(self.config.class_groups, self.config.ignore_case)
        self.severities = {t: self.config.severity_for(t) for t in IssueType}

    def audit_record(self, record: ImageRecord) -> ImageAudit:
        """
        Match and classify one image. Pure function of the record and config.

        Raises:
            InputError: The record holds something other than boxes
        """
        for box in list(record.gt_boxes) + list(record.detections):
            if not isinstance(box, Box):
                raise InputError(f"Expected Box, got {type(box).__name__}", image_id=record.image_id)

        correspondence = match(
            record.gt_boxes,
            record.detections,
            self.config.confidence_threshold,
            self.config.iou_threshold,
        )
        issues = classify(
            record.image_id,
            record.gt_boxes,
            record.detections,
            correspondence,
            same_class=self.resolver.same_class,
            localization_iou_threshold=self.config.localization_iou_threshold,
            severities=self.severities,
        )
        return ImageAudit(
            image_id=record.image_id,
            issues=issues,
            correspondence=correspondence,
            gt_count=len(record.gt_boxes),
            detection_count=len(record.detections) - len(correspondence.discarded_det),
        )

    def select_images(self, image_ids: List[str]) -> List[str]:
        selected = sample(image_ids, self.config.sample_size, self.config.sample_seed)
        if len(selected) < len(image_ids):
            logger.info(f"Sampled {len(selected)} of {len(image_ids)} images (seed={self.config.sample_seed})")
        return selected

    @staticmethod
    def load_record(dataset: DatasetInterface, detector: DetectorInterface, image_id: str) -> ImageRecord:
        image_path = dataset.get_image_path(image_id)
        return ImageRecord(
            image_id=image_id,
            gt_boxes=dataset.load_annotations(image_id),
            detections=detector.detect(image_path),
            image_path=str(image_path),
        )

    def _audit_image(self, dataset: DatasetInterface, detector: DetectorInterface,
                     image_id: str) -> ImageAudit:
        return self.audit_record(self.load_record(dataset, detector, image_id))

    def _collect(self, aggregator: AuditAggregator, image_id: str, outcome) -> None:
        """Fold a finished image, or record why it was skipped."""
        try:
            audit = outcome()
        except (InputError, OSError) as e:
            logger.warning(f"Skipping {image_id}: {e}")
            aggregator.skip(image_id, str(e))
            return
        aggregator.add(audit.image_id, audit.issues, audit.gt_count, audit.detection_count)

    def audit_records(self, records: Iterable[ImageRecord],
                      total_images: Optional[int] = None) -> Tuple[AuditSummary, GateResult]:
        """
        Audit in-memory records sequentially.

        Args:
            records: Image records
            total_images: Dataset size (defaults to the number of records)

        Returns:
            Tuple of (finalized summary, gate verdict)
        """
        records = list(records)
        aggregator = AuditAggregator(total_images=len(records) if total_images is None else total_images)
        for record in records:
            self._collect(aggregator, record.image_id, lambda r=record: self.audit_record(r))
        gate = aggregator.finalize(self.config.fail_on_high, self.config.fail_on_medium)
        return aggregator.summary, gate

    def run(self, dataset: DatasetInterface, detector: DetectorInterface,
            progress: bool = True, dataset_path: str = "",
            method: Optional[str] = None) -> AuditResult:
        """
        Audit a dataset with the given detection source.

        Per-image work runs on a thread pool when ``workers > 1``; results are
        folded by the calling thread only.

        Args:
            dataset: Ground truth source
            detector: Detection source
            progress: Show a progress bar
            dataset_path: Dataset location recorded in the result
            method: Detection method name recorded in the result

        Returns:
            AuditResult with finalized summary and gate verdict
        """
        start = time.perf_counter()
        all_ids = dataset.get_image_ids()
        image_ids = self.select_images(all_ids)
        aggregator = AuditAggregator(total_images=len(all_ids))

        logger.info(f"Auditing {len(image_ids)} images")
        # disable=None lets tqdm switch itself off when stderr is not a TTY
        with tqdm(total=len(image_ids), desc="Auditing", unit="img",
                  disable=None if progress else True) as bar:
            if self.config.workers == 1:
                for image_id in image_ids:
                    self._collect(aggregator, image_id,
                                  lambda i=image_id: self._audit_image(dataset, detector, i))
                    bar.update(1)
            else:
                self._run_parallel(dataset, detector, image_ids, aggregator, bar)

        gate = aggregator.finalize(self.config.fail_on_high, self.config.fail_on_medium)
        elapsed = time.perf_counter() - start
        logger.info(
            f"Audited {aggregator.summary.images_audited}/{len(image_ids)} images "
            f"in {elapsed:.2f}s, {aggregator.summary.total_issues} issues"
        )

        return AuditResult(
            summary=aggregator.summary,
            gate=gate,
            config=self.config,
            dataset_path=dataset_path,
            method=method or getattr(detector, "name", type(detector).__name__),
            elapsed_seconds=elapsed,
        )

    def _run_parallel(self, dataset: DatasetInterface, detector: DetectorInterface,
                      image_ids: List[str], aggregator: AuditAggregator, bar: tqdm) -> None:
        executor = ThreadPoolExecutor(max_workers=self.config.workers)
        try:
            futures = {
                executor.submit(self._audit_image, dataset, detector, image_id): image_id
                for image_id in image_ids
            }
            for future in as_completed(futures):
                self._collect(aggregator, futures[future], future.result)
                bar.update(1)
        except BaseException:
            # Stop submitting; what has been folded so far stays valid
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
