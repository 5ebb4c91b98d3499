"""
Command line interface for the ground truth audit.

Usage:
    gt-audit validate DATASET --predictions runs/predict/labels -o report.html
    gt-audit validate DATASET --model best.pt --fail-on-high 0
    gt-audit info DATASET
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .core.errors import ConfigError, GTAuditError
from .core.interfaces import DetectorInterface
from .data.dataset import YoloDataset
from .evaluation.auditor import Auditor
from .evaluation.report_generator import ReportGenerator
from .models.detector import PredictionLabelDetector, UltralyticsDetector
from .utils.config_utils import ConfigUtils
from .utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

METHODS = ("predictions", "yolo")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gt-audit",
        description="Find likely annotation errors in object detection datasets",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    validate = subparsers.add_parser("validate", help="Audit a dataset against detections")
    validate.add_argument("dataset", type=str, help="Dataset root directory")
    source = validate.add_mutually_exclusive_group()
    source.add_argument("--predictions", type=str, default=None,
                        help="Directory of precomputed YOLO txt predictions (class cx cy w h conf)")
    source.add_argument("--model", type=str, default=None,
                        help="YOLO model weights to run on each image")
    validate.add_argument("--method", type=str, choices=METHODS, default=None,
                          help="Detection method (inferred from --predictions / --model)")
    validate.add_argument("-c", "--confidence", type=float, default=None,
                          help="Confidence threshold (default: 0.25)")
    validate.add_argument("--iou", type=float, default=None,
                          help="IoU threshold for matching (default: 0.5)")
    validate.add_argument("--localization-iou", type=float, default=None,
                          help="Flag same-class matches with IoU below this value")
    validate.add_argument("-o", "--output", type=str, default=None,
                          help="Report file (.json, .csv or .html)")
    validate.add_argument("--sample", type=int, default=None,
                          help="Audit a random sample of N images (0 = all)")
    validate.add_argument("--seed", type=int, default=None,
                          help="Random seed for sampling (default: 42)")
    validate.add_argument("--fail-on-high", type=int, default=None,
                          help="Exit 1 if high severity issues exceed this count")
    validate.add_argument("--fail-on-medium", type=int, default=None,
                          help="Exit 1 if medium severity issues exceed this count")
    validate.add_argument("-j", "--workers", type=int, default=None,
                          help="Number of parallel workers")
    validate.add_argument("--config", type=str, default=None,
                          help="YAML configuration file")
    validate.add_argument("--device", type=str, default="auto",
                          help="Inference device for --model (auto, cpu, cuda, mps)")
    validate.add_argument("--log-file", type=str, default=None,
                          help="Also write logs to this file")
    validate.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    validate.add_argument("--no-progress", action="store_true", help="Disable the progress bar")

    info = subparsers.add_parser("info", help="Show dataset information")
    info.add_argument("dataset", type=str, help="Dataset root directory")
    info.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    return parser


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """
    Apply command line flags on top of a configuration dictionary.

    Only flags given on the command line override file values.
    """
    overrides = {
        ("matching", "confidence_threshold"): args.confidence,
        ("matching", "iou_threshold"): args.iou,
        ("matching", "localization_iou_threshold"): args.localization_iou,
        ("sampling", "size"): args.sample,
        ("sampling", "seed"): args.seed,
        ("gate", "fail_on_high"): args.fail_on_high,
        ("gate", "fail_on_medium"): args.fail_on_medium,
        ("runtime", "workers"): args.workers,
    }
    override_config: Dict[str, Any] = {}
    for (section, key), value in overrides.items():
        if value is not None:
            override_config.setdefault(section, {})[key] = value
    return ConfigUtils.merge_configs(config, override_config)


def resolve_method(args: argparse.Namespace) -> str:
    if args.method:
        return args.method
    if args.model:
        return "yolo"
    return "predictions"


def create_detector(method: str, args: argparse.Namespace,
                    class_names: Dict[int, str], confidence: float) -> DetectorInterface:
    if method == "yolo":
        if not args.model:
            raise ConfigError("--model is required for method 'yolo'")
        return UltralyticsDetector(
            args.model,
            confidence_threshold=confidence,
            device=args.device,
            class_names=class_names,
        )
    if not args.predictions:
        raise ConfigError("--predictions is required for method 'predictions'")
    return PredictionLabelDetector(args.predictions, class_names=class_names)


def run_validate(args: argparse.Namespace) -> int:
    setup_logging(args.verbose, args.log_file)

    config = apply_overrides(ConfigUtils.load_config(args.config), args)
    audit_config = ConfigUtils.config_to_audit_config(config)
    auditor = Auditor(audit_config)

    logger.info(f"Loading dataset: {args.dataset}")
    dataset = YoloDataset(args.dataset)
    logger.info(f"Classes: {len(dataset.get_class_names())}, images: {dataset.image_count()}")

    method = resolve_method(args)
    logger.info(f"Initializing detector: {method}")
    detector = create_detector(method, args, dataset.get_class_names(),
                               audit_config.confidence_threshold)

    result = auditor.run(
        dataset,
        detector,
        progress=not args.no_progress,
        dataset_path=args.dataset,
        method=method,
    )

    reporter = ReportGenerator()
    print(reporter.format_console_summary(result))

    if args.output:
        reporter.save_report(result, args.output)
        print(f"\nReport saved: {args.output}")

    for violation in result.gate.violations:
        print(f"FAIL: {violation}", file=sys.stderr)
    if result.gate.checked and result.gate.passed:
        print("PASS: Issue counts within thresholds")

    return result.gate.exit_code


def run_info(args: argparse.Namespace) -> int:
    setup_logging(args.verbose)
    dataset = YoloDataset(args.dataset)
    info = dataset.info()

    print(f"Dataset: {info['path']}")
    print(f"Images:  {info['images']}")
    print(f"Classes: {len(info['classes'])}")
    print()
    print("Class names:")
    for class_id, name in sorted(info["classes"].items()):
        print(f"  {class_id}: {name}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "validate":
            return run_validate(args)
        return run_info(args)
    except (GTAuditError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
