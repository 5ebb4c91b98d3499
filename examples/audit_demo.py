#!/usr/bin/env python3
"""
Demonstration of the ground truth audit engine.

This script shows how to use the audit components to:
1. Match ground truth to detections and classify issues
2. Use class equivalence groups and a localization threshold
3. Gate a run on severity counts
4. Export reports in JSON, CSV and HTML
"""

import os
import shutil
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gt_audit.core.types import AuditConfig, AuditResult, Box, ImageRecord
from gt_audit.evaluation import Auditor, ReportGenerator

DEMO_DIR = "demo_audit_results"


def create_sample_records():
    """Create sample images with a few deliberate labeling errors."""
    return [
        # Correct label
        ImageRecord("street_001.jpg",
                    gt_boxes=[Box("car", 0.50, 0.50, 0.30, 0.20, line_num=1)],
                    detections=[Box("car", 0.51, 0.50, 0.29, 0.21, confidence=0.93)]),

        # Wrong class: truck labeled as car
        ImageRecord("street_002.jpg",
                    gt_boxes=[Box("car", 0.40, 0.60, 0.25, 0.20, line_num=1)],
                    detections=[Box("truck", 0.40, 0.60, 0.25, 0.20, confidence=0.88)]),

        # Forgotten pedestrian
        ImageRecord("street_003.jpg",
                    gt_boxes=[],
                    detections=[Box("person", 0.20, 0.70, 0.05, 0.20, confidence=0.76)]),

        # Label with nothing there, and a loose box
        ImageRecord("street_004.jpg",
                    gt_boxes=[Box("bicycle", 0.80, 0.20, 0.10, 0.10, line_num=1),
                              Box("automobile", 0.30, 0.30, 0.20, 0.20, line_num=2)],
                    detections=[Box("car", 0.33, 0.31, 0.20, 0.20, confidence=0.91),
                                Box("dog", 0.90, 0.90, 0.05, 0.05, confidence=0.12)]),
    ]


def demo_basic_audit():
    """Demonstrate auditing in-memory records."""
    print("=" * 60)
    print("BASIC AUDIT DEMO")
    print("=" * 60)

    auditor = Auditor(AuditConfig())
    for record in create_sample_records():
        audit = auditor.audit_record(record)
        print(f"\n{record.image_id}: {len(audit.issues)} issue(s)")
        for issue in audit.issues:
            print(f"   [{issue.severity.value}] {issue.type.value}: {issue.description}")


def demo_configured_audit():
    """Demonstrate class groups, localization and the CI gate."""
    print("\n" + "=" * 60)
    print("CONFIGURED AUDIT DEMO")
    print("=" * 60)

    config = AuditConfig(
        class_groups=[["car", "automobile"]],
        localization_iou_threshold=0.8,
        fail_on_high=0,
    )
    summary, gate = Auditor(config).audit_records(create_sample_records())

    print(f"\nImages with issues: {summary.images_with_issues}/{summary.images_audited}")
    for type_name, count in summary.issues_by_type():
        print(f"   {type_name}: {count}")
    print(f"\nCI gate: {gate.status.upper()}")
    for violation in gate.violations:
        print(f"   {violation}")

    return AuditResult(summary=summary, gate=gate, config=config,
                       dataset_path="<in-memory>", method="demo")


def demo_reports(result):
    """Demonstrate report export."""
    print("\n" + "=" * 60)
    print("REPORT EXPORT DEMO")
    print("=" * 60)

    reporter = ReportGenerator()
    for name in ("audit_report.json", "audit_issues.csv", "audit_report.html"):
        path = os.path.join(DEMO_DIR, name)
        reporter.save_report(result, path)
        print(f"   ✓ Saved {path}")
    print(reporter.format_console_summary(result))


def main():
    """Run all audit demonstrations."""
    print("GROUND TRUTH AUDIT - DEMONSTRATION")
    print("=" * 60)

    try:
        demo_basic_audit()
        result = demo_configured_audit()
        demo_reports(result)

        print("\n" + "=" * 60)
        print("DEMONSTRATION COMPLETED SUCCESSFULLY!")
        print("=" * 60)

    except Exception as e:
        print(f"\nError during demonstration: {e}")
        return 1

    finally:
        # Comment out to keep the generated reports
        if os.path.exists(DEMO_DIR):
            shutil.rmtree(DEMO_DIR)
            print(f"   ✓ Cleaned up {DEMO_DIR}")

    return 0


if __name__ == "__main__":
    exit(main())
