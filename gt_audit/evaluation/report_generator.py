"""
Report generation for audit results.
"""

import html
import os
from typing import Any, Dict, List

from .. import __version__
from ..core.interfaces import ReporterInterface
from ..core.types import AuditResult, FlaggedImage, Severity
from ..utils.file_utils import FileUtils

GENERATOR_NAME = "gt-audit"

CSV_COLUMNS = [
    "image_id", "type", "severity", "gt_class", "detected_class",
    "iou", "confidence", "line_num", "description", "explanation",
]


class ReportGenerator(ReporterInterface):
    """Generate audit reports in JSON, CSV or HTML."""

    def build_report(self, result: AuditResult) -> Dict[str, Any]:
        """
        Build the report document.

        Args:
            result: Finished audit run

        Returns:
            Report dictionary
        """
        summary = result.summary
        return {
            "generator": GENERATOR_NAME,
            "generator_version": __version__,
            "generated_at": result.generated_at,
            "dataset_path": result.dataset_path,
            "method": result.method,
            "confidence_threshold": result.config.confidence_threshold,
            "iou_threshold": result.config.iou_threshold,
            "localization_iou_threshold": result.config.localization_iou_threshold,
            "elapsed_seconds": round(result.elapsed_seconds, 3),
            "summary": summary.counts_dict(),
            "verdict": {
                "status": result.gate.status,
                "checked": result.gate.checked,
                "violations": list(result.gate.violations),
            },
            "flagged_images": [img.to_dict() for img in summary.flagged_images],
            "skipped_images": [img.to_dict() for img in summary.skipped_images],
        }

    def issue_rows(self, result: AuditResult) -> List[Dict[str, Any]]:
        """Flatten issues into one row per issue."""
        rows = []
        for flagged in result.summary.flagged_images:
            for issue in flagged.issues:
                row = {column: None for column in CSV_COLUMNS}
                row.update(issue.to_dict())
                rows.append(row)
        return rows

    def save_json_report(self, result: AuditResult, output_path: str) -> None:
        FileUtils.save_json(self.build_report(result), output_path)

    def save_csv_report(self, result: AuditResult, output_path: str) -> None:
        FileUtils.save_csv(self.issue_rows(result), output_path, columns=CSV_COLUMNS)

    def save_html_report(self, result: AuditResult, output_path: str) -> None:
        FileUtils.save_text(self._generate_html_report(result), output_path)

    def generate(self, result: AuditResult, output_path: str) -> None:
        """
        Write a report, picking the format from the file extension.

        ``.html``/``.htm`` and ``.csv`` get those formats, anything else is JSON.

        Args:
            result: Finished audit run
            output_path: Output file path
        """
        ext = os.path.splitext(str(output_path))[1].lower()
        if ext in (".html", ".htm"):
            self.save_html_report(result, output_path)
        elif ext == ".csv":
            self.save_csv_report(result, output_path)
        else:
            self.save_json_report(result, output_path)

    save_report = generate

    def format_console_summary(self, result: AuditResult) -> str:
        """Plain text summary printed at the end of a run."""
        summary = result.summary
        lines = [
            "",
            "=" * 50,
            "AUDIT SUMMARY",
            "=" * 50,
            f"Total images:       {summary.total_images}",
            f"Images audited:     {summary.images_audited}",
            f"Images with issues: {summary.images_with_issues}",
            f"Total issues:       {summary.total_issues}",
        ]
        if summary.skipped_images:
            lines.append(f"Skipped images:     {len(summary.skipped_images)}")

        lines.append("")
        lines.append("By severity:")
        for severity in Severity:
            lines.append(f"  {severity.value:<8} {summary.by_severity.get(severity, 0)}")

        lines.append("")
        lines.append("By type:")
        for type_name, count in summary.issues_by_type():
            lines.append(f"  {type_name:<16} {count}")

        lines.append("")
        lines.append(f"Time: {result.elapsed_seconds:.2f}s")
        return "\n".join(lines)

    def _generate_html_report(self, result: AuditResult) -> str:
        summary = result.summary
        esc = html.escape

        page = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>GT Audit Report</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 2rem; color: #222; }}
        .meta {{ color: #777; font-size: 0.9rem; }}
        .summary-grid {{ display: flex; flex-wrap: wrap; gap: 1rem; margin: 1.5rem 0; }}
        .summary-card {{ border: 1px solid #ddd; border-radius: 8px; padding: 1rem; min-width: 140px; text-align: center; }}
        .summary-card .value {{ font-size: 2rem; font-weight: bold; }}
        .summary-card .label {{ font-size: 0.8rem; color: #777; }}
        .high {{ color: #d32f2f; }}
        .medium {{ color: #f57c00; }}
        .low {{ color: #777; }}
        .issue-card {{ border: 1px solid #ddd; border-radius: 6px; margin-bottom: 1rem; }}
        .issue-card.high {{ border-left: 4px solid #d32f2f; }}
        .issue-card.medium {{ border-left: 4px solid #f57c00; }}
        .issue-card.low {{ border-left: 4px solid #999; }}
        .issue-header {{ padding: 0.6rem 1rem; background: #f5f5f5; font-family: monospace; }}
        .issue-item {{ padding: 0.4rem 1rem; font-size: 0.9rem; }}
        .issue-type {{ font-weight: bold; }}
        .verdict-pass {{ color: #2e7d32; }}
        .verdict-fail {{ color: #d32f2f; }}
    </style>
</head>
<body>
    <h1>Ground Truth Audit Report</h1>
    <p class="meta">
        Dataset: {esc(result.dataset_path)} | Method: {esc(result.method)} |
        Confidence: {result.config.confidence_threshold} | IoU: {result.config.iou_threshold} |
        Generated: {esc(result.generated_at)}
    </p>
    <div class="summary-grid">
"""
        cards = [
            ("Total Images", summary.total_images, ""),
            ("Images Audited", summary.images_audited, ""),
            ("With Issues", summary.images_with_issues, ""),
            ("High Severity", summary.high_count, "high"),
            ("Medium Severity", summary.medium_count, "medium"),
            ("Low Severity", summary.low_count, "low"),
        ]
        for label, value, css in cards:
            page += f"""        <div class="summary-card">
            <div class="value {css}">{value}</div>
            <div class="label">{label}</div>
        </div>
"""
        page += "    </div>\n"

        if result.gate.checked:
            css = "verdict-pass" if result.gate.passed else "verdict-fail"
            page += f'    <h2 class="{css}">CI gate: {result.gate.status.upper()}</h2>\n'
            for violation in result.gate.violations:
                page += f"    <p>{esc(violation)}</p>\n"

        page += f"    <h2>Flagged Images ({len(summary.flagged_images)})</h2>\n"
        for flagged in summary.flagged_images:
            page += self._image_card(flagged)

        if summary.skipped_images:
            page += f"    <h2>Skipped Images ({len(summary.skipped_images)})</h2>\n    <ul>\n"
            for skipped in summary.skipped_images:
                page += f"        <li>{esc(skipped.image_id)}: {esc(skipped.reason)}</li>\n"
            page += "    </ul>\n"

        page += f'    <p class="meta">Generated by {GENERATOR_NAME} {__version__}</p>\n</body>\n</html>\n'
        return page

    def _image_card(self, flagged: FlaggedImage) -> str:
        esc = html.escape
        worst = flagged.worst_severity.value
        badges = ""
        for severity in (Severity.HIGH, Severity.MEDIUM):
            n = flagged.count(severity)
            if n:
                badges += f' <span class="{severity.value}">{n} {severity.value.upper()}</span>'

        card = f"""    <div class="issue-card {worst}">
        <div class="issue-header">{esc(flagged.image_id)}{badges} ({len(flagged.issues)} total)</div>
"""
        for issue in flagged.issues:
            card += (
                f'        <div class="issue-item"><span class="issue-type {issue.severity.value}">'
                f"{esc(issue.type.value)}</span>: {esc(issue.description)}"
            )
            if issue.line_num is not None:
                card += f" (line {issue.line_num})"
            if issue.explanation:
                card += f"<br><em>{esc(issue.explanation)}</em>"
            card += "</div>\n"
        card += "    </div>\n"
        return card
