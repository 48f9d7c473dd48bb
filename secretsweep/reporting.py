"""Render a batch result as JSON, CSV or plain text."""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone

from .scanners.files import BatchResult

FORMATS = ("text", "json", "csv")

_CSV_HEADER = ["File Name", "Finding Type", "Risk Level", "Value"]
_RULE = "=" * 40


def render(result: BatchResult, fmt: str, now: datetime | None = None) -> str:
    if fmt == "json":
        return to_json(result, now=now)
    if fmt == "csv":
        return to_csv(result)
    if fmt == "text":
        return to_text(result)
    raise ValueError(f"Unknown report format: {fmt}")


def to_json(result: BatchResult, now: datetime | None = None) -> str:
    report = {
        "analysis_summary": {
            "file_names": result.file_names,
            "analysis_date": _iso_timestamp(now or datetime.now(timezone.utc)),
            "risk_score": result.report.score,
            "risk_level": result.report.level.value,
            "total_findings": len(result.findings),
        },
        "findings": [
            {"value": f.value, "type": f.type.value, "risk": f.risk.value, "file": f.file_name}
            for f in result.findings
        ],
    }
    return json.dumps(report, indent=2)


def to_csv(result: BatchResult) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(_CSV_HEADER)
    for f in result.findings:
        writer.writerow([f.file_name, f.type.value, f.risk.value, f.value])
    return buf.getvalue()


def to_text(result: BatchResult) -> str:
    lines = [
        "SecretSweep Analysis Report",
        "",
        f"Overall Risk Score: {result.report.score}/100 ({result.report.level.value})",
        f"Total Findings: {len(result.findings)}",
        f"Files Scanned: {len(result.findings_by_file)}",
        "",
    ]
    for file_name, findings in result.findings_by_file.items():
        if not findings:
            continue
        lines.extend([_RULE, f"File: {file_name}", _RULE, ""])
        lines.extend(f"[{f.risk.value}] {f.type.value}: {f.value}" for f in findings)
        lines.append("")
    return "\n".join(lines) + "\n"


def _iso_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
