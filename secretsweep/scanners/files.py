"""Batch scanning: read each file, match it in parallel, score the union.

The batch is all-or-nothing. Too many files is rejected before any file
is opened, and a single unreadable file aborts the whole batch.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from ..config import Settings
from ..core.matcher import PatternMatcher
from ..core.models import Finding, RiskReport
from ..core.patterns import default_pattern_table, load_pattern_table
from ..core.scorer import aggregate
from ..errors import BatchValidationError, FileReadError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class BatchResult:
    """Findings for a whole batch plus its single risk report."""
    findings_by_file: dict[str, list[Finding]]
    report: RiskReport
    files_scanned: int
    findings: list[Finding] = field(default_factory=list)

    @property
    def file_names(self) -> list[str]:
        return list(self.findings_by_file)


class FileBatchScanner:
    """Scans a bounded batch of files and aggregates one risk report."""

    name = "files"

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        if self._settings.patterns_path is not None:
            rules = load_pattern_table(self._settings.patterns_path)
        else:
            rules = default_pattern_table()
        self._matcher = PatternMatcher(rules)

    def scan_paths(
        self,
        paths: Sequence[Path],
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        labels = [str(p) for p in paths]
        loaders = [_file_loader(Path(p), self._settings) for p in paths]
        return self._run(labels, loaders, on_progress)

    def scan_texts(
        self,
        items: Sequence[tuple[str, str]],
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """Scan already-decoded (label, text) pairs."""
        labels = [label for label, _ in items]
        loaders = [_text_loader(text) for _, text in items]
        return self._run(labels, loaders, on_progress)

    def _run(
        self,
        labels: list[str],
        loaders: list[Callable[[], str]],
        on_progress: ProgressCallback | None,
    ) -> BatchResult:
        total = len(labels)
        if total > self._settings.max_files:
            raise BatchValidationError(
                f"batch of {total} files exceeds the limit of {self._settings.max_files}"
            )

        # A label listed twice is one file: first position, last loader.
        unique: dict[str, Callable[[], str]] = {}
        for label, loader in zip(labels, loaders):
            unique[label] = loader
        labels = list(unique)
        loaders = list(unique.values())
        total = len(labels)

        per_file: list[list[Finding] | None] = [None] * total
        completed = 0

        with ThreadPoolExecutor(max_workers=self._settings.workers) as pool:
            futures: dict[Future, int] = {
                pool.submit(self._scan_one, labels[i], loaders[i]): i
                for i in range(total)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    per_file[index] = future.result()
                except FileReadError as e:
                    logger.error("aborting batch, could not read %s: %s", e.file_name, e.reason)
                    for pending in futures:
                        pending.cancel()
                    raise
                completed += 1
                if on_progress is not None:
                    on_progress(completed, total)

        findings_by_file: dict[str, list[Finding]] = {}
        for label, findings in zip(labels, per_file):
            if findings:
                findings_by_file[label] = findings

        all_findings = [f for findings in findings_by_file.values() for f in findings]
        report = aggregate(all_findings)
        logger.info(
            "scanned %d files: %d findings, risk %d/100 (%s)",
            total, len(all_findings), report.score, report.level.value,
        )
        return BatchResult(
            findings_by_file=findings_by_file,
            report=report,
            files_scanned=total,
            findings=all_findings,
        )

    def _scan_one(self, label: str, loader: Callable[[], str]) -> list[Finding]:
        content = loader()
        return self._matcher.scan(content, label)


def _file_loader(path: Path, settings: Settings) -> Callable[[], str]:
    errors = "strict" if settings.strict_decoding else "replace"

    def load() -> str:
        try:
            return path.read_text(encoding=settings.encoding, errors=errors)
        except UnicodeDecodeError as e:
            raise FileReadError(str(path), f"cannot decode as {settings.encoding}: {e.reason}") from e
        except LookupError as e:
            raise FileReadError(str(path), f"unknown encoding '{settings.encoding}'") from e
        except OSError as e:
            raise FileReadError(str(path), e.strerror or str(e)) from e

    return load


def _text_loader(text: str) -> Callable[[], str]:
    return lambda: text
