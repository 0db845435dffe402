from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from .models import (
    STATUS_FAILED,
    STATUS_HISTORY_NOT_FOUND,
    STATUS_NEWLY_INTRODUCED,
    AuditReport,
)

LOGGER = logging.getLogger(__name__)


def log_report(report: AuditReport) -> None:
    """Log every terminal state and caught line with enough context to act on."""
    for result in report.results:
        if result.status == STATUS_FAILED:
            LOGGER.error("%s: classification failed: %s", result.path, result.error)
        elif result.status == STATUS_HISTORY_NOT_FOUND:
            LOGGER.warning(
                "%s: history not found on %s (deleted file or wrong path?)",
                result.path, report.merge_commit
            )
        elif result.status == STATUS_NEWLY_INTRODUCED:
            LOGGER.info("%s: file is newly introduced; nothing could overwrite it", result.path)
        else:
            LOGGER.info(
                "%s: %d PR-owned lines, %d caught",
                result.path, len(result.owned_lines), len(result.caught)
            )

        for caught in result.caught:
            LOGGER.warning(
                "%s:%d caught by %s (lines %d-%d): %s",
                caught.path,
                caught.line,
                caught.commit_id,
                caught.range_start,
                caught.range_end,
                caught.message_headline,
            )


def write_jsonl(report: AuditReport, output_path: Path) -> None:
    """Write one JSON object per classified file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as out_f:
        for result in report.results:
            record = asdict(result)
            record["repo"] = f"{report.owner}/{report.repository}"
            record["pull_number"] = report.number
            record["merge_commit"] = report.merge_commit
            out_f.write(json.dumps(record, ensure_ascii=False) + "\n")
    LOGGER.info("Report written to %s", output_path)


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def emit_annotations(report: AuditReport, stream: TextIO) -> None:
    """Print GitHub Actions workflow commands for caught lines and missing history."""
    for result in report.results:
        path = _escape_property(result.path)
        if result.status == STATUS_HISTORY_NOT_FOUND:
            stream.write(f"::notice file={path}::{escape_data('history not found')}\n")
        for caught in result.caught:
            message = (
                f"Line {caught.line} was overwritten by {caught.commit_id}: "
                f"{caught.message_headline}"
            )
            stream.write(
                f"::warning file={path},line={caught.line},"
                f"title={_escape_property('Caught line')}::{escape_data(message)}\n"
            )
