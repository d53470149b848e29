from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .results import FileResult, StatusSnapshot
from .settings import RunOptions


def format_summary(summary: StatusSnapshot) -> List[str]:
    """
    Right-aligned count lines for the terminal.

    "examined" and "converted" always show; the rest only when nonzero.
    Column width is that of the examined count, the largest number.
    """
    rows = [
        (summary.total, "images examined", True),
        (summary.converted, "images converted", True),
        (summary.already_correct, "images already correct", False),
        (summary.unsuitable, "images unsuitable", False),
        (summary.half, "images half suitable", False),
        (summary.errors, "errors", False),
    ]
    width = len(str(max(count for count, _, _ in rows)))
    return [f"{count:>{width}d} {label}" for count, label, always in rows if always or count > 0]


@dataclass(frozen=True)
class FileReport:
    src_path: str
    disposition: str
    out_path: Optional[str]
    src_width: Optional[int]
    src_height: Optional[int]
    out_width: Optional[int]
    out_height: Optional[int]
    error: Optional[str]


@dataclass(frozen=True)
class RunReport:
    created_utc: str
    summary: dict
    files: List[FileReport]


def build_report(results: List[FileResult], summary: StatusSnapshot, opts: RunOptions) -> RunReport:
    created_utc = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

    files: List[FileReport] = []
    for r in results:
        src_w, src_h = r.src_size if r.src_size else (None, None)
        out_w, out_h = r.out_size if r.out_size else (None, None)
        files.append(
            FileReport(
                src_path=str(r.src_path),
                disposition=r.disposition.value,
                out_path=str(r.out_path) if r.out_path else None,
                src_width=src_w,
                src_height=src_h,
                out_width=out_w,
                out_height=out_h,
                error=r.error,
            )
        )

    summary_dict = {
        **asdict(summary),
        "options": asdict(opts),
    }

    return RunReport(created_utc=created_utc, summary=summary_dict, files=files)


def save_report_json(report: RunReport, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(report), f, indent=2, ensure_ascii=False)
