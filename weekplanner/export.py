"""
Spreadsheet export download.

The backend renders the .xlsx; we only store the payload under a
generated file name: '<subject name>-planning.xlsx'.
"""

from __future__ import annotations

from pathlib import Path


def export_filename(subject_name: str) -> str:
    """
    File name for a subject export. Path separators in the name are replaced
    so the file always lands directly in the target directory.
    """
    name = (subject_name or "").strip() or "subject"
    name = name.replace("/", "-").replace("\\", "-")
    return f"{name}-planning.xlsx"


def write_export(payload: bytes, subject_name: str, out_dir: str | Path) -> Path:
    """
    Write the export payload to out_dir. Returns the written path.
    """
    out = Path(out_dir) / export_filename(subject_name)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(payload)
    return out
