"""File based exporter writing a JSON array or a fixed-column CSV."""

from __future__ import annotations

import csv
import json
import os
from pathlib import Path
from typing import Sequence

from .base import BaseExporter


class FileExporter(BaseExporter):
    """Write records to a single output file.

    Output goes to a sibling ``.tmp`` file that replaces ``path`` on close, so
    an interrupted export never leaves a file that looks complete.
    """

    def __init__(self, path: Path, fmt: str, columns: Sequence[str] | None = None) -> None:
        if fmt not in ("json", "csv"):
            raise ValueError(f"Unsupported export format: {fmt}")
        if fmt == "csv" and not columns:
            raise ValueError("CSV export requires a column list")
        self.path = path
        self.format = fmt
        self.columns = list(columns or [])
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._tmp_path = self.path.with_name(self.path.name + ".tmp")
        self._file = self._tmp_path.open("w", encoding="utf-8", newline="")
        self._records: list[dict] = []
        self._csv_writer: csv.DictWriter | None = None
        self.count = 0
        if self.format == "csv":
            self._csv_writer = csv.DictWriter(
                self._file,
                fieldnames=self.columns,
                extrasaction="ignore",
                lineterminator="\n",
            )
            self._csv_writer.writeheader()

    def export(self, record: dict) -> None:
        if self._csv_writer is not None:
            self._csv_writer.writerow(record)
        else:
            # A JSON array can only be written once every element is known.
            self._records.append(record)
        self.count += 1

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if self._file.closed:
            return
        if self.format == "json":
            json.dump(self._records, self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.close()
        os.replace(self._tmp_path, self.path)

    def abort(self) -> None:
        if not self._file.closed:
            self._file.close()
        self._tmp_path.unlink(missing_ok=True)


__all__ = ["FileExporter"]
