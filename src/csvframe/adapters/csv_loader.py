from typing import Dict, List, Optional, TextIO, Tuple

from csvframe.canonical.frame import (
    COLUMN_COUNT_MISMATCH,
    MALFORMED_NUMERIC_FIELD,
    DataFrame,
    LoadIssue,
    Row,
)
from csvframe.config.load_config import LoadConfig
from csvframe.input.tokenizer import iter_lines, split_line, trim_token, try_parse_number
from csvframe.observability.logger import RequestTimer, generate_request_id, log_event
from csvframe.pipeline.statistics import compute_min_max
from csvframe.utils.exceptions import (
    CSVFrameError,
    CapacityExceededError,
    ColumnCountMismatchError,
    ConfigurationError,
    EmptySourceError,
    MalformedNumericFieldError,
    SourceUnavailableError,
)

PAD_VALUE = 0.0
MAX_ISSUE_PREVIEW = 3


# ------------------------------------------------------------------
# CSV Loader
# ------------------------------------------------------------------
class CSVLoader:
    """
    Two-pass CSV ingestion: one header row of labels, then rows of floats.
    Responsibilities:
    - Open the source read-only and always release it
    - Trim header tokens into alphanumeric feature names
    - Parse data tokens into floats, row by row
    - Refuse to grow past max_features / max_rows
    - Resolve malformed numbers and ragged rows per the configured policy
    - Optionally compute per-column min/max
    DOES NOT:
    - Handle quoted fields
    - Infer types other than float
    """

    def __init__(self, config: LoadConfig):
        self.config = config.validate()

    # --------------------------------------------------
    # Entrypoints
    # --------------------------------------------------
    def load(self) -> DataFrame:
        """
        Open config.path, read it fully and return the finished frame.
        """
        path = self.config.path
        if not path:
            raise ConfigurationError("LoadConfig.path is required to load from a file")

        return self._run(path, lambda: self._load_path(path))

    def load_stream(self, source: TextIO, source_name: Optional[str] = None) -> DataFrame:
        """
        Read from an already open text handle. The caller keeps ownership
        of the handle; it is not closed here.
        """
        return self._run(source_name, lambda: self._read_frame(source, source_name))

    # --------------------------------------------------
    # Internal helpers
    # --------------------------------------------------
    def _run(self, source_name: Optional[str], build) -> DataFrame:
        request_id = generate_request_id()
        timer = RequestTimer()

        log_event("CSV_LOAD_STARTED", {
            "request_id": request_id,
            "source": source_name,
            "delimiter": self.config.delimiter,
            "max_features": self.config.max_features,
            "max_rows": self.config.max_rows,
            "detailed_statistics": self.config.detailed_statistics,
        })

        try:
            frame = build()
        except CSVFrameError as e:
            log_event("CSV_LOAD_FAILED", {
                "request_id": request_id,
                "source": source_name,
                "error_type": type(e).__name__,
                "message": str(e),
                "duration_seconds": timer.duration(),
            })
            raise

        if frame.issues:
            log_event("CSV_LOAD_WARNING", self._issue_summary(request_id, frame))

        log_event("CSV_LOAD_COMPLETED", {
            "request_id": request_id,
            "source": source_name,
            "rows": frame.row_count,
            "cols": frame.col_count,
            "cells": frame.cell_count,
            "issues": len(frame.issues),
            "duration_seconds": timer.duration(),
        })
        return frame

    def _load_path(self, path: str) -> DataFrame:
        try:
            handle = open(path, self.config.mode, encoding=self.config.encoding, errors="replace")
        except OSError as e:
            raise SourceUnavailableError(path, e.strerror or str(e)) from e

        with handle:
            return self._read_frame(handle, path)

    def _tokens(self, line: str) -> List[str]:
        tokens = split_line(line, self.config.delimiter)
        # A terminal delimiter does not open a new field
        if len(tokens) > 1 and tokens[-1] == "":
            tokens.pop()
        return tokens

    def _read_frame(self, source: TextIO, source_name: Optional[str]) -> DataFrame:
        lines = iter_lines(source)

        feature_names, header_line_number = self._read_header(lines)
        cells, issues = self._read_rows(lines, len(feature_names), header_line_number)

        min_values = max_values = None
        if self.config.detailed_statistics:
            min_values, max_values = compute_min_max(cells, len(feature_names))

        return DataFrame(
            delimiter=self.config.delimiter,
            feature_names=feature_names,
            cells=tuple(cells),
            min_values=min_values,
            max_values=max_values,
            source=source_name,
            issues=tuple(issues),
        )

    # --------------------------------------------------
    # Pass 1: header
    # --------------------------------------------------
    def _read_header(self, lines) -> Tuple[Tuple[str, ...], int]:
        line_number = 0
        for line in lines:
            line_number += 1
            if not line.strip():
                continue

            tokens = self._tokens(line)
            if len(tokens) > self.config.max_features:
                raise CapacityExceededError(
                    "feature names", self.config.max_features, len(tokens)
                )
            return tuple(trim_token(t) for t in tokens), line_number

        raise EmptySourceError("Source contains no header line")

    # --------------------------------------------------
    # Pass 2: data rows
    # --------------------------------------------------
    def _read_rows(self, lines, width: int, header_line_number: int) -> Tuple[List[Row], List[LoadIssue]]:
        cells: List[Row] = []
        issues: List[LoadIssue] = []

        line_number = header_line_number
        for line in lines:
            line_number += 1
            if not line.strip():
                continue

            if len(cells) >= self.config.max_rows:
                raise CapacityExceededError("rows", self.config.max_rows, len(cells) + 1)

            row_index = len(cells)
            tokens = self._tokens(line)

            if len(tokens) != width:
                if self.config.on_column_mismatch == "error":
                    raise ColumnCountMismatchError(line_number, width, len(tokens))
                issues.append(LoadIssue(
                    kind=COLUMN_COUNT_MISMATCH,
                    line_number=line_number,
                    row=row_index,
                    detail=f"expected {width} values, found {len(tokens)}",
                ))
                tokens = tokens[:width]

            values: List[float] = []
            for col, token in enumerate(tokens):
                value = try_parse_number(token)
                if value is None:
                    if self.config.on_malformed_number == "error":
                        raise MalformedNumericFieldError(line_number, col, token)
                    issues.append(LoadIssue(
                        kind=MALFORMED_NUMERIC_FIELD,
                        line_number=line_number,
                        row=row_index,
                        column=col,
                        detail=f"{token!r} stored as {PAD_VALUE}",
                    ))
                    value = PAD_VALUE
                values.append(value)

            values.extend([PAD_VALUE] * (width - len(values)))
            cells.append(tuple(values))

        return cells, issues

    def _issue_summary(self, request_id: str, frame: DataFrame) -> Dict:
        counts: Dict[str, int] = {}
        for issue in frame.issues:
            counts[issue.kind] = counts.get(issue.kind, 0) + 1

        return {
            "request_id": request_id,
            "source": frame.source,
            "message": "Some cells were not clean numeric values and were resolved by policy.",
            "counts": counts,
            "policies": {
                "on_malformed_number": self.config.on_malformed_number,
                "on_column_mismatch": self.config.on_column_mismatch,
            },
            "preview": [
                {
                    "kind": i.kind,
                    "line_number": i.line_number,
                    "column": i.column,
                    "detail": i.detail,
                }
                for i in frame.issues[:MAX_ISSUE_PREVIEW]
            ],
        }


def load_csv(path: str, **options) -> DataFrame:
    """
    Convenience wrapper: load_csv("data.csv", delimiter=";", detailed_statistics=True)
    """
    config = LoadConfig.from_dict({"path": path, **options})
    return CSVLoader(config).load()
