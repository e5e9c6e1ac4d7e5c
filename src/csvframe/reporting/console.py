import random
from typing import List, Optional, Sequence, Tuple

from csvframe.canonical.frame import DataFrame, Row
from csvframe.config.load_config import ReportConfig


def _format_value(value: Optional[float]) -> str:
    if value is None:
        return "   n/a"
    return f"{value:6.3f}"


def _format_row(row: Sequence[float]) -> str:
    return "".join(f"\t{_format_value(v)}" for v in row)


def format_feature_names(frame: DataFrame) -> str:
    names = "   ".join(f'~"{name}"~' for name in frame.feature_names)
    return f"Features:\n\t[\t{names}   ]\n"


def format_frame_size(frame: DataFrame) -> str:
    rows, cols, cells = frame.dimensions()
    return (
        "The dataset consists of:\n"
        f"\t{rows} rows,\n"
        f"\t{cols} columns,\n"
        f"\tthat is a total of {cells} cells.\n"
    )


def format_rows(title: str, rows: Sequence[Row]) -> str:
    lines: List[str] = [f"{title}: "]
    for row in rows:
        lines.append(_format_row(row))
    return "\n".join(lines) + "\n"


def format_random_samples(samples: Sequence[Tuple[int, Row]]) -> str:
    lines: List[str] = ["Random Samples: "]
    for index, row in samples:
        lines.append(f"\t{index})\t{_format_row(row)}")
    return "\n".join(lines) + "\n"


def format_statistics(frame: DataFrame) -> str:
    """
    Min/max per feature. Empty string when the frame was loaded
    without detailed statistics.
    """
    if not frame.has_statistics:
        return ""

    lines: List[str] = ["Feature ranges: "]
    for col, name in enumerate(frame.feature_names):
        lines.append(
            f"\t{name or f'<column {col}>'}:"
            f"\tmin={_format_value(frame.min_value(col))}"
            f"\tmax={_format_value(frame.max_value(col))}"
        )
    return "\n".join(lines) + "\n"


def format_issues(frame: DataFrame, limit: int = 10) -> str:
    if not frame.issues:
        return ""

    lines: List[str] = [f"Load issues ({len(frame.issues)}): "]
    for issue in frame.issues[:limit]:
        where = f"line {issue.line_number}"
        if issue.column is not None:
            where += f", column {issue.column}"
        lines.append(f"\t{issue.kind} at {where}: {issue.detail}")
    if len(frame.issues) > limit:
        lines.append(f"\t... {len(frame.issues) - limit} more")
    return "\n".join(lines) + "\n"


def build_report(frame: DataFrame, report_config: Optional[ReportConfig] = None) -> str:
    """
    Full console summary: features, size, ranges, head, tail, random samples.
    """
    report_config = report_config or ReportConfig()
    rng = random.Random(report_config.seed)

    sections = [
        format_feature_names(frame),
        format_frame_size(frame),
        format_statistics(frame),
        format_issues(frame),
        format_rows("Head", frame.head(report_config.head_rows)),
        format_rows("Tail", frame.tail(report_config.tail_rows)),
        format_random_samples(frame.random_sample(report_config.sample_rows, rng=rng)),
    ]
    return "\n".join(s for s in sections if s)
