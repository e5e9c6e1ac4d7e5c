"""
Tests for the two-pass CSV loader.
"""
import builtins
import io

import pytest

from csvframe.adapters.csv_loader import CSVLoader, load_csv
from csvframe.canonical.frame import COLUMN_COUNT_MISMATCH, MALFORMED_NUMERIC_FIELD
from csvframe.config.load_config import LoadConfig
from csvframe.utils.exceptions import (
    CapacityExceededError,
    ColumnCountMismatchError,
    ConfigurationError,
    EmptySourceError,
    MalformedNumericFieldError,
    SourceUnavailableError,
)


class TestBasicLoad:
    """Tests for well-formed input."""

    def test_minimal_file(self, write_csv):
        frame = load_csv(write_csv("a,b,c\n1,2,3\n"))
        assert frame.feature_names == ("a", "b", "c")
        assert frame.dimensions() == (1, 3, 3)
        assert frame.cell(0, 1) == 2.0

    def test_weather_dataset(self, weather_csv):
        frame = load_csv(weather_csv)
        assert frame.feature_names == (
            "Temperature", "Humidity", "WindSpeed", "CloudCover", "Pressure"
        )
        assert frame.dimensions() == (6, 5, 30)
        assert frame.cell(5, 4) == pytest.approx(1049.74)
        assert frame.issues == ()
        assert frame.source == weather_csv

    def test_invariants(self, weather_csv):
        frame = load_csv(weather_csv)
        assert frame.row_count * frame.col_count == frame.cell_count
        assert len(frame.feature_names) == frame.col_count

    def test_header_labels_trimmed(self, write_csv):
        frame = load_csv(write_csv(' Age ,"Weight!",height_cm\n30,70.5,180\n'))
        assert frame.feature_names == ("Age", "Weight", "heightcm")

    def test_negative_and_decimal_values_kept(self, write_csv):
        frame = load_csv(write_csv("a,b\n-1.5,0.25\n"))
        assert frame.row(0) == (-1.5, 0.25)

    def test_crlf_line_endings(self, write_csv):
        frame = load_csv(write_csv("a,b\r\n1,2\r\n3,4\r\n"))
        assert frame.feature_names == ("a", "b")
        assert frame.head() == [(1.0, 2.0), (3.0, 4.0)]

    def test_blank_lines_skipped(self, write_csv):
        frame = load_csv(write_csv("\na,b\n1,2\n\n   \n3,4\n\n"))
        assert frame.dimensions() == (2, 2, 4)

    def test_header_only(self, write_csv):
        frame = load_csv(write_csv("a,b\n"))
        assert frame.feature_names == ("a", "b")
        assert frame.dimensions() == (0, 2, 0)

    def test_utf8_bom_is_ignored(self, write_csv):
        frame = load_csv(write_csv("\ufeffa,b\n1,2\n"))
        assert frame.feature_names == ("a", "b")

    def test_trailing_delimiter_dropped(self, write_csv):
        frame = load_csv(write_csv("a,b,\n1,2,\n"))
        assert frame.feature_names == ("a", "b")
        assert frame.row(0) == (1.0, 2.0)
        assert frame.issues == ()


class TestDelimiters:
    """Tests for configurable delimiters."""

    def test_semicolon(self, write_csv):
        frame = load_csv(write_csv("a;b\n1,5;2\n"), delimiter=";")
        # "1,5" is not a float literal
        assert frame.row(0) == (0.0, 2.0)

    def test_tab(self, write_csv):
        frame = load_csv(write_csv("a\tb\n1\t2\n"), delimiter="\t")
        assert frame.row(0) == (1.0, 2.0)

    def test_multi_character(self, write_csv):
        frame = load_csv(write_csv("a||b\n1||2\n"), delimiter="||")
        assert frame.feature_names == ("a", "b")
        assert frame.row(0) == (1.0, 2.0)
        assert frame.delimiter == "||"

    def test_empty_delimiter_rejected(self, write_csv):
        with pytest.raises(ConfigurationError):
            load_csv(write_csv("a,b\n1,2\n"), delimiter="")


class TestSourceErrors:
    """Tests for I/O failures and empty sources."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailableError) as exc_info:
            load_csv(str(tmp_path / "missing.csv"))
        assert exc_info.value.path.endswith("missing.csv")

    def test_directory_is_unavailable(self, tmp_path):
        with pytest.raises(SourceUnavailableError):
            load_csv(str(tmp_path))

    def test_empty_file(self, write_csv):
        with pytest.raises(EmptySourceError):
            load_csv(write_csv(""))

    def test_blank_only_file(self, write_csv):
        with pytest.raises(EmptySourceError):
            load_csv(write_csv("\n\n  \n"))

    def test_missing_path(self):
        with pytest.raises(ConfigurationError):
            CSVLoader(LoadConfig()).load()


class TestCapacity:
    """Tests for the feature and row ceilings."""

    def test_too_many_features(self, write_csv):
        header = ",".join(f"f{i}" for i in range(21))
        with pytest.raises(CapacityExceededError) as exc_info:
            load_csv(write_csv(header + "\n" + ",".join(["1"] * 21) + "\n"))
        assert exc_info.value.limit == 20
        assert exc_info.value.observed == 21

    def test_exactly_max_features(self, write_csv):
        header = ",".join(f"f{i}" for i in range(20))
        frame = load_csv(write_csv(header + "\n" + ",".join(["1"] * 20) + "\n"))
        assert frame.col_count == 20

    def test_custom_feature_limit(self, write_csv):
        with pytest.raises(CapacityExceededError):
            load_csv(write_csv("a,b,c\n1,2,3\n"), max_features=2)

    def test_too_many_rows(self, write_csv):
        path = write_csv("a\n" + "1\n" * 4)
        with pytest.raises(CapacityExceededError) as exc_info:
            load_csv(path, max_rows=3)
        assert exc_info.value.limit == 3

    def test_exactly_max_rows(self, write_csv):
        frame = load_csv(write_csv("a\n" + "1\n" * 3), max_rows=3)
        assert frame.row_count == 3

    def test_default_row_limit(self, write_csv):
        path = write_csv("a,b\n" + "1,2\n" * 25001)
        with pytest.raises(CapacityExceededError):
            load_csv(path)

    def test_handle_closed_on_abort(self, write_csv, monkeypatch):
        opened = []
        real_open = builtins.open

        def tracking_open(*args, **kwargs):
            handle = real_open(*args, **kwargs)
            opened.append(handle)
            return handle

        monkeypatch.setattr(builtins, "open", tracking_open)
        with pytest.raises(CapacityExceededError):
            load_csv(write_csv("a\n1\n2\n"), max_rows=1)

        assert opened
        assert all(h.closed for h in opened)


class TestMalformedNumbers:
    """Tests for the malformed numeric field policy."""

    def test_defaults_to_zero(self, write_csv):
        frame = load_csv(write_csv("a,b\n1,N/A\n3,4\n"))
        assert frame.cell(0, 1) == 0.0
        assert frame.cell(1, 1) == 4.0
        assert len(frame.issues) == 1
        issue = frame.issues[0]
        assert issue.kind == MALFORMED_NUMERIC_FIELD
        assert issue.line_number == 2
        assert issue.row == 0
        assert issue.column == 1

    def test_empty_cell(self, write_csv):
        frame = load_csv(write_csv("a,b,c\n1,,3\n"))
        assert frame.row(0) == (1.0, 0.0, 3.0)
        assert frame.issues[0].kind == MALFORMED_NUMERIC_FIELD

    @pytest.mark.parametrize("token", ["nan", "inf", "-inf"])
    def test_non_finite_values_are_malformed(self, write_csv, token):
        frame = load_csv(write_csv(f"a\n{token}\n1\n5\n"), detailed_statistics=True)
        assert frame.cell(0, 0) == 0.0
        assert [i.kind for i in frame.issues] == [MALFORMED_NUMERIC_FIELD]
        assert frame.min_value(0) == 0.0
        assert frame.max_value(0) == 5.0

    def test_strict_policy_raises(self, write_csv):
        with pytest.raises(MalformedNumericFieldError) as exc_info:
            load_csv(write_csv("a,b\n1,2\n3,N/A\n"), on_malformed_number="error")
        assert exc_info.value.line_number == 3
        assert exc_info.value.column == 1
        assert exc_info.value.token == "N/A"


class TestColumnMismatch:
    """Tests for the column count mismatch policy."""

    def test_short_row_padded(self, write_csv):
        frame = load_csv(write_csv("a,b,c\n1\n"))
        assert frame.row(0) == (1.0, 0.0, 0.0)
        assert frame.issues[0].kind == COLUMN_COUNT_MISMATCH
        assert frame.issues[0].column is None

    def test_long_row_truncated(self, write_csv):
        frame = load_csv(write_csv("a,b\n1,2,3,4\n"))
        assert frame.row(0) == (1.0, 2.0)
        assert [i.kind for i in frame.issues] == [COLUMN_COUNT_MISMATCH]

    def test_excess_tokens_not_parsed(self, write_csv):
        frame = load_csv(write_csv("a\n1,N/A\n"))
        assert frame.row(0) == (1.0,)
        assert [i.kind for i in frame.issues] == [COLUMN_COUNT_MISMATCH]

    def test_strict_policy_raises(self, write_csv):
        with pytest.raises(ColumnCountMismatchError) as exc_info:
            load_csv(write_csv("a,b\n1,2\n3\n"), on_column_mismatch="error")
        assert exc_info.value.line_number == 3
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 1


class TestDetailedStatistics:
    """Tests for the optional min/max post-pass."""

    def test_min_max(self, weather_csv):
        frame = load_csv(weather_csv, detailed_statistics=True)
        assert frame.min_value(0) == pytest.approx(20.59)
        assert frame.max_value(0) == pytest.approx(27.87)
        assert frame.min_value(4) == pytest.approx(980.82)
        assert frame.max_value(4) == pytest.approx(1049.74)

    def test_off_by_default(self, weather_csv):
        frame = load_csv(weather_csv)
        assert frame.min_values is None
        assert frame.max_values is None

    def test_no_rows(self, write_csv):
        frame = load_csv(write_csv("a,b\n"), detailed_statistics=True)
        assert frame.min_values == (None, None)
        assert frame.max_value(1) is None


class TestStreamsAndDeterminism:
    """Tests for caller-owned handles and repeat loads."""

    def test_load_stream(self):
        source = io.StringIO("a,b\n1,2\n")
        frame = CSVLoader(LoadConfig()).load_stream(source)
        assert frame.dimensions() == (1, 2, 2)
        assert frame.source is None
        assert not source.closed

    def test_reload_is_identical(self, weather_csv):
        first = load_csv(weather_csv)
        second = load_csv(weather_csv)
        assert first == second
        assert first is not second

    def test_unknown_option_rejected(self, weather_csv):
        with pytest.raises(ConfigurationError):
            load_csv(weather_csv, colour="red")
