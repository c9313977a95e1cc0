"""
Tests for export schema compliance and round-tripping.
"""

import csv
import io
import json
import tempfile
from dataclasses import fields, replace
from pathlib import Path

import pandas as pd
import pytest

from induction_lab.config import LabConfig, MagnetConfig, MotionConfig, SessionConfig
from induction_lab.exceptions import EmptyExportError, UnsupportedExportFormatError
from induction_lab.exporters import (
    CSV_HEADERS_A,
    CSV_HEADERS_B,
    CsvExportStrategy,
    ExcelExportStrategy,
    ExportManager,
    JsonExportStrategy,
    PngChartExportStrategy,
    create_export_strategy,
    export_results,
    export_to_csv,
    export_to_csv_b,
    export_to_json,
    export_to_json_b,
    read_csv_measurements,
    read_csv_measurements_b,
)
from induction_lab.measurement import Measurement, MeasurementB
from induction_lab.runner import run_session


def faraday_log():
    config = LabConfig(
        magnet=MagnetConfig(x_m=-0.5, dipole_moment_Am2=100.0),
        motion=MotionConfig(mode="constant", speed_m_per_s=1.0),
        session=SessionConfig(frame_dt_s=0.02, duration_s=0.2),
    )
    return run_session(config).measurements


def solenoid_log():
    config = LabConfig(mode="currentToField", session=SessionConfig(frame_dt_s=0.02, duration_s=0.1))
    return run_session(config).measurements


class TestCsvSchema:
    """Tests for the CSV column layout."""

    def test_mode_a_headers(self):
        assert CSV_HEADERS_A[:3] == ["t (s)", "Δt (s)", "x (m)"]
        assert CSV_HEADERS_A[-3:] == ["direction", "flux_change", "lenz_explanation"]
        assert len(CSV_HEADERS_A) == len(fields(Measurement))

    def test_mode_b_headers_skip_delta_t(self):
        assert "Δt (s)" not in CSV_HEADERS_B
        assert len(CSV_HEADERS_B) == len(fields(MeasurementB)) - 1
        assert CSV_HEADERS_B[-1] == "polarity"

    def test_empty_log(self):
        assert export_to_csv([]) == ""
        assert export_to_csv_b([]) == ""
        assert export_to_json([]) == "[]"
        assert export_to_json_b([]) == "[]"

    def test_csv_layout(self):
        records = faraday_log()
        text = export_to_csv(records)
        lines = text.split("\n")

        assert lines[0] == ",".join(CSV_HEADERS_A)
        assert len(lines) == len(records) + 1
        assert not text.endswith("\n")

    def test_six_decimals_and_integer_turns(self):
        records = faraday_log()
        row = next(csv.reader(io.StringIO(export_to_csv(records).split("\n")[1])))

        assert row[0] == f"{records[0].timestamp:.6f}"
        assert row[7] == "10"
        assert row[-1] == records[0].lenz_explanation

    def test_explanation_always_quoted(self):
        line = export_to_csv(faraday_log()[:1]).split("\n")[1]
        assert line.endswith('"')
        assert ',"' in line

    def test_embedded_quotes_and_commas(self):
        record = replace(faraday_log()[0], lenz_explanation='Flux "rises", so current opposes it')
        text = export_to_csv([record])

        assert '"Flux ""rises"", so current opposes it"' in text
        assert read_csv_measurements(text)[0].lenz_explanation == record.lenz_explanation

    def test_polarity_sign(self):
        record = solenoid_log()[0]
        reversed_record = replace(record, polarity=-1, magnetic_field=-record.magnetic_field)
        lines = export_to_csv_b([record, reversed_record]).split("\n")

        assert lines[1].endswith(",+1")
        assert lines[2].endswith(",-1")


class TestRoundTrip:
    """CSV and JSON carry every field."""

    def test_csv_round_trip(self):
        records = faraday_log()
        parsed = read_csv_measurements(export_to_csv(records))

        assert len(parsed) == len(records)
        for original, restored in zip(records, parsed):
            for f in fields(Measurement):
                a = getattr(original, f.name)
                b = getattr(restored, f.name)
                if isinstance(a, float):
                    assert b == pytest.approx(a, abs=5e-7), f.name
                else:
                    assert b == a, f.name

    def test_csv_round_trip_b(self):
        records = solenoid_log()
        parsed = read_csv_measurements_b(export_to_csv_b(records))

        assert [m.turns for m in parsed] == [m.turns for m in records]
        assert parsed[0].polarity == 1
        assert parsed[0].delta_t == 0.0
        assert parsed[0].current == pytest.approx(1.0)

    def test_json_full_precision(self):
        records = faraday_log()
        data = json.loads(export_to_json(records))

        assert len(data) == len(records)
        assert [Measurement.from_dict(d) for d in data] == list(records)

    def test_json_keys_are_snake_case(self):
        data = json.loads(export_to_json(faraday_log()))
        keys = set(data[0])

        assert {"delta_t", "flux_rate", "lenz_explanation", "magnetic_field_mag"} <= keys
        assert "deltaT" not in keys
        assert "lenzExplanation" not in keys
        assert all(key == key.lower() for key in keys)

    def test_json_b(self):
        records = solenoid_log()
        data = json.loads(export_to_json_b(records))
        assert data[0]["magnetic_field"] == records[0].magnetic_field
        assert data[0]["delta_t"] == 0.0

    def test_wrong_header_rejected(self):
        with pytest.raises(ValueError, match="header"):
            read_csv_measurements("a,b,c\n1,2,3")

    def test_read_empty(self):
        assert read_csv_measurements("") == []


class TestStrategies:
    """Tests for file-producing export strategies."""

    def test_csv_and_json_strategies(self):
        records = faraday_log()
        (csv_name, csv_bytes), = CsvExportStrategy("run").generate_export(records)
        (json_name, json_bytes), = JsonExportStrategy("run").generate_export(records)

        assert csv_name == "run.csv"
        assert csv_bytes.decode("utf-8") == export_to_csv(records)
        assert json_name == "run.json"

    def test_strategy_picks_mode_b_layout(self):
        (_, content), = CsvExportStrategy().generate_export(solenoid_log())
        assert content.decode("utf-8").split("\n")[0] == ",".join(CSV_HEADERS_B)

    def test_excel_workbook(self):
        records = faraday_log()
        (name, content), = ExcelExportStrategy("run").generate_export(records)

        assert name == "run.xlsx"
        sheets = pd.read_excel(io.BytesIO(content), sheet_name=None)
        assert list(sheets["measurements"].columns) == CSV_HEADERS_A
        assert len(sheets["measurements"]) == len(records)
        assert "summary" in sheets

    def test_png_charts(self):
        (name, content), = PngChartExportStrategy("run").generate_export(faraday_log())
        assert name == "run_charts.png"
        assert content.startswith(b"\x89PNG")

    def test_png_mode_b(self):
        (_, content), = PngChartExportStrategy().generate_export(solenoid_log())
        assert content.startswith(b"\x89PNG")

    def test_png_empty_log(self):
        with pytest.raises(EmptyExportError):
            PngChartExportStrategy().generate_export([])

    def test_unknown_format(self):
        with pytest.raises(UnsupportedExportFormatError):
            create_export_strategy("pdf")


class TestExportManager:

    def test_writes_timestamped_folder(self):
        records = faraday_log()
        with tempfile.TemporaryDirectory() as tmpdir:
            paths = ExportManager().export(records, Path(tmpdir), [CsvExportStrategy(), JsonExportStrategy()])

            assert [p.name for p in paths] == ["measurements.csv", "measurements.json"]
            assert paths[0].parent.name.startswith("export_")
            assert all(p.exists() for p in paths)

    def test_errors_logged_and_raised(self, memory_log):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(EmptyExportError):
                ExportManager().export([], Path(tmpdir), [PngChartExportStrategy()])
        assert any("Error handling export request" in m for m in memory_log.messages())

    def test_base_path_is_file(self):
        with tempfile.NamedTemporaryFile() as tmp:
            with pytest.raises(ValueError):
                ExportManager().export([], Path(tmp.name), [CsvExportStrategy()])


class TestExportResults:

    def test_default_formats_and_metadata(self):
        config = LabConfig(session=SessionConfig(frame_dt_s=0.02, duration_s=0.1))
        result = run_session(config)

        with tempfile.TemporaryDirectory() as tmpdir:
            paths = export_results(result, Path(tmpdir), "test_run")

            assert set(paths) == {"csv", "json", "metadata"}
            with open(paths["csv"], encoding="utf-8") as f:
                assert f.readline().rstrip("\n") == ",".join(CSV_HEADERS_A)

            with open(paths["metadata"], encoding="utf-8") as f:
                metadata = json.load(f)
            assert metadata["config"]["coil"]["turns"] == 10
            assert metadata["summary"]["n_measurements"] == len(result.measurements)
            assert "timestamp" in metadata

    def test_extra_formats(self):
        config = LabConfig(mode="currentToField", session=SessionConfig(frame_dt_s=0.02, duration_s=0.1))
        result = run_session(config)

        with tempfile.TemporaryDirectory() as tmpdir:
            paths = export_results(result, Path(tmpdir), "sol", ["csv", "excel", "png"])
            assert Path(paths["excel"]).name == "sol.xlsx"
            assert Path(paths["png"]).name == "sol_charts.png"
