"""
Export recorded measurements.

Mode A CSV columns (exact schema):
    t (s), Δt (s), x (m), y (m), v_x (m/s), v_y (m/s), speed (m/s), N,
    R (m), θ (rad), R_coil (Ω), R_load (Ω), R_total (Ω), B_x (T), B_y (T),
    B (T), Φ (Wb), dΦ/dt (Wb/s), ε (V), I (A), direction, flux_change,
    lenz_explanation

Mode B CSV columns (Δt omitted, DC steady state):
    t (s), V (V), R_total (Ω), I (A), L (m), N, n (turns/m), R (m), B (T),
    polarity

Floats are written with CSV_PRECISION decimals, turn counts as integers,
the explanation always quoted. JSON is a direct dump at full precision.

JSON keys are the record field names in snake_case, not camelCase.
Consumers of camelCase lab JSON should map:
    deltaT -> delta_t, magnetX -> magnet_x, velocityX -> velocity_x,
    coilResistance -> coil_resistance, magneticFieldMag -> magnetic_field_mag,
    fluxRate -> flux_rate, fluxChange -> flux_change,
    lenzExplanation -> lenz_explanation, turnDensity -> turn_density
and likewise for every other camelCase key.
"""

import csv
import io
import json
import os
import subprocess
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from .constants import CSV_PRECISION
from .exceptions import EmptyExportError, UnsupportedExportFormatError
from .measurement import AnyMeasurement, Measurement, MeasurementB
from .runner import SessionResult
from .utils.logger import Logger


CSV_HEADERS_A = [
    "t (s)",
    "Δt (s)",
    "x (m)", "y (m)",
    "v_x (m/s)", "v_y (m/s)",
    "speed (m/s)",
    "N",
    "R (m)",
    "θ (rad)",
    "R_coil (Ω)", "R_load (Ω)", "R_total (Ω)",
    "B_x (T)", "B_y (T)", "B (T)",
    "Φ (Wb)",
    "dΦ/dt (Wb/s)",
    "ε (V)",
    "I (A)",
    "direction",
    "flux_change",
    "lenz_explanation",
]

CSV_HEADERS_B = [
    "t (s)",
    "V (V)",
    "R_total (Ω)",
    "I (A)",
    "L (m)",
    "N",
    "n (turns/m)",
    "R (m)",
    "B (T)",
    "polarity",
]

# Measurement field per mode A CSV column, in column order
_FIELDS_A = [
    "timestamp", "delta_t", "magnet_x", "magnet_y", "velocity_x", "velocity_y", "speed",
    "turns", "radius", "angle", "coil_resistance", "load_resistance", "total_resistance",
    "magnetic_field_x", "magnetic_field_y", "magnetic_field_mag", "flux", "flux_rate",
    "emf", "current", "direction", "flux_change", "lenz_explanation",
]

_FIELDS_B = [
    "timestamp", "voltage", "resistance", "current", "length", "turns",
    "turn_density", "radius", "magnetic_field", "polarity",
]

_INT_FIELDS = {"turns", "polarity"}
_TEXT_FIELDS = {"direction", "flux_change", "lenz_explanation"}


def _fmt(value: float) -> str:
    return f"{value:.{CSV_PRECISION}f}"


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _is_mode_b(records: Sequence[AnyMeasurement]) -> bool:
    return bool(records) and isinstance(records[0], MeasurementB)


# ----------------------------------------------------------------------
# Text exports
# ----------------------------------------------------------------------

def export_to_csv(measurements: Sequence[Measurement]) -> str:
    """
    Mode A log as CSV text. An empty log gives an empty string.
    """
    if not measurements:
        return ""

    lines = [",".join(CSV_HEADERS_A)]
    for m in measurements:
        row = [
            _fmt(m.timestamp), _fmt(m.delta_t),
            _fmt(m.magnet_x), _fmt(m.magnet_y),
            _fmt(m.velocity_x), _fmt(m.velocity_y), _fmt(m.speed),
            str(m.turns),
            _fmt(m.radius), _fmt(m.angle),
            _fmt(m.coil_resistance), _fmt(m.load_resistance), _fmt(m.total_resistance),
            _fmt(m.magnetic_field_x), _fmt(m.magnetic_field_y), _fmt(m.magnetic_field_mag),
            _fmt(m.flux), _fmt(m.flux_rate), _fmt(m.emf), _fmt(m.current),
            m.direction,
            m.flux_change,
            _quote(m.lenz_explanation),
        ]
        lines.append(",".join(row))
    return "\n".join(lines)


def export_to_csv_b(measurements: Sequence[MeasurementB]) -> str:
    """
    Mode B log as CSV text. Δt is left out; polarity is written as +1/-1.
    """
    if not measurements:
        return ""

    lines = [",".join(CSV_HEADERS_B)]
    for m in measurements:
        row = [
            _fmt(m.timestamp),
            _fmt(m.voltage), _fmt(m.resistance), _fmt(m.current),
            _fmt(m.length),
            str(m.turns),
            _fmt(m.turn_density), _fmt(m.radius), _fmt(m.magnetic_field),
            "+1" if m.polarity > 0 else "-1",
        ]
        lines.append(",".join(row))
    return "\n".join(lines)


def export_to_json(measurements: Sequence[Measurement]) -> str:
    """Mode A log as an indented JSON array of records."""
    return json.dumps([m.to_dict() for m in measurements], indent=2, ensure_ascii=False)


def export_to_json_b(measurements: Sequence[MeasurementB]) -> str:
    """Mode B log as an indented JSON array of records."""
    return json.dumps([m.to_dict() for m in measurements], indent=2, ensure_ascii=False)


def _read_rows(text: str, headers: List[str]) -> List[List[str]]:
    if not text:
        return []
    reader = csv.reader(io.StringIO(text))
    header = next(reader)
    if header != headers:
        raise ValueError(f"Unexpected CSV header: {header}")
    return [row for row in reader if row]


def _parse_row(row: List[str], names: List[str]) -> dict:
    values = {}
    for name, cell in zip(names, row):
        if name in _INT_FIELDS:
            values[name] = int(cell)
        elif name in _TEXT_FIELDS:
            values[name] = cell
        else:
            values[name] = float(cell)
    return values


def read_csv_measurements(text: str) -> List[Measurement]:
    """
    Parse mode A CSV text back into measurements.

    Values come back rounded to CSV_PRECISION decimals; the explanation
    comes back exactly.

    Raises:
        ValueError: If the header does not match CSV_HEADERS_A.
    """
    return [Measurement.from_dict(_parse_row(row, _FIELDS_A)) for row in _read_rows(text, CSV_HEADERS_A)]


def read_csv_measurements_b(text: str) -> List[MeasurementB]:
    """
    Parse mode B CSV text back into measurements (delta_t restored as 0).

    Raises:
        ValueError: If the header does not match CSV_HEADERS_B.
    """
    records = []
    for row in _read_rows(text, CSV_HEADERS_B):
        values = _parse_row(row, _FIELDS_B)
        values["delta_t"] = 0.0
        records.append(MeasurementB.from_dict(values))
    return records


# ----------------------------------------------------------------------
# Export strategies
# ----------------------------------------------------------------------

class ExportStrategy:
    """Turns a measurement log into files."""

    extension = ""

    def __init__(self, stem: str = "measurements"):
        self.stem = stem

    def generate_export(self, records: Sequence[AnyMeasurement]) -> list[tuple[str, bytes]]:
        """Return a list[(filename, bytes)] for this export."""
        raise NotImplementedError

    def _filename(self, suffix: str = "") -> str:
        return f"{self.stem}{suffix}.{self.extension}"


class CsvExportStrategy(ExportStrategy):
    extension = "csv"

    def generate_export(self, records):
        text = export_to_csv_b(records) if _is_mode_b(records) else export_to_csv(records)
        return [(self._filename(), text.encode("utf-8"))]


class JsonExportStrategy(ExportStrategy):
    extension = "json"

    def generate_export(self, records):
        text = export_to_json_b(records) if _is_mode_b(records) else export_to_json(records)
        return [(self._filename(), text.encode("utf-8"))]


class ExcelExportStrategy(ExportStrategy):
    """
    Workbook with a measurements sheet (CSV column names) and a summary
    sheet of per-column min/max/mean.
    """

    extension = "xlsx"

    def generate_export(self, records):
        Logger.log(f"Starting Excel export of {len(records)} measurements")

        if _is_mode_b(records):
            headers, names = CSV_HEADERS_B, _FIELDS_B
        else:
            headers, names = CSV_HEADERS_A, _FIELDS_A

        rows = [[getattr(m, name) for name in names] for m in records]
        measurements_df = pd.DataFrame(rows, columns=headers)

        numeric_df = measurements_df.select_dtypes(include="number")
        summary_df = pd.DataFrame({
            "column": numeric_df.columns,
            "min": numeric_df.min().values,
            "max": numeric_df.max().values,
            "mean": numeric_df.mean().values,
        })

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            measurements_df.to_excel(writer, sheet_name="measurements", index=False)
            summary_df.to_excel(writer, sheet_name="summary", index=False)

        Logger.log(f"Excel export generated with {len(measurements_df)} rows")
        return [(self._filename(), buffer.getvalue())]


class PngChartExportStrategy(ExportStrategy):
    """
    Time-series charts of a recorded log.

    Mode A: flux, dΦ/dt, EMF and current against time.
    Mode B: B and current against time.
    """

    extension = "png"

    def generate_export(self, records):
        if not records:
            raise EmptyExportError("Cannot chart an empty measurement log.")

        t = [m.timestamp for m in records]
        if _is_mode_b(records):
            panels = [
                ("B (T)", [m.magnetic_field for m in records]),
                ("I (A)", [m.current for m in records]),
            ]
        else:
            panels = [
                ("Φ (Wb)", [m.flux for m in records]),
                ("dΦ/dt (Wb/s)", [m.flux_rate for m in records]),
                ("ε (V)", [m.emf for m in records]),
                ("I (A)", [m.current for m in records]),
            ]

        fig, axes = plt.subplots(len(panels), 1, figsize=(8, 2.2 * len(panels)), sharex=True)
        try:
            for ax, (label, values) in zip(axes, panels):
                ax.plot(t, values, linewidth=1.2)
                ax.set_ylabel(label)
                ax.grid(True, alpha=0.3)
            axes[-1].set_xlabel("t (s)")
            fig.tight_layout()

            buffer = io.BytesIO()
            fig.savefig(buffer, format="png", dpi=100)
        finally:
            plt.close(fig)

        return [(self._filename("_charts"), buffer.getvalue())]


EXPORT_STRATEGIES = {
    "csv": CsvExportStrategy,
    "json": JsonExportStrategy,
    "excel": ExcelExportStrategy,
    "png": PngChartExportStrategy,
}


def create_export_strategy(fmt: str, stem: str = "measurements") -> ExportStrategy:
    """
    Factory function to create an export strategy.

    Raises:
        UnsupportedExportFormatError: If fmt has no strategy.
    """
    strategy_type = EXPORT_STRATEGIES.get(fmt)
    if strategy_type is None:
        raise UnsupportedExportFormatError(
            f"Export format '{fmt}' not supported; choose from {', '.join(EXPORT_STRATEGIES)}"
        )
    return strategy_type(stem)


class ExportManager:
    """Runs export strategies and writes their files to disk."""

    def export(
        self,
        records: Sequence[AnyMeasurement],
        folder: Path,
        strategies: Sequence[ExportStrategy]
    ) -> List[Path]:
        """
        Write every strategy's files into a new export_YYYYmmdd_HHMMSS
        folder under `folder`.

        Returns:
            Paths of the written files.
        """
        try:
            self._verify_folder(folder)
            root_folder = self._create_export_folder(folder)

            written = []
            for strategy in strategies:
                written.extend(self._save_files(strategy.generate_export(records), root_folder))
            return written

        except Exception as ex:
            Logger.log(f"Error handling export request: {ex}", Logger.LogPriority.ERROR)
            raise

    def _create_export_folder(self, base_folder: Path) -> Path:
        """Create timestamped root folder for this export."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        root_folder = Path(base_folder) / f"export_{timestamp}"
        root_folder.mkdir(parents=True, exist_ok=True)
        Logger.log(f"Created export folder: {root_folder}")
        return root_folder

    def _save_files(self, files, folder: Path) -> List[Path]:
        """Write each (filename, bytes) to disk."""
        paths = []
        for filename, content in files:
            file_path = Path(folder) / filename
            with open(file_path, "wb") as f:
                f.write(content)
            Logger.log(f"Saved file: {file_path}")
            paths.append(file_path)
        return paths

    def _verify_folder(self, folder_path: Path) -> None:
        """Ensure base folder exists and is a directory."""
        if not os.path.exists(folder_path):
            os.makedirs(folder_path)
            Logger.log(f"Created folder: {folder_path}")
        elif not os.path.isdir(folder_path):
            raise ValueError(f"{folder_path} exists but is not a directory.")


# ----------------------------------------------------------------------
# Session results
# ----------------------------------------------------------------------

def get_git_commit() -> Optional[str]:
    """Current git commit hash, or None outside a repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def export_metadata(result: SessionResult, path: Path) -> None:
    """
    Export metadata JSON with config and summary.

    Args:
        result: Session result.
        path: Output JSON path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    metadata = {
        "timestamp": datetime.now().isoformat(),
        "git_commit": get_git_commit(),
        "config": asdict(result.config),
        "summary": result.summary(),
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2, ensure_ascii=False)


def export_results(
    result: SessionResult,
    out_dir: Path,
    run_name: str,
    formats: Optional[Sequence[str]] = None
) -> dict:
    """
    Export a session to an output directory.

    Args:
        result: Session result.
        out_dir: Output directory.
        run_name: Base name for output files.
        formats: Export formats (default: the config's output formats).

    Returns:
        Dict mapping each format (and "metadata") to the written path.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    formats = list(formats) if formats is not None else list(result.config.output.formats)

    paths = {}
    for fmt in formats:
        strategy = create_export_strategy(fmt, run_name)
        for filename, content in strategy.generate_export(result.measurements):
            file_path = out_dir / filename
            with open(file_path, "wb") as f:
                f.write(content)
            Logger.log(f"Saved file: {file_path}")
            paths[fmt] = str(file_path)

    json_path = out_dir / f"{run_name}_metadata.json"
    export_metadata(result, json_path)
    paths["metadata"] = str(json_path)

    return paths
