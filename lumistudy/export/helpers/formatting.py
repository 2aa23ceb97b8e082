"""
Flat, human-auditable serialisations of a participant run.

  results_to_csv       : one row per task result, union of fields seen
  results_to_json      : participant metadata, calibration summary, results
  calibration_to_csv   : one row per calibration trial plus an equation summary

No Django ORM calls; inputs are the in-memory session records.
"""
import csv
import io
import json
from decimal import Decimal

from lumistudy.calibration.helpers.trials import is_uncalibrated


def _cell(value):
    """Plain decimal text for numbers, lower-case booleans, empty for missing."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = repr(value)
        if "e" in text:
            text = format(Decimal(text), "f")
        return text
    return value


def _result_rows(results) -> list[dict]:
    return [r.as_dict() if hasattr(r, "as_dict") else dict(r) for r in results]


def result_columns(results) -> list[str]:
    """Union of the fields present on *results*, in first-seen order."""
    columns = []
    for row in _result_rows(results):
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def results_to_csv(results) -> str:
    """Empty string for no results, else a header row plus one row per result."""
    rows = _result_rows(results)
    if not rows:
        return ""
    columns = result_columns(rows)
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(col)) for col in columns])
    return output.getvalue()


def parse_results_csv(text: str) -> list[dict]:
    """Read a ``results_to_csv`` document back into string-valued rows."""
    if not text:
        return []
    return list(csv.DictReader(io.StringIO(text)))


def calibration_summary(calibration) -> dict | None:
    if calibration is None:
        return None
    return {
        "fitts_equation": calibration.fitts_equation.as_dict() if calibration.fitts_equation else None,
        "hicks_equation": calibration.hicks_equation.as_dict() if calibration.hicks_equation else None,
        "fitts_trials_count": len(calibration.fitts_trials),
        "hicks_trials_count": len(calibration.hicks_trials),
        "fitts_calibrated": not is_uncalibrated(calibration.fitts_equation),
        "hicks_calibrated": not is_uncalibrated(calibration.hicks_equation),
    }


def results_to_json(results, participant_data, calibration=None) -> str:
    return json.dumps(
        {
            "participant": participant_data.as_dict(),
            "calibration": calibration_summary(calibration),
            "results": _result_rows(results),
        },
        indent=2,
        ensure_ascii=False,
    )


_FITTS_COLUMNS = [
    "trial_type",
    "trial_index",
    "target_width",
    "target_distance",
    "index_of_difficulty",
    "movement_time_ms",
    "success",
    "timestamp",
]

_HICKS_COLUMNS = [
    "trial_type",
    "trial_index",
    "num_choices",
    "target_key",
    "reaction_time_ms",
    "correct",
    "timestamp",
]


def _equation_line(equation) -> str:
    if equation is None:
        return "# Not computed"
    return f"# a={equation.a:.2f}, b={equation.b:.2f}, R²={equation.r2:.3f}"


def calibration_to_csv(calibration) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    output.write("# Fitts' Law Trials\n")
    writer.writerow(_FITTS_COLUMNS)
    for t in calibration.fitts_trials:
        writer.writerow(
            [_cell(v) for v in (
                "fitts",
                t.trial_index,
                t.target_width,
                t.target_distance,
                f"{t.index_of_difficulty:.3f}",
                t.movement_time_ms,
                t.success,
                t.timestamp,
            )]
        )

    output.write("\n# Hick's Law Trials\n")
    writer.writerow(_HICKS_COLUMNS)
    for t in calibration.hicks_trials:
        writer.writerow(
            [_cell(v) for v in ("hicks", t.trial_index, t.num_choices, t.target_key, t.reaction_time_ms, t.correct, t.timestamp)]
        )

    output.write("\n# Fitts' Law Equation: MT = a + b * log2(D/W + 1)\n")
    output.write(_equation_line(calibration.fitts_equation) + "\n")
    output.write("\n# Hick's Law Equation: RT = a + b * log2(n)\n")
    output.write(_equation_line(calibration.hicks_equation) + "\n")
    return output.getvalue()
