from __future__ import annotations

from pathlib import Path

import pandas as pd

from errors import ValidationError
from slot_time import parse_slot_time

# data definitions
TEACHERS_COLUMNS = ["id", "name", "subjects", "grades"]
TEACHERS_OPTIONAL_COLUMNS = ["workload"]

TIMETABLE_COLUMNS = ["day", "time", "class", "subject", "teacher_id"]


def fail(msg: str) -> None:
    raise ValidationError(msg)


def read_csv_or_fail(path: Path) -> pd.DataFrame:
    if not path.exists():
        fail(f"File not found: {path}")
    try:
        return pd.read_csv(path, dtype=str).fillna("")
    except Exception as e:
        fail(f"Could not read CSV '{path}': {e}")


def require_columns(
    df: pd.DataFrame, required: list[str], name: str, optional: list[str] | None = None
) -> None:
    allowed = set(required) | set(optional or [])
    missing = [c for c in required if c not in df.columns]
    extra = [c for c in df.columns if c not in allowed]
    if missing:
        fail(f"{name}: missing required columns: {missing}")
    if extra:
        # fails if there's unexpected columns
        fail(f"{name}: unexpected extra columns: {extra}")


def require_nonempty(df: pd.DataFrame, col: str, name: str) -> None:
    blank = df[col].str.strip() == ""
    if blank.any():
        bad = df.index[blank].tolist()[:10]
        fail(f"{name}: '{col}' contains blank values: {bad}")


# duplicate teacher ids are left to the timetable index, which treats them as fatal
def validate_teachers(df: pd.DataFrame) -> None:
    require_columns(df, TEACHERS_COLUMNS, "teachers", TEACHERS_OPTIONAL_COLUMNS)
    require_nonempty(df, "id", "teachers")

    if "workload" in df.columns:

        def is_count(x: str) -> bool:
            x = x.strip()
            return x == "" or (x.isdecimal() and int(x) >= 0)

        bad = df.loc[~df["workload"].apply(is_count), "workload"].unique().tolist()
        if bad:
            fail(f"teachers: workload must be a non-negative int. Bad values: {bad}")


def validate_timetable(df: pd.DataFrame, teachers_df: pd.DataFrame) -> None:
    require_columns(df, TIMETABLE_COLUMNS, "timetable")
    for col in TIMETABLE_COLUMNS:
        require_nonempty(df, col, "timetable")

    def is_slot_time(x: str) -> bool:
        try:
            parse_slot_time(x)
            return True
        except ValueError:
            return False

    bad_time = df.loc[~df["time"].apply(is_slot_time), "time"].unique().tolist()
    if bad_time:
        fail(f"timetable: unreadable time values: {bad_time}")

    # teacher_id must exist
    teacher_ids = set(teachers_df["id"].str.strip().tolist())
    bad_ref = (
        df.loc[~df["teacher_id"].str.strip().isin(teacher_ids), "teacher_id"]
        .unique()
        .tolist()
    )
    if bad_ref:
        fail(f"timetable: teacher_id references unknown teacher id(s): {bad_ref}")
