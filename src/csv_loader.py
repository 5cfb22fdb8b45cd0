from __future__ import annotations

from pathlib import Path

import pandas as pd

from csv_parse_helpers import parse_optional_int, split_pipe
from csv_validator import read_csv_or_fail, validate_teachers, validate_timetable
from models import ScheduleEntry, Teacher


def load_validated_frames(assets_dir: Path) -> tuple[pd.DataFrame, pd.DataFrame]:
    teachers = read_csv_or_fail(assets_dir / "teachers.csv")
    timetable = read_csv_or_fail(assets_dir / "timetable.csv")

    validate_teachers(teachers)
    validate_timetable(timetable, teachers)

    return teachers, timetable


def teachers_from_df(df: pd.DataFrame) -> list[Teacher]:
    teachers: list[Teacher] = []

    for _, row in df.iterrows():
        teachers.append(
            Teacher(
                teacher_id=row["id"].strip(),
                name=row["name"].strip(),
                subjects=frozenset(split_pipe(row["subjects"])),
                grades=frozenset(split_pipe(row["grades"])),
                workload=parse_optional_int(row.get("workload", "")),
            )
        )

    return teachers


def timetable_from_df(df: pd.DataFrame) -> list[ScheduleEntry]:
    entries: list[ScheduleEntry] = []

    for _, row in df.iterrows():
        entries.append(
            ScheduleEntry(
                day=row["day"].strip(),
                time=row["time"].strip(),
                class_name=row["class"].strip(),
                subject=row["subject"].strip(),
                teacher_id=row["teacher_id"].strip(),
            )
        )

    return entries
