from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from csv_loader import load_validated_frames, teachers_from_df, timetable_from_df
from csv_parse_helpers import parse_absent_arg
from errors import InternalInvariantViolation, OracleFailure, ValidationError
from log_setup import setup_logging
from models import AbsenceRecord, SubstitutionRequest
from oracle import SuggestionFileOracle
from plan_format import format_plan_message
from planner import build_substitution_plan
from settings import load_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Plan substitute teachers for one school day.")
    p.add_argument("--assets", type=Path, default=None, help="dir with teachers.csv + timetable.csv")
    p.add_argument("--day", required=True, help="day to plan, as written in timetable.csv")
    p.add_argument(
        "--absent",
        action="append",
        default=[],
        metavar="ID[:REASON]",
        help="absent teacher id (repeatable)",
    )
    p.add_argument("--suggestions", type=Path, default=None, help="JSON file of suggested covers")
    p.add_argument("--json", action="store_true", help="print the JSON response body instead")
    p.add_argument("--why", action="store_true", help="show rejection reasons for unresolved slots")
    return p


def build_request(assets: Path, day: str, absent_args: list[str]) -> SubstitutionRequest:
    teachers_df, timetable_df = load_validated_frames(assets)
    teachers = teachers_from_df(teachers_df)
    timetable = timetable_from_df(timetable_df)

    by_id = {t.teacher_id: t for t in teachers}
    absences: list[AbsenceRecord] = []
    for arg in absent_args:
        try:
            tid, reason = parse_absent_arg(arg)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if tid not in by_id:
            raise ValidationError(f"unknown_absent_teacher: {tid}")
        absences.append(AbsenceRecord(teacher=by_id[tid], day=day, reason=reason))

    return SubstitutionRequest(absences=absences, teachers=teachers, timetable=timetable, day=day)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.log_level)

    try:
        request = build_request(args.assets or settings.assets_dir, args.day.strip(), args.absent)
        oracle = None
        if args.suggestions:
            try:
                oracle = SuggestionFileOracle(args.suggestions)
            except OracleFailure as e:
                logger.warning("ignoring suggestions: %s", e)
        plan = build_substitution_plan(request, oracle=oracle, settings=settings)
    except ValidationError as e:
        print(f"\nVALIDATION ERROR: {e}\n", file=sys.stderr)
        return 1
    except InternalInvariantViolation as e:
        print(f"\nPLAN ABORTED: {e}\n", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(plan.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_plan_message(plan, show_rejections=args.why))
    return 0


if __name__ == "__main__":
    sys.exit(main())
