from __future__ import annotations


def split_pipe(s: str) -> list[str]:
    return [x.strip() for x in str(s).split("|") if x.strip()]


def parse_optional_int(s: str) -> int | None:
    s = str(s).strip()
    if not s:
        return None
    return int(s)


def parse_absent_arg(s: str) -> tuple[str, str]:
    """
    Format:
      T01            -> ("T01", "")
      T01:Sick leave -> ("T01", "Sick leave")
    """
    teacher_id, _, reason = str(s).partition(":")
    teacher_id = teacher_id.strip()
    if not teacher_id:
        raise ValueError(f"Invalid absence {s!r} (blank teacher id)")
    return teacher_id, reason.strip()
