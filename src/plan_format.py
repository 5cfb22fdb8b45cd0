from __future__ import annotations

from models import UnresolvedSlot
from plan_assembler import SubstitutionPlan
from reason_library import match_reason, match_reasons


def format_unresolved_line(u: UnresolvedSlot, max_reasons: int = 3) -> str:
    s = u.slot
    line = f"• {s.time} {s.class_name} {s.subject} (for {s.absent_teacher_name}) — {match_reason(u.reason)}"
    if u.rejected and max_reasons:
        # a short sample of why people were turned down
        sample = []
        for tid in sorted(u.rejected)[:max_reasons]:
            sample.append(f"{tid}: {'; '.join(match_reasons(u.rejected[tid]))}")
        line += "\n    " + "\n    ".join(sample)
    return line


def format_plan_message(plan: SubstitutionPlan, show_rejections: bool = False) -> str:
    lines: list[str] = []
    lines.append(f"📌 *Substitution plan — {plan.day}*")
    lines.append("")

    lines.append("✅ *Covered*")
    if not plan.substitutions:
        lines.append("• (none)")
    else:
        for s in plan.substitutions:
            lines.append(
                f"• {s.time} {s.class_name} {s.subject}: "
                f"{s.substitute_teacher_name} ({s.substitute_teacher_id}) for {s.absent_teacher_name}"
            )
            lines.append(f"    {s.justification}")
    lines.append("")

    lines.append("🟡 *Unresolved*")
    if not plan.unresolved:
        lines.append("• (none)")
    else:
        for u in plan.unresolved:
            lines.append(format_unresolved_line(u, max_reasons=3 if show_rejections else 0))

    return "\n".join(lines)
