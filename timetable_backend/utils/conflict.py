# timetable_backend/utils/conflict.py
from dataclasses import dataclass
from typing import Any, Iterable, Optional

TEACHER_RULE = "teacher"
SECTION_RULE = "section"


@dataclass(frozen=True)
class ConflictResult:
    rule: str
    message: str
    conflicting_item: Any


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # [a_start, a_end) vs [b_start, b_end); touching ends do not overlap
    return a_start < b_end and b_start < a_end


def find_conflict(candidate, existing_items: Iterable) -> Optional[ConflictResult]:
    """
    candidate / existing_items: objects with teacher, day, section,
    start_minutes, end_minutes

    判斷是否衝堂：
    1. 同老師、同一天、時間重疊 -> teacher rule
    2. 同班級(section)、同一天、時間重疊 -> section rule

    Items are scanned in order and the teacher rule is tried before the
    section rule, so the first hit is what gets reported.
    """
    for item in existing_items:
        if item.day != candidate.day:
            continue

        hit = overlaps(
            candidate.start_minutes, candidate.end_minutes,
            item.start_minutes, item.end_minutes,
        )
        if not hit:
            continue

        if item.teacher == candidate.teacher:
            return ConflictResult(
                rule=TEACHER_RULE,
                message=(
                    f"Teacher {candidate.teacher} is already teaching in "
                    f"Section {item.section} at this time!"
                ),
                conflicting_item=item,
            )

        if item.section == candidate.section:
            return ConflictResult(
                rule=SECTION_RULE,
                message=(
                    "This time slot conflicts with an existing schedule item "
                    f"in Section {item.section}!"
                ),
                conflicting_item=item,
            )
    return None
