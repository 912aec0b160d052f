from __future__ import annotations

from lowborn.application.services.seed_policy import SeededRng, decision_key
from lowborn.domain.models.schedule import (
    DAY_LABELS,
    DailyDisruption,
    DayAssignment,
    DisruptionType,
    DutyType,
    ShiftType,
    WEEK_LENGTH,
    no_disruption,
)

NON_PATROL_DUTY_WEIGHTS = (
    (DutyType.CAMP_WORK, 4),
    (DutyType.CAMP_WAIT, 3),
    (DutyType.NIGHT_WATCH, 1),
    (DutyType.REST, 2),
)

SHIFT_WEIGHTS = {
    DutyType.PATROL: ((ShiftType.DAWN, 6), (ShiftType.DUSK, 4)),
    DutyType.REST: ((ShiftType.DAY, 4), (ShiftType.DUSK, 2)),
}
DEFAULT_SHIFT_WEIGHTS = ((ShiftType.DAY, 5), (ShiftType.DUSK, 3), (ShiftType.DAWN, 2))


def shift_for_duty(duty: DutyType, key: str) -> ShiftType:
    rng = SeededRng(key)
    if duty is DutyType.NIGHT_WATCH:
        return ShiftType.NIGHT
    return rng.weighted_pick(SHIFT_WEIGHTS.get(duty, DEFAULT_SHIFT_WEIGHTS))


def generate_week_schedule(seed: str, week: int = 1) -> tuple[DayAssignment, ...]:
    rng = SeededRng(decision_key(seed, "schedule", week=week))
    patrol_target = rng.next_int(1, 3)
    day_indexes = list(range(WEEK_LENGTH))
    patrol_days: set[int] = set()
    while len(patrol_days) < patrol_target:
        patrol_days.add(rng.pick(day_indexes))

    schedule = []
    for index, label in enumerate(DAY_LABELS):
        if index in patrol_days:
            duty = DutyType.PATROL
        else:
            duty = rng.weighted_pick(NON_PATROL_DUTY_WEIGHTS)
        shift = shift_for_duty(duty, decision_key(seed, "shift", week=week, day=index + 1))
        schedule.append(
            DayAssignment(
                day=index + 1,
                label=label,
                scheduled_duty=duty,
                scheduled_shift=shift,
                assigned_duty=duty,
                assigned_shift=shift,
                disruption=no_disruption(),
            )
        )
    return tuple(schedule)


def summarize_disruption(disruption: DailyDisruption) -> str:
    if disruption.type is DisruptionType.NONE:
        return "No disruption reported."
    return f"Disruption: {disruption.reason}"


def day_summary(assignment: DayAssignment) -> str:
    lines = [f"{assignment.label}: {assignment.assigned_duty.value} ({assignment.assigned_shift.value})."]
    if assignment.disruption.type is not DisruptionType.NONE:
        lines.append(summarize_disruption(assignment.disruption))
    if assignment.has_extra_watch:
        lines.append("Extra duty posted: NIGHT_WATCH tonight.")
    return " ".join(lines)
