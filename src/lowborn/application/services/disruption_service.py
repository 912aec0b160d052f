from __future__ import annotations

from dataclasses import replace

from lowborn.application.services.schedule_service import shift_for_duty
from lowborn.application.services.seed_policy import SeededRng, decision_key
from lowborn.domain.models.schedule import (
    DailyDisruption,
    DayAssignment,
    DisruptionType,
    DutyType,
    WEEK_LENGTH,
    no_disruption,
)

DISRUPTION_TYPE_WEIGHTS = {
    DutyType.PATROL: ((DisruptionType.SWAP, 6), (DisruptionType.EXTRA_DUTY, 4)),
    DutyType.NIGHT_WATCH: ((DisruptionType.FILL_IN_PATROL, 6), (DisruptionType.SWAP, 4)),
}
DEFAULT_DISRUPTION_WEIGHTS = (
    (DisruptionType.FILL_IN_PATROL, 4),
    (DisruptionType.SWAP, 3),
    (DisruptionType.EXTRA_DUTY, 3),
)
SWAP_FROM_PATROL_WEIGHTS = ((DutyType.CAMP_WORK, 4), (DutyType.CAMP_WAIT, 3), (DutyType.REST, 2))

FILL_IN_REASON = "Short roster on the perimeter. You were reassigned to patrol."
SWAP_OUT_REASON = "Command swapped your patrol slot for camp support."
SWAP_IN_REASON = "Command pulled you into patrol due to a late gap."
EXTRA_DUTY_REASON = "Emergency watch expansion. Extra NIGHT_WATCH assigned."


def build_weekly_disruption_plan(seed: str, week: int) -> frozenset[int]:
    """Days (1-7) that receive a disruption this week.

    Keyed on seed and week only, so every day sees the same plan no matter
    which day asks first.
    """

    rng = SeededRng(decision_key(seed, "disruption-plan", week=week))
    target = rng.next_int(1, 3)
    days = list(range(1, WEEK_LENGTH + 1))
    planned: set[int] = set()
    while len(planned) < target:
        planned.add(rng.pick(days))
    return frozenset(planned)


def disruption_chance(seed: str, week: int, day: int) -> float:
    rng = SeededRng(decision_key(seed, "disruption-chance", week=week, day=day))
    return round(0.25 + rng.next_float() * 0.15, 3)


def pick_disruption_type(assignment: DayAssignment, rng: SeededRng) -> DisruptionType:
    weights = DISRUPTION_TYPE_WEIGHTS.get(assignment.scheduled_duty, DEFAULT_DISRUPTION_WEIGHTS)
    return rng.weighted_pick(weights)


def swap_duty(scheduled_duty: DutyType, key: str) -> DutyType:
    if scheduled_duty is DutyType.PATROL:
        return SeededRng(key).weighted_pick(SWAP_FROM_PATROL_WEIGHTS)
    return DutyType.PATROL


def apply_daily_disruption(assignment: DayAssignment, seed: str, week: int) -> DayAssignment:
    day = assignment.day
    # display only; the weekly plan alone decides whether a disruption happens
    chance = disruption_chance(seed, week, day)
    if day not in build_weekly_disruption_plan(seed, week):
        return replace(
            assignment,
            assigned_duty=assignment.scheduled_duty,
            assigned_shift=assignment.scheduled_shift,
            disruption=no_disruption(chance),
        )

    rng = SeededRng(decision_key(seed, "disruption-effect", week=week, day=day))
    kind = pick_disruption_type(assignment, rng)

    if kind is DisruptionType.FILL_IN_PATROL:
        return replace(
            assignment,
            assigned_duty=DutyType.PATROL,
            assigned_shift=shift_for_duty(DutyType.PATROL, decision_key(seed, "fillin-shift", week=week, day=day)),
            disruption=DailyDisruption(kind, chance, FILL_IN_REASON),
        )

    if kind is DisruptionType.SWAP:
        swapped = swap_duty(assignment.scheduled_duty, decision_key(seed, "swap-duty", week=week, day=day))
        reason = SWAP_OUT_REASON if assignment.scheduled_duty is DutyType.PATROL else SWAP_IN_REASON
        return replace(
            assignment,
            assigned_duty=swapped,
            assigned_shift=shift_for_duty(swapped, decision_key(seed, "swap-shift", week=week, day=day)),
            disruption=DailyDisruption(kind, chance, reason),
        )

    return replace(
        assignment,
        assigned_duty=assignment.scheduled_duty,
        assigned_shift=assignment.scheduled_shift,
        disruption=DailyDisruption(DisruptionType.EXTRA_DUTY, chance, EXTRA_DUTY_REASON, DutyType.NIGHT_WATCH),
    )


def with_today_disruption(schedule: tuple[DayAssignment, ...], index: int, seed: str, week: int) -> tuple[DayAssignment, ...]:
    """Reset the indexed day to its plan, then apply that day's disruption."""

    entries = list(schedule)
    entry = entries[index]
    reset = replace(
        entry,
        assigned_duty=entry.scheduled_duty,
        assigned_shift=entry.scheduled_shift,
        disruption=no_disruption(),
        resolved=False,
        event_title=None,
        summary=None,
    )
    entries[index] = apply_daily_disruption(reset, seed, week)
    return tuple(entries)
