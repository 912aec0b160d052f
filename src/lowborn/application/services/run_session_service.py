from __future__ import annotations

import logging
from typing import Optional

from lowborn.application.services import run_engine
from lowborn.application.services.event_bus import EventBus, RunEvent, event_context
from lowborn.domain.errors import SaveSlotNotFoundError
from lowborn.domain.events import DayStarted, NightBegan, NightResolved, WeekCompleted
from lowborn.domain.models.run_state import DayPhase, RunState
from lowborn.domain.repositories import SaveRepository

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "autosave"


class RunSessionService:
    """Owns the live snapshot for one save slot.

    Each transition goes through the engine, publishes what happened on the
    event bus, and autosaves when a repository is configured. A transition
    the engine refuses leaves the snapshot alone and publishes nothing.
    """

    def __init__(
        self,
        event_bus: EventBus,
        repository: SaveRepository | None = None,
        slot: str = DEFAULT_SLOT,
    ) -> None:
        self.event_bus = event_bus
        self.repository = repository
        self.slot = slot
        self.state: Optional[RunState] = None

    def _require_state(self) -> RunState:
        if self.state is None:
            raise RuntimeError("No active run. Start or load one first.")
        return self.state

    def _commit(self, state: RunState) -> RunState:
        self.state = state
        self.save()
        return state

    def new_run(self, seed: Optional[str] = None) -> RunState:
        state = self._commit(run_engine.create_run(seed))
        today = state.today
        self.event_bus.publish(
            DayStarted(
                seed=state.seed,
                day=today.day,
                assigned_duty=today.assigned_duty.value,
                assigned_shift=today.assigned_shift.value,
                disruption_type=today.disruption.type.value,
            )
        )
        return state

    def begin_night(self) -> RunState:
        before = self._require_state()
        after = run_engine.begin_night(before)
        if after is before:
            return before
        self._commit(after)
        scene = after.active_night_scene
        self.event_bus.publish(
            NightBegan(
                seed=after.seed,
                day=scene.day,
                scene_type=scene.scene_type.value,
                event_title=scene.event_card.title,
            )
        )
        return after

    def resolve_night(self, choice_id: Optional[str] = None) -> RunState:
        before = self._require_state()
        after = run_engine.resolve_night_scene(before, choice_id)
        if after is before:
            return before
        chosen = before.active_night_scene.find_choice(choice_id)
        self._commit(after)
        log = after.night_logs[-1]
        self.event_bus.publish(
            NightResolved(
                seed=after.seed,
                day=log.day,
                choice_id=chosen.id,
                rumor_reach_count=log.rumor_reach_count,
                flags=log.flags,
            )
        )
        return after

    def start_next_day(self) -> RunState:
        before = self._require_state()
        after = run_engine.start_next_day(before)
        if after is before:
            return before
        self._commit(after)
        if after.phase is DayPhase.WEEK_SUMMARY:
            summary = after.week_summary
            self.event_bus.publish(
                WeekCompleted(
                    seed=after.seed,
                    week=summary.week,
                    nights_survived=summary.nights_survived,
                    first_break_label=summary.first_break_label,
                    save_slot=self.slot if self.repository is not None else None,
                )
            )
        else:
            today = after.today
            self.event_bus.publish(
                DayStarted(
                    seed=after.seed,
                    day=today.day,
                    assigned_duty=today.assigned_duty.value,
                    assigned_shift=today.assigned_shift.value,
                    disruption_type=today.disruption.type.value,
                )
            )
        return after

    def load(self) -> Optional[RunState]:
        if self.repository is None:
            return None
        state = self.repository.load(self.slot)
        if state is not None:
            self.state = state
        return state

    def resume(self) -> RunState:
        if self.repository is None:
            raise SaveSlotNotFoundError(self.slot)
        self.state = self.repository.require(self.slot)
        return self.state

    def save(self) -> None:
        if self.repository is None or self.state is None:
            return
        self.repository.save(self.slot, self.state)


def register_run_log_handlers(event_bus: EventBus) -> None:
    """Mirror lifecycle events into the module log at INFO, tracing each one at DEBUG."""

    def _on_day_started(event: DayStarted) -> None:
        logger.info(
            "Day %s started: %s/%s (disruption %s)",
            event.day,
            event.assigned_duty,
            event.assigned_shift,
            event.disruption_type,
        )

    def _on_night_began(event: NightBegan) -> None:
        logger.info("Day %s night began (%s): %s", event.day, event.scene_type, event.event_title)

    def _on_night_resolved(event: NightResolved) -> None:
        logger.info("Day %s resolved with %s; rumor reached %s", event.day, event.choice_id, event.rumor_reach_count)

    def _on_week_completed(event: WeekCompleted) -> None:
        logger.info("Week %s complete after %s night(s): %s", event.week, event.nights_survived, event.first_break_label)

    def _trace(event: RunEvent) -> None:
        logger.debug("Run event %s", type(event).__name__, extra=event_context(event))

    event_bus.subscribe_all(_trace, priority=0)
    event_bus.subscribe(DayStarted, _on_day_started)
    event_bus.subscribe(NightBegan, _on_night_began)
    event_bus.subscribe(NightResolved, _on_night_resolved)
    event_bus.subscribe(WeekCompleted, _on_week_completed)
