"""In-memory rocket store that orders, deduplicates and applies rocket messages."""

from __future__ import annotations

import dataclasses
import threading

from .models import MessageType, RocketMessage, RocketState, RocketSummary


class RocketRepository:
    """Thread-safe storage of rocket state, tolerant of duplicate and out-of-order messages."""

    def __init__(self) -> None:
        self._rockets: dict[str, RocketState] = {}
        self._processed: dict[str, set[int]] = {}
        self._pending: dict[str, dict[int, RocketMessage]] = {}
        self._lock = threading.Lock()

    def get_rocket(self, rocket_id: str) -> RocketState | None:
        """A copy of the rocket's state, or None if no such rocket exists."""
        with self._lock:
            rocket = self._rockets.get(rocket_id)
            return None if rocket is None else dataclasses.replace(rocket)

    def get_all_rockets(self) -> list[RocketSummary]:
        """Summaries of every known rocket."""
        with self._lock:
            return [rocket.summary() for rocket in self._rockets.values()]

    def process_message(self, msg: RocketMessage) -> bool:
        """Apply, buffer or ignore a message; False if it could not be applied."""
        with self._lock:
            rocket_id = msg.channel
            number = msg.message_number
            processed = self._processed.setdefault(rocket_id, set())
            pending = self._pending.setdefault(rocket_id, {})

            if number in processed:
                return True

            rocket = self._rockets.get(rocket_id)
            if rocket is None:
                if msg.message_type != MessageType.ROCKET_LAUNCHED:
                    pending[number] = msg
                    return True
                rocket = RocketState(id=rocket_id)
                self._rockets[rocket_id] = rocket

            expected = rocket.last_processed_message_number + 1
            if number == expected:
                if not self._apply(rocket, msg):
                    return False
                self._mark_processed(rocket, msg)
                self._drain_pending(rocket)
                return True
            if number > expected:
                pending[number] = msg
                return True
            return False

    def get_debug_info(self, rocket_id: str) -> tuple[int, list[int]]:
        """The number of processed messages and the numbers of buffered ones."""
        with self._lock:
            processed_count = len(self._processed.get(rocket_id, ()))
            pending_numbers = sorted(self._pending.get(rocket_id, {}))
            return processed_count, pending_numbers

    def _mark_processed(self, rocket: RocketState, msg: RocketMessage) -> None:
        self._processed[rocket.id].add(msg.message_number)
        rocket.last_processed_message_number = msg.message_number
        rocket.updated_at = msg.message_time

    def _drain_pending(self, rocket: RocketState) -> None:
        pending = self._pending[rocket.id]
        while True:
            next_number = rocket.last_processed_message_number + 1
            msg = pending.get(next_number)
            if msg is None:
                return
            if rocket.exploded and msg.message_type != MessageType.ROCKET_LAUNCHED:
                del pending[next_number]
                continue
            del pending[next_number]
            if not self._apply(rocket, msg):
                return
            self._mark_processed(rocket, msg)

    def _apply(self, rocket: RocketState, msg: RocketMessage) -> bool:
        if rocket.exploded and msg.message_type != MessageType.ROCKET_LAUNCHED:
            return False

        content = msg.message
        match msg.message_type:
            case MessageType.ROCKET_LAUNCHED:
                if not content.type or not content.mission:
                    return False
                rocket.type = content.type
                rocket.mission = content.mission
                rocket.speed = content.launch_speed
                rocket.exploded = False
                rocket.reason = ""
                if rocket.created_at is None:
                    rocket.created_at = msg.message_time
                return True
            case MessageType.ROCKET_SPEED_INCREASED:
                if content.by <= 0:
                    return False
                rocket.speed += content.by
                return True
            case MessageType.ROCKET_SPEED_DECREASED:
                if content.by <= 0:
                    return False
                rocket.speed = max(rocket.speed - content.by, 0)
                return True
            case MessageType.ROCKET_EXPLODED:
                if not content.reason:
                    return False
                rocket.exploded = True
                rocket.reason = content.reason
                pending = self._pending.get(rocket.id)
                if pending is not None:
                    for number in [
                        n for n, queued in pending.items()
                        if queued.message_type != MessageType.ROCKET_LAUNCHED
                    ]:
                        del pending[number]
                return True
            case MessageType.ROCKET_MISSION_CHANGED:
                if not content.new_mission:
                    return False
                rocket.mission = content.new_mission
                return True
            case _:
                return False