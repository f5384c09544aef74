"""Rocket messages and rocket state, with their JSON forms."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Any

ROCKET_STATUS_ACTIVE = "active"
ROCKET_STATUS_EXPLODED = "exploded"

ZERO_TIME = "0001-01-01T00:00:00Z"

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(?:([Zz])|([+-])(\d{2}):(\d{2}))"
)
_EPOCH_ZERO = datetime(1, 1, 1)


class MessageType(StrEnum):
    """Kinds of rocket message."""

    ROCKET_LAUNCHED = "RocketLaunched"
    ROCKET_SPEED_INCREASED = "RocketSpeedIncreased"
    ROCKET_SPEED_DECREASED = "RocketSpeedDecreased"
    ROCKET_EXPLODED = "RocketExploded"
    ROCKET_MISSION_CHANGED = "RocketMissionChanged"


def parse_time(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp; the zero instant yields None."""
    if not isinstance(value, str):
        raise ValueError(f"time must be a string, not {type(value).__name__}")
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"invalid RFC 3339 time: {value!r}")
    year, month, day, hour, minute, second = (int(part) for part in match.group(1, 2, 3, 4, 5, 6))
    micro = int(((match.group(7) or "") + "000000")[:6])
    if match.group(8):
        offset = timedelta(0)
    else:
        off_hours, off_minutes = int(match.group(10)), int(match.group(11))
        if off_hours > 23 or off_minutes > 59:
            raise ValueError(f"invalid time zone offset in {value!r}")
        offset = timedelta(hours=off_hours, minutes=off_minutes)
        if match.group(9) == "-":
            offset = -offset
    try:
        naive = datetime(year, month, day, hour, minute, second, micro)
    except ValueError as exc:
        raise ValueError(f"invalid RFC 3339 time: {value!r}") from exc
    if naive - _EPOCH_ZERO == offset:
        return None
    tz = timezone.utc if offset == timedelta(0) else timezone(offset)
    return naive.replace(tzinfo=tz)


def format_time(value: datetime | None) -> str:
    """Format a time as RFC 3339 with trimmed fractional seconds; None is the zero time."""
    if value is None:
        return ZERO_TIME
    offset = value.utcoffset() or timedelta(0)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    total_minutes = int(abs(offset).total_seconds()) // 60
    hours, minutes = divmod(total_minutes, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _get_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _get_int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer")
    return value


def _get_object(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"field {key!r} must be an object")
    return value


@dataclass
class MessageContent:
    """Payload of a rocket message; which fields matter depends on the message type."""

    type: str = ""
    launch_speed: int = 0
    mission: str = ""
    by: int = 0
    reason: str = ""
    new_mission: str = ""

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> MessageContent:
        return cls(
            type=_get_str(data, "type"),
            launch_speed=_get_int(data, "launchSpeed"),
            mission=_get_str(data, "mission"),
            by=_get_int(data, "by"),
            reason=_get_str(data, "reason"),
            new_mission=_get_str(data, "newMission"),
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON form, leaving out fields that hold their zero value."""
        pairs = (
            ("type", self.type),
            ("launchSpeed", self.launch_speed),
            ("mission", self.mission),
            ("by", self.by),
            ("reason", self.reason),
            ("newMission", self.new_mission),
        )
        return {key: value for key, value in pairs if value}


@dataclass
class RocketMessage:
    """A message about a change in one rocket's state."""

    channel: str = ""
    message_number: int = 0
    message_time: datetime | None = None
    message_type: str = ""
    message: MessageContent = field(default_factory=MessageContent)

    @classmethod
    def from_dict(cls, data: Any) -> RocketMessage:
        """Build a message from decoded JSON; raise ValueError on a malformed document."""
        if not isinstance(data, dict):
            raise ValueError("rocket message must be a JSON object")
        metadata = _get_object(data, "metadata")
        raw_time = metadata.get("messageTime")
        return cls(
            channel=_get_str(metadata, "channel"),
            message_number=_get_int(metadata, "messageNumber"),
            message_time=None if raw_time is None else parse_time(raw_time),
            message_type=_get_str(metadata, "messageType"),
            message=MessageContent._from_dict(_get_object(data, "message")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": {
                "channel": self.channel,
                "messageNumber": self.message_number,
                "messageTime": format_time(self.message_time),
                "messageType": self.message_type,
            },
            "message": self.message.to_dict(),
        }


@dataclass
class RocketSummary:
    """Rocket information shown in listings."""

    id: str
    type: str = ""
    speed: int = 0
    mission: str = ""
    exploded: bool = False
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "speed": self.speed,
            "mission": self.mission,
            "exploded": self.exploded,
            "updatedAt": format_time(self.updated_at),
        }


@dataclass
class RocketState:
    """Full state of one rocket."""

    id: str
    type: str = ""
    speed: int = 0
    mission: str = ""
    exploded: bool = False
    reason: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_processed_message_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        """JSON form; the message-ordering counter is not exposed."""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "speed": self.speed,
            "mission": self.mission,
            "exploded": self.exploded,
        }
        if self.reason:
            result["reason"] = self.reason
        result["createdAt"] = format_time(self.created_at)
        result["updatedAt"] = format_time(self.updated_at)
        return result

    def summary(self) -> RocketSummary:
        return RocketSummary(
            id=self.id,
            type=self.type,
            speed=self.speed,
            mission=self.mission,
            exploded=self.exploded,
            updated_at=self.updated_at,
        )