"""Checks on incoming rocket messages and rocket identifiers."""

from __future__ import annotations

from .errors import ValidationError
from .models import MessageType, RocketMessage

MIN_ROCKET_ID_LENGTH = 3


def validate_rocket_message(msg: RocketMessage) -> None:
    """Raise ValidationError if the message lacks what its type requires."""
    if not msg.channel:
        raise ValidationError("channel", "channel is required")
    if msg.message_number <= 0:
        raise ValidationError("messageNumber", "messageNumber must be positive integer")
    if msg.message_time is None:
        raise ValidationError("messageTime", "messageTime is required")
    try:
        kind = MessageType(msg.message_type)
    except ValueError:
        raise ValidationError("messageType", "invalid message type", msg.message_type) from None

    content = msg.message
    match kind:
        case MessageType.ROCKET_LAUNCHED:
            if not content.type:
                raise ValidationError("type", "rocket type is required for launch message")
            if not content.mission:
                raise ValidationError("mission", "mission is required for launch message")
            if content.launch_speed < 0:
                raise ValidationError("launchSpeed", "launch speed cannot be negative")
        case MessageType.ROCKET_SPEED_INCREASED | MessageType.ROCKET_SPEED_DECREASED:
            if content.by <= 0:
                raise ValidationError("by", "speed change amount must be positive")
        case MessageType.ROCKET_EXPLODED:
            if not content.reason:
                raise ValidationError("reason", "explosion reason is required")
        case MessageType.ROCKET_MISSION_CHANGED:
            if not content.new_mission:
                raise ValidationError("newMission", "new mission is required")


def validate_rocket_id(rocket_id: str) -> None:
    """Raise ValidationError if a rocket id taken from a URL is missing or too short."""
    if not rocket_id:
        raise ValidationError("rocketId", "rocket ID is required")
    if len(rocket_id.encode("utf-8")) < MIN_ROCKET_ID_LENGTH:
        raise ValidationError("rocketId", "rocket ID is too short", rocket_id)