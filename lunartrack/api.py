"""HTTP handlers for rocket messages, rocket listings and debug views."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from .errors import APIError, MessageProcessingError, ValidationError
from .models import RocketMessage
from .repository import RocketRepository
from .sorting import sort_rockets, validate_sort_by, validate_sort_order
from .validation import validate_rocket_id, validate_rocket_message
from .web import Request, Response, write_error_response, write_success_response

logger = logging.getLogger(__name__)

PROCESSING_FAILURE_REASON = (
    "Message processing failed - may be duplicate, out-of-order, or invalid state transition"
)


@dataclass
class MessageResponse:
    """Body returned after a message has been accepted."""

    rocket_id: str
    message_number: int
    status: str = "success"
    message: str = "Message processed successfully"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "rocketId": self.rocket_id,
            "messageNumber": self.message_number,
        }


@dataclass
class DebugInfo:
    """Message-processing details for one rocket."""

    rocket_id: str
    processed_message_count: int = 0
    pending_message_count: int = 0
    pending_message_numbers: list[int] | None = None
    last_processed_message: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "rocketId": self.rocket_id,
            "processedMessageCount": self.processed_message_count,
            "pendingMessageCount": self.pending_message_count,
            "pendingMessageNumbers": self.pending_message_numbers or None,
            "lastProcessedMessage": self.last_processed_message,
        }


def _decode_message(body: bytes) -> RocketMessage:
    text = body.decode("utf-8", errors="replace").lstrip()
    if not text:
        raise ValueError("EOF")
    data, _ = json.JSONDecoder().raw_decode(text)
    if data is None:
        return RocketMessage()
    return RocketMessage.from_dict(data)


class ApiHandler:
    """Request handlers backed by a rocket repository."""

    def __init__(self, repository: RocketRepository | None = None) -> None:
        self.repository = repository if repository is not None else RocketRepository()

    def handle_message(self, request: Request) -> Response:
        """Validate and process one incoming rocket message."""
        try:
            message = _decode_message(request.body)
        except ValueError as exc:
            logger.info("Failed to decode JSON: %s", exc)
            return write_error_response(
                APIError(HTTPStatus.BAD_REQUEST, "Invalid JSON format", str(exc))
            )

        try:
            validate_rocket_message(message)
        except ValidationError as exc:
            logger.info("Message validation failed: %s", exc)
            return write_error_response(exc)

        logger.info(
            "Received message: Channel=%s, MsgNum=%d, Type=%s",
            message.channel, message.message_number, message.message_type,
        )

        if not self.repository.process_message(message):
            error = MessageProcessingError(
                message.channel, message.message_number, message.message_type,
                PROCESSING_FAILURE_REASON,
            )
            logger.info("Failed to process message: %s", error)
            return write_error_response(error)

        logger.info(
            "Successfully processed message: Channel=%s, MsgNum=%d, Type=%s",
            message.channel, message.message_number, message.message_type,
        )
        return write_success_response(
            MessageResponse(rocket_id=message.channel, message_number=message.message_number)
        )

    def _validated_id(self, request: Request) -> str:
        rocket_id = request.path_value("id")
        validate_rocket_id(rocket_id)
        return rocket_id

    def handle_get_rocket(self, request: Request) -> Response:
        """Full state of the rocket named in the path."""
        try:
            rocket_id = self._validated_id(request)
        except ValidationError as exc:
            return write_error_response(exc)
        rocket = self.repository.get_rocket(rocket_id)
        if rocket is None:
            return write_error_response(_not_found(rocket_id))
        return write_success_response(rocket)

    def handle_get_rockets(self, request: Request) -> Response:
        """All rockets, sorted as the query asks."""
        sort_by = request.query_param("sortBy")
        sort_order = request.query_param("sortOrder")
        if not validate_sort_by(sort_by):
            return write_error_response(APIError(
                HTTPStatus.BAD_REQUEST,
                "Invalid sort field",
                "Valid sort fields are: id, type, speed, mission, exploded, updatedAt",
            ))
        if not validate_sort_order(sort_order):
            return write_error_response(APIError(
                HTTPStatus.BAD_REQUEST,
                "Invalid sort order",
                "Valid sort orders are: asc, desc",
            ))
        rockets = self.repository.get_all_rockets()
        return write_success_response(sort_rockets(rockets, sort_by, sort_order))

    def handle_debug_rocket(self, request: Request) -> Response:
        """Message-processing details for the rocket named in the path."""
        try:
            rocket_id = self._validated_id(request)
        except ValidationError as exc:
            return write_error_response(exc)
        rocket = self.repository.get_rocket(rocket_id)
        if rocket is None:
            return write_error_response(_not_found(rocket_id))
        processed_count, pending = self.repository.get_debug_info(rocket_id)
        return write_success_response(DebugInfo(
            rocket_id=rocket_id,
            processed_message_count=processed_count,
            pending_message_count=len(pending),
            pending_message_numbers=pending,
            last_processed_message=rocket.last_processed_message_number,
        ))

    def handle_debug_all(self, request: Request) -> Response:
        """Last processed message number for every rocket."""
        infos = []
        for summary in self.repository.get_all_rockets():
            rocket = self.repository.get_rocket(summary.id)
            infos.append(DebugInfo(
                rocket_id=summary.id,
                last_processed_message=rocket.last_processed_message_number if rocket else 0,
            ))
        return write_success_response(infos)


def _not_found(rocket_id: str) -> APIError:
    return APIError(HTTPStatus.NOT_FOUND, "Rocket not found", "No rocket found with ID: " + rocket_id)