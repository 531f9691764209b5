import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import redis
from opentelemetry import trace
from redis.exceptions import ConnectionError

from fare_engine.core.correlation import get_current_correlation_id
from fare_engine.core.exceptions import PublishError
from fare_engine.pubsub.channels import (
    ALL_CHANNELS,
    CHANNEL_FARE_UPDATES,
    CHANNEL_MEMBER_UPDATES,
    FareUpdateMessage,
    MemberUpdateMessage,
)

if TYPE_CHECKING:
    from fare_engine.rides.member import RideMember
    from fare_engine.rides.recalculation import FareChange

logger = logging.getLogger(__name__)


_tracer = trace.get_tracer(__name__)


class RedisPublisher:
    """Synchronous Redis publisher for fare and member updates.

    Subscribers (the WebSocket gateway) fan the messages out to riders and
    drivers watching the ride.
    """

    def __init__(self, config: dict[str, Any], raise_on_error: bool = False):
        self.config = config
        self.raise_on_error = raise_on_error
        self._client = redis.Redis(
            host=config["host"],
            port=config["port"],
            db=config["db"],
            password=config.get("password"),
            decode_responses=True,
        )

    def publish_sync(self, channel: str, message: dict[str, Any]) -> None:
        """Publish one JSON message.

        Connection failures are logged; with ``raise_on_error`` they are
        re-raised as PublishError instead.
        """
        if channel not in ALL_CHANNELS:
            raise ValueError(
                f"Channel '{channel}' is not a valid channel. Valid channels: {ALL_CHANNELS}"
            )

        with _tracer.start_as_current_span("redis.publish") as span:
            span.set_attribute("db.system", "redis")
            span.set_attribute("db.redis.channel", channel)

            correlation_id = get_current_correlation_id()
            if correlation_id:
                span.set_attribute("correlation_id", correlation_id)

            try:
                self._client.publish(channel, json.dumps(message))
            except ConnectionError as e:
                span.record_exception(e)
                logger.error(f"Failed to publish to channel {channel}: {e}")
                if self.raise_on_error:
                    raise PublishError(
                        f"Failed to publish to channel {channel}",
                        details={"channel": channel},
                    ) from e

    def publish_fare_changes(self, ride_id: str, changes: Sequence["FareChange"]) -> None:
        timestamp = datetime.now(UTC).isoformat()
        for change in changes:
            message = FareUpdateMessage(
                ride_id=ride_id,
                member_id=change.member_id,
                rider_id=change.rider_id,
                previous_price=change.previous_price,
                new_price=change.new_price,
                solo_distance_km=change.fare.solo_distance_km,
                shared_distance_km=change.fare.shared_distance_km,
                breakdown=change.fare.breakdown,
                timestamp=timestamp,
            )
            self.publish_sync(CHANNEL_FARE_UPDATES, message.model_dump())

    def publish_member_update(self, ride_id: str, member: "RideMember") -> None:
        message = MemberUpdateMessage(
            ride_id=ride_id,
            member_id=member.member_id,
            rider_id=member.rider_id,
            status=member.status.value,
            event_type=member.status.to_event_type(),
            timestamp=datetime.now(UTC).isoformat(),
        )
        self.publish_sync(CHANNEL_MEMBER_UPDATES, message.model_dump())
