"""Kafka publish sink built on kafka-python's ``KafkaProducer``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kafka import KafkaProducer  # type: ignore[import-untyped]
from kafka.errors import KafkaError  # type: ignore[import-untyped]

from logsim._internal.errors import PublishError
from logsim._internal.logging import get_logger
from logsim.events.partitioner import client_partitioner

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from logsim._internal.config import RunConfig

logger = get_logger("sinks.kafka")

_CLOSE_TIMEOUT_SECONDS = 10.0


class KafkaSink:
    """Publishes access-log lines to Kafka, one producer per simulated user.

    Every send is keyed by the client address and routed through
    :func:`client_partitioner`, so one client's events stay on one
    partition. ``publish`` blocks until the broker acknowledges the record
    or ``publish_timeout`` expires. The same timeout caps how long ``send``
    may block on topic metadata or buffer space.

    Attributes:
        brokers: Bootstrap servers the producer connects to.
        publish_timeout: Seconds to wait for each acknowledgement.
    """

    def __init__(
        self,
        brokers: Sequence[str],
        *,
        publish_timeout: float = 10.0,
        acks: int | str = 1,
        retries: int = 3,
        linger_ms: int = 5,
        producer_factory: Callable[..., Any] | None = None,
    ) -> None:
        """Connect a producer to the brokers.

        Args:
            brokers: Kafka ``host:port`` bootstrap servers.
            publish_timeout: Seconds to wait for each acknowledgement.
            acks: Acknowledgements the leader must receive.
            retries: Producer-level retries for transient send errors.
            linger_ms: Batching delay for the producer.
            producer_factory: Callable building the producer. Defaults to
                ``KafkaProducer``.

        Raises:
            PublishError: If the producer cannot reach any broker.
        """
        self.brokers = list(brokers)
        self.publish_timeout = publish_timeout
        self._closed = False

        try:
            factory = producer_factory if producer_factory is not None else KafkaProducer
            self._producer = factory(
                bootstrap_servers=self.brokers,
                key_serializer=lambda k: k.encode("utf-8"),
                partitioner=client_partitioner,
                acks=acks,
                retries=retries,
                linger_ms=linger_ms,
                max_block_ms=int(publish_timeout * 1000),
            )
        except KafkaError as exc:
            msg = f"Cannot connect to brokers {','.join(self.brokers)}: {exc}"
            raise PublishError(msg) from exc

    def publish(self, topic: str, key: str, payload: bytes) -> None:
        """Send one record and wait for its acknowledgement.

        Args:
            topic: Destination topic.
            key: Partition key (client address).
            payload: Encoded access-log line.

        Raises:
            PublishError: If the sink is closed, the send is rejected, or
                the acknowledgement does not arrive within publish_timeout.
        """
        if self._closed:
            msg = "publish on a closed sink"
            raise PublishError(msg)

        try:
            future = self._producer.send(topic, key=key, value=payload)
            metadata = future.get(timeout=self.publish_timeout)
        except KafkaError as exc:
            msg = f"Failed to publish to topic {topic!r} with key {key!r}: {exc}"
            raise PublishError(msg) from exc

        logger.debug(
            "Published to %s[%d]@%d",
            metadata.topic,
            metadata.partition,
            metadata.offset,
        )

    def close(self) -> None:
        """Flush pending sends and close the producer. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            self._producer.close(timeout=_CLOSE_TIMEOUT_SECONDS)
        except KafkaError:
            logger.warning("Producer did not close cleanly", exc_info=True)


def kafka_sink_factory(config: RunConfig) -> KafkaSink:
    """Build the KafkaSink a simulated user owns for ``config``."""
    return KafkaSink(config.brokers, publish_timeout=config.publish_timeout)
