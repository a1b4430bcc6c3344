"""Deterministic partition selection keyed by simulated client address.

Uses the same murmur2 hash as Kafka's default partitioner, so a Java
consumer computing partitions for the same key agrees with us.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from kafka.partitioner.default import murmur2  # type: ignore[import-untyped]


def partition_for(key: str, partition_count: int) -> int:
    """Map a partition key to a partition index.

    The mapping is stable across calls and processes: all events of one
    simulated client land on the same partition.

    Args:
        key: Partition key, the simulated client address.
        partition_count: Number of partitions of the topic.

    Returns:
        Partition index in ``[0, partition_count)``.

    Raises:
        ValueError: If partition_count is less than 1.
    """
    if partition_count < 1:
        msg = f"partition_count must be >= 1, got {partition_count}"
        raise ValueError(msg)
    return _partition_index(key.encode("utf-8"), partition_count)


def _partition_index(key_bytes: bytes, partition_count: int) -> int:
    return (murmur2(key_bytes) & 0x7FFFFFFF) % partition_count


def client_partitioner(
    key_bytes: bytes | None,
    all_partitions: Sequence[int],
    available: Sequence[int],
) -> int:
    """kafka-python ``partitioner`` hook routing by client address.

    Args:
        key_bytes: Serialized partition key, or None.
        all_partitions: Every partition id of the topic, sorted.
        available: Partition ids that currently have a leader.

    Returns:
        The partition id to send to.
    """
    if key_bytes is None:
        # Unkeyed sends are never produced by simulated users.
        candidates = available or all_partitions
        return random.choice(candidates)  # noqa: S311
    return all_partitions[_partition_index(key_bytes, len(all_partitions))]
