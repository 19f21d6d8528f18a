"""Kafka transport adapters for the ledger update feed.

Mental model refresher:
- This module is transport glue to Kafka itself.
- Each subscription owns one consumer on one topic and one routing table, and
  processes its records strictly in order on its own thread.
- Business logic still lives in the application layer; this module decodes
  records, hands them to `handle_update`, and commits offsets.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping

from ..application.routing import (
    RoutingTable,
    agreement_routing_table,
    instruction_routing_table,
)
from ..config import Settings
from ..domain.states import PartyIdentity
from .case_client import CaseManagementClient
from .feed_handler import handle_update
from .ledger_client import fetch_local_identity
from .sms_dispatcher import SMSDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Subscription:
    name: str
    topic: str
    routing_table: RoutingTable


def build_subscriptions(
    settings: Settings,
    *,
    notifier: Any | None = None,
    case_client: Any | None = None,
) -> list[Subscription]:
    """The two independent feed consumers: agreement SMS and case instructions."""
    notifier = notifier if notifier is not None else SMSDispatcher(settings)
    case_client = (
        case_client if case_client is not None else CaseManagementClient.from_settings(settings)
    )
    return [
        Subscription(
            name="agreement-notifications",
            topic=settings.kafka_topic_agreements,
            routing_table=agreement_routing_table(notifier),
        ),
        Subscription(
            name="case-instructions",
            topic=settings.kafka_topic_instructions,
            routing_table=instruction_routing_table(case_client),
        ),
    ]


def publish_ledger_update(
    payload: Mapping[str, Any],
    *,
    settings: Settings,
    topic: str | None = None,
    send_timeout_seconds: float = 10.0,
) -> dict[str, Any]:
    """Publish one update batch to a feed topic (local testing aid)."""
    _KafkaConsumer, KafkaProducer, _TopicPartition, _OffsetAndMetadata = _import_kafka_python()
    topic_name = topic or settings.kafka_topic_agreements

    producer = KafkaProducer(
        bootstrap_servers=list(settings.kafka_bootstrap_servers),
        value_serializer=_serialize_json_object,
        acks="all",
    )
    try:
        future = producer.send(topic_name, value=dict(payload))
        metadata = future.get(timeout=send_timeout_seconds)
        producer.flush(timeout=send_timeout_seconds)
    finally:
        producer.close()

    return {
        "topic": metadata.topic,
        "partition": metadata.partition,
        "offset": metadata.offset,
    }


def run_listener_forever(settings: Settings) -> int:
    """Fetch the local identity once, then run every subscription until stopped."""
    local_identity = fetch_local_identity(settings)
    subscriptions = build_subscriptions(settings)
    stop_event = threading.Event()
    exit_codes: dict[str, int] = {}

    def _run(subscription: Subscription) -> None:
        exit_codes[subscription.name] = run_subscription_forever(
            subscription,
            settings=settings,
            local_identity=local_identity,
            stop_event=stop_event,
        )

    threads = [
        threading.Thread(target=_run, args=(subscription,), name=subscription.name, daemon=True)
        for subscription in subscriptions
    ]
    for thread in threads:
        thread.start()

    try:
        while any(thread.is_alive() for thread in threads):
            for thread in threads:
                thread.join(timeout=1.0)
    except KeyboardInterrupt:
        logger.info("[LISTENER STOP] received keyboard interrupt")
        stop_event.set()
        for thread in threads:
            thread.join()

    return max(exit_codes.values(), default=0)


def run_subscription_forever(
    subscription: Subscription,
    *,
    settings: Settings,
    local_identity: PartyIdentity,
    stop_event: threading.Event | None = None,
) -> int:
    """Consume one feed topic and route each update batch in delivery order."""
    KafkaConsumer, _KafkaProducer, TopicPartition, OffsetAndMetadata = _import_kafka_python()

    consumer = KafkaConsumer(
        subscription.topic,
        bootstrap_servers=list(settings.kafka_bootstrap_servers),
        group_id=f"{settings.kafka_group_id}.{subscription.name}",
        enable_auto_commit=False,
        auto_offset_reset=settings.kafka_auto_offset_reset,
    )
    logger.info(
        "[SUBSCRIBER START] name=%s topic=%s group_id=%s.%s identity=%s",
        subscription.name,
        subscription.topic,
        settings.kafka_group_id,
        subscription.name,
        local_identity,
    )

    try:
        while stop_event is None or not stop_event.is_set():
            batches = consumer.poll(
                timeout_ms=settings.kafka_poll_timeout_ms,
                max_records=settings.kafka_max_records_per_poll,
            )
            if not batches:
                continue

            for _topic_partition, records in batches.items():
                for message in records:
                    process_message(
                        message,
                        subscription=subscription,
                        local_identity=local_identity,
                    )
                    offsets = {
                        TopicPartition(message.topic, int(message.partition)): _offset_and_metadata(
                            OffsetAndMetadata, int(message.offset) + 1
                        )
                    }
                    consumer.commit(offsets=offsets)
        logger.info("[SUBSCRIBER STOP] name=%s", subscription.name)
        return 0
    except Exception:
        logger.exception("[SUBSCRIBER ERROR] name=%s", subscription.name)
        return 1
    finally:
        consumer.close()


def process_message(
    message: Any,
    *,
    subscription: Subscription,
    local_identity: PartyIdentity,
) -> dict[str, Any]:
    """Decode and handle one Kafka record; decode failures are logged, never raised."""
    try:
        update = _deserialize_json_object(message.value)
    except ValueError as exc:
        logger.error(
            "[DECODE FAILED] subscription=%s topic=%s partition=%s offset=%s error=%s",
            subscription.name,
            message.topic,
            message.partition,
            message.offset,
            exc,
        )
        return {"status": "decode_failed", "results": []}

    result = handle_update(
        update,
        local_identity=local_identity,
        routing_table=subscription.routing_table,
    )
    logger.info(
        "[RESULT] subscription=%s topic=%s partition=%s offset=%s status=%s states=%d",
        subscription.name,
        message.topic,
        message.partition,
        message.offset,
        result["status"],
        len(result["results"]),
    )
    return result


def _import_kafka_python() -> tuple[Any, Any, Any, Any]:
    try:
        from kafka import KafkaConsumer, KafkaProducer, TopicPartition
        from kafka.structs import OffsetAndMetadata
    except ImportError as exc:
        raise RuntimeError(
            "Kafka support requires `kafka-python`. Install with: pip install kafka-python"
        ) from exc
    return KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _deserialize_json_object(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)

    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"Feed payload is not UTF-8: {exc}") from exc
    elif isinstance(raw, str):
        text = raw
    else:
        raise ValueError(f"Unsupported feed payload type: {type(raw).__name__}")

    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("Feed payload must decode to a JSON object")
    return parsed


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    """Build kafka-python OffsetAndMetadata across version signatures."""
    try:
        return offset_and_metadata_type(offset, "", -1)
    except TypeError:
        return offset_and_metadata_type(offset, "")
