# producer.py
"""
Producer CLI - publishes through NSQProducer with nsqlookupd failover.

    python producer.py "your message"     publish one message
    python producer.py                    publish TOTAL_MESSAGES unique messages

Each generated message gets a unique id so duplicates are easy to spot on the
consumer side.
"""

import os
import sys
import time
import uuid

from dotenv import load_dotenv

from nsq_failover.config import ConnectionConfig, lookupd_address_from_env
from nsq_failover.errors import NSQProducerError
from nsq_failover.producer import NSQProducer

load_dotenv()

# Configuration
TOPIC = os.environ.get("TOPIC", "test")
TOTAL_MESSAGES = int(os.environ.get("TOTAL_MESSAGES", "20"))
STOP_ON_FAILURE = os.environ.get("STOP_ON_FAILURE", "false").lower() == "true"


def build_producer() -> NSQProducer:
    return NSQProducer(lookupd_address_from_env(), ConnectionConfig.from_env())


def send_message(producer, topic, message) -> bool:
    """
    Publish a single message. Reconnecting is the producer's job; here a
    failure only gets reported.
    """
    try:
        producer.publish(topic, message)
    except NSQProducerError as e:
        print(f"[produce] ❌ {type(e).__name__}: {e}")
        return False

    node = producer.current_node
    print(f"[produce] ✅ Message delivered to {node.addr if node else '?'}")
    return True


def make_message(i: int) -> str:
    unique_id = str(uuid.uuid4())[:8]
    timestamp = int(time.time() * 1000)
    return f"msg-{i}-{timestamp}-{unique_id}"


def main(argv=None) -> bool:
    argv = sys.argv[1:] if argv is None else argv

    try:
        producer = build_producer()
    except NSQProducerError as e:
        print(f"[produce] ❌ Could not start producer: {e}")
        return False

    with producer:
        if argv:
            return send_message(producer, TOPIC, " ".join(argv))

        print(f"\n{'='*70}")
        print("NSQ FAILOVER PRODUCER")
        print(f"   Topic: {TOPIC}")
        print(f"   Target Messages: {TOTAL_MESSAGES}")
        print(f"   Nodes: {', '.join(n.addr for n in producer.nodes)}")
        print(f"   Stop on Failure: {STOP_ON_FAILURE}")
        print(f"{'='*70}\n")

        sent_count = 0
        failed_messages = []

        for i in range(1, TOTAL_MESSAGES + 1):
            message = make_message(i)
            print(f"📤 Message {i}/{TOTAL_MESSAGES}: '{message}'")

            if send_message(producer, TOPIC, message):
                sent_count += 1
                continue

            failed_messages.append(message)
            if STOP_ON_FAILURE:
                print("\n⛔ STOP_ON_FAILURE enabled - Stopping producer")
                break

    print(f"\n{'='*70}")
    print(f"   Total Sent: {sent_count}/{TOTAL_MESSAGES}")
    if failed_messages:
        print(f"   ⚠  Failed Messages: {', '.join(failed_messages)}")
    else:
        print("   ✅ All messages delivered successfully!")
    print(f"{'='*70}\n")

    return sent_count == TOTAL_MESSAGES


if __name__ == "__main__":
    try:
        success = main()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\n⚠  Producer interrupted by user (Ctrl+C)")
        sys.exit(130)
