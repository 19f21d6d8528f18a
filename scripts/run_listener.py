#!/usr/bin/env python3
"""Run the ledger listener.

Starts two independent Kafka subscribers: one sends agreement SMS notifications,
the other syncs case instructions into the case-management system.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from titlesync.adapters.kafka_runtime import run_listener_forever  # noqa: E402
from titlesync.config import ConfigError, load_env_file, load_settings_from_env  # noqa: E402
from titlesync.logging_config import configure_logging  # noqa: E402


def main() -> int:
    parse_args()
    load_env_file(REPO_ROOT / ".env")
    logger = configure_logging()
    try:
        settings = load_settings_from_env()
    except ConfigError as exc:
        logger.error("[CONFIG ERROR] %s", exc)
        return 2
    return run_listener_forever(settings)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run Kafka subscribers for agreement SMS and case instruction sync."
    )
    return parser.parse_args()


if __name__ == "__main__":
    sys.exit(main())
