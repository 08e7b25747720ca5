#!/usr/bin/env python3
"""
disk-health: SMART, NVMe, mdadm RAID and log checks.

Prints the report, posts it to Discord, and pages through Pushover when the
overall status is BAD. Configured entirely through the environment.
"""

import os
import sys

from mediaops.config import HealthConfig
from mediaops.errors import ConfigurationError
from mediaops.health import HealthReporter
from mediaops.utils import logger


def main() -> int:
    logger.set_log_level(logger.level_from_name(os.getenv("MEDIAOPS_LOG_LEVEL")))
    try:
        config = HealthConfig.from_env()
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    report = HealthReporter.from_config(config).run()
    print(report.text, end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
