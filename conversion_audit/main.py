"""
Command-line entry point for the conversion audit.

Configures logging and runs one audit. Intended to be scheduled (cron, Cloud
Scheduler, ...):

    python -m conversion_audit.main

Exit status is 0 on success and 1 when the audit failed.
"""

import logging
import sys

from conversion_audit.jobs.conversion_audit import run_conversion_audit

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    result = run_conversion_audit()
    if not result['success']:
        logger.error(f"Conversion audit failed: {result.get('error')}")
        return 1

    logger.info(
        f"Audited {result['total']} conversion actions: {result['issues']} issues, "
        f"{result['opportunities']} opportunities, {result['action_items']} action items"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
