#!/usr/bin/env python3
"""
WorkWell Optimizer. Launch the workload optimizer daemon.

Usage:
    python scripts/run_optimizer.py                 # Single pass
    python scripts/run_optimizer.py scheduled       # Daemon mode (production)
    python scripts/run_optimizer.py balance         # Print the balance report
"""

import asyncio
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).parent.parent.absolute()
sys.path.insert(0, str(ROOT_DIR))


def main():
    from workwell.scheduler.daemon import configure_logging, run_single_pass, run_scheduled, show_balance

    mode = sys.argv[1] if len(sys.argv) > 1 else "single"

    if mode == "balance":
        asyncio.run(show_balance())
        return

    configure_logging()
    if mode == "scheduled":
        try:
            asyncio.run(run_scheduled())
        except KeyboardInterrupt:
            pass
    else:
        asyncio.run(run_single_pass())


if __name__ == "__main__":
    main()
