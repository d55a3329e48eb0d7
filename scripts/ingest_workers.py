#!/usr/bin/env python3
"""
WorkWell Ingest. Score a JSON file of worker signals into the worker store.

The file holds an array of objects (or {"workers": [...]}) with at least
id, weeklyHours, caseload (or patientLoad) and affectScore (or emotionScore).

Usage:
    python scripts/ingest_workers.py data/workers.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).parent.parent.absolute()
sys.path.insert(0, str(ROOT_DIR))


async def ingest(path: Path):
    from workwell.services.ingestion import BurnoutService
    from workwell.services.repository import close_worker_repository, get_worker_repository

    repository = await get_worker_repository()
    if repository.backend != "redis":
        logging.getLogger("workwell.ingest").warning(
            "Worker store is %s; scored records will not outlive this script",
            repository.backend,
        )
    try:
        return await BurnoutService(repository).ingest_file(path)
    finally:
        await close_worker_repository()


def main():
    parser = argparse.ArgumentParser(description="Score worker signals from a JSON file")
    parser.add_argument("path", type=Path, help="JSON file of worker signals")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    if not args.path.exists():
        print(f"No such file: {args.path}")
        sys.exit(2)

    summary = asyncio.run(ingest(args.path))
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
