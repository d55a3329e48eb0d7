#!/usr/bin/env python3
"""
WorkWell API Server.

Usage:
    python scripts/run_api.py                    # Development (auto-reload)
    python scripts/run_api.py --prod             # Production mode
    python scripts/run_api.py --port 8080        # Custom port
"""

import argparse
import sys
from pathlib import Path

# Ensure the project root is in the Python path
ROOT_DIR = Path(__file__).parent.parent.absolute()
sys.path.insert(0, str(ROOT_DIR))


def main():
    from workwell.config.settings import settings

    parser = argparse.ArgumentParser(description="WorkWell API Server")
    parser.add_argument("--host", default=settings.api_host, help=f"Host (default: {settings.api_host})")
    parser.add_argument("--port", type=int, default=settings.api_port, help=f"Port (default: {settings.api_port})")
    parser.add_argument("--prod", action="store_true", help="Production mode")
    parser.add_argument("--workers", type=int, default=1, help="Workers (prod only)")

    args = parser.parse_args()

    print("=" * 60)
    print("    WorkWell API")
    print("=" * 60)
    print(f"    Host: {args.host}")
    print(f"    Port: {args.port}")
    print(f"    Mode: {'Production' if args.prod else 'Development'}")
    print(f"    Storage: {settings.storage}")
    print("=" * 60)

    if args.prod and args.workers > 1:
        # Each worker process would run its own optimizer loop
        print("    Warning: optimizer passes are only serialized within one process")

    import uvicorn

    uvicorn.run(
        "workwell.api.app:app",
        host=args.host,
        port=args.port,
        reload=not args.prod,
        workers=args.workers if args.prod else 1,
        log_level="info",
    )


if __name__ == "__main__":
    main()
