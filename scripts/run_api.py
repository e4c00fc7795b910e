#!/usr/bin/env python3
"""
Launch script for the Satellite Classification API.

Usage:
    python scripts/run_api.py                    # Settings from config/api.yaml
    python scripts/run_api.py --dev              # Hot reload
    python scripts/run_api.py --port 8080        # Custom port
"""

import argparse
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Ensure project root is on PYTHONPATH
sys.path.insert(0, str(PROJECT_ROOT))
os.chdir(PROJECT_ROOT)

from satclass.utils.config_loader import Config


def main():
    api_config = Config(Path(os.environ.get("SATCLASS_CONFIG_DIR", "config"))).load_all().api

    parser = argparse.ArgumentParser(description="Satellite Classification API")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with hot reload")
    parser.add_argument("--host", default=api_config.host, help=f"Host to bind (default: {api_config.host})")
    parser.add_argument("--port", type=int, default=api_config.port, help=f"Port (default: {api_config.port})")
    args = parser.parse_args()

    reload = args.dev or api_config.reload
    print(f"Starting Satellite Classification API{' (reload)' if reload else ''}...")
    print(f"  URL:  http://{args.host}:{args.port}")
    print(f"  Docs: http://{args.host}:{args.port}/docs")
    print()

    import uvicorn
    uvicorn.run(
        "satclass.api.main:app",
        host=args.host,
        port=args.port,
        reload=reload,
        reload_dirs=["satclass"] if reload else None,
        log_level="info",
    )


if __name__ == "__main__":
    main()
