#!/usr/bin/env python3
"""Convenience runner for the GPS timelapse planner.

Usage:
    python run.py path/to/telemetry_dir --json plan.json
"""
import logging
from gps_timelapse.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
