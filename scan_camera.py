#!/usr/bin/env python3
"""
Camera Scan Script
Reads barcodes/QR codes from a local camera and relays them to the
configured endpoint, printing each scan and its delivery status
"""

import argparse
import asyncio
import inspect
import sys

from scanrelay.config import get_settings
from scanrelay.db import init_db
from scanrelay.scanner import CameraSource
from scanrelay.services.scan_service import init_scan_service


async def scan(camera_index: int, duration: float) -> int:
    """Scan until the camera stops or duration elapses; returns scans accepted."""
    settings = get_settings()
    init_db()
    service = init_scan_service(settings)

    source = CameraSource(camera_index)
    codes = source.iter_codes(duration_seconds=duration)

    try:
        while True:
            # Camera reads block, keep them off the event loop
            code = await asyncio.to_thread(next, codes, None)
            if code is None:
                break

            event = await service.submit(code)
            if event is None:
                continue

            print(f"📦 {event.code} ({event.scan_type})")
    finally:
        # A read still running in its thread sees the flag and releases the camera
        source.stop()
        if inspect.getgeneratorstate(codes) != inspect.GEN_RUNNING:
            codes.close()
        await service.aclose()

    for event in reversed(service.store.list()):
        reason = f" - {event.failure_reason}" if event.failure_reason else ""
        print(f"  {event.status.value:<10} {event.code}{reason}")

    return service.store.total_count


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Relay camera scans")
    parser.add_argument("--camera", type=int, default=get_settings().camera_index)
    parser.add_argument("--duration", type=float, default=0,
                        help="Seconds to scan (0 = until interrupted)")
    args = parser.parse_args()

    print("=" * 60)
    print("CAMERA SCAN")
    print("=" * 60)

    try:
        total = asyncio.run(scan(args.camera, args.duration))
    except KeyboardInterrupt:
        print("\nStopped")
        sys.exit(0)

    print()
    print(f"✅ {total} scans accepted")
    print("=" * 60)
