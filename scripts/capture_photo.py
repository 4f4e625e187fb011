#!/usr/bin/env python
"""Capture one photo from an image file or folder and share it via the relay."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from app.client import CaptureConfig, CaptureSession, ImageFileCamera, Screen
from app.client.config import CameraSettings, UploadSettings


async def run(args: argparse.Namespace) -> int:
    config = CaptureConfig(
        camera=CameraSettings(
            max_width=args.max_width,
            max_height=args.max_height,
            image_quality=args.quality,
            photo_format=args.format,
        ),
        upload=UploadSettings(relay_url=args.relay_url),
    )
    session = CaptureSession(ImageFileCamera(args.source), config)
    try:
        if session.show_camera() and session.capture():
            await session.upload()
    finally:
        await session.aclose()

    if session.screen is Screen.SUCCESS and session.last_result is not None:
        print("Photo shared:")
        print(session.last_result.model_dump_json(by_alias=True, indent=2))
        return 0
    print(session.error_message, file=sys.stderr)
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Share a photo through the Wedding Photos relay")
    parser.add_argument("source", help="Image file or directory of images to capture from")
    parser.add_argument("--relay_url", default="http://localhost:3000")
    parser.add_argument("--format", default="image/jpeg", choices=["image/jpeg", "image/png", "image/webp"])
    parser.add_argument("--quality", type=float, default=0.9)
    parser.add_argument("--max_width", type=int, default=1920)
    parser.add_argument("--max_height", type=int, default=1080)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
