"""Matrix camera filter exposed through a virtual camera device."""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, List, Optional

import cv2  # type: ignore
import numpy as np
import pyvirtualcam  # type: ignore

import matrix_cam

CAMERA_IDEAL_SIZE = matrix_cam.CAMERA_IDEAL_SIZE


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Expose the matrix-rain filtered webcam via a virtual camera device."
    )
    matrix_cam.add_common_arguments(parser)
    parser.add_argument(
        "--output-width",
        type=int,
        default=None,
        help=f"Width in pixels for the virtual camera stream (default: {CAMERA_IDEAL_SIZE[0]}).",
    )
    parser.add_argument(
        "--output-height",
        type=int,
        default=None,
        help=f"Height in pixels for the virtual camera stream (default: {CAMERA_IDEAL_SIZE[1]}).",
    )
    parser.add_argument(
        "--mirror",
        action="store_true",
        help="Mirror the output horizontally (useful for self-view).",
    )
    return parser.parse_args(argv)


class VirtualCamPresenter:
    """Send every presented surface to a virtual camera at its fixed size."""

    def __init__(self, camera: Any, mirror: bool = False) -> None:
        self.camera = camera
        self.mirror = mirror
        self.frames_sent = 0

    def __call__(self, surface: matrix_cam.MatrixSurface) -> None:
        frame_bgr = surface.to_bgr()
        if self.mirror:
            frame_bgr = cv2.flip(frame_bgr, 1)
        if frame_bgr.shape[1] != self.camera.width or frame_bgr.shape[0] != self.camera.height:
            frame_bgr = cv2.resize(
                frame_bgr,
                (self.camera.width, self.camera.height),
                interpolation=cv2.INTER_NEAREST,
            )
        self.camera.send(np.ascontiguousarray(frame_bgr))
        self.frames_sent += 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    matrix_cam.configure_logging(args.log_level)

    if args.font_path:
        try:
            matrix_cam.resolve_font(args.font_path, matrix_cam.MIN_STEP)
        except RuntimeError as exc:
            print(exc, file=sys.stderr)
            return 1

    cam_width = args.output_width or CAMERA_IDEAL_SIZE[0]
    cam_height = args.output_height or CAMERA_IDEAL_SIZE[1]

    try:
        virtual_cam_ctx = pyvirtualcam.Camera(
            width=cam_width,
            height=cam_height,
            fps=max(1, int(args.fps if args.fps > 0 else matrix_cam.DEFAULT_FPS)),
            fmt=pyvirtualcam.PixelFormat.BGR,
        )
    except RuntimeError as exc:
        print(
            "\nUnable to start a virtual camera.\n"
            "pyvirtualcam could not find a working backend.\n"
            "Make sure a virtual camera driver is installed (OBS Studio 26+\n"
            "with the Virtual Camera component, or another driver listed in\n"
            "the pyvirtualcam documentation). After installation, restart\n"
            "your machine and rerun this script.",
            file=sys.stderr,
        )
        print(f"\nBackend error:\n{exc}\n", file=sys.stderr)
        return 1

    try:
        with virtual_cam_ctx as virtual_cam, matrix_cam.ControlPoller() as controls:
            print(
                f"Virtual camera started: {virtual_cam.device}.\n"
                "Select this camera in your video conferencing software."
            )
            if controls.mode == "none":
                print("Controls: Ctrl+C to quit (start/stop keys unavailable on this terminal).", file=sys.stderr)
            else:
                print("Controls: s start | x or space stop | q quit", file=sys.stderr)

            surface = matrix_cam.MatrixSurface(presenter=VirtualCamPresenter(virtual_cam, args.mirror))
            renderer = matrix_cam.MatrixRenderer(
                surface,
                device=args.device,
                fps=args.fps,
                max_display_width=None,
                font_path=args.font_path,
            )
            return asyncio.run(
                matrix_cam.run_session(renderer, controls.poll, autostart=not args.no_autostart)
            )
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
