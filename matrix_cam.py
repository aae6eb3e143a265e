"""Matrix camera renderer.

Capture frames from a webcam and redraw them as green "digital rain" glyphs.
"""
from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
import enum
import logging
from logging.config import dictConfig
import math
from pathlib import Path
import select
import sys
from typing import Any, Callable, Dict, Iterator, List, Optional, TextIO, Tuple

import cv2  # type: ignore
import numpy as np
from PIL import Image, ImageDraw, ImageFont  # type: ignore

try:  # Windows-specific keyboard polling
    import msvcrt  # type: ignore
except ImportError:  # pragma: no cover - non-Windows runtimes
    msvcrt = None  # type: ignore

try:  # POSIX terminal helpers for runtime controls
    import termios
    import tty
except ImportError:  # pragma: no cover - Windows runtimes
    termios = None  # type: ignore
    tty = None  # type: ignore

ALPHABET = (
    "アイウエオカキクケコサシスセソタチツテトナニヌネノハヒフヘホマミムメモヤユヨラリルレロワヲン"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
    "譁ｭ怜遺促隕也阜縺ｮ蜈諤匁縺弱蜉ｩ縺代※縺上蜷梧悄逕"
    "0123456789"
)
LUMA_WEIGHTS = (0.299, 0.587, 0.114)
MIN_STEP = 6
STEP_COLUMNS = 80  # Target number of glyph columns across the surface
ALPHA_SATURATION = 200.0
GREEN_BOOST = 50.0
BLUE_RATIO = 0.25
CAMERA_IDEAL_SIZE = (640, 480)
INITIAL_SURFACE_SIZE = (640, 480)
MAX_DISPLAY_WIDTH = 1240
DEFAULT_FPS = 30.0
SURFACE_RETRY_INTERVAL = 0.1
CONTROL_POLL_INTERVAL = 0.01
WINDOW_NAME = "Matrix Camera"
FONT_CANDIDATES = (
    "NotoSansMonoCJKjp-Regular.otf",
    "NotoSansCJK-Regular.ttc",
    "msgothic.ttc",
    "osaka.unicode.ttf",
    "DejaVuSansMono.ttf",
    "consola.ttf",
    "cour.ttf",
)

logger = logging.getLogger("matrix_cam")


class CaptureError(RuntimeError):
    """The camera could not be opened (missing device or access denied)."""


class FrameUnavailable(RuntimeError):
    """The current camera frame cannot be read or copied yet."""


def configure_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": level,
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )


def glyph_index(brightness: float) -> int:
    value = min(255.0, max(0.0, float(brightness)))
    last = len(ALPHABET) - 1
    return min(last, max(0, int(math.floor((value / 255.0) * last))))


def select_glyph(brightness: float) -> str:
    """Map a brightness in [0, 255] to a glyph; darker pixels pick earlier glyphs."""
    return ALPHABET[glyph_index(brightness)]


def luma(r: float, g: float, b: float) -> float:
    return r * LUMA_WEIGHTS[0] + g * LUMA_WEIGHTS[1] + b * LUMA_WEIGHTS[2]


def compute_step_size(surface_width: int) -> int:
    return max(MIN_STEP, int(surface_width) // STEP_COLUMNS)


@dataclass(frozen=True)
class Sample:
    x: int
    y: int
    brightness: float


def iter_samples(data: Any, width: int, height: int, step: int) -> Iterator[Sample]:
    """Yield one luma sample per grid position of a flat RGBA buffer.

    Positions are visited row by row, ``step`` pixels apart, starting at the
    origin. Positions whose red/green/blue bytes fall past the end of ``data``
    are skipped, so a buffer shorter than ``width * height * 4`` only loses the
    cells it cannot cover.
    """
    if step <= 0:
        raise ValueError(f"Sampling step must be positive, got {step}")
    if isinstance(data, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(data, dtype=np.uint8)
    else:
        flat = np.asarray(data).reshape(-1)
    if width <= 0 or height <= 0 or flat.size == 0:
        return

    rows = np.arange(0, height, step, dtype=np.int64)
    cols = np.arange(0, width, step, dtype=np.int64)
    grid_y, grid_x = np.meshgrid(rows, cols, indexing="ij")
    offsets = (grid_y * width + grid_x) * 4
    valid = offsets + 2 < flat.size
    if not np.any(valid):
        return

    offsets = offsets[valid]
    red = flat[offsets].astype(np.float64)
    green = flat[offsets + 1].astype(np.float64)
    blue = flat[offsets + 2].astype(np.float64)
    brightness = luma(red, green, blue)

    for x, y, value in zip(grid_x[valid].tolist(), grid_y[valid].tolist(), brightness.tolist()):
        yield Sample(x, y, value)


@dataclass(frozen=True)
class CellStyle:
    glyph: str
    alpha: float
    green_intensity: float
    fill: Tuple[int, int, int, float]


def cell_style(brightness: float) -> CellStyle:
    alpha = min(1.0, brightness / ALPHA_SATURATION)
    green_intensity = min(255.0, brightness + GREEN_BOOST)
    fill = (
        0,
        int(math.floor(green_intensity)),
        int(math.floor(green_intensity * BLUE_RATIO)),
        alpha,
    )
    return CellStyle(select_glyph(brightness), alpha, green_intensity, fill)


def render_cell(draw: ImageDraw.ImageDraw, font: Any, sample: Sample, step: int) -> None:
    style = cell_style(sample.brightness)
    red, green, blue, alpha = style.fill
    draw.text(
        (sample.x + step / 2, sample.y + step / 2),
        style.glyph,
        font=font,
        fill=(red, green, blue, int(round(alpha * 255))),
        anchor="mm",
    )


_FONT_CACHE: Dict[Tuple[Optional[str], int], Any] = {}


def resolve_font(font_path: Optional[Path], font_size: int) -> Any:
    """Load a scalable monospace font, preferring faces that cover katakana."""
    size = max(1, int(font_size))
    key = (str(font_path) if font_path else None, size)
    cached = _FONT_CACHE.get(key)
    if cached is not None:
        return cached

    if font_path:
        try:
            font = ImageFont.truetype(str(font_path), size)
        except OSError as exc:
            raise RuntimeError(f"Could not load font at {font_path}: {exc}") from exc
    else:
        font = None
        for candidate in FONT_CANDIDATES:
            try:
                font = ImageFont.truetype(candidate, size)
                break
            except OSError:
                continue
        if font is None:
            font = ImageFont.load_default(size=size)

    _FONT_CACHE[key] = font
    return font


def fit_display_size(width: int, height: int, max_width: Optional[int]) -> Tuple[int, int]:
    if max_width is None or max_width <= 0 or width <= max_width:
        return width, height
    return max_width, max(1, int(round(height * max_width / width)))


class CameraSource:
    """Live OpenCV capture stream."""

    def __init__(self, capture: Any) -> None:
        self.capture = capture
        self._frame_shape: Optional[Tuple[int, ...]] = None

    @property
    def width(self) -> int:
        if self._frame_shape is not None:
            return int(self._frame_shape[1])
        if self.capture is None:
            return 0
        return int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)

    @property
    def height(self) -> int:
        if self._frame_shape is not None:
            return int(self._frame_shape[0])
        if self.capture is None:
            return 0
        return int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

    def read(self) -> np.ndarray:
        if self.capture is None:
            raise FrameUnavailable("Camera stream was released.")
        ok, frame = self.capture.read()
        if not ok or frame is None or frame.size == 0:
            raise FrameUnavailable("Camera has not produced a frame yet.")
        self._frame_shape = frame.shape
        return frame

    def release(self) -> None:
        if self.capture is not None:
            self.capture.release()
            self.capture = None
        self._frame_shape = None


def open_camera(device: int = 0, width: int = CAMERA_IDEAL_SIZE[0], height: int = CAMERA_IDEAL_SIZE[1]) -> CameraSource:
    capture = cv2.VideoCapture(device)
    if not capture.isOpened():
        capture.release()
        raise CaptureError(f"Could not open camera device {device}.")
    capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    return CameraSource(capture)


class FramePreprocessor:
    """Copy camera frames into an RGBA scratch buffer the size of the surface."""

    def preprocess(self, frame: np.ndarray, width: int, height: int) -> np.ndarray:
        if frame is None or frame.size == 0:
            raise FrameUnavailable("Empty camera frame.")
        try:
            original_height, original_width = frame.shape[:2]
            if original_width != width or original_height != height:
                interpolation = cv2.INTER_AREA if width < original_width else cv2.INTER_LINEAR
                frame = cv2.resize(frame, (width, height), interpolation=interpolation)
            if frame.ndim == 2:
                rgba = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGBA)
            elif frame.shape[2] == 4:
                rgba = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGBA)
            else:
                rgba = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
        except cv2.error as exc:
            raise FrameUnavailable(f"Frame could not be copied: {exc}") from exc
        return rgba.reshape(-1)


class MatrixSurface:
    """Black Pillow canvas that glyphs are drawn onto."""

    def __init__(
        self,
        width: int = INITIAL_SURFACE_SIZE[0],
        height: int = INITIAL_SURFACE_SIZE[1],
        presenter: Optional[Callable[["MatrixSurface"], None]] = None,
    ) -> None:
        self.image = Image.new("RGB", (max(1, width), max(1, height)), (0, 0, 0))
        self.display_size: Tuple[int, int] = self.image.size
        self.presenter = presenter

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def resize(self, width: int, height: int) -> None:
        # Replacing the pixel buffer resets it to black, like resizing a canvas.
        self.image = Image.new("RGB", (max(1, width), max(1, height)), (0, 0, 0))
        self.display_size = self.image.size

    def clear(self) -> None:
        self.image.paste((0, 0, 0), (0, 0, self.width, self.height))

    def draw_context(self) -> ImageDraw.ImageDraw:
        return ImageDraw.Draw(self.image, "RGBA")

    def is_blank(self) -> bool:
        return self.image.getbbox() is None

    def to_bgr(self) -> np.ndarray:
        return cv2.cvtColor(np.asarray(self.image), cv2.COLOR_RGB2BGR)

    def display_frame(self) -> np.ndarray:
        frame = self.to_bgr()
        display_width, display_height = self.display_size
        if (display_width, display_height) == (self.width, self.height):
            return frame
        return cv2.resize(frame, (display_width, display_height), interpolation=cv2.INTER_AREA)

    def present(self) -> None:
        if self.presenter is not None:
            self.presenter(self)


class RenderState(enum.Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"


class TickOutcome(enum.Enum):
    RENDER = "render"
    RETRY = "retry"


@dataclass
class RenderSession:
    state: RenderState = RenderState.IDLE
    step_size: int = compute_step_size(INITIAL_SURFACE_SIZE[0])
    surface_width: int = INITIAL_SURFACE_SIZE[0]
    surface_height: int = INITIAL_SURFACE_SIZE[1]
    tick_handle: Optional[asyncio.Handle] = None
    retry_handle: Optional[asyncio.Handle] = None
    source: Optional[Any] = None
    ticks: int = 0
    skipped_ticks: int = 0

    @property
    def active(self) -> bool:
        return self.state is RenderState.RUNNING


def grab_frame(
    source: Any, surface: MatrixSurface, preprocessor: FramePreprocessor
) -> Tuple[TickOutcome, Optional[np.ndarray]]:
    """Decide whether this tick can render.

    Missing dimensions or an undecodable frame yield ``RETRY`` so the loop
    tries again next tick; anything else raised here is a real failure and
    propagates.
    """
    if source is None:
        return TickOutcome.RETRY, None
    if source.width <= 0 or source.height <= 0 or surface.width <= 0 or surface.height <= 0:
        return TickOutcome.RETRY, None
    try:
        frame = source.read()
        pixels = preprocessor.preprocess(frame, surface.width, surface.height)
    except FrameUnavailable as exc:
        logger.debug("Frame not ready (%s); retrying next tick.", exc)
        return TickOutcome.RETRY, None
    return TickOutcome.RENDER, pixels


def _release_late_source(acquisition: "asyncio.Future[Any]") -> None:
    if acquisition.cancelled() or acquisition.exception() is not None:
        return
    acquisition.result().release()
    logger.debug("Released a camera that finished opening after start was cancelled.")


class MatrixRenderer:
    """Owns the render session and drives the per-frame glyph loop.

    ``start`` acquires the camera and sizes the surface once the stream
    reports its dimensions; ticks then run back to back on the event loop at
    ``fps``. ``stop`` is safe at any time, including before ``start``.
    """

    def __init__(
        self,
        surface: MatrixSurface,
        *,
        device: int = 0,
        fps: float = DEFAULT_FPS,
        max_display_width: Optional[int] = MAX_DISPLAY_WIDTH,
        font_path: Optional[Path] = None,
        source_factory: Callable[..., Any] = open_camera,
        font_loader: Callable[[Optional[Path], int], Any] = resolve_font,
        preprocessor: Optional[FramePreprocessor] = None,
        loop: Optional[Any] = None,
    ) -> None:
        self.surface = surface
        self.device = device
        self.frame_interval = 0.0 if fps <= 0 else 1.0 / fps
        self.max_display_width = max_display_width
        self.font_path = font_path
        self.session = RenderSession(
            step_size=compute_step_size(surface.width),
            surface_width=surface.width,
            surface_height=surface.height,
        )
        self._source_factory = source_factory
        self._font_loader = font_loader
        self._preprocessor = preprocessor or FramePreprocessor()
        self._loop = loop
        self._font: Any = None
        self._generation = 0
        self._next_frame_time = 0.0

    @property
    def state(self) -> RenderState:
        return self.session.state

    async def start(self) -> None:
        session = self.session
        self._cancel_pending()
        self._release_source()
        self._generation += 1
        generation = self._generation
        session.state = RenderState.STARTING
        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        width, height = CAMERA_IDEAL_SIZE
        acquisition = asyncio.ensure_future(
            asyncio.to_thread(self._source_factory, self.device, width, height)
        )
        try:
            source = await asyncio.shield(acquisition)
        except asyncio.CancelledError:
            # The worker thread cannot be interrupted; release whatever it opens.
            acquisition.add_done_callback(_release_late_source)
            if generation == self._generation:
                self._generation += 1
                session.state = RenderState.IDLE
            raise
        except Exception:
            if generation == self._generation:
                session.state = RenderState.IDLE
            raise

        if generation != self._generation:
            # Stopped or restarted while the camera was opening.
            source.release()
            return

        session.source = source
        logger.info("Camera %s opened.", self.device)
        session.retry_handle = self._loop.call_soon(self._size_surface)

    def stop(self) -> None:
        session = self.session
        self._generation += 1
        self._cancel_pending()
        was_running = session.state is not RenderState.IDLE
        session.state = RenderState.IDLE
        self._release_source()
        self.surface.clear()
        try:
            self.surface.present()
        except Exception:
            logger.exception("Could not present the cleared surface.")
        if was_running:
            logger.info("Rendering stopped after %d frames.", session.ticks)

    def _cancel_pending(self) -> None:
        session = self.session
        if session.tick_handle is not None:
            session.tick_handle.cancel()
            session.tick_handle = None
        if session.retry_handle is not None:
            session.retry_handle.cancel()
            session.retry_handle = None

    def _release_source(self) -> None:
        source = self.session.source
        self.session.source = None
        if source is None:
            return
        try:
            source.release()
        except Exception:
            logger.exception("Could not release camera %s.", self.device)

    def _size_surface(self) -> None:
        session = self.session
        session.retry_handle = None
        source = session.source
        if session.state is not RenderState.STARTING or source is None:
            return

        try:
            width, height = source.width, source.height
            if width <= 0 or height <= 0:
                logger.debug("Camera size not known yet; retrying in %.1fs.", SURFACE_RETRY_INTERVAL)
                session.retry_handle = self._loop.call_later(SURFACE_RETRY_INTERVAL, self._size_surface)
                return

            self.surface.resize(width, height)
            self.surface.display_size = fit_display_size(width, height, self.max_display_width)
            session.surface_width = width
            session.surface_height = height
            session.step_size = compute_step_size(width)
            self._font = self._font_loader(self.font_path, session.step_size)
        except Exception:
            logger.exception("Could not prepare the surface; stopping.")
            self.stop()
            return
        logger.info("Surface size: %dx%d (displayed at %dx%d)", width, height, *self.surface.display_size)
        logger.info("Glyph step: %dpx", session.step_size)

        session.state = RenderState.RUNNING
        self._next_frame_time = self._loop.time()
        self._tick()

    def _tick(self) -> None:
        session = self.session
        session.tick_handle = None
        if session.state is not RenderState.RUNNING:
            return

        try:
            outcome, pixels = grab_frame(session.source, self.surface, self._preprocessor)
            if outcome is TickOutcome.RENDER:
                self._draw(pixels)
                session.ticks += 1
            else:
                session.skipped_ticks += 1
        except Exception:
            # Anything but a missing frame ends the session; start() recovers.
            logger.exception("Render tick failed; stopping.")
            self.stop()
            return
        self._schedule_tick()

    def _draw(self, pixels: np.ndarray) -> None:
        surface = self.surface
        step = self.session.step_size
        surface.clear()
        draw = surface.draw_context()
        for sample in iter_samples(pixels, surface.width, surface.height, step):
            render_cell(draw, self._font, sample, step)
        surface.present()

    def _schedule_tick(self) -> None:
        now = self._loop.time()
        self._next_frame_time = max(self._next_frame_time + self.frame_interval, now)
        self.session.tick_handle = self._loop.call_later(self._next_frame_time - now, self._tick)


def translate_key(ch: str) -> List[str]:
    events: List[str] = []
    if not ch:
        return events
    if ch in ("q", "Q", "\x1b"):
        events.append("quit")
    elif ch in ("s", "S"):
        events.append("start")
    elif ch in ("x", "X", " "):
        events.append("stop")
    return events


class ControlPoller:
    """Read start/stop/quit keys from the console without blocking the render loop.

    Windows consoles are drained through ``msvcrt``. A POSIX terminal is put in
    cbreak mode while the poller is open and read with a zero-timeout
    ``select``. Without an interactive console the poller reports no events.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = sys.stdin if stream is None else stream
        self.fd: Optional[int] = None
        self.saved_attrs: Optional[List[Any]] = None
        if msvcrt is not None:
            self.mode = "windows"
        elif termios is not None and tty is not None and self.stream.isatty():
            self.mode = "posix"
            self.fd = self.stream.fileno()
            self.saved_attrs = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        else:
            self.mode = "none"

    def __enter__(self) -> "ControlPoller":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self.saved_attrs is None:
            return
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self.saved_attrs)
        self.saved_attrs = None

    def poll(self) -> List[str]:
        events: List[str] = []
        for ch in self._pending_keys():
            events.extend(translate_key(ch))
        return events

    def _pending_keys(self) -> Iterator[str]:
        if self.mode == "windows":
            while msvcrt.kbhit():
                key = msvcrt.getch()
                if key in (b"\x00", b"\xe0"):
                    # Arrow and function keys: prefix byte then a scan code.
                    msvcrt.getch()
                    continue
                yield key.decode("latin1", errors="ignore")
        elif self.mode == "posix":
            while select.select([self.stream], [], [], 0)[0]:
                ch = self.stream.read(1)
                if not ch:
                    return
                yield ch


async def start_renderer(renderer: MatrixRenderer) -> bool:
    try:
        await renderer.start()
    except CaptureError as exc:
        print(
            "Camera access failed. Check your camera connection and permissions.\n"
            f"Error: {exc}",
            file=sys.stderr,
        )
        return False
    return True


async def run_session(
    renderer: MatrixRenderer,
    poll_events: Callable[[], List[str]],
    autostart: bool = True,
) -> int:
    """Feed control events to the renderer until a quit event arrives."""
    try:
        if autostart:
            await start_renderer(renderer)
        while True:
            for event in poll_events():
                if event == "quit":
                    return 0
                if event == "start":
                    # Start stays disabled until the renderer is idle again.
                    if renderer.state is RenderState.IDLE:
                        await start_renderer(renderer)
                elif event == "stop":
                    renderer.stop()
            await asyncio.sleep(CONTROL_POLL_INTERVAL)
    finally:
        renderer.stop()


class WindowViewer:
    """OpenCV window that shows the surface and reports key presses."""

    def __init__(self, name: str = WINDOW_NAME) -> None:
        self.name = name
        self.closed = False
        cv2.namedWindow(self.name, cv2.WINDOW_AUTOSIZE)

    def show(self, surface: MatrixSurface) -> None:
        if not self.closed:
            cv2.imshow(self.name, surface.display_frame())

    def poll(self) -> List[str]:
        if self.closed:
            return ["quit"]
        key = cv2.waitKey(1)
        if cv2.getWindowProperty(self.name, cv2.WND_PROP_VISIBLE) < 1:
            # Closing the window tears the session down like quitting.
            self.closed = True
            return ["quit"]
        if key < 0:
            return []
        return translate_key(chr(key & 0xFF))

    def close(self) -> None:
        self.closed = True
        cv2.destroyWindow(self.name)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--device",
        type=int,
        default=0,
        help="Zero-based camera index passed to OpenCV (default: 0, the built-in camera).",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=DEFAULT_FPS,
        help=f"Redraw rate in frames per second (<=0 redraws as fast as possible, default: {DEFAULT_FPS:g}).",
    )
    parser.add_argument(
        "--font-path",
        type=Path,
        default=None,
        help="Optional path to a TTF/OTF font (monospace with katakana strongly recommended).",
    )
    parser.add_argument(
        "--no-autostart",
        action="store_true",
        help="Wait for the start key instead of opening the camera immediately.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging verbosity (default: INFO).",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show the webcam feed as matrix-style digital rain in a window."
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--max-display-width",
        type=int,
        default=MAX_DISPLAY_WIDTH,
        help=f"Scale the window down when the camera is wider than this (default: {MAX_DISPLAY_WIDTH}).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.font_path:
        try:
            resolve_font(args.font_path, MIN_STEP)
        except RuntimeError as exc:
            print(exc, file=sys.stderr)
            return 1

    viewer = WindowViewer()
    surface = MatrixSurface(presenter=viewer.show)
    renderer = MatrixRenderer(
        surface,
        device=args.device,
        fps=args.fps,
        max_display_width=args.max_display_width,
        font_path=args.font_path,
    )

    viewer.show(surface)
    print("Controls: s start | x or space stop | q or Esc quit", file=sys.stderr)

    try:
        return asyncio.run(run_session(renderer, viewer.poll, autostart=not args.no_autostart))
    except KeyboardInterrupt:
        return 0
    finally:
        viewer.close()


if __name__ == "__main__":
    raise SystemExit(main())
