import numpy as np
import pytest
from PIL import ImageFont

import matrix_cam


class FakeHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Records scheduled callbacks so tests decide when each one fires."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def time(self):
        return self.now

    def call_soon(self, callback, *args):
        return self.call_later(0.0, callback, *args)

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, lambda: callback(*args))
        self.handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def run_next(self):
        handle = min(self.pending(), key=lambda h: h.when)
        self.now = max(self.now, handle.when)
        handle.fired = True
        handle.callback()
        return handle


class FakeSource:
    def __init__(self, frame=None, width=None, height=None):
        self.frame = frame
        if frame is not None:
            height = frame.shape[0] if height is None else height
            width = frame.shape[1] if width is None else width
        self.width = width or 0
        self.height = height or 0
        self.reads = 0
        self.released = False

    def read(self):
        self.reads += 1
        if self.frame is None:
            raise matrix_cam.FrameUnavailable("no frame decoded yet")
        return self.frame

    def release(self):
        self.released = True


def solid_frame(width, height, bgr=(255, 255, 255)):
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :] = bgr
    return frame


def default_font(font_path, size):
    return ImageFont.load_default(size=size)


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def surface():
    return matrix_cam.MatrixSurface()


@pytest.fixture
def make_renderer(fake_loop, surface):
    def factory(*sources, **kwargs):
        queue = list(sources)

        def source_factory(device, width, height):
            source = queue.pop(0)
            if isinstance(source, Exception):
                raise source
            return source

        kwargs.setdefault("loop", fake_loop)
        kwargs.setdefault("font_loader", default_font)
        return matrix_cam.MatrixRenderer(surface, source_factory=source_factory, **kwargs)

    return factory
