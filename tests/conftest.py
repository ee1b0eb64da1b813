from contextlib import contextmanager

import pytest

from reveal_app.scheduler import FrameScheduler
from reveal_app.surface import DrawingSurface, FontSpec

# Every glyph advances by half the font size.
ADVANCE_RATIO = 0.5


class RecordingSurface(DrawingSurface):
    """
    In-memory surface: fixed-advance text metrics and a log of draw calls.

    ops entries:
      ("clear",)
      ("rect", x, y, w, h)
      ("text", text, x, y, alpha)
      ("circle", x, y, radius, color)
    """

    def __init__(self, width=800.0, height=400.0, pixel_ratio=1.0, ready=True):
        self._width = width
        self._height = height
        self._pixel_ratio = pixel_ratio
        self._ready = ready
        self._font = FontSpec(size_px=20)
        self._alpha = 1.0
        self._stack = []
        self.in_frame = False
        self.frames = 0
        self.ops = []

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def pixel_ratio(self):
        return self._pixel_ratio

    def is_ready(self):
        return self._ready

    def resize(self, width, height, pixel_ratio=1.0):
        self._width = max(1.0, float(width))
        self._height = max(1.0, float(height))
        self._pixel_ratio = max(1.0, float(pixel_ratio))

    @contextmanager
    def frame(self):
        self.ops = []
        self.in_frame = True
        try:
            yield self
        finally:
            self.in_frame = False
            self.frames += 1

    def save(self):
        self._stack.append((self._font, self._alpha))

    def restore(self):
        self._font, self._alpha = self._stack.pop()

    def set_font(self, font):
        self._font = font

    def measure_text(self, text):
        return len(text) * self._font.size_px * ADVANCE_RATIO

    def set_fill_gradient(self, x0, y0, x1, y1, stops):
        pass

    def set_alpha(self, alpha):
        self._alpha = alpha

    def fill_rect(self, x, y, w, h):
        self.ops.append(("rect", x, y, w, h))

    def fill_text(self, text, x, y):
        assert self.in_frame
        self.ops.append(("text", text, x, y, self._alpha))

    def fill_circle(self, x, y, radius, color):
        assert self.in_frame
        self.ops.append(("circle", x, y, radius, color))

    def clear(self):
        self.ops.append(("clear",))

    # helpers
    def texts(self):
        return [op for op in self.ops if op[0] == "text"]

    def circles(self):
        return [op for op in self.ops if op[0] == "circle"]


class ManualScheduler(FrameScheduler):
    """Frame scheduler fired by hand from tests."""

    def __init__(self):
        self._callback = None
        self._handle = None
        self._next = 0
        self.scheduled = 0
        self.cancelled = 0

    @property
    def pending(self):
        return self._handle is not None

    def schedule(self, callback):
        if self._handle is not None:
            raise RuntimeError("A frame is already scheduled")
        self._next += 1
        self._handle = self._next
        self._callback = callback
        self.scheduled += 1
        return self._handle

    def cancel(self, handle):
        if handle == self._handle:
            self._handle = None
            self._callback = None
            self.cancelled += 1

    def fire(self, now):
        callback = self._callback
        assert callback is not None, "no frame scheduled"
        self._handle = None
        self._callback = None
        callback(now)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FixedRandom:
    """random.Random stand-in that always returns the same value."""

    def __init__(self, value=0.5):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clock():
    return FakeClock()
