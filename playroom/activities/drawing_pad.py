"""
Drawing Pad - Free drawing with a colour palette and a rainbow pencil.

Strokes are kept as point lists in canvas coordinates; nothing is
rasterised here. The canvas listens for pointer events through the
activity scope and captures the drawing pointer, so a stroke follows the
finger until it is lifted or leaves the canvas. One finger draws at a
time.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..runtime.events import EventKind, PointerEvent
from ..runtime.geometry import Point, Rect
from ..runtime.surface import Element, Surface
from ..services import CueKind
from .base import Activity

CANVAS_WIDTH = 700
CANVAS_HEIGHT = 400
BACKGROUND = "#ffffff"
LINE_WIDTH = 15
RAINBOW_STEP = 2
CLEAR_BURST = 15
SAVE_BURST = 30
BUTTON_SIZE = 60
BUTTON_GAP = 15

RAINBOW = "rainbow"
SAVE = "save"
CLEAR = "clear"


@dataclass(frozen=True)
class PaletteColor:
    color: str
    label: str


PALETTE = (
    PaletteColor("#ff0000", "Red"),
    PaletteColor("#00ff00", "Green"),
    PaletteColor("#0000ff", "Blue"),
    PaletteColor("#ffff00", "Yellow"),
    PaletteColor("#ff00ff", "Purple"),
)


@dataclass
class Stroke:
    color: str
    width: float
    points: list[Point] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": self.color,
            "width": self.width,
            "points": [(p.x, p.y) for p in self.points],
        }


class DrawingPad(Activity):
    activity_id = "drawing_pad"
    name = "Drawing Pad"
    icon = "🎨"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.canvas: Element | None = None
        self.buttons: dict[str, Element] = {}
        self.strokes: list[Stroke] = []
        self.saved: list[dict[str, Any]] = []
        self.current_color = PALETTE[0].color
        self.rainbow = False
        self.hue = 0
        self.pointer_id: int | None = None
        self._stroke: Stroke | None = None
        self._last: Point | None = None

    @property
    def is_drawing(self) -> bool:
        return self.pointer_id is not None

    def build(self, surface: Surface):
        self.strokes = []
        self.buttons = {}
        self.rainbow = False
        self.hue = 0
        self.pointer_id = None
        self._stroke = None
        self._last = None

        self.canvas = surface.append(Element(
            "canvas",
            Rect((surface.width - CANVAS_WIDTH) / 2, 80, CANVAS_WIDTH, CANVAS_HEIGHT),
            classes=["drawing-canvas"],
            data={"background": BACKGROUND},
        ))
        self.on(self.canvas, EventKind.POINTER_DOWN, self.start_drawing)
        self.on(self.canvas, EventKind.POINTER_MOVE, self.draw)
        self.on(self.canvas, EventKind.POINTER_UP, self.stop_drawing)
        self.on(self.canvas, EventKind.POINTER_CANCEL, self.stop_drawing)

        controls = [(c.color, c.label, "", ["color-btn"]) for c in PALETTE]
        controls += [
            (RAINBOW, "Rainbow pencil", "🌈", ["color-btn", "rainbow-btn"]),
            (SAVE, "Save drawing", "📷", ["color-btn", "camera-btn"]),
            (CLEAR, "Clear drawing", "🗑️", ["clear-btn"]),
        ]
        row_width = len(controls) * BUTTON_SIZE + (len(controls) - 1) * BUTTON_GAP
        left = (surface.width - row_width) / 2
        top = self.canvas.rect.bottom + 30
        for i, (key, label, text, classes) in enumerate(controls):
            button = surface.append(Element(
                "button",
                Rect(left + i * (BUTTON_SIZE + BUTTON_GAP), top, BUTTON_SIZE, BUTTON_SIZE),
                text=text,
                classes=classes,
                data={"key": key, "label": label},
            ))
            self.buttons[key] = button
            self.on(button, EventKind.POINTER_DOWN, lambda event, key=key: self.press(key))

        self.select_color(PALETTE[0].color)

    def teardown(self):
        self._end_stroke()
        self.canvas = None
        self.buttons = {}

    # =========================================================================
    # Controls
    # =========================================================================

    def press(self, key: str):
        if key == RAINBOW:
            self.toggle_rainbow()
        elif key == SAVE:
            self.save_drawing()
        elif key == CLEAR:
            self.clear()
        else:
            self.select_color(key)

    def select_color(self, color: str):
        self.rainbow = False
        self.current_color = color
        self._set_active(self.buttons.get(color))
        self.audio.play_cue(CueKind.POP)

    def toggle_rainbow(self):
        self.rainbow = not self.rainbow
        self._set_active(self.buttons.get(RAINBOW) if self.rainbow else None)
        self.audio.play_cue(CueKind.POP)

    def clear(self):
        self._end_stroke()
        self.strokes = []
        self.audio.play_cue(CueKind.POP)
        self._burst_on_canvas(CLEAR_BURST)

    def save_drawing(self) -> dict[str, Any]:
        drawing = self.drawing()
        self.saved.append(drawing)
        self.audio.play_cue(CueKind.SUCCESS)
        self._burst_on_canvas(SAVE_BURST)
        return drawing

    def drawing(self) -> dict[str, Any]:
        return {
            "width": CANVAS_WIDTH,
            "height": CANVAS_HEIGHT,
            "background": BACKGROUND,
            "strokes": [stroke.to_dict() for stroke in self.strokes],
        }

    # =========================================================================
    # Pointer handlers
    # =========================================================================

    def start_drawing(self, event: PointerEvent):
        if self.pointer_id is not None or self.canvas is None:
            return
        event.prevent_default()
        self.pointer_id = event.pointer_id
        self.surface.input_source.set_pointer_capture(event.pointer_id, self.canvas)

        point = self._to_canvas(event)
        self._stroke = Stroke(color=self._pen_color(), width=LINE_WIDTH, points=[point])
        self.strokes.append(self._stroke)
        self._last = point
        self.audio.play_cue(CueKind.POP)

    def draw(self, event: PointerEvent):
        if event.pointer_id != self.pointer_id or self.canvas is None:
            return
        if not self.canvas.bounds().contains(Point(event.x, event.y)):
            self._end_stroke()
            return

        point = self._to_canvas(event)
        if self.rainbow:
            self.hue = (self.hue + RAINBOW_STEP) % 360
            self._stroke = Stroke(color=self._pen_color(), width=LINE_WIDTH, points=[self._last, point])
            self.strokes.append(self._stroke)
        else:
            self._stroke.points.append(point)
        self._last = point

    def stop_drawing(self, event: PointerEvent):
        if event.pointer_id != self.pointer_id:
            return
        self._end_stroke()

    # =========================================================================
    # Internals
    # =========================================================================

    def _end_stroke(self):
        if self.pointer_id is not None and self.surface is not None:
            self.surface.input_source.release_pointer_capture(self.pointer_id)
        self.pointer_id = None
        self._stroke = None
        self._last = None

    def _pen_color(self) -> str:
        if self.rainbow:
            return f"hsl({self.hue}, 100%, 50%)"
        return self.current_color

    def _to_canvas(self, event: PointerEvent) -> Point:
        rect = self.canvas.bounds()
        return Point(event.x - rect.x, event.y - rect.y)

    def _set_active(self, button: Element | None):
        for other in self.buttons.values():
            other.remove_class("active")
        if button is not None:
            button.add_class("active")

    def _burst_on_canvas(self, count: int):
        if self.canvas is None:
            return
        center = self.canvas.bounds().center
        self.effects.burst(center.x, center.y, count)
