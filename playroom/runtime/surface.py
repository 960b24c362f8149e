"""
Surface - The element tree an activity is mounted into.

A headless stand-in for the page container:
- Elements carry absolute rects, stacking order and CSS-like classes
- The Surface is the root; it owns the scheduler and input source that
  activities mounted into it use
- Hit-testing picks the topmost visible element under a point

Removing an element (or clearing the surface) detaches its whole subtree;
`is_attached` is how late callbacks and drags detect teardown.
"""

from __future__ import annotations
from typing import Any, Callable, Iterator, TYPE_CHECKING
import itertools

from .events import EventTarget
from .geometry import Point, Rect
from .scheduler import ManualScheduler, Scheduler

if TYPE_CHECKING:
    from .input import InputSource

_element_ids = itertools.count(1)


class Element(EventTarget):
    """
    A node in the surface tree.

    Presentation attributes (scale, classes, text) are plain data; nothing
    renders them here.
    """

    def __init__(
        self,
        tag: str = "div",
        rect: Rect | None = None,
        *,
        text: str = "",
        classes: tuple[str, ...] | list[str] = (),
        data: dict[str, Any] | None = None,
        z_index: int = 0,
    ):
        super().__init__()
        self.element_id = f"{tag}-{next(_element_ids)}"
        self.tag = tag
        self.rect = rect or Rect(0, 0, 0, 0)
        self.text = text
        self.classes: set[str] = set(classes)
        self.data: dict[str, Any] = dict(data or {})
        self.z_index = z_index
        self.scale = 1.0
        self.opacity = 1.0
        self.hidden = False
        self.pointer_events = True
        self.parent: Element | None = None
        self.children: list[Element] = []

    def __repr__(self) -> str:
        return f"<Element {self.element_id} {sorted(self.classes)}>"

    # =========================================================================
    # Tree
    # =========================================================================

    def append(self, child: Element) -> Element:
        """Append child (moving it if it already has a parent)."""
        if child is self or child in self.ancestors():
            raise ValueError("Cannot append an element to itself or its descendant")
        if child.parent is not None:
            child.parent._detach_child(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove(self):
        """Detach this element from its parent. No-op when detached."""
        if self.parent is not None:
            self.parent._detach_child(self)

    def clear(self):
        """Detach every child."""
        for child in list(self.children):
            self._detach_child(child)

    def _detach_child(self, child: Element):
        if child in self.children:
            self.children.remove(child)
        child.parent = None

    def ancestors(self) -> Iterator[Element]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def root(self) -> Element:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def surface(self) -> Surface | None:
        root = self.root
        return root if isinstance(root, Surface) else None

    @property
    def is_attached(self) -> bool:
        """True when the element is reachable from a surface."""
        return self.surface is not None

    def walk(self) -> Iterator[Element]:
        """Depth-first, document order, self included."""
        yield self
        for child in list(self.children):
            yield from child.walk()

    def find_all(
        self,
        class_name: str | None = None,
        predicate: Callable[[Element], bool] | None = None,
    ) -> list[Element]:
        found = []
        for node in self.walk():
            if node is self:
                continue
            if class_name is not None and class_name not in node.classes:
                continue
            if predicate is not None and not predicate(node):
                continue
            found.append(node)
        return found

    def find(self, class_name: str) -> Element | None:
        matches = self.find_all(class_name)
        return matches[0] if matches else None

    # =========================================================================
    # Geometry
    # =========================================================================

    def bounds(self) -> Rect:
        return self.rect

    def move_to(self, x: float, y: float):
        self.rect = self.rect.moved_to(x, y)

    def center_on(self, point: Point):
        self.rect = self.rect.centered_on(point)

    # =========================================================================
    # Classes
    # =========================================================================

    def add_class(self, *names: str):
        self.classes.update(names)

    def remove_class(self, *names: str):
        self.classes.difference_update(names)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of this element (no children)."""
        return {
            "element_id": self.element_id,
            "tag": self.tag,
            "parent_id": self.parent.element_id if self.parent else None,
            "x": self.rect.x,
            "y": self.rect.y,
            "width": self.rect.width,
            "height": self.rect.height,
            "text": self.text,
            "classes": sorted(self.classes),
            "z_index": self.z_index,
            "scale": self.scale,
            "opacity": self.opacity,
            "hidden": self.hidden,
        }


class Surface(Element):
    """
    The root of an element tree and the runtime context of its activities.

    Usage:
        surface = Surface(800, 600)
        activity.mount(surface)
        surface.input_source.tap(100, 100)
        surface.scheduler.advance(1000)
    """

    def __init__(
        self,
        width: float = 1024,
        height: float = 768,
        *,
        scheduler: Scheduler | None = None,
        input_source: InputSource | None = None,
    ):
        super().__init__("surface", Rect(0, 0, width, height))
        from .input import InputSource

        self.scheduler = scheduler or ManualScheduler()
        self.input_source = input_source or InputSource()
        self.input_source.attach(self)

    @property
    def width(self) -> float:
        return self.rect.width

    @property
    def height(self) -> float:
        return self.rect.height

    def remove(self):
        # The root cannot be detached.
        pass

    def hit_test(self, x: float, y: float) -> Element | None:
        """
        Return the topmost element containing (x, y).

        Higher z_index wins; among equals, later document order wins.
        Hidden subtrees and elements with pointer_events off are skipped.
        """
        point = Point(x, y)
        best: Element | None = None
        best_key: tuple[int, int] | None = None
        for order, node in enumerate(self._hit_candidates(self)):
            if not node.bounds().contains(point):
                continue
            key = (node.z_index, order)
            if best_key is None or key >= best_key:
                best, best_key = node, key
        return best

    def _hit_candidates(self, node: Element) -> Iterator[Element]:
        for child in node.children:
            if child.hidden:
                continue
            if child.pointer_events:
                yield child
            yield from self._hit_candidates(child)

    def snapshot_tree(self) -> list[dict[str, Any]]:
        """Flattened, document-ordered snapshots of every element."""
        return [node.snapshot() for node in self.walk() if node is not self]
