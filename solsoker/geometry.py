"""Ternary weight selector.

Maps a pixel position inside an equilateral triangle to the (sun, temp, wind)
weight triple and back. Vertex A is pure sunshine (top), B pure temperature
(bottom-left) and C pure wind (bottom-right). Mouse, touch and pen input all
reach the selector as :class:`PointerEvent` values, so nothing here depends on
a UI toolkit.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .entities import TrianglePoint, WeightTriple

Barycentric = Tuple[float, float, float]

# Boundary points may come out a few ulps negative.
EPSILON = 1e-12


@dataclass(frozen=True)
class Triangle:
    width: float = 260.0
    height: float = 230.0
    radius: float = 110.0

    @property
    def center(self) -> TrianglePoint:
        return TrianglePoint(self.width / 2, self.height / 2 + 20)

    @property
    def sun_vertex(self) -> TrianglePoint:
        c = self.center
        return TrianglePoint(c.x, c.y - self.radius)

    @property
    def temp_vertex(self) -> TrianglePoint:
        c = self.center
        return TrianglePoint(
            c.x - self.radius * math.cos(math.pi / 6),
            c.y + self.radius * math.sin(math.pi / 6),
        )

    @property
    def wind_vertex(self) -> TrianglePoint:
        c = self.center
        return TrianglePoint(
            c.x + self.radius * math.cos(math.pi / 6),
            c.y + self.radius * math.sin(math.pi / 6),
        )

    @property
    def vertices(self) -> Tuple[TrianglePoint, TrianglePoint, TrianglePoint]:
        return self.sun_vertex, self.temp_vertex, self.wind_vertex

    @property
    def edges(self) -> Tuple[Tuple[TrianglePoint, TrianglePoint], ...]:
        a, b, c = self.vertices
        return ((a, b), (b, c), (a, c))


DEFAULT_TRIANGLE = Triangle()


def signed_area(p: TrianglePoint, q: TrianglePoint, r: TrianglePoint) -> float:
    return ((q.x - p.x) * (r.y - p.y) - (q.y - p.y) * (r.x - p.x)) / 2


def barycentric(point: TrianglePoint, triangle: Triangle = DEFAULT_TRIANGLE) -> Barycentric:
    """Return the signed-area weights of ``point``; negative outside the triangle."""
    a, b, c = triangle.vertices
    total = signed_area(a, b, c)
    return (
        signed_area(point, b, c) / total,
        signed_area(a, point, c) / total,
        signed_area(a, b, point) / total,
    )


def contains(point: TrianglePoint, triangle: Triangle = DEFAULT_TRIANGLE) -> bool:
    return min(barycentric(point, triangle)) >= -EPSILON


def project_to_segment(point: TrianglePoint, start: TrianglePoint, end: TrianglePoint) -> TrianglePoint:
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return start
    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    if t <= 0:
        return start
    if t >= 1:
        return end
    return TrianglePoint(start.x + t * dx, start.y + t * dy)


def constrain_to_triangle(point: TrianglePoint, triangle: Triangle = DEFAULT_TRIANGLE) -> TrianglePoint:
    """Return ``point`` when inside, else its closest projection onto an edge segment."""
    if contains(point, triangle):
        return point
    closest = point
    best_distance = math.inf
    for start, end in triangle.edges:
        projected = project_to_segment(point, start, end)
        distance = math.hypot(point.x - projected.x, point.y - projected.y)
        if distance < best_distance:
            best_distance = distance
            closest = projected
    return closest


def point_to_weights(
    point: TrianglePoint,
    previous: WeightTriple,
    triangle: Triangle = DEFAULT_TRIANGLE,
) -> WeightTriple:
    """Normalized weights for a constrained point; ``previous`` when degenerate."""
    w_sun, w_temp, w_wind = (max(w, 0.0) for w in barycentric(point, triangle))
    total = w_sun + w_temp + w_wind
    if total <= 0:
        return previous
    return WeightTriple(sun=w_sun / total, temp=w_temp / total, wind=w_wind / total)


def weights_to_point(weights: WeightTriple, triangle: Triangle = DEFAULT_TRIANGLE) -> TrianglePoint:
    normalized = weights.normalized()
    a, b, c = triangle.vertices
    return TrianglePoint(
        normalized.sun * a.x + normalized.temp * b.x + normalized.wind * c.x,
        normalized.sun * a.y + normalized.temp * b.y + normalized.wind * c.y,
    )


class PointerKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position in client coordinates."""

    kind: PointerKind
    x: float = 0.0
    y: float = 0.0


class WeightSelector:
    """Drag state machine over the weight triangle.

    ``down`` starts a drag and applies the contact point at once, ``move`` is
    only applied while dragging, ``up`` and ``leave`` end the drag and keep the
    last weights.
    """

    def __init__(
        self,
        triangle: Triangle = DEFAULT_TRIANGLE,
        weights: WeightTriple = WeightTriple(sun=0.7, temp=0.3, wind=0.0),
        origin: Tuple[float, float] = (0.0, 0.0),
    ) -> None:
        self.triangle = triangle
        self.origin = origin
        self._weights = weights.normalized()
        self._position = weights_to_point(self._weights, triangle)
        self._dragging = False

    @property
    def weights(self) -> WeightTriple:
        return self._weights

    @property
    def position(self) -> TrianglePoint:
        return self._position

    @property
    def dragging(self) -> bool:
        return self._dragging

    def set_weights(self, weights: WeightTriple) -> WeightTriple:
        self._weights = weights.normalized()
        self._position = weights_to_point(self._weights, self.triangle)
        return self._weights

    def handle(self, event: PointerEvent) -> WeightTriple:
        if event.kind is PointerKind.DOWN:
            self._dragging = True
            self._apply(event)
        elif event.kind is PointerKind.MOVE:
            if self._dragging:
                self._apply(event)
        else:
            self._dragging = False
        return self._weights

    def _apply(self, event: PointerEvent) -> None:
        local = TrianglePoint(event.x - self.origin[0], event.y - self.origin[1])
        self._position = constrain_to_triangle(local, self.triangle)
        self._weights = point_to_weights(self._position, self._weights, self.triangle)


__all__ = [
    "Triangle",
    "DEFAULT_TRIANGLE",
    "signed_area",
    "barycentric",
    "contains",
    "project_to_segment",
    "constrain_to_triangle",
    "point_to_weights",
    "weights_to_point",
    "PointerKind",
    "PointerEvent",
    "WeightSelector",
]
