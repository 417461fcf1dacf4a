"""Geometry of a connection: end points, Bezier control points and bounds."""

from __future__ import annotations

import math
from bisect import bisect_left
from dataclasses import dataclass, field

from nodeflow.data import PortType

_DEFAULT_OFFSET = 200.0
_ARC_SAMPLES = 512


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y)


@dataclass(frozen=True)
class Rect:
    """A rectangle from (left, top) to (right, bottom); may be inverted."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def bottom_right(self) -> Point:
        return Point(self.right, self.bottom)

    @property
    def is_null(self) -> bool:
        return self.width == 0 and self.height == 0

    def normalized(self) -> Rect:
        """Same rectangle with non-negative width and height."""
        return Rect(
            min(self.left, self.right),
            min(self.top, self.bottom),
            max(self.left, self.right),
            max(self.top, self.bottom),
        )

    def united(self, other: Rect) -> Rect:
        """Smallest rectangle holding both; a null rectangle contributes nothing."""
        if self.is_null:
            return other
        if other.is_null:
            return self
        a, b = self.normalized(), other.normalized()
        return Rect(
            min(a.left, b.left),
            min(a.top, b.top),
            max(a.right, b.right),
            max(a.bottom, b.bottom),
        )


def _bezier(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    u = 1.0 - t
    a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
    return Point(
        a * p0.x + b * p1.x + c * p2.x + d * p3.x,
        a * p0.y + b * p1.y + c * p2.y + d * p3.y,
    )


def _segment_distance(p: Point, a: Point, b: Point) -> float:
    dx, dy = b.x - a.x, b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(p.x - a.x, p.y - a.y)
    t = max(0.0, min(1.0, ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq))
    return math.hypot(p.x - (a.x + t * dx), p.y - (a.y + t * dy))


@dataclass
class ConnectionGeometry:
    """End points of a connection drawn as a cubic curve from source to sink.

    The source is the output end, the sink the input end.
    """

    source: Point = field(default_factory=Point)
    sink: Point = field(default_factory=Point)
    line_width: float = 3.0
    hovered: bool = False

    def end_point(self, port_type: PortType) -> Point:
        if port_type is PortType.NONE:
            raise ValueError("a connection has no end point for PortType.NONE")
        return self.source if port_type is PortType.OUT else self.sink

    def set_end_point(self, port_type: PortType, point: Point) -> None:
        if port_type is PortType.OUT:
            self.source = point
        elif port_type is PortType.IN:
            self.sink = point

    def move_end_point(self, port_type: PortType, offset: Point) -> None:
        if port_type is PortType.OUT:
            self.source = self.source + offset
        elif port_type is PortType.IN:
            self.sink = self.sink + offset

    def points_c1c2(self) -> tuple[Point, Point]:
        """The two control points of the connection curve."""
        x_distance = self.sink.x - self.source.x
        horizontal = min(_DEFAULT_OFFSET, abs(x_distance))
        vertical = 0.0
        ratio_x = 0.5
        if x_distance <= 0:
            y_distance = self.sink.y - self.source.y + 20
            direction = -1.0 if y_distance < 0 else 1.0
            vertical = min(_DEFAULT_OFFSET, abs(y_distance)) * direction
            ratio_x = 1.0
        horizontal *= ratio_x
        c1 = Point(self.source.x + horizontal, self.source.y + vertical)
        c2 = Point(self.sink.x - horizontal, self.sink.y - vertical)
        return c1, c2

    def bounding_rect(self, point_diameter: float = 10.0) -> Rect:
        """Area covering the curve, its control points and the end markers."""
        c1, c2 = self.points_c1c2()
        basic = Rect(self.source.x, self.source.y, self.sink.x, self.sink.y).normalized()
        controls = Rect(c1.x, c1.y, c2.x, c2.y).normalized()
        common = basic.united(controls)
        corner = Point(point_diameter, point_diameter)
        top_left = common.top_left - corner
        bottom_right = common.bottom_right + 2 * corner
        return Rect(top_left.x, top_left.y, bottom_right.x, bottom_right.y)

    def _curve_point(self, t: float) -> Point:
        c1, c2 = self.points_c1c2()
        return _bezier(self.source, c1, c2, self.sink, t)

    def point_at_percent(self, ratio: float) -> Point:
        """Point lying the given fraction of the curve's length from the source."""
        if not 0.0 <= ratio <= 1.0:
            raise ValueError(f"ratio must be between 0 and 1, got {ratio}")
        if ratio == 0.0:
            return self.source
        if ratio == 1.0:
            return self.sink
        c1, c2 = self.points_c1c2()
        ts = [i / _ARC_SAMPLES for i in range(_ARC_SAMPLES + 1)]
        samples = [_bezier(self.source, c1, c2, self.sink, t) for t in ts]
        lengths = [0.0]
        for prev, cur in zip(samples, samples[1:]):
            lengths.append(lengths[-1] + math.hypot(cur.x - prev.x, cur.y - prev.y))
        total = lengths[-1]
        if total == 0.0:
            return self.source
        target = ratio * total
        idx = max(1, bisect_left(lengths, target))
        span = lengths[idx] - lengths[idx - 1]
        frac = 0.0 if span == 0 else (target - lengths[idx - 1]) / span
        t = ts[idx - 1] + frac * (ts[idx] - ts[idx - 1])
        return _bezier(self.source, c1, c2, self.sink, t)

    def polyline(self, segments: int = 20) -> list[Point]:
        """The curve flattened into ``segments`` straight pieces."""
        if segments < 1:
            raise ValueError("segments must be positive")
        return [self.source] + [
            self.point_at_percent((i + 1) / segments) for i in range(segments)
        ]

    def gradient_segments(self, segments: int = 60) -> list[tuple[Point, Point, bool]]:
        """Pieces for a two-coloured line: (start, end, drawn in the input colour)."""
        if segments < 1:
            raise ValueError("segments must be positive")
        half = segments // 2
        return [
            (
                self.point_at_percent(i / segments),
                self.point_at_percent((i + 1) / segments),
                i >= half,
            )
            for i in range(segments)
        ]

    def hit_test(self, point: Point, width: float = 10.0) -> bool:
        """Whether ``point`` lies within a stroke of ``width`` along the curve."""
        line = self.polyline()
        radius = width / 2.0
        return any(_segment_distance(point, a, b) <= radius for a, b in zip(line, line[1:]))