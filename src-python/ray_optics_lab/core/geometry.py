"""
Copyright 2026 ray-optics-lab authors and contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple
from shapely.geometry import Point as ShapelyPoint, LineString, Polygon

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from constants import MIN_RAY_SEGMENT_LENGTH, EDGE_DETECTION_THRESHOLD
else:
    from .constants import MIN_RAY_SEGMENT_LENGTH, EDGE_DETECTION_THRESHOLD


class Vector2:
    """
    An immutable 2D vector, used both for points and for directions.

    Can be converted to/from Shapely Point objects.
    """

    __slots__ = ('_x', '_y')

    def __init__(self, x: float, y: float):
        self._x = float(x)
        self._y = float(y)

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    # ==================== Arithmetic ====================

    def __add__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self._x + other.x, self._y + other.y)

    def __sub__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self._x - other.x, self._y - other.y)

    def __mul__(self, scalar: float) -> 'Vector2':
        return Vector2(self._x * scalar, self._y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> 'Vector2':
        return Vector2(self._x / scalar, self._y / scalar)

    def __neg__(self) -> 'Vector2':
        return Vector2(-self._x, -self._y)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector2):
            return NotImplemented
        return self._x == other.x and self._y == other.y

    def __hash__(self) -> int:
        return hash((self._x, self._y))

    def __iter__(self):
        yield self._x
        yield self._y

    def __repr__(self) -> str:
        return f"Vector2(x={self._x}, y={self._y})"

    # ==================== Products and norms ====================

    def dot(self, other: 'Vector2') -> float:
        return self._x * other.x + self._y * other.y

    def cross(self, other: 'Vector2') -> float:
        """Z component of the 3D cross product."""
        return self._x * other.y - self._y * other.x

    def magnitude_squared(self) -> float:
        return self._x * self._x + self._y * self._y

    def magnitude(self) -> float:
        return math.hypot(self._x, self._y)

    def normalize(self) -> 'Vector2':
        """Unit vector in the same direction; the zero vector stays zero."""
        mag = self.magnitude()
        if mag < 1e-12 or not math.isfinite(mag):
            return Vector2(0.0, 0.0)
        return Vector2(self._x / mag, self._y / mag)

    def distance_to(self, other: 'Vector2') -> float:
        return math.hypot(self._x - other.x, self._y - other.y)

    def distance_squared_to(self, other: 'Vector2') -> float:
        dx = self._x - other.x
        dy = self._y - other.y
        return dx * dx + dy * dy

    # ==================== Rotation ====================

    def rotate(self, angle: float) -> 'Vector2':
        """Rotate counter-clockwise by `angle` radians."""
        c = math.cos(angle)
        s = math.sin(angle)
        return Vector2(self._x * c - self._y * s, self._x * s + self._y * c)

    def perpendicular(self) -> 'Vector2':
        """The vector rotated by +90 degrees."""
        return Vector2(-self._y, self._x)

    def angle(self) -> float:
        return math.atan2(self._y, self._x)

    def is_finite(self) -> bool:
        return math.isfinite(self._x) and math.isfinite(self._y)

    def is_close(self, other: 'Vector2', tol: float = 1e-9) -> bool:
        return abs(self._x - other.x) <= tol and abs(self._y - other.y) <= tol

    # ==================== Constructors and conversion ====================

    @classmethod
    def from_angle(cls, angle: float) -> 'Vector2':
        """Unit vector pointing at `angle` radians."""
        return cls(math.cos(angle), math.sin(angle))

    @staticmethod
    def lerp(a: 'Vector2', b: 'Vector2', t: float) -> 'Vector2':
        return Vector2(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)

    def to_shapely(self) -> ShapelyPoint:
        """Convert to Shapely Point."""
        return ShapelyPoint(self._x, self._y)

    @classmethod
    def from_shapely(cls, sp: ShapelyPoint) -> 'Vector2':
        """Create Vector2 from Shapely Point."""
        return cls(sp.x, sp.y)

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary representation."""
        return {'x': self._x, 'y': self._y}

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> 'Vector2':
        return cls(d['x'], d['y'])


class Geometry:
    """
    Intersection and reflection helpers shared by the optical components.

    All ray tests take a ray as (origin, unit direction) and return the
    parametric distance along the ray. Only forward hits beyond
    MIN_RAY_SEGMENT_LENGTH are reported.
    """

    @staticmethod
    def reflect(direction: Vector2, normal: Vector2) -> Vector2:
        """
        Law of reflection r = d - 2(d.n)n, renormalized.

        Args:
            direction: Incident direction (unit).
            normal: Surface normal (unit, either orientation).
        """
        d_dot_n = direction.dot(normal)
        return (direction - normal * (2.0 * d_dot_n)).normalize()

    @staticmethod
    def oppose(normal: Vector2, direction: Vector2) -> Vector2:
        """Return `normal` flipped if necessary so that it opposes `direction`."""
        if direction.dot(normal) > 0:
            return -normal
        return normal

    @staticmethod
    def ray_segment_intersection(
        origin: Vector2,
        direction: Vector2,
        p1: Vector2,
        p2: Vector2
    ) -> Optional[Tuple[float, float]]:
        """
        Intersect a ray with the segment p1-p2.

        Returns:
            (t, s) with t the distance along the ray and s in [0, 1] the
            position along the segment, or None if there is no forward hit.
        """
        v1 = origin - p1
        v2 = p2 - p1
        if v2.magnitude_squared() < EDGE_DETECTION_THRESHOLD:
            return None
        v3 = Vector2(-direction.y, direction.x)
        denom = v2.dot(v3)
        if abs(denom) < EDGE_DETECTION_THRESHOLD:
            return None
        t1 = v2.cross(v1) / denom
        t2 = v1.dot(v3) / denom
        if t1 > MIN_RAY_SEGMENT_LENGTH and -MIN_RAY_SEGMENT_LENGTH <= t2 <= 1.0 + MIN_RAY_SEGMENT_LENGTH:
            return t1, t2
        return None

    @staticmethod
    def ray_line_intersection(
        origin: Vector2,
        direction: Vector2,
        point_on_line: Vector2,
        line_normal: Vector2
    ) -> Optional[float]:
        """Forward distance to an infinite line given by a point and its normal."""
        denom = direction.dot(line_normal)
        if abs(denom) < EDGE_DETECTION_THRESHOLD:
            return None
        t = (point_on_line - origin).dot(line_normal) / denom
        if t > MIN_RAY_SEGMENT_LENGTH:
            return t
        return None

    @staticmethod
    def ray_circle_intersections(
        origin: Vector2,
        direction: Vector2,
        center: Vector2,
        radius: float
    ) -> List[float]:
        """Forward distances (ascending) at which the ray crosses the circle."""
        oc = origin - center
        b = oc.dot(direction)
        c = oc.magnitude_squared() - radius * radius
        disc = b * b - c
        if disc < 0:
            return []
        sqrt_disc = math.sqrt(disc)
        return sorted(t for t in (-b - sqrt_disc, -b + sqrt_disc) if t > MIN_RAY_SEGMENT_LENGTH)

    @staticmethod
    def solve_quadratic(a: float, b: float, c: float) -> List[float]:
        """Real roots of a t^2 + b t + c = 0, degrading to the linear case when a ~ 0."""
        if abs(a) < 1e-12:
            if abs(b) < 1e-12:
                return []
            return [-c / b]
        disc = b * b - 4.0 * a * c
        if disc < 0:
            return []
        sqrt_disc = math.sqrt(disc)
        return [(-b - sqrt_disc) / (2.0 * a), (-b + sqrt_disc) / (2.0 * a)]

    @staticmethod
    def polygon(vertices: Sequence[Vector2]) -> Polygon:
        """Shapely polygon through the given vertices."""
        return Polygon([(v.x, v.y) for v in vertices])

    @staticmethod
    def segment(p1: Vector2, p2: Vector2) -> LineString:
        """Shapely segment between two points."""
        return LineString([(p1.x, p1.y), (p2.x, p2.y)])

    @staticmethod
    def signed_area(vertices: Sequence[Vector2]) -> float:
        """Shoelace area, positive for counter-clockwise vertex order."""
        area = 0.0
        n = len(vertices)
        for i in range(n):
            a = vertices[i]
            b = vertices[(i + 1) % n]
            area += a.x * b.y - b.x * a.y
        return 0.5 * area


geometry = Geometry()


if __name__ == "__main__":
    v = Vector2(3, 4)
    print(f"{v} |v|={v.magnitude()} normalized={v.normalize()}")
    print(f"rotate 90deg: {Vector2(1, 0).rotate(math.pi / 2)}")
    hit = geometry.ray_segment_intersection(
        Vector2(0, 0), Vector2(1, 0), Vector2(10, -5), Vector2(10, 5)
    )
    print(f"segment hit (t, s): {hit}")
    print(f"circle hits: {geometry.ray_circle_intersections(Vector2(-10, 0), Vector2(1, 0), Vector2(0, 0), 5)}")
