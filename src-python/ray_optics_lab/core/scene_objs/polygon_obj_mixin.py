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

from typing import List, Optional, Sequence, Tuple

from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.geometry import Vector2, geometry
    from ray_optics_lab.core.ray import Hit
else:
    from ..geometry import Vector2, geometry
    from ..ray import Hit


class PolygonObjMixin:
    """
    Mixin for components with a polygonal body (blocks, prisms, modulators,
    isolators, cavities).

    Subclasses implement `get_local_vertices()`, the corners relative to the
    position before rotation. The world polygon is built with Shapely and
    oriented counter-clockwise, so for every edge p1 -> p2 the outward
    normal is (edge.y, -edge.x).

    Derived geometry:
        vertices: World-space corners, counter-clockwise.
        edges: List of (p1, p2, outward_normal).
        body: Shapely Polygon of the body.
    """

    def get_local_vertices(self) -> Sequence[Vector2]:
        raise NotImplementedError

    def _update_polygon_geometry(self) -> None:
        rotation = self.angle_rad
        world = [self.pos + v.rotate(rotation) for v in self.get_local_vertices()]
        body = orient(geometry.polygon(world), sign=1.0)
        if body.is_empty or body.area <= 0:
            raise ValueError(f"degenerate polygon for {self.get_display_name()}")
        self.body: Polygon = body
        self.vertices: List[Vector2] = [Vector2(x, y) for x, y in list(body.exterior.coords)[:-1]]

        self.edges: List[Tuple[Vector2, Vector2, Vector2]] = []
        n = len(self.vertices)
        for i in range(n):
            p1 = self.vertices[i]
            p2 = self.vertices[(i + 1) % n]
            edge = p2 - p1
            outward = Vector2(edge.y, -edge.x).normalize()
            self.edges.append((p1, p2, outward))

    def _update_geometry(self) -> None:
        self._update_polygon_geometry()

    def intersect_polygon(self, origin: Vector2, direction: Vector2,
                          entering_only: bool = False) -> List[Hit]:
        """
        Closest forward crossing of the polygon boundary.

        Args:
            entering_only: Only consider faces the ray enters through.

        Returns:
            A single Hit whose `surface_id` is the edge index, with
            `extra['outward_normal']` and `extra['entering']`, or an empty list.
        """
        best: Optional[Hit] = None
        for index, (p1, p2, outward) in enumerate(self.edges):
            entering = direction.dot(outward) < -1e-9
            if entering_only and not entering:
                continue
            result = geometry.ray_segment_intersection(origin, direction, p1, p2)
            if result is None:
                continue
            t, s = result
            if best is None or t < best.distance:
                point = origin + direction * t
                normal = geometry.oppose(outward, direction)
                best = Hit(t, point, normal, index, {
                    'outward_normal': outward,
                    'entering': entering,
                    'segment_param': s,
                })
        return [best] if best is not None else []

    def contains_point(self, point: Vector2) -> bool:
        """Whether `point` lies inside or on the boundary of the body."""
        return self.body.covers(point.to_shapely())

    def get_shape(self) -> Polygon:
        return self.body
