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

from typing import List, Optional, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.geometry import Vector2, geometry
    from ray_optics_lab.core.ray import Hit
else:
    from ..geometry import Vector2, geometry
    from ..ray import Hit

if TYPE_CHECKING:
    from shapely.geometry import LineString


class LineObjMixin:
    """
    Mixin for components whose optical surface is a single line segment
    centred on the object's position.

    The segment runs along `angle_deg` (so a component at 0 degrees is
    horizontal, one at 90 degrees is vertical). Derived geometry:

        p1, p2: Segment end points.
        along: Unit vector from p1 to p2.
        surface_normal: `along` rotated by +90 degrees (the optical axis
            of lenses and plates).
    """

    def segment_length(self) -> float:
        """The segment length; components override when it is named differently."""
        return self.length

    def _update_line_geometry(self) -> None:
        self.along: Vector2 = Vector2.from_angle(self.angle_rad)
        half = self.along * (self.segment_length() / 2.0)
        self.p1: Vector2 = self.pos - half
        self.p2: Vector2 = self.pos + half
        self.surface_normal: Vector2 = self.along.perpendicular()

    def _update_geometry(self) -> None:
        self._update_line_geometry()

    def intersect_segment(self, origin: Vector2, direction: Vector2,
                          surface_id: str = 'surface') -> List[Hit]:
        """
        Intersect the ray with the segment.

        In the child class, this can be called from the `intersect` method.

        Returns:
            A single Hit (normal opposing the ray, `extra['segment_param']` in
            [0, 1]) or an empty list.
        """
        result = geometry.ray_segment_intersection(origin, direction, self.p1, self.p2)
        if result is None:
            return []
        t, s = result
        point = origin + direction * t
        normal = geometry.oppose(self.surface_normal, direction)
        return [Hit(t, point, normal, surface_id, {'segment_param': s})]

    def signed_offset(self, point: Vector2) -> float:
        """Signed distance of `point` from the centre, measured along the segment."""
        return (point - self.pos).dot(self.along)

    def get_shape(self) -> Optional['LineString']:
        return geometry.segment(self.p1, self.p2)
