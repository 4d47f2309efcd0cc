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
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

from shapely.geometry import LineString

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.geometry import Vector2, geometry
    from ray_optics_lab.core.ray import Hit
else:
    from ..base_scene_obj import BaseSceneObj
    from ...geometry import Vector2, geometry
    from ...ray import Hit

if TYPE_CHECKING:
    from ...ray import Ray

# Chord length used when the radius is 0 (plane mirror)
PLANE_LENGTH = 100.0
ARC_SAMPLES = 64


class SphericalMirror(BaseSceneObj):
    """
    Circular-arc mirror.

    The position is the arc vertex. The mirror axis points along
    `angle_deg + 90` and the centre of curvature lies at vertex + axis * R,
    so a positive radius is concave towards the axis and a negative one is
    convex. The arc spans `central_angle_deg` around the axis. A radius of 0
    gives a plane mirror of length 100 across the axis.

    Reflection is lossless, with a phase of pi.

    Attributes:
        radius (float): Signed radius of curvature (0 = plane).
        central_angle_deg (float): Angular span of the arc, in (0, 360].
    """

    type = 'SphericalMirror'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'radius': 200.0,
        'central_angle_deg': 90.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'radius': {'label': 'Radius of curvature', 'type': 'number', 'min': -1e7, 'max': 1e7, 'step': 1},
        'central_angle_deg': {'label': 'Central angle (deg)', 'type': 'number', 'min': 0.001, 'max': 360.0, 'step': 1},
    }

    @property
    def is_plane(self) -> bool:
        return self.radius == 0

    def _update_geometry(self) -> None:
        self.axis: Vector2 = Vector2.from_angle(self.angle_rad + math.pi / 2)
        self.half_angle: float = math.radians(self.central_angle_deg) / 2.0
        if self.is_plane:
            half = Vector2.from_angle(self.angle_rad) * (PLANE_LENGTH / 2.0)
            self.center = None
            self.arc_p1: Vector2 = self.pos - half
            self.arc_p2: Vector2 = self.pos + half
        else:
            self.center = self.pos + self.axis * self.radius
            # Vector from the centre to the vertex, rotated to each arc end
            to_vertex = self.axis * (-self.radius)
            self.arc_p1 = self.center + to_vertex.rotate(-self.half_angle)
            self.arc_p2 = self.center + to_vertex.rotate(self.half_angle)

    @property
    def focal_length(self) -> float:
        if self.is_plane:
            return math.inf
        return self.radius / 2.0

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {'focal_length': ('Focal length', self.focal_length)}

    def _on_arc(self, point: Vector2) -> bool:
        to_point = (point - self.center).normalize()
        to_vertex = (self.pos - self.center).normalize()
        cos_angle = max(-1.0, min(1.0, to_point.dot(to_vertex)))
        return math.acos(cos_angle) <= self.half_angle + 1e-9

    def intersect(self, origin: Vector2, direction: Vector2) -> List[Hit]:
        if self.is_plane:
            result = geometry.ray_segment_intersection(origin, direction, self.arc_p1, self.arc_p2)
            if result is None:
                return []
            t, s = result
            normal = geometry.oppose(self.axis, direction)
            return [Hit(t, origin + direction * t, normal, 'plane', {'segment_param': s})]

        radius = abs(self.radius)
        for t in geometry.ray_circle_intersections(origin, direction, self.center, radius):
            point = origin + direction * t
            if self._on_arc(point):
                normal = geometry.oppose((point - self.center) / radius, direction)
                return [Hit(t, point, normal, 'arc')]
        return []

    def interact(self, ray: 'Ray', hit: Hit) -> List['Ray']:
        ray.terminate('reflected')
        return self.reflect_ray(ray, hit, ray.intensity)

    def get_shape(self) -> LineString:
        if self.is_plane:
            return geometry.segment(self.arc_p1, self.arc_p2)
        to_vertex = self.axis * (-self.radius)
        points = []
        for i in range(ARC_SAMPLES + 1):
            a = -self.half_angle + 2.0 * self.half_angle * i / ARC_SAMPLES
            p = self.center + to_vertex.rotate(a)
            points.append((p.x, p.y))
        return LineString(points)
