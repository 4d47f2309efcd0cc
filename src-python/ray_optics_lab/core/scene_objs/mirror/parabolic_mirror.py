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

from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from shapely.geometry import LineString

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.geometry import Vector2, geometry
    from ray_optics_lab.core.ray import Hit
    from ray_optics_lab.core.constants import MIN_RAY_SEGMENT_LENGTH
else:
    from ..base_scene_obj import BaseSceneObj
    from ...geometry import Vector2, geometry
    from ...ray import Hit
    from ...constants import MIN_RAY_SEGMENT_LENGTH

if TYPE_CHECKING:
    from ...ray import Ray

CURVE_SAMPLES = 64


class ParabolicMirror(BaseSceneObj):
    """
    Parabolic mirror of a given focal length and aperture.

    In the local frame (x along `angle_deg`, y along `angle_deg + 90`) the
    vertex sits at the position and the surface is y = x^2 / (4f) for
    |x| <= diameter / 2, so the focus is at vertex + y_axis * f. A ray
    (o + t d) is intersected by solving the quadratic

        (dx^2 / 4f) t^2 + (2 ox dx / 4f - dy) t + (ox^2 / 4f - oy) = 0.

    Attributes:
        focal_length (float): Focal length (> 0).
        diameter (float): Aperture across the axis.
    """

    type = 'ParabolicMirror'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'focal_length': 100.0,
        'diameter': 100.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'focal_length': {'label': 'Focal length', 'type': 'number', 'min': 0.1, 'max': 1e7, 'step': 1},
        'diameter': {'label': 'Diameter', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
    }

    def _update_geometry(self) -> None:
        self.x_axis: Vector2 = Vector2.from_angle(self.angle_rad)
        self.y_axis: Vector2 = self.x_axis.perpendicular()
        self.focus: Vector2 = self.pos + self.y_axis * self.focal_length

    def to_world(self, x: float, y: float) -> Vector2:
        return self.pos + self.x_axis * x + self.y_axis * y

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'focus_x': ('Focus X', self.focus.x),
            'focus_y': ('Focus Y', self.focus.y),
            'depth': ('Depth', (self.diameter / 2.0) ** 2 / (4.0 * self.focal_length)),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List[Hit]:
        rel = origin - self.pos
        ox, oy = rel.dot(self.x_axis), rel.dot(self.y_axis)
        dx, dy = direction.dot(self.x_axis), direction.dot(self.y_axis)
        k = 1.0 / (4.0 * self.focal_length)

        best: Optional[float] = None
        for t in geometry.solve_quadratic(k * dx * dx, 2.0 * k * ox * dx - dy, k * ox * ox - oy):
            if t <= MIN_RAY_SEGMENT_LENGTH:
                continue
            if abs(ox + t * dx) > self.diameter / 2.0 + 1e-9:
                continue
            if best is None or t < best:
                best = t
        if best is None:
            return []

        x = ox + best * dx
        # Gradient of y - x^2/4f
        normal = (self.x_axis * (-2.0 * k * x) + self.y_axis).normalize()
        point = origin + direction * best
        return [Hit(best, point, geometry.oppose(normal, direction), 'parabola')]

    def interact(self, ray: 'Ray', hit: Hit) -> List['Ray']:
        ray.terminate('reflected')
        return self.reflect_ray(ray, hit, ray.intensity)

    def get_shape(self) -> LineString:
        half = self.diameter / 2.0
        points = []
        for i in range(CURVE_SAMPLES + 1):
            x = -half + 2.0 * half * i / CURVE_SAMPLES
            p = self.to_world(x, x * x / (4.0 * self.focal_length))
            points.append((p.x, p.y))
        return LineString(points)
