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

from typing import Any, Dict, List, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.line_obj_mixin import LineObjMixin
    from ray_optics_lab.core.scene_objs.mirror.mirror import MIRROR_REFLECTIVITY
    from ray_optics_lab.core.geometry import Vector2
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from .mirror import MIRROR_REFLECTIVITY
    from ...geometry import Vector2

if TYPE_CHECKING:
    from ...ray import Ray, Hit

# Smallest allowed ring width (outer - inner radius)
MIN_RING_WIDTH = 5.0


class RingMirror(LineObjMixin, BaseSceneObj):
    """
    Flat mirror with a central hole, seen edge-on.

    Rays within `inner_radius` of the centre pass the hole undeviated; the
    rest of the segment (out to `outer_radius`) reflects like `Mirror`.
    Used as a pick-off that separates an annular beam from its core.
    """

    type = 'RingMirror'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'outer_radius': 50.0,
        'inner_radius': 20.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'outer_radius': {'label': 'Outer radius', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'inner_radius': {'label': 'Hole radius', 'type': 'number', 'min': 0.0, 'max': 1e6, 'step': 1},
    }

    def segment_length(self) -> float:
        return 2.0 * self.outer_radius

    def _update_geometry(self) -> None:
        if self.inner_radius > self.outer_radius - MIN_RING_WIDTH:
            raise ValueError("hole radius leaves no mirror surface")
        self._update_line_geometry()

    def in_hole(self, point: Vector2) -> bool:
        return abs(self.signed_offset(point)) < self.inner_radius

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction, 'ring')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        if self.in_hole(hit.point):
            ray.terminate('passed_through_hole')
            return self.transmit_ray(ray, hit, ray.intensity)
        intensity = ray.intensity if ray.ignore_decay else ray.intensity * MIRROR_REFLECTIVITY
        ray.terminate('ring_reflected')
        return self.reflect_ray(ray, hit, intensity)
