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

from typing import Any, Dict, List, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.line_obj_mixin import LineObjMixin
    from ray_optics_lab.core.geometry import Vector2
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from ...geometry import Vector2

if TYPE_CHECKING:
    from ...ray import Ray, Hit


class Aperture(LineObjMixin, BaseSceneObj):
    """
    Opaque screen with one or more equally spaced slits.

    The slit centres are spaced by `slit_separation` and centred on the
    object's position. Rays hitting the screen between slits are absorbed;
    rays passing through a slit continue undeviated with their beam
    diameter clipped to the slit width.
    """

    type = 'Aperture'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'length': 150.0,
        'slit_count': 1,
        'slit_width': 10.0,
        'slit_separation': 20.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Total width', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'slit_count': {'label': 'Number of slits', 'type': 'int', 'min': 1, 'max': 100, 'step': 1},
        'slit_width': {'label': 'Slit width', 'type': 'number', 'min': 0.01, 'max': 1e6, 'step': 0.1},
        'slit_separation': {'label': 'Slit separation', 'type': 'number', 'min': 0.01, 'max': 1e6, 'step': 0.1},
    }

    def _update_geometry(self) -> None:
        if self.slit_count > 1 and self.slit_separation < self.slit_width:
            raise ValueError("slit separation is smaller than the slit width")
        first = -(self.slit_count - 1) * self.slit_separation / 2.0
        self.openings: List[Tuple[float, float]] = []
        for i in range(self.slit_count):
            center = first + i * self.slit_separation
            self.openings.append((center - self.slit_width / 2.0, center + self.slit_width / 2.0))
        if self.openings[0][0] < -self.length / 2.0 - 1e-9 or self.openings[-1][1] > self.length / 2.0 + 1e-9:
            raise ValueError("slits do not fit within the aperture length")
        self._update_line_geometry()

    def opening_index(self, point: Vector2) -> int:
        """Index of the slit containing `point`, or -1 if it is on the screen."""
        offset = self.signed_offset(point)
        for index, (low, high) in enumerate(self.openings):
            if low <= offset <= high:
                return index
        return -1

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        open_width = self.slit_count * self.slit_width
        return {'open_fraction': ('Open fraction', open_width / self.length)}

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        if self.opening_index(hit.point) < 0:
            ray.terminate('absorbed_aperture')
            return []
        ray.terminate('transmitted')
        return self.transmit_ray(ray, hit, ray.intensity,
                                 beam_diameter=min(ray.beam_diameter, self.slit_width))
