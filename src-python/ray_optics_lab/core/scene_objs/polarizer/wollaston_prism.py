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

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core import jones as jones_calc
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2
    from ... import jones as jones_calc

if TYPE_CHECKING:
    from ...ray import Ray, Hit

# Polarization axes of the two exit beams
ORDINARY_AXIS = 0.0
EXTRAORDINARY_AXIS = math.pi / 2


class WollastonPrism(PolygonObjMixin, BaseSceneObj):
    """
    Wollaston prism: a birefringent block that routes the two orthogonal
    linear polarizations onto different paths.

    A ray entering through either end face leaves the far end face with its
    lateral offset kept, split into

        ordinary ray:       polarized at 0,    turned by -separation/2
        extraordinary ray:  polarized at pi/2, turned by +separation/2

    Each branch carries the intensity of the matching Jones projection; an
    unpolarized ray is split in half. Side walls are not intersected.
    """

    type = 'WollastonPrism'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 60.0,
        'height': 40.0,
        'separation_angle_deg': 15.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Length', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 5},
        'height': {'label': 'Aperture', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 5},
        'separation_angle_deg': {'label': 'Separation (deg)', 'type': 'number', 'min': 1.0, 'max': 45.0, 'step': 1},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    def _update_geometry(self) -> None:
        self._update_polygon_geometry()
        self.axis: Vector2 = Vector2.from_angle(self.angle_rad)

    def split_fractions(self, ray: 'Ray') -> Tuple[float, float]:
        """(ordinary, extraordinary) fractions of the ray's intensity."""
        if not ray.ensure_jones_vector():
            return 0.5, 0.5
        total = ray.jones_intensity
        if total < 1e-12:
            return 0.5, 0.5
        o = jones_calc.intensity(jones_calc.polarizer(ORDINARY_AXIS) @ ray.jones)
        e = jones_calc.intensity(jones_calc.polarizer(EXTRAORDINARY_AXIS) @ ray.jones)
        return o / total, e / total

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        hits = self.intersect_polygon(origin, direction, entering_only=True)
        if hits and abs(hits[0].extra['outward_normal'].dot(self.axis)) < 0.5:
            return []
        return hits

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        forward = self.axis if ray.direction.dot(self.axis) >= 0 else -self.axis
        lateral = forward.perpendicular()
        offset = (hit.point - self.pos).dot(lateral)
        exit_point = self.pos + forward * (self.width / 2.0) + lateral * offset

        half_sep = math.radians(self.separation_angle_deg) / 2.0
        o_frac, e_frac = self.split_fractions(ray)
        heading = ray.direction.angle()
        ray.terminate('split')

        outputs = self.transmit_ray(ray, hit, ray.intensity * o_frac,
                                    direction=Vector2.from_angle(heading - half_sep),
                                    origin=exit_point, jones=jones_calc.linear(ORDINARY_AXIS),
                                    interaction_type='split')
        outputs += self.transmit_ray(ray, hit, ray.intensity * e_frac,
                                     direction=Vector2.from_angle(heading + half_sep),
                                     origin=exit_point, jones=jones_calc.linear(EXTRAORDINARY_AXIS),
                                     interaction_type='split')
        return outputs


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    prism = WollastonPrism(Scene())
    ray = Ray(Vector2(-100, 0), Vector2(1, 0), polarization=math.pi / 4)
    hit = prism.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    for out in prism.interact(ray, hit):
        print(out, out.polarization)
