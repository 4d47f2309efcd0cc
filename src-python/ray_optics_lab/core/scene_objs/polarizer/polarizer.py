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
from typing import Any, Dict, List, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.line_obj_mixin import LineObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core import jones as jones_calc
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from ...geometry import Vector2
    from ... import jones as jones_calc

if TYPE_CHECKING:
    from ...ray import Ray, Hit


class Polarizer(LineObjMixin, BaseSceneObj):
    """
    Ideal linear polarizer (Malus's law).

    An unpolarized ray loses half its intensity and leaves linearly
    polarized along the transmission axis. A polarized ray is projected
    onto the axis and its intensity scaled by |J'|^2 / |J|^2, which is
    cos^2 of the angle between the axis and a linear input.

    Attributes:
        length (float): Length of the element.
        transmission_axis_deg (float): Transmission axis in the scene frame (degrees).
    """

    type = 'Polarizer'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'length': 100.0,
        'transmission_axis_deg': 0.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Length', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'transmission_axis_deg': {'label': 'Transmission axis (deg)', 'type': 'number', 'min': -360.0, 'max': 360.0, 'step': 1},
    }

    @property
    def transmission_axis(self) -> float:
        return math.radians(self.transmission_axis_deg)

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        axis = self.transmission_axis
        ray.terminate('polarized')
        if not ray.ensure_jones_vector():
            return self.transmit_ray(ray, hit, ray.intensity * 0.5, jones=jones_calc.linear(axis))

        projected = jones_calc.polarizer(axis) @ ray.jones
        if ray.jones_intensity < 1e-12:
            return []
        scale = jones_calc.intensity(projected) / ray.jones_intensity
        out = jones_calc.normalized(projected)
        if out is None:
            return []
        return self.transmit_ray(ray, hit, ray.intensity * scale, jones=out)


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    pol = Polarizer(Scene(), transmission_axis_deg=90.0)
    ray = Ray(Vector2(-50, 0), Vector2(1, 0), polarization=math.radians(30))
    hit = pol.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    print(pol.interact(ray, hit))
