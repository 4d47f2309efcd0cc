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

import numpy as np

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


class WavePlate(LineObjMixin, BaseSceneObj):
    """
    Lossless linear retarder with a fast axis in the scene frame.

    Subclasses set `retardance`. Unpolarized light passes through unchanged;
    a polarized ray has its Jones vector multiplied by R(phi) M R(-phi).
    """

    is_optical = True
    retardance: float = 0.0

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'length': 80.0,
        'fast_axis_deg': 0.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Length', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'fast_axis_deg': {'label': 'Fast axis (deg)', 'type': 'number', 'min': -360.0, 'max': 360.0, 'step': 1},
    }

    def jones_matrix(self) -> np.ndarray:
        return jones_calc.retarder(math.radians(self.fast_axis_deg), self.retardance)

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        ray.terminate('transmitted')
        if not ray.ensure_jones_vector():
            return self.transmit_ray(ray, hit, ray.intensity)
        return self.transmit_ray(ray, hit, ray.intensity, jones=self.jones_matrix() @ ray.jones)


class HalfWavePlate(WavePlate):
    """
    Half-wave plate: rotates a linear input at theta to 2 phi - theta and
    flips the handedness of circular light.
    """

    type = 'HalfWavePlate'
    retardance = math.pi


class QuarterWavePlate(WavePlate):
    """Quarter-wave plate: linear at 45 degrees to the fast axis becomes circular."""

    type = 'QuarterWavePlate'
    retardance = math.pi / 2


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    qwp = QuarterWavePlate(Scene(), fast_axis_deg=45.0)
    ray = Ray(Vector2(-50, 0), Vector2(1, 0), polarization=0.0)
    hit = qwp.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    out = qwp.interact(ray, hit)[0]
    print(out, out.polarization)
