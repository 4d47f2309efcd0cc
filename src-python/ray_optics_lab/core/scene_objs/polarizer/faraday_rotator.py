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
    from ray_optics_lab.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.constants import EDGE_DETECTION_THRESHOLD, N_AIR
    from ray_optics_lab.core import jones as jones_calc
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2
    from ...constants import EDGE_DETECTION_THRESHOLD, N_AIR
    from ... import jones as jones_calc

if TYPE_CHECKING:
    from ...ray import Ray, Hit

ROTATOR_MEDIUM_INDEX = 1.5


class FaradayRotator(PolygonObjMixin, BaseSceneObj):
    """
    Faraday rotator: a lossless block that rotates the polarization plane by
    a fixed angle when the ray leaves it.

    The rotation is non-reciprocal: it has the same sense in the scene frame
    whichever way the ray travels, so a double pass rotates by twice the
    angle instead of cancelling. Unpolarized light is unaffected.
    """

    type = 'FaradayRotator'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 40.0,
        'height': 25.0,
        'rotation_angle_deg': 45.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Length', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Aperture', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'rotation_angle_deg': {'label': 'Rotation (deg)', 'type': 'number', 'min': -360.0, 'max': 360.0, 'step': 1},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        ray.terminate('transmitted')
        if ray.direction.dot(hit.extra['outward_normal']) < -EDGE_DETECTION_THRESHOLD:
            return self.transmit_ray(ray, hit, ray.intensity,
                                     medium_refractive_index=ROTATOR_MEDIUM_INDEX)

        if not ray.ensure_jones_vector():
            return self.transmit_ray(ray, hit, ray.intensity, medium_refractive_index=N_AIR)
        rotated = jones_calc.rotation(math.radians(self.rotation_angle_deg)) @ ray.jones
        return self.transmit_ray(ray, hit, ray.intensity, jones=rotated,
                                 medium_refractive_index=N_AIR)
