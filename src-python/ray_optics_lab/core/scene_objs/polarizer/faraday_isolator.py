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

# Index of the Faraday medium between the two polarizers
ISOLATOR_MEDIUM_INDEX = 1.5

FARADAY_ROTATION = math.pi / 4


class FaradayIsolator(PolygonObjMixin, BaseSceneObj):
    """
    Optical isolator: input polarizer, 45 degree Faraday rotator and output
    polarizer at 45 degrees, folded into one rectangular body.

    The forward direction is the object's angle. Every face crossing applies
    the part of the stack that belongs to it:

        forward entry:   polarizer at angle, then rotate +45 degrees
        forward exit:    polarizer at angle + 45 degrees
        backward entry:  polarizer at angle + 45 degrees
        backward exit:   rotate +45 degrees, then polarizer at angle

    The rotation has the same sense in both directions, so backward light
    arrives at the input polarizer crossed with it and is blocked.
    Unpolarized light entering loses half its intensity and is polarized
    along the first polarizer it meets.

    Attributes:
        width (float): Length along the forward direction.
        height (float): Aperture across it.
    """

    type = 'FaradayIsolator'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 80.0,
        'height': 30.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Length', 'type': 'number', 'min': 40.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Aperture', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    def _update_geometry(self) -> None:
        self._update_polygon_geometry()
        self.forward: Vector2 = Vector2.from_angle(self.angle_rad)

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        entering = ray.direction.dot(hit.extra['outward_normal']) < -EDGE_DETECTION_THRESHOLD
        forward = ray.direction.dot(self.forward) > 0

        input_axis = self.angle_rad
        output_axis = self.angle_rad + FARADAY_ROTATION
        rotator = jones_calc.rotation(FARADAY_ROTATION)

        polarized = ray.ensure_jones_vector()
        intensity = ray.intensity
        if entering:
            first_axis = input_axis if forward else output_axis
            if polarized:
                field = jones_calc.polarizer(first_axis) @ ray.jones
            else:
                intensity *= 0.5
                field = jones_calc.linear(first_axis)
            if forward:
                field = rotator @ field
        elif polarized:
            if forward:
                field = jones_calc.polarizer(output_axis) @ ray.jones
            else:
                field = jones_calc.polarizer(input_axis) @ (rotator @ ray.jones)
        else:
            field = None

        if field is not None and polarized:
            total = ray.jones_intensity
            intensity *= jones_calc.intensity(field) / total if total > 1e-12 else 0.0

        if not self.keeps(intensity, ray):
            ray.terminate('blocked_isolator')
            return []

        ray.terminate('transmitted')
        jones = jones_calc.normalized(field) if field is not None else None
        medium = ISOLATOR_MEDIUM_INDEX if entering else N_AIR
        return self.transmit_ray(ray, hit, intensity, jones=jones,
                                 medium_refractive_index=medium)


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    isolator = FaradayIsolator(Scene())
    for start, direction in ((Vector2(-100, 0), Vector2(1, 0)), (Vector2(100, 0), Vector2(-1, 0))):
        ray = Ray(start, direction)
        while ray is not None:
            hits = isolator.intersect(ray.origin, ray.direction)
            if not hits:
                print(f"  leaves with I={ray.intensity:.4f}")
                break
            ray.advance_to(hits[0].point)
            outputs = isolator.interact(ray, hits[0])
            print(f"  {ray.termination_reason}")
            ray = outputs[0] if outputs else None
