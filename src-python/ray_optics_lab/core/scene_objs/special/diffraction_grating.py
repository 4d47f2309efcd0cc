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
    from ray_optics_lab.core.scene_objs.line_obj_mixin import LineObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.constants import PIXELS_PER_MICROMETER, PIXELS_PER_NANOMETER
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from ...geometry import Vector2
    from ...constants import PIXELS_PER_MICROMETER, PIXELS_PER_NANOMETER

if TYPE_CHECKING:
    from ...ray import Ray, Hit

# Power fraction sent into each order |m|
ORDER_EFFICIENCIES = {0: 0.60, 1: 0.15, 2: 0.05}


class DiffractionGrating(LineObjMixin, BaseSceneObj):
    """
    Transmission grating.

    With the tangential sine measured along the grating line, each order
    follows the grating equation

        sin(theta_m) = sin(theta_i) + m * lambda / d

    for m in [-max_order, max_order]. Orders with |sin(theta_m)| > 1 are
    evanescent and not emitted. Order efficiencies are 60% (0th), 15% (+-1)
    and 5% (+-2); higher orders carry nothing.

    Attributes:
        length (float): Length of the ruled area.
        period_um (float): Groove period in micrometers.
        max_order (int): Highest order considered.
    """

    type = 'DiffractionGrating'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'length': 100.0,
        'period_um': 1.0,
        'max_order': 2,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Length', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'period_um': {'label': 'Period (um)', 'type': 'number', 'min': 0.01, 'max': 1000.0, 'step': 0.1},
        'max_order': {'label': 'Max order', 'type': 'int', 'min': 0, 'max': 10, 'step': 1},
    }

    @property
    def period(self) -> float:
        """Groove period in scene units."""
        return self.period_um * PIXELS_PER_MICROMETER

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {'lines_per_mm': ('Lines per mm', 1000.0 / self.period_um)}

    def order_directions(self, direction: Vector2, wavelength_nm: float) -> List[Tuple[int, Vector2]]:
        """(m, direction) of every propagating order for an incident direction."""
        forward = self.surface_normal if direction.dot(self.surface_normal) >= 0 else -self.surface_normal
        sin_i = direction.dot(self.along)
        step = wavelength_nm * PIXELS_PER_NANOMETER / self.period
        orders = []
        for m in range(-self.max_order, self.max_order + 1):
            sin_m = sin_i + m * step
            if abs(sin_m) > 1.0 + 1e-9:
                continue
            sin_m = max(-1.0, min(1.0, sin_m))
            cos_m = math.sqrt(1.0 - sin_m * sin_m)
            orders.append((m, forward * cos_m + self.along * sin_m))
        return orders

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        ray.terminate('diffracted')
        outputs = []
        for m, direction in self.order_directions(ray.direction, ray.wavelength_nm):
            efficiency = ORDER_EFFICIENCIES.get(abs(m), 0.0)
            outputs += self.transmit_ray(ray, hit, ray.intensity * efficiency,
                                         direction=direction, interaction_type='diffract')
        return outputs


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    grating = DiffractionGrating(Scene())
    ray = Ray(Vector2(-50, 0), Vector2(1, 0))
    hit = grating.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    for out in grating.interact(ray, hit):
        print(f"I={out.intensity:.3f} angle={math.degrees(out.direction.angle()):.2f} deg")
