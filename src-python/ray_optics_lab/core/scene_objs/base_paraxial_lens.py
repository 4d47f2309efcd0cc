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
from typing import Any, Dict, List, Optional, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.line_obj_mixin import LineObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.gaussian import thin_lens_matrix
else:
    from .base_scene_obj import BaseSceneObj
    from .line_obj_mixin import LineObjMixin
    from ..geometry import Vector2
    from ..gaussian import thin_lens_matrix

if TYPE_CHECKING:
    from ..ray import Ray, Hit


class BaseParaxialLens(LineObjMixin, BaseSceneObj):
    """
    The base class for lenses modelled as a single deviating plane.

    A ray hitting the lens plane at signed height h from the optical axis
    leaves with its angle to the axis changed by -h/f. The axis is the lens
    normal flipped to point along the ray's travel, so the rule is the same
    from either side. Transmission is scaled by `quality`, and the Gaussian
    parameters of the ray (if any) go through the thin-lens ABCD matrix.

    Subclasses implement `focal_length_for(ray)` and may override
    `deviation_angle(h, f)`.

    Attributes:
        quality (float): Transmission factor in [0, 1].
    """

    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'quality': 0.98,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'quality': {'label': 'Transmission', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.01},
    }

    def segment_length(self) -> float:
        return self.diameter

    def focal_length_for(self, ray: 'Ray') -> float:
        """Focal length seen by this ray (inf for no optical power)."""
        raise NotImplementedError

    def deviation_angle(self, h: float, focal_length: float) -> float:
        """Change of the ray angle (radians) at signed height h."""
        return -h / focal_length

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction, 'lens')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        focal_length = self.focal_length_for(ray)
        intensity = ray.intensity * self.quality

        if math.isinf(focal_length) or focal_length == 0:
            ray.terminate('transmitted')
            return self.transmit_ray(ray, hit, intensity)

        axis = self.surface_normal
        if ray.direction.dot(axis) < 0:
            axis = -axis
        lateral = axis.perpendicular()
        h = (hit.point - self.pos).dot(lateral)

        theta_in = math.atan2(ray.direction.dot(lateral), ray.direction.dot(axis))
        theta_out = theta_in + self.deviation_angle(h, focal_length)
        direction = axis * math.cos(theta_out) + lateral * math.sin(theta_out)

        ray.terminate('refracted')
        return self.transmit_ray(ray, hit, intensity, direction=direction,
                                 gaussian=self._focused_gaussian(ray, focal_length),
                                 interaction_type='refract')

    def _focused_gaussian(self, ray: 'Ray', focal_length: float) -> Optional[Any]:
        if ray.gaussian is None:
            return None
        beam = ray.gaussian.propagated(ray.segment_length or 0.0)
        return beam.apply_abcd(*thin_lens_matrix(focal_length), wavelength_nm=ray.wavelength_nm)
