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
    from ray_optics_lab.core.scene_objs.mirror.mirror import Mirror
else:
    from .mirror import Mirror

if TYPE_CHECKING:
    from ...ray import Ray, Hit


class MetallicMirror(Mirror):
    """
    Plane metal mirror with angle-dependent reflectivity and phase.

    Uses the complex index (n + ik) of the metal at about 550 nm:

        R(theta)  = R_0 * (0.9 + 0.1 cos theta), clamped to [0, 1]
        phase     = (pi - 2 atan2(2nk, n^2 + k^2 - 1)) * (0.8 + 0.2 cos theta)

    This is a simplified model, not the full complex Fresnel solution.

    Attributes:
        metal (str): aluminum, gold, silver or copper.
    """

    type = 'MetallicMirror'

    # (n, k, normal-incidence reflectivity)
    METAL_DATA: Dict[str, Tuple[float, float, float]] = {
        'aluminum': (0.96, 6.69, 0.91),
        'gold': (0.27, 2.95, 0.95),
        'silver': (0.13, 3.99, 0.98),
        'copper': (0.62, 2.57, 0.90),
    }

    serializable_defaults: Dict[str, Any] = {
        **Mirror.serializable_defaults,
        'metal': 'aluminum',
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **Mirror.property_specs,
        'metal': {'label': 'Metal', 'type': 'select', 'options': list(METAL_DATA)},
    }

    def reflection(self, cos_theta: float) -> Tuple[float, float]:
        """(reflectivity, phase shift) at incidence cosine `cos_theta`."""
        n, k, r0 = self.METAL_DATA[self.metal]
        reflectivity = min(1.0, max(0.0, r0 * (0.9 + 0.1 * cos_theta)))
        phase = math.pi - 2.0 * math.atan2(2.0 * n * k, n * n + k * k - 1.0)
        return reflectivity, phase * (0.8 + 0.2 * cos_theta)

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        reflectivity, phase = self.reflection(1.0)
        return {
            'normal_reflectivity': ('Reflectivity at normal incidence', round(reflectivity, 4)),
            'normal_phase': ('Phase shift at normal incidence (rad)', round(phase, 4)),
        }

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        cos_theta = abs(ray.direction.dot(hit.normal))
        reflectivity, phase = self.reflection(cos_theta)
        ray.terminate('reflected')
        return self.reflect_ray(ray, hit, ray.intensity * reflectivity, phase_shift=phase)
