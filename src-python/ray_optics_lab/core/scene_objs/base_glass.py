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

import logging
import math
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.constants import EDGE_DETECTION_THRESHOLD, N_AIR
    from ray_optics_lab.core.dispersion import refractive_index
    from ray_optics_lab.analysis.fresnel_utils import fresnel_reflectance
else:
    from .base_scene_obj import BaseSceneObj
    from .polygon_obj_mixin import PolygonObjMixin
    from ..geometry import Vector2
    from ..constants import EDGE_DETECTION_THRESHOLD, N_AIR
    from ..dispersion import refractive_index
    from ...analysis.fresnel_utils import fresnel_reflectance

if TYPE_CHECKING:
    from ..ray import Ray, Hit

logger = logging.getLogger(__name__)

# Relative tolerance on sin^2(theta_t) at which a crossing counts as TIR
TIR_TOLERANCE = 1e-9


class BaseGlass(PolygonObjMixin, BaseSceneObj):
    """
    The base class for solid dielectric bodies (blocks, prisms).

    Every face crossing is handled independently:
        - Dispersion: n(lambda) from the Cauchy model, with A back-solved so
          that the index at 550 nm equals `refractive_index`.
        - Snell's law in vector form for the refracted direction.
        - Unpolarized Fresnel splitting, R = (R_s + R_p) / 2.
        - Total internal reflection when sin^2(theta_t) >= 1.
        - Bulk absorption exp(-absorption * L) on every segment travelled
          inside the body, applied when the segment ends on a face.

    Attributes:
        refractive_index (float): Index at 550 nm.
        cauchy_b (float): Cauchy coefficient B in nm^2.
        absorption (float): Absorption coefficient per scene unit.
    """

    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'refractive_index': 1.5,
        'cauchy_b': 5000.0,
        'absorption': 0.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'refractive_index': {'label': 'Refractive index (550 nm)', 'type': 'number', 'min': 1.0, 'max': 4.0, 'step': 0.01},
        'cauchy_b': {'label': 'Cauchy B (nm^2)', 'type': 'number', 'min': 0.0, 'max': 50000.0, 'step': 100},
        'absorption': {'label': 'Absorption (1/unit)', 'type': 'number', 'min': 0.0, 'max': 10.0, 'step': 0.0001},
    }

    def get_refractive_index(self, wavelength_nm: float) -> float:
        """Index of the body material at a wavelength."""
        return refractive_index(wavelength_nm, self.refractive_index, self.cauchy_b)

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'n_400': ('n at 400 nm', round(self.get_refractive_index(400.0), 6)),
            'n_700': ('n at 700 nm', round(self.get_refractive_index(700.0), 6)),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        """
        Split the ray at a face into reflected and refracted parts.

        The normal of the hit opposes the ray. Whether the ray enters or
        leaves the body follows from the sign of I . n_out.
        """
        direction = ray.direction
        entering = direction.dot(hit.extra['outward_normal']) < -EDGE_DETECTION_THRESHOLD
        n_glass = self.get_refractive_index(ray.wavelength_nm)

        intensity = ray.intensity
        if entering:
            n1, n2 = ray.medium_refractive_index, n_glass
        else:
            n1, n2 = n_glass, N_AIR
            if self.absorption > 0 and ray.segment_length:
                intensity *= math.exp(-self.absorption * ray.segment_length)

        if abs(n1 - n2) < 1e-9:
            ray.terminate('transmitted')
            return self.transmit_ray(ray, hit, intensity, medium_refractive_index=n2)

        return self.refract(ray, hit, intensity, n1, n2)

    def refract(self, ray: 'Ray', hit: 'Hit', intensity: float, n1: float, n2: float) -> List['Ray']:
        """
        Apply Snell's law and the Fresnel equations at a face.

        Args:
            ray: The incident ray (terminated here).
            hit: The face hit; its normal opposes the ray.
            intensity: Incident intensity after any bulk absorption.
            n1: Index on the incident side.
            n2: Index on the transmitted side.

        Returns:
            The reflected ray (TIR or Fresnel) and the refracted ray, each
            only if it clears the minimum-intensity threshold.
        """
        direction = ray.direction
        normal = hit.normal
        cos_i = min(1.0, -direction.dot(normal))
        ratio = n1 / n2
        sin_t2 = ratio * ratio * (1.0 - cos_i * cos_i)

        if sin_t2 >= 1.0 - TIR_TOLERANCE:
            ray.terminate('tir')
            return self.reflect_ray(ray, hit, intensity, phase_shift=0.0,
                                    medium_refractive_index=n1, interaction_type='tir')

        cos_t = math.sqrt(1.0 - sin_t2)
        R_s, R_p = fresnel_reflectance(n1, n2, cos_i, cos_t)
        R = 0.5 * (R_s + R_p)

        refracted_dir = direction * ratio + normal * (ratio * cos_i - cos_t)

        outputs = self.reflect_ray(ray, hit, intensity * R,
                                   medium_refractive_index=n1)
        outputs += self.transmit_ray(ray, hit, intensity * (1.0 - R), direction=refracted_dir,
                                     medium_refractive_index=n2, interaction_type='refract')
        ray.terminate('refracted')
        return outputs


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray, Hit

    class Slab(BaseGlass):
        type = 'Slab'

        def get_local_vertices(self):
            return [Vector2(-50, -20), Vector2(50, -20), Vector2(50, 20), Vector2(-50, 20)]

    slab = Slab(Scene())
    ray = Ray(Vector2(-100, 0), Vector2(1, 0))
    hit = slab.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    for out in slab.interact(ray, hit):
        print(out)
