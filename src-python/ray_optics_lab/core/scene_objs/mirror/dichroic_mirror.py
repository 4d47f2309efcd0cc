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
    from ray_optics_lab.core.scene_objs.mirror.mirror import MIRROR_REFLECTIVITY
    from ray_optics_lab.core.geometry import Vector2
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from .mirror import MIRROR_REFLECTIVITY
    from ...geometry import Vector2

if TYPE_CHECKING:
    from ...ray import Ray, Hit

# Branches carrying less than this fraction of the light are not emitted
MIN_BRANCH_FRACTION = 0.01


class DichroicMirror(LineObjMixin, BaseSceneObj):
    """
    Wavelength-selective mirror.

    The reflectivity follows a logistic edge around the cut-off:

        R(lambda) = 1 / (1 + exp(k (lambda - lambda_c))),  k = 4 / width

    which reflects short wavelengths; with `reflect_short_wave` off the edge
    is inverted. Each branch carrying more than 1% of the light is emitted
    (reflected with a phase of pi, transmitted undeviated), each scaled by
    0.99 unless the ray ignores decay.

    Attributes:
        length (float): Length of the mirror segment.
        cutoff_wavelength (float): Edge wavelength in nm, within [380, 750].
        transition_width (float): Edge width in nm, within [1, 100].
        reflect_short_wave (bool): Whether short wavelengths are reflected.
    """

    type = 'DichroicMirror'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 45.0,
        'length': 80.0,
        'cutoff_wavelength': 550.0,
        'transition_width': 20.0,
        'reflect_short_wave': True,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Length', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'cutoff_wavelength': {'label': 'Cut-off wavelength (nm)', 'type': 'number', 'min': 380.0, 'max': 750.0, 'step': 1},
        'transition_width': {'label': 'Transition width (nm)', 'type': 'number', 'min': 1.0, 'max': 100.0, 'step': 1},
        'reflect_short_wave': {'label': 'Reflect short wavelengths', 'type': 'bool'},
    }

    def get_reflectivity(self, wavelength_nm: float) -> float:
        k = 4.0 / self.transition_width
        x = k * (wavelength_nm - self.cutoff_wavelength)
        # Logistic function written to avoid overflow for large |x|
        if x >= 0:
            e = math.exp(-x)
            sigmoid = e / (1.0 + e)
        else:
            sigmoid = 1.0 / (1.0 + math.exp(x))
        return sigmoid if self.reflect_short_wave else 1.0 - sigmoid

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'r_450': ('R at 450 nm', round(self.get_reflectivity(450.0), 4)),
            'r_650': ('R at 650 nm', round(self.get_reflectivity(650.0), 4)),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction, 'coating')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        R = self.get_reflectivity(ray.wavelength_nm)
        T = 1.0 - R
        loss = 1.0 if ray.ignore_decay else MIRROR_REFLECTIVITY

        outputs: List['Ray'] = []
        if R > MIN_BRANCH_FRACTION:
            outputs += self.reflect_ray(ray, hit, ray.intensity * R * loss)
        if T > MIN_BRANCH_FRACTION:
            outputs += self.transmit_ray(ray, hit, ray.intensity * T * loss)
        ray.terminate('split')
        return outputs
