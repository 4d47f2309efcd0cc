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
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from ...geometry import Vector2

if TYPE_CHECKING:
    from ...ray import Ray, Hit


class VariableAttenuator(LineObjMixin, BaseSceneObj):
    """
    Neutral density filter: passes every ray undeviated, scaled by `transmission`.

    Polarization and phase are untouched. The optical density
    OD = -log10(T) and the loss in dB are exposed as derived properties.
    """

    type = 'VariableAttenuator'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'diameter': 40.0,
        'transmission': 0.5,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'diameter': {'label': 'Diameter', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'transmission': {'label': 'Transmission', 'type': 'number', 'min': 0.001, 'max': 1.0, 'step': 0.01},
    }

    def segment_length(self) -> float:
        return self.diameter

    @property
    def optical_density(self) -> float:
        return -math.log10(self.transmission)

    @property
    def attenuation_db(self) -> float:
        return -10.0 * math.log10(self.transmission)

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'optical_density': ('Optical density', self.optical_density),
            'attenuation_db': ('Attenuation (dB)', self.attenuation_db),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction, 'filter')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        ray.terminate('attenuated')
        return self.transmit_ray(ray, hit, ray.intensity * self.transmission)
