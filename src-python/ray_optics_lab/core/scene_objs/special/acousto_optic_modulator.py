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
    from ray_optics_lab.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.constants import DEFAULT_WAVELENGTH_NM
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2
    from ...constants import DEFAULT_WAVELENGTH_NM

if TYPE_CHECKING:
    from ...ray import Ray, Hit

MAX_DIFFRACTION_ANGLE = math.pi / 6


class AcoustoOpticModulator(PolygonObjMixin, BaseSceneObj):
    """
    Acousto-optic modulator (Bragg cell).

    A ray entering the crystal is split into the undeviated 0th order,
    carrying (1 - rf_power) of the intensity, and the +1st order, carrying
    rf_power and rotated by

        theta = lambda * f_acoustic / v_acoustic

    clamped to +-30 degrees. Only faces the ray enters through are
    intersected, so the outputs leave the crystal without a second
    interaction.

    Attributes:
        width, height (float): Crystal size.
        rf_frequency_mhz (float): Drive frequency in MHz.
        rf_power (float): Fraction of the light sent into the +1st order.
        acoustic_velocity (float): Sound velocity in m/s.
    """

    type = 'AcoustoOpticModulator'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 50.0,
        'height': 20.0,
        'rf_frequency_mhz': 80.0,
        'rf_power': 0.5,
        'acoustic_velocity': 4200.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Width', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Height', 'type': 'number', 'min': 5.0, 'max': 1e6, 'step': 1},
        'rf_frequency_mhz': {'label': 'RF frequency (MHz)', 'type': 'number', 'min': 1.0, 'max': 500.0, 'step': 1},
        'rf_power': {'label': 'RF power (0-1)', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.01},
        'acoustic_velocity': {'label': 'Acoustic velocity (m/s)', 'type': 'number', 'min': 100.0, 'max': 20000.0, 'step': 10},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    def diffraction_angle(self, wavelength_nm: float) -> float:
        """Deflection of the +1st order in radians."""
        theta = wavelength_nm * 1e-9 * self.rf_frequency_mhz * 1e6 / self.acoustic_velocity
        return max(-MAX_DIFFRACTION_ANGLE, min(MAX_DIFFRACTION_ANGLE, theta))

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'diffraction_angle_deg': ('+1 order angle at 550 nm (deg)',
                                      math.degrees(self.diffraction_angle(DEFAULT_WAVELENGTH_NM))),
            'efficiency_order0': ('0th order efficiency', 1.0 - self.rf_power),
            'efficiency_order1': ('+1st order efficiency', self.rf_power),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction, entering_only=True)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        ray.terminate('diffracted_aom')
        outputs = self.transmit_ray(ray, hit, ray.intensity * (1.0 - self.rf_power),
                                    interaction_type='diffract')
        theta = self.diffraction_angle(ray.wavelength_nm)
        if abs(theta) > 1e-9:
            outputs += self.transmit_ray(ray, hit, ray.intensity * self.rf_power,
                                         direction=ray.direction.rotate(theta),
                                         interaction_type='diffract')
        return outputs
