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
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2

if TYPE_CHECKING:
    from ...ray import Ray, Hit

MODULATION_TYPES = ['phase', 'amplitude']


class ElectroOpticModulator(PolygonObjMixin, BaseSceneObj):
    """
    Pockels-cell modulator driven by a static voltage.

    The induced phase is

        delta = pi * V / V_pi

    In 'phase' mode delta is added to the ray's phase; in 'amplitude' mode
    (crystal between crossed polarizers) the intensity is scaled by
    cos^2(delta / 2). Both modes lose a further factor `quality` to the
    crystal. Rays enter through either end face and leave through the
    opposite one at the same lateral offset.
    """

    type = 'ElectroOpticModulator'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 60.0,
        'height': 30.0,
        'modulation_type': 'phase',
        'half_wave_voltage': 100.0,
        'applied_voltage': 0.0,
        'quality': 0.98,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Length', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Aperture', 'type': 'number', 'min': 5.0, 'max': 1e6, 'step': 1},
        'modulation_type': {'label': 'Modulation', 'type': 'select', 'options': MODULATION_TYPES},
        'half_wave_voltage': {'label': 'Half-wave voltage (V)', 'type': 'number', 'min': 1.0, 'max': 1e5, 'step': 1},
        'applied_voltage': {'label': 'Applied voltage (V)', 'type': 'number', 'min': -1e5, 'max': 1e5, 'step': 1},
        'quality': {'label': 'Transmission quality', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.01},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    def _update_geometry(self) -> None:
        self._update_polygon_geometry()
        self.axis: Vector2 = Vector2.from_angle(self.angle_rad)

    @property
    def induced_phase(self) -> float:
        return math.pi * self.applied_voltage / self.half_wave_voltage

    def transmission(self) -> float:
        """Intensity factor of a ray crossing the crystal."""
        if self.modulation_type == 'amplitude':
            return math.cos(self.induced_phase / 2.0) ** 2 * self.quality
        return self.quality

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'induced_phase_deg': ('Induced phase (deg)', math.degrees(self.induced_phase)),
            'transmission_factor': ('Transmission', self.transmission()),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        hits = self.intersect_polygon(origin, direction, entering_only=True)
        if hits and abs(hits[0].extra['outward_normal'].dot(self.axis)) < 0.5:
            return []
        return hits

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        forward = self.axis if ray.direction.dot(self.axis) >= 0 else -self.axis
        lateral = forward.perpendicular()
        offset = (hit.point - self.pos).dot(lateral)
        exit_point = self.pos + forward * (self.width / 2.0) + lateral * offset

        phase_shift = self.induced_phase if self.modulation_type == 'phase' else 0.0
        ray.terminate('modulated_eom')
        return self.transmit_ray(ray, hit, ray.intensity * self.transmission(),
                                 origin=exit_point, phase_shift=phase_shift,
                                 interaction_type='modulate')
