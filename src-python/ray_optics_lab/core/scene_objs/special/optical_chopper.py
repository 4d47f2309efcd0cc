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

# Fraction of the wheel diameter taken by the hub (rays there miss the blades)
HUB_FRACTION = 0.15


class OpticalChopper(LineObjMixin, BaseSceneObj):
    """
    Slotted chopper wheel, seen edge-on, frozen at `rotor_phase`.

    The wheel has `slot_count` identical sectors; the first (1 - duty_cycle)
    of each sector is blade and the rest is open. A ray crossing the wheel
    at signed radius r sits at wheel angle 0 (r > 0) or pi (r < 0), turned
    back by the rotor phase. Rays through the hub pass untouched.

    Attributes:
        rotor_phase (float): Wheel rotation as a fraction of a turn, [0, 1).
        frequency_hz (float): Chopping frequency, only used for `period`.
    """

    type = 'OpticalChopper'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'diameter': 60.0,
        'frequency_hz': 100.0,
        'duty_cycle': 0.5,
        'slot_count': 6,
        'rotor_phase': 0.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'diameter': {'label': 'Diameter', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
        'frequency_hz': {'label': 'Frequency (Hz)', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'duty_cycle': {'label': 'Duty cycle', 'type': 'number', 'min': 0.1, 'max': 0.9, 'step': 0.05},
        'slot_count': {'label': 'Slots', 'type': 'int', 'min': 1, 'max': 20, 'step': 1},
        'rotor_phase': {'label': 'Rotor phase (turns)', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.01},
    }

    def segment_length(self) -> float:
        return self.diameter

    @property
    def period(self) -> float:
        return 1.0 / self.frequency_hz

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'average_transmission': ('Average transmission', self.duty_cycle),
            'period_ms': ('Period (ms)', self.period * 1e3),
        }

    def is_blocked(self, radius: float) -> bool:
        """Whether the wheel blocks a ray crossing at signed `radius`."""
        wheel_angle = 0.0 if radius >= 0 else math.pi
        sector = 2.0 * math.pi / self.slot_count
        relative = (wheel_angle - self.rotor_phase * 2.0 * math.pi) % sector
        return relative < sector * (1.0 - self.duty_cycle)

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        hits = self.intersect_segment(origin, direction, 'wheel')
        if hits and abs(self.signed_offset(hits[0].point)) < HUB_FRACTION * self.diameter:
            return []
        return hits

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        if self.is_blocked(self.signed_offset(hit.point)):
            ray.terminate('blocked_by_chopper')
            return []
        ray.terminate('passed_chopper')
        return self.transmit_ray(ray, hit, ray.intensity)
