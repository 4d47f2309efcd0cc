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


class PowerMeter(LineObjMixin, BaseSceneObj):
    """
    Flat sensor that absorbs every ray hitting it and records the power.

    The sensor face is a segment of length `diameter` along the object's
    angle. Readings are cleared at the start of every trace, by `reset()`
    and when a property changes.
    """

    type = 'PowerMeter'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'diameter': 40.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'diameter': {'label': 'Sensor diameter', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
    }

    def __init__(self, scene, json_obj=None, **props):
        super().__init__(scene, json_obj, **props)
        self.reset()

    def segment_length(self) -> float:
        return self.diameter

    def reset(self) -> None:
        self.total_power = 0.0
        self.peak_power = 0.0
        self.hit_count = 0

    def on_trace_start(self) -> None:
        self.reset()

    def on_properties_changed(self, names: List[str]) -> None:
        self.reset()

    @property
    def average_power(self) -> float:
        return self.total_power / self.hit_count if self.hit_count else 0.0

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'total_power': ('Total power', self.total_power),
            'peak_power': ('Peak power', self.peak_power),
            'average_power': ('Average power', self.average_power),
            'hit_count': ('Rays detected', self.hit_count),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction, 'sensor')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        self.total_power += ray.intensity
        self.peak_power = max(self.peak_power, ray.intensity)
        self.hit_count += 1
        ray.terminate('absorbed_power_meter')
        return []
