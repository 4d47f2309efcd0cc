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


class Photodiode(LineObjMixin, BaseSceneObj):
    """
    One-sided detector.

    Only rays arriving against `surface_normal` (the active face) are
    absorbed and counted; the back of the diode is transparent to tracing.
    """

    type = 'Photodiode'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'diameter': 20.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'diameter': {'label': 'Active diameter', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
    }

    def __init__(self, scene, json_obj=None, **props):
        super().__init__(scene, json_obj, **props)
        self.reset()

    def segment_length(self) -> float:
        return self.diameter

    def reset(self) -> None:
        self.incident_power = 0.0
        self.hit_count = 0

    def on_trace_start(self) -> None:
        self.reset()

    def on_properties_changed(self, names: List[str]) -> None:
        self.reset()

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'incident_power': ('Incident power', self.incident_power),
            'hit_count': ('Rays detected', self.hit_count),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        if direction.dot(self.surface_normal) >= 0:
            return []
        return self.intersect_segment(origin, direction, 'active')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        self.incident_power += ray.intensity
        self.hit_count += 1
        ray.terminate('absorbed_photodiode')
        return []
