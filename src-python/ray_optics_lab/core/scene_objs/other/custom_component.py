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

from typing import Any, Dict, List

from shapely.geometry import Polygon

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.geometry import Vector2, geometry
else:
    from ..base_scene_obj import BaseSceneObj
    from ...geometry import Vector2, geometry


class CustomComponent(BaseSceneObj):
    """
    Labelled box for annotating a layout. It has no optical effect and is
    never tested for intersections.
    """

    type = 'CustomComponent'

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 100.0,
        'height': 40.0,
        'text': 'Custom component',
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'text': {'label': 'Text', 'type': 'text'},
        'width': {'label': 'Width', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Height', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
    }

    def get_shape(self) -> Polygon:
        hw = self.width / 2.0
        hh = self.height / 2.0
        corners: List[Vector2] = [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]
        return geometry.polygon([self.pos + c.rotate(self.angle_rad) for c in corners])
