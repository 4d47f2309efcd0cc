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

from typing import Any, Dict, List, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_glass import BaseGlass
    from ray_optics_lab.core.geometry import Vector2
else:
    from ..base_glass import BaseGlass
    from ...geometry import Vector2


class DielectricBlock(BaseGlass):
    """
    Rectangular block of dispersive, weakly absorbing glass.

    The block is centred on its position; `width` runs along the rotated
    x axis and `height` along the rotated y axis.

    Attributes:
        width (float): Extent along the block's x axis.
        height (float): Extent along the block's y axis.
    """

    type = 'DielectricBlock'

    serializable_defaults: Dict[str, Any] = {
        **BaseGlass.serializable_defaults,
        'width': 100.0,
        'height': 60.0,
        'absorption': 0.001,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseGlass.property_specs,
        'width': {'label': 'Width', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Height', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        derived = super().get_derived_properties()
        derived['area'] = ('Area', self.width * self.height)
        return derived


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene

    block = DielectricBlock(Scene(), pos_x=0, pos_y=0)
    print(block, block.vertices)
    print(block.get_properties()['n_400'])
