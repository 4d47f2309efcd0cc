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
from typing import Any, Dict, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_paraxial_lens import BaseParaxialLens
else:
    from ..base_paraxial_lens import BaseParaxialLens

if TYPE_CHECKING:
    from ...ray import Ray


class CylindricalLens(BaseParaxialLens):
    """
    Cylindrical lens seen in cross-section.

    With the cylinder axis 'horizontal' the lens has power in the plane of
    the scene and behaves like a thin lens of `focal_length`. With the axis
    'vertical' its power acts out of the plane, so in 2D it only transmits.

    Attributes:
        width (float): In-plane aperture (length of the lens segment).
        height (float): Out-of-plane extent (informational).
        focal_length (float): Focal length (non-zero).
        cylinder_axis (str): 'horizontal' or 'vertical'.
    """

    type = 'CylindricalLens'

    serializable_defaults: Dict[str, Any] = {
        **BaseParaxialLens.serializable_defaults,
        'width': 80.0,
        'height': 40.0,
        'focal_length': 100.0,
        'cylinder_axis': 'horizontal',
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseParaxialLens.property_specs,
        'width': {'label': 'Width', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Height', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'focal_length': {'label': 'Focal length', 'type': 'number', 'min': -1e7, 'max': 1e7, 'step': 1},
        'cylinder_axis': {'label': 'Cylinder axis', 'type': 'select', 'options': ['horizontal', 'vertical']},
    }

    def segment_length(self) -> float:
        return self.width

    def _update_geometry(self) -> None:
        if self.focal_length == 0:
            raise ValueError("focal length must be non-zero")
        super()._update_geometry()

    def focal_length_for(self, ray: 'Ray') -> float:
        if self.cylinder_axis == 'vertical':
            return math.inf
        return self.focal_length

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'in_plane_power': ('In-plane power (1/unit)',
                               0.0 if self.cylinder_axis == 'vertical' else 1.0 / self.focal_length),
        }
