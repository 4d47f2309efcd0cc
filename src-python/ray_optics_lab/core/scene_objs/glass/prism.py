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
from typing import Any, Dict, List, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_glass import BaseGlass
    from ray_optics_lab.core.geometry import Vector2
else:
    from ..base_glass import BaseGlass
    from ...geometry import Vector2


class Prism(BaseGlass):
    """
    Isosceles triangular prism.

    In the local frame the apex sits at (0, -h/2) and the base runs from
    (-base/2, h/2) to (base/2, h/2), with h = base/2 * tan((pi - apex)/2).

    Attributes:
        base_length (float): Length of the base face.
        apex_angle_deg (float): Apex angle in degrees, within [1, 178].
    """

    type = 'Prism'

    serializable_defaults: Dict[str, Any] = {
        **BaseGlass.serializable_defaults,
        'base_length': 100.0,
        'apex_angle_deg': 60.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseGlass.property_specs,
        'base_length': {'label': 'Base length', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'apex_angle_deg': {'label': 'Apex angle (deg)', 'type': 'number', 'min': 1.0, 'max': 178.0, 'step': 1},
    }

    @property
    def height(self) -> float:
        base_angle = (math.pi - math.radians(self.apex_angle_deg)) / 2.0
        return self.base_length / 2.0 * math.tan(base_angle)

    def get_local_vertices(self) -> List[Vector2]:
        half_base = self.base_length / 2.0
        h = self.height
        return [Vector2(0.0, -h / 2.0), Vector2(-half_base, h / 2.0), Vector2(half_base, h / 2.0)]

    def minimum_deviation(self, wavelength_nm: float) -> float:
        """Angle of minimum deviation (radians) at a wavelength, in air."""
        apex = math.radians(self.apex_angle_deg)
        n = self.get_refractive_index(wavelength_nm)
        s = n * math.sin(apex / 2.0)
        if s >= 1.0:
            return float('nan')
        return 2.0 * math.asin(s) - apex

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        derived = super().get_derived_properties()
        derived['height'] = ('Height', round(self.height, 4))
        derived['min_deviation_deg'] = ('Minimum deviation @550 nm (deg)',
                                        round(math.degrees(self.minimum_deviation(550.0)), 4))
        return derived


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene

    prism = Prism(Scene())
    for wl in (400, 550, 700):
        print(f"{wl} nm: D_min = {math.degrees(prism.minimum_deviation(wl)):.3f} deg")
