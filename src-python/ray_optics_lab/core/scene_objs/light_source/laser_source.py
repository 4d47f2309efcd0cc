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
from typing import Any, Dict, List

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_light_source import (
        BaseLightSource, GAUSSIAN_DEFAULTS, GAUSSIAN_SPECS, POLARIZATION_DEFAULTS, POLARIZATION_SPECS,
    )
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.ray import Ray
else:
    from ..base_light_source import (
        BaseLightSource, GAUSSIAN_DEFAULTS, GAUSSIAN_SPECS, POLARIZATION_DEFAULTS, POLARIZATION_SPECS,
    )
    from ...geometry import Vector2
    from ...ray import Ray


class LaserSource(BaseLightSource):
    """
    Monochromatic point source emitting a fan of rays from its position.

    With the default single ray and zero spread this is one collimated ray
    along the source angle. Optionally polarized, and optionally seeding
    Gaussian beam parameters (waist `beam_waist` at the source).
    """

    type = 'LaserSource'

    serializable_defaults: Dict[str, Any] = {
        **BaseLightSource.serializable_defaults,
        **POLARIZATION_DEFAULTS,
        **GAUSSIAN_DEFAULTS,
        'wavelength_nm': 550.0,
        'spread_deg': 0.0,
        'beam_diameter': 10.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseLightSource.property_specs,
        **POLARIZATION_SPECS,
        **GAUSSIAN_SPECS,
        'wavelength_nm': {'label': 'Wavelength (nm)', 'type': 'number', 'min': 200.0, 'max': 2000.0, 'step': 1},
        'spread_deg': {'label': 'Spread (deg)', 'type': 'number', 'min': 0.0, 'max': 360.0, 'step': 1},
    }

    def generate_rays(self, count: int) -> List[Ray]:
        if count <= 0:
            return []
        per_ray = self.intensity / count
        return [
            self.make_ray(self.pos, Vector2.from_angle(angle), self.wavelength_nm, per_ray)
            for angle in self.fan_angles(self.angle_rad, math.radians(self.spread_deg), count)
        ]


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene

    laser = LaserSource(Scene(), ray_count=3, spread_deg=10.0, polarization_type='linear')
    for ray in laser.generate():
        print(ray, ray.polarization)
