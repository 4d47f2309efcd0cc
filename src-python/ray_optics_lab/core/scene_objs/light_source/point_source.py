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
        BaseLightSource, POLARIZATION_DEFAULTS, POLARIZATION_SPECS,
    )
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.ray import Ray
else:
    from ..base_light_source import BaseLightSource, POLARIZATION_DEFAULTS, POLARIZATION_SPECS
    from ...geometry import Vector2
    from ...ray import Ray


class PointSource(BaseLightSource):
    """
    Isotropic emitter.

    The `angular_range_deg` sector centred on the source angle is split into
    `ray_count` equal bins with one ray through the centre of each, so a
    full 360 degree source has no doubled ray at the seam.
    """

    type = 'PointSource'

    serializable_defaults: Dict[str, Any] = {
        **BaseLightSource.serializable_defaults,
        **POLARIZATION_DEFAULTS,
        'ray_count': 36,
        'angular_range_deg': 360.0,
        'wavelength_nm': 550.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseLightSource.property_specs,
        **POLARIZATION_SPECS,
        'angular_range_deg': {'label': 'Angular range (deg)', 'type': 'number', 'min': 1.0, 'max': 360.0, 'step': 1},
        'wavelength_nm': {'label': 'Wavelength (nm)', 'type': 'number', 'min': 200.0, 'max': 2000.0, 'step': 1},
    }

    def emission_angles(self, count: int) -> List[float]:
        spread = math.radians(self.angular_range_deg)
        start = self.angle_rad - spread / 2.0
        return [start + (i + 0.5) * spread / count for i in range(count)]

    def generate_rays(self, count: int) -> List[Ray]:
        if count <= 0:
            return []
        per_ray = self.intensity / count
        return [
            self.make_ray(self.pos, Vector2.from_angle(angle), self.wavelength_nm, per_ray)
            for angle in self.emission_angles(count)
        ]
