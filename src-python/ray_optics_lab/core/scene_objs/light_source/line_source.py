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

from shapely.geometry import LineString

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_light_source import (
        BaseLightSource, POLARIZATION_DEFAULTS, POLARIZATION_SPECS,
    )
    from ray_optics_lab.core.geometry import Vector2, geometry
    from ray_optics_lab.core.ray import Ray
else:
    from ..base_light_source import BaseLightSource, POLARIZATION_DEFAULTS, POLARIZATION_SPECS
    from ...geometry import Vector2, geometry
    from ...ray import Ray


class LineSource(BaseLightSource):
    """
    Extended source: parallel rays emitted from evenly spaced points along a
    segment.

    The segment runs along the source angle and rays leave along the
    perpendicular, angle + 90 degrees. A single ray starts at the centre.
    """

    type = 'LineSource'

    serializable_defaults: Dict[str, Any] = {
        **BaseLightSource.serializable_defaults,
        **POLARIZATION_DEFAULTS,
        'length': 50.0,
        'intensity': 10.0,
        'ray_count': 201,
        'wavelength_nm': 550.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseLightSource.property_specs,
        **POLARIZATION_SPECS,
        'length': {'label': 'Length', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'wavelength_nm': {'label': 'Wavelength (nm)', 'type': 'number', 'min': 200.0, 'max': 2000.0, 'step': 1},
    }

    def _update_geometry(self) -> None:
        half = Vector2.from_angle(self.angle_rad) * (self.length / 2.0)
        self.p1: Vector2 = self.pos - half
        self.p2: Vector2 = self.pos + half
        self.emission_direction: Vector2 = Vector2.from_angle(self.angle_rad + math.pi / 2)

    def generate_rays(self, count: int) -> List[Ray]:
        if count <= 0:
            return []
        per_ray = self.intensity / count
        rays = []
        for i in range(count):
            t = 0.5 if count == 1 else i / (count - 1)
            origin = Vector2.lerp(self.p1, self.p2, t)
            rays.append(self.make_ray(origin, self.emission_direction, self.wavelength_nm, per_ray))
        return rays

    def get_shape(self) -> LineString:
        return geometry.segment(self.p1, self.p2)
