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
    from ray_optics_lab.core.scene_objs.base_light_source import BaseLightSource
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.ray import Ray
    from ray_optics_lab.core.constants import UV_WAVELENGTH, INFRARED_WAVELENGTH
else:
    from ..base_light_source import BaseLightSource
    from ...geometry import Vector2
    from ...ray import Ray
    from ...constants import UV_WAVELENGTH, INFRARED_WAVELENGTH

# FWHM = 2 sqrt(2 ln 2) sigma
FWHM_TO_SIGMA = 2.355


class LEDSource(BaseLightSource):
    """
    Incoherent LED: a fan of unpolarized rays whose wavelengths follow a
    Gaussian spectrum.

    Each ray's wavelength is drawn with the Box-Muller transform from
    N(center, (FWHM / 2.355)^2) and clamped to the visible range; each ray
    also gets a random phase. Random numbers come from the scene RNG, so a
    seeded scene traces reproducibly.
    """

    type = 'LEDSource'

    serializable_defaults: Dict[str, Any] = {
        **BaseLightSource.serializable_defaults,
        'center_wavelength_nm': 550.0,
        'fwhm_nm': 30.0,
        'ray_count': 10,
        'spread_deg': 30.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseLightSource.property_specs,
        'center_wavelength_nm': {'label': 'Centre wavelength (nm)', 'type': 'number', 'min': UV_WAVELENGTH, 'max': INFRARED_WAVELENGTH, 'step': 1},
        'fwhm_nm': {'label': 'Spectral FWHM (nm)', 'type': 'number', 'min': 1.0, 'max': 200.0, 'step': 1},
        'spread_deg': {'label': 'Spread (deg)', 'type': 'number', 'min': 0.0, 'max': 360.0, 'step': 1},
    }

    def sample_wavelength(self) -> float:
        rng = self.rng
        u1 = 1.0 - rng.random()  # (0, 1]
        u2 = rng.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        wavelength = self.center_wavelength_nm + z * self.fwhm_nm / FWHM_TO_SIGMA
        return max(UV_WAVELENGTH, min(INFRARED_WAVELENGTH, wavelength))

    def generate_rays(self, count: int) -> List[Ray]:
        if count <= 0:
            return []
        per_ray = self.intensity / count
        rays = []
        for angle in self.fan_angles(self.angle_rad, math.radians(self.spread_deg), count):
            wavelength = self.sample_wavelength()
            phase = self.rng.random() * 2.0 * math.pi
            rays.append(self.make_ray(self.pos, Vector2.from_angle(angle), wavelength, per_ray, phase))
        return rays
