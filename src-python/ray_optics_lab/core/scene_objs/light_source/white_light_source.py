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

import bisect
import math
from typing import Any, Dict, List, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_light_source import (
        BaseLightSource, GAUSSIAN_DEFAULTS, GAUSSIAN_SPECS, POLARIZATION_DEFAULTS, POLARIZATION_SPECS,
    )
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.ray import Ray
    from ray_optics_lab.core.constants import MIN_RAY_INTENSITY
else:
    from ..base_light_source import (
        BaseLightSource, GAUSSIAN_DEFAULTS, GAUSSIAN_SPECS, POLARIZATION_DEFAULTS, POLARIZATION_SPECS,
    )
    from ...geometry import Vector2
    from ...ray import Ray
    from ...constants import MIN_RAY_INTENSITY

# (wavelength nm, relative weight) of the emitted spectrum
WHITE_LIGHT_SPECTRUM: List[Tuple[float, float]] = [
    (380.0, 0.05), (400.0, 0.2), (420.0, 0.5), (440.0, 0.9), (460.0, 1.05),
    (480.0, 1.1), (500.0, 1.2), (520.0, 1.3), (540.0, 1.4), (555.0, 1.4),
    (570.0, 1.3), (590.0, 1.2), (610.0, 1.1), (630.0, 0.95), (650.0, 0.8),
    (670.0, 0.6), (690.0, 0.4), (710.0, 0.2), (730.0, 0.1), (750.0, 0.05),
]


def spectrum_cdf(spectrum: List[Tuple[float, float]]) -> List[float]:
    """Cumulative distribution of the spectrum weights (last entry exactly 1)."""
    total = sum(weight for _, weight in spectrum)
    if total <= 1e-9:
        return [(i + 1) / len(spectrum) for i in range(len(spectrum))]
    cdf = []
    running = 0.0
    for _, weight in spectrum:
        running += weight / total
        cdf.append(running)
    cdf[-1] = 1.0
    return cdf


class WhiteLightSource(BaseLightSource):
    """
    Broadband source with a tabulated visible spectrum.

    By default every emission direction gets one ray per spectral line with
    intensity I / N * w / sum(w); lines below the minimum intensity are
    dropped unless the source ignores decay. When the scene config enables
    `fast_white_light`, each direction instead gets a single ray with a
    wavelength drawn from the spectrum CDF.
    """

    type = 'WhiteLightSource'

    serializable_defaults: Dict[str, Any] = {
        **BaseLightSource.serializable_defaults,
        **POLARIZATION_DEFAULTS,
        **GAUSSIAN_DEFAULTS,
        'intensity': 75.0,
        'ray_count': 41,
        'spread_deg': 0.0,
        'beam_diameter': 10.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseLightSource.property_specs,
        **POLARIZATION_SPECS,
        **GAUSSIAN_SPECS,
        'spread_deg': {'label': 'Spread (deg)', 'type': 'number', 'min': 0.0, 'max': 360.0, 'step': 1},
    }

    spectrum: List[Tuple[float, float]] = WHITE_LIGHT_SPECTRUM

    def __init__(self, scene, json_obj=None, **props):
        super().__init__(scene, json_obj, **props)
        self.cdf: List[float] = spectrum_cdf(self.spectrum)
        self.weight_sum: float = sum(weight for _, weight in self.spectrum)

    @property
    def fast_mode(self) -> bool:
        return self.scene is not None and self.scene.config.fast_white_light

    def sample_wavelength(self) -> float:
        index = bisect.bisect_left(self.cdf, self.rng.random())
        return self.spectrum[min(index, len(self.spectrum) - 1)][0]

    def generate_rays(self, count: int) -> List[Ray]:
        if count <= 0:
            return []
        per_direction = self.intensity / count
        threshold = MIN_RAY_INTENSITY if self.scene is None else self.scene.config.min_ray_intensity
        rays = []
        for angle in self.fan_angles(self.angle_rad, math.radians(self.spread_deg), count):
            direction = Vector2.from_angle(angle)
            if self.fast_mode:
                rays.append(self.make_ray(self.pos, direction, self.sample_wavelength(), per_direction))
                continue
            for wavelength, weight in self.spectrum:
                intensity = per_direction * weight / self.weight_sum
                if intensity >= threshold or self.ignore_decay:
                    rays.append(self.make_ray(self.pos, direction, wavelength, intensity))
        return rays
