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

import cmath
import math
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

import numpy as np

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


class Screen(LineObjMixin, BaseSceneObj):
    """
    Observation screen that absorbs rays and records an intensity profile.

    The segment is divided into `bin_count` equal bins. Each bin keeps

        intensity: incoherent sum of the ray intensities
        field: coherent sum of sqrt(I) * exp(i * phase)
        hits: number of rays

    `coherent_profile()` (|field|^2 per bin) shows interference between
    rays of equal wavelength that land in the same bin. All bins are
    cleared at the start of every trace.
    """

    type = 'Screen'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 90.0,
        'length': 150.0,
        'bin_count': 200,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Length', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'bin_count': {'label': 'Bins', 'type': 'int', 'min': 1, 'max': 10000, 'step': 1},
    }

    def __init__(self, scene, json_obj=None, **props):
        super().__init__(scene, json_obj, **props)
        self.reset()

    def reset(self) -> None:
        self.intensity_bins = np.zeros(self.bin_count)
        self.field_bins = np.zeros(self.bin_count, dtype=complex)
        self.hit_bins = np.zeros(self.bin_count, dtype=int)

    def on_trace_start(self) -> None:
        self.reset()

    def on_properties_changed(self, names: List[str]) -> None:
        self.reset()

    def bin_index(self, segment_param: float) -> int:
        return min(self.bin_count - 1, max(0, int(segment_param * self.bin_count)))

    def bin_centers(self) -> np.ndarray:
        """Signed position of each bin centre along the screen."""
        edges = np.linspace(-self.length / 2.0, self.length / 2.0, self.bin_count + 1)
        return (edges[:-1] + edges[1:]) / 2.0

    def coherent_profile(self) -> np.ndarray:
        return np.abs(self.field_bins) ** 2

    @property
    def total_intensity(self) -> float:
        return float(self.intensity_bins.sum())

    @property
    def max_intensity(self) -> float:
        return float(self.intensity_bins.max()) if self.bin_count else 0.0

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'total_intensity': ('Total intensity', self.total_intensity),
            'max_intensity': ('Peak bin intensity', self.max_intensity),
            'hit_count': ('Rays detected', int(self.hit_bins.sum())),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction, 'screen')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        index = self.bin_index(hit.extra['segment_param'])
        phase = math.fmod(ray.phase + ray.propagation_phase, 2.0 * math.pi)
        self.intensity_bins[index] += ray.intensity
        self.field_bins[index] += math.sqrt(ray.intensity) * cmath.exp(1j * phase)
        self.hit_bins[index] += 1
        ray.terminate('absorbed_screen')
        return []
