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
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from ray_optics_lab.core.geometry import Vector2
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2

if TYPE_CHECKING:
    from ...ray import Ray, Hit


class Spectrometer(PolygonObjMixin, BaseSceneObj):
    """
    Box that absorbs every ray entering it and bins its intensity by wavelength.

    Bins are `resolution_nm` wide from `wavelength_min_nm`; rays outside
    [min, max] are absorbed but not binned.
    """

    type = 'Spectrometer'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 80.0,
        'height': 50.0,
        'wavelength_min_nm': 380.0,
        'wavelength_max_nm': 750.0,
        'resolution_nm': 1.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Width', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Height', 'type': 'number', 'min': 10.0, 'max': 1e6, 'step': 1},
        'wavelength_min_nm': {'label': 'Min wavelength (nm)', 'type': 'number', 'min': 200.0, 'max': 2000.0, 'step': 1},
        'wavelength_max_nm': {'label': 'Max wavelength (nm)', 'type': 'number', 'min': 200.0, 'max': 2000.0, 'step': 1},
        'resolution_nm': {'label': 'Resolution (nm)', 'type': 'number', 'min': 0.1, 'max': 10.0, 'step': 0.1},
    }

    def __init__(self, scene, json_obj=None, **props):
        super().__init__(scene, json_obj, **props)
        self.reset()

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    def _update_geometry(self) -> None:
        if self.wavelength_min_nm >= self.wavelength_max_nm:
            raise ValueError("wavelength range is empty")
        self._update_polygon_geometry()

    @property
    def bin_count(self) -> int:
        return max(1, int(math.ceil((self.wavelength_max_nm - self.wavelength_min_nm) / self.resolution_nm)))

    def reset(self) -> None:
        self.spectrum = np.zeros(self.bin_count)
        self.total_hits = 0

    def on_trace_start(self) -> None:
        self.reset()

    def on_properties_changed(self, names: List[str]) -> None:
        self.reset()

    def wavelengths(self) -> np.ndarray:
        """Centre wavelength of each bin."""
        return self.wavelength_min_nm + (np.arange(self.bin_count) + 0.5) * self.resolution_nm

    @property
    def peak_wavelength(self) -> Optional[float]:
        if not self.spectrum.any():
            return None
        return float(self.wavelengths()[int(np.argmax(self.spectrum))])

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'total_intensity': ('Total intensity', float(self.spectrum.sum())),
            'peak_wavelength': ('Peak wavelength (nm)', self.peak_wavelength),
            'total_hits': ('Rays detected', self.total_hits),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction, entering_only=True)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        self.total_hits += 1
        if self.wavelength_min_nm <= ray.wavelength_nm <= self.wavelength_max_nm:
            index = int((ray.wavelength_nm - self.wavelength_min_nm) / self.resolution_nm)
            self.spectrum[min(index, self.bin_count - 1)] += ray.intensity
        ray.terminate('absorbed_spectrometer')
        return []
