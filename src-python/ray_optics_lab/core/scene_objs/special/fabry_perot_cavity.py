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
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.constants import DEFAULT_WAVELENGTH_NM
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2
    from ...constants import DEFAULT_WAVELENGTH_NM

if TYPE_CHECKING:
    from ...ray import Ray, Hit

NM_PER_MM = 1e6


class FabryPerotCavity(PolygonObjMixin, BaseSceneObj):
    """
    Fabry-Perot etalon drawn as a rectangular body along its axis.

    A ray entering through either end face is replaced by a single
    transmitted ray leaving the opposite end face with the same lateral
    offset and direction, scaled by the Airy transmission

        T = 1 / (1 + F sin^2(delta / 2)),  F = 4R / (1 - R)^2,
        delta = 4 pi L / lambda

    and shifted in phase by delta. Reflected light is not modelled. The
    cavity length L (mm) is independent of the drawn body length.
    Rays entering through the side walls pass through unaffected.
    """

    type = 'FabryPerotCavity'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'length': 80.0,
        'height': 40.0,
        'cavity_length_mm': 10.0,
        'mirror_reflectivity': 0.9,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Body length', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 5},
        'height': {'label': 'Height', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 5},
        'cavity_length_mm': {'label': 'Cavity length (mm)', 'type': 'number', 'min': 0.1, 'max': 1000.0, 'step': 0.1},
        'mirror_reflectivity': {'label': 'Mirror reflectivity', 'type': 'number', 'min': 0.1, 'max': 0.999, 'step': 0.01},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hl = self.length / 2.0
        hh = self.height / 2.0
        return [Vector2(-hl, -hh), Vector2(hl, -hh), Vector2(hl, hh), Vector2(-hl, hh)]

    def _update_geometry(self) -> None:
        self._update_polygon_geometry()
        self.axis: Vector2 = Vector2.from_angle(self.angle_rad)

    # ==================== Cavity figures ====================

    @property
    def cavity_length_nm(self) -> float:
        return self.cavity_length_mm * NM_PER_MM

    def finesse(self) -> float:
        """pi sqrt(R) / (1 - R)."""
        r = self.mirror_reflectivity
        return math.pi * math.sqrt(r) / (1.0 - r)

    def coefficient_of_finesse(self) -> float:
        r = self.mirror_reflectivity
        return 4.0 * r / (1.0 - r) ** 2

    def free_spectral_range(self, wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> float:
        """FSR in nm, lambda^2 / (2 L)."""
        return wavelength_nm * wavelength_nm / (2.0 * self.cavity_length_nm)

    def linewidth(self, wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> float:
        """Transmission peak FWHM in nm, FSR / finesse."""
        return self.free_spectral_range(wavelength_nm) / self.finesse()

    def airy_linewidth(self, wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> float:
        """
        Exact FWHM in nm of the Airy peak, FSR * 2 asin(1/sqrt(F)) / pi.

        Equals `linewidth()` in the high-finesse limit; half of it away from
        a resonance the transmission is exactly 0.5.
        """
        half_phase = math.asin(min(1.0, 1.0 / math.sqrt(self.coefficient_of_finesse())))
        return self.free_spectral_range(wavelength_nm) * 2.0 * half_phase / math.pi

    def round_trip_phase(self, wavelength_nm: float) -> float:
        return 4.0 * math.pi * self.cavity_length_nm / wavelength_nm

    def transmission(self, wavelength_nm: float) -> float:
        s = math.sin(self.round_trip_phase(wavelength_nm) / 2.0)
        return 1.0 / (1.0 + self.coefficient_of_finesse() * s * s)

    def resonance_wavelengths(self, center_nm: float, count: int = 3) -> List[float]:
        """
        Resonant wavelengths lambda_m = 2L/m around `center_nm`.

        Returns up to 2 * count + 1 values inside (300, 1000) nm, longest first.
        """
        two_l = 2.0 * self.cavity_length_nm
        m_center = round(two_l / center_nm)
        resonances = []
        for m in range(m_center - count, m_center + count + 1):
            if m > 0:
                wavelength = two_l / m
                if 300.0 < wavelength < 1000.0:
                    resonances.append(wavelength)
        return resonances

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'finesse': ('Finesse', self.finesse()),
            'fsr_nm': ('Free spectral range at 550 nm (nm)', self.free_spectral_range()),
            'linewidth_pm': ('Linewidth at 550 nm (pm)', self.linewidth() * 1e3),
        }

    # ==================== Tracing ====================

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        hits = self.intersect_polygon(origin, direction, entering_only=True)
        if hits and abs(hits[0].extra['outward_normal'].dot(self.axis)) < 0.5:
            return []
        return hits

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        forward = self.axis if ray.direction.dot(self.axis) >= 0 else -self.axis
        lateral = forward.perpendicular()
        offset = (hit.point - self.pos).dot(lateral)
        exit_point = self.pos + forward * (self.length / 2.0) + lateral * offset

        delta = self.round_trip_phase(ray.wavelength_nm) % (2.0 * math.pi)
        ray.terminate('fp_cavity')
        return self.transmit_ray(ray, hit, ray.intensity * self.transmission(ray.wavelength_nm),
                                 phase_shift=delta, origin=exit_point)
