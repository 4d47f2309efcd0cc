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
    from ray_optics_lab.core import jones as jones_calc
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2
    from ... import jones as jones_calc

if TYPE_CHECKING:
    from ...ray import Ray, Hit

# Ellipticity (rad) within which a state counts as linear or circular
ELLIPTICITY_TOLERANCE = 0.01

# Degree of polarization below which the accumulated light counts as unpolarized
MIN_DEGREE_OF_POLARIZATION = 1e-6


class PolarizationAnalyzer(PolygonObjMixin, BaseSceneObj):
    """
    Polarimeter sink.

    Every ray that hits the body is absorbed and its intensity-weighted
    Stokes vector is added to the running sums; unpolarized rays only add
    to S0. The accumulated state is exposed as read-only properties:

        dop = sqrt(S1^2 + S2^2 + S3^2) / S0
        psi = atan2(S2, S1) / 2           (ellipse orientation)
        chi = asin(S3 / (S0 dop)) / 2     (ellipticity angle)

    With the Jones convention used here right-circular light (1, i)/sqrt(2)
    has S3 < 0, so a negative chi is reported as 'circular-right'.

    The sums are cleared at the start of every trace, by `reset()` and
    whenever a property changes.
    """

    type = 'PolarizationAnalyzer'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 60.0,
        'height': 50.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Width', 'type': 'number', 'min': 40.0, 'max': 1e6, 'step': 5},
        'height': {'label': 'Height', 'type': 'number', 'min': 40.0, 'max': 1e6, 'step': 5},
    }

    def __init__(self, scene, json_obj=None, **props):
        super().__init__(scene, json_obj, **props)
        self.reset()

    def reset(self) -> None:
        self.stokes_s0 = 0.0
        self.stokes_s1 = 0.0
        self.stokes_s2 = 0.0
        self.stokes_s3 = 0.0
        self.hit_count = 0

    def on_trace_start(self) -> None:
        self.reset()

    def on_properties_changed(self, names: List[str]) -> None:
        self.reset()

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    @property
    def stokes(self) -> Tuple[float, float, float, float]:
        return self.stokes_s0, self.stokes_s1, self.stokes_s2, self.stokes_s3

    def degree_of_polarization(self) -> float:
        if self.stokes_s0 <= 0:
            return 0.0
        polarized = math.sqrt(self.stokes_s1 ** 2 + self.stokes_s2 ** 2 + self.stokes_s3 ** 2)
        return min(1.0, polarized / self.stokes_s0)

    def polarization_ellipse(self) -> Tuple[float, float, str]:
        """
        Orientation, ellipticity and type of the accumulated state.

        Returns:
            (psi, chi, type) with the angles in radians and type one of
            'linear', 'circular-right', 'circular-left', 'elliptical' or
            'unpolarized'.
        """
        dop = self.degree_of_polarization()
        if self.stokes_s0 <= 0 or dop < MIN_DEGREE_OF_POLARIZATION:
            return 0.0, 0.0, 'unpolarized'
        psi = 0.5 * math.atan2(self.stokes_s2, self.stokes_s1)
        ratio = max(-1.0, min(1.0, self.stokes_s3 / (self.stokes_s0 * dop)))
        chi = 0.5 * math.asin(ratio)
        if abs(chi) < ELLIPTICITY_TOLERANCE:
            kind = 'linear'
        elif abs(abs(chi) - math.pi / 4) < ELLIPTICITY_TOLERANCE:
            kind = jones_calc.CIRCULAR_RIGHT if chi < 0 else jones_calc.CIRCULAR_LEFT
        else:
            kind = jones_calc.ELLIPTICAL
        return psi, chi, kind

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        psi, chi, kind = self.polarization_ellipse()
        return {
            'stokes_s0': ('S0 (total intensity)', self.stokes_s0),
            'stokes_s1': ('S1 (H - V)', self.stokes_s1),
            'stokes_s2': ('S2 (+45 - -45)', self.stokes_s2),
            'stokes_s3': ('S3 (L - R)', self.stokes_s3),
            'dop': ('Degree of polarization', self.degree_of_polarization()),
            'polarization_type': ('Polarization type', kind),
            'psi_deg': ('Orientation (deg)', math.degrees(psi)),
            'chi_deg': ('Ellipticity (deg)', math.degrees(chi)),
            'hit_count': ('Rays detected', self.hit_count),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        self.hit_count += 1
        if ray.ensure_jones_vector() and ray.jones_intensity > 1e-12:
            s0, s1, s2, s3 = jones_calc.stokes(ray.jones)
            weight = ray.intensity / s0
            self.stokes_s0 += ray.intensity
            self.stokes_s1 += s1 * weight
            self.stokes_s2 += s2 * weight
            self.stokes_s3 += s3 * weight
        else:
            self.stokes_s0 += ray.intensity
        ray.terminate('absorbed_analyzer')
        return []
