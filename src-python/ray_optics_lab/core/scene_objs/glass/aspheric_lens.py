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
from typing import Any, Dict, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_paraxial_lens import BaseParaxialLens
else:
    from ..base_paraxial_lens import BaseParaxialLens

if TYPE_CHECKING:
    from ...ray import Ray

# Weight of the surface slope in the deviation correction
SLOPE_CORRECTION = 0.1


class AsphericLens(BaseParaxialLens):
    """
    Lens with a conic surface plus even polynomial terms.

    Sag:
        z(r) = (r^2/R) / (1 + sqrt(1 - (1+k)(r/R)^2)) + A4 r^4 + A6 r^6 + A8 r^8 + A10 r^10

    The focal length is R / (n - 1). The deviation at height h is the thin
    lens rule scaled by (1 + 0.1 * slope(|h|)). The slope correction is an
    empirical approximation, not a full aspheric ray trace.

    Attributes:
        diameter (float): Clear aperture.
        radius (float): Vertex radius of curvature R (0 = flat).
        conic (float): Conic constant k.
        a4, a6, a8, a10 (float): Polynomial coefficients.
        refractive_index (float): Lens material index.
    """

    type = 'AsphericLens'

    serializable_defaults: Dict[str, Any] = {
        **BaseParaxialLens.serializable_defaults,
        'diameter': 60.0,
        'radius': 100.0,
        'conic': 0.0,
        'a4': 0.0,
        'a6': 0.0,
        'a8': 0.0,
        'a10': 0.0,
        'refractive_index': 1.5,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseParaxialLens.property_specs,
        'diameter': {'label': 'Diameter', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'radius': {'label': 'Radius of curvature', 'type': 'number', 'min': -1e7, 'max': 1e7, 'step': 1},
        'conic': {'label': 'Conic constant k', 'type': 'number', 'min': -100.0, 'max': 100.0, 'step': 0.1},
        'a4': {'label': 'A4', 'type': 'number'},
        'a6': {'label': 'A6', 'type': 'number'},
        'a8': {'label': 'A8', 'type': 'number'},
        'a10': {'label': 'A10', 'type': 'number'},
        'refractive_index': {'label': 'Refractive index', 'type': 'number', 'min': 1.0, 'max': 4.0, 'step': 0.01},
    }

    def _conic_root(self, r: float) -> float:
        """sqrt(1 - (1+k)(r/R)^2), clamped at 0 beyond the conic's extent."""
        arg = 1.0 - (1.0 + self.conic) * (r / self.radius) ** 2
        return math.sqrt(max(0.0, arg))

    def _polynomial(self, r: float) -> float:
        return self.a4 * r ** 4 + self.a6 * r ** 6 + self.a8 * r ** 8 + self.a10 * r ** 10

    def sag(self, r: float) -> float:
        if not self.radius:
            return self._polynomial(r)
        return (r * r / self.radius) / (1.0 + self._conic_root(r)) + self._polynomial(r)

    def slope(self, r: float) -> float:
        """dz/dr of the sag."""
        poly = (4 * self.a4 * r ** 3 + 6 * self.a6 * r ** 5
                + 8 * self.a8 * r ** 7 + 10 * self.a10 * r ** 9)
        if not self.radius:
            return poly
        root = self._conic_root(r)
        if root < 1e-12:
            conic = r / self.radius
        else:
            conic = r / (self.radius * root)
        return conic + poly

    def base_focal_length(self) -> float:
        if not self.radius or self.refractive_index <= 1.0:
            return math.inf
        return self.radius / (self.refractive_index - 1.0)

    def focal_length_for(self, ray: 'Ray') -> float:
        return self.base_focal_length()

    def deviation_angle(self, h: float, focal_length: float) -> float:
        return -h / focal_length * (1.0 + SLOPE_CORRECTION * self.slope(abs(h)))

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        r_edge = self.diameter / 2.0
        return {
            'focal_length': ('Focal length', self.base_focal_length()),
            'edge_sag': ('Sag at edge', round(self.sag(r_edge), 6)),
        }
