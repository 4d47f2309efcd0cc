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
    from ray_optics_lab.core.dispersion import chromatic_focal_length, refractive_index
else:
    from ..base_paraxial_lens import BaseParaxialLens
    from ...dispersion import chromatic_focal_length, refractive_index

if TYPE_CHECKING:
    from ...ray import Ray


class ThinLens(BaseParaxialLens):
    """
    Ideal thin lens with chromatic focal length.

    `focal_length` is the focal length at 550 nm. For other wavelengths it
    is scaled by (n_550 - 1) / (n_lambda - 1), with n from the Cauchy model
    of the lens material. A negative focal length makes a diverging lens.

    Attributes:
        diameter (float): Clear aperture (length of the lens segment).
        focal_length (float): Focal length at 550 nm (non-zero).
        refractive_index (float): Material index at 550 nm.
        cauchy_b (float): Material Cauchy coefficient B (nm^2).
    """

    type = 'ThinLens'

    serializable_defaults: Dict[str, Any] = {
        **BaseParaxialLens.serializable_defaults,
        'diameter': 80.0,
        'focal_length': 150.0,
        'refractive_index': 1.5,
        'cauchy_b': 5000.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseParaxialLens.property_specs,
        'diameter': {'label': 'Diameter', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'focal_length': {'label': 'Focal length (550 nm)', 'type': 'number', 'min': -1e7, 'max': 1e7, 'step': 1},
        'refractive_index': {'label': 'Refractive index (550 nm)', 'type': 'number', 'min': 1.0, 'max': 4.0, 'step': 0.01},
        'cauchy_b': {'label': 'Cauchy B (nm^2)', 'type': 'number', 'min': 0.0, 'max': 50000.0, 'step': 100},
    }

    def _update_geometry(self) -> None:
        if self.focal_length == 0:
            raise ValueError("focal length must be non-zero")
        super()._update_geometry()

    def focal_length_for(self, ray: 'Ray') -> float:
        return chromatic_focal_length(self.focal_length, self.refractive_index, self.cauchy_b,
                                      ray.wavelength_nm)

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'optical_power': ('Optical power (1/unit)', 1.0 / self.focal_length),
            'f_400': ('f at 400 nm', round(chromatic_focal_length(
                self.focal_length, self.refractive_index, self.cauchy_b, 400.0), 4)),
            'f_700': ('f at 700 nm', round(chromatic_focal_length(
                self.focal_length, self.refractive_index, self.cauchy_b, 700.0), 4)),
        }


class ThickLens(BaseParaxialLens):
    """
    Lens with two spherical surfaces, reduced to its effective focal length.

    P = (n - 1)(1/R1 - 1/R2) + (n - 1)^2 d / (n R1 R2)

    A radius of 0 stands for a flat surface. Choosing a preset other than
    'custom' loads its radii; editing a radius switches the preset to
    'custom'.

    Attributes:
        preset (str): plano_convex, plano_concave, biconvex, biconcave or custom.
        r1 (float): Radius of the first surface (0 = flat).
        r2 (float): Radius of the second surface (0 = flat).
        thickness (float): Centre thickness.
    """

    type = 'ThickLens'

    PRESETS: Dict[str, Tuple[float, float]] = {
        'plano_convex': (100.0, 0.0),
        'plano_concave': (-100.0, 0.0),
        'biconvex': (100.0, -100.0),
        'biconcave': (-100.0, 100.0),
    }

    serializable_defaults: Dict[str, Any] = {
        **BaseParaxialLens.serializable_defaults,
        'diameter': 80.0,
        'preset': 'biconvex',
        'r1': 100.0,
        'r2': -100.0,
        'thickness': 10.0,
        'refractive_index': 1.5,
        'cauchy_b': 5000.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseParaxialLens.property_specs,
        'diameter': {'label': 'Diameter', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'preset': {'label': 'Shape', 'type': 'select',
                   'options': ['plano_convex', 'plano_concave', 'biconvex', 'biconcave', 'custom']},
        'r1': {'label': 'R1', 'type': 'number', 'min': -1e7, 'max': 1e7, 'step': 1},
        'r2': {'label': 'R2', 'type': 'number', 'min': -1e7, 'max': 1e7, 'step': 1},
        'thickness': {'label': 'Thickness', 'type': 'number', 'min': 0.0, 'max': 1e6, 'step': 0.5},
        'refractive_index': {'label': 'Refractive index (550 nm)', 'type': 'number', 'min': 1.0, 'max': 4.0, 'step': 0.01},
        'cauchy_b': {'label': 'Cauchy B (nm^2)', 'type': 'number', 'min': 0.0, 'max': 50000.0, 'step': 100},
    }

    def set_property(self, name: str, value: Any) -> bool:
        if name == 'preset' and value in self.PRESETS:
            r1, r2 = self.PRESETS[value]
            return self._apply_changes({'preset': value, 'r1': r1, 'r2': r2})
        if name in ('r1', 'r2'):
            ok, coerced = self._coerce_value(name, value)
            if not ok:
                return False
            return self._apply_changes({name: coerced, 'preset': 'custom'})
        return super().set_property(name, value)

    def optical_power(self, n: float) -> float:
        """Lensmaker's power for material index n."""
        c1 = 1.0 / self.r1 if self.r1 else 0.0
        c2 = 1.0 / self.r2 if self.r2 else 0.0
        return (n - 1.0) * (c1 - c2) + (n - 1.0) ** 2 * self.thickness * c1 * c2 / n

    def effective_focal_length(self, wavelength_nm: float = 550.0) -> float:
        n = refractive_index(wavelength_nm, self.refractive_index, self.cauchy_b)
        power = self.optical_power(n)
        if abs(power) < 1e-15:
            return math.inf
        return 1.0 / power

    def focal_length_for(self, ray: 'Ray') -> float:
        return self.effective_focal_length(ray.wavelength_nm)

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        f = self.effective_focal_length()
        return {
            'effective_focal_length': ('Effective focal length (550 nm)',
                                       f if math.isinf(f) else round(f, 4)),
        }


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene

    scene = Scene()
    lens = ThickLens(scene, preset='plano_convex', r1=100.0, r2=0.0)
    print(f"plano-convex EFL: {lens.effective_focal_length():.3f}")
    thin = ThinLens(scene, focal_length=100.0)
    print(thin.get_derived_properties())
