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
    from ray_optics_lab.core.geometry import Vector2, geometry
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2, geometry

if TYPE_CHECKING:
    from ...ray import Ray, Hit

BOLTZMANN = 1.380649e-23      # J/K
ATOMIC_MASS_UNIT = 1.66054e-27  # kg
SPEED_OF_LIGHT = 299792458.0  # m/s
UNITS_PER_CM = 1e4

# Alkali D lines: (wavelength nm, natural linewidth MHz) and mass number
ATOM_DATA: Dict[str, Dict[str, Any]] = {
    'Rb85': {'D1': (794.98, 5.75), 'D2': (780.24, 6.07), 'mass': 85},
    'Rb87': {'D1': (794.98, 5.75), 'D2': (780.24, 6.07), 'mass': 87},
    'Cs133': {'D1': (894.35, 4.56), 'D2': (852.35, 5.22), 'mass': 133},
    'Na23': {'D1': (589.76, 9.76), 'D2': (589.16, 9.76), 'mass': 23},
    'K39': {'D1': (770.11, 5.96), 'D2': (766.70, 6.04), 'mass': 39},
}


class AtomicCell(PolygonObjMixin, BaseSceneObj):
    """
    Alkali vapour cell with resonant Beer-Lambert absorption.

    The line shape is a pseudo-Voigt mix of the Doppler (Gaussian) and
    natural (Lorentzian) profiles. A ray entering the cell is transmitted
    undeviated from the far side of its chord through the cell, scaled by

        T = exp(-alpha(lambda) * L)

    with alpha in 1/cm and L the chord length (1 unit = 1 um).
    """

    type = 'AtomicCell'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'width': 80.0,
        'height': 40.0,
        'atom_type': 'Rb87',
        'transition_line': 'D2',
        'density': 1e10,
        'temperature_k': 300.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'width': {'label': 'Length', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
        'height': {'label': 'Height', 'type': 'number', 'min': 20.0, 'max': 1e6, 'step': 1},
        'atom_type': {'label': 'Atom', 'type': 'select', 'options': list(ATOM_DATA)},
        'transition_line': {'label': 'Transition', 'type': 'select', 'options': ['D1', 'D2']},
        'density': {'label': 'Density (atoms/cm^3)', 'type': 'number', 'min': 1e6, 'max': 1e20, 'step': 1e9},
        'temperature_k': {'label': 'Temperature (K)', 'type': 'number', 'min': 1.0, 'max': 2000.0, 'step': 1},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hw = self.width / 2.0
        hh = self.height / 2.0
        return [Vector2(-hw, -hh), Vector2(hw, -hh), Vector2(hw, hh), Vector2(-hw, hh)]

    # ==================== Line shape ====================

    def resonance_wavelength(self) -> float:
        return ATOM_DATA[self.atom_type][self.transition_line][0]

    def natural_linewidth(self) -> float:
        """Natural FWHM in nm, lambda^2 * dnu / c."""
        wavelength, width_mhz = ATOM_DATA[self.atom_type][self.transition_line]
        return wavelength ** 2 * width_mhz * 1e6 / (SPEED_OF_LIGHT * 1e9)

    def doppler_linewidth(self) -> float:
        """Doppler FWHM in nm at the cell temperature."""
        mass = ATOM_DATA[self.atom_type]['mass'] * ATOMIC_MASS_UNIT
        ratio = 8.0 * BOLTZMANN * self.temperature_k * math.log(2.0) / (mass * SPEED_OF_LIGHT ** 2)
        return self.resonance_wavelength() * math.sqrt(ratio)

    def absorption_coefficient(self, wavelength_nm: float) -> float:
        """alpha in 1/cm."""
        detuning = wavelength_nm - self.resonance_wavelength()
        f_l = self.natural_linewidth()
        f_g = self.doppler_linewidth()

        # Olivero-Longbothum total width and mixing parameter
        f = (f_g ** 5 + 2.69269 * f_g ** 4 * f_l + 2.42843 * f_g ** 3 * f_l ** 2
             + 4.47163 * f_g ** 2 * f_l ** 3 + 0.07842 * f_g * f_l ** 4 + f_l ** 5) ** 0.2
        eta = 1.36603 * (f_l / f) - 0.47719 * (f_l / f) ** 2 + 0.11116 * (f_l / f) ** 3

        sigma_g = f_g / (2.0 * math.sqrt(2.0 * math.log(2.0)))
        gamma_l = f_l / 2.0
        gaussian = math.exp(-detuning ** 2 / (2.0 * sigma_g ** 2)) / (sigma_g * math.sqrt(2.0 * math.pi))
        lorentzian = (gamma_l / math.pi) / (detuning ** 2 + gamma_l ** 2)
        profile = eta * lorentzian + (1.0 - eta) * gaussian

        cross_section = 3.0 * (self.resonance_wavelength() * 1e-7) ** 2 / (2.0 * math.pi)  # cm^2
        return max(0.0, self.density * cross_section * profile * f_g)

    def transmission(self, wavelength_nm: float, path_length: float) -> float:
        """Beer-Lambert transmission over `path_length` scene units."""
        return math.exp(-self.absorption_coefficient(wavelength_nm) * path_length / UNITS_PER_CM)

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'resonance_nm': ('Resonance (nm)', self.resonance_wavelength()),
            'doppler_width_pm': ('Doppler width (pm)', self.doppler_linewidth() * 1e3),
            'resonant_transmission': ('Transmission on resonance',
                                      self.transmission(self.resonance_wavelength(), self.width)),
        }

    # ==================== Tracing ====================

    def chord_length(self, entry: Vector2, direction: Vector2) -> float:
        """Length of the straight path through the cell starting at `entry`."""
        reach = self.width + self.height
        path = geometry.segment(entry, entry + direction * reach)
        return path.intersection(self.body).length

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction, entering_only=True)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        chord = self.chord_length(hit.point, ray.direction)
        exit_point = hit.point + ray.direction * chord
        ray.terminate('absorbed_atomic_cell')
        return self.transmit_ray(ray, hit, ray.intensity * self.transmission(ray.wavelength_nm, chord),
                                 origin=exit_point)
