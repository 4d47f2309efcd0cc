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
from dataclasses import dataclass, replace
from typing import Optional

if __name__ == "__main__":
    from constants import PIXELS_PER_NANOMETER
else:
    from .constants import PIXELS_PER_NANOMETER


@dataclass(frozen=True)
class GaussianBeam:
    """
    Gaussian beam parameters carried by a ray.

    Lengths are in scene units. `z` is the signed distance of the ray origin
    from the beam waist (positive once past the waist), so the complex beam
    parameter at the origin is q = z + i*zR.

    Attributes:
        waist: Waist radius w0.
        rayleigh_range: Rayleigh range zR = pi * w0^2 / lambda.
        z: Distance from the waist at the ray origin.
    """
    waist: float
    rayleigh_range: float
    z: float = 0.0

    @classmethod
    def from_waist(cls, waist: float, wavelength_nm: float, z: float = 0.0) -> 'GaussianBeam':
        wavelength = wavelength_nm * PIXELS_PER_NANOMETER
        return cls(waist, math.pi * waist * waist / wavelength, z)

    @property
    def q(self) -> complex:
        return complex(self.z, self.rayleigh_range)

    def width(self, dz: float = 0.0) -> float:
        """Beam radius w(z) at distance `dz` past the ray origin."""
        z = self.z + dz
        if self.rayleigh_range <= 0:
            return self.waist
        return self.waist * math.sqrt(1.0 + (z / self.rayleigh_range) ** 2)

    def propagated(self, distance: float) -> 'GaussianBeam':
        return replace(self, z=self.z + distance)

    def apply_abcd(self, a: float, b: float, c: float, d: float,
                   wavelength_nm: float) -> Optional['GaussianBeam']:
        """
        Transform the beam with an ABCD matrix, q' = (Aq + B)/(Cq + D).

        Returns None if the transformed beam is not physical (Im q' <= 0).
        """
        q = self.q
        denom = c * q + d
        if abs(denom) < 1e-15:
            return None
        q_out = (a * q + b) / denom
        if not (math.isfinite(q_out.real) and math.isfinite(q_out.imag)) or q_out.imag <= 0:
            return None
        wavelength = wavelength_nm * PIXELS_PER_NANOMETER
        waist = math.sqrt(q_out.imag * wavelength / math.pi)
        return GaussianBeam(waist, q_out.imag, q_out.real)


def thin_lens_matrix(focal_length: float):
    """ABCD matrix (1, 0, -1/f, 1) of a thin lens."""
    if math.isinf(focal_length):
        return 1.0, 0.0, 0.0, 1.0
    return 1.0, 0.0, -1.0 / focal_length, 1.0


if __name__ == "__main__":
    beam = GaussianBeam.from_waist(5.0, 550)
    print(beam, f"w(zR) = {beam.width(beam.rayleigh_range):.4f}")
    focused = beam.propagated(200).apply_abcd(*thin_lens_matrix(100), wavelength_nm=550)
    print(f"after f=100 lens: {focused}")
