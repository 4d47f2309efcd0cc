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

===============================================================================
Fresnel Equation Utilities
===============================================================================
Standalone functions for the Fresnel equations at a planar dielectric
interface. The solid components (blocks, prisms) use `fresnel_reflectance`
for every face crossing; the other helpers let a caller ask "what should I
expect?" without running a trace.

All functions return values; no print() side effects.
===============================================================================
"""

from __future__ import annotations
import math
from typing import Dict, Tuple


def fresnel_reflectance(n1: float, n2: float, cos_i: float, cos_t: float) -> Tuple[float, float]:
    """
    s- and p-polarized power reflectances from the incidence/refraction cosines.

    Args:
        n1: Index of the incident medium.
        n2: Index of the transmitting medium.
        cos_i: Cosine of the angle of incidence (>= 0).
        cos_t: Cosine of the refraction angle (>= 0).

    Returns:
        (R_s, R_p)
    """
    denom_s = n1 * cos_i + n2 * cos_t
    denom_p = n2 * cos_i + n1 * cos_t
    r_s = (n1 * cos_i - n2 * cos_t) / denom_s if denom_s > 0 else 1.0
    r_p = (n2 * cos_i - n1 * cos_t) / denom_p if denom_p > 0 else 1.0
    return r_s * r_s, r_p * r_p


def fresnel_coefficients(n1: float, n2: float, theta_i_deg: float) -> Dict[str, float]:
    """
    Compute Fresnel power reflectances and transmittances at an interface.

    Args:
        n1: Refractive index of the incident medium.
        n2: Refractive index of the transmitting medium.
        theta_i_deg: Angle of incidence in degrees (from normal).

    Returns:
        Dict with keys:
        - 'R_s', 'R_p': s/p power reflectances
        - 'T_s', 'T_p': s/p power transmittances
        - 'R': unpolarized reflectance, (R_s + R_p) / 2
        - 'T': unpolarized transmittance, 1 - R
        - 'theta_t_deg': refraction angle in degrees

    Raises:
        ValueError: If the angle exceeds the critical angle (TIR).
    """
    theta_i = math.radians(theta_i_deg)
    cos_i = abs(math.cos(theta_i))
    sin_i = math.sin(theta_i)

    # Snell's law: n1 * sin(theta_i) = n2 * sin(theta_t)
    sin_t = (n1 / n2) * sin_i
    if abs(sin_t) > 1.0:
        raise ValueError(
            f"Total internal reflection: angle {theta_i_deg:.2f} deg exceeds "
            f"critical angle {critical_angle(n1, n2):.2f} deg for n1={n1}, n2={n2}."
        )
    cos_t = math.sqrt(1.0 - sin_t * sin_t)

    R_s, R_p = fresnel_reflectance(n1, n2, cos_i, cos_t)
    R = 0.5 * (R_s + R_p)
    return {
        'R_s': R_s,
        'R_p': R_p,
        'T_s': 1.0 - R_s,
        'T_p': 1.0 - R_p,
        'R': R,
        'T': 1.0 - R,
        'theta_t_deg': math.degrees(math.asin(sin_t)),
    }


def critical_angle(n1: float, n2: float) -> float:
    """
    Compute the critical angle for total internal reflection.

    Args:
        n1: Refractive index of the denser medium (must be > n2).
        n2: Refractive index of the rarer medium.

    Returns:
        Critical angle in degrees.

    Raises:
        ValueError: If n1 <= n2 (no TIR possible).
    """
    if n1 <= n2:
        raise ValueError(
            f"No TIR possible: n1={n1} must be greater than n2={n2}."
        )
    return math.degrees(math.asin(n2 / n1))


def brewster_angle(n1: float, n2: float) -> float:
    """Brewster's angle in degrees (where R_p = 0)."""
    return math.degrees(math.atan(n2 / n1))


if __name__ == "__main__":
    print(fresnel_coefficients(1.0, 1.5, 45.0))
    print(f"critical angle glass->air: {critical_angle(1.5, 1.0):.3f} deg")
    print(f"Brewster air->glass: {brewster_angle(1.0, 1.5):.3f} deg")
