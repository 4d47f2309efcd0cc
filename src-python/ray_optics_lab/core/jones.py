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

"""
===============================================================================
Jones calculus helpers
===============================================================================

A Jones vector is a complex numpy array of shape (2,) holding (Ex, Ey) in
the scene frame. Devices are 2x2 complex matrices applied with `@`.

Conventions:
    - linear(theta): (cos theta, sin theta)
    - circular('circular-right'): (1, i)/sqrt(2)
    - circular('circular-left'):  (1, -i)/sqrt(2)
    - Stokes: S0 = |Ex|^2 + |Ey|^2, S1 = |Ex|^2 - |Ey|^2,
              S2 = 2 Re(Ex Ey*), S3 = 2 Im(Ex Ey*)
===============================================================================
"""

import math
from typing import Optional, Tuple, Union

import numpy as np

# Tolerance used when classifying a Jones vector as linear or circular
POLARIZATION_TOLERANCE = 1e-4

CIRCULAR_RIGHT = 'circular-right'
CIRCULAR_LEFT = 'circular-left'
ELLIPTICAL = 'elliptical'

PolarizationTag = Union[None, float, str]


def linear(theta: float) -> np.ndarray:
    """Linear polarization at angle `theta` (radians) from the x axis."""
    return np.array([math.cos(theta), math.sin(theta)], dtype=complex)


def circular(handedness: str = CIRCULAR_RIGHT) -> np.ndarray:
    inv = 1.0 / math.sqrt(2.0)
    if handedness == CIRCULAR_LEFT:
        return np.array([inv, -1j * inv], dtype=complex)
    return np.array([inv, 1j * inv], dtype=complex)


def intensity(jones: np.ndarray) -> float:
    """|Ex|^2 + |Ey|^2."""
    return float(np.sum(np.abs(jones) ** 2))


def normalized(jones: np.ndarray) -> Optional[np.ndarray]:
    """Unit-norm copy of a Jones vector, or None for a null field."""
    norm2 = intensity(jones)
    if norm2 < 1e-24:
        return None
    return jones / math.sqrt(norm2)


def rotation(theta: float) -> np.ndarray:
    """Rotation of the field by `theta` radians (counter-clockwise)."""
    c = math.cos(theta)
    s = math.sin(theta)
    return np.array([[c, -s], [s, c]], dtype=complex)


def polarizer(axis: float) -> np.ndarray:
    """Projector onto the linear transmission axis at `axis` radians."""
    c = math.cos(axis)
    s = math.sin(axis)
    return np.array([[c * c, c * s], [c * s, s * s]], dtype=complex)


def retarder(fast_axis: float, retardance: float) -> np.ndarray:
    """
    Wave plate with the given fast axis and retardance, R(phi) M R(-phi).

    The slow axis is delayed by `retardance`: M = diag(1, exp(i*retardance)).
    A half-wave plate (pi) gives diag(1, -1), a quarter-wave plate (pi/2)
    gives diag(1, i).
    """
    m = np.array([[1.0, 0.0], [0.0, np.exp(1j * retardance)]], dtype=complex)
    # Snap the two common cases so that products stay exact
    if abs(retardance - math.pi) < 1e-12:
        m = np.array([[1.0, 0.0], [0.0, -1.0]], dtype=complex)
    elif abs(retardance - math.pi / 2) < 1e-12:
        m = np.array([[1.0, 0.0], [0.0, 1j]], dtype=complex)
    return rotation(fast_axis) @ m @ rotation(-fast_axis)


def half_wave_plate(fast_axis: float) -> np.ndarray:
    return retarder(fast_axis, math.pi)


def quarter_wave_plate(fast_axis: float) -> np.ndarray:
    return retarder(fast_axis, math.pi / 2)


def stokes(jones: np.ndarray) -> Tuple[float, float, float, float]:
    """Stokes parameters (S0, S1, S2, S3) of a fully polarized field."""
    ex, ey = jones[0], jones[1]
    ex2 = abs(ex) ** 2
    ey2 = abs(ey) ** 2
    cross = ex * np.conj(ey)
    return (float(ex2 + ey2), float(ex2 - ey2), float(2.0 * cross.real), float(2.0 * cross.imag))


def classify(jones: np.ndarray, tol: float = POLARIZATION_TOLERANCE) -> PolarizationTag:
    """
    Derive the polarization tag of a Jones vector.

    Returns:
        The linear angle in radians, 'circular-right', 'circular-left' or
        'elliptical'. A null vector is reported as None.
    """
    ex, ey = complex(jones[0]), complex(jones[1])
    ax2 = abs(ex) ** 2
    ay2 = abs(ey) ** 2
    if ax2 + ay2 < 1e-30:
        return None

    # A vanishing component makes the state linear along the other axis
    if ay2 < tol * tol * (ax2 + ay2):
        return 0.0
    if ax2 < tol * tol * (ax2 + ay2):
        return math.pi / 2

    delta = math.atan2(math.sin(np.angle(ey) - np.angle(ex)), math.cos(np.angle(ey) - np.angle(ex)))
    if abs(delta) < tol or abs(abs(delta) - math.pi) < tol:
        # Remove the common phase so both components are real
        ref = np.exp(-1j * np.angle(ex))
        exr = (ex * ref).real
        eyr = (ey * ref).real
        return math.atan2(eyr, exr)

    if abs(ax2 - ay2) < tol * (ax2 + ay2) and abs(abs(delta) - math.pi / 2) < tol:
        return CIRCULAR_RIGHT if delta > 0 else CIRCULAR_LEFT
    return ELLIPTICAL


def from_tag(tag: PolarizationTag) -> Optional[np.ndarray]:
    """Materialize a polarization tag as a unit Jones vector (None if unpolarized)."""
    if tag is None or tag == ELLIPTICAL:
        return None
    if tag in (CIRCULAR_RIGHT, CIRCULAR_LEFT):
        return circular(tag)
    if tag == 'circular':
        return circular(CIRCULAR_RIGHT)
    return linear(float(tag))


if __name__ == "__main__":
    h = linear(0.0)
    print(f"H through crossed polarizer: {intensity(polarizer(math.pi / 2) @ h):.3e}")
    qwp = quarter_wave_plate(math.pi / 4)
    print(f"H through QWP@45: {classify(qwp @ h)}")
    print(f"Stokes of right circular: {stokes(circular())}")
