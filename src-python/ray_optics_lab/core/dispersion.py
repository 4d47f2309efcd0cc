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
Two-term Cauchy dispersion model.

    n(lambda) = A + B / lambda^2      (lambda in nm, B in nm^2)

Materials are specified by their index at the 550 nm reference wavelength
and by B; A is back-solved so that B alone controls dispersion strength.
"""

if __name__ == "__main__":
    from constants import CAUCHY_REFERENCE_WAVELENGTH_NM, DEFAULT_WAVELENGTH_NM
else:
    from .constants import CAUCHY_REFERENCE_WAVELENGTH_NM, DEFAULT_WAVELENGTH_NM


def n_cauchy(wavelength_nm: float, A: float, B: float) -> float:
    """
    Refractive index from Cauchy's equation.

    Args:
        wavelength_nm: Wavelength in nanometers.
        A: Cauchy coefficient A (dimensionless, typically ~1.5).
        B: Cauchy coefficient B (in nm^2, typically ~5000).

    Returns:
        Refractive index at the given wavelength.
    """
    return A + B / (wavelength_nm ** 2)


def cauchy_a_from_base(base_index: float, B: float,
                       reference_nm: float = CAUCHY_REFERENCE_WAVELENGTH_NM) -> float:
    """Back-solve A so that n(reference_nm) == base_index."""
    return base_index - B / (reference_nm ** 2)


def refractive_index(wavelength_nm: float, base_index: float, B: float) -> float:
    """
    Index of a material described by (base index at 550 nm, B) at a wavelength.

    Falls back to the reference wavelength for non-positive wavelengths and
    never returns less than 1.
    """
    if not wavelength_nm or wavelength_nm <= 0:
        wavelength_nm = DEFAULT_WAVELENGTH_NM
    A = cauchy_a_from_base(base_index, B)
    return max(1.0, n_cauchy(wavelength_nm, A, B))


def chromatic_focal_length(focal_length_550: float, base_index: float, B: float,
                           wavelength_nm: float) -> float:
    """
    Wavelength-corrected focal length f_550 * (n_550 - 1) / (n_lambda - 1).

    Returns inf when the material is index-matched to air at this wavelength.
    """
    n_lambda = refractive_index(wavelength_nm, base_index, B)
    if abs(n_lambda - 1.0) < 1e-9:
        return float('inf')
    return focal_length_550 * (base_index - 1.0) / (n_lambda - 1.0)


if __name__ == "__main__":
    for wl in (400, 550, 700):
        print(f"n({wl} nm) = {refractive_index(wl, 1.5, 5000):.5f}")
