"""
===============================================================================
RAY, CONFIGURATION AND CALCULUS TESTS
===============================================================================

Tests for the building blocks of the tracer:

1. RAY STATE
   - Validation at construction (InvalidRayError reasons)
   - spawn(): bounce count, emission offset, inherited polarization
   - termination_check() and first-reason-wins termination
   - Phase accumulation along a segment

2. CONFIGURATION
   - TraceConfig validation and dict round trip

3. CALCULUS
   - Jones vectors and classification
   - Gaussian beam q-parameter
   - Cauchy dispersion

Run with:
    python developer_tests/test_ray_and_config.py

Or with pytest:
    pytest developer_tests/test_ray_and_config.py -v
===============================================================================
"""

import sys
import math
from pathlib import Path

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

import numpy as np
import pytest

from ray_optics_lab.core.geometry import Vector2
from ray_optics_lab.core.ray import Ray
from ray_optics_lab.core.config import TraceConfig
from ray_optics_lab.core.errors import InvalidRayError
from ray_optics_lab.core.gaussian import GaussianBeam, thin_lens_matrix
from ray_optics_lab.core.dispersion import refractive_index, chromatic_focal_length
from ray_optics_lab.core.constants import RAY_ORIGIN_OFFSET
from ray_optics_lab.core import jones as jones_calc


# =============================================================================
# TEST CONFIGURATION
# =============================================================================

TOLERANCE = 1e-9


def assert_close(actual, expected, tol=TOLERANCE, msg=""):
    """Assert that two values are close within tolerance."""
    if abs(actual - expected) > tol:
        raise AssertionError(
            f"{msg}: expected {expected}, got {actual} (diff: {abs(actual - expected)})"
        )


# =============================================================================
# RAY STATE
# =============================================================================

def test_ray_rejects_invalid_state():
    """Invalid rays are refused at construction with a reason tag."""
    print("\nTest: ray validation")
    cases = [
        (dict(origin=Vector2(float('nan'), 0), direction=Vector2(1, 0)), 'nan_origin'),
        (dict(origin=Vector2(0, 0), direction=Vector2(float('inf'), 0)), 'nan_direction'),
        (dict(origin=Vector2(0, 0), direction=Vector2(0, 0)), 'zero_direction'),
        (dict(origin=Vector2(0, 0), direction=Vector2(1, 0), intensity=-1.0), 'negative_intensity'),
        (dict(origin=Vector2(0, 0), direction=Vector2(1, 0), medium_refractive_index=0.5),
         'invalid_refractive_index'),
    ]
    for kwargs, reason in cases:
        with pytest.raises(InvalidRayError) as info:
            Ray(**kwargs)
        assert info.value.reason == reason, f"expected {reason}, got {info.value.reason}"
        print(f"  {reason}: PASS")


def test_ray_direction_is_normalized():
    ray = Ray(Vector2(0, 0), Vector2(3, 4))
    assert_close(ray.direction.magnitude(), 1.0, msg="direction norm")
    assert_close(ray.direction.x, 0.6, msg="direction x")
    assert ray.is_active
    assert ray.history == [Vector2(0, 0)]


def test_spawn_child_ray():
    """Children have bounce+1, an offset origin, lineage and inherited polarization."""
    print("\nTest: spawn")
    parent = Ray(Vector2(0, 0), Vector2(1, 0), intensity=2.0, polarization=math.radians(30))
    parent.advance_to(Vector2(10, 0))
    child = parent.spawn(Vector2(10, 0), Vector2(0, 1), intensity=0.5, interaction_type='reflect')

    assert child.bounce_count == parent.bounce_count + 1
    assert_close(child.origin.y, RAY_ORIGIN_OFFSET, msg="origin offset")
    assert child.parent_uuid == parent.uuid
    assert child.interaction_type == 'reflect'
    assert_close(child.intensity, 0.5, msg="child intensity")
    assert_close(child.polarization, math.radians(30), 1e-9, "inherited polarization")
    assert child.history[:2] == parent.history
    print("  PASS")


def test_spawn_explicit_polarization_overrides():
    parent = Ray(Vector2(0, 0), Vector2(1, 0))
    child = parent.spawn(Vector2(0, 0), Vector2(1, 0), jones=jones_calc.circular(jones_calc.CIRCULAR_LEFT))
    assert child.polarization == jones_calc.CIRCULAR_LEFT
    cleared = child.spawn(Vector2(0, 0), Vector2(1, 0), jones=None)
    assert cleared.polarization is None and cleared.jones is None


def test_propagation_phase():
    """Phase advances by 2 pi n L / lambda, with lambda in scene units (um)."""
    ray = Ray(Vector2(0, 0), Vector2(1, 0), wavelength_nm=500.0)
    ray.advance_to(Vector2(1.25, 0))
    expected = 2 * math.pi / 0.5 * 1.25 * ray.medium_refractive_index
    assert_close(ray.propagation_phase, expected, 1e-9, "propagation phase")
    child = ray.spawn(Vector2(1.25, 0), Vector2(1, 0), offset=False)
    assert_close(child.phase, expected % (2 * math.pi), 1e-9, "child phase")


def test_termination_check():
    config = TraceConfig(max_ray_bounces=3, min_ray_intensity=0.01)
    assert Ray(Vector2(0, 0), Vector2(1, 0), bounce_count=3).termination_check(config) == 'max_bounces'
    assert Ray(Vector2(0, 0), Vector2(1, 0), intensity=0.001).termination_check(config) == 'low_intensity'
    dim = Ray(Vector2(0, 0), Vector2(1, 0), intensity=0.001, ignore_decay=True)
    assert dim.termination_check(config) is None
    # Bounces are enforced even when decay is ignored
    bright = Ray(Vector2(0, 0), Vector2(1, 0), bounce_count=5, ignore_decay=True)
    assert bright.termination_check(config) == 'max_bounces'


def test_first_termination_reason_wins():
    ray = Ray(Vector2(0, 0), Vector2(1, 0))
    ray.terminate('reflected')
    ray.terminate('interacted')
    assert ray.termination_reason == 'reflected'
    assert not ray.is_active


# =============================================================================
# CONFIGURATION
# =============================================================================

def test_config_defaults_and_validation():
    print("\nTest: TraceConfig")
    config = TraceConfig()
    assert config.max_ray_bounces == 500
    assert_close(config.min_ray_intensity, 1e-4)
    assert config.max_rays_per_source == 1001
    for bad in (dict(max_ray_bounces=0), dict(min_ray_intensity=-1.0),
                dict(min_ray_intensity=float('nan')), dict(max_rays_per_source=0),
                dict(max_total_rays=0), dict(max_deferred_passes=-1)):
        with pytest.raises(ValueError):
            TraceConfig(**bad)
    print("  PASS")


def test_config_dict_round_trip():
    config = TraceConfig(max_ray_bounces=10, fast_white_light=True, random_seed=3)
    restored = TraceConfig.from_dict(config.to_dict())
    assert restored == config
    # Unknown keys are ignored
    assert TraceConfig.from_dict({'max_ray_bounces': 7, 'bogus': 1}).max_ray_bounces == 7
    assert TraceConfig.from_dict(None) == TraceConfig()


# =============================================================================
# CALCULUS
# =============================================================================

def test_jones_classification():
    print("\nTest: Jones classification")
    assert_close(jones_calc.classify(jones_calc.linear(0.3)), 0.3, 1e-9, "linear angle")
    assert jones_calc.classify(jones_calc.circular(jones_calc.CIRCULAR_RIGHT)) == jones_calc.CIRCULAR_RIGHT
    assert jones_calc.classify(jones_calc.circular(jones_calc.CIRCULAR_LEFT)) == jones_calc.CIRCULAR_LEFT
    elliptical = np.array([1.0, 0.5j], dtype=complex)
    assert jones_calc.classify(elliptical) == jones_calc.ELLIPTICAL
    assert jones_calc.classify(np.zeros(2, dtype=complex)) is None
    print("  PASS")


def test_quarter_wave_plate_makes_circular():
    out = jones_calc.quarter_wave_plate(0.0) @ jones_calc.linear(math.pi / 4)
    assert jones_calc.classify(out) == jones_calc.CIRCULAR_RIGHT
    assert_close(jones_calc.intensity(out), 1.0, 1e-12, "lossless retarder")


def test_stokes_of_pure_states():
    s0, s1, s2, s3 = jones_calc.stokes(jones_calc.linear(0.0))
    assert_close(s0, 1.0)
    assert_close(s1, 1.0)
    s0, s1, s2, s3 = jones_calc.stokes(jones_calc.circular(jones_calc.CIRCULAR_RIGHT))
    assert_close(abs(s3), 1.0, 1e-12, "circular S3")


def test_gaussian_beam():
    """zR = pi w0^2 / lambda with lambda in scene units."""
    beam = GaussianBeam.from_waist(5.0, 550.0)
    assert_close(beam.rayleigh_range, math.pi * 25.0 / 0.55, 1e-9, "Rayleigh range")
    assert_close(beam.width(), 5.0, 1e-9, "width at waist")
    assert_close(beam.propagated(beam.rayleigh_range).width(), 5.0 * math.sqrt(2), 1e-9, "width at zR")

    # A collimated beam at a lens of focal length f has its new waist ~f downstream
    f = 2000.0
    focused = GaussianBeam.from_waist(200.0, 550.0).apply_abcd(*thin_lens_matrix(f), wavelength_nm=550.0)
    assert focused.z < 0, "beam should converge after a positive lens"
    assert abs(-focused.z - f) / f < 0.05


def test_dispersion():
    assert_close(refractive_index(550.0, 1.5, 5000.0), 1.5, 1e-12, "index at reference")
    assert refractive_index(400.0, 1.5, 5000.0) > refractive_index(700.0, 1.5, 5000.0)
    assert_close(chromatic_focal_length(100.0, 1.5, 5000.0, 550.0), 100.0, 1e-9, "f at reference")
    assert chromatic_focal_length(100.0, 1.5, 5000.0, 450.0) < 100.0


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("RAY, CONFIGURATION AND CALCULUS TESTS")
    print("=" * 78)

    tests = [
        ("Ray validation", test_ray_rejects_invalid_state),
        ("Direction normalization", test_ray_direction_is_normalized),
        ("spawn()", test_spawn_child_ray),
        ("spawn() polarization override", test_spawn_explicit_polarization_overrides),
        ("Propagation phase", test_propagation_phase),
        ("termination_check()", test_termination_check),
        ("First reason wins", test_first_termination_reason_wins),
        ("TraceConfig validation", test_config_defaults_and_validation),
        ("TraceConfig round trip", test_config_dict_round_trip),
        ("Jones classification", test_jones_classification),
        ("Quarter-wave plate", test_quarter_wave_plate_makes_circular),
        ("Stokes parameters", test_stokes_of_pure_states),
        ("Gaussian beam", test_gaussian_beam),
        ("Dispersion", test_dispersion),
    ]

    passed = 0
    errors = []
    for name, test_func in tests:
        try:
            test_func()
            passed += 1
        except Exception as e:
            errors.append((name, str(e)))
            print(f"\n  FAILED: {name}")
            print(f"    Error: {e}")

    print("\n" + "=" * 78)
    print(f"SUMMARY: {passed}/{len(tests)} tests passed")
    print("=" * 78)

    if errors:
        print("\nFailed tests:")
        for name, error in errors:
            print(f"  - {name}: {error}")
        return False

    print("\nAll tests passed!")
    return True


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
