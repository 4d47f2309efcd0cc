"""
===============================================================================
SPECIAL COMPONENT TESTS - Cavities, Gratings, Apertures, Fibers, Detectors
===============================================================================

1. FABRY-PEROT CAVITY
   - Full transmission on resonance, Airy drop off resonance
   - Finesse, free spectral range, phase and exit position

2. DIFFRACTION
   - Grating equation orders, efficiencies and evanescent orders
   - Acousto-optic modulator deflection and split

3. APERTURE
   - Slits pass, screen absorbs, beam clipped to the slit width
   - Invalid slit layouts are rejected

4. FIBER, POWER METER, CUSTOM COMPONENT

Run with:
    python developer_tests/test_special_components.py

Or with pytest:
    pytest developer_tests/test_special_components.py -v
===============================================================================
"""

import sys
import math
from pathlib import Path

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ray_optics_lab.core.scene import Scene
from ray_optics_lab.core.simulator import Simulator
from ray_optics_lab.core.geometry import Vector2
from ray_optics_lab.core.ray import Ray
from ray_optics_lab.core.scene_objs import (
    FabryPerotCavity, DiffractionGrating, AcoustoOpticModulator, Aperture,
    OpticalFiber, PowerMeter, CustomComponent, LaserSource,
)


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


def interact_once(obj, ray):
    hits = obj.intersect(ray.origin, ray.direction)
    assert hits, f"{obj.get_display_name()} was not hit"
    hit = hits[0]
    ray.advance_to(hit.point)
    return obj.interact(ray, hit)


# =============================================================================
# FABRY-PEROT CAVITY
# =============================================================================

def test_fabry_perot_resonance():
    """
    lambda = 2L/m transmits fully; half a linewidth away T falls to one half.

    Half the exact Airy FWHM lands on T = 0.5 and any further detuning is
    below it. The FSR/finesse linewidth is the high-finesse approximation
    of that FWHM, so half of it sits a hair above 0.5 at R = 0.9.
    """
    print("\n" + "=" * 60)
    print("TEST: Fabry-Perot resonance")
    print("=" * 60)

    cavity = FabryPerotCavity(Scene(), cavity_length_mm=10.0, mirror_reflectivity=0.9)
    two_l = 2.0 * cavity.cavity_length_nm
    m = round(two_l / 550.0)
    resonance = two_l / m

    assert_close(cavity.transmission(resonance), 1.0, 1e-6, "on resonance")
    half_width = 0.5 * cavity.airy_linewidth(resonance)
    assert_close(cavity.transmission(resonance + half_width), 0.5, 1e-4, "half FWHM")
    assert cavity.transmission(resonance + 1.05 * half_width) < 0.5
    assert cavity.transmission(resonance - 1.05 * half_width) < 0.5

    approx_half = 0.5 * cavity.linewidth(resonance)
    assert_close(cavity.transmission(resonance + approx_half), 0.5, 1e-3, "FSR/finesse half width")
    assert_close(cavity.airy_linewidth(550.0), cavity.linewidth(550.0),
                 0.01 * cavity.linewidth(550.0), "high-finesse limit")

    detuned = resonance + 0.75 * cavity.linewidth(resonance)
    assert cavity.transmission(detuned) < 0.5, f"T={cavity.transmission(detuned)}"
    assert min(abs(w - resonance) for w in cavity.resonance_wavelengths(550.0)) < 1e-9
    print(f"  T({resonance:.6f} nm) = {cavity.transmission(resonance):.6f} - PASS")


def test_fabry_perot_figures():
    cavity = FabryPerotCavity(Scene(), cavity_length_mm=10.0, mirror_reflectivity=0.9)
    assert_close(cavity.finesse(), math.pi * math.sqrt(0.9) / 0.1, 1e-9, "finesse")
    assert_close(cavity.free_spectral_range(550.0), 550.0 ** 2 / 2e7, 1e-12, "FSR")
    assert_close(cavity.linewidth(550.0), cavity.free_spectral_range(550.0) / cavity.finesse(),
                 1e-15, "linewidth")

    higher = FabryPerotCavity(Scene(), mirror_reflectivity=0.99)
    assert higher.finesse() > cavity.finesse()

    props = cavity.get_properties()
    assert props['finesse']['readonly']
    assert_close(props['linewidth_pm']['value'], cavity.linewidth() * 1e3, 1e-12, "linewidth in pm")


def test_fabry_perot_tracing():
    """The transmitted ray leaves the far face with the same lateral offset."""
    cavity = FabryPerotCavity(Scene(), cavity_length_mm=10.0)
    m = round(2e7 / 550.0)
    wavelength = 2e7 / m
    ray = Ray(Vector2(-100, 5), Vector2(1, 0), wavelength_nm=wavelength)
    outputs = interact_once(cavity, ray)
    assert len(outputs) == 1
    out = outputs[0]
    assert ray.termination_reason == 'fp_cavity'
    assert_close(out.intensity, 1.0, 1e-6, "resonant transmission")
    assert_close(out.origin.x, cavity.length / 2.0, 1e-5, "exit face")
    assert_close(out.origin.y, 5.0, 1e-9, "lateral offset kept")
    assert_close(out.direction.x, 1.0, 1e-12, "direction kept")


def test_fabry_perot_side_wall():
    cavity = FabryPerotCavity(Scene())
    assert cavity.intersect(Vector2(0, 100), Vector2(0, -1)) == []


# =============================================================================
# DIFFRACTION
# =============================================================================

def test_grating_orders():
    """Normal incidence, d = 1 um, 550 nm: orders -1, 0, +1 only."""
    print("\n" + "=" * 60)
    print("TEST: Grating orders")
    print("=" * 60)

    grating = DiffractionGrating(Scene(), period_um=1.0, max_order=2)
    orders = grating.order_directions(Vector2(1, 0), 550.0)
    assert sorted(m for m, _ in orders) == [-1, 0, 1], "orders +-2 are evanescent"
    for m, direction in orders:
        assert_close(direction.dot(grating.along), m * 0.55, 1e-9, f"sin(theta_{m})")
        assert direction.x > 0, "transmitted forward"

    outputs = interact_once(grating, Ray(Vector2(-50, 0), Vector2(1, 0)))
    total = sum(o.intensity for o in outputs)
    assert_close(total, 0.60 + 2 * 0.15, 1e-12, "order efficiencies")
    assert all(o.interaction_type == 'diffract' for o in outputs)
    print(f"  {len(outputs)} orders, total {total:.2f} - PASS")


def test_grating_coarse_period():
    grating = DiffractionGrating(Scene(), period_um=5.0, max_order=2)
    outputs = interact_once(grating, Ray(Vector2(-50, 0), Vector2(1, 0)))
    assert len(outputs) == 5
    assert_close(sum(o.intensity for o in outputs), 0.60 + 2 * 0.15 + 2 * 0.05, 1e-12, "five orders")
    assert_close(grating.get_properties()['lines_per_mm']['value'], 200.0, 1e-9, "lines per mm")


def test_aom_split():
    aom = AcoustoOpticModulator(Scene(), rf_power=0.3)
    theta = aom.diffraction_angle(550.0)
    assert_close(theta, 550e-9 * 80e6 / 4200.0, 1e-12, "Bragg angle")

    outputs = interact_once(aom, Ray(Vector2(-100, 0), Vector2(1, 0)))
    assert len(outputs) == 2
    zeroth, first = outputs
    assert_close(zeroth.intensity, 0.7, 1e-12, "0th order")
    assert_close(first.intensity, 0.3, 1e-12, "+1st order")
    assert_close(first.direction.angle(), theta, 1e-9, "+1st order direction")

    clamped = AcoustoOpticModulator(Scene(), rf_frequency_mhz=500.0, acoustic_velocity=100.0)
    assert_close(clamped.diffraction_angle(700.0), math.pi / 6, 1e-12, "clamped at 30 deg")


# =============================================================================
# APERTURE
# =============================================================================

def test_aperture_slits():
    """Two slits at +-10: the centre line is opaque."""
    scene = Scene()
    aperture = Aperture(scene, slit_count=2, slit_width=5.0, slit_separation=20.0)

    ray = Ray(Vector2(-50, 10), Vector2(1, 0), beam_diameter=12.0)
    outputs = interact_once(aperture, ray)
    assert len(outputs) == 1
    assert_close(outputs[0].beam_diameter, 5.0, 1e-12, "clipped to the slit width")
    assert ray.termination_reason == 'transmitted'

    blocked = Ray(Vector2(-50, 0), Vector2(1, 0))
    assert interact_once(aperture, blocked) == []
    assert blocked.termination_reason == 'absorbed_aperture'


def test_aperture_rejects_bad_layout():
    scene = Scene()
    aperture = Aperture(scene)
    # 20 slits 20 apart do not fit in 150 units
    assert not aperture.set_property('slit_count', 20)
    assert aperture.slit_count == 1
    assert aperture.set_property('slit_count', 3)
    # Overlapping slits
    assert not aperture.set_property('slit_width', 25.0)
    assert aperture.slit_width == 10.0


# =============================================================================
# FIBER, POWER METER, CUSTOM COMPONENT
# =============================================================================

def test_fiber_coupling_factor():
    """The facet faces -x here, so light couples travelling along +x."""
    print("\n" + "=" * 60)
    print("TEST: Fiber coupling")
    print("=" * 60)

    fiber = OpticalFiber(Scene(), angle_deg=180.0, core_diameter=10.0)
    assert_close(fiber.coupling_factor(Vector2(0, 0), Vector2(1, 0)), 1.0, 1e-12, "centred")
    assert_close(fiber.coupling_factor(Vector2(0, 2.5), Vector2(1, 0)), 0.5, 1e-12, "half radius")
    assert fiber.coupling_factor(Vector2(0, 6.0), Vector2(1, 0)) == 0.0, "outside the core"

    steep = Vector2.from_angle(math.radians(20.0))
    assert fiber.coupling_factor(Vector2(0, 0), steep) == 0.0, "outside the NA cone"
    shallow = Vector2.from_angle(math.radians(5.0))
    assert 0.0 < fiber.coupling_factor(Vector2(0, 0), shallow) < 1.0

    assert_close(fiber.acceptance_angle, math.asin(0.22 / 1.000293), 1e-12, "acceptance angle")
    assert fiber.intersect(Vector2(50, 0), Vector2(-1, 0)) == [], "back of the facet"
    print("  Coupling factors - PASS")


def test_fiber_loss_and_buffering():
    scene = Scene()
    fiber = OpticalFiber(scene, angle_deg=180.0, output_x=1e9, output_y=0.0, loss_db_per_km=3.0)
    assert_close(fiber.transmission_factor(), 10 ** -0.3, 1e-12, "3 dB over 1 km")

    ray = Ray(Vector2(-50, 0), Vector2(1, 0))
    assert interact_once(fiber, ray) == []
    assert ray.termination_reason == 'coupled_fiber'

    deferred = fiber.collect_deferred_rays()
    assert len(deferred) == 1
    assert fiber.collect_deferred_rays() == [], "buffer is emptied"
    out = deferred[0]
    assert out.interaction_type == 'fiber_output'
    assert out.parent_uuid == ray.uuid
    assert_close(out.intensity, 10 ** -0.3, 1e-12, "attenuated")
    assert_close(out.origin.x, 1e9, 1e-3, "leaves the output facet")


def test_fiber_default_output_follows_input():
    fiber = OpticalFiber(Scene(), pos_x=20.0, pos_y=-5.0)
    assert fiber.output_x == 120.0
    assert fiber.output_y == -5.0
    data = fiber.serialize()
    assert data['output_x'] == 120.0 and data['output_y'] == -5.0


def test_fiber_rejects_outside_core():
    fiber = OpticalFiber(Scene(), angle_deg=180.0, core_diameter=4.0, facet_length=20.0)
    ray = Ray(Vector2(-50, 6), Vector2(1, 0))
    assert interact_once(fiber, ray) == []
    assert ray.termination_reason == 'absorbed_fiber_facet'
    assert fiber.collect_deferred_rays() == []


def test_power_meter_readings():
    scene = Scene()
    scene.add_object(LaserSource(scene, pos_x=-100, pos_y=0, angle_deg=0, ray_count=4,
                                 spread_deg=10.0, intensity=2.0))
    meter = scene.add_object(PowerMeter(scene, pos_x=0, pos_y=0, angle_deg=90))
    Simulator(scene).run_trace()
    assert meter.hit_count == 4
    assert_close(meter.total_power, 2.0, 1e-9, "all power collected")
    assert_close(meter.average_power, 0.5, 1e-9, "average")
    assert_close(meter.peak_power, 0.5, 1e-9, "peak")

    # Readings do not carry over between traces
    Simulator(scene).run_trace()
    assert meter.hit_count == 4
    meter.reset()
    assert meter.total_power == 0.0


def test_custom_component_is_not_optical():
    scene = Scene()
    box = scene.add_object(CustomComponent(scene, width=40.0, height=20.0, text='Vacuum chamber'))
    assert box not in scene.optical_objs
    assert_close(box.get_shape().area, 800.0, 1e-9, "box area")
    assert box.serialize()['text'] == 'Vacuum chamber'


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("SPECIAL COMPONENT TESTS")
    print("=" * 78)

    tests = [
        ("FP resonance", test_fabry_perot_resonance),
        ("FP figures", test_fabry_perot_figures),
        ("FP tracing", test_fabry_perot_tracing),
        ("FP side wall", test_fabry_perot_side_wall),
        ("Grating orders", test_grating_orders),
        ("Coarse grating", test_grating_coarse_period),
        ("AOM split", test_aom_split),
        ("Aperture slits", test_aperture_slits),
        ("Aperture layout", test_aperture_rejects_bad_layout),
        ("Fiber coupling", test_fiber_coupling_factor),
        ("Fiber loss", test_fiber_loss_and_buffering),
        ("Fiber output default", test_fiber_default_output_follows_input),
        ("Fiber core", test_fiber_rejects_outside_core),
        ("Power meter", test_power_meter_readings),
        ("Custom component", test_custom_component_is_not_optical),
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
