"""
===============================================================================
POLARIZATION TESTS - Jones Calculus Through Components
===============================================================================

1. POLARIZERS
   - Malus's law for linear input
   - Crossed polarizers block, a third one at 45 degrees passes 1/8

2. WAVE PLATES AND ROTATORS
   - Half-wave plate mirrors the polarization about its fast axis
   - Quarter-wave plate turns linear into circular light
   - Faraday rotator is non-reciprocal

3. SPLITTERS AND ISOLATORS
   - Polarizing beam splitter fractions and pure s/p outputs
   - Isolator passes forward light and blocks backward light

4. ANALYZER
   - Stokes accumulation, degree of polarization and type

Run with:
    python developer_tests/test_polarization.py

Or with pytest:
    pytest developer_tests/test_polarization.py -v
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
from ray_optics_lab.core import jones as jones_calc
from ray_optics_lab.core.scene_objs import (
    LaserSource, PowerMeter, Polarizer, HalfWavePlate, QuarterWavePlate,
    BeamSplitter, FaradayIsolator, FaradayRotator, PolarizationAnalyzer,
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
    """Hand the ray to the nearest surface of `obj` and return the outputs."""
    hits = obj.intersect(ray.origin, ray.direction)
    assert hits, f"{obj.get_display_name()} was not hit"
    hit = min(hits, key=lambda h: h.distance)
    ray.advance_to(hit.point)
    return obj.interact(ray, hit)


def pass_through(obj, ray):
    """Enter and leave a solid component; returns the exit outputs."""
    inside = interact_once(obj, ray)
    if not inside:
        return []
    assert len(inside) == 1
    return interact_once(obj, inside[0])


def horizontal_ray(polarization=None, x=-50.0):
    return Ray(Vector2(x, 0), Vector2(1, 0), polarization=polarization)


# =============================================================================
# POLARIZERS
# =============================================================================

def test_malus_law():
    """I = I0 cos^2(theta) for linear light at theta to the axis."""
    print("\n" + "=" * 60)
    print("TEST: Malus's law")
    print("=" * 60)

    pol = Polarizer(Scene(), transmission_axis_deg=0.0)
    for deg in (0.0, 30.0, 45.0, 60.0, 80.0):
        outputs = interact_once(pol, horizontal_ray(math.radians(deg)))
        assert len(outputs) == 1
        assert_close(outputs[0].intensity, math.cos(math.radians(deg)) ** 2, 1e-9, f"{deg} deg")
        assert_close(outputs[0].polarization, 0.0, 1e-9, "leaves along the axis")
        print(f"  theta={deg:4.0f}: I={outputs[0].intensity:.4f} - PASS")


def test_unpolarized_through_polarizer():
    pol = Polarizer(Scene(), transmission_axis_deg=30.0)
    outputs = interact_once(pol, horizontal_ray(None))
    assert_close(outputs[0].intensity, 0.5, 1e-12, "half of unpolarized light")
    assert_close(outputs[0].polarization, math.radians(30.0), 1e-9, "polarized along the axis")


def test_crossed_polarizers_block():
    """Crossed polarizers transmit nothing; a 45 degree one in between passes 1/8."""
    print("\n" + "=" * 60)
    print("TEST: Crossed polarizers")
    print("=" * 60)

    def build(middle_axis=None):
        scene = Scene()
        scene.add_object(LaserSource(scene, pos_x=-100, pos_y=0, angle_deg=0))
        scene.add_object(Polarizer(scene, pos_x=0, pos_y=0, transmission_axis_deg=0.0))
        if middle_axis is not None:
            scene.add_object(Polarizer(scene, pos_x=30, pos_y=0, transmission_axis_deg=middle_axis))
        scene.add_object(Polarizer(scene, pos_x=60, pos_y=0, transmission_axis_deg=90.0))
        meter = scene.add_object(PowerMeter(scene, pos_x=100, pos_y=0, angle_deg=90))
        return scene, meter

    scene, meter = build()
    Simulator(scene).run_trace()
    assert_close(meter.total_power, 0.0, 1e-12, "crossed polarizers")

    scene, meter = build(middle_axis=45.0)
    Simulator(scene).run_trace()
    assert_close(meter.total_power, 0.125, 1e-9, "three polarizers")
    print(f"  With a 45 deg polarizer in between: {meter.total_power:.4f} - PASS")


# =============================================================================
# WAVE PLATES AND ROTATORS
# =============================================================================

def test_half_wave_plate():
    hwp = HalfWavePlate(Scene(), fast_axis_deg=0.0)
    outputs = interact_once(hwp, horizontal_ray(math.radians(30.0)))
    assert_close(outputs[0].polarization, math.radians(-30.0), 1e-9, "mirrored about the fast axis")
    assert_close(outputs[0].intensity, 1.0, 1e-12, "lossless")

    outputs = interact_once(hwp, horizontal_ray(jones_calc.CIRCULAR_RIGHT))
    assert outputs[0].polarization == jones_calc.CIRCULAR_LEFT


def test_quarter_wave_plate():
    """Linear light at 45 degrees to the fast axis becomes circular."""
    qwp = QuarterWavePlate(Scene(), fast_axis_deg=45.0)
    outputs = interact_once(qwp, horizontal_ray(0.0))
    assert outputs[0].polarization == jones_calc.CIRCULAR_LEFT

    qwp = QuarterWavePlate(Scene(), fast_axis_deg=-45.0)
    outputs = interact_once(qwp, horizontal_ray(0.0))
    assert outputs[0].polarization == jones_calc.CIRCULAR_RIGHT

    # Along the fast axis nothing changes
    qwp = QuarterWavePlate(Scene(), fast_axis_deg=0.0)
    outputs = interact_once(qwp, horizontal_ray(0.0))
    assert_close(outputs[0].polarization, 0.0, 1e-9, "eigenstate")


def test_wave_plate_passes_unpolarized():
    outputs = interact_once(QuarterWavePlate(Scene()), horizontal_ray(None))
    assert outputs[0].polarization is None
    assert outputs[0].jones is None


def test_faraday_rotator_non_reciprocal():
    scene = Scene()
    rotator = FaradayRotator(scene, rotation_angle_deg=45.0)
    forward = pass_through(rotator, horizontal_ray(0.0, x=-100.0))
    assert_close(forward[0].polarization, math.pi / 4, 1e-9, "forward rotation")

    # Reflect back through the same rotator: the rotations add up
    back = Ray(Vector2(100, 0), Vector2(-1, 0), jones=forward[0].jones)
    backward = pass_through(rotator, back)
    assert_close(abs(backward[0].polarization), math.pi / 2, 1e-9, "double pass")


# =============================================================================
# SPLITTERS AND ISOLATORS
# =============================================================================

def split_outputs(outputs):
    reflected = [o for o in outputs if o.interaction_type == 'reflect']
    transmitted = [o for o in outputs if o.interaction_type == 'transmit']
    return reflected, transmitted


def test_pbs_fractions():
    """The p axis runs along the splitter surface (45 degrees here)."""
    print("\n" + "=" * 60)
    print("TEST: Polarizing beam splitter")
    print("=" * 60)

    pbs = BeamSplitter(Scene(), mode='PBS')

    t, r = pbs.pbs_fractions(horizontal_ray(math.radians(45.0)))
    assert_close(t, 1.0, 1e-9, "p light transmitted")
    assert_close(r, 0.0, 1e-9, "p light not reflected")

    t, r = pbs.pbs_fractions(horizontal_ray(math.radians(-45.0)))
    assert_close(r, 1.0, 1e-9, "s light reflected")

    t, r = pbs.pbs_fractions(horizontal_ray(0.0))
    assert_close(t, 0.5, 1e-9, "horizontal light splits evenly")
    assert_close(t + r, 1.0, 1e-9, "lossless")

    reflected, transmitted = split_outputs(interact_once(pbs, horizontal_ray(None)))
    assert len(reflected) == 1 and len(transmitted) == 1
    assert_close(reflected[0].intensity, 0.5, 1e-12, "unpolarized reflectivity")
    assert_close(transmitted[0].polarization, math.pi / 4, 1e-9, "pure p")
    assert_close(reflected[0].polarization, -math.pi / 4, 1e-9, "pure s")
    print("  p/s fractions and outputs - PASS")


def test_plain_splitter_keeps_polarization():
    bs = BeamSplitter(Scene(), split_ratio=0.3)
    reflected, transmitted = split_outputs(interact_once(bs, horizontal_ray(math.radians(20.0))))
    assert_close(reflected[0].intensity, 0.3, 1e-12, "split ratio")
    assert_close(transmitted[0].intensity, 0.7, 1e-12, "remainder")
    assert_close(transmitted[0].polarization, math.radians(20.0), 1e-9, "unchanged")


def test_isolator():
    """Forward light passes at half intensity, backward light is blocked."""
    print("\n" + "=" * 60)
    print("TEST: Faraday isolator")
    print("=" * 60)

    isolator = FaradayIsolator(Scene())

    forward = pass_through(isolator, Ray(Vector2(-100, 0), Vector2(1, 0)))
    assert len(forward) == 1
    assert_close(forward[0].intensity, 0.5, 1e-9, "forward transmission")
    assert_close(forward[0].polarization, math.pi / 4, 1e-9, "output polarizer axis")

    back = Ray(Vector2(100, 0), Vector2(-1, 0))
    inside = interact_once(isolator, back)
    assert len(inside) == 1
    exit_ray = inside[0]
    outputs = interact_once(isolator, exit_ray)
    assert outputs == []
    assert exit_ray.termination_reason == 'blocked_isolator'
    print("  Forward 0.5, backward blocked - PASS")


# =============================================================================
# ANALYZER
# =============================================================================

def test_analyzer_states():
    scene = Scene()

    analyzer = PolarizationAnalyzer(scene)
    interact_once(analyzer, horizontal_ray(0.0, x=-100.0))
    psi, chi, kind = analyzer.polarization_ellipse()
    assert kind == 'linear'
    assert_close(analyzer.degree_of_polarization(), 1.0, 1e-9, "fully polarized")
    assert_close(psi, 0.0, 1e-9, "horizontal")

    analyzer = PolarizationAnalyzer(scene)
    interact_once(analyzer, horizontal_ray(jones_calc.CIRCULAR_RIGHT, x=-100.0))
    assert analyzer.polarization_ellipse()[2] == jones_calc.CIRCULAR_RIGHT
    assert analyzer.stokes[3] < 0
    s3 = analyzer.get_properties()['stokes_s3']
    assert s3['label'] == 'S3 (L - R)', "right-circular light reads negative"
    assert s3['value'] < 0

    analyzer = PolarizationAnalyzer(scene)
    interact_once(analyzer, horizontal_ray(0.0, x=-100.0))
    interact_once(analyzer, horizontal_ray(math.pi / 2, x=-100.0))
    assert_close(analyzer.degree_of_polarization(), 0.0, 1e-9, "H + V mix")
    assert analyzer.polarization_ellipse()[2] == 'unpolarized'
    assert analyzer.hit_count == 2


def test_analyzer_reset():
    analyzer = PolarizationAnalyzer(Scene())
    interact_once(analyzer, horizontal_ray(None, x=-100.0))
    assert analyzer.stokes[0] > 0
    assert analyzer.polarization_ellipse()[2] == 'unpolarized'

    assert analyzer.set_property('width', 70.0)
    assert analyzer.stokes == (0.0, 0.0, 0.0, 0.0)
    assert analyzer.hit_count == 0


def test_analyzer_in_trace():
    """Laser -> QWP -> analyzer reports circular light."""
    scene = Scene()
    scene.add_object(LaserSource(scene, pos_x=-100, pos_y=0, angle_deg=0,
                                 polarization_type='linear', polarization_angle_deg=0.0))
    scene.add_object(QuarterWavePlate(scene, pos_x=0, pos_y=0, fast_axis_deg=45.0))
    analyzer = scene.add_object(PolarizationAnalyzer(scene, pos_x=100, pos_y=0))
    result = Simulator(scene).run_trace()

    assert result.termination_counts.get('absorbed_analyzer') == 1
    props = analyzer.get_properties()
    assert props['polarization_type']['value'] == jones_calc.CIRCULAR_LEFT
    assert props['polarization_type']['readonly']
    assert_close(props['dop']['value'], 1.0, 1e-9, "degree of polarization")


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("POLARIZATION TESTS - Jones Calculus Through Components")
    print("=" * 78)

    tests = [
        ("Malus's law", test_malus_law),
        ("Unpolarized through polarizer", test_unpolarized_through_polarizer),
        ("Crossed polarizers", test_crossed_polarizers_block),
        ("Half-wave plate", test_half_wave_plate),
        ("Quarter-wave plate", test_quarter_wave_plate),
        ("Wave plate, unpolarized", test_wave_plate_passes_unpolarized),
        ("Faraday rotator", test_faraday_rotator_non_reciprocal),
        ("PBS fractions", test_pbs_fractions),
        ("Plain splitter", test_plain_splitter_keeps_polarization),
        ("Isolator", test_isolator),
        ("Analyzer states", test_analyzer_states),
        ("Analyzer reset", test_analyzer_reset),
        ("Analyzer in a trace", test_analyzer_in_trace),
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
