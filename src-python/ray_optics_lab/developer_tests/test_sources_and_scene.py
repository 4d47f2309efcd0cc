"""
===============================================================================
SOURCE AND SCENE TESTS - Emission, Properties and Serialization
===============================================================================

1. SOURCES
   - Ray counts, fan angles and intensity split
   - Per-source cap and disabled sources
   - LED spectrum sampling is reproducible with a seed
   - White light enumeration and fast sampling
   - Line source origins, polarization and Gaussian seeding

2. PROPERTIES
   - Rejected values leave the object and the scene untouched

3. SERIALIZATION
   - Round trip of a scene, unknown keys and types, registry

Run with:
    python developer_tests/test_sources_and_scene.py

Or with pytest:
    pytest developer_tests/test_sources_and_scene.py -v
===============================================================================
"""

import sys
import json
import math
from pathlib import Path

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ray_optics_lab.core.scene import Scene
from ray_optics_lab.core.simulator import Simulator
from ray_optics_lab.core.config import TraceConfig
from ray_optics_lab.core.geometry import Vector2
from ray_optics_lab.core import jones as jones_calc
from ray_optics_lab.core.scene_objs import (
    OBJECT_TYPES, get_object_class,
    LaserSource, LEDSource, WhiteLightSource, LineSource, FanSource,
    Mirror, ThinLens, OpticalFiber, BeamSplitter, PowerMeter,
)
from ray_optics_lab.core.scene_objs.light_source.white_light_source import WHITE_LIGHT_SPECTRUM


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
# SOURCES
# =============================================================================

def test_fan_source_rays():
    """Evenly spaced directions over the fan, intensity split evenly."""
    print("\n" + "=" * 60)
    print("TEST: Fan source")
    print("=" * 60)

    scene = Scene()
    fan = FanSource(scene, ray_count=5, fan_angle_deg=40.0, intensity=10.0, angle_deg=0.0)
    rays = fan.generate()
    assert len(rays) == 5
    angles = [math.degrees(r.direction.angle()) for r in rays]
    for got, expected in zip(angles, [-20.0, -10.0, 0.0, 10.0, 20.0]):
        assert_close(got, expected, 1e-9, "fan angle")
    assert_close(sum(r.intensity for r in rays), 10.0, 1e-12, "total intensity")
    assert all(r.source_id == fan.uuid for r in rays)
    assert all(r.interaction_type == 'source' and r.parent_uuid is None for r in rays)
    print(f"  Angles: {[round(a, 3) for a in angles]} - PASS")


def test_single_ray_uses_centre_angle():
    laser = LaserSource(Scene(), angle_deg=30.0, spread_deg=20.0, ray_count=1)
    rays = laser.generate()
    assert len(rays) == 1
    assert_close(math.degrees(rays[0].direction.angle()), 30.0, 1e-9, "centre angle")


def test_source_cap_and_disabled():
    scene = Scene(config=TraceConfig(max_rays_per_source=5))
    fan = FanSource(scene)
    rays = fan.generate()
    assert len(rays) == 5, "capped by the scene"
    assert_close(sum(r.intensity for r in rays), fan.intensity, 1e-12, "intensity over capped rays")

    assert fan.set_property('enabled', False)
    assert fan.generate() == []


def test_led_reproducible():
    """A seeded scene draws the same LED spectrum on every trace."""
    print("\n" + "=" * 60)
    print("TEST: LED sampling")
    print("=" * 60)

    def build(seed):
        scene = Scene(config=TraceConfig(random_seed=seed))
        scene.add_object(LEDSource(scene, ray_count=50, center_wavelength_nm=600.0, fwhm_nm=40.0))
        return scene

    scene = build(7)
    first = sorted(r.wavelength_nm for r in Simulator(scene).run())
    second = sorted(r.wavelength_nm for r in Simulator(scene).run())
    assert first == second, "same seed, same wavelengths"

    other = sorted(r.wavelength_nm for r in Simulator(build(8)).run())
    assert first != other

    assert all(380.0 <= w <= 750.0 for w in first)
    mean = sum(first) / len(first)
    assert abs(mean - 600.0) < 15.0, f"mean {mean:.2f} far from the centre"
    print(f"  Mean wavelength {mean:.2f} nm - PASS")


def test_led_clamped_to_visible():
    scene = Scene(config=TraceConfig(random_seed=3))
    led = LEDSource(scene, ray_count=200, center_wavelength_nm=745.0, fwhm_nm=200.0)
    wavelengths = [r.wavelength_nm for r in led.generate()]
    assert max(wavelengths) == 750.0
    assert min(wavelengths) >= 380.0
    phases = {round(r.phase, 6) for r in led.generate()}
    assert len(phases) > 1, "random phases"


def test_white_light_enumeration():
    """One direction gives one ray per spectral line, summing to the intensity."""
    print("\n" + "=" * 60)
    print("TEST: White light")
    print("=" * 60)

    source = WhiteLightSource(Scene(), ray_count=1)
    rays = source.generate()
    assert len(rays) == len(WHITE_LIGHT_SPECTRUM) == 20
    assert_close(sum(r.intensity for r in rays), 75.0, 1e-9, "total intensity")
    brightest = max(rays, key=lambda r: r.intensity)
    assert brightest.wavelength_nm in (540.0, 555.0)

    # Weak lines are dropped below the threshold unless decay is ignored
    dim = WhiteLightSource(Scene(), ray_count=1, intensity=0.01)
    assert len(dim.generate()) == 17
    dim.set_property('ignore_decay', True)
    assert len(dim.generate()) == 20
    print("  Enumeration - PASS")


def test_white_light_fast_mode():
    scene = Scene(config=TraceConfig(fast_white_light=True, random_seed=11))
    source = WhiteLightSource(scene)
    rays = source.generate()
    assert len(rays) == 41
    table = {w for w, _ in WHITE_LIGHT_SPECTRUM}
    assert all(r.wavelength_nm in table for r in rays)
    assert_close(sum(r.intensity for r in rays), 75.0, 1e-9, "total intensity")
    assert len({r.wavelength_nm for r in rays}) > 1


def test_white_light_fan_traced_whole():
    """Every direction of a wide white-light fan reaches the tracer with all its lines."""
    print("\n" + "=" * 60)
    print("TEST: White light fan")
    print("=" * 60)

    def traced_directions(scene):
        result = Simulator(scene).run_trace()
        angles = sorted({round(math.degrees(r.direction.angle()), 9) for r in result.rays})
        return result, angles

    scene = Scene()
    scene.add_object(WhiteLightSource(scene, ray_count=100, spread_deg=20.0))
    result, angles = traced_directions(scene)
    assert len(angles) == 100
    assert_close(angles[0], -10.0, 1e-6, "first direction")
    assert_close(angles[-1], 10.0, 1e-6, "last direction")
    assert result.total_emitted == 100 * len(WHITE_LIGHT_SPECTRUM)
    assert_close(result.total_intensity(), 75.0, 1e-9, "emitted intensity")

    # The per-source cap thins the directions but keeps the fan symmetric
    capped = Scene(config=TraceConfig(max_rays_per_source=5))
    capped.add_object(WhiteLightSource(capped, ray_count=100, spread_deg=20.0))
    result, angles = traced_directions(capped)
    assert len(angles) == 5
    assert_close(angles[0], -10.0, 1e-6, "capped first direction")
    assert_close(angles[-1], 10.0, 1e-6, "capped last direction")
    assert_close(result.total_intensity(), 75.0, 1e-9, "capped intensity")
    print(f"  {len(angles)} directions, I = {result.total_intensity():.2f} - PASS")


def test_line_source_origins():
    line = LineSource(Scene(), length=50.0, ray_count=3, angle_deg=0.0)
    rays = line.generate()
    xs = [r.origin.x for r in rays]
    for got, expected in zip(xs, [-25.0, 0.0, 25.0]):
        assert_close(got, expected, 1e-9, "origin along the segment")
    for r in rays:
        assert_close(r.direction.y, 1.0, 1e-12, "emitted perpendicular to the segment")

    single = LineSource(Scene(), pos_x=10.0, pos_y=4.0, ray_count=1)
    origin = single.generate()[0].origin
    assert_close(origin.x, 10.0, 1e-9, "centre x")
    assert_close(origin.y, 4.0, 1e-9, "centre y")
    assert_close(single.get_shape().length, 50.0, 1e-9, "segment shape")


def test_source_polarization_and_gaussian():
    laser = LaserSource(Scene(), polarization_type='linear', polarization_angle_deg=30.0,
                        gaussian_enabled=True, beam_waist=5.0)
    ray = laser.generate()[0]
    assert_close(ray.polarization, math.radians(30.0), 1e-12, "linear tag")
    assert ray.gaussian is not None
    assert_close(ray.gaussian.waist, 5.0, 1e-12, "waist")
    assert_close(ray.gaussian.rayleigh_range, math.pi * 25.0 / 0.55, 1e-9, "Rayleigh range")
    assert_close(ray.beam_diameter, 10.0, 1e-12, "laser beam diameter")

    circular = LaserSource(Scene(), polarization_type=jones_calc.CIRCULAR_RIGHT)
    assert circular.generate()[0].polarization == jones_calc.CIRCULAR_RIGHT

    plain = LaserSource(Scene())
    assert plain.generate()[0].polarization is None
    assert plain.generate()[0].gaussian is None


# =============================================================================
# PROPERTIES
# =============================================================================

def test_set_property_rejections():
    scene = Scene()
    laser = scene.add_object(LaserSource(scene))
    generation = scene.generation

    assert not laser.set_property('no_such_property', 1)
    assert not laser.set_property('ray_count', 2.5)
    assert not laser.set_property('ray_count', 0)
    assert not laser.set_property('intensity', -1.0)
    assert not laser.set_property('intensity', 'bright')
    assert not laser.set_property('intensity', float('nan'))
    assert not laser.set_property('intensity', True)
    assert not laser.set_property('polarization_type', 'sideways')
    assert not laser.set_property('enabled', 'maybe')
    assert laser.ray_count == 1 and laser.intensity == 1.0
    assert scene.generation == generation, "rejected edits do not dirty the scene"

    assert laser.set_property('ray_count', '3')
    assert laser.ray_count == 3
    assert scene.generation == generation + 1
    assert scene.needs_retrace


def test_lens_rejects_zero_focal_length():
    scene = Scene()
    lens = scene.add_object(ThinLens(scene, focal_length=80.0))
    assert not lens.set_property('focal_length', 0.0)
    assert lens.focal_length == 80.0

    # A bad value in serialized data falls back to the default shape
    broken = ThinLens(scene, focal_length=0.0)
    assert broken.focal_length == 150.0
    assert broken.warning


def test_move_and_rotate():
    scene = Scene()
    mirror = scene.add_object(Mirror(scene))
    assert mirror.move(10.0, -5.0)
    assert (mirror.pos_x, mirror.pos_y) == (10.0, -5.0)
    assert mirror.rotate(90.0)
    assert_close(mirror.angle_deg, 90.0, 1e-12, "rotated")
    assert not mirror.move(float('inf'), 0.0)
    assert mirror.pos_x == 10.0


# =============================================================================
# SERIALIZATION
# =============================================================================

def build_bench():
    scene = Scene(config=TraceConfig(max_ray_bounces=50, random_seed=5), name='bench')
    scene.add_object(LaserSource(scene, pos_x=-100, pos_y=0, wavelength_nm=633.0,
                                 polarization_type='linear', polarization_angle_deg=45.0))
    scene.add_object(BeamSplitter(scene, mode='PBS', label='PBS1'))
    scene.add_object(ThinLens(scene, pos_x=50, focal_length=75.0))
    scene.add_object(OpticalFiber(scene, pos_x=0, pos_y=100, angle_deg=-90.0,
                                  output_x=300.0, output_y=100.0))
    scene.add_object(PowerMeter(scene, pos_x=200, angle_deg=90))
    return scene


def test_serialization_round_trip():
    """serialize -> JSON text -> from_json -> serialize is stable."""
    print("\n" + "=" * 60)
    print("TEST: Serialization round trip")
    print("=" * 60)

    scene = build_bench()
    data = scene.serialize()
    text = json.dumps(data)
    restored = Scene.from_json(json.loads(text))

    assert restored.error is None
    assert restored.serialize() == data
    assert restored.name == 'bench'
    assert restored.config == scene.config
    assert [o.type for o in restored.objs] == [o.type for o in scene.objs]
    assert len(restored.sources) == 1 and len(restored.optical_objs) == 4

    fiber = restored.get_objects_by_type('OpticalFiber')[0]
    assert (fiber.output_x, fiber.output_y) == (300.0, 100.0)
    assert restored.objs[1].get_display_name() == 'PBS1'

    # Only non-default properties are stored
    assert data['objs'][2] == {'type': 'ThinLens', 'pos_x': 50.0, 'focal_length': 75.0}

    # The restored scene traces like the original
    counts = Simulator(scene).run_trace().termination_counts
    assert Simulator(restored).run_trace().termination_counts == counts
    print(f"  {len(data['objs'])} objects restored - PASS")


def test_unknown_type_and_key():
    data = {
        'objs': [
            {'type': 'Mirror', 'pos_x': 5.0, 'sparkle': True},
            {'type': 'WarpDrive'},
            {'type': 'Mirror', 'length': 'long'},
        ],
    }
    scene = Scene.from_json(data)
    assert len(scene.objs) == 2, "unknown types are skipped"
    assert scene.error is not None
    assert scene.objs[0].pos_x == 5.0
    assert scene.objs[1].length == 100.0, "malformed value falls back to the default"
    assert scene.objs[1].warning

    unknown_key = Scene.from_json({'objs': [{'type': 'Mirror', 'sparkle': True}]})
    assert 'sparkle' in unknown_key.error


def test_malformed_scene_data():
    """Bad persisted config or entries fall back instead of aborting the load."""
    scene = Scene.from_json({'config': {'max_ray_bounces': -3}, 'objs': [{'type': 'Mirror'}]})
    assert scene.config == TraceConfig()
    assert 'config' in scene.error
    assert len(scene.objs) == 1

    for bad_config in ({'min_ray_intensity': 'dim'}, ['max_ray_bounces', 3]):
        scene = Scene.from_json({'config': bad_config})
        assert scene.config.max_ray_bounces == 500
        assert scene.error is not None

    scene = Scene.from_json({'objs': ['Mirror', None, {'type': 'Mirror', 'pos_x': 2.0}]})
    assert len(scene.objs) == 1
    assert scene.objs[0].pos_x == 2.0
    assert scene.error is not None

    scene = Scene.from_json({'objs': {'type': 'Mirror'}})
    assert scene.objs == []
    assert 'object list' in scene.error


def test_registry():
    assert get_object_class('Mirror') is Mirror
    assert get_object_class('WarpDrive') is None
    assert get_object_class(None) is None
    for type_name, cls in OBJECT_TYPES.items():
        obj = cls(Scene())
        assert obj.serialize()['type'] == type_name
        assert obj.get_properties(), f"{type_name} exposes properties"


def test_scene_bookkeeping():
    scene = Scene()
    mirror = scene.add_object(Mirror(scene))
    laser = scene.add_object(LaserSource(scene))
    assert scene.optical_objs == [mirror] and scene.sources == [laser]
    assert scene.get_object_by_uuid(mirror.uuid) is mirror

    generation = scene.consume_retrace()
    assert scene.is_current(generation)
    scene.remove_object(mirror)
    assert not scene.is_current(generation)
    assert scene.optical_objs == []

    scene.clear()
    assert scene.objs == [] and scene.sources == []

    try:
        scene.config = {'max_ray_bounces': 3}
    except ValueError:
        pass
    else:
        raise AssertionError("a dict is not a TraceConfig")


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("SOURCE AND SCENE TESTS")
    print("=" * 78)

    tests = [
        ("Fan source", test_fan_source_rays),
        ("Single ray", test_single_ray_uses_centre_angle),
        ("Cap and disabled", test_source_cap_and_disabled),
        ("LED reproducible", test_led_reproducible),
        ("LED clamped", test_led_clamped_to_visible),
        ("White light enumeration", test_white_light_enumeration),
        ("White light fast", test_white_light_fast_mode),
        ("White light fan", test_white_light_fan_traced_whole),
        ("Line source", test_line_source_origins),
        ("Polarization and Gaussian", test_source_polarization_and_gaussian),
        ("Property rejections", test_set_property_rejections),
        ("Zero focal length", test_lens_rejects_zero_focal_length),
        ("Move and rotate", test_move_and_rotate),
        ("Serialization", test_serialization_round_trip),
        ("Unknown type and key", test_unknown_type_and_key),
        ("Malformed scene data", test_malformed_scene_data),
        ("Registry", test_registry),
        ("Scene bookkeeping", test_scene_bookkeeping),
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
