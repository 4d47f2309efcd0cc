"""
===============================================================================
OPTICAL COMPONENT TESTS - Mirrors, Lenses and Solids
===============================================================================

1. MIRRORS
   - Reflection law for plane, spherical, parabolic and metallic mirrors
   - Parabolic mirror sends axial rays through the focus
   - Dichroic mirror wavelength split

2. LENSES
   - Thin lens angular deviation -h/f
   - Chromatic focal length, thick lens presets, cylindrical axis
   - Aspheric slope correction (approximate model)
   - GRIN quarter-pitch transfer

3. SOLIDS
   - Dispersion monotonicity
   - Fresnel split at 45 degrees conserves energy
   - Total internal reflection beyond the critical angle
   - Energy bound for every splitting interaction

Run with:
    python developer_tests/test_optical_components.py

Or with pytest:
    pytest developer_tests/test_optical_components.py -v
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
from ray_optics_lab.core.config import TraceConfig
from ray_optics_lab.core.geometry import Vector2
from ray_optics_lab.core.ray import Ray
from ray_optics_lab.core.constants import N_AIR
from ray_optics_lab.core.scene_objs import (
    Mirror, SphericalMirror, ParabolicMirror, MetallicMirror, DichroicMirror,
    ThinLens, ThickLens, CylindricalLens, AsphericLens, GrinLens,
    DielectricBlock, Prism, BeamSplitter, DiffractionGrating, AcoustoOpticModulator, Polarizer,
)
from ray_optics_lab.analysis.fresnel_utils import fresnel_coefficients, critical_angle


# =============================================================================
# TEST CONFIGURATION
# =============================================================================

TOLERANCE = 1e-6
# Loose tolerance for checks against heuristic (approximate) models
APPROX_TOLERANCE = 0.05


def assert_close(actual, expected, tol=TOLERANCE, msg=""):
    """Assert that two values are close within tolerance."""
    if abs(actual - expected) > tol:
        raise AssertionError(
            f"{msg}: expected {expected}, got {actual} (diff: {abs(actual - expected)})"
        )


def hit_and_interact(obj, ray):
    """Run one intersection + interaction by hand, as the simulator does."""
    hits = obj.intersect(ray.origin, ray.direction)
    assert hits, f"{obj.get_display_name()} was not hit"
    hit = hits[0]
    ray.advance_to(hit.point)
    return hit, obj.interact(ray, hit)


def lossless_scene():
    return Scene(config=TraceConfig(min_ray_intensity=0.0))


# =============================================================================
# MIRRORS
# =============================================================================

def check_reflection_law(obj, ray):
    d = ray.direction
    hit, outputs = hit_and_interact(obj, ray)
    assert len(outputs) == 1, f"{obj.type}: expected one reflected ray"
    r = outputs[0].direction
    n = hit.normal
    t = n.perpendicular()
    # Normal component flips, tangential component is kept
    assert_close(r.dot(n), -d.dot(n), 1e-9, f"{obj.type} normal component")
    assert_close(r.dot(t), d.dot(t), 1e-9, f"{obj.type} tangential component")
    angle_in = math.acos(min(1.0, abs(d.dot(n))))
    angle_out = math.acos(min(1.0, abs(r.dot(n))))
    assert_close(angle_in, angle_out, 1e-6, f"{obj.type} incidence vs reflection angle")
    return outputs[0]


def test_reflection_law_all_mirrors():
    """Incidence angle equals reflection angle for every mirror variant."""
    print("\n" + "=" * 60)
    print("TEST: Reflection law")
    print("=" * 60)

    scene = Scene()
    oblique = Vector2(0.3, -1.0).normalize()
    cases = [
        (Mirror(scene, angle_deg=10), Ray(Vector2(-20, 80), oblique)),
        (SphericalMirror(scene), Ray(Vector2(30, 150), oblique)),
        (SphericalMirror(scene, radius=-200), Ray(Vector2(-10, 150), oblique)),
        (ParabolicMirror(scene), Ray(Vector2(-20, 150), oblique)),
        (MetallicMirror(scene, metal='gold'), Ray(Vector2(-20, 80), oblique)),
    ]
    for obj, ray in cases:
        check_reflection_law(obj, ray)
        print(f"  {obj.type}: PASS")


def test_parabolic_focus():
    """Rays parallel to the axis reflect through the focus."""
    mirror = ParabolicMirror(Scene(), focal_length=100.0, diameter=100.0)
    for x in (-40.0, -10.0, 25.0):
        ray = Ray(Vector2(x, 300), Vector2(0, -1))
        hit, outputs = hit_and_interact(mirror, ray)
        to_focus = (mirror.focus - hit.point).normalize()
        assert_close(outputs[0].direction.cross(to_focus), 0.0, 1e-9, f"x={x} aims at focus")
        assert outputs[0].direction.dot(to_focus) > 0


def test_plane_mirror_loss_and_phase():
    scene = Scene()
    ray = Ray(Vector2(0, 50), Vector2(0, -1), intensity=2.0)
    _, outputs = hit_and_interact(Mirror(scene), ray)
    assert_close(outputs[0].intensity, 2.0 * 0.99, 1e-12, "plane mirror reflectivity")
    expected_phase = (ray.propagation_phase + math.pi) % (2 * math.pi)
    assert_close(outputs[0].phase, expected_phase, 1e-6, "reflection adds pi")

    lossless = Ray(Vector2(0, 50), Vector2(0, -1), ignore_decay=True)
    _, outputs = hit_and_interact(Mirror(scene), lossless)
    assert_close(outputs[0].intensity, 1.0, 1e-12, "ignore_decay mirror")


def test_metallic_mirror_reflectivity():
    """Approximate metal model: R0 * (0.9 + 0.1 cos theta)."""
    mirror = MetallicMirror(Scene(), metal='silver')
    r_normal, _ = mirror.reflection(1.0)
    r_grazing, _ = mirror.reflection(0.2)
    assert_close(r_normal, 0.98, 1e-12, "silver at normal incidence")
    assert r_grazing < r_normal
    assert 0.0 <= r_grazing <= 1.0


def test_dichroic_split():
    scene = lossless_scene()
    dichroic = DichroicMirror(scene)
    assert dichroic.get_reflectivity(450.0) > 0.99
    assert dichroic.get_reflectivity(650.0) < 0.01
    assert_close(dichroic.get_reflectivity(550.0), 0.5, 1e-12, "R at cut-off")

    ray = Ray(Vector2(-100, 0), Vector2(1, 0), wavelength_nm=550.0)
    _, outputs = hit_and_interact(dichroic, ray)
    kinds = sorted(out.interaction_type for out in outputs)
    assert kinds == ['reflect', 'transmit']
    assert_close(sum(out.intensity for out in outputs), 0.99, 1e-12, "dichroic loss")

    long_pass = DichroicMirror(scene, reflect_short_wave=False)
    assert long_pass.get_reflectivity(650.0) > 0.99


# =============================================================================
# LENSES
# =============================================================================

def test_thin_lens_deviation():
    """f = 100, h = 20: the ray turns by -h/f = -0.2 rad."""
    print("\n" + "=" * 60)
    print("TEST: Thin lens deviation")
    print("=" * 60)

    lens = ThinLens(Scene(), focal_length=100.0, quality=1.0)
    ray = Ray(Vector2(-50, 20), Vector2(1, 0))
    _, outputs = hit_and_interact(lens, ray)
    out = outputs[0]
    angle = math.atan2(out.direction.y, out.direction.x)
    assert_close(angle, -0.2, 1e-9, "deviation angle")
    assert_close(out.intensity, 1.0, 1e-12, "lossless lens")

    # Same rule from the other side
    back = Ray(Vector2(50, 20), Vector2(-1, 0))
    _, outputs = hit_and_interact(lens, back)
    angle_back = math.atan2(outputs[0].direction.y, -outputs[0].direction.x)
    assert_close(angle_back, -0.2, 1e-9, "deviation from the right")
    print(f"  Output angle {angle:.6f} rad - PASS")


def test_thin_lens_chromatic_focus():
    lens = ThinLens(Scene())
    blue = lens.focal_length_for(Ray(Vector2(0, 0), Vector2(1, 0), wavelength_nm=450.0))
    red = lens.focal_length_for(Ray(Vector2(0, 0), Vector2(1, 0), wavelength_nm=650.0))
    assert blue < lens.focal_length < red


def test_thin_lens_focuses_gaussian():
    lens = ThinLens(Scene(), focal_length=1000.0)
    ray = Ray(Vector2(-50, 0), Vector2(1, 0))
    from ray_optics_lab.core.gaussian import GaussianBeam
    ray.gaussian = GaussianBeam.from_waist(100.0, 550.0)
    _, outputs = hit_and_interact(lens, ray)
    assert outputs[0].gaussian is not None
    assert outputs[0].gaussian.z < 0, "beam converges after the lens"


def test_thick_lens_presets():
    scene = Scene()
    lens = ThickLens(scene, preset='plano_convex', r1=100.0, r2=0.0)
    assert_close(lens.effective_focal_length(), 200.0, 1e-6, "plano-convex f = R/(n-1)")
    assert lens.set_property('preset', 'biconcave')
    assert lens.effective_focal_length() < 0
    assert lens.set_property('r1', -80.0)
    assert lens.preset == 'custom'


def test_cylindrical_axis():
    scene = Scene()
    power = CylindricalLens(scene, cylinder_axis='horizontal', quality=1.0)
    ray = Ray(Vector2(-50, 10), Vector2(1, 0))
    _, outputs = hit_and_interact(power, ray)
    assert outputs[0].direction.y < 0

    flat = CylindricalLens(scene, cylinder_axis='vertical', quality=1.0)
    ray = Ray(Vector2(-50, 10), Vector2(1, 0))
    _, outputs = hit_and_interact(flat, ray)
    assert_close(outputs[0].direction.y, 0.0, 1e-12, "no in-plane power")


def test_aspheric_close_to_paraxial():
    """Approximate model: near the axis the aspheric behaves like f = R/(n-1)."""
    lens = AsphericLens(Scene(), quality=1.0)
    f = lens.base_focal_length()
    ray = Ray(Vector2(-50, 2), Vector2(1, 0))
    _, outputs = hit_and_interact(lens, ray)
    angle = math.atan2(outputs[0].direction.y, outputs[0].direction.x)
    assert abs(angle - (-2.0 / f)) < APPROX_TOLERANCE * abs(2.0 / f)


def test_grin_quarter_pitch():
    """A ray parallel to the axis at r0 leaves a quarter-pitch rod on axis, slope -g r0."""
    print("\n" + "=" * 60)
    print("TEST: GRIN quarter pitch")
    print("=" * 60)

    g = 0.01
    quarter = math.pi / 2 / g
    lens = GrinLens(Scene(), length=quarter, gradient=g, quality=1.0)
    r0 = 10.0
    ray = Ray(Vector2(-200, r0), Vector2(1, 0))
    _, outputs = hit_and_interact(lens, ray)
    out = outputs[0]
    slope = out.direction.y / out.direction.x
    assert_close(slope, -g * r0, 1e-3, "exit slope")
    assert_close(out.origin.y, 0.0, 1e-3, "exit on axis")
    assert_close(lens.effective_focal_length(), 1.0 / (lens.n0 * g), 1e-6, "quarter-pitch focal length")
    print(f"  Exit slope {slope:.6f} - PASS")


def test_grin_side_wall_absorbs():
    lens = GrinLens(Scene())
    ray = Ray(Vector2(0, 100), Vector2(0, -1))
    _, outputs = hit_and_interact(lens, ray)
    assert outputs == []
    assert ray.termination_reason == 'absorbed_side_wall'


# =============================================================================
# SOLIDS
# =============================================================================

def test_dispersion_monotonic():
    scene = Scene()
    for obj in (DielectricBlock(scene), Prism(scene)):
        assert obj.get_refractive_index(400.0) > obj.get_refractive_index(700.0)
    prism = Prism(scene)
    assert prism.minimum_deviation(400.0) > prism.minimum_deviation(700.0)


def test_block_fresnel_split_45_degrees():
    """Two output rays whose intensities sum to the input."""
    print("\n" + "=" * 60)
    print("TEST: Fresnel split at 45 degrees")
    print("=" * 60)

    block = DielectricBlock(lossless_scene(), refractive_index=1.5, cauchy_b=0.0)
    ray = Ray(Vector2(-40, 50), Vector2(1, -1))
    hit, outputs = hit_and_interact(block, ray)
    assert len(outputs) == 2, f"expected reflected + refracted, got {len(outputs)}"
    total = sum(out.intensity for out in outputs)
    assert_close(total, 1.0, 1e-9, "energy conservation")

    expected_r = fresnel_coefficients(N_AIR, 1.5, 45.0)['R']
    reflected = [o for o in outputs if o.interaction_type == 'reflect'][0]
    refracted = [o for o in outputs if o.interaction_type == 'refract'][0]
    assert_close(reflected.intensity, expected_r, 1e-9, "reflectance")
    assert_close(refracted.medium_refractive_index, 1.5, 1e-12, "medium inside")
    sin_t = math.sqrt(1 - refracted.direction.y ** 2)
    assert_close(N_AIR * math.sin(math.pi / 4), 1.5 * sin_t, 1e-9, "Snell's law")
    print(f"  R = {reflected.intensity:.5f}, T = {refracted.intensity:.5f} - PASS")


def test_total_internal_reflection():
    """Beyond the critical angle there is exactly one (reflected) output."""
    block = DielectricBlock(lossless_scene(), cauchy_b=0.0, absorption=0.0)
    theta = math.radians(critical_angle(1.5, N_AIR) + 3.0)
    ray = Ray(Vector2(0, 0), Vector2(math.sin(theta), math.cos(theta)), medium_refractive_index=1.5)
    hit, outputs = hit_and_interact(block, ray)
    assert len(outputs) == 1
    assert ray.termination_reason == 'tir'
    assert outputs[0].interaction_type == 'tir'
    assert outputs[0].direction.y < 0, "reflected back into the block"
    assert_close(outputs[0].intensity, 1.0, 1e-12, "lossless TIR")


def test_block_absorption_on_exit():
    block = DielectricBlock(lossless_scene(), cauchy_b=0.0, absorption=0.01)
    ray = Ray(Vector2(0, 0), Vector2(0, 1), medium_refractive_index=1.5)
    _, outputs = hit_and_interact(block, ray)
    total = sum(o.intensity for o in outputs)
    assert_close(total, math.exp(-0.01 * 30.0), 1e-9, "Beer-Lambert over 30 units")


def test_energy_bound():
    """No splitting interaction creates energy."""
    scene = lossless_scene()
    cases = [
        DielectricBlock(scene),
        Prism(scene),
        BeamSplitter(scene),
        BeamSplitter(scene, mode='PBS'),
        DiffractionGrating(scene),
        AcoustoOpticModulator(scene),
        DichroicMirror(scene),
        Polarizer(scene),
        ThinLens(scene),
    ]
    for obj in cases:
        for wavelength in (420.0, 550.0, 680.0):
            ray = Ray(Vector2(-150, 3), Vector2(1, 0.05), wavelength_nm=wavelength)
            _, outputs = hit_and_interact(obj, ray)
            total = sum(out.intensity for out in outputs)
            assert total <= ray.intensity + 1e-9, f"{obj.type} at {wavelength} nm: {total}"


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("OPTICAL COMPONENT TESTS - Mirrors, Lenses and Solids")
    print("=" * 78)

    tests = [
        ("Reflection law", test_reflection_law_all_mirrors),
        ("Parabolic focus", test_parabolic_focus),
        ("Plane mirror loss", test_plane_mirror_loss_and_phase),
        ("Metallic mirror", test_metallic_mirror_reflectivity),
        ("Dichroic split", test_dichroic_split),
        ("Thin lens deviation", test_thin_lens_deviation),
        ("Chromatic focus", test_thin_lens_chromatic_focus),
        ("Gaussian through lens", test_thin_lens_focuses_gaussian),
        ("Thick lens presets", test_thick_lens_presets),
        ("Cylindrical axis", test_cylindrical_axis),
        ("Aspheric (approximate)", test_aspheric_close_to_paraxial),
        ("GRIN quarter pitch", test_grin_quarter_pitch),
        ("GRIN side wall", test_grin_side_wall_absorbs),
        ("Dispersion", test_dispersion_monotonic),
        ("Fresnel split", test_block_fresnel_split_45_degrees),
        ("TIR", test_total_internal_reflection),
        ("Absorption", test_block_absorption_on_exit),
        ("Energy bound", test_energy_bound),
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
