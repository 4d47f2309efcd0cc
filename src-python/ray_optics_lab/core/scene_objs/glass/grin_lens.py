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

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.constants import PIXELS_PER_NANOMETER
else:
    from ..base_scene_obj import BaseSceneObj
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Vector2
    from ...constants import PIXELS_PER_NANOMETER

if TYPE_CHECKING:
    from ...ray import Ray, Hit

# Lower bound on |axial component| when converting a direction into a radial slope
MIN_AXIAL_COMPONENT = 0.1


class GrinLens(PolygonObjMixin, BaseSceneObj):
    """
    Gradient-index rod lens with a parabolic index profile n(r) = n0 (1 - g^2 r^2 / 2).

    The rod is a rectangle: `length` along the axis (the object's angle) and
    `diameter` across it. A ray entering an end face is carried to the
    opposite face with the paraxial GRIN transfer matrix

        [r_out ]   [ cos gL       sin gL / g ] [r0 ]
        [r_out'] = [ -g sin gL    cos gL     ] [r0']

    in a frame whose axis points along the ray's travel, so the rod works
    the same from both ends. r0 is the signed entry offset from the axis,
    r0' = transverse / max(0.1, |axial|) is an approximate initial slope.
    A non-positive gradient reduces the matrix to free propagation.
    Rays hitting the side walls, or leaving beyond the rod radius, are absorbed.

    Attributes:
        diameter (float): Rod diameter.
        length (float): Rod length.
        n0 (float): On-axis refractive index.
        gradient (float): Gradient constant g (1/unit).
        quality (float): Transmission factor.
    """

    type = 'GrinLens'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'diameter': 50.0,
        'length': 30.0,
        'n0': 1.6,
        'gradient': 0.01,
        'quality': 0.98,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'diameter': {'label': 'Diameter', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'length': {'label': 'Length', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'n0': {'label': 'Axial index n0', 'type': 'number', 'min': 1.0, 'max': 4.0, 'step': 0.01},
        'gradient': {'label': 'Gradient g (1/unit)', 'type': 'number', 'min': -10.0, 'max': 10.0, 'step': 0.001},
        'quality': {'label': 'Transmission', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.01},
    }

    def get_local_vertices(self) -> List[Vector2]:
        hl = self.length / 2.0
        hd = self.diameter / 2.0
        return [Vector2(-hl, -hd), Vector2(hl, -hd), Vector2(hl, hd), Vector2(-hl, hd)]

    def _update_geometry(self) -> None:
        self._update_polygon_geometry()
        self.axis: Vector2 = Vector2.from_angle(self.angle_rad)

    @property
    def pitch(self) -> float:
        """Length of one full sinusoidal ray period, 2 pi / g."""
        if self.gradient <= 0:
            return math.inf
        return 2.0 * math.pi / self.gradient

    def effective_focal_length(self) -> float:
        """f = 1 / (n0 g sin(gL))."""
        if self.gradient <= 0:
            return math.inf
        s = math.sin(self.gradient * self.length)
        if abs(s) < 1e-12:
            return math.inf
        return 1.0 / (self.n0 * self.gradient * s)

    def transfer_matrix(self) -> np.ndarray:
        g = self.gradient
        L = self.length
        if g <= 0:
            return np.array([[1.0, L], [0.0, 1.0]])
        c = math.cos(g * L)
        s = math.sin(g * L)
        return np.array([[c, s / g], [-g * s, c]])

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        pitch = self.pitch
        return {
            'pitch': ('Pitch length', pitch),
            'pitch_fraction': ('Length / pitch', 0.0 if math.isinf(pitch) else self.length / pitch),
            'effective_focal_length': ('Effective focal length', self.effective_focal_length()),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_polygon(origin, direction, entering_only=True)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        outward = hit.extra['outward_normal']
        if abs(outward.dot(self.axis)) < 0.5:
            ray.terminate('absorbed_side_wall')
            return []

        # Local frame along the direction of travel
        axial = ray.direction.dot(self.axis)
        forward = self.axis if axial >= 0 else -self.axis
        lateral = forward.perpendicular()

        r0 = (hit.point - self.pos).dot(lateral)
        r0_slope = ray.direction.dot(lateral) / max(MIN_AXIAL_COMPONENT, abs(axial))
        r_out, slope_out = self.transfer_matrix() @ np.array([r0, r0_slope])

        if abs(r_out) > self.diameter / 2.0:
            ray.terminate('absorbed_side_wall')
            return []

        exit_point = self.pos + forward * (self.length / 2.0) + lateral * float(r_out)
        theta = math.atan(float(slope_out))
        direction = forward * math.cos(theta) + lateral * math.sin(theta)

        wavelength = ray.wavelength_nm * PIXELS_PER_NANOMETER
        internal_phase = 2.0 * math.pi * self.n0 * self.length / wavelength

        ray.terminate('refracted')
        if not self.keeps(ray.intensity * self.quality, ray):
            return []
        return [ray.spawn(exit_point, direction, intensity=ray.intensity * self.quality,
                          phase_shift=internal_phase, interaction_type='refract')]


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    quarter = math.pi / 2 / 0.01
    lens = GrinLens(Scene(), length=quarter)
    ray = Ray(Vector2(-200, 10), Vector2(1, 0))
    hit = lens.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    out = lens.interact(ray, hit)[0]
    print(out, math.atan2(out.direction.y, out.direction.x))
