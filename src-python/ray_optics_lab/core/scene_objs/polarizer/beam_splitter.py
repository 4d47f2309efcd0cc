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

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.line_obj_mixin import LineObjMixin
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core import jones as jones_calc
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from ...geometry import Vector2
    from ... import jones as jones_calc

if TYPE_CHECKING:
    from ...ray import Ray, Hit


class BeamSplitter(LineObjMixin, BaseSceneObj):
    """
    Plate beam splitter, non-polarizing (BS) or polarizing (PBS).

    BS mode: the reflected ray carries `split_ratio` of the intensity with a
    phase of pi, the transmitted ray the rest. Polarization is unchanged.

    PBS mode: the p axis lies along the splitter surface and is transmitted,
    the s axis (perpendicular to it) is reflected with a phase of pi. For a
    polarized ray each branch is the projection of its Jones vector; an
    unpolarized ray is split by `pbs_unpolarized_reflectivity` into pure
    s and p states.

    Attributes:
        length (float): Length of the splitter surface.
        mode (str): 'BS' or 'PBS'.
        split_ratio (float): Reflected fraction in BS mode.
        pbs_unpolarized_reflectivity (float): Reflected fraction of unpolarized
            light in PBS mode.
    """

    type = 'BeamSplitter'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'angle_deg': 45.0,
        'length': 80.0,
        'mode': 'BS',
        'split_ratio': 0.5,
        'pbs_unpolarized_reflectivity': 0.5,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Length', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'mode': {'label': 'Mode', 'type': 'select', 'options': ['BS', 'PBS']},
        'split_ratio': {'label': 'Reflected fraction', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.01},
        'pbs_unpolarized_reflectivity': {'label': 'PBS reflectivity (unpolarized)', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.01},
    }

    @property
    def p_axis(self) -> float:
        """Angle of the transmitted (p) polarization axis, along the surface."""
        return (self.p2 - self.p1).angle()

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction)

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        ray.terminate('split')
        if self.mode == 'PBS':
            return self._split_polarizing(ray, hit)
        outputs = self.reflect_ray(ray, hit, ray.intensity * self.split_ratio)
        outputs += self.transmit_ray(ray, hit, ray.intensity * (1.0 - self.split_ratio))
        return outputs

    def pbs_fractions(self, ray: 'Ray') -> Tuple[float, float]:
        """(transmitted, reflected) fractions of the ray's intensity in PBS mode."""
        if not ray.ensure_jones_vector():
            r = self.pbs_unpolarized_reflectivity
            return 1.0 - r, r
        total = ray.jones_intensity
        if total < 1e-12:
            return 0.0, 0.0
        p = jones_calc.intensity(jones_calc.polarizer(self.p_axis) @ ray.jones)
        s = jones_calc.intensity(jones_calc.polarizer(self.p_axis + math.pi / 2) @ ray.jones)
        return p / total, s / total

    def _split_polarizing(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        p_axis = self.p_axis
        s_axis = p_axis + math.pi / 2
        t_frac, r_frac = self.pbs_fractions(ray)
        outputs = self.reflect_ray(ray, hit, ray.intensity * r_frac,
                                   jones=jones_calc.linear(s_axis))
        outputs += self.transmit_ray(ray, hit, ray.intensity * t_frac,
                                     jones=jones_calc.linear(p_axis))
        return outputs


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    pbs = BeamSplitter(Scene(), mode='PBS')
    ray = Ray(Vector2(-50, 0), Vector2(1, 0))
    hit = pbs.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    for out in pbs.interact(ray, hit):
        print(out, out.polarization)
