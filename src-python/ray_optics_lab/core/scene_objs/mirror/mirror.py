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

from typing import Any, Dict, List, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.scene_objs.line_obj_mixin import LineObjMixin
    from ray_optics_lab.core.geometry import Vector2
else:
    from ..base_scene_obj import BaseSceneObj
    from ..line_obj_mixin import LineObjMixin
    from ...geometry import Vector2

if TYPE_CHECKING:
    from ...ray import Ray, Hit

# Fraction of the intensity a plain mirror reflects
MIRROR_REFLECTIVITY = 0.99


class Mirror(LineObjMixin, BaseSceneObj):
    """
    Mirror with shape of a line segment.

    This is a simple flat (planar) mirror that reflects light according to
    the law of reflection (angle of incidence = angle of reflection). It
    keeps 99% of the intensity (all of it for rays that ignore decay) and
    adds a phase of pi.

    Attributes:
        length (float): Length of the mirror segment.
    """

    type = 'Mirror'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'length': 100.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'length': {'label': 'Length', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
    }

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        return self.intersect_segment(origin, direction, 'front')

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        intensity = ray.intensity if ray.ignore_decay else ray.intensity * MIRROR_REFLECTIVITY
        ray.terminate('reflected')
        return self.reflect_ray(ray, hit, intensity)


if __name__ == "__main__":
    from ray_optics_lab.core.scene import Scene
    from ray_optics_lab.core.ray import Ray

    mirror = Mirror(Scene())
    ray = Ray(Vector2(0, 50), Vector2(0, -1))
    hit = mirror.intersect(ray.origin, ray.direction)[0]
    ray.advance_to(hit.point)
    print(mirror.interact(ray, hit))
