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

import logging
import math
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.geometry import Vector2, geometry
    from ray_optics_lab.core.ray import Hit
    from ray_optics_lab.core.constants import N_AIR, PIXELS_PER_KM
else:
    from ..base_scene_obj import BaseSceneObj
    from ...geometry import Vector2, geometry
    from ...ray import Hit
    from ...constants import N_AIR, PIXELS_PER_KM

if TYPE_CHECKING:
    from shapely.geometry import LineString
    from ...ray import Ray

logger = logging.getLogger(__name__)

# Offset of the output facet from the input facet when none is given
DEFAULT_OUTPUT_OFFSET = 100.0


class OpticalFiber(BaseSceneObj):
    """
    Single optical fiber between an input facet and an output facet.

    The input facet is a segment of length `facet_length` centred on the
    object's position, facing along the object's angle; light must arrive
    against that direction. A ray landing on the facet is coupled with

        efficiency = intrinsic_efficiency * angle_factor * position_factor
        angle_factor = (cos(theta) - cos(theta_max)) / (1 - cos(theta_max))
        position_factor = 1 - r / core_radius

    where theta_max = asin(NA / n_air). Rays outside the core or outside
    the acceptance cone are absorbed by the facet. The coupled light is
    attenuated by the fiber loss over the straight distance between the
    facets (1 km = 1e9 scene units) and buffered; it leaves the output
    facet, along `output_angle_deg`, on the tracer's next pass.

    The output position defaults to 100 units to the right of the input.
    """

    type = 'OpticalFiber'
    is_optical = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'output_x': DEFAULT_OUTPUT_OFFSET,
        'output_y': 0.0,
        'output_angle_deg': 0.0,
        'numerical_aperture': 0.22,
        'core_diameter': 9.0,
        'intrinsic_efficiency': 1.0,
        'loss_db_per_km': 0.0,
        'facet_length': 15.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'output_x': {'label': 'Output X', 'type': 'number', 'step': 1},
        'output_y': {'label': 'Output Y', 'type': 'number', 'step': 1},
        'output_angle_deg': {'label': 'Output angle (deg)', 'type': 'number', 'step': 1},
        'numerical_aperture': {'label': 'Numerical aperture', 'type': 'number', 'min': 0.01, 'max': 1.0, 'step': 0.01},
        'core_diameter': {'label': 'Core diameter', 'type': 'number', 'min': 1.0, 'max': 1e6, 'step': 1},
        'intrinsic_efficiency': {'label': 'Intrinsic efficiency', 'type': 'number', 'min': 0.0, 'max': 1.0, 'step': 0.05},
        'loss_db_per_km': {'label': 'Loss (dB/km)', 'type': 'number', 'min': 0.0, 'max': 1e4, 'step': 0.1},
        'facet_length': {'label': 'Facet length', 'type': 'number', 'min': 5.0, 'max': 1e6, 'step': 1},
    }

    def __init__(self, scene, json_obj=None, **props):
        given = {**(json_obj or {}), **props}
        super().__init__(scene, json_obj, **props)
        if 'output_x' not in given:
            self.output_x = self.pos_x + DEFAULT_OUTPUT_OFFSET
        if 'output_y' not in given:
            self.output_y = self.pos_y
        self._update_geometry()
        self.pending_rays: List['Ray'] = []
        self.last_coupling: float = 0.0
        self.hit_count: int = 0

    def _update_geometry(self) -> None:
        self.input_normal: Vector2 = Vector2.from_angle(self.angle_rad)
        half = self.input_normal.perpendicular() * (self.facet_length / 2.0)
        self.input_p1: Vector2 = self.pos - half
        self.input_p2: Vector2 = self.pos + half

        self.output_pos: Vector2 = Vector2(self.output_x, self.output_y)
        self.output_direction: Vector2 = Vector2.from_angle(math.radians(self.output_angle_deg))
        self.fiber_length: float = self.pos.distance_to(self.output_pos)
        self.acceptance_angle: float = math.asin(min(1.0, self.numerical_aperture / N_AIR))

    def serialize(self) -> Dict[str, Any]:
        # The output position is always stored since its default follows the input
        json_obj = super().serialize()
        json_obj['output_x'] = self.output_x
        json_obj['output_y'] = self.output_y
        return json_obj

    def on_trace_start(self) -> None:
        self.pending_rays = []
        self.last_coupling = 0.0
        self.hit_count = 0

    def transmission_factor(self) -> float:
        """Fraction of the coupled power surviving the fiber loss."""
        if self.loss_db_per_km <= 0 or self.fiber_length <= 0:
            return 1.0
        loss_db = self.loss_db_per_km * self.fiber_length / PIXELS_PER_KM
        return 10.0 ** (-loss_db / 10.0)

    def coupling_factor(self, point: Vector2, direction: Vector2) -> float:
        """Angle and position coupling factor in [0, 1] (0 outside the core or cone)."""
        core_radius = self.core_diameter / 2.0
        r = point.distance_to(self.pos)
        if r > core_radius + 1e-6:
            return 0.0
        cos_theta = -direction.dot(self.input_normal)
        cos_max = math.cos(self.acceptance_angle)
        if cos_theta < cos_max - 1e-6:
            return 0.0
        if cos_max < 1.0 - 1e-9:
            angle_factor = max(0.0, min(1.0, (cos_theta - cos_max) / (1.0 - cos_max)))
        else:
            angle_factor = 1.0
        position_factor = max(0.0, 1.0 - r / core_radius)
        return angle_factor * position_factor

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'fiber_length': ('Fiber length', self.fiber_length),
            'acceptance_angle_deg': ('Acceptance half-angle (deg)', math.degrees(self.acceptance_angle)),
            'coupling': ('Last coupling factor', self.last_coupling),
            'hit_count': ('Rays coupled', self.hit_count),
        }

    def intersect(self, origin: Vector2, direction: Vector2) -> List[Hit]:
        if direction.dot(self.input_normal) >= -1e-9:
            return []
        result = geometry.ray_segment_intersection(origin, direction, self.input_p1, self.input_p2)
        if result is None:
            return []
        t, s = result
        return [Hit(t, origin + direction * t, self.input_normal, 'input_facet', {'segment_param': s})]

    def interact(self, ray: 'Ray', hit: Hit) -> List['Ray']:
        coupling = self.coupling_factor(hit.point, ray.direction)
        self.last_coupling = coupling
        if coupling <= 0:
            ray.terminate('absorbed_fiber_facet')
            return []

        intensity = ray.intensity * self.intrinsic_efficiency * coupling * self.transmission_factor()
        ray.terminate('coupled_fiber')
        if not self.keeps(intensity, ray):
            return []
        self.hit_count += 1
        self.pending_rays.append(ray.spawn(
            self.output_pos, self.output_direction, intensity=intensity,
            medium_refractive_index=N_AIR, interaction_type='fiber_output',
        ))
        return []

    def collect_deferred_rays(self) -> List['Ray']:
        rays, self.pending_rays = self.pending_rays, []
        if rays:
            logger.debug("%s: emitting %d buffered rays", self.get_display_name(), len(rays))
        return rays

    def get_shape(self) -> Optional['LineString']:
        return geometry.segment(self.input_p1, self.input_p2)
