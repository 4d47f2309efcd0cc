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
import random
from typing import Any, Dict, List, Optional

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.base_scene_obj import BaseSceneObj
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.ray import Ray
    from ray_optics_lab.core.gaussian import GaussianBeam
    from ray_optics_lab.core.constants import MAX_RAYS_PER_SOURCE, N_AIR
    from ray_optics_lab.core import jones as jones_calc
else:
    from .base_scene_obj import BaseSceneObj
    from ..geometry import Vector2
    from ..ray import Ray
    from ..gaussian import GaussianBeam
    from ..constants import MAX_RAYS_PER_SOURCE, N_AIR
    from .. import jones as jones_calc


POLARIZATION_TYPES = ['unpolarized', 'linear', jones_calc.CIRCULAR_RIGHT, jones_calc.CIRCULAR_LEFT]

# Merged into the defaults/specs of sources with a selectable polarization
POLARIZATION_DEFAULTS: Dict[str, Any] = {
    'polarization_type': 'unpolarized',
    'polarization_angle_deg': 0.0,
}

POLARIZATION_SPECS: Dict[str, Dict[str, Any]] = {
    'polarization_type': {'label': 'Polarization', 'type': 'select', 'options': POLARIZATION_TYPES},
    'polarization_angle_deg': {'label': 'Polarization angle (deg)', 'type': 'number', 'min': -360.0, 'max': 360.0, 'step': 1},
}

# Merged into the defaults/specs of sources that can seed Gaussian beam parameters
GAUSSIAN_DEFAULTS: Dict[str, Any] = {
    'gaussian_enabled': False,
    'beam_waist': 5.0,
}

GAUSSIAN_SPECS: Dict[str, Dict[str, Any]] = {
    'gaussian_enabled': {'label': 'Gaussian beam', 'type': 'bool'},
    'beam_waist': {'label': 'Beam waist w0', 'type': 'number', 'min': 1e-3, 'max': 1e6, 'step': 0.5},
}


class BaseLightSource(BaseSceneObj):
    """
    Base class for light sources.

    A source takes no part in intersection tests. At the start of a trace
    the simulator calls `generate()`, which returns the initial rays; the
    ray count is capped by the scene's `max_rays_per_source` and intensity
    is divided evenly between rays unless a source says otherwise.
    """

    is_source = True

    serializable_defaults: Dict[str, Any] = {
        **BaseSceneObj.serializable_defaults,
        'enabled': True,
        'intensity': 1.0,
        'ray_count': 1,
        'ignore_decay': False,
        'beam_diameter': 1.0,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **BaseSceneObj.property_specs,
        'enabled': {'label': 'Enabled', 'type': 'bool'},
        'intensity': {'label': 'Intensity', 'type': 'number', 'min': 0.0, 'max': 1e6, 'step': 0.1},
        'ray_count': {'label': 'Number of rays', 'type': 'int', 'min': 1, 'max': 100000, 'step': 1},
        'ignore_decay': {'label': 'Ignore decay', 'type': 'bool'},
        'beam_diameter': {'label': 'Beam diameter', 'type': 'number', 'min': 0.0, 'max': 1e6, 'step': 1},
    }

    def generate(self) -> List[Ray]:
        """The initial rays of this source (empty when disabled)."""
        if not self.enabled:
            return []
        return self.generate_rays(self.max_rays())

    def generate_rays(self, count: int) -> List[Ray]:
        raise NotImplementedError

    # ==================== Helpers for subclasses ====================

    def max_rays(self) -> int:
        """`ray_count` capped by the scene's per-source limit."""
        cap = MAX_RAYS_PER_SOURCE if self.scene is None else self.scene.config.max_rays_per_source
        return max(0, min(self.ray_count, cap))

    @property
    def rng(self) -> random.Random:
        if self.scene is None:
            return random.Random()
        return self.scene.rng

    @staticmethod
    def fan_angles(center: float, spread: float, count: int) -> List[float]:
        """`count` angles evenly covering `spread` radians centred on `center`."""
        if count <= 1 or spread <= 1e-9:
            return [center] * count
        step = spread / (count - 1)
        start = center - spread / 2.0
        return [start + i * step for i in range(count)]

    def polarization_tag(self) -> Any:
        """The polarization tag of emitted rays, from `polarization_type`."""
        kind = getattr(self, 'polarization_type', 'unpolarized')
        if kind == 'linear':
            return math.radians(self.polarization_angle_deg)
        if kind in (jones_calc.CIRCULAR_RIGHT, jones_calc.CIRCULAR_LEFT):
            return kind
        return None

    def gaussian_for(self, wavelength_nm: float) -> Optional[GaussianBeam]:
        if not getattr(self, 'gaussian_enabled', False) or self.beam_waist <= 1e-6:
            return None
        return GaussianBeam.from_waist(self.beam_waist, wavelength_nm)

    def make_ray(self, origin: Vector2, direction: Vector2, wavelength_nm: float,
                 intensity: float, phase: float = 0.0) -> Ray:
        """Build an emitted ray carrying this source's id, polarization and beam settings."""
        return Ray(
            origin=origin,
            direction=direction,
            wavelength_nm=wavelength_nm,
            intensity=intensity,
            phase=phase,
            medium_refractive_index=N_AIR,
            source_id=self.uuid,
            polarization=self.polarization_tag(),
            ignore_decay=self.ignore_decay,
            beam_diameter=self.beam_diameter,
            gaussian=self.gaussian_for(wavelength_nm),
        )
