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
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from constants import (
        MAX_RAY_BOUNCES, MIN_RAY_INTENSITY, MAX_RAYS_PER_SOURCE,
        MAX_TOTAL_RAYS, MAX_DEFERRED_PASSES,
    )
else:
    from .constants import (
        MAX_RAY_BOUNCES, MIN_RAY_INTENSITY, MAX_RAYS_PER_SOURCE,
        MAX_TOTAL_RAYS, MAX_DEFERRED_PASSES,
    )

logger = logging.getLogger(__name__)


@dataclass
class TraceConfig:
    """
    Tracing limits injected into a Scene.

    Attributes:
        max_ray_bounces: A ray whose bounce count reaches this value is
            terminated without testing components.
        min_ray_intensity: Rays (and candidate output rays) below this
            intensity are pruned unless they ignore decay. 0 disables pruning.
        max_rays_per_source: Upper bound on the rays a single source emits.
        max_total_rays: Global safety bound on rays emitted during one trace.
        max_deferred_passes: Extra tracer passes for rays buffered by
            components (fiber outputs).
        fast_white_light: White-light sources sample wavelengths from the
            spectrum CDF instead of enumerating the whole table.
        random_seed: Seed for the scene RNG; None for a nondeterministic seed.
    """
    max_ray_bounces: int = MAX_RAY_BOUNCES
    min_ray_intensity: float = MIN_RAY_INTENSITY
    max_rays_per_source: int = MAX_RAYS_PER_SOURCE
    max_total_rays: int = MAX_TOTAL_RAYS
    max_deferred_passes: int = MAX_DEFERRED_PASSES
    fast_white_light: bool = False
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if int(self.max_ray_bounces) != self.max_ray_bounces or self.max_ray_bounces < 1:
            raise ValueError(f"max_ray_bounces must be a positive integer, got {self.max_ray_bounces}")
        if not math.isfinite(self.min_ray_intensity) or self.min_ray_intensity < 0:
            raise ValueError(f"min_ray_intensity must be >= 0, got {self.min_ray_intensity}")
        if self.max_rays_per_source < 1:
            raise ValueError(f"max_rays_per_source must be >= 1, got {self.max_rays_per_source}")
        if self.max_total_rays < 1:
            raise ValueError(f"max_total_rays must be >= 1, got {self.max_total_rays}")
        if self.max_deferred_passes < 0:
            raise ValueError(f"max_deferred_passes must be >= 0, got {self.max_deferred_passes}")
        self.max_ray_bounces = int(self.max_ray_bounces)
        self.max_rays_per_source = int(self.max_rays_per_source)
        self.max_total_rays = int(self.max_total_rays)
        self.max_deferred_passes = int(self.max_deferred_passes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'TraceConfig':
        """
        Build a config from a plain dictionary.

        Unknown keys are ignored with a warning, missing keys take defaults.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown TraceConfig keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})


if __name__ == "__main__":
    config = TraceConfig(min_ray_intensity=0.0)
    print(config)
    print(TraceConfig.from_dict({'max_ray_bounces': 10, 'bogus': 1}))
