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

===============================================================================
Trace Result Container
===============================================================================
Captures the output artifact of one trace together with:
- The terminated rays (each carrying its history)
- The scene generation the trace was computed for
- A lightweight snapshot of the scene and its tracing configuration
- Termination statistics and the ray lineage tree
===============================================================================
"""

import uuid as uuid_module
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.ray import Ray
    from ..core.ray_lineage import RayLineage
    from ..core.scene import Scene


@dataclass
class SceneSnapshot:
    """
    Identifying information about a scene at trace time.

    This is not a full serialization of the scene (use Scene.serialize()).

    Attributes:
        uuid: The scene's UUID
        name: The scene's display name
        object_count: Total number of objects in the scene
        optical_object_count: Number of objects taking part in intersection tests
        source_count: Number of light sources
        object_summary: Brief description of objects (e.g., "1 LaserSource, 2 Mirror")
        config: The tracing configuration as a dictionary
    """
    uuid: str
    name: str
    object_count: int
    optical_object_count: int
    source_count: int
    object_summary: str
    config: Dict[str, Any]

    @classmethod
    def from_scene(cls, scene: 'Scene') -> 'SceneSnapshot':
        type_counts: Dict[str, int] = {}
        for obj in scene.objs:
            type_name = getattr(obj, 'type', obj.__class__.__name__)
            type_counts[type_name] = type_counts.get(type_name, 0) + 1
        summary_parts = [f"{count} {name}" for name, count in sorted(type_counts.items())]

        return cls(
            uuid=scene.uuid,
            name=scene.get_display_name(),
            object_count=len(scene.objs),
            optical_object_count=len(scene.optical_objs),
            source_count=len(scene.sources),
            object_summary=", ".join(summary_parts) if summary_parts else "empty",
            config=scene.config.to_dict(),
        )


@dataclass
class TraceResult:
    """
    The full terminated ray list of one trace plus context.

    Attributes:
        uuid: Unique identifier for this trace run
        timestamp: ISO format timestamp when the trace completed
        generation: Scene generation the trace was computed for; compare
            with Scene.is_current() to discard superseded results
        snapshot: Snapshot of the scene at trace time
        rays: Terminated rays, in termination order
        total_emitted: Rays emitted by sources and interactions
        passes: Tracer passes run (1 plus deferred fiber passes)
        warnings: Warning messages from the trace
        error: Scene error message, if any
        lineage: Parent-child relationships of all rays
    """
    uuid: str
    timestamp: str
    generation: int
    snapshot: SceneSnapshot
    rays: List['Ray']
    total_emitted: int
    passes: int = 1
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    lineage: Optional['RayLineage'] = None

    @classmethod
    def create(
        cls,
        scene: 'Scene',
        rays: List['Ray'],
        generation: int,
        total_emitted: int,
        passes: int = 1,
        lineage: Optional['RayLineage'] = None
    ) -> 'TraceResult':
        """Primary factory method, called by the simulator at the end of a trace."""
        warnings = []
        if scene.warning:
            warnings.append(scene.warning)
        return cls(
            uuid=str(uuid_module.uuid4()),
            timestamp=datetime.now().isoformat(),
            generation=generation,
            snapshot=SceneSnapshot.from_scene(scene),
            rays=rays,
            total_emitted=total_emitted,
            passes=passes,
            warnings=warnings,
            error=scene.error,
            lineage=lineage,
        )

    @property
    def ray_count(self) -> int:
        return len(self.rays)

    @property
    def hit_ray_limit(self) -> bool:
        return any(r.termination_reason == 'ray_limit' for r in self.rays)

    @property
    def termination_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = defaultdict(int)
        for ray in self.rays:
            counts[ray.termination_reason] += 1
        return dict(counts)

    @property
    def unique_wavelengths(self) -> Set[float]:
        return {ray.wavelength_nm for ray in self.rays}

    def rays_by_reason(self, reason: str) -> List['Ray']:
        return [ray for ray in self.rays if ray.termination_reason == reason]

    def escaped_rays(self) -> List['Ray']:
        """Rays that left the scene without hitting anything."""
        return self.rays_by_reason('escaped')

    def total_intensity(self, reason: Optional[str] = None) -> float:
        """Sum of intensities of terminated rays, optionally filtered by reason."""
        rays = self.rays if reason is None else self.rays_by_reason(reason)
        return sum(ray.intensity for ray in rays)

    def get_wavelength_groups(self) -> Dict[float, List['Ray']]:
        """Group rays by wavelength."""
        groups: Dict[float, List['Ray']] = defaultdict(list)
        for ray in self.rays:
            groups[ray.wavelength_nm].append(ray)
        return dict(groups)

    def get_source_groups(self) -> Dict[Optional[str], List['Ray']]:
        """Group rays by emitting source UUID."""
        groups: Dict[Optional[str], List['Ray']] = defaultdict(list)
        for ray in self.rays:
            groups[ray.source_id].append(ray)
        return dict(groups)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data export for renderers (rays with their histories)."""
        return {
            'uuid': self.uuid,
            'timestamp': self.timestamp,
            'generation': self.generation,
            'scene': self.snapshot.name,
            'total_emitted': self.total_emitted,
            'passes': self.passes,
            'warnings': list(self.warnings),
            'error': self.error,
            'rays': [ray.to_dict() for ray in self.rays],
        }

    def summary(self) -> str:
        counts = ", ".join(f"{k}={v}" for k, v in sorted(self.termination_counts.items()))
        return (f"Trace of {self.snapshot.name} (generation {self.generation}): "
                f"{self.ray_count} rays, {self.total_emitted} emitted, "
                f"{self.passes} pass(es); {counts or 'no rays'}")

    def __repr__(self) -> str:
        return (f"TraceResult(generation={self.generation}, rays={self.ray_count}, "
                f"emitted={self.total_emitted})")
