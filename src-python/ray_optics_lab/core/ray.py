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
import uuid as _uuid_mod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.geometry import Vector2
    from ray_optics_lab.core.gaussian import GaussianBeam
    from ray_optics_lab.core.errors import InvalidRayError
    from ray_optics_lab.core import jones as jones_calc
    from ray_optics_lab.core.constants import (
        DEFAULT_WAVELENGTH_NM, N_AIR, PIXELS_PER_NANOMETER, RAY_ORIGIN_OFFSET,
    )
else:
    from .geometry import Vector2
    from .gaussian import GaussianBeam
    from .errors import InvalidRayError
    from . import jones as jones_calc
    from .constants import (
        DEFAULT_WAVELENGTH_NM, N_AIR, PIXELS_PER_NANOMETER, RAY_ORIGIN_OFFSET,
    )

if TYPE_CHECKING:
    from .config import TraceConfig


# Marker for "inherit from the parent ray" in Ray.spawn()
_INHERIT: Any = object()

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class Hit:
    """
    A forward intersection between a ray and a component surface.

    Attributes:
        distance: Distance along the ray (> MIN_RAY_SEGMENT_LENGTH).
        point: Intersection point.
        normal: Unit surface normal, oriented to oppose the incident direction.
        surface_id: Component-specific surface tag (edge index, 'input_facet', ...).
        extra: Component-specific data computed during the intersection test.
    """
    distance: float
    point: Vector2
    normal: Vector2
    surface_id: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)


class Ray:
    """
    A propagating light segment.

    A ray starts at `origin` and travels along the unit vector `direction`
    until the tracer finds the nearest component hit. A ray is never
    redirected in place: components consume it and emit new rays through
    `spawn()`. The only changes made to a consumed ray are the end point
    appended to its history and its termination reason.

    Attributes:
        origin (Vector2): Start point.
        direction (Vector2): Unit propagation direction.
        wavelength_nm (float): Wavelength in nm.
        intensity (float): Radiometric intensity (>= 0, arbitrary scale).
        phase (float): Optical phase at the origin, radians in [0, 2pi).
        bounce_count (int): Number of interactions in this lineage so far.
        medium_refractive_index (float): Index of the medium the ray travels in.
        source_id (str or None): UUID of the emitting source.
        ignore_decay (bool): If True, the ray is never pruned for low intensity
            and simple mirrors do not attenuate it.
        beam_diameter (float): Geometric beam diameter (scene units).
        gaussian (GaussianBeam or None): Optional Gaussian beam parameters.
        history (list of Vector2): Path points so far (append-only).
        polarization: None (unpolarized), a float (linear angle in radians),
            'circular-right', 'circular-left' or 'elliptical'.
        jones (np.ndarray or None): Jones vector (Ex, Ey); None when unpolarized.

    Lineage Tracking Attributes:
        uuid (str): Unique identifier for this ray segment (auto-generated)
        parent_uuid (str or None): UUID of the parent ray that spawned this one
        interaction_type (str): How this ray was created ('source', 'reflect',
            'transmit', 'refract', 'tir', 'diffract', 'fiber_output', ...)

    Raises:
        InvalidRayError: If the origin, direction, intensity or medium index
            is invalid. This is the single validation point for ray state.
    """

    def __init__(
        self,
        origin: Vector2,
        direction: Vector2,
        wavelength_nm: float = DEFAULT_WAVELENGTH_NM,
        intensity: float = 1.0,
        phase: float = 0.0,
        bounce_count: int = 0,
        medium_refractive_index: float = N_AIR,
        source_id: Optional[str] = None,
        polarization: Any = None,
        ignore_decay: bool = False,
        history: Optional[List[Vector2]] = None,
        beam_diameter: float = 1.0,
        gaussian: Optional[GaussianBeam] = None,
        jones: Optional[np.ndarray] = None
    ) -> None:
        if not origin.is_finite():
            raise InvalidRayError(f"non-finite ray origin {origin}", reason='nan_origin')
        if not direction.is_finite():
            raise InvalidRayError(f"non-finite ray direction {direction}", reason='nan_direction')
        if direction.magnitude_squared() < 1e-24:
            raise InvalidRayError("zero-length ray direction", reason='zero_direction')
        if intensity is None or math.isnan(intensity):
            raise InvalidRayError("NaN ray intensity", reason='nan_intensity')
        if intensity < 0:
            if intensity < -1e-12:
                raise InvalidRayError(f"negative ray intensity {intensity}", reason='negative_intensity')
            intensity = 0.0
        if not math.isfinite(medium_refractive_index) or medium_refractive_index < 1.0 - 1e-9:
            raise InvalidRayError(
                f"refractive index {medium_refractive_index} below 1",
                reason='invalid_refractive_index'
            )
        if not math.isfinite(phase):
            raise InvalidRayError("non-finite ray phase", reason='nan_phase')

        self.origin: Vector2 = origin
        self.direction: Vector2 = direction.normalize()
        self.wavelength_nm: float = float(wavelength_nm) if wavelength_nm else DEFAULT_WAVELENGTH_NM
        self.intensity: float = float(intensity)
        self.phase: float = phase % TWO_PI
        self.bounce_count: int = int(bounce_count)
        self.medium_refractive_index: float = float(medium_refractive_index)
        self.source_id: Optional[str] = source_id
        self.ignore_decay: bool = bool(ignore_decay)
        self.beam_diameter: float = float(beam_diameter)
        self.gaussian: Optional[GaussianBeam] = gaussian
        self.history: List[Vector2] = list(history) if history is not None else [origin]

        self.polarization: Any = None
        self.jones: Optional[np.ndarray] = None
        if jones is not None:
            self.set_jones(jones)
        else:
            self.set_polarization(polarization)

        self.termination_reason: Optional[str] = None
        self.segment_length: Optional[float] = None
        """Distance travelled to the end point, set by advance_to()."""

        # =====================================================================
        # Ray Lineage Tracking
        # =====================================================================
        # These attributes enable reconstruction of the full ray tree after
        # tracing, tracking parent-child relationships across interactions.
        # =====================================================================
        self.uuid: str = str(_uuid_mod.uuid4())   # Unique ID for this ray segment
        self.parent_uuid: Optional[str] = None     # UUID of the parent ray (None for source rays)
        self.interaction_type: str = 'source'

    # =========================================================================
    # Polarization
    # =========================================================================

    def set_polarization(self, polarization: Any) -> None:
        """
        Set the polarization from a tag.

        Args:
            polarization: None for unpolarized, a float for linear at that angle
                (radians), 'circular-right'/'circular-left' ('circular' is an
                alias for right-handed). 'elliptical' without a Jones vector is
                treated as unpolarized.
        """
        if polarization is None or polarization == jones_calc.ELLIPTICAL:
            self.polarization = None
            self.jones = None
        elif isinstance(polarization, str):
            if polarization == 'circular':
                polarization = jones_calc.CIRCULAR_RIGHT
            if polarization not in (jones_calc.CIRCULAR_RIGHT, jones_calc.CIRCULAR_LEFT):
                raise InvalidRayError(f"unknown polarization '{polarization}'", reason='invalid_polarization')
            self.polarization = polarization
            self.jones = jones_calc.circular(polarization)
        else:
            angle = float(polarization)
            if not math.isfinite(angle):
                raise InvalidRayError("non-finite polarization angle", reason='invalid_polarization')
            self.polarization = math.atan2(math.sin(angle), math.cos(angle))
            self.jones = jones_calc.linear(self.polarization)

    def set_jones(self, jones: np.ndarray) -> None:
        """Set the Jones vector and re-derive the polarization tag from it."""
        vec = np.array(jones, dtype=complex).reshape(2)
        if not np.all(np.isfinite(vec)):
            raise InvalidRayError("non-finite Jones vector", reason='invalid_polarization')
        self.jones = vec
        self.polarization = jones_calc.classify(vec)

    def ensure_jones_vector(self) -> bool:
        """
        Materialize the Jones vector from the polarization tag if needed.

        Returns:
            True if the ray now has a definite Jones vector, False if it is
            unpolarized.
        """
        if self.jones is None and self.polarization is not None:
            self.jones = jones_calc.from_tag(self.polarization)
        return self.jones is not None

    @property
    def has_jones(self) -> bool:
        return self.jones is not None

    @property
    def jones_intensity(self) -> float:
        """|Ex|^2 + |Ey|^2, or 0 for an unpolarized ray."""
        if self.jones is None:
            return 0.0
        return jones_calc.intensity(self.jones)

    @property
    def is_polarized(self) -> bool:
        return self.polarization is not None or self.jones is not None

    # =========================================================================
    # Propagation state
    # =========================================================================

    @property
    def is_active(self) -> bool:
        return self.termination_reason is None

    @property
    def state(self) -> str:
        return 'active' if self.termination_reason is None else 'terminated'

    @property
    def end_point(self) -> Optional[Vector2]:
        """The hit point recorded by advance_to(), or None for an escaped ray."""
        if self.segment_length is None:
            return None
        return self.history[-1]

    def terminate(self, reason: str) -> None:
        """Mark the ray as terminated. The first reason wins."""
        if self.termination_reason is None:
            self.termination_reason = reason

    def termination_check(self, config: 'TraceConfig') -> Optional[str]:
        """
        Reason this ray must stop before being traced, or None.

        Bounce count is always enforced; low intensity only when the ray
        does not ignore decay.
        """
        if self.bounce_count >= config.max_ray_bounces:
            return 'max_bounces'
        if not self.ignore_decay and self.intensity < config.min_ray_intensity:
            return 'low_intensity'
        return None

    def advance_to(self, point: Vector2) -> float:
        """
        Record the end point of this segment.

        Appends the point to the history and stores the segment length,
        which spawn() uses to propagate phase and Gaussian parameters.

        Returns:
            The segment length.
        """
        length = self.origin.distance_to(point)
        self.history.append(point)
        self.segment_length = length
        return length

    @property
    def propagation_phase(self) -> float:
        """Optical phase accumulated over the recorded segment, 2pi n L / lambda."""
        if not self.segment_length:
            return 0.0
        wavelength = self.wavelength_nm * PIXELS_PER_NANOMETER
        return TWO_PI / wavelength * self.segment_length * self.medium_refractive_index

    def beam_width(self) -> float:
        """Beam radius at the origin (Gaussian width if available)."""
        if self.gaussian is not None:
            return self.gaussian.width()
        return self.beam_diameter / 2.0

    # =========================================================================
    # Child rays
    # =========================================================================

    def spawn(
        self,
        origin: Vector2,
        direction: Vector2,
        intensity: Optional[float] = None,
        phase_shift: float = 0.0,
        medium_refractive_index: Optional[float] = None,
        jones: Any = _INHERIT,
        polarization: Any = _INHERIT,
        interaction_type: str = 'transmit',
        beam_diameter: Optional[float] = None,
        gaussian: Any = _INHERIT,
        wavelength_nm: Optional[float] = None,
        offset: bool = True
    ) -> 'Ray':
        """
        Create an outgoing ray produced by an interaction with this ray.

        The child starts at `origin` pushed RAY_ORIGIN_OFFSET along its own
        direction, has bounce_count + 1, and carries the parent's phase
        (plus propagation phase and `phase_shift`), polarization and
        Gaussian parameters unless overridden.

        Args:
            origin: Interaction point.
            direction: Outgoing direction (normalized by the constructor).
            intensity: Outgoing intensity (default: parent intensity).
            phase_shift: Extra phase added by the interaction (radians).
            medium_refractive_index: Index of the medium after the interaction.
            jones: Explicit Jones vector, or None for unpolarized.
            polarization: Explicit polarization tag (used if `jones` is not given).
            interaction_type: Lineage tag for the child.
            beam_diameter: Beam diameter after the interaction.
            gaussian: Explicit Gaussian parameters, or None to drop them.
            wavelength_nm: Override the wavelength.
            offset: Whether to apply the emission offset.

        Raises:
            InvalidRayError: If the resulting ray state is invalid.
        """
        unit = direction.normalize()
        start = origin + unit * RAY_ORIGIN_OFFSET if offset else origin

        if gaussian is _INHERIT:
            gaussian = self.gaussian
            if gaussian is not None and self.segment_length:
                gaussian = gaussian.propagated(self.segment_length)

        child = Ray(
            origin=start,
            direction=direction,
            wavelength_nm=wavelength_nm if wavelength_nm is not None else self.wavelength_nm,
            intensity=self.intensity if intensity is None else intensity,
            phase=self.phase + self.propagation_phase + phase_shift,
            bounce_count=self.bounce_count + 1,
            medium_refractive_index=(self.medium_refractive_index
                                     if medium_refractive_index is None else medium_refractive_index),
            source_id=self.source_id,
            ignore_decay=self.ignore_decay,
            history=self.history + [start],
            beam_diameter=self.beam_diameter if beam_diameter is None else beam_diameter,
            gaussian=gaussian,
        )

        if jones is not _INHERIT:
            if jones is None:
                child.set_polarization(None)
            else:
                child.set_jones(jones)
        elif polarization is not _INHERIT:
            child.set_polarization(polarization)
        else:
            child.polarization = self.polarization
            child.jones = None if self.jones is None else self.jones.copy()

        child.parent_uuid = self.uuid
        child.interaction_type = interaction_type
        return child

    # =========================================================================
    # Export
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view of the ray for external consumers (renderers)."""
        polarization = self.polarization
        return {
            'uuid': self.uuid,
            'parent_uuid': self.parent_uuid,
            'interaction_type': self.interaction_type,
            'source_id': self.source_id,
            'origin': self.origin.to_dict(),
            'direction': self.direction.to_dict(),
            'wavelength_nm': self.wavelength_nm,
            'intensity': self.intensity,
            'phase': self.phase,
            'bounce_count': self.bounce_count,
            'medium_refractive_index': self.medium_refractive_index,
            'polarization': polarization,
            'beam_diameter': self.beam_diameter,
            'history': [p.to_dict() for p in self.history],
            'termination_reason': self.termination_reason,
        }

    def __repr__(self) -> str:
        state = self.termination_reason or 'active'
        return (f"Ray(origin=({self.origin.x:.3f}, {self.origin.y:.3f}), "
                f"dir=({self.direction.x:.4f}, {self.direction.y:.4f}), "
                f"lambda={self.wavelength_nm:.1f}nm, I={self.intensity:.4g}, "
                f"bounces={self.bounce_count}, {state})")


if __name__ == "__main__":
    ray = Ray(Vector2(0, 0), Vector2(3, 4), polarization=0.0)
    print(ray)
    ray.advance_to(Vector2(30, 40))
    child = ray.spawn(Vector2(30, 40), Vector2(-3, 4), phase_shift=math.pi, interaction_type='reflect')
    print(child, child.polarization, child.history)
    try:
        Ray(Vector2(0, 0), Vector2(float('nan'), 0))
    except InvalidRayError as e:
        print(f"rejected: {e.reason}")
