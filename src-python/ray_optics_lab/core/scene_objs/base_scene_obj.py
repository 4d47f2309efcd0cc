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

import copy
import json
import logging
import math
import uuid as uuid_module
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.geometry import Vector2, geometry
    from ray_optics_lab.core.constants import MIN_RAY_INTENSITY
else:
    from ..geometry import Vector2, geometry
    from ..constants import MIN_RAY_INTENSITY

if TYPE_CHECKING:
    from ..ray import Ray, Hit
    from ..scene import Scene

logger = logging.getLogger(__name__)


class BaseSceneObj:
    """
    Base class for everything that lives in a scene: optical components and
    light sources.

    This class provides the fundamental interface for all scene objects:
    - Pose (position and rotation) and derived-geometry refresh
    - Property bag (get_properties / set_property) with validation
    - Serialization/deserialization through `serializable_defaults`
    - The tracing contract (intersect / interact) for optical components
    """

    # Class attributes
    type: str = ''
    """The type tag of the object, used for reconstruction."""

    serializable_defaults: Dict[str, Any] = {
        'pos_x': 0.0,
        'pos_y': 0.0,
        'angle_deg': 0.0,
        'label': None,
    }
    """
    The default values of the properties which are to be serialized.
    If some property is default, it will not be serialized and will be
    deserialized to the default value. Subclasses extend this dictionary:

        serializable_defaults = {
            **BaseSceneObj.serializable_defaults,
            'angle_deg': 90.0,
            'focal_length': 150.0,
        }
    """

    property_specs: Dict[str, Dict[str, Any]] = {
        'pos_x': {'label': 'Position X', 'type': 'number', 'step': 1},
        'pos_y': {'label': 'Position Y', 'type': 'number', 'step': 1},
        'angle_deg': {'label': 'Angle (deg)', 'type': 'number', 'step': 1},
        'label': {'label': 'Label', 'type': 'text'},
    }
    """
    Editable properties and their display/validation metadata.

    Keys of each entry:
        label: Display name.
        type: 'number', 'int', 'bool', 'select' or 'text'.
        min / max: Inclusive bounds for numeric values.
        step: Display step for numeric values.
        options: Allowed values for 'select'.
    """

    is_optical: bool = False
    """Whether the object takes part in intersection tests."""

    is_source: bool = False
    """Whether the object emits rays at the start of a trace."""

    def __init__(self, scene: Optional['Scene'], json_obj: Optional[Dict[str, Any]] = None, **props: Any):
        """
        Initialize the scene object.

        Args:
            scene: The scene the object belongs to.
            json_obj: The serialized object to be deserialized, if any.
            **props: Property overrides, merged over `json_obj`.
        """
        self.scene = scene
        self.error: Optional[str] = None
        """The error message of the object."""

        self.warning: Optional[str] = None
        """The warning message of the object."""

        self._uuid: str = str(uuid_module.uuid4())
        self._name: Optional[str] = None

        if props:
            json_obj = {**(json_obj or {}), **props}

        serializable_defaults = self.__class__.serializable_defaults
        if json_obj:
            known_keys = ['type'] + list(serializable_defaults.keys())
            for key in json_obj:
                if key not in known_keys:
                    # Stored in the scene, as it likely indicates an incompatible scene version
                    message = f"Unknown object key '{key}' for type '{self.__class__.type}'"
                    if self.scene is not None:
                        self.scene.error = message
                    logger.warning(message)

        for prop_name, default_value in serializable_defaults.items():
            setattr(self, prop_name, copy.deepcopy(default_value))

        if json_obj:
            for prop_name in serializable_defaults:
                if prop_name not in json_obj:
                    continue
                ok, value = self._coerce_value(prop_name, json_obj[prop_name])
                if ok:
                    setattr(self, prop_name, value)
                else:
                    self.warning = (
                        f"Invalid value {json_obj[prop_name]!r} for '{prop_name}', "
                        f"using default {serializable_defaults[prop_name]!r}"
                    )
                    logger.warning("%s: %s", self.get_display_name(), self.warning)

        try:
            self._update_geometry()
        except (ArithmeticError, ValueError) as e:
            # The combination of values is unusable: fall back to the shape defaults
            self.warning = f"Invalid geometry ({e}), using default shape"
            logger.warning("%s: %s", self.get_display_name(), self.warning)
            for prop_name, default_value in serializable_defaults.items():
                if prop_name not in ('pos_x', 'pos_y', 'angle_deg', 'label'):
                    setattr(self, prop_name, copy.deepcopy(default_value))
            self._update_geometry()

    # ==================== Pose ====================

    @property
    def pos(self) -> Vector2:
        return Vector2(self.pos_x, self.pos_y)

    @property
    def angle_rad(self) -> float:
        return math.radians(self.angle_deg)

    def move(self, diff_x: float, diff_y: float) -> bool:
        """Translate the object. Returns False if the result is not finite."""
        return self._apply_changes({'pos_x': self.pos_x + diff_x, 'pos_y': self.pos_y + diff_y})

    def rotate(self, diff_deg: float) -> bool:
        """Rotate the object about its position."""
        return self._apply_changes({'angle_deg': self.angle_deg + diff_deg})

    def _update_geometry(self) -> None:
        """Recompute derived geometry caches from the authoritative parameters."""
        pass

    # ==================== Properties ====================

    def get_properties(self) -> Dict[str, Dict[str, Any]]:
        """
        The property bag exposed to inspectors and host applications.

        Returns:
            Mapping of property name to {'value', 'label', 'type', ...}.
            Derived read-only quantities carry 'readonly': True.
        """
        props: Dict[str, Dict[str, Any]] = {}
        for name, spec in self.__class__.property_specs.items():
            entry = {'value': getattr(self, name)}
            entry.update(spec)
            props[name] = entry
        for name, (label, value) in self.get_derived_properties().items():
            props[name] = {'value': value, 'label': label, 'type': 'text', 'readonly': True}
        return props

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        """Read-only derived quantities as name -> (label, value)."""
        return {}

    def set_property(self, name: str, value: Any) -> bool:
        """
        Set a property by name.

        Never raises: unknown names, malformed or out-of-range values are
        rejected and leave the object unchanged.

        Returns:
            Whether the value was applied.
        """
        if name not in self.__class__.property_specs:
            logger.debug("%s: no editable property '%s'", self.get_display_name(), name)
            return False
        ok, coerced = self._coerce_value(name, value)
        if not ok:
            logger.warning("%s: rejected %s=%r", self.get_display_name(), name, value)
            return False
        return self._apply_changes({name: coerced})

    def _apply_changes(self, changes: Dict[str, Any]) -> bool:
        """
        Assign already-validated values, refresh geometry and mark the scene dirty.

        Rolls back if the derived geometry cannot be computed.
        """
        for value in changes.values():
            if isinstance(value, float) and not math.isfinite(value):
                return False
        old = {name: getattr(self, name) for name in changes}
        if all(old[name] == value for name, value in changes.items()):
            return True
        for name, value in changes.items():
            setattr(self, name, value)
        try:
            self._update_geometry()
        except (ArithmeticError, ValueError) as e:
            logger.warning("%s: geometry update failed (%s), reverting", self.get_display_name(), e)
            for name, value in old.items():
                setattr(self, name, value)
            self._update_geometry()
            return False
        self.on_properties_changed(list(changes))
        if self.scene is not None:
            self.scene.mark_dirty()
        return True

    def on_properties_changed(self, names: List[str]) -> None:
        """Hook called after properties were applied (e.g. to reset accumulators)."""
        pass

    def _coerce_value(self, name: str, value: Any) -> Tuple[bool, Any]:
        """
        Parse and validate a raw value for property `name`.

        Returns:
            (ok, coerced_value)
        """
        spec = self.__class__.property_specs.get(name)
        if spec is None:
            # Serialized but not editable: accept as-is
            return True, copy.deepcopy(value)
        kind = spec.get('type', 'number')
        if kind in ('number', 'int'):
            if isinstance(value, bool):
                return False, None
            try:
                number = float(value)
            except (TypeError, ValueError):
                return False, None
            if not math.isfinite(number):
                return False, None
            if kind == 'int':
                if number != int(number):
                    return False, None
                number = int(number)
            if 'min' in spec and number < spec['min']:
                return False, None
            if 'max' in spec and number > spec['max']:
                return False, None
            return True, number
        if kind == 'bool':
            if isinstance(value, bool):
                return True, value
            if isinstance(value, str) and value.lower() in ('true', 'false'):
                return True, value.lower() == 'true'
            if value in (0, 1):
                return True, bool(value)
            return False, None
        if kind == 'select':
            if value in spec.get('options', ()):
                return True, value
            return False, None
        if kind == 'text':
            if value is None or isinstance(value, str):
                return True, value
            return False, None
        return False, None

    # ==================== Serialization ====================

    def serialize(self) -> Dict[str, Any]:
        """
        Serializes the object to a JSON-compatible dictionary.

        Returns:
            The type tag plus every property that differs from its default.
        """
        json_obj = {'type': self.__class__.type}
        for prop_name, default_value in self.__class__.serializable_defaults.items():
            current_value = getattr(self, prop_name)
            if json.dumps(current_value, sort_keys=True) != json.dumps(default_value, sort_keys=True):
                json_obj[prop_name] = copy.deepcopy(current_value)
        return json_obj

    def are_properties_default(self, property_names: List[str]) -> bool:
        """Check whether the given properties all hold their default values."""
        serializable_defaults = self.__class__.serializable_defaults
        for prop_name in property_names:
            current_value = getattr(self, prop_name)
            default_value = serializable_defaults.get(prop_name)
            if json.dumps(current_value, sort_keys=True) != json.dumps(default_value, sort_keys=True):
                return False
        return True

    # ==================== Tracing ====================

    @property
    def min_intensity(self) -> float:
        """The minimum-intensity threshold of the owning scene."""
        if self.scene is None:
            return MIN_RAY_INTENSITY
        return self.scene.config.min_ray_intensity

    def keeps(self, intensity: float, ray: 'Ray') -> bool:
        """Whether an output ray of this intensity clears the threshold."""
        if intensity <= 0:
            return False
        return ray.ignore_decay or intensity >= self.min_intensity

    def reflect_ray(self, ray: 'Ray', hit: 'Hit', intensity: float,
                    phase_shift: float = math.pi, **spawn_args: Any) -> List['Ray']:
        """
        Spawn the ray reflected about the hit normal, if it clears the threshold.

        Returns:
            A list with the reflected ray, or an empty list.
        """
        if not self.keeps(intensity, ray):
            return []
        direction = geometry.reflect(ray.direction, hit.normal)
        spawn_args.setdefault('interaction_type', 'reflect')
        return [ray.spawn(hit.point, direction, intensity=intensity,
                          phase_shift=phase_shift, **spawn_args)]

    def transmit_ray(self, ray: 'Ray', hit: 'Hit', intensity: float,
                     direction: Optional[Vector2] = None, origin: Optional[Vector2] = None,
                     **spawn_args: Any) -> List['Ray']:
        """
        Spawn a transmitted ray (undeviated unless `direction` is given).

        `origin` defaults to the hit point; components that carry the ray
        through their body pass the exit point instead.

        Returns:
            A list with the transmitted ray, or an empty list.
        """
        if not self.keeps(intensity, ray):
            return []
        spawn_args.setdefault('interaction_type', 'transmit')
        return [ray.spawn(hit.point if origin is None else origin,
                          direction if direction is not None else ray.direction,
                          intensity=intensity, **spawn_args)]

    def on_trace_start(self) -> None:
        """Called before every trace; detectors reset their accumulators here."""
        pass

    def intersect(self, origin: Vector2, direction: Vector2) -> List['Hit']:
        """
        Forward intersections of the ray (origin, direction) with this object.

        Only hits with distance > MIN_RAY_SEGMENT_LENGTH are returned, with
        normals oriented against `direction`.
        """
        return []

    def interact(self, ray: 'Ray', hit: 'Hit') -> List['Ray']:
        """
        Consume `ray` at `hit` and return the outgoing rays.

        Implementations must terminate `ray` with a reason tag.
        """
        ray.terminate('absorbed')
        return []

    def collect_deferred_rays(self) -> List['Ray']:
        """Rays buffered during a pass and emitted on the next pass."""
        return []

    def get_shape(self) -> Any:
        """The Shapely geometry of the object (None for objects without extent)."""
        return None

    def get_bounding_box(self) -> Optional[Tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) of the object's shape."""
        shape = self.get_shape()
        if shape is None or shape.is_empty:
            return None
        return tuple(shape.bounds)

    # ==================== Error/Warning Methods ====================

    def get_error(self) -> Optional[str]:
        return self.error

    def get_warning(self) -> Optional[str]:
        return self.warning

    # ==================== Object Identification ====================

    @property
    def uuid(self) -> str:
        """
        Get the unique identifier for this object.

        The UUID is auto-generated when the object is created and remains
        constant for the lifetime of the object instance.
        """
        return self._uuid

    @property
    def name(self) -> Optional[str]:
        return self._name

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._name = value

    def get_display_name(self) -> str:
        """
        Get a display name for the object.

        Returns the user-defined name or label if set, otherwise a combination
        of the object type and a short UUID suffix (e.g. "Mirror_a1b2c3d4").
        """
        if self._name:
            return self._name
        label = getattr(self, 'label', None)
        if label:
            return label
        type_name = self.__class__.type or self.__class__.__name__
        return f"{type_name}_{self._uuid[:8]}"

    def __repr__(self) -> str:
        display = self.get_display_name()
        type_name = self.__class__.type or self.__class__.__name__
        return f"<{type_name} '{display}'>"
