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
import random
import uuid as uuid_module
from typing import Any, Dict, List, Optional

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.config import TraceConfig
else:
    from .config import TraceConfig

logger = logging.getLogger(__name__)

SCENE_FORMAT_VERSION = 1


class Scene:
    """
    Container for scene objects, tracing configuration and retrace state.

    Object order is insertion order. It carries no physical meaning but
    is the stable order used to break ties between equidistant hits.

    Attributes:
        objs (list): All objects in the scene, in insertion order
        optical_objs (list): Objects that take part in intersection tests
        sources (list): Objects that emit rays at the start of a trace
        config (TraceConfig): Tracing limits
        error (str or None): Error message (e.g. from deserialization)
        warning (str or None): Warning message (e.g. ray limit reached)
        name (str or None): Optional name for the scene

    Retrace state:
        needs_retrace (bool): Set whenever something that affects the trace
            changed and cleared when a trace consumes it.
        generation (int): Incremented on every change. A host compares the
            generation a result was computed for against the current one
            to discard superseded results.
    """

    def __init__(self, config: Optional[TraceConfig] = None, name: Optional[str] = None):
        self.objs: List[Any] = []
        self.optical_objs: List[Any] = []
        self.sources: List[Any] = []
        self._config: TraceConfig = config if config is not None else TraceConfig()
        self.error: Optional[str] = None
        self.warning: Optional[str] = None
        self.name: Optional[str] = name
        self._uuid: str = str(uuid_module.uuid4())
        self._rng = random.Random(self._config.random_seed)
        self.needs_retrace: bool = True
        self.generation: int = 0

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def config(self) -> TraceConfig:
        return self._config

    @config.setter
    def config(self, value: TraceConfig) -> None:
        """Replace the tracing configuration with validation."""
        if not isinstance(value, TraceConfig):
            raise ValueError(f"config must be a TraceConfig, got {type(value).__name__}")
        self._config = value
        self._rng = random.Random(value.random_seed)
        self.mark_dirty()

    @property
    def rng(self) -> random.Random:
        """Random generator for stochastic sources (seeded from the config)."""
        return self._rng

    def reseed(self) -> None:
        """Restart the random sequence so repeated traces are reproducible."""
        if self._config.random_seed is not None:
            self._rng.seed(self._config.random_seed)

    # =========================================================================
    # Retrace state
    # =========================================================================

    def mark_dirty(self) -> None:
        """Record that the scene changed and a new trace is needed."""
        self.needs_retrace = True
        self.generation += 1

    def consume_retrace(self) -> int:
        """Clear the retrace flag and return the generation about to be traced."""
        self.needs_retrace = False
        return self.generation

    def is_current(self, generation: int) -> bool:
        """Whether a result computed for `generation` still reflects the scene."""
        return generation == self.generation

    # =========================================================================
    # Scene Identification
    # =========================================================================

    @property
    def uuid(self) -> str:
        return self._uuid

    def get_display_name(self) -> str:
        """The scene name if set, otherwise "Scene_" plus a short UUID."""
        if self.name:
            return self.name
        return f"Scene_{self._uuid[:8]}"

    # =========================================================================
    # Object management
    # =========================================================================

    def add_object(self, obj: Any) -> Any:
        """
        Add an object to the scene.

        Optical objects are also added to `optical_objs` and sources to
        `sources`. The object is re-parented to this scene.

        Returns:
            The object, for chaining.
        """
        obj.scene = self
        self.objs.append(obj)
        if getattr(obj, 'is_optical', False):
            self.optical_objs.append(obj)
        if getattr(obj, 'is_source', False):
            self.sources.append(obj)
        self.mark_dirty()
        return obj

    def remove_object(self, obj: Any) -> None:
        """Remove an object from the scene."""
        if obj in self.objs:
            self.objs.remove(obj)
        if obj in self.optical_objs:
            self.optical_objs.remove(obj)
        if obj in self.sources:
            self.sources.remove(obj)
        self.mark_dirty()

    def clear(self) -> None:
        """Remove all objects from the scene."""
        self.objs.clear()
        self.optical_objs.clear()
        self.sources.clear()
        self.error = None
        self.warning = None
        self.mark_dirty()

    def get_object_by_uuid(self, uuid: str) -> Optional[Any]:
        for obj in self.objs:
            if obj.uuid == uuid:
                return obj
        return None

    def get_objects_by_type(self, type_name: str) -> List[Any]:
        return [obj for obj in self.objs if obj.type == type_name]

    # =========================================================================
    # Serialization
    # =========================================================================

    def serialize(self) -> Dict[str, Any]:
        """Structural snapshot: a type-tagged bag of objects plus the config."""
        return {
            'version': SCENE_FORMAT_VERSION,
            'name': self.name,
            'config': self._config.to_dict(),
            'objs': [obj.serialize() for obj in self.objs],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Scene':
        """
        Rebuild a scene from `serialize()` output.

        Objects with an unknown type tag or that are not mappings are skipped
        and reported in `scene.error`. Malformed fields fall back to each
        object's defaults, and a malformed config to `TraceConfig()`.
        """
        from .scene_objs import get_object_class

        config_error = None
        config_data = data.get('config')
        try:
            if config_data is not None and not isinstance(config_data, dict):
                raise TypeError(f"expected a mapping, got {type(config_data).__name__}")
            config = TraceConfig.from_dict(config_data)
        except (TypeError, ValueError) as e:
            config_error = f"Invalid config, using defaults: {e}"
            logger.warning(config_error)
            config = TraceConfig()

        scene = cls(config=config, name=data.get('name'))
        scene.error = config_error
        objs = data.get('objs') or []
        if not isinstance(objs, list):
            scene.error = f"Invalid object list of type '{type(objs).__name__}'"
            logger.warning(scene.error)
            objs = []
        for obj_data in objs:
            if not isinstance(obj_data, dict):
                scene.error = f"Skipping malformed object entry {obj_data!r}"
                logger.warning(scene.error)
                continue
            type_name = obj_data.get('type')
            obj_class = get_object_class(type_name)
            if obj_class is None:
                scene.error = f"Unknown object type '{type_name}'"
                logger.warning(scene.error)
                continue
            scene.add_object(obj_class(scene, obj_data))
        return scene

    def __repr__(self) -> str:
        return (f"<Scene '{self.get_display_name()}' objs={len(self.objs)} "
                f"generation={self.generation}>")
