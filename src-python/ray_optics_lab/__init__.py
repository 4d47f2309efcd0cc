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

Ray Optics Lab
==============

A 2D ray-tracing engine for an optics laboratory: light sources, lenses,
mirrors, prisms, polarizing and diffractive devices, fibers and cavities,
with geometry built on Shapely and Jones calculus on NumPy.

Main modules:
- core: Tracing engine (Scene, Simulator, Ray, components in core.scene_objs)
- analysis: Trace results, Fresnel helpers and lineage energy accounting

Quick start:
    from ray_optics_lab import Scene, Simulator
    from ray_optics_lab.core.scene_objs import LaserSource, ThinLens

    scene = Scene()
    scene.add_object(LaserSource(scene, pos_x=0, pos_y=0))
    scene.add_object(ThinLens(scene, pos_x=100, pos_y=0))
    result = Simulator(scene).run_trace()
"""

__version__ = "0.1.0"

# Convenience imports for common usage
from .core.config import TraceConfig
from .core.scene import Scene
from .core.simulator import Simulator
from .core.ray import Ray

__all__ = [
    'TraceConfig',
    'Scene',
    'Simulator',
    'Ray',
    '__version__',
]
