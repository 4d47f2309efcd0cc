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

from .mirror import Mirror
from .spherical_mirror import SphericalMirror
from .parabolic_mirror import ParabolicMirror
from .metallic_mirror import MetallicMirror
from .dichroic_mirror import DichroicMirror
from .ring_mirror import RingMirror

__all__ = ['Mirror', 'SphericalMirror', 'ParabolicMirror', 'MetallicMirror', 'DichroicMirror', 'RingMirror']
