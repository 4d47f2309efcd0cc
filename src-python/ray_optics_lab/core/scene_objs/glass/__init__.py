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

from .dielectric_block import DielectricBlock
from .prism import Prism
from .thin_lens import ThinLens, ThickLens
from .cylindrical_lens import CylindricalLens
from .aspheric_lens import AsphericLens
from .grin_lens import GrinLens

__all__ = ['DielectricBlock', 'Prism', 'ThinLens', 'ThickLens', 'CylindricalLens', 'AsphericLens', 'GrinLens']
