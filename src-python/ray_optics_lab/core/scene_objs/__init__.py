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

from typing import Dict, Optional, Type

from .base_scene_obj import BaseSceneObj
from .line_obj_mixin import LineObjMixin
from .polygon_obj_mixin import PolygonObjMixin
from .base_glass import BaseGlass
from .base_paraxial_lens import BaseParaxialLens
from .base_light_source import BaseLightSource
from .glass import DielectricBlock, Prism, ThinLens, ThickLens, CylindricalLens, AsphericLens, GrinLens
from .mirror import Mirror, SphericalMirror, ParabolicMirror, MetallicMirror, DichroicMirror, RingMirror
from .polarizer import (
    Polarizer, HalfWavePlate, QuarterWavePlate, BeamSplitter, FaradayRotator, FaradayIsolator, WollastonPrism,
)
from .special import (
    AcoustoOpticModulator, Aperture, DiffractionGrating, FabryPerotCavity, OpticalFiber,
    VariableAttenuator, ElectroOpticModulator, OpticalChopper, AtomicCell,
)
from .other import PolarizationAnalyzer, PowerMeter, CustomComponent, Screen, Photodiode, Spectrometer
from .light_source import LaserSource, LEDSource, WhiteLightSource, LineSource, FanSource, PointSource, PulsedLaserSource

# Type tag -> class, used to rebuild scenes from serialized data
OBJECT_TYPES: Dict[str, Type[BaseSceneObj]] = {
    cls.type: cls for cls in [
        DielectricBlock, Prism, ThinLens, ThickLens, CylindricalLens, AsphericLens, GrinLens,
        Mirror, SphericalMirror, ParabolicMirror, MetallicMirror, DichroicMirror, RingMirror,
        Polarizer, HalfWavePlate, QuarterWavePlate, BeamSplitter, FaradayRotator, FaradayIsolator, WollastonPrism,
        AcoustoOpticModulator, Aperture, DiffractionGrating, FabryPerotCavity, OpticalFiber,
        VariableAttenuator, ElectroOpticModulator, OpticalChopper, AtomicCell,
        PolarizationAnalyzer, PowerMeter, CustomComponent, Screen, Photodiode, Spectrometer,
        LaserSource, LEDSource, WhiteLightSource, LineSource, FanSource, PointSource, PulsedLaserSource,
    ]
}


def get_object_class(type_name: Optional[str]) -> Optional[Type[BaseSceneObj]]:
    """The class registered for a type tag, or None if the tag is unknown."""
    if type_name is None:
        return None
    return OBJECT_TYPES.get(type_name)


__all__ = ['BaseSceneObj', 'LineObjMixin', 'PolygonObjMixin', 'BaseGlass', 'BaseParaxialLens', 'BaseLightSource',
           'OBJECT_TYPES', 'get_object_class'] + [cls.__name__ for cls in OBJECT_TYPES.values()]
