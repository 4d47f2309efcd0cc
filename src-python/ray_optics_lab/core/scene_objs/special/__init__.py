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

from .acousto_optic_modulator import AcoustoOpticModulator
from .aperture import Aperture
from .diffraction_grating import DiffractionGrating
from .fabry_perot_cavity import FabryPerotCavity
from .optical_fiber import OpticalFiber
from .variable_attenuator import VariableAttenuator
from .electro_optic_modulator import ElectroOpticModulator
from .optical_chopper import OpticalChopper
from .atomic_cell import AtomicCell

__all__ = ['AcoustoOpticModulator', 'Aperture', 'DiffractionGrating', 'FabryPerotCavity', 'OpticalFiber',
           'VariableAttenuator', 'ElectroOpticModulator', 'OpticalChopper', 'AtomicCell']
