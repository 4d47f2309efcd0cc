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

from .polarization_analyzer import PolarizationAnalyzer
from .power_meter import PowerMeter
from .custom_component import CustomComponent
from .screen import Screen
from .photodiode import Photodiode
from .spectrometer import Spectrometer

__all__ = ['PolarizationAnalyzer', 'PowerMeter', 'CustomComponent', 'Screen', 'Photodiode', 'Spectrometer']
