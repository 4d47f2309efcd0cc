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

from .laser_source import LaserSource
from .led_source import LEDSource
from .white_light_source import WhiteLightSource
from .line_source import LineSource
from .fan_source import FanSource
from .point_source import PointSource
from .pulsed_laser_source import PulsedLaserSource

__all__ = ['LaserSource', 'LEDSource', 'WhiteLightSource', 'LineSource', 'FanSource', 'PointSource',
           'PulsedLaserSource']
