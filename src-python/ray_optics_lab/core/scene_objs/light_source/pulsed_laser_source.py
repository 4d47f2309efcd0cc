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

from typing import Any, Dict, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.scene_objs.light_source.laser_source import LaserSource
else:
    from .laser_source import LaserSource

SPEED_OF_LIGHT = 299792458.0  # m/s

# Time-bandwidth product of a transform-limited Gaussian pulse
GAUSSIAN_TIME_BANDWIDTH = 0.44


class PulsedLaserSource(LaserSource):
    """
    Laser emitting a pulse train.

    Rays are traced exactly as for `LaserSource`, with `intensity` read as
    the peak power. The temporal parameters only feed the derived
    quantities:

        pulse energy   = P_peak * tau
        average power  = P_peak * tau * f_rep
        bandwidth (nm) = lambda^2 * 0.44 / (c * tau)
    """

    type = 'PulsedLaserSource'

    serializable_defaults: Dict[str, Any] = {
        **LaserSource.serializable_defaults,
        'wavelength_nm': 1064.0,
        'pulse_width_fs': 100.0,
        'repetition_rate_hz': 1e6,
    }

    property_specs: Dict[str, Dict[str, Any]] = {
        **LaserSource.property_specs,
        'pulse_width_fs': {'label': 'Pulse width (fs)', 'type': 'number', 'min': 1.0, 'max': 1e9, 'step': 10},
        'repetition_rate_hz': {'label': 'Repetition rate (Hz)', 'type': 'number', 'min': 1.0, 'max': 1e12, 'step': 1000},
    }

    @property
    def pulse_energy(self) -> float:
        return self.intensity * self.pulse_width_fs * 1e-15

    @property
    def average_power(self) -> float:
        return self.pulse_energy * self.repetition_rate_hz

    @property
    def bandwidth_nm(self) -> float:
        wavelength_m = self.wavelength_nm * 1e-9
        delta_m = wavelength_m ** 2 * GAUSSIAN_TIME_BANDWIDTH / (SPEED_OF_LIGHT * self.pulse_width_fs * 1e-15)
        return delta_m * 1e9

    def get_derived_properties(self) -> Dict[str, Tuple[str, Any]]:
        return {
            'pulse_energy': ('Pulse energy', self.pulse_energy),
            'average_power': ('Average power', self.average_power),
            'bandwidth_nm': ('Transform-limited bandwidth (nm)', self.bandwidth_nm),
        }
