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

from .simulation_result import SceneSnapshot, TraceResult
from .fresnel_utils import fresnel_reflectance, fresnel_coefficients, critical_angle, brewster_angle
from .lineage_analysis import (
    energy_balance,
    lineage_energy,
    energy_by_source,
    rank_paths_by_energy,
    find_split_points,
)

__all__ = [
    'SceneSnapshot', 'TraceResult',
    'fresnel_reflectance', 'fresnel_coefficients', 'critical_angle', 'brewster_angle',
    'energy_balance', 'lineage_energy', 'energy_by_source', 'rank_paths_by_energy', 'find_split_points',
]
