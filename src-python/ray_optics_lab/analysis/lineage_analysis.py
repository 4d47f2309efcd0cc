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

===============================================================================
Post-hoc Lineage Analysis
===============================================================================
Energy accounting over a completed trace. Every ray emitted during a trace
is a node of the RayLineage forest; the intensity of a source ray either
ends up in a leaf (a ray that escaped, was absorbed, fell below the
threshold, ...) or is lost inside an interaction (mirror loss, polarizer
extinction, Fresnel cut-off of a dim branch). Summed over a tree:

    emitted = sum(leaf intensities) + sum(interaction losses)

All functions take a TraceResult or RayLineage and return plain
dicts/lists; no side effects.
===============================================================================
"""

from __future__ import annotations
from collections import defaultdict
from typing import List, Dict, Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.ray import Ray
    from ..core.ray_lineage import RayLineage
    from .simulation_result import TraceResult


# =============================================================================
# Per-reason energy balance
# =============================================================================

def energy_balance(result: 'TraceResult') -> Dict[str, Any]:
    """
    Where the emitted intensity of a trace went.

    Args:
        result: A TraceResult carrying its lineage.

    Returns:
        Dict with:
        - 'emitted': total intensity of the source rays
        - 'by_reason': intensity of leaf rays per termination reason
        - 'interaction_loss': intensity lost inside interactions
        - 'unaccounted': emitted - leaves - losses (rounding only)
    """
    lineage = result.lineage
    if lineage is None:
        by_reason: Dict[str, float] = defaultdict(float)
        for ray in result.rays:
            by_reason[ray.termination_reason] += ray.intensity
        return {'emitted': None, 'by_reason': dict(by_reason),
                'interaction_loss': None, 'unaccounted': None}

    emitted = sum(ray.intensity for ray in lineage.get_roots())
    by_reason = defaultdict(float)
    for leaf in lineage.get_leaves():
        by_reason[leaf.termination_reason or 'active'] += leaf.intensity

    loss = sum(lineage.get_intensity_flow(ray.uuid)['loss']
               for ray in lineage.get_rays() if lineage.get_children(ray.uuid))
    delivered = sum(by_reason.values())
    return {
        'emitted': emitted,
        'by_reason': dict(by_reason),
        'interaction_loss': loss,
        'unaccounted': emitted - delivered - loss,
    }


# =============================================================================
# Per-lineage energy
# =============================================================================

def lineage_energy(lineage: 'RayLineage') -> List[Dict[str, Any]]:
    """
    Energy accounting for each source ray's tree separately.

    Returns:
        One dict per source ray, in emission order:
        - 'uuid', 'source_id', 'wavelength_nm'
        - 'emitted': intensity of the source ray
        - 'ray_count': rays in the tree
        - 'max_depth': interactions along the longest path
        - 'by_reason': leaf intensity per termination reason
        - 'interaction_loss': intensity lost inside interactions
    """
    results = []
    for root in lineage.get_roots():
        subtree = lineage.get_subtree_uuids(root.uuid)
        by_reason: Dict[str, float] = defaultdict(float)
        loss = 0.0
        max_depth = 0
        for uuid in subtree:
            ray = lineage.get_ray(uuid)
            if lineage.get_children(uuid):
                loss += lineage.get_intensity_flow(uuid)['loss']
            else:
                by_reason[ray.termination_reason or 'active'] += ray.intensity
                max_depth = max(max_depth, lineage.get_depth(uuid))
        results.append({
            'uuid': root.uuid,
            'source_id': root.source_id,
            'wavelength_nm': root.wavelength_nm,
            'emitted': root.intensity,
            'ray_count': len(subtree),
            'max_depth': max_depth,
            'by_reason': dict(by_reason),
            'interaction_loss': loss,
        })
    return results


def energy_by_source(lineage: 'RayLineage') -> Dict[Optional[str], Dict[str, float]]:
    """Leaf intensity per termination reason, grouped by emitting source uuid."""
    grouped: Dict[Optional[str], Dict[str, float]] = {}
    for entry in lineage_energy(lineage):
        bucket = grouped.setdefault(entry['source_id'], defaultdict(float))
        for reason, value in entry['by_reason'].items():
            bucket[reason] += value
    return {source: dict(bucket) for source, bucket in grouped.items()}


# =============================================================================
# Path ranking
# =============================================================================

def rank_paths_by_energy(lineage: 'RayLineage', reason: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Rank source-to-leaf paths by the intensity reaching the leaf.

    Args:
        lineage: A populated RayLineage from a completed trace.
        reason: Only consider leaves with this termination reason.

    Returns:
        List of dicts sorted highest intensity first, each with 'uuid',
        'intensity', 'termination_reason', 'path_length', 'path_types'
        (interaction types from source to leaf) and 'path' (the Rays).
    """
    results = []
    for leaf in lineage.get_leaves():
        if reason is not None and leaf.termination_reason != reason:
            continue
        path = lineage.get_full_path(leaf.uuid)
        results.append({
            'uuid': leaf.uuid,
            'intensity': leaf.intensity,
            'termination_reason': leaf.termination_reason,
            'path_length': len(path),
            'path_types': [r.interaction_type for r in path],
            'path': path,
        })
    results.sort(key=lambda x: x['intensity'], reverse=True)
    return results


def find_split_points(lineage: 'RayLineage') -> List[Dict[str, Any]]:
    """
    Interactions that produced two or more output rays.

    Each entry lists the parent intensity and the intensity and interaction
    type of every child, so a beam splitter's or an interface's split ratio
    can be read off directly.
    """
    splits = []
    for ray in lineage.get_rays():
        children: List['Ray'] = lineage.get_children(ray.uuid)
        if len(children) < 2:
            continue
        splits.append({
            'parent_uuid': ray.uuid,
            'parent_intensity': ray.intensity,
            'termination_reason': ray.termination_reason,
            'children': [
                {'uuid': c.uuid, 'interaction_type': c.interaction_type, 'intensity': c.intensity}
                for c in children
            ],
        })
    return splits
