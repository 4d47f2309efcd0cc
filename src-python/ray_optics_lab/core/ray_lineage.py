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
Ray lineage tree
===============================================================================
Every ray emitted during a trace (by a source or by a component) is
registered here. Children point to their parent through Ray.parent_uuid,
so the tree of a source ray can be walked in both directions, and the
intensity handed from a parent to its children can be audited.
===============================================================================
"""

from __future__ import annotations
from collections import deque
from typing import Optional, List, Set, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .ray import Ray


class RayLineage:
    """
    Parent-child relationships for all rays of one trace.

    Internally maintains:
    - _parents: maps uuid -> parent_uuid (or None for source rays)
    - _children: maps uuid -> list of child uuids, in emission order
    - _rays: maps uuid -> Ray object

    All query methods return Ray objects, not uuids.

    Usage:
        lineage = RayLineage()
        lineage.register(ray)           # for every emitted ray
        path = lineage.get_full_path(leaf.uuid)
        flow = lineage.get_intensity_flow(parent.uuid)
    """

    def __init__(self) -> None:
        self._parents: Dict[str, Optional[str]] = {}
        self._children: Dict[str, List[str]] = {}
        self._rays: Dict[str, 'Ray'] = {}

    def register(self, ray: 'Ray') -> None:
        """Register an emitted ray (source rays and interaction outputs alike)."""
        self._rays[ray.uuid] = ray
        self._parents[ray.uuid] = ray.parent_uuid
        self._children.setdefault(ray.uuid, [])
        if ray.parent_uuid:
            self._children.setdefault(ray.parent_uuid, []).append(ray.uuid)

    def __len__(self) -> int:
        return len(self._rays)

    def __contains__(self, uuid: str) -> bool:
        return uuid in self._rays

    def get_ray(self, uuid: str) -> Optional['Ray']:
        return self._rays.get(uuid)

    def get_rays(self) -> List['Ray']:
        """All registered rays, in registration order."""
        return list(self._rays.values())

    # =========================================================================
    # Ancestor / descendant queries
    # =========================================================================

    def get_ancestors(self, uuid: str) -> List['Ray']:
        """All rays back to the source, root first (excluding `uuid` itself)."""
        result = []
        current = self._parents.get(uuid)
        while current is not None and current in self._rays:
            result.append(self._rays[current])
            current = self._parents.get(current)
        result.reverse()
        return result

    def get_full_path(self, uuid: str) -> List['Ray']:
        """Chain from the source ray to `uuid` (inclusive)."""
        ray = self._rays.get(uuid)
        if ray is None:
            return []
        return self.get_ancestors(uuid) + [ray]

    def get_children(self, uuid: str) -> List['Ray']:
        return [self._rays[c] for c in self._children.get(uuid, []) if c in self._rays]

    def get_descendants(self, uuid: str) -> List['Ray']:
        """All rays spawned (directly or not) from `uuid`, breadth first."""
        return [self._rays[u] for u in self._walk(uuid) if u != uuid]

    def get_siblings(self, uuid: str) -> List['Ray']:
        """
        Other outputs of the same interaction.

        For a beam splitter this returns the reflected ray when given the
        transmitted one, and vice versa.
        """
        parent = self._parents.get(uuid)
        if parent is None:
            return []
        return [self._rays[c] for c in self._children.get(parent, [])
                if c != uuid and c in self._rays]

    def get_subtree_uuids(self, uuid: str) -> Set[str]:
        """All uuids in the subtree rooted at `uuid` (inclusive)."""
        return set(self._walk(uuid))

    def get_depth(self, uuid: str) -> int:
        """Number of interactions between the source ray and `uuid`."""
        return len(self.get_ancestors(uuid))

    def _walk(self, uuid: str) -> List[str]:
        order = []
        queue = deque([uuid])
        while queue:
            current = queue.popleft()
            order.append(current)
            queue.extend(self._children.get(current, []))
        return order

    # =========================================================================
    # Root / leaf queries
    # =========================================================================

    def get_roots(self) -> List['Ray']:
        """Source rays (no parent)."""
        return [self._rays[u] for u, p in self._parents.items() if p is None]

    def get_leaves(self, uuid: Optional[str] = None) -> List['Ray']:
        """Rays without children, in the whole tree or below `uuid`."""
        candidates = self._walk(uuid) if uuid is not None else list(self._rays)
        return [self._rays[u] for u in candidates
                if u in self._rays and not self._children.get(u)]

    def get_rays_by_interaction(self, interaction_type: str) -> List['Ray']:
        return [r for r in self._rays.values() if r.interaction_type == interaction_type]

    def get_rays_by_termination(self, reason: str) -> List['Ray']:
        return [r for r in self._rays.values() if r.termination_reason == reason]

    # =========================================================================
    # Energy bookkeeping
    # =========================================================================

    def get_intensity_flow(self, uuid: str) -> Dict[str, float]:
        """
        Intensity entering an interaction versus intensity leaving it.

        Returns:
            Dict with 'input', 'output' (sum over direct children) and
            'loss' (input - output).
        """
        ray = self._rays.get(uuid)
        if ray is None:
            return {'input': 0.0, 'output': 0.0, 'loss': 0.0}
        output = sum(c.intensity for c in self.get_children(uuid))
        return {'input': ray.intensity, 'output': output, 'loss': ray.intensity - output}

    def get_statistics(self) -> Dict[str, Any]:
        """
        Summary statistics for the lineage forest.

        Returns:
            Dict with keys ray_count, root_count, leaf_count, max_depth,
            interaction_counts and termination_counts.
        """
        leaves = [u for u in self._rays if not self._children.get(u)]
        max_depth = max((self.get_depth(u) for u in leaves), default=0)

        interaction_counts: Dict[str, int] = {}
        termination_counts: Dict[str, int] = {}
        for ray in self._rays.values():
            interaction_counts[ray.interaction_type] = interaction_counts.get(ray.interaction_type, 0) + 1
            if ray.termination_reason is not None:
                termination_counts[ray.termination_reason] = (
                    termination_counts.get(ray.termination_reason, 0) + 1
                )

        return {
            'ray_count': len(self._rays),
            'root_count': sum(1 for p in self._parents.values() if p is None),
            'leaf_count': len(leaves),
            'max_depth': max_depth,
            'interaction_counts': interaction_counts,
            'termination_counts': termination_counts,
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"RayLineage(rays={stats['ray_count']}, "
                f"roots={stats['root_count']}, "
                f"leaves={stats['leaf_count']}, "
                f"max_depth={stats['max_depth']})")
