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

import logging
from collections import deque
from typing import Deque, List, Optional, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_lab.core.ray import Ray, Hit
    from ray_optics_lab.core.ray_lineage import RayLineage
    from ray_optics_lab.core.errors import OpticsError
    from ray_optics_lab.core.constants import MIN_RAY_SEGMENT_LENGTH
    from ray_optics_lab.analysis.simulation_result import TraceResult
else:
    from .ray import Ray, Hit
    from .ray_lineage import RayLineage
    from .errors import OpticsError
    from .constants import MIN_RAY_SEGMENT_LENGTH
    from ..analysis.simulation_result import TraceResult

if TYPE_CHECKING:
    from .scene import Scene
    from .scene_objs.base_scene_obj import BaseSceneObj

logger = logging.getLogger(__name__)


class Simulator:
    """
    Ray tracing engine.

    Propagates rays through a scene with an explicit FIFO work queue: each
    popped ray is checked against the bounce and intensity limits, tested
    against every optical object, and handed to the nearest one, whose
    outputs are appended to the queue. Rays are processed in the order they
    were created, so a ray tree is traced breadth-first.

    The scene is treated as read-only while a trace runs.

    Attributes:
        scene (Scene): The scene containing objects and configuration
        verbose (int): Verbosity level for diagnostic printing
        pending_rays (deque): Queue of rays waiting to be processed
        terminated_rays (list): Rays retired so far, in termination order
        processed_ray_count (int): Number of rays popped from the queue
        total_emitted (int): Rays accepted into the queue (sources + outputs)
        lineage (RayLineage): Parent-child relationships of emitted rays
        generation (int or None): Scene generation of the last trace
    """

    MIN_RAY_SEGMENT_LENGTH = MIN_RAY_SEGMENT_LENGTH

    def __init__(self, scene: 'Scene', verbose: int = 0) -> None:
        """
        Initialize the simulator.

        Args:
            scene (Scene): The scene to trace
            verbose (int): Verbosity level (default: 0)
                0 = silent (no debug output)
                1 = verbose (show ray processing info)
                2 = very verbose/debug (show every interaction's outputs)
        """
        self.scene: 'Scene' = scene
        self.verbose: int = verbose
        self.pending_rays: Deque[Ray] = deque()
        self.terminated_rays: List[Ray] = []
        self.processed_ray_count: int = 0
        self.total_emitted: int = 0
        self.lineage: RayLineage = RayLineage()
        self.generation: Optional[int] = None
        self.passes: int = 0
        self._limit_reached: bool = False

    # =========================================================================
    # Entry points
    # =========================================================================

    def run(self) -> List[Ray]:
        """
        Trace the scene and return the terminated rays.

        Returns:
            list: Rays in Terminated state, each with its history
        """
        return self.run_trace().rays

    def run_trace(self) -> TraceResult:
        """
        Trace the scene and return the full result.

        This:
        1. Consumes the scene's retrace request and records its generation
        2. Calls on_trace_start() on every object
        3. Collects the initial rays from every source
        4. Processes the queue, then runs deferred passes for buffered rays
        """
        config = self.scene.config
        self.generation = self.scene.consume_retrace()
        self.pending_rays = deque()
        self.terminated_rays = []
        self.processed_ray_count = 0
        self.total_emitted = 0
        self.lineage = RayLineage()
        self.passes = 0
        self._limit_reached = False
        self.scene.warning = None
        self.scene.reseed()

        for obj in self.scene.objs:
            obj.on_trace_start()

        for source in self.scene.sources:
            for ray in self._generate(source):
                self.add_ray(ray)

        logger.info("Tracing %s (generation %d): %d initial rays",
                    self.scene.get_display_name(), self.generation, len(self.pending_rays))

        self._process_rays()
        self.passes = 1

        while self.passes <= config.max_deferred_passes and not self._limit_reached:
            deferred: List[Ray] = []
            for obj in self.scene.optical_objs:
                deferred.extend(obj.collect_deferred_rays())
            if not deferred:
                break
            if self.verbose >= 1:
                print(f"\n### SIMULATOR deferred pass {self.passes + 1}: {len(deferred)} rays")
            for ray in deferred:
                self.add_ray(ray)
            self._process_rays()
            self.passes += 1

        if self._limit_reached:
            self.scene.warning = (
                f"Trace stopped: maximum ray count ({config.max_total_rays}) reached"
            )
            logger.warning(self.scene.warning)

        result = TraceResult.create(
            self.scene,
            self.terminated_rays,
            generation=self.generation,
            total_emitted=self.total_emitted,
            passes=self.passes,
            lineage=self.lineage,
        )
        logger.info(result.summary())
        return result

    def add_ray(self, ray: Ray) -> bool:
        """
        Queue a ray for processing.

        Once `max_total_rays` rays have been accepted, further rays are
        terminated with reason 'ray_limit' instead.

        Returns:
            Whether the ray was queued.
        """
        if self.total_emitted >= self.scene.config.max_total_rays:
            self._limit_reached = True
            ray.terminate('ray_limit')
            self.lineage.register(ray)
            self.terminated_rays.append(ray)
            return False
        self.pending_rays.append(ray)
        self.lineage.register(ray)
        self.total_emitted += 1
        return True

    # =========================================================================
    # Main loop
    # =========================================================================

    def _generate(self, source: 'BaseSceneObj') -> List[Ray]:
        # Sources cap their own direction count (`max_rays()`); a white light
        # direction expands into one ray per spectral line.
        try:
            rays = source.generate()
        except OpticsError as e:
            logger.warning("%s failed to generate rays: %s", source.get_display_name(), e)
            source.error = str(e)
            return []
        logger.debug("%s emitted %d rays", source.get_display_name(), len(rays))
        return rays

    def _process_rays(self) -> None:
        """
        Process rays until the queue is empty or the ray limit is reached.

        For each ray:
        1. Terminate it if it exceeds the bounce or intensity limits
        2. Find the nearest intersection with any optical object
        3. Terminate it as 'escaped' if there is none
        4. Otherwise record the hit point and hand it to the object
        5. Queue the object's output rays
        """
        config = self.scene.config
        while self.pending_rays:
            if self._limit_reached:
                while self.pending_rays:
                    dropped = self.pending_rays.popleft()
                    dropped.terminate('ray_limit')
                    self.terminated_rays.append(dropped)
                break

            ray = self.pending_rays.popleft()
            self.processed_ray_count += 1

            if self.verbose >= 1:
                print(f"\n### SIMULATOR processing ray {self.processed_ray_count}")
                print(f"  origin=({ray.origin.x:.4f}, {ray.origin.y:.4f}) "
                      f"dir=({ray.direction.x:.4f}, {ray.direction.y:.4f}) "
                      f"I={ray.intensity:.4g} bounces={ray.bounce_count}")

            reason = ray.termination_check(config)
            if reason is not None:
                ray.terminate(reason)
                self._retire(ray)
                continue

            found = self._find_nearest_hit(ray)
            if found is None:
                ray.terminate('escaped')
                self._retire(ray)
                continue

            obj, hit = found
            ray.advance_to(hit.point)
            outputs = self._interact(obj, ray, hit)
            if ray.is_active:
                ray.terminate('interacted')
            self._retire(ray)

            if self.verbose >= 2:
                print(f"  {obj.get_display_name()} -> {len(outputs)} output rays")
                for out in outputs:
                    print(f"    {out}")

            for out in outputs:
                self.add_ray(out)

    def _retire(self, ray: Ray) -> None:
        self.terminated_rays.append(ray)
        if self.verbose >= 1:
            print(f"  terminated: {ray.termination_reason}")

    def _interact(self, obj: 'BaseSceneObj', ray: Ray, hit: Hit) -> List[Ray]:
        """Run one interaction, converting failures into a terminated lineage."""
        try:
            return list(obj.interact(ray, hit) or [])
        except OpticsError as e:
            ray.terminate(e.reason)
            logger.warning("%s: ray terminated (%s): %s", obj.get_display_name(), e.reason, e)
        except (ArithmeticError, ValueError) as e:
            ray.terminate('internal_error')
            logger.warning("%s: interaction failed: %s", obj.get_display_name(), e)
        return []

    def _find_nearest_hit(self, ray: Ray) -> Optional[Tuple['BaseSceneObj', Hit]]:
        """
        Find the nearest forward hit among all optical objects.

        Objects are tested in scene order and a later hit only wins if it is
        strictly closer, so ties go to the earlier object.
        """
        best: Optional[Tuple['BaseSceneObj', Hit]] = None
        for obj in self.scene.optical_objs:
            try:
                hits = obj.intersect(ray.origin, ray.direction)
            except (ArithmeticError, ValueError) as e:
                logger.warning("%s: intersection failed: %s", obj.get_display_name(), e)
                continue
            for hit in hits:
                if hit.distance <= self.MIN_RAY_SEGMENT_LENGTH:
                    continue
                if best is None or hit.distance < best[1].distance:
                    best = (obj, hit)

        if self.verbose >= 1:
            if best is None:
                print("  Intersection found: False")
            else:
                print(f"  Intersection found: {best[0].get_display_name()} "
                      f"at ({best[1].point.x:.4f}, {best[1].point.y:.4f}) d={best[1].distance:.4f}")
        return best
