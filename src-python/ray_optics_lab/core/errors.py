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

"""
Exceptions raised inside the engine.

Every exception carries a short ``reason`` tag. The simulator catches
OpticsError around each interaction and terminates the offending ray with
that tag, so a single bad component never aborts the rest of the trace.
"""


class OpticsError(Exception):
    """Base class for engine errors that terminate a ray lineage."""

    reason: str = 'internal_error'

    def __init__(self, message: str = '', reason: str = None):
        super().__init__(message or self.reason)
        if reason is not None:
            self.reason = reason


class InvalidRayError(OpticsError):
    """
    A ray could not be constructed because its state is invalid.

    Raised at the single construction boundary (Ray.__init__) for NaN or
    zero directions, non-finite origins, negative intensity and refractive
    indices below 1.
    """

    reason = 'invalid_ray'


class InteractionError(OpticsError):
    """A component failed to compute an interaction."""

    reason = 'internal_error'
