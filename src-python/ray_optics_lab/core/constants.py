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
Constants used throughout the ray optics engine.

These are the physical constants and the *default* values of the tracing
limits. The limits actually used during a trace come from the scene's
TraceConfig (see config.py), so tests can run with smaller bounds.
"""

# Minimum forward distance for a valid hit; also the emission offset that
# new rays are pushed along their direction to avoid self-intersection
MIN_RAY_SEGMENT_LENGTH = 1e-6
RAY_ORIGIN_OFFSET = 1e-6

# Tolerance used for parallel-line and degenerate-edge detection
EDGE_DETECTION_THRESHOLD = 1e-9

# Refractive index of air
N_AIR = 1.000293

# Wavelengths (in nanometers)
DEFAULT_WAVELENGTH_NM = 550.0
UV_WAVELENGTH = 380.0           # Lower bound of the visible range
INFRARED_WAVELENGTH = 750.0     # Upper bound of the visible range
GREEN_WAVELENGTH = 532.0
RED_WAVELENGTH = 650.0
BLUE_WAVELENGTH = 450.0

# Scene units: 1 unit = 1 micrometer
PIXELS_PER_MICROMETER = 1.0
PIXELS_PER_NANOMETER = 1e-3
PIXELS_PER_MM = 1e3
PIXELS_PER_KM = 1e9

# Default tracing limits (overridable through TraceConfig)
MAX_RAY_BOUNCES = 500
MIN_RAY_INTENSITY = 1e-4
MAX_RAYS_PER_SOURCE = 1001
MAX_TOTAL_RAYS = 100000
MAX_DEFERRED_PASSES = 4

# Reference wavelength for Cauchy dispersion (nm)
CAUCHY_REFERENCE_WAVELENGTH_NM = 550.0
