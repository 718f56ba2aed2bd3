"""Procedural water-like surface: the y = 0 plane displaced by sine waves.

Each wave adds ``amplitude * sin(wavelength * r)`` to the surface height,
where r is the distance of (x, 0, z) from the wave's origin. Note that
``wavelength`` scales the distance directly (larger values give tighter
ripples).

Intersection is approximate. Inside the amplitude envelope the ray is
marched in fixed steps and every step across which the ray changes side of
the surface reports its midpoint. Grazing rays and steep crests can be
missed or reported slightly off the true surface.
"""

import math
from dataclasses import dataclass, field

import taichi as ti

from src.whitted.core.linalg import normalize4, vec4, vector
from src.whitted.core.ray import MAX_LOCAL_HITS, HitSlots, Ray, miss_slots

vec3 = ti.math.vec3

# =============================================================================
# Capacity and Marching Constants
# =============================================================================

MAX_WAVY_PLANES = 64
MAX_WAVES = 4

# March step, measured as distance along the ray
WAVE_STEP = 0.1
MAX_WAVE_STEPS = 4096

# Half-width of the march window for rays running level inside the envelope
WAVE_WINDOW = math.pi

# Rays with a smaller normalized vertical component count as level
LEVEL_EPSILON = 1e-3

# Rays with a smaller normalized horizontal component count as vertical
VERTICAL_EPSILON = 0.01

FLAT_EPSILON = 1e-4
NORMAL_DELTA = 0.01


@dataclass
class Wave:
    """One circular wave train.

    Attributes:
        origin: Centre of the wave (x, y, z).
        wavelength: Factor applied to the distance from the origin.
        amplitude: Peak height of the wave.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    wavelength: float = 1.0
    amplitude: float = 0.1

    def height_at(self, x: float, z: float) -> float:
        ox, oy, oz = self.origin
        r = math.sqrt((x - ox) ** 2 + oy**2 + (z - oz) ** 2)
        return self.amplitude * math.sin(self.wavelength * r)


@dataclass
class WavyPlane:
    """A plane displaced by up to ``MAX_WAVES`` waves."""

    waves: list[Wave] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.waves) > MAX_WAVES:
            raise ValueError(
                f"WavyPlane supports at most {MAX_WAVES} waves, got {len(self.waves)}"
            )

    @property
    def envelope(self) -> float:
        """Largest possible |height| of the surface."""
        return sum(abs(w.amplitude) for w in self.waves)

    def height_at(self, x: float, z: float) -> float:
        return sum(w.height_at(x, z) for w in self.waves)


# =============================================================================
# Wave Storage
# =============================================================================

wave_origins = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_WAVY_PLANES, MAX_WAVES))
wave_lengths = ti.field(dtype=ti.f32, shape=(MAX_WAVY_PLANES, MAX_WAVES))
wave_amplitudes = ti.field(dtype=ti.f32, shape=(MAX_WAVY_PLANES, MAX_WAVES))
wave_counts = ti.field(dtype=ti.i32, shape=MAX_WAVY_PLANES)
wave_envelopes = ti.field(dtype=ti.f32, shape=MAX_WAVY_PLANES)
num_wavy_planes = ti.field(dtype=ti.i32, shape=())


def clear_wavy_planes() -> None:
    num_wavy_planes[None] = 0


def add_wavy_plane(plane: WavyPlane) -> int:
    """Upload a wavy plane's waves.

    Returns:
        Index into the wave storage, referenced by the owning shape.

    Raises:
        RuntimeError: If the maximum number of wavy planes is exceeded.
    """
    idx = num_wavy_planes[None]
    if idx >= MAX_WAVY_PLANES:
        raise RuntimeError(f"Maximum number of wavy planes ({MAX_WAVY_PLANES}) exceeded")

    for k, wave in enumerate(plane.waves):
        wave_origins[idx, k] = [float(c) for c in wave.origin]
        wave_lengths[idx, k] = wave.wavelength
        wave_amplitudes[idx, k] = wave.amplitude
    wave_counts[idx] = len(plane.waves)
    wave_envelopes[idx] = plane.envelope
    num_wavy_planes[None] = idx + 1
    return idx


def get_wavy_plane_count() -> int:
    return num_wavy_planes[None]


# =============================================================================
# Kernel-side Geometry
# =============================================================================


@ti.func
def wave_height(index: ti.i32, x: ti.f32, z: ti.f32) -> ti.f32:
    h = 0.0
    for k in range(wave_counts[index]):
        o = wave_origins[index, k]
        dx = x - o.x
        dz = z - o.z
        r = ti.sqrt(dx * dx + o.y * o.y + dz * dz)
        h += wave_amplitudes[index, k] * ti.sin(wave_lengths[index, k] * r)
    return h


@ti.func
def _side(ray: Ray, index: ti.i32, t: ti.f32) -> ti.f32:
    """Signed height of the ray above the surface at parameter t."""
    p = ray.origin + ray.direction * t
    return p.y - wave_height(index, p.x, p.z)


@ti.func
def intersect_wavy_plane(ray: Ray, index: ti.i32) -> HitSlots:
    ts = miss_slots()

    o = ray.origin
    d = ray.direction
    envelope = wave_envelopes[index]
    speed = ti.sqrt(d.x * d.x + d.y * d.y + d.z * d.z)
    horizontal = ti.sqrt(d.x * d.x + d.z * d.z) / speed
    level = ti.abs(d.y) / speed < LEVEL_EPSILON
    in_zone = ti.abs(o.y) <= envelope

    if envelope <= 0.0:
        if ti.abs(d.y) >= FLAT_EPSILON:
            ts[0] = -o.y / d.y
    elif horizontal < VERTICAL_EPSILON:
        ts[0] = (wave_height(index, o.x, o.z) - o.y) / d.y
    elif in_zone or not level:
        t_start = 0.0
        t_end = 0.0
        if level:
            t_start = -WAVE_WINDOW / speed
            t_end = WAVE_WINDOW / speed
        else:
            ta = (-envelope - o.y) / d.y
            tb = (envelope - o.y) / d.y
            t_start = ti.min(ta, tb)
            t_end = ti.max(ta, tb)

        step = WAVE_STEP / speed
        steps = ti.cast(ti.ceil((t_end - t_start) / step), ti.i32)
        if steps > MAX_WAVE_STEPS:
            steps = MAX_WAVE_STEPS
            step = (t_end - t_start) / steps

        found = 0
        t_a = t_start
        f_a = _side(ray, index, t_a)
        for _ in range(steps):
            t_b = t_a + step
            f_b = _side(ray, index, t_b)
            above_a = f_a > 0.0
            above_b = f_b > 0.0
            if above_a != above_b and found < MAX_LOCAL_HITS:
                mid = 0.5 * (t_a + t_b)
                for s in ti.static(range(MAX_LOCAL_HITS)):
                    if found == s:
                        ts[s] = mid
                found += 1
            t_a = t_b
            f_a = f_b
    return ts


@ti.func
def normal_at_wavy_plane(p: vec4, index: ti.i32) -> vec4:
    """Central-difference estimate of the surface normal."""
    dx = (
        wave_height(index, p.x + NORMAL_DELTA, p.z)
        - wave_height(index, p.x - NORMAL_DELTA, p.z)
    ) / (2.0 * NORMAL_DELTA)
    dz = (
        wave_height(index, p.x, p.z + NORMAL_DELTA)
        - wave_height(index, p.x, p.z - NORMAL_DELTA)
    ) / (2.0 * NORMAL_DELTA)
    return normalize4(vector(-dx, 1.0, -dz))
