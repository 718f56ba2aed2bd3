"""Procedural surface patterns.

Patterns map an object-space point to a color. Stripes, rings and the
checkerboard alternate between two colors using ``floor(...) mod 2``: even
cells take color ``a`` and odd cells take color ``b``. A point exactly on a
cell boundary belongs to the cell that starts there.

``TransformedPattern`` places a pattern in its own space. Nested transformed
patterns are flattened on upload so the kernel applies a single inverse
matrix before evaluating the base pattern.

Example:
    >>> stripes = StripePattern(a=(1, 1, 1), b=(0, 0, 0))
    >>> stripes.color_at((0.9, 0, 0))
    (1, 1, 1)
    >>> stripes.color_at((-0.1, 0, 0))
    (0, 0, 0)
"""

import math
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.core.linalg import (
    Matrix4,
    apply,
    identity,
    invert,
    make_point,
    matmul,
    to_taichi,
    vec4,
)

vec3 = tm.vec3

Color = tuple[float, float, float]

WHITE: Color = (1.0, 1.0, 1.0)
BLACK: Color = (0.0, 0.0, 0.0)


class PatternKind(IntEnum):
    SOLID = 0
    STRIPES = 1
    RINGS = 2
    CHECKERBOARD = 3


@dataclass
class SolidPattern:
    color: Color = WHITE

    def color_at(self, p) -> Color:
        return self.color


@dataclass
class StripePattern:
    """Alternates along x."""

    a: Color = WHITE
    b: Color = BLACK

    def color_at(self, p) -> Color:
        return self.a if math.floor(p[0]) % 2 == 0 else self.b


@dataclass
class RingPattern:
    """Concentric rings in the xz plane."""

    a: Color = WHITE
    b: Color = BLACK

    def color_at(self, p) -> Color:
        r = math.floor(math.sqrt(p[0] * p[0] + p[2] * p[2]))
        return self.a if r % 2 == 0 else self.b


@dataclass
class CheckerPattern:
    """3D checkerboard of unit cubes."""

    a: Color = WHITE
    b: Color = BLACK

    def color_at(self, p) -> Color:
        total = math.floor(p[0]) + math.floor(p[1]) + math.floor(p[2])
        return self.a if total % 2 == 0 else self.b


@dataclass
class TransformedPattern:
    """A pattern placed by a pattern-to-object transform."""

    pattern: "Pattern"
    transform: Matrix4

    def color_at(self, p) -> Color:
        local = apply(invert(self.transform), make_point(p[0], p[1], p[2]))
        return self.pattern.color_at(local)


Pattern = SolidPattern | StripePattern | RingPattern | CheckerPattern | TransformedPattern


def flatten_pattern(pattern: Pattern) -> tuple[Pattern, Matrix4]:
    """Collapse nested transforms into (base pattern, object-to-pattern matrix).

    Raises:
        ValueError: If any transform in the chain is singular.
    """
    inverse = identity()
    while isinstance(pattern, TransformedPattern):
        # Outer transforms are undone first
        inverse = matmul(invert(pattern.transform), inverse)
        pattern = pattern.pattern
    return pattern, inverse


def pattern_kind_of(pattern: Pattern) -> PatternKind:
    if isinstance(pattern, SolidPattern):
        return PatternKind.SOLID
    elif isinstance(pattern, StripePattern):
        return PatternKind.STRIPES
    elif isinstance(pattern, RingPattern):
        return PatternKind.RINGS
    elif isinstance(pattern, CheckerPattern):
        return PatternKind.CHECKERBOARD
    raise TypeError(f"Unsupported pattern type: {type(pattern).__name__}")


# =============================================================================
# Pattern Field Storage
# =============================================================================

MAX_PATTERNS = 256

pattern_kinds = ti.field(dtype=ti.i32, shape=MAX_PATTERNS)
pattern_color_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PATTERNS)
pattern_color_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PATTERNS)
pattern_inverses = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_PATTERNS)
num_patterns = ti.field(dtype=ti.i32, shape=())


def clear_patterns() -> None:
    num_patterns[None] = 0


def add_pattern(pattern: Pattern) -> int:
    """Upload a pattern to the registry.

    Args:
        pattern: Any pattern, possibly wrapped in transforms.

    Returns:
        The index of the added pattern.

    Raises:
        RuntimeError: If the maximum number of patterns is exceeded.
        ValueError: If a pattern transform is singular.
    """
    base, inverse = flatten_pattern(pattern)
    kind = pattern_kind_of(base)

    idx = num_patterns[None]
    if idx >= MAX_PATTERNS:
        raise RuntimeError(f"Maximum number of patterns ({MAX_PATTERNS}) exceeded")

    if kind == PatternKind.SOLID:
        a = b = base.color
    else:
        a, b = base.a, base.b

    pattern_kinds[idx] = int(kind)
    pattern_color_a[idx] = [float(c) for c in a]
    pattern_color_b[idx] = [float(c) for c in b]
    pattern_inverses[idx] = to_taichi(np.asarray(inverse, dtype=np.float32))
    num_patterns[None] = idx + 1
    return idx


def get_pattern_count() -> int:
    return int(num_patterns[None])


@ti.func
def _parity(n: ti.f32) -> ti.i32:
    # Taichi integer % follows Python semantics, so negatives stay in {0, 1}
    return ti.cast(n, ti.i32) % 2


@ti.func
def pattern_color_at(pattern_id: ti.i32, object_point: vec4) -> vec3:
    """Evaluate a registered pattern at an object-space point."""
    p = pattern_inverses[pattern_id] @ object_point
    kind = pattern_kinds[pattern_id]

    odd = 0
    if kind == int(PatternKind.STRIPES):
        odd = _parity(ti.floor(p.x))
    elif kind == int(PatternKind.RINGS):
        odd = _parity(ti.floor(ti.sqrt(p.x * p.x + p.z * p.z)))
    elif kind == int(PatternKind.CHECKERBOARD):
        odd = _parity(ti.floor(p.x) + ti.floor(p.y) + ti.floor(p.z))

    color = pattern_color_a[pattern_id]
    if odd != 0:
        color = pattern_color_b[pattern_id]
    return color
