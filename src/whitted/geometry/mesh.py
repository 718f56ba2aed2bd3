"""Wavefront OBJ loading into lists of triangles.

Only vertex (``v``) and face (``f``) records are read. Faces with more than
three vertices are fan-triangulated around their first vertex. Other
records (normals, texture coordinates, groups, materials) are ignored.
"""

from pathlib import Path

from src.whitted.geometry.triangle import Triangle


class ObjParseError(ValueError):
    """Raised for malformed OBJ input, with the 1-based line number."""

    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")


def _parse_index(token: str, vertex_count: int, line_number: int) -> int:
    # v, v/vt, v//vn and v/vt/vn all start with the vertex index
    head = token.split("/", 1)[0]
    try:
        index = int(head)
    except ValueError:
        raise ObjParseError(line_number, f"invalid face index {token!r}") from None
    if index < 0:
        index = vertex_count + index + 1
    if index < 1 or index > vertex_count:
        raise ObjParseError(line_number, f"face index {index} out of range")
    return index - 1


def parse_obj(text: str) -> list[Triangle]:
    """Parse OBJ text into triangles.

    Args:
        text: Contents of an OBJ file.

    Returns:
        Triangles in face order.

    Raises:
        ObjParseError: On malformed vertex or face records.
    """
    vertices: list[tuple[float, float, float]] = []
    triangles: list[Triangle] = []

    for line_number, raw in enumerate(text.splitlines(), start=1):
        parts = raw.split("#", 1)[0].split()
        if not parts:
            continue
        keyword, args = parts[0], parts[1:]

        if keyword == "v":
            if len(args) < 3:
                raise ObjParseError(line_number, "vertex needs 3 coordinates")
            try:
                x, y, z = (float(a) for a in args[:3])
            except ValueError:
                raise ObjParseError(line_number, "invalid vertex coordinate") from None
            vertices.append((x, y, z))
        elif keyword == "f":
            if len(args) < 3:
                raise ObjParseError(line_number, "face needs at least 3 vertices")
            indices = [_parse_index(a, len(vertices), line_number) for a in args]
            for k in range(1, len(indices) - 1):
                triangles.append(
                    Triangle(
                        vertices[indices[0]],
                        vertices[indices[k]],
                        vertices[indices[k + 1]],
                    )
                )

    return triangles


def load_obj(path: str | Path) -> list[Triangle]:
    return parse_obj(Path(path).read_text())
