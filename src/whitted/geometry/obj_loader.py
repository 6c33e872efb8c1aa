"""Wavefront OBJ subset loader for triangle meshes.

Only the two record types the renderer needs are understood:

    v x y z        vertex with three float coordinates
    f i j k        triangular face with three 1-based vertex indices

Face tokens may use the slash forms ``i/t``, ``i//n`` and ``i/t/n``; only the
vertex index is kept. Blank lines and ``#`` comments are skipped. Any other
leading token (``vn``, ``vt``, ``o``, ``g``, ``usemtl``...) is ignored with a
warning.

Loading is all-or-nothing: an unreadable file, a malformed number, a face
that is not a triangle or an index that does not name a vertex raises
MeshLoadError, and no partial mesh is returned.

Example:
    >>> from whitted.geometry.obj_loader import load_obj
    >>> vertices, faces = load_obj("assets/triangle.obj")
    >>> vertices.shape, faces.shape
    ((3, 3), (1, 3))
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)


class MeshLoadError(ValueError):
    """Raised when a mesh file cannot be read or parsed."""


def _parse_vertex(tokens: list[str], line_no: int, path: Path) -> tuple[float, float, float]:
    if len(tokens) < 3:
        raise MeshLoadError(f"{path}:{line_no}: vertex needs 3 coordinates, got {len(tokens)}")
    try:
        x, y, z = (float(tok) for tok in tokens[:3])
    except ValueError as exc:
        raise MeshLoadError(f"{path}:{line_no}: malformed vertex coordinate") from exc
    return x, y, z


def _parse_face(tokens: list[str], line_no: int, path: Path) -> tuple[int, int, int]:
    if len(tokens) != 3:
        raise MeshLoadError(
            f"{path}:{line_no}: only triangular faces are supported, got {len(tokens)} vertices"
        )
    indices = []
    for tok in tokens:
        try:
            index = int(tok.split("/")[0])
        except ValueError as exc:
            raise MeshLoadError(f"{path}:{line_no}: malformed face index {tok!r}") from exc
        if index < 1:
            raise MeshLoadError(f"{path}:{line_no}: face index {index} must be 1-based")
        indices.append(index - 1)
    return indices[0], indices[1], indices[2]


def parse_obj_lines(
    lines: list[str], path: Path | str = "<memory>"
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.int32]]:
    """Parse OBJ text that has already been read into lines.

    Args:
        lines: The file contents split into lines.
        path: Name used in error and warning messages.

    Returns:
        Tuple of (vertices, faces): float32 array of shape (N, 3) and int32
        array of shape (F, 3) with 0-based indices.

    Raises:
        MeshLoadError: On any malformed record or out-of-range face index.
    """
    path = Path(path)
    vertices: list[tuple[float, float, float]] = []
    faces: list[tuple[int, int, int]] = []

    for line_no, raw in enumerate(lines, start=1):
        tokens = raw.split()
        if not tokens or tokens[0].startswith("#"):
            continue

        keyword, args = tokens[0], tokens[1:]
        if keyword == "v":
            vertices.append(_parse_vertex(args, line_no, path))
        elif keyword == "f":
            faces.append(_parse_face(args, line_no, path))
        else:
            logger.warning("%s:%d: ignoring unsupported token %r", path, line_no, keyword)

    for face_no, face in enumerate(faces):
        for index in face:
            if index >= len(vertices):
                raise MeshLoadError(
                    f"{path}: face {face_no + 1} references vertex {index + 1}, "
                    f"but only {len(vertices)} vertices are defined"
                )

    vertex_array = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
    face_array = np.asarray(faces, dtype=np.int32).reshape(-1, 3)
    logger.debug("Parsed %s: %d vertices, %d faces", path, len(vertices), len(faces))
    return vertex_array, face_array


def load_obj(path: Path | str) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.int32]]:
    """Load vertices and triangular faces from an OBJ file.

    Args:
        path: Path to the .obj file.

    Returns:
        Tuple of (vertices, faces) as described in parse_obj_lines().

    Raises:
        MeshLoadError: If the file cannot be read or is malformed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MeshLoadError(f"Cannot read mesh file {path}: {exc}") from exc
    return parse_obj_lines(text.splitlines(), path)
