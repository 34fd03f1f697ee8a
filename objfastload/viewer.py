"""Loading .obj files into interleaved triangle buffers ready for drawing.

Files may be plain, gzip-compressed (``.gz``) or Zstandard-compressed
(``.zst``). Each triangle corner becomes nine floats in the buffer:
position, normal, and a colour derived from the normal.
"""

from __future__ import annotations

import gzip
import math
import os
import stat
import sys
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import zstandard

from .parser import Attrib, LoadOption, parse_obj
from .scanning import parse_int_prefix

__all__ = [
    "FLOAT_MAX",
    "FLOATS_PER_VERTEX",
    "DrawData",
    "calc_normal",
    "read_file_data",
    "build_draw_data",
    "load_and_convert",
    "main",
]

# Largest finite single-precision value; the start of an empty bounding box.
FLOAT_MAX = 3.4028234663852886e38

# Position (3), normal (3) and colour (3) for each vertex in the buffer.
FLOATS_PER_VERTEX = 9

_MIN_PLAIN_FILE_SIZE = 16

Vec3 = tuple[float, float, float]


@dataclass
class DrawData:
    """Interleaved triangle buffer and the bounding box of its vertices."""

    vertex_buffer: list[float] = field(default_factory=list)
    num_triangles: int = 0
    bmin: Vec3 = (FLOAT_MAX, FLOAT_MAX, FLOAT_MAX)
    bmax: Vec3 = (-FLOAT_MAX, -FLOAT_MAX, -FLOAT_MAX)


def calc_normal(v0: Sequence[float], v1: Sequence[float], v2: Sequence[float]) -> Vec3:
    """Geometric normal of the triangle ``v0, v1, v2``.

    Only the x and y components are divided by the length; z is left as
    computed.
    """
    v10 = (v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2])
    v20 = (v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2])

    nx = v20[1] * v10[2] - v20[2] * v10[1]
    ny = v20[2] * v10[0] - v20[0] * v10[2]
    nz = v20[0] * v10[1] - v20[1] * v10[0]

    len2 = nx * nx + ny * ny + nz * nz
    if len2 > 0.0:
        length = math.sqrt(len2)
        nx /= length
        ny /= length
    return (nx, ny, nz)


def _read_zstd(path: Union[str, os.PathLike]) -> bytes:
    with open(path, "rb") as f:
        compressed = f.read()
    params = zstandard.get_frame_parameters(compressed)
    if params.content_size in (0, zstandard.CONTENTSIZE_UNKNOWN):
        raise ValueError(f"{os.fspath(path)} : original size unknown")
    try:
        data = zstandard.ZstdDecompressor().decompress(compressed)
    except zstandard.ZstdError as exc:
        raise ValueError(f"error decoding {os.fspath(path)} : {exc}") from exc
    if len(data) != params.content_size:
        raise ValueError(f"error decoding {os.fspath(path)} : size mismatch")
    return data


def _read_plain(path: Union[str, os.PathLike]) -> bytes:
    info = os.stat(path)
    if not stat.S_ISREG(info.st_mode):
        raise ValueError(f"{os.fspath(path)} is not a file")
    if info.st_size < _MIN_PLAIN_FILE_SIZE:
        raise ValueError(f"Empty or invalid .obj : {os.fspath(path)}")
    with open(path, "rb") as f:
        return f.read()


def read_file_data(path: Union[str, os.PathLike]) -> bytes:
    """Return the contents of ``path``, decompressed by its extension.

    Raises ``OSError`` when the file cannot be read and ``ValueError`` when
    it is not a regular file, is too short to be an .obj, or cannot be
    decompressed.
    """
    ext = os.path.splitext(os.fspath(path))[1]
    if ext == ".gz":
        try:
            with gzip.open(path, "rb") as f:
                return f.read()
        except (gzip.BadGzipFile, EOFError) as exc:
            raise ValueError(f"gzip read of {os.fspath(path)} failed: {exc}") from exc
    if ext == ".zst":
        return _read_zstd(path)
    return _read_plain(path)


def _color_from_normal(n: Sequence[float]) -> Vec3:
    c0, c1, c2 = n[0], n[1], n[2]
    len2 = c0 * c0 + c1 * c1 + c2 * c2
    if len2 > 1.0e-6:
        length = math.sqrt(len2)
        c0, c1, c2 = c0 / length, c1 / length, c2 / length
    return (c0 * 0.5 + 0.5, c1 * 0.5 + 0.5, c2 * 0.5 + 0.5)


def build_draw_data(attrib: Attrib) -> DrawData:
    """Expand indexed faces into an interleaved triangle buffer.

    Every face must have a multiple of three corners and valid vertex
    indices; otherwise ``ValueError`` is raised. Normals from the file are
    used when all three corners of a triangle have one, else the geometric
    normal is computed.
    """
    bmin = [FLOAT_MAX] * 3
    bmax = [-FLOAT_MAX] * 3
    buffer: list[float] = []
    vertices = attrib.vertices
    normals = attrib.normals
    face_offset = 0

    for num_verts in attrib.face_num_verts:
        if num_verts % 3 != 0:
            raise ValueError(f"face with {num_verts} vertices is not made of triangles")
        for tri in range(num_verts // 3):
            corners = attrib.indices[face_offset + 3 * tri:face_offset + 3 * tri + 3]

            positions = []
            for corner in corners:
                vi = corner.vertex_index
                if vi < 0 or 3 * vi + 2 >= len(vertices):
                    raise ValueError(f"invalid vertex index {vi}")
                positions.append(tuple(vertices[3 * vi:3 * vi + 3]))
            for k in range(3):
                for p in positions:
                    bmin[k] = min(p[k], bmin[k])
                    bmax[k] = max(p[k], bmax[k])

            normal_ids = [corner.normal_index for corner in corners]
            if normals and all(ni >= 0 for ni in normal_ids):
                tri_normals = []
                for ni in normal_ids:
                    if 3 * ni + 2 >= len(normals):
                        raise ValueError(f"invalid normal index {ni}")
                    tri_normals.append(tuple(normals[3 * ni:3 * ni + 3]))
            else:
                n = calc_normal(*positions)
                tri_normals = [n, n, n]

            for p, n in zip(positions, tri_normals):
                buffer.extend(p)
                buffer.extend(n)
                buffer.extend(_color_from_normal(n))
        face_offset += num_verts

    return DrawData(
        vertex_buffer=buffer,
        num_triangles=len(buffer) // FLOATS_PER_VERTEX // 3,
        bmin=(bmin[0], bmin[1], bmin[2]),
        bmax=(bmax[0], bmax[1], bmax[2]),
    )


def load_and_convert(
    path: Union[str, os.PathLike], num_threads: int = -1, verbose: bool = False
) -> DrawData:
    """Read, parse and expand an .obj file; print its bounding box."""
    t_begin = time.perf_counter()
    data = read_file_data(path)
    t_end = time.perf_counter()
    if verbose:
        print(f"filesize: {len(data)}")
        print(f"load time: {(t_end - t_begin) * 1000.0} [msecs]")

    option = LoadOption(req_num_threads=num_threads, verbose=verbose)
    obj = parse_obj(data, option)
    draw = build_draw_data(obj.attrib)

    print("bmin = {:f}, {:f}, {:f}".format(*draw.bmin))
    print("bmax = {:f}, {:f}, {:f}".format(*draw.bmax))
    return draw


def _fit(draw: DrawData) -> tuple[float, Vec3]:
    extent = max(0.5 * (hi - lo) for lo, hi in zip(draw.bmin, draw.bmax))
    center = tuple(0.5 * (hi + lo) for lo, hi in zip(draw.bmin, draw.bmax))
    return extent, (center[0], center[1], center[2])


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: ``input.obj [num_threads] [benchmark_only] [verbose]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("view input.obj <num_threads> <benchark_only> <verbose>")
        return 0

    path = args[0]
    num_threads = parse_int_prefix(args[1]) if len(args) > 1 else -1
    benchmark_only = len(args) > 2 and parse_int_prefix(args[2]) > 0
    verbose = len(args) > 3

    if benchmark_only:
        try:
            data = read_file_data(path)
        except (OSError, ValueError) as exc:
            print(f"failed to load file: {exc}", file=sys.stderr)
            return 1
        if len(data) < 4:
            print("Empty file")
            return 1
        print(f"filesize: {len(data)}")
        try:
            parse_obj(data, LoadOption(req_num_threads=num_threads, verbose=True))
        except ValueError as exc:
            print(f"Failed to parse .obj: {exc}", file=sys.stderr)
            return 1
        return 0

    try:
        draw = load_and_convert(path, num_threads, verbose)
    except (OSError, ValueError) as exc:
        print(f"failed to load & conv: {exc}", file=sys.stderr)
        return 1

    extent, center = _fit(draw)
    print(f"triangles = {draw.num_triangles}")
    print(f"max extent = {extent:f}")
    print("center = {:f}, {:f}, {:f}".format(*center))
    return 0