"""Parsing of Wavefront .obj geometry into flat attribute arrays and shapes."""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union

from .material import Material, load_mtl_file
from .scanning import Index, fix_index, parse_floats, parse_raw_triple

__all__ = [
    "MAX_THREADS",
    "CommandType",
    "Command",
    "LoadOption",
    "Shape",
    "Attrib",
    "ObjData",
    "parse_line",
    "split_lines",
    "parse_obj",
]

MAX_THREADS = 32

_BLANK = " \t"
# A line ends at '\n', at NUL, or at a lone '\r' that is followed by more text.
_LINE_BREAK = re.compile(r"\n|\0|\r(?=[^\n])")


class CommandType(Enum):
    """Kind of statement found on one .obj line."""

    EMPTY = auto()
    V = auto()
    VN = auto()
    VT = auto()
    F = auto()
    G = auto()
    O = auto()  # noqa: E741
    USEMTL = auto()
    MTLLIB = auto()


@dataclass
class Command:
    """One parsed .obj statement."""

    type: CommandType
    values: tuple[float, ...] = ()
    indices: list[Index] = field(default_factory=list)
    num_verts: list[int] = field(default_factory=list)
    name: str = ""


@dataclass
class LoadOption:
    """Options for :func:`parse_obj`.

    A negative ``req_num_threads`` means the number of CPUs of the machine;
    the effective count is clamped to ``1..MAX_THREADS``.
    """

    req_num_threads: int = -1
    triangulate: bool = True
    verbose: bool = False


@dataclass
class Shape:
    """A named run of faces: ``length`` faces starting at ``face_offset``."""

    name: str = ""
    face_offset: int = 0
    length: int = 0


@dataclass
class Attrib:
    """Flat geometry arrays shared by all shapes."""

    vertices: list[float] = field(default_factory=list)
    normals: list[float] = field(default_factory=list)
    texcoords: list[float] = field(default_factory=list)
    indices: list[Index] = field(default_factory=list)
    face_num_verts: list[int] = field(default_factory=list)
    material_ids: list[int] = field(default_factory=list)


@dataclass
class ObjData:
    """Everything read from one .obj file."""

    attrib: Attrib
    shapes: list[Shape]
    materials: list[Material]


def _has_keyword(token: str, word: str) -> bool:
    n = len(word)
    return token.startswith(word) and len(token) > n and token[n] in _BLANK


def _parse_face(rest: str, triangulate: bool) -> Command:
    corners: list[Index] = []
    rest = rest.lstrip(_BLANK)
    while rest and rest[0] not in "\r\n\0":
        corner, rest = parse_raw_triple(rest)
        rest = rest.lstrip(" \t\r")
        corners.append(corner)

    if not triangulate:
        return Command(CommandType.F, indices=corners, num_verts=[len(corners)])

    indices: list[Index] = []
    num_verts: list[int] = []
    if len(corners) >= 3:
        first = corners[0]
        for prev, cur in zip(corners[1:], corners[2:]):
            indices.extend((first, prev, cur))
            num_verts.append(3)
    return Command(CommandType.F, indices=indices, num_verts=num_verts)


def parse_line(line: str, triangulate: bool = True) -> Optional[Command]:
    """Parse one line; return ``None`` for blank, comment or unknown lines.

    Names of groups, objects, materials and material libraries are the rest
    of the line, taken verbatim.
    """
    token = line.lstrip(_BLANK)
    if not token or token[0] in "\0#":
        return None

    if token[0] == "v" and len(token) > 1 and token[1] in _BLANK:
        values, _ = parse_floats(token[2:], 3)
        return Command(CommandType.V, values=values)
    if _has_keyword(token, "vn"):
        values, _ = parse_floats(token[3:], 3)
        return Command(CommandType.VN, values=values)
    if _has_keyword(token, "vt"):
        values, _ = parse_floats(token[3:], 2)
        return Command(CommandType.VT, values=values)
    if _has_keyword(token, "f"):
        return _parse_face(token[2:], triangulate)
    if _has_keyword(token, "usemtl"):
        return Command(CommandType.USEMTL, name=token[7:].lstrip(_BLANK))
    if _has_keyword(token, "mtllib"):
        return Command(CommandType.MTLLIB, name=token[7:].lstrip(_BLANK))
    if _has_keyword(token, "g"):
        return Command(CommandType.G, name=token[2:])
    if _has_keyword(token, "o"):
        return Command(CommandType.O, name=token[2:])
    return None


def split_lines(data: Union[str, bytes]) -> list[str]:
    """Split text into its non-empty lines.

    Lines end at ``\\n``, NUL or a lone ``\\r``; the ``\\r`` of a ``\\r\\n``
    pair stays at the end of its line.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = bytes(data).decode("utf-8", "surrogateescape")
    return [line for line in _LINE_BREAK.split(data) if line]


def _next_face_positions(commands: list[Command]) -> list[Optional[int]]:
    following: list[Optional[int]] = [None] * len(commands)
    upcoming: Optional[int] = None
    for pos in range(len(commands) - 1, -1, -1):
        following[pos] = upcoming
        if commands[pos].type is CommandType.F:
            upcoming = pos
    return following


def _merge(commands: list[Command], material_map: dict[str, int]) -> Attrib:
    attrib = Attrib()
    num_faces = sum(
        len(c.num_verts) for c in commands if c.type is CommandType.F
    )
    attrib.material_ids = [-1] * num_faces
    next_face = _next_face_positions(commands)
    face_count = 0

    for pos, command in enumerate(commands):
        kind = command.type
        if kind is CommandType.USEMTL:
            target = next_face[pos]
            if face_count < num_faces and target is not None:
                name = command.name
                material_id = material_map.get(name, -2) if name else -2
                count = len(commands[target].num_verts)
                attrib.material_ids[face_count:face_count + count] = [
                    material_id
                ] * count
        elif kind is CommandType.V:
            attrib.vertices.extend(command.values)
        elif kind is CommandType.VN:
            attrib.normals.extend(command.values)
        elif kind is CommandType.VT:
            attrib.texcoords.extend(command.values)
        elif kind is CommandType.F:
            v_count = len(attrib.vertices) // 3
            n_count = len(attrib.normals) // 3
            t_count = len(attrib.texcoords) // 2
            attrib.indices.extend(
                Index(
                    fix_index(corner.vertex_index, v_count),
                    fix_index(corner.texcoord_index, t_count),
                    fix_index(corner.normal_index, n_count),
                )
                for corner in command.indices
            )
            attrib.face_num_verts.extend(command.num_verts)
            face_count += len(command.num_verts)

    # Faces without a material of their own take the one before them.
    ids = attrib.material_ids
    for pos in range(1, len(ids)):
        if ids[pos] == -1:
            ids[pos] = ids[pos - 1]
    return attrib


def _build_shapes(commands: list[Command]) -> list[Shape]:
    shapes: list[Shape] = []
    face_count = 0
    face_prev_offset = 0
    shape = Shape()

    for command in commands:
        if command.type in (CommandType.O, CommandType.G):
            name = command.name
            if face_count == 0:
                shape.name = name
                shape.face_offset = face_count
                face_prev_offset = face_count
            else:
                if not shapes:
                    shape.length = face_count - face_prev_offset
                    face_prev_offset = face_count
                    shapes.append(shape)
                elif face_count - face_prev_offset > 0:
                    shape.length = face_count - face_prev_offset
                    shapes.append(shape)
                    face_prev_offset = face_count
                shape = Shape(name=name, face_offset=face_count, length=0)
        elif command.type is CommandType.F:
            face_count += len(command.num_verts)

    if face_count - face_prev_offset > 0:
        shape.length = face_count - shape.face_offset
        if shape.length > 0:
            shapes.append(shape)
    return shapes


def _thread_count(requested: int) -> int:
    count = (os.cpu_count() or 1) if requested < 0 else requested
    return max(1, min(count, MAX_THREADS))


def parse_obj(
    data: Union[str, bytes], option: Optional[LoadOption] = None
) -> ObjData:
    """Parse .obj text into attributes, shapes and materials.

    The last ``mtllib`` statement names a material library that is read
    relative to the working directory; a library that cannot be read is
    ignored. Faces naming a material that is not known get id -2.
    Raises ``ValueError`` when ``data`` is empty.
    """
    option = option or LoadOption()
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = bytes(data).decode("utf-8", "surrogateescape")
    if not data:
        raise ValueError("no .obj data to parse")

    num_threads = _thread_count(option.req_num_threads)
    if option.verbose:
        print(f"# of threads = {num_threads}")

    t_begin = time.perf_counter()
    lines = split_lines(data)
    t_lines = time.perf_counter()

    commands = [
        command
        for command in (parse_line(line, option.triangulate) for line in lines)
        if command is not None
    ]
    t_parse = time.perf_counter()

    materials: list[Material] = []
    material_map: dict[str, int] = {}
    mtllib = next(
        (c for c in reversed(commands) if c.type is CommandType.MTLLIB), None
    )
    if mtllib is not None and mtllib.name:
        filename = mtllib.name[:-1] if mtllib.name.endswith("\r") else mtllib.name
        try:
            materials, material_map = load_mtl_file(filename)
        except OSError:
            pass
    t_mtl = time.perf_counter()

    attrib = _merge(commands, material_map)
    t_merge = time.perf_counter()
    shapes = _build_shapes(commands)
    t_end = time.perf_counter()

    if option.verbose:
        def ms(a: float, b: float) -> float:
            return (b - a) * 1000.0

        print(f"total parsing time: {ms(t_begin, t_end)} ms")
        print(f"  line detection : {ms(t_begin, t_lines)} ms")
        print(f"  parse          : {ms(t_lines, t_parse)} ms")
        print(f"  merge          : {ms(t_mtl, t_merge)} ms")
        print(f"  construct      : {ms(t_merge, t_end)} ms")
        print(f"  mtl load       : {ms(t_parse, t_mtl)} ms")
        print(f"# of vertices = {len(attrib.vertices)}")
        print(f"# of normals = {len(attrib.normals)}")
        print(f"# of texcoords = {len(attrib.texcoords)}")
        print(f"# of face indices = {len(attrib.indices)}")
        print(f"# of indices = {len(attrib.material_ids)}")
        print(f"# of shapes = {len(shapes)}")

    return ObjData(attrib=attrib, shapes=shapes, materials=materials)