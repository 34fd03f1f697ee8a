"""Reading of Wavefront .mtl material libraries."""

from __future__ import annotations

import io
import os
import struct
from dataclasses import dataclass, field
from typing import Iterable, TextIO, Union

from .scanning import parse_float, parse_floats, parse_int_prefix

__all__ = ["Material", "load_mtl", "load_mtl_file"]

Color = tuple[float, float, float]

_BLANK = " \t"

# Keywords carrying three numbers, mapped to the material field they set.
_COLOR_KEYS = {
    "Ka": "ambient",
    "Kd": "diffuse",
    "Ks": "specular",
    "Kt": "transmittance",
    "Tf": "transmittance",
    "Ke": "emission",
}

# Keywords carrying one number.
_SCALAR_KEYS = {
    "Ni": "ior",
    "Ns": "shininess",
    "d": "dissolve",
    "Pr": "roughness",
    "Pm": "metallic",
    "Ps": "sheen",
    "Pc": "clearcoat_thickness",
    "Pcr": "clearcoat_roughness",
    "aniso": "anisotropy",
    "anisor": "anisotropy_rotation",
}

# Keywords whose value is the rest of the line, taken verbatim.
_TEXTURE_KEYS = {
    "map_Ka": "ambient_texname",
    "map_Kd": "diffuse_texname",
    "map_Ks": "specular_texname",
    "map_Ns": "specular_highlight_texname",
    "map_bump": "bump_texname",
    "bump": "bump_texname",
    "map_d": "alpha_texname",
    "disp": "displacement_texname",
    "map_Pr": "roughness_texname",
    "map_Pm": "metallic_texname",
    "map_Ps": "sheen_texname",
    "map_Ke": "emissive_texname",
    "norm": "normal_texname",
}


@dataclass
class Material:
    """One material of a .mtl library."""

    name: str = ""
    ambient: Color = (0.0, 0.0, 0.0)
    diffuse: Color = (0.0, 0.0, 0.0)
    specular: Color = (0.0, 0.0, 0.0)
    transmittance: Color = (0.0, 0.0, 0.0)
    emission: Color = (0.0, 0.0, 0.0)
    shininess: float = 1.0
    ior: float = 1.0
    dissolve: float = 1.0
    illum: int = 0

    ambient_texname: str = ""
    diffuse_texname: str = ""
    specular_texname: str = ""
    specular_highlight_texname: str = ""
    bump_texname: str = ""
    displacement_texname: str = ""
    alpha_texname: str = ""

    roughness: float = 0.0
    metallic: float = 0.0
    sheen: float = 0.0
    clearcoat_thickness: float = 0.0
    clearcoat_roughness: float = 0.0
    anisotropy: float = 0.0
    anisotropy_rotation: float = 0.0
    roughness_texname: str = ""
    metallic_texname: str = ""
    sheen_texname: str = ""
    emissive_texname: str = ""
    normal_texname: str = ""

    unknown_parameter: dict[str, str] = field(default_factory=dict)


def _float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _clean_line(raw: str) -> str:
    line = raw.split("\0", 1)[0]
    line = line.rstrip(_BLANK)
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _keyword(token: str) -> str:
    for pos, c in enumerate(token):
        if c in _BLANK:
            return token[:pos]
    return ""


def _lines(stream: Union[str, TextIO, Iterable[str]]) -> Iterable[str]:
    if isinstance(stream, str):
        return stream.split("\n")
    if isinstance(stream, io.TextIOBase) or hasattr(stream, "read"):
        return stream.read().split("\n")
    return (line.rstrip("\n") for line in stream)


def load_mtl(
    stream: Union[str, TextIO, Iterable[str]],
) -> tuple[list[Material], dict[str, int]]:
    """Parse .mtl text; return the materials and a name-to-position map.

    ``stream`` may be the text itself, a readable text stream or an iterable
    of lines. The material being defined when the input ends is always
    appended, even when it has no name. When a name repeats, the map keeps
    its first position.
    """
    materials: list[Material] = []
    material_map: dict[str, int] = {}
    current = Material()

    def flush(material: Material) -> None:
        material_map.setdefault(material.name, len(materials))
        materials.append(material)

    for raw in _lines(stream):
        line = _clean_line(raw)
        token = line.lstrip(_BLANK)
        if not token or token.startswith("#"):
            continue

        key = _keyword(token)
        rest = token[len(key) + 1:]

        if key == "newmtl":
            if current.name:
                flush(current)
            words = rest.split()
            current = Material(name=words[0] if words else "")
        elif key in _COLOR_KEYS:
            values, _ = parse_floats(rest, 3)
            setattr(current, _COLOR_KEYS[key], values)
        elif key in _SCALAR_KEYS:
            value, _ = parse_float(rest)
            setattr(current, _SCALAR_KEYS[key], value)
        elif key == "Tr":
            value, _ = parse_float(rest)
            current.dissolve = _float32(1.0 - value)
        elif key == "illum":
            current.illum = parse_int_prefix(rest.lstrip(_BLANK))
        elif key in _TEXTURE_KEYS:
            setattr(current, _TEXTURE_KEYS[key], rest)
        else:
            split_at = token.find(" ")
            if split_at < 0:
                split_at = token.find("\t")
            if split_at >= 0:
                current.unknown_parameter.setdefault(
                    token[:split_at], token[split_at + 1:]
                )

    flush(current)
    return materials, material_map


def load_mtl_file(
    path: Union[str, os.PathLike],
) -> tuple[list[Material], dict[str, int]]:
    """Read and parse a .mtl file; raises ``OSError`` if it cannot be read."""
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
        return load_mtl(f)