# objfastload

A loader for Wavefront `.obj` geometry and `.mtl` material files. It returns
flat attribute arrays (positions, normals, texture coordinates and face
indices) and can expand them into an interleaved triangle buffer ready to
upload to a GPU.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Loading a mesh

```python
from objfastload.parser import LoadOption, parse_obj

with open("model.obj", "rb") as fh:
    data = fh.read()

result = parse_obj(data, LoadOption(triangulate=True))
attrib = result.attrib

print(len(attrib.vertices) // 3, "vertices")
print(len(attrib.face_num_verts), "faces")
for shape in result.shapes:
    print(shape.name, shape.face_offset, shape.length)
```

`parse_obj` takes `str` or `bytes` and returns an `ObjData` with `attrib`
(an `Attrib`), `shapes` (a list of `Shape`) and `materials` (a list of
`Material`). It raises `ValueError` when the data is empty.

### What you get back

- **Flat arrays.** `Attrib.vertices` and `Attrib.normals` hold three floats
  per element, `Attrib.texcoords` two. Numbers are rounded to single
  precision.
- **Faces.** `Attrib.indices` holds one `Index` per face corner, with
  `vertex_index`, `texcoord_index` and `normal_index`;
  `Attrib.face_num_verts` gives the corner count of each face.
- **Index numbering.** Indices are zero-based. Negative (relative) indices in
  the file are resolved against the number of elements read so far.
- **Triangulation.** With `triangulate=True` (the default), polygons are
  fanned into triangles; with `False` they are kept as they are.
- **Shapes.** `g` and `o` statements start a new `Shape`, a run of `length`
  faces starting at `face_offset`.
- **Materials.** If the file names an `mtllib`, the last such library is read
  relative to the current working directory; a library that cannot be read is
  ignored. `Attrib.material_ids` gives each face the material selected by the
  most recent `usemtl`: -1 before any `usemtl`, -2 for a name that is not in
  the library.

`parse_line` and `split_lines` expose the per-line steps, returning `Command`
objects tagged with a `CommandType`.

## Reading materials on their own

```python
from objfastload.material import load_mtl_file

materials, material_map = load_mtl_file("scene.mtl")
print(materials[material_map["white"]].diffuse)
```

`load_mtl` accepts the text itself, a readable text stream such as
`io.StringIO`, or an iterable of lines. Keywords it does not recognise are
kept in `Material.unknown_parameter`.

## Triangle buffers

```python
from objfastload.viewer import load_and_convert

draw = load_and_convert("model.obj")
print(draw.num_triangles, draw.bmin, draw.bmax)
```

`load_and_convert` reads a plain, gzip (`.gz`) or Zstandard (`.zst`) file
with `read_file_data`, parses it and calls `build_draw_data`. The resulting
`DrawData.vertex_buffer` holds nine floats per triangle corner: position,
normal and a colour derived from the normal. File normals are used when all
three corners have one; otherwise `calc_normal` computes a geometric normal.
Faces that are not made of triangles, or that point at missing vertices,
raise `ValueError`.

## Command line

```
objfastload model.obj [num_threads] [benchmark_only] [verbose]
```

The command loads the file and prints the bounding box, the number of
triangles, the largest half-extent and the centre of the mesh.

- **Compressed input.** Files ending in `.gz` or `.zst` are decompressed
  first.
- **Benchmark mode.** Pass a positive `benchmark_only` value to parse the file
  and print timing figures only.
- **Verbose.** Any fourth argument turns on timing and size output.

## What it does not do

The package does not open a window or draw anything, and it has no mouse or
rotation controls: the command prints figures about the mesh and exits.
Parsing runs in a single thread; `num_threads` is only reported in verbose
output.