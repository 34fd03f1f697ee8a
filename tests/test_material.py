import io

import pytest

from objfastload.material import Material, load_mtl, load_mtl_file

CUBE_MTL = (
    "newmtl white\n"
    "Ka 0 0 0\n"
    "Kd 1 1 1\n"
    "Ks 0 0 0\n"
    "\n"
    "newmtl red\n"
    "Ka 0 0 0\n"
    "Kd 1 0 0\n"
    "Ks 0 0 0\n"
    "\n"
    "newmtl green\n"
    "Ka 0 0 0\n"
    "Kd 0 1 0\n"
    "Ks 0 0 0\n"
    "\n"
    "newmtl blue\n"
    "Ka 0 0 0\n"
    "Kd 0 0 1\n"
    "Ks 0 0 0\n"
    "\n"
    "newmtl light\n"
    "Ka 20 20 20\n"
    "Kd 1 1 1\n"
    "Ks 0 0 0"
)

PBR_MTL = (
    "newmtl pbr\n"
    "Pr 0.2\n"
    "Pm 0.3\n"
    "Ps 0.4\n"
    "Pc 0.5\n"
    "Pcr 0.6\n"
    "aniso 0.7\n"
    "anisor 0.8\n"
    "map_Pr roughness.tex\n"
    "map_Pm metallic.tex\n"
    "map_Ps sheen.tex\n"
    "map_Ke emissive.tex\n"
    "norm normalmap.tex\n"
)


def approx(value):
    return pytest.approx(value, abs=1e-5)


def test_stream_load_cube_materials():
    materials, material_map = load_mtl(io.StringIO(CUBE_MTL))
    assert [m.name for m in materials] == ["white", "red", "green", "blue", "light"]
    assert material_map == {"white": 0, "red": 1, "green": 2, "blue": 3, "light": 4}
    assert materials[1].diffuse == (1.0, 0.0, 0.0)
    assert materials[4].ambient == (20.0, 20.0, 20.0)


def test_pbr_extension():
    materials, _ = load_mtl(PBR_MTL)
    assert len(materials) == 1
    m = materials[0]
    assert m.roughness == approx(0.2)
    assert m.metallic == approx(0.3)
    assert m.sheen == approx(0.4)
    assert m.clearcoat_thickness == approx(0.5)
    assert m.clearcoat_roughness == approx(0.6)
    assert m.anisotropy == approx(0.7)
    assert m.anisotropy_rotation == approx(0.8)
    assert m.roughness_texname == "roughness.tex"
    assert m.metallic_texname == "metallic.tex"
    assert m.sheen_texname == "sheen.tex"
    assert m.emissive_texname == "emissive.tex"
    assert m.normal_texname == "normalmap.tex"


def test_trailing_whitespace_issue92():
    materials, _ = load_mtl("newmtl a\nmap_Kd tmp.png   \t \n")
    assert len(materials) == 1
    assert materials[0].diffuse_texname == "tmp.png"


@pytest.mark.parametrize("keyword", ["Kt", "Tf"])
def test_transmittance_filter_issue95(keyword):
    materials, _ = load_mtl(f"newmtl a\n{keyword} 0.1 0.2 0.3\n")
    assert len(materials) == 1
    assert materials[0].transmittance == (approx(0.1), approx(0.2), approx(0.3))


def test_tr_and_d_issue43():
    materials, _ = load_mtl("newmtl a\nTr 0.25\nnewmtl b\nd 0.75\n")
    assert len(materials) == 2
    assert materials[0].dissolve == approx(0.75)
    assert materials[1].dissolve == approx(0.75)


def test_map_bump_and_bump_alias():
    materials, _ = load_mtl("newmtl a\nmap_bump bump.jpg\nnewmtl b\nbump other.jpg\n")
    assert materials[0].bump_texname == "bump.jpg"
    assert materials[1].bump_texname == "other.jpg"


def test_texture_name_keeps_inner_whitespace():
    materials, _ = load_mtl("newmtl a\nmap_Kd texture 01.png\n")
    assert materials[0].diffuse_texname == "texture 01.png"


def test_defaults_of_new_material():
    materials, _ = load_mtl("newmtl plain\n")
    assert materials[0] == Material(name="plain")
    assert materials[0].dissolve == 1.0
    assert materials[0].shininess == 1.0
    assert materials[0].ior == 1.0


def test_scalars_and_illum():
    materials, _ = load_mtl("newmtl a\nNs 32\nNi 1.5\nillum 2\nKe 1 2 3\n")
    m = materials[0]
    assert m.shininess == 32.0
    assert m.ior == 1.5
    assert m.illum == 2
    assert m.emission == (1.0, 2.0, 3.0)


def test_tab_separated_keyword():
    materials, _ = load_mtl("newmtl a\nKa\t0.5 0.25 1\n")
    assert materials[0].ambient == (0.5, 0.25, 1.0)


def test_unknown_parameter_first_value_wins():
    materials, _ = load_mtl("newmtl a\nfoo bar baz\nfoo other\nlonely\n")
    assert materials[0].unknown_parameter == {"foo": "bar baz"}


def test_comments_and_blank_lines_ignored():
    materials, _ = load_mtl("# comment\n\n   \nnewmtl a\n  # Kd 1 1 1\n")
    assert len(materials) == 1
    assert materials[0].diffuse == (0.0, 0.0, 0.0)


def test_empty_input_yields_unnamed_material():
    materials, material_map = load_mtl("")
    assert materials == [Material()]
    assert material_map == {"": 0}


def test_properties_before_newmtl_are_dropped():
    materials, material_map = load_mtl("Kd 1 1 1\nnewmtl a\n")
    assert [m.name for m in materials] == ["a"]
    assert materials[0].diffuse == (0.0, 0.0, 0.0)
    assert material_map == {"a": 0}


def test_duplicate_name_keeps_first_position():
    materials, material_map = load_mtl("newmtl a\nnewmtl b\nnewmtl a\n")
    assert len(materials) == 3
    assert material_map == {"a": 0, "b": 1}


def test_newmtl_name_is_first_word():
    materials, _ = load_mtl("newmtl   green extra\n")
    assert materials[0].name == "green"


def test_crlf_line_endings():
    materials, _ = load_mtl("newmtl a\r\nmap_Kd tex.png\r\nKd 1 0.5 0\r\n")
    assert materials[0].name == "a"
    assert materials[0].diffuse_texname == "tex.png"
    assert materials[0].diffuse == (1.0, 0.5, 0.0)


def test_iterable_of_lines():
    materials, _ = load_mtl(["newmtl a\n", "Kd 0 1 0\n"])
    assert materials[0].diffuse == (0.0, 1.0, 0.0)


def test_load_mtl_file(tmp_path):
    path = tmp_path / "cube.mtl"
    path.write_text(CUBE_MTL, encoding="utf-8")
    materials, material_map = load_mtl_file(path)
    assert len(materials) == 5
    assert material_map["green"] == 2
    assert materials[2].diffuse == (0.0, 1.0, 0.0)


def test_load_mtl_file_missing(tmp_path):
    with pytest.raises(OSError):
        load_mtl_file(tmp_path / "absent.mtl")