import cadquery as cq
import pytest

import airtag_holders
import case_basic
import case_nuts_bolts
import case_sandwich
import case_snap
from airtag_common import GeometryError


def _cube():
    return cq.Workplane("XY").box(5, 5, 5)


def _broken():
    raise GeometryError("nut trap wider than the corner")


def test_registry_names_match_products():
    assert list(airtag_holders.PRODUCTS) == ["basic_shape", "sandwich", "nutsandbolts", "snap"]


def test_export_writes_each_format(tmp_path):
    paths = airtag_holders.export_product("cube", _cube, tmp_path, ("stl", "step"))
    assert [p.name for p in paths] == ["cube.stl", "cube.step"]
    assert all(p.exists() and p.stat().st_size > 0 for p in paths)


def test_existing_files_are_kept_without_force(tmp_path):
    target = tmp_path / "cube.stl"
    target.write_bytes(b"placeholder")

    airtag_holders.export_product("cube", _cube, tmp_path)
    assert target.read_bytes() == b"placeholder"

    airtag_holders.export_product("cube", _cube, tmp_path, force=True)
    assert target.read_bytes() != b"placeholder"


def test_failed_product_does_not_stop_batch(tmp_path):
    products = {"broken": _broken, "cube": _cube}
    exported, failed = airtag_holders.export_all(tmp_path, products=products)

    assert list(exported) == ["cube"]
    assert isinstance(failed["broken"], GeometryError)
    assert (tmp_path / "cube.stl").exists()
    assert not (tmp_path / "broken.stl").exists()


def test_unknown_product_rejected(tmp_path):
    with pytest.raises(KeyError):
        airtag_holders.export_all(tmp_path, names=["lanyard"], products={"cube": _cube})


def test_resolve_out_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert airtag_holders.resolve_out_dir(None, False) == airtag_holders.DRAFT_DIR
    assert airtag_holders.resolve_out_dir("out", True) == airtag_holders.FINAL_DIR
    assert airtag_holders.resolve_out_dir("out", False) == (tmp_path / "out").resolve()


def test_main_exit_codes(tmp_path, monkeypatch):
    monkeypatch.setattr(airtag_holders, "PRODUCTS", {"broken": _broken, "cube": _cube})
    out = str(tmp_path)

    assert airtag_holders.main(["--out-dir", out, "--only", "cube"]) == 0
    assert airtag_holders.main(["--out-dir", out]) == 1
    assert airtag_holders.main(["--out-dir", out, "--only", "lanyard"]) == 2
    assert airtag_holders.main(["--list"]) == 0


def test_basic_shape_end_to_end(tmp_path):
    exported, failed = airtag_holders.export_all(tmp_path, names=["basic_shape"], fmts=("stl",))
    assert not failed
    assert exported["basic_shape"][0].stat().st_size > 0


@pytest.mark.parametrize(
    "build",
    [
        case_basic.build,
        case_sandwich.build_bottom,
        case_sandwich.build_top,
        case_nuts_bolts.build_bottom,
        case_nuts_bolts.build_top,
        case_snap.build,
    ],
)
def test_every_printed_piece_is_one_solid(build):
    piece = build()
    assert piece.val().isValid()
    assert len(piece.solids().vals()) == 1


@pytest.mark.parametrize("build", [case_sandwich.build, case_nuts_bolts.build])
def test_two_piece_products_have_two_solids(build):
    assert len(build().solids().vals()) == 2
