import pytest

from docking.base import SearchRegion
from docking.utils import (
    parse_residue_ids, search_region_from_coordinates, search_region_from_ligand,
    search_region_from_residues,
)


def _pdb_line(serial, res_name, res_seq, x, y, z):
    return (f"ATOM  {serial:>5} {'CA':^4} {res_name:>3} A{res_seq:>4}    "
            f"{x:>8.3f}{y:>8.3f}{z:>8.3f}{1.0:>6.2f}{0.0:>6.2f}          {'C':>2}")


def test_region_from_coordinates():
    region = search_region_from_coordinates([[0, 0, 0], [2, 4, 6]], padding=1.0)
    assert region.center == (1.0, 2.0, 3.0)
    assert region.size == (4.0, 6.0, 8.0)


def test_region_from_coordinates_rejects_bad_input():
    with pytest.raises(ValueError):
        search_region_from_coordinates([])
    with pytest.raises(ValueError):
        search_region_from_coordinates([[1.0, 2.0]])


def test_region_properties():
    region = SearchRegion(size_x=10, size_y=20, size_z=5)
    assert region.volume == 1000
    assert not region.is_degenerate
    assert SearchRegion(size_z=0).is_degenerate


def test_parse_residue_ids():
    assert parse_residue_ids('45, 46,101,') == [45, 46, 101]


def test_region_from_reference_ligand(tmp_path, ligand):
    pytest.importorskip('rdkit')
    path = tmp_path / 'reference.sdf'
    path.write_bytes(ligand.content)
    region = search_region_from_ligand(path, padding=2.0)
    assert region.center == pytest.approx((3.5 / 3, 1.4 / 3, 0.0), abs=1e-3)
    assert region.size == pytest.approx((6.0, 5.4, 4.0), abs=1e-3)


def test_region_from_ligand_rejects_unknown_format(tmp_path):
    pytest.importorskip('rdkit')
    path = tmp_path / 'reference.xyz'
    path.write_text('')
    with pytest.raises(ValueError, match='Unsupported'):
        search_region_from_ligand(path)


def test_region_from_pocket_residues(tmp_path):
    pytest.importorskip('mdtraj')
    pdb = tmp_path / 'receptor.pdb'
    pdb.write_text('\n'.join([
        _pdb_line(1, 'ALA', 1, 0.0, 0.0, 0.0),
        _pdb_line(2, 'GLY', 2, 2.0, 4.0, 6.0),
        _pdb_line(3, 'SER', 3, 10.0, 10.0, 10.0),
        'END',
    ]) + '\n')
    region = search_region_from_residues(pdb, [1, 2], padding=0.0)
    assert region.center == pytest.approx((1.0, 2.0, 3.0), abs=1e-3)
    assert region.size == pytest.approx((2.0, 4.0, 6.0), abs=1e-3)

    with pytest.raises(ValueError, match='No atoms'):
        search_region_from_residues(pdb, [99])
