import pytest

from docking.base import MoleculeInput

RECEPTOR_PDB = b"""ATOM      1  N   ALA A   1      11.104   6.134  -6.504  1.00  0.00           N
ATOM      2  CA  ALA A   1      11.639   6.071  -5.147  1.00  0.00           C
HETATM    3  O   HOH A 101       5.000   5.000   5.000  1.00  0.00           O
END
"""

LIGAND_SDF = b"""ethanol
  RDKit          3D

  3  2  0  0  0  0  0  0  0  0999 V2000
    0.0000    0.0000    0.0000 C   0  0  0  0  0  0  0  0  0  0  0  0
    1.5000    0.0000    0.0000 C   0  0  0  0  0  0  0  0  0  0  0  0
    2.0000    1.4000    0.0000 O   0  0  0  0  0  0  0  0  0  0  0  0
  1  2  1  0
  2  3  1  0
M  END
$$$$
"""


@pytest.fixture
def receptor():
    return MoleculeInput(name='protein.pdb', content=RECEPTOR_PDB)


@pytest.fixture
def ligand():
    return MoleculeInput(name='ethanol.sdf', content=LIGAND_SDF)


@pytest.fixture
def input_files(tmp_path):
    receptor_path = tmp_path / 'protein.pdb'
    ligand_path = tmp_path / 'ethanol.sdf'
    receptor_path.write_bytes(RECEPTOR_PDB)
    ligand_path.write_bytes(LIGAND_SDF)
    return receptor_path, ligand_path
