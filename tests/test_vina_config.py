import logging

from docking.base import SearchRegion, SearchParameters
from docking.vina import CONFIG_KEYS, VinaConfigBuilder, format_number, render_vina_config


def _pairs(text):
    return [tuple(part.strip() for part in line.split('=', 1)) for line in text.splitlines() if line]


def test_default_config_matches_expected_layout():
    text = render_vina_config(SearchRegion(), SearchParameters())
    assert text == (
        "receptor = receptor_prepared.pdbqt\n"
        "ligand = ligand_prepared.pdbqt\n"
        "\n"
        "center_x = 0\n"
        "center_y = 0\n"
        "center_z = 0\n"
        "\n"
        "size_x = 20\n"
        "size_y = 20\n"
        "size_z = 20\n"
        "\n"
        "exhaustiveness = 8\n"
        "num_modes = 9\n"
        "energy_range = 3\n"
        "\n"
        "out = output.pdbqt\n"
        "log = vina.log\n"
    )


def test_keys_appear_once_in_fixed_order():
    region = SearchRegion(center_x=10.5, center_y=-22.125, center_z=3, size_x=18, size_y=24.5, size_z=30)
    params = SearchParameters(exhaustiveness=32, num_modes=20, energy_range=4.5)
    keys = [key for key, _ in _pairs(render_vina_config(region, params))]
    assert keys == list(CONFIG_KEYS)


def test_values_are_written_without_rounding():
    region = SearchRegion(center_x=10.5, center_y=-22.125, center_z=0.1, size_x=18.0, size_y=24.5, size_z=30)
    params = SearchParameters(exhaustiveness=32, num_modes=20, energy_range=4.5)
    values = dict(_pairs(render_vina_config(region, params)))
    assert values['center_x'] == '10.5'
    assert values['center_y'] == '-22.125'
    assert values['center_z'] == '0.1'
    assert values['size_x'] == '18'
    assert values['size_y'] == '24.5'
    assert values['size_z'] == '30'
    assert values['exhaustiveness'] == '32'
    assert values['energy_range'] == '4.5'


def test_format_number():
    assert format_number(20) == '20'
    assert format_number(20.0) == '20'
    assert format_number(7.4) == '7.4'
    assert format_number(-0.5) == '-0.5'
    assert format_number(1e-7) == '1e-07'


def test_custom_file_names():
    builder = VinaConfigBuilder(receptor='r.pdbqt', ligand='l.pdbqt', out='poses.pdbqt', log='run.log')
    values = dict(_pairs(builder.render(SearchRegion(), SearchParameters())))
    assert values['receptor'] == 'r.pdbqt'
    assert values['out'] == 'poses.pdbqt'
    assert values['log'] == 'run.log'


def test_degenerate_region_is_written_with_warning(caplog):
    region = SearchRegion(size_x=0)
    with caplog.at_level(logging.WARNING, logger='docking.vina'):
        text = render_vina_config(region, SearchParameters(exhaustiveness=0))
    assert 'size_x = 0' in text
    assert 'exhaustiveness = 0' in text
    assert 'non-positive extents' in caplog.text
    assert 'Exhaustiveness 0' in caplog.text
