import numpy as np
import pytest
import yaml

from bbtxt_data.cli import parse_args
from bbtxt_data.config import DEFAULT_CONFIG, build_config, get_dtype, load_config, validate_config
from bbtxt_data.errors import ConfigError


def _write_config(tmp_path, data):
    path = tmp_path / 'data.yaml'
    path.write_text(yaml.safe_dump({'data': data}))
    return path


def test_load_config_fills_defaults(tmp_path):
    path = _write_config(tmp_path, {'source': 'train.bbtxt', 'height': 96, 'width': 128,
                                    'reference_size': 40, 'shuffle': True})

    config = load_config(path)

    data = config['data']
    assert data['width'] == 128
    assert data['shuffle'] is True
    assert data['batch_size'] == 1
    assert data['max_boxes_per_image'] == 20
    assert get_dtype(config) is np.float32
    # defaults are not shared with the loaded config
    assert DEFAULT_CONFIG['data']['shuffle'] is False


@pytest.mark.parametrize('missing', ['source', 'height', 'width', 'reference_size'])
def test_missing_required_field(tmp_path, missing):
    data = {'source': 'train.bbtxt', 'height': 96, 'width': 128, 'reference_size': 40}
    del data[missing]

    with pytest.raises(ConfigError, match=missing):
        load_config(_write_config(tmp_path, data))


@pytest.mark.parametrize('field,value', [
    ('height', 0),
    ('width', 12.5),
    ('batch_size', -1),
    ('reference_size', 0),
    ('dtype', 'float16'),
    ('seed', 'abc'),
])
def test_invalid_values(field, value):
    config = {'data': dict(DEFAULT_CONFIG['data'], source='x', height=10, width=10, reference_size=5)}
    config['data'][field] = value

    with pytest.raises(ConfigError):
        validate_config(config)


def test_missing_data_section():
    with pytest.raises(ConfigError):
        validate_config({})


def test_reference_size_larger_than_input_warns(capsys):
    config = {'data': dict(DEFAULT_CONFIG['data'], source='x', height=32, width=64, reference_size=40)}

    validate_config(config)

    assert 'reference_size' in capsys.readouterr().out


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / 'none.yaml')


def test_build_config_from_args():
    args = parse_args(['--source', 'train.bbtxt', '--height', '64', '--width', '80',
                       '--reference-size', '20', '--shuffle', '--dtype', 'float64'])

    config = build_config(args)

    data = config['data']
    assert (data['height'], data['width'], data['reference_size']) == (64, 80, 20.0)
    assert data['shuffle'] is True
    assert data['to_rgb'] is False
    assert get_dtype(config) is np.float64


def test_build_config_requires_size():
    with pytest.raises(ConfigError, match='height'):
        build_config(parse_args(['--source', 'train.bbtxt']))
