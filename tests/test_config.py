"""
Test cases for configuration loading and the command line interface
"""

import pytest
import os
import sys
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from facelibrary.config import DEFAULT_CONFIG, load_config
from facelibrary.identity_store import clear_stores
from facelibrary.main import build_parser, main


@pytest.fixture
def config_path(tmp_path):
    config = {
        'storage': {
            'data_dir': str(tmp_path / 'Data'),
            'scratch_dir': str(tmp_path / 'tmp')
        },
        'logging': {'file': None}
    }
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump(config))
    yield str(path)
    clear_stores()


class TestLoadConfig:

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(str(tmp_path / 'missing.yaml')) == DEFAULT_CONFIG

    def test_overrides_are_merged(self, config_path, tmp_path):
        config = load_config(config_path)
        assert config['storage']['data_dir'] == str(tmp_path / 'Data')
        assert config['storage']['snapshot_file'] == 'data_library.json'
        assert config['vectorizer'] == DEFAULT_CONFIG['vectorizer']

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / 'broken.yaml'
        path.write_text('storage: [unclosed')
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_defaults_are_not_shared(self, tmp_path):
        config = load_config(str(tmp_path / 'missing.yaml'))
        config['storage']['data_dir'] = 'elsewhere'
        assert DEFAULT_CONFIG['storage']['data_dir'] == 'Data'


class TestCommandLine:

    def test_train_arguments(self):
        args = build_parser().parse_args(['train', 'John', 'Doe', 'a.png', 'b.png'])
        assert args.command == 'train'
        assert args.images == ['a.png', 'b.png']

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_list_on_empty_library(self, config_path, tmp_path, capsys):
        assert main(['--config', config_path, 'list']) == 0

        assert 'Known identities (0)' in capsys.readouterr().out
        assert (tmp_path / 'Data' / 'data_library.json').exists()
