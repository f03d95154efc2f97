import pytest
import yaml

from finance_tracker import config


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(config.DATA_FILE_ENV, raising=False)
    cfg = config.load_config(tmp_path / 'nope.yaml')
    assert cfg == config.DEFAULT_CONFIG
    cfg['sections']['income'] = 'Changed'
    assert config.DEFAULT_CONFIG['sections']['income'] == 'Income'


def test_partial_file_merged_with_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(config.DATA_FILE_ENV, raising=False)
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({'data_file': 'mine.txt', 'sections': {'expense': 'Spending'}}))

    cfg = config.load_config(path)

    assert cfg['data_file'] == 'mine.txt'
    assert cfg['users_file'] == 'users.yaml'
    assert cfg['sections'] == {
        'expense': 'Spending',
        'transactions': 'Transactions',
        'income': 'Income',
    }


def test_env_overrides_data_file(tmp_path, monkeypatch):
    monkeypatch.setenv(config.DATA_FILE_ENV, str(tmp_path / 'env.txt'))
    assert config.load_config(None)['data_file'] == str(tmp_path / 'env.txt')


def test_non_mapping_config_rejected(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('- just\n- a list\n')
    with pytest.raises(ValueError):
        config.load_config(path)


def test_save_and_reload(tmp_path, monkeypatch):
    monkeypatch.delenv(config.DATA_FILE_ENV, raising=False)
    path = tmp_path / 'sub' / 'config.yaml'
    config.save_config({'data_file': 'x.txt'}, path)
    assert config.load_config(path)['data_file'] == 'x.txt'
