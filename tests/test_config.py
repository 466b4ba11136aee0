from pathlib import Path

import pytest

from mediaserve import config
from mediaserve.__main__ import checkDirectory, configure, main, options
from mediaserve.config import ConfigError, MediaConfig
from mediaserve.utils.json import unjson


def test_defaults():
	cfg = MediaConfig()
	assert cfg.host == config.HOST
	assert cfg.port == config.PORT
	assert cfg.root == Path(config.ROOT)
	assert cfg.name == config.NAME
	assert cfg.cacheMaxAge == config.CACHE_MAX_AGE
	assert config.validate(cfg) is cfg


def test_validate():
	for cfg in (
		MediaConfig(port=0),
		MediaConfig(port=65536),
		MediaConfig(host=""),
		MediaConfig(cacheMaxAge=-1),
	):
		with pytest.raises(ConfigError):
			config.validate(cfg)
	assert config.validate(MediaConfig(port=1)).port == 1
	assert config.validate(MediaConfig(port=65535)).port == 65535


def test_save_load(tmp_path: Path):
	path = config.save(
		MediaConfig(host="127.0.0.1", port=9000, root=Path("/srv/media"), name="Home"),
		tmp_path / "conf" / "mediaserve.json",
	)
	data = unjson(path.read_bytes())
	assert data == {
		"server": {"host": "127.0.0.1", "port": 9000},
		"media": {
			"directory": "/srv/media",
			"name": "Home",
			"cache_max_age": config.CACHE_MAX_AGE,
		},
	}
	cfg = config.load(path)
	assert (cfg.host, cfg.port, cfg.root, cfg.name) == (
		"127.0.0.1",
		9000,
		Path("/srv/media"),
		"Home",
	)


def test_load_partial(tmp_path: Path):
	path = tmp_path / "partial.json"
	path.write_text('{"server": {"port": 9090}}')
	cfg = config.load(path, MediaConfig(host="10.0.0.1"))
	assert cfg.port == 9090
	assert cfg.host == "10.0.0.1"


def test_load_errors(tmp_path: Path):
	with pytest.raises(ConfigError):
		config.load(tmp_path / "missing.json")
	for content in (
		"{not json",
		"[1, 2]",
		'{"server": {"port": "eighty"}}',
		'{"server": []}',
		'{"media": {"directory": ""}}',
	):
		path = tmp_path / "bad.json"
		path.write_text(content)
		with pytest.raises(ConfigError):
			config.load(path)


def test_command_line(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
	monkeypatch.delenv("HOST", raising=False)
	path = tmp_path / "mediaserve.json"
	cfg = configure(options(["-c", str(path), "-d", str(tmp_path), "-p", "9001"]))
	# A missing configuration file is created with the defaults
	assert path.exists()
	assert cfg.port == 9001
	assert cfg.root == tmp_path
	assert cfg.host == config.HOST
	with pytest.raises(ConfigError):
		configure(options(["-p", "70000"]))
	with pytest.raises(ConfigError):
		configure(options(["-d", ""]))


def test_check_directory(tmp_path: Path):
	assert checkDirectory(tmp_path) == tmp_path
	created = checkDirectory(tmp_path / "new" / "media")
	assert created.is_dir()
	(tmp_path / "file.txt").write_text("")
	with pytest.raises(ConfigError):
		checkDirectory(tmp_path / "file.txt")

def test_environment():
	cfg = MediaConfig.FromEnvironment(
		{
			"HOST": "127.0.0.1",
			"PORT": "9002",
			"MEDIASERVE_ROOT": "/srv/media",
			"MEDIASERVE_CACHE_MAX_AGE": "60",
			"MEDIASERVE_LOG_REQUESTS": "0",
		}
	)
	assert (cfg.host, cfg.port, cfg.root, cfg.cacheMaxAge) == (
		"127.0.0.1",
		9002,
		Path("/srv/media"),
		60,
	)
	assert cfg.name == config.NAME
	assert not cfg.logRequests
	assert MediaConfig.FromEnvironment({}) == MediaConfig()
	for name in ("PORT", "MEDIASERVE_CACHE_MAX_AGE"):
		with pytest.raises(ConfigError):
			MediaConfig.FromEnvironment({name: "eighty"})


def test_environment_errors(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv("PORT", "eighty")
	assert main([]) == 1


# EOF
