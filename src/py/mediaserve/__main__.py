import argparse
import os
import sys
from pathlib import Path

from . import __version__, config
from .config import ConfigError, MediaConfig
from .server import run
from .services.media import MediaService
from .utils.logging import error, info

DEFAULT_CONFIG: str = "mediaserve.json"


def checkDirectory(path: Path) -> Path:
	"""Ensures the media directory exists and can be listed, creating it when
	missing. Returns its absolute path, raises `ConfigError` otherwise."""
	p: Path = Path(os.path.abspath(path))
	if not p.exists():
		info("Media directory does not exist, creating it", Path=str(p))
		try:
			p.mkdir(parents=True)
		except OSError as e:
			raise ConfigError(f"Unable to create media directory {p}: {e}") from e
		return p
	if not p.is_dir():
		raise ConfigError(f"Media path is not a directory: {p}")
	try:
		count: int = len(os.listdir(p))
	except OSError as e:
		raise ConfigError(f"Media directory is not readable: {e}") from e
	info("Media directory validated", Path=str(p), Items=count)
	return p


def options(args: list[str] | None = None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(
		prog="mediaserve",
		description=f"HTTP Media Server v{__version__}",
	)
	parser.add_argument(
		"-c",
		"--config",
		action="store",
		dest="config",
		help="Path to a JSON configuration file, created with the defaults when missing",
	)
	parser.add_argument(
		"-d",
		"--directory",
		action="store",
		dest="directory",
		help=f"The media directory to serve (default: {config.ROOT})",
	)
	parser.add_argument(
		"-H",
		"--host",
		action="store",
		dest="host",
		help=f"Specifies the host (default: {config.HOST})",
	)
	parser.add_argument(
		"-p",
		"--port",
		action="store",
		dest="port",
		type=int,
		help=f"Specifies the port (default: {config.PORT})",
	)
	parser.add_argument(
		"--gen-config",
		action="store_true",
		dest="genConfig",
		help=f"Generates a default configuration file (at {DEFAULT_CONFIG} unless -c is given)",
	)
	parser.add_argument(
		"--version",
		action="version",
		version=f"HTTP Media Server v{__version__}",
	)
	return parser.parse_args(args=args)


def configure(opts: argparse.Namespace) -> MediaConfig:
	"""Creates the configuration from the environment defaults, then the
	configuration file, then the command line options."""
	res: MediaConfig = MediaConfig.FromEnvironment()
	if opts.config:
		if not os.path.exists(opts.config):
			info("Configuration file not found, creating it", Path=opts.config)
			config.generate(opts.config)
		res = config.load(opts.config, res)
		info("Configuration loaded", Path=opts.config)
	if opts.directory is not None:
		res = res._replace(root=config.asRoot(opts.directory))
	if opts.host is not None:
		res = res._replace(host=opts.host)
	if opts.port is not None:
		res = res._replace(port=opts.port)
	return config.validate(res)


def main(args: list[str] | None = None) -> int:
	opts = options(args)
	try:
		if opts.genConfig:
			path = config.generate(opts.config or DEFAULT_CONFIG)
			info("Default configuration file generated", Path=str(path))
			return 0
		cfg: MediaConfig = configure(opts)
		cfg = cfg._replace(root=checkDirectory(cfg.root))
	except ConfigError as e:
		error(str(e), "CONFIG")
		return 1
	info(
		f"HTTP Media Server v{__version__} starting",
		Host=cfg.host,
		Port=cfg.port,
		Root=str(cfg.root),
	)
	run(
		MediaService(cfg),
		host=cfg.host,
		port=cfg.port,
		logRequests=cfg.logRequests,
	)
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF
