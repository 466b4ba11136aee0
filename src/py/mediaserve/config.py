import os
from pathlib import Path
from typing import Any, Mapping, NamedTuple

from .utils.json import json, unjson

# --
# == Configuration
#
# Defaults come from the environment, and can be overridden by a JSON
# configuration file and then by command line options. The resulting
# `MediaConfig` is immutable and passed explicitly to the service.

# By default the server is accessible from everywhere
HOST: str = "0.0.0.0"  # nosec: B104
PORT: int = 8080
ROOT: str = "./media"
NAME: str = "HTTP Media Server"
CACHE_MAX_AGE: int = 3600
LOG_REQUESTS: bool = True


class ConfigError(ValueError):
	"""The configuration can't be loaded, or holds invalid values."""


def envInt(environ: Mapping[str, str], name: str, default: int) -> int:
	value: str | None = environ.get(name)
	if value is None:
		return default
	try:
		return int(value)
	except ValueError as e:
		raise ConfigError(f"Environment variable {name} is not a number: {value!r}") from e


def asRoot(directory: str | Path) -> Path:
	"""Returns the media directory as a path, rejecting empty values (which
	`Path` would otherwise take as the current directory)."""
	if not str(directory).strip():
		raise ConfigError("Media directory cannot be empty")
	return Path(directory)


class MediaConfig(NamedTuple):
	host: str = HOST
	port: int = PORT
	root: Path = Path(ROOT)
	name: str = NAME
	cacheMaxAge: int = CACHE_MAX_AGE
	logRequests: bool = LOG_REQUESTS

	def asPrimitive(self) -> dict[str, Any]:
		"""Returns the configuration in the structure of the file."""
		return {
			"server": {"host": self.host, "port": self.port},
			"media": {
				"directory": str(self.root),
				"name": self.name,
				"cache_max_age": self.cacheMaxAge,
			},
		}

	@staticmethod
	def FromEnvironment(environ: Mapping[str, str] | None = None) -> "MediaConfig":
		"""Creates a configuration from the `HOST`, `PORT` and `MEDIASERVE_*`
		environment variables, raising `ConfigError` for malformed values."""
		env: Mapping[str, str] = os.environ if environ is None else environ
		return MediaConfig(
			host=env.get("HOST", HOST),
			port=envInt(env, "PORT", PORT),
			root=asRoot(env.get("MEDIASERVE_ROOT", ROOT)),
			name=env.get("MEDIASERVE_NAME", NAME),
			cacheMaxAge=envInt(env, "MEDIASERVE_CACHE_MAX_AGE", CACHE_MAX_AGE),
			logRequests=env.get("MEDIASERVE_LOG_REQUESTS", "1") == "1",
		)

	@staticmethod
	def FromPrimitive(
		data: Any, defaults: "MediaConfig | None" = None
	) -> "MediaConfig":
		"""Creates a configuration from the structure of the file, where
		missing values are taken from `defaults`."""
		base: MediaConfig = defaults or MediaConfig()
		if not isinstance(data, dict):
			raise ConfigError(f"Configuration must be an object, got: {type(data).__name__}")
		server: Any = data.get("server", {})
		media: Any = data.get("media", {})
		if not (isinstance(server, dict) and isinstance(media, dict)):
			raise ConfigError("Configuration 'server' and 'media' must be objects")
		try:
			return base._replace(
				host=str(server.get("host", base.host)),
				port=int(server.get("port", base.port)),
				root=asRoot(media.get("directory", base.root)),
				name=str(media.get("name", base.name)),
				cacheMaxAge=int(media.get("cache_max_age", base.cacheMaxAge)),
			)
		except (TypeError, ValueError) as e:
			raise ConfigError(f"Invalid configuration value: {e}") from e


def load(path: Path | str, defaults: MediaConfig | None = None) -> MediaConfig:
	"""Loads the configuration from the JSON file at the given path."""
	try:
		with open(path, "rb") as f:
			data = unjson(f.read())
	except OSError as e:
		raise ConfigError(f"Unable to read configuration file {path}: {e}") from e
	except ValueError as e:
		raise ConfigError(f"Unable to parse configuration file {path}: {e}") from e
	return MediaConfig.FromPrimitive(data, defaults)


def save(config: MediaConfig, path: Path | str) -> Path:
	"""Saves the configuration as a JSON file at the given path."""
	p: Path = Path(path)
	try:
		p.parent.mkdir(parents=True, exist_ok=True)
		with open(p, "wb") as f:
			f.write(json(config))
			f.write(b"\n")
	except OSError as e:
		raise ConfigError(f"Unable to write configuration file {path}: {e}") from e
	return p


def generate(path: Path | str) -> Path:
	"""Writes a configuration file with the default values, as given by
	the environment."""
	return save(MediaConfig.FromEnvironment(), path)


def validate(config: MediaConfig) -> MediaConfig:
	"""Returns the configuration when valid, raises `ConfigError` otherwise."""
	if not 1 <= config.port <= 65535:
		raise ConfigError(f"Invalid port number: {config.port}")
	if not config.host:
		raise ConfigError("Host cannot be empty")
	if config.cacheMaxAge < 0:
		raise ConfigError(f"Invalid cache max age: {config.cacheMaxAge}")
	return config


# EOF
