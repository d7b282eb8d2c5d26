import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from dotenv import load_dotenv

from .barcode_decoder import check_readers, get_barcode_decoder
from .errors import ConfigError
from .models import DEFAULT_READERS

ENV_WORKERS = "MULTICODE_WORKERS"
ENV_BACKEND = "MULTICODE_BARCODE_BACKEND"
ENV_READERS = "MULTICODE_READERS"
ENV_LOG_LEVEL = "MULTICODE_LOG_LEVEL"


@dataclass(frozen=True)
class ScanOptions:
	# Threads used for QR tile attempts; 1 runs them inline
	workers: int = 1
	barcode_backend: str = "zxing"
	readers: Tuple[str, ...] = DEFAULT_READERS

	def validate(self) -> "ScanOptions":
		if self.workers < 1:
			raise ConfigError(f"workers must be >= 1, got {self.workers}")
		check_readers(self.readers)
		get_barcode_decoder(self.barcode_backend)
		return self


def _load_env_chain() -> None:
	load_dotenv()
	if os.path.exists(".env.local"):
		load_dotenv(dotenv_path=".env.local", override=True)
	elif os.path.exists("env.local"):
		load_dotenv(dotenv_path="env.local", override=True)


def parse_readers(text: str) -> Tuple[str, ...]:
	return tuple(r.strip() for r in text.split(",") if r.strip())


def _env_int(name: str) -> Optional[int]:
	raw = os.environ.get(name, "").strip()
	if not raw:
		return None
	try:
		return int(raw)
	except ValueError as exc:
		raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def load_options(
	workers: Optional[int] = None,
	barcode_backend: Optional[str] = None,
	readers: Optional[Tuple[str, ...]] = None,
) -> ScanOptions:
	"""Build ScanOptions from .env files and MULTICODE_* variables.

	Explicit arguments win over the environment.
	"""
	_load_env_chain()
	opts = ScanOptions()
	env_workers = _env_int(ENV_WORKERS)
	if env_workers is not None:
		opts = replace(opts, workers=env_workers)
	env_backend = os.environ.get(ENV_BACKEND, "").strip()
	if env_backend:
		opts = replace(opts, barcode_backend=env_backend.lower())
	env_readers = os.environ.get(ENV_READERS, "").strip()
	if env_readers:
		opts = replace(opts, readers=parse_readers(env_readers))

	if workers is not None:
		opts = replace(opts, workers=workers)
	if barcode_backend is not None:
		opts = replace(opts, barcode_backend=barcode_backend)
	if readers is not None:
		opts = replace(opts, readers=tuple(readers))
	return opts.validate()
