class ScanError(Exception):
	"""Base class for every error raised by multicode_scanner."""


class UnreadableImage(ScanError):
	"""The image container could not be decoded (empty, corrupt or unsupported)."""


class InvalidRaster(ScanError, ValueError):
	"""A pixel buffer has zero dimensions or an unexpected layout."""


class ConfigError(ScanError, ValueError):
	"""Options or environment values are invalid, or a backend is unavailable."""
