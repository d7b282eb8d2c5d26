"""
1-D barcode decoding.

Both backends share one contract: a RasterBuffer plus a DecoderConfig go in,
a list of BarcodeCandidate comes out. The adapter owns the conversion from the
RGBA raster to the grayscale array each library expects, and the resampling
that gives each configuration its detector geometry.

- zxing-cpp (default): reports checksum-failed reads when asked, which we turn
  into per-symbol errors for the confidence filter.
- pyzbar (optional): ZBar only returns verified reads, so no error channel.
"""

import functools
import logging
import operator
from typing import Callable, Dict, List, Sequence

import cv2
import numpy as np
import zxingcpp

# Optional second backend
try:
	from pyzbar.pyzbar import ZBarSymbol, decode as zbar_decode  # type: ignore
except Exception:
	ZBarSymbol = None  # type: ignore
	zbar_decode = None  # type: ignore

from .errors import ConfigError, InvalidRaster
from .models import BarcodeCandidate, DecoderConfig, PatchSize
from .raster import RasterBuffer

logger = logging.getLogger(__name__)

BarcodeDecoder = Callable[[RasterBuffer, DecoderConfig], List[BarcodeCandidate]]

ZXING_READERS = {
	"code_128": zxingcpp.BarcodeFormat.Code128,
	"ean_13": zxingcpp.BarcodeFormat.EAN13,
	"ean_8": zxingcpp.BarcodeFormat.EAN8,
	"code_39": zxingcpp.BarcodeFormat.Code39,
	"code_93": zxingcpp.BarcodeFormat.Code93,
	"upc_a": zxingcpp.BarcodeFormat.UPCA,
	"upc_e": zxingcpp.BarcodeFormat.UPCE,
	"codabar": zxingcpp.BarcodeFormat.Codabar,
	"i2of5": zxingcpp.BarcodeFormat.ITF,
}

# pyzbar.ZBarSymbol member names
ZBAR_READERS = {
	"code_128": "CODE128",
	"ean_13": "EAN13",
	"ean_8": "EAN8",
	"code_39": "CODE39",
	"code_93": "CODE93",
	"upc_a": "UPCA",
	"upc_e": "UPCE",
	"codabar": "CODABAR",
	"i2of5": "I25",
}

FRIENDLY_FORMAT = {
	"BarcodeFormat.UPCA": "UPC-A",
	"BarcodeFormat.UPCE": "UPC-E",
	"BarcodeFormat.EAN13": "EAN-13",
	"BarcodeFormat.EAN8": "EAN-8",
	"BarcodeFormat.Code128": "Code 128",
	"BarcodeFormat.Code39": "Code 39",
	"BarcodeFormat.Code93": "Code 93",
	"BarcodeFormat.Codabar": "Codabar",
	"BarcodeFormat.ITF": "ITF",
}

ZBAR_FRIENDLY = {
	"CODE128": "Code 128",
	"EAN13": "EAN-13",
	"EAN8": "EAN-8",
	"UPCA": "UPC-A",
	"UPCE": "UPC-E",
	"CODE39": "Code 39",
	"CODE93": "Code 93",
	"CODABAR": "Codabar",
	"I25": "ITF",
}

# Larger patch == coarser view of the frame
PATCH_SCALE: Dict[PatchSize, float] = {
	PatchSize.X_LARGE: 0.75,
	PatchSize.LARGE: 1.0,
	PatchSize.MEDIUM: 1.25,
	PatchSize.SMALL: 1.5,
}

MAX_WORKING_SIDE = 2400


def check_readers(readers: Sequence[str]) -> None:
	if not readers:
		raise ConfigError("at least one barcode reader is required")
	unknown = [r for r in readers if r not in ZXING_READERS]
	if unknown:
		raise ConfigError(f"unknown barcode readers: {', '.join(unknown)}")


def _zxing_formats(readers: Sequence[str]):
	check_readers(readers)
	return functools.reduce(operator.or_, (ZXING_READERS[r] for r in readers))


def _friendly_format(fmt_obj) -> str:
	text = str(fmt_obj)
	return FRIENDLY_FORMAT.get(text, text.replace("BarcodeFormat.", ""))


def _working_image(buffer: RasterBuffer, config: DecoderConfig) -> np.ndarray:
	"""Grayscale copy of `buffer` resampled to the configured detector geometry."""
	if not isinstance(buffer, RasterBuffer):
		raise InvalidRaster(f"expected a RasterBuffer, got {type(buffer).__name__}")
	gray = buffer.to_gray()
	scale = PATCH_SCALE[PatchSize(config.patch_size)]
	if config.half_sample:
		scale *= 0.5
	h, w = gray.shape[:2]
	if scale > 1.0:
		scale = min(scale, max(1.0, MAX_WORKING_SIDE / float(max(w, h))))
	if scale == 1.0:
		return gray
	new_w, new_h = max(1, int(round(w * scale))), max(1, int(round(h * scale)))
	interp = cv2.INTER_AREA if scale < 1.0 else cv2.INTER_LINEAR
	return cv2.resize(gray, (new_w, new_h), interpolation=interp)


def _read_barcodes_with_opts(arr: np.ndarray, formats):
	try:
		return zxingcpp.read_barcodes(arr, formats=formats, return_errors=True)
	except TypeError:
		# Older bindings without return_errors
		return zxingcpp.read_barcodes(arr, formats=formats)


def _to_candidates(results) -> List[BarcodeCandidate]:
	candidates: List[BarcodeCandidate] = []
	for r in results:
		text = r.text or ""
		if not text:
			continue
		valid = getattr(r, "valid", True)
		# A read that failed its checksum gives no trustworthy symbol
		errors = () if valid else (1.0,) * len(text)
		candidates.append(BarcodeCandidate(code=text, symbology=_friendly_format(r.format), symbol_errors=errors))
	# Checksum-valid reads first; sort is stable so detection order is kept otherwise
	candidates.sort(key=lambda c: bool(c.symbol_errors))
	return candidates


def decode_barcodes(buffer: RasterBuffer, config: DecoderConfig) -> List[BarcodeCandidate]:
	"""Decode 1-D barcodes in `buffer` with zxing-cpp.

	With `config.multiple` every symbol found is returned, otherwise at most the
	single best one.
	"""
	formats = _zxing_formats(config.readers)
	arr = _working_image(buffer, config)
	candidates = _to_candidates(_read_barcodes_with_opts(arr, formats))
	logger.debug(
		f"zxing {PatchSize(config.patch_size).value}/half={config.half_sample} on {arr.shape[1]}x{arr.shape[0]}: "
		f"{len(candidates)} candidate(s)"
	)
	return candidates if config.multiple else candidates[:1]


def decode_barcodes_zbar(buffer: RasterBuffer, config: DecoderConfig) -> List[BarcodeCandidate]:
	"""Same contract as decode_barcodes, backed by ZBar."""
	if zbar_decode is None:
		raise ConfigError("the zbar backend needs pyzbar (pip install pyzbar)")
	check_readers(config.readers)
	symbols = [getattr(ZBarSymbol, ZBAR_READERS[r]) for r in config.readers]
	arr = _working_image(buffer, config)
	decoded = sorted(zbar_decode(arr, symbols=symbols), key=lambda r: -(getattr(r, "quality", 0) or 0))
	candidates: List[BarcodeCandidate] = []
	for r in decoded:
		val = r.data.decode(errors="ignore").strip()
		if not val:
			continue
		candidates.append(BarcodeCandidate(code=val, symbology=ZBAR_FRIENDLY.get(r.type, r.type)))
	logger.debug(
		f"zbar {PatchSize(config.patch_size).value}/half={config.half_sample}: {len(candidates)} candidate(s)"
	)
	return candidates if config.multiple else candidates[:1]


def get_barcode_decoder(name: str) -> BarcodeDecoder:
	if name == "zxing":
		return decode_barcodes
	if name == "zbar":
		if zbar_decode is None:
			raise ConfigError("the zbar backend needs pyzbar (pip install pyzbar)")
		return decode_barcodes_zbar
	raise ConfigError(f"unknown barcode backend {name!r} (expected 'zxing' or 'zbar')")
