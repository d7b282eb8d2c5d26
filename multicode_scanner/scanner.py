"""
Multi-code scanning entry points.

scan_all(source) is the one call most users need: it materializes the image,
runs the QR channel (full frame, then overlapping tiles) and the barcode
channel (multi-result pass, then single-result fallbacks), and returns the
deduplicated findings in first-seen order.

A failure inside a single tile or configuration only costs that attempt.
Only an unreadable source aborts the call.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional

from .aggregator import ResultAggregator
from .barcode_decoder import BarcodeDecoder, get_barcode_decoder
from .confidence import average_error, is_confident
from .config import ScanOptions
from .errors import ScanError
from .models import CodeKind, DecoderConfig, PatchSize, ScanResult, TileRegion
from .qr_decoder import decode_qr
from .raster import ImageSource, RasterBuffer, materialize
from .tiling import barcode_configs, qr_attempt_regions

logger = logging.getLogger(__name__)

QRDecoder = Callable[[RasterBuffer], Optional[str]]


@dataclass
class ScanOutcome:
	source: Any
	results: List[ScanResult] = field(default_factory=list)
	error: Optional[ScanError] = None


def _qr_attempt(raster: RasterBuffer, region: TileRegion, decoder: QRDecoder) -> Optional[str]:
	try:
		if region.width == raster.width and region.height == raster.height:
			view = raster
		else:
			view = raster.crop(region)
		return decoder(view) or None
	except Exception as exc:
		logger.debug(f"QR attempt at {region} failed: {exc!r}")
		return None


def _run_qr_channel(raster: RasterBuffer, aggregator: ResultAggregator, decoder: QRDecoder, workers: int) -> None:
	regions = qr_attempt_regions(raster.width, raster.height)
	if workers > 1:
		with ThreadPoolExecutor(max_workers=workers) as pool:
			payloads = list(pool.map(lambda r: _qr_attempt(raster, r, decoder), regions))
	else:
		payloads = [_qr_attempt(raster, r, decoder) for r in regions]
	# Added in scan order so threaded runs report like sequential ones
	for region, payload in zip(regions, payloads):
		if payload and aggregator.add(payload, CodeKind.QR):
			logger.debug(f"QR {payload!r} found at {region}")


def _barcode_attempt(raster: RasterBuffer, config: DecoderConfig, decoder: BarcodeDecoder) -> List[str]:
	try:
		candidates = decoder(raster, config)
	except Exception as exc:
		logger.debug(f"barcode attempt {PatchSize(config.patch_size).value}/half={config.half_sample} failed: {exc!r}")
		return []
	accepted: List[str] = []
	for c in candidates:
		if not c.code:
			continue
		if is_confident(c):
			accepted.append(c.code)
		else:
			logger.debug(f"rejected barcode {c.code!r}: average symbol error {average_error(c.symbol_errors):.2f}")
	return accepted


def _run_barcode_channel(
	raster: RasterBuffer, aggregator: ResultAggregator, decoder: BarcodeDecoder, readers
) -> None:
	multi, fallbacks = barcode_configs(readers)
	for config in [multi, *fallbacks]:
		codes = _barcode_attempt(raster, config, decoder)
		if codes:
			for code in codes:
				aggregator.add(code, CodeKind.BARCODE)
			return


def scan_raster(
	raster: RasterBuffer,
	options: Optional[ScanOptions] = None,
	qr_decoder: Optional[QRDecoder] = None,
	barcode_decoder: Optional[BarcodeDecoder] = None,
) -> List[ScanResult]:
	"""Run both detection channels over an already materialized raster."""
	opts = (options or ScanOptions()).validate()
	qr_decoder = qr_decoder or decode_qr
	barcode_decoder = barcode_decoder or get_barcode_decoder(opts.barcode_backend)

	aggregator = ResultAggregator()
	_run_qr_channel(raster, aggregator, qr_decoder, opts.workers)
	_run_barcode_channel(raster, aggregator, barcode_decoder, opts.readers)
	results = aggregator.to_list()
	logger.info(f"found {len(results)} code(s) in {raster.width}x{raster.height} image")
	return results


def scan_all(
	source: ImageSource,
	options: Optional[ScanOptions] = None,
	qr_decoder: Optional[QRDecoder] = None,
	barcode_decoder: Optional[BarcodeDecoder] = None,
) -> List[ScanResult]:
	"""Find every QR code and 1-D barcode in one image.

	Raises UnreadableImage/InvalidRaster when the source cannot be turned into
	pixels. An image without codes returns an empty list.
	"""
	raster = materialize(source)
	return scan_raster(raster, options, qr_decoder=qr_decoder, barcode_decoder=barcode_decoder)


def scan_many(
	sources: Iterable[ImageSource],
	options: Optional[ScanOptions] = None,
	max_workers: Optional[int] = None,
	**decoders,
) -> List[ScanOutcome]:
	"""Scan independent images concurrently, one outcome per source in input order.

	An unreadable source is reported on its own outcome and does not affect the
	others.
	"""
	opts = (options or ScanOptions()).validate()
	sources = list(sources)

	def _one(src: ImageSource) -> ScanOutcome:
		try:
			return ScanOutcome(source=src, results=scan_all(src, opts, **decoders))
		except ScanError as exc:
			logger.info(f"skipping unreadable source: {exc}")
			return ScanOutcome(source=src, error=exc)

	if not sources:
		return []
	with ThreadPoolExecutor(max_workers=max_workers) as pool:
		return list(pool.map(_one, sources))
