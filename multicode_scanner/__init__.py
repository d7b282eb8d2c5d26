from .aggregator import ResultAggregator
from .config import ScanOptions, load_options
from .errors import ConfigError, InvalidRaster, ScanError, UnreadableImage
from .models import BarcodeCandidate, CodeKind, DecoderConfig, PatchSize, ScanResult, TileRegion
from .raster import RasterBuffer, materialize
from .scanner import ScanOutcome, scan_all, scan_many, scan_raster

__all__ = [
	'scan_all',
	'scan_raster',
	'scan_many',
	'materialize',
	'load_options',
	'ScanOptions',
	'ScanOutcome',
	'ScanResult',
	'CodeKind',
	'RasterBuffer',
	'TileRegion',
	'DecoderConfig',
	'PatchSize',
	'BarcodeCandidate',
	'ResultAggregator',
	'ScanError',
	'UnreadableImage',
	'InvalidRaster',
	'ConfigError',
]
