"""
Attempt planning for one raster.

QR: the QR primitive returns a single code per call and a second code in the
same view can spoil the read, so after the full frame we walk two overlapping
grids (halves and thirds, 50% overlap). Any code smaller than a tile lands
whole inside at least one tile.

Barcodes: one multi-result pass over the full frame, then a fixed list of
single-result detector geometries tried in order until one yields a
confident read.
"""

from dataclasses import replace
from typing import List, Sequence, Tuple

from .models import DEFAULT_READERS, DecoderConfig, PatchSize, TileRegion

GRID_FACTORS: Tuple[int, ...] = (2, 3)

MULTI_CONFIG = DecoderConfig(patch_size=PatchSize.LARGE, half_sample=False, multiple=True)

FALLBACK_CONFIGS: Tuple[DecoderConfig, ...] = (
	DecoderConfig(patch_size=PatchSize.X_LARGE, half_sample=False, multiple=False),
	DecoderConfig(patch_size=PatchSize.LARGE, half_sample=False, multiple=False),
	DecoderConfig(patch_size=PatchSize.LARGE, half_sample=True, multiple=False),
	DecoderConfig(patch_size=PatchSize.MEDIUM, half_sample=False, multiple=False),
	DecoderConfig(patch_size=PatchSize.MEDIUM, half_sample=True, multiple=False),
	DecoderConfig(patch_size=PatchSize.SMALL, half_sample=False, multiple=False),
)


def _axis_positions(dim: int, tile: int, stride: int) -> List[int]:
	count = (dim - tile) // stride + 1
	return [i * stride for i in range(count)]


def qr_tile_regions(width: int, height: int, factors: Sequence[int] = GRID_FACTORS) -> List[TileRegion]:
	"""Overlapping grid tiles for each factor, row-major within a factor."""
	regions: List[TileRegion] = []
	for g in factors:
		tile_w, tile_h = width // g, height // g
		stride_x, stride_y = tile_w // 2, tile_h // 2
		# Image too small for this grid. Floor division can leave up to g-1 edge pixels uncovered.
		if stride_x < 1 or stride_y < 1:
			continue
		for y in _axis_positions(height, tile_h, stride_y):
			for x in _axis_positions(width, tile_w, stride_x):
				regions.append(TileRegion(x=x, y=y, width=tile_w, height=tile_h))
	return regions


def qr_attempt_regions(width: int, height: int) -> List[TileRegion]:
	"""Full frame first, then the grid tiles."""
	return [TileRegion(x=0, y=0, width=width, height=height)] + qr_tile_regions(width, height)


def barcode_configs(readers: Sequence[str] = DEFAULT_READERS) -> Tuple[DecoderConfig, List[DecoderConfig]]:
	"""The multi-result configuration and the ordered single-result fallbacks."""
	readers = tuple(readers)
	return (
		replace(MULTI_CONFIG, readers=readers),
		[replace(c, readers=readers) for c in FALLBACK_CONFIGS],
	)
