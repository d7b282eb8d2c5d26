from multicode_scanner.models import DEFAULT_READERS, PatchSize, TileRegion
from multicode_scanner.tiling import (
	FALLBACK_CONFIGS,
	barcode_configs,
	qr_attempt_regions,
	qr_tile_regions,
)


def test_square_image_gets_three_by_three_then_five_by_five():
	regions = qr_tile_regions(100, 100)
	halves = [r for r in regions if r.width == 50]
	thirds = [r for r in regions if r.width == 33]
	assert len(halves) == 9
	assert len(thirds) == 25
	assert regions[:9] == halves
	assert halves[0] == TileRegion(0, 0, 50, 50)
	assert halves[-1] == TileRegion(50, 50, 50, 50)
	assert sorted({r.x for r in thirds}) == [0, 16, 32, 48, 64]


def test_tiles_are_row_major():
	regions = qr_tile_regions(100, 100, factors=(2,))
	assert [(r.x, r.y) for r in regions[:4]] == [(0, 0), (25, 0), (50, 0), (0, 25)]


def test_non_square_image_uses_per_axis_tiles():
	regions = qr_tile_regions(400, 200, factors=(2,))
	assert {(r.width, r.height) for r in regions} == {(200, 100)}
	assert sorted({r.x for r in regions}) == [0, 100, 200]
	assert sorted({r.y for r in regions}) == [0, 50, 100]


def test_tiles_stay_inside_the_image():
	for w, h in [(100, 100), (301, 157), (1920, 1080), (7, 5)]:
		for r in qr_tile_regions(w, h):
			assert r.x >= 0 and r.y >= 0
			assert r.x + r.width <= w
			assert r.y + r.height <= h


def test_tiny_image_skips_grids():
	assert qr_tile_regions(3, 3) == []
	assert qr_tile_regions(1, 500) == []
	# Halves fit, thirds do not
	assert {r.width for r in qr_tile_regions(5, 5)} == {2}


def test_any_half_tile_sized_code_lies_inside_some_tile():
	w = h = 120
	tiles = qr_tile_regions(w, h, factors=(2,))
	side = 30
	for y in range(0, h - side + 1):
		for x in range(0, w - side + 1):
			assert any(
				t.x <= x and t.y <= y and x + side <= t.x + t.width and y + side <= t.y + t.height
				for t in tiles
			), (x, y)


def test_full_frame_is_attempted_first():
	regions = qr_attempt_regions(640, 480)
	assert regions[0] == TileRegion(0, 0, 640, 480)
	assert regions[1:] == qr_tile_regions(640, 480)


def test_barcode_configs_order():
	multi, fallbacks = barcode_configs()
	assert (multi.patch_size, multi.half_sample, multi.multiple) == (PatchSize.LARGE, False, True)
	assert [(c.patch_size, c.half_sample) for c in fallbacks] == [
		(PatchSize.X_LARGE, False),
		(PatchSize.LARGE, False),
		(PatchSize.LARGE, True),
		(PatchSize.MEDIUM, False),
		(PatchSize.MEDIUM, True),
		(PatchSize.SMALL, False),
	]
	assert not any(c.multiple for c in fallbacks)
	assert multi.readers == DEFAULT_READERS


def test_barcode_configs_carry_reader_set():
	multi, fallbacks = barcode_configs(["ean_13"])
	assert multi.readers == ("ean_13",)
	assert all(c.readers == ("ean_13",) for c in fallbacks)
	# The module-level list is left alone
	assert FALLBACK_CONFIGS[0].readers == DEFAULT_READERS


def test_odd_width_leaves_edge_pixel_outside_two_by_two_grid():
	halves = qr_tile_regions(101, 100, factors=(2,))
	assert max(r.x + r.width for r in halves) == 100
	assert len(halves) == 9
