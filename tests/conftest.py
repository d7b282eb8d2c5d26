import io

import barcode
import pytest
import qrcode
from barcode.writer import ImageWriter
from PIL import Image

from multicode_scanner.models import BarcodeCandidate


def render_qr(data: str, box_size: int = 8, border: int = 4) -> Image.Image:
	qr = qrcode.QRCode(box_size=box_size, border=border)
	qr.add_data(data)
	qr.make(fit=True)
	buf = io.BytesIO()
	qr.make_image(fill_color="black", back_color="white").save(buf)
	buf.seek(0)
	with Image.open(buf) as img:
		return img.convert("RGB")


def render_ean13(digits: str) -> Image.Image:
	code = barcode.get("ean13", digits, writer=ImageWriter())
	img = code.render({
		"write_text": False,
		"module_width": 0.25,
		"module_height": 15.0,
		"quiet_zone": 2.0,
		"dpi": 300,
	})
	return img.convert("RGB")


def on_canvas(size, *placements) -> Image.Image:
	"""White RGB canvas with each (image, (x, y)) pasted on it."""
	canvas = Image.new("RGB", size, "white")
	for img, pos in placements:
		canvas.paste(img, pos)
	return canvas


def centered(size, img: Image.Image) -> Image.Image:
	w, h = size
	return on_canvas(size, (img, ((w - img.width) // 2, (h - img.height) // 2)))


def png_bytes(img: Image.Image, fmt: str = "PNG") -> bytes:
	buf = io.BytesIO()
	img.save(buf, format=fmt)
	return buf.getvalue()


class RecordingBarcodeDecoder:
	"""Fake 1-D decoder answering from a per-call script."""

	def __init__(self, *answers):
		self.answers = list(answers)
		self.configs = []

	def __call__(self, buffer, config):
		self.configs.append(config)
		answer = self.answers.pop(0) if self.answers else []
		if isinstance(answer, Exception):
			raise answer
		return answer


@pytest.fixture
def qr_300():
	return centered((300, 300), render_qr("https://example.com"))


@pytest.fixture
def ean_400():
	return centered((400, 400), render_ean13("590123412345"))


@pytest.fixture
def blank_png():
	return png_bytes(Image.new("RGB", (320, 240), "white"))


@pytest.fixture
def candidate():
	def _make(code, errors=()):
		return BarcodeCandidate(code=code, symbology="EAN-13", symbol_errors=tuple(errors))
	return _make
