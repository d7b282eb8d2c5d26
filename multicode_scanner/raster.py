"""
Image materialization.

Turns whatever the caller hands us (encoded bytes, a path, a data URL, a file
object or an open Pillow image) into a RasterBuffer: a native-resolution RGBA
pixel grid backed by a read-only numpy array.
"""

import base64
import binascii
import io
import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Union
from urllib.parse import unquote_to_bytes

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import InvalidRaster, UnreadableImage
from .models import TileRegion

# Register HEIC/HEIF with Pillow if available
try:
	import pillow_heif  # type: ignore
	pillow_heif.register_heif_opener()
except Exception:
	pillow_heif = None  # type: ignore

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]", BinaryIO, Image.Image]

_PIL_ERRORS = (UnidentifiedImageError, OSError, EOFError, SyntaxError, Image.DecompressionBombError)


@dataclass(frozen=True, eq=False)
class RasterBuffer:
	width: int
	height: int
	# (height, width, 4) uint8 RGBA, read-only
	pixels: np.ndarray

	def __post_init__(self) -> None:
		if self.width <= 0 or self.height <= 0:
			raise InvalidRaster(f"raster needs positive dimensions, got {self.width}x{self.height}")
		if not isinstance(self.pixels, np.ndarray) or self.pixels.dtype != np.uint8:
			raise InvalidRaster("raster pixels must be a uint8 numpy array")
		if self.pixels.shape != (self.height, self.width, 4):
			raise InvalidRaster(
				f"raster pixels have shape {self.pixels.shape}, expected {(self.height, self.width, 4)}"
			)
		self.pixels.flags.writeable = False

	@classmethod
	def from_image(cls, img: Image.Image) -> "RasterBuffer":
		arr = np.array(img.convert("RGBA"), dtype=np.uint8)
		if arr.ndim != 3:
			raise InvalidRaster(f"image {img.size} produced an empty pixel grid")
		height, width = arr.shape[:2]
		return cls(width=width, height=height, pixels=arr)

	def crop(self, region: TileRegion) -> "RasterBuffer":
		"""Return a new buffer owning a copy of `region`."""
		if (
			region.x < 0 or region.y < 0
			or region.width <= 0 or region.height <= 0
			or region.x + region.width > self.width
			or region.y + region.height > self.height
		):
			raise InvalidRaster(f"{region} lies outside a {self.width}x{self.height} raster")
		block = self.pixels[region.y:region.y + region.height, region.x:region.x + region.width]
		return RasterBuffer(width=region.width, height=region.height, pixels=block.copy())

	def to_gray(self) -> np.ndarray:
		return cv2.cvtColor(self.pixels, cv2.COLOR_RGBA2GRAY)


def _decode_data_url(url: str) -> bytes:
	header, sep, payload = url.partition(",")
	if not sep or not header.lower().startswith("data:image/"):
		raise UnreadableImage("data URL does not carry an image")
	if header.lower().endswith(";base64"):
		try:
			return base64.b64decode(payload, validate=True)
		except (binascii.Error, ValueError) as exc:
			raise UnreadableImage("data URL has an invalid base64 payload") from exc
	return unquote_to_bytes(payload)


def _read_source(source: ImageSource) -> bytes:
	if isinstance(source, (bytes, bytearray, memoryview)):
		return bytes(source)
	if isinstance(source, str) and source[:5].lower() == "data:":
		return _decode_data_url(source)
	if isinstance(source, (str, os.PathLike)):
		try:
			with open(source, "rb") as fh:
				return fh.read()
		except OSError as exc:
			raise UnreadableImage(f"cannot read image file {os.fspath(source)!r}: {exc}") from exc
	if hasattr(source, "read"):
		try:
			data = source.read()
		except OSError as exc:
			raise UnreadableImage(f"cannot read image stream: {exc}") from exc
		if isinstance(data, str):
			raise UnreadableImage("image stream must be opened in binary mode")
		return bytes(data)
	raise UnreadableImage(f"unsupported image source type: {type(source).__name__}")


def materialize(source: ImageSource) -> RasterBuffer:
	"""Decode `source` into an RGBA RasterBuffer at native resolution.

	Only the first frame of animated containers is used. EXIF orientation is
	applied so photos come out the way they are displayed.

	Raises UnreadableImage when the input is empty, missing, corrupt or in an
	unsupported format.
	"""
	if isinstance(source, Image.Image):
		try:
			return RasterBuffer.from_image(ImageOps.exif_transpose(source))
		except InvalidRaster:
			raise
		except (ValueError, *_PIL_ERRORS) as exc:
			raise UnreadableImage(f"cannot decode image: {exc}") from exc

	data = _read_source(source)
	if not data:
		raise UnreadableImage("image source is empty")

	try:
		with Image.open(io.BytesIO(data)) as img:
			logger.debug(f"decoding {img.format} image {img.size[0]}x{img.size[1]} mode={img.mode}")
			img.load()
			raster = RasterBuffer.from_image(ImageOps.exif_transpose(img))
	except InvalidRaster:
		raise
	except (ValueError, *_PIL_ERRORS) as exc:
		raise UnreadableImage(f"cannot decode image: {exc}") from exc
	return raster
