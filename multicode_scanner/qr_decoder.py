from typing import Optional

import zxingcpp

from .errors import InvalidRaster
from .raster import RasterBuffer


def decode_qr(buffer: RasterBuffer) -> Optional[str]:
	"""Return the text of one QR code found in `buffer`, or None.

	zxing-cpp verifies the Reed-Solomon error correction itself, so whatever
	comes back is an exact decode.
	"""
	if not isinstance(buffer, RasterBuffer):
		raise InvalidRaster(f"expected a RasterBuffer, got {type(buffer).__name__}")
	gray = buffer.to_gray()
	result = zxingcpp.read_barcode(gray, formats=zxingcpp.BarcodeFormat.QRCode)
	if result is None or not result.text:
		return None
	return result.text
