from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple, Union


class CodeKind(str, Enum):
	QR = "qr"
	BARCODE = "barcode"


class PatchSize(str, Enum):
	X_LARGE = "x-large"
	LARGE = "large"
	MEDIUM = "medium"
	SMALL = "small"


# Symbologies tried by the 1-D decoder unless the caller narrows them
DEFAULT_READERS: Tuple[str, ...] = (
	"code_128",
	"ean_13",
	"ean_8",
	"code_39",
	"code_93",
	"upc_a",
	"upc_e",
	"codabar",
	"i2of5",
)


@dataclass(frozen=True)
class ScanResult:
	payload: str
	kind: CodeKind
	# POSIX timestamp (seconds) of the first sighting
	found_at: float

	def to_dict(self) -> Dict[str, Union[str, int]]:
		return {
			"data": self.payload,
			"type": self.kind.value,
			"timestamp": int(self.found_at * 1000),
		}


@dataclass(frozen=True)
class TileRegion:
	x: int
	y: int
	width: int
	height: int


@dataclass(frozen=True)
class DecoderConfig:
	patch_size: PatchSize
	half_sample: bool
	multiple: bool
	readers: Tuple[str, ...] = DEFAULT_READERS


@dataclass(frozen=True)
class BarcodeCandidate:
	code: str
	symbology: str
	# Per-symbol error estimates, 0 = perfect .. 1 = worst
	symbol_errors: Tuple[float, ...] = field(default_factory=tuple)
