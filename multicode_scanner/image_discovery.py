import os
import tempfile
import zipfile
from typing import List

SUPPORTED_EXT = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".tif", ".tiff", ".heic", ".heif"}
SUPPORTED_MIME = {
	"image/png", "image/jpeg", "image/jpg", "image/gif", "image/webp",
	"image/bmp", "image/tiff", "image/heic", "image/heif",
}


def is_image_file(name_or_mime: str) -> bool:
	"""True for a supported file name/extension or `image/*` MIME type."""
	value = (name_or_mime or "").strip().lower()
	if "/" in value and not os.path.splitext(value)[1]:
		return value in SUPPORTED_MIME
	_root, ext = os.path.splitext(value)
	return ext in SUPPORTED_EXT


def discover_images(src_path: str) -> List[str]:
	"""Return absolute file paths for images in a file, folder or zip archive.

	- A zip is extracted to a temp dir that lives for the process lifetime.
	- Images are returned in sorted order for determinism.
	"""
	abspath = os.path.abspath(src_path)
	if not os.path.exists(abspath):
		raise FileNotFoundError(f"Source path not found: {abspath}")

	if zipfile.is_zipfile(abspath):
		tmpdir = tempfile.mkdtemp(prefix="multicode_zip_")
		with zipfile.ZipFile(abspath) as zf:
			zf.extractall(tmpdir)
		dir_to_scan = tmpdir
	elif os.path.isfile(abspath):
		return [abspath] if is_image_file(abspath) else []
	else:
		dir_to_scan = abspath

	found: List[str] = []
	for root, _dirs, files in os.walk(dir_to_scan):
		# Skip macOS metadata directories
		if "__MACOSX" in root:
			continue
		for name in files:
			# Skip macOS resource fork files (._filename) and hidden files
			if name.startswith("."):
				continue
			if is_image_file(name):
				found.append(os.path.join(root, name))

	return sorted(found)
