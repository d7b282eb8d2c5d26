import argparse
import json
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from tqdm import tqdm

from .config import ENV_LOG_LEVEL, ScanOptions, load_options, parse_readers
from .errors import ConfigError, ScanError
from .image_discovery import discover_images
from .scanner import ScanOutcome, scan_all


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
	p = argparse.ArgumentParser(description="Find every QR code and barcode in one or more images")
	p.add_argument("src", nargs="+", help="Image file, folder or .zip of images")
	p.add_argument("--json", action="store_true", help="Print results as JSON")
	p.add_argument("--workers", type=int, help="Threads per image for QR tile attempts (default: 1)")
	p.add_argument("--jobs", type=int, default=4, help="Images scanned concurrently (default: 4)")
	p.add_argument("--backend", choices=("zxing", "zbar"), help="1-D barcode decoder (default: zxing)")
	p.add_argument("--readers", help="Comma separated barcode symbologies, e.g. code_128,ean_13")
	p.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
	p.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG")
	return p.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
	if verbosity >= 2:
		level = logging.DEBUG
	elif verbosity == 1:
		level = logging.INFO
	else:
		level = getattr(logging, os.environ.get(ENV_LOG_LEVEL, "WARNING").upper(), logging.WARNING)
	logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def build_opts(args: argparse.Namespace) -> ScanOptions:
	readers = parse_readers(args.readers) if args.readers else None
	return load_options(workers=args.workers, barcode_backend=args.backend, readers=readers)


def _scan_path(path: str, opts: ScanOptions) -> ScanOutcome:
	try:
		return ScanOutcome(source=path, results=scan_all(path, opts))
	except ScanError as exc:
		return ScanOutcome(source=path, error=exc)


def _as_json(outcome: ScanOutcome) -> Dict[str, object]:
	if outcome.error is not None:
		return {"file": outcome.source, "error": str(outcome.error)}
	return {"file": outcome.source, "results": [r.to_dict() for r in outcome.results]}


def main(argv: Optional[List[str]] = None) -> int:
	args = parse_args(argv)
	_configure_logging(args.verbose)
	try:
		opts = build_opts(args)
	except ConfigError as exc:
		raise SystemExit(f"Invalid options: {exc}")

	paths: List[str] = []
	for src in args.src:
		try:
			paths.extend(discover_images(src))
		except FileNotFoundError as exc:
			print(str(exc), file=sys.stderr)
	if not paths:
		raise SystemExit("No images found.")

	outcomes: Dict[str, ScanOutcome] = {}
	with ThreadPoolExecutor(max_workers=max(1, args.jobs)) as pool:
		futures = {pool.submit(_scan_path, p, opts): p for p in paths}
		for fut in tqdm(as_completed(futures), total=len(futures), desc="Scanning images", disable=args.no_progress):
			outcomes[futures[fut]] = fut.result()

	ordered = [outcomes[p] for p in paths]
	if args.json:
		print(json.dumps([_as_json(o) for o in ordered], indent=2))
	else:
		for o in ordered:
			if o.error is not None:
				print(f"{o.source}\terror={o.error}", file=sys.stderr)
				continue
			for r in o.results:
				print(f"{o.source}\ttype={r.kind.value}\tvalue={r.payload}")

	return 1 if any(o.error is not None for o in ordered) else 0


if __name__ == "__main__":
	sys.exit(main())
