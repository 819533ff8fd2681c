#!/usr/bin/env python3
"""
dupcatalog CLI: command line interface for cataloging file fingerprints.
Walks a directory tree and records a content fingerprint for every qualifying file,
or fingerprints a single file and prints the result.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import sys
import time
from typing import List, Optional, NoReturn

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from dupcatalog.core.errors import DupCatalogError
from dupcatalog.core.models import ScanParams, ScanStats
from dupcatalog.commands import CatalogCommand, FingerprintCommand
from dupcatalog.utils.convert_utils import ConvertUtils


DEFAULT_CATALOG_NAME = ".dupcatalog-catalog"

EPILOG_TEXT = """
Examples:
  Catalog your home directory into ~/.dupcatalog-catalog
  %(prog)s

  Catalog a photo tree, skipping cache directories, only JPEG files
  %(prog)s --root ~/Pictures --exclude '/\\.cache' --include '\\.jpe?g$'

  Use a separate catalog file and a 1MB sampling threshold
  %(prog)s --root /data --catalog /tmp/data.catalog --threshold 1M

  Print the fingerprint of a single file, no catalog involved
  %(prog)s --singleton ~/Downloads/video.mkv
"""


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        home = os.environ.get("HOME", os.path.expanduser("~"))

        parser = argparse.ArgumentParser(
            description="dupcatalog: catalog content fingerprints for duplicate detection",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "--root", "-r",
            default=home,
            type=str,
            help="Catalog all files in this directory. Default: $HOME"
        )
        parser.add_argument(
            "--catalog", "-c",
            default=os.path.join(home, DEFAULT_CATALOG_NAME),
            type=str,
            help=f"Path to the catalog file. Default: $HOME/{DEFAULT_CATALOG_NAME}"
        )

        # Filtering options
        parser.add_argument(
            "--exclude", "-e",
            action="append",
            default=[],
            type=str,
            metavar="REGEX",
            help="Exclude paths that match this regex (repeatable).\n"
                 "Excludes are tested before includes; an excluded directory is not entered."
        )
        parser.add_argument(
            "--include", "-i",
            action="append",
            default=[],
            type=str,
            metavar="REGEX",
            help="Only catalog files whose path matches this regex (repeatable)"
        )
        parser.add_argument(
            "--threshold", "-t",
            default="512K",
            type=str,
            metavar="SIZE",
            help="Files at or above this size are sampled instead of fully hashed\n"
                 "(e.g., 512K, 1M; minimum 3K). Default: 512K"
        )

        # Actions
        parser.add_argument(
            "--singleton", "-s",
            default="",
            type=str,
            metavar="FILE",
            help="Hash a single file and print the fingerprint; the catalog is not used"
        )

        # Output options
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Be chattier: report every cataloged and skipped path and show statistics"
        )

        return parser.parse_args(args)

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        if not args.root or not args.catalog:
            self.error_exit("Both --root and --catalog must be non-empty")

        try:
            return ScanParams.from_human_readable(
                root_dir=args.root,
                catalog_path=args.catalog,
                threshold_str=args.threshold,
                exclude_patterns=args.exclude,
                include_patterns=args.include,
                verbose=args.verbose,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files cataloged...")
        sys.stderr.flush()

    def run_singleton(self, path: str, threshold_str: str) -> None:
        """Print '<decimal> (<hex>)' for one file."""
        try:
            threshold = ConvertUtils.human_to_bytes(threshold_str)
            fingerprint = FingerprintCommand(threshold=threshold).execute(path)
        except (ValueError, DupCatalogError) as e:
            self.error_exit(str(e))
        print(f"{fingerprint} ({ConvertUtils.fingerprint_to_hex(fingerprint)})")

    def run_catalog(self, params: ScanParams) -> ScanStats:
        """Execute the cataloging workflow."""
        for pattern in params.exclude_patterns:
            print(f"Excluding: {pattern}")

        try:
            _, stats = CatalogCommand().execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None
            )
        except DupCatalogError as e:
            self.error_exit(f"Cataloging failed: {e}")

        if self.verbose:
            sys.stderr.write("\n")
            print(stats.print_summary())

        return stats

    def output_results(self, stats: ScanStats, params: ScanParams) -> None:
        print(
            f"Cataloged {stats.files_cataloged} files "
            f"({ConvertUtils.bytes_to_human(stats.bytes_fingerprinted)}) into {params.catalog_path}"
        )
        if stats.permission_denied:
            self.warning(f"{stats.permission_denied} file(s) skipped: permission denied")

    @staticmethod
    def warning(message: str) -> None:
        """Print a warning message to stderr."""
        print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        if self.verbose:
            logging.getLogger("dupcatalog").setLevel(logging.INFO)

        if args.singleton:
            self.run_singleton(args.singleton, args.threshold)
            return

        params = self.create_params(args)
        stats = self.run_catalog(params)
        self.output_results(stats, params)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
