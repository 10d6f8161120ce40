"""
CLI workflow orchestration for DePict.

Provides the CLIOrchestrator class that coordinates the CLI workflow from
argument parsing through indexing, persistence and reporting.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..bktree import BKTree
from ..errors import HashComputationError, TreeCorruptedError
from ..models import ImageInfo
from ..scanner import calculate_perceptual_hash, find_image_files, lookup, populate_tree
from ..storage import load_snapshot, save_tree
from ..user_config import get_user_config
from ..utils.exporters import export_results
from .arg_parser import parse_arguments
from .reporting import print_similarity_report


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose (DEBUG level) logging

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger(__name__)


class CLIOrchestrator:
    """
    Orchestrates the CLI indexing workflow.

    Manages the complete lifecycle from argument parsing through tree
    population, persistence, similarity lookups and reporting.
    """

    def __init__(self, argv: Optional[list[str]] = None):
        """
        Initialize the orchestrator.

        Args:
            argv: Argument list to parse instead of sys.argv
        """
        self.argv = argv
        self.logger = None
        self.args = None
        self.db_path: Optional[Path] = None
        self.tree: Optional[BKTree] = None
        self.image_files: list[str] = []
        self.similars: dict[str, list[str]] = {}

    def run(self) -> int:
        """
        Execute the complete CLI workflow.

        Returns:
            Exit code (0 for success, 1 for error)

        Workflow phases:
        1. Setup & argument parsing
        2. Validation
        3. Database loading
        4. File scanning
        5. Tree population
        6. Database saving
        7. Lookups for --check files
        8. Similarity sweep, reporting & export
        """
        self._setup_phase()

        for phase in (
            self._validate_phase,
            self._load_phase,
            self._scan_phase,
            self._populate_phase,
            self._save_phase,
            self._check_phase,
            self._report_phase,
        ):
            exit_code = phase()
            if exit_code != 0:
                return exit_code

        return 0

    def _setup_phase(self) -> None:
        """Phase 1: Parse arguments and setup logging."""
        self.args = parse_arguments(self.argv)
        self.logger = setup_logging(self.args.verbose)

    def _validate_phase(self) -> int:
        """
        Phase 2: Validate arguments.

        Returns:
            0 for success, 1 for validation error
        """
        if not self.args.directory.is_dir():
            self.logger.error(f"Directory not found: {self.args.directory}")
            return 1

        for check_file in self.args.check:
            if not check_file.is_file():
                self.logger.error(f"File not found: {check_file}")
                return 1

        self.db_path = self.args.db or self.args.directory / get_user_config().db_filename
        return 0

    def _load_phase(self) -> int:
        """
        Phase 3: Load the existing database (or start empty).

        Returns:
            0 for success, 1 if the database is corrupt or unreadable
        """
        try:
            self.tree, metadata = load_snapshot(self.db_path)
        except TreeCorruptedError as e:
            self.logger.error(f"Database is corrupt, refusing to continue: {e}")
            return 1
        except OSError as e:
            self.logger.error(f"Cannot read database {self.db_path}: {e}")
            return 1

        if len(self.tree):
            self.logger.info(f"Loaded {len(self.tree):,} indexed images from {self.db_path}")
            # Hashes from different algorithms or sizes cannot be compared.
            # Older snapshots carry no metadata; fall back to the stored hash shape.
            stored_algorithm = metadata.get('algorithm', self.args.algorithm)
            stored_size = metadata.get('hash_size', self.tree.items()[0].hash.hash.shape[0])
            if (stored_algorithm, stored_size) != (self.args.algorithm, self.args.hash_size):
                self.logger.error(
                    f"Database was built with --algorithm {stored_algorithm} "
                    f"--hash-size {stored_size}, got --algorithm {self.args.algorithm} "
                    f"--hash-size {self.args.hash_size}"
                )
                return 1
        return 0

    def _scan_phase(self) -> int:
        """Phase 4: Scan for image files."""
        self.logger.info(f"Scanning {self.args.directory} for images...")
        self.image_files = find_image_files(self.args.directory, recursive=self.args.recursive)
        self.logger.info(f"Found {len(self.image_files):,} image files")
        return 0

    def _populate_phase(self) -> int:
        """Phase 5: Fingerprint new images into the tree."""
        stats = populate_tree(
            self.tree,
            self.args.directory,
            self.image_files,
            max_workers=self.args.workers,
            hash_size=self.args.hash_size,
            algorithm=self.args.algorithm,
            show_progress=not self.args.no_progress,
            logger=self.logger,
        )

        self.logger.info(
            f"Indexed {stats.added:,} new images "
            f"({stats.skipped:,} already indexed, {stats.errors:,} failed)"
        )
        self.logger.debug(f"Tree stats: {self.tree.get_stats()}")
        return 0

    def _save_phase(self) -> int:
        """
        Phase 6: Persist the tree.

        Returns:
            0 for success, 1 if the database cannot be written
        """
        try:
            save_tree(
                self.tree,
                self.db_path,
                algorithm=self.args.algorithm,
                hash_size=self.args.hash_size,
            )
        except OSError as e:
            self.logger.error(f"Cannot write database {self.db_path}: {e}")
            return 1
        return 0

    def _check_name(self, check_file: Path) -> str:
        try:
            return check_file.resolve().relative_to(self.args.directory.resolve()).as_posix()
        except ValueError:
            return str(check_file)

    def _check_phase(self) -> int:
        """Phase 7: Report indexed images similar to each --check file."""
        for check_file in self.args.check:
            try:
                phash = calculate_perceptual_hash(check_file, self.args.hash_size, self.args.algorithm)
            except HashComputationError as e:
                self.logger.error(str(e))
                continue

            info = ImageInfo(hash=phash, name=self._check_name(check_file))
            found = lookup(self.tree, info, self.args.radius, logger=self.logger)
            if not found:
                self.logger.info(f"No indexed image is similar to {info.name}")
        return 0

    def _report_phase(self) -> int:
        """
        Phase 8: Run the similarity sweep, print and export the report.

        Returns:
            0 for success, 1 if the export cannot be written
        """
        self.similars = self.tree.search_similars(self.args.radius)
        print_similarity_report(self.similars, self.args.radius)

        if self.args.export:
            try:
                export_results(
                    self.similars,
                    self.args.radius,
                    self.args.export,
                    self.args.export_format,
                )
            except OSError as e:
                self.logger.error(f"Cannot write export {self.args.export}: {e}")
                return 1
            self.logger.info(f"Results exported to: {self.args.export}")
        return 0


__all__ = ['CLIOrchestrator', 'setup_logging']
