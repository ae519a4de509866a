"""
nativedep CLI argument parser.

This module implements the command-line interface for nativedep using argparse.
Linker directives are written to standard output; logging goes to standard
error so the host build tool only ever reads directives.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from nativedep.core.config import DEFAULT_CONFIG_FILE
from nativedep.core.exceptions import NativeDepError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("nativedep")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """nativedep command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="nativedep",
            description="nativedep - acquire a native library for the host build",
            epilog='Use "nativedep COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"nativedep {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help=f"Path to configuration file (default: ./{DEFAULT_CONFIG_FILE})",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_acquire_command(subparsers)
        self._add_locate_command(subparsers)
        self._add_probe_command(subparsers)

        return parser

    def _add_acquire_command(self, subparsers):
        """Add 'acquire' subcommand."""
        parser = subparsers.add_parser(
            "acquire",
            help="Make the library available to the linker",
            description=(
                "Find the library on the system, install a prebuilt archive or "
                "build it from source, then print linker directives"
            ),
        )
        parser.add_argument(
            "--out-dir",
            type=Path,
            metavar="PATH",
            help="Build output directory (default: $OUT_DIR)",
        )
        parser.add_argument(
            "--manifest-dir",
            type=Path,
            metavar="PATH",
            help="Manifest directory of the host package (default: $CARGO_MANIFEST_DIR)",
        )
        parser.add_argument(
            "--download-dir",
            type=Path,
            metavar="PATH",
            help="Cache directory for downloaded archives (default: $TF_RUST_DOWNLOAD_DIR)",
        )
        parser.add_argument(
            "--jobs",
            "-j",
            type=int,
            metavar="N",
            help="Job count for the external build tool (default: $NUM_JOBS)",
        )
        parser.add_argument(
            "--force-source",
            action="store_true",
            default=None,
            help="Always build from source",
        )
        parser.add_argument(
            "--gpu",
            action="store_true",
            default=None,
            help="Use the GPU variant of the library",
        )
        parser.add_argument(
            "--build-tool-opts",
            metavar="FLAGS",
            help="Extra flags for the build tool, whitespace-separated",
        )

    def _add_locate_command(self, subparsers):
        """Add 'locate' subcommand."""
        parser = subparsers.add_parser(
            "locate",
            help="Print the URL of the newest prebuilt archive",
            description="Resolve the newest prebuilt archive for this platform",
        )
        parser.add_argument(
            "--gpu",
            action="store_true",
            default=None,
            help="Use the GPU variant of the library (default: environment, then config file)",
        )

    def _add_probe_command(self, subparsers):
        """Add 'probe' subcommand."""
        subparsers.add_parser(
            "probe",
            help="Check whether the library is already installed",
            description="Probe pkg-config and the search path for the library",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except NativeDepError as e:
            logger.error(f"{e.stage} failed: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "acquire": "nativedep.cli.commands.acquire",
            "locate": "nativedep.cli.commands.locate",
            "probe": "nativedep.cli.commands.probe",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
