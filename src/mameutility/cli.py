#!/usr/bin/env python3
"""
MAMEUtility CLI — Command line interface for MAME catalog processing.
Runs the same commands as the GUI worker, with console progress and Ctrl+C cancellation.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import signal
import sys
import os
import time
from typing import List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from mameutility import __version__
from mameutility.core.config import ProcessingConfig
from mameutility.core.models import (
    PartitionParams, SoftwareListParams, MergeParams, CopyParams,
    PartitionReport, AggregationReport, MergeReport, CopyReport)
from mameutility.core.progress import CancellationToken
from mameutility.commands import (
    PartitionCommand, SoftwareListCommand, MergeCommand, CopyAssetsCommand, DatInfoCommand)
from mameutility.errors import MameUtilityError
from mameutility.services.log_service import LogService
from mameutility.aliases import (
    PARTITION_COMMANDS, PARTITION_HELP_TEXT, OUTPUT_HELP_TEXT,
    COPY_COMMANDS, WORKERS_HELP_TEXT, EPILOG_TEXT
)

EXIT_CANCELLED = 130


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.token = CancellationToken()
        self.log_service: Optional[LogService] = None

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def _add_common_options(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and debug logging"
        )
        parser.add_argument(
            "--log-file",
            default=ProcessingConfig.DEFAULT_LOG_FILE,
            type=str,
            metavar='',
            help=f"Persistent log file. Default: {ProcessingConfig.DEFAULT_LOG_FILE}"
        )

    @classmethod
    def parse_args(cls, args=None) -> argparse.Namespace:
        """Parse and validate command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="mameutility",
            description="MAMEUtility — MAME catalog splitting, merging and asset copying",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )
        parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
        subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

        for name in PARTITION_COMMANDS:
            sub = subparsers.add_parser(name, help=PARTITION_HELP_TEXT[name],
                                        formatter_class=argparse.RawTextHelpFormatter)
            sub.add_argument("--input", "-i", required=True, type=str, help="MAME catalog XML file")
            sub.add_argument("--output", "-o", required=True, type=str, help=OUTPUT_HELP_TEXT[name])
            cls._add_common_options(sub)

        sub = subparsers.add_parser("softwarelist", help="Combine all software lists of a folder into one list",
                                    formatter_class=argparse.RawTextHelpFormatter)
        sub.add_argument("--input", "-i", required=True, type=str, help="Folder with software list XML files")
        sub.add_argument("--output", "-o", required=True, type=str, help="Output XML file")
        sub.add_argument("--workers", "-w", type=int, default=None, metavar='', help=WORKERS_HELP_TEXT)
        cls._add_common_options(sub)

        sub = subparsers.add_parser("merge", help="Merge record-set files into one XML and DAT",
                                    formatter_class=argparse.RawTextHelpFormatter)
        sub.add_argument("inputs", nargs="*", type=str, help="Record-set files (Machines or Softwares shape)")
        sub.add_argument("--output", "-o", required=True, type=str, help="Merged XML file")
        sub.add_argument("--dat", type=str, default=None, metavar='',
                         help="DAT output file. Default: merged XML path with .dat extension")
        cls._add_common_options(sub)

        for name, kind in COPY_COMMANDS.items():
            sub = subparsers.add_parser(name, help=f"Copy the {kind.display_name} named by record-set files",
                                        formatter_class=argparse.RawTextHelpFormatter)
            sub.add_argument("inputs", nargs="+", type=str, help="Record-set files")
            sub.add_argument("--source", "-s", required=True, type=str, help=f"Folder holding the {kind.display_name}")
            sub.add_argument("--dest", "-d", required=True, type=str, help="Destination folder")
            sub.add_argument("--workers", "-w", type=int, default=1, metavar='', help=WORKERS_HELP_TEXT)
            cls._add_common_options(sub)

        sub = subparsers.add_parser("dat-info", help="Show the records stored in a DAT file",
                                    formatter_class=argparse.RawTextHelpFormatter)
        sub.add_argument("dat", type=str, help="DAT file")
        sub.add_argument("--limit", "-n", type=int, default=10, metavar='',
                         help="Number of records to print (0 = all). Default: 10")
        cls._add_common_options(sub)

        return parser.parse_args(args)

    def progress_callback(self, percent: int) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return
        sys.stderr.write(f"\r  [progress] {percent}%")
        sys.stderr.flush()

    def stopped_flag(self) -> bool:
        return self.token.is_requested()

    def _on_sigint(self, signum, frame) -> None:
        if self.token.is_requested():
            raise KeyboardInterrupt
        self.token.cancel()
        self.warning("Cancelling... (press Ctrl+C again to abort immediately)")

    def configure_logging(self, args: argparse.Namespace) -> None:
        if self.verbose:
            logging.getLogger("mameutility").setLevel(logging.DEBUG)
        self.log_service = LogService(log_file=args.log_file or None)

    # ---- command runners ----

    def run_partition(self, args: argparse.Namespace) -> PartitionReport:
        mode = PARTITION_COMMANDS[args.command]
        params = self.create_params(PartitionParams, input_path=args.input, output_path=args.output, mode=mode)
        if not self.quiet:
            print(f"Splitting {params.input_path} ({mode.display_name})...")
        report = PartitionCommand().execute(
            params, progress_callback=self.progress_callback,
            stopped_flag=self.stopped_flag, log=self.log_service)
        self._end_progress_line()
        if not self.quiet and not report.cancelled:
            print(f"✅ Wrote {len(report.written)} file(s) to {params.output_path}")
            if report.skipped:
                print(f"   Skipped groups: {len(report.skipped)}")
        if report.failed:
            self.warning(f"Failed to write {len(report.failed)} group(s): {', '.join(report.failed[:5])}")
        return report

    def run_softwarelist(self, args: argparse.Namespace) -> AggregationReport:
        params = self.create_params(SoftwareListParams, input_dir=args.input, output_path=args.output,
                                    workers=args.workers)
        report = SoftwareListCommand().execute(
            params, progress_callback=self.progress_callback,
            stopped_flag=self.stopped_flag, log=self.log_service)
        self._end_progress_line()
        if not self.quiet and not report.cancelled:
            print(f"✅ {len(report.records)} softwares from {len(report.parsed_files)}/{report.total_files} "
                  f"files saved to {report.output_path}")
        for path in report.failed_files:
            self.warning(f"Could not parse {path}")
        return report

    def run_merge(self, args: argparse.Namespace) -> MergeReport:
        params = self.create_params(MergeParams, input_paths=args.inputs, xml_output_path=args.output,
                                    dat_output_path=args.dat)
        report = MergeCommand().execute(
            params, progress_callback=self.progress_callback,
            stopped_flag=self.stopped_flag, log=self.log_service)
        self._end_progress_line()
        if not self.quiet:
            if not params.input_paths:
                print("No files to merge.")
            elif not report.cancelled:
                print(f"✅ Merged {len(report.records)} records into {report.xml_output_path}")
                print(f"   DAT: {report.dat_output_path}")
        return report

    def run_copy(self, args: argparse.Namespace) -> CopyReport:
        kind = COPY_COMMANDS[args.command]
        params = self.create_params(CopyParams, record_set_files=args.inputs, source_dir=args.source,
                                    dest_dir=args.dest, kind=kind, workers=args.workers)
        report = CopyAssetsCommand().execute(
            params, progress_callback=self.progress_callback,
            stopped_flag=self.stopped_flag, log=self.log_service)
        self._end_progress_line()
        if not self.quiet:
            print(report.summary())
        return report

    def run_dat_info(self, args: argparse.Namespace) -> None:
        if not os.path.isfile(args.dat):
            self.error_exit(f"File not found: {args.dat}")
        records = DatInfoCommand().execute(args.dat, log=self.log_service)
        print(f"{args.dat}: {len(records)} records")
        shown = records.entries if args.limit <= 0 else records.entries[:args.limit]
        for entry in shown:
            print(f"  {entry.name}\t{entry.description}")
        if len(shown) < len(records):
            print(f"  ...and {len(records) - len(shown)} more")

    def create_params(self, params_class, **kwargs):
        """Builds a params DTO, turning validation errors into a CLI error."""
        try:
            return params_class(**kwargs)
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def _end_progress_line(self) -> None:
        if self.verbose:
            sys.stderr.write("\n")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def dispatch(self, args: argparse.Namespace):
        if args.command in PARTITION_COMMANDS:
            return self.run_partition(args)
        if args.command == "softwarelist":
            return self.run_softwarelist(args)
        if args.command == "merge":
            return self.run_merge(args)
        if args.command in COPY_COMMANDS:
            return self.run_copy(args)
        return self.run_dat_info(args)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.configure_logging(args)

        previous_handler = None
        try:
            previous_handler = signal.signal(signal.SIGINT, self._on_sigint)
        except ValueError:
            pass  # not in the main thread, Ctrl+C keeps its default behavior

        try:
            report = self.dispatch(args)
        except MameUtilityError as e:
            self.error_exit(str(e))
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGINT, previous_handler)
            self.log_service.close()

        if getattr(report, "cancelled", False):
            print("\n⚠️  Operation cancelled by user (Ctrl+C)")
            sys.exit(EXIT_CANCELLED)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main(argv: Optional[List[str]] = None) -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run(argv)
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(EXIT_CANCELLED)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
