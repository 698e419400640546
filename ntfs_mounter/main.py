import argparse
import sys
from pathlib import Path

from ntfs_mounter.__version__ import __version__
from ntfs_mounter.config import settings
from ntfs_mounter.logging import LoggerFactory, setup_logging
from ntfs_mounter.services import workflow
from ntfs_mounter.ui import console


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ntfs-mounter",
        description="Mount an external NTFS drive read/write with macFUSE and ntfs-3g",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Enable trace output (very verbose)")
    parser.add_argument("--log-dir", type=Path, default=None, help="Write rotating log files here")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings.load_settings()
    log_dir = args.log_dir or settings.get_path("log_dir")
    setup_logging(debug=args.debug, trace=args.trace, log_dir=log_dir)
    console.configure()

    log = LoggerFactory.for_system()
    log.debug(f"ntfs-mounter {__version__} starting")

    try:
        result = workflow.run(workflow.WorkflowOptions.from_settings())
    except KeyboardInterrupt:
        console.say()
        console.warn("Interrupted.")
        return workflow.EXIT_FAILURE

    log.debug(f"Finished in state {result.state.value} with exit code {result.exit_code}")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
