import logging
from rich.logging import RichHandler
from rich.console import Console

import argparse
import mmap
import os, pathlib, sys

from dtparse.config import (
    DisplayConfig, IndentStyle,
    EXIT_OK, EXIT_USAGE, EXIT_IO, EXIT_PARSE,
)


class DeviceTreeIOError(OSError):
    """The device tree file could not be opened or mapped."""


class DeviceTreeDump(object):

    def __init__(self, path, config=None, console=None):
        self.console = console or setup_logging()
        self.config = config or DisplayConfig()
        self.path = path
        self.map = None

        self.data = self.mapFile(path)
        logging.debug(f'Mapped {path} ({len(self.data)} bytes)')

    def mapFile(self, path):
        try:
            with open(path, 'rb') as fh:
                # mmap refuses empty files; an empty buffer fails to parse on its own.
                if os.fstat(fh.fileno()).st_size == 0:
                    return b''
                self.map = mmap.mmap(fh.fileno(), 0, access=mmap.ACCESS_READ)
        except OSError as e:
            raise DeviceTreeIOError(e.errno, e.strerror, str(path)) from e
        return self.map

    def dump(self):
        """Print the device tree. Returns False if it is malformed."""
        from dtparse.output.text import TreeTextOutput
        handler = TreeTextOutput(self.data, self.config, self.console)
        try:
            return handler.process()
        finally:
            handler.close()

    def close(self):
        if self.map is not None:
            self.map.close()
            self.map = None
        self.data = b''

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def setup_logging(level=logging.INFO):
    console = Console()
    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=True
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[rich_handler]
    )

    return console


class ArgumentParser(argparse.ArgumentParser):

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f'{self.prog}: error: {message}\n')


def main(argv=None):

    parser = ArgumentParser(add_help=True, description='Print the contents of a flattened Apple device tree', formatter_class=argparse.RawDescriptionHelpFormatter)

    parser.add_argument('devicetree', type=pathlib.Path, help="Path to the device tree file.")
    parser.add_argument('-v', '--verbose', action='store_true', help="Print property values in full instead of truncating them.")
    parser.add_argument('-t', '--tree', action='store_true', help="Draw tree lines instead of indenting with spaces.")
    parser.add_argument('--debug', action='store_true', help="Enable debug logging.")

    args = parser.parse_args(argv)

    console = setup_logging(logging.DEBUG if args.debug else logging.INFO)
    config = DisplayConfig(
        verbose=args.verbose,
        style=IndentStyle.Tree if args.tree else IndentStyle.Flat,
    )

    try:
        dtd = DeviceTreeDump(args.devicetree, config, console)
    except DeviceTreeIOError as e:
        logging.error(f"Unable to read '{args.devicetree}': {e.strerror}")
        return EXIT_IO

    with dtd:
        ok = dtd.dump()

    return EXIT_OK if ok else EXIT_PARSE

if __name__ == '__main__':
    sys.exit(main())
