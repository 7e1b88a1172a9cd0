# -*- Mode:Python; indent-tabs-mode:nil; tab-width:4 -*-
#
# Copyright 2026 Canonical Ltd.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License version 3 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Image squash command line tool.

This is the main entry point for the image_squash package, invoked
when running `python -mimage_squash`. It combines the layers of a saved
image into a single archive (`export`) and packages squashed archives
as slugs (`slug`).
"""

import argparse
import logging
import sys
from functools import partial
from pathlib import Path

import image_squash
import image_squash.errors
from image_squash.config import Settings, load_settings
from image_squash.export import export_image
from image_squash.slug import make_slug


def main():
    """Run the command-line interface."""
    parser = _build_parser()
    options = parser.parse_args()

    if options.version:
        print(f"image-squash {image_squash.__version__}")
        sys.exit()

    if not options.command:
        parser.print_usage(file=sys.stderr)
        sys.exit(1)

    if options.trace:
        log_level = logging.DEBUG
    elif options.quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    logging.basicConfig(level=log_level, format="%(message)s")

    try:
        settings = load_settings(options.config)
        if settings.quiet and not options.trace:
            logging.getLogger().setLevel(logging.WARNING)

        _run_command(options, settings)
    except OSError as err:
        msg = err.strerror
        if err.filename:
            msg = f"{err.filename}: {msg}"
        print(f"Error: {msg}.", file=sys.stderr)
        sys.exit(1)
    except image_squash.errors.SquashError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(2)
    except (ValueError, TypeError) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(3)


def _run_command(options: argparse.Namespace, settings: Settings) -> None:
    if options.command == "export":
        export_image(
            options.image,
            Path(options.tar_file),
            base_image=options.base_image,
            save_dir=Path(options.save_dir) if options.save_dir else None,
            layer_count=options.layer_count,
            opaque_dirs=options.opaque_dirs,
            settings=settings,
        )
    elif options.command == "slug":
        make_slug(
            Path(options.tar_file),
            Path(options.metadata_file),
            Path(options.slug_file),
        )


def _build_parser() -> argparse.ArgumentParser:
    prog = "python -m image_squash"
    description = (
        "Combine the layers of a container image into a single filesystem "
        "archive, and package combined archives as slugs."
    )

    parser = argparse.ArgumentParser(prog=prog, description=description, add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Disable info logging.",
    )
    parser.add_argument(
        "--config",
        metavar="filename",
        type=Path,
        default=None,
        help="Read settings from the specified file.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable debug messages.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Display the image-squash version and exit.",
    )

    help_parser = argparse.ArgumentParser(add_help=False)
    help_parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")

    add_subparser = partial(
        subparsers.add_parser, add_help=False, parents=[help_parser]
    )

    export_parser = add_subparser(
        "export", help="Save an image and combine its layers into a tar file."
    )
    export_parser.add_argument("image", help="The image to export.")
    export_parser.add_argument("tar_file", help="The tar file to create.")
    export_parser.add_argument(
        "--from",
        dest="base_image",
        metavar="image",
        help="Only include layers built on top of the base image layers.",
    )
    export_parser.add_argument(
        "--save-dir",
        metavar="dirname",
        help="Don't save the image, use a directory containing a previous save.",
    )
    export_parser.add_argument(
        "--layer-count",
        metavar="n",
        type=int,
        help="Only combine the top n layers, n being at least 1 (default: all).",
    )
    export_parser.add_argument(
        "--opaque-dirs",
        action="store_true",
        help="Hide lower layer contents of directories marked as opaque.",
    )

    slug_parser = add_subparser(
        "slug", help="Package a tar file and a metadata file as a slug."
    )
    slug_parser.add_argument("tar_file", help="The combined tar file.")
    slug_parser.add_argument("metadata_file", help="The slug metadata file.")
    slug_parser.add_argument("slug_file", help="The slug tgz file to create.")

    return parser
