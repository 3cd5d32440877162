"""Точка входа утилиты icotool."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from icokit.controllers.icotool_controller import FORMATS, IcotoolController
from icokit.models.errors import IcoError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="icotool", description="Manipulates ICO and CUR files")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug details")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="list the images in an ICO/CUR file")
    p_list.add_argument("ico")

    p_extract = sub.add_parser("extract", help="extract one image as PNG")
    p_extract.add_argument("ico")
    p_extract.add_argument("index", type=int)
    p_extract.add_argument("output")

    p_create = sub.add_parser("create", help="create an ICO/CUR file from images")
    p_create.add_argument("output")
    p_create.add_argument("images", nargs="+")
    p_create.add_argument("--cursor", action="store_true", help="write a CUR file")
    p_create.add_argument("--hotspot", nargs=2, type=int, metavar=("X", "Y"))
    p_create.add_argument("--format", choices=FORMATS, default="auto")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Разбирает аргументы и выполняет команду; возвращает код выхода."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    controller = IcotoolController()
    try:
        if args.command == "list":
            for line in controller.list_entries(args.ico):
                print(line)
        elif args.command == "extract":
            controller.extract(args.ico, args.index, args.output)
        elif args.command == "create":
            hotspot = tuple(args.hotspot) if args.hotspot else None
            icon_dir = controller.create(
                args.output, args.images, cursor=args.cursor, hotspot=hotspot, fmt=args.format
            )
            print(f"Wrote {len(icon_dir)} {icon_dir.resource_type} entries to {args.output}")
    except (IcoError, OSError) as exc:
        print(f"icotool: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
