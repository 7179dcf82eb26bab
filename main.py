"""
Hat Pack Editor
Main entry point for the command line tools

Inspects and re-saves hat pack directories without opening the editor.
"""

import argparse
import logging
import sys

from core.bundle import HatBundle
from core.errors import HatPackError


def describe_bundle(bundle: HatBundle) -> str:
    """Human readable summary of a hat, one line per element"""
    lines = [f"{bundle.path}: {len(bundle)} element(s)"]
    for element in bundle:
        art_w, art_h = element.art_area_size
        frame_w, frame_h = element.frame_size
        lines.append(
            f"  {element.kind.display_name} '{element.save_name()}' "
            f"art {art_w}x{art_h}, frame {frame_w}x{frame_h}, "
            f"{element.frames_amount()} frame(s)"
        )
        for animation in element.animations:
            loop = ", looping" if animation.looping else ""
            lines.append(
                f"    {animation.kind.display_name}: delay {animation.delay}{loop}, "
                f"frames {animation.frame_values}"
            )
    return "\n".join(lines)


def cmd_info(args) -> int:
    bundle = HatBundle.load(args.directory)
    print(describe_bundle(bundle))
    return 0


def cmd_resave(args) -> int:
    bundle = HatBundle.load(args.directory)
    bundle.save(args.output or args.directory)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='hatpack', description=__doc__.strip().splitlines()[0])
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    info = subparsers.add_parser('info', help='list the elements of a hat')
    info.add_argument('directory')
    info.set_defaults(func=cmd_info)

    resave = subparsers.add_parser('resave', help='load a hat and write it back')
    resave.add_argument('directory')
    resave.add_argument('-o', '--output', help='directory to write to (default: in place)')
    resave.set_defaults(func=cmd_resave)
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )
    try:
        return args.func(args)
    except HatPackError as e:
        logging.getLogger('hatpack').error("%s", e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
