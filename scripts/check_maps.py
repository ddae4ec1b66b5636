#!/usr/bin/env python
"""
Parse every .fomap file under a directory and report what happened.

For each map prints tile/object counts and, when text is left after the
objects block, a bounded preview of it. Failures print the formatted
diagnostic.

Usage:
    python scripts/check_maps.py maps/                  # strict
    python scripts/check_maps.py maps/ --allow-any      # keep unknown objects opaque
    python scripts/check_maps.py maps/ --allow-tail     # tolerate trailing text
    python scripts/check_maps.py maps/q3_test.fomap     # single file
"""

import argparse
import os
import sys
import time

from fomap.data_model import MapParserSettings, LEFTOVER_EXCERPT_LIMIT
from fomap.errors import MapError, format_failure
from fomap.parser import read_map_with_remainder


def _map_files(target):
    if os.path.isfile(target):
        return [target]
    found = []
    for dirpath, _, filenames in os.walk(target):
        for name in filenames:
            if name.lower().endswith('.fomap'):
                found.append(os.path.join(dirpath, name))
    return sorted(found)


def check_map(path, settings):
    """Parse one file. Returns True when it is accepted under ``settings``."""
    try:
        text, result = read_map_with_remainder(path, settings)
    except MapError as e:
        print(f"  ERROR: {e}")
        return False

    if not result.ok:
        print(format_failure(text, result.failure))
        return False

    game_map = result.map
    n_opaque = sum(1 for _ in game_map.opaque())
    print(f"  tiles={len(game_map.tiles)}, objects={len(game_map.objects)}"
          + (f", opaque={n_opaque}" if n_opaque else ""))
    if result.remainder:
        print(f"  Rest: {result.remainder.head(LEFTOVER_EXCERPT_LIMIT)!r}")
        return settings.allow_tail
    return True


def main():
    parser = argparse.ArgumentParser(description="Parse .fomap maps and report")
    parser.add_argument('target', help="map file or directory to scan")
    parser.add_argument('--allow-any', action='store_true',
                        help="accept unrecognized object kinds as opaque records")
    parser.add_argument('--allow-tail', action='store_true',
                        help="accept text left after the objects block")
    args = parser.parse_args()

    settings = MapParserSettings(allow_any=args.allow_any, allow_tail=args.allow_tail)
    files = _map_files(args.target)
    if not files:
        print(f"No .fomap files under {args.target}")
        return 1

    failed = []
    t0 = time.time()
    for path in files:
        print(f"Parsing {path}")
        if not check_map(path, settings):
            failed.append(path)
    elapsed = time.time() - t0

    print(f"\n{len(files) - len(failed)}/{len(files)} maps ok in {elapsed:.2f}s")
    for path in failed:
        print(f"  FAILED: {path}")
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
