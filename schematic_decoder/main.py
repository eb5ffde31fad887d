#!/usr/bin/env python3
"""
Schematic inspector
Decodes .schematic files and reports their dimensions and contents
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from .decoder import decode
from .errors import DecodeError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> List[logging.Handler]:
    """Setup logging configuration, returning the handlers added to the root logger"""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger('')
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(message)s'))
    handlers: List[logging.Handler] = [console]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        handlers.append(file_handler)

    for handler in handlers:
        root.addHandler(handler)
    return handlers


def teardown_logging(handlers: List[logging.Handler]):
    root = logging.getLogger('')
    for handler in handlers:
        root.removeHandler(handler)
        handler.close()


def collect_files(inputs: List[str], pattern: str = "*.schematic") -> List[Path]:
    """Expand directories into the schematic files they contain"""
    files = []
    for item in inputs:
        path = Path(item)
        if path.is_dir():
            found = sorted(path.rglob(pattern))
            if not found:
                logger.warning(f"No matching files found in {path}")
            files.extend(found)
        else:
            files.append(path)
    return files


def process_file(file_path: Path,
                 raw: bool = False,
                 histogram: bool = False) -> Optional[Dict[str, Any]]:
    """
    Decode a single schematic file

    Args:
        file_path: Path to the file to decode
        raw: Whether the file holds uncompressed tag data
        histogram: Whether to include per-material cell counts

    Returns:
        Summary dictionary, or None if decoding failed
    """
    try:
        schematic = decode(file_path, compressed=not raw)
    except DecodeError as e:
        logger.error(f"{file_path}: {type(e).__name__}: {e}")
        return None

    summary = schematic.summary()
    summary['file'] = str(file_path)
    if histogram:
        summary['material_counts'] = {
            str(code): count for code, count in schematic.material_counts().items()
        }
    return summary


def format_summary(summary: Dict[str, Any]) -> str:
    dims = summary['dimensions']
    offset = summary['offset']
    lines = [
        f"{summary['file']}",
        f"  Size: {dims['x']} x {dims['y']} x {dims['z']}",
        f"  Offset: {offset['x']}, {offset['y']}, {offset['z']}",
        f"  Materials: {summary['materials']}"
        f"{' (16-bit)' if summary['has_extension'] else ''}",
        f"  Filled cells: {summary['filled_cells']}",
        f"  Entities: {summary['entity_count']}",
    ]
    for code, count in summary.get('material_counts', {}).items():
        lines.append(f"    {code}: {count}")
    return '\n'.join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect .schematic volumes"
    )

    parser.add_argument(
        'inputs',
        nargs='+',
        help="Schematic files or directories to process"
    )

    parser.add_argument(
        '--raw',
        action='store_true',
        help="Input is uncompressed tag data"
    )

    parser.add_argument(
        '--histogram',
        action='store_true',
        help="Report the number of cells per material code"
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help="Print summaries as JSON"
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help="Enable debug logging"
    )

    parser.add_argument(
        '--log-file',
        help="Also write log output to this file"
    )

    args = parser.parse_args(argv)
    handlers = setup_logging(args.verbose, args.log_file)

    try:
        files = collect_files(args.inputs)
        summaries = []
        failed = 0
        for file_path in files:
            summary = process_file(file_path, raw=args.raw, histogram=args.histogram)
            if summary is None:
                failed += 1
                continue
            summaries.append(summary)
            if not args.json:
                print(format_summary(summary))

        if args.json:
            print(json.dumps(summaries, indent=2))

        logger.info(f"Decoded {len(summaries)}/{len(files)} files")
        return 1 if failed or not files else 0
    finally:
        teardown_logging(handlers)


if __name__ == '__main__':
    sys.exit(main())
