"""Build and export every AirTag holder.

Each product is built independently: a holder that fails to build is logged
with the reason and the others are still exported. Outputs go to `stl-draft/`
next to this script unless `--out-dir` or `--final` says otherwise. Existing
files are kept unless `--force` is given.
"""
from pathlib import Path
import argparse
import logging
import sys
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import cadquery as cq

import case_basic
import case_nuts_bolts
import case_sandwich
import case_snap

logger = logging.getLogger('airtag_holders')

SCRIPT_DIR = Path(__file__).parent
DRAFT_DIR = SCRIPT_DIR / 'stl-draft'
FINAL_DIR = SCRIPT_DIR / 'stl-final'

FORMATS = ('stl', 'step')

# output filename stem -> generator
PRODUCTS: Dict[str, Callable[[], cq.Workplane]] = {
    case_basic.PRODUCT: case_basic.build,
    case_sandwich.PRODUCT: case_sandwich.build,
    case_nuts_bolts.PRODUCT: case_nuts_bolts.build,
    case_snap.PRODUCT: case_snap.build,
}


def export_product(
    name: str,
    generator: Callable[[], cq.Workplane],
    out_dir: Path,
    fmts: Sequence[str] = ('stl',),
    force: bool = False,
) -> List[Path]:
    """Build one product and write it in each format. Returns the written (or kept) paths."""
    targets = [out_dir / f"{name}.{fmt}" for fmt in fmts]
    if not force and all(t.exists() for t in targets):
        for t in targets:
            logger.info(f"Skipping {t.name} (exists). Use --force to overwrite")
        return targets

    logger.info(f"Building {name}")
    model = generator()
    bb = model.val().BoundingBox()
    logger.info(f"{name} BB: {bb.xlen:.3f} x {bb.ylen:.3f} x {bb.zlen:.3f}")

    out_dir.mkdir(parents=True, exist_ok=True)
    for target in targets:
        if target.exists() and not force:
            logger.info(f"Skipping {target.name} (exists). Use --force to overwrite")
            continue
        cq.exporters.export(model, str(target))
        logger.info(f"Exported {target} (size={target.stat().st_size})")
    return targets


def export_all(
    out_dir: Path,
    names: Optional[Iterable[str]] = None,
    fmts: Sequence[str] = ('stl',),
    force: bool = False,
    products: Optional[Dict[str, Callable[[], cq.Workplane]]] = None,
):
    """Export the selected products, isolating failures.

    Returns ``(exported, failed)``: product name to paths, and product name to
    the exception that stopped it.
    """
    products = PRODUCTS if products is None else products
    selected = list(products) if names is None else list(names)
    unknown = [n for n in selected if n not in products]
    if unknown:
        raise KeyError(f"unknown product(s): {', '.join(unknown)}")

    exported: Dict[str, List[Path]] = {}
    failed: Dict[str, Exception] = {}
    for name in selected:
        try:
            exported[name] = export_product(name, products[name], out_dir, fmts, force)
        except Exception as e:
            logger.error(f"Failed to build {name}: {e}")
            logger.debug('Traceback:', exc_info=True)
            failed[name] = e
    return exported, failed


def resolve_out_dir(out_dir: Optional[str], final: bool) -> Path:
    if final:
        return FINAL_DIR
    if out_dir:
        path = Path(out_dir)
        if not path.is_absolute():
            path = (Path.cwd() / path).resolve()
        return path
    return DRAFT_DIR


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate AirTag holder models")
    p.add_argument('--out-dir', default=None, help="Output directory (stl-draft/ next to this script if unspecified)")
    p.add_argument('--final', action='store_true', help="Place output into stl-final instead of stl-draft")
    p.add_argument('--format', dest='formats', action='append', choices=FORMATS,
                   help="Output format, repeatable (default: stl)")
    p.add_argument('--only', action='append', metavar='NAME', help="Build only this product, repeatable")
    p.add_argument('--force', action='store_true', help="Overwrite outputs")
    p.add_argument('--list', action='store_true', help="List product names and exit")
    p.add_argument('-v', '--verbose', action='store_true', help="Log construction steps")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='%(message)s')

    if args.list:
        for name in PRODUCTS:
            print(name)
        return 0

    out_dir = resolve_out_dir(args.out_dir, args.final)
    try:
        exported, failed = export_all(out_dir, args.only, tuple(args.formats or ('stl',)), args.force)
    except KeyError as e:
        logger.error(e.args[0])
        return 2

    logger.info(f"\nDone: {len(exported)} exported, {len(failed)} failed")
    if not args.final and exported:
        logger.info("Tip: move validated prints into `stl-final/` to track them in Git.")
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
