"""
Command-line entry point for pseudo-spot synthesis.

Usage:
    spotsim --h5ad path/to/reference.h5ad \\
        --celltype-key cell_type \\
        --region-key layer \\
        --strategy top2_overlap \\
        --n-spots 10 20 \\
        --depth 5000 1000 \\
        --mock \\
        --output-dir ./synthetic_spots
"""

import argparse
import logging
import sys
from typing import Optional

from spotsim.exceptions import SpotSimError
from spotsim.io.loaders import load_anndata
from spotsim.simulation.config.dataclasses import MixingStrategy, SynthesisConfig
from spotsim.simulation.config.presets import SynthesisPresets
from spotsim.simulation.synthesizer import SpotSynthesizer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Synthesize spatial pseudo-spots from labeled single-cell counts",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--h5ad", required=True, help="Path to h5ad file with raw counts")
    parser.add_argument("--output-dir", default="./synthetic_spots", help="Output directory")
    parser.add_argument("--celltype-key", default="cell_type", help="obs key for cell types")
    parser.add_argument("--region-key", default="region", help="obs key for regions")
    parser.add_argument("--layer", default=None, help="Layer with raw counts (default: X)")

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--config", default=None, help="JSON configuration file")
    source.add_argument(
        "--preset", default=None, choices=SynthesisPresets.list_presets(),
        help="Named preset configuration",
    )

    parser.add_argument(
        "--strategy", default=None, choices=[s.value for s in MixingStrategy],
        help="Mixing strategy (overrides config)",
    )
    parser.add_argument(
        "--n-spots", nargs=2, type=int, default=None, metavar=("MIN", "MAX"),
        help="Inclusive spot count range per region",
    )
    parser.add_argument(
        "--depth", nargs=2, type=float, default=None, metavar=("MEAN", "STD"),
        help="Target depth distribution",
    )
    parser.add_argument("--max-cells", type=int, default=None, help="Draw budget per spot")
    parser.add_argument(
        "--replace", action="store_true", help="Allow repeated cells within a spot"
    )
    parser.add_argument("--mock", action="store_true", help="Add the shuffled-gene mock region")
    parser.add_argument("--filter-zero-genes", action="store_true", help="Drop all-zero genes")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--no-h5ad", action="store_true", help="Skip writing spots.h5ad")
    return parser


def config_from_args(args: argparse.Namespace) -> SynthesisConfig:
    """Merge a config file or preset with command-line overrides."""
    if args.config:
        config = SynthesisConfig.load(args.config)
    elif args.preset:
        config = SynthesisPresets.get_preset(args.preset)
    else:
        config = SynthesisConfig()

    if args.strategy is not None:
        config.strategy = MixingStrategy.parse(args.strategy)
    if args.n_spots is not None:
        config.spots.min_spots, config.spots.max_spots = args.n_spots
    if args.depth is not None:
        config.depth.mean, config.depth.std = args.depth
    if args.max_cells is not None:
        config.sampling.max_cells_per_spot = args.max_cells
    if args.replace:
        config.sampling.replace_within_spot = True
    if args.mock:
        config.mock.enabled = True
    if args.filter_zero_genes:
        config.filter_zero_genes = True
    if args.seed is not None:
        config.random_seed = args.seed

    # outputs go to --output-dir only
    config.output_dir = None

    return config


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        config = config_from_args(args)
        cells = load_anndata(
            args.h5ad,
            celltype_key=args.celltype_key,
            region_key=args.region_key,
            layer=args.layer,
        )
        result = SpotSynthesizer(config).generate(cells)
    except SpotSimError as e:
        logger.error(str(e))
        return 2

    from spotsim.io.export import save_synthesis

    save_synthesis(result, args.output_dir, write_h5ad=not args.no_h5ad)
    return 0


if __name__ == "__main__":
    sys.exit(main())
