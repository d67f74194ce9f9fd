"""
Census Tract Mapping Script
Resolves case coordinates to census tracts and shades tracts by case count

Example:
    python scripts/map_cases.py data/cases.csv data/tl_2010_42101_tract10 --year 2010 --verbose
"""

import argparse
import logging
import sys
from pathlib import Path

import geopandas as gpd

from tract_lookup.geo.loader import load_tracts
from tract_lookup.lookup.ingest import read_coordinates
from tract_lookup.pipeline import run_tract_mapping
from tract_lookup.shared.config import get_config
from tract_lookup.shared.errors import ConfigurationError
from tract_lookup.shared.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Map case coordinates to census tracts")
    parser.add_argument("cases", help="CSV with latitude and longitude columns")
    parser.add_argument("shapefile", help="TIGER/Line tract shapefile (extension optional)")
    parser.add_argument("--year", type=int, required=True, help="Shapefile year (2007 - present)")
    parser.add_argument("--verbose", action="store_true", help="Log every coordinate")
    parser.add_argument("--output-dir", default="data/output", help="Directory for outputs")
    parser.add_argument("--environment", choices=["dev", "prod"], default=None)
    return parser.parse_args(argv)


def map_cases(cases_path, shapefile, year, verbose=False, output_dir="data/output", config=None):
    """
    Run the tract mapping and write its outputs

    Args:
        cases_path: Path to the cases CSV
        shapefile: Path to the tract shapefile
        year: Shapefile year
        verbose: Log every coordinate during the lookup
        output_dir: Directory for the result files
        config: Optional config object

    Returns:
        Dictionary of output paths
    """
    config = config or get_config()
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)

    cases = read_coordinates(cases_path, config=config)
    tracts = load_tracts(shapefile)

    result = run_tract_mapping(cases, tracts, year, verbose=verbose, config=config)

    paths = {
        "results": output / "tract_results.csv",
        "cases": output / "cases_with_tracts.csv",
    }
    result.results.to_csv(paths["results"], index=False)
    result.cases.to_csv(paths["cases"], index=False)

    if isinstance(result.tract_table, gpd.GeoDataFrame):
        paths["tracts"] = output / "tracts_classified.geojson"
        result.tract_table.to_file(paths["tracts"], driver="GeoJSON")
    else:
        paths["tracts"] = output / "tracts_classified.csv"
        result.tract_table.to_csv(paths["tracts"], index=False)

    for name, path in paths.items():
        logger.info(f"Saved {name} to {path}")

    logger.info(f"  Records: {result.rows_input}")
    logger.info(f"  Resolved: {result.rows_matched}")
    logger.info(f"  Outside all tracts: {result.rows_unmatched}")
    logger.info(f"  Missing coordinates: {result.rows_missing}")
    logger.info(f"  Class breaks: {list(result.breaks.breaks)}")

    return {name: str(path) for name, path in paths.items()}


def main(argv=None):
    args = parse_args(argv)
    config = get_config(args.environment)
    configure_logging(config)

    try:
        map_cases(
            args.cases,
            args.shapefile,
            args.year,
            verbose=args.verbose,
            output_dir=args.output_dir,
            config=config,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
