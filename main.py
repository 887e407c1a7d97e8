# main.py
"""Command line entry point for the market factor scoring engine."""
import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.config.settings import Settings
from src.models.errors import MarketFactorError
from src.orchestrator import MarketFactorsService


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


def create_data_dirs(settings: Settings) -> None:
    """Create the JSON storage directory when that backend is configured."""
    if settings.storage.backend != "json":
        return

    Path(settings.storage.data_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Data directories verified")


def print_startup_banner(settings: Settings) -> None:
    """Print system startup banner."""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.system.name}")
    logger.info(f"Version: {settings.system.version}")
    logger.info(f"Storage: {settings.storage.backend}")
    logger.info("=" * 60)


def load_and_validate_config(config_path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """Load and validate configuration.

    A missing config file falls back to defaults; an unreadable one is fatal.

    Returns:
        Settings object loaded from YAML.

    Raises:
        SystemExit: If YAML parsing or validation fails.
    """
    # Load environment variables
    load_dotenv()

    if not config_path.exists():
        logger.warning(f"{config_path} not found, using default settings")
        settings = Settings()
    else:
        try:
            settings = Settings.from_yaml(config_path)
            logger.info(f"✓ Settings loaded from {config_path}")
        except Exception as e:
            logger.error(f"Failed to parse {config_path}: {e}")
            sys.exit(1)

    logging.getLogger().setLevel(settings.system.log_level)
    create_data_dirs(settings)

    return settings


def _parse_readings(pairs: list[str], key: str) -> list[dict]:
    """Parse ``NAME=VALUE`` pairs into reading dicts."""
    readings = []
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {pair!r}")
        try:
            readings.append({key: name, "value": float(value)})
        except ValueError:
            raise argparse.ArgumentTypeError(f"Invalid value in {pair!r}") from None
    return readings


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Market factor correlation and scoring engine")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    commands = parser.add_subparsers(dest="command", required=True)

    correlate = commands.add_parser("correlate", help="Set a symbol/factor correlation")
    correlate.add_argument("symbol")
    correlate.add_argument("factor")
    correlate.add_argument("coefficient", type=float)

    correlated = commands.add_parser("correlated", help="List strongly correlated factors")
    correlated.add_argument("symbol")
    correlated.add_argument("--threshold", type=float, default=None)

    commands.add_parser("matrix", help="Dump the correlation matrix")

    track = commands.add_parser("track", help="Track an indicator prediction")
    track.add_argument("indicator")
    track.add_argument("symbol")
    track.add_argument("action", choices=["buy", "sell", "hold"])
    track.add_argument("confidence", type=float)
    track.add_argument("price", type=float)
    track.add_argument("--horizon", default="1d")

    resolve = commands.add_parser("resolve", help="Resolve a tracked prediction")
    resolve.add_argument("prediction_id")
    resolve.add_argument("outcome", choices=["correct", "incorrect"])
    resolve.add_argument("actual_price", type=float)

    accuracy = commands.add_parser("accuracy", help="Show indicator accuracy")
    accuracy.add_argument("indicator", nargs="?")

    score = commands.add_parser("score", help="Calculate a weighted score")
    score.add_argument("symbol")
    score.add_argument("--factor", action="append", default=[], metavar="SYMBOL=VALUE")
    score.add_argument("--indicator", action="append", default=[], metavar="NAME=VALUE")

    return parser


def _accuracy_to_dict(service: MarketFactorsService, indicator: str) -> dict:
    stats = service.get_indicator_accuracy(indicator)
    return {
        "indicator": stats.indicator,
        "total_predictions": stats.total_predictions,
        "correct_predictions": stats.correct_predictions,
        "average_accuracy": stats.average_accuracy,
        "buy_accuracy": stats.buy_accuracy,
        "sell_accuracy": stats.sell_accuracy,
        "hold_accuracy": stats.hold_accuracy,
        "performance_score": service.get_indicator_performance_score(indicator),
    }


def run_command(service: MarketFactorsService, args: argparse.Namespace):
    """Run one CLI command and return a JSON-serializable result."""
    if args.command == "correlate":
        service.set_correlation(args.symbol, args.factor, args.coefficient)
        return {
            "pair": f"{args.symbol}:{args.factor}",
            "correlation": args.coefficient,
            "strength": service.get_correlation_strength(args.coefficient).value,
        }
    if args.command == "correlated":
        return [
            {"factor": f.factor, "correlation": f.correlation}
            for f in service.get_correlated_factors(args.symbol, args.threshold)
        ]
    if args.command == "matrix":
        return service.get_correlation_matrix()
    if args.command == "track":
        prediction_id = service.track_indicator_prediction(
            args.indicator, args.symbol, args.action, args.confidence, args.price, args.horizon
        )
        return {"prediction_id": prediction_id}
    if args.command == "resolve":
        record = service.update_indicator_accuracy(
            args.prediction_id, args.outcome, args.actual_price
        )
        return {"prediction_id": record.id, "status": record.status.value}
    if args.command == "accuracy":
        if args.indicator:
            return _accuracy_to_dict(service, args.indicator)
        return [
            _accuracy_to_dict(service, stats.indicator)
            for stats in service.get_all_indicator_accuracy()
        ]
    if args.command == "score":
        result = service.calculate_weighted_score(
            args.symbol,
            _parse_readings(args.factor, "symbol"),
            _parse_readings(args.indicator, "name"),
        )
        return result.to_dict()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the command and print its JSON result."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_and_validate_config(args.config)
    print_startup_banner(settings)
    service = MarketFactorsService.from_settings(settings)

    try:
        result = run_command(service, args)
    except (MarketFactorError, argparse.ArgumentTypeError) as e:
        logger.error(str(e))
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
