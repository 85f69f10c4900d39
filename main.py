import sys
import argparse
import json
import logging
import yaml
from core.detector import DeviceDetector
from core.config_loader import DetectorOptions, load_detector_options
from core.parser_registry import ParserRegistry
from rules.rules_loader import RuleTableError


def _read_user_agents(path: str):
    """Yield non-empty lines of path, or of stdin for '-'."""
    stream = sys.stdin if path == "-" else open(path, "r", encoding="utf-8")
    try:
        for line in stream:
            line = line.strip()
            if line:
                yield line
    finally:
        if stream is not sys.stdin:
            stream.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="User agent device detection CLI")
    parser.add_argument("user_agents", nargs="*", help="User agent strings to classify")
    parser.add_argument("--file", type=str, help="Read user agents from a file, one per line ('-' for stdin)")
    parser.add_argument("--config", type=str, help="Path to a YAML file with detector options")
    parser.add_argument("--discard-bot-details", action="store_true", help="Only report whether a user agent is a bot")
    parser.add_argument("--skip-bot-detection", action="store_true", help="Do not run bot detection")
    parser.add_argument("--client-parsers", type=str, nargs="+", help="Client parser chain in order (e.g., --client-parsers 'mobile app' browser)")
    parser.add_argument("--device-parsers", type=str, nargs="*", help="Device parser chain in order; pass no names for an empty chain")
    parser.add_argument("--rules-dir", type=str, help="Directory with the rule tables (default: bundled rules)")
    parser.add_argument("--list-parsers", action="store_true", help="List all available parsers and exit")
    parser.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: WARNING)")
    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    # List parsers if requested
    if args.list_parsers:
        print("Available parsers:")
        print("\nClient parsers:")
        for name in ParserRegistry.get_parsers_by_kind("client"):
            print(f"  - {name}")
        print("\nDevice parsers:")
        for name in ParserRegistry.get_parsers_by_kind("device"):
            print(f"  - {name}")
        return 0

    if not args.user_agents and not args.file:
        parser.error("at least one user agent or --file is required unless using --list-parsers")

    try:
        options = load_detector_options(args.config) if args.config else DetectorOptions()
    except (ValueError, yaml.YAMLError) as e:
        logger.error(f"Invalid configuration file {args.config}: {e}")
        return 2

    if args.discard_bot_details:
        options.discard_bot_details = True
    if args.skip_bot_detection:
        options.skip_bot_detection = True
    if args.client_parsers is not None:
        options.client_parsers = args.client_parsers
    if args.device_parsers is not None:
        options.device_parsers = args.device_parsers
    if args.rules_dir:
        options.rules_dir = args.rules_dir

    try:
        detector = DeviceDetector.from_options(options)
    except ValueError as e:
        logger.error(f"Invalid parser configuration: {e}")
        return 2

    user_agents = list(args.user_agents)
    if args.file:
        try:
            user_agents.extend(_read_user_agents(args.file))
        except FileNotFoundError:
            logger.error(f"User agent file not found: {args.file}")
            return 2

    logger.info(f"Classifying {len(user_agents)} user agents")
    try:
        results = [detector.parse(ua).to_dict() for ua in user_agents]
    except RuleTableError as e:
        logger.error(f"Could not load rule tables: {e}")
        return 1

    print(json.dumps(results, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
