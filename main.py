#!/usr/bin/env python3
"""
Command-line entry point for Motor Screen.

Scores one captured test and prints the result as JSON:
1. Load the raw capture buffer (JSON file)
2. Score it with the matching modality scorer
3. Attach a recommendation (scores are kept if this fails)
4. Optionally store the result for a user

Usage:
    python main.py --test spiral --input samples/spiral.json
    python main.py --test tapping --input taps.json --duration 10 --user u123 --store
    python main.py --serve

Exit codes:
    0 on success (also when no recommendation could be generated)
    2 on malformed input
    1 on any other failure
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from recommendation import TemplateRecommendationProvider, attach_recommendation
from scoring import TEST_TYPES, analyze_tremor_trend, score_test
from scoring.errors import InvalidInputError, RecommendationUnavailable
from utils.config_loader import get_nested_config, load_config
from utils.result_store import ResultStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def setup_logging(config: Dict):
    """Configure root logging from the 'logging' config section."""
    level_name = str(get_nested_config(config, 'logging.level', 'INFO')).upper()
    log_file = get_nested_config(config, 'logging.file')

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def run_scoring(
    test_type: str,
    payload,
    config: Dict,
    duration: Optional[float] = None,
    user_id: Optional[str] = None,
    store: bool = False
) -> Dict:
    """
    Score one payload and return the output record.

    Args:
        test_type: spiral, tapping, reaction, voice or tremor
        payload: Decoded capture JSON
        config: Configuration dictionary
        duration: Tapping duration override (seconds)
        user_id: Owner used when storing
        store: Persist the result

    Returns:
        JSON-serializable result record
    """
    logger.info(f"Scoring {test_type} test")

    if test_type == 'tremor':
        readings = payload.get('readings') if isinstance(payload, dict) else payload
        return analyze_tremor_trend(readings).to_dict()

    default_duration = duration if duration is not None else get_nested_config(
        config, 'tapping.default_duration_sec', 10
    )
    if duration is not None and isinstance(payload, dict):
        payload = {**payload, 'duration': duration}

    result = score_test(test_type, payload, default_duration=default_duration)

    output: Dict = {}
    provider = TemplateRecommendationProvider.from_config(config)
    try:
        result = attach_recommendation(result, provider)
    except RecommendationUnavailable as e:
        logger.warning(f"{e}; reporting scores without a recommendation")
        output['recommendation_error'] = str(e)

    output.update(result.to_dict())

    if store:
        if not user_id:
            raise ValueError("--store requires --user")
        db = ResultStore(get_nested_config(config, 'storage.db_path', 'data/results/motor_screen.db'))
        output['result_id'] = db.save_result(user_id, result, raw_data=payload)

    logger.info(f"{test_type} overall score: {output.get('overall_score')} ({output.get('risk_level')})")

    return output


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Motor Screen - Motor and Vocal Biomarker Scoring',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score a spiral drawing
  python main.py --test spiral --input spiral.json

  # Score and store a tapping test
  python main.py --test tapping --input taps.json --user u123 --store

  # Start the REST API
  python main.py --serve
        """
    )

    parser.add_argument(
        '--test',
        choices=list(TEST_TYPES) + ['tremor'],
        help='Test type to score'
    )

    parser.add_argument(
        '--input',
        type=str,
        help='Path to JSON capture file'
    )

    parser.add_argument(
        '--duration',
        type=float,
        default=None,
        help='Tapping test duration in seconds (default: from config)'
    )

    parser.add_argument(
        '--user',
        type=str,
        default=None,
        help='User id the result belongs to'
    )

    parser.add_argument(
        '--store',
        action='store_true',
        help='Persist the result in the result store (not available for tremor)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration YAML file (default: configs/defaults.yaml)'
    )

    parser.add_argument(
        '--serve',
        action='store_true',
        help='Start the REST API instead of scoring a file'
    )

    args = parser.parse_args(argv)

    if args.test == 'tremor' and args.store:
        parser.error("--store is not supported for --test tremor (tremor trends are not persisted)")

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(config)

    if args.serve:
        from utils.api_server import start_server
        start_server(
            host=get_nested_config(config, 'api.host', '127.0.0.1'),
            port=get_nested_config(config, 'api.port', 8000),
            config=config
        )
        return EXIT_OK

    if not args.test or not args.input:
        parser.error("--test and --input are required unless --serve is given")

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {input_path}")
        return EXIT_FAILURE

    try:
        with open(input_path, 'r') as f:
            payload = json.load(f)

        output = run_scoring(
            args.test,
            payload,
            config,
            duration=args.duration,
            user_id=args.user,
            store=args.store
        )

    except (InvalidInputError, json.JSONDecodeError) as e:
        logger.error(f"✗ Invalid input: {e}")
        return EXIT_INVALID_INPUT

    except Exception as e:
        logger.error("✗ ERROR: Scoring failed with exception:")
        logger.error(f"  {type(e).__name__}: {str(e)}")
        logger.exception("Full traceback:")
        return EXIT_FAILURE

    print(json.dumps(output, indent=2))
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
