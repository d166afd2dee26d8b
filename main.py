#!/usr/bin/env python3
"""
Main orchestration script for Friction Scope.

Replays a recorded pointer event log through a tracking session:
1. Event capture (movements, clicks, hovers, corrections)
2. Metric computation (jitter, hesitation, corrections, idle motion, speed)
3. Deviation scoring against the age-group baseline
4. Friction classification and explanation
5. Optional result storage and prompt export

Usage:
    python main.py --events session_events.json --age-group 9-11 --output result.json

Event log format: either a JSON list of events, or an object with
``events`` and optional ``age_group``, ``session_start_ms``,
``session_end_ms``, ``learner_id`` and ``task_type``. Each event is
``{kind, timestamp_ms, x, y, target_id, target_kind}``.

Non-diagnostic: results describe interaction friction, not ability.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from reporting import generate_llm_prompt
from session import SessionController, SessionResult
from utils.config_loader import load_config
from utils.session_store import SessionStore

logger = logging.getLogger(__name__)


def load_event_log(path: str) -> Dict[str, Any]:
    """
    Load an event log file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a list or an object with ``events``
    """
    log_path = Path(path)
    if not log_path.exists():
        raise FileNotFoundError(f"Event log not found: {log_path}")

    with open(log_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, list):
        data = {'events': data}
    if not isinstance(data, dict) or not isinstance(data.get('events'), list):
        raise ValueError(f"Event log must be a list or contain an 'events' list: {log_path}")

    return data


def _event_time(event: Dict[str, Any]):
    for key in ('timestamp_ms', 'timestampMs', 'timestamp'):
        if event.get(key) is not None:
            return float(event[key])
    return None


def replay_session(
    events: List[Dict[str, Any]],
    age_group: str,
    config: Dict,
    session_start_ms: float = None,
    session_end_ms: float = None
) -> SessionResult:
    """
    Run a full session over recorded events.

    Start and end default to the first and last event timestamps.
    """
    times = [t for t in (_event_time(e) for e in events) if t is not None]
    start = session_start_ms if session_start_ms is not None else (min(times) if times else 0.0)
    end = session_end_ms if session_end_ms is not None else (max(times) if times else start)

    controller = SessionController(age_group=age_group, config=config)
    controller.start(target='replay', timestamp_ms=start)

    accepted = sum(1 for event in events if controller.dispatch(event))
    logger.info(f"Replayed {accepted}/{len(events)} events")

    return controller.stop(timestamp_ms=end)


def main():
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        description='Friction Scope - Pointer interaction friction analysis',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  python main.py --events session.json

  # With age group and stored result
  python main.py --events session.json --age-group 12-14 --db data/results/friction_scope.db

  # Also write the generative-text prompt
  python main.py --events session.json --output result.json --prompt prompt.txt
        """
    )

    parser.add_argument('--events', type=str, required=True, help='Path to recorded event log (JSON)')
    parser.add_argument('--age-group', type=str, default=None, help='Baseline age group (default: from log or config)')
    parser.add_argument('--config', type=str, default=None, help='Path to configuration YAML file (default: configs/thresholds.yaml)')
    parser.add_argument('--output', type=str, default=None, help='Write SessionResult JSON here (default: stdout)')
    parser.add_argument('--db', type=str, default=None, help='Store the result in this SQLite database')
    parser.add_argument('--prompt', type=str, default=None, help='Write the generative-text prompt here')
    parser.add_argument('--age', type=int, default=None, help='Learner age for domain screening in the prompt (default: from log or age group)')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('friction_scope.log'),
            logging.StreamHandler(sys.stderr)
        ]
    )

    try:
        config = load_config(args.config)
        log = load_event_log(args.events)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    age_group = args.age_group or log.get('age_group') or config['scoring']['default_age_group']

    try:
        result = replay_session(
            log['events'],
            age_group,
            config,
            session_start_ms=log.get('session_start_ms'),
            session_end_ms=log.get('session_end_ms')
        )
    except KeyboardInterrupt:
        logger.warning("Replay interrupted by user")
        sys.exit(1)

    logger.info(f"Friction level: {result.friction_level.value.upper()}")
    logger.info(f"Explanation: {result.explanation.summary}")

    output = json.dumps(result.to_dict(), indent=2)
    if args.output:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        Path(args.output).write_text(output, encoding='utf-8')
        logger.info(f"✓ Result saved: {args.output}")
    else:
        print(output)

    if args.db:
        session_id = log.get('session_id') or f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        SessionStore(args.db).save_result(
            session_id,
            result,
            learner_id=log.get('learner_id'),
            task_type=log.get('task_type')
        )

    if args.prompt:
        prompt = generate_llm_prompt(
            result,
            task_type=log.get('task_type') or 'reading_comprehension',
            learner_id=log.get('learner_id') or 'learner_01',
            config=config,
            age=args.age if args.age is not None else log.get('age')
        )
        Path(args.prompt).write_text(prompt, encoding='utf-8')
        logger.info(f"✓ Prompt saved: {args.prompt}")

    sys.exit(0)


if __name__ == '__main__':
    main()
