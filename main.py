"""Command-line entry point for textdedup.

Loads environment variables, builds a session against the configured
engine, applies the requested strategy, submits every input text and
prints the resulting duplicate groups as JSON.
"""
from dotenv import load_dotenv
import argparse
import asyncio
import json
import os
import sys
from typing import Iterable, List, Optional

# Load environment variables first, before any other imports
load_dotenv()

from textdedup.config import get_config, reload_config
from textdedup.engine.factory import get_engine
from textdedup.errors import DedupError
from textdedup.session.controller import SessionController
from textdedup.strategy.files import load_strategy_file
from textdedup.strategy.models import DedupStrategy
from textdedup.strategy.presets import get_catalog
from textdedup.utils.logger import log_error, log_info, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find near-duplicate passages in a set of texts.")
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--preset', type=str, help='Name of the preset strategy to apply.')
    source.add_argument('--strategy-file', type=str, help='YAML or JSON strategy file to apply.')
    parser.add_argument('--list-presets', action='store_true', help='Print the preset catalog and exit.')
    parser.add_argument('--mode', choices=['accumulate', 'reset'], help='Corpus submission mode.')
    parser.add_argument('--engine', choices=['local', 'http'], help='Comparison engine backend.')
    parser.add_argument('--engine-url', type=str, help='Base URL of an HTTP engine.')
    parser.add_argument('--threshold', type=float, help='Override the similarity threshold (0-1).')
    parser.add_argument('files', nargs='*', help='Input files, one text per non-empty line (default: stdin).')
    return parser


def read_texts(paths: List[str], stdin=None) -> List[str]:
    """Collect one text per non-empty line from ``paths`` (or stdin)."""
    def _lines(stream: Iterable[str]) -> List[str]:
        return [line.rstrip("\n") for line in stream if line.strip()]

    if not paths:
        return _lines(stdin or sys.stdin)

    texts: List[str] = []
    for path in paths:
        with open(path, "r", encoding="utf-8") as f:
            texts.extend(_lines(f))
    return texts


async def run_session(
    texts: List[str],
    preset: Optional[str] = None,
    strategy: Optional[DedupStrategy] = None,
    threshold: Optional[float] = None,
) -> SessionController:
    """Drive one session to completion and return the controller for inspection."""
    async with get_engine() as engine:
        controller = SessionController(engine)

        if strategy is not None:
            applied = await controller.set_strategy(strategy)
        elif preset is not None:
            applied = await controller.apply_preset(preset)
        else:
            applied = await controller.start()
        if applied is None:
            return controller

        if threshold is not None and await controller.update_strategy(similarity_threshold=threshold) is None:
            return controller

        for text in texts:
            if await controller.submit_text(text) is None:
                break
        return controller


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Apply parsed arguments to environment variables
    if args.mode is not None:
        os.environ['TEXTDEDUP_SUBMISSION_MODE'] = args.mode
    if args.engine is not None:
        os.environ['TEXTDEDUP_ENGINE_BACKEND'] = args.engine
    if args.engine_url is not None:
        os.environ['TEXTDEDUP_ENGINE_URL'] = args.engine_url

    config = reload_config()
    set_log_level(config.log_level, config.log_format)

    if args.list_presets:
        presets = [
            {"name": p.name, "description": p.description, "settings": p.settings.to_wire()}
            for p in get_catalog().list()
        ]
        print(json.dumps(presets, indent=2, ensure_ascii=False))
        return 0

    config.log_configuration()
    issues = config.validate_configuration()
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("❌ Configuration issues found:", file=sys.stderr)
        for issue in issues:
            print(f"  - {issue}", file=sys.stderr)
        return 1

    strategy = None
    if args.strategy_file:
        try:
            strategy = load_strategy_file(args.strategy_file)
        except (FileNotFoundError, DedupError) as e:
            log_error("Could not load strategy file", path=args.strategy_file, error=str(e))
            print(f"❌ {e}", file=sys.stderr)
            return 1

    try:
        texts = read_texts(args.files)
    except OSError as e:
        log_error("Could not read input", error=str(e))
        print(f"❌ {e}", file=sys.stderr)
        return 1

    log_info("Starting session", texts=len(texts), submission_mode=get_config().submission_mode)
    controller = asyncio.run(run_session(texts, preset=args.preset, strategy=strategy, threshold=args.threshold))

    output = {
        "strategy": controller.current_strategy.to_wire(),
        "status": controller.status.to_dict(),
        "result": controller.current_result.model_dump(mode="json"),
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 1 if controller.status.failed else 0


if __name__ == "__main__":
    sys.exit(main())
