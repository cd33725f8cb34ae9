#!/usr/bin/env python3
"""
SmartCrawl - Command Line Entry Point

crawl      Crawl a website and write its element inventory
learn      Feed test outcomes to the learning engine and print insights
recommend  Print the recommended actions for every element of an inventory
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

from .config import CrawlerConfig
from .errors import SessionInitError
from .exploration.crawler import CrawlOrchestrator, CrawlResult
from .exploration.elements.models import ElementDescriptor
from .learning.engine import LearningEngine
from .learning.outcome_store import parse_outcomes

logger = logging.getLogger(__name__)

console = Console()

MODEL_LOAD_TIMEOUT = 30  # seconds


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='smartcrawl',
        description='Crawl websites for interactive elements and learn from test outcomes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  smartcrawl crawl https://example.com --depth 2
  smartcrawl learn results.json
  smartcrawl recommend inventory.json
        """
    )
    parser.add_argument('--env-file', help='Path to a .env file with SMARTCRAWL_* settings')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    crawl = subparsers.add_parser('crawl', help='Crawl a website and build an element inventory')
    crawl.add_argument('url', help='Start URL')
    crawl.add_argument('--depth', type=int, help='Maximum crawl depth (default: 3)')
    crawl.add_argument('--concurrency', type=int, help='Number of pages crawled in parallel')
    crawl.add_argument('--max-pages', type=int, help='Stop after this many pages')
    crawl.add_argument('--headed', action='store_true', help='Show the browser window')
    crawl.add_argument('--output', '-o', default='inventory.json', help='Inventory output file')

    learn = subparsers.add_parser('learn', help='Ingest test outcomes (JSON array or JSON Lines)')
    learn.add_argument('results', help='File with outcome records')

    recommend = subparsers.add_parser('recommend', help='Recommend actions for an inventory')
    recommend.add_argument('inventory', help='Inventory file written by the crawl command')
    recommend.add_argument('--output', '-o', help='Write recommendations as JSON to this file')

    return parser


async def run_crawl(args: argparse.Namespace, config: CrawlerConfig) -> int:
    """Run the crawl command. Returns the process exit code."""
    if args.concurrency is not None:
        config.crawl.max_concurrency = args.concurrency
    if args.max_pages is not None:
        config.crawl.max_pages = args.max_pages
    if args.headed:
        config.browser.headless = False

    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # No signal handlers on this platform; Ctrl+C aborts instead
            pass

    orchestrator = CrawlOrchestrator(config)
    try:
        result = await orchestrator.crawl(args.url, args.depth, cancel_event=cancel_event)
    except SessionInitError as e:
        logger.error(f"❌ Could not start browsing session: {e}")
        return 1

    output = Path(args.output)
    output.write_text(json.dumps(result.to_dict(), indent=2), encoding='utf-8')
    print_crawl_summary(result, output)
    return 0


def print_crawl_summary(result: CrawlResult, output: Path) -> None:
    table = Table(title=f"Inventory for {result.start_url}")
    table.add_column('URL', overflow='fold')
    table.add_column('Elements', justify='right')
    for url, elements in result.inventory.items():
        table.add_row(url, str(len(elements)))
    console.print(table)

    failed = result.failed_urls
    for url in failed:
        console.print(f"[red]✗[/red] {url}")
    console.print(f"📊 {len(result.visited)} URLs visited, {len(failed)} failed to load, "
                  f"{result.duration:.1f}s" + (" (cancelled)" if result.cancelled else ""))
    console.print(f"📁 Inventory written to {output}")


def wait_for_model(engine: LearningEngine) -> None:
    """Give the saved model a bounded time to load; fall back to the default policy after that."""
    if engine.model_loading is None:
        return
    try:
        engine.model_loading.result(timeout=MODEL_LOAD_TIMEOUT)
    except FutureTimeoutError:
        logger.warning(f"Model still loading after {MODEL_LOAD_TIMEOUT}s; using default recommendations")


def run_learn(args: argparse.Namespace, config: CrawlerConfig) -> int:
    """Run the learn command. Returns the process exit code."""
    try:
        records = parse_outcomes(Path(args.results).read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.error(f"Could not read outcomes from {args.results}: {e}")
        return 2

    engine = LearningEngine(config.learning)
    try:
        wait_for_model(engine)
        trained = engine.analyze_results(records).result()
        if not trained:
            console.print("⚠️ Model not retrained; recommendations keep using the previous policy")

        table = Table(title='Element insights')
        table.add_column('Selector', overflow='fold')
        table.add_column('Success rate', justify='right')
        table.add_column('Suggestions')
        for insight in engine.get_insights():
            table.add_row(insight.element, f"{insight.success_rate:.1f}%", '\n'.join(insight.suggestions))
        console.print(table)
    finally:
        engine.close()
    return 0


def load_inventory(path: Path) -> Dict[str, List[ElementDescriptor]]:
    data = json.loads(path.read_text(encoding='utf-8'))
    inventory = data.get('inventory', data)
    return {
        url: [ElementDescriptor.from_dict(item) for item in elements]
        for url, elements in inventory.items()
    }


def run_recommend(args: argparse.Namespace, config: CrawlerConfig) -> int:
    """Run the recommend command. Returns the process exit code."""
    try:
        inventory = load_inventory(Path(args.inventory))
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error(f"Could not read inventory from {args.inventory}: {e}")
        return 2

    engine = LearningEngine(config.learning)
    try:
        wait_for_model(engine)
        mode = 'model' if engine.policy.model_available else 'default heuristic'

        table = Table(title=f"Recommended actions ({mode})")
        table.add_column('URL', overflow='fold')
        table.add_column('Kind')
        table.add_column('Selector', overflow='fold')
        table.add_column('Actions')

        plan = {}
        for url, elements in inventory.items():
            plan[url] = []
            for element in elements:
                steps = engine.recommend(element)
                plan[url].append({
                    'selector': element.selector,
                    'kind': element.kind.value,
                    'actions': [step.to_dict(encode_json=True) for step in steps],
                })
                table.add_row(url, element.kind.value, element.selector,
                              ' → '.join(step.action_type.value for step in steps))
        console.print(table)

        if args.output:
            Path(args.output).write_text(json.dumps(plan, indent=2), encoding='utf-8')
            console.print(f"📁 Recommendations written to {args.output}")
    finally:
        engine.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    config = CrawlerConfig.from_env(args.env_file)

    if args.command == 'crawl':
        return asyncio.run(run_crawl(args, config))
    if args.command == 'learn':
        return run_learn(args, config)
    return run_recommend(args, config)


if __name__ == "__main__":
    sys.exit(main())
