#!/usr/bin/env python3
"""
Command-line interface for the container chaos scheduler
Provides commands for running schedule files and validating them.
"""
import sys
import argparse
import json
import yaml
import signal
import threading
import traceback
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import fields
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime
from .api import ChaosAPI, ChaosRuntime
from .dispatcher import load_dispatcher
from .models import ChaosSettings, ScheduleResult
from .schedule_file import ScheduleEntry, ScheduleLoader
from .scheduler import ErrorHandler

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(levelname)-5s | %(filename)s:%(lineno)-3d | %(message)s'


class ChaosCLI:
    """Command-line interface for the container chaos scheduler"""

    def __init__(self):
        self.settings = ChaosSettings()
        self.runtime: Optional[ChaosRuntime] = None

    def load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file"""
        path = Path(config_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {path.suffix}")

    def load_settings(self, config_path: str) -> ChaosSettings:
        """Build ChaosSettings from a config file"""
        data = self.load_config_file(config_path)
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        known = {f.name for f in fields(ChaosSettings)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

        self.settings = ChaosSettings(**data)
        return self.settings

    def build_runtime(self, dispatcher_spec: str) -> ChaosRuntime:
        """Create the process-wide runtime shared by all schedules"""
        dispatcher = load_dispatcher(dispatcher_spec)
        error_handler = ErrorHandler(history_limit=self.settings.error_history_limit)
        self.runtime = ChaosRuntime(
            dispatcher=dispatcher,
            runtime_client=self.settings.runtime_client,
            error_handler=error_handler
        )
        return self.runtime

    def run_schedules(self, args) -> int:
        """Run every schedule in a schedule file until done or interrupted"""
        self._print_header(f"Chaos Schedules: {args.file}")

        if args.config:
            try:
                self.load_settings(args.config)
                print(f"Loaded configuration from {args.config}")
            except Exception as e:
                print(f"Error: Failed to load config file: {e}")
                print(f"\nConfig file must be YAML (.yaml, .yml) or JSON (.json)")
                return 1

        logging.getLogger().setLevel('DEBUG' if args.verbose else self.settings.log_level.upper())

        try:
            entries = ScheduleLoader.load_from_file(args.file)
        except Exception as e:
            print(f"Error: Failed to load schedule file: {e}")
            print(f"\nTry validating your schedule file first: container-chaos validate {args.file}")
            return 1

        try:
            runtime = self.build_runtime(args.dispatcher or self.settings.dispatcher)
        except Exception as e:
            print(f"Error: {e}")
            return 1

        print(f"Dispatcher: {type(runtime.dispatcher).__name__}")
        print(f"Schedules: {len(entries)}")
        print()

        api = ChaosAPI(runtime)
        restore_handlers = self._install_signal_handlers(runtime)
        try:
            results, failed_to_start = self._run_entries(api, entries)
        finally:
            restore_handlers()

        self._print_summary(results)

        if args.output:
            self._save_results(results, args.output, args.format)

        return 1 if failed_to_start else 0

    def _run_entries(self, api: ChaosAPI, entries: List[ScheduleEntry]):
        """Run each entry on its own worker thread and collect the results"""
        results: List[ScheduleResult] = []
        failed_to_start = 0
        max_workers = self.settings.max_workers or len(entries)
        self._check_worker_capacity(entries, max_workers)

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='chaos') as executor:
            futures = {executor.submit(api.run_entry, entry): entry for entry in entries}
            pending = set(futures)
            while pending:
                # Poll so the main thread keeps handling SIGINT/SIGTERM
                _, pending = wait(pending, timeout=0.5)
                if api.runtime.cancelled:
                    pending = {f for f in pending if not f.cancel()}

            for future, entry in futures.items():
                if future.cancelled():
                    logger.info(f"Schedule {entry.index} ({entry.action}) was not started before cancellation")
                    continue
                try:
                    results.append(future.result())
                except Exception as e:
                    failed_to_start += 1
                    logger.error(f"Schedule {entry.index} ({entry.action}) failed: {e}")

        return results, failed_to_start

    def _check_worker_capacity(self, entries: List[ScheduleEntry], max_workers: int) -> bool:
        """Warn when repeating schedules can hold every worker; returns False in that case"""
        repeating = [entry for entry in entries if entry.interval > 0]
        if max_workers >= len(entries) or not repeating:
            return True

        logger.warning(f"max_workers={max_workers} is lower than the {len(entries)} schedules and "
                       f"{len(repeating)} of them repeat until canceled; queued schedules may never start")
        return False

    def _install_signal_handlers(self, runtime: ChaosRuntime):
        """Cancel the root context on SIGINT/SIGTERM; returns a function restoring previous handlers"""
        if threading.current_thread() is not threading.main_thread():
            return lambda: None

        def handle_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, stopping chaos schedules")
            runtime.cancel()

        previous = {
            signum: signal.signal(signum, handle_signal)
            for signum in (signal.SIGINT, signal.SIGTERM)
        }

        def restore():
            for signum, handler in previous.items():
                signal.signal(signum, handler)

        return restore

    def validate_schedules(self, args) -> int:
        """Validate a schedule file"""
        self._print_header(f"Validating Schedules: {args.file}")

        schedule_path = Path(args.file)
        if not schedule_path.exists():
            print(f"Error: Schedule file not found: {args.file}")
            print(f"\nMake sure the file path is correct.")
            print(f"Example: container-chaos validate schedules.yaml")
            return 1

        try:
            entries = ScheduleLoader.load_from_file(schedule_path)
        except Exception as e:
            print(f"\nError: Validation failed: {e}")
            if args.verbose:
                traceback.print_exc()
            return 1

        print(f"Schedules: {len(entries)}")
        for entry in entries:
            print(f"  {entry.index + 1}. {entry.describe()}")
            if args.verbose:
                for key, value in entry.arguments.items():
                    print(f"       {key}: {value}")

        print("\nSchedule file is valid!")
        return 0

    def _print_header(self, title: str):
        """Print formatted header"""
        print()
        print("=" * 80)
        print(title)
        print("=" * 80)
        print()

    def _print_summary(self, results: List[ScheduleResult]):
        """Print one line per terminated schedule"""
        print("\n" + "=" * 80)
        print("Schedule Results")
        print("=" * 80)

        for result in results:
            reason = result.termination_reason.value if result.termination_reason else "unknown"
            print(f"{result.command_type.value:<18} {reason:<10} "
                  f"executions={result.executions} failures={result.failures} "
                  f"duration={result.duration:.2f}s")
            if result.last_error:
                print(f"  Last error: {result.last_error}")

        if self.runtime:
            summary = self.runtime.error_handler.get_error_summary()
            print(f"\nTotal action errors: {summary['total_errors']}")

    def _save_results(self, results: List[ScheduleResult], output_path: str, format: str):
        """Save schedule results to file"""
        try:
            output = Path(output_path)
            output.parent.mkdir(parents=True, exist_ok=True)

            data = {
                'timestamp': datetime.now().isoformat(),
                'total_schedules': len(results),
                'total_executions': sum(r.executions for r in results),
                'total_failures': sum(r.failures for r in results),
                'results': [self._result_to_dict(r) for r in results]
            }
            if self.runtime:
                data['errors'] = self.runtime.error_handler.get_error_summary()

            with open(output, 'w') as f:
                if format == 'json':
                    json.dump(data, f, indent=2)
                elif format == 'yaml':
                    yaml.dump(data, f, default_flow_style=False)

            print(f"\nResults saved to {output_path}")

        except Exception as e:
            print(f"\nFailed to save results: {e}")

    def _result_to_dict(self, result: ScheduleResult) -> Dict[str, Any]:
        """Convert ScheduleResult to dictionary"""
        return {
            'schedule_id': result.schedule_id,
            'command_type': result.command_type.value,
            'interval': result.interval,
            'state': result.state.value,
            'termination_reason': result.termination_reason.value if result.termination_reason else None,
            'executions': result.executions,
            'failures': result.failures,
            'duration': result.duration,
            'last_error': result.last_error
        }


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog='container-chaos',
        description='Container chaos scheduler - kill containers and emulate network faults on a schedule',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run schedules with the logging-only dispatcher
  container-chaos run schedules.yaml

  # Run schedules with a dispatcher from your own package
  container-chaos run schedules.yaml --dispatcher mypackage.docker_chaos:DockerDispatcher

  # Save results when all schedules stop (Ctrl+C stops repeating schedules)
  container-chaos run schedules.yaml --output results.json

  # Validate a schedule file
  container-chaos validate schedules.yaml
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version='Container Chaos 0.1.0'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    run_parser = subparsers.add_parser(
        'run',
        help='Run the schedules in a schedule file'
    )
    run_parser.add_argument(
        'file',
        help='Path to schedule YAML or JSON file'
    )
    run_parser.add_argument(
        '--dispatcher',
        type=str,
        metavar='SPEC',
        help="Action dispatcher: 'dry-run' or 'module:attribute' (default: from config, else dry-run)"
    )
    run_parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration file (YAML or JSON)'
    )
    run_parser.add_argument(
        '--output',
        type=str,
        help='Path to save schedule results'
    )
    run_parser.add_argument(
        '--format',
        choices=['json', 'yaml'],
        default='json',
        help='Output format for results (default: json)'
    )
    run_parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    validate_parser = subparsers.add_parser(
        'validate',
        help='Validate a schedule file'
    )
    validate_parser.add_argument(
        'file',
        help='Path to schedule YAML or JSON file'
    )
    validate_parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show every schedule argument'
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point for CLI"""

    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()]
    )

    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        print("Error: No command specified\n")
        parser.print_help()
        return 1

    cli = ChaosCLI()

    try:
        if args.command == 'run':
            return cli.run_schedules(args)
        elif args.command == 'validate':
            return cli.validate_schedules(args)
    except KeyboardInterrupt:
        print("\n\nContainer chaos process was interrupted by user")
        return 130
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        if hasattr(args, 'verbose') and args.verbose:
            traceback.print_exc()
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
