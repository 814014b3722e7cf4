#!/usr/bin/env python3
"""
Example script demonstrating how to embed the container chaos scheduler

Each public operation blocks for the lifetime of its schedule, so the script
runs every schedule on its own thread and cancels the shared root context
after a fixed time.
"""
import sys
import argparse
import logging
import threading
from ipaddress import ip_address
from pathlib import Path

# Add the repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from container_chaos import ChaosAPI, ChaosRuntime
from container_chaos.dispatcher import DryRunDispatcher


def main():
    parser = argparse.ArgumentParser(description="Run a few dry-run chaos schedules concurrently")
    parser.add_argument('--run-for', type=float, default=5.0, help='Seconds before all schedules are canceled')
    args = parser.parse_args()

    logging.basicConfig(format='%(levelname)-5s | %(filename)s:%(lineno)-3d | %(message)s', level=logging.INFO)

    runtime = ChaosRuntime(dispatcher=DryRunDispatcher())
    api = ChaosAPI(runtime)
    results = []

    schedules = [
        lambda: api.kill("SIGTERM", 2.0, ["web-1", "web-2"], ""),
        lambda: api.netem_delay(1.0, 10.0, [], "^api", "eth0", [ip_address("10.0.0.1")],
                                "gaiadocker/iproute2", 100, 10, 25.0, "normal"),
        lambda: api.netem_loss_random(0, 10.0, [], "", "eth0", [], "gaiadocker/iproute2", 50.0, 30.0),
    ]

    threads = [
        threading.Thread(target=lambda run=run: results.append(run()))
        for run in schedules
    ]
    for thread in threads:
        thread.start()

    # Stop repeating schedules after --run-for seconds
    runtime.root_context.wait(args.run_for)
    runtime.cancel()
    for thread in threads:
        thread.join()

    print("\n" + "=" * 80)
    print("Schedule Results")
    print("=" * 80)
    for result in results:
        print(f"{result.command_type.value}: {result.executions} execution(s), "
              f"{result.failures} failure(s), {result.termination_reason.value}")
    print(f"Dispatcher calls recorded: {len(runtime.dispatcher.calls)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
