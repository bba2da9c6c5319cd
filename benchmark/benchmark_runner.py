#!/usr/bin/env python3
"""
MindMeld execution strategy benchmark.

Times the tokenized VM against the direct character-stream interpreter on
the programs in benchmark/scripts and checks that both print the same thing.
"""

import json
import os
import statistics
import sys
import time
from pathlib import Path
from typing import Dict, List, Tuple

import psutil

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mindmeld.runtime import ExecutionMode, RunConfig, build_machine, read_source

STRATEGIES = (ExecutionMode.TOKENIZED, ExecutionMode.DIRECT)


class MindMeldBenchmarkRunner:
    def __init__(self, benchmark_dir: str = "benchmark"):
        self.benchmark_dir = Path(benchmark_dir)
        self.results_dir = self.benchmark_dir / "results"
        self.scripts_dir = self.benchmark_dir / "scripts"
        self.process = psutil.Process(os.getpid())

    def scripts(self) -> List[Path]:
        return sorted(self.scripts_dir.glob("*.mm"))

    def run_once(self, source: str, mode: ExecutionMode) -> Tuple[float, str, Dict]:
        """Run one program once; returns (seconds, output, stats)."""
        rss_before = self.process.memory_info().rss
        start_time = time.perf_counter()
        machine = build_machine(source, RunConfig(execution_mode=mode))
        output = machine.run()
        execution_time = time.perf_counter() - start_time
        rss_after = self.process.memory_info().rss
        return execution_time, output, {
            "steps": machine.steps,
            "rss_delta": rss_after - rss_before,
        }

    def run_benchmark_suite(self, iterations: int = 3) -> Dict:
        results = {
            "test_info": {
                "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
                "iterations": iterations,
                "python_version": sys.version,
                "system_info": {
                    "platform": sys.platform,
                    "cpu_count": psutil.cpu_count(),
                    "total_memory": psutil.virtual_memory().total,
                },
            },
            "tests": {},
        }

        for script_path in self.scripts():
            print(f"\nRunning {script_path.name}...")
            source = read_source(script_path)
            test_result: Dict = {"script_name": script_path.name}
            outputs = {}

            for mode in STRATEGIES:
                times = []
                stats: Dict = {}
                for i in range(iterations):
                    print(f"  {mode.value} iteration {i + 1}/{iterations}")
                    exec_time, output, stats = self.run_once(source, mode)
                    times.append(exec_time)
                    outputs[mode] = output
                test_result[mode.value] = {
                    "times": times,
                    "avg_time": statistics.mean(times),
                    "min_time": min(times),
                    "max_time": max(times),
                    "std_dev": statistics.stdev(times) if len(times) > 1 else 0,
                    "steps": stats.get("steps", 0),
                    "rss_delta": stats.get("rss_delta", 0),
                    "sample_output": outputs[mode],
                }

            tokenized_avg = test_result[ExecutionMode.TOKENIZED.value]["avg_time"]
            direct_avg = test_result[ExecutionMode.DIRECT.value]["avg_time"]
            if tokenized_avg > 0:
                test_result["performance_ratio"] = direct_avg / tokenized_avg
            test_result["outputs_match"] = len(set(outputs.values())) == 1
            results["tests"][script_path.name] = test_result

        return results

    def save_results(self, results: Dict, filename: str = None) -> Path:
        if filename is None:
            timestamp = time.strftime("%Y%m%d_%H%M%S")
            filename = f"benchmark_results_{timestamp}.json"

        self.results_dir.mkdir(parents=True, exist_ok=True)
        result_path = self.results_dir / filename
        with open(result_path, "w", encoding="utf-8") as f:
            json.dump(results, f, indent=2, ensure_ascii=False)

        print(f"\nResults saved to: {result_path}")
        return result_path

    def print_summary(self, results: Dict):
        print("\n" + "=" * 60)
        print("EXECUTION STRATEGY BENCHMARK SUMMARY")
        print("=" * 60)

        test_info = results.get("test_info", {})
        print(f"Test Time: {test_info.get('timestamp')}")
        print(f"Iterations: {test_info.get('iterations')}")
        print()

        print(f"{'Script':<24} {'Tokenized (s)':<15} {'Direct (s)':<12} {'Ratio':<8} {'Match':<6}")
        print("-" * 70)

        for name, data in results.get("tests", {}).items():
            tokenized = data.get(ExecutionMode.TOKENIZED.value, {}).get("avg_time", 0)
            direct = data.get(ExecutionMode.DIRECT.value, {}).get("avg_time", 0)
            ratio = data.get("performance_ratio", 0)
            ratio_str = f"{ratio:.2f}x" if ratio > 0 else "N/A"
            match = "yes" if data.get("outputs_match") else "NO"
            print(f"{name:<24} {tokenized:<15.4f} {direct:<12.4f} {ratio_str:<8} {match:<6}")


def main():
    import argparse

    parser = argparse.ArgumentParser(description="MindMeld execution strategy benchmark")
    parser.add_argument("-i", "--iterations", type=int, default=3, help="Iterations per strategy (default: 3)")
    parser.add_argument("-o", "--output", type=str, help="Result file name")
    parser.add_argument(
        "--benchmark-dir",
        type=str,
        default=str(ROOT / "benchmark"),
        help="Benchmark directory (default: benchmark)",
    )

    args = parser.parse_args()

    runner = MindMeldBenchmarkRunner(args.benchmark_dir)
    if not runner.scripts():
        print(f"Error: no .mm scripts found in {runner.scripts_dir}")
        sys.exit(1)

    print("Starting MindMeld execution strategy benchmark...")
    print(f"Iterations per strategy: {args.iterations}")

    results = runner.run_benchmark_suite(iterations=args.iterations)
    runner.save_results(results, args.output)
    runner.print_summary(results)

    if not all(test["outputs_match"] for test in results["tests"].values()):
        sys.exit(1)


if __name__ == "__main__":
    main()
