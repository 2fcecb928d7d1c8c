import sys

from tabulate import tabulate

from .base import SubcommandPlugin
from benchrig.harnesses import discover_harnesses


class ListPlugin(SubcommandPlugin):
    def __init__(self):
        self.harnesses = discover_harnesses()  # {name: harness}

    def list_harnesses(self, harness_name=None):
        if harness_name:
            # List the benchmark variants of one harness
            harness = self.harnesses.get(harness_name)
            if harness is None:
                print(f"Error: Unknown harness '{harness_name}'")
                print("Use 'benchrig list' to see available harnesses.")
                sys.exit(1)
            short = set(harness.short_benchmarks)
            rows = [[bench, "yes" if bench in short else ""] for bench in harness.benchmarks]
            print(f"\nBenchmarks in {harness_name}:")
            print(tabulate(rows, headers=["benchmark", "short"], tablefmt="github"))
        else:
            print("Available harnesses:")
            rows = [
                [name, len(harness.benchmarks), len(harness.short_benchmarks)]
                for name, harness in self.harnesses.items()
            ]
            print(tabulate(rows, headers=["harness", "benchmarks", "short"], tablefmt="github"))

    def get_name(self):
        return "list"

    def get_parser(self, subparsers):
        parser = subparsers.add_parser("list", help="List available harnesses")
        parser.add_argument("harness", nargs="?", help="Optional: harness to list benchmarks of")
        parser.set_defaults(_plugin=self)
        return parser

    def get_epilog(self):
        return """
List Commands:
  benchrig list                      List all available harnesses
  benchrig list cockroachdb          List the benchmarks of cockroachdb"""

    def run(self, args):
        self.list_harnesses(args.harness)
