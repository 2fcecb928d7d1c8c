import sys

from .base import SubcommandPlugin
from . import _common
from benchrig.harnesses import Phase


class RunPlugin(SubcommandPlugin):
    def get_name(self):
        return "run"

    def get_order(self):
        return 30

    def accepts_extra_args(self):
        return True

    def get_parser(self, subparsers):
        parser = subparsers.add_parser(
            "run", help="Run a harness's benchmarks (unknown arguments go to the benchmark driver)"
        )
        _common.add_phase_args(parser)
        _common.add_run_args(parser)
        parser.set_defaults(_plugin=self)
        return parser

    def get_epilog(self):
        return """
Run Commands:
  benchrig run cockroachdb --config_file suite.yaml             Run all benchmarks
  benchrig run cockroachdb --config_file suite.yaml --short     Run the short benchmark set
  benchrig run cockroachdb --config_file suite.yaml --results -  Stream results to stdout"""

    def run(self, args):
        _common.setup_logging(args.log_level, args.log_file)
        cfg, harness = _common.load(args)
        with _common.open_results(cfg, harness, args.results) as results:
            result = _common.run_phases(
                cfg,
                harness,
                [Phase.RUN],
                results=results,
                extra_args=getattr(args, "extra_args", []),
                short=args.short,
            )
        sys.exit(_common.report(result))
