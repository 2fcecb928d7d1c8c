import sys

from .base import SubcommandPlugin
from . import _common
from benchrig.harnesses import Phase


class AllPlugin(SubcommandPlugin):
    def get_name(self):
        return "all"

    def get_order(self):
        return 40

    def accepts_extra_args(self):
        return True

    def get_parser(self, subparsers):
        parser = subparsers.add_parser("all", help="Get, build and run a harness, stopping at the first failure")
        _common.add_phase_args(parser)
        _common.add_run_args(parser)
        parser.set_defaults(_plugin=self)
        return parser

    def get_epilog(self):
        return """
All Commands:
  benchrig all cockroachdb --config_file suite.yaml --short     Fresh clone, build and short run"""

    def run(self, args):
        _common.setup_logging(args.log_level, args.log_file)
        cfg, harness = _common.load(args)
        with _common.open_results(cfg, harness, args.results) as results:
            result = _common.run_phases(
                cfg,
                harness,
                [Phase.GET, Phase.BUILD, Phase.RUN],
                results=results,
                extra_args=getattr(args, "extra_args", []),
                short=args.short,
            )
        sys.exit(_common.report(result))
