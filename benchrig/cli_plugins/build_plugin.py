import sys

from .base import SubcommandPlugin
from . import _common
from benchrig.harnesses import Phase


class BuildPlugin(SubcommandPlugin):
    def get_name(self):
        return "build"

    def get_order(self):
        return 20

    def get_parser(self, subparsers):
        parser = subparsers.add_parser("build", help="Build a harness's workload and benchmark driver")
        _common.add_phase_args(parser)
        parser.set_defaults(_plugin=self)
        return parser

    def get_epilog(self):
        return """
Build Commands:
  benchrig build cockroachdb --config_file suite.yaml   Build into <work_dir>/cockroachdb/bin"""

    def run(self, args):
        _common.setup_logging(args.log_level, args.log_file)
        cfg, harness = _common.load(args)
        result = _common.run_phases(cfg, harness, [Phase.BUILD])
        sys.exit(_common.report(result))
