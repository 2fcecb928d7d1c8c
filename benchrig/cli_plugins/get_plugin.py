import sys

from .base import SubcommandPlugin
from . import _common
from benchrig.harnesses import Phase


class GetPlugin(SubcommandPlugin):
    def get_name(self):
        return "get"

    def get_order(self):
        return 10

    def get_parser(self, subparsers):
        parser = subparsers.add_parser("get", help="Fetch a harness's workload source at its pinned revision")
        _common.add_phase_args(parser)
        parser.set_defaults(_plugin=self)
        return parser

    def get_epilog(self):
        return """
Get Commands:
  benchrig get cockroachdb --config_file suite.yaml     Clone cockroachdb into <work_dir>/cockroachdb/src"""

    def run(self, args):
        _common.setup_logging(args.log_level, args.log_file)
        cfg, harness = _common.load(args)
        result = _common.run_phases(cfg, harness, [Phase.GET])
        sys.exit(_common.report(result))
