"""
toolsconf command line entry point.

-h belongs to --host, so help is -u/--help and the version is -V/--version.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from toolsconf import __version__
from toolsconf.cli.resolve import resolve_command
from toolsconf.cli.validate import validate_command
from toolsconf.config.resolver import get_config_resolver
from toolsconf.config.settings import get_settings
from toolsconf.core.errors import ExitCode, main_with_error_handling
from toolsconf.flags.cluster import ClusterFlags, ConfFileFlags
from toolsconf.logging import bind_command_context, configure_logging


def _add_help(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-u", "--help", action="help", help="Show this help message and exit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolsconf",
        description="Resolve and validate database tools configuration",
        add_help=False,
    )
    _add_help(parser)
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    # resolve
    cluster = ClusterFlags()
    cluster_flag_set = cluster.new_flag_set()
    conf_file = ConfFileFlags()

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the resolved cluster connection settings",
        add_help=False,
    )
    _add_help(resolve_parser)
    cluster_flag_set.add_to_parser(resolve_parser.add_argument_group("cluster"))
    conf_file.new_flag_set().add_to_parser(resolve_parser.add_argument_group("config file"))
    resolve_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    resolve_parser.add_argument(
        "--reveal-secrets",
        action="store_true",
        help="Print passwords instead of masking them",
    )
    resolve_parser.set_defaults(
        cluster=cluster, conf_file=conf_file, cluster_flag_set=cluster_flag_set
    )

    # validate
    validate_conf_file = ConfFileFlags()

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate the config file against a JSON schema",
        add_help=False,
    )
    _add_help(validate_parser)
    validate_conf_file.new_flag_set().add_to_parser(
        validate_parser.add_argument_group("config file")
    )
    validate_parser.add_argument("--schema", required=True, help="Path to the JSON schema")
    validate_parser.add_argument(
        "--section",
        action="append",
        default=[],
        dest="sections",
        help="Only validate this section (repeatable)",
    )
    validate_parser.set_defaults(conf_file=validate_conf_file)

    return parser


@main_with_error_handling()
def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)
    bind_command_context(args.command or "help")

    if args.command == "resolve":
        return resolve_command(
            get_config_resolver(),
            args.cluster,
            args.conf_file,
            args.cluster_flag_set,
            output_format=args.format,
            reveal_secrets=args.reveal_secrets,
        )

    if args.command == "validate":
        return validate_command(
            get_config_resolver(),
            args.schema,
            config_file=args.conf_file.file.value,
            instance=args.conf_file.instance.value,
            sections=args.sections,
        )

    parser.print_help()
    return ExitCode.SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
