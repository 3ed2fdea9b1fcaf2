import argparse
import json
import sys

from structmapper import StructMapper
from structmapper import logging as structmapper_logging
from structmapper import utils
from structmapper.manifest import ManifestError


def add_common_arguments(parser):
    parser.add_argument(
        'inputs',
        nargs='+',
        help='C/C++ headers or sources to scan, or .json/.toml type manifests'
    )

    parser.add_argument(
        '--config',
        '-c',
        type=str,
        dest='config_file',
        help='The configuration file to use'
    )

    parser.add_argument(
        '--include',
        '-I',
        action='append',
        default=[],
        dest='include_dirs',
        help='Add a directory to the clang include search path'
    )

    parser.add_argument(
        '--define',
        '-D',
        action='append',
        default=[],
        dest='defines',
        help='Define a preprocessor macro for the scan'
    )

    parser.add_argument(
        '--language',
        choices=['c', 'c++'],
        default=None,
        help='Source language of the inputs, overrides scan.language'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Console log level (DEBUG, INFO, WARNING, ...)'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Also write log files to this directory'
    )


def parse_generate(parser):
    add_common_arguments(parser)

    parser.add_argument(
        '--output-dir',
        '-o',
        type=str,
        help='The directory to write generated headers to, default to output.dir from the config'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Resolve and render the mappings without writing any file'
    )


def parse_inspect(parser):
    add_common_arguments(parser)


def _clang_args(args) -> list[str]:
    return [f"-I{d}" for d in args.include_dirs] + [f"-D{d}" for d in args.defines]


def _make_mapper(args, **kwargs) -> StructMapper:
    config = utils.try_load_config(args.config_file)
    structmapper_logging.configure_logging(
        config,
        console_level_override=args.log_level,
        log_dir_override=args.log_dir,
        force_reconfigure=True,
    )
    return StructMapper(
        config_file=args.config_file,
        config=config,
        language=args.language,
        extra_args=_clang_args(args),
        **kwargs,
    )


def generate(parser, args):
    mapper = _make_mapper(args, output_dir=args.output_dir, dry_run=args.dry_run)
    result = mapper.run(args.inputs)
    if args.dry_run:
        for unit in result.units:
            print(f'// ---- {unit.name} ----')
            print(unit.text)
    else:
        print(f'✅ Generated {len(result.written)} mapping file(s) in {result.output_dir}')


def inspect(parser, args):
    mapper = _make_mapper(args, dry_run=True)
    index = mapper.build_index(mapper.load_declarations(args.inputs))
    records = mapper.build_records(index)
    print(json.dumps([record.to_dict() for record in records], indent=2))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='structmapper: generate C struct conversion functions from mapping directives'
    )

    subparsers = parser.add_subparsers(
        dest='subcommand',
        description='valid subcommands for structmapper',
        help='Use one of these subcommands followed by -h for additional help',
        required=True
    )

    generate_parser = subparsers.add_parser(
        'generate',
        help='Generate mapping headers for every resolved pair'
    )

    inspect_parser = subparsers.add_parser(
        'inspect',
        help='Print the resolved pairs and their field assignments as JSON'
    )

    parse_generate(generate_parser)
    parse_inspect(inspect_parser)

    args = parser.parse_args(argv)

    try:
        match args.subcommand:
            case 'generate':
                generate(parser, args)
            case 'inspect':
                inspect(parser, args)
            case _:
                parser.print_help()
    except (FileNotFoundError, ManifestError, ValueError, TypeError, OSError) as exc:
        print(f'❌ {exc}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
