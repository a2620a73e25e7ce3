import argparse
import json
import logging
import os
import sys

from .config import DEFAULT_MAX_REFERENCE_ATOMS
from .exceptions import CosmosError, ErrorCode
from .parser.core.classes import ParsedResolutionContext
from .resolution.core.generator import ResolutionContextGenerator
from .resolution.core.reader import ResolutionContextReader
from .resolution.core.renderer import ResolutionContextRenderer
from .utils import CosmosArtifactEncoder, TerminalColors


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cosmos", description="Inspect and generate PHP resolution contexts.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_command = subparsers.add_parser("parse", help="List the resolution contexts of a PHP file.")
    parse_command.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="The path to the input .php file. Omit to read from stdin.",
    )
    parse_command.add_argument("-i", "--index", type=int, help="Only show the context at this index.")
    parse_command.add_argument("--json", action="store_true", help="Print the parsed contexts as JSON.")

    generate_command = subparsers.add_parser("generate", help="Generate the use statements needed to reference symbols.")
    generate_command.add_argument("symbols", nargs="*", help="Qualified class, interface or trait names.")
    generate_command.add_argument("-n", "--namespace", default=None, help="The namespace the symbols are referenced from.")
    generate_command.add_argument("-f", "--function", dest="functions", action="append", default=[], help="A qualified function name.")
    generate_command.add_argument("-c", "--const", dest="constants", action="append", default=[], help="A qualified constant name.")
    generate_command.add_argument(
        "-m",
        "--max-reference-atoms",
        type=int,
        default=DEFAULT_MAX_REFERENCE_ATOMS,
        help="Symbols at most this many atoms below the namespace are referenced without an import.",
    )
    return parser


def _print_context(index: int, context: ParsedResolutionContext, renderer: ResolutionContextRenderer):
    span = context.span
    print(f"{TerminalColors.CYAN}--- Context {index} (Line: {span.line}, Column: {span.column}) ---{TerminalColors.RESET}")
    rendered = renderer.render_context(context)
    if rendered:
        print(rendered, end="")
    for parsed_symbol in context.symbols:
        print(f"// {parsed_symbol.kind.value} {parsed_symbol.symbol}")


def _run_parse(args):
    reader = ResolutionContextReader()
    if args.input_file:
        contexts = reader.read_all_from_file(os.path.abspath(args.input_file))
    else:
        contexts = reader.read_all_from_stream(sys.stdin, path=None)

    selected = list(enumerate(contexts))
    if args.index is not None:
        if not 0 <= args.index < len(contexts):
            raise CosmosError(ErrorCode.UNDEFINED_RESOLUTION_CONTEXT, path=args.input_file, index=args.index)
        selected = [(args.index, contexts[args.index])]

    if args.json:
        print(json.dumps([context for _, context in selected], indent=2, cls=CosmosArtifactEncoder))
        return

    renderer = ResolutionContextRenderer()
    for index, context in selected:
        _print_context(index, context, renderer)


def _run_generate(args):
    generator = ResolutionContextGenerator(max_reference_atoms=args.max_reference_atoms)
    context = generator.generate(
        primary_namespace=args.namespace,
        type_symbols=args.symbols,
        function_symbols=args.functions,
        constant_symbols=args.constants,
    )
    print(ResolutionContextRenderer().render_context(context), end="")


def main(argv=None):
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "parse" and not args.input_file and sys.stdin.isatty():
        parser.error("input_file is required when not reading from a pipe.")

    try:
        if args.command == "parse":
            _run_parse(args)
        else:
            _run_generate(args)
    except CosmosError as e:
        print(f"{TerminalColors.RED}--- ERROR ---\n{e}{TerminalColors.RESET}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
