# bnferris/main.py
import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bnferris import __version__
from bnferris.config import BnferrisConfig, BnferrisConfigError
from bnferris.logger import setup_bnferris_logger
from bnferris.grammar import (
    BnfError,
    BuiltinGrammars,
    GenError,
    GrammarGenerator,
    UnknownEntryError,
    dump,
    dump_grammar,
    find_unreachable,
    find_unused,
    list_symbols,
    make_rng,
    parse,
    verify,
)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bnferris",
        description="Generate random messages based on their BNF/ABNF definition"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-f", "--file", metavar="FILE",
                        help="Path to the BNF grammar file.")
    source.add_argument("--builtin", metavar="NAME", choices=BuiltinGrammars.list_grammars(),
                        help="Use a built-in grammar instead of a file: %(choices)s.")
    parser.add_argument("-e", "--entry", metavar="ENTRY",
                        help="The symbol name to start generating from. Use '!' to list all available symbols.")
    parser.add_argument("-c", "--count", type=int, default=1,
                        help="How many messages to generate (default: 1).")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for reproducible output.")
    parser.add_argument("--verify", action="store_true",
                        help="Verify that all the symbols are defined.")
    parser.add_argument("--unused", action="store_true",
                        help="Verify that all the symbols are referenced.")
    parser.add_argument("--unreachable", action="store_true",
                        help="Verify that all the symbols are reachable from the entry.")
    parser.add_argument("--dump", action="store_true",
                        help="Dump the text representation of the entry symbol.")
    parser.add_argument("--stats", action="store_true",
                        help="Print statistics over COUNT generated messages instead of the messages.")
    parser.add_argument("--max-depth", type=int, default=None,
                        help="Recursion depth after which expansions are shortened.")
    parser.add_argument("--max-repetition", type=int, default=None,
                        help="Upper bound used for unbounded repetitions.")
    parser.add_argument("--config", default=None,
                        help="Path to a JSON config file (otherwise ~/.bnferris/config.json if present).")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Set the logging level.")
    parser.add_argument("--quiet", action="store_true",
                        help="Minimize console output (overrides log-level to ERROR).")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def report_error(console: Console, err) -> None:
    loc = getattr(err, "loc", None)
    message = getattr(err, "message", str(err))
    prefix = f"{escape(str(loc))}: " if loc is not None else ""
    console.print(f"{prefix}[bold red]ERROR[/]: {escape(message)}", soft_wrap=True, highlight=False)


def print_statistics(console: Console, entry: str, stats: dict) -> None:
    table = Table(title=f"Generation statistics for <{escape(entry)}>")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Samples", str(stats['samples']))
    table.add_row("Avg length", f"{stats['avg_length']:.1f}")
    table.add_row("Length range", f"{stats['min_length']}-{stats['max_length']}")
    table.add_row("Unique outputs", str(stats['unique_count']))
    table.add_row("Uniqueness", f"{stats['uniqueness_ratio']:.1f}%")
    console.print(table)


def main(argv=None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    out = Console(highlight=False, emoji=False)
    err = Console(stderr=True, highlight=False, emoji=False)

    # 1) Load configuration
    try:
        cfg = BnferrisConfig.load(args.config)
    except BnferrisConfigError as e:
        report_error(err, e)
        return 1
    if args.max_depth is not None:
        cfg.max_depth = args.max_depth
    if args.max_repetition is not None:
        cfg.max_repetition = args.max_repetition

    # 2) Configure logging
    level_name = args.log_level or cfg.log_level
    log_level = logging.getLevelName(str(level_name).upper())
    if not isinstance(log_level, int):
        log_level = logging.WARNING
    if args.quiet:
        log_level = logging.ERROR
    logger = setup_bnferris_logger(log_level, log_to_file=cfg.log_to_file, use_color=cfg.use_color)

    # 3) Read and parse the grammar
    entry = args.entry
    if args.builtin:
        file_path = f"<builtin:{args.builtin}>"
        text = BuiltinGrammars.get_grammar(args.builtin)
        entry = entry or BuiltinGrammars.get_entry(args.builtin)
    else:
        if entry is None:
            parser.error("the following arguments are required: -e/--entry")
        file_path = args.file
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            report_error(err, e)
            return 1

    try:
        grammar = parse(text, file_path)
    except BnfError as e:
        report_error(err, e)
        return 1
    logger.info(f"Loaded {len(grammar)} rules from {file_path}")

    # 4) Static checks
    if args.verify:
        undefined = verify(grammar)
        for report in undefined:
            for loc in report.locations:
                err.print(f"{escape(str(loc))}: [bold red]ERROR[/]: Symbol {escape(report.name)} is not defined",
                          soft_wrap=True)
        if undefined:
            return 1

    if entry == "!":
        if args.dump:
            out.print(escape(dump_grammar(grammar)), soft_wrap=True)
        else:
            for name in list_symbols(grammar):
                out.print(escape(name), soft_wrap=True)
        return 0

    if entry not in grammar:
        report_error(err, UnknownEntryError(entry))
        return 1

    findings = []
    if args.unused:
        findings.extend(find_unused(grammar, entry))
    if args.unreachable:
        findings.extend(find_unreachable(grammar, entry))
    for report in findings:
        err.print(f"{escape(str(report.loc))}: [yellow]{escape(report.name)}[/] is unused", soft_wrap=True)
    if findings:
        return 1

    if args.dump:
        out.print(escape(dump(grammar, entry)), soft_wrap=True)
        return 0

    # 5) Generate
    try:
        generator = GrammarGenerator(grammar, rng=make_rng(args.seed), **cfg.generator_options())
    except ValueError as e:
        report_error(err, e)
        return 1

    try:
        if args.stats:
            print_statistics(out, entry, generator.get_statistics(entry, samples=max(args.count, 1)))
            return 0
        for _ in range(args.count):
            sys.stdout.write(generator.generate(entry) + "\n")
    except GenError as e:
        report_error(err, e)
        return 1
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
