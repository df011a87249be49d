"""
subcc - Compiler Command-Line Interface
=======================================

This module implements the command-line interface for the compiler. It
reads a preprocessed C file, runs the pipeline and writes the assembly.

Usage Examples
--------------
Basic compilation:
    $ subcc return_2.i -o return_2.s

Stop after a stage (no output file is written):
    $ subcc return_2.i -o return_2.s --lex
    $ subcc return_2.i -o return_2.s --parse
    $ subcc return_2.i -o return_2.s --codegen

Full pipeline to an executable:
    $ gcc -E -P return_2.c -o return_2.i
    $ subcc return_2.i -o return_2.s && gcc return_2.s -o return_2

Debug dumps of tokens and trees:
    $ subcc --debug return_2.i -o return_2.s

Exit status is 0 on success and 1 on any error, including invalid
arguments.
"""

import logging
import sys
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Iterator, Optional

import click

from subc import __version__
from subc.cli.errors import ExitCode, handle_cli_exception
from subc.compiler import Compiler, CompilerOptions, Stage
from subc.targets import TARGETS


# =============================================================================
# Command Class
# =============================================================================

class SubccCommand(click.Command):
    """
    Click command that reports usage errors with exit status 1.

    Click's own usage errors exit with status 2; the compiler driver
    reports every failure as 1.
    """

    def main(self, args=None, prog_name=None, complete_var=None,
             standalone_mode=True, **extra):
        try:
            rv = super().main(
                args=args,
                prog_name=prog_name,
                complete_var=complete_var,
                standalone_mode=False,
                **extra,
            )
        except click.ClickException as e:
            e.show()
            sys.exit(ExitCode.FAILURE)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(ExitCode.FAILURE)

        if not standalone_mode:
            return rv
        sys.exit(ExitCode.SUCCESS)


@contextmanager
def _debug_logging() -> Iterator[None]:
    """Send the package's DEBUG log records to stderr while active."""
    handler = logging.StreamHandler(click.get_text_stream("stderr"))
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger = logging.getLogger("subc")
    previous_level = package_logger.level
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    try:
        yield
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(previous_level)


def _stop_stage(lex: bool, parse: bool, codegen: bool) -> Stage:
    """Return the earliest stage requested, or EMIT."""
    if lex:
        return Stage.LEX
    if parse:
        return Stage.PARSE
    if codegen:
        return Stage.CODEGEN
    return Stage.EMIT


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(cls=SubccCommand)
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file",
)
@click.option(
    "--lex", "stop_lex",
    is_flag=True,
    help="Stop after lexing; write no output",
)
@click.option(
    "--parse", "stop_parse",
    is_flag=True,
    help="Stop after parsing; write no output",
)
@click.option(
    "--codegen", "stop_codegen",
    is_flag=True,
    help="Stop after lowering to the machine AST; write no output",
)
@click.option(
    "-t", "--target",
    type=click.Choice(sorted(TARGETS), case_sensitive=False),
    default=None,
    help="Target platform (default: host, or $SUBC_TARGET)",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Dump tokens and trees to stderr",
)
@click.version_option(version=__version__, prog_name="subcc")
def main(
    input_file: Path,
    output: Path,
    stop_lex: bool,
    stop_parse: bool,
    stop_codegen: bool,
    target: Optional[str],
    debug: bool,
) -> None:
    """
    Compile preprocessed C to x86-64 assembly.

    INPUT_FILE is the preprocessed C source to compile.

    \b
    Examples:
        subcc prog.i -o prog.s            # Compile
        subcc prog.i -o prog.s --lex      # Tokenize only
        subcc prog.i -o prog.s --parse    # Parse only
        subcc -t darwin prog.i -o prog.s  # Mach-O symbol names

    \b
    Supported C subset:
        int <name>(void) { return <decimal constant>; }
    """
    options = CompilerOptions.from_env()
    if target:
        options.target = target
    options.debug = options.debug or debug
    options.stop_after = _stop_stage(stop_lex, stop_parse, stop_codegen)

    logging_context = _debug_logging() if options.debug else nullcontext()

    try:
        with logging_context:
            result = Compiler(options).compile_source(
                input_file.read_bytes(), str(input_file)
            )

        if options.stop_after != Stage.EMIT:
            return

        output.write_text(result.assembly, encoding="utf-8")
        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=options.debug)


if __name__ == "__main__":
    main()
