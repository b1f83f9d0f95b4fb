"""
Command line front end for the Quill parser.

    quill check FILE     parse and report the first error, if any
    quill dump FILE      print the structural tree, one top-level command per line
    quill fmt FILE       print the program re-rendered as Quill source
    quill tokens FILE    print one token per line

Front-end errors are reported as a single ``NN: message`` line on stderr and
terminate with exit status 1.
"""

import logging
import sys

import click

from . import __version__
from .config import ParserConfiguration, ScopeMode
from .lexer.errors import QuillError
from .lexer.lexer import tokenize_file
from .parser.parser import parse_file
from .printer import dump, format_source

logger = logging.getLogger(__name__)

scoping_option = click.option(
    "--scoping",
    type=click.Choice([mode.value for mode in ScopeMode]),
    default=ScopeMode.FLAT.value,
    show_default=True,
    help="Name scoping rules used while parsing.",
)


def _fail(error: QuillError):
    click.echo(error.summary(), err=True)
    sys.exit(1)


def _parse(path: str, scoping: str):
    config = ParserConfiguration(scope_mode=ScopeMode(scoping), filename=path)
    try:
        return parse_file(path, config)
    except QuillError as error:
        logger.debug("parse of %s failed: %s", path, error.code)
        _fail(error)


@click.group()
@click.version_option(__version__, prog_name="quill")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose):
    """Quill language front end."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@scoping_option
def check(file, scoping):
    """Parse FILE and report the first error."""
    _parse(file, scoping)


@main.command("dump")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@scoping_option
def dump_command(file, scoping):
    """Print the syntax tree of FILE."""
    program = _parse(file, scoping)
    for command in program.commands:
        click.echo(dump(command))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@scoping_option
@click.option("--indent", default=4, show_default=True, help="Spaces per nesting level.")
def fmt(file, scoping, indent):
    """Print FILE re-rendered as Quill source."""
    program = _parse(file, scoping)
    click.echo(format_source(program, indent), nl=False)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def tokens(file):
    """Print the tokens of FILE, one per line."""
    try:
        token_list = tokenize_file(file)
    except QuillError as error:
        _fail(error)

    for token in token_list:
        click.echo(f"{token.line:02d}  {token.type.name:<14} {token.lexeme}")


if __name__ == "__main__":
    main()
