"""Uses the exprc compiler to translate a source file into C++, or runs it in command-line mode. Also uses error
handling context manager. Called from the exprc console script.

Exit status is 0 on success, 2 on a lexical error, 3 on a syntax error, 4 on a semantic error and 1 otherwise.
"""

import argparse
import os

from exprc.lang.error import ErrorHandler, GenericException
from exprc.lang.session import Session
from exprc.lang.shell import interactive


def output_path(path):
    """Returns path with its extension replaced by .cpp."""
    return os.path.splitext(path)[0] + ".cpp"


def main(argv=None):
    """Runs exprc compiler. Called from exprc console script."""
    parser = argparse.ArgumentParser(prog="exprc", description="Compile an exprc program into C++.")
    parser.add_argument("file", help="file to compile (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-o", "--output", help="output file (default: FILE with a .cpp extension)")
    parser.add_argument("--tree", help="print the syntax tree", action="store_true")
    parser.add_argument("-q", "--quiet", help="do not report progress", action="store_true")
    args = parser.parse_args(argv)

    with ErrorHandler(quiet=args.quiet) as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file)
            sess.compile()

            if args.tree:
                print(sess.tree.display())

            out = args.output if args.output else output_path(args.file)
            if os.path.abspath(out) == os.path.abspath(args.file):
                raise GenericException("output '{}' would overwrite the source file", out, diagnosis=False)
            sess.write(out)

        else:
            interactive(error_handler)
