"""Error handling for the exprc compiler. Only GenericExceptions should be encountered during compilation: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Each compilation stage has its own exception type, and each type carries the exit status the driver uses so that
calling tooling can tell the stages apart.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw an exprc error/warning. exprs are formatted
    into msg in bold. pos and length locate the offending text in the source being compiled (pos=-1 means unknown).
    """
    status = 1

    def __init__(self, msg, exprs=None, pos=-1, length=1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.plain = msg.format(*exprs)
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets

        self.pos = pos
        self.length = max(length, 1)
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain)


class LexicalError(GenericException):
    """Raised when the source contains characters no token kind matches."""
    status = 2


class SyntacticError(GenericException):
    """Raised when the token sequence is not a program."""
    status = 3


class SemanticError(GenericException):
    """Raised when code generation fails. causes holds every individual error found, output the text that was
    generated before emission was aborted.
    """
    status = 4

    def __init__(self, msg, exprs=None, causes=None, output="", **kwargs):
        super().__init__(msg, exprs, **kwargs)
        self.causes = causes if causes is not None else []
        self.output = output


def locate(source, pos):
    """Returns (line, line_num, col) of offset pos in source. line_num and col are 1-indexed."""
    pos = min(max(pos, 0), len(source))
    start = source.rfind("\n", 0, pos) + 1
    end = source.find("\n", pos)
    if end == -1:
        end = len(source)
    return source[start:end], source.count("\n", 0, pos) + 1, pos - start + 1


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report custom exprc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    NOTE = "green"

    def __init__(self, fatal=True, quiet=False, stream=None):
        self.fatal = fatal
        self.quiet = quiet
        self.stream = stream
        self.path = None
        self.source = ""

    def register_file(self, path, source=""):
        """Registers the file currently being compiled. Its source is used to locate errors."""
        self.path = path
        self.source = source

    def _print(self, msg):
        print(msg, file=self.stream if self.stream is not None else sys.stderr)

    def _header(self, error):
        """Returns 'file:line:col: ' for error, or just 'file: ' if error has no position."""
        if self.path is None:
            return ""
        if error.pos < 0 or not self.source:
            return colored(f"{self.path}: ", attrs=["bold"])

        __, line_num, col = locate(self.source, error.pos)
        return colored(f"{self.path}:{line_num}:{col}: ", attrs=["bold"])

    def diagnose(self, error, warning=False):
        """Returns offending line of error with the offending part highlighted and underlined."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        line, __, col = locate(self.source, error.pos)
        start = col - 1
        end = min(start + error.length, max(len(line), start + 1))

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _report(self, error, label, color):
        msg = self._header(error)
        if error.internal:
            msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        msg += colored(f"{label}: ", color, attrs=["bold"]) + error.msg
        self._print(msg)

        if not error.internal and error.diagnosis and error.pos >= 0 and self.source:
            self._print(self.diagnose(error, warning=color == ErrorHandler.WARNING))

    def note(self, msg):
        """Prints progress message msg unless quiet."""
        if not self.quiet:
            self._print(colored(msg, ErrorHandler.NOTE))

    def warn(self, *args, **kwargs):
        """Generates and prints a warning message based on args. Accepts a GenericException too."""
        if len(args) == 1 and isinstance(args[0], GenericException):
            warning = args[0]
        else:
            warning = GenericException(*args, **kwargs)
        self._report(warning, "warning", ErrorHandler.WARNING)

    def throw(self, error):
        """Reports error, which must be a GenericException. If error aggregates several causes, each one is reported
        before error itself. Exits with error.status if fatal.
        """
        for cause in getattr(error, "causes", []):
            self._report(cause, "error", ErrorHandler.ERROR)
        self._report(error, "error", ErrorHandler.ERROR)

        if self.fatal:
            sys.exit(error.status)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded, source is nested too deeply"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
