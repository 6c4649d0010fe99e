"""Session control for the exprc compiler. A Session runs the whole pipeline (tokenize, parse, generate) over one
program, either read from a file or accumulated from the command-line shell, and commits the output only if every
stage succeeded.
"""

from exprc.lang.codegen import CompileContext, Compiler
from exprc.lang.error import GenericException
from exprc.lang.lexical import tokenize
from exprc.lang.syntax import parse


class Session:
    """Governs an exprc session: owns the program source and the results of its last compilation."""
    SH_FILE = "<in>"  # command-line shell filename

    def __init__(self, error_handler, path, cmd_line=False):
        self.error_handler = error_handler
        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.source = ""
        self.tree = None     # syntax tree of the last successful compilation
        self.context = None  # CompileContext of the last successful compilation
        self.output = None   # C++ emitted by the last successful compilation

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    self.source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

        self.error_handler.register_file(self.path, self.source)

    def compile(self, source=None):
        """Compiles source (self.source by default), reporting each stage as it succeeds. Raises the first stage's
        error on failure, in which case the results of the previous compilation are kept.
        """
        if source is None:
            source = self.source
        self.error_handler.register_file(self.path, source)

        tokens = tokenize(source)
        self.error_handler.note("Lexical analysis ok")

        tree = parse(tokens)
        self.error_handler.note("Syntax analysis ok")

        context = CompileContext()
        output = Compiler().compile(tree, context)
        for warning in context.warnings:
            self.error_handler.warn(warning)
        self.error_handler.note("Compiled successfully")

        self.tree, self.context, self.output = tree, context, output
        return output

    def add(self, source):
        """Appends source to the program and recompiles it. source is kept only if the program still compiles.
        Returns the (name, C++) units of the functions source added.
        """
        known = len(self.context.units) if self.context else 0
        program = f"{self.source}\n{source}" if self.source else source

        # on error this raises before self.source changes; only the error handler keeps program, to locate the error
        self.compile(program)

        self.source = program
        return self.context.units[known:]

    def write(self, path):
        """Commits the output of the last successful compilation to path."""
        if self.output is None:
            raise GenericException("nothing to write: no program has been compiled", diagnosis=False)

        try:
            with open(path, "w") as file:
                file.write(self.output)
        except OSError:
            raise GenericException("'{}' could not be written", path, diagnosis=False)

    def reset(self):
        """Forgets the program and the results of its compilation."""
        self.source = ""
        self.tree = self.context = self.output = None
        self.error_handler.register_file(self.path, self.source)
