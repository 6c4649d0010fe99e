"""Handles interactive/command-line mode for the exprc compiler. Uses cmd as backend."""

import cmd

from exprc.lang.session import Session


class Shell(cmd.Cmd):
    """exprc compiler shell. Functions entered are appended to the session's program and their C++ is printed."""
    intro = "exprc compiler :: C++ backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def preprocess_line(line, prev=""):
        """Returns line appended to prev, and whether or not more lines are needed to complete a function (its body
        braces haven't been closed yet).
        """
        line = f"{prev}\n{line}" if prev else line
        return line, "}" not in line or line.count("{") > line.count("}")

    def parseline(self, line):
        """Sends source lines to default. A line is source if it continues a function, starts with '!' (a negated
        condition, not a shell escape), or contains '{' or '(' right after its first word (a function named like a
        command, e.g. 'tree(x){ x; }').
        """
        if line == "EOF":
            return super().parseline(line)
        if self._tmp_line or line.strip().startswith("!"):
            return None, None, line

        command, arg, line = super().parseline(line)
        if command is not None and arg and (arg[0] in "({" or "{" in arg):
            return None, None, line
        return command, arg, line

    def default(self, line):
        """Adds arbitrary exprc functions to the program."""
        line, add_to_prev = self.preprocess_line(line, self._tmp_line)

        if add_to_prev:
            self._tmp_line = line
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            for __, text in self.sess.add(line):
                print(text, file=self.stdout)

    def do_show(self, arg):
        """Prints the C++ translation of the whole program."""
        if self.sess.output is not None:
            print(self.sess.output, end="", file=self.stdout)

    def do_tree(self, arg):
        """Prints the syntax tree of the whole program."""
        if self.sess.tree is not None:
            print(self.sess.tree.display(), file=self.stdout)

    def do_write(self, arg):
        """Writes the C++ translation of the whole program to FILE: write FILE"""
        with self.sess.error_handler:
            if not arg:
                print("usage: write FILE", file=self.stdout)
            else:
                self.sess.write(arg.strip())

    def do_reset(self, arg):
        """Forgets every function entered so far."""
        self.sess.reset()
        self._tmp_line = ""
        self.prompt = self._tmp_prompt

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the exprc compiler!\n\n"
              "exprc translates a small expression language into C++. Every value is a number,\n"
              "and a function's body evaluates to its last expression.\n\n"
              "Try it out by typing 'twice(x){ x * 2; }', then 'main(){ write(twice(read())); }'.\n"
              "Commands: show, tree, write FILE, reset, exit.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits compiler shell."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits compiler shell."""
        return True


def interactive(error_handler):
    """Runs the shell on a fresh command-line session."""
    Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()
