"""
z3 Interface

This file is part of SynPN.

SynPN is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

SynPN is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with SynPN. If not, see <https://www.gnu.org/licenses/>.
"""

from __future__ import annotations

__author__ = "SynPN developers"
__license__ = "GPLv3"
__version__ = "1.0.0"

import logging as log
import re
from subprocess import PIPE, Popen
from typing import Optional

from synpn.exec.utils import SolverError

VALUE = re.compile(r'\(\s*([^\s()]+)\s+(-?\d+|\(\s*-\s*\d+\s*\))\s*\)')


class Z3:
    """ z3 interface.

    Note
    ----
    Uses SMT-LIB v2 format
    Standard: http://smtlib.cs.uiowa.edu/papers/smt-lib-reference-v2.6-r2017-07-18.pdf

    Dependency: https://github.com/Z3Prover/z3

    This class can easily be hacked to replace Z3
    by another SMT solver supporting the SMT-LIB format.

    Attributes
    ----------
    solver : Popen
        A z3 process.
    aborted : bool
        Aborted flag.
    debug : bool
        Debugging flag.
    """

    def __init__(self, path: str = 'z3', debug: bool = False) -> None:
        """ Initializer.

        Parameters
        ----------
        path : str, optional
            z3 executable.
        debug : bool, optional
            Debugging flag.

        Raises
        ------
        SolverError
            z3 cannot be started.
        """
        try:
            self.solver: Popen = Popen([path, '-in'], stdin=PIPE, stdout=PIPE, start_new_session=True)
        except OSError as error:
            raise SolverError("Cannot start z3 ({}): {}".format(path, error)) from error

        # Flags
        self.aborted: bool = False
        self.debug: bool = debug

    def kill(self) -> None:
        """" Kill the process.
        """
        self.solver.kill()
        self.solver.wait()

    def abort(self, reason: str = "") -> None:
        """ Abort the solver.

        Raises
        ------
        SolverError
            Always.
        """
        log.warning("[Z3] z3 process has been aborted{}".format(": " + reason if reason else ""))
        self.kill()
        self.aborted = True
        raise SolverError("z3 process has been aborted{}".format(": " + reason if reason else ""))

    def write(self, input: str, debug: bool = False) -> None:
        """ Write instructions to the standard input.

        Parameters
        ----------
        input : str
            Input instructions.
        debug : bool
            Debugging flag.
        """
        if self.debug or debug:
            print(input)

        if input != "":
            try:
                self.solver.stdin.write(bytes(input, 'utf-8'))
            except BrokenPipeError:
                self.abort("broken pipe")

    def flush(self) -> None:
        """ Flush the standard input.
        """
        try:
            self.solver.stdin.flush()
        except BrokenPipeError:
            self.abort("broken pipe")

    def readline(self, debug: bool = False) -> str:
        """ Read a line from the standard output.

        Parameters
        ----------
        debug : bool, optional
            Debugging flag.

        Returns
        -------
        str
            Line read.
        """
        raw = self.solver.stdout.readline()
        if not raw:
            self.abort("unexpected end of output")

        smt_output = raw.decode('utf-8').strip()

        if self.debug or debug:
            print(smt_output)

        if smt_output.startswith("(error"):
            self.abort(smt_output)

        return smt_output

    def push(self) -> None:
        """ Push.

        Note
        ----
        Creates a new scope by saving the current stack size.
        """
        self.write("(push)\n")

    def pop(self) -> None:
        """ Pop.

        Note
        ----
        Removes any assertion or declaration performed between it and the last push.
        """
        self.write("(pop)\n")

    def set_timeout(self, milliseconds: int) -> None:
        """ Limit the time of the next checks (0 means no limit).
        """
        self.write("(set-option :timeout {})\n".format(milliseconds))

    def check_sat(self, no_check: bool = False) -> Optional[bool]:
        """ Check the satisfiability of the current stack of z3.

        Parameters
        ----------
        no_check : bool
            Do not abort the solver in case of unknown verdict.

        Returns
        -------
        bool, optional
            Satisfiability of the current stack, `None` if unknown.
        """
        self.write("(check-sat)\n")
        self.flush()

        sat = self.readline()

        if sat == 'sat':
            return True
        elif sat == 'unsat':
            return False
        elif not no_check:
            self.abort("unexpected verdict '{}'".format(sat))

        return None

    def get_values(self, names: list[str]) -> dict[str, int]:
        """ Get the value of integer constants from the current SAT stack.

        Parameters
        ----------
        names : list of str
            Constants.

        Returns
        -------
        dict of str: int
            Value of each constant.
        """
        if not names:
            return {}

        # Solver instruction
        self.write("(get-value ({}))\n".format(' '.join(names)))
        self.flush()

        # Read until the parentheses are balanced
        output = self.readline()
        while output.count('(') > output.count(')'):
            output += ' ' + self.readline()

        values = {}
        for name, value in VALUE.findall(output):
            values[name] = int(value.replace('(', '').replace(')', '').replace(' ', ''))

        missing = set(names) - set(values)
        if missing:
            self.abort("no value for {}".format(', '.join(sorted(missing))))

        return values
