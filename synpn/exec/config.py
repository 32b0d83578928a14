"""
Configuration

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
from typing import Optional

from synpn.exec.utils import Interrupter


class Configuration:
    """ Settings shared by all the sessions of a process.

    Note
    ----
    Build it once and hand it to every session and synthesizer.

    Attributes
    ----------
    verbose : bool
        Verbose flag.
    debug : bool
        Print the SMT-LIB input/output.
    z3_path : str
        z3 executable.
    timeout : int
        Global time limit in seconds (0 means no limit).
    cbc_messages : bool
        Let CBC print its log.
    interrupter : Interrupter
        Cooperative cancellation flag.
    """

    def __init__(self, verbose: bool = False, debug: bool = False, z3_path: str = 'z3', timeout: int = 0, cbc_messages: bool = False, interrupter: Optional[Interrupter] = None) -> None:
        """ Initializer.

        Parameters
        ----------
        verbose : bool, optional
            Verbose flag.
        debug : bool, optional
            Print the SMT-LIB input/output.
        z3_path : str, optional
            z3 executable.
        timeout : int, optional
            Global time limit in seconds.
        cbc_messages : bool, optional
            Let CBC print its log.
        interrupter : Interrupter, optional
            Cancellation flag, a fresh one bound to `timeout` otherwise.
        """
        self.verbose: bool = verbose
        self.debug: bool = debug
        self.z3_path: str = z3_path
        self.timeout: int = timeout
        self.cbc_messages: bool = cbc_messages

        if interrupter is None:
            interrupter = Interrupter(timeout)
        self.interrupter: Interrupter = interrupter

        self.logging_configured: bool = False

    def setup_logging(self) -> None:
        """ Set the verbose level (only the first call has an effect).
        """
        if self.logging_configured:
            return

        if self.verbose:
            log.basicConfig(format="%(message)s", level=log.DEBUG)
        else:
            log.basicConfig(format="%(message)s")

        self.logging_configured = True
