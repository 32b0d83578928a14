"""
Utils to Manage Interruptions and Errors

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

import threading
import time
from typing import Optional


class SynthesisError(Exception):
    """ Base class of all the errors raised during a synthesis.
    """
    pass


class UnreachableError(SynthesisError):
    """ A state has no path from the initial state.
    """

    def __init__(self, state) -> None:
        super().__init__("State {} is unreachable from the initial state".format(state))
        self.state = state


class ConfigurationError(SynthesisError):
    """ The caller asked for something that cannot be synthesized as stated.
    """
    pass


class MissingLocationError(ConfigurationError):
    """ Some events have a location and others do not.
    """
    pass


class UnsupportedPropertiesError(ConfigurationError):
    """ The requested combination of properties is not supported.
    """
    pass


class SolverError(SynthesisError):
    """ A solver failed internally.

    Note
    ----
    Signals a bug or a broken installation, never an infeasible instance.
    """
    pass


class InvalidRegionError(SynthesisError):
    """ A region does not satisfy the region axioms.
    """
    pass


class InterruptedSynthesis(SynthesisError):
    """ The synthesis has been cancelled.
    """
    pass


class Interrupter:
    """ Cooperative cancellation flag.

    Attributes
    ----------
    deadline : float, optional
        Absolute time (see `time.monotonic`) after which interruption is requested.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        """ Initializer.

        Parameters
        ----------
        timeout : float, optional
            Number of seconds before an automatic interruption.
        """
        self._event: threading.Event = threading.Event()
        self.deadline: Optional[float] = time.monotonic() + timeout if timeout else None

    def request(self) -> None:
        """ Request an interruption.
        """
        self._event.set()

    def is_requested(self) -> bool:
        """ Check if an interruption has been requested (or the deadline is over).

        Returns
        -------
        bool
            Interruption status.
        """
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self._event.set()
        return self._event.is_set()

    def remaining(self) -> Optional[float]:
        """ Remaining time before the deadline.

        Returns
        -------
        float, optional
            Number of seconds, `None` if there is no deadline.
        """
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def throw_if_requested(self) -> None:
        """ Raise `InterruptedSynthesis` if an interruption has been requested.

        Raises
        ------
        InterruptedSynthesis
            An interruption has been requested.
        """
        if self.is_requested():
            raise InterruptedSynthesis("Synthesis interrupted")
