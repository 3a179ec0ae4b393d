"""
Transaction Collector

Reads txn directives one line at a time and assembles a TxnRequest.

The collector walks three states in order, each feeding one list of the
request with its own line grammar. An empty line moves to the next state:

    COMPARE --""--> SUCCESS --""--> FAILURE --""--> TERMINAL

Any malformed or truncated input aborts the whole collection; a partial
request is never returned.
"""

import enum
import logging
from typing import Callable, Dict, List, Optional, TextIO

from src.txn.exceptions import InputReadFailure
from src.txn.grammar import parse_compare, parse_request_op
from src.txn.models import TxnRequest

logger = logging.getLogger(__name__)

EMPTY_LINE = "\n"


class CollectState(str, enum.Enum):
    """Collection state enumeration."""
    COMPARE = "COMPARE"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    TERMINAL = "TERMINAL"


# Transition taken on an empty line.
NEXT_STATE: Dict[CollectState, CollectState] = {
    CollectState.COMPARE: CollectState.SUCCESS,
    CollectState.SUCCESS: CollectState.FAILURE,
    CollectState.FAILURE: CollectState.TERMINAL,
}

PROMPTS: Dict[CollectState, str] = {
    CollectState.COMPARE: "entry comparison[key target expected_result compare_value] (end with empty line):",
    CollectState.SUCCESS: "entry success request[method key value(end_range)] (end with empty line):",
    CollectState.FAILURE: "entry failure request[method key value(end_range)] (end with empty line):",
}

PARSERS: Dict[CollectState, Callable] = {
    CollectState.COMPARE: parse_compare,
    CollectState.SUCCESS: parse_request_op,
    CollectState.FAILURE: parse_request_op,
}


class TxnCollector:
    """
    Line-driven state machine that populates a transaction request.

    Example:
        >>> collector = TxnCollector(io.StringIO("k1 ver g 1\\n\\np k1 v1\\n\\nd k1\\n\\n"))
        >>> txn = collector.run()
        >>> len(txn.comparisons), len(txn.on_success), len(txn.on_failure)
        (1, 1, 1)
    """

    def __init__(self, reader: Optional[TextIO] = None, echo: Callable[[str], None] = print):
        """
        Initialize the collector.

        Args:
            reader: Text stream to read directives from (required by run())
            echo: Callable used to write each prompt
        """
        self.reader = reader
        self.echo = echo
        self.state = CollectState.COMPARE
        self.comparisons: List = []
        self.on_success: List = []
        self.on_failure: List = []

    def _target_list(self, state: CollectState) -> List:
        if state is CollectState.COMPARE:
            return self.comparisons
        if state is CollectState.SUCCESS:
            return self.on_success
        return self.on_failure

    def read_line(self) -> str:
        """
        Read one raw line, terminator included.

        Raises:
            InputReadFailure: On end of input, an unterminated final line,
                or a stream error
        """
        try:
            raw = self.reader.readline()
        except (OSError, UnicodeDecodeError) as e:
            raise InputReadFailure(details=str(e)) from e

        if not raw.endswith("\n"):
            logger.error(
                "Input ended before the transaction was complete",
                extra={"state": self.state.value, "partial": raw},
            )
            raise InputReadFailure(
                message="unexpected end of input",
                details=f"while reading {self.state.value.lower()} lines",
            )
        return raw

    def feed(self, raw: str) -> CollectState:
        """
        Apply one raw line (terminator included) to the current state.

        Returns:
            The state after the line was applied

        Raises:
            InvalidInputLine: If the line does not match the state's grammar
        """
        if self.state is CollectState.TERMINAL:
            raise RuntimeError("transaction collection is already complete")

        if raw == EMPTY_LINE:
            next_state = NEXT_STATE[self.state]
            logger.debug(f"State transition: {self.state.value} -> {next_state.value}")
            self.state = next_state
            return self.state

        line = raw[:-1] if raw.endswith("\n") else raw
        parsed = PARSERS[self.state](line)
        self._target_list(self.state).append(parsed)

        logger.debug(
            f"Accepted {self.state.value.lower()} line",
            extra={"state": self.state.value, "line": line},
        )
        return self.state

    def build(self) -> TxnRequest:
        """Return the completed, immutable request."""
        if self.state is not CollectState.TERMINAL:
            raise RuntimeError(f"transaction collection is not complete (state {self.state.value})")
        return TxnRequest(
            comparisons=self.comparisons,
            on_success=self.on_success,
            on_failure=self.on_failure,
        )

    def run(self) -> TxnRequest:
        """
        Drive the state machine until TERMINAL and return the request.

        Raises:
            InvalidInputLine: If a line does not match its grammar
            InputReadFailure: If the input ends before TERMINAL
        """
        while self.state is not CollectState.TERMINAL:
            self.echo(PROMPTS[self.state])
            self.feed(self.read_line())

        logger.info(
            "Transaction collected",
            extra={
                "comparisons": len(self.comparisons),
                "success": len(self.on_success),
                "failure": len(self.on_failure),
            },
        )
        return self.build()
