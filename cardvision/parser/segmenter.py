"""Segmentation of the OCR line sequence into intermediate transactions.

The transaction list has no delimiters between blocks, so each call to
``TransactionSegmenter.next_transaction`` walks a fixed sequence of states
against the line stack and consumes however many lines the block needs:

1. payee (split at a truncation ellipsis, pushing back any fused amount text)
2. amount (lines before it are wrapped payee text)
3. memo (Balance Adjustments may carry the time description here instead)
4. Daily Cash percentage, for eligible transactions only
5. time description (accumulated until a timestamp pattern matches)
6. Family Sharing member name, moved from the time description to the memo
"""

import re

from loguru import logger

from cardvision.models import FailureReason, IntermediateTransaction
from cardvision.parser.line_stack import LineStack
from cardvision.parser.matchers import (
    is_amount,
    is_daily_cash_eligible,
    is_declined,
    is_pending,
    is_timestamp,
    split_at_ellipsis,
)

BALANCE_ADJUSTMENT_PAYEE = "Balance Adjustment"
DISPUTE_MEMO = "Dispute - Provisional Adjustment"

# Separators drawn between the family member name and the time description
TIME_SEPARATORS = re.compile(r"[-•]")

_LEADING_DIGIT = re.compile(r"^[0-9]")


class SegmentationError(Exception):
    """The line stack could not complete a transaction block."""

    def __init__(self, reason: FailureReason, lines: list[str], detail: str = ""):
        self.reason = reason
        self.lines = lines
        self.detail = detail
        super().__init__(f"{reason.value}: {detail or 'block incomplete'} ({len(lines)} line(s))")


class TransactionSegmenter:
    """Carves intermediate transactions off the front of a line stack."""

    def __init__(
        self,
        stack: LineStack,
        daily_cash_lookahead: int | None = None,
        trace: bool = False,
    ):
        """Initialize the segmenter.

        Args:
            stack: Line stack to consume; owned by this segmenter
            daily_cash_lookahead: Max lines scanned for a Daily Cash percentage,
                or None to scan until one is found
            trace: Log stack snapshots and emitted blocks at debug level
        """
        self.stack = stack
        self.daily_cash_lookahead = daily_cash_lookahead
        self.trace = trace
        self.missing_daily_cash = False
        self.skipped_lines: list[str] = []

    def _pop(self, state: str) -> str:
        token = self.stack.pop_front()
        if token is None:
            raise SegmentationError(
                FailureReason.TRUNCATED_BLOCK,
                self.stack.block_lines,
                f"ran out of lines while reading {state}",
            )
        return token

    def next_transaction(self) -> IntermediateTransaction | None:
        """Extract the next transaction block.

        Returns:
            The intermediate transaction, or None once the stack is exhausted

        Raises:
            SegmentationError: If the stack empties part-way through a block
        """
        if self.trace:
            logger.debug(f"Segmenting from {self.stack!r}")

        self.stack.begin_block()
        self.missing_daily_cash = False
        self.skipped_lines = []

        payee = self.stack.pop_front()
        if payee is None:
            return None

        payee, fused = split_at_ellipsis(payee)
        if fused:
            self.stack.push_front(fused)

        payee_parts = [payee]
        amount = self._read_amount(payee_parts)
        payee = " ".join(payee_parts)

        memo, stashed_time = self._read_memo(payee)

        daily_cash = None
        if is_daily_cash_eligible(payee, memo):
            daily_cash = self._read_daily_cash()

        time_description = self._read_time_description(stashed_time)
        time_description, memo = split_family_member(time_description, memo)

        transaction = IntermediateTransaction(
            time_description=time_description,
            payee=payee,
            amount=amount,
            daily_cash=daily_cash,
            memo=memo,
            pending=is_pending(memo),
            declined=is_declined(memo),
        )
        if self.trace:
            logger.debug(f"Segmented block {self.stack.block_lines!r} -> {transaction!r}")
        return transaction

    def _read_amount(self, payee_parts: list[str]) -> str:
        # Payee names wrapped onto further lines precede the amount
        while True:
            candidate = self._pop("amount")
            if is_amount(candidate):
                return candidate
            payee_parts.append(candidate)

    def _read_memo(self, payee: str) -> tuple[str, str | None]:
        if payee != BALANCE_ADJUSTMENT_PAYEE:
            return self._pop("memo"), None

        line = self._pop("memo")
        if line == DISPUTE_MEMO:
            return line, None
        return payee, line

    def _read_daily_cash(self) -> str | None:
        skipped: list[str] = []
        while self.daily_cash_lookahead is None or len(skipped) < self.daily_cash_lookahead:
            token = self.stack.pop_front()
            if token is None:
                raise SegmentationError(
                    FailureReason.UNBOUNDED_DRAIN,
                    self.stack.block_lines,
                    "no Daily Cash percentage before end of lines",
                )
            if "%" in token:
                if skipped:
                    self.skipped_lines = skipped
                    logger.debug(f"Skipped {len(skipped)} line(s) before Daily Cash: {skipped!r}")
                return token
            skipped.append(token)

        for token in reversed(skipped):
            self.stack.push_front(token)
        self.missing_daily_cash = True
        logger.debug(f"No Daily Cash line within {self.daily_cash_lookahead} line(s)")
        return None

    def _read_time_description(self, stashed: str | None) -> str:
        # "ago" can land on its own line, so keep appending until a timestamp matches
        description = stashed if stashed is not None else self._pop("time description")
        while not is_timestamp(description) and self.stack:
            description = f"{description} {self.stack.pop_front()}"
        return TIME_SEPARATORS.sub(" ", description)


def split_family_member(time_description: str, memo: str) -> tuple[str, str]:
    """Move a Family Sharing member name from the time description to the memo.

    A description that contains a space and does not start with a digit is
    taken to be ``"<member> <time>"``, e.g. ``"Alex   Yesterday"``.

    Returns:
        Tuple of (time description, memo)
    """
    if " " not in time_description or _LEADING_DIGIT.match(time_description):
        return time_description, memo

    member, remainder = time_description.split(" ", 1)
    remainder = remainder.strip()
    if not member:
        # Leading separator with no name in front of it
        return remainder, memo
    return remainder, f"{member} - {memo}"
