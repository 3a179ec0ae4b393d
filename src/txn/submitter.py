"""
Transaction Submitter

Hands a completed TxnRequest to the store exactly once and reports which
request list the store executed.
"""

import logging

from src.txn.models import TxnRequest

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "executed success request list"
FAILURE_MESSAGE = "executed failure request list"


def result_line(succeeded: bool) -> str:
    """Return the one-line outcome printed after submission."""
    return SUCCESS_MESSAGE if succeeded else FAILURE_MESSAGE


class TxnSubmitter:
    """Thin pass-through from a completed request to the store client."""

    def __init__(self, kv_client):
        """
        Args:
            kv_client: Object exposing ``txn(TxnRequest) -> TxnResponse``
        """
        self.kv_client = kv_client

    def submit(self, request: TxnRequest) -> bool:
        """
        Submit the request once. Errors propagate; nothing is retried.

        Returns:
            True if the store ran the success list, False for the failure list
        """
        response = self.kv_client.txn(request)
        logger.info(result_line(response.succeeded), extra={"succeeded": response.succeeded})
        return response.succeeded
