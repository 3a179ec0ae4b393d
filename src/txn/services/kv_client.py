"""
KV Store Client

This module provides the client used to submit a transaction to the store.
The store exposes its KV service through a JSON gateway:

- POST /v3/kv/txn - Execute one atomic conditional transaction

Keys and values travel base64-encoded and 64-bit integers as decimal
strings, following the proto3 JSON mapping.
"""

import base64
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from src.txn.config import TxnCtlConfig, get_config
from src.txn.exceptions import ConnectionFailure, SubmissionFailure
from src.txn.models import (
    CompareTarget,
    DeleteRangeRequest,
    PutRequest,
    RangeRequest,
    TxnRequest,
    TxnResponse,
)

logger = logging.getLogger(__name__)

TXN_PATH = "/v3/kv/txn"

_PAYLOAD_FIELDS = {
    CompareTarget.VERSION: "version",
    CompareTarget.CREATE_REVISION: "create_revision",
    CompareTarget.MOD_REVISION: "mod_revision",
}


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encode_compare(compare) -> Dict[str, Any]:
    """Encode one Comparison as a gateway compare entry."""
    entry = {
        "key": _b64(compare.key),
        "target": compare.target.value,
        "result": compare.operator.value,
    }
    if compare.target is CompareTarget.VALUE:
        entry["value"] = _b64(compare.value)
    else:
        entry[_PAYLOAD_FIELDS[compare.target]] = str(compare.payload)
    return entry


def encode_request_op(op) -> Dict[str, Any]:
    """Encode one SubRequest as a gateway request entry."""
    if isinstance(op, PutRequest):
        return {"request_put": {"key": _b64(op.key), "value": _b64(op.value)}}

    body = {"key": _b64(op.key)}
    if op.range_end is not None:
        body["range_end"] = _b64(op.range_end)
    if isinstance(op, RangeRequest):
        return {"request_range": body}
    if isinstance(op, DeleteRangeRequest):
        return {"request_delete_range": body}
    raise TypeError(f"unsupported sub-request: {type(op).__name__}")


def encode_txn_request(request: TxnRequest) -> Dict[str, Any]:
    """Encode a TxnRequest as the gateway's JSON body."""
    return {
        "compare": [encode_compare(c) for c in request.comparisons],
        "success": [encode_request_op(op) for op in request.on_success],
        "failure": [encode_request_op(op) for op in request.on_failure],
    }


def normalize_endpoint(endpoint: str) -> str:
    """
    Turn an endpoint into a base URL.

    ``host:port`` becomes ``http://host:port``; explicit http(s) URLs are kept.

    Raises:
        ConnectionFailure: If the endpoint is not a usable http(s) URL
    """
    raw = endpoint.strip()
    if "://" not in raw:
        raw = f"http://{raw}"
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise ConnectionFailure(endpoint=endpoint, details=str(e)) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise ConnectionFailure(endpoint=endpoint, details="endpoint must be host:port or an http(s) URL")
    return str(url).rstrip("/")


class KVClient:
    """
    Client for the store's KV service.

    The transaction call is never retried: success and failure request lists
    may have side effects that are not idempotent.
    """

    def __init__(self, base_url: str, http_client: httpx.Client):
        """
        Initialize KV client.

        Args:
            base_url: Base URL of the store (e.g., http://127.0.0.1:2379)
            http_client: httpx client used for the RPC
        """
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client

    @classmethod
    def dial(cls, endpoint: str, config: Optional[TxnCtlConfig] = None) -> "KVClient":
        """
        Create a client for the given endpoint.

        Raises:
            ConnectionFailure: If the endpoint cannot be used
        """
        config = config or get_config()
        base_url = normalize_endpoint(endpoint)
        timeout = httpx.Timeout(
            config.http_read_timeout,
            connect=config.http_connect_timeout,
        )
        logger.info(f"Dialing store: {base_url}", extra={"endpoint": endpoint})
        return cls(base_url=base_url, http_client=httpx.Client(timeout=timeout))

    def txn(self, request: TxnRequest) -> TxnResponse:
        """
        Submit a transaction.

        Args:
            request: Completed transaction request

        Returns:
            TxnResponse with ``succeeded`` set by the store

        Raises:
            ConnectionFailure: If the store cannot be reached
            SubmissionFailure: If the store rejects the call or replies garbage

        Example:
            >>> resp = kv_client.txn(txn)
            >>> resp.succeeded
            True
        """
        url = f"{self.base_url}{TXN_PATH}"
        body = encode_txn_request(request)

        logger.info(
            "Submitting transaction",
            extra={
                "url": url,
                "compare_count": len(body["compare"]),
                "success_count": len(body["success"]),
                "failure_count": len(body["failure"]),
            },
        )

        try:
            response = self.http_client.post(url, json=body)
            response.raise_for_status()
            result = TxnResponse.model_validate(response.json())

        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.error(f"Failed to connect to store: {str(e)}", extra={"url": url})
            raise ConnectionFailure(endpoint=self.base_url, details=str(e)) from e

        except httpx.HTTPStatusError as e:
            error_msg = f"store returned HTTP {e.response.status_code}"
            logger.error(error_msg, extra={"url": url, "status_code": e.response.status_code})
            raise SubmissionFailure(
                details=f"{error_msg}: {_error_text(e.response)}",
                status_code=e.response.status_code,
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Transaction request failed: {str(e)}", extra={"url": url})
            raise SubmissionFailure(details=str(e)) from e

        except (ValueError, ValidationError) as e:
            logger.error(f"Undecodable store response: {str(e)}", extra={"url": url})
            raise SubmissionFailure(details=f"invalid response: {str(e)}") from e

        logger.info(
            f"Transaction executed, succeeded={result.succeeded}",
            extra={"url": url, "succeeded": result.succeeded},
        )
        return result

    def close(self) -> None:
        """Release the underlying HTTP client."""
        self.http_client.close()

    def __enter__(self) -> "KVClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _error_text(response: httpx.Response) -> str:
    """Extract the gateway's error message, falling back to the raw body."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)
