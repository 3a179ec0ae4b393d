"""
txnctl Test Helper Functions

Fake store served in-process through FastAPI's TestClient, plus small input
builders shared by the txn tests.
"""
import base64
import io
from typing import Any, Dict, List, Optional

import httpx
from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from src.txn.models import TxnResponse
from src.txn.services.kv_client import KVClient, TXN_PATH

BASE_URL = "http://testserver"


# ==================== Input Builders ====================

def lines(*rows: str) -> io.StringIO:
    """Build a newline-terminated input stream, one row per line."""
    return io.StringIO("".join(f"{row}\n" for row in rows))


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def unb64(text: str) -> bytes:
    return base64.b64decode(text)


# ==================== Fake Store ====================

class FakeKVStore:
    """
    Minimal in-memory store speaking the /v3/kv/txn JSON gateway.

    Keeps version / create_revision / mod_revision per key so comparisons
    can be evaluated, and records every request body it receives.
    """

    def __init__(self):
        self.kvs: Dict[bytes, Dict[str, Any]] = {}
        self.revision = 1
        self.received: List[Dict[str, Any]] = []

    def seed(self, key: bytes, value: bytes) -> None:
        self.revision += 1
        self._put(key, value, self.revision)

    def _put(self, key: bytes, value: bytes, rev: int) -> None:
        kv = self.kvs.get(key)
        if kv is None:
            self.kvs[key] = {"value": value, "create_revision": rev, "mod_revision": rev, "version": 1}
        else:
            kv.update(value=value, mod_revision=rev, version=kv["version"] + 1)

    def _keys_in(self, key: bytes, range_end: Optional[bytes]) -> List[bytes]:
        if range_end is None:
            return [key] if key in self.kvs else []
        return sorted(k for k in self.kvs if key <= k < range_end)

    def _compare(self, cmp: Dict[str, Any]) -> bool:
        kv = self.kvs.get(unb64(cmp["key"]))
        target = cmp["target"]
        if target == "VALUE":
            if kv is None:
                return False
            actual, expected = kv["value"], unb64(cmp["value"])
        else:
            field = {"VERSION": "version", "CREATE": "create_revision", "MOD": "mod_revision"}[target]
            actual = kv[field] if kv else 0
            expected = int(cmp[field])

        result = cmp["result"]
        if result == "EQUAL":
            return actual == expected
        if result == "GREATER":
            return actual > expected
        return actual < expected

    def _apply(self, op: Dict[str, Any], rev: int) -> Dict[str, Any]:
        if "request_put" in op:
            body = op["request_put"]
            self._put(unb64(body["key"]), unb64(body["value"]), rev)
            return {"response_put": {}}

        if "request_range" in op:
            body = op["request_range"]
            end = unb64(body["range_end"]) if "range_end" in body else None
            keys = self._keys_in(unb64(body["key"]), end)
            kvs = [{"key": b64(k), "value": b64(self.kvs[k]["value"])} for k in keys]
            return {"response_range": {"kvs": kvs, "count": str(len(kvs))}}

        body = op["request_delete_range"]
        end = unb64(body["range_end"]) if "range_end" in body else None
        keys = self._keys_in(unb64(body["key"]), end)
        for k in keys:
            del self.kvs[k]
        return {"response_delete_range": {"deleted": str(len(keys))}}

    def txn(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.received.append(body)
        succeeded = all(self._compare(c) for c in body.get("compare", []))
        ops = body.get("success" if succeeded else "failure", [])

        rev = self.revision + 1
        responses = [self._apply(op, rev) for op in ops]
        if any("request_put" in op or "request_delete_range" in op for op in ops):
            self.revision = rev

        reply = {"header": {"revision": str(self.revision)}, "responses": responses}
        # the gateway omits false booleans
        if succeeded:
            reply["succeeded"] = True
        return reply

    def app(self) -> FastAPI:
        app = FastAPI(title="Fake KV Store")

        @app.post(TXN_PATH)
        def txn(body: Dict[str, Any] = Body(...)):
            return self.txn(body)

        return app


def error_app(status_code: int, message: str) -> FastAPI:
    """A store whose txn endpoint always fails."""
    app = FastAPI(title="Failing KV Store")

    @app.post(TXN_PATH)
    def txn(body: Dict[str, Any] = Body(...)):
        return JSONResponse(status_code=status_code, content={"error": message, "code": 2})

    return app


# ==================== Client Factories ====================

def new_kv_client(app: FastAPI) -> KVClient:
    """KVClient wired to an in-process FastAPI app."""
    return KVClient(base_url=BASE_URL, http_client=TestClient(app))


def mock_kv_client(handler) -> KVClient:
    """KVClient whose transport calls ``handler(request)``."""
    return KVClient(base_url=BASE_URL, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class RecordingKVClient:
    """Stand-in for KVClient that records submissions and replies with a fixed outcome."""

    def __init__(self, succeeded: bool = True, error: Optional[Exception] = None):
        self.succeeded = succeeded
        self.error = error
        self.calls = []

    def txn(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return TxnResponse(succeeded=self.succeeded)
