import pytest

from src.txn.exceptions import SubmissionFailure
from src.txn.models import TxnRequest
from src.txn.submitter import FAILURE_MESSAGE, SUCCESS_MESSAGE, TxnSubmitter, result_line

from helpers import RecordingKVClient


def test_result_lines():
    assert result_line(True) == "executed success request list"
    assert result_line(False) == "executed failure request list"
    assert SUCCESS_MESSAGE != FAILURE_MESSAGE


@pytest.mark.parametrize("succeeded", [True, False])
def test_submit_reports_outcome(succeeded):
    client = RecordingKVClient(succeeded=succeeded)
    txn = TxnRequest()

    assert TxnSubmitter(client).submit(txn) is succeeded
    assert client.calls == [txn]


def test_submit_error_propagates_without_retry():
    client = RecordingKVClient(error=SubmissionFailure(details="boom"))

    with pytest.raises(SubmissionFailure):
        TxnSubmitter(client).submit(TxnRequest())
    assert len(client.calls) == 1
