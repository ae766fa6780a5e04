"""
Unit tests for GeminiProposer with a mocked requests session.
"""

from unittest.mock import MagicMock

import pytest
import requests

from src.dayplan.errors import (
    MalformedResponseError,
    PermanentError,
    ProposalTimeoutError,
    ProposerRequestError,
    ScheduleGenerationFailed,
)
from src.dayplan.gemini import GeminiProposer
from src.dayplan.models import ProposalRequest


def make_response(status_code=200, payload=None, text=""):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def make_proposer(response=None, side_effect=None):
    session = MagicMock(spec=requests.Session)
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = response
    proposer = GeminiProposer(api_key="k", model="gemini-test", session=session)
    return proposer, session


def test_returns_candidate_text_and_sends_prompt():
    body = {
        "candidates": [
            {"content": {"parts": [{"text": '{"assignments": '}, {"text": "[]}"}]}}
        ]
    }
    proposer, session = make_proposer(make_response(payload=body))

    text = proposer(ProposalRequest())

    assert text == '{"assignments": []}'
    args, kwargs = session.post.call_args
    assert args[0].endswith("/models/gemini-test:generateContent")
    assert kwargs["headers"]["x-goog-api-key"] == "k"
    prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert "FIXED_EVENTS" in prompt


def test_timeout_maps_to_proposal_timeout():
    proposer, _ = make_proposer(side_effect=requests.Timeout("read timed out"))

    with pytest.raises(ProposalTimeoutError):
        proposer(ProposalRequest())


def test_connection_error_is_transient():
    proposer, _ = make_proposer(side_effect=requests.ConnectionError("refused"))

    with pytest.raises(ProposerRequestError):
        proposer(ProposalRequest())


@pytest.mark.parametrize("status", [429, 503])
def test_retryable_http_status_is_transient(status):
    proposer, _ = make_proposer(make_response(status_code=status, text="busy"))

    with pytest.raises(ProposerRequestError):
        proposer(ProposalRequest())


def test_client_error_is_permanent():
    proposer, _ = make_proposer(make_response(status_code=400, text="bad key"))

    with pytest.raises(PermanentError):
        proposer(ProposalRequest())


@pytest.mark.parametrize(
    "payload",
    [{"candidates": []}, {"promptFeedback": {}}, ValueError("not json")],
)
def test_missing_candidate_text_is_malformed(payload):
    proposer, _ = make_proposer(make_response(payload=payload))

    with pytest.raises(MalformedResponseError):
        proposer(ProposalRequest())


def test_blank_candidate_is_malformed():
    body = {"candidates": [{"content": {"parts": [{"text": "  "}]}}]}
    proposer, _ = make_proposer(make_response(payload=body))

    with pytest.raises(MalformedResponseError):
        proposer(ProposalRequest())


def test_missing_api_key_is_rejected():
    with pytest.raises(PermanentError):
        GeminiProposer(api_key="")


def test_client_error_fails_generation_without_retry(generator):
    proposer, session = make_proposer(make_response(status_code=403, text="denied"))

    with pytest.raises(ScheduleGenerationFailed) as exc_info:
        generator.generate_schedule(proposer)

    assert exc_info.value.cause.details["status"] == 403
    assert session.post.call_count == 1
