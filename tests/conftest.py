from __future__ import annotations

import io
import json
from typing import Any, Dict, List, Optional

import pytest

from recipe_ingest.core.config import Settings
from recipe_ingest.dependencies import build_event_router

SALAD = {
    "title": "Salade verte",
    "servings": 2,
    "ingredients": [
        {"name": "laitue", "quantity": 1, "unit": "Pièce"},
        {"name": "tomates", "quantity": 2, "unit": ""},
        {"name": "concombre"},
        {"name": "vinaigrette", "quantity": "un peu", "unit": "CL"},
    ],
    "steps": [
        {"text": "Laver et couper les légumes."},
        {"text": "Assaisonner."},
    ],
}


def nova_reply(payload: Any) -> Dict[str, Any]:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"output": {"message": {"role": "assistant", "content": [{"text": text}]}}, "stopReason": "end_turn"}


def claude_reply(payload: Any) -> Dict[str, Any]:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"id": "msg_1", "content": [{"type": "text", "text": text}], "stop_reason": "end_turn"}


class _FailingBody:
    def __init__(self, error: Exception):
        self.error = error

    def read(self):
        raise self.error


class FakeBedrock:
    def __init__(self, reply: Any = None, error: Optional[Exception] = None,
                 read_error: Optional[Exception] = None):
        self.reply = nova_reply(SALAD) if reply is None else reply
        self.error = error
        self.read_error = read_error
        self.calls: List[Dict[str, Any]] = []

    def invoke_model(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.read_error is not None:
            return {"body": _FailingBody(self.read_error)}
        raw = self.reply if isinstance(self.reply, (str, bytes)) else json.dumps(self.reply)
        return {"body": io.BytesIO(raw.encode("utf-8") if isinstance(raw, str) else raw)}


class FakeTextract:
    def __init__(self, pages: Optional[List[Dict[str, Any]]] = None, lines: Optional[List[str]] = None,
                 error: Optional[Exception] = None):
        self.pages = pages or []
        self.lines = lines or []
        self.error = error
        self.started: List[Dict[str, Any]] = []
        self.fetched: List[Dict[str, Any]] = []
        self.detected: List[Dict[str, Any]] = []

    def start_document_text_detection(self, **kwargs):
        self.started.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"JobId": f"job-{len(self.started)}"}

    def get_document_text_detection(self, **kwargs):
        self.fetched.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.pages[len(self.fetched) - 1]

    def detect_document_text(self, **kwargs):
        self.detected.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"Blocks": line_blocks(self.lines)}


def line_blocks(lines: List[str]) -> List[Dict[str, Any]]:
    blocks: List[Dict[str, Any]] = [{"BlockType": "PAGE"}]
    for line in lines:
        blocks.append({"BlockType": "LINE", "Text": line})
        blocks.append({"BlockType": "WORD", "Text": line.split()[0] if line.split() else ""})
    return blocks


class FakeLambda:
    def __init__(self, payload: Any = None, function_error: Optional[str] = None,
                 error: Optional[Exception] = None):
        self.payload = {"statusCode": 201, "body": json.dumps({"id": "r-1"})} if payload is None else payload
        self.function_error = function_error
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def invoke(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        out: Dict[str, Any] = {"StatusCode": 200, "Payload": io.BytesIO(json.dumps(self.payload).encode("utf-8"))}
        if self.function_error:
            out["FunctionError"] = self.function_error
        return out

    def sent_payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(c["Payload"]) for c in self.calls]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        region="eu-west-1",
        model_id="amazon.nova-lite-v1:0",
        environment="test",
        textract_sns_topic_arn="arn:aws:sns:eu-west-1:123456789012:textract",
        textract_role_arn="arn:aws:iam::123456789012:role/textract",
    )


@pytest.fixture
def fakes():
    class _Fakes:
        Bedrock = FakeBedrock
        Textract = FakeTextract
        Lambda = FakeLambda
        nova = staticmethod(nova_reply)
        claude = staticmethod(claude_reply)
        lines = staticmethod(line_blocks)
        salad = SALAD

    return _Fakes


@pytest.fixture
def make_router(settings):
    def _make(settings_override: Optional[Settings] = None, *, bedrock=None, textract=None, store=None,
              fetch_page=None):
        async def _no_fetch(url):
            raise AssertionError(f"unexpected fetch of {url}")

        return build_event_router(
            settings_override or settings,
            bedrock_client=bedrock or FakeBedrock(),
            textract_client=textract or FakeTextract(),
            lambda_client=store or FakeLambda(),
            fetch_page=fetch_page or _no_fetch,
        )

    return _make
