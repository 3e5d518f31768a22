"""Shared pytest fixtures for the maze generator Lambda tests."""

from __future__ import annotations

import json
from typing import Any

import pytest

from maze_engine import BinaryOutput, MazeEngine


class FakeEngine(MazeEngine):
    """In-memory engine that records every command it receives."""

    def __init__(self, output: Any = None, error: Exception | None = None) -> None:
        self.output = output if output is not None else BinaryOutput(data=b"\x00\x01maze")
        self.error = error
        self.commands: list = []

    def generate(self, command):
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return self.output


def make_event(body: Any = None, *, path: str = "/maze", method: str = "POST", base64_encoded: bool = False) -> dict:
    """Build a minimal API Gateway (REST v1) proxy event."""
    if isinstance(body, dict):
        body = json.dumps(body)
    return {
        "resource": path,
        "path": path,
        "httpMethod": method,
        "headers": {"Content-Type": "application/json"},
        "body": body,
        "isBase64Encoded": base64_encoded,
    }


@pytest.fixture(autouse=True)
def _aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep boto3 away from real credentials and regions."""
    monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-southeast-2")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def bt_body() -> dict:
    return {"dimensions": {"height": 5, "width": 5}, "alg": "bt"}
