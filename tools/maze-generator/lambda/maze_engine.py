import base64
import binascii
import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Union

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from maze_errors import EngineError
from maze_request import GenerationCommand, OutputType, decode_output_type

logger = logging.getLogger()

# -----------------------------
# Env
# -----------------------------
MAZE_ENGINE_FUNCTION = (os.getenv("MAZE_ENGINE_FUNCTION") or "").strip()
MAZE_ENGINE_REGION = (os.getenv("MAZE_ENGINE_REGION") or "").strip()
MAZE_ENGINE_TIMEOUT = int(os.getenv("MAZE_ENGINE_TIMEOUT", "30"))


# -----------------------------
# Engine output variants
# -----------------------------
@dataclass(frozen=True)
class BinaryOutput:
    data: bytes


@dataclass(frozen=True)
class AsciiOutput:
    text: str


MazeOutput = Union[BinaryOutput, AsciiOutput]


class MazeEngine(ABC):
    """
    Collaborator contract: generate(command) returns a MazeOutput or raises EngineError.
    """

    @abstractmethod
    def generate(self, command: GenerationCommand) -> MazeOutput:
        ...


def _parse_engine_reply(reply: Any) -> MazeOutput:
    if not isinstance(reply, dict):
        raise EngineError("Engine reply must be a JSON object")

    raw_type = reply.get("outputType")
    try:
        output_type = decode_output_type(raw_type)
    except ValueError as e:
        raise EngineError(f"Engine reply has unknown outputType: {e}") from e

    data = reply.get("data")
    if not isinstance(data, str):
        raise EngineError("Engine reply is missing data")

    if output_type is OutputType.ASCII:
        return AsciiOutput(text=data)

    try:
        return BinaryOutput(data=base64.b64decode(data, validate=True))
    except (binascii.Error, ValueError) as e:
        raise EngineError(f"Engine binary data is not valid base64: {e}") from e


# -----------------------------
# Lambda-hosted engine
# -----------------------------
def _lambda_client():
    # single attempt; this layer never retries the engine
    cfg = Config(read_timeout=MAZE_ENGINE_TIMEOUT, retries={"max_attempts": 1, "mode": "standard"})
    if MAZE_ENGINE_REGION:
        return boto3.client("lambda", region_name=MAZE_ENGINE_REGION, config=cfg)
    return boto3.client("lambda", config=cfg)


class LambdaMazeEngine(MazeEngine):
    """Invokes the maze engine deployed as its own Lambda function."""

    def __init__(self, function_name: Optional[str] = None, client: Any = None):
        self.function_name = (function_name if function_name is not None else MAZE_ENGINE_FUNCTION).strip()
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = _lambda_client()
        return self._client

    def generate(self, command: GenerationCommand) -> MazeOutput:
        if not self.function_name:
            raise EngineError("MAZE_ENGINE_FUNCTION environment variable is not set")

        payload = command.to_payload()
        logger.info("Invoking maze engine function=%s payload=%s", self.function_name, json.dumps(payload))

        try:
            resp = self.client.invoke(
                FunctionName=self.function_name,
                InvocationType="RequestResponse",
                Payload=json.dumps(payload).encode("utf-8"),
            )
            # Payload is a stream; reading it can fail mid-response
            raw = resp["Payload"].read() if resp.get("Payload") is not None else b""
        except (ClientError, BotoCoreError) as e:
            raise EngineError(f"Maze engine invoke failed: {e}") from e

        status = int(resp.get("StatusCode") or 0)
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")

        if resp.get("FunctionError"):
            raise EngineError(f"Maze engine reported {resp['FunctionError']} error: {raw[:500]}")
        if status < 200 or status >= 300:
            raise EngineError(f"Maze engine invoke returned status {status}")

        try:
            reply = json.loads(raw) if raw else None
        except ValueError as e:
            raise EngineError(f"Maze engine reply is not valid JSON: {e}") from e

        return _parse_engine_reply(reply)
