import base64
import json
import logging
import os
from typing import Optional

from maze_engine import BinaryOutput, LambdaMazeEngine, MazeEngine
from maze_errors import InvalidBodyError, MazeServiceError, UnsupportedOutputError
from maze_request import GenerationCommand, derive_command, parse_request

# -------------------------------------------------
# Logging setup
# -------------------------------------------------
logger = logging.getLogger()
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

DEBUG_EVENT = (os.getenv("DEBUG_EVENT", "false").strip().lower() == "true")

SERVICE_NAME = "maze-generator"
SERVICE_VERSION = str(os.getenv("SERVICE_VERSION", "1.0")).strip() or "1.0"
LOG_BODY_TRUNCATE = int(os.getenv("LOG_BODY_TRUNCATE", "2000"))

_ENGINE: Optional[MazeEngine] = None


def _get_engine() -> MazeEngine:
    # boto3 client reuse across warm invocations
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = LambdaMazeEngine()
    return _ENGINE


# -------------------------------------------------
# HTTP helpers
# -------------------------------------------------
def _json_response(body_obj: dict, status_code: int = 200) -> dict:
    return {
        "statusCode": status_code,
        "body": json.dumps(body_obj),
        "headers": {"Content-Type": "application/json"},
    }


def _binary_response(data: bytes, status_code: int = 200) -> dict:
    return {
        "statusCode": status_code,
        "body": base64.b64encode(data).decode("ascii"),
        "headers": {"Content-Type": "application/octet-stream"},
        "isBase64Encoded": True,
    }


def _error_response(err: MazeServiceError) -> dict:
    return _json_response(err.to_dict(), err.status_code)


def _normalize_api_path(p: str) -> str:
    p = (p or "").strip()
    if not p:
        return ""
    p = "/" + p.lstrip("/")
    return p.rstrip("/")


def _get_api_path(event: dict) -> str:
    return _normalize_api_path(event.get("rawPath") or event.get("path") or "")


def _get_http_method(event: dict) -> str:
    m = event.get("httpMethod")
    if m:
        return str(m).upper()

    # HTTP API (payload v2) keeps the method under requestContext
    http_ctx = (event.get("requestContext", {}) or {}).get("http", {}) or {}
    v = http_ctx.get("method")
    if v:
        return str(v).upper()

    return "POST"


def _truncate(s: str, max_len: int = LOG_BODY_TRUNCATE) -> str:
    return s if len(s) <= max_len else (s[:max_len] + "…")


# -------------------------------------------------
# Request pipeline
# -------------------------------------------------
def extract_text_body(event: dict) -> str:
    body = event.get("body")
    if body is None:
        raise InvalidBodyError("Invalid request body: no body provided")
    if event.get("isBase64Encoded"):
        raise InvalidBodyError("Invalid request body: binary payloads are not accepted")
    if not isinstance(body, str):
        raise InvalidBodyError("Invalid request body: expected text")
    return body


def build_command(body: str) -> GenerationCommand:
    logger.info("Request body: %s", _truncate(body))

    maze_req = parse_request(body)
    logger.info("Decoded request: %s", maze_req)

    return derive_command(maze_req)


def generate_maze(body: str, engine: MazeEngine) -> bytes:
    """
    Decode body, derive the generation command and run it through the engine.

    Returns the engine's binary output. Raises DecodeError, EngineError or
    UnsupportedOutputError; nothing is retried.
    """
    command = build_command(body)
    output = engine.generate(command)

    if isinstance(output, BinaryOutput):
        return output.data

    raise UnsupportedOutputError(f"Unsupported output type: {type(output).__name__}")


# -------------------------------------------------
# Route handlers
# -------------------------------------------------
def _handle_health() -> dict:
    return _json_response({"status": "ok", "service": SERVICE_NAME, "version": SERVICE_VERSION}, 200)


def _handle_describe_command(event: dict) -> dict:
    try:
        command = build_command(extract_text_body(event))
    except MazeServiceError as e:
        logger.warning("describeCommand rejected: %s", e)
        return _error_response(e)
    except Exception as e:
        logger.exception("describeCommand failed")
        return _json_response({"ok": False, "errorType": "InternalError", "error": str(e)}, 500)
    return _json_response({"ok": True, "command": command.to_payload()}, 200)


def _handle_generate(event: dict, engine: Optional[MazeEngine] = None) -> dict:
    try:
        body = extract_text_body(event)
        data = generate_maze(body, engine or _get_engine())
    except MazeServiceError as e:
        if e.status_code < 500:
            logger.warning("generateMaze rejected (%s): %s", e.error_type, e)
        else:
            logger.error("generateMaze failed (%s): %s", e.error_type, e)
        return _error_response(e)
    except Exception as e:
        logger.exception("generateMaze failed")
        return _json_response({"ok": False, "errorType": "InternalError", "error": str(e)}, 500)

    logger.info("Maze generated: %d bytes", len(data))
    return _binary_response(data)


# -------------------------------------------------
# Lambda entrypoint
# -------------------------------------------------
def lambda_handler(event, context, engine: Optional[MazeEngine] = None):
    if DEBUG_EVENT:
        try:
            logger.info("RAW_EVENT_TYPE=%s", type(event))
            logger.info("RAW_EVENT_KEYS=%s", list(event.keys()) if isinstance(event, dict) else "NOT_A_DICT")
            if isinstance(event, dict):
                logger.info("RAW_EVENT_SAMPLE=%s", json.dumps(event, default=str)[:800])
        except Exception:
            logger.exception("Failed to log raw event")

    if not isinstance(event, dict):
        return _json_response({"ok": False, "errorType": "InvalidBody", "error": "Unsupported event shape"}, 400)

    path = _get_api_path(event).lower()
    method = _get_http_method(event)

    if path == "/health":
        return _handle_health()

    if path == "/maze/command" and method == "POST":
        return _handle_describe_command(event)

    return _handle_generate(event, engine)
