import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from maze_errors import DecodeError


# -----------------------------
# Enumerated parameters
# -----------------------------
class Algorithm(Enum):
    ALDOUS_BRODER = "aldous-broder"
    BINARY_TREE = "binary-tree"
    SIDE_WINDER = "side-winder"


class Corner(Enum):
    NORTHWEST = "northwest"
    NORTHEAST = "northeast"
    SOUTHEAST = "southeast"
    SOUTHWEST = "southwest"


class Direction(Enum):
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"


class OutputType(Enum):
    BINARY = "binary"
    ASCII = "ascii"


# Exact-match tokens; no case folding.
ALGORITHM_ALIASES: Dict[str, Algorithm] = {
    "ab": Algorithm.ALDOUS_BRODER,
    "aldous-broder": Algorithm.ALDOUS_BRODER,
    "bt": Algorithm.BINARY_TREE,
    "binary-tree": Algorithm.BINARY_TREE,
    "sw": Algorithm.SIDE_WINDER,
    "side-winder": Algorithm.SIDE_WINDER,
}

CORNER_ALIASES: Dict[str, Corner] = {
    "nw": Corner.NORTHWEST,
    "northwest": Corner.NORTHWEST,
    "ne": Corner.NORTHEAST,
    "northeast": Corner.NORTHEAST,
    "se": Corner.SOUTHEAST,
    "southeast": Corner.SOUTHEAST,
    "sw": Corner.SOUTHWEST,
    "southwest": Corner.SOUTHWEST,
}

DIRECTION_ALIASES: Dict[str, Direction] = {
    "n": Direction.NORTH,
    "north": Direction.NORTH,
    "e": Direction.EAST,
    "east": Direction.EAST,
    "s": Direction.SOUTH,
    "south": Direction.SOUTH,
    "w": Direction.WEST,
    "west": Direction.WEST,
}

OUTPUT_TYPE_ALIASES: Dict[str, OutputType] = {
    "bin": OutputType.BINARY,
    "binary": OutputType.BINARY,
    "ascii": OutputType.ASCII,
}

DEFAULT_CORNER = Corner.NORTHWEST
DEFAULT_DIRECTION = Direction.NORTH


def decode_token(aliases: Dict[str, Any], token: Any, field: str) -> Any:
    """
    Resolve a textual token to its canonical variant using an alias table.
    Raises DecodeError (kind=type_mismatch / unrecognized_token) attributed to `field`.
    """
    if not isinstance(token, str):
        raise DecodeError(field, "type_mismatch", f"expected a string, got {type(token).__name__}")
    try:
        return aliases[token]
    except KeyError:
        accepted = ", ".join(sorted(aliases))
        raise DecodeError(
            field,
            "unrecognized_token",
            f"unrecognized value {token!r} (accepted: {accepted})",
        ) from None


def decode_algorithm(token: Any, field: str = "algorithm") -> Algorithm:
    return decode_token(ALGORITHM_ALIASES, token, field)


def decode_corner(token: Any, field: str = "corner") -> Corner:
    return decode_token(CORNER_ALIASES, token, field)


def decode_direction(token: Any, field: str = "direction") -> Direction:
    return decode_token(DIRECTION_ALIASES, token, field)


def decode_output_type(token: Any, field: str = "outputType") -> OutputType:
    return decode_token(OUTPUT_TYPE_ALIASES, token, field)


# -----------------------------
# Request schema
# -----------------------------
@dataclass(frozen=True)
class Dimensions:
    height: int
    width: int

    def to_dict(self) -> Dict[str, int]:
        return {"height": self.height, "width": self.width}


@dataclass(frozen=True)
class MazeRequest:
    dimensions: Dimensions
    algorithm: Algorithm
    corner: Optional[Corner] = None
    direction: Optional[Direction] = None

    def summary(self) -> Dict[str, Any]:
        return {
            "dimensions": self.dimensions.to_dict(),
            "algorithm": self.algorithm.value,
            "corner": self.corner.value if self.corner else None,
            "direction": self.direction.value if self.direction else None,
        }


ALGORITHM_FIELDS = ("algorithm", "alg")


def _require(obj: Dict[str, Any], key: str, path: str) -> Any:
    if key not in obj or obj[key] is None:
        raise DecodeError(path, "missing_field", f"{path} is required")
    return obj[key]


def _decode_uint(val: Any, path: str) -> int:
    # bool is an int subclass; JSON true/false is not a dimension
    if isinstance(val, bool) or not isinstance(val, int):
        raise DecodeError(path, "type_mismatch", f"{path} must be a non-negative integer")
    if val < 0:
        raise DecodeError(path, "type_mismatch", f"{path} must be a non-negative integer, got {val}")
    return val


def _decode_dimensions(val: Any) -> Dimensions:
    if not isinstance(val, dict):
        raise DecodeError("dimensions", "type_mismatch", "dimensions must be an object")
    height = _decode_uint(_require(val, "height", "dimensions.height"), "dimensions.height")
    width = _decode_uint(_require(val, "width", "dimensions.width"), "dimensions.width")
    return Dimensions(height=height, width=width)


def _algorithm_token(obj: Dict[str, Any]) -> Any:
    present = [k for k in ALGORITHM_FIELDS if obj.get(k) is not None]
    if not present:
        raise DecodeError("algorithm", "missing_field", "algorithm (or alg) is required")
    if len(present) > 1:
        raise DecodeError("algorithm", "duplicate_field", "provide algorithm OR alg, not both")
    return obj[present[0]]


def parse_request_obj(obj: Any) -> MazeRequest:
    if not isinstance(obj, dict):
        raise DecodeError(None, "type_mismatch", "request body must be a JSON object")

    dimensions = _decode_dimensions(_require(obj, "dimensions", "dimensions"))
    algorithm = decode_algorithm(_algorithm_token(obj))

    corner = obj.get("corner")
    direction = obj.get("direction")

    return MazeRequest(
        dimensions=dimensions,
        algorithm=algorithm,
        corner=decode_corner(corner) if corner is not None else None,
        direction=decode_direction(direction) if direction is not None else None,
    )


def parse_request(body: str) -> MazeRequest:
    try:
        obj = json.loads(body)
    except (ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder can follow
        raise DecodeError(None, "invalid_json", f"body is not valid JSON: {e}") from e
    return parse_request_obj(obj)


# -----------------------------
# Generation command
# -----------------------------
@dataclass(frozen=True)
class AldousBroder:
    def to_dict(self) -> Dict[str, Any]:
        return {"name": Algorithm.ALDOUS_BRODER.value}


@dataclass(frozen=True)
class BinaryTree:
    corner: Corner

    def to_dict(self) -> Dict[str, Any]:
        return {"name": Algorithm.BINARY_TREE.value, "corner": self.corner.value}


@dataclass(frozen=True)
class SideWinder:
    direction: Direction

    def to_dict(self) -> Dict[str, Any]:
        return {"name": Algorithm.SIDE_WINDER.value, "direction": self.direction.value}


ResolvedAlgorithm = Union[AldousBroder, BinaryTree, SideWinder]


@dataclass(frozen=True)
class GenerationCommand:
    dimensions: Dimensions
    algorithm: ResolvedAlgorithm
    output_type: OutputType = OutputType.BINARY

    def to_payload(self) -> Dict[str, Any]:
        return {
            "dimensions": self.dimensions.to_dict(),
            "algorithm": self.algorithm.to_dict(),
            "outputType": self.output_type.value,
        }


def derive_algorithm(req: MazeRequest) -> ResolvedAlgorithm:
    if req.algorithm is Algorithm.BINARY_TREE:
        return BinaryTree(corner=req.corner or DEFAULT_CORNER)
    if req.algorithm is Algorithm.SIDE_WINDER:
        return SideWinder(direction=req.direction or DEFAULT_DIRECTION)
    # Aldous-Broder takes no sub-parameter; corner/direction are ignored
    return AldousBroder()


def derive_command(req: MazeRequest) -> GenerationCommand:
    return GenerationCommand(
        dimensions=req.dimensions,
        algorithm=derive_algorithm(req),
        output_type=OutputType.BINARY,
    )
