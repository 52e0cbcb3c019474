"""Load the Trello board export and the map file."""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from .exceptions import InputFormatError, MigrationError
from .schemas import Board, MappingConfig

logger: logging.Logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30


def is_url(source: str) -> bool:
    return urlparse(source).scheme in {"http", "https"}


def board_export_url(url: str) -> str:
    """Turn a board URL (https://trello.com/b/<id>/<slug>) into its JSON export URL."""
    parsed = urlparse(url)
    if parsed.hostname == "trello.com" and not parsed.path.endswith(".json"):
        return parsed._replace(path=parsed.path.rstrip("/") + ".json").geturl()
    return url


def fetch_board_json(url: str, session: requests.Session | None = None) -> Any:
    export_url = board_export_url(url)
    http = session or requests.Session()
    try:
        response = http.get(export_url, timeout=REQUEST_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        msg = f"Failed to fetch Trello board from {export_url}: {e}"
        raise MigrationError(msg) from e
    if not response.ok:
        msg = f"HTTP error fetching Trello board from {export_url} [{response.status_code}]: {response.text[:200]}"
        raise MigrationError(msg)
    try:
        return response.json()
    except ValueError as e:
        msg = f"Trello board at {export_url} is not JSON"
        raise InputFormatError(msg) from e


def read_board_json(path: Path) -> Any:
    if not path.exists():
        msg = f"The path {path} does not exist"
        raise MigrationError(msg)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"Failed to parse export file ({path}): {e}"
        raise InputFormatError(msg) from e


def parse_board(data: Any, source: str) -> Board:
    try:
        return Board.model_validate(data)
    except ValidationError as e:
        msg = f"Failed to parse export file ({source}):\n{e}"
        raise InputFormatError(msg) from e


def load_board(source: str, session: requests.Session | None = None) -> Board:
    """Load a board from a Trello URL or a downloaded export file."""
    data = fetch_board_json(source, session) if is_url(source) else read_board_json(Path(source))
    board = parse_board(data, source)
    logger.info(f"Loaded Trello board {board.name}: {len(board.cards)} cards in {len(board.lists)} lists")
    return board


def load_mapping(path: str | Path) -> MappingConfig:
    """Load and validate a map.toml file."""
    path = Path(path)
    if path.suffix != ".toml":
        msg = f"The map file ({path}) must be a TOML file"
        raise MigrationError(msg)
    if not path.exists():
        msg = f"The path {path} does not exist"
        raise MigrationError(msg)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse map file ({path}): {e}"
        raise InputFormatError(msg) from e

    try:
        return MappingConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Failed to parse map file ({path}):\n{e}"
        raise InputFormatError(msg) from e
