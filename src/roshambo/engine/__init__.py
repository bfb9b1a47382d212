"""Protocol engine — outcome resolution, record validation, game operations."""

from roshambo.engine.resolver import Outcome, build_result, resolve
from roshambo.engine.validators import RecordValidator
from roshambo.engine.protocol import GameProtocol

__all__ = ["Outcome", "build_result", "resolve", "RecordValidator", "GameProtocol"]
