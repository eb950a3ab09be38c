"""Pydantic-based tool parameter schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from ..errors import ToolArgumentsError


class PydanticSchema:
    """Input schema backed by a Pydantic model."""

    def __init__(self, model: type[BaseModel]) -> None:
        self._model = model

    @property
    def model(self) -> type[BaseModel]:
        return self._model

    def parse(self, tool_name: str, raw: str | bytes | dict[str, Any]) -> BaseModel:
        try:
            if isinstance(raw, (str, bytes)):
                return self._model.model_validate_json(raw)
            return self._model.model_validate(raw)
        except ValidationError as e:
            raise ToolArgumentsError(tool_name, e) from e

    def to_json_schema(self) -> dict[str, Any]:
        return self._model.model_json_schema()
