from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ROOT_KEY = "^"


def _fold_keys(data: Any, names: Dict[str, str]) -> Any:
    """Match incoming JSON field names case-insensitively against ``names``."""
    if not isinstance(data, dict):
        return data
    folded: Dict[str, Any] = {}
    for key, value in data.items():
        field_name = names.get(key.lower()) if isinstance(key, str) else None
        folded[field_name or key] = value
    return folded


class Action(BaseModel):
    """Rewriting rule applied when the traversal meets a given JSON key."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    skip: bool = False
    map_value: Optional[Dict[str, float]] = None
    make_label: str = ""
    label_key: str = ""

    @model_validator(mode="before")
    @classmethod
    def fold_field_names(cls, data: Any) -> Any:
        return _fold_keys(
            data,
            {
                "skip": "skip",
                "mapvalue": "map_value",
                "makelabel": "make_label",
                "labelkey": "label_key",
            },
        )

    @model_validator(mode="after")
    def check_label_key(self) -> "Action":
        if self.label_key and not self.make_label:
            raise ValueError("LabelKey requires MakeLabel")
        return self


EMPTY_ACTION = Action()


class Source(BaseModel):
    """One upstream JSON endpoint and the rules used to project it."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str
    namespace: str = ""
    subsystem: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    error_key: str = ""
    keys: Dict[str, Action] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def fold_field_names(cls, data: Any) -> Any:
        return _fold_keys(
            data,
            {
                "url": "url",
                "namespace": "namespace",
                "subsystem": "subsystem",
                "labels": "labels",
                "errorkey": "error_key",
                "keys": "keys",
            },
        )

    def root_action(self) -> Action:
        return self.keys.get(ROOT_KEY, EMPTY_ACTION)

    def action_for(self, key: str) -> Action:
        return self.keys.get(key, EMPTY_ACTION)
