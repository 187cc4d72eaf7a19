"""Projection of a decoded JSON document onto gauge samples.

The walk follows the source's action table: every mapping key extends the key
path (with surrounding underscores trimmed), every non-zero number becomes a
sample named after that path, and ``MakeLabel`` actions turn the keys of a
mapping into a label instead of a path component.
"""

from __future__ import annotations

import logging
from typing import Any, Tuple

from ..models import EMPTY_ACTION, Action, Source
from .base import SampleSink, emit_gauge

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _where(keys: Tuple[str, ...]) -> str:
    return ".".join(keys) or "^"


def process_value(
    source: Source,
    value: Any,
    action: Action,
    sink: SampleSink,
    keys: Tuple[str, ...] = (),
    label_names: Tuple[str, ...] = (),
    label_values: Tuple[str, ...] = (),
) -> None:
    if action.skip:
        return

    if action.map_value is not None:
        if not isinstance(value, str):
            logger.warning(
                "%s: MapValue expects a string at %s, got %s",
                source.url,
                _where(keys),
                type(value).__name__,
            )
            return
        # Unmapped strings become zero and are then suppressed below.
        value = action.map_value.get(value, 0.0)

    if action.make_label:
        if not isinstance(value, dict):
            logger.warning(
                "%s: MakeLabel expects an object at %s, got %s",
                source.url,
                _where(keys),
                type(value).__name__,
            )
            return
        if action.make_label in label_names:
            logger.warning(
                "%s: label %r is already in scope at %s",
                source.url,
                action.make_label,
                _where(keys),
            )
            return
        for child_key, child in value.items():
            label_value = child_key
            if action.label_key:
                inner = child.get(action.label_key) if isinstance(child, dict) else None
                if not isinstance(inner, str):
                    logger.warning(
                        "%s: no string %r under %s.%s",
                        source.url,
                        action.label_key,
                        _where(keys),
                        child_key,
                    )
                    continue
                label_value = inner
            process_value(
                source,
                child,
                EMPTY_ACTION,
                sink,
                keys,
                label_names + (action.make_label,),
                label_values + (label_value,),
            )
        return

    if isinstance(value, dict):
        for child_key, child in value.items():
            process_value(
                source,
                child,
                source.action_for(child_key),
                sink,
                keys + (child_key.strip("_"),),
                label_names,
                label_values,
            )
    elif _is_number(value):
        try:
            number = float(value)
        except OverflowError:
            logger.warning("%s: number at %s does not fit a float", source.url, _where(keys))
            return
        if number == 0:
            return
        emit_gauge(
            sink,
            source.namespace,
            source.subsystem,
            "_".join(keys),
            dict(zip(label_names, label_values)),
            number,
            ".".join(keys),
        )
