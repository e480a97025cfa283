# src/user_errors/translation.py
"""
Message translation for user-errors.

A translator takes a message key plus a mapping of `%name%` placeholders and returns
the text to show to the user. The default implementation is a flat message catalog
(key -> template) usually loaded from a JSON file:

    {
        "order.out_of_stock": "Only %available% items of %product% left.",
        "invoice": {"locked": "Invoice %number% is already booked."}
    }

Nested objects are flattened into dotted keys ("invoice.locked"). A key that is not
in the catalog is used as the template itself, so untranslated keys still get their
placeholders replaced.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable

from user_errors.exceptions.base import CatalogError

logger = logging.getLogger(__name__)


@runtime_checkable
class Translator(Protocol):
    def trans(self, key: str, parameters: Mapping[str, str]) -> str:
        ...


def replace_placeholders(template: str, parameters: Mapping[str, str]) -> str:
    """
    Replace every placeholder of `parameters` in `template` in a single pass.

    Longer placeholders win over shorter ones sharing a prefix and replaced text is
    never scanned again.
    """
    if not parameters:
        return template

    placeholders = sorted(parameters, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(p) for p in placeholders if p))
    if not pattern.pattern:
        return template
    return pattern.sub(lambda m: str(parameters[m.group(0)]), template)


def _flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{full_key}."))
        else:
            flat[full_key] = str(value)
    return flat


class CatalogTranslator:
    """Translator backed by an in-memory key -> template catalog."""

    def __init__(self, messages: Mapping[str, str] | None = None):
        self.messages: dict[str, str] = dict(messages) if messages else {}

    @classmethod
    def from_file(cls, path: str | Path) -> "CatalogTranslator":
        """
        Load a JSON catalog. Raises CatalogError when the file is missing or invalid.
        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            logger.error("translation.catalog_unreadable", extra={"path": str(path)})
            raise CatalogError(f"Cannot read message catalog: {path}") from exc
        except json.JSONDecodeError as exc:
            logger.error("translation.catalog_invalid_json", extra={"path": str(path), "line": exc.lineno})
            raise CatalogError(f"Message catalog is not valid JSON: {path}") from exc

        if not isinstance(data, dict):
            raise CatalogError(f"Message catalog must be a JSON object: {path}")

        messages = _flatten(data)
        logger.info("translation.catalog_loaded", extra={"path": str(path), "messages": len(messages)})
        return cls(messages)

    def trans(self, key: str, parameters: Mapping[str, str]) -> str:
        template = self.messages.get(key)
        if template is None:
            logger.debug("translation.missing_key", extra={"key": key})
            template = key
        return replace_placeholders(template, parameters)


__all__ = ["Translator", "CatalogTranslator", "replace_placeholders"]
