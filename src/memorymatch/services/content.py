from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from memorymatch.engine.deck import SymbolCatalog
from memorymatch.engine.difficulty import DifficultyPolicy
from memorymatch.engine.types import ConfigurationError, Difficulty, DifficultyParams, Symbol


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _parse_color(raw: object) -> tuple[int, int, int]:
    if not isinstance(raw, list) or len(raw) != 3 or not all(isinstance(c, int) for c in raw):
        raise ContentError("color must be a list of three ints")
    return (raw[0], raw[1], raw[2])


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_validated(self, name: str) -> dict[str, object]:
        path = self._data_dir / f"{name}.json"
        raw = _load_json(path)
        schema = _load_json(self._schema_dir / f"{name}.schema.json")
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError(f"{name}.json must be an object")
        return raw

    def load_difficulties(self) -> DifficultyPolicy:
        raw = self._load_validated("difficulties")
        levels = raw.get("difficulties")
        if not isinstance(levels, dict):
            raise ContentError("difficulties.json.difficulties must be an object")

        table: dict[Difficulty, DifficultyParams] = {}
        for name, item in levels.items():
            if not isinstance(item, dict):
                continue
            table[name] = DifficultyParams(  # type: ignore[index]
                pair_count=_require_int(item, "pair_count"),
                grid_columns=_require_int(item, "grid_columns"),
                mismatch_delay_ms=_require_int(item, "mismatch_delay_ms"),
                time_budget_seconds=_require_int(item, "time_budget_seconds"),
            )
        try:
            return DifficultyPolicy(table=table)
        except ConfigurationError as e:
            raise ContentError(f"difficulties.json: {e}") from e

    def load_symbols(self) -> SymbolCatalog:
        raw = self._load_validated("symbols")
        items = raw.get("symbols")
        if not isinstance(items, list):
            raise ContentError("symbols.json.symbols must be a list")
        symbols: list[Symbol] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            if not isinstance(name, str):
                raise ContentError("Expected string for name")
            symbols.append(Symbol(name=name, color=_parse_color(item.get("color"))))
        try:
            return SymbolCatalog(symbols=tuple(symbols))
        except ConfigurationError as e:
            raise ContentError(f"symbols.json: {e}") from e

    def validate_all(self) -> None:
        # Load is validation (schema + parse), plus the cross-file size check.
        policy = self.load_difficulties()
        catalog = self.load_symbols()
        if policy.max_pair_count() > len(catalog):
            raise ContentError(
                f"Largest difficulty needs {policy.max_pair_count()} pairs, "
                f"but symbols.json only has {len(catalog)} symbols."
            )
