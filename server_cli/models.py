"""Configuration models: categories of servers and their script definitions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


IMPLICIT_CATEGORY = "default"

_SERVER_ONLY_KEYS = {"script", "script_path", "script_args", "env_vars"}
_SERVER_SPEC_KEYS = _SERVER_ONLY_KEYS | {"description"}


def _scalar_text(value: Any) -> Any:
    # YAML turns `PORT: 22` into an int and `DEBUG: true` into a bool
    if isinstance(value, (dict, list)):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ServerSpec(BaseModel):
    """Script definition for one target.

    ``script`` is an inline shell body. ``script_path`` + ``script_args`` is the
    older form and is only used when ``script`` is empty.
    """

    script: str = ""
    script_path: str = ""
    script_args: list[str] = Field(default_factory=list)
    env_vars: dict[str, str] = Field(default_factory=dict)
    description: str = ""

    @field_validator("env_vars", mode="before")
    @classmethod
    def _stringify_env_values(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): _scalar_text(v) for k, v in value.items()}
        return value

    @field_validator("script_args", mode="before")
    @classmethod
    def _stringify_args(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_scalar_text(item) for item in value]
        return value

    @property
    def has_inline_script(self) -> bool:
        return bool(self.script)

    @property
    def has_executable(self) -> bool:
        return bool(self.script_path)


class Category(BaseModel):
    description: str = ""
    servers: dict[str, ServerSpec] = Field(default_factory=dict)


class Configuration(BaseModel):
    categories: dict[str, Category] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, data: Any) -> Configuration:
        """Build a configuration from a parsed JSON/YAML document.

        Flat documents (servers without a category layer) are wrapped in a
        single implicit category so callers only ever see the nested form.
        """
        if not isinstance(data, dict):
            raise ValueError("configuration root must be a mapping")

        if isinstance(data.get("categories"), dict):
            return cls.model_validate({"categories": data["categories"]})

        if any(_looks_like_category(value) for value in data.values()):
            # one category with servers makes the whole document nested
            mixed = sorted(name for name, value in data.items() if not _may_be_category(value))
            if mixed:
                raise ValueError(
                    f"entries {', '.join(mixed)} look like servers in a document of categories"
                )
            return cls.model_validate({"categories": data})

        if isinstance(data.get("servers"), dict) and not _looks_like_server(data["servers"]):
            return cls._flat(data["servers"])

        return cls._flat(data)

    @classmethod
    def _flat(cls, servers: dict[str, Any]) -> Configuration:
        return cls.model_validate(
            {"categories": {IMPLICIT_CATEGORY: {"servers": servers}}}
        )

    def category_names(self) -> tuple[str, ...]:
        return tuple(sorted(self.categories))

    def server_names(self, category: str) -> tuple[str, ...]:
        found = self.categories.get(category)
        if found is None:
            return ()
        return tuple(sorted(found.servers))

    def server(self, category: str, name: str) -> ServerSpec | None:
        found = self.categories.get(category)
        if found is None:
            return None
        return found.servers.get(name)

    def server_count(self) -> int:
        return sum(len(category.servers) for category in self.categories.values())


def _looks_like_server(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and set(value) <= _SERVER_SPEC_KEYS


def _looks_like_category(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("servers"), dict)


def _may_be_category(value: Any) -> bool:
    return isinstance(value, dict) and not (set(value) & _SERVER_ONLY_KEYS)
