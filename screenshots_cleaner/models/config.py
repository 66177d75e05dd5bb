"""Plugin configuration: options mapping, environment and command line."""

from __future__ import annotations

import json
import sys
from typing import Any, Mapping, Optional, Sequence, Union

import click
from click.core import ParameterSource
from pydantic import Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    EnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

ENV_PREFIX = "screenshots_cleaner_"
CLI_PREFIX = "--screenshots-cleaner-"

OPTION_ALIASES = {"screenshotPaths": "screenshot_paths"}


class JsonEnvSettingsSource(EnvSettingsSource):
    """Environment source whose every value is a JSON document.

    ``screenshots_cleaner_enabled=false`` is the boolean ``false``, and
    ``screenshots_cleaner_screenshot_paths='["/a/**"]'`` is a list.
    """

    def prepare_field_value(
        self, field_name: str, field: FieldInfo, value: Any, value_is_complex: bool
    ) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Invalid JSON in environment variable {self.env_prefix}{field_name}: {value!r}"
            ) from e


class PluginConfig(BaseSettings):
    """Screenshots cleaner options.

    Constructed directly, keyword arguments outrank ``screenshots_cleaner_*``
    environment variables. Use ``parse_config`` for the layered lookup.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(True, description="Activate the plugin.")
    screenshot_paths: Optional[Union[str, list[str]]] = Field(
        None,
        description="Extra glob patterns searched for reference screenshots.",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, JsonEnvSettingsSource(settings_cls)

    @field_validator("enabled", mode="before")
    @classmethod
    def check_enabled(cls, v: Any) -> bool:
        if not isinstance(v, bool):
            raise ValueError(f'"enabled" option must be boolean, but got {type(v).__name__}')
        return v

    @field_validator("screenshot_paths", mode="before")
    @classmethod
    def check_screenshot_paths(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, list) and all(isinstance(item, str) for item in v):
            return v
        raise ValueError(
            '"screenshot_paths" option must be a string or an array of strings '
            f"but got {json.dumps(v, default=repr)}"
        )

    @property
    def patterns(self) -> list[str]:
        """Statically configured search patterns, empty entries dropped."""
        if self.screenshot_paths is None:
            return []
        paths = [self.screenshot_paths] if isinstance(self.screenshot_paths, str) else self.screenshot_paths
        return [p for p in paths if p]


class JsonParamType(click.ParamType):
    name = "json"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> Any:
        if not isinstance(value, str):
            return value
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            self.fail(f"{value!r} is not valid JSON", param, ctx)


def _build_option_parser() -> click.Command:
    """A click command that only knows the plugin's own flags.

    Everything else on the host's command line is passed over.
    """
    params = [
        click.Option([CLI_PREFIX + name.replace("_", "-"), name], type=JsonParamType())
        for name in PluginConfig.model_fields
    ]
    return click.Command(
        "screenshots-cleaner",
        params=params,
        add_help_option=False,
        context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
    )


def _read_argv(argv: Sequence[str]) -> dict[str, Any]:
    try:
        ctx = _build_option_parser().make_context("screenshots-cleaner", list(argv))
    except click.UsageError as e:
        raise ValueError(f"Invalid command line: {e.format_message()}") from e
    return {
        name: value
        for name, value in ctx.params.items()
        if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE
    }


def parse_config(
    options: Mapping[str, Any] | None = None,
    argv: Sequence[str] | None = None,
) -> PluginConfig:
    """Build the plugin config from options, then environment, then command line.

    Later sources override earlier ones. Raises ``pydantic.ValidationError``
    when an option has the wrong type and ``ValueError`` when an environment
    variable or flag does not hold JSON.
    """
    argv = sys.argv[1:] if argv is None else argv

    values: dict[str, Any] = {}
    for key, value in (options or {}).items():
        key = OPTION_ALIASES.get(key, key)
        if key in PluginConfig.model_fields:
            values[key] = value
    # options sit below the environment, so merge it in before init kwargs win
    values.update(JsonEnvSettingsSource(PluginConfig)())
    values.update(_read_argv(argv))

    return PluginConfig(**values)
