"""Configuration schema and default resolution.

The on-disk config is validated with pydantic; everything downstream works
with the frozen ``ResolvedConfig`` produced by ``resolve_defaults``.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ExportStyle = Literal["star", "namespace"]
ExtensionConfig = Literal["auto", "none", ".js", ".ts"]
FormatterName = Literal["auto", "biome", "dprint", "prettier", "oxfmt"]

DEFAULT_EXCLUDE: Tuple[str, ...] = ("*.test.*", "*.spec.*", "*.stories.*", "*.d.ts")
DEFAULT_BARREL_FILE = "index.ts"
DEFAULT_MODULE_INCLUDE = "./*"


class ModuleGlobModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    include: str
    style: ExportStyle


class BarrelRuleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dirs: str = Field(validation_alias=AliasChoices("dirs", "dirGlob"))
    modules: Optional[List[Union[str, ModuleGlobModel]]] = None
    default_style: Optional[ExportStyle] = Field(
        default=None, validation_alias=AliasChoices("default_style", "defaultStyle")
    )

    @field_validator("dirs")
    @classmethod
    def _dirs_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("dirs must be a non-empty glob")
        return v


class ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    extensions: Optional[ExtensionConfig] = None
    exclude: Optional[List[str]] = None
    # camelCase spellings are accepted as aliases.
    barrel_file: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("barrel_file", "barrelFile", "aggregatorFileName")
    )
    formatter: Optional[Union[FormatterName, Literal[False]]] = None
    rules: Optional[List[BarrelRuleModel]] = None

    @field_validator("barrel_file")
    @classmethod
    def _plain_filename(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and (not v or "/" in v or "\\" in v):
            raise ValueError("barrel_file must be a plain file name")
        return v


@dataclass(frozen=True)
class ModuleGlob:
    include: str
    style: str


@dataclass(frozen=True)
class ResolvedRule:
    dirs: str
    modules: Tuple[ModuleGlob, ...]
    default_style: str


@dataclass(frozen=True)
class ResolvedConfig:
    extensions: str
    exclude: Tuple[str, ...]
    barrel_file: str
    formatter: Union[str, bool]
    rules: Tuple[ResolvedRule, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def resolve_defaults(config: ConfigModel) -> ResolvedConfig:
    """Fill in defaults and normalize string module patterns."""
    rules: List[ResolvedRule] = []
    for rule in config.rules or []:
        default_style = rule.default_style or "star"
        raw_modules = rule.modules if rule.modules is not None else [DEFAULT_MODULE_INCLUDE]
        modules = tuple(
            ModuleGlob(include=m, style=default_style)
            if isinstance(m, str)
            else ModuleGlob(include=m.include, style=m.style)
            for m in raw_modules
        )
        rules.append(ResolvedRule(dirs=rule.dirs, modules=modules, default_style=default_style))

    return ResolvedConfig(
        extensions=config.extensions or "auto",
        exclude=tuple(config.exclude) if config.exclude is not None else DEFAULT_EXCLUDE,
        barrel_file=config.barrel_file or DEFAULT_BARREL_FILE,
        formatter=config.formatter if config.formatter is not None else "auto",
        rules=tuple(rules),
    )


def build_config(data: Dict[str, Any]) -> ResolvedConfig:
    """Validate a raw mapping and resolve it in one step (tests and API callers)."""
    return resolve_defaults(ConfigModel.model_validate(data))
