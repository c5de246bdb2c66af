import keyword
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from vfsembed.errors import ConfigError


class GenerateConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: Path = Field(
        ...,
        description="Directory whose tree is embedded into the generated module",
    )

    output: Path = Field(
        default=Path("assets_vfsdata.py"),
        description="Path of the generated Python module",
    )

    package: Optional[str] = Field(
        default=None,
        description="Dotted name the generated module is imported as",
        examples=["myapp.assets_vfsdata"],
    )
    variable_name: str = Field(
        default="assets",
        description="Name of the module-level filesystem value",
    )
    variable_comment: str = Field(
        default="",
        description="Comment placed above the filesystem value",
    )
    tags: str = Field(
        default="",
        description="Build tags written to the generated header, if any",
    )

    @field_validator("input")
    @classmethod
    def validate_input(cls, value: Path) -> Path:
        if not value.exists():
            raise ConfigError(f"Input directory does not exist: {value}")
        if not value.is_dir():
            raise ConfigError(f"Input is not a directory: {value}")
        return value

    @field_validator("output")
    @classmethod
    def validate_output(cls, value: Path) -> Path:
        if not value.name:
            raise ConfigError("Output path cannot be empty")
        if value.suffix != ".py":
            raise ConfigError(f"Output must be a .py file: {value}")
        if value.exists() and value.is_dir():
            raise ConfigError(f"Output path is a directory: {value}")
        return value

    @field_validator("variable_name")
    @classmethod
    def validate_variable_name(cls, value: str) -> str:
        if not _is_identifier(value):
            raise ConfigError(
                f"Variable name must be a Python identifier: {value!r}"
            )
        return value

    @field_validator("tags", "variable_comment")
    @classmethod
    def validate_single_line(cls, value: str) -> str:
        if "\n" in value or "\r" in value:
            raise ConfigError("Tags and comments must fit on one line")
        return value.strip()

    @model_validator(mode="after")
    def default_package(self) -> "GenerateConfig":
        package = self.package
        if package is None:
            package = self.output.stem

        if not package or not all(_is_identifier(part) for part in package.split(".")):
            raise ConfigError(
                f"Package must be a dotted Python name: {package!r}"
            )

        object.__setattr__(self, "package", package)
        return self


def _is_identifier(value: str) -> bool:
    return value.isidentifier() and not keyword.iskeyword(value)
