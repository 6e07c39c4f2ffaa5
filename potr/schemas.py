# potr/schemas.py
from __future__ import annotations
import re
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils.languages import is_supported_language, normalize_language_code

Engine = Literal["clear", "clone", "openai", "azure-openai", "deepl"]

ENGINES = ("clear", "clone", "openai", "azure-openai", "deepl")


class FilterSettings(BaseModel):
    """Which messages a run may touch. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    # Dry run: load and write back untouched
    skip_translation: bool = False

    skip_translated: bool = True
    skip_code_blocks: bool = True
    skip_formula_blocks: bool = True
    skip_markdown_images: bool = True
    skip_text: bool = False

    source_regex: Optional[re.Pattern] = None
    include_regex: Optional[re.Pattern] = None
    exclude_regex: Optional[re.Pattern] = None

    # 0 = unlimited
    message_limit: int = Field(default=0, ge=0)

    @field_validator("source_regex", "include_regex", "exclude_regex", mode="before")
    @classmethod
    def _compile(cls, v: Any) -> Any:
        if v is None or isinstance(v, re.Pattern):
            return v
        if isinstance(v, str):
            if not v:
                return None
            try:
                return re.compile(v)
            except re.error as e:
                raise ValueError(f"invalid regular expression {v!r}: {e}") from e
        return v


class TranslatorSettings(BaseModel):
    engine: Engine = "openai"
    target_lang: str = "en"

    api_key: str = ""
    api_base: Optional[str] = None
    api_version: Optional[str] = None
    api_deployment_id: Optional[str] = None
    model: Optional[str] = None

    timeout_seconds: float = Field(default=120.0, gt=0)

    @field_validator("engine", mode="before")
    @classmethod
    def _normalize_engine(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower().replace("_", "-")
        return v

    @field_validator("target_lang")
    @classmethod
    def _check_lang(cls, v: str) -> str:
        code = normalize_language_code(v)
        if not is_supported_language(code):
            raise ValueError(f"unknown ISO-639-1 language code {v!r}")
        return code

    def public_copy(self) -> Dict[str, Any]:
        """Settings as a dict with the API key redacted, for logs."""
        data = self.model_dump()
        if data.get("api_key"):
            data["api_key"] = "******"
        return data


class RunSettings(BaseModel):
    po_file_path: str
    output_file_path: Optional[str] = None

    filters: FilterSettings = Field(default_factory=FilterSettings)
    translator: TranslatorSettings = Field(default_factory=TranslatorSettings)

    @model_validator(mode="after")
    def _default_output(self) -> "RunSettings":
        if not self.output_file_path:
            self.output_file_path = self.po_file_path
        return self
