import re
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_validator


def _check_regex(value: str) -> str:
    try:
        re.compile(value)
    except re.error as e:
        raise ValueError(f"invalid regular expression {value!r}: {e}") from e
    return value


def _check_replacement(pattern: str, replacement: str) -> None:
    # Group references are only resolved against the pattern at sub() time
    try:
        re.compile(pattern).sub(replacement, "")
    except re.error as e:
        raise ValueError(f"invalid replacement {replacement!r} for {pattern!r}: {e}") from e


class RuleCategory(str, Enum):
    DANGEROUS_OP = "dangerous_op"
    SECRET = "secret"
    PII = "pii"


class PolicyRule(BaseModel):
    """One regex rule. replacement=None blocks, anything else redacts in place."""

    id: str
    pattern: str
    category: RuleCategory
    replacement: str | None = None

    _compiled: re.Pattern[str] = PrivateAttr()

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        return _check_regex(value)

    @model_validator(mode="after")
    def _replacement_fits_category(self) -> "PolicyRule":
        if self.category == RuleCategory.DANGEROUS_OP and self.replacement is not None:
            raise ValueError(f"dangerous-operation rule '{self.id}' cannot carry a replacement")
        if self.category == RuleCategory.PII and self.replacement is None:
            raise ValueError(f"PII rule '{self.id}' needs a replacement")
        if self.replacement is not None:
            _check_replacement(self.pattern, self.replacement)
        return self

    def model_post_init(self, __context: Any) -> None:
        self._compiled = re.compile(self.pattern)

    @property
    def blocks(self) -> bool:
        return self.replacement is None

    def search(self, text: str) -> bool:
        return self._compiled.search(text) is not None

    def sub(self, text: str) -> str:
        if self.replacement is None:
            return text
        return self._compiled.sub(self.replacement, text)


# ---------------------------------------------------------------------------
# Workspace configuration (.direct/config.yml)
# ---------------------------------------------------------------------------


class PiiPatternConfig(BaseModel):
    pattern: str
    replacement: str

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        return _check_regex(value)

    @model_validator(mode="after")
    def _replacement_applies(self) -> "PiiPatternConfig":
        _check_replacement(self.pattern, self.replacement)
        return self


class SecretPatternConfig(BaseModel):
    pattern: str
    replacement: str

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        return _check_regex(value)

    @model_validator(mode="after")
    def _replacement_applies(self) -> "SecretPatternConfig":
        _check_replacement(self.pattern, self.replacement)
        return self


class DangerousPatternConfig(BaseModel):
    id: str
    pattern: str

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        return _check_regex(value)


class AuditConfig(BaseModel):
    log_full_commands: bool = True  # store cmd alongside cmd_sanitized
    default_view: Literal["sanitized", "full"] = "sanitized"
    pii_patterns: list[PiiPatternConfig] = Field(default_factory=list)

    @field_validator("pii_patterns", mode="before")
    @classmethod
    def _empty_list_for_none(cls, value: Any) -> Any:
        # A YAML key whose entries are all commented out parses as None
        return [] if value is None else value


class GuardConfig(BaseModel):
    audit: AuditConfig = Field(default_factory=AuditConfig)
    allowed_env_vars: list[str] = Field(default_factory=list)
    blocked_paths: list[str] = Field(default_factory=list)
    dangerous_patterns: list[DangerousPatternConfig] = Field(default_factory=list)
    secret_patterns: list[SecretPatternConfig] = Field(default_factory=list)

    @field_validator(
        "allowed_env_vars",
        "blocked_paths",
        "dangerous_patterns",
        "secret_patterns",
        mode="before",
    )
    @classmethod
    def _empty_list_for_none(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("audit", mode="before")
    @classmethod
    def _default_audit_for_none(cls, value: Any) -> Any:
        return {} if value is None else value


# ---------------------------------------------------------------------------
# Verdicts
# ---------------------------------------------------------------------------


class PathVerdict(BaseModel):
    ok: bool
    raw: str
    resolved: str = ""  # empty when resolution failed or was never attempted
    reason: str


class CommandVerdict(BaseModel):
    dangerous: bool
    rule_id: str | None = None
