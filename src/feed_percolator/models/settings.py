"""
Pipeline settings schemas.
"""

import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

RULE_TYPES = ["keyword", "regex", "tag", "language"]
RULE_ACTIONS = ["include", "exclude"]


class FilterRule(BaseModel):
    """Definition of a rule filter.

    A rule returns its ``action`` for items it matches and abstains otherwise.
    """

    name: str = Field(..., max_length=200, description="Rule name")
    rule_type: str = Field(..., description="Rule type: keyword, regex, tag, language")
    pattern: str = Field(..., min_length=1, description="Pattern to match")
    action: str = Field(..., description="Action on match: include or exclude")
    enabled: bool = Field(True, description="Whether the rule is applied")

    @field_validator("rule_type")
    @classmethod
    def validate_rule_type(cls, v: str) -> str:
        """Validate rule type."""
        v = v.lower().strip()
        if v not in RULE_TYPES:
            raise ValueError(f"Invalid rule_type: {v!r}. Must be one of {RULE_TYPES}")
        return v

    @field_validator("action")
    @classmethod
    def validate_action(cls, v: str) -> str:
        """Validate rule action."""
        v = v.lower().strip()
        if v not in RULE_ACTIONS:
            raise ValueError(f"Invalid action: {v!r}. Must be one of {RULE_ACTIONS}")
        return v

    @field_validator("pattern")
    @classmethod
    def validate_regex(cls, v: str, info) -> str:
        """Reject regex patterns that do not compile."""
        if info.data.get("rule_type") == "regex":
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid regex pattern: {e}") from e
        return v


class PipelineSettings(BaseModel):
    """Run configuration for one pipeline execution.

    ``inputs`` absent means no items are produced; ``output`` absent means
    nothing is written. ``output`` is a file path or a writable stream.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    inputs: Optional[list[str]] = Field(None, description="Source feed URLs")
    output: Optional[Any] = Field(None, description="Output path or writable stream")
    title: str = Field("", description="Output feed title")
    description: str = Field("", description="Output feed description")
    filters: list[FilterRule] = Field(default_factory=list, description="Rule filters")

    @field_validator("inputs")
    @classmethod
    def validate_inputs(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Validate source URLs."""
        if v is None:
            return None

        urls = []
        for url in v:
            url = url.strip()
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"Invalid source URL: {url!r}")
            urls.append(url)
        return urls

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: Any) -> Any:
        """Accept paths, path strings and objects with a ``write`` method."""
        if v is None or isinstance(v, Path):
            return v
        if isinstance(v, str):
            return Path(v)
        if hasattr(v, "write"):
            return v
        raise ValueError(f"Output must be a path or a writable stream, got {type(v).__name__}")
