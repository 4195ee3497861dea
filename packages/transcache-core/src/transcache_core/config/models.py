import hashlib
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class TransformOptions(BaseModel):
    """Switches resolved once per stage; each one toggles a set of transform plugins."""

    model_config = ConfigDict(frozen=True)

    targets_test_build: bool = False
    targets_module_output: bool = False
    targets_single_pass_output: bool = False
    is_type_checking_pass: bool = False

    def fingerprint(self) -> str:
        """Short stable hash of the option values, used to key cache entries."""
        flags = ",".join(
            f"{name}={int(value)}" for name, value in sorted(self.model_dump().items())
        )
        return hashlib.sha256(flags.encode()).hexdigest()[:12]


class EligibilityConfig(BaseModel):
    root: str = "."
    include: list[str] = Field(default_factory=lambda: ["src/**/*.js", "extensions/**/*.js"])
    always_include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=lambda: ["node_modules/", "third_party/"])
    sources: list[str] = Field(default_factory=lambda: ["**/*.js"])


class TransformConfig(BaseModel):
    plugins: list[str] = Field(
        default_factory=lambda: ["newlines", "defines", "strip-test-only"]
    )
    command: list[str] | None = None
    timeout: float | None = Field(default=None, gt=0)


class CacheConfig(BaseModel):
    key_on_options: bool = True


class OutputConfig(BaseModel):
    out_dir: str = "build/transformed"


class TranscacheConfig(BaseModel):
    eligibility: EligibilityConfig = Field(default_factory=EligibilityConfig)
    transform: TransformConfig = Field(default_factory=TransformConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
