"""Bundled text plugins."""

import re

from transcache_core.config.models import TransformOptions

from .pipeline import TextPlugin

_NEWLINE_RE = re.compile(r"\r\n?")

# Build-time constants and the option that sets each one
_DEFINES = {
    "__TEST_BUILD__": "targets_test_build",
    "__MODULE_OUTPUT__": "targets_module_output",
    "__SINGLE_PASS__": "targets_single_pass_output",
    "__TYPE_CHECK__": "is_type_checking_pass",
}
_DEFINE_RE = re.compile(r"\b(" + "|".join(_DEFINES) + r")\b")

_TEST_ONLY_RE = re.compile(
    r"^[ \t]*// @test-only-start[^\n]*\n.*?^[ \t]*// @test-only-end[^\n]*(?:\n|\Z)",
    re.MULTILINE | re.DOTALL,
)


class NewlineNormalizer(TextPlugin):
    name = "newlines"

    def apply(self, text: str, options: TransformOptions) -> str:
        return _NEWLINE_RE.sub("\n", text)


class DefineInliner(TextPlugin):
    """Replaces build-time constants with ``true``/``false`` literals.

    Skipped on type-checking passes so the checker still sees the symbols.
    """

    name = "defines"

    def enabled(self, options: TransformOptions) -> bool:
        return not options.is_type_checking_pass

    def apply(self, text: str, options: TransformOptions) -> str:
        def _literal(m: re.Match) -> str:
            return "true" if getattr(options, _DEFINES[m.group(1)]) else "false"

        return _DEFINE_RE.sub(_literal, text)


class ForTestingStripper(TextPlugin):
    """Drops ``// @test-only-start`` ... ``// @test-only-end`` regions outside test builds."""

    name = "strip-test-only"

    def enabled(self, options: TransformOptions) -> bool:
        return not options.targets_test_build

    def apply(self, text: str, options: TransformOptions) -> str:
        return _TEST_ONLY_RE.sub("", text)


BUILTIN_PLUGINS: dict[str, type[TextPlugin]] = {
    cls.name: cls for cls in (NewlineNormalizer, DefineInliner, ForTestingStripper)
}
