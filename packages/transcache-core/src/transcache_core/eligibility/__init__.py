"""Eligibility set: which paths the transform applies to."""

from transcache_core.eligibility.resolver import EligibilityError, EligibilitySet, match_files

__all__ = ["EligibilityError", "EligibilitySet", "match_files"]
