"""Wrapper generation for annotated declarations."""
from statewrap.expand.directive import DirectiveArgs, Visibility, parse_directive
from statewrap.expand.dispatch import expand_item
from statewrap.expand.hardcoded import resolve_generics
from statewrap.expand.options import ExpandOptions
from statewrap.expand.substitute import SENTINEL, SubstitutionResult, TypeSubstitutor, substitute

__all__ = [
    "DirectiveArgs", "Visibility", "parse_directive", "expand_item", "resolve_generics",
    "ExpandOptions", "SENTINEL", "SubstitutionResult", "TypeSubstitutor", "substitute",
]
