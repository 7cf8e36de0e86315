"""Variable substitution applied to raw strings before conversion.

The builder only needs a ``str -> str`` callable. :class:`PropertiesSubstitutor`
is the default one and understands::

    ${name}            property lookup
    ${name:-fallback}  property lookup with a fallback
    ${env:NAME}        environment lookup
    $${name}           escape, yields the literal ``${name}``

Unknown references are left in place so that the mistake stays visible in
the constructed value.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping

Substitutor = Callable[[str], str]

_REFERENCE_RE = re.compile(r"\$(\$?)\{([^{}]*)\}")
_ENV_PREFIX = "env:"
_FALLBACK_SEPARATOR = ":-"


def identity(raw: str) -> str:
    return raw


class PropertiesSubstitutor:
    def __init__(
        self,
        properties: Mapping[str, str] | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        max_depth: int = 8,
    ) -> None:
        self._properties = dict(properties or {})
        self._environ = environ
        self._max_depth = max_depth

    @property
    def properties(self) -> Mapping[str, str]:
        return self._properties

    def __call__(self, raw: str) -> str:
        return self._substitute(raw, 0)

    def _substitute(self, raw: str, depth: int) -> str:
        if "${" not in raw:
            return raw

        def replace(match: re.Match[str]) -> str:
            if match.group(1):
                return "${" + match.group(2) + "}"
            resolved = self._lookup(match.group(2))
            if resolved is None:
                return match.group(0)
            if depth + 1 >= self._max_depth:
                return resolved
            return self._substitute(resolved, depth + 1)

        return _REFERENCE_RE.sub(replace, raw)

    def _lookup(self, reference: str) -> str | None:
        key, sep, fallback = reference.partition(_FALLBACK_SEPARATOR)
        key = key.strip()
        if key.startswith(_ENV_PREFIX):
            environ = os.environ if self._environ is None else self._environ
            found = environ.get(key[len(_ENV_PREFIX):])
        else:
            found = self._properties.get(key)
        if found is None and sep:
            return fallback
        return found
