"""Semantic versions and npm version ranges on top of ``packaging``.

npm tooling speaks semver ("1.2.3-alpha.1", "^18.2.0", ">=14 <17 || 18.x")
while ``packaging`` speaks PEP 440. Versions are normalized the same way the
upgrade checker normalizes release tags, and npm ranges are translated into
a union of ``SpecifierSet`` objects.
"""

import re

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

_NUM = r"(?:0|[1-9]\d*)"
_IDENT = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

_SEMVER_RE = re.compile(
    rf"""
    ^\s*[v=]*\s*
    (?P<base>{_NUM}\.{_NUM}\.{_NUM})
    (?:-(?P<pre>{_IDENT}))?
    (?:\+{_IDENT})?
    \s*$
    """,
    re.VERBOSE,
)

_COERCE_RE = re.compile(r"(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?")

_PRERELEASE_MAP = {
    "alpha": "a",
    "beta": "b",
    "rc": "rc",
}

_PRERELEASE_RE = re.compile(
    r"^(?P<label>alpha|beta|rc)(?:[.-]?(?P<num>\d+))?$"
)

_PARTIAL_RE = re.compile(
    rf"""
    ^[v=]*
    (?P<major>\d+|[xX*])
    (?:\.(?P<minor>\d+|[xX*])
        (?:\.(?P<patch>\d+|[xX*])
            (?:-(?P<pre>{_IDENT}))?
        )?
    )?
    (?:\+{_IDENT})?$
    """,
    re.VERBOSE,
)

_OPERATOR_RE = re.compile(r"^(?P<op><=|>=|<|>|=)?(?P<partial>.*)$")
_HYPHEN_RE = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")
_OPERATOR_SPACING_RE = re.compile(r"(<=|>=|<|>|=|~>?|\^)\s+")

_WILDCARDS = frozenset({"x", "X", "*"})

# Matches nothing; used for ranges such as "<0.0.0" or ">*"
_EMPTY_RANGE = "<0.0.0"

Partial = tuple[int | None, int | None, int | None, str | None]


class InvalidRangeError(ValueError):
    """Raised when an npm version range cannot be parsed."""


def valid_semver(value: str | None) -> str | None:
    """Return the cleaned version if ``value`` is strict semver.

    A leading ``v`` or ``=`` and build metadata are accepted and dropped,
    so ``"v1.2.3+build"`` becomes ``"1.2.3"``.

    Args:
        value: Candidate version string

    Returns:
        Cleaned ``MAJOR.MINOR.PATCH[-PRERELEASE]`` or None

    """
    if not value:
        return None
    match = _SEMVER_RE.match(value)
    if not match:
        return None
    pre = match.group("pre")
    base = match.group("base")
    return f"{base}-{pre}" if pre else base


def coerce_version(value: str | None) -> str | None:
    """Extract the first ``N[.N[.N]]`` run from ``value``.

    Missing components are filled with zeros, everything around the run is
    ignored: ``"v15.0.0-nightly"`` → ``"15.0.0"``,
    ``"react 3"`` → ``"3.0.0"``.

    Args:
        value: Any string that may contain a version

    Returns:
        Coerced ``MAJOR.MINOR.PATCH`` or None

    """
    if not value:
        return None
    match = _COERCE_RE.search(value)
    if not match:
        return None
    major, minor, patch = (int(part or 0) for part in match.groups())
    return f"{major}.{minor}.{patch}"


def to_version(value: str) -> Version:
    """Convert a semver string into a comparable ``Version``.

    Args:
        value: Semver string

    Returns:
        PEP 440 version with the same ordering

    Raises:
        InvalidVersion: If ``value`` is not semver

    """
    cleaned = valid_semver(value)
    if cleaned is None:
        msg = f"Invalid version: '{value}'"
        raise InvalidVersion(msg)

    base, _, pre = cleaned.partition("-")
    return Version(_pep440(base, pre or None))


def _pep440(base: str, pre: str | None) -> str:
    """Map a semver prerelease tag onto PEP 440."""
    if not pre:
        return base
    match = _PRERELEASE_RE.match(pre)
    if match:
        label = _PRERELEASE_MAP[match.group("label")]
        return f"{base}{label}{match.group('num') or '0'}"
    # Unknown tags (nightly, canary, next.3) still sort before the release
    return f"{base}.dev0"


def version_gte(version: str, minimum: str) -> bool:
    """Return True if ``version >= minimum`` (both semver)."""
    return to_version(version) >= to_version(minimum)


def version_lt(version: str, maximum: str) -> bool:
    """Return True if ``version < maximum`` (both semver)."""
    return to_version(version) < to_version(maximum)


def _parse_partial(text: str) -> Partial:
    """Parse ``1``, ``1.2``, ``1.x``, ``1.2.3-rc.1`` into components.

    Raises:
        InvalidRangeError: If ``text`` is not a version or partial version

    """
    match = _PARTIAL_RE.match(text)
    if not match:
        msg = f"Invalid version in range: '{text}'"
        raise InvalidRangeError(msg)

    parts: list[int | None] = []
    for key in ("major", "minor", "patch"):
        raw = match.group(key)
        if raw is None or raw in _WILDCARDS:
            parts.append(None)
        else:
            parts.append(int(raw))

    # Anything after a wildcard is a wildcard as well
    for index in range(1, 3):
        if parts[index - 1] is None:
            parts[index] = None

    pre = match.group("pre") if parts[2] is not None else None
    return parts[0], parts[1], parts[2], pre


def _fmt(
    major: int, minor: int = 0, patch: int = 0, pre: str | None = None
) -> str:
    return _pep440(f"{major}.{minor}.{patch}", pre)


def _caret(partial: Partial) -> list[str]:
    major, minor, patch, pre = partial
    if major is None:
        return []
    if minor is None:
        return [f">={_fmt(major)}", f"<{_fmt(major + 1)}"]
    if patch is None:
        if major == 0:
            return [f">={_fmt(0, minor)}", f"<{_fmt(0, minor + 1)}"]
        return [f">={_fmt(major, minor)}", f"<{_fmt(major + 1)}"]

    lower = f">={_fmt(major, minor, patch, pre)}"
    if major > 0:
        return [lower, f"<{_fmt(major + 1)}"]
    if minor > 0:
        return [lower, f"<{_fmt(0, minor + 1)}"]
    return [lower, f"<{_fmt(0, 0, patch + 1)}"]


def _tilde(partial: Partial) -> list[str]:
    major, minor, patch, pre = partial
    if major is None:
        return []
    if minor is None:
        return [f">={_fmt(major)}", f"<{_fmt(major + 1)}"]
    return [
        f">={_fmt(major, minor, patch or 0, pre)}",
        f"<{_fmt(major, minor + 1)}",
    ]


def _primitive(op: str, partial: Partial) -> list[str]:
    major, minor, patch, pre = partial

    if major is None:
        return [_EMPTY_RANGE] if op in ("<", ">") else []

    if op in ("", "="):
        if minor is None:
            return [f">={_fmt(major)}", f"<{_fmt(major + 1)}"]
        if patch is None:
            return [f">={_fmt(major, minor)}", f"<{_fmt(major, minor + 1)}"]
        return [f"=={_fmt(major, minor, patch, pre)}"]

    if patch is not None:
        return [f"{op}{_fmt(major, minor, patch, pre)}"]

    # Partial versions round to the edge of the range they describe
    if minor is None:
        next_up = _fmt(major + 1)
        floor = _fmt(major)
    else:
        next_up = _fmt(major, minor + 1)
        floor = _fmt(major, minor)

    if op == ">":
        return [f">={next_up}"]
    if op == ">=":
        return [f">={floor}"]
    if op == "<":
        return [f"<{floor}"]
    return [f"<{next_up}"]  # <=


def _hyphen(low: str, high: str) -> list[str]:
    low_major, low_minor, low_patch, low_pre = _parse_partial(low)
    high_partial = _parse_partial(high)

    specifiers: list[str] = []
    if low_major is not None:
        specifiers.append(
            f">={_fmt(low_major, low_minor or 0, low_patch or 0, low_pre)}"
        )
    high_major, high_minor, high_patch, high_pre = high_partial
    if high_major is None:
        return specifiers
    if high_patch is not None:
        specifiers.append(
            f"<={_fmt(high_major, high_minor or 0, high_patch, high_pre)}"
        )
    else:
        specifiers.extend(_primitive("<=", high_partial))
    return specifiers


def _comparator(token: str) -> list[str]:
    if token in _WILDCARDS:
        return []
    if token.startswith("^"):
        return _caret(_parse_partial(token[1:]))
    if token.startswith("~"):
        return _tilde(_parse_partial(token[1:].lstrip(">")))

    match = _OPERATOR_RE.match(token)
    if match is None or not match.group("partial"):
        msg = f"Invalid comparator: '{token}'"
        raise InvalidRangeError(msg)
    return _primitive(
        match.group("op") or "", _parse_partial(match.group("partial"))
    )


def parse_range(range_text: str) -> list[SpecifierSet]:
    """Translate an npm range into a union of specifier sets.

    Supports ``||`` unions, hyphen ranges, ``^``/``~`` ranges, comparison
    operators and x-ranges.

    Args:
        range_text: npm range such as ``">=14"`` or ``"^16.14.0 || >=18"``

    Returns:
        Specifier sets; a version satisfies the range if any set contains it

    Raises:
        InvalidRangeError: If ``range_text`` is not a valid npm range

    """
    union: list[SpecifierSet] = []
    for clause in range_text.split("||"):
        clause = _OPERATOR_SPACING_RE.sub(r"\1", clause.strip())
        hyphen = _HYPHEN_RE.match(clause)
        if hyphen:
            specifiers = _hyphen(hyphen.group("low"), hyphen.group("high"))
        else:
            specifiers = []
            for token in clause.split():
                specifiers.extend(_comparator(token))
        try:
            union.append(SpecifierSet(",".join(specifiers)))
        except InvalidSpecifier as e:
            msg = f"Invalid range: '{range_text}'"
            raise InvalidRangeError(msg) from e
    return union


def is_valid_range(range_text: str) -> bool:
    """Return True if ``range_text`` parses as an npm range."""
    try:
        parse_range(range_text)
    except InvalidRangeError:
        return False
    return True


def satisfies(version: str, range_text: str) -> bool:
    """Return True if ``version`` falls inside the npm range.

    The version is coerced first, so node's ``v18.17.1`` and nightly tags
    such as ``v15.0.0-nightly2020`` are accepted.

    Args:
        version: Version to test
        range_text: npm range

    Returns:
        Whether the version satisfies the range

    Raises:
        InvalidRangeError: If the range cannot be parsed
        InvalidVersion: If no version can be read from ``version``

    """
    cleaned = valid_semver(version) or coerce_version(version)
    if cleaned is None:
        msg = f"Invalid version: '{version}'"
        raise InvalidVersion(msg)

    candidate = to_version(cleaned)
    return any(
        spec.contains(candidate, prereleases=True)
        for spec in parse_range(range_text)
    )
