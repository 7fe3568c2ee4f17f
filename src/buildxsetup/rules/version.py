from functools import total_ordering
import re

@total_ordering
class Version:
    """
        Semantic version of the buildx binary (or of anything else worth gating on)
    """
    # 1:Major, 2:Minor, 3:Patch, 4:Prerelease
    SEMVER_REGEX = re.compile(
        r"^(?P<major>0|[1-9]\d*)\."
        r"(?P<minor>0|[1-9]\d*)\."
        r"(?P<patch>0|[1-9]\d*)"
        r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
        r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
        r"(?:\+(?P<build>\S+))?$"
    )
    LOOSE_CORE = re.compile(r"^(\d+\.\d+\.\d+)")

    def __init__(self, version_str: str):
        if not isinstance(version_str, str):
            raise ValueError(f"Unrecognized Version {version_str!r}")
        self.version_str = version_str
        text = version_str.strip()
        # release tags are spelled 'v0.9.1'
        if text[:1] in ("v", "V"):
            text = text[1:]

        match = self.SEMVER_REGEX.match(text)
        if match:
            parts = match.groupdict()
            self.core = (int(parts['major']), int(parts['minor']), int(parts['patch']))
            self.prerelease = self._parse_prerelease(parts.get('prerelease'))
            self.build = parts.get('build')
            return

        # loose forms such as '1.0.0rc1' or '0.10.0-rc2.xyz+abc'
        core_match = self.LOOSE_CORE.match(text)
        if not core_match:
            raise ValueError(f"Unrecognized Version '{version_str}'")
        core_part = core_match.group(1)
        rest = text[len(core_part):]
        rest, _, build = rest.partition('+')
        rest = rest.lstrip('-')
        self.core = tuple(map(int, core_part.split('.')))
        self.prerelease = self._parse_prerelease(rest) if rest else None
        self.build = build or None

    @classmethod
    def try_parse(cls, version_str) -> "Version | None":
        """Parse or return None; never raises."""
        try:
            return cls(version_str)
        except ValueError:
            return None

    def _parse_prerelease(self, prerelease_str):
        if prerelease_str is None:
            return None
        parts = []
        for part in re.split(r'(\d+)', prerelease_str):
            if not part: continue
            if part.isdigit():
                parts.append(int(part))
            else:
                # 'rc.1' or 'p' or just 'a'
                for sub_part in part.split('.'):
                    if sub_part: parts.append(sub_part)
        return tuple(parts)

    def _prerelease_key(self):
        # ints and strs can't be compared directly; numbers sort before identifiers
        return tuple((0, p, "") if isinstance(p, int) else (1, 0, p) for p in self.prerelease)

    def __str__(self):
        return self.version_str

    def __repr__(self):
        return f"Version('{self.version_str}')"

    def __hash__(self):
        return hash((self.core, self.prerelease))

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.core == other.core and self.prerelease == other.prerelease

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented

        if self.core != other.core:
            return self.core < other.core

        if self.prerelease is None and other.prerelease is not None:
            return False
        if self.prerelease is not None and other.prerelease is None:
            return True

        if self.prerelease is not None:
            return self._prerelease_key() < other._prerelease_key()

        return False
