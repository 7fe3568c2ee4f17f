import re
from typing import Callable

from .version import Version

class Rule:
    """
        A range of versions a capability is available in
    """

    INTERVAL = re.compile(r"^(\[|\()\s*(.+?)\s*,\s*(.+?)\s*(\]|\))$")
    # longest operators first so '>=' is not read as '>'
    OPERATORS = (
        ('>=', lambda v, t: v >= t),
        ('<=', lambda v, t: v <= t),
        ('>', lambda v, t: v > t),
        ('<', lambda v, t: v < t),
    )

    def __init__(self, rule_str: str):
        """
        - interval: [1.0.0, 2.0.0], (1.0.0, 2.0.0), [1.0.0, 2.0.0), (1.0.0, 2.0.0]
        - compare: >=1.2.3, <2.0.0
        - equal: 1.5.0
        """
        self.rule_str = rule_str.strip()
        self.check = self._parse_rule()

    def _parse_rule(self) -> Callable[[Version], bool]:
        match = self.INTERVAL.match(self.rule_str)
        if match:
            start_bracket, start_ver_str, end_ver_str, end_bracket = match.groups()
            start_ver = Version(start_ver_str)
            end_ver = Version(end_ver_str)
            lower_ok = (lambda v: start_ver <= v) if start_bracket == '[' else (lambda v: start_ver < v)
            upper_ok = (lambda v: v <= end_ver) if end_bracket == ']' else (lambda v: v < end_ver)
            return lambda v: lower_ok(v) and upper_ok(v)

        for op, func in self.OPERATORS:
            if self.rule_str.startswith(op):
                target_version = Version(self.rule_str[len(op):].strip())
                return lambda v: func(v, target_version)

        target_version = Version(self.rule_str)
        return lambda v: v == target_version

    def __contains__(self, version: Version) -> bool:
        """
            `version in rule`
        """
        if not isinstance(version, Version):
            return False
        return self.check(version)

    def __str__(self):
        return f"{self.rule_str}"

    def __repr__(self):
        return f"Rule('{self.rule_str}')"
