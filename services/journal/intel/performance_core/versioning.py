"""
Performance Core — Versioning

Every PerformanceReport carries the formula version it was computed with,
so a stored or cached report can be checked before it is reused.

    Patch: fixes with identical outputs for valid input
    Minor: new report fields, existing fields unchanged
    Major: any formula, sign convention or bucketing change

The NBS weights and the negative average_loss convention are part of
the major version.
"""


class ReportVersion:
    CURRENT = "1.0.0"

    def current_version(self) -> str:
        return self.CURRENT

    @staticmethod
    def parse(version_str: str) -> tuple[int, int, int]:
        """'1.2.3' → (1, 2, 3). Anything else raises ValueError."""
        parts = version_str.split(".")
        if len(parts) != 3:
            raise ValueError(f"Invalid version format: {version_str}")
        return int(parts[0]), int(parts[1]), int(parts[2])

    @classmethod
    def is_compatible(cls, report_version: str) -> bool:
        """Same major version as the running core."""
        try:
            return cls.parse(report_version)[0] == cls.parse(cls.CURRENT)[0]
        except (AttributeError, ValueError):
            return False
