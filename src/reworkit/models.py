# models.py
from dataclasses import dataclass, field
from typing import Dict, Any, Iterable

# -------------------------
# Build result domain models
# -------------------------


@dataclass(frozen=True)
class BuildResult:
    """
    Outcome of building one package for one architecture.
    Mirrors a row of the build_result table.
    """
    name: str
    arch: str
    success: bool
    log: str

    @classmethod
    def from_row(cls, row) -> "BuildResult":
        # SQLite stores BOOLEAN as 0/1
        return cls(
            name=row["name"],
            arch=row["arch"],
            success=bool(row["success"]),
            log=row["log"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "arch": self.arch,
            "success": self.success,
            "log": self.log,
        }


@dataclass
class Package:
    """
    All recorded results of one package, keyed by architecture.
    """
    name: str
    results: Dict[str, BuildResult] = field(default_factory=dict)

    @classmethod
    def from_results(cls, name: str, results: Iterable[BuildResult]) -> "Package":
        return cls(name=name, results={r.arch: r for r in results})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "results": {
                arch: {"success": r.success, "log": r.log}
                for arch, r in sorted(self.results.items())
            },
        }
