# src/reworkit/db/services.py
from typing import List, Optional

from reworkit.db.errors import ResultNotFound
from reworkit.db.results import BuildResultDAO
from reworkit.models import BuildResult, Package


# -----------------------
# Build Result Service
# -----------------------
class BuildResultService:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def record_result(self, name: str, arch: str, success: bool, log: str) -> BuildResult:
        result = BuildResult(name=name, arch=arch, success=success, log=log)
        BuildResultDAO(self.db_path).upsert(result)
        return result

    def get_result(self, name: str, arch: str) -> BuildResult:
        return BuildResultDAO(self.db_path).get(name, arch)

    def get_package(self, name: str) -> Package:
        results = BuildResultDAO(self.db_path).list_for_package(name)
        if not results:
            raise ResultNotFound(name)
        return Package.from_results(name, results)

    def list_results(
        self,
        arch: Optional[str] = None,
        success: Optional[bool] = None,
    ) -> List[BuildResult]:
        return BuildResultDAO(self.db_path).list(arch=arch, success=success)

    def delete_result(self, name: str, arch: str) -> bool:
        return BuildResultDAO(self.db_path).delete(name, arch)
