"""Access to packaged resources such as contract ABIs."""

import json
from importlib.resources import files
from typing import Any, Dict, List

RESOURCES_PACKAGE = "l2proof_toolkit.resources"


class ResourceManager:
    """Loads and caches JSON resources shipped inside the package"""

    def __init__(self, package: str = RESOURCES_PACKAGE):
        self._package = package
        self._cache: Dict[str, Any] = {}

    def _load_json(self, resource_type: str, filename: str) -> Any:
        if "/" in filename or "\\" in filename or filename.startswith("."):
            raise ValueError(f"Invalid resource name: {filename}")

        resource = (
            files(self._package).joinpath(resource_type).joinpath(filename)
        )
        if not resource.is_file():
            raise FileNotFoundError(
                f"Resource not found: {resource_type}/{filename}"
            )
        return json.loads(resource.read_text())

    def load_abi(self, name: str) -> List[Dict[str, Any]]:
        """Load an ABI file from the resources"""
        cache_key = f"abi:{name}"
        if cache_key not in self._cache:
            self._cache[cache_key] = self._load_json("abi", f"{name}.json")
        return self._cache[cache_key]


# Global instance
resource_manager = ResourceManager()
