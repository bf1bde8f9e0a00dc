"""Read-only access to files bundled in an assets directory."""

from pathlib import Path

from loguru import logger

from .exceptions import AssetError


class AssetLoader:
    """Loads named assets from a directory as raw bytes."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _resolve(self, asset_name: str) -> Path:
        path = (self.root / asset_name).resolve()
        root = self.root.resolve()
        if root != path and root not in path.parents:
            raise AssetError("Asset path escapes the assets directory", asset_name=asset_name)
        return path

    def load_bytes(self, asset_name: str) -> bytes:
        path = self._resolve(asset_name)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise AssetError(
                f"Could not read asset '{asset_name}'", asset_name=asset_name, details=str(e)
            ) from e
        logger.debug(f"Loaded asset {asset_name} ({len(data)} bytes) from {self.root}")
        return data

    def __repr__(self) -> str:
        return f"AssetLoader(root={self.root})"
