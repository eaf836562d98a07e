from .env_manager import EnvManager, PackerSettings

__all__ = ["EnvManager", "PackerSettings"]
