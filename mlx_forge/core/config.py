from mlx_forge.config import ConfigManager


def manage_config(action: str = "show", key: str = None, value: str = None, config: ConfigManager = None):
    """
    Manage the global configuration. Supports actions: show, get, set.
    """
    config = config or ConfigManager()
    if action == "show":
        return config.all()
    if action == "get":
        return config.get(key)
    if action == "set":
        return config.set(key, value)
    raise ValueError(f"Unknown config action: {action}")
