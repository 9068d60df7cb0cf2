from dbworks.connections.connection_registry import (
    ConnectionInfo,
    ConnectionRegistry,
    create_datasource,
    mask_url,
)

__all__ = ["ConnectionInfo", "ConnectionRegistry", "create_datasource", "mask_url"]
