"""Board topologies, meshes, and Go and Invasion game logic on arbitrary boards."""

__version__ = "0.1.0"
__all__ = ["board", "mesh", "shapes", "net", "invasion", "go"]