"""Infrastructure layer - registry transport, cache, config and I/O helpers."""
