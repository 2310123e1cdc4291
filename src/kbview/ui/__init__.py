"""UI coordination layer: event bus, lifecycle manager and contributions."""
