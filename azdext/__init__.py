"""Building blocks for Azure developer tooling: errors, ordered JSON maps, helpers and an IoC container."""

__version__ = "0.1.0"