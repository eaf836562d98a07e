"""BG3 mod packer: stages, validates, merges, converts and archives mod sources."""

__version__ = "0.1.0"
