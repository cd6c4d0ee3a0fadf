"""ALwrity content studio: outline generation, section quality scoring and content versions."""

__version__ = "0.1.0"
