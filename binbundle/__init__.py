"""Bundle compiled executables into native installable packages."""

__version__ = "0.1.0"
