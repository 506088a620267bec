"""UG4 Bootstrap: clone ughub, set up a ug4 workspace, configure the build."""

__version__ = "0.1.0"
