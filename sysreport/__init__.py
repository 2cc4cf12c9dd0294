"""sysreport — Linux host diagnostic report generator."""

__version__ = "0.1.0"
