"""file-notify - File integrity audit agent."""

__version__ = "0.1"
