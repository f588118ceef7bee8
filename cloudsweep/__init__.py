"""cloudsweep - snapshot cloud accounts and delete what was created since."""

__version__ = "0.4.0"
