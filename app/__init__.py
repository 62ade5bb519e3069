"""Agency Desk: sales, commission and creator financial tracking for a talent agency."""

__version__ = "1.4.0"
