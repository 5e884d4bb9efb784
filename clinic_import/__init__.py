"""Legacy clinic workbook -> PostgreSQL import pipeline."""

__version__ = "0.1.0"
