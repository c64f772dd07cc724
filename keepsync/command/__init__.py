"""
Command-line processing package

keepsync is run with the path of the database, typically by a trigger after the database is saved.
"""
from .main import main
