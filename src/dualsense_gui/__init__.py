"""dualsensectl GUI: a desktop front-end for the dualsensectl command-line tool."""

__version__ = '0.1.0'
