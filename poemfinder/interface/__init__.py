# poemfinder/interface/__init__.py

from .base_interface import BaseInterface
from .cli_interface import CLIInterface

__all__ = [
    "BaseInterface",
    "CLIInterface"
]
