"""Reading and writing maildir message files."""

from .loader import load_message
from .writer import prepare_output_root, save_message

__all__ = ["load_message", "prepare_output_root", "save_message"]
