"""Classification and the end-to-end bunching run."""

from .bunch import BunchContext, Buncher
from .classifier import classify
from .sequence import SequenceIssuer

__all__ = ["BunchContext", "Buncher", "SequenceIssuer", "classify"]
