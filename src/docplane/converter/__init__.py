"""Conversion of programs into a reflection tree."""

from docplane.converter.context import Context, ConverterServices, TraversalMode
from docplane.converter.converter import Converter
from docplane.converter.errors import ConversionError, InactiveProgramError, MissingBindingError
from docplane.converter.events import ConverterEvents, EventBus
from docplane.converter.symbols import VisitorRegistry, default_visitors

__all__ = [
    # Context
    "Context",
    "ConverterServices",
    "TraversalMode",
    # Orchestration
    "Converter",
    "ConverterEvents",
    "EventBus",
    "VisitorRegistry",
    "default_visitors",
    # Errors
    "ConversionError",
    "InactiveProgramError",
    "MissingBindingError",
]
