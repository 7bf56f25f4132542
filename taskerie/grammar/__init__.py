"""Action grammar: parsing action lines and rendering interpolations."""

from .parser import parse_action, parse_template
from .render import ParameterContext, render, render_command

__all__ = ["parse_action", "parse_template", "ParameterContext", "render", "render_command"]
