"""AutoStudio - turn an idea into a script, a storyboard and rendered scenes."""

__version__ = "0.1.0"
