"""files_to_prompt — concatenate files into a single prompt for LLMs."""

__version__ = "0.3.0"
