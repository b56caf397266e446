"""Resource limits and generated-code names for comprehension translation."""

DEFAULT_MAX_TOKENS = 10000
"""Maximum number of tokens accepted by the parser."""

DEFAULT_MAX_OUTPUT_LENGTH = 50000
"""Maximum length of the unparsed Python source."""

RUNTIME_NAME = "__pycomp2iter__"
"""Reserved name the generated expression uses to reach its runtime callables."""

SOURCE_FILENAME = "<comprehension>"
"""Filename reported by code objects compiled from a comprehension."""
