"""noteflash: SM-2 spaced-repetition scheduling core."""

from noteflash.consts import VERSION

__version__ = VERSION
