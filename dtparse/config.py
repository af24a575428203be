from dataclasses import dataclass
from enum import Enum

# Longest value printed per property unless running verbose.
DEFAULT_VALUE_LIMIT = 64

# Shown for nodes without a readable "name" property.
NODE_NAME_PLACEHOLDER = 'NODE'

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_IO = 2
EXIT_PARSE = 3

IndentStyle = Enum('IndentStyle', ['Flat', 'Tree'])


@dataclass(frozen=True)
class DisplayConfig:
    verbose: bool = False
    style: IndentStyle = IndentStyle.Flat

    @property
    def value_limit(self):
        return None if self.verbose else DEFAULT_VALUE_LIMIT
