"""
Utility helpers for the cosmos command line tool, including terminal coloring
and a JSON encoder for parsed artifacts.
"""

import json
from enum import Enum

from pydantic import BaseModel


class TerminalColors:
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    RESET = "\033[0m"


class CosmosArtifactEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, BaseModel):
            return o.model_dump(mode="json")
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, set):
            return sorted(o)
        return super().default(o)
