"""
# Module metar

This package provides the capability to:
* Decode METAR/SPECI aviation weather reports into typed, immutable records
* Report precisely located diagnostics for reports that cannot be decoded
* Decode, check and interactively explore reports from the command line (`metar`)
"""

__all__: list[str] = [
    "data",
    "errors",
    "metar_parser",
    "parse",
    "decode",
    "Report",
    "MetarError",
    "OwnedMetarError",
]

from metar import data, errors, metar_parser
from metar.data import Report
from metar.errors import MetarError, OwnedMetarError
from metar.metar_parser import decode, parse
