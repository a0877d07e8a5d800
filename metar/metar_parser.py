#!/bin/python3
import json, logging, os, re, sys
from contextlib  import ExitStack
from dataclasses import fields
from dataclasses import is_dataclass
from datetime    import datetime
from enum        import Enum
from functools   import partial
from pathlib     import Path
from typing      import Any
from typing      import BinaryIO
from typing      import Callable
from typing      import NoReturn
from typing      import Optional
from typing      import TextIO
from typing      import Union

import click

from metar.data   import AboveMaximum
from metar.data   import AllRunways
from metar.data   import Becoming
from metar.data   import Calm
from metar.data   import Cavok
from metar.data   import Cleared
from metar.data   import CloudLayer
from metar.data   import Clouds
from metar.data   import CloudsInVicinity
from metar.data   import CloudDensity
from metar.data   import CloudType
from metar.data   import ColourCode
from metar.data   import CompassDirection
from metar.data   import ContaminationPresent
from metar.data   import Data
from metar.data   import DirectionalVisibility
from metar.data   import Heading
from metar.data   import Hectopascals
from metar.data   import InchesOfMercury
from metar.data   import Kind
from metar.data   import Known
from metar.data   import Metres
from metar.data   import Pressure
from metar.data   import Report
from metar.data   import RunwayCondition
from metar.data   import RunwayDeposits
from metar.data   import RunwayVisualRange
from metar.data   import RvrBetween
from metar.data   import RvrQualifier
from metar.data   import RvrReading
from metar.data   import RvrSingle
from metar.data   import RvrTrend
from metar.data   import RvrUnit
from metar.data   import SeaCondition
from metar.data   import SeaState
from metar.data   import SeaStateReport
from metar.data   import SpecificRunways
from metar.data   import SpeedUnit
from metar.data   import StatuteMiles
from metar.data   import Temporarily
from metar.data   import Time
from metar.data   import TrendNewCondition
from metar.data   import TrendSignal
from metar.data   import TrendTime
from metar.data   import TrendTimeKind
from metar.data   import UNKNOWN
from metar.data   import Variable
from metar.data   import VerticalVisibility
from metar.data   import Visibility
from metar.data   import WaveHeight
from metar.data   import Weather
from metar.data   import WeatherCondition
from metar.data   import WeatherIntensity
from metar.data   import Wind
from metar.data   import WindPresent
from metar.data   import WindSpeed
from metar.errors import ErrorKind
from metar.errors import ExpectedFound
from metar.errors import ExpectedNext
from metar.errors import MetarError
from metar.errors import MetarException
from metar.errors import OwnedMetarError

progname     = Path(sys.argv[0]).stem
version      = "1.0.0"
version_date = "17Oct2026"
logger       = logging.getLogger()

Grammar = Callable[[int], tuple[Any, int]]

def exc_info(e: Exception) -> str :
    '''
    Get exception info for logging
    '''
    info = f"{e.__class__.__name__}: {str(e)}"
    if e.args :
        info += f" args = {e.args}"
    return info

class MetarParser :
    '''
    Decodes a single METAR/SPECI report.

    Every grammar method takes a character position and returns a tuple of
    (value, position after the value), or raises MetarParser.Mismatch after
    recording what it expected. The furthest failure seen is kept, merged
    with any other failure at the same position, and becomes the diagnostic
    if the report as a whole cannot be decoded.

    A parser instance holds the state of one decode only.
    '''
    MAX_WIND_HEADING   = 360
    MAX_RUNWAY_NUMBER  = 36
    ALL_RUNWAYS_NUMBER = 88

    METHODS = {
        "AUTO" : Kind.AUTOMATIC,
        "COR"  : Kind.CORRECTION,
        "CCA"  : Kind.CORRECTION}

    SPEED_UNITS = {
        "KT"  : SpeedUnit.KNOTS,
        "MPS" : SpeedUnit.METRES_PER_SECOND,
        "KPH" : SpeedUnit.KILOMETRES_PER_HOUR}

    #
    # two-letter octants must be tried before the single letters they start with
    #
    COMPASS_DIRECTIONS = {d.value : d for d in sorted(CompassDirection, key=lambda d : -len(d.value))}

    CLOUD_DENSITIES = {d.value : d for d in CloudDensity}

    CLOUD_TYPES = {
        "TCU" : CloudType.TOWERING_CUMULUS,
        "CB"  : CloudType.CUMULONIMBUS}

    SKY_CLEAR = {"SKC" : Clouds.NO_CLOUD_DETECTED, "CLR" : Clouds.NO_CLOUD_DETECTED}

    SKY_COVER = {
        "NCD" : Clouds.NO_CLOUD_DETECTED,
        "NSC" : Clouds.NO_SIGNIFICANT_CLOUD}

    WEATHER_INTENSITIES = {
        "+"  : WeatherIntensity.HEAVY,
        "-"  : WeatherIntensity.LIGHT,
        "VC" : WeatherIntensity.IN_VICINITY,
        "RE" : WeatherIntensity.RECENT}

    WEATHER_CONDITIONS = {c.value : c for c in WeatherCondition}

    COLOUR_CODES = {c.value : c for c in ColourCode}

    RVR_QUALIFIERS = {
        "P" : RvrQualifier.GREATER_THAN,
        "M" : RvrQualifier.LESS_THAN}

    RVR_UNITS = {"FT" : RvrUnit.FEET}

    RVR_TRENDS = {t.value : t for t in RvrTrend}

    RUNWAY_DEPOSITS = {d.value : d for d in RunwayDeposits}

    SEA_STATES = {s.value : s for s in SeaState}

    TREND_SIGNALS = {s.value : s for s in TrendSignal}

    TREND_TIMES = {t.value : t for t in TrendTimeKind}

    class Exc(MetarException) :
        '''
        Base class for MetarParser exceptions
        '''
        pass

    class InputException(Exc) :
        '''
        Exception for input errors
        '''
        pass

    class OutputException(Exc) :
        '''
        Exception for output errors
        '''
        pass

    class ParseException(Exc) :
        '''
        Exception for reports that cannot be decoded
        '''
        def __init__(self, message: str, errors: tuple[OwnedMetarError, ...]=()) -> None :
            super().__init__(message)
            self.errors = errors

    class Mismatch(Exception) :
        '''
        Raised by a grammar that does not match at a position; callers backtrack on it
        '''
        pass

    def __init__(self, text: Union[str, bytes]) -> None :
        '''
        MetarParser constructor
        '''
        if isinstance(text, bytes) :
            try :
                text = text.decode("utf-8")
            except UnicodeDecodeError as e :
                raise MetarParser.InputException(f"Report is not valid UTF-8: {e}")
        if not isinstance(text, str) :
            raise MetarParser.InputException(f"Expected report text, got {text.__class__.__name__}")
        self._text: str                    = text
        self._length: int                  = len(text)
        self._error: Optional[MetarError]  = None
        self._station_pattern              = re.compile(r"[A-Z0-9]{4}")
        self._digits_pattern               = re.compile(r"[0-9]*")
        self._whitespace_pattern           = re.compile(r"[ \t]+")
        self._token_pattern                = re.compile(r"[^\s=]+")

    @property
    def text(self) -> str :
        '''
        Get the text being decoded
        '''
        return self._text

    @property
    def error(self) -> Optional[MetarError] :
        '''
        Get the furthest failure recorded so far
        '''
        return self._error

    #-----------------------------------------------------------#
    # failure recording                                         #
    #                                                           #
    # further failures replace nearer ones, failures at the     #
    # same position are merged, and a range or trend failure    #
    # outranks "expected one of" failures within its token      #
    #-----------------------------------------------------------#
    def outranks(self, first: MetarError, second: MetarError) -> bool :
        return (isinstance(first.variant, ErrorKind)
                and isinstance(second.variant, ExpectedFound)
                and first.start <= second.start <= self.token_end(first.start))

    def record(self, error: MetarError) -> None :
        '''
        Keep the given failure if it is at least as far into the text as the current one
        '''
        current = self._error
        if current is None :
            self._error = error
        elif self.outranks(current, error) :
            pass
        elif self.outranks(error, current) or error.start > current.start :
            self._error = error
        elif error.start == current.start :
            self._error = current.merge(error)

    def token_end(self, pos: int) -> int :
        '''
        Get the end of the whitespace-delimited token starting at pos
        '''
        m = self._token_pattern.match(self._text, pos)
        if m :
            return m.end()
        return min(pos + 1, self._length)

    def expected(self, pos: int, *expected: ExpectedNext) -> None :
        '''
        Record what would have been accepted at pos without abandoning the current grammar
        '''
        end   = self.token_end(pos)
        found = self._text[pos:end] if pos < self._length else None
        self.record(MetarError(self._text, pos, end, ExpectedFound(tuple(expected), found)))

    def fail(self, pos: int, *expected: ExpectedNext) -> NoReturn :
        self.expected(pos, *expected)
        raise MetarParser.Mismatch()

    def invalid(self, start: int, end: int, kind: ErrorKind) -> NoReturn :
        self.record(MetarError(self._text, start, end, kind))
        raise MetarParser.Mismatch()

    #-----------------------------------------------------------#
    # matching primitives                                       #
    #-----------------------------------------------------------#
    def literal(self, pos: int, *values: str) -> tuple[str, int] :
        '''
        Match the first of the given strings found at pos
        '''
        for value in values :
            if self._text.startswith(value, pos) :
                return value, pos + len(value)
        self.fail(pos, *[ExpectedNext.literal(value) for value in values])

    def keyword(self, pos: int, table: dict[str, Any]) -> tuple[Any, int] :
        '''
        Match the first code of a lookup table found at pos and return its mapped value
        '''
        for code, value in table.items() :
            if self._text.startswith(code, pos) :
                return value, pos + len(code)
        self.fail(pos, *[ExpectedNext.literal(code) for code in table])

    def digits(self, pos: int, count: int, maximum: Optional[int]=None) -> tuple[str, int] :
        '''
        Match at least count and at most maximum (default count) ASCII digits
        '''
        run = self._digits_pattern.match(self._text, pos).end() - pos
        if run < count :
            self.fail(pos + run, ExpectedNext.digits())
        end = pos + min(run, maximum or count)
        return self._text[pos:end], end

    def whitespace(self, pos: int) -> int :
        m = self._whitespace_pattern.match(self._text, pos)
        if not m :
            self.fail(pos, ExpectedNext.whitespace())
        return m.end()

    def inline_whitespace(self, pos: int) -> int :
        m = self._whitespace_pattern.match(self._text, pos)
        return m.end() if m else pos

    def separator(self, pos: int) -> int :
        '''
        Match the end of a group: whitespace, or (without consuming it) the end of the report
        '''
        m = self._whitespace_pattern.match(self._text, pos)
        if m :
            return m.end()
        if pos >= self._length or self._text[pos] == "=" :
            return pos
        self.fail(pos, ExpectedNext.whitespace(), ExpectedNext.end_of_input())

    def end_of_input(self, pos: int) -> int :
        if pos < self._length :
            self.fail(pos, ExpectedNext.end_of_input())
        return pos

    #-----------------------------------------------------------#
    # combinators                                               #
    #-----------------------------------------------------------#
    def optional(self, pos: int, grammar: Grammar, default: Any=None) -> tuple[Any, int] :
        try :
            return grammar(pos)
        except MetarParser.Mismatch :
            return default, pos

    def choice(self, pos: int, *grammars: Grammar) -> tuple[Any, int] :
        '''
        Return the result of the first grammar that matches at pos
        '''
        for grammar in grammars :
            try :
                return grammar(pos)
            except MetarParser.Mismatch :
                pass
        raise MetarParser.Mismatch()

    def repeated(self, pos: int, grammar: Grammar, separated: bool=False, minimum: int=0) -> tuple[tuple, int] :
        '''
        Match grammar as many times as possible, optionally with whitespace between the matches
        '''
        items: list[Any] = []
        while True :
            try :
                start = self.whitespace(pos) if separated and items else pos
                item, end = grammar(start)
            except MetarParser.Mismatch :
                break
            if end == pos :
                break
            items.append(item)
            pos = end
        if len(items) < minimum :
            raise MetarParser.Mismatch()
        return tuple(items), pos

    def data(self, pos: int, width: int, grammar: Grammar, known_only: bool=False) -> tuple[Data, int] :
        '''
        Match either width slashes (UNKNOWN) or the grammar (Known). Within a trend
        (known_only) the slashes are matched but rejected.
        '''
        slashes = "/" * width
        if self._text.startswith(slashes, pos) :
            end = pos + width
            if known_only :
                self.invalid(pos, end, ErrorKind.TREND_DATA_CANNOT_BE_UNKNOWN)
            return UNKNOWN, end
        self.expected(pos, ExpectedNext.literal(slashes))
        value, end = grammar(pos)
        return Known(value), end

    def known(self, pos: int, width: int, grammar: Grammar) -> tuple[Any, int] :
        value, end = self.data(pos, width, grammar, known_only=True)
        return value.value, end

    def token(self, pos: int, grammar: Grammar) -> tuple[Any, int] :
        '''
        Match a whole group: the grammar followed by a separator
        '''
        value, end = grammar(pos)
        return value, self.separator(end)

    def tokenized(self, grammar: Grammar) -> Grammar :
        return lambda pos : self.token(pos, grammar)

    def spaced(self, pos: int, grammar: Grammar, default: Any=None) -> tuple[Any, int] :
        '''
        Optionally match whitespace followed by the grammar; nothing is consumed if either fails
        '''
        try :
            return grammar(self.whitespace(pos))
        except MetarParser.Mismatch :
            return default, pos

    def lookup(self, table: dict[str, Any]) -> Grammar :
        return lambda pos : self.keyword(pos, table)

    def number(self, count: int, maximum: Optional[int]=None) -> Grammar :
        def grammar(pos: int) -> tuple[int, int] :
            text, end = self.digits(pos, count, maximum)
            return int(text), end
        return grammar

    #-----------------------------------------------------------#
    # station, time and method                                  #
    #-----------------------------------------------------------#
    def report_type(self, pos: int) -> tuple[str, int] :
        return self.literal(pos, "METAR", "SPECI")

    def method(self, pos: int) -> tuple[Kind, int] :
        return self.keyword(pos, self.METHODS)

    def station(self, pos: int) -> tuple[str, int] :
        m = self._station_pattern.match(self._text, pos)
        if not m :
            self.fail(pos, ExpectedNext.description("a four character station identifier"))
        return m.group(0), m.end()

    def observation_time(self, pos: int) -> tuple[Time, int] :
        '''
        Match ddhhmmZ, then reject a date after 31, an hour after 23 or a minute after 59
        '''
        date, p   = self.number(2)(pos)
        hour, p   = self.number(2)(p)
        minute, p = self.number(2)(p)
        _, end    = self.literal(p, "Z")
        if date > 31 :
            self.invalid(pos, pos + 2, ErrorKind.INVALID_DATE)
        if hour > 23 :
            self.invalid(pos + 2, pos + 4, ErrorKind.INVALID_HOUR)
        if minute > 59 :
            self.invalid(pos + 4, pos + 6, ErrorKind.INVALID_MINUTE)
        return Time(date, hour, minute), end

    #-----------------------------------------------------------#
    # wind                                                      #
    #-----------------------------------------------------------#
    def wind_heading(self, pos: int) -> tuple[int, int] :
        return self.number(3)(pos)

    def check_heading(self, heading: Data, start: int) -> None :
        '''
        Reject a known heading above 360 degrees once the whole wind group has matched
        '''
        if heading is not UNKNOWN and heading.value > self.MAX_WIND_HEADING :
            self.invalid(start, start + 3, ErrorKind.INVALID_WIND_HEADING)

    def wind_direction(self, pos: int, known_only: bool=False) -> tuple[Union[Heading, Variable], int] :
        try :
            _, end = self.literal(pos, "VRB")
            return Variable.VARIABLE, end
        except MetarParser.Mismatch :
            pass
        heading, end = self.data(pos, 3, self.wind_heading, known_only)
        return Heading(heading), end

    def speed_value(self, pos: int) -> tuple[Union[int, AboveMaximum], int] :
        '''
        Match a 2 or 3 digit speed, or a P-prefixed speed meaning "above the maximum reportable"
        '''
        try :
            _, start = self.literal(pos, "P")
        except MetarParser.Mismatch :
            return self.number(2, 3)(pos)
        _, end = self.digits(start, 2, 3)
        return AboveMaximum.ABOVE_MAXIMUM, end

    def gust(self, pos: int, known_only: bool=False) -> tuple[Data, int] :
        _, start = self.literal(pos, "G")
        return self.data(start, 2, self.speed_value, known_only)

    def wind_speed(self, pos: int, known_only: bool=False) -> tuple[WindSpeed, int] :
        speed, pos   = self.data(pos, 2, self.speed_value, known_only)
        gusting, pos = self.optional(pos, partial(self.gust, known_only=known_only))
        unit, end    = self.keyword(pos, self.SPEED_UNITS)
        return WindSpeed(unit, speed, gusting), end

    def wind_variation(self, pos: int) -> tuple[tuple[Data, Data], int] :
        '''
        Match dddVddd
        '''
        lower, p = self.data(pos, 3, self.wind_heading)
        _, p     = self.literal(p, "V")
        upper, p = self.data(p, 3, self.wind_heading)
        self.check_heading(lower, pos)
        self.check_heading(upper, pos + 4)
        return (lower, upper), p

    def wind(self, pos: int, known_only: bool=False) -> tuple[Wind, int] :
        '''
        Match CALM, or direction, speed, optional gust and unit, then an optional variation
        group after whitespace
        '''
        try :
            _, end = self.literal(pos, "CALM")
            return Calm.CALM, end
        except MetarParser.Mismatch :
            pass
        direction, p = self.wind_direction(pos, known_only)
        speed, p     = self.wind_speed(p, known_only)
        if isinstance(direction, Heading) :
            self.check_heading(direction.degrees, pos)
        varying, p   = self.spaced(p, self.wind_variation)
        return WindPresent(direction, speed, varying), p

    #-----------------------------------------------------------#
    # visibility                                                #
    #-----------------------------------------------------------#
    def cavok(self, pos: int) -> tuple[Cavok, int] :
        _, end = self.literal(pos, "CAVOK")
        return Cavok.CAVOK, end

    def fraction(self, pos: int) -> tuple[float, int] :
        numerator, pos         = self.number(1, 2)(pos)
        _, denominator_pos     = self.literal(pos, "/")
        denominator, end       = self.number(1, 2)(denominator_pos)
        if denominator == 0 :
            self.fail(denominator_pos, ExpectedNext.description("a non-zero denominator"))
        return numerator / denominator, end

    def statute_miles_mixed(self, pos: int) -> tuple[StatuteMiles, int] :
        '''
        Match "w n/dSM", the one group that contains whitespace
        '''
        whole, pos = self.number(1, 2)(pos)
        pos        = self.whitespace(pos)
        part, pos  = self.fraction(pos)
        _, end     = self.literal(pos, "SM")
        return StatuteMiles(whole + part), end

    def statute_miles_fraction(self, pos: int) -> tuple[StatuteMiles, int] :
        part, pos = self.fraction(pos)
        _, end    = self.literal(pos, "SM")
        return StatuteMiles(part), end

    def statute_miles_whole(self, pos: int) -> tuple[StatuteMiles, int] :
        whole, pos = self.number(1, 2)(pos)
        _, end     = self.literal(pos, "SM")
        return StatuteMiles(float(whole)), end

    def metres(self, pos: int) -> tuple[Metres, int] :
        distance, end = self.number(4)(pos)
        return Metres(distance), end

    def visibility(self, pos: int) -> tuple[Visibility, int] :
        return self.choice(
            pos,
            self.cavok,
            self.statute_miles_mixed,
            self.statute_miles_fraction,
            self.statute_miles_whole,
            self.metres)

    def prevailing_visibility(self, pos: int) -> tuple[Data, int] :
        '''
        Match the primary visibility; a trailing NDV (no directional variation) is dropped
        '''
        visibility, pos = self.data(pos, 4, self.visibility)
        _, end          = self.optional(pos, lambda p : self.literal(p, "NDV"))
        return visibility, end

    def compass_direction(self, pos: int) -> tuple[CompassDirection, int] :
        return self.keyword(pos, self.COMPASS_DIRECTIONS)

    def directional_visibility(self, pos: int) -> tuple[DirectionalVisibility, int] :
        visibility, pos = self.data(pos, 4, self.visibility)
        try :
            _, end = self.literal(pos, "NDV")
            return DirectionalVisibility(None, visibility), end
        except MetarParser.Mismatch :
            pass
        direction, end = self.compass_direction(pos)
        return DirectionalVisibility(direction, visibility), end

    #-----------------------------------------------------------#
    # runway visual range and runway condition                  #
    #-----------------------------------------------------------#
    def runway_number(self, pos: int) -> tuple[str, int] :
        '''
        Match R followed by a runway number (00 to 36, or 88 for all runways) and an
        optional L, C or R suffix. The designator is returned without the leading R.
        '''
        _, start = self.literal(pos, "R")
        number, pos = self.digits(start, 1, 2)
        if int(number) > self.MAX_RUNWAY_NUMBER and int(number) != self.ALL_RUNWAYS_NUMBER :
            self.invalid(start, pos, ErrorKind.INVALID_RVR_RUNWAY_NUMBER)
        side, end = self.optional(pos, lambda p : self.literal(p, "L", "C", "R"), "")
        return number + side, end

    def rvr_distance(self, pos: int) -> tuple[int, int] :
        run = self._digits_pattern.match(self._text, pos).end() - pos
        if run == 0 :
            self.fail(pos, ExpectedNext.digits())
        if run != 4 :
            self.invalid(pos, pos + run, ErrorKind.INVALID_RVR_DISTANCE)
        return int(self._text[pos:pos + 4]), pos + 4

    def rvr_reading(self, pos: int) -> tuple[RvrReading, int] :
        qualifier, pos = self.optional(pos, self.lookup(self.RVR_QUALIFIERS), RvrQualifier.EXACTLY)
        distance, end  = self.rvr_distance(pos)
        return RvrReading(qualifier, distance), end

    def rvr_upper(self, pos: int) -> tuple[RvrReading, int] :
        _, pos = self.literal(pos, "V")
        return self.rvr_reading(pos)

    def rvr_value(self, pos: int) -> tuple[Union[RvrSingle, RvrBetween], int] :
        lower, pos = self.rvr_reading(pos)
        upper, end = self.optional(pos, self.rvr_upper)
        if upper is None :
            return RvrSingle(lower), end
        return RvrBetween(lower, upper), end

    def runway_visual_range(self, pos: int) -> tuple[RunwayVisualRange, int] :
        '''
        Match Rnn[LCR]/value[FT][/trend]
        '''
        runway, pos = self.runway_number(pos)
        _, pos      = self.literal(pos, "/")
        value, pos  = self.data(pos, 4, self.rvr_value)
        unit, pos   = self.optional(pos, self.lookup(self.RVR_UNITS), RvrUnit.METRES)
        _, pos      = self.optional(pos, lambda p : self.literal(p, "/"))
        trend, end  = self.optional(pos, lambda p : self.data(p, 1, self.lookup(self.RVR_TRENDS)))
        return RunwayVisualRange(runway, value, unit, trend), end

    def cleared(self, pos: int) -> tuple[Cleared, int] :
        _, end = self.literal(pos, "CLRD")
        return Cleared.CLEARED, end

    def contamination_present(self, pos: int) -> tuple[ContaminationPresent, int] :
        deposits, pos = self.data(pos, 1, self.lookup(self.RUNWAY_DEPOSITS))
        coverage, pos = self.data(pos, 1, self.number(1))
        depth, end    = self.data(pos, 2, self.number(2))
        return ContaminationPresent(deposits, coverage, depth), end

    def runway_condition(self, pos: int) -> tuple[RunwayCondition, int] :
        runway, pos        = self.runway_number(pos)
        _, pos             = self.literal(pos, "/")
        contamination, pos = self.choice(pos, self.cleared, self.contamination_present)
        braking, end       = self.data(pos, 2, self.number(2))
        return RunwayCondition(runway, contamination, braking), end

    #-----------------------------------------------------------#
    # weather                                                   #
    #-----------------------------------------------------------#
    def weather_conditions(self, pos: int) -> tuple[tuple[WeatherCondition, ...], int] :
        return self.repeated(pos, self.lookup(self.WEATHER_CONDITIONS), minimum=1)

    def weather(self, pos: int) -> tuple[Weather, int] :
        '''
        Match an optional intensity prefix followed by one or more phenomenon codes
        '''
        intensity, pos  = self.optional(pos, self.lookup(self.WEATHER_INTENSITIES), WeatherIntensity.MODERATE)
        conditions, end = self.weather_conditions(pos)
        return Weather(intensity, conditions), end

    def weather_run(self, pos: int) -> tuple[tuple[Weather, ...], int] :
        return self.repeated(pos, self.weather, separated=True, minimum=1)

    def recent_weather(self, pos: int) -> tuple[Data, int] :
        _, pos = self.literal(pos, "RE")
        return self.data(pos, 2, self.weather_conditions)

    #-----------------------------------------------------------#
    # clouds                                                    #
    #-----------------------------------------------------------#
    def cloud_type(self, pos: int) -> tuple[CloudType, int] :
        return self.optional(pos, self.lookup(self.CLOUD_TYPES), CloudType.NORMAL)

    def cloud_layer(self, pos: int, known_only: bool=False) -> tuple[CloudLayer, int] :
        '''
        Match density, height (hundreds of feet) and type; each may be slashes
        '''
        density, pos = self.data(pos, 3, self.lookup(self.CLOUD_DENSITIES), known_only)
        height, pos  = self.data(pos, 3, self.number(3), known_only)
        kind, end    = self.data(pos, 3, self.cloud_type, known_only)
        return CloudLayer(density, kind, height), end

    def vertical_visibility(self, pos: int) -> tuple[VerticalVisibility, int] :
        _, pos      = self.literal(pos, "VV")
        height, end = self.data(pos, 3, self.number(3))
        return VerticalVisibility(height), end

    def compass_suffix(self, pos: int) -> tuple[CompassDirection, int] :
        _, pos = self.literal(pos, "/")
        return self.compass_direction(pos)

    def clouds_in_vicinity(self, pos: int) -> tuple[CloudsInVicinity, int] :
        kind, pos       = self.data(pos, 3, self.cloud_type)
        directions, end = self.repeated(pos, self.compass_suffix, minimum=1)
        return CloudsInVicinity(kind, directions), end

    def sky_clear(self, pos: int) -> tuple[tuple, int] :
        clouds, end = self.token(pos, self.lookup(self.SKY_CLEAR))
        return (Known(()), None, clouds, ()), end

    def cloud_block(self, pos: int) -> tuple[tuple, int] :
        '''
        Match the weather run, vertical visibility, sky cover keyword and cloud layers,
        all of which are optional
        '''
        weather, pos   = self.optional(pos, self.tokenized(lambda p : self.data(p, 2, self.weather_run)), Known(()))
        vert_vis, pos  = self.optional(pos, self.tokenized(self.vertical_visibility))
        sky_cover, pos = self.optional(pos, self.tokenized(self.lookup(self.SKY_COVER)))
        layers, end    = self.repeated(pos, self.tokenized(self.cloud_layer))
        if sky_cover :
            clouds = sky_cover
        elif layers :
            clouds = Clouds.CLOUD_LAYERS
        else :
            clouds = Clouds.NO_CLOUD_DETECTED
        return (weather, vert_vis, clouds, layers), end

    #-----------------------------------------------------------#
    # temperature, pressure and colour code                     #
    #-----------------------------------------------------------#
    def temperature(self, pos: int) -> tuple[int, int] :
        sign, pos  = self.optional(pos, lambda p : self.literal(p, "M"))
        value, end = self.number(2)(pos)
        return -value if sign else value, end

    def temperatures(self, pos: int) -> tuple[tuple[Data, Data], int] :
        '''
        Match temperature/dewpoint; the dewpoint may be left off after the slash
        '''
        temperature, pos = self.data(pos, 2, self.temperature)
        _, pos           = self.literal(pos, "/")
        dewpoint, end    = self.optional(pos, lambda p : self.data(p, 2, self.temperature), UNKNOWN)
        return (temperature, dewpoint), end

    def hectopascals(self, pos: int) -> tuple[Hectopascals, int] :
        _, pos     = self.literal(pos, "Q")
        value, end = self.data(pos, 4, self.number(4))
        return Hectopascals(value), end

    def inches_of_mercury(self, pos: int) -> tuple[InchesOfMercury, int] :
        _, pos     = self.literal(pos, "A")
        value, end = self.data(pos, 4, self.number(4))
        if value is not UNKNOWN :
            value = Known(value.value / 100)
        return InchesOfMercury(value), end

    def pressure(self, pos: int) -> tuple[Pressure, int] :
        return self.choice(pos, self.hectopascals, self.inches_of_mercury)

    def colour_code(self, pos: int) -> tuple[ColourCode, int] :
        return self.keyword(pos, self.COLOUR_CODES)

    #-----------------------------------------------------------#
    # windshear and sea condition                               #
    #-----------------------------------------------------------#
    def windshear_group(self, pos: int) -> tuple[str, int] :
        _, pos = self.literal(pos, "WS")
        pos    = self.whitespace(pos)
        return self.runway_number(pos)

    def all_runways(self, pos: int) -> tuple[AllRunways, int] :
        _, end = self.literal(pos, "WS ALL RWY")
        return AllRunways.ALL_RUNWAYS, end

    def specific_runways(self, pos: int) -> tuple[SpecificRunways, int] :
        runways, end = self.repeated(pos, self.windshear_group, separated=True, minimum=1)
        return SpecificRunways(runways), end

    def windshear(self, pos: int) -> tuple[Union[AllRunways, SpecificRunways], int] :
        return self.choice(pos, self.all_runways, self.specific_runways)

    def sea_state(self, pos: int) -> tuple[SeaStateReport, int] :
        _, pos     = self.literal(pos, "S")
        state, end = self.data(pos, 1, self.lookup(self.SEA_STATES))
        return SeaStateReport(state), end

    def wave_height(self, pos: int) -> tuple[WaveHeight, int] :
        _, pos      = self.literal(pos, "H")
        height, end = self.data(pos, 3, self.number(1, 3))
        return WaveHeight(height), end

    def sea_condition(self, pos: int) -> tuple[SeaCondition, int] :
        '''
        Match W followed by sea-surface temperature, a slash and either a state of the
        sea or a wave height
        '''
        _, pos           = self.literal(pos, "W")
        temperature, pos = self.data(pos, 2, self.temperature)
        _, pos           = self.literal(pos, "/")
        condition, end   = self.data(pos, 2, lambda p : self.choice(p, self.sea_state, self.wave_height))
        return SeaCondition(temperature, condition), end

    #-----------------------------------------------------------#
    # trends                                                    #
    #-----------------------------------------------------------#
    def trend_time(self, pos: int) -> tuple[TrendTime, int] :
        kind, pos  = self.keyword(pos, self.TREND_TIMES)
        time, end  = self.number(4)(pos)
        return TrendTime(kind, time), end

    def trend_weather(self, pos: int) -> tuple[tuple[Weather, ...], int] :
        try :
            _, end = self.literal(pos, "NSW")
            return (), end
        except MetarParser.Mismatch :
            pass
        return self.weather_run(pos)

    def trend_cloud_layers(self, pos: int) -> tuple[tuple[CloudLayer, ...], int] :
        return self.repeated(pos, partial(self.cloud_layer, known_only=True), separated=True, minimum=1)

    def trend_new_condition(self, pos: int) -> tuple[TrendNewCondition, int] :
        '''
        Match the partial report following BECMG or TEMPO. Each part is optional and
        is preceded by whitespace; none of them may be reported as slashes.
        '''
        time, pos         = self.spaced(pos, self.trend_time)
        wind, pos         = self.spaced(pos, partial(self.wind, known_only=True))
        visibility, pos   = self.spaced(pos, lambda p : self.known(p, 4, self.visibility))
        weather, pos      = self.spaced(pos, self.trend_weather, ())
        cloud_layers, end = self.spaced(pos, self.trend_cloud_layers, ())
        return TrendNewCondition(time, wind, visibility, weather, cloud_layers), end

    def becoming(self, pos: int) -> tuple[Becoming, int] :
        _, pos          = self.literal(pos, "BECMG")
        conditions, end = self.trend_new_condition(pos)
        return Becoming(conditions), end

    def temporarily(self, pos: int) -> tuple[Temporarily, int] :
        _, pos          = self.literal(pos, "TEMPO")
        conditions, end = self.trend_new_condition(pos)
        return Temporarily(conditions), end

    def trend(self, pos: int) -> tuple[Union[TrendSignal, Becoming, Temporarily], int] :
        return self.choice(pos, self.lookup(self.TREND_SIGNALS), self.becoming, self.temporarily)

    #-----------------------------------------------------------#
    # remarks and the whole report                              #
    #-----------------------------------------------------------#
    def remarks(self, pos: int) -> tuple[str, int] :
        '''
        Match RMK and take the rest of the report, up to any "=", as opaque text
        '''
        _, pos = self.literal(pos, "RMK")
        pos    = self.separator(pos)
        end    = self._text.find("=", pos)
        if end == -1 :
            end = self._length
        return self._text[pos:end].strip(), end

    def report(self) -> Report :
        '''
        Decode the whole text, raising MetarParser.Mismatch if it cannot be decoded
        '''
        pos = 0
        _, pos           = self.optional(pos, self.tokenized(self.report_type))
        kind, pos        = self.optional(pos, self.tokenized(self.method), Kind.NORMAL)
        station, pos     = self.token(pos, self.station)
        time, pos        = self.token(pos, self.observation_time)
        late_kind, pos   = self.optional(pos, self.tokenized(self.method))
        wind, pos        = self.optional(
            pos,
            self.tokenized(self.wind),
            WindPresent(Heading(UNKNOWN), WindSpeed(SpeedUnit.KNOTS, UNKNOWN)))
        visibility, pos  = self.optional(pos, self.tokenized(self.prevailing_visibility), UNKNOWN)
        directional, pos = self.repeated(pos, self.tokenized(self.directional_visibility))
        rvr, pos         = self.repeated(pos, self.tokenized(self.runway_visual_range))
        (weather, vert_visibility, clouds, cloud_layers), pos = self.choice(pos, self.sky_clear, self.cloud_block)
        (temperature, dewpoint), pos = self.optional(pos, self.tokenized(self.temperatures), (UNKNOWN, UNKNOWN))
        pressure, pos    = self.optional(pos, self.tokenized(self.pressure), Hectopascals(UNKNOWN))
        colour_code, pos = self.optional(pos, self.tokenized(self.colour_code))
        recent, pos      = self.repeated(pos, self.tokenized(self.recent_weather))
        windshear, pos   = self.optional(pos, self.tokenized(self.windshear))
        conditions, pos  = self.repeated(pos, self.tokenized(self.runway_condition))
        sea, pos         = self.optional(pos, self.tokenized(self.sea_condition))
        trends, pos      = self.repeated(pos, self.tokenized(self.trend))
        vicinity, pos    = self.repeated(pos, self.tokenized(self.clouds_in_vicinity))
        remarks, pos     = self.optional(pos, self.remarks)
        pos              = self.inline_whitespace(pos)
        _, pos           = self.optional(pos, lambda p : self.literal(p, "="))
        self.end_of_input(self.inline_whitespace(pos))
        #---------------------------------------------------------------#
        # weather groups prefixed with RE in the main weather run are   #
        # recent weather                                                #
        #---------------------------------------------------------------#
        if weather is not UNKNOWN and any(w.intensity == WeatherIntensity.RECENT for w in weather.value) :
            recent  = tuple(Known(w.conditions) for w in weather.value if w.intensity == WeatherIntensity.RECENT) + recent
            weather = Known(tuple(w for w in weather.value if w.intensity != WeatherIntensity.RECENT))
        if kind == Kind.NORMAL and late_kind :
            kind = late_kind
        return Report(
            station                        = station,
            time                           = time,
            kind                           = kind,
            wind                           = wind,
            visibility                     = visibility,
            reduced_directional_visibility = directional,
            rvr                            = rvr,
            clouds                         = clouds,
            cloud_layers                   = cloud_layers,
            vert_visibility                = vert_visibility,
            weather                        = weather,
            temperature                    = temperature,
            dewpoint                       = dewpoint,
            pressure                       = pressure,
            colour_code                    = colour_code,
            recent_weather                 = recent,
            windshear_warnings             = windshear,
            runway_conditions              = conditions,
            sea_condition                  = sea,
            trends                         = trends,
            clouds_in_vicinity             = vicinity,
            remarks                        = remarks)

    def parse(self) -> Union[Report, list[MetarError]] :
        '''
        Decode the text, returning either the report or a non-empty list of diagnostics
        '''
        try :
            report = self.report()
        except MetarParser.Mismatch :
            if self._error is None :
                self.expected(0, ExpectedNext.description("a METAR report"))
            logger.debug(f"Could not decode [{self._text}]: {self._error.message}")
            return [self._error]
        logger.debug(f"Decoded report for station {report.station}")
        return report

def parse(text: Union[str, bytes]) -> Union[Report, list[MetarError]] :
    '''
    Decode one report, returning the Report or a non-empty list of MetarError diagnostics
    '''
    return MetarParser(text).parse()

def decode(text: Union[str, bytes]) -> Report :
    '''
    Decode one report, raising MetarParser.ParseException (carrying the owned diagnostics)
    if it cannot be decoded
    '''
    result = parse(text)
    if isinstance(result, Report) :
        return result
    errors = tuple(e.into_owned() for e in result)
    raise MetarParser.ParseException(errors[0].message, errors)

#---------------------------------------------------------------------#
# output formatting                                                   #
#---------------------------------------------------------------------#
def describe(value: Any) -> str :
    '''
    Get a compact readable description of a value held by a Report
    '''
    if value is None :
        return "-"
    if value is UNKNOWN :
        return "unknown"
    if isinstance(value, Known) :
        return describe(value.value)
    if isinstance(value, Enum) :
        return value.name.lower().replace("_", " ")
    if isinstance(value, (tuple, list)) :
        return "[" + ", ".join(describe(item) for item in value) + "]"
    if is_dataclass(value) :
        parts = [f"{f.name}={describe(getattr(value, f.name))}" for f in fields(value)]
        return f"{value.__class__.__name__}({', '.join(parts)})"
    return str(value)

def format_report(report: Report) -> str :
    '''
    Format a Report as one "name : value" line per field
    '''
    return "\n".join(f"{f.name.ljust(30)} : {describe(getattr(report, f.name))}" for f in fields(report))

def format_errors(errors: list[MetarError]) -> str :
    return "\n".join(e.render() for e in errors)

def errors_to_dict(text: str, errors: list[MetarError]) -> dict[str, Any] :
    return {
        "report" : text,
        "errors" : [{"message" : e.message, "help" : e.help, "start" : e.start, "end" : e.end} for e in errors]}

#---------------------------------------------------------------------#
# command line driver                                                 #
#---------------------------------------------------------------------#
def process(
        input_name: Optional[str]=None,
        output_name: Optional[str]=None,
        append_output: bool=False,
        log_name: Optional[str]=None,
        log_level: str="INFO",
        append_log: bool=False,
        log_timestamps: bool=False,
        output_format: str="text",) -> int :
    '''
    Decode one report per line of input and write the decoded reports or their diagnostics

        input_name      : Name of input file. Use None or "" for <stdin>
        output_name     : Name of output file. Use None or "" for <stdout>
        append_output   : Whether to append to existing output if outputting to a file
        log_name        : Name of log file. Use None or "" for <stderr>
        log_level       : "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL" or "ALL"
        append_log      : Whether to append to existing log if logging to a file
        log_timestamps  : Whether to timestamp log records
        output_format   : "text" for readable output or "json" for one JSON document per line

    Returns the number of lines that could not be decoded
    '''
    global logger
    start_time = datetime.now()
    #-------------------#
    # set up the logger #
    #-------------------#
    datefmt = "%Y-%m-%d %H:%M:%S"
    if log_timestamps :
        format  = "%(asctime)s %(levelname)s: %(msg)s"
    else :
        format  = "%(levelname)s: %(msg)s"
    level  = {
        "DEBUG"    : logging.DEBUG,
        "INFO"     : logging.INFO,
        "WARNING"  : logging.WARNING,
        "ERROR"    : logging.ERROR,
        "CRITICAL" : logging.CRITICAL,
        "ALL"      : logging.NOTSET}[log_level]
    if log_name :
        if os.path.exists(log_name) :
            if not os.path.isfile(log_name) :
                raise MetarParser.OutputException(f"{log_name} is not a regular file")
            if not append_log :
                os.remove(log_name)
        logging.basicConfig(filename=log_name, format=format, datefmt=datefmt, level=level)
        logfile_name = log_name
    else :
        logging.basicConfig(stream=sys.stderr, format=format, datefmt=datefmt, level=level)
        logfile_name = "<stderr>"
    logger = logging.getLogger(progname)
    #------------------#
    # log startup info #
    #------------------#
    infile_name  = input_name or "<stdin>"
    outfile_name = output_name or "<stdout>"
    logger.info("----------------------------------------------------------------------")
    logger.info(f"Program {progname} version {version} ({version_date}) starting up")
    logger.info("----------------------------------------------------------------------")
    logger.debug(f"Input file set to {infile_name}")
    logger.debug(f"Output file set to {outfile_name}")
    logger.debug(f"Log file set to {logfile_name}")
    logger.debug(f"Log level set to {log_level}")
    logger.debug(f"Output format set to {output_format}")
    #---------------------------------#
    # open the input and output files #
    #---------------------------------#
    line_count   = 0
    report_count = 0
    failed_count = 0
    with ExitStack() as stack :
        try :
            infile: BinaryIO = stack.enter_context(open(input_name, "rb")) if input_name else sys.stdin.buffer
        except OSError as e :
            raise MetarParser.InputException(f"Cannot open {input_name}: {e}")
        try :
            outfile: TextIO = stack.enter_context(open(output_name, "a" if append_output else "w")) if output_name else sys.stdout
        except OSError as e :
            raise MetarParser.OutputException(f"Cannot open {output_name}: {e}")
        #----------------------------------------#
        # decode each line and write the results #
        #----------------------------------------#
        for line in infile :
            line_count += 1
            raw = line.strip()
            if not raw :
                continue
            report_count += 1
            try :
                parser = MetarParser(raw)
            except MetarParser.Exc as e :
                failed_count += 1
                logger.error(f"Line {line_count}: {exc_info(e)}")
                continue
            text   = parser.text
            result = parser.parse()
            if isinstance(result, Report) :
                logger.debug(f"Line {line_count}: decoded report for {result.station}")
                if output_format == "json" :
                    outfile.write(result.to_json() + "\n")
                else :
                    outfile.write(f"{text}\n{format_report(result)}\n\n")
            else :
                failed_count += 1
                logger.warning(f"Line {line_count}: {result[0].message}")
                if output_format == "json" :
                    outfile.write(json.dumps(errors_to_dict(text, result)) + "\n")
                else :
                    outfile.write(f"{text}\n{format_errors(result)}\n\n")
    #-------------------#
    # clean up and exit #
    #-------------------#
    logger.info("")
    logger.info("--[Summary]-----------------------------------------------------------")
    logger.info(f"Program    = {progname} version {version} ({version_date})")
    logger.info(f"Start Time = {str(start_time)[:-7]}")
    logger.info(f"Run Time   = {str(datetime.now() - start_time)[:-3]}")
    logger.info(f"{line_count:6d} lines read from {infile_name}")
    logger.info(f"{report_count - failed_count:6d} reports decoded to {outfile_name}")
    logger.info(f"{failed_count:6d} reports could not be decoded")
    return failed_count

def check(filenames: tuple[str, ...], show_errors: bool=False, output: Optional[TextIO]=None) -> int :
    '''
    Write only the lines of the given files that cannot be decoded, optionally each
    followed by its diagnostics. Returns the number of failing lines.
    '''
    output = output or sys.stdout
    failed_count = 0
    for filename in filenames :
        with open(filename) as f :
            for line in f :
                text = line.strip()
                if not text :
                    continue
                result = parse(text)
                if isinstance(result, Report) :
                    continue
                failed_count += 1
                output.write(f"{text}\n")
                if show_errors :
                    output.write(f"{format_errors(result)}\n")
    return failed_count

def repl(input: Optional[TextIO]=None, output: Optional[TextIO]=None) -> None :
    '''
    Prompt for reports and decode them until "exit" or end of input
    '''
    input  = input or sys.stdin
    output = output or sys.stdout
    while True :
        output.write("METAR> ")
        output.flush()
        line = input.readline()
        if not line :
            break
        text = line.strip()
        if text.lower() == "exit" :
            break
        if not text :
            continue
        result = parse(text)
        if isinstance(result, Report) :
            output.write(format_report(result) + "\n")
        else :
            output.write(format_errors(result) + "\n")

#---------------------------------------------------------------------#
# click command line interface                                        #
#---------------------------------------------------------------------#
@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None :
    '''
    Decode METAR/SPECI aviation weather reports
    '''
    if ctx.invoked_subcommand is None :
        process()

@cli.command("parse")
@click.option("-i", "--in", "input_name", metavar="input_filename", help="input file (defaults to <stdin>)")
@click.option("-o", "--out", "output_name", metavar="output_filename", help="output file (defaults to <stdout>)")
@click.option("-l", "--log", "log_name", metavar="log_filename", help="log file (defaults to <stderr>)")
@click.option("-f", "--format", "output_format", type=click.Choice(["text", "json"]), default="text", show_default=True, help="output format")
@click.option("-v", "--loglevel", "log_level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "ALL"]), default="INFO", show_default=True, help="verbosity/logging level")
@click.option("--timestamps", "log_timestamps", is_flag=True, help="timestamp log output")
@click.option("--append_out", "append_output", is_flag=True, help="append to output file instead of overwriting")
@click.option("--append_log", "append_log", is_flag=True, help="append to log file instead of overwriting")
@click.option("--version", "show_version", is_flag=True, help="show the package version and exit")
def parse_command(show_version: bool, **kwargs: Any) -> None :
    '''
    Decode one report per input line
    '''
    if show_version :
        click.echo(f"Package metar-parser, program {progname} version {version} ({version_date})")
        return
    process(**kwargs)

@cli.command("check")
@click.argument("filenames", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--errors", "show_errors", is_flag=True, envvar="METAR_OUTPUT_ERRORS", help="also print the diagnostics for each failing line")
def check_command(filenames: tuple[str, ...], show_errors: bool) -> None :
    '''
    Print only the reports in FILENAMES that cannot be decoded
    '''
    failed_count = check(filenames, show_errors)
    if failed_count :
        sys.exit(1)

@cli.command("repl")
def repl_command() -> None :
    '''
    Decode reports typed at a prompt; enter "exit" to stop
    '''
    repl()

def main() -> None :
    '''
    Driver routine
    '''
    cli()

if __name__ == "__main__" :
    main()
