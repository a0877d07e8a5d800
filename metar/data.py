"""
Typed records produced by decoding METAR/SPECI reports.

Every record is a frozen dataclass, so a decoded `Report` cannot be modified
after it is produced. Fields that a report may carry as "reported but not
measured" (slash-padding) are wrapped in `Known` or set to `UNKNOWN`.
"""

import json
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Optional, Union


class Unknown(Enum):
    """Marker for a field that was reported with slashes instead of a value."""

    UNKNOWN = "Unknown"

    def __repr__(self) -> str:
        return "UNKNOWN"

    @property
    def is_known(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ValueError("cannot unwrap data that was reported as unknown")

    def value_or(self, default: Any) -> Any:
        return default


UNKNOWN = Unknown.UNKNOWN


@dataclass(frozen=True)
class Known:
    """A field whose value was reported."""

    value: Any

    @property
    def is_known(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value

    def value_or(self, default: Any) -> Any:
        return self.value


Data = Union[Known, Unknown]


#------------------------------------------------------------------------------#
# Time and report kind                                                         #
#------------------------------------------------------------------------------#
@dataclass(frozen=True)
class Time:
    """Observation time (UTC); no month or leap-year awareness."""

    date: int
    hour: int
    minute: int


class Kind(Enum):
    NORMAL = ""
    AUTOMATIC = "AUTO"
    CORRECTION = "COR"


#------------------------------------------------------------------------------#
# Wind                                                                         #
#------------------------------------------------------------------------------#
class Calm(Enum):
    CALM = "CALM"


class Variable(Enum):
    VARIABLE = "VRB"


@dataclass(frozen=True)
class Heading:
    """Wind heading in degrees, 0 to 360 inclusive when known."""

    degrees: Data


WindDirection = Union[Heading, Variable]


class SpeedUnit(Enum):
    KNOTS = "KT"
    METRES_PER_SECOND = "MPS"
    KILOMETRES_PER_HOUR = "KPH"


class AboveMaximum(Enum):
    """A 'greater than' speed such as P99KT, which carries no usable number."""

    ABOVE_MAXIMUM = "P"


@dataclass(frozen=True)
class WindSpeed:
    """
    Wind speed in one unit. `speed` and `gusting` hold either an int or
    `AboveMaximum.ABOVE_MAXIMUM` when known.
    """

    unit: SpeedUnit
    speed: Data
    gusting: Optional[Data] = None


@dataclass(frozen=True)
class WindPresent:
    dir: WindDirection
    speed: WindSpeed
    varying: Optional[tuple[Data, Data]] = None


Wind = Union[Calm, WindPresent]


#------------------------------------------------------------------------------#
# Visibility                                                                   #
#------------------------------------------------------------------------------#
class Cavok(Enum):
    CAVOK = "CAVOK"


@dataclass(frozen=True)
class Metres:
    distance: int


@dataclass(frozen=True)
class StatuteMiles:
    distance: float


Visibility = Union[Cavok, Metres, StatuteMiles]


class CompassDirection(Enum):
    NORTH = "N"
    NORTH_EAST = "NE"
    EAST = "E"
    SOUTH_EAST = "SE"
    SOUTH = "S"
    SOUTH_WEST = "SW"
    WEST = "W"
    NORTH_WEST = "NW"


@dataclass(frozen=True)
class DirectionalVisibility:
    """A reduced visibility towards one octant; `direction` is None for NDV."""

    direction: Optional[CompassDirection]
    visibility: Data


#------------------------------------------------------------------------------#
# Runway visual range                                                          #
#------------------------------------------------------------------------------#
class RvrQualifier(Enum):
    EXACTLY = ""
    GREATER_THAN = "P"
    LESS_THAN = "M"


@dataclass(frozen=True)
class RvrReading:
    qualifier: RvrQualifier
    distance: int


@dataclass(frozen=True)
class RvrSingle:
    reading: RvrReading


@dataclass(frozen=True)
class RvrBetween:
    lower: RvrReading
    upper: RvrReading


RvrValue = Union[RvrSingle, RvrBetween]


class RvrUnit(Enum):
    METRES = ""
    FEET = "FT"


class RvrTrend(Enum):
    UPWARDS = "U"
    DOWNWARDS = "D"
    NO_CHANGE = "N"


@dataclass(frozen=True)
class RunwayVisualRange:
    """
    Runway visual range for one runway. `trend` is `None` when no trend was
    reported, and `Known(RvrTrend)` or `UNKNOWN` when it was.
    """

    runway: str
    value: Data
    unit: RvrUnit
    trend: Optional[Data] = None


#------------------------------------------------------------------------------#
# Clouds                                                                       #
#------------------------------------------------------------------------------#
class Clouds(Enum):
    NO_CLOUD_DETECTED = "NCD"
    NO_SIGNIFICANT_CLOUD = "NSC"
    CLOUD_LAYERS = "LAYERS"


class CloudDensity(Enum):
    FEW = "FEW"
    SCATTERED = "SCT"
    BROKEN = "BKN"
    OVERCAST = "OVC"


class CloudType(Enum):
    NORMAL = ""
    CUMULONIMBUS = "CB"
    TOWERING_CUMULUS = "TCU"


@dataclass(frozen=True)
class CloudLayer:
    """One cloud layer; the height is in hundreds of feet."""

    density: Data
    kind: Data
    height: Data

    @property
    def height_feet(self) -> Optional[int]:
        if self.height is UNKNOWN:
            return None
        return self.height.value * 100


@dataclass(frozen=True)
class VerticalVisibility:
    """Vertical visibility in hundreds of feet; UNKNOWN for VV///."""

    height: Data


@dataclass(frozen=True)
class CloudsInVicinity:
    kind: Data
    directions: tuple[CompassDirection, ...]


#------------------------------------------------------------------------------#
# Weather                                                                      #
#------------------------------------------------------------------------------#
class WeatherIntensity(Enum):
    LIGHT = "-"
    MODERATE = ""
    HEAVY = "+"
    IN_VICINITY = "VC"
    RECENT = "RE"


class WeatherCondition(Enum):
    # descriptors
    SHALLOW = "MI"
    PARTIAL = "PR"
    PATCHES = "BC"
    LOW_DRIFTING = "DR"
    BLOWING = "BL"
    SHOWERS = "SH"
    THUNDERSTORM = "TS"
    FREEZING = "FZ"
    # precipitation
    RAIN = "RA"
    DRIZZLE = "DZ"
    SNOW = "SN"
    SNOW_GRAINS = "SG"
    ICE_CRYSTALS = "IC"
    ICE_PELLETS = "PL"
    HAIL = "GR"
    SNOW_PELLETS_OR_SMALL_HAIL = "GS"
    UNKNOWN_PRECIPITATION = "UP"
    # obscuration
    FOG = "FG"
    VOLCANIC_ASH = "VA"
    MIST = "BR"
    HAZE = "HZ"
    WIDESPREAD_DUST = "DU"
    SMOKE = "FU"
    SAND = "SA"
    SPRAY = "PY"
    # other
    SQUALL = "SQ"
    DUST_OR_SAND_WHIRLS = "PO"
    DUSTSTORM = "DS"
    SANDSTORM = "SS"
    FUNNEL_CLOUD = "FC"


@dataclass(frozen=True)
class Weather:
    intensity: WeatherIntensity
    conditions: tuple[WeatherCondition, ...]


#------------------------------------------------------------------------------#
# Pressure and colour code                                                     #
#------------------------------------------------------------------------------#
@dataclass(frozen=True)
class Hectopascals:
    value: Data


@dataclass(frozen=True)
class InchesOfMercury:
    value: Data


Pressure = Union[Hectopascals, InchesOfMercury]


class ColourCode(Enum):
    BLUE = "BLU"
    WHITE = "WHT"
    GREEN = "GRN"
    YELLOW = "YLO"
    AMBER = "AMB"
    RED = "RED"


#------------------------------------------------------------------------------#
# Windshear, runway and sea conditions                                         #
#------------------------------------------------------------------------------#
class AllRunways(Enum):
    ALL_RUNWAYS = "ALL RWY"


@dataclass(frozen=True)
class SpecificRunways:
    runways: tuple[str, ...]


WindshearWarnings = Union[AllRunways, SpecificRunways]


class RunwayDeposits(Enum):
    CLEAR_AND_DRY = "0"
    DAMP = "1"
    WET_OR_WATER_PATCHES = "2"
    RIME_OR_FROST_COVERED = "3"
    DRY_SNOW = "4"
    WET_SNOW = "5"
    SLUSH = "6"
    ICE = "7"
    COMPACTED_OR_ROLLED_SNOW = "8"
    FROZEN_RUTS_OR_RIDGES = "9"


class Cleared(Enum):
    CLEARED = "CLRD"


@dataclass(frozen=True)
class ContaminationPresent:
    deposits: Data
    coverage: Data
    depth: Data


RunwayContamination = Union[Cleared, ContaminationPresent]


@dataclass(frozen=True)
class RunwayCondition:
    runway: str
    contamination: RunwayContamination
    braking_action: Data


class SeaState(Enum):
    CALM_GLASSY = "0"
    CALM_RIPPLED = "1"
    SMOOTH = "2"
    SLIGHT = "3"
    MODERATE = "4"
    ROUGH = "5"
    VERY_ROUGH = "6"
    HIGH = "7"
    VERY_HIGH = "8"
    PHENOMENAL = "9"


@dataclass(frozen=True)
class SeaStateReport:
    state: Data


@dataclass(frozen=True)
class WaveHeight:
    """Significant wave height in decimetres."""

    decimetres: Data


SeaConditionValue = Union[SeaStateReport, WaveHeight]


@dataclass(frozen=True)
class SeaCondition:
    temperature: Data
    condition: Data


#------------------------------------------------------------------------------#
# Trends                                                                       #
#------------------------------------------------------------------------------#
class TrendSignal(Enum):
    NO_SIGNIFICANT_CHANGES = "NOSIG"
    NO_SIGNIFICANT_WEATHER = "NSW"


class TrendTimeKind(Enum):
    FROM = "FM"
    UNTIL = "TL"
    AT = "AT"


@dataclass(frozen=True)
class TrendTime:
    kind: TrendTimeKind
    time: int


@dataclass(frozen=True)
class TrendNewCondition:
    """
    The partial report carried by a BECMG or TEMPO trend. An empty `weather`
    tuple means either no weather group or NSW.
    """

    time: Optional[TrendTime] = None
    wind: Optional[Wind] = None
    visibility: Optional[Visibility] = None
    weather: tuple[Weather, ...] = ()
    cloud_layers: tuple[CloudLayer, ...] = ()


@dataclass(frozen=True)
class Becoming:
    conditions: TrendNewCondition


@dataclass(frozen=True)
class Temporarily:
    conditions: TrendNewCondition


Trend = Union[TrendSignal, Becoming, Temporarily]


#------------------------------------------------------------------------------#
# The report                                                                   #
#------------------------------------------------------------------------------#
@dataclass(frozen=True)
class Report:
    """A decoded METAR/SPECI report."""

    station: str
    time: Time
    kind: Kind
    wind: Wind
    visibility: Data
    reduced_directional_visibility: tuple[DirectionalVisibility, ...]
    rvr: tuple[RunwayVisualRange, ...]
    clouds: Clouds
    cloud_layers: tuple[CloudLayer, ...]
    vert_visibility: Optional[VerticalVisibility]
    weather: Data
    temperature: Data
    dewpoint: Data
    pressure: Pressure
    colour_code: Optional[ColourCode] = None
    recent_weather: tuple[Data, ...] = ()
    windshear_warnings: Optional[WindshearWarnings] = None
    runway_conditions: tuple[RunwayCondition, ...] = ()
    sea_condition: Optional[SeaCondition] = None
    trends: tuple[Trend, ...] = ()
    clouds_in_vicinity: tuple[CloudsInVicinity, ...] = ()
    remarks: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the report into plain values suitable for `json.dumps`

        Returns:
            dict[str, Any]: the report; Unknown data appears as "Unknown"
        """
        return to_dict(self)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def to_dict(value: Any) -> Any:
    """
    Recursively convert records, enums and data wrappers into JSON-compatible
    values. Dataclass variants of a tagged union carry a "type" key.

    Args:
        value (Any): any object held by a `Report`

    Returns:
        Any: dicts, lists, strings, numbers or None
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if value is UNKNOWN:
        return UNKNOWN.value
    if isinstance(value, Known):
        return to_dict(value.value)
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (tuple, list)):
        return [to_dict(item) for item in value]
    if is_dataclass(value):
        result: dict[str, Any] = {}
        if not isinstance(value, Report):
            result["type"] = value.__class__.__name__
        for field in fields(value):
            result[field.name] = to_dict(getattr(value, field.name))
        return result
    raise TypeError(f"Cannot convert {value.__class__.__name__} to a plain value")
