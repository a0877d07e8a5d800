import itertools

import pytest

from metar.data import (
    UNKNOWN,
    AboveMaximum,
    AllRunways,
    Becoming,
    Calm,
    Cavok,
    Cleared,
    CloudDensity,
    CloudLayer,
    CloudsInVicinity,
    CloudType,
    ColourCode,
    CompassDirection,
    ContaminationPresent,
    DirectionalVisibility,
    Heading,
    Hectopascals,
    InchesOfMercury,
    Known,
    Metres,
    RunwayCondition,
    RunwayDeposits,
    RunwayVisualRange,
    RvrBetween,
    RvrQualifier,
    RvrReading,
    RvrSingle,
    RvrTrend,
    RvrUnit,
    SeaCondition,
    SeaState,
    SeaStateReport,
    SpecificRunways,
    SpeedUnit,
    StatuteMiles,
    Temporarily,
    Time,
    TrendNewCondition,
    TrendSignal,
    TrendTime,
    TrendTimeKind,
    Variable,
    VerticalVisibility,
    WaveHeight,
    Weather,
    WeatherCondition,
    WeatherIntensity,
    WindPresent,
    WindSpeed,
)
from metar.errors import ErrorKind, ExpectedFound
from metar.metar_parser import MetarParser


def match(grammar_name, text, **kwargs):
    parser = MetarParser(text)
    return getattr(parser, grammar_name)(0, **kwargs)


def mismatch(grammar_name, text, **kwargs):
    parser = MetarParser(text)
    with pytest.raises(MetarParser.Mismatch):
        getattr(parser, grammar_name)(0, **kwargs)
    return parser.error


# ----------------------------------------------------------------------------- #
# time                                                                          #
# ----------------------------------------------------------------------------- #
def test_observation_time():
    assert match("observation_time", "282120Z") == (Time(28, 21, 20), 7)


@pytest.mark.parametrize("date, hour, minute", list(itertools.product((0, 31), (0, 23), (0, 59))))
def test_observation_time_accepts_range_limits(date, hour, minute):
    text = f"{date:02d}{hour:02d}{minute:02d}Z"
    assert match("observation_time", text) == (Time(date, hour, minute), 7)


@pytest.mark.parametrize("text", ["METAR", "SPECI"])
def test_report_type(text):
    assert match("report_type", text) == (text, 5)


def test_report_type_lists_both_keywords():
    error = mismatch("report_type", "TAF")
    assert [str(e) for e in error.variant.expected] == ['"METAR"', '"SPECI"']


@pytest.mark.parametrize(
    "text, kind, start, end",
    [
        ("322120Z", ErrorKind.INVALID_DATE, 0, 2),
        ("282420Z", ErrorKind.INVALID_HOUR, 2, 4),
        ("282160Z", ErrorKind.INVALID_MINUTE, 4, 6),
    ],
)
def test_observation_time_out_of_range(text, kind, start, end):
    error = mismatch("observation_time", text)
    assert error.variant == kind
    assert (error.start, error.end) == (start, end)


def test_observation_time_requires_zulu_suffix():
    error = mismatch("observation_time", "282120 ")
    assert isinstance(error.variant, ExpectedFound)
    assert error.start == 6


# ----------------------------------------------------------------------------- #
# wind                                                                          #
# ----------------------------------------------------------------------------- #
def test_wind_with_gust():
    wind, end = match("wind", "22017G28KT")
    assert end == 10
    assert wind == WindPresent(Heading(Known(220)), WindSpeed(SpeedUnit.KNOTS, Known(17), Known(28)))


def test_wind_with_variation():
    wind, end = match("wind", "19015KT 140V220")
    assert end == 15
    assert wind.dir == Heading(Known(190))
    assert wind.speed == WindSpeed(SpeedUnit.KNOTS, Known(15))
    assert wind.varying == (Known(140), Known(220))


def test_wind_variation_is_not_taken_from_a_visibility_group():
    wind, end = match("wind", "19015KT 0800")
    assert end == 7
    assert wind.varying is None


def test_variable_wind_in_metres_per_second():
    wind, _ = match("wind", "VRB03MPS")
    assert wind == WindPresent(Variable.VARIABLE, WindSpeed(SpeedUnit.METRES_PER_SECOND, Known(3)))


def test_calm_wind():
    assert match("wind", "CALM") == (Calm.CALM, 4)


def test_wind_above_maximum_speed():
    wind, _ = match("wind", "280P99KT")
    assert wind.speed.speed == Known(AboveMaximum.ABOVE_MAXIMUM)


def test_wind_unknown():
    wind, end = match("wind", "/////KT")
    assert end == 7
    assert wind == WindPresent(Heading(UNKNOWN), WindSpeed(SpeedUnit.KNOTS, UNKNOWN))


@pytest.mark.parametrize(
    "text, expected, end",
    [
        ("19015G//KT", WindPresent(Heading(Known(190)), WindSpeed(SpeedUnit.KNOTS, Known(15), UNKNOWN)), 10),
        (
            "/////KT ///V///",
            WindPresent(Heading(UNKNOWN), WindSpeed(SpeedUnit.KNOTS, UNKNOWN), (UNKNOWN, UNKNOWN)),
            15,
        ),
    ],
)
def test_wind_gust_and_variation_unknown(text, expected, end):
    assert match("wind", text) == (expected, end)


def test_wind_heading_of_360_is_accepted():
    wind, _ = match("wind", "36015KT")
    assert wind.dir == Heading(Known(360))


def test_wind_heading_above_360_is_rejected():
    error = mismatch("wind", "37015KT")
    assert error.variant == ErrorKind.INVALID_WIND_HEADING
    assert (error.start, error.end) == (0, 3)


def test_wind_cannot_be_unknown_in_a_trend():
    error = mismatch("wind", "/////KT", known_only=True)
    assert error.variant == ErrorKind.TREND_DATA_CANNOT_BE_UNKNOWN


# ----------------------------------------------------------------------------- #
# visibility                                                                    #
# ----------------------------------------------------------------------------- #
@pytest.mark.parametrize(
    "text, expected, end",
    [
        ("9999", Known(Metres(9999)), 4),
        ("0500", Known(Metres(500)), 4),
        ("10SM", Known(StatuteMiles(10.0)), 4),
        ("1/2SM", Known(StatuteMiles(0.5)), 5),
        ("1 1/2SM", Known(StatuteMiles(1.5)), 7),
        ("CAVOK", Known(Cavok.CAVOK), 5),
        ("9999NDV", Known(Metres(9999)), 7),
        ("////", UNKNOWN, 4),
    ],
)
def test_prevailing_visibility(text, expected, end):
    assert match("prevailing_visibility", text) == (expected, end)


def test_zero_denominator_is_not_a_fraction():
    error = mismatch("statute_miles_fraction", "1/0SM")
    assert "a non-zero denominator" in error.message


def test_directional_visibility():
    assert match("directional_visibility", "2000SW") == (
        DirectionalVisibility(CompassDirection.SOUTH_WEST, Known(Metres(2000))),
        6,
    )
    assert match("directional_visibility", "1500N") == (
        DirectionalVisibility(CompassDirection.NORTH, Known(Metres(1500))),
        5,
    )


# ----------------------------------------------------------------------------- #
# runway visual range and runway condition                                      #
# ----------------------------------------------------------------------------- #
def test_rvr_single_with_trend():
    rvr, end = match("runway_visual_range", "R24/P1500N")
    assert end == 10
    assert rvr == RunwayVisualRange(
        "24",
        Known(RvrSingle(RvrReading(RvrQualifier.GREATER_THAN, 1500))),
        RvrUnit.METRES,
        Known(RvrTrend.NO_CHANGE),
    )


def test_rvr_between_in_feet():
    rvr, end = match("runway_visual_range", "R06L/0600V1200FT/U")
    assert end == 18
    assert rvr.runway == "06L"
    assert rvr.value == Known(
        RvrBetween(RvrReading(RvrQualifier.EXACTLY, 600), RvrReading(RvrQualifier.EXACTLY, 1200))
    )
    assert rvr.unit == RvrUnit.FEET
    assert rvr.trend == Known(RvrTrend.UPWARDS)


def test_rvr_without_trend():
    rvr, _ = match("runway_visual_range", "R20/1000")
    assert rvr.trend is None


@pytest.mark.parametrize(
    "text, expected, end",
    [
        ("R24/////", RunwayVisualRange("24", UNKNOWN, RvrUnit.METRES), 8),
        (
            "R24/1000//",
            RunwayVisualRange(
                "24", Known(RvrSingle(RvrReading(RvrQualifier.EXACTLY, 1000))), RvrUnit.METRES, UNKNOWN
            ),
            10,
        ),
    ],
)
def test_rvr_unknown(text, expected, end):
    assert match("runway_visual_range", text) == (expected, end)


@pytest.mark.parametrize("text, runway", [("R24/1000", "24"), ("R06L/1000", "06L"), ("R18C/1000", "18C"), ("R36R/1000", "36R")])
def test_rvr_runway_side(text, runway):
    rvr, end = match("runway_visual_range", text)
    assert rvr.runway == runway
    assert end == len(text)


def test_rvr_all_runways_number():
    rvr, _ = match("runway_visual_range", "R88/M0050")
    assert rvr.runway == "88"
    assert rvr.value == Known(RvrSingle(RvrReading(RvrQualifier.LESS_THAN, 50)))


def test_rvr_distance_must_have_four_digits():
    error = mismatch("runway_visual_range", "R24/100")
    assert error.variant == ErrorKind.INVALID_RVR_DISTANCE
    assert (error.start, error.end) == (4, 7)


def test_rvr_runway_number_out_of_range():
    error = mismatch("runway_visual_range", "R37/1000")
    assert error.variant == ErrorKind.INVALID_RVR_RUNWAY_NUMBER
    assert (error.start, error.end) == (1, 3)


def test_runway_condition_cleared():
    assert match("runway_condition", "R32L/CLRD60") == (
        RunwayCondition("32L", Cleared.CLEARED, Known(60)),
        11,
    )


def test_runway_condition_contamination():
    condition, _ = match("runway_condition", "R24/290155")
    assert condition == RunwayCondition(
        "24",
        ContaminationPresent(Known(RunwayDeposits.WET_OR_WATER_PATCHES), Known(9), Known(1)),
        Known(55),
    )


@pytest.mark.parametrize(
    "text, expected, end",
    [
        ("R24///////", RunwayCondition("24", ContaminationPresent(UNKNOWN, UNKNOWN, UNKNOWN), UNKNOWN), 10),
        (
            "R24/2///55",
            RunwayCondition("24", ContaminationPresent(Known(RunwayDeposits.WET_OR_WATER_PATCHES), UNKNOWN, UNKNOWN), Known(55)),
            10,
        ),
    ],
)
def test_runway_condition_unknown(text, expected, end):
    assert match("runway_condition", text) == (expected, end)


# ----------------------------------------------------------------------------- #
# weather and clouds                                                            #
# ----------------------------------------------------------------------------- #
@pytest.mark.parametrize(
    "text, expected",
    [
        ("-RADZ", Weather(WeatherIntensity.LIGHT, (WeatherCondition.RAIN, WeatherCondition.DRIZZLE))),
        ("+TSRA", Weather(WeatherIntensity.HEAVY, (WeatherCondition.THUNDERSTORM, WeatherCondition.RAIN))),
        ("VCSH", Weather(WeatherIntensity.IN_VICINITY, (WeatherCondition.SHOWERS,))),
        ("BR", Weather(WeatherIntensity.MODERATE, (WeatherCondition.MIST,))),
        ("FZFG", Weather(WeatherIntensity.MODERATE, (WeatherCondition.FREEZING, WeatherCondition.FOG))),
    ],
)
def test_weather(text, expected):
    assert match("weather", text) == (expected, len(text))


def test_weather_run():
    run, end = match("weather_run", "-RADZ BR BKN004")
    assert end == 8
    assert [w.intensity for w in run] == [WeatherIntensity.LIGHT, WeatherIntensity.MODERATE]


def test_recent_weather():
    assert match("recent_weather", "RESHRA") == (
        Known((WeatherCondition.SHOWERS, WeatherCondition.RAIN)),
        6,
    )


def test_recent_weather_unknown():
    assert match("recent_weather", "RE//") == (UNKNOWN, 4)


def test_cloud_layer_with_type():
    layer, _ = match("cloud_layer", "FEW025TCU")
    assert layer == CloudLayer(Known(CloudDensity.FEW), Known(CloudType.TOWERING_CUMULUS), Known(25))
    assert layer.height_feet == 2500


def test_cloud_layer_without_type():
    layer, end = match("cloud_layer", "BKN009")
    assert end == 6
    assert layer.kind == Known(CloudType.NORMAL)


def test_cloud_layer_partly_unknown():
    layer, _ = match("cloud_layer", "SCT035///")
    assert layer.kind is UNKNOWN
    assert layer.height == Known(35)
    layer, _ = match("cloud_layer", "/////////")
    assert layer == CloudLayer(UNKNOWN, UNKNOWN, UNKNOWN)
    assert layer.height_feet is None


def test_vertical_visibility():
    assert match("vertical_visibility", "VV002") == (VerticalVisibility(Known(2)), 5)
    assert match("vertical_visibility", "VV///") == (VerticalVisibility(UNKNOWN), 5)


def test_clouds_in_vicinity():
    assert match("clouds_in_vicinity", "CB/NE/SW") == (
        CloudsInVicinity(
            Known(CloudType.CUMULONIMBUS),
            (CompassDirection.NORTH_EAST, CompassDirection.SOUTH_WEST),
        ),
        8,
    )


@pytest.mark.parametrize(
    "text, expected, end",
    [
        ("////NE", CloudsInVicinity(UNKNOWN, (CompassDirection.NORTH_EAST,)), 6),
        ("////NE/SW", CloudsInVicinity(UNKNOWN, (CompassDirection.NORTH_EAST, CompassDirection.SOUTH_WEST)), 9),
    ],
)
def test_clouds_in_vicinity_unknown_type(text, expected, end):
    assert match("clouds_in_vicinity", text) == (expected, end)


# ----------------------------------------------------------------------------- #
# temperature, pressure and colour code                                         #
# ----------------------------------------------------------------------------- #
@pytest.mark.parametrize(
    "text, expected",
    [
        ("16/14", (Known(16), Known(14))),
        ("M05/M12", (Known(-5), Known(-12))),
        ("16/", (Known(16), UNKNOWN)),
        ("/////", (UNKNOWN, UNKNOWN)),
    ],
)
def test_temperatures(text, expected):
    assert match("temperatures", text) == (expected, len(text))


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Q1006", Hectopascals(Known(1006))),
        ("Q0993", Hectopascals(Known(993))),
        ("A2996", InchesOfMercury(Known(29.96))),
        ("Q////", Hectopascals(UNKNOWN)),
        ("A////", InchesOfMercury(UNKNOWN)),
    ],
)
def test_pressure(text, expected):
    assert match("pressure", text) == (expected, 5)


def test_colour_code():
    assert match("colour_code", "YLO") == (ColourCode.YELLOW, 3)


# ----------------------------------------------------------------------------- #
# windshear and sea condition                                                   #
# ----------------------------------------------------------------------------- #
def test_windshear_all_runways():
    assert match("windshear", "WS ALL RWY") == (AllRunways.ALL_RUNWAYS, 10)


def test_windshear_specific_runways():
    assert match("windshear", "WS R34L WS R16") == (SpecificRunways(("34L", "16")), 14)


def test_sea_state():
    assert match("sea_condition", "W15/S3") == (
        SeaCondition(Known(15), Known(SeaStateReport(Known(SeaState.SLIGHT)))),
        6,
    )


def test_wave_height():
    assert match("sea_condition", "W12/H75") == (SeaCondition(Known(12), Known(WaveHeight(Known(75)))), 7)


@pytest.mark.parametrize(
    "text, expected, end",
    [
        ("W///S/", SeaCondition(UNKNOWN, Known(SeaStateReport(UNKNOWN))), 6),
        ("W15///", SeaCondition(Known(15), UNKNOWN), 6),
        ("W15/H///", SeaCondition(Known(15), Known(WaveHeight(UNKNOWN))), 8),
    ],
)
def test_sea_condition_unknown(text, expected, end):
    assert match("sea_condition", text) == (expected, end)


# ----------------------------------------------------------------------------- #
# trends                                                                        #
# ----------------------------------------------------------------------------- #
def test_trend_signals():
    assert match("trend", "NOSIG") == (TrendSignal.NO_SIGNIFICANT_CHANGES, 5)
    assert match("trend", "NSW") == (TrendSignal.NO_SIGNIFICANT_WEATHER, 3)


def test_becoming_with_every_part():
    text = "BECMG FM1200 25015G25KT 9999 NSW SCT020"
    trend, end = match("trend", text)
    assert end == len(text)
    assert trend == Becoming(
        TrendNewCondition(
            time=TrendTime(TrendTimeKind.FROM, 1200),
            wind=WindPresent(Heading(Known(250)), WindSpeed(SpeedUnit.KNOTS, Known(15), Known(25))),
            visibility=Metres(9999),
            weather=(),
            cloud_layers=(CloudLayer(Known(CloudDensity.SCATTERED), Known(CloudType.NORMAL), Known(20)),),
        )
    )


def test_temporarily_with_visibility_and_weather():
    trend, end = match("trend", "TEMPO 3000 -RA BR RMK")
    assert end == 17
    assert trend == Temporarily(
        TrendNewCondition(
            visibility=Metres(3000),
            weather=(
                Weather(WeatherIntensity.LIGHT, (WeatherCondition.RAIN,)),
                Weather(WeatherIntensity.MODERATE, (WeatherCondition.MIST,)),
            ),
        )
    )


def test_trend_visibility_cannot_be_unknown():
    parser = MetarParser("TEMPO ////")
    trend, end = parser.trend(0)
    assert trend == Temporarily(TrendNewCondition())
    assert end == 5
    assert parser.error.variant == ErrorKind.TREND_DATA_CANNOT_BE_UNKNOWN
    assert parser.error.start == 6
