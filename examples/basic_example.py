from metar import Report, parse
from metar.data import Cavok, Known, Metres, StatuteMiles, WindPresent

reports = [
    "EGHI 282120Z 19015KT 140V220 6000 RA SCT006 BKN009 16/14 Q1006",
    "EGHI 062050Z 31006KT 270V340 CAVOK 13/07 Q1017",
    "KJFK 121251Z 24016G24KT 10SM FEW250 28/23 A2996 RMK AO2 SLP142 T02830228",
    "EGPC 241950Z AUTO /////KT //// ///////// ///// Q////",
]
# ------------------------------------ #
# decode each report and pick it apart #
# ------------------------------------ #
for text in reports:
    result = parse(text)
    if not isinstance(result, Report):
        print(result[0].render())
        continue
    print(f"==> {result.station} at {result.time.date:02d}{result.time.hour:02d}{result.time.minute:02d}Z ({result.kind.name.lower()})")
    if isinstance(result.wind, WindPresent):
        print(f"    wind        : {result.wind.dir} at {result.wind.speed.speed.value_or('?')} {result.wind.speed.unit.value}")
    visibility = result.visibility
    if isinstance(visibility, Known):
        if visibility.value is Cavok.CAVOK:
            print("    visibility  : CAVOK")
        elif isinstance(visibility.value, Metres):
            print(f"    visibility  : {visibility.value.distance} m")
        elif isinstance(visibility.value, StatuteMiles):
            print(f"    visibility  : {visibility.value.distance:g} SM")
    else:
        print("    visibility  : not measured")
    for layer in result.cloud_layers:
        print(f"    cloud layer : {layer.density.value_or('?')} at {layer.height_feet} ft")
    print(f"    temperature : {result.temperature.value_or('?')} / {result.dewpoint.value_or('?')}")
    print(f"    pressure    : {result.pressure.value.value_or('?')} ({result.pressure.__class__.__name__})")
# ------------------------------------ #
# the same report as interchange JSON  #
# ------------------------------------ #
result = parse(reports[0])
print(result.to_json(indent=2))
