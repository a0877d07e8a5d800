from metar import decode
from metar.metar_parser import MetarParser

reports = [
    "EGHI 282120Z 19015KT 140V220 6000 RA SCT006 BKN009 16/14 1006",
    "EGHI 322120Z 19015KT 6000 SCT006 16/14 Q1006",
    "EGHI 282120Z 37015KT 6000 SCT006 16/14 Q1006",
    "EGHI 282120Z 19015KT 6000 R37/1000 SCT006 16/14 Q1006",
    "EGHI 282120Z 19015KT 6000 SCT006 16/14 Q1006 BECMG /////KT",
]
# ------------------------------------------------------------- #
# decode() raises with the diagnostics when a report is invalid #
# ------------------------------------------------------------- #
for text in reports:
    try:
        report = decode(text)
    except MetarParser.ParseException as e:
        for error in e.errors:
            print(error.render())
            print(f"    (characters {error.start}..{error.end})")
        print()
    else:
        print(f"decoded {report.station}")
