"""Named observatory sites.

Longitudes are east-positive degrees; time zones are IANA names.
"""

from transitfinder.errors import InputError
from .types import ManualSite, NamedObservatory, Site, SiteSelection


OBSERVATORIES: dict[str, tuple[float, float, str]] = {
    # Asia
    "Beijing XingLong Observatory, China": (40.393333, 117.575000, "Asia/Shanghai"),
    "Vainu Bappu Observatory, India": (12.576660, 78.826600, "Asia/Kolkata"),
    "Indian Astronomical Observatory, Hanle": (32.779400, 78.964170, "Asia/Kolkata"),
    "Aryabhatta Research Institute, India": (29.360000, 79.456390, "Asia/Kolkata"),
    # Western North America
    "Kitt Peak National Observatory": (31.963333, -111.600000, "America/Phoenix"),
    "Mount Lemmon": (32.416667, -110.731667, "America/Phoenix"),
    "MMT Observatory": (31.688333, -110.885000, "America/Phoenix"),
    "Lowell Observatory": (35.096667, -111.535000, "America/Phoenix"),
    "Whipple Observatory": (31.680944, -110.877500, "America/Phoenix"),
    "Mount Graham Observatory": (32.701667, -109.891667, "America/Phoenix"),
    "Apache Point Observatory": (32.780000, -105.820000, "MST7MDT"),
    "Mauna Kea (Keck, Gemini, CFHT, Subaru, IRTF, etc.)": (19.828333, -155.478333, "Pacific/Honolulu"),
    "Dominion Astrophysical Observatory": (48.521667, -123.416667, "America/Vancouver"),
    "Lick Observatory": (37.343333, -121.636667, "PST8PDT"),
    "McDonald Observatory": (30.671667, -104.021667, "CST6CDT"),
    "Observatorio Astronomico Nacional, San Pedro Martir": (31.029167, -115.486944, "America/Tijuana"),
    "Observatorio Astronomico Nacional, Tonantzintla": (19.032778, -98.313889, "America/Mexico_City"),
    "Palomar Observatory": (33.356000, -116.863000, "PST8PDT"),
    "Red Buttes Observatory, Wyoming": (41.17642, -105.57403, "MST7MDT"),
    "Wyoming Infrared Observatory (WIRO)": (41.09706, -105.97653, "MST7MDT"),
    "Boyce-Astro Research Observatory (San Diego)": (32.6133, -116.3319, "America/Los_Angeles"),
    "Rothney Astrophysical Observatory (Calgary)": (50.868039, -114.291142, "America/Edmonton"),
    "New Mexico Skies, Mayhill, NM": (32.90388889, -105.52888889, "MST7MDT"),
    "Sierra Remote Observatories, CA": (37.07055, -119.4128, "America/Los_Angeles"),
    "Table Mountain Observatory, CA": (34.38139, -117.68194, "America/Los_Angeles"),
    "Sommers-Bausch Observatory, Univ. of Colorado": (40.00371, -105.2630, "America/Denver"),
    # Australia / New Zealand
    "Mt. Stromlo Observatory": (-35.320650, 149.0081, "Australia/Sydney"),
    "Mt. Kent Observatory": (-27.797861, 151.855417, "Australia/Brisbane"),
    "Anglo-Australian Observatory / Siding Spring": (-31.274, 149.069, "Australia/Sydney"),
    "Mount John University Observatory, New Zealand": (-43.986667, 170.465, "Pacific/Auckland"),
    # Europe
    "Roque de los Muchachos, La Palma": (28.758333, -17.880000, "Atlantic/Canary"),
    "Observatorio Terrassa, Spain": (41.571578, 2.0349, "Europe/Madrid"),
    "Observatorio de Sierra Nevada, Spain": (37.064167, -3.384722, "Europe/Madrid"),
    "SLN - Catania Astrophysical Observatory, Italy": (37.691667, 14.973333, "Europe/Rome"),
    "Mt. Ekar Observatory, Asiago, Italy": (45.848589, 11.581133, "Europe/Rome"),
    "Ege University Observatory, Izmir, Turkey": (38.398333, 27.275000, "Europe/Istanbul"),
    "Tubitak National Observatory, Turkey": (36.825000, 30.333333, "Europe/Istanbul"),
    "National Astronomical Observatory Rozhen - Bulgaria": (41.693056, 24.743889, "Europe/Sofia"),
    "Calar Alto Observatory, Spain": (37.223611, -2.546250, "Europe/Madrid"),
    "Observatorium Hoher List (Universität Bonn) - Germany": (50.162760, 6.850000, "Europe/Berlin"),
    # Africa
    "Boyden Observatory, Bloemfontein, South Africa": (-29.038889, 27.405556, "Africa/Johannesburg"),
    "South African Astronomical Observatory": (-32.379444, 20.810694, "Africa/Johannesburg"),
    # South America
    "Cerro Tololo Interamerican Observatory": (-30.165278, -70.815000, "America/Santiago"),
    "Gemini South Observatory": (-30.240750, -70.736693, "America/Santiago"),
    "European Southern Observatory: La Silla": (-29.256667, -70.730000, "America/Santiago"),
    "European Southern Observatory: Paranal": (-24.625000, -70.403333, "America/Santiago"),
    "ALMA": (-23.029, -67.755, "America/Santiago"),
    "Las Campanas Observatory": (-29.003333, -70.701667, "America/Santiago"),
    "Observatorio Astronomico de La Plata, Buenos Aires": (-34.906751, -57.932299, "America/Argentina/Buenos_Aires"),
    "Estacion Astrofisica Bosque Alegre, Cordoba, Argentina": (-31.598333, -64.545833, "America/Argentina/Cordoba"),
    "National Observatory of Venezuela": (8.790000, -70.866667, "America/Caracas"),
    "Laboratorio Nacional de Astrofisica, Brazil": (-22.534444, -45.582500, "America/Sao_Paulo"),
    "Complejo Astronomico El Leoncito, San Juan, Argentina": (-31.799167, -69.295000, "America/Argentina/San_Juan"),
    # Eastern US and Canada
    "Bowling Green State Univ. Observatory, Ohio": (41.378333, -83.659167, "EST5EDT"),
    "Collins Observatory, Colby College, Maine": (44.56667, -69.656378, "EST5EDT"),
    "Smith College Observatory, Northampton, MA": (42.317036, -72.639514, "EST5EDT"),
    "Moore Observatory, Univ. of Louisville, Kentucky": (38.344792, -85.528475, "EST5EDT"),
    "Harvard Clay Telescope, Cambridge, MA": (42.3766, -71.1169, "EST5EDT"),
    "Oak Ridge Observatory, Harvard, MA": (42.505261, -71.558144, "EST5EDT"),
    "Leander McCormick Observatory, Univ. of Virginia": (38.033333, -78.523333, "EST5EDT"),
    "Black Moshannon Observatory, State College PA": (40.921667, -78.005000, "EST5EDT"),
    "Michael L. Britton Observatory, Dickinson College, PA": (40.20398, -77.19786, "EST5EDT"),
    "Fan Mountain Observatory, VA": (37.878333, -78.693333, "EST5EDT"),
    "Whitin Observatory, Wellesley College, MA": (42.295000, -71.305833, "EST5EDT"),
    "Olin Observatory, Connecticut College, CT": (41.378889, -72.105278, "EST5EDT"),
    "Sperry Observatory, Union County College, NJ": (40.66632, -74.32327, "EST5EDT"),
    "Peter van de Kamp Observatory, Swarthmore College, PA": (39.907100, -75.355550, "EST5EDT"),
    "Union College Observatory, NY": (42.8176, -73.9283, "EST5EDT"),
    "Van Vleck Observatory, Wesleyan University, CT": (41.555000, -72.659167, "EST5EDT"),
    "Vassar College Observatory, Poughkeepsie, NY": (41.683011, -73.890604, "EST5EDT"),
    "Williams College Observatory, MA": (42.7115, -73.2052, "EST5EDT"),
    "Mittelman Observatory, Middlebury College, VT": (44.0134, -73.1813, "EST5EDT"),
    "George R. Wallace, Jr. Astrophysical Observatory, MA": (42.295, -71.485, "EST5EDT"),
    "Foggy Bottom Observatory, Colgate Univ., NY": (42.81651, -75.532568, "EST5EDT"),
    "Breyo Observatory, Siena College, NY": (42.719546, -73.751433, "EST5EDT"),
    "C.E.K. Mees Observatory, Univ. Rochester, NY": (42.7002778, -77.4087667, "EST5EDT"),
    "Observatoire du Mont-Mégantic, Québec": (45.455683, -71.1521, "America/Toronto"),
}


def list_observatories() -> list[Site]:
    return [
        Site(name=name, latitude_deg=lat, longitude_deg=lon, timezone=tz_name)
        for name, (lat, lon, tz_name) in sorted(OBSERVATORIES.items())
    ]


def get_observatory(name: str) -> Site:
    """Look up a site by full name, or by a prefix that matches only one site."""
    wanted = name.strip().lower()
    matches = [known for known in OBSERVATORIES if known.lower() == wanted]
    if not matches and wanted:
        matches = [known for known in OBSERVATORIES if known.lower().startswith(wanted)]
    if len(matches) > 1:
        raise InputError(f"Ambiguous observatory {name!r}: {', '.join(sorted(matches))}")
    if not matches:
        raise InputError(f"Unknown observatory: {name}")
    known = matches[0]
    lat, lon, tz_name = OBSERVATORIES[known]
    return Site(name=known, latitude_deg=lat, longitude_deg=lon, timezone=tz_name)


def normalize_longitude(longitude_deg: float) -> float:
    lon = longitude_deg % 360.0
    if lon > 180.0:
        lon -= 360.0
    return lon


def resolve_site(selection: SiteSelection) -> Site:
    if isinstance(selection, NamedObservatory):
        return get_observatory(selection.name)
    if isinstance(selection, ManualSite):
        name = selection.name or (
            f"lat {selection.latitude_deg:.3f}, lon {selection.longitude_deg:.3f}"
        )
        return Site(
            name=name,
            latitude_deg=selection.latitude_deg,
            longitude_deg=normalize_longitude(selection.longitude_deg),
            timezone=selection.timezone,
        )
    raise InputError(f"Unsupported site selection: {selection!r}")
