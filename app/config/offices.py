"""Default office locations shown on the dashboard."""

from app.models.weather import Location

OFFICES: list[Location] = [
    Location(
        id="aurora-oh-us",
        name="Headquarters (Aurora)",
        city="Aurora, OH",
        country="USA",
        latitude=41.27814,
        longitude=-81.3289235,
    ),
    Location(
        id="dublin-oh-us",
        name="Dublin (OH)",
        city="Dublin, OH",
        country="USA",
        latitude=40.0849747,
        longitude=-83.1195808,
    ),
    Location(
        id="holly-springs-nc-us",
        name="Holly Springs",
        city="Holly Springs, NC",
        country="USA",
        latitude=35.6540509,
        longitude=-78.8636252,
    ),
    Location(
        id="peachtree-city-ga-us",
        name="Peachtree City",
        city="Peachtree City, GA",
        country="USA",
        latitude=33.4424235,
        longitude=-84.5895101,
    ),
    Location(
        id="thousand-oaks-ca-us",
        name="Thousand Oaks",
        city="Thousand Oaks, CA",
        country="USA",
        latitude=34.1887369,
        longitude=-118.9326911,
    ),
    Location(
        id="carlsbad-ca-us",
        name="Carlsbad",
        city="Carlsbad, CA",
        country="USA",
        latitude=33.1212609,
        longitude=-117.2876333,
    ),
    Location(
        id="houston-tx-us",
        name="Houston",
        city="Houston, TX",
        country="USA",
        latitude=29.7862752,
        longitude=-95.6659129,
    ),
    Location(
        id="portage-mi-us",
        name="Portage",
        city="Portage, MI",
        country="USA",
        latitude=42.2384787,
        longitude=-85.6007269,
    ),
    Location(
        id="westborough-ma-us",
        name="Westborough",
        city="Westborough, MA",
        country="USA",
        latitude=42.2825349,
        longitude=-71.5711996,
    ),
    Location(
        id="tempe-az-us",
        name="Tempe",
        city="Tempe, AZ",
        country="USA",
        latitude=33.415727,
        longitude=-111.9741555,
    ),
    Location(
        id="san-juan-pr",
        name="San Juan",
        city="San Juan",
        country="Puerto Rico",
        latitude=18.424814,
        longitude=-66.0573823,
    ),
    Location(
        id="oakbrook-terrace-il-us",
        name="Oakbrook Terrace",
        city="Oakbrook Terrace, IL",
        country="USA",
        latitude=41.8492526,
        longitude=-87.9908496,
    ),
    Location(
        id="utrecht-nl",
        name="Utrecht",
        city="Utrecht",
        country="Netherlands",
        latitude=52.1157087,
        longitude=5.0484134,
    ),
    Location(
        id="dublin-ie",
        name="Dublin (Ireland)",
        city="Dublin",
        country="Ireland",
        latitude=53.4122178,
        longitude=-6.3655951,
    ),
    Location(
        id="tokyo-jp",
        name="Tokyo",
        city="Tokyo",
        country="Japan",
        latitude=35.6833117,
        longitude=139.7791065,
    ),
    Location(
        id="singapore-sg",
        name="Singapore",
        city="Singapore",
        country="Singapore",
        latitude=1.3298179,
        longitude=103.7473969,
    ),
    Location(
        id="taichung-tw",
        name="Taichung",
        city="Taichung",
        country="Taiwan",
        latitude=24.1581563,
        longitude=120.6570006,
    ),
]
