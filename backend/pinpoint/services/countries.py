"""Static lookup tables for country names and continents."""
from typing import Dict, Optional

# ISO 3166-1 numeric codes as used by the Natural Earth / world-atlas features
COUNTRY_NAMES: Dict[int, str] = {
    4: 'Afghanistan', 8: 'Albania', 12: 'Algeria', 24: 'Angola', 32: 'Argentina',
    36: 'Australia', 40: 'Austria', 50: 'Bangladesh', 56: 'Belgium', 68: 'Bolivia',
    76: 'Brazil', 100: 'Bulgaria', 104: 'Myanmar', 116: 'Cambodia', 120: 'Cameroon',
    124: 'Canada', 152: 'Chile', 156: 'China', 170: 'Colombia', 180: 'DR Congo',
    188: 'Costa Rica', 191: 'Croatia', 192: 'Cuba', 203: 'Czech Republic', 208: 'Denmark',
    214: 'Dominican Republic', 218: 'Ecuador', 818: 'Egypt', 222: 'El Salvador',
    231: 'Ethiopia', 246: 'Finland', 250: 'France', 276: 'Germany', 288: 'Ghana',
    300: 'Greece', 320: 'Guatemala', 332: 'Haiti', 340: 'Honduras', 348: 'Hungary',
    356: 'India', 360: 'Indonesia', 364: 'Iran', 368: 'Iraq', 372: 'Ireland',
    376: 'Israel', 380: 'Italy', 384: 'Ivory Coast', 392: 'Japan', 400: 'Jordan',
    404: 'Kenya', 408: 'North Korea', 410: 'South Korea', 414: 'Kuwait', 418: 'Laos',
    422: 'Lebanon', 430: 'Liberia', 434: 'Libya', 458: 'Malaysia', 466: 'Mali',
    484: 'Mexico', 496: 'Mongolia', 504: 'Morocco', 508: 'Mozambique', 516: 'Namibia',
    524: 'Nepal', 528: 'Netherlands', 554: 'New Zealand', 558: 'Nicaragua', 562: 'Niger',
    566: 'Nigeria', 578: 'Norway', 586: 'Pakistan', 591: 'Panama', 598: 'Papua New Guinea',
    600: 'Paraguay', 604: 'Peru', 608: 'Philippines', 616: 'Poland', 620: 'Portugal',
    642: 'Romania', 643: 'Russia', 682: 'Saudi Arabia', 686: 'Senegal', 688: 'Serbia',
    694: 'Sierra Leone', 702: 'Singapore', 703: 'Slovakia', 704: 'Vietnam', 705: 'Slovenia',
    706: 'Somalia', 710: 'South Africa', 716: 'Zimbabwe', 724: 'Spain', 729: 'Sudan',
    732: 'Western Sahara', 752: 'Sweden', 756: 'Switzerland', 760: 'Syria', 762: 'Tajikistan',
    764: 'Thailand', 788: 'Tunisia', 792: 'Turkey', 800: 'Uganda', 804: 'Ukraine',
    784: 'United Arab Emirates', 826: 'United Kingdom', 834: 'Tanzania', 840: 'United States',
    854: 'Burkina Faso', 858: 'Uruguay', 860: 'Uzbekistan', 862: 'Venezuela', 887: 'Yemen',
    894: 'Zambia',
}

_CONTINENT_MEMBERS: Dict[str, tuple] = {
    'North America': (
        'United States', 'Canada', 'Mexico', 'Guatemala', 'Cuba', 'Haiti',
        'Dominican Republic', 'Honduras', 'Nicaragua', 'El Salvador', 'Costa Rica', 'Panama',
    ),
    'South America': (
        'Brazil', 'Argentina', 'Colombia', 'Peru', 'Venezuela', 'Chile', 'Ecuador',
        'Bolivia', 'Paraguay', 'Uruguay',
    ),
    'Europe': (
        'United Kingdom', 'France', 'Germany', 'Italy', 'Spain', 'Poland', 'Romania',
        'Netherlands', 'Belgium', 'Czech Republic', 'Greece', 'Portugal', 'Sweden',
        'Hungary', 'Austria', 'Switzerland', 'Bulgaria', 'Denmark', 'Finland', 'Slovakia',
        'Norway', 'Ireland', 'Croatia', 'Slovenia', 'Serbia', 'Ukraine', 'Russia',
    ),
    'Asia': (
        'China', 'India', 'Indonesia', 'Pakistan', 'Bangladesh', 'Japan', 'Philippines',
        'Vietnam', 'Turkey', 'Iran', 'Thailand', 'Myanmar', 'South Korea', 'Iraq',
        'Afghanistan', 'Saudi Arabia', 'Uzbekistan', 'Malaysia', 'Nepal', 'North Korea',
        'Taiwan', 'Syria', 'Cambodia', 'Jordan', 'United Arab Emirates', 'Tajikistan',
        'Israel', 'Laos', 'Lebanon', 'Singapore', 'Kuwait', 'Mongolia',
    ),
    'Africa': (
        'Nigeria', 'Ethiopia', 'Egypt', 'DR Congo', 'Tanzania', 'South Africa', 'Kenya',
        'Uganda', 'Algeria', 'Sudan', 'Morocco', 'Angola', 'Mozambique', 'Ghana',
        'Madagascar', 'Cameroon', 'Ivory Coast', 'Niger', 'Burkina Faso', 'Mali',
        'Senegal', 'Zimbabwe', 'Tunisia', 'Somalia', 'Sierra Leone', 'Libya', 'Liberia',
        'Namibia', 'Zambia', 'Western Sahara',
    ),
    'Oceania': ('Australia', 'Papua New Guinea', 'New Zealand'),
}

COUNTRY_TO_CONTINENT: Dict[str, str] = {
    country: continent
    for continent, members in _CONTINENT_MEMBERS.items()
    for country in members
}

UNKNOWN_CONTINENT = 'Unknown'


def country_name(feature_id, fallback: Optional[str] = None) -> Optional[str]:
    """Resolve a feature id to a display name, falling back to the feature's own name."""
    try:
        name = COUNTRY_NAMES.get(int(feature_id))
    except (TypeError, ValueError):
        name = None
    return name or fallback or None


def continent_of(country: str) -> str:
    return COUNTRY_TO_CONTINENT.get(country, UNKNOWN_CONTINENT)
