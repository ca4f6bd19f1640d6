"""Splitting of backend display names into place and name."""

import re
from dataclasses import dataclass

PlaceAndName = tuple[str | None, str]

P_SPLIT_NAME_FIRST_COMMA = re.compile(r"([^,]*), (.*)")
P_SPLIT_NAME_ONE_COMMA = re.compile(r"([^,]*), ([^,]{3,64})")
# Place is the first word, optionally prefixed by "Bad " or "St. " and
# suffixed by a parenthesized qualifier, like "Frankfurt (Main)".
P_SPLIT_NAME_PLACE_FIRST = re.compile(r"((?:Bad )?(?:St. )?[^ ]*(?: ?\([^)]*\))?)[ ,\-]? *(.*)")


def split_first_comma(text: str) -> PlaceAndName:
    match = P_SPLIT_NAME_FIRST_COMMA.fullmatch(text)
    if match:
        return match.group(1), match.group(2)
    return None, text


@dataclass(frozen=True)
class NameSplitter:
    """Stations keep their full name; POIs and addresses split at the first comma."""

    def split_station_name(self, text: str) -> PlaceAndName:
        return None, text

    def split_poi(self, text: str) -> PlaceAndName:
        return split_first_comma(text)

    def split_address(self, text: str) -> PlaceAndName:
        return split_first_comma(text)


@dataclass(frozen=True)
class PlaceFirstNameSplitter(NameSplitter):
    """Splits names of the form '<place> <name>', like 'Frankfurt (Main) Hauptwache'.

    Places containing spaces beyond a 'Bad ' prefix must be listed in
    ``special_places``.
    """

    special_places: tuple[str, ...] = ()
    require_lowercase_second_char: bool = False
    poi_name_first: bool = False

    def split_station_name(self, text: str) -> PlaceAndName:
        for place in self.special_places:
            if not text.startswith(place):
                continue
            trailer = text[len(place) :]
            if trailer.startswith("-"):
                return place, trailer[1:]
            if trailer.startswith(" - "):
                return place, trailer[3:]
            if trailer.startswith(" "):
                return place, trailer[1:]

        # Abbreviations like "OF Marktplatz" are not places.
        if self.require_lowercase_second_char and (len(text) <= 2 or text[1].isupper()):
            return None, text

        match = P_SPLIT_NAME_PLACE_FIRST.fullmatch(text)
        if match and match.group(2):
            return match.group(1), match.group(2)
        return None, text

    def split_poi(self, text: str) -> PlaceAndName:
        if self.poi_name_first:
            match = P_SPLIT_NAME_ONE_COMMA.fullmatch(text)
            if match:
                return match.group(2), match.group(1)
            return super().split_poi(text)
        return split_first_comma(text)
