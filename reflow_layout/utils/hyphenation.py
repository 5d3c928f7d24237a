"""Map language tags to hyphenation dictionaries and look up break points."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import pyphen

from reflow_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_HYPH_LANG = "en"


class Language(Enum):
    """Hyphenation dictionaries, valued by their pattern identifier."""

    AFRIKAANS = "af"
    ARMENIAN = "hy"
    ASSAMESE = "as"
    BASQUE = "eu"
    BELARUSIAN = "be"
    BENGALI = "bn"
    BULGARIAN = "bg"
    CATALAN = "ca"
    CHINESE = "zh-latn-pinyin"
    COPTIC = "cop"
    CROATIAN = "hr"
    CZECH = "cs"
    DANISH = "da"
    DUTCH = "nl"
    ENGLISH_GB = "en-gb"
    ENGLISH_US = "en-us"
    ESPERANTO = "eo"
    ESTONIAN = "et"
    ETHIOPIC = "mul-ethi"
    FINNISH = "fi"
    FRENCH = "fr"
    FRIULAN = "fur"
    GALICIAN = "gl"
    GEORGIAN = "ka"
    GERMAN_1901 = "de-1901"
    GERMAN_1996 = "de-1996"
    GERMAN_SWISS = "de-ch-1901"
    GREEK_ANCIENT = "grc"
    GREEK_MONO = "el-monoton"
    GREEK_POLY = "el-polyton"
    GUJARATI = "gu"
    HINDI = "hi"
    HUNGARIAN = "hu"
    ICELANDIC = "is"
    INDONESIAN = "id"
    INTERLINGUA = "ia"
    IRISH = "ga"
    ITALIAN = "it"
    KANNADA = "kn"
    KURMANJI = "kmr"
    LATIN = "la"
    LATIN_CLASSIC = "la-x-classic"
    LATIN_LITURGICAL = "la-x-liturgic"
    LATVIAN = "lv"
    LITHUANIAN = "lt"
    MALAYALAM = "ml"
    MARATHI = "mr"
    MONGOLIAN = "mn-cyrl"
    NORWEGIAN_BOKMAL = "nb"
    NORWEGIAN_NYNORSK = "nn"
    OCCITAN = "oc"
    ORIYA = "or"
    PALI = "pi"
    PANJABI = "pa"
    PIEDMONTESE = "pms"
    POLISH = "pl"
    PORTUGUESE = "pt"
    ROMANIAN = "ro"
    ROMANSH = "rm"
    RUSSIAN = "ru"
    SANSKRIT = "sa"
    SERBIAN_CYRILLIC = "sr-cyrl"
    SERBOCROATIAN_CYRILLIC = "sh-cyrl"
    SERBOCROATIAN_LATIN = "sh-latn"
    SLAVONIC_CHURCH = "cu"
    SLOVAK = "sk"
    SLOVENIAN = "sl"
    SPANISH = "es"
    SWEDISH = "sv"
    TAMIL = "ta"
    TELUGU = "te"
    THAI = "th"
    TURKISH = "tr"
    TURKMEN = "tk"
    UKRAINIAN = "uk"
    UPPERSORBIAN = "hsb"
    WELSH = "cy"


# Qualified tags sit next to their bare language; lookups always try the
# full tag before truncating it.
HYPHENATION_LANGUAGES: Mapping[str, Language] = MappingProxyType({
    "af": Language.AFRIKAANS,
    "hy": Language.ARMENIAN,
    "as": Language.ASSAMESE,
    "eu": Language.BASQUE,
    "be": Language.BELARUSIAN,
    "bn": Language.BENGALI,
    "bg": Language.BULGARIAN,
    "ca": Language.CATALAN,
    "zh-latn-pinyin": Language.CHINESE,
    "cop": Language.COPTIC,
    "hr": Language.CROATIAN,
    "cs": Language.CZECH,
    "da": Language.DANISH,
    "nl": Language.DUTCH,
    "en-gb": Language.ENGLISH_GB,
    "en-us": Language.ENGLISH_US,
    "en": Language.ENGLISH_US,
    "eo": Language.ESPERANTO,
    "et": Language.ESTONIAN,
    "mul-ethi": Language.ETHIOPIC,
    "fi": Language.FINNISH,
    "fr": Language.FRENCH,
    "fur": Language.FRIULAN,
    "gl": Language.GALICIAN,
    "ka": Language.GEORGIAN,
    "de": Language.GERMAN_1996,
    "de-1901": Language.GERMAN_1901,
    "de-1996": Language.GERMAN_1996,
    "de-ch-1901": Language.GERMAN_SWISS,
    "de-ch": Language.GERMAN_SWISS,
    "grc": Language.GREEK_ANCIENT,
    "el-monoton": Language.GREEK_MONO,
    "el-polyton": Language.GREEK_POLY,
    "gu": Language.GUJARATI,
    "hi": Language.HINDI,
    "hu": Language.HUNGARIAN,
    "is": Language.ICELANDIC,
    "id": Language.INDONESIAN,
    "ia": Language.INTERLINGUA,
    "ga": Language.IRISH,
    "it": Language.ITALIAN,
    "kn": Language.KANNADA,
    "kmr": Language.KURMANJI,
    "la": Language.LATIN,
    "la-x-classic": Language.LATIN_CLASSIC,
    "la-x-liturgic": Language.LATIN_LITURGICAL,
    "lv": Language.LATVIAN,
    "lt": Language.LITHUANIAN,
    "ml": Language.MALAYALAM,
    "mr": Language.MARATHI,
    "mn-cyrl": Language.MONGOLIAN,
    "nb": Language.NORWEGIAN_BOKMAL,
    "nn": Language.NORWEGIAN_NYNORSK,
    "oc": Language.OCCITAN,
    "or": Language.ORIYA,
    "pi": Language.PALI,
    "pa": Language.PANJABI,
    "pms": Language.PIEDMONTESE,
    "pl": Language.POLISH,
    "pt": Language.PORTUGUESE,
    "ro": Language.ROMANIAN,
    "rm": Language.ROMANSH,
    "ru": Language.RUSSIAN,
    "sa": Language.SANSKRIT,
    "sr-cyrl": Language.SERBIAN_CYRILLIC,
    "sh-cyrl": Language.SERBOCROATIAN_CYRILLIC,
    "sh-latn": Language.SERBOCROATIAN_LATIN,
    "cu": Language.SLAVONIC_CHURCH,
    "sk": Language.SLOVAK,
    "sl": Language.SLOVENIAN,
    "es": Language.SPANISH,
    "sv": Language.SWEDISH,
    "ta": Language.TAMIL,
    "te": Language.TELUGU,
    "th": Language.THAI,
    "tr": Language.TURKISH,
    "tk": Language.TURKMEN,
    "uk": Language.UKRAINIAN,
    "hsb": Language.UPPERSORBIAN,
    "cy": Language.WELSH,
})

# Hyphen break costs of compounding languages; others use the configured penalty.
HYPHEN_PENALTIES: Mapping[Language, int] = MappingProxyType({
    Language.DANISH: 30,
    Language.DUTCH: 30,
    Language.FINNISH: 30,
    Language.GERMAN_1901: 30,
    Language.GERMAN_1996: 30,
    Language.GERMAN_SWISS: 30,
    Language.HUNGARIAN: 30,
    Language.NORWEGIAN_BOKMAL: 30,
    Language.NORWEGIAN_NYNORSK: 30,
    Language.SWEDISH: 30,
})

# Pyphen dictionary names for the languages it ships patterns for.
PYPHEN_LOCALES: Mapping[Language, str] = MappingProxyType({
    Language.AFRIKAANS: "af_ZA",
    Language.BELARUSIAN: "be_BY",
    Language.BULGARIAN: "bg_BG",
    Language.CATALAN: "ca",
    Language.CROATIAN: "hr_HR",
    Language.CZECH: "cs_CZ",
    Language.DANISH: "da_DK",
    Language.DUTCH: "nl_NL",
    Language.ENGLISH_GB: "en_GB",
    Language.ENGLISH_US: "en_US",
    Language.ESPERANTO: "eo",
    Language.ESTONIAN: "et_EE",
    Language.FRENCH: "fr",
    Language.GALICIAN: "gl",
    Language.GERMAN_1996: "de_DE",
    Language.GERMAN_SWISS: "de_CH",
    Language.GREEK_MONO: "el_GR",
    Language.HUNGARIAN: "hu_HU",
    Language.ICELANDIC: "is",
    Language.INDONESIAN: "id_ID",
    Language.ITALIAN: "it_IT",
    Language.LATVIAN: "lv_LV",
    Language.LITHUANIAN: "lt",
    Language.MONGOLIAN: "mn_MN",
    Language.NORWEGIAN_BOKMAL: "nb_NO",
    Language.NORWEGIAN_NYNORSK: "nn_NO",
    Language.POLISH: "pl_PL",
    Language.PORTUGUESE: "pt_PT",
    Language.ROMANIAN: "ro_RO",
    Language.RUSSIAN: "ru_RU",
    Language.SERBIAN_CYRILLIC: "sr",
    Language.SERBOCROATIAN_LATIN: "sr_Latn",
    Language.SLOVAK: "sk_SK",
    Language.SLOVENIAN: "sl_SI",
    Language.SPANISH: "es",
    Language.SWEDISH: "sv",
    Language.TELUGU: "te_IN",
    Language.THAI: "th_TH",
    Language.UKRAINIAN: "uk_UA",
})


def hyph_lang(name: str, table: Mapping[str, Language] = HYPHENATION_LANGUAGES) -> Optional[Language]:
    """Resolve a language tag to a hyphenation dictionary.

    Tries the tag verbatim, then lowercased, then drops the rightmost
    ``-subtag`` until a match is found or no ``-`` remains.
    """
    language = table.get(name)
    if language is not None:
        return language
    lowered = name.lower()
    language = table.get(lowered)
    if language is not None:
        return language
    while "-" in lowered:
        lowered = lowered[: lowered.rindex("-")]
        language = table.get(lowered)
        if language is not None:
            return language
    return None


class PyphenHyphenator:
    """Hyphenation-point provider backed by pyphen dictionaries."""

    def __init__(self, locales: Mapping[Language, str] = PYPHEN_LOCALES, left: int = 2, right: int = 2) -> None:
        self._locales = locales
        self._left = left
        self._right = right
        self._dictionaries: Dict[Language, Optional[pyphen.Pyphen]] = {}

    def positions(self, language: Language, word: str) -> List[int]:
        """Return the indices in ``word`` where a hyphen may be inserted."""
        dictionary = self._dictionary(language)
        if dictionary is None or len(word) < self._left + self._right:
            return []
        return [int(position) for position in dictionary.positions(word)]

    def _dictionary(self, language: Language) -> Optional[pyphen.Pyphen]:
        if language in self._dictionaries:
            return self._dictionaries[language]
        dictionary = None
        locale = self._locales.get(language)
        fallback = pyphen.language_fallback(locale) if locale else None
        if fallback:
            dictionary = pyphen.Pyphen(lang=fallback, left=self._left, right=self._right)
        else:
            LOGGER.debug("No hyphenation patterns available for %s", language.name)
        self._dictionaries[language] = dictionary
        return dictionary
