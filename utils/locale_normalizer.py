"""
Locale normalization utilities - maps request-side codes to stored Arabic names
"""

import json
from typing import Any, Dict, List, Optional


class LocaleNormalizer:
    """Translate province and specialization codes and parse stored specializations"""

    # Request-side province codes -> names stored on user records
    PROVINCE_NAMES = {
        "cairo": "القاهرة",
        "giza": "الجيزة",
        "alexandria": "الإسكندرية",
        "dakahlia": "الدقهلية",
        "red_sea": "البحر الأحمر",
        "beheira": "البحيرة",
        "fayoum": "الفيّوم",
        "gharbiya": "الغربية",
        "ismailia": "الإسماعيلية",
        "menofia": "المنوفية",
        "minya": "المنيا",
        "qalyubia": "القليوبيّة",
        "new_valley": "الوادي الجديد",
        "suez": "السويس",
        "asyut": "أسيوط",
        "qena": "قنا",
        "damietta": "دمياط",
        "aswan": "أسوان",
        "sharqia": "الشرقيّة",
        "south_sinai": "جنوب سيناء",
        "kafr_el_sheikh": "كفر الشيخ",
        "matrouh": "مطروح",
        "luxor": "الأقصر",
        "north_sinai": "شمال سيناء",
        "beni_suef": "بني سويف",
        "sohag": "سوهاج",
        "port_said": "بورسعيد",
    }

    # Keyed by request-side code only. Not symmetric: qalyubia lists sharqia,
    # sharqia does not list qalyubia.
    ADJACENT_PROVINCES = {
        "cairo": ["giza", "qalyubia"],
        "giza": ["cairo", "fayoum", "beni_suef"],
        "alexandria": ["beheira", "matrouh"],
        "dakahlia": ["sharqia", "damietta"],
        "beheira": ["alexandria", "gharbiya", "menofia"],
        "sharqia": ["dakahlia", "ismailia", "suez"],
        "gharbiya": ["beheira", "menofia", "kafr_el_sheikh"],
        "qalyubia": ["cairo", "menofia", "sharqia"],
        "ismailia": ["sharqia", "suez", "north_sinai"],
        "suez": ["sharqia", "ismailia", "red_sea"],
        "beni_suef": ["giza", "fayoum", "minya"],
        "fayoum": ["giza", "beni_suef"],
        "minya": ["beni_suef", "asyut"],
    }

    # Request-side specialization codes -> names stored on user records
    SPECIALIZATION_NAMES = {
        "communication": "التواصل الفعال",
        "presentation": "العرض والتقديم",
        "mindset": "العقلية",
        "teamwork": "العمل الجماعي",
    }

    # Keyed by stored name
    RELATED_SPECIALIZATIONS = {
        "التواصل الفعال": ["العرض والتقديم", "العقلية"],
        "العرض والتقديم": ["التواصل الفعال", "العقلية"],
        "العقلية": ["التواصل الفعال", "العمل الجماعي"],
        "العمل الجماعي": ["العقلية", "التواصل الفعال"],
    }

    # Short labels used in notification bodies
    SPECIALIZATION_DISPLAY_NAMES = {
        "communication": "التواصل",
        "presentation": "العرض والتقديم",
        "mindset": "العقلية والتفكير",
        "teamwork": "العمل الجماعي",
    }

    @staticmethod
    def province_name(province: Optional[str]) -> str:
        """
        Translate a province code to its stored name

        Args:
            province: Province code (e.g. "cairo") or an already-stored name

        Returns:
            Stored province name, or the input unchanged when not a known code
        """
        if not province:
            return ""
        return LocaleNormalizer.PROVINCE_NAMES.get(province, province)

    @staticmethod
    def adjacent_province_names(province_code: str) -> List[str]:
        """Stored names of the provinces adjacent to a request-side code"""
        return [
            LocaleNormalizer.PROVINCE_NAMES[code]
            for code in LocaleNormalizer.ADJACENT_PROVINCES.get(province_code, [])
            if code in LocaleNormalizer.PROVINCE_NAMES
        ]

    @staticmethod
    def specialization_name(specialization: Optional[str]) -> str:
        """Translate a specialization code to its stored name"""
        if not specialization:
            return ""
        return LocaleNormalizer.SPECIALIZATION_NAMES.get(specialization, specialization)

    @staticmethod
    def related_specializations(specialization_name: str) -> List[str]:
        """Stored names related to a stored specialization name"""
        return LocaleNormalizer.RELATED_SPECIALIZATIONS.get(specialization_name, [])

    @staticmethod
    def specialization_display_name(specialization: str) -> str:
        """Short display label for a specialization code"""
        return LocaleNormalizer.SPECIALIZATION_DISPLAY_NAMES.get(specialization, specialization)

    @staticmethod
    def parse_specializations(raw: Any) -> List[str]:
        """
        Parse a stored specialization field into a list of stored names

        The field may be a single string, a list, or a string holding a
        JSON-serialized list. Known codes are translated to stored names.

        Args:
            raw: Raw specialization value from a user record

        Returns:
            De-duplicated list of stored specialization names
        """
        if raw is None:
            return []

        if isinstance(raw, (list, tuple, set)):
            values = list(raw)
        elif isinstance(raw, str):
            text = raw.strip()
            if not text:
                return []
            try:
                parsed = json.loads(text)
                values = parsed if isinstance(parsed, list) else [parsed]
            except ValueError:
                values = [text]
        else:
            values = [raw]

        seen = set()
        result = []
        for value in values:
            if value is None:
                continue
            name = LocaleNormalizer.specialization_name(str(value).strip())
            if name and name not in seen:
                seen.add(name)
                result.append(name)
        return result

    @staticmethod
    def specialization_matches(specializations: List[str], specialization: str) -> bool:
        """
        Check whether a normalized specialization list contains a specialization

        Args:
            specializations: Stored names, as produced by parse_specializations
            specialization: Code or stored name to look for

        Returns:
            True if the list contains the specialization
        """
        return LocaleNormalizer.specialization_name(specialization) in specializations

