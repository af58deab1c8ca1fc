"""Key-based string lookup for the presentation labels.

Resources are keyed by locale tag. Lookups fall back from the requested
locale to the default locale and finally to the key itself, so a missing
translation never fails a response.
"""

from types import MappingProxyType
from typing import Final

from src.core.config import LocalizationConfig

RESOURCES: Final[MappingProxyType[str, dict[str, str]]] = MappingProxyType(
    {
        "en-US": {
            "Cat_Fiction": "Fiction & Literature",
            "Cat_NonFiction": "Non-Fiction",
            "Cat_Technical": "Technical & Professional",
            "Cat_Children": "Children's Orders",
            "Status_OutOfStock": "Out of Stock",
            "Status_InStock": "In Stock",
            "Status_Limited": "Limited Stock",
            "Status_LastCopy": "Last Copy",
        },
        "es-ES": {
            "Cat_Fiction": "Ficción y Literatura",
            "Cat_NonFiction": "No Ficción",
            "Cat_Technical": "Técnico y Profesional",
            "Cat_Children": "Pedidos Infantiles",
            "Status_OutOfStock": "Agotado",
            "Status_InStock": "En Stock",
            "Status_Limited": "Stock Limitado",
            "Status_LastCopy": "Última Copia",
        },
    }
)


class Localizer:
    """Translate resource keys for a locale.

    Args:
        default_locale: Locale used when the requested one lacks a key.
        supported_locales: Locales a client may select.
        resources: Locale tag to key/string mapping.
    """

    def __init__(
        self,
        default_locale: str = "en-US",
        supported_locales: list[str] | None = None,
        resources: MappingProxyType[str, dict[str, str]] = RESOURCES,
    ) -> None:
        self.default_locale = default_locale
        self.supported_locales = supported_locales or list(resources)
        self._resources = resources

    @classmethod
    def from_config(cls, config: LocalizationConfig) -> "Localizer":
        """Build a localizer from ``localization_config``."""
        return cls(config.default_locale, config.supported_locales)

    def translate(self, key: str, locale: str) -> str:
        """Look up ``key`` for ``locale``.

        Args:
            key: Resource key, e.g. ``Cat_Technical``.
            locale: Requested locale tag.

        Returns:
            str: The localized string, the default-locale string, or the key.
        """
        for candidate in (locale, self.default_locale):
            if (value := self._resources.get(candidate, {}).get(key)) is not None:
                return value
        return key

    def resolve_locale(self, accept_language: str | None) -> str:
        """Pick the best supported locale from an ``Accept-Language`` header.

        Entries are tried by descending quality; a bare language such as
        ``es`` matches the first supported locale of that language.

        Args:
            accept_language: Raw header value, may be None.

        Returns:
            str: A supported locale tag, or the default locale.
        """
        if not accept_language:
            return self.default_locale

        weighted: list[tuple[float, str]] = []
        for part in accept_language.split(","):
            tag, _, params = part.strip().partition(";")
            if not tag:
                continue
            quality = 1.0
            if params.strip().startswith("q="):
                try:
                    quality = float(params.strip()[2:])
                except ValueError:
                    quality = 0.0
            weighted.append((quality, tag.strip()))

        by_lower = {locale.lower(): locale for locale in self.supported_locales}
        for quality, tag in sorted(weighted, key=lambda item: -item[0]):
            if quality <= 0:
                continue
            if match := by_lower.get(tag.lower()):
                return match
            language = tag.split("-")[0].lower()
            for locale in self.supported_locales:
                if locale.split("-")[0].lower() == language:
                    return locale
        return self.default_locale
