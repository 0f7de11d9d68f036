# medintake/services/localization_service.py
"""
Localization lookup.

t(key) is a pure function from a stable key set to display text. Every locale
must carry exactly the key set of the reference locale (en); unknown keys fall
back to the reference catalog and finally to the key itself.
"""

import logging
from typing import Dict, List, Optional

from medintake.locales import CATALOGS

logger = logging.getLogger(__name__)

REFERENCE_LOCALE = "en"


class Localizer:
    """Key-based message lookup with {variable} substitution"""

    def __init__(
        self,
        default_locale: str = REFERENCE_LOCALE,
        catalogs: Optional[Dict[str, Dict[str, str]]] = None
    ):
        self.catalogs = catalogs or CATALOGS
        if default_locale not in self.catalogs:
            logger.warning(f"No catalog for locale '{default_locale}', using '{REFERENCE_LOCALE}'")
            default_locale = REFERENCE_LOCALE
        self.default_locale = default_locale

    @property
    def available_locales(self) -> List[str]:
        return sorted(self.catalogs)

    def keys(self, locale: Optional[str] = None) -> List[str]:
        return sorted(self.catalog(locale))

    def catalog(self, locale: Optional[str] = None) -> Dict[str, str]:
        return dict(self.catalogs.get(locale or self.default_locale, self.catalogs[REFERENCE_LOCALE]))

    def t(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """
        Look up a message.

        Args:
            key: Stable message key (e.g. "doctor.verification_pending")
            locale: Locale code; defaults to the localizer's default
            **kwargs: Values for {variables} in the message

        Returns:
            Display text, or the key itself if no catalog knows it
        """
        locale = locale or self.default_locale
        template = self.catalogs.get(locale, {}).get(key)

        if template is None:
            template = self.catalogs[REFERENCE_LOCALE].get(key)
            if template is None:
                logger.warning(f"Missing translation key: {key}")
                return key

        if not kwargs:
            return template

        try:
            return template.format(**kwargs)
        except KeyError as e:
            logger.warning(f"Missing variable {e} for translation key {key}")
            return template

    def validate_catalogs(self) -> List[str]:
        """Report locales whose key set differs from the reference locale"""
        issues = []
        reference = set(self.catalogs[REFERENCE_LOCALE])

        for locale, messages in self.catalogs.items():
            missing = reference - set(messages)
            extra = set(messages) - reference
            if missing:
                issues.append(f"{locale}: missing keys {sorted(missing)}")
            if extra:
                issues.append(f"{locale}: unexpected keys {sorted(extra)}")

        return issues
