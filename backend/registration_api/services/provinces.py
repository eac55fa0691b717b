"""Province to SharePoint site/list resolution."""

import enum
from dataclasses import dataclass
from types import MappingProxyType

from registration_api.config import Settings, get_settings
from registration_api.core.exceptions import ConfigurationError


class Province(str, enum.Enum):
    """The nine provinces, each backed by its own SharePoint site and list."""

    EASTERN_CAPE = "Eastern Cape"
    FREE_STATE = "Free State"
    GAUTENG = "Gauteng"
    KWAZULU_NATAL = "KwaZulu Natal"
    LIMPOPO = "Limpopo"
    MPUMALANGA = "Mpumalanga"
    NORTH_WEST = "North West"
    NORTHERN_CAPE = "Northern Cape"
    WESTERN_CAPE = "Western Cape"

    @property
    def key(self) -> str:
        """Environment key suffix, e.g. KWAZULU_NATAL."""
        return self.name


@dataclass(frozen=True)
class ProvinceConfig:
    """SharePoint location of one province's registrations."""

    site_url: str
    list_internal_name: str


class ProvinceConfigResolver:
    """Resolves province names to their SharePoint site URL and list name.

    The mapping is read from settings once, at construction, and never
    changes afterwards.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._entries = MappingProxyType(
            {
                province.value: (
                    getattr(settings, f"sharepoint_site_{province.key.lower()}"),
                    getattr(settings, f"sharepoint_list_{province.key.lower()}"),
                )
                for province in Province
            }
        )

    def resolve(self, province: str) -> ProvinceConfig:
        """Look up the site URL and list name for a province.

        Args:
            province: Province display name, e.g. "KwaZulu Natal"

        Returns:
            ProvinceConfig with non-empty site URL and list name

        Raises:
            ConfigurationError: If the province is not recognised or its site
                URL or list name is not configured
        """
        entry = self._entries.get(province)
        if entry is None:
            raise ConfigurationError(
                f"No SharePoint configuration found for province: {province}"
            )

        site_url, list_name = entry
        if not site_url or not list_name:
            raise ConfigurationError(
                f"SharePoint configuration incomplete for province: {province}"
            )

        return ProvinceConfig(site_url=site_url, list_internal_name=list_name)

    def unconfigured(self) -> list[str]:
        """Names of provinces missing a site URL or list name."""
        return [
            name
            for name, (site_url, list_name) in self._entries.items()
            if not site_url or not list_name
        ]
