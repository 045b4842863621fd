"""Request-scoped runtime context passed into the builder and delivery engine."""

from dataclasses import dataclass

from agencybridge.contracts.models import AgencyIdentification, ApplicationRuntimeInfo
from agencybridge.settings import Settings


@dataclass(frozen=True)
class RuntimeContext:
    """Identity and runtime metadata for one request-scoped task.

    Built explicitly at the start of a task and never mutated afterwards.
    """

    event_namespace: str
    app_runtime_info: ApplicationRuntimeInfo | None = None
    agency_identification: AgencyIdentification | None = None
    source_provider_id: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RuntimeContext":
        agency = None
        if settings.agency_id and settings.org_id:
            agency = AgencyIdentification(agency_id=settings.agency_id, org_id=settings.org_id)
        return cls(
            event_namespace=settings.event_namespace,
            app_runtime_info=ApplicationRuntimeInfo.from_config(
                settings.get_application_runtime_info()
            ),
            agency_identification=agency,
            source_provider_id=settings.source_provider_id,
        )

    def event_code(self, suffix: str) -> str:
        """Qualify an event suffix (``assetsync.new``) with the namespace."""
        return f"{self.event_namespace}.{suffix}"

    def injected_fields(self) -> dict[str, dict]:
        """Context objects available for injection into event data."""
        fields: dict[str, dict] = {}
        if self.app_runtime_info is not None:
            fields["app_runtime_info"] = self.app_runtime_info.serialize()
        if self.agency_identification is not None and self.agency_identification.is_valid():
            fields["agency_identification"] = self.agency_identification.serialize()
        return fields
