"""Remote provisioning results"""

from pydantic import BaseModel, Field


class EnvProvisionResult(BaseModel):
    """Outcome of pushing one app to one environment"""

    env: str
    app_created: bool = False
    roles_initialized: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.app_created and self.roles_initialized


class ProvisioningReport(BaseModel):
    """Per-environment outcomes of a remote fan-out. Partial success is expected."""

    app_id: str
    results: list[EnvProvisionResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [r.env for r in self.results if r.success]

    @property
    def failed(self) -> list[str]:
        return [r.env for r in self.results if not r.success]

    @property
    def is_complete(self) -> bool:
        return not self.failed
