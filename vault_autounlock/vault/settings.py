"""Per-vault policy flags."""
from pydantic import BaseModel, ConfigDict, Field


class VaultSettings(BaseModel):
    """Auto-unlock policy of a single vault.

    Flags are read live when a stage needs them, so a change made while a
    batch is running applies to vaults not yet processed.
    """

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    unlock_after_startup: bool = Field(default=False, alias="unlockAfterStartup")
    mount_after_unlock: bool = Field(default=True, alias="mountAfterUnlock")
    reveal_after_mount: bool = Field(default=True, alias="revealAfterMount")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
