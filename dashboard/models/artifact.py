"""
Artifact Reference Model
Stable, content-addressed handle for a large text artifact (kernel config,
reproducers, crash logs). Only the handle is ever stored on Builds and Crashes.
"""
from pydantic import BaseModel, ConfigDict


class ArtifactRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: str
    token: str

    @property
    def url(self) -> str:
        """Relative resource URL used by the JSON read API."""
        return f"/text?tag={self.tag}&x={self.token}"
