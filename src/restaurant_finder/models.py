from pydantic import BaseModel, ConfigDict, Field

from .storage import RestaurantRecord


class RestaurantPayload(BaseModel):
    """A restaurant as provided in an import file"""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(description="Stable restaurant identifier")
    name: str | None = Field(default=None, description="Display name")
    address: str | None = Field(default=None, description="Street address")
    city: str | None = Field(default=None, description="City")
    state: str | None = Field(default=None, description="State or province")
    phone_number: str | None = Field(default=None, description="Contact number")
    latitude: float | None = Field(default=None, description="Latitude in degrees")
    longitude: float | None = Field(default=None, description="Longitude in degrees")
    url: str | None = Field(default=None, description="Website or listing URL")
    embedding_text: str | None = Field(
        default=None, description="Precomputed embedding as a JSON array string"
    )

    def to_record(self) -> RestaurantRecord:
        return RestaurantRecord(**self.model_dump())
