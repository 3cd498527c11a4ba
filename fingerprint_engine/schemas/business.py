from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str | None = None
    state: str | None = None
    country: str | None = None


class CrawlData(BaseModel):
    """Website enrichment produced by the crawler (external collaborator)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    description: str | None = None
    services: list[str] = Field(default_factory=list)
    founded: str | None = Field(None, alias="foundedDate")
    certifications: list[str] = Field(default_factory=list)
    awards: list[str] = Field(default_factory=list)
    industry: str | None = None


class BusinessProfile(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = 0
    name: str = Field(min_length=1, max_length=255)
    url: str | None = None
    category: str | None = Field(None, max_length=255)
    location: Location | None = None
    crawl_data: CrawlData | None = Field(None, alias="crawlData")


class FingerprintOptions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    parallel: bool = True
    batch_size: int = Field(15, ge=1, alias="batchSize")
